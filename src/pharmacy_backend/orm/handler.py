from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from postgrest import CountMethod

from ..logging import get_logger
from ..rowstore import single_row
from .naming import to_snake_case
from .query import (
    DELETE_KEYS,
    UNIQUE_KEYS,
    UPDATE_KEYS,
    FindQuery,
    Lookup,
    apply_filters,
    where_filters,
)

LOG = get_logger("orm-handler")

Row = Dict[str, Any]


def _data(response: Any) -> Any:
    """Payload of a response, or None for an empty `maybe_single()` result."""
    return None if response is None else response.data


class ModelHandler:
    """Relational-style operations for one table.

    One instance per entity, identical apart from `table`. Holds no per-call
    state, so a single instance can serve concurrent callers.

    Store failures surface as `postgrest.APIError`, raised unchanged. Single-row
    reads return None when nothing matches; writes addressed at one row ask the
    server for a single object, so a miss (or several hits) is rejected and
    rolled back with a 406 `APIError`.
    """

    def __init__(self, store: Any, entity: str, table: str) -> None:
        self.store = store
        self.entity = entity
        self.table = table

    def __repr__(self) -> str:
        return f"ModelHandler({self.entity!r} -> {self.table!r})"

    def _from(self) -> Any:
        return self.store.table(self.table)

    # ---------- reads ----------
    def find_unique(
        self,
        where: Mapping[str, Any],
        *,
        include: Optional[Mapping[str, Any]] = None,
        select: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Row]:
        columns = FindQuery.build(include=include, select=select).columns
        lookup = Lookup.from_where(where, UNIQUE_KEYS)
        if lookup.column is None:
            LOG.warning(f"{self.entity}.find_unique without id/email/txRef/name; no filter applied")
        query = lookup.apply(self._from().select(columns))
        return _data(query.maybe_single().execute())

    def find_first(
        self,
        where: Optional[Mapping[str, Any]] = None,
        *,
        include: Optional[Mapping[str, Any]] = None,
        select: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Mapping[str, str]] = None,
    ) -> Optional[Row]:
        plan = FindQuery.build(where=where, include=include, select=select, order_by=order_by, take=1)
        query = plan.apply(self._from().select(plan.columns))
        return _data(query.maybe_single().execute())

    def find_many(
        self,
        where: Optional[Mapping[str, Any]] = None,
        *,
        include: Optional[Mapping[str, Any]] = None,
        select: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Mapping[str, str]] = None,
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> List[Row]:
        plan = FindQuery.build(
            where=where,
            include=include,
            select=select,
            order_by=order_by,
            skip=skip,
            take=take,
        )
        query = plan.apply(self._from().select(plan.columns))
        return query.execute().data or []

    def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        query = self._from().select("*", count=CountMethod.exact, head=True)
        response = apply_filters(query, where_filters(where)).execute()
        return response.count or 0

    # ---------- writes ----------
    def create(self, data: Mapping[str, Any]) -> Row:
        query = self._from().insert(to_snake_case(dict(data)))
        return single_row(query).execute().data

    def update(self, where: Mapping[str, Any], data: Mapping[str, Any]) -> Row:
        lookup = Lookup.from_where(where, UPDATE_KEYS)
        if lookup.column is None:
            raise ValueError(f"{self.entity}.update needs `id` or `txRef` in where, got {sorted(where)}")
        query = lookup.apply(self._from().update(to_snake_case(dict(data))))
        return single_row(query).execute().data

    def update_many(self, where: Optional[Mapping[str, Any]], data: Mapping[str, Any]) -> Dict[str, int]:
        query = self._from().update(to_snake_case(dict(data)))
        rows = apply_filters(query, where_filters(where)).execute().data
        return {"count": len(rows or [])}

    def delete(self, where: Mapping[str, Any]) -> Row:
        lookup = Lookup.from_where(where, DELETE_KEYS)
        if lookup.column is None:
            raise ValueError(f"{self.entity}.delete needs `id` in where")
        query = lookup.apply(self._from().delete())
        return single_row(query).execute().data

    def delete_many(self, where: Optional[Mapping[str, Any]]) -> Dict[str, int]:
        query = apply_filters(self._from().delete(), where_filters(where))
        rows = query.execute().data
        return {"count": len(rows or [])}

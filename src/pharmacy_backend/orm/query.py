"""Immutable query descriptors and their translation onto a row-store builder.

Descriptors are built once per call from the keyword arguments a handler
receives and never mutated afterwards. Translation is deliberately narrow:

- filters are equality only; a one-level nested mapping becomes a dotted
  path (`{"branch": {"pharmacyId": 3}}` -> `branch.pharmacy_id = 3`);
- one ordering column (the first entry of `order_by`);
- one level of relational embedding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from .naming import camel_to_snake, to_snake_case

LOG = get_logger("orm-query")

DEFAULT_TAKE = 100

# Recognized single-row lookup keys, in precedence order: (caller key, column)
UNIQUE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("email", "email"),
    ("txRef", "tx_ref"),
    ("name", "name"),
)
UPDATE_KEYS: Tuple[Tuple[str, str], ...] = (("id", "id"), ("txRef", "tx_ref"))
DELETE_KEYS: Tuple[Tuple[str, str], ...] = (("id", "id"),)

Filter = Tuple[str, Any]


@dataclass(frozen=True)
class Lookup:
    """Exactly one equality constraint on a unique column, or none at all."""

    column: Optional[str] = None
    value: Any = None

    @classmethod
    def from_where(cls, where: Mapping[str, Any], keys: Sequence[Tuple[str, str]] = UNIQUE_KEYS) -> "Lookup":
        for key, column in keys:
            if where.get(key) is not None:
                return cls(column=column, value=where[key])
        return cls()

    def apply(self, query: Any) -> Any:
        if self.column is None:
            return query
        return query.eq(self.column, self.value)


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True

    @classmethod
    def from_mapping(cls, order_by: Optional[Mapping[str, str]]) -> Optional["OrderBy"]:
        if not order_by:
            return None
        entries = list(order_by.items())
        if len(entries) > 1:
            LOG.debug(f"Only the first ordering column is applied; ignoring {[k for k, _ in entries[1:]]}")
        column, direction = entries[0]
        direction = str(direction).lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"order_by direction must be 'asc' or 'desc', got {direction!r}")
        return cls(column=camel_to_snake(column), ascending=direction == "asc")

    def apply(self, query: Any) -> Any:
        return query.order(self.column, desc=not self.ascending)


def where_filters(where: Optional[Mapping[str, Any]]) -> Tuple[Filter, ...]:
    """Flatten a `where` mapping into (column, value) equality pairs.

    None values are skipped entirely, so "filter by null" cannot be
    expressed through this path.
    """
    if not where:
        return ()
    out = []
    for key, value in to_snake_case(dict(where)).items():
        if value is None:
            continue
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if sub_value is None:
                    continue
                _check_scalar(f"{key}.{sub_key}", sub_value)
                out.append((f"{key}.{sub_key}", sub_value))
        else:
            _check_scalar(key, value)
            out.append((key, value))
    return tuple(out)


def _check_scalar(column: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        raise TypeError(f"Cannot build an equality filter for {column!r} from {type(value).__name__}")


def apply_filters(query: Any, filters: Sequence[Filter]) -> Any:
    for column, value in filters:
        query = query.eq(column, value)
    return query


def _embed(key: str, value: Any) -> Optional[str]:
    if value is True:
        return f"{key} (*)"
    if not isinstance(value, Mapping):
        return None
    nested_include = value.get("include")
    nested_select = value.get("select")
    if nested_include:
        # deeper relations are listed by name only, not expanded
        columns = list(nested_include.keys())
    elif nested_select:
        columns = [camel_to_snake(k) for k, v in nested_select.items() if v]
    else:
        columns = ["*"]
    # a select that picks nothing still fetches the relation
    return f"{key} ({', '.join(columns) or '*'})"


def build_columns(
    include: Optional[Mapping[str, Any]] = None,
    select: Optional[Mapping[str, Any]] = None,
) -> str:
    """Column list for `select()`: base columns plus `rel (...)` embeds."""
    base = "*"
    if select:
        picked = [camel_to_snake(k) for k, v in select.items() if v]
        if picked:
            base = ", ".join(picked)
    if not include:
        return base
    parts = [base]
    for key, value in include.items():
        embed = _embed(key, value)
        if embed:
            parts.append(embed)
    return ", ".join(parts)


def apply_pagination(query: Any, skip: Optional[int], take: Optional[int]) -> Any:
    if skip:
        return query.range(skip, skip + (take or DEFAULT_TAKE) - 1)
    if take:
        return query.limit(take)
    return query


@dataclass(frozen=True)
class FindQuery:
    """Everything a read needs, resolved up front."""

    columns: str = "*"
    filters: Tuple[Filter, ...] = ()
    order: Optional[OrderBy] = None
    skip: Optional[int] = None
    take: Optional[int] = None

    @classmethod
    def build(
        cls,
        *,
        where: Optional[Mapping[str, Any]] = None,
        include: Optional[Mapping[str, Any]] = None,
        select: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Mapping[str, str]] = None,
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> "FindQuery":
        return cls(
            columns=build_columns(include, select),
            filters=where_filters(where),
            order=OrderBy.from_mapping(order_by),
            skip=skip,
            take=take,
        )

    def apply(self, query: Any) -> Any:
        query = apply_filters(query, self.filters)
        if self.order is not None:
            query = self.order.apply(query)
        return apply_pagination(query, self.skip, self.take)

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, Optional, TypeVar

from ..logging import get_logger
from .handler import ModelHandler
from .naming import ENTITY_TABLES, table_for

LOG = get_logger("orm-client")

T = TypeVar("T")


class DataClient:
    """Entity name -> ModelHandler registry over one row-store client.

    Build it once at startup and share it. The store client is injected, so
    tests pass a fake in its place.

        db = DataClient(store)
        db["Medicine"].find_many(where={"pharmacyId": 7}, take=20)
    """

    def __init__(self, store: Any, entities: Optional[Iterable[str]] = None) -> None:
        self.store = store
        names = list(entities) if entities is not None else list(ENTITY_TABLES)
        self._handlers: Dict[str, ModelHandler] = {
            name: ModelHandler(store, name, table_for(name)) for name in names
        }

    def model(self, entity: str) -> ModelHandler:
        try:
            return self._handlers[entity]
        except KeyError:
            # Resolve for the mapping's own error message when the name is unknown
            table_for(entity)
            raise KeyError(f"Entity {entity!r} is not registered on this client") from None

    __getitem__ = model

    def __contains__(self, entity: object) -> bool:
        return entity in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def run_grouped(self, fn: Callable[["DataClient"], T]) -> T:
        """Run `fn` with this same client. NOT atomic.

        Each call inside `fn` is its own round trip. Nothing is isolated
        and nothing is rolled back: if a later step raises, earlier writes
        stay committed. Callers needing all-or-nothing behavior must
        compensate themselves.
        """
        try:
            return fn(self)
        except Exception as e:
            LOG.error(f"Grouped calls failed part-way; earlier writes were NOT rolled back: {e}")
            raise

    # Kept under the ORM's name for call sites ported from it. Same
    # non-atomic behavior as run_grouped.
    transaction = run_grouped

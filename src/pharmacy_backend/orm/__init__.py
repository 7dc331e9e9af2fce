"""Relational query interface over the row-store.

Modules:
- naming: entity/table mapping and camel -> snake conversion
- query: immutable descriptors and filter/order/pagination translation
- handler: ModelHandler, the per-entity operations
- client: DataClient, the entity registry and grouped (non-atomic) calls
"""

from .client import DataClient
from .handler import ModelHandler
from .naming import (
    ENTITY_TABLES,
    UnknownEntityError,
    camel_to_snake,
    entity_for,
    table_for,
    to_snake_case,
)
from .query import FindQuery, Lookup, OrderBy

__all__ = [
    "DataClient",
    "ENTITY_TABLES",
    "FindQuery",
    "Lookup",
    "ModelHandler",
    "OrderBy",
    "UnknownEntityError",
    "camel_to_snake",
    "entity_for",
    "table_for",
    "to_snake_case",
]

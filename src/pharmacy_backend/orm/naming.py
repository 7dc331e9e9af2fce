from __future__ import annotations

import re
from typing import Any, Dict


# Logical entity name -> physical table. Fixed at build time; every entity the
# application touches must be listed here.
ENTITY_TABLES: Dict[str, str] = {
    "User": "users",
    "Pharmacy": "pharmacies",
    "Branch": "branches",
    "Role": "roles",
    "UserRole": "user_roles",
    "UserBranch": "user_branches",
    "Sale": "sales",
    "Payment": "payments",
    "PaymentTransaction": "payment_transactions",
    "CashierShift": "cashier_shifts",
    "Stock": "stocks",
    "Medicine": "medicines",
    "MedicineCategory": "medicine_categories",
    "MedicineBatch": "medicine_batches",
    "SaleItem": "sale_items",
    "Refund": "refunds",
    "RefundItem": "refund_items",
    "StockMovement": "stock_movements",
    "PaymentMethod": "payment_methods",
    "SubscriptionPlan": "subscription_plans",
    "PharmacySubscription": "pharmacy_subscriptions",
    "PharmacyDocument": "pharmacy_documents",
    "RegistrationApplication": "registration_applications",
    "PasswordResetToken": "password_reset_tokens",
    "RestockRequest": "restock_requests",
}

TABLE_ENTITIES: Dict[str, str] = {table: entity for entity, table in ENTITY_TABLES.items()}

_UPPER = re.compile(r"[A-Z]")


class UnknownEntityError(KeyError):
    """Raised for an entity or table name missing from the static mapping."""


def table_for(entity: str) -> str:
    try:
        return ENTITY_TABLES[entity]
    except KeyError:
        raise UnknownEntityError(f"Unknown entity {entity!r}; add it to ENTITY_TABLES") from None


def entity_for(table: str) -> str:
    try:
        return TABLE_ENTITIES[table]
    except KeyError:
        raise UnknownEntityError(f"Unknown table {table!r}") from None


def camel_to_snake(name: str) -> str:
    """`txRef` -> `tx_ref`. Each uppercase letter gets its own segment."""
    return _UPPER.sub(lambda m: "_" + m.group(0).lower(), name)


def to_snake_case(value: Any) -> Any:
    """Recursively snake-case mapping keys; lists convert element-wise."""
    if isinstance(value, dict):
        return {camel_to_snake(str(k)): to_snake_case(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_snake_case(v) for v in value]
    return value

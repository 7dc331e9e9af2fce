"""Row-store access over Supabase's PostgREST client."""

from postgrest import APIError

from .client import OBJECT_ACCEPT, create_store, single_row

__all__ = [
    "APIError",
    "OBJECT_ACCEPT",
    "create_store",
    "single_row",
]

"""Row-store connection built on the Supabase client."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from postgrest import SyncSingleRequestBuilder
from supabase import Client, ClientOptions, create_client

from ..config import Settings
from ..logging import get_logger

LOG = get_logger("rowstore")

# Singular media type: the server rejects (406) and rolls back a request that
# does not hit exactly one row.
OBJECT_ACCEPT = "application/vnd.pgrst.object+json"


def create_store(settings: Settings, *, http_client: Optional[httpx.Client] = None) -> Client:
    """Connect to the row-store described by `settings`.

    Sessions are neither persisted nor refreshed; the configured key is the
    only credential. Pass `http_client` to control transport (tests do).
    """
    if http_client is None:
        http_client = httpx.Client(
            timeout=settings.timeout_seconds,
            verify=settings.verify_tls,
            follow_redirects=True,
        )
    options = ClientOptions(
        httpx_client=http_client,
        postgrest_client_timeout=settings.timeout_seconds,
        auto_refresh_token=False,
        persist_session=False,
    )
    LOG.debug(f"Connecting to row-store at {settings.supabase_url} (timeout={settings.timeout_seconds}s)")
    return create_client(settings.supabase_url, settings.supabase_key, options=options)


def single_row(query: Any) -> SyncSingleRequestBuilder:
    """Ask for exactly one row as an object, the way `select().single()` does.

    Works on insert/update/delete builders too, which have no `single()`.
    """
    query.request.headers["Accept"] = OBJECT_ACCEPT
    return SyncSingleRequestBuilder(query.request)

from __future__ import annotations

from typing import Optional

import httpx

from .config import Settings, load_settings
from .logging import set_level
from .orm import DataClient
from .rowstore import create_store


def create_data_client(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.Client] = None,
) -> DataClient:
    """Build the row-store connection and the entity registry on top of it.

    Call once at process start and pass the result to whatever needs data
    access; nothing here is stored at module level. Applies the configured
    log level to the package loggers.
    """
    settings = settings or load_settings()
    set_level(settings.log_level)
    return DataClient(create_store(settings, http_client=http_client))

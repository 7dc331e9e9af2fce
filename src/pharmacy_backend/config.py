import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import dotenv_values

from .logging import get_logger

log = get_logger("config")


class ConfigError(RuntimeError):
    """Required setting missing or malformed."""


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_key: str
    timeout_seconds: int = 30
    verify_tls: bool = True
    app_env: str = "development"
    log_level: str = "INFO"


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    Lets tools run from subdirectories (e.g. `src/`) still pick up the
    repository-level `.env`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Key/value pairs from the nearest .env; does not mutate os.environ."""
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return {}
    values = {k: v.strip() for k, v in dotenv_values(path).items() if v is not None}
    log.debug(f"Loaded {len(values)} key(s) from .env at {path}")
    return values


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(dotenv_dir: Optional[str] = None) -> Settings:
    """Resolve settings from the environment, falling back to .env.

    The service-role key wins over the anon key when both are present.
    """
    env = _read_dotenv(dotenv_dir or os.getcwd())

    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        v = os.environ.get(key)
        if v:
            return v.strip()
        return env.get(key) or default

    url = get("SUPABASE_URL")
    key = get("SUPABASE_SERVICE_ROLE_KEY") or get("SUPABASE_ANON_KEY")
    if not url:
        raise ConfigError("SUPABASE_URL is not set (environment or .env)")
    if not key:
        raise ConfigError("SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY is not set (environment or .env)")

    raw_timeout = get("DB_TIMEOUT_SECONDS", "30")
    try:
        timeout = int(raw_timeout)
    except ValueError:
        raise ConfigError(f"DB_TIMEOUT_SECONDS must be an integer, got {raw_timeout!r}") from None

    settings = Settings(
        supabase_url=url,
        supabase_key=key,
        timeout_seconds=timeout,
        verify_tls=_as_bool(get("DB_VERIFY_TLS", "true")),
        app_env=get("APP_ENV", "development"),
        log_level=get("LOG_LEVEL", "INFO").upper(),
    )
    log.info(f"Row-store at {settings.supabase_url} (env={settings.app_env}, timeout={settings.timeout_seconds}s)")
    return settings

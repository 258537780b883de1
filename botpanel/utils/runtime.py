"""Runtime environment helpers: boolean env flags and the DEV_MODE guard."""

import os
from urllib.parse import urlparse
from typing import List, Optional, Set

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}

_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def env_flag(name: str, default: bool = False) -> bool:
    """Return True when the environment variable holds 'true' (case-insensitive)."""
    return os.getenv(name, "true" if default else "false").strip().lower() == "true"


def cors_origins() -> List[str]:
    """Allowed CORS origins from CORS_ORIGINS (comma-separated) or local defaults."""
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(_DEFAULT_CORS_ORIGINS)


def _extract_hostname(url_value: str) -> Optional[str]:
    """Return hostname from a URL or bare host string."""
    if not url_value:
        return None
    url_value = url_value.strip()
    if not url_value:
        return None
    candidate = url_value if "://" in url_value else f"http://{url_value}"
    return urlparse(candidate).hostname


def _allowed_dev_hosts() -> Set[str]:
    """Hosts that are allowed to run with DEV_MODE enabled."""
    extra = os.getenv("DEV_MODE_ALLOWED_HOSTS", "")
    allowed = set(_LOCAL_HOSTS)
    allowed.update({host.strip().lower() for host in extra.split(",") if host.strip()})
    return allowed


def dev_mode_requested() -> bool:
    return env_flag("DEV_MODE")


def dev_mode_active() -> bool:
    """Return True if dev mode is enabled and allowed; raise if misconfigured.

    DEV_MODE maps every request to the dev@localhost tenant, so it is only
    honoured when APP_BASE_URL points at a local host (or one listed in
    DEV_MODE_ALLOWED_HOSTS), or ALLOW_DEV_MODE=true when no URL is set.
    """
    if not dev_mode_requested():
        return False

    hostname = _extract_hostname(os.getenv("APP_BASE_URL", ""))
    allowed_hosts = _allowed_dev_hosts()

    if hostname:
        if hostname.lower() not in allowed_hosts:
            raise RuntimeError(
                "DEV_MODE=true is not permitted when APP_BASE_URL points to "
                f"'{hostname}'. Allowed hosts: {sorted(allowed_hosts)}"
            )
    elif not env_flag("ALLOW_DEV_MODE") and not os.getenv("PYTEST_CURRENT_TEST"):
        raise RuntimeError(
            "DEV_MODE=true requires APP_BASE_URL to be set to a localhost URL "
            "or ALLOW_DEV_MODE=true for non-local execution."
        )

    return True

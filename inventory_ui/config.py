# inventory_ui/config.py
# Environment-aware configuration for the property inventory frontend

import os
from typing import Literal

_raw_env = os.environ.get("ENV", "production").lower()
ENV: Literal["local", "staging", "production"] = _raw_env if _raw_env in ("local", "staging", "production") else "production"  # type: ignore

IS_LOCAL = (ENV == "local")
IS_STAGING = (ENV == "staging")
IS_DEV = IS_LOCAL

# Checked in order; the first non-empty one names the inventory API
API_URL_VARS = ("BACKEND_URL", "API_BASE_URL")
LOCAL_API_URL = "http://127.0.0.1:8000"


def validate_api_url(url: str, env: str) -> None:
    """
    Raises:
        ValueError: If the URL is empty, or outside local is not HTTPS or
            points at localhost
    """
    if not url:
        raise ValueError("API base URL cannot be empty")

    if env in ("staging", "production"):
        if not url.startswith("https://"):
            raise ValueError(f"Production/staging must use HTTPS. Got: {url}")
        if "127.0.0.1" in url or "localhost" in url:
            raise ValueError(f"Production/staging cannot use localhost URLs. Got: {url}")


def get_api_base_url() -> str:
    """
    Resolve the inventory API URL for the current environment.

    The first of BACKEND_URL / API_BASE_URL that is set wins. Only a local
    environment may fall back to the local API.

    Returns:
        Validated API base URL without a trailing slash

    Raises:
        RuntimeError: If staging/production has no configured URL
        ValueError: If the configured URL breaks the environment rules
    """
    for name in API_URL_VARS:
        configured = os.environ.get(name, "").strip()
        if configured:
            url = configured.rstrip("/")
            validate_api_url(url, ENV)
            return url

    if ENV == "local":
        return LOCAL_API_URL

    raise RuntimeError(
        f"Inventory API URL not configured for {ENV.upper()} environment. "
        f"Set BACKEND_URL to the inventory API service URL."
    )


def _int_setting(name: str, default: int, minimum: int = 1) -> int:
    """Integer knob from the environment; unusable values fall back to `default`."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"[CONFIG] Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value < minimum:
        print(f"[CONFIG] Ignoring {name}={value}: must be at least {minimum}, using {default}")
        return default
    return value


REQUEST_TIMEOUT_SECONDS = _int_setting("REQUEST_TIMEOUT_SECONDS", 20)

# Pending reassignment badge refresh interval (master admins only)
PENDING_APPROVALS_POLL_SECONDS = _int_setting("PENDING_APPROVALS_POLL_SECONDS", 120, minimum=5)

DEFAULT_PAGE_SIZE = _int_setting("DEFAULT_PAGE_SIZE", 10)

ENABLE_DEBUG_UI = IS_DEV
ENABLE_VERBOSE_LOGGING = IS_DEV or IS_STAGING

try:
    _startup_url = get_api_base_url()
except (RuntimeError, ValueError) as e:
    # api_client resolves again per client and raises there
    print(f"[CONFIG] CRITICAL: {e}")
    _startup_url = "(not configured)"

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Inventory API: {_startup_url}")
print(f"[CONFIG] Debug UI: {'enabled' if ENABLE_DEBUG_UI else 'disabled'}")

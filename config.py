# config.py
"""
Central configuration.

Credentials and transport settings are read from ENV (or a local .env file).

Required ENV variables:
  VERIFY_ACCOUNT_SID  -> account identifier used for basic authorization
  VERIFY_AUTH_TOKEN   -> auth token paired with the account identifier

Optional:
  VERIFY_BASE_URL     -> verification REST base url
  SAMPLE_BACKEND_URL  -> default enrollment endpoint of the sample backend
  HTTP_TIMEOUT_SEC    -> shared HTTP client timeout (seconds)
  HTTP_MAX_CONNECTIONS -> shared HTTP client pool size
  HTTP_USER_AGENT     -> User-Agent header for every request
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from core.version import APP_VERSION

# .env never overrides values already present in the process env.
load_dotenv(override=False)


def _get_int_env(name: str, default: int) -> int:
    """
    Read an int from ENV; missing or malformed values fall back to default.
    """
    val = os.getenv(name)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    val = os.getenv(name)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return default
    return val.strip()


# --- Credentials ---

VERIFY_ACCOUNT_SID: str = _get_str_env("VERIFY_ACCOUNT_SID", "")
VERIFY_AUTH_TOKEN: str = _get_str_env("VERIFY_AUTH_TOKEN", "")


# --- Endpoints ---

VERIFY_BASE_URL: str = _get_str_env("VERIFY_BASE_URL", "https://verify.twilio.com/v2/")

# Enrollment endpoint used when the caller does not pass one explicitly.
SAMPLE_BACKEND_URL: str = _get_str_env("SAMPLE_BACKEND_URL", "")


# --- Shared HTTP client ---

HTTP_TIMEOUT_SEC: float = _get_float_env("HTTP_TIMEOUT_SEC", 20.0)
HTTP_MAX_CONNECTIONS: int = _get_int_env("HTTP_MAX_CONNECTIONS", 10)
HTTP_USER_AGENT: str = _get_str_env("HTTP_USER_AGENT", f"verify-provider/{APP_VERSION}")


@dataclass(frozen=True)
class VerifySettings:
    """Immutable snapshot of everything the provider needs to wire itself."""

    account_sid: str
    auth_token: str
    base_url: str = "https://verify.twilio.com/v2/"
    backend_url: str = ""
    timeout_sec: float = 20.0
    max_connections: int = 10
    user_agent: str = f"verify-provider/{APP_VERSION}"

    @classmethod
    def from_env(cls) -> "VerifySettings":
        """Re-read ENV so values patched after import are honoured."""
        return cls(
            account_sid=_get_str_env("VERIFY_ACCOUNT_SID", VERIFY_ACCOUNT_SID),
            auth_token=_get_str_env("VERIFY_AUTH_TOKEN", VERIFY_AUTH_TOKEN),
            base_url=_get_str_env("VERIFY_BASE_URL", VERIFY_BASE_URL),
            backend_url=_get_str_env("SAMPLE_BACKEND_URL", SAMPLE_BACKEND_URL),
            timeout_sec=_get_float_env("HTTP_TIMEOUT_SEC", HTTP_TIMEOUT_SEC),
            max_connections=_get_int_env("HTTP_MAX_CONNECTIONS", HTTP_MAX_CONNECTIONS),
            user_agent=_get_str_env("HTTP_USER_AGENT", HTTP_USER_AGENT),
        )

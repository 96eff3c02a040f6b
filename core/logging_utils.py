"""core.logging_utils

Small helpers for single-line ops logging.

- `log_kv()` formats a single-line, human-readable key=value log.
- Values under secret-looking keys are masked before they reach a handler.

No external dependencies.
"""

from __future__ import annotations

import json
from typing import Any

_SECRET_KEY_PARTS = ("token", "password", "secret", "authorization", "jwe")


def is_secret_key(key: str) -> bool:
    k = str(key).lower()
    return any(part in k for part in _SECRET_KEY_PARTS)


def mask_secret(value: Any) -> str:
    """Keep the last 4 chars of a secret so operators can tell two apart."""
    s = "" if value is None else str(value)
    if not s:
        return "null"
    if len(s) <= 4:
        return "***"
    return f"***{s[-4:]}"


def _fmt_value(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, str):
        # keep one-line
        return v.replace("\n", " ").replace("\r", " ")
    if isinstance(v, (list, tuple, dict)):
        try:
            return json.dumps(v, ensure_ascii=False, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return str(v)
    return str(v)


def format_kv(msg: str, **kv: Any) -> str:
    parts = [msg]
    for k in sorted(kv.keys()):
        v = mask_secret(kv[k]) if is_secret_key(k) else _fmt_value(kv[k])
        parts.append(f"{k}={v}")
    return " | ".join(parts)


def log_kv(logger, msg: str, **kv: Any) -> None:
    """Log `msg` plus `key=value` pairs in one line."""
    logger.info(format_kv(msg, **kv))


def log_kv_error(logger, msg: str, **kv: Any) -> None:
    """Same as log_kv, but logs at error level with stack trace."""
    logger.error(format_kv(msg, **kv), exc_info=True)


def log_kv_warning(logger, msg: str, **kv: Any) -> None:
    logger.warning(format_kv(msg, **kv))

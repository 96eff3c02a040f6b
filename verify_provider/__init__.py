"""Lazily-built, process-wide verify adapter.

Host apps call `get_instance(context)` once at their entry point (or own a
`VerifyProvider`) and pass the returned adapter to whatever needs it.
"""

from .adapter import CreateFactorData, VerifyAdapter
from .factory import VerifyProvider, get_default_provider, get_instance

__all__ = ["CreateFactorData", "VerifyAdapter", "VerifyProvider", "get_default_provider", "get_instance"]

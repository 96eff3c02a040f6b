"""core.version

Central, importable version constants.

Keep this file dependency-free (stdlib only).
"""

from __future__ import annotations

import os


# Human version (semver-ish). Bump intentionally.
APP_VERSION: str = os.getenv("APP_VERSION", "0.1.0").strip() or "0.1.0"

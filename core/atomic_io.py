from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to `path` via temp file + os.replace.

    Writes the temp file in the same directory to keep `os.replace` atomic.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    with open(tmp_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())

    os.replace(tmp_path, path)


def atomic_write_json(path: Path, obj: Any) -> None:
    """Serialize `obj` (sorted keys, UTF-8) and write it with atomic_write_text."""
    text = json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
    atomic_write_text(path, text + "\n")


def read_json(path: Path, default: Any) -> Any:
    """Return parsed JSON at `path`, or `default` when the file does not exist."""
    if not path.exists():
        return default
    return json.loads(path.read_text(encoding="utf-8"))

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from core.atomic_io import atomic_write_json, read_json
from core.logging_utils import log_kv_warning

from .errors import ErrorCode, VerifyError
from .models import AppContext, Factor

logger = logging.getLogger(__name__)

STORAGE_SUFFIX = "verify"


def storage_name(context: AppContext) -> str:
    return f"{context.package_name}.{STORAGE_SUFFIX}"


class FactorStore:
    """Factors keyed by sid.

    Persisted as one JSON document when the context has a storage_dir; the
    whole document is rewritten atomically on every change.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._lock = threading.RLock()
        self._factors: Dict[str, Factor] = {}
        self._load()

    @classmethod
    def for_context(cls, context: AppContext) -> "FactorStore":
        if context.storage_dir is None:
            return cls()
        return cls(Path(context.storage_dir) / f"{storage_name(context)}.json")

    def _load(self) -> None:
        if self.path is None:
            return
        try:
            raw = read_json(self.path, default={})
        except (OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            raise VerifyError(e, ErrorCode.STORAGE_ERROR) from e

        items = raw.get("factors", {}) if isinstance(raw, dict) else None
        if not isinstance(items, dict):
            raise VerifyError(
                ValueError(f"Unexpected factor store layout in {self.path}"), ErrorCode.STORAGE_ERROR
            )

        for sid, item in items.items():
            try:
                self._factors[sid] = Factor.model_validate(item)
            except ValidationError:
                # One corrupt entry must not hide the rest.
                log_kv_warning(logger, "FACTOR_STORE_SKIP_INVALID", sid=sid, path=str(self.path))

    def _commit(self, factors: Dict[str, Factor]) -> None:
        """Persist `factors`, then make them current. Memory only changes once disk has."""
        if self.path is not None:
            doc = {
                "factors": {sid: f.model_dump(mode="json", by_alias=True) for sid, f in factors.items()}
            }
            try:
                atomic_write_json(self.path, doc)
            except OSError as e:
                raise VerifyError(e, ErrorCode.STORAGE_ERROR) from e
        self._factors = factors

    def save(self, factor: Factor) -> Factor:
        with self._lock:
            factors = dict(self._factors)
            factors[factor.sid] = factor
            self._commit(factors)
        return factor

    def get(self, sid: str) -> Optional[Factor]:
        with self._lock:
            return self._factors.get(sid)

    def get_all(self) -> List[Factor]:
        with self._lock:
            return list(self._factors.values())

    def remove(self, sid: str) -> None:
        with self._lock:
            if sid not in self._factors:
                return
            factors = dict(self._factors)
            del factors[sid]
            self._commit(factors)

    def clear(self) -> None:
        with self._lock:
            self._commit({})

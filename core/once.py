"""core.once

Once-only initialization cell for process-wide singletons.

`OnceCell.get_or_init(fn)` runs `fn` at most once successfully:
- the fast path reads the stored value without taking the lock;
- the slow path takes the lock, re-checks, then calls `fn` while holding it,
  so concurrent first callers block and share the same result;
- if `fn` raises, nothing is stored and the exception propagates. Callers that
  were waiting on the lock then retry `fn` themselves, one at a time.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._set = False
        self._owner: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return self._set

    def get(self) -> Optional[T]:
        return self._value if self._set else None

    def get_or_init(self, fn: Callable[[], T]) -> T:
        if self._set:
            return self._value  # type: ignore[return-value]

        if self._owner == threading.get_ident():
            # fn() asked for the cell it is initializing; a plain Lock would hang.
            raise RuntimeError("OnceCell.get_or_init called re-entrantly from its own initializer")

        with self._lock:
            if self._set:
                return self._value  # type: ignore[return-value]
            self._owner = threading.get_ident()
            try:
                value = fn()
            finally:
                self._owner = None
            self._value = value
            # Publish the flag last: fast-path readers never see a half-set cell.
            self._set = True
            return value

    def reset(self) -> None:
        """Drop the stored value. Intended for tests and explicit teardown."""
        with self._lock:
            self._value = None
            self._set = False

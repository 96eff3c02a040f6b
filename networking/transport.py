"""Shared HTTP transport.

One `httpx.Client` per provider, handed by reference to both the sample
backend client and the verification engine's network provider. Every request
made through it is counted in a process-wide `HttpRequestStats`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter, deque
from typing import Any, Deque, Dict, Optional

import httpx

from config import VerifySettings
from core.logging_utils import log_kv

logger = logging.getLogger(__name__)

_STARTED_AT_KEY = "verify_provider.started_at"


class HttpRequestStats:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.started_at = time.time()
            self.total = 0
            self.by_method: Counter[str] = Counter()
            self.by_host: Counter[str] = Counter()
            self.by_path: Counter[str] = Counter()
            self.by_status: Counter[str] = Counter()
            self.latency_ms_sum = 0.0
            self.latency_count = 0
            # Small rolling window for last-60s rate calculation
            self._recent: Deque[float] = deque(maxlen=5000)

    def record(self, *, method: str, url: httpx.URL, status: Optional[int], elapsed_ms: float) -> None:
        with self._lock:
            self.total += 1
            self.by_method[method.upper()] += 1
            self.by_host[url.host] += 1
            self.by_path[url.path] += 1
            if status is not None:
                self.by_status[str(status)] += 1
            self.latency_ms_sum += float(elapsed_ms)
            self.latency_count += 1
            self._recent.append(time.time())

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            now = time.time()
            # purge >60s
            while self._recent and (now - self._recent[0]) > 60.0:
                self._recent.popleft()
            last_60s_total = len(self._recent)
            avg_latency = (self.latency_ms_sum / self.latency_count) if self.latency_count else 0.0

            return {
                "started_at": self.started_at,
                "elapsed_sec": max(now - self.started_at, 1e-9),
                "total": self.total,
                "by_method": dict(self.by_method),
                "by_host": dict(self.by_host),
                "by_path": dict(self.by_path),
                "by_status": dict(self.by_status),
                "avg_latency_ms": avg_latency,
                "last_60s_total": last_60s_total,
                "last_60s_rps": last_60s_total / 60.0,
            }


_HTTP_STATS = HttpRequestStats()


def get_http_request_stats(*, reset: bool = False) -> Dict[str, Any]:
    """Return a snapshot of shared-client request stats.

    If reset=True, returns the snapshot after resetting counters.
    """
    if reset:
        _HTTP_STATS.reset()
    return _HTTP_STATS.snapshot()


def _on_request(request: httpx.Request) -> None:
    request.extensions[_STARTED_AT_KEY] = time.perf_counter()


def _on_response(response: httpx.Response) -> None:
    request = response.request
    started = request.extensions.get(_STARTED_AT_KEY)
    elapsed_ms = (time.perf_counter() - started) * 1000.0 if started is not None else 0.0
    _HTTP_STATS.record(
        method=request.method,
        url=request.url,
        status=response.status_code,
        elapsed_ms=elapsed_ms,
    )


def create_http_client(
    settings: VerifySettings,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Build the shared client. `transport` lets tests plug in httpx.MockTransport."""
    client = httpx.Client(
        timeout=httpx.Timeout(settings.timeout_sec),
        limits=httpx.Limits(max_connections=max(int(settings.max_connections), 1)),
        headers={"User-Agent": settings.user_agent},
        event_hooks={"request": [_on_request], "response": [_on_response]},
        transport=transport,
    )
    log_kv(
        logger,
        "HTTP_CLIENT_CREATED",
        timeout_sec=settings.timeout_sec,
        max_connections=settings.max_connections,
        mock_transport=transport is not None,
    )
    return client

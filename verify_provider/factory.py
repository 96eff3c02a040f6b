"""Process-wide access to the verify adapter.

`VerifyProvider.get_instance(context)` builds the adapter on first use and
returns the same object forever after:

    shared httpx.Client ──┬─> SampleBackendClient
                          └─> HttpxNetworkProvider ─> VerifyEngineBuilder.build()

Construction runs inside a OnceCell, so concurrent first callers share one
build. A failed build caches nothing; the next call starts over.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx

from config import VerifySettings
from core.logging_utils import log_kv, log_kv_error, log_kv_warning
from core.once import OnceCell
from networking.backend_client import SampleBackendClient
from networking.transport import create_http_client
from verify_sdk.engine import VerifyEngineBuilder
from verify_sdk.errors import InitializationError
from verify_sdk.models import AppContext
from verify_sdk.networking import BasicAuthorization, HttpxNetworkProvider, NetworkProvider

from .adapter import VerifyAdapter

logger = logging.getLogger(__name__)


class VerifyProvider:
    """Owns one lazily-built VerifyAdapter.

    The factories are injectable so callers (and tests) can swap any
    collaborator without touching the wiring order.
    """

    def __init__(
        self,
        settings: Optional[VerifySettings] = None,
        *,
        http_client_factory: Callable[[VerifySettings], httpx.Client] = create_http_client,
        backend_client_factory: Callable[[httpx.Client], SampleBackendClient] = SampleBackendClient,
        network_provider_factory: Callable[[httpx.Client], NetworkProvider] = HttpxNetworkProvider,
        engine_builder_factory: Callable[[Any, BasicAuthorization], VerifyEngineBuilder] = VerifyEngineBuilder,
    ) -> None:
        self._settings = settings
        self._http_client_factory = http_client_factory
        self._backend_client_factory = backend_client_factory
        self._network_provider_factory = network_provider_factory
        self._engine_builder_factory = engine_builder_factory
        self._cell: OnceCell[VerifyAdapter] = OnceCell()
        self._context: Any = None

    @property
    def is_initialized(self) -> bool:
        return self._cell.is_set

    def get_instance(self, context: AppContext) -> VerifyAdapter:
        adapter = self._cell.get_or_init(lambda: self._create_adapter(context))
        if context != self._context:
            # TODO: decide whether a second context should be rejected instead of ignored.
            log_kv_warning(
                logger,
                "VERIFY_PROVIDER_CONTEXT_MISMATCH",
                initialized_with=getattr(self._context, "package_name", repr(self._context)),
                requested=getattr(context, "package_name", repr(context)),
            )
        return adapter

    def _create_adapter(self, context: AppContext) -> VerifyAdapter:
        settings = self._settings or VerifySettings.from_env()
        log_kv(
            logger,
            "VERIFY_PROVIDER_INIT",
            package=getattr(context, "package_name", None),
            account_sid=settings.account_sid,
            auth_token=settings.auth_token,
            base_url=settings.base_url,
        )

        try:
            http_client = self._http_client_factory(settings)
        except Exception as e:
            log_kv_error(logger, "VERIFY_PROVIDER_INIT_FAILED", stage="http_client", error=str(e))
            raise InitializationError(e) from e

        try:
            backend_client = self._backend_client_factory(http_client)
            authorization = BasicAuthorization(settings.account_sid, settings.auth_token)
            engine = (
                self._engine_builder_factory(context, authorization)
                .network_provider(self._network_provider_factory(http_client))
                .base_url(settings.base_url)
                .build()
            )
        except Exception as e:
            # The client is ours until an adapter holds it.
            http_client.close()
            log_kv_error(logger, "VERIFY_PROVIDER_INIT_FAILED", stage="engine", error=str(e))
            if isinstance(e, InitializationError):
                raise
            raise InitializationError(e) from e

        adapter = VerifyAdapter(engine, backend_client, default_enrollment_url=settings.backend_url)
        self._context = context
        log_kv(logger, "VERIFY_PROVIDER_READY", package=getattr(context, "package_name", None))
        return adapter

    def reset(self) -> None:
        """Forget the adapter (closing its HTTP client). Intended for tests."""
        adapter = self._cell.get()
        self._cell.reset()
        self._context = None
        if adapter is not None:
            adapter.backend_client.client.close()


_DEFAULT_PROVIDER = VerifyProvider()


def get_default_provider() -> VerifyProvider:
    return _DEFAULT_PROVIDER


def get_instance(context: AppContext) -> VerifyAdapter:
    """Global accessor for the process entry point; prefer passing a VerifyProvider."""
    return _DEFAULT_PROVIDER.get_instance(context)

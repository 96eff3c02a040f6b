"""Verification engine and its builder.

    engine = (
        VerifyEngineBuilder(AppContext("com.example.app"), BasicAuthorization(sid, token))
        .network_provider(HttpxNetworkProvider(client))
        .build()
    )
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlparse

from core.logging_utils import log_kv

from .api_client import FactorAPIClient
from .errors import ErrorCode, InitializationError, VerifyError
from .models import AppContext, Factor, PushFactorPayload, UpdatePushFactorPayload
from .networking import BasicAuthorization, NetworkProvider
from .storage import FactorStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://verify.twilio.com/v2/"


def _require_sid(sid: str) -> str:
    if not isinstance(sid, str) or not sid.strip():
        raise VerifyError(ValueError("Empty factor sid"), ErrorCode.INPUT_ERROR)
    return sid.strip()


class VerifyEngine:
    """Creates and manages push factors; keeps a local copy of each one."""

    def __init__(self, context: AppContext, api_client: FactorAPIClient, store: FactorStore) -> None:
        self.context = context
        self.api_client = api_client
        self.store = store

    @property
    def authorization(self) -> BasicAuthorization:
        return self.api_client.authorization

    @property
    def network_provider(self) -> NetworkProvider:
        return self.api_client.network_provider

    def create_factor(self, payload: PushFactorPayload) -> Factor:
        if not payload.access_token:
            raise VerifyError(ValueError("Empty access token"), ErrorCode.INPUT_ERROR)
        factor = self.api_client.create(payload)
        return self.store.save(factor)

    def get_factor(self, sid: str) -> Factor:
        sid = _require_sid(sid)
        factor = self.store.get(sid)
        if factor is None:
            raise VerifyError(LookupError(f"Factor not found: '{sid}'"), ErrorCode.STORAGE_ERROR)
        return factor

    def get_all_factors(self) -> List[Factor]:
        return self.store.get_all()

    def update_factor(self, payload: UpdatePushFactorPayload) -> Factor:
        factor = self.get_factor(payload.sid)
        updated = self.api_client.update(factor, payload)
        return self.store.save(updated)

    def delete_factor(self, sid: str) -> None:
        factor = self.get_factor(sid)
        self.api_client.delete(factor)
        self.store.remove(factor.sid)

    def clear_local_storage(self) -> None:
        self.store.clear()


class VerifyEngineBuilder:
    """Fluent builder; all validation happens in build()."""

    def __init__(self, context: AppContext, authorization: BasicAuthorization) -> None:
        self._context = context
        self._authorization = authorization
        self._network_provider: Optional[NetworkProvider] = None
        self._base_url: str = DEFAULT_BASE_URL

    def network_provider(self, network_provider: NetworkProvider) -> "VerifyEngineBuilder":
        self._network_provider = network_provider
        return self

    def base_url(self, url: str) -> "VerifyEngineBuilder":
        self._base_url = url
        return self

    def _validate(self) -> None:
        ctx = self._context
        if not isinstance(ctx, AppContext) or not str(ctx.package_name or "").strip():
            raise InitializationError(ValueError("Illegal value for context"))

        auth = self._authorization
        if (
            not isinstance(auth, BasicAuthorization)
            or not str(auth.username or "").strip()
            or not str(auth.password or "").strip()
        ):
            raise InitializationError(ValueError("Illegal value for authorization"))

        if self._network_provider is None:
            raise InitializationError(ValueError("Illegal value for network provider"))

        parsed = urlparse(self._base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InitializationError(ValueError("Illegal value for base url"))

    def build(self) -> VerifyEngine:
        self._validate()
        try:
            store = FactorStore.for_context(self._context)
        except VerifyError as e:
            raise InitializationError(e) from e

        api_client = FactorAPIClient(self._network_provider, self._authorization, self._base_url)
        engine = VerifyEngine(self._context, api_client, store)
        log_kv(
            logger,
            "VERIFY_ENGINE_BUILT",
            package=self._context.package_name,
            base_url=self._base_url,
            persistent=store.path is not None,
        )
        return engine

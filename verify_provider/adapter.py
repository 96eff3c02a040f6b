from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urlparse

from core.logging_utils import log_kv
from networking.backend_client import SampleBackendClient
from verify_sdk.engine import VerifyEngine
from verify_sdk.errors import ErrorCode, VerifyError
from verify_sdk.models import Factor, PushFactorPayload, UpdatePushFactorPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateFactorData:
    identity: str
    friendly_name: str
    enrollment_url: str = ""
    push_token: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class VerifyAdapter:
    """Engine + sample backend client, as handed out by VerifyProvider."""

    def __init__(
        self,
        engine: VerifyEngine,
        backend_client: SampleBackendClient,
        *,
        default_enrollment_url: str = "",
    ) -> None:
        self.engine = engine
        self.backend_client = backend_client
        self.default_enrollment_url = default_enrollment_url

    def create_factor(self, data: CreateFactorData) -> Factor:
        """Fetch an enrollment for `data.identity` and create a push factor with it."""
        identity = (data.identity or "").strip()
        if not identity:
            raise VerifyError(ValueError("Invalid identity"), ErrorCode.INPUT_ERROR)

        url = data.enrollment_url or self.default_enrollment_url
        if not _is_http_url(url):
            raise VerifyError(ValueError("Invalid enrollment url"), ErrorCode.INPUT_ERROR)

        enrollment = self.backend_client.get_enrollment(identity, url)
        payload = PushFactorPayload(
            friendly_name=data.friendly_name,
            service_sid=enrollment.service_sid,
            identity=enrollment.identity,
            push_token=data.push_token,
            access_token=enrollment.token,
            metadata=data.metadata,
        )
        factor = self.engine.create_factor(payload)
        log_kv(logger, "ADAPTER_FACTOR_CREATED", sid=factor.sid, identity=factor.identity)
        return factor

    def get_factors(self) -> List[Factor]:
        return self.engine.get_all_factors()

    def get_factor(self, sid: str) -> Factor:
        return self.engine.get_factor(sid)

    def update_factor(self, sid: str, push_token: Optional[str]) -> Factor:
        return self.engine.update_factor(UpdatePushFactorPayload(sid=sid, push_token=push_token))

    def delete_factor(self, sid: str) -> None:
        self.engine.delete_factor(sid)

    def clear_local_storage(self) -> None:
        self.engine.clear_local_storage()

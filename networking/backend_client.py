from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.logging_utils import log_kv
from verify_sdk.errors import ApiError, ErrorCode, FailureResponse, NetworkError, VerifyError
from verify_sdk.models import FactorType

logger = logging.getLogger(__name__)


class Enrollment(BaseModel):
    """Enrollment issued by the sample backend for one identity."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str
    service_sid: str = Field(alias="serviceSid")
    identity: str
    factor_type: FactorType = Field(default=FactorType.PUSH, alias="factorType")


class SampleBackendClient:
    """Client for the sample backend that hands out enrollment tokens.

    Shares the host app's `httpx.Client`; never closes it.
    """

    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    def _headers(self) -> Dict[str, str]:
        return {"accept": "application/json"}

    def get_enrollment(self, identity: str, url: str) -> Enrollment:
        """POST `identity` to `url` and return the enrollment it issues.

        Raises NetworkError for transport/HTTP failures and
        VerifyError(MAPPER_ERROR) when the body is not a valid enrollment.
        """
        try:
            res = self.client.post(url, headers=self._headers(), data={"identity": identity})
        except httpx.HTTPError as e:
            raise NetworkError(f"{type(e).__name__}: {e}", cause=e) from e

        if res.status_code >= 400:
            try:
                api_error = ApiError.from_json(res.json())
            except ValueError:
                api_error = None
            raise NetworkError(
                f"HTTP {res.status_code} for POST {url}",
                failure_response=FailureResponse(
                    status_code=res.status_code,
                    body=res.text,
                    headers=dict(res.headers),
                    api_error=api_error,
                ),
            )

        try:
            data: Any = res.json()
            enrollment = Enrollment.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise VerifyError(e, ErrorCode.MAPPER_ERROR) from e

        log_kv(
            logger,
            "ENROLLMENT_FETCHED",
            identity=enrollment.identity,
            service_sid=enrollment.service_sid,
            access_token=enrollment.token,
        )
        return enrollment

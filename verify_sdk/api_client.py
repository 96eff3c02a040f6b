from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from core.logging_utils import log_kv

from .errors import ErrorCode, NetworkError, VerifyError
from .models import Factor, PushFactorPayload, UpdatePushFactorPayload
from .networking import BasicAuthorization, HttpMethod, NetworkProvider, Request

logger = logging.getLogger(__name__)

CREATE_FACTOR_PATH = "Services/{service_sid}/Entities/{identity}/Factors"
FACTOR_PATH = "Services/{service_sid}/Entities/{identity}/Factors/{factor_sid}"

FRIENDLY_NAME_KEY = "FriendlyName"
FACTOR_TYPE_KEY = "FactorType"
BINDING_KEY = "Binding"
CONFIG_KEY = "Config"
METADATA_KEY = "Metadata"
PUSH_TOKEN_KEY = "push_token"

# Username paired with an enrollment access token on factor creation.
ACCESS_TOKEN_USER = "token"


def _map_factor(body: Any) -> Factor:
    try:
        return Factor.model_validate(body)
    except ValidationError as e:
        raise VerifyError(e, ErrorCode.MAPPER_ERROR) from e


class FactorAPIClient:
    """Factor REST calls. Every failure comes out as VerifyError."""

    def __init__(
        self,
        network_provider: NetworkProvider,
        authorization: BasicAuthorization,
        base_url: str,
    ) -> None:
        self.network_provider = network_provider
        self.authorization = authorization
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def _url(self, template: str, **parts: str) -> str:
        return self.base_url + template.format(**parts)

    def _execute(self, request: Request) -> Any:
        try:
            resp = self.network_provider.execute(request)
        except NetworkError as e:
            raise VerifyError(e, ErrorCode.NETWORK_ERROR) from e
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise VerifyError(e, ErrorCode.MAPPER_ERROR) from e

    @staticmethod
    def create_body(payload: PushFactorPayload) -> Dict[str, str]:
        body = {
            FRIENDLY_NAME_KEY: payload.friendly_name,
            FACTOR_TYPE_KEY: payload.factor_type.value,
        }
        if payload.push_token:
            body[f"{BINDING_KEY}.{PUSH_TOKEN_KEY}"] = payload.push_token
        if payload.metadata:
            body[METADATA_KEY] = json.dumps(payload.metadata, sort_keys=True)
        return body

    def create(self, payload: PushFactorPayload) -> Factor:
        request = Request(
            method=HttpMethod.POST,
            url=self._url(CREATE_FACTOR_PATH, service_sid=payload.service_sid, identity=payload.identity),
            authorization=BasicAuthorization(ACCESS_TOKEN_USER, payload.access_token),
            form=self.create_body(payload),
        )
        factor = _map_factor(self._execute(request))
        log_kv(logger, "FACTOR_CREATED", sid=factor.sid, service_sid=factor.service_sid)
        return factor

    def update(self, factor: Factor, payload: UpdatePushFactorPayload) -> Factor:
        form = {FRIENDLY_NAME_KEY: factor.friendly_name}
        if payload.push_token:
            form[f"{CONFIG_KEY}.{PUSH_TOKEN_KEY}"] = payload.push_token
        request = Request(
            method=HttpMethod.POST,
            url=self._url(
                FACTOR_PATH,
                service_sid=factor.service_sid,
                identity=factor.identity,
                factor_sid=factor.sid,
            ),
            authorization=self.authorization,
            form=form,
        )
        return _map_factor(self._execute(request))

    def delete(self, factor: Factor) -> None:
        request = Request(
            method=HttpMethod.DELETE,
            url=self._url(
                FACTOR_PATH,
                service_sid=factor.service_sid,
                identity=factor.identity,
                factor_sid=factor.sid,
            ),
            authorization=self.authorization,
        )
        try:
            self.network_provider.execute(request)
        except NetworkError as e:
            # Already gone on the server: nothing left to delete.
            if e.status_code == 404:
                return
            raise VerifyError(e, ErrorCode.NETWORK_ERROR) from e
        log_kv(logger, "FACTOR_DELETED", sid=factor.sid)

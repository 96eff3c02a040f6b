"""HTTP plumbing used by the verification engine.

The engine never owns a client; it talks through a `NetworkProvider`, which in
the default implementation wraps an `httpx.Client` created by the host app.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import httpx

from .errors import ApiError, FailureResponse, NetworkError


@dataclass(frozen=True)
class BasicAuthorization:
    """(username, password) pair sent as an HTTP Basic `Authorization` header."""

    username: str
    password: str

    def header(self) -> Tuple[str, str]:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return "Authorization", "Basic " + base64.b64encode(raw).decode("ascii")

    def __repr__(self) -> str:
        return f"BasicAuthorization(username={self.username!r}, password='***')"


class HttpMethod(str, Enum):
    POST = "POST"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Request:
    method: HttpMethod
    url: str
    authorization: Optional[BasicAuthorization] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    form: Optional[Mapping[str, str]] = None

    def all_headers(self) -> Dict[str, str]:
        out = {"Accept": "application/json"}
        out.update(self.headers)
        if self.authorization is not None:
            name, value = self.authorization.header()
            out[name] = value
        return out


@dataclass(frozen=True)
class Response:
    status_code: int
    body: str
    headers: Dict[str, str]

    def json(self) -> Any:
        return json.loads(self.body) if self.body else {}


class NetworkProvider(Protocol):
    def execute(self, request: Request) -> Response:
        ...


def _failure_from(resp: httpx.Response) -> FailureResponse:
    try:
        api_error = ApiError.from_json(resp.json())
    except ValueError:
        api_error = None
    return FailureResponse(
        status_code=resp.status_code,
        body=resp.text,
        headers=dict(resp.headers),
        api_error=api_error,
    )


class HttpxNetworkProvider:
    """NetworkProvider backed by a shared `httpx.Client` it does not own."""

    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    def execute(self, request: Request) -> Response:
        try:
            resp = self.client.request(
                request.method.value,
                request.url,
                headers=request.all_headers(),
                data=dict(request.form) if request.form is not None else None,
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"{type(e).__name__}: {e}", cause=e) from e

        if resp.status_code >= 400:
            failure = _failure_from(resp)
            raise NetworkError(
                f"HTTP {resp.status_code} for {request.method.value} {request.url}",
                failure_response=failure,
            )

        return Response(status_code=resp.status_code, body=resp.text, headers=dict(resp.headers))

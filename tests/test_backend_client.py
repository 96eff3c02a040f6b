from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from networking.backend_client import Enrollment, SampleBackendClient
from verify_sdk.errors import ErrorCode, NetworkError, VerifyError
from verify_sdk.models import FactorType

ENROLL_URL = "https://backend.example.test/enroll"


def _client(handler) -> SampleBackendClient:
    return SampleBackendClient(httpx.Client(transport=httpx.MockTransport(handler)))


def test_get_enrollment_posts_identity_and_parses_body():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={"token": "enroll-jwe", "serviceSid": "VA0001", "identity": "alice", "factorType": "push"},
        )

    enrollment = _client(handler).get_enrollment("alice", ENROLL_URL)

    (req,) = seen
    assert req.method == "POST"
    assert str(req.url) == ENROLL_URL
    assert parse_qs(req.content.decode()) == {"identity": ["alice"]}
    assert enrollment == Enrollment(token="enroll-jwe", service_sid="VA0001", identity="alice")
    assert enrollment.factor_type is FactorType.PUSH


def test_get_enrollment_http_error_raises_network_error():
    def handler(request):
        return httpx.Response(500, json={"code": 1, "message": "backend down"})

    with pytest.raises(NetworkError) as exc:
        _client(handler).get_enrollment("alice", ENROLL_URL)

    assert exc.value.status_code == 500
    assert exc.value.failure_response.api_error.message == "backend down"


def test_get_enrollment_non_json_error_body():
    with pytest.raises(NetworkError) as exc:
        _client(lambda r: httpx.Response(502, text="<html>bad gateway</html>")).get_enrollment("alice", ENROLL_URL)

    assert exc.value.failure_response.api_error is None
    assert "bad gateway" in exc.value.failure_response.body


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"token": "t"}),
        httpx.Response(200, json={"token": "t", "serviceSid": "VA1", "identity": "a", "factorType": "sms"}),
    ],
)
def test_get_enrollment_bad_body_is_mapper_error(response):
    with pytest.raises(VerifyError) as exc:
        _client(lambda r: response).get_enrollment("alice", ENROLL_URL)

    assert exc.value.code is ErrorCode.MAPPER_ERROR


def test_get_enrollment_transport_failure():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NetworkError) as exc:
        _client(handler).get_enrollment("alice", ENROLL_URL)

    assert isinstance(exc.value.cause, httpx.ReadTimeout)
    assert exc.value.failure_response is None

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from config import VerifySettings
from networking.transport import create_http_client
from verify_provider import CreateFactorData, VerifyProvider
from verify_sdk.errors import ErrorCode, NetworkError, VerifyError
from verify_sdk.models import AppContext

ENROLL_URL = "https://backend.example.test/enroll"

SETTINGS = VerifySettings(
    account_sid="AC0123456789",
    auth_token="auth-token-secret",
    base_url="https://verify.example.test/v2/",
    backend_url=ENROLL_URL,
)


class FakeServers:
    """Routes requests to a fake enrollment backend and a fake verify API."""

    def __init__(self) -> None:
        self.requests = []
        self.backend_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "backend.example.test":
            if self.backend_status != 200:
                return httpx.Response(self.backend_status, json={"message": "nope"})
            identity = parse_qs(request.content.decode())["identity"][0]
            return httpx.Response(
                200,
                json={"token": "enroll-jwe", "serviceSid": "VA0001", "identity": identity, "factorType": "push"},
            )
        if request.method == "DELETE":
            return httpx.Response(204)
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(
            201,
            json={
                "sid": "YF0001",
                "friendly_name": form.get("FriendlyName", ""),
                "account_sid": "AC0123456789",
                "service_sid": "VA0001",
                "identity": request.url.path.split("/")[5],
                "factor_type": "push",
                "status": "unverified",
                "config": {"push_token": form.get("Config.push_token", "")},
            },
        )


@pytest.fixture
def servers():
    return FakeServers()


@pytest.fixture
def adapter(servers):
    provider = VerifyProvider(
        SETTINGS,
        http_client_factory=lambda s: create_http_client(s, transport=httpx.MockTransport(servers)),
    )
    yield provider.get_instance(AppContext("com.example.sample"))
    provider.reset()


def test_create_factor_fetches_enrollment_then_creates(adapter, servers):
    factor = adapter.create_factor(
        CreateFactorData(identity="alice", friendly_name="alice's factor", enrollment_url=ENROLL_URL, push_token="p1")
    )

    hosts = [r.url.host for r in servers.requests]
    assert hosts == ["backend.example.test", "verify.example.test"]
    assert servers.requests[1].url.path == "/v2/Services/VA0001/Entities/alice/Factors"
    assert factor.sid == "YF0001"
    assert factor.identity == "alice"
    assert factor.friendly_name == "alice's factor"
    assert adapter.get_factors() == [factor]
    assert adapter.get_factor("YF0001") == factor


def test_create_factor_falls_back_to_configured_backend_url(adapter, servers):
    adapter.create_factor(CreateFactorData(identity="bob", friendly_name="bob's factor"))

    assert str(servers.requests[0].url) == ENROLL_URL


@pytest.mark.parametrize(
    "data",
    [
        CreateFactorData(identity="", friendly_name="x", enrollment_url=ENROLL_URL),
        CreateFactorData(identity="   ", friendly_name="x", enrollment_url=ENROLL_URL),
        CreateFactorData(identity="alice", friendly_name="x", enrollment_url="not-a-url"),
    ],
)
def test_create_factor_rejects_bad_input_without_network(adapter, servers, data):
    with pytest.raises(VerifyError) as exc:
        adapter.create_factor(data)

    assert exc.value.code is ErrorCode.INPUT_ERROR
    assert servers.requests == []


def test_create_factor_surfaces_backend_failure(adapter, servers):
    servers.backend_status = 403

    with pytest.raises(NetworkError) as exc:
        adapter.create_factor(CreateFactorData(identity="alice", friendly_name="x", enrollment_url=ENROLL_URL))

    assert exc.value.status_code == 403
    assert adapter.get_factors() == []


def test_update_and_delete_factor(adapter, servers):
    adapter.create_factor(CreateFactorData(identity="alice", friendly_name="alice's factor", enrollment_url=ENROLL_URL))

    updated = adapter.update_factor("YF0001", "push-456")
    assert updated.config["push_token"] == "push-456"

    adapter.delete_factor("YF0001")
    assert adapter.get_factors() == []
    assert servers.requests[-1].method == "DELETE"


def test_clear_local_storage(adapter):
    adapter.create_factor(CreateFactorData(identity="alice", friendly_name="f", enrollment_url=ENROLL_URL))

    adapter.clear_local_storage()

    assert adapter.get_factors() == []

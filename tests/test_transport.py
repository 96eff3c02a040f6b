from __future__ import annotations

import httpx

from config import VerifySettings
from networking.transport import create_http_client, get_http_request_stats
from verify_sdk.networking import BasicAuthorization, HttpMethod, HttpxNetworkProvider, Request


def _settings(**overrides) -> VerifySettings:
    fields = dict(account_sid="AC1", auth_token="t", timeout_sec=3.5, max_connections=4, user_agent="verify-provider/test")
    fields.update(overrides)
    return VerifySettings(**fields)


def test_client_applies_settings_and_counts_requests():
    seen = []

    def handler(request):
        seen.append(request)
        status = 200 if request.url.path == "/ok" else 404
        return httpx.Response(status, json={})

    get_http_request_stats(reset=True)
    client = create_http_client(_settings(), transport=httpx.MockTransport(handler))

    client.get("https://api.example.test/ok")
    client.post("https://api.example.test/missing")

    assert client.timeout.read == 3.5
    assert seen[0].headers["User-Agent"] == "verify-provider/test"

    stats = get_http_request_stats()
    assert stats["total"] == 2
    assert stats["by_method"] == {"GET": 1, "POST": 1}
    assert stats["by_status"] == {"200": 1, "404": 1}
    assert stats["by_host"] == {"api.example.test": 2}
    assert stats["last_60s_total"] == 2
    assert stats["avg_latency_ms"] >= 0.0


def test_stats_reset():
    client = create_http_client(_settings(), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    client.get("https://api.example.test/ok")

    snap = get_http_request_stats(reset=True)

    assert snap["total"] == 0
    assert snap["by_path"] == {}


def test_network_provider_sends_basic_auth_and_form():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    provider = HttpxNetworkProvider(create_http_client(_settings(), transport=httpx.MockTransport(handler)))
    resp = provider.execute(
        Request(
            method=HttpMethod.POST,
            url="https://api.example.test/things",
            authorization=BasicAuthorization("user", "pass"),
            form={"A": "1"},
        )
    )

    (req,) = seen
    assert req.headers["Authorization"] == "Basic dXNlcjpwYXNz"
    assert req.headers["Accept"] == "application/json"
    assert req.content == b"A=1"
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_basic_authorization_repr_hides_password():
    assert "pass" not in repr(BasicAuthorization("user", "pass"))

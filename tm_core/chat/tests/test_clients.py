# tm_core/chat/tests/test_clients.py

import hashlib
import hmac
import json

import httpx
import jwt
import pytest

from tm_core.chat.clients import ObjectStorageClient, RealtimeBusClient, VideoProviderClient
from tm_core.common.api.exceptions import ProviderUnavailable


@pytest.fixture
def bus():
    return RealtimeBusClient(app_id="42", key="key-1", secret="secret-1", cluster="ap2", timeout=1)


@pytest.fixture
def video():
    return VideoProviderClient(
        base_url="https://api.100ms.test/v2",
        access_key="access-1",
        secret="video-secret-long-enough-for-hs256",
        template_id="tmpl-1",
        timeout=1,
    )


def test_bus_query_is_signed_over_method_path_and_sorted_params(bus):
    body = '{"name":"x"}'
    params = bus.signed_query(path="/apps/42/events", body=body, timestamp=1700000000)

    assert params["body_md5"] == hashlib.md5(body.encode()).hexdigest()
    to_sign = "POST\n/apps/42/events\n" + "&".join(
        f"{k}={params[k]}" for k in ("auth_key", "auth_timestamp", "auth_version", "body_md5")
    )
    expected = hmac.new(b"secret-1", to_sign.encode(), hashlib.sha256).hexdigest()
    assert params["auth_signature"] == expected


def test_bus_trigger_posts_to_cluster_host(bus, mock_http):
    bus.trigger(channel="chat-room-1", event="new-message", data={"content": "hi"})

    request = mock_http[0]
    assert request.url.host == "api-ap2.pusher.com"
    assert request.url.path == "/apps/42/events"
    payload = json.loads(request.content)
    assert payload["name"] == "new-message"
    assert payload["channels"] == ["chat-room-1"]
    assert json.loads(payload["data"]) == {"content": "hi"}


def test_bus_error_status_is_provider_unavailable(bus, mock_http):
    mock_http.handler = lambda request: httpx.Response(500, text="boom")

    with pytest.raises(ProviderUnavailable):
        bus.trigger(channel="c", event="e", data={})


def test_bus_timeout_is_provider_unavailable(bus, mock_http):
    def _timeout(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    mock_http.handler = _timeout

    with pytest.raises(ProviderUnavailable):
        bus.trigger(channel="c", event="e", data={})


def test_management_token_claims(video):
    token = video.management_token(now=1700000000)

    claims = jwt.decode(
        token,
        "video-secret-long-enough-for-hs256",
        algorithms=["HS256"],
        options={"verify_exp": False, "verify_nbf": False, "verify_iat": False},
    )
    assert claims["access_key"] == "access-1"
    assert claims["type"] == "management"
    assert claims["version"] == 2
    assert claims["exp"] - claims["iat"] == VideoProviderClient.MANAGEMENT_TOKEN_TTL_SECONDS
    assert claims["jti"]


def test_create_room_sends_template_and_bearer(video, mock_http):
    mock_http.handler = lambda request: httpx.Response(200, json={"id": "r-1", "name": "appointment-1"})

    room = video.create_room(name="appointment-1", description="Video call for appointment 1")

    request = mock_http[0]
    assert request.url.path == "/v2/rooms"
    assert request.headers["Authorization"].startswith("Bearer ")
    assert json.loads(request.content)["template_id"] == "tmpl-1"
    assert room.id == "r-1"


def test_auth_token_without_token_in_body_fails(video, mock_http):
    mock_http.handler = lambda request: httpx.Response(200, json={})

    with pytest.raises(ProviderUnavailable):
        video.auth_token(room_id="r-1", user_id="u-1", role="host", user_name="user-u-1")


def test_object_storage_returns_secure_url(mock_http):
    storage = ObjectStorageClient(cloud_name="demo", upload_preset="med-tech-preset", timeout=1)
    mock_http.handler = lambda request: httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/a.png"})

    url = storage.upload(file_data="data:image/png;base64,AAAA")

    request = mock_http[0]
    assert request.url.path == "/v1_1/demo/auto/upload"
    assert b"upload_preset=med-tech-preset" in request.content
    assert url == "https://res.cloudinary.com/demo/a.png"

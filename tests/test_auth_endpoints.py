try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from page_relay.clients.facebook_graph import GraphAPIError

pytestmark = pytest.mark.anyio


async def test_login_redirects_to_facebook(client):
    response = await client.get("/auth/login")

    assert response.status_code == 302
    assert response.headers["location"].startswith(
        "https://www.facebook.com/v23.0/dialog/oauth"
    )


async def test_callback_stores_record_and_redirects_to_dashboard(relay, client):
    response = await client.get("/auth/callback", params={"code": "abc"})

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert f"{location.scheme}://{location.netloc}" == relay.settings.frontend_base_url
    assert location.path == "/dashboard"
    user_id = parse_qs(location.query)["userId"][0]

    assert relay.graph.calls == [("code", "abc"), ("exchange", "S1"), ("profile", "L1")]

    record = relay.store.get_user(user_id)
    assert record is not None
    assert record.facebook_id == "fb123"
    assert record.name == "Alice"
    assert record.ll_user_token == "L1"
    expected_expiry = datetime.now(timezone.utc) + timedelta(days=60)
    assert abs(record.ll_user_token_expires_at - expected_expiry) < timedelta(minutes=1)
    assert relay.store.count_users() == 1


async def test_repeated_callback_overwrites_record(relay, client):
    first = await client.get("/auth/callback", params={"code": "abc"})
    relay.graph.long_lived = {"access_token": "L2", "expires_in": 5184000}
    second = await client.get("/auth/callback", params={"code": "def"})

    assert first.headers["location"] == second.headers["location"]
    assert relay.store.count_users(facebook_id="fb123") == 1
    user_id = parse_qs(urlparse(second.headers["location"]).query)["userId"][0]
    assert relay.store.get_user(user_id).ll_user_token == "L2"


async def test_callback_failure_returns_generic_error(relay, client):
    relay.graph.error = GraphAPIError(
        {"message": "This authorization code has been used.", "code": 100},
        status_code=400,
    )

    response = await client.get("/auth/callback", params={"code": "used"})

    assert response.status_code == 500
    assert response.text == "Auth failed"
    assert "authorization code" not in response.text
    assert relay.store.count_users() == 0


async def test_callback_without_code_skips_provider(relay, client):
    response = await client.get(
        "/auth/callback",
        params={"error": "access_denied", "error_description": "Permissions error"},
    )

    assert response.status_code == 500
    assert response.text == "Auth failed"
    assert relay.graph.calls == []


async def test_banner_and_favicon(client):
    banner = await client.get("/")
    favicon = await client.get("/favicon.ico")

    assert banner.status_code == 200
    assert banner.headers["content-type"].startswith("text/plain")
    assert banner.text
    assert favicon.status_code == 204
    assert favicon.content == b""


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def _graph_handler(*, short_body, long_body):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/me"):
            return httpx.Response(200, json={"id": "fb123", "name": "Alice"})
        if "grant_type" in request.url.params:
            return httpx.Response(200, json=long_body)
        return httpx.Response(200, json=short_body)

    return handler


async def test_callback_through_real_client_stores_record(relay, client, graph_transport):
    graph_transport(
        _graph_handler(
            short_body={"access_token": "S1"},
            long_body={"access_token": "L1", "expires_in": 5184000},
        )
    )

    response = await client.get("/auth/callback", params={"code": "abc"})

    assert response.status_code == 302
    assert relay.store.get_user_by_facebook_id("fb123").ll_user_token == "L1"


@pytest.mark.parametrize(
    "short_body, long_body",
    [
        ([], {"access_token": "L1"}),
        ({"access_token": "S1"}, {"access_token": "L1", "expires_in": "never"}),
        ({"access_token": "S1"}, ["L1"]),
    ],
)
async def test_callback_malformed_token_body_is_auth_failed(
    relay, client, graph_transport, short_body, long_body
):
    graph_transport(_graph_handler(short_body=short_body, long_body=long_body))

    response = await client.get("/auth/callback", params={"code": "abc"})

    assert response.status_code == 500
    assert response.text == "Auth failed"
    assert relay.store.count_users() == 0


async def test_callback_provider_timeout_is_auth_failed(relay, client, graph_transport):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    graph_transport(handler)

    response = await client.get("/auth/callback", params={"code": "abc"})

    assert response.status_code == 500
    assert response.text == "Auth failed"
    assert relay.store.count_users() == 0

"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except ImportError:  # pragma: no cover - tests/ is not a package
    import _bootstrap  # type: ignore # noqa: F401

import copy
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from page_relay.clients.automation_webhook import AutomationWebhookClient
from page_relay.clients.facebook_graph import FacebookGraphClient, GraphAPIError
from page_relay.clients.user_store import UserStore
from page_relay.schemas import FacebookProfile, ManagedPage
from page_relay.services.token_cipher import TokenCipherService


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture()
def user_store(tmp_path) -> UserStore:
    """A fresh SQLite-backed store per test."""
    return UserStore(
        str(tmp_path / "users.db"),
        cipher=TokenCipherService(secret="store-secret"),
    )


class RecordingStore:
    """Wraps a real store and counts every access."""

    def __init__(self, inner: UserStore) -> None:
        self._inner = inner
        self.accesses: list[str] = []

    def __getattr__(self, name: str) -> Any:
        self.accesses.append(name)
        return getattr(self._inner, name)


class FakeGraphClient:
    """Stands in for the Graph API; counts calls made through it."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.short_lived = "S1"
        self.long_lived = {"access_token": "L1", "expires_in": 5184000}
        self.profile = FacebookProfile(id="fb123", name="Alice")
        self.pages = [ManagedPage(id="p1", name="Bakery")]
        self.error: GraphAPIError | None = None

    def build_authorization_url(self) -> str:
        return "https://www.facebook.com/v23.0/dialog/oauth?client_id=test-app-id"

    def _record(self, name: str, value: str) -> None:
        self.calls.append((name, value))
        if self.error is not None:
            raise self.error

    async def exchange_authorization_code(self, code: str) -> str:
        self._record("code", code)
        return self.short_lived

    async def exchange_for_long_lived_token(self, token: str):
        self._record("exchange", token)
        return self.long_lived["access_token"], self.long_lived.get("expires_in")

    async def fetch_profile(self, token: str) -> FacebookProfile:
        self._record("profile", token)
        return self.profile

    async def list_managed_pages(self, token: str) -> list[ManagedPage]:
        self._record("pages", token)
        return self.pages


class FakeWebhookClient:
    def __init__(self) -> None:
        self.payloads: list[dict] = []
        self.error: Exception | None = None

    async def trigger(self, payload: dict) -> None:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error


@dataclass
class RelayDoubles:
    graph: FakeGraphClient
    webhook: FakeWebhookClient
    store: RecordingStore
    settings: Any


@pytest.fixture()
def relay(user_store):
    from page_relay import dependencies
    from page_relay.core.config import get_settings
    from page_relay.main import app

    doubles = RelayDoubles(
        graph=FakeGraphClient(),
        webhook=FakeWebhookClient(),
        store=RecordingStore(user_store),
        settings=copy.deepcopy(get_settings()),
    )

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_facebook_graph_client: lambda: doubles.graph,
            dependencies.get_automation_webhook_client: lambda: doubles.webhook,
            dependencies.get_user_store: lambda: doubles.store,
            dependencies.get_app_settings: lambda: doubles.settings,
        }
    )

    yield doubles

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(relay):
    from page_relay.main import app

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


@pytest.fixture()
def graph_transport(relay):
    """Route graph calls through a real client answered by ``handler``."""
    from page_relay import dependencies
    from page_relay.main import app

    def install(handler) -> FacebookGraphClient:
        graph = FacebookGraphClient(
            relay.settings.facebook,
            timeout=1.0,
            transport=httpx.MockTransport(handler),
        )
        app.dependency_overrides[dependencies.get_facebook_graph_client] = lambda: graph
        return graph

    return install


@pytest.fixture()
def webhook_transport(relay):
    """Route webhook calls through a real client answered by ``handler``."""
    from page_relay import dependencies
    from page_relay.main import app

    def install(handler) -> AutomationWebhookClient:
        webhook = AutomationWebhookClient(
            webhook_url=relay.settings.automation.webhook_url,
            internal_api_key=relay.settings.automation.internal_api_key,
            timeout=1.0,
            transport=httpx.MockTransport(handler),
        )
        app.dependency_overrides[dependencies.get_automation_webhook_client] = (
            lambda: webhook
        )
        return webhook

    return install


@pytest.fixture()
def fresh_store_path(relay, tmp_path):
    """Build a brand-new store on every request, as on a cold start."""
    from page_relay import dependencies
    from page_relay.main import app

    db_path = tmp_path / "cold" / "users.db"
    app.dependency_overrides[dependencies.get_user_store] = lambda: UserStore(
        str(db_path), cipher=TokenCipherService(secret="store-secret")
    )
    return db_path

"""Shared test fixtures."""

import asyncio
from pathlib import Path

import httpx
import pytest

from devhub.config import DevHubConfig
from devhub.connectors import ConnectorFactories
from devhub.contracts import CredentialField
from devhub.errors import ConnectError, CredentialValidationError
from devhub.events import EventBus
from devhub.models import ServiceKind
from devhub.registry import ServiceRegistry
from devhub.storage import MemoryGlobalState


class FakeConnector:
    """Connector double with a scripted outcome.

    Class-level counters let tests see how many instances were built
    and how many are live at once.
    """

    kind = ServiceKind.GITHUB
    credential_fields = (CredentialField("token", "GITHUB_TOKEN", "Token"),)

    created = 0
    live = 0
    outcome = "ok"  # ok | invalid | fail | false
    gate: asyncio.Event | None = None

    def __init__(self) -> None:
        type(self).created += 1
        self._connected = False
        self.disconnects = 0

    @property
    def connected(self) -> bool:
        return self._connected

    def get_connection_status(self) -> bool:
        return self._connected

    async def connect(self, credentials) -> bool:
        if type(self).gate is not None:
            await type(self).gate.wait()
        if self.outcome == "invalid":
            raise CredentialValidationError(self.kind.value, "Invalid token format")
        if self.outcome == "fail":
            raise ConnectError(self.kind.value, "GitHub rejected the credentials (401)")
        if self.outcome == "false":
            return False
        self._connected = True
        type(self).live += 1
        return True

    async def disconnect(self) -> None:
        self.disconnects += 1
        if self._connected:
            type(self).live -= 1
        self._connected = False

    @classmethod
    def reset(cls) -> None:
        cls.created = 0
        cls.live = 0
        cls.outcome = "ok"
        cls.gate = None


@pytest.fixture
def fake_connector():
    FakeConnector.reset()
    yield FakeConnector
    FakeConnector.reset()


@pytest.fixture
def factories(fake_connector):
    """Factories with the fake connector registered for github."""
    f = ConnectorFactories()
    f.register(ServiceKind.GITHUB, fake_connector)
    return f


@pytest.fixture
def store():
    return MemoryGlobalState()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    """Every event published on the bus, in order."""
    received = []
    bus.subscribe(received.append)
    return received


@pytest.fixture
def registry(store, bus, factories):
    return ServiceRegistry(store, bus, factories)


@pytest.fixture
def config(tmp_path):
    """Configuration rooted in a temp directory."""
    return DevHubConfig(
        host="127.0.0.1",
        port=19300,  # Different port for tests
        runtime_dir=tmp_path / "runtime",
        cline_settings_path=tmp_path / "cline" / "cline_mcp_settings.json",
    )


def json_transport(routes: dict[str, tuple[int, object]]) -> httpx.MockTransport:
    """MockTransport answering `routes[path] = (status, json)`; 404 otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes.get(request.url.path, (404, {"message": "Not Found"}))
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def root_dir(tmp_path) -> Path:
    root = tmp_path / "root"
    root.mkdir()
    (root / "README.md").write_text("hello")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("print('hi')\n")
    return root

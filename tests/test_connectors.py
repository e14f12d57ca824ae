"""Tests for the service connectors and the factory table."""

from functools import partial

import httpx
import pytest
from bson import ObjectId

from devhub.connectors import BUILTIN, ConnectorFactories, HTTPConnector, default_factories
from devhub.connectors.auth import AuthConnector
from devhub.connectors.browser import BrowserConnector
from devhub.connectors.desktop_commander import DesktopCommanderConnector
from devhub.connectors.filesystem import FilesystemConnector
from devhub.connectors.github import GitHubConnector
from devhub.connectors.lemonsqueezy import LemonSqueezyConnector
from devhub.connectors.mongodb import MongoDBConnector
from devhub.connectors.sequential_thinking import SequentialThinkingConnector
from devhub.connectors.stripe import StripeConnector
from devhub.connectors.supabase import SupabaseConnector
from devhub.connectors.taskmaster import TaskmasterConnector
from devhub.errors import (
    ConnectError,
    ConnectorUnavailableError,
    CredentialValidationError,
    NotConnectedError,
)
from devhub.models import ServiceKind

from conftest import json_transport


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        return self._docs[:length]


class FakeCollection:
    def __init__(self):
        self.docs = []

    def find(self, filter, limit=0):
        return FakeCursor([d for d in self.docs if all(d.get(k) == v for k, v in filter.items())])

    async def insert_one(self, document):
        document = {"_id": ObjectId(), **document}
        self.docs.append(document)

        class Result:
            inserted_id = document["_id"]
            acknowledged = True

        return Result()


class FakeDatabase:
    def __init__(self, name):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())

    async def list_collection_names(self):
        return list(self.collections)

    async def command(self, name):
        return {"db": self.name, "collections": len(self.collections), "objects": 0}


class FakeMongoClient:
    """Stand-in for AsyncMongoClient: admin commands and item access."""

    instances = []

    def __init__(self, uri, *, ping_error=None, **options):
        self.uri = uri
        self.options = options
        self.ping_error = ping_error
        self.closed = False
        self.databases = {}
        self.admin = self
        FakeMongoClient.instances.append(self)

    async def command(self, name):
        if name == "ping":
            if self.ping_error:
                raise self.ping_error
            return {"ok": 1}
        if name == "listDatabases":
            return {"databases": [{"name": "admin", "sizeOnDisk": 40960, "empty": False}]}
        raise AssertionError(name)

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase(name))

    async def close(self):
        self.closed = True


class TestBaseLifecycle:
    """Shared connect/disconnect behavior."""

    @pytest.mark.asyncio
    async def test_not_connected_before_connect(self):
        """Domain operations before connect raise NotConnectedError."""
        connector = AuthConnector()

        assert connector.connected is False
        with pytest.raises(NotConnectedError):
            await connector.list_providers()

    @pytest.mark.asyncio
    async def test_connect_then_disconnect(self):
        connector = AuthConnector()

        assert await connector.connect({"api_key": "0123456789"}) is True
        assert connector.get_connection_status() is True

        await connector.disconnect()

        assert connector.connected is False
        with pytest.raises(NotConnectedError):
            await connector.list_providers()

    @pytest.mark.asyncio
    async def test_disconnect_when_not_connected(self):
        """disconnect on a fresh connector is harmless."""
        connector = AuthConnector()

        await connector.disconnect()

        assert connector.connected is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cls,key", [
        (AuthConnector, "short"),
        (SequentialThinkingConnector, "123456789"),
        (TaskmasterConnector, "abcd"),
        (BrowserConnector, ""),
    ])
    async def test_short_keys_rejected(self, cls, key):
        """Keys under the minimum length fail before connecting."""
        connector = cls()

        with pytest.raises(CredentialValidationError):
            await connector.connect({"api_key": key})

        assert connector.connected is False

    @pytest.mark.asyncio
    async def test_failed_reconnect_leaves_disconnected(self):
        """A failed connect on a connected instance leaves it disconnected."""
        connector = AuthConnector()
        await connector.connect({"api_key": "0123456789"})

        with pytest.raises(CredentialValidationError):
            await connector.connect({"api_key": "x"})

        assert connector.connected is False


class TestHTTPConnectors:
    """REST connectors against httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_github_check_and_repositories(self):
        """GitHub checks /user then lists repositories."""
        transport = json_transport({
            "/user": (200, {"login": "octocat"}),
            "/user/repos": (200, [{
                "id": 1,
                "name": "hello",
                "full_name": "octocat/hello",
                "private": False,
                "html_url": "https://github.com/octocat/hello",
                "stargazers_count": 3,
            }]),
        })
        connector = GitHubConnector(transport=transport)

        assert await connector.connect({"token": "ghp_abc"}) is True
        repos = await connector.list_repositories()

        assert repos[0]["full_name"] == "octocat/hello"
        assert repos[0]["stars"] == 3
        assert repos[0]["forks"] == 0
        await connector.disconnect()

    @pytest.mark.asyncio
    async def test_github_sends_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json={"login": "octocat"})

        connector = GitHubConnector(transport=httpx.MockTransport(handler))
        await connector.connect({"token": "ghp_abc"})

        assert seen == ["Bearer ghp_abc"]

    @pytest.mark.asyncio
    async def test_github_issues_exclude_pull_requests(self):
        transport = json_transport({
            "/user": (200, {"login": "octocat"}),
            "/repos/octocat/hello/issues": (200, [
                {"number": 1, "title": "Bug", "state": "open", "html_url": "u1"},
                {"number": 2, "title": "PR", "state": "open", "pull_request": {}},
            ]),
        })
        connector = GitHubConnector(transport=transport)
        await connector.connect({"token": "ghp_abc"})

        issues = await connector.list_issues("octocat", "hello")

        assert [i["number"] for i in issues] == [1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credentials(self, status):
        """401/403 from the check endpoint raise ConnectError."""
        connector = GitHubConnector(transport=json_transport({"/user": (status, {})}))

        with pytest.raises(ConnectError) as exc_info:
            await connector.connect({"token": "ghp_revoked"})

        assert str(status) in exc_info.value.reason
        assert connector.connected is False

    @pytest.mark.asyncio
    async def test_unreachable(self):
        """Transport errors raise ConnectError."""

        def handler(request):
            raise httpx.ConnectError("connection refused")

        connector = GitHubConnector(transport=httpx.MockTransport(handler))

        with pytest.raises(ConnectError, match="unreachable"):
            await connector.connect({"token": "ghp_abc"})

    @pytest.mark.asyncio
    async def test_request_failure_after_connect(self):
        """A failing domain call raises ConnectorUnavailableError."""
        connector = GitHubConnector(transport=json_transport({"/user": (200, {"login": "x"})}))
        await connector.connect({"token": "ghp_abc"})

        with pytest.raises(ConnectorUnavailableError, match="404"):
            await connector.get_repository("octocat", "missing")

    @pytest.mark.asyncio
    async def test_stripe_key_prefix(self):
        """Stripe rejects keys that don't start with sk_ without a request."""

        def handler(request):
            raise AssertionError("no request expected")

        connector = StripeConnector(transport=httpx.MockTransport(handler))

        with pytest.raises(CredentialValidationError, match="sk_"):
            await connector.connect({"api_key": "pk_test_123"})

    @pytest.mark.asyncio
    async def test_stripe_basic_auth_and_customers(self):
        """Stripe authenticates with the key as basic-auth user."""
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            if request.url.path == "/v1/account":
                return httpx.Response(200, json={"id": "acct_1"})
            return httpx.Response(200, json={"data": [{"id": "cus_1", "email": "a@b.c"}]})

        connector = StripeConnector(transport=httpx.MockTransport(handler))
        await connector.connect({"api_key": "sk_test_123"})

        customers = await connector.list_customers(limit=1)

        assert customers[0]["id"] == "cus_1"
        assert seen[0].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_lemonsqueezy_flattens_resources(self):
        transport = json_transport({
            "/v1/users/me": (200, {"data": {"attributes": {"email": "me@x.y"}}}),
            "/v1/products": (200, {"data": [{"id": "7", "attributes": {"name": "Pro"}}]}),
        })
        connector = LemonSqueezyConnector(transport=transport)
        await connector.connect({"api_key": "ls_key"})

        assert await connector.list_products() == [{"id": "7", "name": "Pro"}]


class TestMongoDBConnector:
    def setup_method(self):
        FakeMongoClient.instances.clear()

    @pytest.mark.asyncio
    async def test_connection_string_scheme(self):
        """Non-mongodb URIs fail before a client is built."""
        connector = MongoDBConnector(client_factory=FakeMongoClient)

        with pytest.raises(CredentialValidationError):
            await connector.connect({"connection_string": "postgres://localhost"})

        assert FakeMongoClient.instances == []

    @pytest.mark.asyncio
    async def test_ping_failure_closes_client(self):
        """A failed ping raises ConnectError and closes the client."""
        connector = MongoDBConnector(
            client_factory=partial(FakeMongoClient, ping_error=OSError("no servers"))
        )

        with pytest.raises(ConnectError, match="no servers"):
            await connector.connect({"connection_string": "mongodb://localhost"})

        assert FakeMongoClient.instances[0].closed is True
        assert connector.connected is False

    @pytest.mark.asyncio
    async def test_operations(self):
        """Databases, inserts and queries go through the client."""
        connector = MongoDBConnector(timeout=2.0, client_factory=FakeMongoClient)
        await connector.connect({"connection_string": "mongodb://localhost", "database": "app"})

        client = FakeMongoClient.instances[0]
        assert client.options["serverSelectionTimeoutMS"] == 2000

        assert (await connector.list_databases())[0]["name"] == "admin"
        inserted = await connector.insert_document("users", {"name": "ada"})
        found = await connector.find_documents("users", {"name": "ada"})

        assert found[0]["_id"] == {"$oid": inserted["inserted_id"]}
        assert await connector.list_collections() == ["users"]
        assert (await connector.get_stats())["db"] == "app"

        await connector.disconnect()
        assert client.closed is True


class TestFilesystemConnector:
    @pytest.mark.asyncio
    async def test_root_must_exist(self, tmp_path):
        connector = FilesystemConnector()

        with pytest.raises(CredentialValidationError):
            await connector.connect({"root_path": str(tmp_path / "missing")})

    @pytest.mark.asyncio
    async def test_file_operations(self, root_dir):
        connector = FilesystemConnector()
        await connector.connect({"root_path": str(root_dir)})

        names = [e["name"] for e in await connector.list_directory()]
        assert names == ["README.md", "src"]
        assert await connector.read_file("README.md") == "hello"

        await connector.write_file("docs/notes.txt", "  indented\n")
        assert await connector.read_file("docs/notes.txt") == "  indented\n"
        assert await connector.search_files("*.py") == ["src/app.py"]

        await connector.delete_file("docs/notes.txt")
        assert not (root_dir / "docs" / "notes.txt").exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["../secret", "/etc/passwd", "src/../../x"])
    async def test_paths_outside_root_rejected(self, root_dir, path):
        """Paths resolving outside the root are rejected."""
        connector = FilesystemConnector()
        await connector.connect({"root_path": str(root_dir)})

        with pytest.raises(ConnectorUnavailableError, match="escapes root"):
            await connector.read_file(path)


class TestLocalConnectors:
    """Connectors that serve data without a remote call."""

    @pytest.mark.asyncio
    async def test_taskmaster_task_flow(self):
        """Create, complete and count tasks; disconnect drops them."""
        connector = TaskmasterConnector()
        await connector.connect({"api_key": "tm_key"})

        task = await connector.create_task("proj_1", "Write docs", tags=["docs"])
        await connector.create_task("proj_1", "Ship")
        await connector.complete_task(task["id"])

        stats = await connector.get_project_stats("proj_1")
        assert task["id"] == "task_1"
        assert stats["total_tasks"] == 2
        assert stats["completed_tasks"] == 1
        assert stats["completion_percentage"] == 50.0

        await connector.disconnect()
        await connector.connect({"api_key": "tm_key"})
        assert await connector.list_tasks("proj_1") == []

    @pytest.mark.asyncio
    async def test_taskmaster_unknown_project(self):
        connector = TaskmasterConnector()
        await connector.connect({"api_key": "tm_key"})

        with pytest.raises(ConnectorUnavailableError, match="Project not found"):
            await connector.create_task("proj_9", "x")

    @pytest.mark.asyncio
    async def test_taskmaster_invalid_status(self):
        connector = TaskmasterConnector()
        await connector.connect({"api_key": "tm_key"})
        task = await connector.create_task("proj_2", "x")

        with pytest.raises(ConnectorUnavailableError, match="Invalid status"):
            await connector.update_task(task["id"], status="blocked")

    @pytest.mark.asyncio
    async def test_sequential_thinking_chain(self):
        """solve builds four steps; backtrack keeps the ones before the step."""
        connector = SequentialThinkingConnector()
        await connector.connect({"api_key": "0123456789"})

        chain = await connector.solve("Scale the API")
        assert len(chain["steps"]) == 4

        revised = await connector.revise_step(chain["id"], 2, "Use a queue")
        assert revised["steps"][1]["reasoning"] == "Use a queue"

        trimmed = await connector.backtrack(chain["id"], 3)
        assert [s["step"] for s in trimmed["steps"]] == [1, 2]

        with pytest.raises(ConnectorUnavailableError):
            await connector.backtrack("unknown", 1)

    @pytest.mark.asyncio
    async def test_auth_oauth_url(self):
        connector = AuthConnector()
        await connector.connect({"api_key": "0123456789"})

        result = await connector.create_oauth_url("github", "client", "http://localhost/cb")

        assert result["url"].startswith("https://github.com/login/oauth/authorize?")
        assert f"state={result['state']}" in result["url"]
        with pytest.raises(ConnectorUnavailableError):
            await connector.get_provider_info("myspace")

    @pytest.mark.asyncio
    async def test_browser_rejects_invalid_urls(self):
        connector = BrowserConnector()
        await connector.connect({"api_key": "br_key"})

        session = await connector.navigate("https://example.com")
        assert session["status"] == "loaded"
        with pytest.raises(ConnectorUnavailableError):
            await connector.navigate("file:///etc/passwd")

    @pytest.mark.asyncio
    async def test_desktop_commander_never_executes(self):
        """execute_command only records a dry run."""
        connector = DesktopCommanderConnector()
        await connector.connect({"api_key": "dc_key"})

        result = await connector.execute_command("rm -rf /")

        assert result["executed"] is False
        assert await connector.command_history() == [result]

    @pytest.mark.asyncio
    async def test_supabase_requires_https_project_url(self):
        connector = SupabaseConnector()

        with pytest.raises(CredentialValidationError, match="https"):
            await connector.connect({"api_key": "key", "project_url": "http://x.supabase.co"})

        await connector.connect({"api_key": "key", "project_url": "https://x.supabase.co"})
        assert (await connector.get_auth_config())["project_url"] == "https://x.supabase.co"


class TestFactories:
    def test_default_factories_cover_every_kind(self):
        """Every service kind has a factory and tools."""
        factories = default_factories()

        assert set(factories.kinds()) == set(ServiceKind)
        for kind in ServiceKind:
            assert factories.tools(kind), kind

    def test_create_builds_fresh_instances(self):
        factories = default_factories()

        first = factories.create(ServiceKind.GITHUB)
        second = factories.create("github")

        assert isinstance(first, GitHubConnector)
        assert first is not second

    def test_http_connectors_get_timeout_and_transport(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        factories = default_factories(timeout=5.0, transport=transport)

        for kind, (cls, _) in BUILTIN.items():
            if issubclass(cls, HTTPConnector):
                connector = factories.create(kind)
                assert connector.timeout == 5.0
                assert connector._transport is transport

    def test_check_credentials_runs_format_check_only(self):
        """Format check without a connection; unregistered kinds accept anything."""
        factories = default_factories()

        factories.check_credentials(ServiceKind.STRIPE, {"api_key": "sk_test_1"})
        with pytest.raises(CredentialValidationError):
            factories.check_credentials(ServiceKind.STRIPE, {"api_key": "pk_test_1"})

        ConnectorFactories().check_credentials(ServiceKind.STRIPE, {})

    def test_credential_fields_from_class(self):
        """Fields default to the factory's credential_fields."""
        factories = ConnectorFactories()
        factories.register(ServiceKind.STRIPE, partial(StripeConnector, timeout=1.0))

        assert [f.key for f in factories.credential_fields("stripe")] == ["api_key"]

    def test_duplicate_registration(self):
        factories = ConnectorFactories()
        factories.register(ServiceKind.AUTH, AuthConnector)

        with pytest.raises(ValueError):
            factories.register(ServiceKind.AUTH, AuthConnector)
        factories.register(ServiceKind.AUTH, AuthConnector, replace=True)

    def test_unknown_kind(self):
        with pytest.raises(KeyError):
            ConnectorFactories().create(ServiceKind.FIGMA)

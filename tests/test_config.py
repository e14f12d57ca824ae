"""Unit tests for configuration, models and the tool base class."""

from pathlib import Path

import pytest
from pydantic import Field

from devhub.config import DevHubConfig, _get_env, _get_env_float, _get_env_path
from devhub.models import HubState, ServiceDescriptor, ServiceKind, ServiceStatus
from devhub.tools import Tool


class TestConfig:
    """Test configuration loading."""

    def test_derived_paths(self, tmp_path):
        """State and log paths live under the runtime dir."""
        config = DevHubConfig(runtime_dir=tmp_path)

        assert config.state_file == tmp_path / "state" / "global_state.json"
        assert config.log_file == tmp_path / "logs" / "devhub.log"

    def test_dashboard_url(self):
        assert DevHubConfig(host="127.0.0.1", port=9400).dashboard_url == "http://127.0.0.1:9400"

    def test_ensure_dirs(self, tmp_path):
        config = DevHubConfig(runtime_dir=tmp_path / "rt")

        config.ensure_dirs()

        assert config.state_dir.is_dir()
        assert config.log_dir.is_dir()

    def test_config_is_immutable(self):
        """Config dataclass is frozen."""
        config = DevHubConfig()

        with pytest.raises(Exception):  # FrozenInstanceError
            config.port = 8080


class TestEnvHelpers:
    def test_get_env_returns_default(self):
        assert _get_env("NONEXISTENT_KEY", "default") == "default"

    def test_get_env_prefixed(self, monkeypatch):
        monkeypatch.setenv("DEVHUB_NAMESPACE", "hub")

        assert _get_env("NAMESPACE", "devhub") == "hub"

    def test_get_env_float(self, monkeypatch):
        monkeypatch.setenv("DEVHUB_HTTP_TIMEOUT", "2.5")

        assert _get_env_float("HTTP_TIMEOUT", 30.0) == 2.5

    def test_get_env_path_expands_user(self, monkeypatch):
        monkeypatch.setenv("DEVHUB_CLINE_SETTINGS", "~/cline.json")

        assert _get_env_path("CLINE_SETTINGS", None) == Path("~/cline.json").expanduser()


class TestModels:
    def test_descriptor_defaults(self):
        service = ServiceDescriptor(id="gh", name="GitHub", kind="github")

        assert service.status is ServiceStatus.DISCONNECTED
        assert service.config == {}
        assert service.last_error is None

    def test_persisted_aliases(self):
        """The persisted record uses camelCase keys and loads them back."""
        state = HubState(servers=[ServiceDescriptor(id="gh", name="GitHub", kind="github")])

        dumped = state.model_dump(mode="json", by_alias=True)

        assert dumped["isConnecting"] is False
        assert "lastError" in dumped["servers"][0]
        assert HubState.model_validate(dumped).servers[0].kind is ServiceKind.GITHUB


class Echo(Tool):
    """Echo the message back.

    Second line is not part of the description.
    """

    message: str = Field(..., description="Message")

    async def execute(self, connector):
        return self.message


class Named(Tool):
    class Meta:
        name = "custom_name"
        description = "Custom description"

    async def execute(self, connector):
        return None


class TestTool:
    def test_name_from_class(self):
        assert Echo.get_name() == "echo"
        assert Named.get_name() == "custom_name"

    def test_description(self):
        assert Echo.get_description() == "Echo the message back."
        assert Named.get_description() == "Custom description"

    def test_schema_has_no_titles(self):
        schema = Echo.input_schema()

        assert "title" not in schema
        assert schema["properties"]["message"] == {"type": "string", "description": "Message"}

    def test_empty_schema_has_properties(self):
        assert Named.input_schema()["properties"] == {}

    @pytest.mark.asyncio
    async def test_strips_whitespace(self):
        assert await Echo(message="  hi  ").execute(None) == "hi"

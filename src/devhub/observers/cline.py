"""
Cline Sync - Exports Connected services to Cline's MCP settings file.

Reacts to StatusChanged into Connected (write `<namespace>-<id>`) and
into Disconnected (remove it). Connecting and Error are ignored. A config
update on a Connected service rewrites its entry.

File shape:
    {"mcpServers": {"devhub-gh": {"command", "args", "env", "disabled", "autoApprove"}}}

Entries not owned by the namespace are left untouched.
"""

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from ..events import ConfigUpdated, LifecycleEvent, StatusChanged
from ..models import ServiceDescriptor, ServiceStatus
from ..registry import ServiceRegistry

__all__ = ["ClineSync", "default_settings_path"]

logger = structlog.get_logger(__name__)

CLINE_SETTINGS = "Code/User/globalStorage/saoudrizwan.claude-dev/settings/cline_mcp_settings.json"

_PLATFORM_ROOTS = {
    "darwin": "Library/Application Support",
    "win32": "AppData/Roaming",
    "linux": ".config",
}


def default_settings_path(platform: str | None = None, home: Path | None = None) -> Path:
    """Cline settings file for the current OS (macOS layout as fallback)."""
    platform = platform or sys.platform
    home = home or Path.home()
    if platform.startswith("linux"):
        platform = "linux"
    root = _PLATFORM_ROOTS.get(platform, _PLATFORM_ROOTS["darwin"])
    return home / root / CLINE_SETTINGS


class ClineSync:
    """Keeps Cline's MCP settings in step with connected services.

    Example:
        sync = ClineSync(registry, settings_path=tmp_path / "cline.json")
        sync.attach()
        await registry.connect("gh", {"token": "ghp_..."})
        sync.exported_servers()  # ["gh"]
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        settings_path: Path | None = None,
        namespace: str = "devhub",
        python: str | None = None,
    ) -> None:
        self._registry = registry
        self.settings_path = Path(settings_path) if settings_path else default_settings_path()
        self.namespace = namespace
        self.python = python or sys.executable
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._registry.bus.subscribe(
                self._on_event, StatusChanged, ConfigUpdated
            )

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def entry_name(self, service_id: str) -> str:
        return f"{self.namespace}-{service_id}"

    def _on_event(self, event: LifecycleEvent) -> None:
        if isinstance(event, StatusChanged):
            if event.status is ServiceStatus.CONNECTED:
                self._add(event.service_id)
            elif event.status is ServiceStatus.DISCONNECTED:
                self._remove(event.service_id)
        elif isinstance(event, ConfigUpdated):
            service = self._registry.get_service(event.service.id)
            if service and service.status is ServiceStatus.CONNECTED:
                self._add(service.id)

    # --- File access ---

    def _read(self) -> dict[str, Any]:
        try:
            settings = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {"mcpServers": {}}
        except (OSError, ValueError) as e:
            logger.warning("cline_settings_unreadable", path=str(self.settings_path), error=str(e))
            return {"mcpServers": {}}
        if not isinstance(settings, dict):
            return {"mcpServers": {}}
        if not isinstance(settings.get("mcpServers"), dict):
            settings["mcpServers"] = {}
        return settings

    def _write(self, settings: dict[str, Any]) -> bool:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            self.settings_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("cline_settings_write_failed", path=str(self.settings_path), error=str(e))
            return False
        return True

    # --- Entries ---

    def build_entry(self, service: ServiceDescriptor) -> dict[str, Any]:
        env = {}
        for f in self._registry.factories.credential_fields(service.kind):
            value = service.config.get(f.key)
            if value not in (None, ""):
                env[f.env_var] = str(value)
        env["MCP_MODE"] = "stdio"
        return {
            "command": self.python,
            "args": ["-m", "devhub.servers", service.kind.value],
            "env": env,
            "disabled": False,
            "autoApprove": [],
        }

    def _add(self, service_id: str) -> bool:
        service = self._registry.get_service(service_id)
        if service is None:
            logger.warning("cline_service_missing", service_id=service_id)
            return False
        settings = self._read()
        settings["mcpServers"][self.entry_name(service_id)] = self.build_entry(service)
        if self._write(settings):
            logger.info("cline_entry_added", entry=self.entry_name(service_id))
            return True
        return False

    def _remove(self, service_id: str) -> bool:
        settings = self._read()
        if settings["mcpServers"].pop(self.entry_name(service_id), None) is None:
            return False
        if self._write(settings):
            logger.info("cline_entry_removed", entry=self.entry_name(service_id))
            return True
        return False

    def sync_all_connected(self) -> int:
        """Write an entry for every Connected service. Returns the count."""
        connected = [
            s for s in self._registry.list_services() if s.status is ServiceStatus.CONNECTED
        ]
        return sum(1 for s in connected if self._add(s.id))

    def exported_servers(self) -> list[str]:
        """Service ids currently exported under the namespace."""
        prefix = f"{self.namespace}-"
        if not self.settings_path.exists():
            return []
        return sorted(
            key[len(prefix):] for key in self._read()["mcpServers"] if key.startswith(prefix)
        )

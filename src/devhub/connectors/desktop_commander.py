"""
Desktop Commander Connector - host system information.

Commands are never executed; execute_command records the request and
returns a dry-run result.
"""

import os
import platform
import shutil
from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["DesktopCommanderConnector", "TOOLS"]


class DesktopCommanderConnector(ApiKeyConnector):
    kind = ServiceKind.DESKTOP_COMMANDER
    display_name = "Desktop Commander"
    min_key_length = 5
    credential_fields = (
        CredentialField("api_key", "DESKTOP_COMMANDER_API_KEY", "Desktop Commander API key"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.history: list[dict[str, Any]] = []

    async def _close(self) -> None:
        self.history.clear()

    async def get_system_stats(self) -> dict[str, Any]:
        self._require_connected()
        disk = shutil.disk_usage(os.path.expanduser("~"))
        return {
            "platform": platform.system(),
            "release": platform.release(),
            "python": platform.python_version(),
            "cpu_count": os.cpu_count(),
            "disk_total": disk.total,
            "disk_free": disk.free,
        }

    async def execute_command(self, command: str) -> dict[str, Any]:
        self._require_connected()
        entry = {
            "command": command,
            "executed": False,
            "output": f"dry run: {command}",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.history.append(entry)
        return entry

    async def command_history(self) -> list[dict]:
        self._require_connected()
        return list(self.history)


class GetSystemStats(Tool):
    """Host platform, CPU and disk information."""

    async def execute(self, connector: DesktopCommanderConnector) -> Any:
        return await connector.get_system_stats()


class ExecuteCommand(Tool):
    """Record a shell command (dry run)."""

    command: str = Field(..., min_length=1, description="Command line")

    async def execute(self, connector: DesktopCommanderConnector) -> Any:
        return await connector.execute_command(self.command)


class CommandHistory(Tool):
    """Commands recorded during this connection."""

    async def execute(self, connector: DesktopCommanderConnector) -> Any:
        return await connector.command_history()


TOOLS = (GetSystemStats, ExecuteCommand, CommandHistory)

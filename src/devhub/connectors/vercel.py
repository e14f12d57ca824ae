"""
Vercel Connector - projects, deployments and environment variables.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["VercelConnector", "TOOLS"]

PROJECTS = (
    {"id": "prj_devhub", "name": "devhub-web", "framework": "nextjs"},
    {"id": "prj_docs", "name": "devhub-docs", "framework": "astro"},
)


class VercelConnector(ApiKeyConnector):
    kind = ServiceKind.VERCEL
    display_name = "Vercel"
    min_key_length = 10
    credential_fields = (CredentialField("api_key", "VERCEL_API_KEY", "Vercel token"),)

    def __init__(self) -> None:
        super().__init__()
        self.env: dict[str, dict[str, dict[str, str]]] = {}

    async def _close(self) -> None:
        self.env.clear()

    async def list_projects(self) -> list[dict]:
        self._require_connected()
        return [dict(p) for p in PROJECTS]

    async def list_deployments(self, project_id: str) -> list[dict]:
        self._require_connected()
        return [
            {"id": "dpl_1", "project_id": project_id, "state": "READY", "target": "production"},
            {"id": "dpl_2", "project_id": project_id, "state": "READY", "target": "preview"},
        ]

    async def get_environment_variables(self, project_id: str) -> list[dict]:
        self._require_connected()
        return [
            {"key": key, "target": entry["target"]}
            for key, entry in sorted(self.env.get(project_id, {}).items())
        ]

    async def set_environment_variable(
        self, project_id: str, key: str, value: str, target: str = "production"
    ) -> dict[str, str]:
        self._require_connected()
        self.env.setdefault(project_id, {})[key] = {"value": value, "target": target}
        return {"key": key, "target": target}

    async def deploy(self, project_id: str, git_commit: str | None = None) -> dict[str, Any]:
        self._require_connected()
        return {
            "id": f"dpl_{uuid.uuid4().hex[:10]}",
            "project_id": project_id,
            "commit": git_commit,
            "state": "QUEUED",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }


class ListProjects(Tool):
    """List Vercel projects."""

    async def execute(self, connector: VercelConnector) -> Any:
        return await connector.list_projects()


class ListDeployments(Tool):
    """List deployments of a project."""

    project_id: str = Field(..., description="Project id")

    async def execute(self, connector: VercelConnector) -> Any:
        return await connector.list_deployments(self.project_id)


class GetEnvironmentVariables(Tool):
    """List environment variable names of a project."""

    project_id: str = Field(..., description="Project id")

    async def execute(self, connector: VercelConnector) -> Any:
        return await connector.get_environment_variables(self.project_id)


class SetEnvironmentVariable(Tool):
    """Set an environment variable on a project."""

    project_id: str = Field(..., description="Project id")
    key: str = Field(..., min_length=1, description="Variable name")
    value: str = Field(..., description="Variable value")
    target: Literal["production", "preview", "development"] = Field("production", description="Target")

    async def execute(self, connector: VercelConnector) -> Any:
        return await connector.set_environment_variable(self.project_id, self.key, self.value, self.target)


class DeployProject(Tool):
    """Queue a deployment."""

    project_id: str = Field(..., description="Project id")
    git_commit: str | None = Field(None, description="Commit SHA")

    async def execute(self, connector: VercelConnector) -> Any:
        return await connector.deploy(self.project_id, self.git_commit)


TOOLS = (ListProjects, ListDeployments, GetEnvironmentVariables, SetEnvironmentVariable, DeployProject)

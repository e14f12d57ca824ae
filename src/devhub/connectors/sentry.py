"""
Sentry Connector - projects, issues and releases for one organization.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError
from ..models import ServiceKind
from ..tools import Tool
from .base import BaseConnector

__all__ = ["SentryConnector", "TOOLS"]

PROJECTS = (
    {"id": "proj_1", "name": "DevHub Frontend", "slug": "devhub-frontend", "platform": "javascript-react"},
    {"id": "proj_2", "name": "DevHub Backend", "slug": "devhub-backend", "platform": "python"},
)

ISSUES = (
    {
        "id": "issue_1",
        "title": "TypeError: Cannot read property of undefined",
        "short_id": "DEVHUB-1A2B",
        "count": 234,
        "level": "error",
    },
    {
        "id": "issue_2",
        "title": "ReferenceError: window is not defined",
        "short_id": "DEVHUB-3C4D",
        "count": 89,
        "level": "error",
    },
)


class SentryConnector(BaseConnector):
    kind = ServiceKind.SENTRY
    display_name = "Sentry"
    credential_fields = (
        CredentialField("api_key", "SENTRY_API_KEY", "Sentry auth token"),
        CredentialField("organization_slug", "SENTRY_ORGANIZATION_SLUG", "Sentry organization slug", secret=False),
    )

    def __init__(self) -> None:
        super().__init__()
        self.resolved: set[str] = set()

    async def _close(self) -> None:
        self.resolved.clear()

    def _project(self, slug: str) -> dict[str, Any]:
        self._require_connected()
        for project in PROJECTS:
            if project["slug"] == slug:
                return project
        raise ConnectorUnavailableError(self.kind.value, f"Project not found: {slug}")

    async def list_projects(self) -> list[dict]:
        self._require_connected()
        org = self.settings["organization_slug"]
        return [{**p, "organization": org} for p in PROJECTS]

    async def list_issues(self, project_slug: str) -> list[dict]:
        self._project(project_slug)
        return [
            {**issue, "status": "resolved" if issue["id"] in self.resolved else "unresolved"}
            for issue in ISSUES
        ]

    async def resolve_issue(self, project_slug: str, issue_id: str) -> dict[str, Any]:
        self._project(project_slug)
        if issue_id not in {i["id"] for i in ISSUES}:
            raise ConnectorUnavailableError(self.kind.value, f"Issue not found: {issue_id}")
        self.resolved.add(issue_id)
        return {"id": issue_id, "status": "resolved"}

    async def list_releases(self, project_slug: str) -> list[dict]:
        self._project(project_slug)
        return [
            {"version": "1.0.0", "new_groups": 3},
            {"version": "0.9.0", "new_groups": 7},
        ]


class ListProjects(Tool):
    """List projects in the organization."""

    async def execute(self, connector: SentryConnector) -> Any:
        return await connector.list_projects()


class ListIssues(Tool):
    """List issues of a project."""

    project_slug: str = Field(..., description="Project slug")

    async def execute(self, connector: SentryConnector) -> Any:
        return await connector.list_issues(self.project_slug)


class ResolveIssue(Tool):
    """Mark an issue as resolved."""

    project_slug: str = Field(..., description="Project slug")
    issue_id: str = Field(..., description="Issue id")

    async def execute(self, connector: SentryConnector) -> Any:
        return await connector.resolve_issue(self.project_slug, self.issue_id)


class ListReleases(Tool):
    """List releases of a project."""

    project_slug: str = Field(..., description="Project slug")

    async def execute(self, connector: SentryConnector) -> Any:
        return await connector.list_releases(self.project_slug)


TOOLS = (ListProjects, ListIssues, ResolveIssue, ListReleases)

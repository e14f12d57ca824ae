"""
GitHub Connector - REST v3 API via a personal access token.

Real check: GET /user (authenticated identity).
"""

from typing import Any, Literal

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .http import HTTPConnector

__all__ = ["GitHubConnector", "TOOLS"]


def _repository(repo: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": repo.get("id"),
        "name": repo.get("name"),
        "full_name": repo.get("full_name"),
        "private": repo.get("private", False),
        "description": repo.get("description"),
        "url": repo.get("html_url"),
        "stars": repo.get("stargazers_count") or 0,
        "forks": repo.get("forks_count") or 0,
        "open_issues": repo.get("open_issues_count") or 0,
    }


def _pull_request(pr: dict[str, Any]) -> dict[str, Any]:
    user = pr.get("user") or {}
    return {
        "id": pr.get("id"),
        "number": pr.get("number"),
        "title": pr.get("title"),
        "state": pr.get("state"),
        "created_at": pr.get("created_at"),
        "updated_at": pr.get("updated_at"),
        "user": {
            "login": user.get("login", "unknown"),
            "avatar_url": user.get("avatar_url", ""),
        },
        "html_url": pr.get("html_url"),
    }


class GitHubConnector(HTTPConnector):
    """GitHub REST connector."""

    kind = ServiceKind.GITHUB
    display_name = "GitHub"
    base_url = "https://api.github.com"
    check_endpoint = "/user"
    credential_fields = (
        CredentialField("token", "GITHUB_TOKEN", "GitHub personal access token"),
    )

    def _headers(self, values: dict[str, str]) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {values['token']}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _describe_account(self) -> str | None:
        return self.account.get("login")

    async def list_repositories(self, sort: str = "updated", per_page: int = 30) -> list[dict]:
        data = await self.get("/user/repos", params={"sort": sort, "per_page": per_page})
        return [_repository(r) for r in data]

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return _repository(await self.get(f"/repos/{owner}/{repo}"))

    async def list_pull_requests(self, owner: str, repo: str, state: str = "open") -> list[dict]:
        data = await self.get(
            f"/repos/{owner}/{repo}/pulls", params={"state": state, "per_page": 30}
        )
        return [_pull_request(pr) for pr in data]

    async def list_issues(self, owner: str, repo: str, state: str = "open") -> list[dict]:
        data = await self.get(
            f"/repos/{owner}/{repo}/issues", params={"state": state, "per_page": 30}
        )
        # The issues endpoint also returns pull requests
        return [
            {
                "number": i.get("number"),
                "title": i.get("title"),
                "state": i.get("state"),
                "url": i.get("html_url"),
            }
            for i in data
            if "pull_request" not in i
        ]

    async def create_issue(self, owner: str, repo: str, title: str, body: str = "") -> dict[str, Any]:
        issue = await self.post(f"/repos/{owner}/{repo}/issues", json={"title": title, "body": body})
        return {"number": issue.get("number"), "url": issue.get("html_url"), "title": issue.get("title")}


# --- Tools ---


class ListRepositories(Tool):
    """List GitHub repositories for the authenticated user."""

    sort: Literal["created", "updated", "pushed", "full_name"] = Field(
        "updated", description="Sort order"
    )
    per_page: int = Field(30, ge=1, le=100, description="Number of results (max 100)")

    class Meta:
        name = "list_github_repositories"

    async def execute(self, connector: GitHubConnector) -> Any:
        return await connector.list_repositories(self.sort, self.per_page)


class GetRepository(Tool):
    """Get detailed information about a specific repository."""

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")

    async def execute(self, connector: GitHubConnector) -> Any:
        return await connector.get_repository(self.owner, self.repo)


class ListPullRequests(Tool):
    """List pull requests for a repository."""

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    state: Literal["open", "closed", "all"] = Field("open", description="Pull request state")

    async def execute(self, connector: GitHubConnector) -> Any:
        return await connector.list_pull_requests(self.owner, self.repo, self.state)


class ListIssues(Tool):
    """List issues for a repository."""

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    state: Literal["open", "closed", "all"] = Field("open", description="Issue state")

    async def execute(self, connector: GitHubConnector) -> Any:
        return await connector.list_issues(self.owner, self.repo, self.state)


class CreateIssue(Tool):
    """Create a new issue."""

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    title: str = Field(..., min_length=1, description="Issue title")
    body: str = Field("", description="Issue body")

    async def execute(self, connector: GitHubConnector) -> Any:
        return await connector.create_issue(self.owner, self.repo, self.title, self.body)


TOOLS = (ListRepositories, GetRepository, ListPullRequests, ListIssues, CreateIssue)

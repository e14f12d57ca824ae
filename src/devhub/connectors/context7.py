"""
Context7 Connector - library documentation lookup.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .http import HTTPConnector

__all__ = ["Context7Connector", "TOOLS"]


class Context7Connector(HTTPConnector):
    kind = ServiceKind.CONTEXT7
    display_name = "Context7"
    base_url = "https://api.context7.dev/v1"
    check_endpoint = "/health"
    credential_fields = (
        CredentialField("api_key", "CONTEXT7_API_KEY", "Context7 API key"),
    )

    def _headers(self, values: dict[str, str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {values['api_key']}"}

    async def search_documentation(self, query: str) -> Any:
        return await self.get("/search", params={"q": query})

    async def get_documentation(self, topic: str, version: str | None = None) -> Any:
        params = {"version": version} if version else None
        return await self.get(f"/docs/{topic}", params=params)


class SearchDocumentation(Tool):
    """Search library documentation."""

    query: str = Field(..., min_length=1, description="Search query")

    async def execute(self, connector: Context7Connector) -> Any:
        return await connector.search_documentation(self.query)


class GetDocumentation(Tool):
    """Get documentation for a library or topic."""

    topic: str = Field(..., min_length=1, description="Library or topic name")
    version: str | None = Field(None, description="Library version")

    async def execute(self, connector: Context7Connector) -> Any:
        return await connector.get_documentation(self.topic, self.version)


TOOLS = (SearchDocumentation, GetDocumentation)

"""
Tool Base Class - Pydantic-based tool definitions for stdio MCP servers.

Each connector module declares the tools its server exposes. A tool:
- Defines its arguments via Pydantic Fields (JSON schema generated)
- Implements execute() against a connected connector
- Gets its MCP name from Meta.name or the snake_cased class name

Example:
    class GetRepository(Tool):
        '''Get detailed information about a specific repository.'''
        owner: str = Field(..., description="Repository owner")
        repo: str = Field(..., description="Repository name")

        async def execute(self, connector: GitHubConnector) -> Any:
            return await connector.get_repository(self.owner, self.repo)
"""

import re
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict

__all__ = ["Tool", "ToolMeta"]


class ToolMeta:
    """Metadata for tool naming.

    Define as inner class 'Meta' on Tool subclasses:
        class ListRepositories(Tool):
            class Meta:
                name = "list_github_repositories"
    """
    name: str | None = None
    description: str | None = None


class Tool(BaseModel, ABC):
    """Base class for all tools."""

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown arguments
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    class Meta(ToolMeta):
        pass

    @abstractmethod
    async def execute(self, connector: Any) -> Any:
        """Run the tool against a connected connector.

        Returns:
            JSON-serializable result
        """
        ...

    @classmethod
    def get_name(cls) -> str:
        """MCP tool name."""
        name = getattr(cls.Meta, "name", None)
        if name:
            return name
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    @classmethod
    def get_description(cls) -> str:
        """First line of Meta.description or the docstring."""
        description = getattr(cls.Meta, "description", None)
        if description:
            return description
        doc = cls.__doc__ or ""
        return doc.strip().split("\n")[0].strip()

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """JSON schema of the tool arguments."""
        schema = cls.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        for prop in schema["properties"].values():
            prop.pop("title", None)
        return schema

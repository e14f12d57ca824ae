"""
21st.dev Connector - code, scaffold and README generation.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["Dev21Connector", "TOOLS"]

SCAFFOLDS = {
    "react": ["package.json", "src/App.tsx", "src/main.tsx", "index.html"],
    "fastapi": ["pyproject.toml", "app/__init__.py", "app/main.py", "tests/test_main.py"],
    "express": ["package.json", "src/index.js", "src/routes.js"],
}


class Dev21Connector(ApiKeyConnector):
    kind = ServiceKind.DEV21
    display_name = "21st.dev"
    min_key_length = 5
    credential_fields = (CredentialField("api_key", "DEV21_API_KEY", "21st.dev API key"),)

    async def generate_scaffold(self, project_name: str, framework: str) -> dict[str, Any]:
        self._require_connected()
        files = SCAFFOLDS.get(framework.lower(), ["README.md"])
        return {"project": project_name, "framework": framework, "files": [f"{project_name}/{f}" for f in files]}

    async def generate_readme(self, project_name: str, description: str) -> str:
        self._require_connected()
        return (
            f"# {project_name}\n\n{description}\n\n"
            "## Installation\n\n```bash\nnpm install\n```\n\n"
            "## Usage\n\n```bash\nnpm start\n```\n"
        )


class GenerateProjectScaffold(Tool):
    """List the files of a starter project."""

    project_name: str = Field(..., min_length=1, description="Project name")
    framework: str = Field("react", description="react, fastapi or express")

    async def execute(self, connector: Dev21Connector) -> Any:
        return await connector.generate_scaffold(self.project_name, self.framework)


class GenerateReadme(Tool):
    """Generate a README skeleton."""

    project_name: str = Field(..., min_length=1, description="Project name")
    description: str = Field("", description="One-line description")

    async def execute(self, connector: Dev21Connector) -> Any:
        return await connector.generate_readme(self.project_name, self.description)


TOOLS = (GenerateProjectScaffold, GenerateReadme)

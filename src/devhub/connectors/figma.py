"""
Figma Connector - design files, frames and component code generation.
"""

from typing import Any, Literal

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["FigmaConnector", "TOOLS"]

FILES = (
    {"id": "file_1", "name": "Design System", "url": "https://figma.com/file/designsystem"},
    {"id": "file_2", "name": "App UI", "url": "https://figma.com/file/appui"},
)


def _pascal(name: str) -> str:
    return "".join(part.capitalize() for part in name.replace("-", " ").replace("_", " ").split())


class FigmaConnector(ApiKeyConnector):
    kind = ServiceKind.FIGMA
    display_name = "Figma"
    min_key_length = 10
    credential_fields = (CredentialField("api_key", "FIGMA_API_KEY", "Figma access token"),)

    async def list_files(self) -> list[dict]:
        self._require_connected()
        return [dict(f) for f in FILES]

    async def get_file_frames(self, file_id: str) -> list[dict]:
        self._require_connected()
        return [
            {
                "id": "frame_1",
                "file_id": file_id,
                "name": "Homepage",
                "width": 1440,
                "height": 900,
                "background_color": "#FFFFFF",
                "children": [
                    {"id": "elem_1", "name": "Header", "type": "COMPONENT", "width": 1440, "height": 80},
                ],
            }
        ]

    async def list_components(self, file_id: str) -> list[dict]:
        self._require_connected()
        return [
            {"id": "comp_button", "file_id": file_id, "name": "Button", "variants": ["primary", "secondary"]},
            {"id": "comp_card", "file_id": file_id, "name": "Card", "variants": ["default"]},
        ]

    async def get_design_specs(self, file_id: str) -> dict[str, Any]:
        self._require_connected()
        return {
            "file_id": file_id,
            "colors": {"primary": "#007ACC", "secondary": "#6C757D", "background": "#FFFFFF"},
            "typography": {"heading": "Inter 600 24px", "body": "Inter 400 16px"},
            "spacing": [4, 8, 16, 24, 32],
        }

    async def generate_component_code(self, component: str, framework: str = "react") -> str:
        self._require_connected()
        name = _pascal(component) or "Component"
        if framework == "vue":
            return f'<template>\n  <div class="{component}"></div>\n</template>\n\n<script setup>\ndefineOptions({{ name: "{name}" }})\n</script>\n'
        return f"export function {name}() {{\n  return <div className=\"{component}\" />;\n}}\n"


class ListFigmaFiles(Tool):
    """List Figma files."""

    async def execute(self, connector: FigmaConnector) -> Any:
        return await connector.list_files()


class GetFileFrames(Tool):
    """Get the top-level frames of a file."""

    file_id: str = Field(..., description="Figma file id")

    async def execute(self, connector: FigmaConnector) -> Any:
        return await connector.get_file_frames(self.file_id)


class ListComponents(Tool):
    """List components of a file."""

    file_id: str = Field(..., description="Figma file id")

    async def execute(self, connector: FigmaConnector) -> Any:
        return await connector.list_components(self.file_id)


class GetDesignSpecs(Tool):
    """Get colors, typography and spacing of a file."""

    file_id: str = Field(..., description="Figma file id")

    async def execute(self, connector: FigmaConnector) -> Any:
        return await connector.get_design_specs(self.file_id)


class GenerateComponentCode(Tool):
    """Generate a component skeleton."""

    component: str = Field(..., min_length=1, description="Component name")
    framework: Literal["react", "vue"] = Field("react", description="Target framework")

    async def execute(self, connector: FigmaConnector) -> Any:
        return await connector.generate_component_code(self.component, self.framework)


TOOLS = (ListFigmaFiles, GetFileFrames, ListComponents, GetDesignSpecs, GenerateComponentCode)

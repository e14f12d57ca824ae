"""
Filesystem Connector - file operations confined to a root directory.

Every path argument is resolved against the root; a path that resolves
outside it (`..`, absolute paths, symlinks) is rejected.
"""

from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError, CredentialValidationError
from ..models import ServiceKind
from ..tools import Tool
from .base import BaseConnector

__all__ = ["FilesystemConnector", "TOOLS"]


class FilesystemConnector(BaseConnector):
    """Local filesystem connector."""

    kind = ServiceKind.FILESYSTEM
    display_name = "Filesystem"
    credential_fields = (
        CredentialField("root_path", "FILESYSTEM_ROOT_PATH", "Root directory", secret=False),
    )

    def __init__(self) -> None:
        super().__init__()
        self.root: Path | None = None

    def validate(self, values: dict[str, str]) -> None:
        super().validate(values)
        root = Path(values["root_path"]).expanduser()
        if not root.is_dir():
            raise CredentialValidationError(
                self.kind.value, f"Root path is not a directory: {values['root_path']}"
            )

    async def _open(self, values: dict[str, str]) -> None:
        self.root = Path(values["root_path"]).expanduser().resolve()

    async def _close(self) -> None:
        self.root = None

    def _resolve(self, path: str) -> Path:
        self._require_connected()
        assert self.root is not None
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ConnectorUnavailableError(self.kind.value, f"Path escapes root: {path}")
        return target

    def _relative(self, path: Path) -> str:
        assert self.root is not None
        return path.relative_to(self.root).as_posix() or "."

    async def list_directory(self, path: str = ".") -> list[dict]:
        target = self._resolve(path)
        if not target.is_dir():
            raise ConnectorUnavailableError(self.kind.value, f"Not a directory: {path}")
        return [
            {
                "name": entry.name,
                "path": self._relative(entry),
                "type": "directory" if entry.is_dir() else "file",
                "size": entry.stat().st_size if entry.is_file() else None,
            }
            for entry in sorted(target.iterdir(), key=lambda p: p.name)
        ]

    async def read_file(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except OSError as e:
            raise ConnectorUnavailableError(self.kind.value, f"Cannot read {path}: {e}") from e

    async def write_file(self, path: str, content: str) -> dict[str, Any]:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ConnectorUnavailableError(self.kind.value, f"Cannot write {path}: {e}") from e
        return {"path": self._relative(target), "bytes": len(content.encode("utf-8"))}

    async def delete_file(self, path: str) -> dict[str, Any]:
        target = self._resolve(path)
        if not target.is_file():
            raise ConnectorUnavailableError(self.kind.value, f"Not a file: {path}")
        target.unlink()
        return {"path": self._relative(target), "deleted": True}

    async def search_files(self, pattern: str, max_results: int = 100) -> list[str]:
        root = self._resolve(".")
        matches = []
        for match in sorted(root.rglob(pattern)):
            matches.append(self._relative(match))
            if len(matches) >= max_results:
                break
        return matches


# --- Tools ---


class ListDirectory(Tool):
    """List entries of a directory under the root."""

    path: str = Field(".", description="Directory path relative to the root")

    async def execute(self, connector: FilesystemConnector) -> Any:
        return await connector.list_directory(self.path)


class ReadFile(Tool):
    """Read a UTF-8 text file."""

    path: str = Field(..., min_length=1, description="File path relative to the root")

    async def execute(self, connector: FilesystemConnector) -> Any:
        return await connector.read_file(self.path)


class WriteFile(Tool):
    """Write a UTF-8 text file, creating parent directories."""

    model_config = ConfigDict(str_strip_whitespace=False)

    path: str = Field(..., min_length=1, description="File path relative to the root")
    content: str = Field(..., description="File content")

    async def execute(self, connector: FilesystemConnector) -> Any:
        return await connector.write_file(self.path, self.content)


class DeleteFile(Tool):
    """Delete a file."""

    path: str = Field(..., min_length=1, description="File path relative to the root")

    async def execute(self, connector: FilesystemConnector) -> Any:
        return await connector.delete_file(self.path)


class SearchFiles(Tool):
    """Find files matching a glob pattern."""

    pattern: str = Field(..., min_length=1, description="Glob pattern, e.g. '*.py'")
    max_results: int = Field(100, ge=1, le=1000, description="Maximum matches")

    async def execute(self, connector: FilesystemConnector) -> Any:
        return await connector.search_files(self.pattern, self.max_results)


TOOLS = (ListDirectory, ReadFile, WriteFile, DeleteFile, SearchFiles)

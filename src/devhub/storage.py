"""
Global State Store - Durable key/value storage for hub state.

Mirrors an editor's extension global storage: a single JSON document of
keys to values, read once at startup and overwritten wholesale on update.

Implementations:
- FileGlobalState: JSON file, written atomically via tmp-file rename
- MemoryGlobalState: in-process dict (tests, ephemeral runs)
"""

import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from .errors import PersistenceError

__all__ = ["FileGlobalState", "GlobalStateStore", "MemoryGlobalState"]

logger = structlog.get_logger(__name__)


@runtime_checkable
class GlobalStateStore(Protocol):
    """Key/value contract used by the registry."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def update(self, key: str, value: Any) -> None:
        """Store value under key.

        Raises:
            PersistenceError: If the value could not be written
        """
        ...


class MemoryGlobalState:
    """In-memory store. Values are JSON round-tripped like the file store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})
        self.writes = 0

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return json.loads(json.dumps(self._data[key]))

    def update(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.loads(json.dumps(value))
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Value for '{key}' is not serializable: {e}") from e
        self.writes += 1


class FileGlobalState:
    """JSON-file backed store.

    Example:
        store = FileGlobalState(config.state_file)
        store.update("devhubState", {"servers": []})
        store.get("devhubState")
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("state_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("state_file_invalid", path=str(self.path))
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def update(self, key: str, value: Any) -> None:
        self._data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(self._data, indent=2))
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

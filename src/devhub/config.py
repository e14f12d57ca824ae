"""
Centralized configuration for DevHub.

Configuration sources (priority order):
1. Environment variables (DEVHUB_*)
2. Default values

Environment variables:
- DEVHUB_HOST: Dashboard bind address (default: 127.0.0.1)
- DEVHUB_PORT: Dashboard port (default: 9300)
- DEVHUB_LOG_LEVEL: Log level (default: INFO)
- DEVHUB_RUNTIME_DIR: Runtime directory (default: ~/.local/share/devhub)
- DEVHUB_HTTP_TIMEOUT: Timeout for connector HTTP calls in seconds (default: 30)
- DEVHUB_CLINE_SETTINGS: Override path of the Cline MCP settings file
- DEVHUB_NAMESPACE: Prefix for exported Cline server entries (default: devhub)
"""

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["DevHubConfig", "config", "DEFAULT_RUNTIME_DIR"]

DEFAULT_RUNTIME_DIR = Path.home() / ".local/share/devhub"


def _get_env(key: str, default: str) -> str:
    """Get environment variable with DEVHUB_ prefix."""
    return os.environ.get(f"DEVHUB_{key}", default)


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    return int(_get_env(key, str(default)))


def _get_env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    return float(_get_env(key, str(default)))


def _get_env_path(key: str, default: Path | None) -> Path | None:
    """Get path environment variable."""
    val = os.environ.get(f"DEVHUB_{key}")
    return Path(val).expanduser() if val else default


@dataclass(frozen=True)
class DevHubConfig:
    """Immutable DevHub configuration."""

    host: str = _get_env("HOST", "127.0.0.1")
    port: int = _get_env_int("PORT", 9300)
    log_level: str = _get_env("LOG_LEVEL", "INFO")

    runtime_dir: Path = _get_env_path("RUNTIME_DIR", DEFAULT_RUNTIME_DIR)

    # Connector defaults
    http_timeout: float = _get_env_float("HTTP_TIMEOUT", 30.0)

    # Cline export
    cline_settings_path: Path | None = _get_env_path("CLINE_SETTINGS", None)
    namespace: str = _get_env("NAMESPACE", "devhub")

    # Log rotation
    log_max_bytes: int = 5 * 1024 * 1024  # 5MB
    log_backup_count: int = 3

    @property
    def log_dir(self) -> Path:
        """Log directory."""
        return self.runtime_dir / "logs"

    @property
    def log_file(self) -> Path:
        """Log file path."""
        return self.log_dir / "devhub.log"

    @property
    def state_dir(self) -> Path:
        """Directory holding the global state document."""
        return self.runtime_dir / "state"

    @property
    def state_file(self) -> Path:
        """Global state document (key/value JSON)."""
        return self.state_dir / "global_state.json"

    @property
    def dashboard_url(self) -> str:
        """Full dashboard URL."""
        return f"http://{self.host}:{self.port}"

    def ensure_dirs(self) -> None:
        """Create runtime directories if they don't exist."""
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(exist_ok=True)
        self.state_dir.mkdir(exist_ok=True)


# Global default, used when nothing is passed explicitly
config = DevHubConfig()

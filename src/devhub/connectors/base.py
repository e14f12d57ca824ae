"""
Base Connector - Shared connect/disconnect lifecycle.

Subclasses declare their credential fields and override:
- validate(values): local format checks (raise CredentialValidationError)
- _open(values): optional real check, builds client handles
- _close(): release client handles

connect() guarantees that a failed attempt leaves no client handle behind
and that `connected` reports False afterwards.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from ..contracts import CredentialField
from ..errors import ConnectError, ConnectorError, CredentialValidationError, NotConnectedError
from ..models import ServiceKind

__all__ = ["ApiKeyConnector", "BaseConnector", "require_min_length"]

logger = structlog.get_logger(__name__)


def require_min_length(kind: ServiceKind, value: str, minimum: int, label: str = "API key") -> None:
    """Raise CredentialValidationError when value is shorter than minimum."""
    if len(value) < minimum:
        raise CredentialValidationError(
            kind.value,
            f"Invalid {label} format: expected at least {minimum} characters",
        )


class BaseConnector:
    """Connector lifecycle shared by every service kind."""

    kind: ServiceKind
    display_name: str = ""
    credential_fields: tuple[CredentialField, ...] = ()

    def __init__(self) -> None:
        self._connected = False
        self._lock = asyncio.Lock()
        self.settings: dict[str, str] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    def get_connection_status(self) -> bool:
        return self._connected

    @property
    def label(self) -> str:
        return self.display_name or self.kind.value

    async def connect(self, credentials: Mapping[str, Any]) -> bool:
        """Validate credentials, run the real check and mark connected.

        Raises:
            CredentialValidationError: Format check failed
            ConnectError: Real check failed
        """
        async with self._lock:
            if self._connected:
                logger.debug("connector_reconnecting", kind=self.kind.value)
                await self._discard()

            values = self._extract(credentials)
            try:
                self.validate(values)
                await self._open(values)
            except ConnectorError as e:
                await self._discard()
                logger.warning("connector_connect_failed", kind=self.kind.value, error=e.reason)
                raise
            except Exception as e:
                await self._discard()
                logger.warning("connector_connect_failed", kind=self.kind.value, error=str(e))
                raise ConnectError(self.kind.value, f"{self.label} connection failed: {e}") from e

            self.settings = values
            self._connected = True
            logger.info("connector_connected", kind=self.kind.value)
            return True

    async def disconnect(self) -> None:
        async with self._lock:
            await self._discard()
        logger.info("connector_disconnected", kind=self.kind.value)

    def validate(self, values: dict[str, str]) -> None:
        """Default rule: every required field is non-empty."""
        for field in self.credential_fields:
            if field.required and not values.get(field.key):
                raise CredentialValidationError(self.kind.value, f"{field.prompt} is required")

    def check_credentials(self, credentials: Mapping[str, Any]) -> None:
        """Format check only; no client is built.

        Raises:
            CredentialValidationError: Format check failed
        """
        self.validate(self._extract(credentials))

    async def _open(self, values: dict[str, str]) -> None:
        """Real check. Local-only connectors have none."""

    async def _close(self) -> None:
        """Release client handles."""

    async def _discard(self) -> None:
        try:
            await self._close()
        except Exception as e:
            logger.warning("connector_close_failed", kind=self.kind.value, error=str(e))
        self._connected = False
        self.settings = {}

    def _extract(self, credentials: Mapping[str, Any]) -> dict[str, str]:
        values = {}
        for field in self.credential_fields:
            raw = credentials.get(field.key)
            values[field.key] = "" if raw is None else str(raw).strip()
        return values

    def _require_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError(self.label)

    def status(self) -> dict[str, Any]:
        """Current connector status."""
        return {"kind": self.kind.value, "connected": self._connected}


class ApiKeyConnector(BaseConnector):
    """Connector whose only credential is an API key with a minimum length.

    These kinds have no remote check; they serve synthetic data once the
    key passes the local format check.
    """

    min_key_length: int = 1

    def validate(self, values: dict[str, str]) -> None:
        super().validate(values)
        require_min_length(self.kind, values["api_key"], self.min_key_length)

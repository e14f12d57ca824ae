"""
Connector Protocol - Contract for external service connections.

Defines the LIFECYCLE interface the registry needs to manage connectors.
Domain operations (list_repositories, list_customers, read_file, ...) are
implemented per connector - the registry only drives connect/disconnect and
reads the connection status.

Connector types:
- HTTP APIs (GitHub, Stripe, LemonSqueezy, Context7, Firecrawl)
- Database drivers (MongoDB)
- Local checks only (FileSystem path, key-format services)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..models import ServiceKind

__all__ = ["ConnectorProtocol", "CredentialField"]


@dataclass(frozen=True)
class CredentialField:
    """One credential a connector needs.

    Attributes:
        key: Config key the value is stored under
        env_var: Environment variable holding the value for stdio servers
        prompt: Text shown when asking the user for the value
        secret: Mask input and output
        required: Connect is declined when a required value is blank
    """
    key: str
    env_var: str
    prompt: str
    secret: bool = True
    required: bool = True


@runtime_checkable
class ConnectorProtocol(Protocol):
    """Lifecycle contract for service connectors.

    Example:
        class GitHubConnector:
            kind = ServiceKind.GITHUB
            credential_fields = (CredentialField("token", "GITHUB_TOKEN", "..."),)

            @property
            def connected(self) -> bool:
                return self._client is not None

            async def connect(self, credentials) -> bool:
                self._client = httpx.AsyncClient(...)
                await self._client.get("/user")
                return True

            async def disconnect(self) -> None:
                await self._client.aclose()

            # Domain operations (NOT in protocol):
            async def list_repositories(self) -> list[dict]: ...
    """

    kind: ServiceKind
    credential_fields: tuple[CredentialField, ...]

    @property
    def connected(self) -> bool:
        """Current connection status. Pure read."""
        ...

    def get_connection_status(self) -> bool:
        """Same as `connected`."""
        ...

    async def connect(self, credentials: Mapping[str, str]) -> bool:
        """Validate credentials and establish the connection.

        Raises:
            CredentialValidationError: Credential format check failed
            ConnectError: Real check failed
        """
        ...

    async def disconnect(self) -> None:
        """Release all held resources. Never raises."""
        ...

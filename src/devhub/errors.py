"""
Error taxonomy.

- DescriptorValidationError / CredentialValidationError: bad input, raised
  before any network call
- ConnectError: a connector's real check failed
- NotConnectedError: domain operation on a connector that isn't connected
- PersistenceError: durable state could not be written (logged, never surfaced)
"""

__all__ = [
    "ConnectError",
    "ConnectorError",
    "ConnectorUnavailableError",
    "CredentialValidationError",
    "DescriptorValidationError",
    "DevHubError",
    "NotConnectedError",
    "PersistenceError",
    "ValidationError",
]


class DevHubError(Exception):
    """Base class for all DevHub errors."""


class ValidationError(DevHubError):
    """Input failed a local check."""


class DescriptorValidationError(ValidationError):
    """Service descriptor is missing required fields."""


class ConnectorError(DevHubError):
    """Raised by a connector; carries the service kind it belongs to."""

    def __init__(self, kind: str, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(reason)


class CredentialValidationError(ConnectorError, ValidationError):
    """Credential is missing or malformed."""


class ConnectError(ConnectorError):
    """Real connection check failed (bad credentials, unreachable endpoint)."""


class NotConnectedError(ConnectorError):
    """Domain operation invoked while the connector is not connected."""

    def __init__(self, kind: str):
        super().__init__(kind, f"Not connected to {kind}")


class PersistenceError(DevHubError):
    """Writing durable state failed."""


class ConnectorUnavailableError(ConnectorError):
    """A connected service could not handle a request."""

"""
HTTP Connector - Base for connectors that wrap a REST API.

Features:
- One httpx.AsyncClient per live connection
- Real credential check: a single GET against `check_endpoint`
- Configurable timeout and injectable transport (tests use httpx.MockTransport)
- No retries: each domain call is exactly one request
"""

from typing import Any

import httpx
import structlog

from ..errors import ConnectError, ConnectorUnavailableError
from .base import BaseConnector

__all__ = ["HTTPConnector"]

logger = structlog.get_logger(__name__)


class HTTPConnector(BaseConnector):
    """REST connector.

    Subclasses set `base_url` and `check_endpoint` and implement
    `_headers()` (or `_auth()`) from the validated credential values.

    Example:
        connector = StripeConnector(transport=httpx.MockTransport(handler))
        await connector.connect({"api_key": "sk_test_123"})
        customers = await connector.list_customers(limit=5)
    """

    base_url: str = ""
    check_endpoint: str = "/"

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url: str | None = None,
    ) -> None:
        super().__init__()
        self.timeout = timeout
        self._transport = transport
        if base_url:
            self.base_url = base_url
        self._client: httpx.AsyncClient | None = None
        self.account: dict[str, Any] = {}

    def _headers(self, values: dict[str, str]) -> dict[str, str]:
        return {}

    def _auth(self, values: dict[str, str]) -> httpx.Auth | None:
        return None

    async def _open(self, values: dict[str, str]) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers={"Accept": "application/json", **self._headers(values)},
            auth=self._auth(values),
            transport=self._transport,
            follow_redirects=True,
        )

        try:
            response = await self._client.get(self.check_endpoint)
        except httpx.HTTPError as e:
            raise ConnectError(self.kind.value, f"{self.label} unreachable: {e}") from e

        if response.status_code in (401, 403):
            raise ConnectError(
                self.kind.value,
                f"{self.label} rejected the credentials ({response.status_code})",
            )
        if response.status_code >= 400:
            raise ConnectError(
                self.kind.value,
                f"{self.label} check failed with status {response.status_code}",
            )

        self.account = self._parse(response)
        logger.info("http_check_passed", kind=self.kind.value, account=self._describe_account())

    async def _close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        self.account = {}

    def _describe_account(self) -> str | None:
        """Short identity string for logs (never a credential)."""
        return None

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make one HTTP request and return the decoded JSON body."""
        self._require_connected()
        assert self._client is not None

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ConnectorUnavailableError(self.kind.value, f"Timeout: {e}") from e
        except httpx.HTTPError as e:
            raise ConnectorUnavailableError(self.kind.value, f"Connection error: {e}") from e

        if response.status_code >= 400:
            raise ConnectorUnavailableError(
                self.kind.value,
                f"{method} {path} failed with status {response.status_code}",
            )
        return self._parse(response)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self._request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self._request("POST", path, **kwargs)

    def status(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "base_url": self.base_url,
            "connected": self._connected,
        }

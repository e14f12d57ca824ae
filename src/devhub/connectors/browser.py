"""
Browser Connector - page inspection sessions.
"""

import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from pydantic import Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["BrowserConnector", "TOOLS"]


class BrowserConnector(ApiKeyConnector):
    kind = ServiceKind.BROWSER
    display_name = "Browser Tools"
    min_key_length = 5
    credential_fields = (CredentialField("api_key", "BROWSER_API_KEY", "Browser Tools API key"),)

    def __init__(self) -> None:
        super().__init__()
        self.sessions: dict[str, dict[str, Any]] = {}

    async def _close(self) -> None:
        self.sessions.clear()

    def _url(self, url: str) -> str:
        self._require_connected()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConnectorUnavailableError(self.kind.value, f"Invalid URL: {url}")
        return url

    async def navigate(self, url: str) -> dict[str, Any]:
        session = {
            "session_id": uuid.uuid4().hex[:12],
            "url": self._url(url),
            "title": urlparse(url).netloc,
            "status": "loaded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.sessions[session["session_id"]] = session
        return session

    async def console_logs(self, url: str) -> list[dict]:
        self._url(url)
        return [
            {"level": "info", "message": "Page loaded", "source": url},
            {"level": "warning", "message": "Deprecated API usage detected", "source": url},
        ]

    async def network_requests(self, url: str) -> list[dict]:
        self._url(url)
        origin = "{0.scheme}://{0.netloc}".format(urlparse(url))
        return [
            {"url": url, "method": "GET", "status": 200, "type": "document"},
            {"url": f"{origin}/static/app.js", "method": "GET", "status": 200, "type": "script"},
            {"url": f"{origin}/api/health", "method": "GET", "status": 200, "type": "xhr"},
        ]

    async def inspect_element(self, url: str, selector: str) -> dict[str, Any]:
        self._url(url)
        return {"url": url, "selector": selector, "found": True, "tag": selector.lstrip("#.").split()[0]}


class NavigateToUrl(Tool):
    """Open a URL in a new browser session."""

    url: str = Field(..., description="Page URL")

    async def execute(self, connector: BrowserConnector) -> Any:
        return await connector.navigate(self.url)


class CaptureConsoleLogs(Tool):
    """Capture console output of a page."""

    url: str = Field(..., description="Page URL")

    async def execute(self, connector: BrowserConnector) -> Any:
        return await connector.console_logs(self.url)


class CaptureNetworkRequests(Tool):
    """List network requests made by a page."""

    url: str = Field(..., description="Page URL")

    async def execute(self, connector: BrowserConnector) -> Any:
        return await connector.network_requests(self.url)


class InspectElement(Tool):
    """Inspect the element matched by a CSS selector."""

    url: str = Field(..., description="Page URL")
    selector: str = Field(..., min_length=1, description="CSS selector")

    async def execute(self, connector: BrowserConnector) -> Any:
        return await connector.inspect_element(self.url, self.selector)


TOOLS = (NavigateToUrl, CaptureConsoleLogs, CaptureNetworkRequests, InspectElement)

"""
Firecrawl Connector - web scraping, search and crawling.

Real check: GET /v1/account.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .http import HTTPConnector

__all__ = ["FirecrawlConnector", "TOOLS"]


class FirecrawlConnector(HTTPConnector):
    """Firecrawl REST connector."""

    kind = ServiceKind.FIRECRAWL
    display_name = "Firecrawl"
    base_url = "https://api.firecrawl.dev/v1"
    check_endpoint = "/account"
    credential_fields = (
        CredentialField("api_key", "FIRECRAWL_API_KEY", "Firecrawl API key"),
    )

    def _headers(self, values: dict[str, str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {values['api_key']}"}

    async def scrape(self, url: str) -> Any:
        return await self.post("/scrape", json={"url": url, "formats": ["markdown"]})

    async def search(self, query: str, limit: int = 5) -> Any:
        return await self.post("/search", json={"query": query, "limit": limit})

    async def crawl(self, url: str, max_depth: int = 2) -> Any:
        return await self.post("/crawl", json={"url": url, "maxDepth": max_depth})


class Scrape(Tool):
    """Scrape a single page as markdown."""

    url: str = Field(..., min_length=1, description="Page URL")

    class Meta:
        name = "scrape_url"

    async def execute(self, connector: FirecrawlConnector) -> Any:
        return await connector.scrape(self.url)


class Search(Tool):
    """Search the web."""

    query: str = Field(..., min_length=1, description="Search query")
    limit: int = Field(5, ge=1, le=50, description="Maximum results")

    class Meta:
        name = "search_web"

    async def execute(self, connector: FirecrawlConnector) -> Any:
        return await connector.search(self.query, self.limit)


class Crawl(Tool):
    """Start a crawl from a URL."""

    url: str = Field(..., min_length=1, description="Start URL")
    max_depth: int = Field(2, ge=1, le=10, description="Maximum link depth")

    class Meta:
        name = "crawl_site"

    async def execute(self, connector: FirecrawlConnector) -> Any:
        return await connector.crawl(self.url, self.max_depth)


TOOLS = (Scrape, Search, Crawl)

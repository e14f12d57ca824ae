"""
Lemon Squeezy Connector - JSON:API with a bearer key.

Real check: GET /v1/users/me.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..models import ServiceKind
from ..tools import Tool
from .http import HTTPConnector

__all__ = ["LemonSqueezyConnector", "TOOLS"]


def _flatten(resource: dict[str, Any]) -> dict[str, Any]:
    """JSON:API resource -> {id, **attributes}."""
    return {"id": resource.get("id"), **(resource.get("attributes") or {})}


class LemonSqueezyConnector(HTTPConnector):
    """Lemon Squeezy connector."""

    kind = ServiceKind.LEMONSQUEEZY
    display_name = "Lemon Squeezy"
    base_url = "https://api.lemonsqueezy.com/v1"
    check_endpoint = "/users/me"
    credential_fields = (
        CredentialField("api_key", "LEMONSQUEEZY_API_KEY", "Lemon Squeezy API key"),
    )

    def _headers(self, values: dict[str, str]) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {values['api_key']}",
            "Accept": "application/vnd.api+json",
        }

    def _describe_account(self) -> str | None:
        data = self.account.get("data") or {}
        return (data.get("attributes") or {}).get("email")

    async def _collection(self, path: str, store_id: str | None) -> list[dict]:
        params = {"filter[store_id]": store_id} if store_id else None
        body = await self.get(path, params=params)
        return [_flatten(r) for r in body.get("data", [])]

    async def list_products(self, store_id: str | None = None) -> list[dict]:
        return await self._collection("/products", store_id)

    async def list_orders(self, store_id: str | None = None) -> list[dict]:
        return await self._collection("/orders", store_id)

    async def list_subscriptions(self, store_id: str | None = None) -> list[dict]:
        return await self._collection("/subscriptions", store_id)


# --- Tools ---


class ListProducts(Tool):
    """List Lemon Squeezy products."""

    store_id: str | None = Field(None, description="Filter by store ID")

    async def execute(self, connector: LemonSqueezyConnector) -> Any:
        return await connector.list_products(self.store_id)


class ListOrders(Tool):
    """List Lemon Squeezy orders."""

    store_id: str | None = Field(None, description="Filter by store ID")

    async def execute(self, connector: LemonSqueezyConnector) -> Any:
        return await connector.list_orders(self.store_id)


class ListSubscriptions(Tool):
    """List Lemon Squeezy subscriptions."""

    store_id: str | None = Field(None, description="Filter by store ID")

    async def execute(self, connector: LemonSqueezyConnector) -> Any:
        return await connector.list_subscriptions(self.store_id)


TOOLS = (ListProducts, ListOrders, ListSubscriptions)

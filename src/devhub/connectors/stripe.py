"""
Stripe Connector - REST API with a secret key (HTTP Basic, empty password).

Real check: GET /v1/account.
"""

from typing import Any

import httpx
from pydantic import Field

from ..contracts import CredentialField
from ..errors import CredentialValidationError
from ..models import ServiceKind
from ..tools import Tool
from .http import HTTPConnector

__all__ = ["StripeConnector", "TOOLS"]


def _customer(c: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": c.get("id"),
        "email": c.get("email"),
        "name": c.get("name"),
        "description": c.get("description"),
        "created": c.get("created"),
    }


class StripeConnector(HTTPConnector):
    """Stripe REST connector."""

    kind = ServiceKind.STRIPE
    display_name = "Stripe"
    base_url = "https://api.stripe.com/v1"
    check_endpoint = "/account"
    credential_fields = (
        CredentialField("api_key", "STRIPE_API_KEY", "Stripe secret key"),
    )

    def validate(self, values: dict[str, str]) -> None:
        if not values.get("api_key", "").startswith("sk_"):
            raise CredentialValidationError(
                self.kind.value, "Invalid Stripe API key format: must start with sk_"
            )

    def _auth(self, values: dict[str, str]) -> httpx.Auth:
        return httpx.BasicAuth(values["api_key"], "")

    def _describe_account(self) -> str | None:
        return self.account.get("id")

    async def _list(self, path: str, limit: int) -> list[dict]:
        data = await self.get(path, params={"limit": limit})
        return data.get("data", [])

    async def list_customers(self, limit: int = 10) -> list[dict]:
        return [_customer(c) for c in await self._list("/customers", limit)]

    async def get_customer(self, customer_id: str) -> dict[str, Any]:
        return _customer(await self.get(f"/customers/{customer_id}"))

    async def create_customer(
        self, email: str, name: str | None = None, description: str | None = None
    ) -> dict[str, Any]:
        form = {"email": email}
        if name:
            form["name"] = name
        if description:
            form["description"] = description
        return _customer(await self.post("/customers", data=form))

    async def list_charges(self, limit: int = 10) -> list[dict]:
        return [
            {
                "id": c.get("id"),
                "amount": c.get("amount"),
                "currency": c.get("currency"),
                "status": c.get("status"),
                "customer": c.get("customer"),
                "created": c.get("created"),
            }
            for c in await self._list("/charges", limit)
        ]

    async def list_products(self, limit: int = 10) -> list[dict]:
        return [
            {
                "id": p.get("id"),
                "name": p.get("name"),
                "active": p.get("active"),
                "description": p.get("description"),
            }
            for p in await self._list("/products", limit)
        ]

    async def list_subscriptions(self, limit: int = 10) -> list[dict]:
        return [
            {
                "id": s.get("id"),
                "customer": s.get("customer"),
                "status": s.get("status"),
                "current_period_end": s.get("current_period_end"),
            }
            for s in await self._list("/subscriptions", limit)
        ]


# --- Tools ---


class ListCustomers(Tool):
    """List Stripe customers."""

    limit: int = Field(10, ge=1, le=100, description="Number of customers to return")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.list_customers(self.limit)


class GetCustomer(Tool):
    """Get a Stripe customer by ID."""

    customer_id: str = Field(..., min_length=1, description="Customer ID (cus_...)")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.get_customer(self.customer_id)


class CreateCustomer(Tool):
    """Create a new Stripe customer."""

    email: str = Field(..., min_length=3, description="Customer email")
    name: str | None = Field(None, description="Customer name")
    description: str | None = Field(None, description="Customer description")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.create_customer(self.email, self.name, self.description)


class ListCharges(Tool):
    """List Stripe charges."""

    limit: int = Field(10, ge=1, le=100, description="Number of charges to return")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.list_charges(self.limit)


class ListProducts(Tool):
    """List Stripe products."""

    limit: int = Field(10, ge=1, le=100, description="Number of products to return")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.list_products(self.limit)


class ListSubscriptions(Tool):
    """List Stripe subscriptions."""

    limit: int = Field(10, ge=1, le=100, description="Number of subscriptions to return")

    async def execute(self, connector: StripeConnector) -> Any:
        return await connector.list_subscriptions(self.limit)


TOOLS = (ListCustomers, GetCustomer, CreateCustomer, ListCharges, ListProducts, ListSubscriptions)

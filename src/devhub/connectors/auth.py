"""
Auth Connector - OAuth provider catalogue and token helpers.
"""

import secrets
from typing import Any
from urllib.parse import urlencode

from pydantic import Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["AuthConnector", "TOOLS"]

PROVIDERS = {
    "github": {
        "name": "GitHub OAuth",
        "authorize_url": "https://github.com/login/oauth/authorize",
        "scopes": ["read:user", "repo"],
        "enabled": True,
    },
    "google": {
        "name": "Google OAuth",
        "authorize_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "scopes": ["openid", "email", "profile"],
        "enabled": False,
    },
    "microsoft": {
        "name": "Microsoft OAuth",
        "authorize_url": "https://login.microsoftonline.com/common/oauth2/v2.0/authorize",
        "scopes": ["openid", "email"],
        "enabled": False,
    },
    "apple": {
        "name": "Apple OAuth",
        "authorize_url": "https://appleid.apple.com/auth/authorize",
        "scopes": ["name", "email"],
        "enabled": False,
    },
}


class AuthConnector(ApiKeyConnector):
    kind = ServiceKind.AUTH
    display_name = "Auth"
    min_key_length = 10
    credential_fields = (CredentialField("api_key", "AUTH_API_KEY", "Auth API key"),)

    def _provider(self, provider: str) -> dict[str, Any]:
        self._require_connected()
        try:
            return PROVIDERS[provider]
        except KeyError:
            raise ConnectorUnavailableError(self.kind.value, f"Unknown provider: {provider}") from None

    async def list_providers(self) -> list[dict]:
        self._require_connected()
        return [
            {"id": key, "name": p["name"], "enabled": p["enabled"], "configured": p["enabled"]}
            for key, p in PROVIDERS.items()
        ]

    async def get_provider_info(self, provider: str) -> dict[str, Any]:
        return {"id": provider, **self._provider(provider)}

    async def create_oauth_url(self, provider: str, client_id: str, redirect_uri: str) -> dict[str, str]:
        info = self._provider(provider)
        state = secrets.token_urlsafe(16)
        query = urlencode({
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(info["scopes"]),
            "state": state,
            "response_type": "code",
        })
        return {"url": f"{info['authorize_url']}?{query}", "state": state}

    async def validate_token(self, token: str) -> dict[str, Any]:
        self._require_connected()
        return {"valid": len(token) >= 10}


class ListProviders(Tool):
    """List configured OAuth providers."""

    async def execute(self, connector: AuthConnector) -> Any:
        return await connector.list_providers()


class GetProviderInfo(Tool):
    """Get details for one OAuth provider."""

    provider: str = Field(..., description="Provider id (github, google, microsoft, apple)")

    async def execute(self, connector: AuthConnector) -> Any:
        return await connector.get_provider_info(self.provider)


class CreateOauthUrl(Tool):
    """Build an authorization URL for a provider."""

    provider: str = Field(..., description="Provider id")
    client_id: str = Field(..., min_length=1, description="OAuth client ID")
    redirect_uri: str = Field(..., min_length=1, description="Callback URL")

    async def execute(self, connector: AuthConnector) -> Any:
        return await connector.create_oauth_url(self.provider, self.client_id, self.redirect_uri)


class ValidateToken(Tool):
    """Check the format of an access token."""

    token: str = Field(..., description="Access token")

    async def execute(self, connector: AuthConnector) -> Any:
        return await connector.validate_token(self.token)


TOOLS = (ListProviders, GetProviderInfo, CreateOauthUrl, ValidateToken)

"""
Supabase Connector - project tables, auth settings and edge functions.
"""

from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..errors import CredentialValidationError
from ..models import ServiceKind
from ..tools import Tool
from .base import BaseConnector

__all__ = ["SupabaseConnector", "TOOLS"]

TABLES = {
    "users": ["id", "email", "created_at"],
    "projects": ["id", "owner_id", "name", "created_at"],
}


class SupabaseConnector(BaseConnector):
    kind = ServiceKind.SUPABASE
    display_name = "Supabase"
    credential_fields = (
        CredentialField("api_key", "SUPABASE_API_KEY", "Supabase service key"),
        CredentialField("project_url", "SUPABASE_PROJECT_URL", "Supabase project URL", secret=False),
    )

    def validate(self, values: dict[str, str]) -> None:
        super().validate(values)
        if not values["project_url"].startswith("https://"):
            raise CredentialValidationError(self.kind.value, "Project URL must start with https://")

    async def list_tables(self) -> list[dict]:
        self._require_connected()
        return [{"name": name, "columns": len(cols), "schema": "public"} for name, cols in TABLES.items()]

    async def get_table_schema(self, table: str) -> dict[str, Any]:
        self._require_connected()
        return {"name": table, "schema": "public", "columns": TABLES.get(table, [])}

    async def get_auth_config(self) -> dict[str, Any]:
        self._require_connected()
        return {
            "project_url": self.settings["project_url"],
            "providers": ["email", "github"],
            "email_confirmation": True,
        }

    async def list_functions(self) -> list[dict]:
        self._require_connected()
        return [{"name": "send-welcome-email", "status": "active", "runtime": "deno"}]


class ListTables(Tool):
    """List tables in the public schema."""

    async def execute(self, connector: SupabaseConnector) -> Any:
        return await connector.list_tables()


class GetTableSchema(Tool):
    """Get the columns of a table."""

    table: str = Field(..., min_length=1, description="Table name")

    async def execute(self, connector: SupabaseConnector) -> Any:
        return await connector.get_table_schema(self.table)


class GetAuthConfig(Tool):
    """Get the project's auth settings."""

    async def execute(self, connector: SupabaseConnector) -> Any:
        return await connector.get_auth_config()


class ListFunctions(Tool):
    """List edge functions."""

    async def execute(self, connector: SupabaseConnector) -> Any:
        return await connector.list_functions()


TOOLS = (ListTables, GetTableSchema, GetAuthConfig, ListFunctions)

"""
MongoDB Connector - pymongo async client.

Real check: `ping` admin command against the server named by the
connection string. Documents are returned as relaxed extended JSON so
ObjectIds and dates survive the trip to the dashboard and MCP clients.
"""

import json
from collections.abc import Callable
from typing import Any

from bson import json_util
from pydantic import Field
from pymongo import AsyncMongoClient

from ..contracts import CredentialField
from ..errors import CredentialValidationError
from ..models import ServiceKind
from ..tools import Tool
from .base import BaseConnector

__all__ = ["MongoDBConnector", "TOOLS"]

SCHEMES = ("mongodb://", "mongodb+srv://")


def _plain(value: Any) -> Any:
    return json.loads(json_util.dumps(value, json_options=json_util.RELAXED_JSON_OPTIONS))


class MongoDBConnector(BaseConnector):
    """MongoDB connector."""

    kind = ServiceKind.MONGODB
    display_name = "MongoDB"
    credential_fields = (
        CredentialField("connection_string", "MONGODB_CONNECTION_STRING", "MongoDB connection string"),
        CredentialField("database", "MONGODB_DATABASE", "Default database", secret=False, required=False),
    )

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        client_factory: Callable[..., Any] | None = None,
    ) -> None:
        super().__init__()
        self.timeout = timeout
        self._client_factory = client_factory or AsyncMongoClient
        self._client: Any = None

    def validate(self, values: dict[str, str]) -> None:
        super().validate(values)
        if not values["connection_string"].startswith(SCHEMES):
            raise CredentialValidationError(
                self.kind.value,
                "Invalid connection string: must start with mongodb:// or mongodb+srv://",
            )

    async def _open(self, values: dict[str, str]) -> None:
        timeout_ms = int(self.timeout * 1000)
        self._client = self._client_factory(
            values["connection_string"],
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )
        await self._client.admin.command("ping")

    async def _close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()

    def _database(self, name: str | None = None):
        self._require_connected()
        name = name or self.settings.get("database") or "test"
        return self._client[name]

    async def list_databases(self) -> list[dict]:
        self._require_connected()
        result = await self._client.admin.command("listDatabases")
        return [
            {"name": db["name"], "size_on_disk": db.get("sizeOnDisk", 0), "empty": db.get("empty", False)}
            for db in result.get("databases", [])
        ]

    async def list_collections(self, database: str | None = None) -> list[str]:
        return sorted(await self._database(database).list_collection_names())

    async def get_stats(self, database: str | None = None) -> dict[str, Any]:
        stats = await self._database(database).command("dbstats")
        return {
            "db": stats.get("db"),
            "collections": stats.get("collections", 0),
            "objects": stats.get("objects", 0),
            "data_size": stats.get("dataSize", 0),
            "storage_size": stats.get("storageSize", 0),
            "indexes": stats.get("indexes", 0),
        }

    async def find_documents(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        limit: int = 10,
        database: str | None = None,
    ) -> list[dict]:
        cursor = self._database(database)[collection].find(filter or {}, limit=limit)
        return _plain(await cursor.to_list(length=limit))

    async def insert_document(
        self, collection: str, document: dict[str, Any], database: str | None = None
    ) -> dict[str, Any]:
        result = await self._database(database)[collection].insert_one(document)
        return {"inserted_id": str(result.inserted_id), "acknowledged": result.acknowledged}


# --- Tools ---


class ListDatabases(Tool):
    """List all databases on the server."""

    async def execute(self, connector: MongoDBConnector) -> Any:
        return await connector.list_databases()


class ListCollections(Tool):
    """List collections in a database."""

    database: str | None = Field(None, description="Database name (defaults to the configured one)")

    async def execute(self, connector: MongoDBConnector) -> Any:
        return await connector.list_collections(self.database)


class GetDatabaseInfo(Tool):
    """Get statistics for a database."""

    database: str | None = Field(None, description="Database name (defaults to the configured one)")

    async def execute(self, connector: MongoDBConnector) -> Any:
        return await connector.get_stats(self.database)


class ExecuteQuery(Tool):
    """Find documents matching a filter."""

    collection: str = Field(..., min_length=1, description="Collection name")
    filter: dict[str, Any] = Field(default_factory=dict, description="MongoDB query filter")
    limit: int = Field(10, ge=1, le=1000, description="Maximum documents to return")
    database: str | None = Field(None, description="Database name")

    async def execute(self, connector: MongoDBConnector) -> Any:
        return await connector.find_documents(self.collection, self.filter, self.limit, self.database)


class InsertDocument(Tool):
    """Insert one document into a collection."""

    collection: str = Field(..., min_length=1, description="Collection name")
    document: dict[str, Any] = Field(..., description="Document to insert")
    database: str | None = Field(None, description="Database name")

    async def execute(self, connector: MongoDBConnector) -> Any:
        return await connector.insert_document(self.collection, self.document, self.database)


TOOLS = (ListDatabases, ListCollections, GetDatabaseInfo, ExecuteQuery, InsertDocument)

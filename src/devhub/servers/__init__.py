"""
Standalone stdio MCP servers, one per service kind.

Run as `python -m devhub.servers <kind>` (or `devhub-mcp <kind>`). The
server reads the kind's credentials from its environment variables,
connects lazily on the first tool call and exposes the kind's fixed tool
list. Errors map to fixed JSON-RPC codes:

- argument validation failure -> INVALID_PARAMS
- unknown tool name           -> METHOD_NOT_FOUND
- connect or tool failure     -> INTERNAL_ERROR
"""

import json
import os
from collections.abc import Mapping
from typing import Any

import pydantic
import structlog
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData, TextContent, Tool

from ..connectors import ConnectorFactories, default_factories
from ..contracts import ConnectorProtocol
from ..models import ServiceKind

__all__ = ["ToolServer", "run_stdio"]

logger = structlog.get_logger(__name__)


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


class ToolServer:
    """MCP tool server for one service kind.

    Example:
        server = ToolServer("github", environ={"GITHUB_TOKEN": "ghp_..."})
        repos = await server.dispatch("list_github_repositories", {"per_page": 5})
    """

    def __init__(
        self,
        kind: ServiceKind | str,
        factories: ConnectorFactories | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        from .. import __version__

        self.kind = ServiceKind(kind)
        self.factories = factories or default_factories()
        self.tools = {tool.get_name(): tool for tool in self.factories.tools(self.kind)}
        self._environ = environ if environ is not None else os.environ
        self._connector: ConnectorProtocol | None = None
        self.version = __version__
        self.server = Server(f"devhub-{self.kind.value}", version=__version__)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
            return await self.call(name, arguments or {})

    def credentials(self) -> dict[str, str]:
        """The kind's credentials from the environment."""
        return {
            f.key: self._environ[f.env_var]
            for f in self.factories.credential_fields(self.kind)
            if self._environ.get(f.env_var)
        }

    def list_tools(self) -> list[Tool]:
        return [
            Tool(name=name, description=tool.get_description(), inputSchema=tool.input_schema())
            for name, tool in self.tools.items()
        ]

    async def _connected(self) -> ConnectorProtocol:
        if self._connector is not None and self._connector.connected:
            return self._connector

        connector = self.factories.create(self.kind)
        try:
            await connector.connect(self.credentials())
        except Exception as e:
            logger.error("mcp_connect_failed", kind=self.kind.value, error=str(e))
            raise _error(INTERNAL_ERROR, f"Failed to connect to {self.kind.value}: {e}") from e
        self._connector = connector
        return connector

    async def dispatch(self, name: str, arguments: Mapping[str, Any]) -> Any:
        """Validate arguments, connect if needed and run one tool.

        Raises:
            McpError: With INVALID_PARAMS, METHOD_NOT_FOUND or INTERNAL_ERROR
        """
        tool_cls = self.tools.get(name)
        if tool_cls is None:
            raise _error(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        try:
            tool = tool_cls.model_validate(dict(arguments))
        except pydantic.ValidationError as e:
            raise _error(INVALID_PARAMS, f"Invalid arguments for {name}: {e}") from e

        connector = await self._connected()
        try:
            return await tool.execute(connector)
        except Exception as e:
            logger.error("mcp_tool_failed", kind=self.kind.value, tool=name, error=str(e))
            raise _error(INTERNAL_ERROR, f"{name} failed: {e}") from e

    async def call(self, name: str, arguments: Mapping[str, Any]) -> list[TextContent]:
        result = await self.dispatch(name, arguments)
        text = result if isinstance(result, str) else json.dumps(result, indent=2, default=str)
        return [TextContent(type="text", text=text)]

    async def close(self) -> None:
        if self._connector is not None:
            await self._connector.disconnect()
            self._connector = None

    async def start(self) -> None:
        """Serve over stdin/stdout until the client disconnects."""
        logger.info("mcp_server_starting", kind=self.kind.value, tools=len(self.tools))
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=f"devhub-{self.kind.value}",
                        server_version=self.version,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={},
                        ),
                    ),
                )
        finally:
            await self.close()


async def run_stdio(kind: ServiceKind | str) -> None:
    await ToolServer(kind).start()

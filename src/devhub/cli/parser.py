"""
CLI Parser - Argument parser for the devhub command.
"""

import argparse

from ..models import ServiceKind

__all__ = ["create_parser"]


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="devhub",
        description="DevHub - Service connection hub",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show info logs on stderr")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # list
    subparsers.add_parser("list", help="List services and their status")

    # status
    status_parser = subparsers.add_parser("status", help="Show one service")
    status_parser.add_argument("id", help="Service id")

    # connect
    connect_parser = subparsers.add_parser("connect", help="Connect a service")
    connect_parser.add_argument("id", help="Service id")
    connect_parser.add_argument(
        "--set",
        dest="values",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Credential value (repeatable); prompts when omitted",
    )
    connect_parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Only use saved config and environment variables",
    )

    # disconnect
    disconnect_parser = subparsers.add_parser("disconnect", help="Disconnect a service")
    disconnect_parser.add_argument("id", help="Service id")

    # configure
    configure_parser = subparsers.add_parser("configure", help="Merge values into a service config")
    configure_parser.add_argument("id", help="Service id")
    configure_parser.add_argument("values", metavar="KEY=VALUE", nargs="+", help="Config values")

    # tree
    subparsers.add_parser("tree", help="Show the service tree")

    # tools
    tools_parser = subparsers.add_parser("tools", help="List the MCP tools of a service kind")
    tools_parser.add_argument("kind", choices=[k.value for k in ServiceKind], help="Service kind")

    # cline
    cline_parser = subparsers.add_parser("cline", help="Cline MCP settings export")
    cline_parser.add_argument(
        "action",
        nargs="?",
        default="status",
        choices=["status", "sync"],
        help="status (show exported servers) or sync (export every connected service)",
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the dashboard API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Port")

    return parser

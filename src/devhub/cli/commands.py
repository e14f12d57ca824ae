"""
CLI Commands - Handlers for the devhub command.

Each invocation activates a DevHub against the persisted state, runs one
operation and deactivates it again. Live connections don't outlive the
process; the persisted status is the last-known one.
"""

import argparse
import asyncio

from ..config import DevHubConfig
from ..connectors import default_factories
from ..credentials import ChainCredentials, EnvironmentCredentials, PromptCredentials
from ..hub import DevHub
from ..models import ServiceKind
from .output import print_error, print_service, print_services

__all__ = ["parse_assignments", "run_command"]


def parse_assignments(values: list[str]) -> dict[str, str]:
    """KEY=VALUE strings -> dict.

    Raises:
        ValueError: If an item has no '=' or an empty key
    """
    result = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got: {item}")
        result[key.strip()] = value
    return result


def run_command(command: str, args: argparse.Namespace, config: DevHubConfig) -> int:
    """Run the specified command.

    Returns:
        Exit code
    """
    if command == "serve":
        return serve(config, host=args.host, port=args.port)
    if command == "tools":
        return show_tools(args.kind)
    return asyncio.run(_run_with_hub(command, args, config))


async def _run_with_hub(command: str, args: argparse.Namespace, config: DevHubConfig) -> int:
    credentials = None
    if command == "connect":
        providers = [EnvironmentCredentials()]
        if not args.no_prompt:
            providers.append(PromptCredentials(validate=default_factories().check_credentials))
        credentials = ChainCredentials(*providers)

    hub = DevHub(config, credentials=credentials).activate()
    try:
        return await _dispatch(hub, command, args)
    finally:
        await hub.deactivate()


async def _dispatch(hub: DevHub, command: str, args: argparse.Namespace) -> int:
    registry = hub.registry
    assert registry is not None

    if command == "list":
        print_services(registry.list_services())
        return 0

    if command == "tree":
        assert hub.tree is not None
        print(hub.tree.render())
        return 0

    if command == "cline":
        if hub.cline is None:
            print_error("Cline export is disabled")
            return 1
        if args.action == "sync":
            count = hub.cline.sync_all_connected()
            print(f"Synced {count} connected service(s) to {hub.cline.settings_path}")
        exported = hub.cline.exported_servers()
        if not exported:
            print("No DevHub MCP servers found in Cline settings")
        else:
            print("DevHub MCP servers in Cline:")
            for service_id in exported:
                print(f"  * {service_id}")
            print(f"Total: {len(exported)} server(s)")
        return 0

    service = registry.get_service(args.id)
    if service is None:
        print_error(f"Service '{args.id}' not found")
        return 1

    if command == "status":
        secret = {f.key for f in registry.factories.credential_fields(service.kind) if f.secret}
        print_service(service, secret)
        return 0

    if command == "configure":
        try:
            values = parse_assignments(args.values)
        except ValueError as e:
            print_error(str(e))
            return 1
        registry.update_config(args.id, values)
        print(f"Updated {', '.join(sorted(values))} for {service.name}")
        return 0

    if command == "connect":
        try:
            values = parse_assignments(args.values) if args.values else None
        except ValueError as e:
            print_error(str(e))
            return 1
        print(f"Connecting to {service.name}...")
        if await registry.connect(args.id, values):
            print(f"Connected to {service.name}")
            return 0
        after = registry.get_service(args.id)
        if after is not None and after.last_error:
            print_error(f"Failed to connect to {service.name}: {after.last_error}")
        else:
            print(f"{service.name}: connection cancelled")
        return 1

    if command == "disconnect":
        await registry.disconnect(args.id)
        print(f"Disconnected from {service.name}")
        return 0

    print_error(f"Unknown command: {command}")
    return 1


def show_tools(kind: str) -> int:
    from ..connectors import default_factories

    tools = default_factories().tools(ServiceKind(kind))
    for tool in tools:
        print(f"{tool.get_name()}: {tool.get_description()}")
    return 0


def serve(config: DevHubConfig, host: str | None = None, port: int | None = None) -> int:
    """Run the dashboard API in the foreground."""
    import uvicorn

    from ..app import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
        log_config=None,
    )
    return 0

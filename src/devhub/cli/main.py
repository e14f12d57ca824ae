"""
CLI Main - Entry point for the `devhub` command.

Usage:
    devhub list                         List services and their status
    devhub status <id>                  Show one service
    devhub connect <id> [--set K=V]     Connect a service
    devhub disconnect <id>              Disconnect a service
    devhub configure <id> K=V...        Merge values into a service config
    devhub tree                         Show the service tree
    devhub tools <kind>                 List MCP tools of a kind
    devhub cline [status|sync]          Cline MCP settings export
    devhub serve                        Run the dashboard API
"""

import sys

from ..config import DevHubConfig
from ..logging import configure_logging
from .commands import run_command
from .output import print_error
from .parser import create_parser

__all__ = ["main"]


def main(args: list[str] | None = None) -> int:
    """Main entry point for the devhub CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    if args is None:
        args = sys.argv[1:]

    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 0

    config = DevHubConfig()
    console_level = None if parsed.verbose or parsed.command == "serve" else "WARNING"
    configure_logging(config, console_level=console_level)

    try:
        return run_command(parsed.command, parsed, config)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

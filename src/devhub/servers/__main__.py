"""
Entry point: python -m devhub.servers <kind>
"""

import argparse
import asyncio
import sys

from ..config import DevHubConfig
from ..logging import configure_logging
from ..models import ServiceKind
from . import run_stdio


def main(args: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="devhub-mcp",
        description="Run a DevHub service as a stdio MCP server",
    )
    parser.add_argument("kind", choices=[k.value for k in ServiceKind], help="Service kind")
    parsed = parser.parse_args(args)

    configure_logging(DevHubConfig(), file_output=False)
    try:
        asyncio.run(run_stdio(parsed.kind))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
DevHub - Service connection hub.

A registry of external-service connectors (GitHub, MongoDB, Stripe, ...)
with a connection status state machine, lifecycle events, durable state,
and observers that follow it: a tree view model, a dashboard API and a
Cline MCP settings export.
"""

__version__ = "1.0.0"

from .config import DevHubConfig, config

__all__ = [
    "__version__",
    "DevHubConfig",
    "config",
]

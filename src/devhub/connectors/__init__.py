"""Service connectors and the factory registry that builds them."""

from .base import ApiKeyConnector, BaseConnector
from .factory import BUILTIN, ConnectorFactories, default_factories
from .http import HTTPConnector

__all__ = [
    "ApiKeyConnector",
    "BUILTIN",
    "BaseConnector",
    "ConnectorFactories",
    "HTTPConnector",
    "default_factories",
]

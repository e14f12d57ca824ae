"""
Connector Factories - ServiceKind -> connector constructor.

The registry never imports connector classes directly; it asks the
factories for a fresh instance on every connect attempt. Adding a service
kind means registering one factory here.
"""

from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

import httpx

from ..contracts import ConnectorProtocol, CredentialField
from ..models import ServiceKind
from ..tools import Tool
from . import (
    auth,
    browser,
    context7,
    desktop_commander,
    dev21,
    figma,
    filesystem,
    firecrawl,
    github,
    lemonsqueezy,
    mongodb,
    sentry,
    sequential_thinking,
    stripe,
    supabase,
    taskmaster,
    vercel,
)
from .http import HTTPConnector

__all__ = ["BUILTIN", "ConnectorFactories", "default_factories"]

ConnectorFactory = Callable[..., ConnectorProtocol]

# kind -> (connector class, stdio server tools)
BUILTIN: dict[ServiceKind, tuple[type, tuple[type[Tool], ...]]] = {
    ServiceKind.GITHUB: (github.GitHubConnector, github.TOOLS),
    ServiceKind.MONGODB: (mongodb.MongoDBConnector, mongodb.TOOLS),
    ServiceKind.STRIPE: (stripe.StripeConnector, stripe.TOOLS),
    ServiceKind.LEMONSQUEEZY: (lemonsqueezy.LemonSqueezyConnector, lemonsqueezy.TOOLS),
    ServiceKind.AUTH: (auth.AuthConnector, auth.TOOLS),
    ServiceKind.CONTEXT7: (context7.Context7Connector, context7.TOOLS),
    ServiceKind.SEQUENTIAL_THINKING: (
        sequential_thinking.SequentialThinkingConnector,
        sequential_thinking.TOOLS,
    ),
    ServiceKind.FIRECRAWL: (firecrawl.FirecrawlConnector, firecrawl.TOOLS),
    ServiceKind.FILESYSTEM: (filesystem.FilesystemConnector, filesystem.TOOLS),
    ServiceKind.BROWSER: (browser.BrowserConnector, browser.TOOLS),
    ServiceKind.FIGMA: (figma.FigmaConnector, figma.TOOLS),
    ServiceKind.SUPABASE: (supabase.SupabaseConnector, supabase.TOOLS),
    ServiceKind.VERCEL: (vercel.VercelConnector, vercel.TOOLS),
    ServiceKind.SENTRY: (sentry.SentryConnector, sentry.TOOLS),
    ServiceKind.TASKMASTER: (taskmaster.TaskmasterConnector, taskmaster.TOOLS),
    ServiceKind.DESKTOP_COMMANDER: (desktop_commander.DesktopCommanderConnector, desktop_commander.TOOLS),
    ServiceKind.DEV21: (dev21.Dev21Connector, dev21.TOOLS),
}


class ConnectorFactories:
    """Registry of connector factories keyed by service kind.

    Example:
        factories = ConnectorFactories()
        factories.register(ServiceKind.GITHUB, GitHubConnector)

        connector = factories.create(ServiceKind.GITHUB)
        await connector.connect({"token": "ghp_..."})
    """

    def __init__(self) -> None:
        self._factories: dict[ServiceKind, ConnectorFactory] = {}
        self._fields: dict[ServiceKind, tuple[CredentialField, ...]] = {}
        self._tools: dict[ServiceKind, tuple[type[Tool], ...]] = {}

    def register(
        self,
        kind: ServiceKind,
        factory: ConnectorFactory,
        *,
        credential_fields: tuple[CredentialField, ...] | None = None,
        tools: tuple[type[Tool], ...] = (),
        replace: bool = False,
    ) -> None:
        """Register the factory for a kind.

        Args:
            kind: Service kind served
            factory: Zero-argument callable returning a fresh connector
            credential_fields: Defaults to the factory's `credential_fields`
            tools: Tools exposed by the kind's stdio server
            replace: Allow overwriting an existing registration

        Raises:
            ValueError: If the kind is registered and replace is False
        """
        kind = ServiceKind(kind)
        if kind in self._factories and not replace:
            raise ValueError(f"Connector factory already registered: {kind.value}")
        if credential_fields is None:
            target = factory.func if isinstance(factory, partial) else factory
            credential_fields = tuple(getattr(target, "credential_fields", ()))
        self._factories[kind] = factory
        self._fields[kind] = credential_fields
        self._tools[kind] = tuple(tools)

    def create(self, kind: ServiceKind | str, **options: Any) -> ConnectorProtocol:
        """Build a fresh connector.

        Raises:
            KeyError: If no factory is registered for the kind
        """
        factory = self._factories.get(ServiceKind(kind))
        if factory is None:
            raise KeyError(f"No connector registered for kind: {kind}")
        return factory(**options)

    def check_credentials(self, kind: ServiceKind | str, values: Mapping[str, Any]) -> None:
        """Run the kind's local format check without connecting.

        Kinds without a registered factory, or whose connector has no
        format check, accept anything.

        Raises:
            CredentialValidationError: Format check failed
        """
        if ServiceKind(kind) not in self._factories:
            return
        check = getattr(self.create(kind), "check_credentials", None)
        if check is not None:
            check(values)

    def kinds(self) -> list[ServiceKind]:
        return list(self._factories)

    def credential_fields(self, kind: ServiceKind | str) -> tuple[CredentialField, ...]:
        return self._fields.get(ServiceKind(kind), ())

    def tools(self, kind: ServiceKind | str) -> tuple[type[Tool], ...]:
        return self._tools.get(ServiceKind(kind), ())

    def __contains__(self, kind: object) -> bool:
        return kind in self._factories


def default_factories(
    *,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ConnectorFactories:
    """Factories for every built-in kind.

    `timeout` applies to every connector with a network client;
    `transport` is handed to the REST connectors.
    """
    factories = ConnectorFactories()
    for kind, (cls, tools) in BUILTIN.items():
        if issubclass(cls, HTTPConnector):
            factory = partial(cls, timeout=timeout, transport=transport)
        elif cls is mongodb.MongoDBConnector:
            factory = partial(cls, timeout=timeout)
        else:
            factory = cls
        factories.register(kind, factory, credential_fields=cls.credential_fields, tools=tools)
    return factories

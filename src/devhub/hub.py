"""
DevHub - Application container.

Wires store, event bus, connector factories, registry and observers with
an explicit activate/deactivate lifecycle. Nothing here is a module-level
singleton; each DevHub owns its own registry.
"""

import structlog

from .config import DevHubConfig
from .connectors import BUILTIN, ConnectorFactories, default_factories
from .credentials import CredentialProvider
from .events import EventBus
from .models import ServiceDescriptor
from .observers import ClineSync, DashboardSummary, ServiceTree
from .registry import ServiceRegistry
from .storage import FileGlobalState, GlobalStateStore

__all__ = ["DEFAULT_SERVICES", "DevHub"]

logger = structlog.get_logger(__name__)

# One service per built-in kind, id == kind
DEFAULT_SERVICES: tuple[ServiceDescriptor, ...] = tuple(
    ServiceDescriptor(id=kind.value, name=cls.display_name, kind=kind)
    for kind, (cls, _tools) in BUILTIN.items()
)


class DevHub:
    """Owns one registry and its observers.

    Example:
        hub = DevHub(config).activate()
        await hub.registry.connect("github", {"token": "ghp_..."})
        print(hub.tree.render())
        await hub.deactivate()
    """

    def __init__(
        self,
        config: DevHubConfig | None = None,
        *,
        store: GlobalStateStore | None = None,
        factories: ConnectorFactories | None = None,
        credentials: CredentialProvider | None = None,
        cline: bool = True,
    ) -> None:
        self.config = config or DevHubConfig()
        self._store = store
        self._factories = factories
        self._credentials = credentials
        self._cline_enabled = cline

        self.bus: EventBus | None = None
        self.registry: ServiceRegistry | None = None
        self.tree: ServiceTree | None = None
        self.summary: DashboardSummary | None = None
        self.cline: ClineSync | None = None

    @property
    def active(self) -> bool:
        return self.registry is not None

    def activate(self) -> "DevHub":
        """Build the registry, load state, bootstrap defaults, attach observers."""
        if self.active:
            return self

        if self._store is None:
            self.config.ensure_dirs()
            self._store = FileGlobalState(self.config.state_file)

        self.bus = EventBus()
        self.registry = ServiceRegistry(
            self._store,
            self.bus,
            self._factories or default_factories(timeout=self.config.http_timeout),
            self._credentials,
        )

        self.tree = ServiceTree(self.registry)
        self.summary = DashboardSummary(self.registry)
        self.tree.attach()
        self.summary.attach()
        if self._cline_enabled:
            self.cline = ClineSync(
                self.registry,
                settings_path=self.config.cline_settings_path,
                namespace=self.config.namespace,
            )
            self.cline.attach()

        self.registry.bootstrap(DEFAULT_SERVICES)
        logger.info("devhub_activated", services=len(self.registry))
        return self

    async def deactivate(self) -> None:
        """Detach observers and shut the registry down."""
        if not self.active:
            return
        assert self.registry is not None and self.bus is not None

        for observer in (self.tree, self.summary, self.cline):
            if observer is not None:
                observer.detach()
        await self.bus.drain()
        await self.registry.shutdown()

        self.registry = None
        self.bus = None
        self.tree = None
        self.summary = None
        self.cline = None
        logger.info("devhub_deactivated")

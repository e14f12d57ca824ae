"""
Service Registry - Owns service descriptors and their live connections.

The registry is the only writer of service status. Every state-changing
operation persists the full descriptor list under one global-state key
and emits exactly one event per transition.

State machine per service id:

    Disconnected --connect--> Connecting --success--> Connected
    Connecting --failure--> Error
    Connecting --declined--> Disconnected
    Connected --disconnect--> Disconnected
    Error --connect--> Connecting
    Error --disconnect--> Disconnected
    Connected --connect--> Connected (no-op)

Connector errors never escape connect(): they become status Error plus
`last_error`. Persistence failures are logged and never surfaced.
"""

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pydantic
import structlog

from .connectors.factory import ConnectorFactories
from .contracts import ConnectorProtocol, CredentialField
from .credentials import CredentialProvider
from .errors import DescriptorValidationError, PersistenceError
from .events import ConfigUpdated, EventBus, ServiceRegistered, StatusChanged
from .models import HubState, ServiceDescriptor, ServiceStatus
from .storage import GlobalStateStore

__all__ = ["Connection", "STATE_KEY", "ServiceRegistry"]

logger = structlog.get_logger(__name__)

STATE_KEY = "devhubState"


@dataclass(slots=True, frozen=True)
class Connection:
    """A live connector for one Connected service. Never persisted."""
    connector: ConnectorProtocol
    connected_at: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _blank(values: Mapping[str, Any] | None) -> bool:
    if not values:
        return True
    return all(v is None or not str(v).strip() for v in values.values())


class ServiceRegistry:
    """Registry of services and their connection lifecycle.

    Example:
        registry = ServiceRegistry(MemoryGlobalState(), EventBus(), default_factories())
        registry.register_service({"id": "gh", "name": "GitHub", "kind": "github"})

        await registry.connect("gh", {"token": "ghp_..."})
        registry.get_status("gh")  # ServiceStatus.CONNECTED
    """

    def __init__(
        self,
        store: GlobalStateStore,
        bus: EventBus,
        factories: ConnectorFactories,
        credentials: CredentialProvider | None = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._factories = factories
        self._credentials = credentials
        self._services: dict[str, ServiceDescriptor] = {}
        self._live: dict[str, Connection] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._load()

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def factories(self) -> ConnectorFactories:
        return self._factories

    # --- Persistence ---

    def _load(self) -> None:
        raw = self._store.get(STATE_KEY)
        if not raw:
            return
        try:
            state = HubState.model_validate(raw)
        except pydantic.ValidationError as e:
            logger.warning("state_invalid", key=STATE_KEY, errors=e.error_count())
            return

        for service in state.servers:
            # No connector survives a restart; an interrupted connect settles here
            if service.status is ServiceStatus.CONNECTING:
                service.status = ServiceStatus.DISCONNECTED
            self._services[service.id] = service
        logger.info("state_loaded", services=len(self._services))

    def _persist(self) -> None:
        try:
            self._store.update(STATE_KEY, self.get_state().model_dump(mode="json", by_alias=True))
        except PersistenceError as e:
            logger.error("state_persist_failed", error=str(e))

    def get_state(self) -> HubState:
        """Snapshot of the persisted record."""
        servers = [s.model_copy(deep=True) for s in self._services.values()]
        return HubState(
            servers=servers,
            is_connecting=any(s.status is ServiceStatus.CONNECTING for s in servers),
        )

    # --- Registration ---

    def register_service(self, descriptor: ServiceDescriptor | Mapping[str, Any]) -> ServiceDescriptor:
        """Insert or overwrite a descriptor by id.

        Raises:
            DescriptorValidationError: If id or name is missing, or the
                descriptor is otherwise malformed
        """
        if isinstance(descriptor, ServiceDescriptor):
            service = descriptor.model_copy(deep=True)
        else:
            if not descriptor.get("id") or not descriptor.get("name"):
                raise DescriptorValidationError("Service must have id and name")
            try:
                service = ServiceDescriptor.model_validate(descriptor)
            except pydantic.ValidationError as e:
                raise DescriptorValidationError(f"Invalid service descriptor: {e}") from e

        if not service.id.strip() or not service.name.strip():
            raise DescriptorValidationError("Service must have id and name")

        # Status fields are owned by the registry, never by the caller
        live = self._live.get(service.id)
        current = self._services.get(service.id)
        service.last_error = None
        if live is not None:
            # Overwriting a connected service keeps its live connection
            service.status = ServiceStatus.CONNECTED
            service.last_connected_at = live.connected_at
        elif current is not None and current.status is ServiceStatus.CONNECTING:
            # A connect is in flight; it settles the status of the new descriptor
            service.status = ServiceStatus.CONNECTING
            service.last_connected_at = current.last_connected_at
        else:
            service.status = ServiceStatus.DISCONNECTED
            service.last_connected_at = current.last_connected_at if current else None

        self._services[service.id] = service
        self._locks.setdefault(service.id, asyncio.Lock())
        self._persist()
        self._bus.publish_nowait(ServiceRegistered(service.model_copy(deep=True)))
        logger.info("service_registered", service_id=service.id, kind=service.kind.value)
        return service.model_copy(deep=True)

    def bootstrap(self, descriptors: Iterable[ServiceDescriptor | Mapping[str, Any]]) -> list[str]:
        """Register every descriptor whose id isn't already known.

        Returns:
            Ids that were registered
        """
        added = []
        for descriptor in descriptors:
            service_id = (
                descriptor.id if isinstance(descriptor, ServiceDescriptor) else descriptor.get("id")
            )
            if service_id in self._services:
                continue
            added.append(self.register_service(descriptor).id)
        if added:
            logger.info("services_bootstrapped", count=len(added))
        return added

    # --- Lifecycle ---

    def _lock(self, service_id: str) -> asyncio.Lock:
        return self._locks.setdefault(service_id, asyncio.Lock())

    async def _set_status(
        self,
        service: ServiceDescriptor,
        status: ServiceStatus,
        error: str | None = None,
        connected_at: datetime | None = None,
    ) -> None:
        # A re-registration during an await replaces the descriptor object
        current = self._services.get(service.id)
        if current is None:
            # Registry was shut down; nothing to persist or announce
            return
        service = current
        service.status = status
        service.last_error = error if status is ServiceStatus.ERROR else None
        if status is ServiceStatus.CONNECTED:
            service.last_connected_at = connected_at or _now()
        self._persist()
        await self._bus.publish(StatusChanged(service.id, status, service.model_copy(deep=True)))
        logger.info("service_status_changed", service_id=service.id, status=status.value)

    def _stored_credentials(
        self, service: ServiceDescriptor, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        """Credentials saved in config by a previous connect or configure."""
        required = [f for f in fields if f.required]
        if not required or any(_blank({f.key: service.config.get(f.key)}) for f in required):
            return None
        return {f.key: str(service.config[f.key]) for f in fields if f.key in service.config}

    async def _acquire(
        self, service: ServiceDescriptor, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        stored = self._stored_credentials(service, fields)
        if stored is not None:
            return stored
        if self._credentials is None:
            return None
        return await self._credentials.acquire(service.kind, fields)

    async def connect(self, service_id: str, credentials: Mapping[str, Any] | None = None) -> bool:
        """Connect a service.

        Args:
            service_id: Registered service id
            credentials: Explicit credentials. When omitted, credentials saved
                in the service config are used, then the credential provider.

        Returns:
            True if the service is Connected afterwards
        """
        service = self._services.get(service_id)
        if service is None:
            logger.warning("connect_unknown_service", service_id=service_id)
            return False

        if service.status is ServiceStatus.CONNECTING:
            logger.warning("connect_in_progress", service_id=service_id)
            return False

        async with self._lock(service_id):
            service = self._services.get(service_id)
            if service is None:
                return False
            if service.status is ServiceStatus.CONNECTED and service_id in self._live:
                logger.info("service_already_connected", service_id=service_id)
                return True

            await self._set_status(service, ServiceStatus.CONNECTING)

            fields = self._factories.credential_fields(service.kind)
            try:
                if credentials is not None:
                    values = dict(credentials)
                else:
                    values = await self._acquire(service, fields)
            except asyncio.CancelledError:
                await self._set_status(service, ServiceStatus.DISCONNECTED)
                raise
            except Exception as e:
                logger.error("credential_acquire_failed", service_id=service_id, error=str(e))
                await self._set_status(service, ServiceStatus.ERROR, str(e) or type(e).__name__)
                return False

            if _blank(values):
                logger.info("connect_declined", service_id=service_id)
                await self._set_status(service, ServiceStatus.DISCONNECTED)
                return False

            values = {k: "" if v is None else str(v) for k, v in values.items()}
            return await self._open(service, values)

    async def _open(self, service: ServiceDescriptor, values: dict[str, str]) -> bool:
        try:
            connector = self._factories.create(service.kind)
        except KeyError:
            await self._set_status(
                service, ServiceStatus.ERROR, f"No connector registered for kind: {service.kind.value}"
            )
            return False

        try:
            ok = await connector.connect({**service.config, **values})
            if not ok:
                raise RuntimeError(f"{service.name} connection failed")
        except Exception as e:
            await self._dispose(service.id, connector)
            logger.warning("service_connect_failed", service_id=service.id, error=str(e))
            await self._set_status(service, ServiceStatus.ERROR, str(e) or type(e).__name__)
            return False

        current = self._services.get(service.id)
        if current is None:
            # Shut down while the connector was opening
            await self._dispose(service.id, connector)
            return False

        previous = self._live.pop(current.id, None)
        if previous is not None:
            await self._dispose(current.id, previous.connector)

        current.config.update(values)
        connection = Connection(connector, _now())
        self._live[current.id] = connection
        await self._set_status(current, ServiceStatus.CONNECTED, connected_at=connection.connected_at)
        return True

    async def _dispose(self, service_id: str, connector: ConnectorProtocol) -> None:
        try:
            await connector.disconnect()
        except Exception as e:
            logger.warning("connector_dispose_failed", service_id=service_id, error=str(e))

    async def disconnect(self, service_id: str) -> bool:
        """Disconnect a service. Already Disconnected is a no-op.

        Returns:
            False only for unknown ids
        """
        if service_id not in self._services:
            logger.warning("disconnect_unknown_service", service_id=service_id)
            return False

        async with self._lock(service_id):
            service = self._services.get(service_id)
            if service is None:
                return False
            if service.status is ServiceStatus.DISCONNECTED and service_id not in self._live:
                logger.debug("service_already_disconnected", service_id=service_id)
                return True

            connection = self._live.pop(service_id, None)
            if connection is not None:
                await self._dispose(service_id, connection.connector)
            await self._set_status(service, ServiceStatus.DISCONNECTED)
            return True

    async def shutdown(self) -> None:
        """Best-effort disconnect of every live connector, then clear state.

        Emits no events and doesn't persist; descriptors keep their
        last-known status for the next start.
        """
        live = list(self._live.items())
        for service_id, connection in live:
            await self._dispose(service_id, connection.connector)
        self._live.clear()
        self._services.clear()
        self._locks.clear()
        self._bus.clear()
        logger.info("registry_shutdown", disconnected=len(live))

    # --- Queries ---

    def get_status(self, service_id: str) -> ServiceStatus:
        service = self._services.get(service_id)
        return service.status if service else ServiceStatus.DISCONNECTED

    def get_service(self, service_id: str) -> ServiceDescriptor | None:
        service = self._services.get(service_id)
        return service.model_copy(deep=True) if service else None

    def list_services(self) -> list[ServiceDescriptor]:
        """All descriptors sorted by display name (case-sensitive)."""
        return [s.model_copy(deep=True) for s in sorted(self._services.values(), key=lambda s: s.name)]

    def get_connector(self, service_id: str) -> ConnectorProtocol | None:
        connection = self._live.get(service_id)
        return connection.connector if connection else None

    def active_connections(self) -> dict[str, Connection]:
        return dict(self._live)

    def update_config(self, service_id: str, partial: Mapping[str, Any]) -> bool:
        """Shallow-merge into a service's config.

        Returns:
            False if the id is unknown
        """
        service = self._services.get(service_id)
        if service is None:
            logger.warning("update_config_unknown_service", service_id=service_id)
            return False

        service.config.update(partial)
        self._persist()
        self._bus.publish_nowait(ConfigUpdated(service.model_copy(deep=True)))
        logger.info("service_config_updated", service_id=service_id, keys=sorted(partial))
        return True

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def __len__(self) -> int:
        return len(self._services)

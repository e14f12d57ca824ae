"""
Event Bus - Typed pub/sub for service lifecycle events.

Three event variants, each a frozen dataclass:
- ServiceRegistered: a descriptor was added or overwritten
- StatusChanged: a service moved to a new status
- ConfigUpdated: a service's config was merged

Events mean "recheck state". Observers should re-pull from the registry
rather than trust the payload across rapid successive transitions.

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(handler, StatusChanged)   # one variant
    bus.subscribe(handler)                                # every variant
    await bus.publish(StatusChanged("github", ServiceStatus.CONNECTED, svc))
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

import structlog

from .models import ServiceDescriptor, ServiceStatus

__all__ = [
    "ConfigUpdated",
    "EventBus",
    "Handler",
    "LifecycleEvent",
    "ServiceRegistered",
    "StatusChanged",
]

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class ServiceRegistered:
    service: ServiceDescriptor
    ts: float = field(default_factory=lambda: datetime.now().timestamp())


@dataclass(slots=True, frozen=True)
class StatusChanged:
    service_id: str
    status: ServiceStatus
    service: ServiceDescriptor
    ts: float = field(default_factory=lambda: datetime.now().timestamp())


@dataclass(slots=True, frozen=True)
class ConfigUpdated:
    service: ServiceDescriptor
    ts: float = field(default_factory=lambda: datetime.now().timestamp())


LifecycleEvent = Union[ServiceRegistered, StatusChanged, ConfigUpdated]

EVENT_TYPES: tuple[type, ...] = (ServiceRegistered, StatusChanged, ConfigUpdated)

Handler = Callable[[LifecycleEvent], Any | Coroutine[Any, Any, Any]]


@dataclass(slots=True)
class Subscription:
    """Single subscription with a type filter."""
    handler: Handler
    event_types: tuple[type, ...] = EVENT_TYPES

    def matches(self, event: LifecycleEvent) -> bool:
        return isinstance(event, self.event_types)


class EventBus:
    """Async event bus with typed subscriptions.

    Handlers run concurrently. A failing handler is logged and never
    propagates to the publisher.
    """

    __slots__ = ("_subs", "_pending", "_logger")

    def __init__(self) -> None:
        self._subs: list[Subscription] = []
        self._pending: set[asyncio.Task] = set()
        self._logger = logger.bind(component="event_bus")

    def subscribe(self, handler: Handler, *event_types: type) -> Callable[[], None]:
        """Subscribe to lifecycle events.

        Args:
            handler: Async or sync callable receiving the event
            event_types: Variants to receive (all variants if empty)

        Returns:
            Unsubscribe function
        """
        for event_type in event_types:
            if event_type not in EVENT_TYPES:
                raise TypeError(f"Unknown event type: {event_type!r}")
        sub = Subscription(handler, event_types or EVENT_TYPES)
        self._subs.append(sub)
        return lambda: self._subs.remove(sub) if sub in self._subs else None

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    def clear(self) -> None:
        """Drop every subscription."""
        self._subs.clear()

    async def publish(self, event: LifecycleEvent) -> None:
        """Deliver an event to all matching subscribers and wait for them."""
        handlers = [s.handler for s in self._subs if s.matches(event)]
        if not handlers:
            return

        await asyncio.gather(*[self._run_handler(h, event) for h in handlers])

    def publish_nowait(self, event: LifecycleEvent) -> None:
        """Deliver an event from sync code.

        Sync handlers run inline. Coroutines returned by async handlers are
        scheduled on the running loop; without a loop they are dropped.
        """
        for sub in list(self._subs):
            if not sub.matches(event):
                continue
            try:
                result = sub.handler(event)
            except Exception as e:
                self._log_failure(event, e)
                continue

            if asyncio.iscoroutine(result):
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    result.close()
                    self._logger.warning("handler_skipped_no_loop", event_type=type(event).__name__)
                    continue
                task = loop.create_task(self._await_handler(result, event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for handlers scheduled by publish_nowait."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _run_handler(self, handler: Handler, event: LifecycleEvent) -> None:
        try:
            result = handler(event)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            self._log_failure(event, e)

    async def _await_handler(self, coro: Coroutine, event: LifecycleEvent) -> None:
        try:
            await coro
        except Exception as e:
            self._log_failure(event, e)

    def _log_failure(self, event: LifecycleEvent, error: Exception) -> None:
        self._logger.error(
            "handler_error",
            event_type=type(event).__name__,
            error=str(error),
        )

"""
Dashboard Summary - Status totals for the dashboard view.

Re-pulls the service list on every lifecycle event and bumps a revision
counter so pollers can tell when something changed.
"""

from collections import Counter
from collections.abc import Callable
from typing import Any

from ..events import LifecycleEvent
from ..models import ServiceStatus
from ..registry import ServiceRegistry

__all__ = ["DashboardSummary"]


class DashboardSummary:
    def __init__(self, registry: ServiceRegistry) -> None:
        self._registry = registry
        self._unsubscribe: Callable[[], None] | None = None
        self.revision = 0
        self.totals: dict[str, int] = {}
        self.refresh()

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._registry.bus.subscribe(self._on_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, event: LifecycleEvent) -> None:
        self.refresh()

    def refresh(self) -> None:
        counts = Counter(s.status for s in self._registry.list_services())
        self.totals = {status.value: counts.get(status, 0) for status in ServiceStatus}
        self.revision += 1

    def snapshot(self) -> dict[str, Any]:
        return {
            "revision": self.revision,
            "total": sum(self.totals.values()),
            "by_status": dict(self.totals),
            "active_connections": sorted(self._registry.active_connections()),
        }

"""
Service Tree - Tree model of services for sidebar-style views.

Rebuilt from registry.list_services() on every lifecycle event; the
event payload is never trusted.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..events import LifecycleEvent
from ..models import ServiceDescriptor, ServiceStatus
from ..registry import ServiceRegistry

__all__ = ["ServiceTree", "TreeNode", "mask"]

logger = structlog.get_logger(__name__)

ICONS = {
    ServiceStatus.CONNECTED: "check",
    ServiceStatus.CONNECTING: "sync",
    ServiceStatus.ERROR: "warning",
    ServiceStatus.DISCONNECTED: "circle-outline",
}

MARKERS = {
    "check": "+",
    "sync": "~",
    "warning": "!",
    "circle-outline": "-",
}


def mask(value: Any) -> str:
    """Show only the last four characters of a secret."""
    text = str(value)
    if len(text) <= 4:
        return "****"
    return "****" + text[-4:]


@dataclass
class TreeNode:
    label: str
    description: str = ""
    icon: str | None = None
    tooltip: str = ""
    children: list["TreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "description": self.description,
            "icon": self.icon,
            "tooltip": self.tooltip,
            "children": [c.to_dict() for c in self.children],
        }


class ServiceTree:
    """Tree view model bound to a registry.

    Example:
        tree = ServiceTree(registry)
        tree.attach()
        print(tree.render())
    """

    def __init__(self, registry: ServiceRegistry) -> None:
        self._registry = registry
        self._unsubscribe: Callable[[], None] | None = None
        self.nodes: list[TreeNode] = []
        self.revision = 0
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
        self.nodes = [self._node(s) for s in self._registry.list_services()]
        self.revision += 1
        logger.debug("tree_refreshed", services=len(self.nodes), revision=self.revision)

    def _node(self, service: ServiceDescriptor) -> TreeNode:
        secret_keys = {
            f.key for f in self._registry.factories.credential_fields(service.kind) if f.secret
        }
        children = [TreeNode(f"Status: {service.status.value}", icon=ICONS[service.status])]
        if service.last_connected_at:
            children.append(TreeNode(f"Last connected: {service.last_connected_at.isoformat()}"))
        if service.last_error:
            children.append(TreeNode(f"Error: {service.last_error}", icon="error"))
        for key in sorted(service.config):
            value = service.config[key]
            shown = mask(value) if key in secret_keys else str(value)
            children.append(TreeNode(f"{key}: {shown}", icon="key" if key in secret_keys else None))

        return TreeNode(
            label=service.name,
            description=service.kind.value,
            icon=ICONS[service.status],
            tooltip=f"{service.name}\nStatus: {service.status.value}\nType: {service.kind.value}",
            children=children,
        )

    def render(self) -> str:
        """Plain-text rendering, one service per line plus details."""
        lines = []
        for node in self.nodes:
            lines.append(f"{MARKERS.get(node.icon or '', ' ')} {node.label} ({node.description})")
            for child in node.children[1:]:
                lines.append(f"    {child.label}")
        return "\n".join(lines)

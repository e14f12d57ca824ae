"""
Observers - Views that follow registry lifecycle events.

Every observer re-pulls state from the registry when an event arrives:
- ServiceTree: tree model for sidebar/CLI rendering
- DashboardSummary: status totals for the dashboard API
- ClineSync: Cline MCP settings export
"""

from .cline import ClineSync, default_settings_path
from .dashboard import DashboardSummary
from .tree import ServiceTree, TreeNode

__all__ = [
    "ClineSync",
    "DashboardSummary",
    "ServiceTree",
    "TreeNode",
    "default_settings_path",
]

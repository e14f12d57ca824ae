"""Pydantic models for services and persisted hub state."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "HubState",
    "ServiceDescriptor",
    "ServiceKind",
    "ServiceStatus",
]


class ServiceStatus(str, Enum):
    """Service connection status."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ServiceKind(str, Enum):
    """Service families a connector can be built for."""

    GITHUB = "github"
    MONGODB = "mongodb"
    STRIPE = "stripe"
    LEMONSQUEEZY = "lemonsqueezy"
    AUTH = "auth"
    CONTEXT7 = "context7"
    SEQUENTIAL_THINKING = "sequential-thinking"
    FIRECRAWL = "firecrawl"
    FILESYSTEM = "filesystem"
    BROWSER = "browser"
    FIGMA = "figma"
    SUPABASE = "supabase"
    VERCEL = "vercel"
    SENTRY = "sentry"
    TASKMASTER = "taskmaster"
    DESKTOP_COMMANDER = "desktop-commander"
    DEV21 = "dev21"


class ServiceDescriptor(BaseModel):
    """One configured external service and its last-known status."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    kind: ServiceKind
    status: ServiceStatus = ServiceStatus.DISCONNECTED
    config: dict[str, Any] = Field(default_factory=dict)
    last_connected_at: Optional[datetime] = Field(None, alias="lastConnectedAt")
    last_error: Optional[str] = Field(None, alias="lastError")


class HubState(BaseModel):
    """Record stored under the global state key."""

    model_config = ConfigDict(populate_by_name=True)

    servers: list[ServiceDescriptor] = Field(default_factory=list)
    is_connecting: bool = Field(False, alias="isConnecting")

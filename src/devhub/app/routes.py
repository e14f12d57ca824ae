"""
Dashboard Routes - HTTP view of the service registry.

Every response is re-pulled from the registry. Secret credential values
are masked before they leave the process.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ..hub import DevHub
from ..models import ServiceDescriptor
from ..observers.tree import mask
from ..registry import ServiceRegistry

router = APIRouter(tags=["services"])


def get_hub(request: Request) -> DevHub:
    hub: DevHub = request.app.state.hub
    if not hub.active:
        raise HTTPException(status_code=503, detail="DevHub is not active")
    return hub


def get_registry(hub: DevHub = Depends(get_hub)) -> ServiceRegistry:
    assert hub.registry is not None
    return hub.registry


def _public(registry: ServiceRegistry, service: ServiceDescriptor) -> dict[str, Any]:
    secret = {f.key for f in registry.factories.credential_fields(service.kind) if f.secret}
    data = service.model_dump(mode="json")
    data["config"] = {k: mask(v) if k in secret else v for k, v in service.config.items()}
    data["live"] = registry.get_connector(service.id) is not None
    return data


def _require(registry: ServiceRegistry, service_id: str) -> ServiceDescriptor:
    service = registry.get_service(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service '{service_id}' not found")
    return service


@router.get("/health")
async def health() -> dict[str, str]:
    """Always 200 while the server is running."""
    from .. import __version__

    return {"status": "ok", "version": __version__}


@router.get("/services")
async def list_services(registry: ServiceRegistry = Depends(get_registry)) -> list[dict[str, Any]]:
    return [_public(registry, s) for s in registry.list_services()]


@router.post("/services", status_code=201)
async def register_service(
    descriptor: dict[str, Any] = Body(...),
    registry: ServiceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Register or overwrite a service descriptor."""
    service = registry.register_service(descriptor)
    return _public(registry, service)


@router.get("/services/{service_id}")
async def get_service(
    service_id: str, registry: ServiceRegistry = Depends(get_registry)
) -> dict[str, Any]:
    return _public(registry, _require(registry, service_id))


@router.post("/services/{service_id}/connect")
async def connect_service(
    service_id: str,
    credentials: dict[str, str] | None = Body(default=None),
    registry: ServiceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Connect a service. The body holds credentials keyed by config key.

    Without a body, credentials saved in the service config are used.
    """
    _require(registry, service_id)
    connected = await registry.connect(service_id, credentials)
    return {"connected": connected, "service": _public(registry, _require(registry, service_id))}


@router.post("/services/{service_id}/disconnect")
async def disconnect_service(
    service_id: str, registry: ServiceRegistry = Depends(get_registry)
) -> dict[str, Any]:
    _require(registry, service_id)
    await registry.disconnect(service_id)
    return {"service": _public(registry, _require(registry, service_id))}


@router.patch("/services/{service_id}/config")
async def update_config(
    service_id: str,
    partial: dict[str, Any] = Body(...),
    registry: ServiceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Shallow-merge keys into the service config."""
    _require(registry, service_id)
    registry.update_config(service_id, partial)
    return _public(registry, _require(registry, service_id))


@router.get("/summary")
async def summary(hub: DevHub = Depends(get_hub)) -> dict[str, Any]:
    assert hub.summary is not None
    return hub.summary.snapshot()

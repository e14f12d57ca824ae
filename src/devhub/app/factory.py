"""
Application Factory - Creates the dashboard FastAPI app.

Each call creates a fresh app. The DevHub is activated in the lifespan
and deactivated on shutdown.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import DevHubConfig
from ..errors import DescriptorValidationError
from ..hub import DevHub
from .middleware import ErrorMiddleware, LoggingMiddleware
from .routes import router

__all__ = ["create_app"]

logger = structlog.get_logger(__name__)


def create_app(config: DevHubConfig | None = None, hub: DevHub | None = None) -> FastAPI:
    """Create and configure the dashboard application.

    Args:
        config: DevHub configuration (defaults if None)
        hub: Pre-built container (tests inject one with an in-memory store)

    Returns:
        Configured FastAPI application
    """
    from .. import __version__

    if config is None:
        config = hub.config if hub else DevHubConfig()
    if hub is None:
        hub = DevHub(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("dashboard_starting", version=__version__)
        hub.activate()
        logger.info("dashboard_started", url=config.dashboard_url)

        yield

        logger.info("dashboard_stopping")
        await hub.deactivate()
        logger.info("dashboard_stopped")

    app = FastAPI(
        title="DevHub",
        description="Service connections dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorMiddleware)
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(DescriptorValidationError)
    async def validation_error(request: Request, exc: DescriptorValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": "validation_error", "message": str(exc)})

    app.include_router(router)

    app.state.config = config
    app.state.hub = hub

    return app

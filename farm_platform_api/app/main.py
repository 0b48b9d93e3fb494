"""
Main entrypoint for the Farm Platform API.

This module assembles the FastAPI application, sets up logging,
registers the error handlers and includes the versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``::

    uvicorn farm_platform_api.app.main:app --reload

The graph store driver is opened on startup and closed on shutdown.
Tests pass their own store to ``create_app`` instead.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.exceptions import PlatformError, Unauthorized
from .core.graph import GraphStore, create_driver
from .core.logging_config import setup_logging
from .services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def create_app(store: Optional[GraphStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[GraphStore]
        Graph store to use.  When omitted, a neo4j driver is created
        from ``settings`` at startup and owned by the application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # Shared per-process collaborators; routes read them from app.state.
    app.state.store = store
    app.state.notifications = NotificationService(store) if store is not None else None

    app.include_router(v1_router, prefix=settings.api_prefix)

    @app.exception_handler(PlatformError)
    async def platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        graph_ok = app.state.store.verify_connectivity() if app.state.store is not None else False
        return {"status": "ok", "graph": graph_ok}

    @app.on_event("startup")
    async def startup_event() -> None:
        if app.state.store is None:
            app.state.store = GraphStore(create_driver(), settings.neo4j_database)
            app.state.notifications = NotificationService(app.state.store)
            app.state.owns_store = True

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        if getattr(app.state, "owns_store", False):
            logger.info("Closing graph store driver")
            app.state.store.close()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()

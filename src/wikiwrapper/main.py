"""
Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures CORS and global exception handling, and provides a test-friendly
application factory plus the `wikiwrapper` console entry point.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from .config import settings
from .cors import CorsConfig, add_cors, load_cors_config
from .core.errors import (
    MissingParameterError,
    WikiWrapperError,
    missing_parameter_handler,
    unhandled_exception_handler,
    wiki_wrapper_error_handler,
)

from .api import (
    health_routes,
    wiki_routes,
)
from .api.dependencies import get_game_registry


logger = logging.getLogger("wikiwrapper.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(cors_config: Optional[CorsConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    cors_config : Optional[CorsConfig]
        CORS settings; loaded from `settings.cors_config_path` when omitted.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="wikiwrapper",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(MissingParameterError, missing_parameter_handler)
    app.add_exception_handler(WikiWrapperError, wiki_wrapper_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # CORS
    # --------------------------------------------------------------

    if cors_config is None:
        cors_config = load_cors_config(settings.cors_config_path)
    add_cors(app, cors_config)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(wiki_routes.router)

    # --------------------------------------------------------------
    # Startup Validation Hook
    # --------------------------------------------------------------

    @app.on_event("startup")
    async def _startup_validation() -> None:
        """
        Fail-fast validation at application startup.

        Loads the game registry now so a broken wiki config stops the
        process instead of failing the first request.
        """
        logger.info("Starting wikiwrapper against %s", settings.wiki_api_url)

        registry = get_game_registry()

        logger.info("Game registry loaded with %d games", len(registry.codes))

    @app.on_event("shutdown")
    async def _shutdown_cleanup() -> None:
        logger.info("Shutting down wikiwrapper")

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()


def serve() -> None:
    """
    Run the service with uvicorn, on a Unix socket when `socket_path` is
    configured and on `host:port` otherwise.
    """
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.socket_path:
        socket_path = Path(settings.socket_path)
        socket_path.parent.mkdir(parents=True, exist_ok=True)
        # A stale socket from a previous run blocks the bind
        if socket_path.exists():
            os.remove(socket_path)
        uvicorn.run(app, uds=str(socket_path))
    else:
        uvicorn.run(app, host=settings.host, port=settings.port)

# src/therapy_center/main.py
"""
FastAPI application entry point.

Run with:
    uvicorn therapy_center.main:app --port 3001
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import admin_router, therapy_router
from .api.deps import get_container
from .api.responses import register_exception_handlers
from .core.container import Container, container as default_container
from .utils.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the application around a container.

    Passing a container (tests, scripts) routes every request dependency to it
    instead of the process-wide one.
    """
    c = container or default_container
    cfg = c.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Seed fixed reference data; both calls are idempotent
        created = c.goal_service().initialize_categories()
        if created:
            logger.info(f"Initialized {created} goal categories")
        if cfg.super_admin_key:
            c.admin_service().initialize_super_admin(cfg.super_admin_key, cfg.super_admin_name)
        logger.info(f"Therapy center API started ({cfg.environment}, store={cfg.store_type})")
        yield
        logger.info("Therapy center API stopped")

    app = FastAPI(
        title="Therapy Center API",
        description="Sessions, reports and care teams for a pediatric therapy center",
        version=__version__,
        lifespan=lifespan,
    )

    # ============================================================================
    # Middleware & error handling
    # ============================================================================

    if cfg.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "X-Admin-Key", "X-Practitioner-Id", "X-Kid-Id"],
        )

    register_exception_handlers(app)

    # ============================================================================
    # Routers
    # ============================================================================

    app.include_router(therapy_router, prefix=cfg.api_prefix)
    app.include_router(admin_router, prefix=cfg.api_prefix)

    if container is not None:
        app.dependency_overrides[get_container] = lambda: container

    @app.get(f"{cfg.api_prefix}/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


def _build_default_app() -> FastAPI:
    configure_logging(default_container.config.log_level)
    return create_app()


app = _build_default_app()


if __name__ == "__main__":
    import uvicorn

    cfg = default_container.config
    uvicorn.run(app, host=cfg.api_host, port=cfg.api_port)

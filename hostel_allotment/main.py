from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostel_allotment.api.v1.router import router as api_v1_router
from hostel_allotment.config.settings import Settings, get_settings
from hostel_allotment.core.logging import get_logger, setup_logging
from hostel_allotment.core.middleware import register_exception_handlers, register_middlewares
from hostel_allotment.db.init_db import init_db
from hostel_allotment.persistence.base import PersistenceBackend
from hostel_allotment.persistence.factory import create_backend
from hostel_allotment.persistence.sql import SqlBackend

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[PersistenceBackend] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    - Uses the given persistence backend, or builds the configured one.
    """
    settings = settings or get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    app.state.settings = settings
    app.state.backend = backend or create_backend(settings)

    @app.on_event("startup")
    def on_startup() -> None:
        backend = app.state.backend
        # Schema creation for dev/demo; production schemas come from migrations
        if (
            isinstance(backend, SqlBackend)
            and backend.engine is not None
            and not settings.is_production()
        ):
            init_db(backend.engine)
        logger.info(
            "Allotment service started",
            extra={"backend": backend.name, "environment": settings.ENVIRONMENT},
        )

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        app.state.backend.close()

    return app


app = create_app()

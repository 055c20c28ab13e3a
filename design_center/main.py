from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .core.config import get_settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .db import dispose_engine, get_sessionmaker, init_db
from .api.routes.auth import router as auth_router
from .api.routes.backgrounds import router as backgrounds_router
from .api.routes.brand_kit import router as brand_kit_router
from .api.routes.canva import router as canva_router
from .api.routes.health import root_router as service_info_router
from .api.routes.health import router as health_router
from .api.routes.template_files import router as template_files_router
from .api.routes.templates import router as templates_router
from .repositories.backgrounds import SqlAlchemyBackgroundsRepository
from .services.storage import build_storage_service
from .telemetry import configure_tracing, setup_prometheus

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    app = FastAPI(title=settings.project_name, version=settings.version)

    allow_origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in allow_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Storage creates the upload directories before StaticFiles checks them.
    app.state.storage = build_storage_service()
    app.mount("/uploads", StaticFiles(directory=settings.uploads_root), name="uploads")

    @app.on_event("startup")
    async def _startup() -> None:
        await init_db()
        async with get_sessionmaker()() as session:
            await SqlAlchemyBackgroundsRepository(session).purge_expired()
        logger.info("app.started", environment=settings.environment, version=settings.version)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await dispose_engine()

    app.include_router(service_info_router)
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(auth_router, prefix=settings.api_prefix)
    # Fixed /templates/* paths must be matched before /templates/{template_id}.
    app.include_router(template_files_router, prefix=settings.api_prefix)
    app.include_router(backgrounds_router, prefix=settings.api_prefix)
    app.include_router(templates_router, prefix=settings.api_prefix)
    app.include_router(brand_kit_router, prefix=settings.api_prefix)
    app.include_router(canva_router, prefix=settings.api_prefix)

    if settings.enable_prometheus_metrics:
        setup_prometheus(app)
    configure_tracing(app)

    return app


app = create_app()

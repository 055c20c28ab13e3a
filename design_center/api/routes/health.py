from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter

from ...core.config import get_settings
from ...db import ping_db
from ...domain.health import HealthStatus, PingResponse, ServiceInfo

router = APIRouter(tags=["health"])
root_router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health() -> HealthStatus:
    settings = get_settings()
    connected = await ping_db()
    return HealthStatus(
        timestamp=datetime.utcnow(),
        database="Connected" if connected else "Disconnected",
        environment=settings.environment,
        version=settings.version,
    )


@router.get("/test", response_model=PingResponse)
async def ping() -> PingResponse:
    return PingResponse(message="Design Center API is running", timestamp=datetime.utcnow())


@root_router.get("/", response_model=ServiceInfo)
async def service_info() -> ServiceInfo:
    settings = get_settings()
    prefix = settings.api_prefix
    return ServiceInfo(
        name=settings.project_name,
        version=settings.version,
        endpoints={
            "health": f"{prefix}/health",
            "auth": f"{prefix}/auth",
            "templates": f"{prefix}/templates",
            "brand_kit": f"{prefix}/brand-kit",
            "canva": f"{prefix}/canva",
            "uploads": "/uploads",
        },
    )

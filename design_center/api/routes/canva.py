from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.canva import (
    ApplyBrandKitRequest,
    ApplyBrandKitResponse,
    CanvaAuthUrlResponse,
    CanvaBrandKitListResponse,
    CanvaCallbackRequest,
    CanvaDesignResponse,
    CanvaExportResponse,
    CanvaTemplateListResponse,
    CanvaTokenResponse,
    CreateDesignRequest,
    ExportDesignRequest,
    ExportFormat,
)
from ...domain.users import User, UserPlan
from ...services.canva import CanvaAPIError, CanvaClient, CanvaConfigError, access_token_for
from ..dependencies import get_canva_client, require_premium

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/canva", tags=["canva"])


def _upstream_failure(action: str, exc: Exception) -> HTTPException:
    logger.warning("canva.action_failed", action=action, error=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {exc}",
    )


@router.get("/auth/url", response_model=CanvaAuthUrlResponse)
async def get_auth_url(
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaAuthUrlResponse:
    return CanvaAuthUrlResponse(auth_url=client.authorize_url(state=str(current_user.id)))


@router.post("/auth/callback", response_model=CanvaTokenResponse)
async def complete_oauth(
    payload: CanvaCallbackRequest,
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaTokenResponse:
    try:
        return await client.exchange_code(payload.code)
    except (CanvaAPIError, CanvaConfigError) as exc:
        raise _upstream_failure("complete authentication", exc) from exc


@router.post("/designs/create", response_model=CanvaDesignResponse)
async def create_design(
    payload: CreateDesignRequest,
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaDesignResponse:
    try:
        design = await client.create_design(access_token_for(current_user.id), payload.template_id)
    except CanvaAPIError as exc:
        raise _upstream_failure("create design", exc) from exc
    logger.info("canva.design_created", design_id=design.id, user_id=str(current_user.id))
    return CanvaDesignResponse(design=design)


@router.post("/designs/export", response_model=CanvaExportResponse)
async def export_design(
    payload: ExportDesignRequest,
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaExportResponse:
    if payload.format == ExportFormat.PDF and current_user.plan != UserPlan.ULTRA_PREMIUM:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="PDF export requires Ultra-Premium plan",
        )
    try:
        export = await client.export_design(
            access_token_for(current_user.id), payload.design_id, payload.format
        )
    except CanvaAPIError as exc:
        raise _upstream_failure("export design", exc) from exc
    return CanvaExportResponse(export=export)


@router.post("/designs/brand-kit", response_model=ApplyBrandKitResponse)
async def apply_brand_kit(
    payload: ApplyBrandKitRequest,
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> ApplyBrandKitResponse:
    try:
        await client.apply_brand_kit(
            access_token_for(current_user.id), payload.design_id, payload.brand_kit_id
        )
    except CanvaAPIError as exc:
        raise _upstream_failure("apply brand kit", exc) from exc
    return ApplyBrandKitResponse(design_id=payload.design_id, brand_kit_id=payload.brand_kit_id)


@router.get("/templates", response_model=CanvaTemplateListResponse)
async def list_canva_templates(
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaTemplateListResponse:
    try:
        templates = await client.list_templates(access_token_for(current_user.id))
    except CanvaAPIError as exc:
        raise _upstream_failure("fetch templates", exc) from exc
    return CanvaTemplateListResponse(data=templates)


@router.get("/brand-kits", response_model=CanvaBrandKitListResponse)
async def list_canva_brand_kits(
    current_user: User = Depends(require_premium),
    client: CanvaClient = Depends(get_canva_client),
) -> CanvaBrandKitListResponse:
    try:
        brand_kits = await client.list_brand_kits(access_token_for(current_user.id))
    except CanvaAPIError as exc:
        raise _upstream_failure("fetch brand kits", exc) from exc
    return CanvaBrandKitListResponse(data=brand_kits)

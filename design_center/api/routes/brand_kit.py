from __future__ import annotations

import base64

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ...core.config import get_settings
from ...domain.brand_kits import (
    BrandColors,
    BrandKit,
    BrandKitMessageResponse,
    BrandKitResponse,
    BrandKitUpdate,
    ColorsResponse,
    ColorsUpdate,
    ElementsResponse,
    ElementsUpdate,
    FontsResponse,
    FontsUpdate,
    Logo,
    LogoResponse,
    LogoSavedResponse,
    LogoUpdate,
)
from ...domain.users import User
from ...repositories.brand_kits import BrandKitRepository
from ..dependencies import get_brand_kit_repository, get_current_user

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/brand-kit", tags=["brand-kit"])

MEGABYTE = 1024 * 1024


async def _load(repo: BrandKitRepository, current_user: User) -> BrandKit:
    brand_kit = await repo.get(current_user.id)
    return brand_kit or BrandKit.defaults_for(current_user.id)


@router.get("", response_model=BrandKitResponse)
async def get_brand_kit(
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> BrandKitResponse:
    return BrandKitResponse(data=await _load(repo, current_user))


@router.put("", response_model=BrandKitMessageResponse)
async def replace_brand_kit(
    payload: BrandKitUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> BrandKitMessageResponse:
    brand_kit = await repo.upsert(current_user.id, payload)
    logger.info("brand_kit.saved", user_id=str(current_user.id))
    return BrandKitMessageResponse(message="Brand kit saved", data=brand_kit)


@router.patch("", response_model=BrandKitMessageResponse)
async def update_brand_kit(
    payload: BrandKitUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> BrandKitMessageResponse:
    brand_kit = await repo.upsert(current_user.id, payload)
    logger.info(
        "brand_kit.updated",
        user_id=str(current_user.id),
        fields=sorted(payload.model_fields_set),
    )
    return BrandKitMessageResponse(message="Brand kit updated", data=brand_kit)


@router.delete("", response_model=BrandKitMessageResponse)
async def reset_brand_kit(
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> BrandKitMessageResponse:
    await repo.delete(current_user.id)
    logger.info("brand_kit.reset", user_id=str(current_user.id))
    return BrandKitMessageResponse(
        message="Brand kit reset to defaults",
        data=BrandKit.defaults_for(current_user.id),
    )


@router.get("/logo", response_model=LogoResponse)
async def get_logo(
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> LogoResponse:
    brand_kit = await repo.get(current_user.id)
    return LogoResponse(data=brand_kit.logo if brand_kit else None)


@router.post("/logo", response_model=LogoSavedResponse)
async def save_logo(
    payload: LogoUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> LogoSavedResponse:
    if payload.logo is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Logo data is required",
        )
    brand_kit = await repo.upsert(current_user.id, BrandKitUpdate(logo=payload.logo))
    return LogoSavedResponse(data=brand_kit.logo)


@router.post("/logo/upload", response_model=LogoSavedResponse)
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> LogoSavedResponse:
    settings = get_settings()
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )
    content = await file.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded logo is empty",
        )
    if len(content) > settings.max_image_upload_mb * MEGABYTE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.max_image_upload_mb}MB limit",
        )
    encoded = base64.b64encode(content).decode("ascii")
    logo = Logo(
        data=f"data:{file.content_type};base64,{encoded}",
        filename=file.filename,
        mimetype=file.content_type,
        size=len(content),
    )
    brand_kit = await repo.upsert(current_user.id, BrandKitUpdate(logo=logo))
    logger.info("brand_kit.logo_uploaded", user_id=str(current_user.id), size=len(content))
    return LogoSavedResponse(message="Logo uploaded", data=brand_kit.logo)


@router.post("/colors", response_model=ColorsResponse)
async def update_colors(
    payload: ColorsUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> ColorsResponse:
    update = BrandKitUpdate(**payload.model_dump(exclude_unset=True))
    brand_kit = await repo.upsert(current_user.id, update)
    return ColorsResponse(
        data=BrandColors(
            primary_color=brand_kit.primary_color,
            secondary_color=brand_kit.secondary_color,
            accent_color=brand_kit.accent_color,
        )
    )


@router.post("/fonts", response_model=FontsResponse)
async def update_fonts(
    payload: FontsUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> FontsResponse:
    brand_kit = await repo.upsert(current_user.id, BrandKitUpdate(fonts=payload.fonts))
    return FontsResponse(data=brand_kit.fonts)


@router.post("/elements", response_model=ElementsResponse)
async def update_elements(
    payload: ElementsUpdate,
    current_user: User = Depends(get_current_user),
    repo: BrandKitRepository = Depends(get_brand_kit_repository),
) -> ElementsResponse:
    brand_kit = await repo.upsert(
        current_user.id, BrandKitUpdate(custom_elements=payload.custom_elements)
    )
    return ElementsResponse(data=brand_kit.custom_elements)

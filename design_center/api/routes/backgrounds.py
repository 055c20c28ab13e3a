from __future__ import annotations

from datetime import timedelta
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ...core.config import get_settings
from ...domain.backgrounds import (
    BackgroundCreate,
    BackgroundDeleteResponse,
    BackgroundResponse,
    BackgroundSavedResponse,
)
from ...domain.users import User
from ...repositories.backgrounds import BackgroundsRepository
from ...repositories.templates import TemplatesRepository
from ..dependencies import get_backgrounds_repository, get_current_user, get_templates_repository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/templates/backgrounds", tags=["backgrounds"])


def _ensure_owner(current_user: User, user_id: UUID) -> None:
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Backgrounds can only be managed by their owner",
        )


@router.post("", response_model=BackgroundSavedResponse, status_code=status.HTTP_201_CREATED)
async def save_background(
    payload: BackgroundCreate,
    current_user: User = Depends(get_current_user),
    repo: BackgroundsRepository = Depends(get_backgrounds_repository),
    templates_repo: TemplatesRepository = Depends(get_templates_repository),
) -> BackgroundSavedResponse:
    _ensure_owner(current_user, payload.user_id)
    try:
        template_id = UUID(payload.template_id)
    except ValueError:
        template_id = None
    # Non-UUID ids belong to built-in sample templates that are not stored.
    if template_id is not None and await templates_repo.get(template_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    settings = get_settings()
    background = await repo.replace(payload, timedelta(hours=settings.background_ttl_hours))
    logger.info(
        "backgrounds.saved",
        background_id=str(background.id),
        template_id=background.template_id,
    )
    return BackgroundSavedResponse(background_id=background.id, expires_at=background.expires_at)


@router.get("/{template_id}/{user_id}", response_model=BackgroundResponse)
async def get_background(
    template_id: str,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: BackgroundsRepository = Depends(get_backgrounds_repository),
) -> BackgroundResponse:
    _ensure_owner(current_user, user_id)
    background = await repo.latest(template_id, user_id)
    if background is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Background not found")
    return BackgroundResponse(data=background)


@router.delete("/{template_id}/{user_id}", response_model=BackgroundDeleteResponse)
async def delete_backgrounds_for_template(
    template_id: str,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: BackgroundsRepository = Depends(get_backgrounds_repository),
) -> BackgroundDeleteResponse:
    _ensure_owner(current_user, user_id)
    deleted = await repo.delete_for_pair(template_id, user_id)
    return BackgroundDeleteResponse(
        message="Backgrounds deleted",
        deleted_count=deleted,
    )


@router.delete("/{background_id}", response_model=BackgroundDeleteResponse)
async def delete_background(
    background_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: BackgroundsRepository = Depends(get_backgrounds_repository),
) -> BackgroundDeleteResponse:
    if not await repo.delete_by_id(background_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Background not found")
    return BackgroundDeleteResponse(deleted_count=1)

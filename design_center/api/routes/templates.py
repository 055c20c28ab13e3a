from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.config import get_settings
from ...domain.pagination import PaginationParams
from ...domain.templates import (
    Template,
    TemplateCategory,
    TemplateCreate,
    TemplateDeleteResponse,
    TemplateListResponse,
    TemplateResponse,
    TemplateType,
    TemplateUpdate,
)
from ...domain.users import User
from ...repositories.templates import TemplateFilters, TemplatesRepository
from ...services import template_catalog
from ...services.pagination import build_pagination_meta
from ...services.storage import (
    InvalidFilenameError,
    LocalStorageService,
    StorageError,
    now_ms,
    random_suffix,
)
from ..dependencies import (
    get_current_user,
    get_pagination_params,
    get_storage_service,
    get_templates_repository,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")


def discard_design_file(storage: LocalStorageService, filename: Optional[str]) -> None:
    if not filename:
        return
    try:
        storage.delete("designs", filename)
    except (InvalidFilenameError, StorageError) as exc:
        logger.warning("templates.design_file_cleanup_failed", filename=filename, error=str(exc))


def discard_thumbnail(storage: LocalStorageService, thumbnail: Optional[str]) -> None:
    settings = get_settings()
    try:
        storage.delete_public_path(thumbnail, keep=[settings.default_thumbnail])
    except StorageError as exc:
        logger.warning("templates.thumbnail_cleanup_failed", thumbnail=thumbnail, error=str(exc))


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    type: Optional[TemplateType] = Query(default=None),
    category: Optional[TemplateCategory] = Query(default=None),
    is_real_estate: Optional[bool] = Query(default=None),
    pagination: PaginationParams = Depends(get_pagination_params),
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateListResponse:
    filters = TemplateFilters(type=type, category=category, is_real_estate=is_real_estate)
    templates, total = await repo.list(filters, pagination)
    meta = build_pagination_meta(pagination, total=total, count=len(templates))
    return TemplateListResponse(data=templates, count=len(templates), pagination=meta)


@router.get("/real-estate", response_model=TemplateListResponse)
async def list_real_estate_templates(
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateListResponse:
    templates, _ = await repo.list(TemplateFilters(is_real_estate=True))
    return TemplateListResponse(data=templates, count=len(templates))


@router.get("/get", response_model=TemplateResponse)
async def get_template_by_query(
    id: Optional[str] = Query(default=None),
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateResponse:
    if not id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Template ID is required",
        )
    try:
        template_id = UUID(id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid template ID format",
        ) from exc
    template = await repo.get(template_id)
    if template is None:
        raise _not_found()
    return TemplateResponse(data=template)


@router.get("/by-key/{template_key}", response_model=TemplateResponse)
async def get_template_by_key(
    template_key: str,
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateResponse:
    template = await repo.get_by_key(template_key)
    if template is None:
        raise _not_found()
    return TemplateResponse(data=template)


@router.put("/by-key/{template_key}", response_model=TemplateResponse)
async def update_template_by_key(
    template_key: str,
    payload: TemplateUpdate,
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> TemplateResponse:
    existing = await repo.get_by_key(template_key)
    if existing is None:
        raise _not_found()
    _drop_replaced_design(storage, existing, payload)
    try:
        template = await repo.update_by_key(template_key, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if template is None:
        raise _not_found()
    logger.info("templates.updated", template_id=str(template.id), template_key=template_key)
    return TemplateResponse(data=template)


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: TemplateCreate,
    current_user: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateResponse:
    settings = get_settings()
    dimensions = payload.dimensions or template_catalog.default_dimensions(payload.type)
    template = Template(
        name=payload.name or template_catalog.default_name(payload.type),
        description=payload.description,
        type=payload.type,
        category=template_catalog.category_for(payload.type),
        template_key=template_catalog.generate_template_key(),
        thumbnail=settings.default_thumbnail,
        objects=template_catalog.starter_objects(payload.type, payload.brand_kit_logo),
        canvas_size=dimensions.canvas_size,
        dimensions=dimensions,
        created_by=str(current_user.id),
        is_real_estate=payload.is_real_estate,
    )
    created = await repo.create(template)
    logger.info("templates.created", template_id=str(created.id), type=created.type.value)
    return TemplateResponse(data=created)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: UUID,
    repo: TemplatesRepository = Depends(get_templates_repository),
) -> TemplateResponse:
    template = await repo.get(template_id)
    if template is None:
        raise _not_found()
    return TemplateResponse(data=template)


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: UUID,
    payload: TemplateUpdate,
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> TemplateResponse:
    existing = await repo.get(template_id)
    if existing is None:
        raise _not_found()
    _drop_replaced_design(storage, existing, payload)
    try:
        template = await repo.update(template_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if template is None:
        raise _not_found()
    logger.info("templates.updated", template_id=str(template_id))
    return TemplateResponse(data=template)


@router.post(
    "/{template_id}/duplicate",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_template(
    template_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> TemplateResponse:
    source = await repo.get(template_id)
    if source is None:
        raise _not_found()
    now = datetime.utcnow()
    duplicate = source.model_copy(
        update={
            "id": uuid4(),
            "name": f"{source.name} (Copy)",
            "template_key": template_catalog.generate_template_key(),
            "design_filename": _copy_design_file(storage, source.design_filename),
            "thumbnail": _copy_thumbnail(storage, source.thumbnail),
            "created_by": str(current_user.id),
            "created_at": now,
            "updated_at": now,
        }
    )
    created = await repo.create(duplicate)
    logger.info("templates.duplicated", source_id=str(template_id), template_id=str(created.id))
    return TemplateResponse(data=created)


@router.delete("/{template_id}", response_model=TemplateDeleteResponse)
async def delete_template(
    template_id: UUID,
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> TemplateDeleteResponse:
    template = await repo.get(template_id)
    if template is None:
        raise _not_found()
    discard_design_file(storage, template.design_filename)
    discard_thumbnail(storage, template.thumbnail)
    if not await repo.delete(template_id):
        raise _not_found()
    logger.info("templates.deleted", template_id=str(template_id))
    return TemplateDeleteResponse(data=template)


def _drop_replaced_design(
    storage: LocalStorageService, existing: Template, payload: TemplateUpdate
) -> None:
    if "design_filename" not in payload.model_fields_set:
        return
    if existing.design_filename and existing.design_filename != payload.design_filename:
        discard_design_file(storage, existing.design_filename)


def _copy_design_file(storage: LocalStorageService, filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    new_filename = f"design-{now_ms()}-{random_suffix()}.json"
    try:
        if storage.copy("designs", filename, new_filename):
            return new_filename
    except StorageError as exc:
        logger.warning("templates.design_copy_failed", filename=filename, error=str(exc))
    return None


def _copy_thumbnail(storage: LocalStorageService, thumbnail: str) -> str:
    settings = get_settings()
    location = storage.split_public_path(thumbnail)
    if thumbnail == settings.default_thumbnail or location is None:
        return thumbnail
    directory, filename = location
    new_filename = f"thumb-{now_ms()}-{random_suffix()}.png"
    try:
        if storage.copy(directory, filename, new_filename):
            return storage.public_path(directory, new_filename)
    except StorageError as exc:
        logger.warning("templates.thumbnail_copy_failed", thumbnail=thumbnail, error=str(exc))
    return settings.default_thumbnail


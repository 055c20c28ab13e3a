"""Upload pipeline for template thumbnails, design documents and loose assets."""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import PurePath
from typing import Any, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

from ...core.config import get_settings
from ...domain.files import (
    CleanupResponse,
    DesignDocumentResponse,
    FileDeleteResponse,
    FileKind,
    FileListing,
    FileListingResponse,
    MultipleUploadResponse,
    SaveDesignRequest,
    SaveDesignResponse,
    SaveThumbnailRequest,
    ThumbnailResponse,
    UploadedFile,
    UploadResponse,
)
from ...domain.templates import TemplateResponse, TemplateUpdate
from ...domain.users import User
from ...repositories.templates import TemplatesRepository
from ...services.storage import (
    THUMBNAILS_DIR,
    InvalidFilenameError,
    LocalStorageService,
    now_ms,
    random_suffix,
    validate_filename,
)
from ..dependencies import get_current_user, get_storage_service, get_templates_repository
from .templates import discard_thumbnail

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/templates", tags=["template-files"])

MEGABYTE = 1024 * 1024

DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/plain",
        "application/zip",
        "application/x-rar-compressed",
    }
)
DOCUMENT_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".xls", ".xlsx", ".txt", ".zip", ".rar"})

_DATA_URL_PREFIX = "base64,"


def is_allowed_document(filename: Optional[str], content_type: Optional[str]) -> bool:
    if content_type and content_type in DOCUMENT_MIME_TYPES:
        return True
    return PurePath(filename or "").suffix.lower() in DOCUMENT_EXTENSIONS


def is_image(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith("image/")


def decode_base64_image(data: str) -> bytes:
    """Decode a ``data:image/...;base64,`` URL or a bare base64 string."""

    if _DATA_URL_PREFIX in data:
        data = data.split(_DATA_URL_PREFIX, 1)[1]
    try:
        content = base64.b64decode(data.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Thumbnail data is not valid base64") from exc
    if not content:
        raise ValueError("Thumbnail data is empty")
    return content


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _checked_filename(filename: Optional[str]) -> str:
    try:
        return validate_filename(filename or "")
    except InvalidFilenameError as exc:
        raise _bad_request(str(exc)) from exc


async def _read_limited(upload: StarletteUploadFile, limit_mb: int) -> bytes:
    content = await upload.read()
    if len(content) > limit_mb * MEGABYTE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {limit_mb}MB limit",
        )
    return content


def _stored_document_name(original: str) -> str:
    path = PurePath(original)
    stem = path.stem or "file"
    return f"{stem}-{now_ms()}{path.suffix}"


async def _read_document(upload: StarletteUploadFile) -> tuple[StarletteUploadFile, str, bytes]:
    """Check type, size and target name of an upload without writing it."""

    settings = get_settings()
    original = PurePath(upload.filename or "file").name
    if not is_allowed_document(original, upload.content_type):
        raise _bad_request(f"File type not allowed: {upload.filename}")
    content = await _read_limited(upload, settings.max_file_upload_mb)
    return upload, _checked_filename(_stored_document_name(original)), content


def _write_document(
    storage: LocalStorageService, upload: StarletteUploadFile, filename: str, content: bytes
) -> UploadedFile:
    original = PurePath(upload.filename or "file").name
    storage.save_bytes(FileKind.FILES.value, filename, content)
    return UploadedFile(
        filename=filename,
        original_name=original,
        size=len(content),
        mimetype=upload.content_type,
        path=storage.public_path(FileKind.FILES.value, filename),
    )


@router.get("/files", response_model=FileListingResponse)
async def list_files(
    storage: LocalStorageService = Depends(get_storage_service),
) -> FileListingResponse:
    listing = FileListing(
        files=storage.list_directory(FileKind.FILES.value),
        images=storage.list_directory(FileKind.IMAGES.value),
        designs=storage.list_directory(FileKind.DESIGNS.value),
    )
    listing.total = len(listing.files) + len(listing.images) + len(listing.designs)
    return FileListingResponse(data=listing)


@router.get("/design", response_model=DesignDocumentResponse)
async def get_design_by_query(
    filename: Optional[str] = Query(default=None),
    storage: LocalStorageService = Depends(get_storage_service),
) -> DesignDocumentResponse:
    if not filename:
        raise _bad_request("Filename is required")
    return _load_design(storage, filename)


@router.get("/design/{filename}", response_model=DesignDocumentResponse)
async def get_design(
    filename: str,
    storage: LocalStorageService = Depends(get_storage_service),
) -> DesignDocumentResponse:
    return _load_design(storage, filename)


def _load_design(storage: LocalStorageService, filename: str) -> DesignDocumentResponse:
    filename = _checked_filename(filename)
    try:
        document = storage.read_json(filename)
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Design file not found",
        ) from exc
    return DesignDocumentResponse(filename=filename, data=document)


@router.get("/thumbnail/{filename}")
async def get_thumbnail(
    filename: str,
    storage: LocalStorageService = Depends(get_storage_service),
) -> FileResponse:
    filename = _checked_filename(filename)
    if not storage.exists(THUMBNAILS_DIR, filename):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thumbnail not found")
    return FileResponse(
        storage.path_for(THUMBNAILS_DIR, filename),
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.post("/save-design", response_model=SaveDesignResponse)
async def save_design(
    request: Request,
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> SaveDesignResponse:
    """Accept either a multipart ``designData`` JSON file or a JSON body."""

    settings = get_settings()
    content_type = request.headers.get("content-type", "")
    requested_name: Optional[str] = None
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("designData")
        if not isinstance(upload, StarletteUploadFile):
            raise _bad_request("No design data provided")
        if upload.content_type != "application/json" and not (upload.filename or "").endswith(".json"):
            raise _bad_request("Only JSON files are allowed for design data")
        raw = await _read_limited(upload, settings.max_design_upload_mb)
        try:
            design_data: Any = json.loads(raw)
        except ValueError as exc:
            raise _bad_request("Design file is not valid JSON") from exc
    else:
        try:
            payload = SaveDesignRequest.model_validate(await request.json())
        except (ValueError, ValidationError) as exc:
            raise _bad_request("No design data provided") from exc
        design_data = payload.design_data
        requested_name = payload.filename

    if design_data is None:
        raise _bad_request("No design data provided")
    if requested_name:
        filename = _checked_filename(requested_name)
    else:
        filename = f"design-{now_ms()}-{random_suffix()}.json"
    size = storage.save_json(filename, design_data)
    logger.info("designs.saved", filename=filename, size=size)
    return SaveDesignResponse(
        filename=filename,
        path=storage.public_path(FileKind.DESIGNS.value, filename),
        size=size,
    )


@router.post("/save-design-large", response_model=SaveDesignResponse)
async def save_design_large(
    payload: SaveDesignRequest,
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> SaveDesignResponse:
    if payload.design_data is None:
        raise _bad_request("No design data provided")
    filename = f"design-large-{now_ms()}-{random_suffix()}.json"
    size = storage.save_json(filename, payload.design_data)
    logger.info("designs.saved", filename=filename, size=size, large=True)
    return SaveDesignResponse(
        message="Large design saved",
        filename=filename,
        path=storage.public_path(FileKind.DESIGNS.value, filename),
        size=size,
    )


@router.post("/save-thumbnail", response_model=ThumbnailResponse)
async def save_thumbnail(
    payload: SaveThumbnailRequest,
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> ThumbnailResponse:
    if not payload.thumbnail_data:
        raise _bad_request("Thumbnail data is required")
    try:
        content = decode_base64_image(payload.thumbnail_data)
    except ValueError as exc:
        raise _bad_request(str(exc)) from exc

    template = None
    if payload.template_id is not None:
        template = await repo.get(payload.template_id)
    elif payload.template_key:
        template = await repo.get_by_key(payload.template_key)
    if (payload.template_id or payload.template_key) and template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    label = payload.template_id or payload.template_key or "temp"
    filename = _checked_filename(f"thumbnail-{label}-{now_ms()}.png")
    storage.save_bytes(THUMBNAILS_DIR, filename, content)
    public_path = storage.public_path(THUMBNAILS_DIR, filename)
    if template is not None:
        if template.thumbnail != public_path:
            discard_thumbnail(storage, template.thumbnail)
        await repo.set_thumbnail(template.id, public_path)
    return ThumbnailResponse(filename=filename, thumbnail=public_path)


@router.post("/upload-file", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> UploadResponse:
    upload, filename, content = await _read_document(file)
    stored = _write_document(storage, upload, filename, content)
    logger.info("files.uploaded", filename=stored.filename, size=stored.size)
    return UploadResponse(message="File uploaded", file=stored)


@router.post("/upload-image", response_model=UploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> UploadResponse:
    settings = get_settings()
    if not is_image(image.content_type):
        raise _bad_request("Only image files are allowed")
    content = await _read_limited(image, settings.max_image_upload_mb)
    original = PurePath(image.filename or "image").name
    filename = _checked_filename(f"img-{now_ms()}-{random_suffix()}{PurePath(original).suffix}")
    storage.save_bytes(FileKind.IMAGES.value, filename, content)
    logger.info("images.uploaded", filename=filename, size=len(content))
    return UploadResponse(
        message="Image uploaded",
        file=UploadedFile(
            filename=filename,
            original_name=original,
            size=len(content),
            mimetype=image.content_type,
            path=storage.public_path(FileKind.IMAGES.value, filename),
        ),
    )


@router.post("/upload-multiple", response_model=MultipleUploadResponse)
async def upload_multiple(
    files: list[UploadFile] = File(...),
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> MultipleUploadResponse:
    settings = get_settings()
    if len(files) > settings.max_multiple_upload_files:
        raise _bad_request(f"At most {settings.max_multiple_upload_files} files per upload")
    # Every part is checked and read before the first one is written.
    checked = [await _read_document(upload) for upload in files]
    stored = [_write_document(storage, *item) for item in checked]
    return MultipleUploadResponse(
        message=f"{len(stored)} files uploaded",
        files=stored,
        count=len(stored),
    )


@router.delete("/file/{filename}", response_model=FileDeleteResponse)
async def delete_file(
    filename: str,
    type: FileKind = Query(default=FileKind.FILES),
    _: User = Depends(get_current_user),
    storage: LocalStorageService = Depends(get_storage_service),
) -> FileDeleteResponse:
    filename = _checked_filename(filename)
    if not storage.delete(type.value, filename):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileDeleteResponse(filename=filename)


@router.post("/cleanup-orphaned-files", response_model=CleanupResponse)
async def cleanup_orphaned_files(
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> CleanupResponse:
    referenced = await repo.list_design_filenames()
    removed: list[str] = []
    for name in storage.list_filenames(FileKind.DESIGNS.value):
        if name in referenced:
            continue
        if storage.delete(FileKind.DESIGNS.value, name):
            removed.append(name)
    logger.info("designs.orphans_removed", count=len(removed))
    return CleanupResponse(
        message=f"Removed {len(removed)} orphaned design files",
        removed=removed,
        count=len(removed),
    )


@router.post("/{template_id}/thumbnail", response_model=TemplateResponse)
async def upload_thumbnail(
    template_id: UUID,
    thumbnail: UploadFile = File(...),
    _: User = Depends(get_current_user),
    repo: TemplatesRepository = Depends(get_templates_repository),
    storage: LocalStorageService = Depends(get_storage_service),
) -> TemplateResponse:
    settings = get_settings()
    if not is_image(thumbnail.content_type):
        raise _bad_request("Only image files are allowed")
    template = await repo.get(template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    content = await _read_limited(thumbnail, settings.max_image_upload_mb)
    filename = f"thumb-{now_ms()}-{random_suffix()}.png"
    storage.save_bytes(THUMBNAILS_DIR, filename, content)
    discard_thumbnail(storage, template.thumbnail)
    updated = await repo.update(
        template_id, TemplateUpdate(thumbnail=storage.public_path(THUMBNAILS_DIR, filename))
    )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return TemplateResponse(data=updated)

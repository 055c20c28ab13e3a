"""Schemas for uploaded files, design JSON documents and thumbnails."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FileKind(str, Enum):
    FILES = "files"
    IMAGES = "images"
    DESIGNS = "designs"


class StoredFile(BaseModel):
    filename: str
    size: int
    created: datetime
    modified: datetime
    path: str


class FileListing(BaseModel):
    files: list[StoredFile] = Field(default_factory=list)
    images: list[StoredFile] = Field(default_factory=list)
    designs: list[StoredFile] = Field(default_factory=list)
    total: int = 0


class FileListingResponse(BaseModel):
    data: FileListing


class UploadedFile(BaseModel):
    filename: str
    original_name: Optional[str] = None
    size: int
    mimetype: Optional[str] = None
    path: str


class UploadResponse(BaseModel):
    message: str
    file: UploadedFile


class MultipleUploadResponse(BaseModel):
    message: str
    files: list[UploadedFile]
    count: int


class SaveDesignRequest(BaseModel):
    design_data: Any = Field(..., description="Editor design document")
    filename: Optional[str] = Field(default=None, max_length=255)


class SaveDesignResponse(BaseModel):
    message: str = "Design saved"
    filename: str
    path: str
    size: Optional[int] = None


class DesignDocumentResponse(BaseModel):
    filename: str
    data: Any


class SaveThumbnailRequest(BaseModel):
    template_id: Optional[UUID] = None
    template_key: Optional[str] = Field(default=None, max_length=128)
    thumbnail_data: Optional[str] = None


class ThumbnailResponse(BaseModel):
    message: str = "Thumbnail saved"
    filename: str
    thumbnail: str


class CleanupResponse(BaseModel):
    message: str
    removed: list[str]
    count: int


class FileDeleteResponse(BaseModel):
    message: str = "File deleted"
    filename: str

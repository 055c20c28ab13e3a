"""Schemas for the Canva pass-through endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ExportFormat(str, Enum):
    PNG = "PNG"
    JPG = "JPG"
    PDF = "PDF"


class CanvaAuthUrlResponse(BaseModel):
    auth_url: str


class CanvaCallbackRequest(BaseModel):
    code: str = Field(..., min_length=1)
    state: Optional[str] = None


class CanvaTokenResponse(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class CreateDesignRequest(BaseModel):
    template_id: str = Field(..., min_length=1)


class CanvaDesign(BaseModel):
    id: str
    template_id: str
    status: Optional[str] = None
    edit_url: Optional[str] = None
    preview_url: Optional[str] = None


class CanvaDesignResponse(BaseModel):
    design: CanvaDesign


class ExportDesignRequest(BaseModel):
    design_id: str = Field(..., min_length=1)
    format: ExportFormat = ExportFormat.PNG


class CanvaExport(BaseModel):
    id: str
    status: Optional[str] = None
    download_url: Optional[str] = None
    expires_at: Optional[str] = None


class CanvaExportResponse(BaseModel):
    export: CanvaExport


class ApplyBrandKitRequest(BaseModel):
    design_id: str = Field(..., min_length=1)
    brand_kit_id: str = Field(..., min_length=1)


class ApplyBrandKitResponse(BaseModel):
    message: str = "Brand kit applied successfully"
    design_id: str
    brand_kit_id: str


class CanvaTemplate(BaseModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    thumbnail: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    canva_template_id: str


class CanvaTemplateListResponse(BaseModel):
    data: list[CanvaTemplate]


class CanvaBrandKit(BaseModel):
    id: str
    name: Optional[str] = None
    logo: Optional[str] = None
    colors: list[Any] = Field(default_factory=list)
    fonts: list[Any] = Field(default_factory=list)


class CanvaBrandKitListResponse(BaseModel):
    data: list[CanvaBrandKit]

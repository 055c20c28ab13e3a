"""Schemas for temporary per-user template backgrounds."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class BackgroundCreate(BaseModel):
    template_id: str = Field(..., min_length=1, max_length=128)
    user_id: UUID
    image_data: str = Field(..., min_length=1, description="Base64 encoded image")
    image_type: str = Field(..., min_length=1, max_length=64)
    file_name: Optional[str] = Field(default=None, max_length=255)


class TemplateBackground(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    template_id: str
    user_id: UUID
    image_data: str
    image_type: str
    file_name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime

    model_config = {"from_attributes": True}


class BackgroundSavedResponse(BaseModel):
    message: str = "Background saved"
    background_id: UUID
    expires_at: datetime


class BackgroundResponse(BaseModel):
    data: TemplateBackground


class BackgroundDeleteResponse(BaseModel):
    message: str = "Background deleted"
    deleted_count: int

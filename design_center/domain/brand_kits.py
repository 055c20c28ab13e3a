"""Pydantic models for per-user brand kits."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

HexColor = Annotated[str, Field(pattern=HEX_COLOR_PATTERN)]

DEFAULT_PRIMARY_COLOR = "#00525b"
DEFAULT_SECONDARY_COLOR = "#01aac7"
DEFAULT_ACCENT_COLOR = "#32e0c5"


class CustomElementType(str, Enum):
    SHAPE = "shape"
    ICON = "icon"
    PATTERN = "pattern"


class Logo(BaseModel):
    data: str = Field(..., min_length=1, description="Base64 data URL")
    filename: Optional[str] = Field(default=None, max_length=255)
    mimetype: Optional[str] = Field(default=None, max_length=120)
    size: Optional[int] = Field(default=None, ge=0)


class Font(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    url: Optional[str] = None
    is_default: bool = False


class CustomElement(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    type: CustomElementType
    data: str = Field(..., min_length=1, description="SVG markup or base64 data")
    category: Optional[str] = Field(default=None, max_length=120)


class BrandColors(BaseModel):
    primary_color: HexColor = DEFAULT_PRIMARY_COLOR
    secondary_color: HexColor = DEFAULT_SECONDARY_COLOR
    accent_color: HexColor = DEFAULT_ACCENT_COLOR


class BrandKitUpdate(BaseModel):
    """Partial brand kit; only the supplied sections are written."""

    primary_color: Optional[HexColor] = None
    secondary_color: Optional[HexColor] = None
    accent_color: Optional[HexColor] = None
    logo: Optional[Logo] = None
    fonts: Optional[list[Font]] = None
    custom_elements: Optional[list[CustomElement]] = None


class ColorsUpdate(BaseModel):
    primary_color: Optional[HexColor] = None
    secondary_color: Optional[HexColor] = None
    accent_color: Optional[HexColor] = None


class FontsUpdate(BaseModel):
    fonts: list[Font]


class ElementsUpdate(BaseModel):
    custom_elements: list[CustomElement]


class LogoUpdate(BaseModel):
    logo: Optional[Logo] = None


class BrandKit(BrandColors):
    """A user's brand kit; ``id`` is null when no kit has been saved yet."""

    id: Optional[UUID] = None
    user_id: UUID
    logo: Optional[Logo] = None
    fonts: list[Font] = Field(default_factory=list)
    custom_elements: list[CustomElement] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @classmethod
    def defaults_for(cls, user_id: UUID) -> "BrandKit":
        return cls(user_id=user_id)


class BrandKitResponse(BaseModel):
    data: BrandKit


class BrandKitMessageResponse(BaseModel):
    message: str
    data: BrandKit


class LogoResponse(BaseModel):
    data: Optional[Logo] = None


class ColorsResponse(BaseModel):
    message: str = "Colors updated"
    data: BrandColors


class FontsResponse(BaseModel):
    message: str = "Fonts updated"
    data: list[Font]


class ElementsResponse(BaseModel):
    message: str = "Custom elements updated"
    data: list[CustomElement]


class LogoSavedResponse(BaseModel):
    message: str = "Logo updated"
    data: Logo

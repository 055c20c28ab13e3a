"""Pydantic models for design templates and their canvas objects."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .pagination import PaginationMeta

Number = Union[int, float]


class TemplateType(str, Enum):
    SQUARE_POST = "square-post"
    STORY = "story"
    MARKETPLACE_FLYER = "marketplace-flyer"
    REAL_ESTATE_FLYER = "real-estate-flyer"
    FB_FEED_BANNER = "fb-feed-banner"
    DIGITAL_BADGE = "digital-badge"
    BROCHURE = "brochure"


class TemplateCategory(str, Enum):
    SOCIAL_POSTS = "social-posts"
    STORIES = "stories"
    FLYERS = "flyers"
    BANNERS = "banners"
    BADGES = "badges"
    DOCUMENTS = "documents"
    MARKETPLACE_FLYERS = "marketplace-flyers"
    FB_BANNERS = "fb-banners"


class CanvasObjectType(str, Enum):
    TEXT = "text"
    I_TEXT = "i-text"
    IMAGE = "image"
    RECT = "rect"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    POLYGON = "polygon"
    PATH = "path"
    ROUNDED_RECTANGLE = "rounded-rectangle"
    LINE = "line"
    PLACEHOLDER = "placeholder"
    SHAPE = "shape"


# Attribute pairs the editor uses interchangeably.
SYNONYM_PAIRS: tuple[tuple[str, str], ...] = (
    ("x", "left"),
    ("y", "top"),
    ("text", "content"),
    ("src", "url"),
    ("fill", "color"),
    ("stroke", "border_color"),
    ("stroke_width", "border_width"),
    ("font_family", "font"),
    ("rotation", "angle"),
)


def _lookup(data: dict[str, Any], name: str) -> tuple[bool, Any]:
    for key in (name, to_camel(name)):
        if key in data and data[key] is not None:
            return True, data[key]
    return False, None


def fill_synonyms(data: dict[str, Any]) -> dict[str, Any]:
    """Copy a value across each synonym pair when only one side is present.

    The returned mapping uses camelCase keys for the filled side so it can be
    fed straight back into :class:`CanvasObject`.
    """

    filled = dict(data)
    for first, second in SYNONYM_PAIRS:
        has_first, first_value = _lookup(filled, first)
        has_second, second_value = _lookup(filled, second)
        if has_first and not has_second:
            filled[to_camel(second)] = first_value
        elif has_second and not has_first:
            filled[to_camel(first)] = second_value
    return filled


class CanvasObject(BaseModel):
    """One visual element on a template canvas, in the editor's camelCase shape."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(..., min_length=1)
    type: CanvasObjectType
    x: Number
    y: Number
    left: Optional[Number] = None
    top: Optional[Number] = None
    width: Number
    height: Number
    radius: Optional[Number] = None

    text: Optional[str] = None
    content: Optional[str] = None
    font_size: Number = 48
    font: str = "Arial"
    font_family: str = "Arial"
    font_weight: str = "normal"
    text_align: str = "left"

    color: str = "#000000"
    fill: str = "#000000"
    stroke: str = "transparent"
    border_color: str = "transparent"
    stroke_width: Number = 0
    border_width: Number = 0
    stroke_line_cap: str = "butt"
    stroke_line_join: str = "miter"

    src: Optional[str] = None
    url: Optional[str] = None
    placeholder: Optional[str] = None
    original_aspect_ratio: Optional[Number] = None

    scale_x: Number = 1
    scale_y: Number = 1
    rotation: Number = 0
    angle: Optional[Number] = None

    rx: Number = 0
    ry: Number = 0
    points: list[Number] = Field(default_factory=list)
    path: Optional[str] = None
    shape: Optional[str] = None

    is_background: bool = False

    @model_validator(mode="before")
    @classmethod
    def _resolve_synonyms(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return fill_synonyms(data)
        return data

    def to_document(self) -> dict[str, Any]:
        """Serialise for storage, keeping editor extras and dropping empty optionals."""

        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Dimensions(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def canvas_size(self) -> str:
        return f"{self.width}x{self.height}"


class TemplateCreate(BaseModel):
    """Payload for creating a template from the per-type starter content."""

    type: TemplateType
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    dimensions: Optional[Dimensions] = None
    is_real_estate: bool = False
    brand_kit_logo: Optional[str] = None


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    type: Optional[TemplateType] = None
    category: Optional[TemplateCategory] = None
    template_key: Optional[str] = Field(default=None, min_length=1, max_length=128)
    thumbnail: Optional[str] = None
    file_url: Optional[str] = None
    design_filename: Optional[str] = Field(default=None, max_length=255)
    objects: Optional[list[CanvasObject]] = None
    background_color: Optional[str] = Field(default=None, max_length=32)
    background_image: Optional[str] = None
    canvas_size: Optional[str] = Field(default=None, max_length=32)
    dimensions: Optional[Dimensions] = None
    is_real_estate: Optional[bool] = None


class Template(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    description: Optional[str] = None
    type: TemplateType
    category: TemplateCategory
    template_key: Optional[str] = None
    thumbnail: str = "/uploads/default-thumbnail.png"
    file_url: Optional[str] = None
    design_filename: Optional[str] = None
    objects: list[CanvasObject] = Field(default_factory=list)
    background_color: str = "#ffffff"
    background_image: Optional[str] = None
    canvas_size: str = "1200x1800"
    dimensions: Dimensions
    created_by: Optional[str] = None
    is_real_estate: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)


class TemplateResponse(BaseModel):
    data: Template


class TemplateListResponse(BaseModel):
    data: list[Template]
    count: int
    pagination: Optional[PaginationMeta] = None


class TemplateDeleteResponse(BaseModel):
    message: str = "Template deleted"
    data: Template

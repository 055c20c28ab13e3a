"""Starter content, categories and naming rules for newly created templates."""

from __future__ import annotations

import copy
import random
import string
import time
from datetime import date
from typing import Any, Optional

from ..domain.templates import Dimensions, TemplateCategory, TemplateType

TYPE_CATEGORIES: dict[TemplateType, TemplateCategory] = {
    TemplateType.SQUARE_POST: TemplateCategory.SOCIAL_POSTS,
    TemplateType.STORY: TemplateCategory.STORIES,
    TemplateType.MARKETPLACE_FLYER: TemplateCategory.FLYERS,
    TemplateType.REAL_ESTATE_FLYER: TemplateCategory.FLYERS,
    TemplateType.FB_FEED_BANNER: TemplateCategory.BANNERS,
    TemplateType.DIGITAL_BADGE: TemplateCategory.BADGES,
    TemplateType.BROCHURE: TemplateCategory.DOCUMENTS,
}

TYPE_LABELS: dict[TemplateType, str] = {
    TemplateType.SQUARE_POST: "IG/FB Square Post",
    TemplateType.STORY: "IG/FB/WSP Story",
    TemplateType.MARKETPLACE_FLYER: "Marketplace Flyer",
    TemplateType.REAL_ESTATE_FLYER: "Real Estate Flyer",
    TemplateType.FB_FEED_BANNER: "FB Feed Banner",
    TemplateType.DIGITAL_BADGE: "Digital Badge",
    TemplateType.BROCHURE: "Brochure",
}

DEFAULT_DIMENSIONS: dict[TemplateType, tuple[int, int]] = {
    TemplateType.SQUARE_POST: (1080, 1080),
    TemplateType.STORY: (1080, 1920),
    TemplateType.MARKETPLACE_FLYER: (1200, 1500),
    TemplateType.REAL_ESTATE_FLYER: (1200, 1500),
    TemplateType.FB_FEED_BANNER: (1200, 628),
    TemplateType.DIGITAL_BADGE: (1080, 1350),
    TemplateType.BROCHURE: (2480, 3508),
}


def _headline_pair(
    x: int,
    y: int,
    width: int,
    heights: tuple[int, int],
    gap: int,
    texts: tuple[str, str],
    colors: tuple[str, str],
) -> list[dict[str, Any]]:
    title, body = texts
    return [
        {
            "id": "1",
            "type": "text",
            "x": x,
            "y": y,
            "width": width,
            "height": heights[0],
            "text": title,
            "font": "Arial",
            "color": colors[0],
        },
        {
            "id": "2",
            "type": "text",
            "x": x,
            "y": y + gap,
            "width": width,
            "height": heights[1],
            "text": body,
            "font": "Arial",
            "color": colors[1],
        },
    ]


def _text(
    object_id: str,
    x: int,
    y: int,
    width: int,
    height: int,
    text: str,
    *,
    size: int,
    fill: str,
    weight: str = "normal",
    align: str = "center",
) -> dict[str, Any]:
    return {
        "id": object_id,
        "type": "text",
        "x": x,
        "y": y,
        "width": width,
        "height": height,
        "text": text,
        "fontSize": size,
        "fontFamily": "Arial",
        "fontWeight": weight,
        "fill": fill,
        "textAlign": align,
        "selectable": True,
    }


def _background_band(object_id: str, y: int, height: int, fill: str) -> dict[str, Any]:
    return {
        "id": object_id,
        "type": "rect",
        "x": 0,
        "y": y,
        "width": 1200,
        "height": height,
        "fill": fill,
        "stroke": "transparent",
        "strokeWidth": 0,
        "selectable": False,
        "evented": False,
        "isBackground": True,
    }


_REAL_ESTATE_FLYER: list[dict[str, Any]] = [
    _background_band("banner-bg", 0, 300, "#1e3a8a"),
    _text("main-title", 600, 100, 400, 60, "REAL ESTATE", size=48, fill="#ffffff", weight="bold"),
    _text("subtitle", 600, 160, 400, 40, "Find your dream home", size=24, fill="#ffffff"),
    {
        "id": "house-image",
        "type": "rect",
        "x": 300,
        "y": 400,
        "width": 600,
        "height": 400,
        "fill": "#f3f4f6",
        "stroke": "#d1d5db",
        "strokeWidth": 2,
        "selectable": True,
    },
    _text("image-placeholder", 600, 600, 200, 40, "House Image", size=24, fill="#6b7280"),
    {
        "id": "badge-bg",
        "type": "path",
        "x": 800,
        "y": 800,
        "width": 200,
        "height": 150,
        "path": "M 50 0 L 150 0 L 200 75 L 150 150 L 50 150 L 0 75 Z",
        "fill": "#dc2626",
        "stroke": "transparent",
        "strokeWidth": 0,
        "selectable": True,
    },
    _text("badge-for", 900, 820, 100, 30, "FOR", size=20, fill="#ffffff", weight="bold"),
    _text("badge-sale", 900, 850, 100, 30, "SALE", size=20, fill="#ffffff", weight="bold"),
    _text("badge-price", 900, 880, 100, 40, "$850,000", size=28, fill="#ffffff", weight="bold"),
    _background_band("bottom-bg", 1000, 500, "#f9fafb"),
    _text(
        "property-header", 100, 1100, 400, 40, "ABOUT THE PROPERTY",
        size=24, fill="#1e3a8a", weight="bold", align="left",
    ),
    _text(
        "property-desc", 100, 1150, 400, 100,
        "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Quisque vulputate "
        "augue sit amet erat interdum, at volutpat mauris elementum.",
        size=16, fill="#374151", align="left",
    ),
    {
        "id": "button-bg",
        "type": "rect",
        "x": 100,
        "y": 1280,
        "width": 150,
        "height": 50,
        "fill": "#1e3a8a",
        "stroke": "transparent",
        "strokeWidth": 0,
        "rx": 8,
        "ry": 8,
        "selectable": True,
    },
    _text("button-text", 175, 1295, 100, 20, "VIEW MORE", size=16, fill="#ffffff", weight="bold"),
    _text("phone", 700, 1100, 200, 30, "123-456-7890", size=18, fill="#374151", align="left"),
    _text("website", 700, 1140, 200, 30, "www.example.com", size=18, fill="#374151", align="left"),
]

DEFAULT_OBJECTS: dict[TemplateType, list[dict[str, Any]]] = {
    TemplateType.SQUARE_POST: _headline_pair(
        200, 200, 400, (60, 40), 100,
        ("Your Post Title", "Add your content here"), ("#1D4ED8", "#6B7280"),
    ),
    TemplateType.STORY: _headline_pair(
        50, 200, 400, (60, 50), 100,
        ("STORY TITLE", "Your story content"), ("#E91E63", "#9C27B0"),
    ),
    TemplateType.MARKETPLACE_FLYER: _headline_pair(
        100, 100, 500, (60, 40), 100,
        ("Your Flyer Headline", "Add your content here"), ("#1D4ED8", "#6B7280"),
    ),
    TemplateType.REAL_ESTATE_FLYER: _REAL_ESTATE_FLYER,
    TemplateType.FB_FEED_BANNER: _headline_pair(
        100, 120, 600, (80, 50), 100,
        ("BANNER HEADLINE", "Subtitle text here"), ("#1976D2", "#388E3C"),
    ),
    TemplateType.DIGITAL_BADGE: _headline_pair(
        150, 150, 400, (60, 40), 100,
        ("BADGE TITLE", "Badge content here"), ("#FF9800", "#795548"),
    ),
    TemplateType.BROCHURE: _headline_pair(
        200, 150, 600, (80, 50), 150,
        ("Document Title", "Document content here"), ("#424242", "#616161"),
    ),
}


def category_for(template_type: TemplateType) -> TemplateCategory:
    return TYPE_CATEGORIES.get(template_type, TemplateCategory.FLYERS)


def default_dimensions(template_type: TemplateType) -> Dimensions:
    width, height = DEFAULT_DIMENSIONS.get(
        template_type, DEFAULT_DIMENSIONS[TemplateType.SQUARE_POST]
    )
    return Dimensions(width=width, height=height)


def default_objects(template_type: TemplateType) -> list[dict[str, Any]]:
    """Fresh copy of the starter objects so callers may mutate the result."""

    return copy.deepcopy(DEFAULT_OBJECTS.get(template_type, []))


def default_name(template_type: TemplateType, today: Optional[date] = None) -> str:
    today = today or date.today()
    label = TYPE_LABELS.get(template_type, "Template")
    return f"{label} - {today.strftime('%b')} {today.day}, {today.year}"


def brand_logo_object(src: str) -> dict[str, Any]:
    return {
        "id": "brand-logo",
        "type": "image",
        "x": 50,
        "y": 50,
        "width": 100,
        "height": 60,
        "src": src,
        "selectable": True,
        "evented": True,
        "lockMovementX": False,
        "lockMovementY": False,
        "lockRotation": False,
        "lockScalingX": False,
        "lockScalingY": False,
        "cornerStyle": "circle",
        "cornerColor": "#00525b",
        "cornerSize": 8,
        "transparentCorners": False,
        "borderColor": "#00525b",
        "borderScaleFactor": 1,
    }


def generate_template_key(now_ms: Optional[int] = None) -> str:
    """``template_<epoch ms>_<9 base36 chars>``."""

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(random.choice(alphabet) for _ in range(9))
    return f"template_{stamp}_{suffix}"


def starter_objects(template_type: TemplateType, brand_kit_logo: Optional[str] = None) -> list[dict[str, Any]]:
    objects = default_objects(template_type)
    if brand_kit_logo:
        objects.insert(0, brand_logo_object(brand_kit_logo))
    return objects

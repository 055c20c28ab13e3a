"""Template ORM model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


class TemplateModel(Base):
    """Design templates with their canvas object graph."""

    __tablename__ = "templates"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    template_key: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True, index=True)
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    design_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    objects: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    background_color: Mapped[str] = mapped_column(String(32), nullable=False, default="#ffffff")
    background_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    canvas_size: Mapped[str] = mapped_column(String(32), nullable=False, default="1200x1800")
    dimensions: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    is_real_estate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

"""Brand kit ORM model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


class BrandKitModel(Base):
    """Per-user brand palette, fonts, logo and custom elements."""

    __tablename__ = "brand_kits"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    primary_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#00525b")
    secondary_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#01aac7")
    accent_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#32e0c5")
    logo: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    fonts: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    custom_elements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

"""Repository helpers for temporary template backgrounds."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.backgrounds import BackgroundCreate, TemplateBackground
from ..models.background import TemplateBackgroundModel

logger = structlog.get_logger(__name__)


def default_background_name(template_id: str, now: datetime) -> str:
    return f"background_{template_id}_{int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)}"


class BackgroundsRepository(Protocol):
    async def replace(self, payload: BackgroundCreate, ttl: timedelta) -> TemplateBackground: ...

    async def latest(self, template_id: str, user_id: UUID) -> TemplateBackground | None: ...

    async def delete_for_pair(self, template_id: str, user_id: UUID) -> int: ...

    async def delete_by_id(self, background_id: UUID, user_id: UUID) -> bool: ...

    async def purge_expired(self) -> int: ...


class SqlAlchemyBackgroundsRepository:
    """Stores one live background per template/user pair; expired rows are invisible."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def replace(self, payload: BackgroundCreate, ttl: timedelta) -> TemplateBackground:
        now = datetime.utcnow()
        await self._session.execute(
            delete(TemplateBackgroundModel).where(
                (TemplateBackgroundModel.expires_at <= now)
                | (
                    (TemplateBackgroundModel.template_id == payload.template_id)
                    & (TemplateBackgroundModel.user_id == payload.user_id)
                )
            )
        )
        model = TemplateBackgroundModel(
            template_id=payload.template_id,
            user_id=payload.user_id,
            image_data=payload.image_data,
            image_type=payload.image_type,
            file_name=payload.file_name or default_background_name(payload.template_id, now),
            created_at=now,
            expires_at=now + ttl,
        )
        self._session.add(model)
        await self._session.commit()
        await self._session.refresh(model)
        return TemplateBackground.model_validate(model)

    async def latest(self, template_id: str, user_id: UUID) -> TemplateBackground | None:
        result = await self._session.execute(
            select(TemplateBackgroundModel)
            .where(
                TemplateBackgroundModel.template_id == template_id,
                TemplateBackgroundModel.user_id == user_id,
                TemplateBackgroundModel.expires_at > datetime.utcnow(),
            )
            .order_by(TemplateBackgroundModel.created_at.desc())
            .limit(1)
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return TemplateBackground.model_validate(model)

    async def delete_for_pair(self, template_id: str, user_id: UUID) -> int:
        result = await self._session.execute(
            delete(TemplateBackgroundModel).where(
                TemplateBackgroundModel.template_id == template_id,
                TemplateBackgroundModel.user_id == user_id,
            )
        )
        await self._session.commit()
        return result.rowcount or 0

    async def delete_by_id(self, background_id: UUID, user_id: UUID) -> bool:
        result = await self._session.execute(
            delete(TemplateBackgroundModel).where(
                TemplateBackgroundModel.id == background_id,
                TemplateBackgroundModel.user_id == user_id,
            )
        )
        await self._session.commit()
        return bool(result.rowcount)

    async def purge_expired(self) -> int:
        result = await self._session.execute(
            delete(TemplateBackgroundModel).where(
                TemplateBackgroundModel.expires_at <= datetime.utcnow()
            )
        )
        await self._session.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("backgrounds.purged", count=removed)
        return removed

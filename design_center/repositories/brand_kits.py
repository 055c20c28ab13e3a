"""Repository helpers for brand kit persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.brand_kits import BrandKit, BrandKitUpdate
from ..models.branding import BrandKitModel


class BrandKitRepository(Protocol):
    async def get(self, user_id: UUID) -> BrandKit | None: ...

    async def upsert(self, user_id: UUID, payload: BrandKitUpdate) -> BrandKit: ...

    async def delete(self, user_id: UUID) -> bool: ...


class SqlAlchemyBrandKitRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID) -> BrandKit | None:
        model = await self._get_model(user_id)
        if model is None:
            return None
        return BrandKit.model_validate(model)

    async def upsert(self, user_id: UUID, payload: BrandKitUpdate) -> BrandKit:
        """Write only the sections present in ``payload``, creating the kit on first use."""

        model = await self._get_model(user_id)
        if model is None:
            model = BrandKitModel(user_id=user_id, fonts=[], custom_elements=[])
            self._session.add(model)
        updates = payload.model_dump(mode="json", exclude_unset=True)
        for key, value in updates.items():
            if value is None and key != "logo":
                continue
            setattr(model, key, value)
        model.updated_at = datetime.utcnow()
        await self._session.flush()
        await self._session.commit()
        await self._session.refresh(model)
        return BrandKit.model_validate(model)

    async def delete(self, user_id: UUID) -> bool:
        result = await self._session.execute(
            delete(BrandKitModel)
            .where(BrandKitModel.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.commit()
        return bool(result.rowcount)

    async def _get_model(self, user_id: UUID) -> BrandKitModel | None:
        result = await self._session.execute(
            select(BrandKitModel).where(BrandKitModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

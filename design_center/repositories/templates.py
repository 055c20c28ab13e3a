"""Repository helpers for template persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.pagination import PaginationParams
from ..domain.templates import Template, TemplateCategory, TemplateType, TemplateUpdate
from ..models.template import TemplateModel

NULLABLE_COLUMNS = frozenset(
    {"description", "template_key", "file_url", "design_filename", "background_image", "created_by"}
)


class TemplateFilters:
    """Optional equality filters for template listings."""

    def __init__(
        self,
        *,
        type: Optional[TemplateType] = None,
        category: Optional[TemplateCategory] = None,
        is_real_estate: Optional[bool] = None,
    ) -> None:
        self.type = type
        self.category = category
        self.is_real_estate = is_real_estate

    def apply(self, query: Select) -> Select:
        if self.type is not None:
            query = query.where(TemplateModel.type == self.type.value)
        if self.category is not None:
            query = query.where(TemplateModel.category == self.category.value)
        if self.is_real_estate is not None:
            query = query.where(TemplateModel.is_real_estate.is_(self.is_real_estate))
        return query


class TemplatesRepository(Protocol):
    async def list(
        self, filters: TemplateFilters, params: Optional[PaginationParams] = None
    ) -> tuple[list[Template], int]: ...

    async def get(self, template_id: UUID) -> Template | None: ...

    async def get_by_key(self, template_key: str) -> Template | None: ...

    async def create(self, template: Template) -> Template: ...

    async def update(self, template_id: UUID, payload: TemplateUpdate) -> Template | None: ...

    async def update_by_key(self, template_key: str, payload: TemplateUpdate) -> Template | None: ...

    async def set_thumbnail(self, template_id: UUID, thumbnail: str) -> Template | None: ...

    async def delete(self, template_id: UUID) -> bool: ...

    async def list_design_filenames(self) -> set[str]: ...


class SqlAlchemyTemplatesRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list(
        self, filters: TemplateFilters, params: Optional[PaginationParams] = None
    ) -> tuple[list[Template], int]:
        total_query = filters.apply(select(func.count()).select_from(TemplateModel))
        total = (await self._session.execute(total_query)).scalar_one()

        query = filters.apply(select(TemplateModel)).order_by(
            TemplateModel.created_at.desc(), TemplateModel.id
        )
        if params is not None:
            query = query.offset(params.offset).limit(params.limit)
        result = await self._session.execute(query)
        return [self._to_domain(row) for row in result.scalars().all()], total

    async def get(self, template_id: UUID) -> Template | None:
        model = await self._get_model(TemplateModel.id == template_id)
        return self._to_domain(model) if model else None

    async def get_by_key(self, template_key: str) -> Template | None:
        model = await self._get_model(TemplateModel.template_key == template_key)
        return self._to_domain(model) if model else None

    async def create(self, template: Template) -> Template:
        model = TemplateModel(**self._to_columns(template.model_dump(mode="json", by_alias=True)))
        model.id = template.id
        model.created_at = template.created_at
        model.updated_at = template.updated_at
        self._session.add(model)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValueError("template key already exists") from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update(self, template_id: UUID, payload: TemplateUpdate) -> Template | None:
        model = await self._get_model(TemplateModel.id == template_id)
        return await self._apply_update(model, payload)

    async def update_by_key(self, template_key: str, payload: TemplateUpdate) -> Template | None:
        model = await self._get_model(TemplateModel.template_key == template_key)
        return await self._apply_update(model, payload)

    async def set_thumbnail(self, template_id: UUID, thumbnail: str) -> Template | None:
        return await self.update(template_id, TemplateUpdate(thumbnail=thumbnail))

    async def delete(self, template_id: UUID) -> bool:
        result = await self._session.execute(
            delete(TemplateModel).where(TemplateModel.id == template_id)
        )
        await self._session.commit()
        return bool(result.rowcount)

    async def list_design_filenames(self) -> set[str]:
        result = await self._session.execute(
            select(TemplateModel.design_filename).where(TemplateModel.design_filename.is_not(None))
        )
        return {name for name in result.scalars().all() if name}

    async def _get_model(self, clause: Any) -> TemplateModel | None:
        result = await self._session.execute(select(TemplateModel).where(clause))
        return result.scalar_one_or_none()

    async def _apply_update(
        self, model: TemplateModel | None, payload: TemplateUpdate
    ) -> Template | None:
        if model is None:
            return None
        updates = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
        for key, value in self._to_columns(updates).items():
            setattr(model, key, value)
        model.updated_at = datetime.utcnow()
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValueError("template key already exists") from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    @staticmethod
    def _to_columns(values: dict[str, Any]) -> dict[str, Any]:
        columns = {
            key: value
            for key, value in values.items()
            if key not in {"id", "created_at", "updated_at"}
            and (value is not None or key in NULLABLE_COLUMNS)
        }
        if columns.get("objects") is not None:
            columns["objects"] = [
                {key: value for key, value in obj.items() if value is not None}
                for obj in columns["objects"]
            ]
        return columns

    @staticmethod
    def _to_domain(model: TemplateModel) -> Template:
        return Template.model_validate(model)

from __future__ import annotations

import re
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.security import hash_password, verify_password
from ..domain.users import User, UserCreate, UserPreferences, UserUpdate
from ..models.user import UserModel

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
_USERNAME_SUFFIX_ROOM = 6
_username_unsafe = re.compile(r"[^a-z0-9._-]")


def username_base(email: str) -> str:
    """Derive a username stem from the local part of an email address."""

    local_part = email.split("@", 1)[0].lower()
    base = _username_unsafe.sub("", local_part)
    base = base[: USERNAME_MAX_LENGTH - _USERNAME_SUFFIX_ROOM]
    if len(base) < USERNAME_MIN_LENGTH:
        base = f"{base}user"
    return base


class UsersRepository(Protocol):
    """Persistence interface for user records."""

    async def create(self, payload: UserCreate) -> User: ...

    async def get(self, user_id: UUID) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def verify_credentials(self, email: str, password: str) -> User | None: ...

    async def update_profile(self, user_id: UUID, payload: UserUpdate) -> User | None: ...


class SqlAlchemyUsersRepository:
    """SQLAlchemy-backed repository for user persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, payload: UserCreate) -> User:
        normalized_email = payload.email.lower()
        if await self._find_by_email(normalized_email) is not None:
            raise ValueError("user with email already exists")
        model = UserModel(
            username=await self._unique_username(normalized_email),
            email=normalized_email,
            password_hash=hash_password(payload.password),
            plan=payload.plan.value,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            company=payload.company,
            position=payload.position,
            location=payload.location,
            bio=payload.bio,
            preferences=UserPreferences().model_dump(),
        )
        self._session.add(model)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValueError("user with email already exists") from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def get(self, user_id: UUID) -> User | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        model = result.scalar_one_or_none()
        if not model:
            return None
        return self._to_domain(model)

    async def get_by_email(self, email: str) -> User | None:
        model = await self._find_by_email(email.lower())
        if not model:
            return None
        return self._to_domain(model)

    async def verify_credentials(self, email: str, password: str) -> User | None:
        model = await self._find_by_email(email.lower())
        if not model:
            return None
        if not verify_password(password, model.password_hash):
            return None
        return self._to_domain(model)

    async def update_profile(self, user_id: UUID, payload: UserUpdate) -> User | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        updates = payload.model_dump(exclude_unset=True)
        if updates.get("email") is not None:
            email = updates["email"].lower()
            existing = await self._find_by_email(email)
            if existing is not None and existing.id != user_id:
                raise ValueError("email already in use")
            updates["email"] = email
        for key, value in updates.items():
            if value is None and key not in {"avatar"}:
                continue
            if key == "plan":
                value = payload.plan.value
            elif key == "preferences":
                value = payload.preferences.model_dump()
            setattr(model, key, value)
        model.updated_at = datetime.utcnow()
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValueError("email already in use") from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def _find_by_email(self, normalized_email: str) -> UserModel | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == normalized_email)
        )
        return result.scalar_one_or_none()

    async def _unique_username(self, email: str) -> str:
        base = username_base(email)
        result = await self._session.execute(
            select(UserModel.username).where(UserModel.username.startswith(base))
        )
        taken = set(result.scalars().all())
        username = base
        counter = 1
        while username in taken:
            username = f"{base}{counter}"
            counter += 1
        return username

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            plan=model.plan,
            first_name=model.first_name or "",
            last_name=model.last_name or "",
            phone=model.phone or "",
            company=model.company or "",
            position=model.position or "",
            location=model.location or "",
            bio=model.bio or "",
            avatar=model.avatar,
            preferences=UserPreferences(**(model.preferences or {})),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

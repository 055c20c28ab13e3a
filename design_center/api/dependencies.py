from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.security import decode_access_token
from ..db import get_session
from ..domain.pagination import PaginationParams
from ..domain.users import User, UserPlan
from ..repositories.backgrounds import BackgroundsRepository, SqlAlchemyBackgroundsRepository
from ..repositories.brand_kits import BrandKitRepository, SqlAlchemyBrandKitRepository
from ..repositories.templates import SqlAlchemyTemplatesRepository, TemplatesRepository
from ..repositories.users import SqlAlchemyUsersRepository, UsersRepository
from ..services.canva import CanvaClient, CanvaConfigError, build_canva_client_from_settings
from ..services.storage import LocalStorageService, StorageError, build_storage_service

bearer_scheme = HTTPBearer(auto_error=False)
_canva_client: CanvaClient | None = None


async def get_users_repository(
    session: AsyncSession = Depends(get_session),
) -> UsersRepository:
    return SqlAlchemyUsersRepository(session)


async def get_templates_repository(
    session: AsyncSession = Depends(get_session),
) -> TemplatesRepository:
    return SqlAlchemyTemplatesRepository(session)


async def get_brand_kit_repository(
    session: AsyncSession = Depends(get_session),
) -> BrandKitRepository:
    return SqlAlchemyBrandKitRepository(session)


async def get_backgrounds_repository(
    session: AsyncSession = Depends(get_session),
) -> BackgroundsRepository:
    return SqlAlchemyBackgroundsRepository(session)


async def get_pagination_params(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PaginationParams:
    return PaginationParams(limit=limit, offset=offset)


async def get_storage_service(request: Request) -> LocalStorageService:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        try:
            storage = build_storage_service()
        except (OSError, StorageError) as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(exc),
            ) from exc
        request.app.state.storage = storage
    return storage


async def get_canva_client() -> CanvaClient:
    global _canva_client
    if _canva_client is None:
        try:
            _canva_client = build_canva_client_from_settings()
        except CanvaConfigError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(exc),
            ) from exc
    return _canva_client


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users_repo: UsersRepository = Depends(get_users_repository),
) -> User:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as exc:
        raise _invalid_token() from exc
    subject = payload.get("sub")
    if subject is None:
        raise _invalid_token()
    try:
        user_id = UUID(subject)
    except ValueError as exc:
        raise _invalid_token() from exc
    user = await users_repo.get(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


async def require_premium(current_user: User = Depends(get_current_user)) -> User:
    if current_user.plan == UserPlan.FREE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Canva access requires Premium or Ultra-Premium plan",
        )
    return current_user

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError

from ...core.config import get_settings
from ...core.security import create_access_token, decode_access_token
from ...domain.auth import (
    ProfileUpdateResponse,
    SigninRequest,
    SignupRequest,
    SignupResponse,
    TokenClaims,
    TokenResponse,
)
from ...domain.users import User, UserResponse, UserUpdate
from ...repositories.users import UsersRepository
from ..dependencies import bearer_scheme, get_current_user, get_users_repository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    users_repo: UsersRepository = Depends(get_users_repository),
) -> SignupResponse:
    existing_user = await users_repo.get_by_email(payload.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )
    try:
        user = await users_repo.create(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from exc
    logger.info("auth.signup", user_id=str(user.id), plan=user.plan.value)
    return SignupResponse(user=user)


@router.post("/signin", response_model=TokenResponse)
async def signin(
    payload: SigninRequest,
    users_repo: UsersRepository = Depends(get_users_repository),
) -> TokenResponse:
    user = await users_repo.verify_credentials(payload.email, payload.password)
    if not user:
        logger.info("auth.signin_rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    settings = get_settings()
    token = create_access_token(
        {"sub": str(user.id), "email": user.email, "plan": user.plan.value}
    )
    return TokenResponse(
        token=token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=user,
    )


@router.post("/validate", response_model=TokenClaims)
async def validate_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Decode the bearer token without touching the database."""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )
    try:
        payload = decode_access_token(credentials.credentials)
        return TokenClaims(id=payload["sub"], email=payload["email"], plan=payload["plan"])
    except (JWTError, KeyError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(data=current_user)


@router.put("/update-profile", response_model=ProfileUpdateResponse)
async def update_profile(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    users_repo: UsersRepository = Depends(get_users_repository),
) -> ProfileUpdateResponse:
    try:
        user = await users_repo.update_profile(current_user.id, payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already in use",
        ) from exc
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    logger.info("auth.profile_updated", user_id=str(user.id))
    return ProfileUpdateResponse(user=user)

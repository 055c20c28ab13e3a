"""Schemas for authentication endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .users import User, UserCreate, UserPlan


class SignupRequest(UserCreate):
    """Payload for creating an account with email and password."""


class SignupResponse(BaseModel):
    message: str = "User created"
    user: User


class SigninRequest(BaseModel):
    """Payload for requesting an access token."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Response returned when issuing a token."""

    token: str
    token_type: str = "bearer"
    expires_in: int
    user: User


class TokenClaims(BaseModel):
    """Identity carried inside a bearer token."""

    id: UUID
    email: EmailStr
    plan: UserPlan


class ProfileUpdateResponse(BaseModel):
    message: str = "Profile updated"
    user: User

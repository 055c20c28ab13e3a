from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, EmailStr, Field


class UserPlan(str, Enum):
    FREE = "Free"
    PREMIUM = "Premium"
    ULTRA_PREMIUM = "Ultra-Premium"


class UserPreferences(BaseModel):
    notifications: bool = True
    marketing: bool = False
    language: str = Field(default="es", max_length=16)
    timezone: str = Field(default="Europe/Madrid", max_length=64)


class UserProfile(BaseModel):
    """Free-form profile fields shown on the account page."""

    first_name: str = Field(default="", max_length=120)
    last_name: str = Field(default="", max_length=120)
    phone: str = Field(default="", max_length=40)
    company: str = Field(default="", max_length=160)
    position: str = Field(default="", max_length=160)
    location: str = Field(default="", max_length=160)
    bio: str = Field(default="", max_length=2048)

    model_config = {"str_strip_whitespace": True}


class UserCreate(UserProfile):
    """Payload accepted when creating a new user."""

    email: EmailStr = Field(..., description="Primary email used for login")
    password: str = Field(
        ..., min_length=6, max_length=128, description="Raw password to be hashed"
    )
    plan: UserPlan = UserPlan.FREE


class UserUpdate(BaseModel):
    """Partial profile update; unset fields are left untouched."""

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, max_length=120)
    last_name: Optional[str] = Field(default=None, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=40)
    company: Optional[str] = Field(default=None, max_length=160)
    position: Optional[str] = Field(default=None, max_length=160)
    location: Optional[str] = Field(default=None, max_length=160)
    bio: Optional[str] = Field(default=None, max_length=2048)
    avatar: Optional[str] = None
    plan: Optional[UserPlan] = None
    preferences: Optional[UserPreferences] = None

    model_config = {"str_strip_whitespace": True}


class User(UserProfile):
    """Persisted user profile."""

    id: UUID = Field(default_factory=uuid4)
    username: str
    email: EmailStr
    plan: UserPlan = UserPlan.FREE
    avatar: Optional[str] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Envelope returned for a single user lookup."""

    data: User

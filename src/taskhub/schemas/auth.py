"""Pydantic schemas for registration, login and the session response."""

import uuid
from datetime import datetime

from pydantic import Field

from taskhub.schemas.common import ApiModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(ApiModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    full_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(ApiModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserRead(ApiModel):
    id: uuid.UUID
    email: str
    full_name: str
    created_at: datetime


class SessionRead(ApiModel):
    token: str
    token_type: str = "Bearer"
    expires_in_seconds: int
    user: UserRead

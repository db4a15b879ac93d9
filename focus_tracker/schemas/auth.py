from __future__ import annotations

from pydantic import EmailStr, Field

from .common import APIModel, OptionalUTCDateTime


class RegisterRequest(APIModel):
    email: EmailStr
    username: str = Field(..., min_length=1, max_length=80)
    password: str = Field(..., min_length=8)


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(APIModel):
    id: str
    email: EmailStr
    username: str
    created_at: OptionalUTCDateTime = None

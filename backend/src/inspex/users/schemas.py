"""Pydantic schemas for user administration.

Responses never include password_hash.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from ..auth.schemas import UserResponse


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    role: str = Field(..., pattern="^(admin|inspector|engineer|client)$")
    password: str = Field(..., min_length=8)


class UserUpdate(BaseModel):
    """All fields optional. DISABLED blocks login."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = Field(None, pattern="^(admin|inspector|engineer|client)$")
    status: Optional[str] = Field(None, pattern="^(ACTIVE|DISABLED)$")


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=8)

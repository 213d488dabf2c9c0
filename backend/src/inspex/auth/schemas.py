"""Pydantic schemas for authentication endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response schema for successful login.

    Attributes:
        access_token: JWT access token
        token_type: Token type (always "bearer")
        expires_in: Token expiry in seconds
        user: The authenticated user
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
    user: "UserResponse"


class UserResponse(BaseModel):
    """User information response (excludes password_hash)."""
    id: UUID
    email: str
    name: str
    role: str
    status: str
    last_login_at: Optional[datetime] = None
    has_signature: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    user: UserResponse


LoginResponse.model_rebuild()

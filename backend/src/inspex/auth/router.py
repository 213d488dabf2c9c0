"""Authentication endpoints

Provides endpoints for user login and retrieving current user information.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..database import get_db
from ..models.user import User
from .dependencies import CurrentUser
from .jwt import create_access_token, get_jwt_expiry_minutes
from .password import verify_password
from .schemas import LoginRequest, LoginResponse, MeResponse, UserResponse


router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, honouring X-Forwarded-For from a proxy."""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    if request.client:
        return request.client.host
    return None


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Authenticate user and return JWT access token.

    Failed attempts are written to the audit log with a generic error message
    so callers cannot tell which emails exist.
    """
    user = db.execute(
        select(User).where(User.email == credentials.email.lower())
    ).scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        log_audit_event(
            db=db,
            action="LOGIN_FAILED",
            actor_id=user.id if user else None,
            metadata={"email": credentials.email, "reason": "invalid_credentials"},
            ip_address=get_client_ip(request),
            user_agent=request.headers.get('User-Agent'),
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.is_active:
        log_audit_event(
            db=db,
            action="LOGIN_FAILED",
            actor_id=user.id,
            metadata={"email": credentials.email, "reason": "account_disabled"},
            ip_address=get_client_ip(request),
            user_agent=request.headers.get('User-Agent'),
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled"
        )

    user.last_login_at = datetime.now(timezone.utc)
    log_audit_event(
        db=db,
        action="LOGIN_SUCCESS",
        actor_id=user.id,
        entity_type="user",
        entity_id=user.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get('User-Agent'),
    )
    db.commit()
    db.refresh(user)

    return LoginResponse(
        access_token=create_access_token(user_id=user.id, role=user.role, email=user.email),
        token_type="bearer",
        expires_in=get_jwt_expiry_minutes() * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=MeResponse)
def get_me(current_user: CurrentUser):
    """Get current authenticated user information."""
    return MeResponse(user=UserResponse.model_validate(current_user))

"""FastAPI dependencies for authentication and authorization.

Usage:
    @router.get("/doors")
    def list_doors(user: User = Depends(get_current_user)):
        ...

    @router.post("/inspections/start/{door_id}")
    def start(user: User = Depends(require_roles(INSPECT))):
        ...
"""

from typing import Annotated, Callable, FrozenSet
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .jwt import decode_token
from .roles import UserRole, has_permission


# HTTP Bearer token security scheme
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Extract and validate JWT token, returning the authenticated user.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or user not found
        HTTPException 403: If user status is DISABLED
    """
    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token claims",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Disabled users must not authenticate
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def require_roles(allowed: FrozenSet[UserRole]) -> Callable:
    """Create a dependency that only admits users holding one of ``allowed``.

    Example:
        @router.delete("/certifications/{certification_id}")
        def delete(user: User = Depends(require_roles(ADMIN_ONLY))):
            ...
    """

    def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user.role, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    "Insufficient permissions. Required role: "
                    f"{' or '.join(sorted(r.value for r in allowed))}"
                ),
            )
        return current_user

    return role_dependency


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]

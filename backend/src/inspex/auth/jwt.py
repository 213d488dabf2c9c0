"""JWT token generation and validation

Access tokens carry:

- sub: User ID as UUID string
- role: admin | inspector | engineer | client
- email: User's email address
- iat / exp: Issue and expiry timestamps (JWT_EXPIRY_MINUTES, default 60)

Tokens are HS256-signed with JWT_SECRET. There are no refresh tokens;
clients log in again after expiry.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

import jwt

from ..config import get_settings

ALGORITHM = "HS256"


def _get_jwt_secret() -> str:
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET is not set")
    return secret


def get_jwt_expiry_minutes() -> int:
    return get_settings().JWT_EXPIRY_MINUTES


def create_access_token(user_id: UUID, role: str, email: str) -> str:
    """Create a signed JWT access token for an authenticated user.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=get_jwt_expiry_minutes())

    payload = {
        'sub': str(user_id),
        'role': role,
        'email': email,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }

    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    return jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])

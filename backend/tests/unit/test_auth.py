"""Unit tests for password hashing, JWT tokens and role permissions"""

from uuid import uuid4

import jwt
import pytest

from inspex.auth.jwt import create_access_token, decode_token
from inspex.auth.password import hash_password, validate_password_strength, verify_password
from inspex.auth.roles import (
    ADMIN_ONLY,
    CERTIFY,
    CREATE_DOOR,
    INSPECT,
    VIEW_DOORS,
    UserRole,
    has_permission,
)
from inspex.config import get_settings


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Test Argon2id hashing with pepper"""

    def test_hash_and_verify(self):
        hashed = hash_password("Sup3rSecret")
        assert hashed.startswith("$argon2id$")
        assert verify_password("Sup3rSecret", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_pepper_is_applied(self, monkeypatch):
        hashed = hash_password("Sup3rSecret")
        monkeypatch.setattr(get_settings(), "PASSWORD_PEPPER", "another-pepper")
        assert verify_password("Sup3rSecret", hashed) is False

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")

    def test_verify_garbage_hash(self):
        assert verify_password("Sup3rSecret", "not-a-hash") is False
        assert verify_password("", "") is False

    @pytest.mark.parametrize("password,ok", [
        ("short1A", False),
        ("alllowercase1", False),
        ("ALLUPPERCASE1", False),
        ("NoDigitsHere", False),
        ("Good1Password", True),
    ])
    def test_strength(self, password, ok):
        assert validate_password_strength(password)[0] is ok


class TestAccessToken:
    """Test JWT creation and validation"""

    def test_claims(self):
        user_id = uuid4()
        token = create_access_token(user_id=user_id, role="engineer", email="e@example.com")
        payload = decode_token(token)

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "engineer"
        assert payload["email"] == "e@example.com"
        assert payload["exp"] - payload["iat"] == get_settings().JWT_EXPIRY_MINUTES * 60

    def test_tampered_token_rejected(self):
        token = create_access_token(user_id=uuid4(), role="client", email="c@example.com")
        forged = jwt.encode(jwt.decode(token, options={"verify_signature": False}), "other", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(forged)

    def test_expired_token_rejected(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "JWT_EXPIRY_MINUTES", -1)
        token = create_access_token(user_id=uuid4(), role="client", email="c@example.com")
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)


class TestPermissions:
    """Test the role matrix"""

    def test_everyone_views_doors(self):
        assert all(has_permission(role.value, VIEW_DOORS) for role in UserRole)

    @pytest.mark.parametrize("allowed,role,expected", [
        (CREATE_DOOR, "inspector", True),
        (CREATE_DOOR, "engineer", False),
        (INSPECT, "client", False),
        (CERTIFY, "engineer", True),
        (CERTIFY, "inspector", False),
        (ADMIN_ONLY, "admin", True),
        (ADMIN_ONLY, "engineer", False),
    ])
    def test_matrix(self, allowed, role, expected):
        assert has_permission(role, allowed) is expected

    def test_unknown_role(self):
        assert has_permission("superuser", ADMIN_ONLY) is False

"""Integration tests for login, token use and role enforcement

Tests cover:
- Login with valid, wrong and disabled credentials
- /auth/me with and without a token
- Role checks on door registration
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from inspex.auth.jwt import decode_token
from inspex.models import AuditLog


pytestmark = pytest.mark.integration


class TestLoginEndpoint:
    """Test POST /api/v1/auth/login"""

    def test_login_with_valid_credentials(self, client: TestClient, inspector_user, user_password):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "Inspector@Example.com", "password": user_password},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "inspector@example.com"
        assert data["user"]["role"] == "inspector"
        assert "password_hash" not in data["user"]
        assert decode_token(data["access_token"])["sub"] == str(inspector_user.id)

    def test_login_with_wrong_password(self, client: TestClient, db_session: Session, inspector_user):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "inspector@example.com", "password": "WrongPass1"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"
        failed = db_session.execute(
            select(AuditLog).where(AuditLog.action == "LOGIN_FAILED")
        ).scalars().all()
        assert len(failed) == 1

    def test_unknown_email_gets_same_message(self, client: TestClient, db_session: Session):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPass1"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_disabled_user_cannot_login(
        self, client: TestClient, db_session: Session, inspector_user, user_password
    ):
        inspector_user.status = "DISABLED"
        db_session.commit()

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "inspector@example.com", "password": user_password},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Account is disabled"


class TestCurrentUser:
    """Test GET /api/v1/auth/me"""

    def test_me(self, client: TestClient, engineer_headers):
        response = client.get("/api/v1/auth/me", headers=engineer_headers)
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Erin Engineer"

    def test_me_without_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    def test_me_with_garbage_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_disabled_user_token_rejected(
        self, client: TestClient, db_session: Session, engineer_user, engineer_headers
    ):
        engineer_user.status = "DISABLED"
        db_session.commit()

        response = client.get("/api/v1/auth/me", headers=engineer_headers)
        assert response.status_code == 403


class TestRoleEnforcement:
    """Door registration is limited to admins and inspectors"""

    body = {"po_number": "PO-1", "door_number": 1, "size": "1.5", "pressure": 140}

    @pytest.mark.parametrize("headers_fixture", ["engineer_headers", "client_headers"])
    def test_forbidden_roles(self, request, client: TestClient, inspection_points, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        response = client.post("/api/v1/doors", json=self.body, headers=headers)
        assert response.status_code == 403

    @pytest.mark.parametrize("headers_fixture", ["admin_headers", "inspector_headers"])
    def test_allowed_roles(self, request, client: TestClient, inspection_points, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        response = client.post("/api/v1/doors", json=self.body, headers=headers)
        assert response.status_code == 201

    def test_clients_can_read_doors(self, client: TestClient, door, client_headers):
        response = client.get(f"/api/v1/doors/{door.id}", headers=client_headers)
        assert response.status_code == 200
        assert response.json()["serial_number"] == "MF42-18-0006"

"""Pytest fixtures for the door lifecycle.

Provides reusable test fixtures for:
- In-memory SQLite database with a fresh schema per test
- Users for every role
- Doors in each lifecycle state, built through the real services
- Authenticated test clients with JWT tokens
- A recording notification dispatcher and a temporary storage directory

Usage:
    def test_start(client, inspector_headers, door):
        response = client.post(f"/api/v1/inspections/start/{door.id}", headers=inspector_headers)
        assert response.status_code == 201
"""

import os

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("SMTP_HOST", "")

from typing import Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inspex.auth.jwt import create_access_token
from inspex.auth.password import hash_password
from inspex.database import enable_sqlite_savepoints, get_db
from inspex.doors.service import create_door
from inspex.infrastructure.pdf.certificate_renderer import (
    ReportlabCertificateRenderer,
    get_certificate_renderer,
)
from inspex.infrastructure.storage.local_storage_adapter import LocalFileStorage
from inspex.infrastructure.storage.storage_config import get_object_storage
from inspex.inspection_points.seed import seed_inspection_points
from inspex.inspections.service import complete_inspection, start_inspection
from inspex.models import Base, User
from inspex.notifications import dispatcher as notification_dispatcher

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(test_engine)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# Password hashing is slow; every fixture user shares one hash
_PASSWORD = "Passw0rdTest"
_PASSWORD_HASH = None


class RecordingDispatcher:
    """Collects dispatched notifications instead of enqueueing tasks."""

    def __init__(self):
        self.sent: List = []

    def dispatch(self, notification) -> None:
        self.sent.append(notification)

    def kinds(self) -> List[str]:
        return [n.kind.value for n in self.sent]


@pytest.fixture(autouse=True)
def recording_dispatcher() -> Generator[RecordingDispatcher, None, None]:
    recorder = RecordingDispatcher()
    previous = notification_dispatcher.set_dispatcher(recorder)
    yield recorder
    notification_dispatcher.set_dispatcher(previous)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


def _make_user(db: Session, role: str, email: str, name: str) -> User:
    global _PASSWORD_HASH
    if _PASSWORD_HASH is None:
        _PASSWORD_HASH = hash_password(_PASSWORD)
    user = User(email=email, name=name, role=role, password_hash=_PASSWORD_HASH, status="ACTIVE")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user_password() -> str:
    return _PASSWORD


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return _make_user(db_session, "admin", "admin@example.com", "Admin User")


@pytest.fixture
def inspector_user(db_session: Session) -> User:
    return _make_user(db_session, "inspector", "inspector@example.com", "Ivan Inspector")


@pytest.fixture
def engineer_user(db_session: Session) -> User:
    return _make_user(db_session, "engineer", "engineer@example.com", "Erin Engineer")


@pytest.fixture
def client_user(db_session: Session) -> User:
    return _make_user(db_session, "client", "client@example.com", "Carla Client")


@pytest.fixture
def inspection_points(db_session: Session) -> int:
    added = seed_inspection_points(db_session)
    db_session.commit()
    return added


@pytest.fixture
def door(db_session: Session, inspection_points, admin_user: User):
    """A freshly registered 1.8 m / 400 kPa door."""
    created = create_door(
        db_session,
        po_number="PO-1001",
        door_number=6,
        size="1.8",
        pressure=400,
        actor_id=admin_user.id,
        job_number="J-77",
    )
    db_session.commit()
    return created


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(str(tmp_path / "storage"))


@pytest.fixture
def renderer() -> ReportlabCertificateRenderer:
    return ReportlabCertificateRenderer()


def _headers(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role, email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


@pytest.fixture
def inspector_headers(inspector_user: User) -> dict:
    return _headers(inspector_user)


@pytest.fixture
def engineer_headers(engineer_user: User) -> dict:
    return _headers(engineer_user)


@pytest.fixture
def client_headers(client_user: User) -> dict:
    return _headers(client_user)


@pytest.fixture(scope="function")
def client(db_session: Session, storage: LocalFileStorage) -> Generator[TestClient, None, None]:
    """Unauthenticated test client sharing the test session.

    Pass one of the ``*_headers`` fixtures to authenticate.
    """
    from inspex.main import app

    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_certificate_renderer] = lambda: ReportlabCertificateRenderer()

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def inspected_door(db_session: Session, door, inspector_user: User, engineer_user: User):
    """A door whose only inspection has been completed by the inspector."""
    inspection = start_inspection(db_session, door.id, inspector_id=inspector_user.id)
    complete_inspection(db_session, inspection.id, actor_id=inspector_user.id)
    db_session.commit()
    db_session.refresh(door)
    return door

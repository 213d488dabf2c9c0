"""Unit tests for user administration and stored signatures"""

import base64
from uuid import uuid4

import pytest
from sqlalchemy import select

from inspex.auth.password import verify_password
from inspex.config import get_settings
from inspex.errors import NotFoundError, ValidationError
from inspex.models import AuditLog, User
from inspex.users.service import (
    delete_signature,
    delete_user,
    load_signature,
    reset_password,
    set_signature,
)


pytestmark = pytest.mark.unit

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _actions(db_session, user_id):
    return [
        e.action for e in db_session.execute(
            select(AuditLog).where(AuditLog.entity_id == user_id).order_by(AuditLog.created_at)
        ).scalars()
    ]


class TestResetPassword:
    def test_reset(self, db_session, inspector_user, admin_user):
        reset_password(db_session, inspector_user.id, actor_id=admin_user.id, new_password="N3wPassword")
        db_session.commit()

        assert verify_password("N3wPassword", inspector_user.password_hash)
        assert _actions(db_session, inspector_user.id) == ["PASSWORD_RESET"]

    def test_weak_password(self, db_session, inspector_user, admin_user):
        old_hash = inspector_user.password_hash
        with pytest.raises(ValidationError):
            reset_password(db_session, inspector_user.id, actor_id=admin_user.id, new_password="short")
        assert inspector_user.password_hash == old_hash

    def test_unknown_user(self, db_session, admin_user):
        with pytest.raises(NotFoundError):
            reset_password(db_session, uuid4(), actor_id=admin_user.id, new_password="N3wPassword")


class TestDeleteUser:
    def test_delete(self, db_session, client_user, admin_user):
        delete_user(db_session, client_user.id, actor_id=admin_user.id)
        db_session.commit()

        assert db_session.get(User, client_user.id) is None
        assert _actions(db_session, client_user.id) == ["USER_DELETED"]

    def test_cannot_delete_self(self, db_session, admin_user):
        with pytest.raises(ValidationError):
            delete_user(db_session, admin_user.id, actor_id=admin_user.id)

    def test_signature_file_removed(self, db_session, engineer_user, admin_user, storage):
        set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)
        path = engineer_user.signature_path
        db_session.commit()

        delete_user(db_session, engineer_user.id, actor_id=admin_user.id, storage=storage)
        db_session.commit()
        assert storage.file_exists(path) is False


class TestSignature:
    """Test storing and loading an engineer's signature"""

    def test_store_and_load(self, db_session, engineer_user, storage):
        set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)
        db_session.commit()

        assert engineer_user.has_signature
        assert engineer_user.signature_path.startswith(f"signatures/{engineer_user.id}/")
        data_url = load_signature(engineer_user, storage)
        assert data_url == "data:image/png;base64," + base64.b64encode(PNG).decode("ascii")

    def test_replacing_removes_previous_file(self, db_session, engineer_user, storage):
        set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)
        first = engineer_user.signature_path
        set_signature(db_session, engineer_user.id, PNG + b"\x01", "sig2.png", "image/png", storage)

        assert engineer_user.signature_path != first
        assert storage.file_exists(first) is False

    @pytest.mark.parametrize("content,content_type", [
        (b"hello", "text/plain"),
        (b"", "image/png"),
        (PNG, None),
    ])
    def test_invalid_upload(self, db_session, engineer_user, storage, content, content_type):
        with pytest.raises(ValidationError):
            set_signature(db_session, engineer_user.id, content, "sig", content_type, storage)
        assert engineer_user.signature_path is None

    def test_too_large(self, db_session, engineer_user, storage, monkeypatch):
        monkeypatch.setattr(get_settings(), "MAX_SIGNATURE_SIZE", 10)
        with pytest.raises(ValidationError):
            set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)

    def test_delete(self, db_session, engineer_user, storage):
        set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)
        path = engineer_user.signature_path

        delete_signature(db_session, engineer_user.id, storage=storage)

        assert engineer_user.signature_path is None
        assert engineer_user.signature_mime_type is None
        assert storage.file_exists(path) is False
        assert load_signature(engineer_user, storage) is None

    def test_missing_file_loads_as_none(self, db_session, engineer_user, storage):
        set_signature(db_session, engineer_user.id, PNG, "sig.png", "image/png", storage)
        storage.delete_file(engineer_user.signature_path)

        assert load_signature(engineer_user, storage) is None

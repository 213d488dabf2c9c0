"""User administration. Every mutation is audited."""

import base64
import io
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..auth.password import hash_password, validate_password_strength
from ..auth.roles import UserRole
from ..config import get_settings
from ..domain.storage.ports import ObjectStoragePort
from ..errors import ConflictError, DependencyFailure, NotFoundError, ValidationError
from ..models.user import User

logger = logging.getLogger(__name__)

USER_STATUSES = ("ACTIVE", "DISABLED")
SIGNATURE_PREFIX = "signatures"


def _check_role(role: str) -> str:
    try:
        return UserRole(role).value
    except ValueError:
        raise ValidationError(
            f"Invalid role '{role}'. Must be one of: {', '.join(r.value for r in UserRole)}"
        )


def list_users(db: Session, role: Optional[str] = None) -> List[User]:
    stmt = select(User).order_by(User.created_at.desc())
    if role:
        stmt = stmt.where(User.role == role)
    return list(db.execute(stmt).scalars())


def get_user(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def create_user(
    db: Session,
    email: str,
    name: str,
    role: str,
    password: str,
    actor_id: Optional[UUID] = None,
) -> User:
    """Create a user with an Argon2id-hashed password.

    Raises:
        ValidationError: Unknown role or weak password
        ConflictError: Email already registered
    """
    role = _check_role(role)
    ok, message = validate_password_strength(password)
    if not ok:
        raise ValidationError(message)

    email = email.strip().lower()
    if db.execute(select(User.id).where(User.email == email)).first():
        raise ConflictError(f"User with email {email} already exists")

    user = User(
        email=email,
        name=name.strip(),
        role=role,
        password_hash=hash_password(password),
        status="ACTIVE",
    )
    try:
        with db.begin_nested():
            db.add(user)
    except IntegrityError:
        raise ConflictError(f"User with email {email} already exists")

    log_audit_event(
        db=db,
        action="USER_CREATED",
        actor_id=actor_id,
        entity_type="user",
        entity_id=user.id,
        metadata={"email": user.email, "role": user.role},
    )
    logger.info(f"User created: {user.email} ({user.role})", extra={"user_id": user.id})
    return user


def update_user(
    db: Session,
    user_id: UUID,
    actor_id: UUID,
    name: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[str] = None,
) -> User:
    """Change a user's name, role or status. Admins cannot disable themselves."""
    user = get_user(db, user_id)
    if role is not None:
        role = _check_role(role)
    if status is not None and status not in USER_STATUSES:
        raise ValidationError(f"Invalid status '{status}'")
    if status == "DISABLED" and user.id == actor_id:
        raise ValidationError("You cannot disable your own account")

    changes = {}
    if name is not None and name.strip() and name.strip() != user.name:
        changes["name"] = {"old": user.name, "new": name.strip()}
        user.name = name.strip()
    if role is not None and role != user.role:
        changes["role"] = {"old": user.role, "new": role}
        user.role = role
    if status is not None and status != user.status:
        changes["status"] = {"old": user.status, "new": status}
        user.status = status

    if changes:
        log_audit_event(
            db=db,
            action="USER_UPDATED",
            actor_id=actor_id,
            entity_type="user",
            entity_id=user.id,
            metadata=changes,
        )
    db.flush()
    return user


def reset_password(db: Session, user_id: UUID, actor_id: UUID, new_password: str) -> User:
    """Set a new password for a user.

    Raises:
        NotFoundError: Unknown user
        ValidationError: Weak password
    """
    user = get_user(db, user_id)
    ok, message = validate_password_strength(new_password)
    if not ok:
        raise ValidationError(message)

    user.password_hash = hash_password(new_password)
    log_audit_event(
        db=db,
        action="PASSWORD_RESET",
        actor_id=actor_id,
        entity_type="user",
        entity_id=user.id,
    )
    db.flush()
    logger.info(f"Password reset for {user.email}", extra={"user_id": user.id})
    return user


def delete_user(
    db: Session,
    user_id: UUID,
    actor_id: UUID,
    storage: Optional[ObjectStoragePort] = None,
) -> None:
    """Delete a user account.

    Inspections, certifications and audit entries keep their rows; their
    reference to the user is cleared by the foreign keys. The stored
    signature is removed best-effort.

    Raises:
        NotFoundError: Unknown user
        ValidationError: Admins cannot delete themselves
    """
    user = get_user(db, user_id)
    if user.id == actor_id:
        raise ValidationError("You cannot delete your own account")

    signature_path = user.signature_path
    email = user.email
    log_audit_event(
        db=db,
        action="USER_DELETED",
        actor_id=actor_id,
        entity_type="user",
        entity_id=user.id,
        metadata={"email": email, "role": user.role},
    )
    db.delete(user)
    db.flush()

    if storage is not None and signature_path:
        _remove_file(storage, signature_path)
    logger.info(f"User deleted: {email}", extra={"user_id": user_id})


def set_signature(
    db: Session,
    user_id: UUID,
    content: bytes,
    filename: str,
    content_type: Optional[str],
    storage: ObjectStoragePort,
    actor_id: Optional[UUID] = None,
) -> User:
    """Store a signature image for a user, replacing any earlier one.

    Raises:
        NotFoundError: Unknown user
        ValidationError: Not an image, empty, or larger than MAX_SIGNATURE_SIZE
        StorageError: Object storage rejected the upload
    """
    user = get_user(db, user_id)
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError(f"Unsupported signature type: {content_type or 'unknown'}")
    if not content:
        raise ValidationError("Signature is empty")
    max_size = get_settings().MAX_SIGNATURE_SIZE
    if len(content) > max_size:
        raise ValidationError(
            f"Signature is {len(content)} bytes; maximum is {max_size} bytes"
        )

    stored = storage.store_file(
        file=io.BytesIO(content),
        prefix=f"{SIGNATURE_PREFIX}/{user.id}",
        filename=filename or "signature",
        mime_type=content_type,
    )
    previous = user.signature_path
    user.signature_path = stored.storage_key
    user.signature_mime_type = content_type
    log_audit_event(
        db=db,
        action="SIGNATURE_UPLOADED",
        actor_id=actor_id or user.id,
        entity_type="user",
        entity_id=user.id,
        metadata={"storage_key": stored.storage_key},
    )
    db.flush()

    if previous and previous != stored.storage_key:
        _remove_file(storage, previous)
    logger.info(f"Signature stored for {user.email}", extra={"user_id": user.id})
    return user


def delete_signature(
    db: Session,
    user_id: UUID,
    actor_id: Optional[UUID] = None,
    storage: Optional[ObjectStoragePort] = None,
) -> User:
    user = get_user(db, user_id)
    path = user.signature_path
    if not path:
        return user

    user.signature_path = None
    user.signature_mime_type = None
    log_audit_event(
        db=db,
        action="SIGNATURE_DELETED",
        actor_id=actor_id or user.id,
        entity_type="user",
        entity_id=user.id,
    )
    db.flush()

    if storage is not None:
        _remove_file(storage, path)
    return user


def load_signature(user: User, storage: ObjectStoragePort) -> Optional[str]:
    """A user's stored signature as an image data URL, or None.

    A signature that cannot be read is logged and treated as absent.
    """
    if not user.signature_path:
        return None
    try:
        content = storage.retrieve_file(user.signature_path)
    except (DependencyFailure, FileNotFoundError) as e:
        logger.warning(
            f"Stored signature of {user.email} unavailable: {e}",
            extra={"user_id": user.id},
        )
        return None
    mime_type = user.signature_mime_type or "image/png"
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def _remove_file(storage: ObjectStoragePort, path: str) -> None:
    try:
        storage.delete_file(path)
    except DependencyFailure as e:
        logger.warning(f"Could not delete signature file {path}: {e}")

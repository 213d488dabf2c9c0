"""User management endpoints (ADMIN only) and signature upload (own account or ADMIN)."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_roles
from ..auth.roles import ADMIN_ONLY, UserRole
from ..auth.schemas import UserResponse
from ..database import get_db
from ..domain.storage.ports import ObjectStoragePort
from ..infrastructure.storage.storage_config import get_object_storage
from ..models.user import User
from . import service
from .schemas import PasswordReset, UserCreate, UserListResponse, UserUpdate

router = APIRouter(prefix="/admin/users", tags=["User Management"])
signature_router = APIRouter(prefix="/users", tags=["User Management"])


@router.get("", response_model=UserListResponse)
def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    users = service.list_users(db, role=role)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users], total=len(users))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Create a user.

    Raises:
        409: Email already exists
        422: Password does not meet strength requirements
    """
    user = service.create_user(
        db,
        email=data.email,
        name=data.name,
        role=data.role,
        password=data.password,
        actor_id=current_user.id,
    )
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    user = service.update_user(
        db,
        user_id,
        actor_id=current_user.id,
        name=data.name,
        role=data.role,
        status=data.status,
    )
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reset-password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(
    user_id: UUID,
    data: PasswordReset,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Set a new password for a user.

    Raises:
        422: Password does not meet strength requirements
    """
    service.reset_password(db, user_id, actor_id=current_user.id, new_password=data.new_password)
    db.commit()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    service.delete_user(db, user_id, actor_id=current_user.id, storage=storage)
    db.commit()


def _check_signature_owner(current_user: User, user_id: UUID) -> None:
    if current_user.role != UserRole.ADMIN.value and current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot manage the signature of another user",
        )


@signature_router.post("/{user_id}/signature", response_model=UserResponse)
async def upload_signature(
    user_id: UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(get_current_user),
):
    """Store a signature image (own account, or any account for ADMIN).

    Certifications made without a signature use the stored one.
    """
    _check_signature_owner(current_user, user_id)
    content = await file.read()
    user = service.set_signature(
        db,
        user_id,
        content=content,
        filename=file.filename or "signature",
        content_type=file.content_type,
        storage=storage,
        actor_id=current_user.id,
    )
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)


@signature_router.delete("/{user_id}/signature", status_code=status.HTTP_204_NO_CONTENT)
def delete_signature(
    user_id: UUID,
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(get_current_user),
):
    _check_signature_owner(current_user, user_id)
    service.delete_signature(db, user_id, actor_id=current_user.id, storage=storage)
    db.commit()

"""Door API endpoints"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_roles
from ..auth.roles import ADMIN_ONLY, CREATE_DOOR
from ..database import get_db
from ..models.user import User
from . import service
from .schemas import AuditEntryResponse, DoorCreate, DoorListResponse, DoorResponse, DoorUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doors", tags=["doors"])


@router.post("", response_model=DoorResponse, status_code=status.HTTP_201_CREATED)
def create_door(
    door_data: DoorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CREATE_DOOR)),
):
    """Register a door (ADMIN/INSPECTOR only).

    Raises:
        422: Unknown size or pressure
        409: Serial number already issued
    """
    door = service.create_door(
        db,
        po_number=door_data.po_number,
        door_number=door_data.door_number,
        size=door_data.size,
        pressure=door_data.pressure,
        actor_id=current_user.id,
        job_number=door_data.job_number,
    )
    db.commit()
    db.refresh(door)
    return DoorResponse.model_validate(door)


@router.get("", response_model=DoorListResponse)
def list_doors(
    inspection_status: Optional[str] = Query(None, description="Filter by inspection status"),
    certification_status: Optional[str] = Query(None, description="Filter by certification status"),
    po_number: Optional[str] = Query(None, description="Filter by exact PO number"),
    q: Optional[str] = Query(None, description="Search serial, drawing or job number"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(50, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    doors, total = service.list_doors(
        db,
        inspection_status=inspection_status,
        certification_status=certification_status,
        po_number=po_number,
        q=q,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    total_pages = (total + per_page - 1) // per_page if total > 0 else 0
    return DoorListResponse(
        items=[DoorResponse.model_validate(d) for d in doors],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.get("/status/pending-inspection", response_model=List[DoorResponse])
def pending_inspection(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Doors waiting for an inspection, including rejected doors."""
    return [DoorResponse.model_validate(d) for d in service.list_pending_inspection(db)]


@router.get("/status/pending-certification", response_model=List[DoorResponse])
def pending_certification(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [DoorResponse.model_validate(d) for d in service.list_pending_certification(db)]


@router.get("/{door_id}", response_model=DoorResponse)
def get_door(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return DoorResponse.model_validate(service.get_door(db, door_id))


@router.put("/{door_id}", response_model=DoorResponse)
def update_door(
    door_id: UUID,
    data: DoorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CREATE_DOOR)),
):
    """Edit job number or description (ADMIN/INSPECTOR only).

    Raises:
        422: Attempt to change a fixed field
    """
    door = service.update_door(
        db, door_id, actor_id=current_user.id, updates=data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(door)
    return DoorResponse.model_validate(door)


@router.get("/{door_id}/history", response_model=List[AuditEntryResponse])
def get_door_history(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lifecycle audit trail, oldest first. Keeps rejection reasons that the
    door itself no longer carries."""
    return [AuditEntryResponse.model_validate(e) for e in service.door_history(db, door_id)]


@router.delete("/{door_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_door(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Delete a door that has no inspections (ADMIN only)."""
    service.delete_door(db, door_id, actor_id=current_user.id)
    db.commit()
    logger.info(f"Door {door_id} deleted by {current_user.email}")

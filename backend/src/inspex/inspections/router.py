"""Inspection API endpoints"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_roles
from ..auth.roles import ADMIN_ONLY, INSPECT
from ..database import get_db
from ..domain.storage.ports import ObjectStoragePort
from ..infrastructure.storage.storage_config import get_object_storage
from ..models.inspection import Inspection
from ..models.user import User
from . import checklist, service
from .schemas import (
    CheckResponse,
    CheckUpdate,
    CompleteInspectionRequest,
    InspectionDetailResponse,
    InspectionListResponse,
    InspectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inspections", tags=["inspections"])


def _detail(db: Session, inspection: Inspection) -> InspectionDetailResponse:
    checks = checklist.list_checks(db, inspection.id)
    base = InspectionResponse.from_inspection(
        inspection, checklist.checks_summary(db, inspection.id)
    )
    return InspectionDetailResponse(
        **base.model_dump(),
        checks=[CheckResponse.from_check(c) for c in checks],
    )


@router.post(
    "/start/{door_id}",
    response_model=InspectionDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_inspection(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(INSPECT)),
):
    """Start an inspection of a door (ADMIN/INSPECTOR only).

    Raises:
        404: Unknown door
        409: An inspection is already in progress
    """
    inspection = service.start_inspection(db, door_id, inspector_id=current_user.id)
    db.commit()
    db.refresh(inspection)
    return _detail(db, inspection)


@router.get("", response_model=InspectionListResponse)
def list_inspections(
    door_id: Optional[UUID] = Query(None, description="Filter by door"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    inspector_id: Optional[UUID] = Query(None, description="Filter by inspector"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    inspections, total = service.list_inspections(
        db,
        door_id=door_id,
        status=status_filter,
        inspector_id=inspector_id,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    summaries = checklist.summaries_for(db, [i.id for i in inspections])
    return InspectionListResponse(
        items=[InspectionResponse.from_inspection(i, summaries.get(i.id)) for i in inspections],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page if total > 0 else 0,
    )


@router.get("/door/{door_id}/active", response_model=Optional[InspectionDetailResponse])
def get_active_inspection(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The door's in-progress inspection, or null."""
    inspection = service.get_active_inspection(db, door_id)
    if inspection is None:
        return None
    return _detail(db, inspection)


@router.get("/{inspection_id}", response_model=InspectionDetailResponse)
def get_inspection(
    inspection_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(db, service.get_inspection(db, inspection_id))


@router.put("/checks/{check_id}", response_model=CheckResponse)
def update_check(
    check_id: UUID,
    update: CheckUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(INSPECT)),
):
    check = checklist.update_check(
        db, check_id, is_checked=update.is_checked, notes=update.notes
    )
    db.commit()
    db.refresh(check)
    return CheckResponse.from_check(check)


@router.post("/checks/{check_id}/photo", response_model=CheckResponse)
async def upload_check_photo(
    check_id: UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(require_roles(INSPECT)),
):
    """Attach a photo (image/*, max 5 MB by default) to a checklist item."""
    content = await file.read()
    check = checklist.attach_photo(
        db,
        check_id,
        content=content,
        filename=file.filename or "photo",
        content_type=file.content_type,
        storage=storage,
    )
    db.commit()
    db.refresh(check)
    return CheckResponse.from_check(check)


@router.post("/complete/{inspection_id}", response_model=InspectionResponse)
def complete_inspection(
    inspection_id: UUID,
    body: Optional[CompleteInspectionRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(INSPECT)),
):
    """Complete an in-progress inspection (ADMIN/INSPECTOR only).

    Engineers are notified once the transaction commits.
    """
    inspection = service.complete_inspection(
        db,
        inspection_id,
        actor_id=current_user.id,
        notes=body.notes if body else None,
    )
    db.commit()
    db.refresh(inspection)
    return InspectionResponse.from_inspection(
        inspection, checklist.checks_summary(db, inspection.id)
    )


@router.delete("/{inspection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inspection(
    inspection_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Delete an inspection and its checks (ADMIN only)."""
    service.delete_inspection(db, inspection_id, actor_id=current_user.id)
    db.commit()
    logger.info(f"Inspection {inspection_id} deleted by {current_user.email}")

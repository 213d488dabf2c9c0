"""Certification API endpoints"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_roles
from ..auth.roles import ADMIN_ONLY, CERTIFY
from ..database import get_db
from ..domain.certificates.ports import CertificateRendererPort
from ..domain.storage.ports import ObjectStoragePort
from ..doors.schemas import DoorResponse
from ..doors.service import get_door, list_pending_certification
from ..errors import NotFoundError
from ..infrastructure.pdf.certificate_renderer import get_certificate_renderer
from ..infrastructure.storage.storage_config import get_object_storage
from ..inspections import checklist
from ..inspections.schemas import CheckResponse, InspectionDetailResponse, InspectionResponse
from ..inspections.service import get_authoritative_inspection
from ..models.user import User
from . import service
from .schemas import (
    CertificationListResponse,
    CertificationResponse,
    CertifyRequest,
    CompletedCertificationResponse,
    RejectRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/certifications", tags=["certifications"])


@router.get("", response_model=CertificationListResponse)
def list_certifications(
    door_id: Optional[UUID] = Query(None, description="Filter by door"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = service.list_certifications(
        db, door_id=door_id, limit=per_page, offset=(page - 1) * per_page
    )
    return CertificationListResponse(
        items=[CertificationResponse.from_certification(c) for c in items],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page if total > 0 else 0,
    )


@router.get("/completed", response_model=List[CompletedCertificationResponse])
def completed_certifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Certificates available for download. Open to every role."""
    return [
        CompletedCertificationResponse.from_certification(c)
        for c in service.list_completed_certifications(db)
    ]


@router.get("/pending", response_model=List[DoorResponse])
def pending_certifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CERTIFY)),
):
    """Doors with a completed inspection awaiting a decision."""
    return [DoorResponse.model_validate(d) for d in list_pending_certification(db)]


@router.get("/door/{door_id}/inspection", response_model=InspectionDetailResponse)
def get_inspection_for_review(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CERTIFY)),
):
    """The authoritative inspection an engineer is asked to certify."""
    door = get_door(db, door_id)
    inspection = get_authoritative_inspection(db, door.id)
    if inspection is None:
        raise NotFoundError(f"Door {door.serial_number} has no completed inspection")
    base = InspectionResponse.from_inspection(inspection, checklist.checks_summary(db, inspection.id))
    return InspectionDetailResponse(
        **base.model_dump(),
        checks=[CheckResponse.from_check(c) for c in checklist.list_checks(db, inspection.id)],
    )


@router.post("/review/{door_id}", response_model=DoorResponse)
def open_review(
    door_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CERTIFY)),
):
    door = service.open_review(db, door_id, engineer_id=current_user.id)
    db.commit()
    db.refresh(door)
    return DoorResponse.model_validate(door)


@router.post(
    "/certify/{door_id}",
    response_model=CertificationResponse,
    status_code=status.HTTP_201_CREATED,
)
def certify_door(
    door_id: UUID,
    body: Optional[CertifyRequest] = None,
    db: Session = Depends(get_db),
    renderer: CertificateRendererPort = Depends(get_certificate_renderer),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(require_roles(CERTIFY)),
):
    """Certify a door (ADMIN/ENGINEER only).

    The inspector is notified with the certificate once the transaction
    commits. A failed PDF render does not fail the certification.
    """
    certification = service.certify(
        db,
        door_id,
        engineer_id=current_user.id,
        signature=body.signature if body else None,
        renderer=renderer,
        storage=storage,
    )
    db.commit()
    db.refresh(certification)
    return CertificationResponse.from_certification(certification)


@router.post("/reject/{door_id}", response_model=DoorResponse)
def reject_door(
    door_id: UUID,
    body: RejectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(CERTIFY)),
):
    """Reject a door's inspection with a reason (ADMIN/ENGINEER only)."""
    door = service.reject_certification(db, door_id, engineer_id=current_user.id, reason=body.reason)
    db.commit()
    db.refresh(door)
    return DoorResponse.model_validate(door)


@router.get("/download/{door_id}")
def download_certificate(
    door_id: UUID,
    db: Session = Depends(get_db),
    renderer: CertificateRendererPort = Depends(get_certificate_renderer),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(get_current_user),
):
    """Download the latest certificate PDF of a door.

    Raises:
        404: The door has no certification
        503: The certificate could not be loaded or rendered
    """
    filename, pdf = service.ensure_certificate_pdf(db, door_id, renderer, storage)
    db.commit()
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{certification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_certification(
    certification_id: UUID,
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Delete a certification (ADMIN only). The door returns to pending."""
    service.delete_certification(db, certification_id, actor_id=current_user.id, storage=storage)
    db.commit()
    logger.info(f"Certification {certification_id} deleted by {current_user.email}")

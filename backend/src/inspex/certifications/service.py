"""Certification decisions: review, certify, reject and delete.

A certified door carries exactly one Certification, pointing at its
authoritative inspection. Rejections never create a row; the reason lives on
the door until a re-inspection completes, and in the audit log for good.

The certificate PDF is rendered after the certification is written. A render
or storage failure is logged and leaves ``certificate_pdf_path`` empty; the
download path renders on demand in that case.
"""

import io
import logging
import time
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..audit.service import log_audit_event
from ..doors.service import door_state, lock_door, set_door_state
from ..domain.certificates.ports import (
    CertificateCheck,
    CertificateDoor,
    CertificateRendererPort,
    certificate_filename,
)
from ..domain.lifecycle import CertificationStatus, LifecycleEvent, transition
from ..domain.storage.ports import ObjectStoragePort
from ..errors import DependencyFailure, InvalidStateError, NotFoundError, ValidationError
from ..inspections.checklist import list_checks
from ..inspections.service import get_authoritative_inspection
from ..models.base import utcnow
from ..models.certification import Certification
from ..models.door import Door
from ..models.user import User
from ..notifications.recipients import notify_certification_ready, notify_rejected
from ..observability.metrics import (
    certificate_render_seconds,
    certificates_rendered_total,
    lifecycle_transitions_total,
)
from ..users.service import load_signature

logger = logging.getLogger(__name__)

CERTIFICATE_PREFIX = "certificates"


def get_certification(db: Session, certification_id: UUID) -> Certification:
    certification = db.get(Certification, certification_id)
    if certification is None:
        raise NotFoundError(f"Certification {certification_id} not found")
    return certification


def get_latest_certificate(db: Session, door_id: UUID) -> Optional[Certification]:
    return db.execute(
        select(Certification)
        .where(Certification.door_id == door_id)
        .order_by(Certification.certified_at.desc(), Certification.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_certifications(
    db: Session,
    door_id: Optional[UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Certification], int]:
    stmt = select(Certification).options(
        selectinload(Certification.door), selectinload(Certification.engineer)
    )
    if door_id:
        stmt = stmt.where(Certification.door_id == door_id)

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar()
    items = db.execute(
        stmt.order_by(Certification.certified_at.desc()).offset(offset).limit(limit)
    ).scalars().all()
    return list(items), total


def list_completed_certifications(db: Session) -> List[Certification]:
    """Certificates of doors that are currently certified, newest first."""
    stmt = (
        select(Certification)
        .join(Certification.door)
        .options(
            selectinload(Certification.door).selectinload(Door.purchase_order),
            selectinload(Certification.engineer),
        )
        .where(Door.certification_status == CertificationStatus.CERTIFIED.value)
        .order_by(Certification.certified_at.desc(), Certification.id.desc())
    )
    return list(db.execute(stmt).scalars())


def open_review(db: Session, door_id: UUID, engineer_id: UUID):
    """Mark a door as under engineering review. Repeating it is a no-op."""
    door = lock_door(db, door_id)
    state = door_state(door)
    new_state = transition(state, LifecycleEvent.OPEN_REVIEW)
    if new_state == state:
        return door

    set_door_state(door, new_state)
    log_audit_event(
        db=db,
        action="CERTIFICATION_REVIEW_OPENED",
        actor_id=engineer_id,
        entity_type="door",
        entity_id=door.id,
        metadata={"from": str(state), "to": str(new_state)},
    )
    db.flush()

    lifecycle_transitions_total.labels(LifecycleEvent.OPEN_REVIEW.value).inc()
    logger.info(
        f"Review opened for door {door.serial_number}",
        extra={"door_id": door.id},
    )
    return door


def render_certificate(
    db: Session,
    certification: Certification,
    renderer: CertificateRendererPort,
    storage: ObjectStoragePort,
) -> Tuple[str, bytes]:
    """Render a certificate PDF and store it. Returns (storage key, pdf).

    Raises:
        DependencyFailure: Rendering or storage failed
    """
    door = certification.door
    inspection = certification.inspection
    checks = list_checks(db, inspection.id) if inspection is not None else []
    engineer_name = certification.engineer.name if certification.engineer else "N/A"

    started = time.monotonic()
    try:
        pdf = renderer.render(
            door=CertificateDoor(
                po_number=door.po_number,
                serial_number=door.serial_number,
                drawing_number=door.drawing_number,
                description=door.description,
                pressure=door.pressure,
                size=door.size,
                door_type=door.door_type,
                inspection_date=inspection.inspection_date if inspection else None,
                inspector_name=(
                    inspection.inspector.name if inspection and inspection.inspector else None
                ),
            ),
            checks=[
                CertificateCheck(
                    name=check.point.name,
                    description=check.point.description,
                    is_checked=check.is_checked,
                    notes=check.notes,
                )
                for check in checks
            ],
            engineer=engineer_name,
            signature=certification.signature,
            certified_at=certification.certified_at,
        )
        stored = storage.store_file(
            file=io.BytesIO(pdf),
            prefix=CERTIFICATE_PREFIX,
            filename=certificate_filename(door.serial_number, certification.certified_at),
            mime_type="application/pdf",
        )
    except DependencyFailure:
        certificates_rendered_total.labels("error").inc()
        raise
    finally:
        certificate_render_seconds.observe(time.monotonic() - started)

    certification.certificate_pdf_path = stored.storage_key
    db.flush()
    certificates_rendered_total.labels("success").inc()
    return stored.storage_key, pdf


def certify(
    db: Session,
    door_id: UUID,
    engineer_id: UUID,
    signature: Optional[str] = None,
    renderer: Optional[CertificateRendererPort] = None,
    storage: Optional[ObjectStoragePort] = None,
) -> Certification:
    """Certify a door against its authoritative inspection.

    Without a signature the engineer's stored one is used, if storage is
    given. The certificate PDF is rendered when a renderer and storage are
    given.

    Raises:
        NotFoundError: Unknown door
        InvalidStateError: No completed inspection, already certified, or
            the door is otherwise not awaiting certification
    """
    door = lock_door(db, door_id)
    state = door_state(door)
    if state.certification == CertificationStatus.CERTIFIED:
        raise InvalidStateError(f"Door {door.serial_number} is already certified")
    inspection = get_authoritative_inspection(db, door.id)
    if inspection is None:
        raise InvalidStateError(f"Door {door.serial_number} has no completed inspection")
    new_state = transition(state, LifecycleEvent.CERTIFY)

    engineer = db.get(User, engineer_id)
    if not signature and engineer is not None and storage is not None:
        signature = load_signature(engineer, storage)

    certification = Certification(
        door_id=door.id,
        inspection_id=inspection.id,
        engineer_id=engineer_id,
        certified_at=utcnow(),
        signature=signature,
    )
    db.add(certification)
    db.flush()
    set_door_state(door, new_state)
    log_audit_event(
        db=db,
        action="DOOR_CERTIFIED",
        actor_id=engineer_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "inspection_id": str(inspection.id),
            "certification_id": str(certification.id),
            "signed": bool(signature),
            "from": str(state),
        },
    )
    db.flush()
    lifecycle_transitions_total.labels(LifecycleEvent.CERTIFY.value).inc()

    if renderer is not None and storage is not None:
        try:
            render_certificate(db, certification, renderer, storage)
        except DependencyFailure as e:
            logger.warning(
                f"Certificate PDF for door {door.serial_number} not stored, "
                f"will render on download: {e}",
                extra={"door_id": door.id, "certification_id": certification.id},
            )

    if engineer is not None:
        notify_certification_ready(
            db, door, inspection, engineer, certification.certificate_pdf_path
        )

    logger.info(
        f"Door {door.serial_number} certified ({state} -> {new_state})",
        extra={"door_id": door.id, "inspection_id": inspection.id,
               "certification_id": certification.id},
    )
    return certification


def reject_certification(db: Session, door_id: UUID, engineer_id: UUID, reason: str):
    """Reject a door's inspection and send it back for re-inspection.

    Raises:
        ValidationError: Blank reason
        InvalidStateError: The door is not awaiting certification
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required")

    door = lock_door(db, door_id)
    state = door_state(door)
    new_state = transition(state, LifecycleEvent.REJECT)
    inspection = get_authoritative_inspection(db, door.id)

    set_door_state(door, new_state)
    door.rejection_reason = reason
    log_audit_event(
        db=db,
        action="CERTIFICATION_REJECTED",
        actor_id=engineer_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "reason": reason,
            "inspection_id": str(inspection.id) if inspection else None,
            "from": str(state),
            "to": str(new_state),
        },
    )
    db.flush()

    engineer = db.get(User, engineer_id)
    if engineer is not None:
        notify_rejected(db, door, inspection, engineer, reason)

    lifecycle_transitions_total.labels(LifecycleEvent.REJECT.value).inc()
    logger.info(
        f"Door {door.serial_number} rejected ({state} -> {new_state}): {reason}",
        extra={"door_id": door.id},
    )
    return door


def delete_certification(
    db: Session,
    certification_id: UUID,
    actor_id: UUID,
    storage: Optional[ObjectStoragePort] = None,
) -> None:
    """Delete a certification and return the door's certification status to
    pending, whatever it was.

    The inspection status is never touched. A rejected door loses its
    rejection along with the reason. The stored PDF is removed best-effort.
    """
    certification = get_certification(db, certification_id)
    door = lock_door(db, certification.door_id)
    state = door_state(door)
    new_state = state
    if state.certification != CertificationStatus.PENDING:
        new_state = transition(state, LifecycleEvent.DELETE_CERTIFICATION)
    if state.certification == CertificationStatus.REJECTED:
        door.rejection_reason = None

    pdf_path = certification.certificate_pdf_path
    db.delete(certification)
    set_door_state(door, new_state)
    log_audit_event(
        db=db,
        action="CERTIFICATION_DELETED",
        actor_id=actor_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "certification_id": str(certification_id),
            "inspection_id": str(certification.inspection_id) if certification.inspection_id else None,
            "from": str(state),
            "to": str(new_state),
        },
    )
    db.flush()

    if storage is not None and pdf_path:
        try:
            storage.delete_file(pdf_path)
        except DependencyFailure as e:
            logger.warning(f"Could not delete certificate file {pdf_path}: {e}")

    if new_state != state:
        lifecycle_transitions_total.labels(LifecycleEvent.DELETE_CERTIFICATION.value).inc()
    logger.info(
        f"Certification {certification_id} deleted from door {door.serial_number} "
        f"({state} -> {new_state})",
        extra={"door_id": door.id, "certification_id": certification_id},
    )


def ensure_certificate_pdf(
    db: Session,
    door_id: UUID,
    renderer: CertificateRendererPort,
    storage: ObjectStoragePort,
) -> Tuple[str, bytes]:
    """Return (filename, pdf) for a door's latest certificate.

    Renders and stores the PDF when no stored file exists.

    Raises:
        NotFoundError: The door has no certification
        DependencyFailure: The PDF could not be loaded or rendered
    """
    certification = get_latest_certificate(db, door_id)
    if certification is None:
        raise NotFoundError(f"No certificate for door {door_id}")
    filename = certificate_filename(
        certification.door.serial_number, certification.certified_at
    )

    path = certification.certificate_pdf_path
    if path and storage.file_exists(path):
        return filename, storage.retrieve_file(path)

    logger.info(
        f"Rendering missing certificate for door {certification.door.serial_number}",
        extra={"door_id": door_id, "certification_id": certification.id},
    )
    _, pdf = render_certificate(db, certification, renderer, storage)
    return filename, pdf

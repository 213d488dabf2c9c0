"""Inspection lifecycle: start, complete and delete inspections.

Every operation locks the door row first, checks all preconditions, and only
then mutates. The door's status pair always moves through
``inspex.domain.lifecycle.transition``.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..audit.service import log_audit_event
from ..config import get_settings
from ..doors.service import door_state, lock_door, set_door_state
from ..domain.lifecycle import (
    CertificationStatus,
    InspectionRecordStatus,
    InspectionStatus,
    LifecycleEvent,
    transition,
)
from ..errors import ConflictError, InvalidStateError, NotFoundError
from ..models.base import utcnow
from ..models.certification import Certification
from ..models.inspection import Inspection
from ..models.user import User
from ..notifications.recipients import notify_inspection_completed
from ..observability.metrics import lifecycle_transitions_total
from .checklist import checks_summary, start_checklist

logger = logging.getLogger(__name__)


def get_inspection(db: Session, inspection_id: UUID) -> Inspection:
    inspection = db.get(Inspection, inspection_id)
    if inspection is None:
        raise NotFoundError(f"Inspection {inspection_id} not found")
    return inspection


def get_active_inspection(db: Session, door_id: UUID) -> Optional[Inspection]:
    """The door's in-progress inspection, if any."""
    return db.execute(
        select(Inspection).where(
            Inspection.door_id == door_id,
            Inspection.status == InspectionRecordStatus.IN_PROGRESS.value,
        )
    ).scalars().first()


def get_authoritative_inspection(db: Session, door_id: UUID) -> Optional[Inspection]:
    """Latest completed inspection of a door; superseded ones never count.

    Ties on ``inspection_date`` are broken by id.
    """
    return db.execute(
        select(Inspection)
        .where(
            Inspection.door_id == door_id,
            Inspection.status == InspectionRecordStatus.COMPLETED.value,
        )
        .order_by(Inspection.inspection_date.desc(), Inspection.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_inspections(
    db: Session,
    door_id: Optional[UUID] = None,
    status: Optional[str] = None,
    inspector_id: Optional[UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Inspection], int]:
    """List inspections newest first. Returns (inspections, total)."""
    stmt = select(Inspection).options(
        selectinload(Inspection.door), selectinload(Inspection.inspector)
    )
    if door_id:
        stmt = stmt.where(Inspection.door_id == door_id)
    if status:
        stmt = stmt.where(Inspection.status == status)
    if inspector_id:
        stmt = stmt.where(Inspection.inspector_id == inspector_id)

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar()
    inspections = db.execute(
        stmt.order_by(Inspection.inspection_date.desc(), Inspection.id.desc())
        .offset(offset)
        .limit(limit)
    ).scalars().all()
    return list(inspections), total


def _supersede(db: Session, door_id: UUID, statuses: List[str], keep_id: Optional[UUID] = None) -> List[UUID]:
    stmt = select(Inspection).where(
        Inspection.door_id == door_id,
        Inspection.status.in_(statuses),
    )
    if keep_id is not None:
        stmt = stmt.where(Inspection.id != keep_id)

    superseded = []
    for inspection in db.execute(stmt).scalars():
        inspection.status = InspectionRecordStatus.SUPERSEDED.value
        superseded.append(inspection.id)
    db.flush()
    return superseded


def start_inspection(db: Session, door_id: UUID, inspector_id: UUID) -> Inspection:
    """Open a new inspection for a door and copy the checklist into it.

    A door may have one in-progress inspection at a time. A rejected door is
    the exception: starting re-inspects it, superseding every earlier
    completed inspection and any stale in-progress one.

    Raises:
        NotFoundError: Unknown door
        InvalidStateError: An inspection is already in progress, or the
            door's state does not allow a new inspection
        ConflictError: A concurrent start won the race
    """
    door = lock_door(db, door_id)
    state = door_state(door)
    reinspection = state.certification == CertificationStatus.REJECTED

    active = get_active_inspection(db, door.id)
    if active is not None and not reinspection:
        raise InvalidStateError(
            f"Door {door.serial_number} already has an inspection in progress ({active.id})"
        )
    new_state = transition(state, LifecycleEvent.START_INSPECTION)

    superseded = []
    if reinspection:
        superseded = _supersede(
            db,
            door.id,
            [InspectionRecordStatus.COMPLETED.value, InspectionRecordStatus.IN_PROGRESS.value],
        )

    inspection = Inspection(
        door_id=door.id,
        inspector_id=inspector_id,
        inspection_date=utcnow(),
        status=InspectionRecordStatus.IN_PROGRESS.value,
    )
    try:
        with db.begin_nested():
            db.add(inspection)
    except IntegrityError:
        raise ConflictError(f"Door {door.serial_number} already has an inspection in progress")

    checks = start_checklist(db, inspection)
    set_door_state(door, new_state)

    if superseded:
        log_audit_event(
            db=db,
            action="INSPECTIONS_SUPERSEDED",
            actor_id=inspector_id,
            entity_type="door",
            entity_id=door.id,
            metadata={"inspection_ids": [str(i) for i in superseded]},
        )
    log_audit_event(
        db=db,
        action="INSPECTION_STARTED",
        actor_id=inspector_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "inspection_id": str(inspection.id),
            "reinspection": reinspection,
            "from": str(state),
            "to": str(new_state),
        },
    )
    db.flush()

    lifecycle_transitions_total.labels(LifecycleEvent.START_INSPECTION.value).inc()
    logger.info(
        f"Inspection started for door {door.serial_number} ({state} -> {new_state}), "
        f"{len(checks)} checks",
        extra={"door_id": door.id, "inspection_id": inspection.id},
    )
    return inspection


def complete_inspection(
    db: Session,
    inspection_id: UUID,
    actor_id: UUID,
    notes: Optional[str] = None,
) -> Inspection:
    """Complete an in-progress inspection.

    Completing a re-inspection of a rejected door puts the door back in the
    certification queue: the rejection reason is cleared and every other
    completed inspection is superseded.

    Raises:
        NotFoundError: Unknown inspection
        InvalidStateError: The inspection is not in progress, or the checklist
            is incomplete while REQUIRE_COMPLETE_CHECKLIST is enabled
    """
    inspection = get_inspection(db, inspection_id)
    door = lock_door(db, inspection.door_id)
    db.refresh(inspection)

    if inspection.status != InspectionRecordStatus.IN_PROGRESS.value:
        raise InvalidStateError(
            f"Inspection {inspection.id} is {inspection.status}, not in progress"
        )
    summary = checks_summary(db, inspection.id)
    if get_settings().REQUIRE_COMPLETE_CHECKLIST and not summary.is_complete:
        raise InvalidStateError(
            f"Checklist incomplete: {summary.completed} of {summary.total} points checked"
        )
    state = door_state(door)
    new_state = transition(state, LifecycleEvent.COMPLETE_INSPECTION)
    was_rejected = state.certification == CertificationStatus.REJECTED

    inspection.status = InspectionRecordStatus.COMPLETED.value
    inspection.completed_date = utcnow()
    if notes is not None:
        inspection.notes = notes
    set_door_state(door, new_state)

    superseded = []
    if was_rejected:
        door.rejection_reason = None
        superseded = _supersede(
            db, door.id, [InspectionRecordStatus.COMPLETED.value], keep_id=inspection.id
        )

    log_audit_event(
        db=db,
        action="INSPECTION_COMPLETED",
        actor_id=actor_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "inspection_id": str(inspection.id),
            "checks_total": summary.total,
            "checks_completed": summary.completed,
            "reinspection": was_rejected,
            "superseded": [str(i) for i in superseded],
            "from": str(state),
            "to": str(new_state),
        },
    )
    db.flush()

    actor = db.get(User, actor_id)
    if actor is not None:
        notify_inspection_completed(db, door, actor)

    lifecycle_transitions_total.labels(LifecycleEvent.COMPLETE_INSPECTION.value).inc()
    logger.info(
        f"Inspection completed for door {door.serial_number} ({state} -> {new_state}), "
        f"{summary.completed}/{summary.total} checks",
        extra={"door_id": door.id, "inspection_id": inspection.id},
    )
    return inspection


def delete_inspection(db: Session, inspection_id: UUID, actor_id: UUID) -> None:
    """Delete an inspection and its checks.

    Whether this is the door's only inspection is decided under the door
    lock, before anything is deleted. Deleting the only inspection returns
    the door to inspection pending; any other deletion leaves the door's
    state alone. A door left in progress without an open inspection can be
    started again.
    """
    inspection = get_inspection(db, inspection_id)
    door = lock_door(db, inspection.door_id)
    db.refresh(inspection)

    inspection_count = db.execute(
        select(func.count(Inspection.id)).where(Inspection.door_id == door.id)
    ).scalar()
    only = inspection_count == 1

    state = door_state(door)
    new_state = state
    if only and state.inspection != InspectionStatus.PENDING:
        new_state = transition(state, LifecycleEvent.DELETE_ONLY_INSPECTION)

    db.execute(
        update(Certification)
        .where(Certification.inspection_id == inspection.id)
        .values(inspection_id=None)
        .execution_options(synchronize_session="fetch")
    )
    db.delete(inspection)
    set_door_state(door, new_state)

    log_audit_event(
        db=db,
        action="INSPECTION_DELETED",
        actor_id=actor_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "inspection_id": str(inspection_id),
            "inspection_status": inspection.status,
            "only_inspection": only,
            "from": str(state),
            "to": str(new_state),
        },
    )
    db.flush()

    if new_state != state:
        lifecycle_transitions_total.labels(LifecycleEvent.DELETE_ONLY_INSPECTION.value).inc()
    logger.info(
        f"Inspection {inspection_id} deleted from door {door.serial_number} ({state} -> {new_state})",
        extra={"door_id": door.id, "inspection_id": inspection_id},
    )

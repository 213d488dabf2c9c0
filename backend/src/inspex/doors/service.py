"""Door registration and queries.

A new door starts at pending/pending. Its serial number is derived from the
door number and size; its drawing number from the atomic serial counter.
"""

import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..audit.service import log_audit_event
from ..config import get_settings
from ..domain.lifecycle import CertificationStatus, DoorState, InspectionStatus
from ..domain.numbering import (
    describe_door,
    door_type_for_pressure,
    drawing_number,
    serial_number,
    size_code,
)
from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..models.audit_log import AuditLog
from ..models.door import Door, PurchaseOrder
from ..models.inspection import Inspection
from ..observability.metrics import doors_created_total
from .serials import allocate_serial, get_counter

logger = logging.getLogger(__name__)

MUTABLE_DOOR_FIELDS = ("job_number", "description")


def get_or_create_purchase_order(db: Session, po_number: str) -> PurchaseOrder:
    po_number = (po_number or "").strip()
    if not po_number:
        raise ValidationError("PO number is required")

    po = db.execute(
        select(PurchaseOrder).where(PurchaseOrder.po_number == po_number)
    ).scalar_one_or_none()
    if po is not None:
        return po

    try:
        with db.begin_nested():
            po = PurchaseOrder(po_number=po_number)
            db.add(po)
    except IntegrityError:
        po = db.execute(
            select(PurchaseOrder).where(PurchaseOrder.po_number == po_number)
        ).scalar_one()
    return po


def create_door(
    db: Session,
    po_number: str,
    door_number: int,
    size: str,
    pressure: int,
    actor_id: Optional[UUID] = None,
    job_number: Optional[str] = None,
) -> Door:
    """Register a new door and allocate its identifiers.

    Raises:
        ValidationError: Unknown size or pressure, missing PO number
        ConflictError: A door with the same serial number already exists
    """
    size = str(size).strip()
    size_codes = get_settings().SIZE_CODES
    size_code(size, size_codes)
    door_type = door_type_for_pressure(pressure)
    if door_number is None or door_number < 1:
        raise ValidationError("Door number must be at least 1")

    if not (po_number or "").strip():
        raise ValidationError("PO number is required")

    serial = serial_number(door_number, size, prefix=get_counter(db).serial_prefix, size_codes=size_codes)
    existing = db.execute(select(Door.id).where(Door.serial_number == serial)).first()
    if existing:
        raise ConflictError(f"Door with serial {serial} already exists")

    # Preconditions hold; from here on the transaction mutates state
    po = get_or_create_purchase_order(db, po_number)
    allocation = allocate_serial(db)
    drawing = drawing_number(allocation.number)

    door = Door(
        po_id=po.id,
        door_number=door_number,
        serial_number=serial,
        drawing_number=drawing,
        job_number=(job_number or "").strip() or None,
        description=describe_door(size, pressure),
        pressure=int(pressure),
        door_type=door_type,
        size=size,
        inspection_status=InspectionStatus.PENDING.value,
        certification_status=CertificationStatus.PENDING.value,
        created_by=actor_id,
    )
    try:
        with db.begin_nested():
            db.add(door)
    except IntegrityError:
        raise ConflictError(f"Door with serial {serial} already exists")

    log_audit_event(
        db=db,
        action="DOOR_CREATED",
        actor_id=actor_id,
        entity_type="door",
        entity_id=door.id,
        metadata={
            "po_number": po.po_number,
            "serial_number": serial,
            "drawing_number": drawing,
        },
    )
    db.flush()

    doors_created_total.labels(size, str(pressure)).inc()
    logger.info(
        f"Door created: serial={serial}, drawing={drawing}, po={po.po_number}",
        extra={"door_id": door.id},
    )
    return door


def update_door(
    db: Session,
    door_id: UUID,
    actor_id: UUID,
    updates: Dict[str, Optional[str]],
) -> Door:
    """Edit a door's job number or description.

    Identifiers, PO, size and pressure are fixed once the door is
    registered; they feed the serial and drawing numbers.

    Raises:
        NotFoundError: Unknown door
        ValidationError: An immutable field, or a blank description
    """
    fixed = sorted(set(updates) - set(MUTABLE_DOOR_FIELDS))
    if fixed:
        raise ValidationError(f"Door fields cannot be changed: {', '.join(fixed)}")
    if "description" in updates and not (updates["description"] or "").strip():
        raise ValidationError("Description cannot be blank")

    door = lock_door(db, door_id)
    changes = {}
    for field, value in updates.items():
        value = (value or "").strip() or None
        if value != getattr(door, field):
            changes[field] = {"old": getattr(door, field), "new": value}
            setattr(door, field, value)

    if changes:
        log_audit_event(
            db=db,
            action="DOOR_UPDATED",
            actor_id=actor_id,
            entity_type="door",
            entity_id=door.id,
            metadata=changes,
        )
        db.flush()
        logger.info(
            f"Door {door.serial_number} updated: {', '.join(changes)}",
            extra={"door_id": door.id},
        )
    return door


def get_door(db: Session, door_id: UUID) -> Door:
    door = db.get(Door, door_id)
    if door is None:
        raise NotFoundError(f"Door {door_id} not found")
    return door


def lock_door(db: Session, door_id: UUID) -> Door:
    """Load a door with a row lock held until the transaction ends.

    All lifecycle mutations of one door go through this lock. SQLite has no
    row locks and relies on its database-level write lock instead.
    """
    door = db.execute(
        select(Door).where(Door.id == door_id).with_for_update()
    ).scalar_one_or_none()
    if door is None:
        raise NotFoundError(f"Door {door_id} not found")
    return door


def list_doors(
    db: Session,
    inspection_status: Optional[str] = None,
    certification_status: Optional[str] = None,
    po_number: Optional[str] = None,
    q: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Door], int]:
    """List doors newest first with optional filters. Returns (doors, total)."""
    stmt = select(Door).options(selectinload(Door.purchase_order))
    if inspection_status:
        stmt = stmt.where(Door.inspection_status == inspection_status)
    if certification_status:
        stmt = stmt.where(Door.certification_status == certification_status)
    if po_number:
        stmt = stmt.join(Door.purchase_order).where(PurchaseOrder.po_number == po_number)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(
                Door.serial_number.ilike(pattern),
                Door.drawing_number.ilike(pattern),
                Door.job_number.ilike(pattern),
            )
        )

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar()
    doors = db.execute(
        stmt.order_by(Door.created_at.desc(), Door.drawing_number.desc()).offset(offset).limit(limit)
    ).scalars().all()
    return list(doors), total


def list_pending_inspection(db: Session) -> List[Door]:
    """Doors waiting for an inspector, oldest first. Includes rejected doors."""
    stmt = (
        select(Door)
        .options(selectinload(Door.purchase_order))
        .where(Door.inspection_status == InspectionStatus.PENDING.value)
        .order_by(Door.created_at.asc())
    )
    return list(db.execute(stmt).scalars())


def list_pending_certification(db: Session) -> List[Door]:
    """Doors with a completed inspection awaiting an engineer, oldest first."""
    stmt = (
        select(Door)
        .options(selectinload(Door.purchase_order))
        .where(
            Door.inspection_status == InspectionStatus.COMPLETED.value,
            Door.certification_status.in_([
                CertificationStatus.PENDING.value,
                CertificationStatus.UNDER_REVIEW.value,
            ]),
        )
        .order_by(Door.created_at.asc())
    )
    return list(db.execute(stmt).scalars())


def delete_door(db: Session, door_id: UUID, actor_id: UUID) -> None:
    """Delete a door that has never been inspected.

    Raises:
        InvalidStateError: If the door has inspections (history must be kept)
    """
    door = lock_door(db, door_id)
    inspection_count = db.execute(
        select(func.count(Inspection.id)).where(Inspection.door_id == door.id)
    ).scalar()
    if inspection_count:
        raise InvalidStateError(
            f"Door {door.serial_number} has {inspection_count} inspection(s) and cannot be deleted"
        )

    log_audit_event(
        db=db,
        action="DOOR_DELETED",
        actor_id=actor_id,
        entity_type="door",
        entity_id=door.id,
        metadata={"serial_number": door.serial_number, "drawing_number": door.drawing_number},
    )
    db.delete(door)
    db.flush()
    logger.info(f"Door deleted: serial={door.serial_number}", extra={"door_id": door_id})


def door_history(db: Session, door_id: UUID) -> List[AuditLog]:
    """Lifecycle audit trail of a door, oldest first.

    Lifecycle entries are keyed by door so the trail survives inspection
    deletion; the inspection involved is recorded in the metadata.
    """
    door = get_door(db, door_id)
    stmt = (
        select(AuditLog)
        .where(AuditLog.entity_type == "door", AuditLog.entity_id == door.id)
        .order_by(AuditLog.created_at.asc())
    )
    return list(db.execute(stmt).scalars())


def door_state(door: Door) -> DoorState:
    return DoorState.of(door.inspection_status, door.certification_status)


def set_door_state(door: Door, state: DoorState) -> None:
    """Write a state computed by ``transition()`` back onto the door."""
    door.inspection_status = state.inspection.value
    door.certification_status = state.certification.value

"""Inspection checklist: per-inspection copies of the active inspection points.

Checks are editable only while their inspection is in progress. Completion
is not gated on the checklist unless ``REQUIRE_COMPLETE_CHECKLIST`` is set.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..config import get_settings
from ..domain.lifecycle import InspectionRecordStatus
from ..domain.storage.ports import ObjectStoragePort
from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.inspection import Inspection, InspectionCheck, InspectionPoint

logger = logging.getLogger(__name__)

PHOTO_PREFIX = "inspection-photos"


@dataclass
class ChecklistSummary:
    total: int
    completed: int

    @property
    def is_complete(self) -> bool:
        return self.completed == self.total


def start_checklist(db: Session, inspection: Inspection) -> List[InspectionCheck]:
    """Create one unchecked check per active inspection point."""
    points = db.execute(
        select(InspectionPoint)
        .where(InspectionPoint.is_active.is_(True))
        .order_by(InspectionPoint.order_index, InspectionPoint.name)
    ).scalars().all()

    checks = []
    for point in points:
        check = InspectionCheck(
            inspection_id=inspection.id,
            inspection_point_id=point.id,
            is_checked=False,
        )
        db.add(check)
        checks.append(check)
    db.flush()
    return checks


def list_checks(db: Session, inspection_id: UUID) -> List[InspectionCheck]:
    stmt = (
        select(InspectionCheck)
        .join(InspectionCheck.point)
        .options(joinedload(InspectionCheck.point))
        .where(InspectionCheck.inspection_id == inspection_id)
        .order_by(InspectionPoint.order_index, InspectionPoint.name)
    )
    return list(db.execute(stmt).scalars())


def checks_summary(db: Session, inspection_id: UUID) -> ChecklistSummary:
    total, completed = db.execute(
        select(
            func.count(InspectionCheck.id),
            func.count(InspectionCheck.id).filter(InspectionCheck.is_checked.is_(True)),
        ).where(InspectionCheck.inspection_id == inspection_id)
    ).one()
    return ChecklistSummary(total=total or 0, completed=completed or 0)


def _get_editable_check(db: Session, check_id: UUID) -> InspectionCheck:
    check = db.get(InspectionCheck, check_id)
    if check is None:
        raise NotFoundError(f"Inspection check {check_id} not found")
    if check.inspection.status != InspectionRecordStatus.IN_PROGRESS.value:
        raise InvalidStateError(
            f"Inspection {check.inspection_id} is {check.inspection.status}; "
            "checks can only be changed while it is in progress"
        )
    return check


def update_check(
    db: Session,
    check_id: UUID,
    is_checked: Optional[bool] = None,
    notes: Optional[str] = None,
    photo_path: Optional[str] = None,
) -> InspectionCheck:
    """Apply a partial update to one check.

    Checking an item stamps ``checked_at``; unchecking clears it.

    Raises:
        NotFoundError: Unknown check
        InvalidStateError: The inspection is no longer in progress
    """
    check = _get_editable_check(db, check_id)

    if is_checked is not None and is_checked != check.is_checked:
        check.is_checked = is_checked
        check.checked_at = utcnow() if is_checked else None
    if notes is not None:
        check.notes = notes
    if photo_path is not None:
        check.photo_path = photo_path

    db.flush()
    return check


def attach_photo(
    db: Session,
    check_id: UUID,
    content: bytes,
    filename: str,
    content_type: Optional[str],
    storage: ObjectStoragePort,
) -> InspectionCheck:
    """Store a photo for a check and record its storage key.

    Raises:
        ValidationError: Not an image, empty, or larger than MAX_PHOTO_SIZE
        StorageError: Object storage rejected the upload
    """
    check = _get_editable_check(db, check_id)

    if not content_type or not content_type.startswith("image/"):
        raise ValidationError(f"Unsupported photo type: {content_type or 'unknown'}")
    if not content:
        raise ValidationError("Photo is empty")
    max_size = get_settings().MAX_PHOTO_SIZE
    if len(content) > max_size:
        raise ValidationError(
            f"Photo is {len(content)} bytes; maximum is {max_size} bytes"
        )

    stored = storage.store_file(
        file=io.BytesIO(content),
        prefix=PHOTO_PREFIX,
        filename=filename or "photo",
        mime_type=content_type,
    )
    check.photo_path = stored.storage_key
    db.flush()

    logger.info(
        f"Photo attached to check {check.id}: {stored.storage_key}",
        extra={"inspection_id": check.inspection_id},
    )
    return check


def summaries_for(db: Session, inspection_ids: List[UUID]) -> dict:
    """Checklist summaries for several inspections in one query."""
    if not inspection_ids:
        return {}
    rows = db.execute(
        select(
            InspectionCheck.inspection_id,
            func.count(InspectionCheck.id),
            func.count(InspectionCheck.id).filter(InspectionCheck.is_checked.is_(True)),
        )
        .where(InspectionCheck.inspection_id.in_(inspection_ids))
        .group_by(InspectionCheck.inspection_id)
    ).all()
    summaries = {i: ChecklistSummary(total=0, completed=0) for i in inspection_ids}
    for inspection_id, total, completed in rows:
        summaries[inspection_id] = ChecklistSummary(total=total, completed=completed or 0)
    return summaries

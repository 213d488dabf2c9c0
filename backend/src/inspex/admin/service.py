"""Dashboard statistics for administrators."""

from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..domain.lifecycle import CertificationStatus, InspectionStatus
from ..models.door import Door
from ..models.inspection import Inspection
from ..models.user import User

RECENT_INSPECTIONS = 10


def _count(db: Session, stmt) -> int:
    return db.execute(stmt).scalar() or 0


def dashboard_stats(db: Session) -> Dict[str, int]:
    door_count = select(func.count(Door.id))
    user_count = select(func.count(User.id))
    return {
        "total_doors": _count(db, door_count),
        "pending_inspections": _count(
            db, door_count.where(Door.inspection_status == InspectionStatus.PENDING.value)
        ),
        "in_progress_inspections": _count(
            db, door_count.where(Door.inspection_status == InspectionStatus.IN_PROGRESS.value)
        ),
        "completed_inspections": _count(
            db, door_count.where(Door.inspection_status == InspectionStatus.COMPLETED.value)
        ),
        "pending_certifications": _count(
            db,
            door_count.where(
                Door.inspection_status == InspectionStatus.COMPLETED.value,
                Door.certification_status.in_([
                    CertificationStatus.PENDING.value,
                    CertificationStatus.UNDER_REVIEW.value,
                ]),
            ),
        ),
        "certified_doors": _count(
            db, door_count.where(Door.certification_status == CertificationStatus.CERTIFIED.value)
        ),
        "rejected_doors": _count(
            db, door_count.where(Door.certification_status == CertificationStatus.REJECTED.value)
        ),
        "total_users": _count(db, user_count),
        "total_inspectors": _count(db, user_count.where(User.role == "inspector")),
        "total_engineers": _count(db, user_count.where(User.role == "engineer")),
    }


def recent_inspections(db: Session, limit: int = RECENT_INSPECTIONS) -> List[Inspection]:
    stmt = (
        select(Inspection)
        .options(selectinload(Inspection.door), selectinload(Inspection.inspector))
        .order_by(Inspection.inspection_date.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())

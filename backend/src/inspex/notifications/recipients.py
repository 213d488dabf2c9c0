"""Build lifecycle notifications and resolve their recipients.

Recipients:
    inspection_completed -> every active engineer
    certification_ready  -> inspector of the certified inspection
    rejected             -> inspector of the rejected inspection, plus admins
"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth.roles import UserRole
from ..domain.notifications.ports import DoorSummary, LifecycleNotification, NotificationKind
from ..models.door import Door
from ..models.inspection import Inspection
from ..models.user import User
from . import dispatcher


def door_summary(door: Door) -> DoorSummary:
    return DoorSummary(
        door_id=str(door.id),
        serial_number=door.serial_number,
        drawing_number=door.drawing_number,
        po_number=door.po_number,
        description=door.description,
        size=door.size,
        pressure=door.pressure,
        job_number=door.job_number,
    )


def active_emails(db: Session, roles: Iterable[UserRole]) -> List[str]:
    """Email addresses of active users holding any of ``roles``."""
    stmt = (
        select(User.email)
        .where(User.role.in_([r.value for r in roles]), User.status == "ACTIVE")
        .order_by(User.email)
    )
    return list(db.execute(stmt).scalars())


def _inspector_email(inspection: Optional[Inspection]) -> List[str]:
    if inspection is None or inspection.inspector is None:
        return []
    if not inspection.inspector.is_active:
        return []
    return [inspection.inspector.email]


def _dedupe(emails: Iterable[str]) -> List[str]:
    seen = []
    for email in emails:
        if email not in seen:
            seen.append(email)
    return seen


def notify_inspection_completed(db: Session, door: Door, actor: User) -> LifecycleNotification:
    notification = LifecycleNotification(
        kind=NotificationKind.INSPECTION_COMPLETED,
        door=door_summary(door),
        actor_name=actor.name,
        recipients=active_emails(db, [UserRole.ENGINEER]),
    )
    dispatcher.record(db, notification)
    return notification


def notify_certification_ready(
    db: Session,
    door: Door,
    inspection: Optional[Inspection],
    engineer: User,
    certificate_path: Optional[str],
) -> LifecycleNotification:
    notification = LifecycleNotification(
        kind=NotificationKind.CERTIFICATION_READY,
        door=door_summary(door),
        actor_name=engineer.name,
        recipients=_inspector_email(inspection),
        certificate_path=certificate_path,
    )
    dispatcher.record(db, notification)
    return notification


def notify_rejected(
    db: Session,
    door: Door,
    inspection: Optional[Inspection],
    engineer: User,
    reason: str,
) -> LifecycleNotification:
    recipients = _dedupe(_inspector_email(inspection) + active_emails(db, [UserRole.ADMIN]))
    notification = LifecycleNotification(
        kind=NotificationKind.REJECTED,
        door=door_summary(door),
        actor_name=engineer.name,
        recipients=recipients,
        reason=reason,
    )
    dispatcher.record(db, notification)
    return notification

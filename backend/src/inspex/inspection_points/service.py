"""Inspection point (checklist template) management.

Changes apply to inspections started afterwards; existing checks keep
pointing at their original point.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..errors import NotFoundError, ValidationError
from ..models.inspection import InspectionCheck, InspectionPoint

logger = logging.getLogger(__name__)


def list_points(db: Session, include_inactive: bool = True) -> List[InspectionPoint]:
    stmt = select(InspectionPoint).order_by(InspectionPoint.order_index, InspectionPoint.name)
    if not include_inactive:
        stmt = stmt.where(InspectionPoint.is_active.is_(True))
    return list(db.execute(stmt).scalars())


def get_point(db: Session, point_id: UUID) -> InspectionPoint:
    point = db.get(InspectionPoint, point_id)
    if point is None:
        raise NotFoundError(f"Inspection point {point_id} not found")
    return point


def create_point(
    db: Session,
    actor_id: UUID,
    name: str,
    description: Optional[str] = None,
    order_index: Optional[int] = None,
) -> InspectionPoint:
    """Add a point. Without ``order_index`` it is appended to the end."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Inspection point name is required")
    if order_index is None:
        order_index = (db.execute(select(func.max(InspectionPoint.order_index))).scalar() or 0) + 1

    point = InspectionPoint(name=name, description=description, order_index=order_index, is_active=True)
    db.add(point)
    db.flush()
    log_audit_event(
        db=db,
        action="INSPECTION_POINT_CREATED",
        actor_id=actor_id,
        entity_type="inspection_point",
        entity_id=point.id,
        metadata={"name": name, "order_index": order_index},
    )
    return point


def update_point(db: Session, point_id: UUID, actor_id: UUID, changes: Dict) -> InspectionPoint:
    point = get_point(db, point_id)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Inspection point name is required")
        changes["name"] = name

    for field, value in changes.items():
        if value is None and field != "description":
            continue
        setattr(point, field, value)
    db.flush()

    log_audit_event(
        db=db,
        action="INSPECTION_POINT_UPDATED",
        actor_id=actor_id,
        entity_type="inspection_point",
        entity_id=point.id,
        metadata={"changes": {k: v for k, v in changes.items()}},
    )
    return point


def delete_point(db: Session, point_id: UUID, actor_id: UUID) -> bool:
    """Delete a point, or deactivate it if inspections already used it.

    Returns True when the row was deleted, False when it was deactivated.
    """
    point = get_point(db, point_id)
    used = db.execute(
        select(func.count(InspectionCheck.id)).where(InspectionCheck.inspection_point_id == point.id)
    ).scalar()

    if used:
        point.is_active = False
    else:
        db.delete(point)
    log_audit_event(
        db=db,
        action="INSPECTION_POINT_DELETED",
        actor_id=actor_id,
        entity_type="inspection_point",
        entity_id=point_id,
        metadata={"name": point.name, "deactivated_only": bool(used)},
    )
    db.flush()
    return not used


def reorder_points(db: Session, actor_id: UUID, order: Dict[UUID, int]) -> List[InspectionPoint]:
    """Apply new order indexes. Every id must exist."""
    points = {
        p.id: p
        for p in db.execute(
            select(InspectionPoint).where(InspectionPoint.id.in_(list(order)))
        ).scalars()
    }
    missing = [str(i) for i in order if i not in points]
    if missing:
        raise NotFoundError(f"Inspection points not found: {', '.join(missing)}")

    for point_id, order_index in order.items():
        points[point_id].order_index = order_index
    db.flush()

    log_audit_event(
        db=db,
        action="INSPECTION_POINTS_REORDERED",
        actor_id=actor_id,
        entity_type="inspection_point",
        metadata={"order": {str(k): v for k, v in order.items()}},
    )
    return list_points(db)

"""Inspection point administration endpoints (ADMIN only, reads for all)"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_roles
from ..auth.roles import ADMIN_ONLY
from ..database import get_db
from ..models.user import User
from . import service
from .schemas import (
    InspectionPointCreate,
    InspectionPointResponse,
    InspectionPointUpdate,
    ReorderRequest,
)

router = APIRouter(prefix="/admin/inspection-points", tags=["admin"])


@router.get("", response_model=List[InspectionPointResponse])
def list_points(
    include_inactive: bool = Query(True),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return service.list_points(db, include_inactive=include_inactive)


@router.post("", response_model=InspectionPointResponse, status_code=status.HTTP_201_CREATED)
def create_point(
    data: InspectionPointCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    point = service.create_point(
        db, actor_id=current_user.id, name=data.name,
        description=data.description, order_index=data.order_index,
    )
    db.commit()
    db.refresh(point)
    return point


# Declared before /{point_id} so "reorder" is not parsed as an id
@router.put("/reorder", response_model=List[InspectionPointResponse])
def reorder_points(
    data: ReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    points = service.reorder_points(
        db, actor_id=current_user.id, order={p.id: p.order_index for p in data.points}
    )
    db.commit()
    return points


@router.put("/{point_id}", response_model=InspectionPointResponse)
def update_point(
    point_id: UUID,
    data: InspectionPointUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    point = service.update_point(
        db, point_id, actor_id=current_user.id, changes=data.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(point)
    return point


@router.delete("/{point_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_point(
    point_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Delete a point; points already used by inspections are deactivated."""
    service.delete_point(db, point_id, actor_id=current_user.id)
    db.commit()

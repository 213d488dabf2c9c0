"""Admin dashboard and serial number configuration endpoints (ADMIN only)"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import require_roles
from ..auth.roles import ADMIN_ONLY
from ..database import get_db
from ..doors.serials import get_counter, update_serial_config
from ..models.user import User
from ..inspections.checklist import summaries_for
from ..inspections.schemas import InspectionResponse
from . import service
from .schemas import DashboardResponse, DashboardStats, SerialConfigResponse, SerialConfigUpdate

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    recent = service.recent_inspections(db)
    summaries = summaries_for(db, [i.id for i in recent])
    return DashboardResponse(
        stats=DashboardStats(**service.dashboard_stats(db)),
        recent_inspections=[InspectionResponse.from_inspection(i, summaries.get(i.id)) for i in recent],
    )


@router.get("/serial-config", response_model=SerialConfigResponse)
def get_serial_config(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    counter = get_counter(db)
    db.commit()
    return SerialConfigResponse.from_counter(counter)


@router.put("/serial-config", response_model=SerialConfigResponse)
def put_serial_config(
    data: SerialConfigUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN_ONLY)),
):
    """Change the serial prefix or numbering base.

    Raises:
        422: Lowering the base after doors were issued
    """
    counter = update_serial_config(
        db,
        actor_id=current_user.id,
        starting_serial=data.starting_serial,
        serial_prefix=data.serial_prefix,
    )
    db.commit()
    db.refresh(counter)
    return SerialConfigResponse.from_counter(counter)

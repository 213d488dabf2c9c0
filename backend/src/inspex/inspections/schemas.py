"""Pydantic schemas for inspections and checklist items"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CheckUpdate(BaseModel):
    """Partial update of one checklist item. Omitted fields are unchanged."""
    is_checked: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=2000)


class CompleteInspectionRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=5000)


class CheckResponse(BaseModel):
    id: UUID
    inspection_id: UUID
    inspection_point_id: UUID
    point_name: str
    point_description: Optional[str] = None
    order_index: int
    is_checked: bool
    notes: Optional[str] = None
    photo_path: Optional[str] = None
    checked_at: Optional[datetime] = None

    @classmethod
    def from_check(cls, check) -> "CheckResponse":
        return cls(
            id=check.id,
            inspection_id=check.inspection_id,
            inspection_point_id=check.inspection_point_id,
            point_name=check.point.name,
            point_description=check.point.description,
            order_index=check.point.order_index,
            is_checked=check.is_checked,
            notes=check.notes,
            photo_path=check.photo_path,
            checked_at=check.checked_at,
        )


class InspectionResponse(BaseModel):
    """Inspection with checklist progress counts."""
    id: UUID
    door_id: UUID
    serial_number: Optional[str] = None
    inspector_id: Optional[UUID] = None
    inspector_name: Optional[str] = None
    inspection_date: datetime
    completed_date: Optional[datetime] = None
    status: str
    notes: Optional[str] = None
    checks_total: int = 0
    checks_completed: int = 0

    @classmethod
    def from_inspection(cls, inspection, summary=None) -> "InspectionResponse":
        return cls(
            id=inspection.id,
            door_id=inspection.door_id,
            serial_number=inspection.door.serial_number if inspection.door else None,
            inspector_id=inspection.inspector_id,
            inspector_name=inspection.inspector.name if inspection.inspector else None,
            inspection_date=inspection.inspection_date,
            completed_date=inspection.completed_date,
            status=inspection.status,
            notes=inspection.notes,
            checks_total=summary.total if summary else 0,
            checks_completed=summary.completed if summary else 0,
        )


class InspectionDetailResponse(InspectionResponse):
    checks: list[CheckResponse] = []


class InspectionListResponse(BaseModel):
    """Schema for paginated inspection list response"""
    items: list[InspectionResponse]
    total: int
    page: int
    per_page: int
    total_pages: int

"""Pydantic schemas for door registration and queries"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DoorCreate(BaseModel):
    """Schema for registering a new door.

    Size is given in metres ("1.5", "1.8", "2.0") or millimetres ("1500", ...).
    Pressure is 140 or 400 kPa.
    """
    po_number: str = Field(..., min_length=1, max_length=100)
    door_number: int = Field(..., ge=1)
    size: str = Field(..., min_length=1, max_length=10)
    pressure: int
    job_number: Optional[str] = Field(None, max_length=100)


class DoorUpdate(BaseModel):
    """Schema for editing a door.

    Only job_number and description may change. Other fields are accepted
    here so the service can name them in its error.
    """
    job_number: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    class Config:
        extra = "allow"


class DoorResponse(BaseModel):
    id: UUID
    po_number: Optional[str] = None
    door_number: int
    serial_number: str
    drawing_number: str
    job_number: Optional[str] = None
    description: str
    pressure: int
    door_type: str
    size: str
    inspection_status: str
    certification_status: str
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DoorListResponse(BaseModel):
    """Schema for paginated door list response"""
    items: list[DoorResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class AuditEntryResponse(BaseModel):
    """One entry of a door's lifecycle history."""
    id: UUID
    action: str
    actor_id: Optional[UUID] = None
    metadata_json: Optional[Dict[str, Any]] = Field(None, serialization_alias="metadata")
    created_at: datetime

    class Config:
        from_attributes = True

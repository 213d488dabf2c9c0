"""Pydantic schemas for admin endpoints"""

from typing import Optional

from pydantic import BaseModel, Field

from ..domain.numbering import drawing_number, next_serial
from ..inspections.schemas import InspectionResponse


class DashboardStats(BaseModel):
    total_doors: int
    pending_inspections: int
    in_progress_inspections: int
    completed_inspections: int
    pending_certifications: int
    certified_doors: int
    rejected_doors: int
    total_users: int
    total_inspectors: int
    total_engineers: int


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_inspections: list[InspectionResponse]


class SerialConfigResponse(BaseModel):
    """Numbering configuration. ``next_drawing_number`` is what the next door gets."""
    serial_prefix: str
    starting_serial: int
    issued_count: int
    next_drawing_number: str

    @classmethod
    def from_counter(cls, counter) -> "SerialConfigResponse":
        return cls(
            serial_prefix=counter.serial_prefix,
            starting_serial=counter.starting_serial,
            issued_count=counter.issued_count,
            next_drawing_number=drawing_number(
                next_serial(counter.starting_serial, counter.issued_count + 1)
            ),
        )


class SerialConfigUpdate(BaseModel):
    serial_prefix: Optional[str] = Field(None, min_length=1, max_length=20)
    starting_serial: Optional[int] = Field(None, ge=0)

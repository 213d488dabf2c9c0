"""Pydantic schemas for certification endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CertifyRequest(BaseModel):
    """Engineer sign-off. ``signature`` is an opaque image data URL or token."""
    signature: Optional[str] = None


class RejectRequest(BaseModel):
    reason: str = Field(..., max_length=2000)


class CertificationResponse(BaseModel):
    id: UUID
    door_id: UUID
    serial_number: Optional[str] = None
    inspection_id: Optional[UUID] = None
    engineer_id: Optional[UUID] = None
    engineer_name: Optional[str] = None
    certified_at: datetime
    has_certificate_pdf: bool = False
    signed: bool = False

    @classmethod
    def from_certification(cls, certification) -> "CertificationResponse":
        return cls(
            id=certification.id,
            door_id=certification.door_id,
            serial_number=certification.door.serial_number if certification.door else None,
            inspection_id=certification.inspection_id,
            engineer_id=certification.engineer_id,
            engineer_name=certification.engineer.name if certification.engineer else None,
            certified_at=certification.certified_at,
            has_certificate_pdf=bool(certification.certificate_pdf_path),
            signed=bool(certification.signature),
        )


class CertificationListResponse(BaseModel):
    items: list[CertificationResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class CompletedCertificationResponse(CertificationResponse):
    """A certificate offered for download, with the door details a client
    needs to find it."""
    drawing_number: Optional[str] = None
    description: Optional[str] = None
    po_number: Optional[str] = None

    @classmethod
    def from_certification(cls, certification) -> "CompletedCertificationResponse":
        door = certification.door
        return cls(
            **CertificationResponse.from_certification(certification).model_dump(),
            drawing_number=door.drawing_number if door else None,
            description=door.description if door else None,
            po_number=door.po_number if door else None,
        )

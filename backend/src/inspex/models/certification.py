"""Certification SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, ForeignKey, DateTime, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Certification(Base):
    """Engineer sign-off for a door's authoritative inspection.

    A certified door has exactly one certification. Rejections never create
    a row; they only change the door's state.
    """
    __tablename__ = "certification"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    door_id = Column(Uuid, ForeignKey("door.id", ondelete="CASCADE"), nullable=False)
    inspection_id = Column(Uuid, ForeignKey("inspection.id", ondelete="SET NULL"), nullable=True)
    engineer_id = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    certified_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    certificate_pdf_path = Column(Text, nullable=True)
    signature = Column(Text, nullable=True)

    # Relationships
    door = relationship("Door", back_populates="certifications")
    inspection = relationship("Inspection")
    engineer = relationship("User")

    __table_args__ = (
        Index("ix_certification_door_id", "door_id"),
    )

    def __repr__(self):
        return f"<Certification(id={self.id}, door_id={self.door_id})>"

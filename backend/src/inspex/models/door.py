"""Door and PurchaseOrder SQLAlchemy models"""

import uuid

from sqlalchemy import (
    Column, Text, Integer, ForeignKey, CheckConstraint, DateTime, Uuid, Index
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class PurchaseOrder(Base):
    """Customer purchase order. Doors are created against a PO number."""
    __tablename__ = "purchase_order"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    po_number = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    doors = relationship("Door", back_populates="purchase_order")

    def __repr__(self):
        return f"<PurchaseOrder(id={self.id}, po_number={self.po_number})>"


class Door(Base):
    """Manufactured refuge bay door.

    Identity fields (po, door_number, serial_number, drawing_number) are
    immutable after creation. The two status fields are written only by the
    lifecycle services through the state machine in
    ``inspex.domain.lifecycle``.
    """
    __tablename__ = "door"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    po_id = Column(Uuid, ForeignKey("purchase_order.id", ondelete="RESTRICT"), nullable=False)
    door_number = Column(Integer, nullable=False)
    serial_number = Column(Text, nullable=False, unique=True)
    drawing_number = Column(Text, nullable=False, unique=True)
    job_number = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    pressure = Column(Integer, nullable=False)  # kPa
    door_type = Column(Text, nullable=False)  # V1 (400 kPa) | V2 (140 kPa)
    size = Column(Text, nullable=False)  # metres: 1.5 | 1.8 | 2.0

    inspection_status = Column(Text, nullable=False, default="pending")
    certification_status = Column(Text, nullable=False, default="pending")
    rejection_reason = Column(Text, nullable=True)

    created_by = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="doors")
    inspections = relationship("Inspection", back_populates="door")
    certifications = relationship("Certification", back_populates="door")

    __table_args__ = (
        CheckConstraint("door_number >= 1", name="ck_door_number_positive"),
        CheckConstraint("pressure IN (140, 400)", name="ck_door_pressure"),
        CheckConstraint(
            "inspection_status IN ('pending', 'in_progress', 'completed')",
            name="ck_door_inspection_status"
        ),
        CheckConstraint(
            "certification_status IN ('pending', 'under_review', 'certified', 'rejected')",
            name="ck_door_certification_status"
        ),
        Index("ix_door_statuses", "inspection_status", "certification_status"),
    )

    @property
    def po_number(self):
        return self.purchase_order.po_number if self.purchase_order else None

    def __repr__(self):
        return (
            f"<Door(id={self.id}, serial={self.serial_number}, "
            f"inspection={self.inspection_status}, certification={self.certification_status})>"
        )

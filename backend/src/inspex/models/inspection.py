"""Inspection, InspectionCheck and InspectionPoint SQLAlchemy models"""

import uuid

from sqlalchemy import (
    Column, Text, Integer, Boolean, ForeignKey, CheckConstraint, DateTime, Uuid, Index, text
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class InspectionPoint(Base):
    """Checklist item template. Admin managed; active points are copied into
    every new inspection in ``order_index`` order."""
    __tablename__ = "inspection_point"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<InspectionPoint(id={self.id}, order={self.order_index}, name={self.name})>"


class Inspection(Base):
    """One inspection cycle of a door.

    At most one in-progress inspection per door (partial unique index).
    The authoritative inspection is the latest completed one; superseded
    inspections are kept for history only.
    """
    __tablename__ = "inspection"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    door_id = Column(Uuid, ForeignKey("door.id", ondelete="CASCADE"), nullable=False)
    inspector_id = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    inspection_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default="in_progress")
    notes = Column(Text, nullable=True)

    # Relationships
    door = relationship("Door", back_populates="inspections")
    inspector = relationship("User")
    checks = relationship(
        "InspectionCheck",
        back_populates="inspection",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('in_progress', 'completed', 'superseded')",
            name="ck_inspection_status"
        ),
        Index("ix_inspection_door_id_status", "door_id", "status"),
        Index(
            "uq_inspection_door_in_progress",
            "door_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )

    def __repr__(self):
        return f"<Inspection(id={self.id}, door_id={self.door_id}, status={self.status})>"


class InspectionCheck(Base):
    """Result of one inspection point within an inspection."""
    __tablename__ = "inspection_check"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    inspection_id = Column(Uuid, ForeignKey("inspection.id", ondelete="CASCADE"), nullable=False)
    inspection_point_id = Column(
        Uuid, ForeignKey("inspection_point.id", ondelete="RESTRICT"), nullable=False
    )
    is_checked = Column(Boolean, nullable=False, default=False)
    photo_path = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    checked_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    inspection = relationship("Inspection", back_populates="checks")
    point = relationship("InspectionPoint")

    __table_args__ = (
        Index("ix_inspection_check_inspection_id", "inspection_id"),
    )

    def __repr__(self):
        return f"<InspectionCheck(id={self.id}, checked={self.is_checked})>"

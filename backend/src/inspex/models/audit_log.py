"""AuditLog SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, ForeignKey, Index, DateTime, Uuid
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, utcnow


class AuditLog(Base):
    """AuditLog model for immutable lifecycle and security event logging.

    Entries are append-only and should never be updated or deleted.
    Rejection reasons stay here after a re-inspection clears them from the door.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_entity", "entity_type", "entity_id"),
        Index("ix_audit_log_created_at", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_id = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    action = Column(Text, nullable=False)
    entity_type = Column(Text, nullable=True)
    entity_id = Column(Uuid, nullable=True)
    metadata_json = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    actor = relationship("User")

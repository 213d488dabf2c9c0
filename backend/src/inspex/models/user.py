"""User SQLAlchemy model"""

import re
import uuid

from sqlalchemy import Column, Text, CheckConstraint, DateTime, Uuid
from sqlalchemy.orm import validates

from .base import Base, utcnow


class User(Base):
    """User model representing authenticated users.

    Roles: admin, inspector, engineer, client. Passwords are hashed using
    Argon2id. Engineers may keep a signature image in object storage; it is
    used when they certify without supplying one.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE")
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    signature_path = Column(Text, nullable=True)
    signature_mime_type = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'inspector', 'engineer', 'client')",
            name='ck_user_role'
        ),
        CheckConstraint(
            "status IN ('ACTIVE', 'DISABLED')",
            name='ck_user_status'
        ),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    @property
    def has_signature(self) -> bool:
        return bool(self.signature_path)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

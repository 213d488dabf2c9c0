"""SerialCounter SQLAlchemy model"""

from sqlalchemy import Column, Integer, Text, DateTime

from .base import Base, utcnow


class SerialCounter(Base):
    """Single-row door numbering counter.

    ``issued_count`` only ever increases; drawing numbers are
    ``starting_serial + issued_count`` so deleted doors never free a number.
    """
    __tablename__ = "serial_counter"

    id = Column(Integer, primary_key=True, default=1)
    serial_prefix = Column(Text, nullable=False, default="MF42")
    starting_serial = Column(Integer, nullable=False, default=200)
    issued_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return (
            f"<SerialCounter(prefix={self.serial_prefix}, start={self.starting_serial}, "
            f"issued={self.issued_count})>"
        )

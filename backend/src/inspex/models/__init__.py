"""SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from .base import Base
from .user import User
from .door import Door, PurchaseOrder
from .inspection import Inspection, InspectionCheck, InspectionPoint
from .certification import Certification
from .serial_counter import SerialCounter
from .audit_log import AuditLog

__all__ = [
    "Base",
    "User",
    "Door",
    "PurchaseOrder",
    "Inspection",
    "InspectionCheck",
    "InspectionPoint",
    "Certification",
    "SerialCounter",
    "AuditLog",
]

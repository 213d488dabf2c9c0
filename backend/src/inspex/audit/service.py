"""Audit logging service for lifecycle and security events.

This service provides a centralized interface for creating immutable audit log
entries. Every lifecycle transition and security-relevant event is logged
through this service.

Audit Events:
- LOGIN_SUCCESS, LOGIN_FAILED
- USER_CREATED, USER_UPDATED
- DOOR_CREATED, DOOR_DELETED
- INSPECTION_STARTED, INSPECTIONS_SUPERSEDED, INSPECTION_COMPLETED, INSPECTION_DELETED
- CERTIFICATION_REVIEW_OPENED, DOOR_CERTIFIED, CERTIFICATION_REJECTED, CERTIFICATION_DELETED
- INSPECTION_POINT_CREATED, INSPECTION_POINT_UPDATED, INSPECTION_POINT_DELETED,
  INSPECTION_POINTS_REORDERED
- SERIAL_CONFIG_UPDATED
"""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog


def log_audit_event(
    db: Session,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Create an audit log entry.

    All parameters are stored as-is. This function does not validate action
    names or entity types.

    Args:
        db: Database session
        action: Event action (e.g., "DOOR_CERTIFIED", "LOGIN_SUCCESS")
        actor_id: User who performed the action (None for anonymous/system events)
        entity_type: Type of entity affected (e.g., "door", "inspection")
        entity_id: ID of affected entity
        metadata: Additional context as JSON (e.g., {"reason": "Weld porosity"})
        ip_address: Client IP address (IPv4 or IPv6)
        user_agent: Client User-Agent header

    Returns:
        AuditLog: The created audit log entry

    Example:
        log_audit_event(
            db=db,
            action="CERTIFICATION_REJECTED",
            actor_id=engineer.id,
            entity_type="door",
            entity_id=door.id,
            metadata={"reason": reason},
        )
    """
    audit_entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_json=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()  # Get ID without committing transaction

    return audit_entry

"""Notifier Port - Domain interface for lifecycle notifications.

Lifecycle services never talk to a mail server. They describe what happened
as a LifecycleNotification; the event dispatcher hands it to a NotifierPort
implementation after the transaction commits.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NotificationKind(str, Enum):
    """Lifecycle events that produce a notification."""
    INSPECTION_COMPLETED = "inspection_completed"
    CERTIFICATION_READY = "certification_ready"
    REJECTED = "rejected"


@dataclass
class DoorSummary:
    """Door fields quoted in notification subjects and bodies."""
    door_id: str
    serial_number: str
    drawing_number: str
    po_number: Optional[str] = None
    description: Optional[str] = None
    size: Optional[str] = None
    pressure: Optional[int] = None
    job_number: Optional[str] = None


@dataclass
class LifecycleNotification:
    """One notification, delivered at most once per lifecycle event.

    Attributes:
        kind: Event that happened
        door: Summary of the affected door
        actor_name: Name of the user who triggered the event
        recipients: Email addresses to notify
        reason: Rejection reason (REJECTED only)
        certificate_path: Storage key of the certificate PDF (CERTIFICATION_READY only)
        pdf: Certificate bytes to attach, loaded by the worker from storage
    """
    kind: NotificationKind
    door: DoorSummary
    actor_name: str
    recipients: List[str] = field(default_factory=list)
    reason: Optional[str] = None
    certificate_path: Optional[str] = None
    pdf: Optional[bytes] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON-serializable form for the task queue (PDF bytes are not sent)."""
        payload = asdict(self)
        payload["kind"] = self.kind.value
        payload.pop("pdf", None)
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LifecycleNotification":
        return cls(
            kind=NotificationKind(payload["kind"]),
            door=DoorSummary(**payload["door"]),
            actor_name=payload["actor_name"],
            recipients=list(payload.get("recipients") or []),
            reason=payload.get("reason"),
            certificate_path=payload.get("certificate_path"),
        )


class NotifierPort(ABC):
    """Port interface for delivering lifecycle notifications."""

    @abstractmethod
    def notify(self, notification: LifecycleNotification) -> None:
        """Deliver a notification to all of its recipients.

        Raises:
            DependencyFailure: If delivery failed. Callers log and swallow it;
                a failed notification never undoes a lifecycle transition.
        """
        pass

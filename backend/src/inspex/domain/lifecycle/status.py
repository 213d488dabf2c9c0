"""Door lifecycle state machine.

A door carries two status fields that move together:

    inspection_status:     pending -> in_progress -> completed
    certification_status:  pending -> under_review -> certified | rejected

Rejection sends the door back to inspection. A completed re-inspection of a
rejected door clears the rejection and returns it to the certification
queue.

The legal moves are spelled out in TRANSITIONS and applied through
``transition``; services never assign status fields directly.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

from ...errors import InvalidStateError


class InspectionStatus(str, Enum):
    """Door-level inspection status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CertificationStatus(str, Enum):
    """Door-level certification status."""
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    CERTIFIED = "certified"
    REJECTED = "rejected"


class InspectionRecordStatus(str, Enum):
    """Status of a single inspection record.

    SUPERSEDED marks completed inspections replaced by a re-inspection after
    rejection. They are kept for history but are never authoritative.
    """
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SUPERSEDED = "superseded"


class LifecycleEvent(str, Enum):
    START_INSPECTION = "start_inspection"
    COMPLETE_INSPECTION = "complete_inspection"
    OPEN_REVIEW = "open_review"
    CERTIFY = "certify"
    REJECT = "reject"
    DELETE_ONLY_INSPECTION = "delete_only_inspection"
    DELETE_CERTIFICATION = "delete_certification"


class DoorState(NamedTuple):
    inspection: InspectionStatus
    certification: CertificationStatus

    @classmethod
    def of(cls, inspection_status: str, certification_status: str) -> "DoorState":
        return cls(InspectionStatus(inspection_status), CertificationStatus(certification_status))

    def __str__(self) -> str:
        return f"{self.inspection.value}/{self.certification.value}"


class StateTransitionError(InvalidStateError):
    """Raised when an event is not legal in the door's current state."""
    pass


_I = InspectionStatus
_C = CertificationStatus
_E = LifecycleEvent

PENDING = DoorState(_I.PENDING, _C.PENDING)
INSPECTING = DoorState(_I.IN_PROGRESS, _C.PENDING)
READY = DoorState(_I.COMPLETED, _C.PENDING)
UNDER_REVIEW = DoorState(_I.COMPLETED, _C.UNDER_REVIEW)
CERTIFIED = DoorState(_I.COMPLETED, _C.CERTIFIED)
REJECTED = DoorState(_I.PENDING, _C.REJECTED)
REINSPECTING = DoorState(_I.IN_PROGRESS, _C.REJECTED)

REACHABLE_STATES = (
    PENDING,
    INSPECTING,
    READY,
    UNDER_REVIEW,
    CERTIFIED,
    REJECTED,
    REINSPECTING,
)


TRANSITIONS: Dict[Tuple[DoorState, LifecycleEvent], DoorState] = {
    (PENDING, _E.START_INSPECTION): INSPECTING,
    # Fresh re-inspection before an engineer has looked at the door
    (READY, _E.START_INSPECTION): INSPECTING,
    # Door left in progress after its open inspection was deleted; the
    # service still refuses while an in-progress record exists
    (INSPECTING, _E.START_INSPECTION): INSPECTING,
    (REJECTED, _E.START_INSPECTION): REINSPECTING,
    # Rejected doors may override a stale in-progress re-inspection
    (REINSPECTING, _E.START_INSPECTION): REINSPECTING,

    (INSPECTING, _E.COMPLETE_INSPECTION): READY,
    (REINSPECTING, _E.COMPLETE_INSPECTION): READY,

    (READY, _E.OPEN_REVIEW): UNDER_REVIEW,
    (UNDER_REVIEW, _E.OPEN_REVIEW): UNDER_REVIEW,

    (READY, _E.CERTIFY): CERTIFIED,
    (UNDER_REVIEW, _E.CERTIFY): CERTIFIED,

    (READY, _E.REJECT): REJECTED,
    (UNDER_REVIEW, _E.REJECT): REJECTED,
}

# Administrative compensations. They reset one field and apply to every
# combination, including ones only an earlier compensation can produce.
for _state in (DoorState(i, c) for i in InspectionStatus for c in CertificationStatus):
    if _state.inspection != _I.PENDING:
        TRANSITIONS[(_state, _E.DELETE_ONLY_INSPECTION)] = DoorState(_I.PENDING, _state.certification)
    if _state.certification != _C.PENDING:
        TRANSITIONS[(_state, _E.DELETE_CERTIFICATION)] = DoorState(_state.inspection, _C.PENDING)


def transition(state: DoorState, event: LifecycleEvent) -> DoorState:
    """Apply an event to a door state.

    Args:
        state: Current door state
        event: Lifecycle event to apply

    Returns:
        DoorState: The resulting state

    Raises:
        StateTransitionError: If the event is not legal in ``state``
    """
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise StateTransitionError(
            f"Cannot {event.value.replace('_', ' ')} when door is {state}. "
            f"Allowed events: {[e.value for e in get_allowed_events(state)]}"
        )


def can_transition(state: DoorState, event: LifecycleEvent) -> bool:
    return (state, event) in TRANSITIONS


def get_allowed_events(state: DoorState) -> List[LifecycleEvent]:
    """Get list of events accepted in a given state."""
    return [event for (source, event) in TRANSITIONS if source == state]

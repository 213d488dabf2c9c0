"""Door lifecycle state machine."""

from .status import (
    CertificationStatus,
    DoorState,
    InspectionRecordStatus,
    InspectionStatus,
    LifecycleEvent,
    StateTransitionError,
    TRANSITIONS,
    can_transition,
    get_allowed_events,
    transition,
)

__all__ = [
    "CertificationStatus",
    "DoorState",
    "InspectionRecordStatus",
    "InspectionStatus",
    "LifecycleEvent",
    "StateTransitionError",
    "TRANSITIONS",
    "can_transition",
    "get_allowed_events",
    "transition",
]

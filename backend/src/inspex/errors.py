"""Domain error taxonomy.

Every error raised by the lifecycle services carries a stable ``kind`` that
the HTTP layer maps onto a status code and the ``{"error", "message"}``
response envelope.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input is malformed (unknown size, blank rejection reason, ...)."""

    kind = "validation_error"


class NotFoundError(DomainError):
    """Referenced door, inspection, check or certification does not exist."""

    kind = "not_found"


class InvalidStateError(DomainError):
    """Operation is not legal in the entity's current lifecycle state."""

    kind = "invalid_state"


class ConflictError(DomainError):
    """A concurrent writer or a uniqueness rule won the race."""

    kind = "conflict"


class DependencyFailure(DomainError):
    """An external collaborator (renderer, storage, notifier) failed."""

    kind = "dependency_failure"

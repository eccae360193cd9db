"""Application status state machine.

State Flow:
    draft → submitted|eligibility_review → pre_validation → document_review
    → (needs_applicant_action ⇄ document_review) → ready_for_registry
    → accepted|rejected

Any non-terminal status may also move to withdrawn or expired.

Terminal States: ACCEPTED, REJECTED, WITHDRAWN, EXPIRED
"""

from enum import Enum
from typing import Dict, List, Optional


class ApplicationStatus(str, Enum):
    """Application status enumeration."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PRE_VALIDATION = "pre_validation"
    ELIGIBILITY_REVIEW = "eligibility_review"
    DOCUMENT_REVIEW = "document_review"
    NEEDS_APPLICANT_ACTION = "needs_applicant_action"
    READY_FOR_REGISTRY = "ready_for_registry"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    EXPIRED = "expired"


_S = ApplicationStatus

ALLOWED_TRANSITIONS: Dict[Optional[ApplicationStatus], List[ApplicationStatus]] = {
    None: [_S.DRAFT],
    _S.DRAFT: [_S.SUBMITTED, _S.ELIGIBILITY_REVIEW, _S.WITHDRAWN, _S.EXPIRED],
    _S.SUBMITTED: [_S.PRE_VALIDATION, _S.ELIGIBILITY_REVIEW, _S.WITHDRAWN, _S.EXPIRED],
    _S.PRE_VALIDATION: [
        _S.ELIGIBILITY_REVIEW,
        _S.DOCUMENT_REVIEW,
        _S.NEEDS_APPLICANT_ACTION,
        _S.WITHDRAWN,
        _S.EXPIRED,
    ],
    _S.ELIGIBILITY_REVIEW: [
        _S.PRE_VALIDATION,
        _S.DOCUMENT_REVIEW,
        _S.NEEDS_APPLICANT_ACTION,
        _S.REJECTED,
        _S.WITHDRAWN,
        _S.EXPIRED,
    ],
    _S.DOCUMENT_REVIEW: [
        _S.NEEDS_APPLICANT_ACTION,
        _S.READY_FOR_REGISTRY,
        _S.REJECTED,
        _S.WITHDRAWN,
        _S.EXPIRED,
    ],
    _S.NEEDS_APPLICANT_ACTION: [_S.ELIGIBILITY_REVIEW, _S.DOCUMENT_REVIEW, _S.WITHDRAWN, _S.EXPIRED],
    _S.READY_FOR_REGISTRY: [_S.ACCEPTED, _S.REJECTED, _S.WITHDRAWN, _S.EXPIRED],
    _S.ACCEPTED: [],  # Terminal state
    _S.REJECTED: [],  # Terminal state
    _S.WITHDRAWN: [],  # Terminal state
    _S.EXPIRED: [],  # Terminal state
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if s and not targets)

# Statuses an applicant may edit documents in and submit from
APPLICANT_EDITABLE_STATUSES = frozenset({_S.DRAFT, _S.NEEDS_APPLICANT_ACTION})

SUBMISSION_TARGETS = frozenset({_S.SUBMITTED, _S.ELIGIBILITY_REVIEW})


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current_status: Optional[ApplicationStatus], new_status: ApplicationStatus):
        self.current_status = current_status
        self.new_status = new_status
        allowed = [s.value for s in get_allowed_transitions(current_status)]
        current = current_status.value if current_status else None
        super().__init__(
            f"Invalid transition: {current} -> {new_status.value}. "
            f"Allowed transitions from {current}: {allowed}"
        )


def validate_transition(
    current_status: Optional[ApplicationStatus],
    new_status: ApplicationStatus,
) -> None:
    """Validate that a state transition is allowed.

    Args:
        current_status: Current application status (None for a new record)
        new_status: Target status to transition to

    Raises:
        StateTransitionError: If transition is not allowed
    """
    if not can_transition(current_status, new_status):
        raise StateTransitionError(current_status, new_status)


def can_transition(
    current_status: Optional[ApplicationStatus],
    new_status: ApplicationStatus,
) -> bool:
    """Check if a state transition is allowed without raising exception.

    Example:
        >>> can_transition(ApplicationStatus.DRAFT, ApplicationStatus.ELIGIBILITY_REVIEW)
        True
        >>> can_transition(ApplicationStatus.ACCEPTED, ApplicationStatus.DRAFT)
        False
    """
    return new_status in ALLOWED_TRANSITIONS.get(current_status, [])


def get_allowed_transitions(status: Optional[ApplicationStatus]) -> List[ApplicationStatus]:
    """Get list of allowed transitions from a given status."""
    return ALLOWED_TRANSITIONS.get(status, [])


def is_submission_transition(
    current_status: Optional[ApplicationStatus],
    new_status: ApplicationStatus,
) -> bool:
    """True for the applicant-driven move into review, which is guarded."""
    return current_status in APPLICANT_EDITABLE_STATUSES and new_status in SUBMISSION_TARGETS

"""Applications domain module - status lifecycle and submission guard"""

from .application_status import (
    ApplicationStatus,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    APPLICANT_EDITABLE_STATUSES,
    SUBMISSION_TARGETS,
    StateTransitionError,
    validate_transition,
    can_transition,
    get_allowed_transitions,
    is_submission_transition,
)
from .submission_guard import (
    FeePosture,
    GuardResult,
    evaluate_submission_guard,
    payment_options,
    INVALID_APPLICATION_STATE,
    FEE_REQUIRED,
    MISSING_DOCUMENTS,
)

__all__ = [
    "ApplicationStatus",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "APPLICANT_EDITABLE_STATUSES",
    "SUBMISSION_TARGETS",
    "StateTransitionError",
    "validate_transition",
    "can_transition",
    "get_allowed_transitions",
    "is_submission_transition",
    "FeePosture",
    "GuardResult",
    "evaluate_submission_guard",
    "payment_options",
    "INVALID_APPLICATION_STATE",
    "FEE_REQUIRED",
    "MISSING_DOCUMENTS",
]

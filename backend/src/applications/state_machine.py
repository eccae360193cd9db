"""Application state machine service.

The status column is only ever written here. Each write is validated
against the transition table, paired with exactly one history row, and
made under a row lock on the application so concurrent actors serialize.
Acceptance mints the member number in the same transaction, once.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from audit.service import record_status_change
from domain.applications import (
    ApplicationStatus,
    is_submission_transition,
    validate_transition,
)
from models.base import utcnow
from naming_series.service import next_member_number

from .guard import enforce_submission_guard
from .service import Application, find_application

logger = logging.getLogger(__name__)


def apply_transition(
    db: Session,
    application: Application,
    target: ApplicationStatus,
    actor_id: Optional[str] = None,
    comment: Optional[str] = None,
) -> Application:
    """Validate and write one status change on an already-locked application.

    Raises:
        StateTransitionError: If the transition table forbids the move; nothing is written
    """
    current = ApplicationStatus(application.status)
    target = ApplicationStatus(target)
    validate_transition(current, target)

    application.status = target.value
    if is_submission_transition(current, target):
        application.submitted_at = utcnow()

    if target == ApplicationStatus.ACCEPTED and application.member_id is None:
        application.member_id = next_member_number(db, application.application_type)
        logger.info(
            f"Minted member number {application.member_id} for {application.application_id}",
            extra={"application_id": application.application_id},
        )

    record_status_change(
        db,
        application.application_type,
        application.application_id,
        from_status=current.value,
        to_status=target.value,
        actor_id=actor_id,
        comment=comment,
    )
    db.flush()

    logger.info(
        f"Application {application.application_id}: {current.value} -> {target.value}",
        extra={"application_id": application.application_id, "staff_id": actor_id},
    )
    return application


def transition_application(
    db: Session,
    application_id: str,
    target: ApplicationStatus,
    actor_id: Optional[str] = None,
    comment: Optional[str] = None,
) -> Application:
    """Lock, validate and apply a status change.

    A move from draft / needs_applicant_action into review is a submission
    and must pass the submission guard first, whoever requests it.

    Args:
        db: Database session
        application_id: Human-readable application id
        target: Requested status
        actor_id: Staff user id, None for applicant/system actions
        comment: Free-text comment stored on the history row

    Raises:
        ApplicationNotFoundError: Unknown id
        SubmissionGuardError: Submission preconditions not met
        StateTransitionError: Transition not allowed
    """
    application = find_application(db, application_id, lock=True)
    target = ApplicationStatus(target)

    if is_submission_transition(ApplicationStatus(application.status), target):
        enforce_submission_guard(db, application)

    return apply_transition(db, application, target, actor_id=actor_id, comment=comment)

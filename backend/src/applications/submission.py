"""Applicant submission: draft / needs_applicant_action -> eligibility_review"""

import logging

from sqlalchemy.orm import Session

from domain.applications import ApplicationStatus

from .guard import enforce_submission_guard
from .service import Application, find_application
from .state_machine import apply_transition

logger = logging.getLogger(__name__)

SUBMITTED_COMMENT = "Application submitted for review"


def submit_application(db: Session, application_id: str) -> Application:
    """Submit an application for review.

    The guard runs before the transition table is consulted, so a
    submission from the wrong status reports INVALID_APPLICATION_STATE
    rather than a generic transition error.

    Raises:
        ApplicationNotFoundError: Unknown id
        SubmissionGuardError: State, fee or documents not in order
    """
    application = find_application(db, application_id, lock=True)
    enforce_submission_guard(db, application)

    apply_transition(
        db,
        application,
        ApplicationStatus.ELIGIBILITY_REVIEW,
        comment=SUBMITTED_COMMENT,
    )
    logger.info(
        f"Application {application_id} submitted",
        extra={"application_id": application_id},
    )
    return application

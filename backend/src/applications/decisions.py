"""Registry decisions on applications ready for the registry"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from domain.applications import ApplicationStatus
from models.registry_decision import Decision, RegistryDecision

from .service import Application, find_application
from .state_machine import apply_transition

logger = logging.getLogger(__name__)

DECISION_TARGETS = {
    Decision.ACCEPTED: ApplicationStatus.ACCEPTED,
    Decision.REJECTED: ApplicationStatus.REJECTED,
}


def record_decision(
    db: Session,
    application_id: str,
    decision: Decision,
    reasons: Optional[List[str]] = None,
    decided_by: Optional[str] = None,
) -> Tuple[Application, RegistryDecision]:
    """Move the application to accepted / rejected and log the decision.

    The transition is validated first, so a decision on an application that
    cannot take it writes neither a status change nor a decision row.
    Acceptance mints the member number (once).

    Raises:
        ApplicationNotFoundError: Unknown application
        StateTransitionError: Application is not in a status that allows the decision
    """
    decision = Decision(decision)
    application = find_application(db, application_id, lock=True)

    apply_transition(
        db,
        application,
        DECISION_TARGETS[decision],
        actor_id=decided_by,
        comment=f"Application {decision.value} by registry",
    )

    row = RegistryDecision(
        application_type=application.application_type.value,
        application_id=application.application_id,
        decision=decision.value,
        reasons=list(reasons or []),
        decided_by=decided_by,
    )
    db.add(row)
    db.flush()

    logger.info(
        f"Registry decision {decision.value} on {application_id}",
        extra={"application_id": application_id, "staff_id": decided_by},
    )
    return application, row

"""Staff Applications API Router - review, status changes, verification, decisions.

All endpoints require a staff bearer token; recording a registry decision
additionally requires an admin role.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from auth.dependencies import StaffPrincipal, require_roles
from auth.roles import ADMIN_ROLES, STAFF_ROLES
from database import get_db, run_in_transaction
from domain.applications import ApplicationStatus
from models.application import ApplicationType
from models.uploaded_document import UploadedDocumentStatus
from naming_series.service import current_counters
from notifications import NotifierPort, get_notifier, templates
from observability.metrics import registry_decisions_total

from .decisions import record_decision
from .documents import verify_document
from .errors import DecisionRequiredError
from .schemas import DecisionRequest, DocumentVerifyRequest, StatusChangeRequest
from .service import application_detail, find_application, list_applications
from .state_machine import transition_application

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

require_staff = require_roles(STAFF_ROLES)
require_admin = require_roles(ADMIN_ROLES)

DECISION_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})


@router.get(
    "/applications",
    summary="List applications",
    description="""
    List individual and organization applications, newest first.

    **Filters:**
    - status: Application status
    - type: individual | organization

    **Permissions:** Any staff role
    """,
)
def get_applications(
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    application_type: Optional[ApplicationType] = Query(None, alias="type", description="Filter by applicant kind"),
    limit: int = Query(50, ge=1, le=200, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    staff: StaffPrincipal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    applications, total = list_applications(
        db,
        status=status.value if status else None,
        application_type=application_type,
        limit=limit,
        offset=offset,
    )
    return {
        "items": [
            {**a.to_dict(), "displayName": a.display_name}
            for a in applications
        ],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/applications/{application_id}", summary="Application detail")
def get_application_detail(
    application_id: str,
    staff: StaffPrincipal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Payload, documents, status history and registry decisions."""
    return application_detail(db, find_application(db, application_id))


@router.put("/applications/{application_id}/status", summary="Change application status")
def change_status(
    application_id: str,
    body: StatusChangeRequest,
    staff: StaffPrincipal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Move an application through the state machine.

    Raises:
        409 INVALID_STATUS_TRANSITION: Transition not allowed from the current status
        409 DECISION_REQUIRED: accepted and rejected are set through /decide
        402/400 FEE_REQUIRED / MISSING_DOCUMENTS: A move into review is a submission
            and must pass the same guard as the applicant's submit
    """
    if body.status in DECISION_STATUSES:
        raise DecisionRequiredError(application_id, body.status.value)

    comment = body.comment or f"Status changed by admin to {body.status.value}"
    application = run_in_transaction(db, lambda: transition_application(
        db, application_id, body.status, actor_id=staff.id, comment=comment,
    ))
    return {
        "applicationId": application.application_id,
        "status": application.status,
        "memberId": application.member_id,
        "message": "Application status updated successfully",
    }


@router.put(
    "/applications/{application_id}/documents/{document_id}/verify",
    summary="Verify or reject a document",
)
def verify(
    application_id: str,
    document_id: UUID,
    body: DocumentVerifyRequest,
    staff: StaffPrincipal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    document = run_in_transaction(db, lambda: verify_document(
        db,
        application_id,
        document_id,
        UploadedDocumentStatus(body.status),
        verifier_id=staff.id,
        notes=body.notes,
    ))
    return {
        "documentId": str(document.id),
        "status": document.status,
        "message": f"Document {document.status} successfully",
    }


@router.post("/applications/{application_id}/decide", summary="Record a registry decision")
def decide(
    application_id: str,
    body: DecisionRequest,
    background_tasks: BackgroundTasks,
    staff: StaffPrincipal = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: NotifierPort = Depends(get_notifier),
):
    """Accept or reject an application that is ready for the registry.

    Acceptance mints the member number. **Permissions:** admin, super_admin
    """
    application, decision = run_in_transaction(db, lambda: record_decision(
        db, application_id, body.decision, reasons=body.reasons, decided_by=staff.id,
    ))
    registry_decisions_total.labels(decision=decision.decision).inc()

    if application.contact_email:
        subject, message = templates.registry_decision(
            application.display_name, application.application_id, decision.decision, application.member_id,
        )
        background_tasks.add_task(notifier.send, application.contact_email, subject, message)

    return {
        "applicationId": application.application_id,
        "status": application.status,
        "memberId": application.member_id,
        "decision": decision.to_dict(),
        "message": f"Application {decision.decision} successfully",
    }


@router.get("/naming-series", summary="Current naming series counters")
def get_naming_series(
    staff: StaffPrincipal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return [counter.to_dict() for counter in current_counters(db)]

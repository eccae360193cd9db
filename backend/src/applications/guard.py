"""Submission guard wiring.

Collects the fee posture, document checklist context and uploaded doc
types of a persisted application and feeds them to the pure guard.
"""

from typing import List

from sqlalchemy.orm import Session

from domain.applications import ApplicationStatus, FeePosture, GuardResult, evaluate_submission_guard
from domain.documents import RequirementContext, validate_document_requirements
from models.uploaded_document import UploadedDocument

from .errors import SubmissionGuardError


def fee_posture(application) -> FeePosture:
    return FeePosture(
        fee_required=application.fee_required,
        fee_status=application.fee_status,
        fee_proof_document_id=application.fee_proof_document_id,
        fee_amount=float(application.fee_amount) if application.fee_amount is not None else None,
        fee_currency=application.fee_currency,
    )


def requirement_context(application) -> RequirementContext:
    return RequirementContext(
        mature_entry=getattr(application, "mature_entry", None),
        director_count=getattr(application, "director_count", None),
    )


def uploaded_doc_types(db: Session, application) -> List[str]:
    rows = (
        db.query(UploadedDocument.doc_type)
        .filter(
            UploadedDocument.application_type == application.application_type.value,
            UploadedDocument.application_id == application.application_id,
        )
        .all()
    )
    return [doc_type for (doc_type,) in rows]


def check_submission(db: Session, application) -> GuardResult:
    requirements = validate_document_requirements(
        application.application_type,
        uploaded_doc_types(db, application),
        requirement_context(application),
    )
    return evaluate_submission_guard(
        application.application_id,
        ApplicationStatus(application.status),
        fee_posture(application),
        requirements,
    )


def enforce_submission_guard(db: Session, application) -> None:
    """Raise the first failing precondition as a problem response.

    Raises:
        SubmissionGuardError: INVALID_APPLICATION_STATE, FEE_REQUIRED or MISSING_DOCUMENTS
    """
    result = check_submission(db, application)
    if not result.ok:
        raise SubmissionGuardError(
            code=result.code,
            title=result.title,
            detail=result.detail,
            status_code=result.status_code,
            extra=result.extra,
        )

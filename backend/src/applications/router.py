"""Public Applications API Router - start, resume, documents, fees and submit.

Every state-changing endpoint runs its unit of work through
``run_in_transaction``; notifications are queued as background tasks only
after the commit succeeded.
"""

import logging
from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from auth.dependencies import ResumeSession, require_resume_session
from config import settings
from database import get_db, run_in_transaction
from domain.documents import document_catalogue
from domain.documents.ports import BlobStorePort
from domain.payments import PaymentGatewayPort
from infrastructure.payments import get_payment_gateway
from infrastructure.storage import get_blob_store
from models.application import ApplicationType
from models.base import utcnow
from notifications import NotifierPort, get_notifier, templates
from observability.metrics import (
    applications_started_total,
    document_uploads_total,
    fee_callbacks_total,
    submissions_total,
)
from resume_tokens.service import generate_code, verify_code

from .documents import delete_document, upload_document
from .errors import DocumentError, DuplicateContentError, OtpError, PaymentError, SubmissionGuardError
from .fees import handle_fee_callback, prepare_fee_payment, record_fee_initiation, request_gateway_payment, upload_fee_proof
from .schemas import (
    DocumentUploadRequest,
    FeeInitiateRequest,
    FeeProofRequest,
    GenerateOtpRequest,
    IndividualStartRequest,
    OrganizationStartRequest,
    VerifyOtpRequest,
)
from .service import (
    application_detail,
    application_summary,
    find_application,
    list_documents,
    start_individual_application,
    start_organization_application,
)
from .submission import submit_application

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public/applications", tags=["applications"])


def _notify(background_tasks: BackgroundTasks, notifier: NotifierPort, to, message) -> None:
    if not to:
        return
    subject, body = message
    background_tasks.add_task(notifier.send, to, subject, body)


def _started_response(started, message: str) -> dict:
    application = started.application
    data = application.to_dict()
    data["requirements"] = list(started.eligibility.requirements)
    data["warnings"] = list(started.eligibility.warnings)
    data["message"] = message
    return data


@router.get(
    "/document-types",
    summary="Document type catalogue",
    description="Upload policy (MIME types, extensions, size) for every document type, by category",
)
def get_document_types():
    return document_catalogue()


@router.post(
    "/individual/start",
    status_code=status.HTTP_201_CREATED,
    summary="Start an individual application",
    description="""
    Run the eligibility gate for an individual estate agent and create the
    application in ``draft``.

    **Responses:**
    - 201: Application created; ``requirements`` lists documents to upload
    - 400 ELIGIBILITY_FAILED: Applicant does not qualify (``detail`` holds the reason)
    - 400 VALIDATION_ERROR: Malformed form data
    """,
)
def start_individual(
    body: IndividualStartRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotifierPort = Depends(get_notifier),
):
    started = run_in_transaction(db, lambda: start_individual_application(
        db,
        personal=body.personal,
        o_level=body.o_level,
        a_level=body.a_level,
        equivalent_qualification=body.equivalent_qualification,
    ))
    applications_started_total.labels(application_type=ApplicationType.INDIVIDUAL.value).inc()

    application = started.application
    _notify(background_tasks, notifier, application.contact_email, templates.application_started(
        application.display_name, application.application_id, application.fee_amount, application.fee_currency,
    ))
    return _started_response(started, "Application created successfully")


@router.post(
    "/organization/start",
    status_code=status.HTTP_201_CREATED,
    summary="Start an organization application",
    description="""
    Confirm the declared PREA is an active individual member, run the
    organization eligibility rules and create the application in ``draft``.
    The document checklist comes back in ``requirements``.
    """,
)
def start_organization(
    body: OrganizationStartRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotifierPort = Depends(get_notifier),
):
    started = run_in_transaction(db, lambda: start_organization_application(
        db,
        org_profile=body.org_profile,
        trust_account=body.trust_account,
        prea_member_id=body.prea_member_id,
        directors=body.directors,
    ))
    applications_started_total.labels(application_type=ApplicationType.ORGANIZATION.value).inc()

    application = started.application
    _notify(background_tasks, notifier, application.contact_email, templates.application_started(
        application.display_name, application.application_id, application.fee_amount, application.fee_currency,
    ))
    return _started_response(started, "Organization application created successfully")


@router.get("/{application_id}", summary="Application status summary")
def get_application(application_id: str, db: Session = Depends(get_db)):
    """Status, fee posture, documents and history; no applicant payload."""
    return application_summary(db, find_application(db, application_id))


@router.get("/{application_id}/resume", summary="Resume an application")
def resume_application(
    application_id: str,
    session: ResumeSession = Depends(require_resume_session),
    db: Session = Depends(get_db),
):
    """Full application payload; requires the session token from verify-otp."""
    return application_detail(db, find_application(db, application_id))


@router.post("/{application_id}/submit", summary="Submit an application for review")
def submit(
    application_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotifierPort = Depends(get_notifier),
):
    """Submit for review.

    Raises:
        409 INVALID_APPLICATION_STATE: Not in draft / needs_applicant_action
        402 FEE_REQUIRED: Fee unpaid and no proof uploaded (lists payment options)
        400 MISSING_DOCUMENTS: Checklist incomplete (``missingDocuments``)
    """
    try:
        application = run_in_transaction(db, lambda: submit_application(db, application_id))
    except SubmissionGuardError as e:
        submissions_total.labels(outcome=e.code.lower()).inc()
        raise
    submissions_total.labels(outcome="submitted").inc()

    _notify(background_tasks, notifier, application.contact_email, templates.application_submitted(
        application.display_name, application.application_id,
    ))
    return {
        "applicationId": application.application_id,
        "status": application.status,
        "submittedAt": application.submitted_at.isoformat() if application.submitted_at else None,
        "message": "Application submitted successfully",
    }


# ============================================================================
# Save & resume
# ============================================================================

@router.post("/{application_id}/generate-otp", summary="Email a resume code")
def generate_otp(
    application_id: str,
    body: GenerateOtpRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotifierPort = Depends(get_notifier),
):
    """Issue a 6-digit resume code.

    Codes are only issued to the application's contact address; the
    response is the same either way.
    """
    def work():
        application = find_application(db, application_id)
        contact = (application.contact_email or "").strip().lower()
        if contact != body.email.strip().lower():
            logger.info(f"Resume code requested for non-contact address on {application_id}")
            return None
        return generate_code(db, application.application_type, application_id, body.email)

    issued = run_in_transaction(db, work)
    if issued is not None:
        _notify(background_tasks, notifier, body.email, templates.resume_code(
            application_id, issued.code, settings.OTP_TTL_MINUTES,
        ))
        expires_at = issued.expires_at
    else:
        expires_at = utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES)

    return {
        "message": "OTP sent to your email address",
        "expiresAt": expires_at.isoformat(),
    }


@router.post("/{application_id}/verify-otp", summary="Exchange a resume code for a session token")
def verify_otp(application_id: str, body: VerifyOtpRequest, db: Session = Depends(get_db)):
    """Verify a resume code.

    Raises:
        401 INVALID / EXPIRED, 429 TOO_MANY_ATTEMPTS
    """
    def work():
        # The attempt counter must be committed even when verification fails
        try:
            return verify_code(db, application_id, body.email, body.code), None
        except OtpError as e:
            return None, e

    session, error = run_in_transaction(db, work)
    if error is not None:
        raise error

    return {
        "sessionToken": session.session_token,
        "applicationId": session.application_id,
        "applicationType": session.application_type,
        "expiresInMinutes": settings.RESUME_SESSION_EXPIRE_MINUTES,
        "message": "OTP verified successfully",
    }


# ============================================================================
# Fees
# ============================================================================

@router.post("/{application_id}/fee/initiate", summary="Start an online fee payment")
def initiate_fee(
    application_id: str,
    body: FeeInitiateRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGatewayPort = Depends(get_payment_gateway),
):
    """Open a Paynow transaction for the application fee.

    Raises:
        400 INVALID_PAYMENT_AMOUNT, 409 FEE_ALREADY_SETTLED, 502 PAYMENT_INIT_ERROR
    """
    request = run_in_transaction(db, lambda: prepare_fee_payment(db, application_id, body.amount, body.email))
    payment = request_gateway_payment(gateway, request)
    run_in_transaction(db, lambda: record_fee_initiation(db, application_id, payment))

    return {
        "paymentUrl": payment.redirect_url,
        "pollUrl": payment.poll_reference,
        "reference": request.reference,
        "message": "Payment initialized successfully",
    }


@router.post("/{application_id}/fee/callback", summary="Payment gateway status notification", include_in_schema=False)
async def fee_callback(
    application_id: str,
    request: Request,
    db: Session = Depends(get_db),
    gateway: PaymentGatewayPort = Depends(get_payment_gateway),
):
    """Form-encoded status notification from the gateway; answers ``OK``."""
    form = await request.form()
    payload = {key: str(value) for key, value in form.items()}

    try:
        outcome = await run_in_threadpool(
            run_in_transaction, db, lambda: handle_fee_callback(db, gateway, application_id, payload)
        )
    except PaymentError:
        fee_callbacks_total.labels(outcome="invalid").inc()
        raise
    fee_callbacks_total.labels(outcome=outcome).inc()
    return PlainTextResponse("OK")


@router.post("/{application_id}/fee/proof", summary="Upload proof of payment")
def upload_proof(
    application_id: str,
    body: FeeProofRequest,
    db: Session = Depends(get_db),
    blob_store: BlobStorePort = Depends(get_blob_store),
):
    outcome = run_in_transaction(db, lambda: upload_fee_proof(
        db, blob_store, application_id, body.file_key, body.file_name, body.mime_type,
    ))
    document_uploads_total.labels(outcome="replaced" if outcome.replaced else "created").inc()
    return {
        **outcome.to_dict(),
        "message": "Proof of payment uploaded successfully. Payment verification is pending.",
    }


# ============================================================================
# Documents
# ============================================================================

@router.post(
    "/{application_id}/documents",
    summary="Upload a supporting document",
    description="""
    Register a file the client already uploaded to object storage under
    ``fileKey``. The bytes are fetched and validated server-side.

    **Responses:**
    - 201: New document stored
    - 200: Singleton document (ID/passport, birth certificate, certificate of
      incorporation) replaced in place
    - 400: INVALID_APPLICATION_STATUS, INVALID_DOCUMENT_TYPE, FILE_ACCESS_ERROR,
      FILE_SECURITY_VALIDATION_FAILED (``errors``, ``warnings``)
    - 409 DUPLICATE_FILE_CONTENT: Identical bytes already in the registry
    """,
)
def upload(
    application_id: str,
    body: DocumentUploadRequest,
    db: Session = Depends(get_db),
    blob_store: BlobStorePort = Depends(get_blob_store),
):
    try:
        outcome = run_in_transaction(db, lambda: upload_document(
            db, blob_store, application_id, body.doc_type, body.file_key, body.file_name, body.mime_type,
        ))
    except DuplicateContentError:
        document_uploads_total.labels(outcome="duplicate").inc()
        raise
    except DocumentError:
        document_uploads_total.labels(outcome="rejected").inc()
        raise

    document_uploads_total.labels(outcome="replaced" if outcome.replaced else "created").inc()
    return JSONResponse(
        content=outcome.to_dict(),
        status_code=status.HTTP_200_OK if outcome.replaced else status.HTTP_201_CREATED,
    )


@router.get("/{application_id}/documents", summary="List uploaded documents")
def get_documents(application_id: str, db: Session = Depends(get_db)):
    """Documents of the application, newest first."""
    find_application(db, application_id)
    return [d.to_dict() for d in list_documents(db, application_id)]


@router.delete("/{application_id}/documents/{document_id}", summary="Delete an unprocessed document")
def remove_document(application_id: str, document_id: UUID, db: Session = Depends(get_db)):
    run_in_transaction(db, lambda: delete_document(db, application_id, document_id))
    return {"message": "Document deleted successfully"}

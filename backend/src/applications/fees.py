"""Fee service - online payment, gateway notifications and proof of payment.

Fee Status Flow:
    pending → settled          (gateway notification: Paid / Awaiting Delivery / Delivered)
    pending → failed           (gateway notification: Cancelled / Failed)
    failed → pending           (applicant starts a new online payment)
    pending|failed → proof_uploaded → settled (staff verify the proof)

Online initiation is split in three steps so the gateway round-trip never
runs while the application row is locked:
``prepare_fee_payment`` (validate) → ``request_gateway_payment`` (HTTP) →
``record_fee_initiation`` (store the poll reference).

Fee events do not change the application status; each one is recorded as a
history row with from_status == to_status.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from audit.service import record_status_change
from config import settings
from domain.documents import DocumentType
from domain.documents.ports import BlobStorePort
from domain.payments import (
    InitiatedPayment,
    PaymentGatewayError,
    PaymentGatewayPort,
    PaymentOutcome,
    classify_status,
)
from models.application import FeeStatus

from .documents import UploadOutcome, upload_document
from .errors import PaymentError
from .service import find_application

logger = logging.getLogger(__name__)

FEE_CONFIRMED_COMMENT = "Application fee payment confirmed"
PROOF_UPLOADED_COMMENT = "Proof of payment uploaded - pending verification"


@dataclass(frozen=True)
class FeePaymentRequest:
    application_id: str
    amount: Decimal
    currency: str
    reference: str
    email: str
    return_url: str
    result_url: str


def payment_reference(application_id: str) -> str:
    """Merchant reference sent to the gateway, e.g. ``EACZ-FEE-IND-APP-2025-0001``."""
    return f"{settings.PAYMENT_REFERENCE_PREFIX}-{application_id}"


def _as_decimal(amount) -> Optional[Decimal]:
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        return None


def prepare_fee_payment(
    db: Session,
    application_id: str,
    amount,
    email: Optional[str] = None,
) -> FeePaymentRequest:
    """Check a payment request against the application's fee.

    Raises:
        ApplicationNotFoundError: Unknown application
        PaymentError: FEE_ALREADY_SETTLED (409) or INVALID_PAYMENT_AMOUNT (400)
    """
    application = find_application(db, application_id)

    if application.fee_status == FeeStatus.SETTLED.value:
        raise PaymentError(
            code="FEE_ALREADY_SETTLED",
            title="Fee Already Paid",
            detail="The application fee has already been paid",
            status_code=409,
        )

    requested = _as_decimal(amount)
    if requested is None or requested != Decimal(application.fee_amount):
        raise PaymentError(
            code="INVALID_PAYMENT_AMOUNT",
            title="Invalid Amount",
            detail=f"Payment amount must be {application.fee_amount} {application.fee_currency}",
            status_code=400,
        )

    return FeePaymentRequest(
        application_id=application_id,
        amount=Decimal(application.fee_amount),
        currency=application.fee_currency,
        reference=payment_reference(application_id),
        email=email or application.contact_email or "",
        return_url=f"{settings.FRONTEND_URL}/application/{application_id}/payment-complete",
        result_url=f"{settings.BACKEND_URL}/api/public/applications/{application_id}/fee/callback",
    )


def request_gateway_payment(gateway: PaymentGatewayPort, request: FeePaymentRequest) -> InitiatedPayment:
    """Open the transaction with the gateway.

    Raises:
        PaymentError: PAYMENT_INIT_ERROR (502) when the gateway refuses or is down
    """
    try:
        return gateway.initiate(
            amount=request.amount,
            currency=request.currency,
            reference=request.reference,
            email=request.email,
            return_url=request.return_url,
            result_url=request.result_url,
        )
    except PaymentGatewayError as e:
        logger.warning(
            f"Payment initiation failed for {request.application_id}: {e}",
            extra={"application_id": request.application_id},
        )
        raise PaymentError(
            code="PAYMENT_INIT_ERROR",
            title="Payment Initialization Failed",
            detail=str(e) or "Failed to initialize payment",
            status_code=502,
        )


def record_fee_initiation(db: Session, application_id: str, payment: InitiatedPayment):
    """Store the gateway poll reference; a failed fee becomes pending again."""
    application = find_application(db, application_id, lock=True)
    application.fee_payment_reference = payment.poll_reference
    if application.fee_status == FeeStatus.FAILED.value:
        application.fee_status = FeeStatus.PENDING.value
    db.flush()
    return application


def handle_fee_callback(
    db: Session,
    gateway: PaymentGatewayPort,
    application_id: str,
    payload: Mapping[str, str],
) -> str:
    """Apply a gateway status notification.

    Repeated notifications are no-ops: a settled fee is never re-settled
    and never gets a second confirmation row.

    Returns:
        "settled", "failed" or "ignored"

    Raises:
        PaymentError: INVALID_PAYMENT_NOTIFICATION (400) for a bad hash or
            a reference belonging to another application
        ApplicationNotFoundError: Unknown application
    """
    if not gateway.verify_notification(payload):
        logger.warning(f"Rejected payment notification with bad hash for {application_id}")
        raise PaymentError(
            code="INVALID_PAYMENT_NOTIFICATION",
            title="Bad Request",
            detail="Payment notification could not be verified",
            status_code=400,
        )

    reference = payload.get("reference")
    if reference and reference != payment_reference(application_id):
        raise PaymentError(
            code="INVALID_PAYMENT_NOTIFICATION",
            title="Bad Request",
            detail="Payment reference does not match the application",
            status_code=400,
        )

    application = find_application(db, application_id, lock=True)
    status = payload.get("status", "")

    if gateway.is_settled(status):
        if application.fee_status == FeeStatus.SETTLED.value:
            return "ignored"
        application.fee_status = FeeStatus.SETTLED.value
        record_status_change(
            db,
            application.application_type,
            application.application_id,
            from_status=application.status,
            to_status=application.status,
            comment=FEE_CONFIRMED_COMMENT,
        )
        db.flush()
        logger.info(
            f"Application fee settled for {application_id}",
            extra={"application_id": application_id},
        )
        return "settled"

    if classify_status(status) == PaymentOutcome.FAILED and application.fee_status == FeeStatus.PENDING.value:
        application.fee_status = FeeStatus.FAILED.value
        db.flush()
        logger.info(
            f"Payment {status} for {application_id}",
            extra={"application_id": application_id},
        )
        return "failed"

    return "ignored"


def upload_fee_proof(
    db: Session,
    blob_store: BlobStorePort,
    application_id: str,
    file_key: str,
    file_name: str,
    mime_type: str,
) -> UploadOutcome:
    """Register a proof of payment through the normal upload path.

    An uploaded proof unblocks submission; staff verification of the
    document later settles the fee.
    """
    outcome = upload_document(
        db,
        blob_store,
        application_id,
        DocumentType.APPLICATION_FEE_POP.value,
        file_key,
        file_name,
        mime_type,
    )

    application = find_application(db, application_id, lock=True)
    application.fee_proof_document_id = outcome.document.id
    if application.fee_status != FeeStatus.SETTLED.value:
        application.fee_status = FeeStatus.PROOF_UPLOADED.value

    record_status_change(
        db,
        application.application_type,
        application.application_id,
        from_status=application.status,
        to_status=application.status,
        comment=PROOF_UPLOADED_COMMENT,
    )
    db.flush()
    return outcome

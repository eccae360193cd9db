"""Submission guard for the move from draft into review

Three independent preconditions, checked in a fixed order so callers can
tell the failures apart (remediation differs for each):

1. INVALID_APPLICATION_STATE: status is not draft / needs_applicant_action
2. FEE_REQUIRED: fee neither waived, settled, nor covered by an uploaded
   proof of payment
3. MISSING_DOCUMENTS: the submission checklist is incomplete
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from domain.documents.document_types import DocumentType
from domain.documents.requirements import RequirementCheck

from .application_status import APPLICANT_EDITABLE_STATUSES, ApplicationStatus


INVALID_APPLICATION_STATE = "INVALID_APPLICATION_STATE"
FEE_REQUIRED = "FEE_REQUIRED"
MISSING_DOCUMENTS = "MISSING_DOCUMENTS"


@dataclass
class FeePosture:
    fee_required: bool = True
    fee_status: str = "pending"
    fee_proof_document_id: Optional[Any] = None
    fee_amount: Optional[float] = None
    fee_currency: str = "USD"

    @property
    def is_satisfied(self) -> bool:
        """Proof of payment alone unblocks submission; verification happens in review."""
        return (
            not self.fee_required
            or self.fee_status == "settled"
            or self.fee_proof_document_id is not None
        )


@dataclass
class GuardResult:
    ok: bool
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    status_code: int = 200
    extra: Dict[str, Any] = field(default_factory=dict)


def payment_options(application_id: str):
    base = f"/api/public/applications/{application_id}/fee"
    return [
        {
            "method": "paynow",
            "description": "Pay online using EcoCash, OneMoney, or bank transfer",
            "endpoint": f"{base}/initiate",
        },
        {
            "method": "proof_upload",
            "description": "Upload proof of payment if already paid",
            "endpoint": f"{base}/proof",
            "docType": DocumentType.APPLICATION_FEE_POP.value,
        },
    ]


def evaluate_submission_guard(
    application_id: str,
    status: ApplicationStatus,
    fee: FeePosture,
    requirements: RequirementCheck,
) -> GuardResult:
    """Run the three submission preconditions in order.

    Args:
        application_id: Human-readable application id (used in option links)
        status: Current status
        fee: Fee posture of the application
        requirements: Submission-time document requirement check

    Returns:
        GuardResult; ``ok`` only when all three pass, otherwise the first
        failing precondition with its code, HTTP status and details
    """
    if status not in APPLICANT_EDITABLE_STATUSES:
        return GuardResult(
            ok=False,
            code=INVALID_APPLICATION_STATE,
            title="Invalid Application State",
            detail=f"Application cannot be submitted in current state: {status.value}",
            status_code=409,
            extra={
                "currentStatus": status.value,
                "allowedStatuses": sorted(s.value for s in APPLICANT_EDITABLE_STATUSES),
            },
        )

    if not fee.is_satisfied:
        return GuardResult(
            ok=False,
            code=FEE_REQUIRED,
            title="Payment Required",
            detail=(
                "Application fee must be paid before submission. "
                "Either pay via Paynow or upload proof of payment."
            ),
            status_code=402,
            extra={
                "feeAmount": fee.fee_amount,
                "feeCurrency": fee.fee_currency,
                "feeStatus": fee.fee_status,
                "paymentOptions": payment_options(application_id),
            },
        )

    if not requirements.ok:
        return GuardResult(
            ok=False,
            code=MISSING_DOCUMENTS,
            title="Missing Required Documents",
            detail=requirements.reason,
            status_code=400,
            extra={"missingDocuments": list(requirements.requirements)},
        )

    return GuardResult(ok=True)

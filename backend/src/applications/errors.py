"""Problem-detail errors raised by the application services.

Every error carries a machine-readable ``code`` and a human-readable
``detail``; the exception handler in ``main`` renders it as an RFC 7807
style JSON body with any ``extra`` fields merged in.
"""

from typing import Any, Dict, Optional


PROBLEM_TYPE = "https://tools.ietf.org/html/rfc7807"


class ProblemError(Exception):
    """Base class for errors rendered as problem responses."""

    def __init__(
        self,
        code: str,
        title: str,
        detail: str,
        status_code: int = 400,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.title = title
        self.detail = detail
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": PROBLEM_TYPE,
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
            "code": self.code,
            **self.extra,
        }


class ApplicationNotFoundError(ProblemError):
    def __init__(self, application_id: str):
        super().__init__(
            code="APPLICATION_NOT_FOUND",
            title="Not Found",
            detail=f"Application {application_id} not found",
            status_code=404,
        )


class EligibilityFailedError(ProblemError):
    """A normal negative eligibility outcome, not a system failure."""

    def __init__(self, reason: str, requirements=None, warnings=None):
        extra = {}
        if requirements:
            extra["requirements"] = list(requirements)
        if warnings:
            extra["warnings"] = list(warnings)
        super().__init__(
            code="ELIGIBILITY_FAILED",
            title="Eligibility Check Failed",
            detail=reason,
            status_code=400,
            extra=extra,
        )


class SubmissionGuardError(ProblemError):
    """Submission blocked by state, fee or documents (see ``code``)."""
    pass


class InvalidTransitionError(ProblemError):
    def __init__(self, message: str, current_status: Optional[str], target_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            title="Invalid Status Transition",
            detail=message,
            status_code=409,
            extra={"currentStatus": current_status, "targetStatus": target_status},
        )


class DecisionRequiredError(ProblemError):
    """Accepted and rejected are only reachable through a registry decision."""

    def __init__(self, application_id: str, target_status: str):
        super().__init__(
            code="DECISION_REQUIRED",
            title="Registry Decision Required",
            detail=(
                f"Status {target_status} can only be set by recording a registry decision "
                f"at /api/admin/applications/{application_id}/decide"
            ),
            status_code=409,
            extra={"targetStatus": target_status},
        )


class DocumentError(ProblemError):
    """Upload, deletion or verification of a document was refused."""
    pass


class DuplicateContentError(ProblemError):
    """Identical bytes are already stored, possibly under another application."""

    def __init__(self, existing_document):
        super().__init__(
            code="DUPLICATE_FILE_CONTENT",
            title="Duplicate File Content",
            detail=(
                f'A file with identical content already exists: "{existing_document.file_name}" '
                f"in application {existing_document.application_id}"
            ),
            status_code=409,
            extra={
                "existingDocument": {
                    "id": str(existing_document.id),
                    "applicationId": existing_document.application_id,
                    "docType": existing_document.doc_type,
                    "fileName": existing_document.file_name,
                }
            },
        )


class PaymentError(ProblemError):
    """Fee initiation or settlement notification was refused."""
    pass


class OtpError(ProblemError):
    """Save-and-resume code verification failed (INVALID, EXPIRED, TOO_MANY_ATTEMPTS)."""

    RESPONSES = {
        "INVALID": (401, "Invalid OTP", "Invalid or expired OTP code"),
        "EXPIRED": (401, "Expired OTP", "OTP code has expired"),
        "TOO_MANY_ATTEMPTS": (429, "Too Many Attempts", "Too many verification attempts"),
    }

    def __init__(self, code: str):
        status_code, title, detail = self.RESPONSES[code]
        super().__init__(code=code, title=title, detail=detail, status_code=status_code)

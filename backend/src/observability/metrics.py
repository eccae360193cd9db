"""Prometheus metrics for the licensing registry.

Counters for the application lifecycle: starts, submissions, document
uploads, resume-code verification, fee callbacks and registry decisions.
"""

from prometheus_client import Counter

applications_started_total = Counter(
    "registry_applications_started_total",
    "Total applications started",
    ["application_type"]  # individual|organization
)

submissions_total = Counter(
    "registry_submissions_total",
    "Total submission attempts",
    ["outcome"]  # submitted|fee_required|missing_documents|invalid_application_state
)

document_uploads_total = Counter(
    "registry_document_uploads_total",
    "Total document upload attempts",
    ["outcome"]  # created|replaced|rejected|duplicate
)

otp_verifications_total = Counter(
    "registry_otp_verifications_total",
    "Total resume-code verification attempts",
    ["outcome"]  # verified|invalid|expired|too_many_attempts
)

fee_callbacks_total = Counter(
    "registry_fee_callbacks_total",
    "Total payment gateway notifications received",
    ["outcome"]  # settled|failed|ignored|invalid
)

registry_decisions_total = Counter(
    "registry_decisions_total",
    "Total registry decisions recorded",
    ["decision"]  # accepted|rejected
)

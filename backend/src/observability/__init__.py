"""Observability module for the licensing registry.

Provides structured logging, metrics, request correlation and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    applications_started_total,
    submissions_total,
    document_uploads_total,
    otp_verifications_total,
    fee_callbacks_total,
    registry_decisions_total,
)
from .request_id import (
    request_id_var,
    get_request_id,
    set_request_id,
    generate_request_id,
    resolve_request_id,
)
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "applications_started_total",
    "submissions_total",
    "document_uploads_total",
    "otp_verifications_total",
    "fee_callbacks_total",
    "registry_decisions_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    "resolve_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]

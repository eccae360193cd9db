"""Application fee payments: gateway port and Paynow message helpers"""

from .paynow_protocol import (
    PaymentOutcome,
    classify_status,
    generate_hash,
    parse_response,
    verify_hash,
)
from .ports import InitiatedPayment, PaymentGatewayError, PaymentGatewayPort

__all__ = [
    "PaymentGatewayPort",
    "PaymentGatewayError",
    "InitiatedPayment",
    "PaymentOutcome",
    "classify_status",
    "generate_hash",
    "parse_response",
    "verify_hash",
]

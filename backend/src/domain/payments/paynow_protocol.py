"""Paynow message format helpers

Paynow speaks url-encoded key=value messages signed with an upper-case
SHA-512 hex digest of the field values followed by the merchant's
integration key.
"""

import hashlib
import hmac
from enum import Enum
from typing import Dict, Mapping
from urllib.parse import parse_qsl


HASH_FIELD = "hash"


class PaymentOutcome(str, Enum):
    SETTLED = "settled"
    FAILED = "failed"
    PENDING = "pending"


SETTLED_STATUSES = frozenset({"paid", "awaiting delivery", "delivered"})
FAILED_STATUSES = frozenset({"cancelled", "failed"})


def generate_hash(values: Mapping[str, str], integration_key: str) -> str:
    """Sign a message.

    Values are concatenated in sorted key order, skipping the hash field.

    Example:
        >>> generate_hash({"status": "Paid", "amount": "50.00"}, "k3y") == generate_hash(
        ...     {"amount": "50.00", "status": "Paid", "hash": "ignored"}, "k3y")
        True
    """
    joined = "".join(
        str(values[key]) for key in sorted(values) if key.lower() != HASH_FIELD
    )
    digest = hashlib.sha512((joined + integration_key).encode("utf-8")).hexdigest()
    return digest.upper()


def verify_hash(values: Mapping[str, str], integration_key: str) -> bool:
    received = values.get(HASH_FIELD) or values.get(HASH_FIELD.upper())
    if not received:
        return False
    expected = generate_hash(values, integration_key)
    return hmac.compare_digest(expected.encode("ascii"), str(received).upper().encode("utf-8"))


def parse_response(text: str) -> Dict[str, str]:
    """Parse a gateway reply into a dict with lower-cased keys.

    Accepts both ``&``-separated and newline-separated pairs.

    Example:
        >>> parse_response("status=Ok&browserurl=https%3A%2F%2Fpay&pollurl=https%3A%2F%2Fpoll")
        {'status': 'Ok', 'browserurl': 'https://pay', 'pollurl': 'https://poll'}
    """
    normalized = (text or "").strip().replace("\r\n", "&").replace("\n", "&")
    return {key.lower(): value for key, value in parse_qsl(normalized, keep_blank_values=True)}


def classify_status(status: str) -> PaymentOutcome:
    """Map a gateway transaction status onto the fee lifecycle."""
    normalized = (status or "").strip().lower()
    if normalized in SETTLED_STATUSES:
        return PaymentOutcome.SETTLED
    if normalized in FAILED_STATUSES:
        return PaymentOutcome.FAILED
    return PaymentOutcome.PENDING

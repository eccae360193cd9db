"""Request ID management for request correlation.

Provides context-aware request ID generation and propagation across async operations.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for request_id (async-safe)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Accept caller-supplied ids only when they are short and log-safe
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{8,128}$")


def generate_request_id() -> str:
    """Generate a new unique request ID (UUID v4)."""
    return str(uuid.uuid4())


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse an inbound X-Request-ID when well-formed, otherwise mint one.

    Example:
        >>> resolve_request_id("gateway-7f3a2c1d")
        'gateway-7f3a2c1d'
        >>> len(resolve_request_id("bad id\\n"))
        36
    """
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return generate_request_id()


def get_request_id() -> str:
    """Get current request ID from context, or "no-request-id" if not set."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)

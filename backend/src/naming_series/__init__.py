"""Naming series - year-scoped sequential identifiers"""

from .service import (
    APPLICATION_SERIES,
    MEMBER_SERIES,
    next_value,
    next_application_id,
    next_member_number,
    current_counters,
    format_identifier,
)

__all__ = [
    "APPLICATION_SERIES",
    "MEMBER_SERIES",
    "next_value",
    "next_application_id",
    "next_member_number",
    "current_counters",
    "format_identifier",
]

"""Calendar-aware age calculation"""

from datetime import date
from typing import Optional


MATURE_ENTRY_AGE = 27


def calculate_age(dob: date, today: Optional[date] = None) -> int:
    """Whole years elapsed since ``dob``.

    One year is subtracted when today's month/day precedes the birth
    month/day, so a birthday counts only once it has been reached.

    Example:
        >>> calculate_age(date(1990, 6, 15), date(2025, 6, 14))
        34
        >>> calculate_age(date(1990, 6, 15), date(2025, 6, 15))
        35
    """
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def is_mature_entry(dob: date, today: Optional[date] = None) -> bool:
    return calculate_age(dob, today) >= MATURE_ENTRY_AGE

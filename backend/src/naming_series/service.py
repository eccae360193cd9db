"""Naming series service.

Hands out human-readable identifiers such as ``IND-APP-2025-0001`` and
``EAC-MBR-2025-0042``. Each (series, year) pair has one counter row that is
incremented with a single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING``
statement, so concurrent callers (and concurrent service instances) never
receive the same number. The increment joins the caller's transaction: if
the surrounding unit of work rolls back, the number is not consumed.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from models.application import ApplicationType
from models.base import utcnow
from models.naming_series import NamingSeriesCounter

logger = logging.getLogger(__name__)

APPLICATION_SERIES = {
    ApplicationType.INDIVIDUAL: "IND-APP",
    ApplicationType.ORGANIZATION: "ORG-APP",
}

MEMBER_SERIES = {
    ApplicationType.INDIVIDUAL: "EAC-MBR",
    ApplicationType.ORGANIZATION: "EAC-ORG",
}


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"Naming series does not support the {dialect} dialect")


def next_value(db: Session, series: str, year: Optional[int] = None) -> int:
    """Atomically increment and return the counter for (series, year).

    Args:
        db: Database session
        series: Series name (e.g. "IND-APP")
        year: Calendar year; defaults to the current UTC year

    Returns:
        The new counter value, starting at 1 for a fresh (series, year)
    """
    year = year or datetime.now(timezone.utc).year
    insert = _insert_for(db)
    table = NamingSeriesCounter.__table__

    stmt = insert(table).values(
        series=series,
        year=year,
        current_value=1,
        updated_at=utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.series, table.c.year],
        set_={
            "current_value": table.c.current_value + 1,
            "updated_at": utcnow(),
        },
    ).returning(table.c.current_value)

    value = db.execute(stmt).scalar_one()
    logger.debug(f"Naming series {series}/{year} advanced to {value}")
    return value


def format_identifier(series: str, year: int, value: int) -> str:
    """Render a series value as ``{series}-{year}-{value:04d}``.

    Example:
        >>> format_identifier("IND-APP", 2025, 7)
        'IND-APP-2025-0007'
    """
    return f"{series}-{year}-{value:04d}"


def _next_identifier(db: Session, series: str, year: Optional[int]) -> str:
    year = year or datetime.now(timezone.utc).year
    return format_identifier(series, year, next_value(db, series, year))


def next_application_id(db: Session, kind: ApplicationType, year: Optional[int] = None) -> str:
    """Next application id for the applicant kind (IND-APP / ORG-APP)."""
    return _next_identifier(db, APPLICATION_SERIES[ApplicationType(kind)], year)


def next_member_number(db: Session, kind: ApplicationType, year: Optional[int] = None) -> str:
    """Next member number for the applicant kind (EAC-MBR / EAC-ORG)."""
    return _next_identifier(db, MEMBER_SERIES[ApplicationType(kind)], year)


def current_counters(db: Session) -> List[NamingSeriesCounter]:
    """All counters, newest year first."""
    return (
        db.query(NamingSeriesCounter)
        .order_by(NamingSeriesCounter.year.desc(), NamingSeriesCounter.series)
        .all()
    )

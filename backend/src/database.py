"""Database session factory and configuration.

Provides database connectivity, session management and the bounded retry
wrapper used around every state-changing unit of work.
"""

import logging
from typing import Callable, Generator, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATABASE_URL = settings.DATABASE_URL

# Create engine with connection pooling
# Pool settings only apply to PostgreSQL (not SQLite)
_engine_kwargs = {
    "pool_pre_ping": True,  # Verify connections before using
    "echo": False,  # Set to True for SQL query logging
}

if not DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10

engine = create_engine(DATABASE_URL, **_engine_kwargs)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


class TransientStorageError(Exception):
    """Raised when a unit of work keeps failing on lock contention or
    connection errors after all retries were spent."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Transaction failed after {attempts} attempts")


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/applications")
        def list_applications(db: Session = Depends(get_db)):
            return db.query(IndividualApplication).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_in_transaction(
    db: Session,
    work: Callable[[], T],
    max_attempts: int | None = None,
) -> T:
    """Run a unit of work and commit it, retrying transient failures.

    The callable must re-read everything it depends on, because a retry
    starts from a rolled-back session. Only ``OperationalError`` (deadlock,
    serialization failure, dropped connection) is retried; every other
    exception rolls back and propagates unchanged.

    Args:
        db: Database session
        work: Callable performing reads and writes on ``db``
        max_attempts: Override for ``DB_TRANSACTION_RETRIES``

    Returns:
        Whatever ``work`` returns

    Raises:
        TransientStorageError: If every attempt hit an OperationalError

    Example:
        application = run_in_transaction(
            db, lambda: submit_application(db, "IND-APP-2025-0001")
        )
    """
    attempts = max_attempts or settings.DB_TRANSACTION_RETRIES
    for attempt in range(1, attempts + 1):
        try:
            result = work()
            db.commit()
            return result
        except OperationalError as e:
            db.rollback()
            logger.warning(
                f"Transient database failure (attempt {attempt}/{attempts}): {e}"
            )
        except Exception:
            db.rollback()
            raise

    raise TransientStorageError(attempts)

"""Health checks for the registry backend.

The database is required to serve any request. Object storage is only
needed for uploads and the payment gateway only for online fees, so
problems with either degrade the service instead of failing it.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from domain.documents.ports import BlobStoreError, BlobStorePort

from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _elapsed_ms(start: float) -> float:
    return round((time.time() - start) * 1000, 2)


def check_database_health(db: Session) -> ComponentHealth:
    start = time.time()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message=f"Database error: {e}")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
        latency_ms=_elapsed_ms(start),
    )


def check_object_storage_health(blob_store: BlobStorePort) -> ComponentHealth:
    """Check that the uploads bucket is reachable.

    Returns:
        ComponentHealth: DEGRADED when the bucket cannot be reached
    """
    start = time.time()
    try:
        blob_store.check_available()
    except BlobStoreError as e:
        logger.warning(f"Object storage health check failed: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message=str(e))

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Object storage reachable",
        latency_ms=_elapsed_ms(start),
    )


def check_payment_gateway_config() -> ComponentHealth:
    """Report whether Paynow credentials are configured; no call is made."""
    if settings.PAYNOW_INTEGRATION_ID and settings.PAYNOW_INTEGRATION_KEY:
        return ComponentHealth(status=HealthStatus.HEALTHY, message="Paynow integration configured")
    return ComponentHealth(
        status=HealthStatus.DEGRADED,
        message="Paynow integration not configured; online fee payment unavailable",
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst component status wins.

    Example:
        >>> get_overall_health({"database": ComponentHealth(HealthStatus.HEALTHY)})
        <HealthStatus.HEALTHY: 'healthy'>
    """
    statuses = {c.status for c in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY

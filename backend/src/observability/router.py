"""Probe and metrics endpoints.

``/ready`` only needs the database; ``/health`` also reports object storage
and the payment gateway configuration, which can degrade the service
without taking it out of rotation.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from database import get_db
from domain.documents.ports import BlobStorePort
from infrastructure.storage import get_blob_store

from .health import (
    HealthStatus,
    check_database_health,
    check_object_storage_health,
    check_payment_gateway_config,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Prometheus exposition of the registry_* counters."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Component health",
    description="Database, object storage and payment gateway status; 503 only when the database is down",
)
def health_check(
    db: Session = Depends(get_db),
    blob_store: BlobStorePort = Depends(get_blob_store),
):
    components = {
        "database": check_database_health(db),
        "object_storage": check_object_storage_health(blob_store),
        "payment_gateway": check_payment_gateway_config(),
    }
    overall = get_overall_health(components)

    return JSONResponse(
        status_code=503 if overall == HealthStatus.UNHEALTHY else 200,
        content={
            "status": overall.value,
            "components": {
                name: {
                    "status": component.status.value,
                    "message": component.message,
                    "latency_ms": component.latency_ms,
                }
                for name, component in components.items()
            },
        },
    )


@router.get("/ready", summary="Readiness probe")
def readiness_check(db: Session = Depends(get_db)):
    db_health = check_database_health(db)
    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready", "message": "Application is ready to serve traffic"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "message": db_health.message},
    )

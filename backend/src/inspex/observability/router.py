"""Observability endpoints: metrics, health and readiness."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..database import get_db
from ..domain.storage.ports import ObjectStoragePort
from ..infrastructure.storage.storage_config import get_object_storage
from .health import (
    HealthStatus,
    check_broker_health,
    check_database_health,
    check_object_storage_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Prometheus exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_object_storage),
):
    """Component health. 503 only when the database is unreachable."""
    components = {
        "database": check_database_health(db),
        "broker": check_broker_health(),
        "object_storage": check_object_storage_health(storage),
    }
    overall_status = get_overall_health(components)

    return JSONResponse(
        content={
            "status": overall_status.value,
            "components": {
                name: {
                    "status": comp.status.value,
                    "message": comp.message,
                    "latency_ms": comp.latency_ms,
                }
                for name, comp in components.items()
            },
        },
        status_code=200 if overall_status != HealthStatus.UNHEALTHY else 503,
    )


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """Readiness check: the database must answer."""
    db_health = check_database_health(db)
    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready", "message": "Application is ready to serve traffic"}
    return JSONResponse(
        content={"status": "not_ready", "message": db_health.message},
        status_code=503,
    )

"""Health and readiness checks.

The database is critical. The message broker and object storage are not:
without them notifications queue up or certificates render on download, so
their failure degrades the service instead of failing it.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..config import get_settings
from ..domain.storage.ports import ObjectStoragePort

logger = logging.getLogger(__name__)


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
    critical: bool = True


def check_database_health(db: Session) -> ComponentHealth:
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message=f"Database error: {str(e)}")


def check_broker_health() -> ComponentHealth:
    """Ping the Redis broker used for notification tasks."""
    try:
        client = redis.from_url(get_settings().CELERY_BROKER_URL, socket_connect_timeout=2)
        start = time.time()
        client.ping()
        latency_ms = (time.time() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Broker connection OK",
            latency_ms=round(latency_ms, 2),
            critical=False,
        )
    except Exception as e:
        logger.warning(f"Broker health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY, message=f"Broker error: {str(e)}", critical=False
        )


def check_object_storage_health(storage: ObjectStoragePort) -> ComponentHealth:
    try:
        start = time.time()
        storage.verify_available()
        latency_ms = (time.time() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Object storage OK",
            latency_ms=round(latency_ms, 2),
            critical=False,
        )
    except Exception as e:
        logger.warning(f"Object storage health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY, message=f"Object storage error: {str(e)}", critical=False
        )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Unhealthy if a critical component is down, degraded if any other is."""
    if any(c.critical and c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY
    return HealthStatus.DEGRADED

"""Celery application.

Run a worker with:
    celery -A inspex.workers.celery_app worker --loglevel=info
"""

from celery import Celery
from celery.signals import setup_logging

from ..config import get_settings
from ..observability.logging_config import configure_logging

settings = get_settings()

celery_app = Celery(
    "inspex",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["inspex.workers.notification_worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_acks_late=True,
)


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the API's JSON log format on workers instead of Celery's."""
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

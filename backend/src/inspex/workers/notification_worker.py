"""Lifecycle notification worker.

Delivery is at-most-once: a failure is logged and counted, never retried, and
never affects the lifecycle transition that triggered it.
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

from ..domain.notifications.ports import LifecycleNotification, NotificationKind
from ..errors import DependencyFailure
from ..infrastructure.notifications.notifier_config import get_notifier
from ..infrastructure.storage.storage_config import get_object_storage
from ..observability.metrics import notifications_total
from .base import BaseTask

logger = logging.getLogger(__name__)


def _attach_certificate(notification: LifecycleNotification) -> None:
    if notification.kind != NotificationKind.CERTIFICATION_READY or not notification.certificate_path:
        return
    try:
        notification.pdf = get_object_storage().retrieve_file(notification.certificate_path)
    except (DependencyFailure, FileNotFoundError) as e:
        logger.warning(
            f"Sending certificate notification without attachment: {e}",
            extra={"door_id": notification.door.door_id},
        )


@shared_task(base=BaseTask, name="inspex.send_lifecycle_notification")
def send_lifecycle_notification(payload: Dict[str, Any], request_id: Optional[str] = None) -> Dict[str, Any]:
    """Send one lifecycle notification.

    Args:
        payload: ``LifecycleNotification.to_payload()`` output
        request_id: Request id of the originating HTTP request

    Returns:
        Dict with the delivery status
    """
    notification = LifecycleNotification.from_payload(payload)
    kind = notification.kind.value
    _attach_certificate(notification)

    try:
        get_notifier().notify(notification)
    except DependencyFailure as e:
        notifications_total.labels(kind, "failed").inc()
        logger.error(
            f"Failed to deliver {kind} notification for door {notification.door.serial_number}: {e}",
            extra={"door_id": notification.door.door_id},
        )
        return {"status": "failed", "error": str(e)}

    notifications_total.labels(kind, "sent").inc()
    return {"status": "sent", "recipients": len(notification.recipients)}

"""Post-commit delivery of lifecycle notifications.

Services call ``record()`` while the transaction is open. The session
listeners in ``inspex.database`` call ``flush_pending()`` after commit and
``discard_pending()`` after rollback. Dispatch failures are logged and
counted; they never reach the caller whose transition already committed.
"""

import logging
from typing import List, Protocol

from sqlalchemy.orm import Session

from ..config import get_settings
from ..domain.notifications.ports import LifecycleNotification
from ..observability.metrics import notifications_total
from ..observability.request_id import current_request_id

logger = logging.getLogger(__name__)

PENDING_KEY = "inspex.pending_notifications"


class NotificationDispatcher(Protocol):
    def dispatch(self, notification: LifecycleNotification) -> None:
        ...


class CeleryNotificationDispatcher:
    """Enqueue each notification as a background task."""

    def dispatch(self, notification: LifecycleNotification) -> None:
        from ..workers.celery_app import celery_app  # noqa: F401
        from ..workers.notification_worker import send_lifecycle_notification

        send_lifecycle_notification.delay(
            payload=notification.to_payload(),
            request_id=current_request_id(),
        )


_dispatcher: NotificationDispatcher = CeleryNotificationDispatcher()


def get_dispatcher() -> NotificationDispatcher:
    return _dispatcher


def set_dispatcher(dispatcher: NotificationDispatcher) -> NotificationDispatcher:
    """Replace the active dispatcher and return the previous one."""
    global _dispatcher
    previous = _dispatcher
    _dispatcher = dispatcher
    return previous


def record(session: Session, notification: LifecycleNotification) -> None:
    """Queue a notification for delivery once ``session`` commits."""
    session.info.setdefault(PENDING_KEY, []).append(notification)


def pending(session: Session) -> List[LifecycleNotification]:
    return list(session.info.get(PENDING_KEY, []))


def discard_pending(session: Session) -> None:
    dropped = session.info.pop(PENDING_KEY, None)
    if dropped:
        logger.info(f"Discarded {len(dropped)} notification(s) after rollback")


def flush_pending(session: Session) -> None:
    notifications = session.info.pop(PENDING_KEY, None)
    if not notifications:
        return

    if not get_settings().NOTIFICATIONS_ENABLED:
        for notification in notifications:
            notifications_total.labels(notification.kind.value, "skipped").inc()
        logger.info(f"Notifications disabled, skipped {len(notifications)}")
        return

    for notification in notifications:
        kind = notification.kind.value
        try:
            _dispatcher.dispatch(notification)
        except Exception as e:
            notifications_total.labels(kind, "dispatch_error").inc()
            logger.error(
                f"Failed to dispatch {kind} notification for door "
                f"{notification.door.serial_number}: {e}",
                extra={"door_id": notification.door.door_id, "kind": kind},
                exc_info=True,
            )
            continue
        notifications_total.labels(kind, "enqueued").inc()
        logger.info(
            f"Dispatched {kind} notification for door {notification.door.serial_number}",
            extra={"door_id": notification.door.door_id, "kind": kind},
        )

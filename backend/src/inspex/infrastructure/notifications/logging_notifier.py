"""NotifierPort that only logs. Used when SMTP is not configured."""

import logging

from ...domain.notifications.ports import LifecycleNotification, NotifierPort
from .templates import render_email

logger = logging.getLogger(__name__)


class LoggingNotifier(NotifierPort):
    def notify(self, notification: LifecycleNotification) -> None:
        subject, _, _ = render_email(notification)
        logger.info(
            f"[notification] {subject} -> {', '.join(notification.recipients) or '(no recipients)'}",
            extra={"door_id": notification.door.door_id},
        )

"""Select the notifier implementation from settings."""

from ...config import get_settings
from ...domain.notifications.ports import NotifierPort
from .logging_notifier import LoggingNotifier
from .smtp_notifier import SmtpNotifier


def get_notifier() -> NotifierPort:
    """SMTP when a host and sender are configured, logging otherwise."""
    settings = get_settings()
    if settings.SMTP_HOST and (settings.SMTP_FROM_EMAIL or settings.SMTP_USER):
        return SmtpNotifier(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=settings.SMTP_PASSWORD,
            from_email=settings.SMTP_FROM_EMAIL,
            from_name=settings.SMTP_FROM_NAME,
        )
    return LoggingNotifier()

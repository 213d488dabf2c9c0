"""SMTP implementation of NotifierPort (smtplib, STARTTLS)."""

import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ...domain.notifications.ports import LifecycleNotification, NotifierPort
from ...errors import DependencyFailure
from .templates import render_email

logger = logging.getLogger(__name__)


class SmtpNotifier(NotifierPort):
    """Send lifecycle notifications as multipart email.

    One message is sent to all recipients. A certificate PDF, when present,
    is attached.
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        from_email: str = "",
        from_name: str = "Door Inspection System",
        timeout: int = 10,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_email = from_email or smtp_user
        self.from_name = from_name
        self.timeout = timeout

    def build_message(self, notification: LifecycleNotification) -> MIMEMultipart:
        subject, text, html = render_email(notification)

        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = ", ".join(notification.recipients)

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(text, "plain"))
        body.attach(MIMEText(html, "html"))
        msg.attach(body)

        if notification.pdf:
            attachment = MIMEApplication(notification.pdf, _subtype="pdf")
            attachment.add_header(
                "Content-Disposition",
                "attachment",
                filename=f"certificate-{notification.door.serial_number}.pdf",
            )
            msg.attach(attachment)
        return msg

    def notify(self, notification: LifecycleNotification) -> None:
        if not notification.recipients:
            logger.info(
                f"No recipients for {notification.kind.value} notification "
                f"of door {notification.door.serial_number}"
            )
            return

        msg = self.build_message(notification)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, notification.recipients, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            raise DependencyFailure("SMTP authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            raise DependencyFailure(f"SMTP delivery failed: {e}") from e

        logger.info(
            f"Sent {notification.kind.value} email for door {notification.door.serial_number} "
            f"to {len(notification.recipients)} recipient(s)",
            extra={"door_id": notification.door.door_id},
        )

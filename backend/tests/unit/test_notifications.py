"""Unit tests for notification rendering, delivery and the worker task"""

import io
import smtplib

import pytest

from inspex.config import get_settings
from inspex.domain.notifications.ports import DoorSummary, LifecycleNotification, NotificationKind
from inspex.domain.storage.ports import StorageError
from inspex.errors import DependencyFailure
from inspex.infrastructure.notifications.logging_notifier import LoggingNotifier
from inspex.infrastructure.notifications.notifier_config import get_notifier
from inspex.infrastructure.notifications.smtp_notifier import SmtpNotifier
from inspex.infrastructure.notifications.templates import render_email
from inspex.notifications import dispatcher
from inspex.workers import notification_worker


pytestmark = pytest.mark.unit


def _notification(kind=NotificationKind.INSPECTION_COMPLETED, **kwargs):
    door = DoorSummary(
        door_id="d-1",
        serial_number="MF42-18-0006",
        drawing_number="S201",
        po_number="PO-1001",
        description="1.8 Meter 400 kPa Refuge Bay Door",
        size="1.8",
        pressure=400,
        job_number=None,
    )
    kwargs.setdefault("recipients", ["engineer@example.com"])
    return LifecycleNotification(kind=kind, door=door, actor_name="Ivan Inspector", **kwargs)


class RecordingNotifier:
    def __init__(self, error=None):
        self.delivered = []
        self.error = error

    def notify(self, notification):
        if self.error:
            raise self.error
        self.delivered.append(notification)


class TestTemplates:
    """Test email subjects and bodies"""

    @pytest.mark.parametrize("kind,subject", [
        (NotificationKind.INSPECTION_COMPLETED, "Inspection Completed - Door MF42-18-0006"),
        (NotificationKind.CERTIFICATION_READY, "Certificate Ready - Door MF42-18-0006"),
        (NotificationKind.REJECTED, "Inspection Rejected - Door MF42-18-0006"),
    ])
    def test_subjects(self, kind, subject):
        assert render_email(_notification(kind))[0] == subject

    def test_body_lists_door_details(self):
        _, text, _ = render_email(_notification())
        assert "Drawing Number: S201" in text
        assert "Pressure: 400 kPa" in text
        assert "Job Number: N/A" in text
        assert "Inspected By: Ivan Inspector" in text

    def test_reason_is_escaped_in_html(self):
        _, text, html = render_email(
            _notification(NotificationKind.REJECTED, reason="<b>seal</b> torn")
        )
        assert "Reason: <b>seal</b> torn" in text
        assert "&lt;b&gt;seal&lt;/b&gt; torn" in html
        assert "<b>seal</b>" not in html


class TestSmtpNotifier:
    """Test SMTP message building and failure mapping"""

    def test_message_with_attachment(self):
        notifier = SmtpNotifier("smtp.test", from_email="noreply@example.com")
        msg = notifier.build_message(
            _notification(NotificationKind.CERTIFICATION_READY, pdf=b"%PDF-1.4")
        )

        assert msg["To"] == "engineer@example.com"
        assert msg["From"] == "Door Inspection System <noreply@example.com>"
        filenames = [part.get_filename() for part in msg.walk() if part.get_filename()]
        assert filenames == ["certificate-MF42-18-0006.pdf"]

    def test_sender_defaults_to_smtp_user(self):
        notifier = SmtpNotifier("smtp.test", smtp_user="mailer@example.com")
        assert notifier.from_email == "mailer@example.com"

    def test_no_recipients_sends_nothing(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("SMTP should not be contacted")

        monkeypatch.setattr(smtplib, "SMTP", fail)
        SmtpNotifier("smtp.test", from_email="noreply@example.com").notify(_notification(recipients=[]))

    def test_connection_error_is_dependency_failure(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(smtplib, "SMTP", refuse)
        with pytest.raises(DependencyFailure):
            SmtpNotifier("smtp.test", from_email="noreply@example.com").notify(_notification())


class TestNotifierSelection:
    def test_logging_without_smtp_host(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "SMTP_HOST", "")
        assert isinstance(get_notifier(), LoggingNotifier)

    def test_logging_without_sender(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "SMTP_HOST", "smtp.test")
        monkeypatch.setattr(settings, "SMTP_USER", "")
        monkeypatch.setattr(settings, "SMTP_FROM_EMAIL", "")
        assert isinstance(get_notifier(), LoggingNotifier)

    def test_smtp_when_configured(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "SMTP_HOST", "smtp.test")
        monkeypatch.setattr(settings, "SMTP_FROM_EMAIL", "noreply@example.com")
        assert isinstance(get_notifier(), SmtpNotifier)


class TestDispatcher:
    """Test post-commit flushing"""

    def test_disabled_notifications_are_skipped(self, monkeypatch, db_session, recording_dispatcher):
        monkeypatch.setattr(get_settings(), "NOTIFICATIONS_ENABLED", False)
        dispatcher.record(db_session, _notification())
        db_session.commit()

        assert recording_dispatcher.sent == []
        assert dispatcher.pending(db_session) == []

    def test_flush_after_commit(self, db_session, recording_dispatcher):
        dispatcher.record(db_session, _notification())
        assert recording_dispatcher.sent == []

        db_session.commit()
        assert recording_dispatcher.kinds() == ["inspection_completed"]

    def test_payload_drops_pdf(self):
        notification = _notification(NotificationKind.CERTIFICATION_READY, pdf=b"%PDF", certificate_path="k")
        restored = LifecycleNotification.from_payload(notification.to_payload())

        assert "pdf" not in notification.to_payload()
        assert restored.pdf is None
        assert restored.certificate_path == "k"
        assert restored.door == notification.door


class TestNotificationWorker:
    """Test the background delivery task"""

    def test_sends(self, monkeypatch):
        notifier = RecordingNotifier()
        monkeypatch.setattr(notification_worker, "get_notifier", lambda: notifier)

        result = notification_worker.send_lifecycle_notification(payload=_notification().to_payload())

        assert result == {"status": "sent", "recipients": 1}
        assert notifier.delivered[0].door.serial_number == "MF42-18-0006"

    def test_delivery_failure_is_reported_not_raised(self, monkeypatch):
        notifier = RecordingNotifier(error=DependencyFailure("SMTP delivery failed"))
        monkeypatch.setattr(notification_worker, "get_notifier", lambda: notifier)

        result = notification_worker.send_lifecycle_notification(payload=_notification().to_payload())
        assert result["status"] == "failed"

    def test_attaches_certificate(self, monkeypatch, storage):
        key = storage.store_file(
            io.BytesIO(b"%PDF-1.4"), "certificates", "c.pdf", "application/pdf"
        ).storage_key
        notifier = RecordingNotifier()
        monkeypatch.setattr(notification_worker, "get_notifier", lambda: notifier)
        monkeypatch.setattr(notification_worker, "get_object_storage", lambda: storage)

        payload = _notification(NotificationKind.CERTIFICATION_READY, certificate_path=key).to_payload()
        notification_worker.send_lifecycle_notification(payload=payload)
        assert notifier.delivered[0].pdf == b"%PDF-1.4"

    @pytest.mark.parametrize("error", [FileNotFoundError("gone"), StorageError("down")])
    def test_missing_certificate_sends_without_attachment(self, monkeypatch, error):
        class Storage:
            def retrieve_file(self, key):
                raise error

        notifier = RecordingNotifier()
        monkeypatch.setattr(notification_worker, "get_notifier", lambda: notifier)
        monkeypatch.setattr(notification_worker, "get_object_storage", lambda: Storage())

        payload = _notification(NotificationKind.CERTIFICATION_READY, certificate_path="k").to_payload()
        result = notification_worker.send_lifecycle_notification(payload=payload)

        assert result["status"] == "sent"
        assert notifier.delivered[0].pdf is None

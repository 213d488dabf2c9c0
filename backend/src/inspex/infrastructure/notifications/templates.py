"""Email subjects and bodies for lifecycle notifications."""

from html import escape
from typing import Tuple

from ...domain.notifications.ports import LifecycleNotification, NotificationKind

SUBJECTS = {
    NotificationKind.INSPECTION_COMPLETED: "Inspection Completed - Door {serial}",
    NotificationKind.CERTIFICATION_READY: "Certificate Ready - Door {serial}",
    NotificationKind.REJECTED: "Inspection Rejected - Door {serial}",
}

HEADLINES = {
    NotificationKind.INSPECTION_COMPLETED: (
        "Door Ready for Certification",
        "A refuge bay door has completed inspection and is ready for your certification.",
    ),
    NotificationKind.CERTIFICATION_READY: (
        "Certificate Ready for Download",
        "The certification for the following door has been completed. "
        "The certificate PDF is attached when available.",
    ),
    NotificationKind.REJECTED: (
        "Certification Rejected",
        "The engineer rejected the inspection of the following door. "
        "The door must be re-inspected.",
    ),
}

ACTOR_LABELS = {
    NotificationKind.INSPECTION_COMPLETED: "Inspected By",
    NotificationKind.CERTIFICATION_READY: "Certified By",
    NotificationKind.REJECTED: "Rejected By",
}


def _details(notification: LifecycleNotification) -> list:
    door = notification.door
    rows = [
        ("Serial Number", door.serial_number),
        ("Drawing Number", door.drawing_number),
        ("PO Number", door.po_number or "N/A"),
        ("Size", f"{door.size}M"),
        ("Pressure", f"{door.pressure} kPa"),
        ("Job Number", door.job_number or "N/A"),
        (ACTOR_LABELS[notification.kind], notification.actor_name),
    ]
    if notification.reason:
        rows.append(("Reason", notification.reason))
    return rows


def render_email(notification: LifecycleNotification) -> Tuple[str, str, str]:
    """Return (subject, text body, html body)."""
    subject = SUBJECTS[notification.kind].format(serial=notification.door.serial_number)
    headline, intro = HEADLINES[notification.kind]
    rows = _details(notification)

    text = "\n".join(
        [headline, "", intro, ""]
        + [f"{label}: {value}" for label, value in rows]
        + ["", "Please log in to INSPEX for details."]
    )
    html_rows = "".join(
        f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>" for label, value in rows
    )
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h2>{escape(headline)}</h2>"
        f"<p>{escape(intro)}</p>"
        '<div style="background-color: #f3f4f6; padding: 20px; border-radius: 8px;">'
        f"<h3 style=\"margin-top: 0;\">Door Details:</h3>{html_rows}</div>"
        "<p>Please log in to INSPEX for details.</p>"
        "</div>"
    )
    return subject, text, html

"""ReportLab implementation of CertificateRendererPort.

Lays out a single-column A4 certificate: door information, the inspection
results and the engineer's certification block. Long results flow onto
further pages.
"""

import io
import logging
from datetime import datetime
from typing import Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ...domain.certificates.ports import (
    CertificateCheck,
    CertificateDoor,
    CertificateRendererPort,
)
from ...errors import DependencyFailure

logger = logging.getLogger(__name__)

TITLE = "REFUGE BAY DOOR INSPECTION CERTIFICATE"
CERTIFICATION_STATEMENT = (
    "I hereby certify that the above refuge bay door has been inspected "
    "and meets the required standards."
)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
LINE_HEIGHT = 6 * mm
BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"


def _format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "N/A"


class _Writer:
    """Top-down text cursor over a reportlab canvas."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.y = PAGE_HEIGHT - MARGIN

    def _ensure_room(self, lines: int = 1) -> None:
        if self.y - lines * LINE_HEIGHT < MARGIN:
            self.pdf.showPage()
            self.y = PAGE_HEIGHT - MARGIN

    def title(self, text: str) -> None:
        self.pdf.setFont(BOLD_FONT, 16)
        self.pdf.drawCentredString(PAGE_WIDTH / 2, self.y, text)
        self.y -= 2 * LINE_HEIGHT

    def heading(self, text: str) -> None:
        self._ensure_room(3)
        self.pdf.setFont(BOLD_FONT, 13)
        self.pdf.drawString(MARGIN, self.y, text)
        self.pdf.line(MARGIN, self.y - 1.5 * mm, PAGE_WIDTH - MARGIN, self.y - 1.5 * mm)
        self.y -= 1.5 * LINE_HEIGHT

    def text(self, text: str, indent: float = 0, size: int = 11) -> None:
        width = PAGE_WIDTH - 2 * MARGIN - indent
        for line in simpleSplit(text, BODY_FONT, size, width) or [""]:
            self._ensure_room()
            self.pdf.setFont(BODY_FONT, size)
            self.pdf.drawString(MARGIN + indent, self.y, line)
            self.y -= LINE_HEIGHT

    def gap(self, lines: float = 1) -> None:
        self.y -= lines * LINE_HEIGHT


class ReportlabCertificateRenderer(CertificateRendererPort):
    """Render inspection certificates with reportlab's canvas API."""

    def render(
        self,
        door: CertificateDoor,
        checks: Sequence[CertificateCheck],
        engineer: str,
        signature: Optional[str],
        certified_at: datetime,
    ) -> bytes:
        try:
            buffer = io.BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=A4)
            pdf.setTitle(f"{TITLE} - {door.serial_number}")
            writer = _Writer(pdf)

            writer.title(TITLE)

            writer.heading("DOOR INFORMATION")
            writer.text(f"PO Number: {door.po_number or 'N/A'}")
            writer.text(f"Serial Number: {door.serial_number}")
            writer.text(f"Drawing Number: {door.drawing_number}")
            writer.text(f"Description: {door.description}")
            writer.text(f"Door Type: {door.door_type}")
            writer.text(f"Pressure Rating: {door.pressure} kPa")
            writer.text(f"Inspection Date: {_format_date(door.inspection_date)}")
            writer.text(f"Inspector: {door.inspector_name or 'N/A'}")
            writer.gap()

            writer.heading("INSPECTION RESULTS")
            if not checks:
                writer.text("No inspection points recorded.")
            for index, check in enumerate(checks, start=1):
                result = "PASS" if check.is_checked else "FAIL"
                writer.text(f"{index}. {check.name}: {result}")
                if check.notes:
                    writer.text(f"Notes: {check.notes}", indent=8 * mm, size=10)
            writer.gap(2)

            writer.heading("CERTIFICATION")
            writer.text(CERTIFICATION_STATEMENT)
            writer.gap()
            writer.text(f"Engineer: {engineer}")
            writer.text(f"Date: {_format_date(certified_at)}")
            writer.text(
                "Signature: "
                + ("[Digital Signature Applied]" if signature else "[No Signature]")
            )

            pdf.showPage()
            pdf.save()
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"Certificate rendering failed for {door.serial_number}: {e}")
            raise DependencyFailure(f"Certificate rendering failed: {e}") from e


def get_certificate_renderer() -> CertificateRendererPort:
    """FastAPI dependency for the certificate renderer."""
    return ReportlabCertificateRenderer()

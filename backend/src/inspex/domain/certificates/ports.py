"""Certificate Renderer Port - Domain interface for certificate PDFs.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence


@dataclass
class CertificateDoor:
    """Door and inspection details printed on the certificate."""
    po_number: Optional[str]
    serial_number: str
    drawing_number: str
    description: str
    pressure: int
    size: str
    door_type: str
    inspection_date: Optional[datetime]
    inspector_name: Optional[str]


@dataclass
class CertificateCheck:
    """One inspection point result."""
    name: str
    description: Optional[str]
    is_checked: bool
    notes: Optional[str] = None


def certificate_filename(serial_number: str, certified_at: datetime) -> str:
    return f"certificate-{serial_number}-{certified_at.strftime('%Y%m%d%H%M%S')}.pdf"


class CertificateRendererPort(ABC):
    """Port interface for rendering certification documents."""

    @abstractmethod
    def render(
        self,
        door: CertificateDoor,
        checks: Sequence[CertificateCheck],
        engineer: str,
        signature: Optional[str],
        certified_at: datetime,
    ) -> bytes:
        """Render a certificate and return the PDF bytes.

        Raises:
            DependencyFailure: If rendering fails
        """
        pass

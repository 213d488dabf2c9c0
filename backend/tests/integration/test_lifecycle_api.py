"""Integration tests for the door lifecycle over HTTP

Tests cover:
- Door registration, editing and the error envelope
- Inspection start, checklist updates, photo upload and completion
- Review, certification with stored signatures, rejection and certificate download
- Administrative deletion of certifications and inspections
"""

import pytest
from fastapi.testclient import TestClient

from inspex.domain.certificates.ports import CertificateRendererPort
from inspex.errors import DependencyFailure
from inspex.infrastructure.pdf.certificate_renderer import get_certificate_renderer
from inspex.main import app


pytestmark = pytest.mark.integration

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class BrokenRenderer(CertificateRendererPort):
    def render(self, door, checks, engineer, signature, certified_at) -> bytes:
        raise DependencyFailure("Certificate rendering failed: no fonts")


class TestDoorEndpoints:
    """Test /api/v1/doors"""

    def test_create_door(self, client: TestClient, inspection_points, admin_headers):
        response = client.post(
            "/api/v1/doors",
            json={"po_number": "PO-1001", "door_number": 6, "size": "1.8", "pressure": 400, "job_number": "J-77"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["serial_number"] == "MF42-18-0006"
        assert data["drawing_number"] == "S201"
        assert data["description"] == "1.8 Meter 400 kPa Refuge Bay Door"
        assert data["door_type"] == "V1"
        assert data["inspection_status"] == "pending"
        assert data["certification_status"] == "pending"

    def test_unknown_size_uses_error_envelope(self, client: TestClient, inspection_points, admin_headers):
        response = client.post(
            "/api/v1/doors",
            json={"po_number": "PO-1", "door_number": 1, "size": "2.4", "pressure": 400},
            headers=admin_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert "2.4" in body["message"]

    def test_duplicate_serial(self, client: TestClient, door, admin_headers):
        response = client.post(
            "/api/v1/doors",
            json={"po_number": "PO-1001", "door_number": 6, "size": "1.8", "pressure": 400},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_missing_fields(self, client: TestClient, admin_headers):
        response = client.post("/api/v1/doors", json={"po_number": "PO-1"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["details"]

    def test_list_and_queues(self, client: TestClient, inspected_door, client_headers):
        listing = client.get("/api/v1/doors", params={"q": "MF42"}, headers=client_headers).json()
        assert listing["total"] == 1

        pending = client.get("/api/v1/doors/status/pending-certification", headers=client_headers).json()
        assert [d["id"] for d in pending] == [str(inspected_door.id)]
        assert client.get("/api/v1/doors/status/pending-inspection", headers=client_headers).json() == []

    def test_history(self, client: TestClient, inspected_door, client_headers):
        response = client.get(f"/api/v1/doors/{inspected_door.id}/history", headers=client_headers)
        assert [e["action"] for e in response.json()] == [
            "DOOR_CREATED", "INSPECTION_STARTED", "INSPECTION_COMPLETED",
        ]

    def test_edit_door(self, client: TestClient, door, inspector_headers):
        response = client.put(
            f"/api/v1/doors/{door.id}",
            json={"job_number": "J-88", "description": "Refurbished door"},
            headers=inspector_headers,
        )
        assert response.status_code == 200
        assert response.json()["job_number"] == "J-88"
        assert response.json()["description"] == "Refurbished door"
        assert response.json()["serial_number"] == "MF42-18-0006"

    def test_edit_fixed_field_refused(self, client: TestClient, door, admin_headers):
        response = client.put(
            f"/api/v1/doors/{door.id}",
            json={"serial_number": "MF42-18-0099"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        assert "serial_number" in response.json()["message"]

    def test_engineer_cannot_edit(self, client: TestClient, door, engineer_headers):
        response = client.put(
            f"/api/v1/doors/{door.id}", json={"job_number": "J-1"}, headers=engineer_headers
        )
        assert response.status_code == 403

    def test_unknown_door(self, client: TestClient, client_headers):
        response = client.get(
            "/api/v1/doors/00000000-0000-0000-0000-000000000000", headers=client_headers
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestInspectionEndpoints:
    """Test /api/v1/inspections"""

    def test_inspect_door(self, client: TestClient, door, inspector_headers, engineer_user, recording_dispatcher):
        started = client.post(f"/api/v1/inspections/start/{door.id}", headers=inspector_headers)
        assert started.status_code == 201
        inspection = started.json()
        assert inspection["status"] == "in_progress"
        assert inspection["checks_total"] == 13
        assert inspection["checks"][0]["point_name"] == "Drawing Number Confirmation"

        check_id = inspection["checks"][0]["id"]
        updated = client.put(
            f"/api/v1/inspections/checks/{check_id}",
            json={"is_checked": True, "notes": "Matches S201"},
            headers=inspector_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["is_checked"] is True
        assert updated.json()["checked_at"] is not None

        photo = client.post(
            f"/api/v1/inspections/checks/{check_id}/photo",
            files={"file": ("plate.png", PNG, "image/png")},
            headers=inspector_headers,
        )
        assert photo.status_code == 200
        assert photo.json()["photo_path"].startswith("inspection-photos/")

        active = client.get(f"/api/v1/inspections/door/{door.id}/active", headers=inspector_headers)
        assert active.json()["checks_completed"] == 1

        completed = client.post(
            f"/api/v1/inspections/complete/{inspection['id']}",
            json={"notes": "All good"},
            headers=inspector_headers,
        )
        assert completed.status_code == 200
        assert completed.json()["status"] == "completed"
        assert recording_dispatcher.kinds() == ["inspection_completed"]
        assert recording_dispatcher.sent[0].recipients == ["engineer@example.com"]

        door_state = client.get(f"/api/v1/doors/{door.id}", headers=inspector_headers).json()
        assert door_state["inspection_status"] == "completed"

    def test_double_start_conflicts(self, client: TestClient, door, inspector_headers):
        client.post(f"/api/v1/inspections/start/{door.id}", headers=inspector_headers)
        response = client.post(f"/api/v1/inspections/start/{door.id}", headers=inspector_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_state"

    def test_photo_must_be_image(self, client: TestClient, door, inspector_headers):
        inspection = client.post(f"/api/v1/inspections/start/{door.id}", headers=inspector_headers).json()
        response = client.post(
            f"/api/v1/inspections/checks/{inspection['checks'][0]['id']}/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=inspector_headers,
        )
        assert response.status_code == 422

    def test_engineer_cannot_start(self, client: TestClient, door, engineer_headers):
        response = client.post(f"/api/v1/inspections/start/{door.id}", headers=engineer_headers)
        assert response.status_code == 403

    def test_admin_deletes_only_inspection(self, client: TestClient, db_session, inspected_door, admin_headers):
        inspection = client.get(
            "/api/v1/inspections", params={"door_id": str(inspected_door.id)}, headers=admin_headers
        ).json()["items"][0]

        response = client.delete(f"/api/v1/inspections/{inspection['id']}", headers=admin_headers)
        assert response.status_code == 204

        door_state = client.get(f"/api/v1/doors/{inspected_door.id}", headers=admin_headers).json()
        assert door_state["inspection_status"] == "pending"
        assert door_state["certification_status"] == "pending"

    def test_deleting_open_reinspection_keeps_door_in_progress(
        self, client: TestClient, inspected_door, inspector_headers, admin_headers
    ):
        second = client.post(
            f"/api/v1/inspections/start/{inspected_door.id}", headers=inspector_headers
        ).json()

        response = client.delete(f"/api/v1/inspections/{second['id']}", headers=admin_headers)
        assert response.status_code == 204

        door_state = client.get(f"/api/v1/doors/{inspected_door.id}", headers=admin_headers).json()
        assert door_state["inspection_status"] == "in_progress"
        assert door_state["certification_status"] == "pending"

        restarted = client.post(f"/api/v1/inspections/start/{inspected_door.id}", headers=inspector_headers)
        assert restarted.status_code == 201


class TestCertificationEndpoints:
    """Test /api/v1/certifications"""

    def test_review_certify_download(
        self, client: TestClient, inspected_door, engineer_headers, client_headers, recording_dispatcher
    ):
        recording_dispatcher.sent.clear()

        review = client.post(f"/api/v1/certifications/review/{inspected_door.id}", headers=engineer_headers)
        assert review.status_code == 200
        assert review.json()["certification_status"] == "under_review"

        inspection = client.get(
            f"/api/v1/certifications/door/{inspected_door.id}/inspection", headers=engineer_headers
        )
        assert inspection.status_code == 200
        assert len(inspection.json()["checks"]) == 13

        certified = client.post(
            f"/api/v1/certifications/certify/{inspected_door.id}",
            json={"signature": "data:image/png;base64,AAAA"},
            headers=engineer_headers,
        )
        assert certified.status_code == 201
        data = certified.json()
        assert data["engineer_name"] == "Erin Engineer"
        assert data["has_certificate_pdf"] is True
        assert data["signed"] is True
        assert recording_dispatcher.kinds() == ["certification_ready"]

        download = client.get(f"/api/v1/certifications/download/{inspected_door.id}", headers=client_headers)
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert 'filename="certificate-MF42-18-0006-' in download.headers["content-disposition"]
        assert download.content.startswith(b"%PDF")

    def test_certify_with_stored_signature(
        self, client: TestClient, inspected_door, engineer_user, engineer_headers, client_headers
    ):
        uploaded = client.post(
            f"/api/v1/users/{engineer_user.id}/signature",
            files={"file": ("signature.png", PNG, "image/png")},
            headers=engineer_headers,
        )
        assert uploaded.status_code == 200
        assert uploaded.json()["has_signature"] is True

        certified = client.post(
            f"/api/v1/certifications/certify/{inspected_door.id}", headers=engineer_headers
        )
        assert certified.status_code == 201
        assert certified.json()["signed"] is True

        completed = client.get("/api/v1/certifications/completed", headers=client_headers)
        assert completed.status_code == 200
        [entry] = completed.json()
        assert entry["serial_number"] == "MF42-18-0006"
        assert entry["drawing_number"] == "S201"
        assert entry["po_number"] == "PO-1001"
        assert entry["engineer_name"] == "Erin Engineer"

    def test_certify_twice(self, client: TestClient, inspected_door, engineer_headers):
        client.post(f"/api/v1/certifications/certify/{inspected_door.id}", headers=engineer_headers)
        response = client.post(f"/api/v1/certifications/certify/{inspected_door.id}", headers=engineer_headers)

        assert response.status_code == 409
        assert "already certified" in response.json()["message"]

    def test_inspector_cannot_certify(self, client: TestClient, inspected_door, inspector_headers):
        response = client.post(
            f"/api/v1/certifications/certify/{inspected_door.id}", headers=inspector_headers
        )
        assert response.status_code == 403

    def test_reject_and_reinspect(
        self, client: TestClient, inspected_door, engineer_headers, inspector_headers, admin_user
    ):
        rejected = client.post(
            f"/api/v1/certifications/reject/{inspected_door.id}",
            json={"reason": "Seal damaged"},
            headers=engineer_headers,
        )
        assert rejected.status_code == 200
        assert rejected.json()["inspection_status"] == "pending"
        assert rejected.json()["certification_status"] == "rejected"
        assert rejected.json()["rejection_reason"] == "Seal damaged"

        pending = client.get("/api/v1/doors/status/pending-inspection", headers=inspector_headers).json()
        assert [d["id"] for d in pending] == [str(inspected_door.id)]

        restarted = client.post(f"/api/v1/inspections/start/{inspected_door.id}", headers=inspector_headers)
        assert restarted.status_code == 201

    def test_reject_requires_reason(self, client: TestClient, inspected_door, engineer_headers):
        response = client.post(
            f"/api/v1/certifications/reject/{inspected_door.id}",
            json={"reason": "   "},
            headers=engineer_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_download_without_certification(self, client: TestClient, inspected_door, client_headers):
        response = client.get(f"/api/v1/certifications/download/{inspected_door.id}", headers=client_headers)
        assert response.status_code == 404

    def test_download_when_rendering_fails(self, client: TestClient, inspected_door, engineer_headers):
        app.dependency_overrides[get_certificate_renderer] = lambda: BrokenRenderer()

        certified = client.post(
            f"/api/v1/certifications/certify/{inspected_door.id}", headers=engineer_headers
        )
        assert certified.status_code == 201
        assert certified.json()["has_certificate_pdf"] is False

        response = client.get(
            f"/api/v1/certifications/download/{inspected_door.id}", headers=engineer_headers
        )
        assert response.status_code == 503
        assert response.json()["error"] == "dependency_failure"

    def test_admin_deletes_certification(
        self, client: TestClient, inspected_door, engineer_headers, admin_headers
    ):
        certification = client.post(
            f"/api/v1/certifications/certify/{inspected_door.id}", headers=engineer_headers
        ).json()

        assert client.delete(
            f"/api/v1/certifications/{certification['id']}", headers=engineer_headers
        ).status_code == 403

        response = client.delete(f"/api/v1/certifications/{certification['id']}", headers=admin_headers)
        assert response.status_code == 204

        door_state = client.get(f"/api/v1/doors/{inspected_door.id}", headers=admin_headers).json()
        assert door_state["inspection_status"] == "completed"
        assert door_state["certification_status"] == "pending"
        listing = client.get(
            "/api/v1/certifications", params={"door_id": str(inspected_door.id)}, headers=admin_headers
        ).json()
        assert listing["total"] == 0

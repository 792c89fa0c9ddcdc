"""
HTTP API tests.

Repository, OCR engine and image store are overridden; startup
(database creation) is not run by the ASGI transport.
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from kycscan.api.main import app
from kycscan.api.routes.kyc import get_image_store, get_ocr_engine, get_repository
from kycscan.core.errors import EnvironmentUnavailable
from kycscan.infrastructure.db.repository import InMemoryDocumentRepository
from kycscan.infrastructure.storage.local_image_store import LocalImageStore
from tests.fakes import FailingRepository, FakeOCREngine
from tests.samples import AADHAAR_FRONT, PAN_CARD

API = "/api/v1"


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def ocr_engine() -> FakeOCREngine:
    return FakeOCREngine(PAN_CARD)


@pytest.fixture
async def client(upload_dir, ocr_engine) -> AsyncGenerator[AsyncClient, None]:
    """Test client with in-memory persistence and a fake OCR engine."""
    repository = InMemoryDocumentRepository()
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_ocr_engine] = lambda: ocr_engine
    app.dependency_overrides[get_image_store] = lambda: LocalImageStore(str(upload_dir))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _submit_pan(client, user_id="user-1"):
    return await client.post(f"{API}/kyc/pan/submit", json={
        "user_id": user_id,
        "fields": {"pan_number": "abcde1234f", "full_name": "rahul sharma"},
        "confirmed": True,
    })


# ─── Extract ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_extract_from_text(client):
    """Device-side OCR text is turned into fields."""
    response = await client.post(f"{API}/kyc/aadhaar/extract", json={"text": AADHAAR_FRONT})

    assert response.status_code == 200
    data = response.json()
    assert data["fields"]["aadhaar_number"] == "836457892230"
    assert data["is_manual_entry"] is False
    assert data["summary"].endswith("XXXX-XXXX-2230")
    assert any(d["strategy"] == "single_line" for d in data["diagnostics"])


@pytest.mark.asyncio
async def test_extract_unknown_document_type(client):
    response = await client.post(f"{API}/kyc/passport/extract", json={"text": "x"})
    assert response.status_code == 422


# ─── Scan ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_scan_uploaded_image(client, upload_dir, ocr_engine):
    """The uploaded image is recognized and removed from disk."""
    response = await client.post(
        f"{API}/kyc/pan/scan",
        files={"file": ("pan.jpg", b"\xff\xd8fake-jpeg", "image/jpeg")},
        data={"user_id": "user-1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["fields"]["pan_number"] == "ABCDE1234F"
    assert data["ocr_error"] is None
    assert len(ocr_engine.calls) == 1
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_scan_without_ocr_support_opens_manual_form(client, upload_dir, ocr_engine):
    ocr_engine.error = EnvironmentUnavailable("paddleocr not installed")

    response = await client.post(
        f"{API}/kyc/gst/scan",
        files={"file": ("gst.png", b"\x89PNGfake", "image/png")},
        data={"user_id": "user-1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["ocr_error"] == "environment_unavailable"
    assert data["is_manual_entry"] is True
    assert set(data["fields"].values()) == {""}
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_scan_rejects_non_image(client):
    response = await client.post(
        f"{API}/kyc/pan/scan",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"user_id": "user-1"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_scan_rejects_empty_file(client):
    response = await client.post(
        f"{API}/kyc/pan/scan",
        files={"file": ("pan.jpg", b"", "image/jpeg")},
        data={"user_id": "user-1"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_scan_of_pending_document_is_refused(client, upload_dir, ocr_engine):
    await _submit_pan(client)

    response = await client.post(
        f"{API}/kyc/pan/scan",
        files={"file": ("pan.jpg", b"\xff\xd8fake-jpeg", "image/jpeg")},
        data={"user_id": "user-1"},
    )

    assert response.status_code == 409
    assert ocr_engine.calls == []
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_scan_requires_user(client, upload_dir, ocr_engine):
    """Without a user the stored status cannot be checked, so nothing is scanned."""
    await _submit_pan(client)

    response = await client.post(
        f"{API}/kyc/pan/scan",
        files={"file": ("pan.jpg", b"\xff\xd8fake-jpeg", "image/jpeg")},
    )

    assert response.status_code == 422
    assert ocr_engine.calls == []
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


# ─── Submit ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_submit_reviewed_fields(client):
    response = await _submit_pan(client)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["document_number"] == "ABCDE1234F"
    assert data["name"] == "RAHUL SHARMA"


@pytest.mark.asyncio
async def test_submit_requires_confirmation(client):
    response = await client.post(f"{API}/kyc/aadhaar/submit", json={
        "user_id": "user-1",
        "fields": {"aadhaar_number": "836457892230"},
    })

    assert response.status_code == 422
    assert response.json()["detail"] == {
        "requirement": "confirmation",
        "message": "Please confirm that the Aadhaar details are correct.",
    }


@pytest.mark.asyncio
async def test_submit_unknown_field(client):
    response = await client.post(f"{API}/kyc/pan/submit", json={
        "user_id": "user-1",
        "fields": {"gstin": "27AAAAA0000A1Z5"},
        "confirmed": True,
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_resubmit_while_pending_conflicts(client):
    await _submit_pan(client)
    response = await _submit_pan(client)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_submit_persistence_failure(client):
    app.dependency_overrides[get_repository] = lambda: FailingRepository()

    response = await _submit_pan(client)

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to submit document. Please try again."


# ─── Status & review ────────────────────────────────────────

@pytest.mark.asyncio
async def test_status_of_new_user(client):
    response = await client.get(f"{API}/kyc/user-1/status")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_status"] == "pending"
    assert data["is_verified"] is False
    by_type = {d["document_type"]: d for d in data["documents"]}
    assert set(by_type) == {"aadhaar", "pan", "electricity_bill", "gst", "society_registration"}
    assert by_type["gst"]["required"] is False
    assert all(d["can_upload"] and d["can_use_ocr"] for d in data["documents"])


@pytest.mark.asyncio
async def test_review_rejection_reopens_upload(client):
    document_id = (await _submit_pan(client)).json()["id"]

    status = (await client.get(f"{API}/kyc/user-1/status")).json()
    pan = next(d for d in status["documents"] if d["document_type"] == "pan")
    assert pan["status"] == "pending"
    assert pan["can_upload"] is False

    response = await client.post(
        f"{API}/kyc/documents/{document_id}/review",
        json={"status": "rejected", "reason": "Photo unreadable"},
    )
    assert response.status_code == 200

    status = (await client.get(f"{API}/kyc/user-1/status")).json()
    pan = next(d for d in status["documents"] if d["document_type"] == "pan")
    assert status["overall_status"] == "rejected"
    assert pan["can_use_ocr"] is True
    assert pan["rejection_reason"] == "Photo unreadable"


@pytest.mark.asyncio
async def test_review_invalid_transition(client):
    document_id = (await _submit_pan(client)).json()["id"]
    await client.post(f"{API}/kyc/documents/{document_id}/review", json={"status": "verified"})

    response = await client.post(
        f"{API}/kyc/documents/{document_id}/review", json={"status": "rejected"}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("decision", ["pending", "not_started"])
async def test_review_cannot_reopen_rejected_document(client, decision):
    """Only a new submission moves a rejected document back to pending."""
    document_id = (await _submit_pan(client)).json()["id"]
    await client.post(f"{API}/kyc/documents/{document_id}/review", json={"status": "rejected"})

    response = await client.post(
        f"{API}/kyc/documents/{document_id}/review", json={"status": decision}
    )

    assert response.status_code == 422
    status = (await client.get(f"{API}/kyc/user-1/status")).json()
    pan = next(d for d in status["documents"] if d["document_type"] == "pan")
    assert pan["status"] == "rejected"


@pytest.mark.asyncio
async def test_review_unknown_document(client):
    response = await client.post(
        f"{API}/kyc/documents/missing/review", json={"status": "verified"}
    )
    assert response.status_code == 404


# ─── Formatters & health ────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize("formatter, payload, expected", [
    ("date", {"value": "15081990"}, "15/08/1990"),
    ("id_code", {"value": "abcde-1234f", "max_len": 10}, "ABCDE1234F"),
    ("numeric", {"value": "Rs 245 kWh"}, "245"),
    ("registration_number", {"value": "mum/hsg 1234"}, "MUM/HSG1234"),
    ("mask", {"value": "836457892230"}, "XXXX-XXXX-2230"),
])
async def test_formatters(client, formatter, payload, expected):
    response = await client.post(f"{API}/format/{formatter}", json=payload)
    assert response.status_code == 200
    assert response.json()["value"] == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("max_len", [0, -1])
async def test_id_code_length_must_be_positive(client, max_len):
    response = await client.post(
        f"{API}/format/id_code", json={"value": "ABCDE1234F", "max_len": max_len}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_formatter(client):
    response = await client.post(f"{API}/format/roman", json={"value": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

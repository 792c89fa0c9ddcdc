"""
Scan orchestrator tests.

OCR, image store and repository are replaced with in-process fakes;
no model or database is needed.
"""

import asyncio

import pytest

from kycscan.core.entities.document import DocStatus, DocType
from kycscan.core.errors import (
    DocumentLocked,
    EnvironmentUnavailable,
    KYCError,
    RecognitionFailed,
    ScanInProgress,
    SubmissionRejected,
)
from kycscan.core.use_cases.scan_document import ScanDocumentUseCase, ScanState
from kycscan.core.use_cases.submit_document import SubmitDocumentUseCase
from kycscan.infrastructure.extractors import get_extractor
from tests.fakes import BlockingOCREngine, FakeImageStore, FakeOCREngine
from tests.samples import AADHAAR_BACK, AADHAAR_FRONT, PAN_CARD


def _session(doc_type, engine, image_store, **kwargs):
    return ScanDocumentUseCase(
        doc_type=doc_type,
        ocr_engine=engine,
        image_store=image_store,
        extractor=get_extractor(doc_type),
        **kwargs,
    )


# ─── Scan ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_successful_scan_fills_form_and_deletes_image(image_store):
    """A readable Aadhaar front auto-fills the form."""
    session = _session(DocType.AADHAAR, FakeOCREngine(AADHAAR_FRONT), image_store)

    outcome = await session.scan("img-1")

    assert outcome.ocr_error is None
    assert outcome.stale is False
    assert outcome.record.get("aadhaar_number") == "836457892230"
    assert outcome.classification.is_manual_entry is False
    assert outcome.summary.endswith("Aadhaar: XXXX-XXXX-2230")
    assert session.state == ScanState.FORM_DISPLAYED
    assert session.is_manual_entry is False
    assert session.busy is False
    assert image_store.deleted == ["img-1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error, code", [
    (EnvironmentUnavailable("paddleocr not installed"), "environment_unavailable"),
    (RecognitionFailed("no text"), "recognition_failed"),
    (RuntimeError("boom"), "ocr_error"),
])
async def test_ocr_failure_falls_back_to_manual_entry(image_store, error, code):
    """OCR errors never propagate; the form opens empty for manual entry."""
    session = _session(DocType.PAN, FakeOCREngine(error=error), image_store)

    outcome = await session.scan("img-1")

    assert outcome.ocr_error == code
    assert outcome.record.is_empty()
    assert outcome.classification.is_manual_entry is True
    assert session.is_manual_entry is True
    assert session.state == ScanState.FORM_DISPLAYED
    assert image_store.deleted == ["img-1"]


@pytest.mark.asyncio
async def test_image_deletion_failure_is_not_fatal():
    store = FakeImageStore(fail=True)
    session = _session(DocType.PAN, FakeOCREngine(PAN_CARD), store)

    outcome = await session.scan("img-1")

    assert outcome.record.get("pan_number") == "ABCDE1234F"
    assert store.deleted == ["img-1"]


@pytest.mark.asyncio
async def test_rescan_never_keeps_previous_values(image_store):
    """A blurry second scan must not show the first scan's number."""
    engine = FakeOCREngine(AADHAAR_FRONT)
    session = _session(DocType.AADHAAR, engine, image_store)
    await session.scan("img-1")
    session.confirm()

    engine.text = "GOVERNMENT OF INDIA\nBlurry"
    outcome = await session.scan("img-2")

    assert outcome.record.get("aadhaar_number") == ""
    assert outcome.record.get("date_of_birth") == ""
    assert session.confirmed is False
    assert session.is_manual_entry is True
    assert session.generation == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [DocStatus.PENDING, DocStatus.VERIFIED])
async def test_locked_document_refuses_scan(image_store, status):
    engine = FakeOCREngine(AADHAAR_FRONT)
    session = _session(DocType.AADHAAR, engine, image_store, status=status)

    with pytest.raises(DocumentLocked):
        await session.scan("img-1")
    with pytest.raises(DocumentLocked):
        session.start_manual_entry()
    assert engine.calls == []


@pytest.mark.asyncio
async def test_rejected_document_can_be_rescanned(image_store):
    session = _session(
        DocType.PAN, FakeOCREngine(PAN_CARD), image_store, status=DocStatus.REJECTED
    )
    outcome = await session.scan("img-1")
    assert outcome.record.get("pan_number") == "ABCDE1234F"


# ─── Concurrency ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_second_capture_while_busy_is_refused(image_store):
    engine = BlockingOCREngine(PAN_CARD)
    session = _session(DocType.PAN, engine, image_store)

    task = asyncio.create_task(session.scan("img-1"))
    await engine.started.wait()
    assert session.busy is True
    assert session.state == ScanState.OCR_RUNNING

    with pytest.raises(ScanInProgress):
        await session.scan("img-2")
    with pytest.raises(ScanInProgress):
        session.start_manual_entry()

    engine.release.set()
    outcome = await task
    assert outcome.record.get("pan_number") == "ABCDE1234F"
    assert session.busy is False


@pytest.mark.asyncio
async def test_result_arriving_after_discard_is_dropped(image_store):
    """Retake while OCR runs: the late result must not fill the form."""
    engine = BlockingOCREngine(AADHAAR_FRONT)
    session = _session(DocType.AADHAAR, engine, image_store)

    task = asyncio.create_task(session.scan("img-1"))
    await engine.started.wait()
    session.discard()
    engine.release.set()
    outcome = await task

    assert outcome.stale is True
    assert session.state == ScanState.DISCARDED
    assert session.record.is_empty()
    assert image_store.deleted == ["img-1"]

    engine.text = PAN_CARD
    engine.release.set()
    fresh = await session.scan("img-2")
    assert fresh.stale is False
    assert fresh.generation == session.generation


# ─── Aadhaar back side ──────────────────────────────────────

@pytest.mark.asyncio
async def test_back_side_fills_only_the_address(image_store):
    engine = FakeOCREngine(AADHAAR_FRONT)
    session = _session(DocType.AADHAAR, engine, image_store)
    await session.scan("front")
    generation = session.generation

    engine.text = AADHAAR_BACK
    outcome = await session.scan_back_side("back")

    assert outcome.record.get("address").startswith("S/O Ramesh Sharma")
    assert outcome.record.get("aadhaar_number") == "836457892230"
    assert outcome.record.get("full_name") == "Rahul Sharma"
    assert session.generation == generation
    assert image_store.deleted == ["front", "back"]


@pytest.mark.asyncio
async def test_back_side_address_below_threshold_is_ignored(image_store):
    engine = FakeOCREngine(AADHAAR_FRONT)
    session = _session(
        DocType.AADHAAR, engine, image_store, back_side_address_min_length=500
    )
    await session.scan("front")

    engine.text = AADHAAR_BACK
    outcome = await session.scan_back_side("back")

    assert outcome.record.get("address") == ""


@pytest.mark.asyncio
async def test_back_side_only_for_aadhaar(image_store):
    session = _session(DocType.PAN, FakeOCREngine(PAN_CARD), image_store)
    await session.scan("front")
    with pytest.raises(KYCError):
        await session.scan_back_side("back")


@pytest.mark.asyncio
async def test_back_side_requires_front_first(image_store):
    session = _session(DocType.AADHAAR, FakeOCREngine(AADHAAR_BACK), image_store)
    with pytest.raises(KYCError):
        await session.scan_back_side("back")


# ─── Manual entry & review ──────────────────────────────────

def test_manual_entry_opens_empty_form(image_store):
    session = _session(DocType.GST, FakeOCREngine(), image_store)

    outcome = session.start_manual_entry()

    assert outcome.record.is_empty()
    assert outcome.summary == "No data extracted. Please enter details manually.\nGSTIN: Not found"
    assert session.is_manual_entry is True
    assert session.state == ScanState.FORM_DISPLAYED


def test_edit_requires_a_displayed_form(image_store):
    session = _session(DocType.PAN, FakeOCREngine(), image_store)
    with pytest.raises(KYCError):
        session.edit_field("pan_number", "ABCDE1234F")


def test_edit_goes_through_formatter(image_store):
    session = _session(DocType.AADHAAR, FakeOCREngine(), image_store)
    session.start_manual_entry()

    record = session.edit_field("aadhaar_number", "8364-5789-2230")

    assert record.get("aadhaar_number") == "836457892230"
    assert session.record is record


# ─── Submit ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_confirmed_submit_locks_the_document(image_store, repository):
    session = _session(
        DocType.AADHAAR,
        FakeOCREngine(AADHAAR_FRONT),
        image_store,
        submit_use_case=SubmitDocumentUseCase(repository),
    )
    await session.scan("img-1")
    session.confirm()

    document = await session.submit("user-1")

    assert document.status == DocStatus.PENDING
    assert document.document_number == "836457892230"
    assert session.status == DocStatus.PENDING
    assert session.state == ScanState.SUBMITTED
    with pytest.raises(DocumentLocked):
        await session.scan("img-2")


@pytest.mark.asyncio
async def test_unconfirmed_submit_is_rejected(image_store, repository):
    session = _session(
        DocType.PAN,
        FakeOCREngine(PAN_CARD),
        image_store,
        submit_use_case=SubmitDocumentUseCase(repository),
    )
    await session.scan("img-1")

    with pytest.raises(SubmissionRejected) as exc:
        await session.submit("user-1")

    assert exc.value.requirement == "confirmation"
    assert session.state == ScanState.FORM_DISPLAYED
    assert await repository.get_documents("user-1") == []

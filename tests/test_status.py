"""
Document status state machine tests.
"""

from datetime import datetime, timedelta

import pytest

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument
from kycscan.core.errors import InvalidStatusTransition
from kycscan.core.status import (
    KYCStatusBook,
    can_upload,
    can_use_ocr,
    derive_overall_status,
    transition,
)
from kycscan.infrastructure.extractors import extract


@pytest.mark.parametrize("status, allowed", [
    (DocStatus.NOT_STARTED, True),
    (DocStatus.REJECTED, True),
    (DocStatus.PENDING, False),
    (DocStatus.VERIFIED, False),
])
def test_upload_and_ocr_gates(status, allowed):
    for doc_type in DocType:
        assert can_upload(doc_type, status) is allowed
        assert can_use_ocr(doc_type, status) is allowed


@pytest.mark.parametrize("current, target", [
    (DocStatus.NOT_STARTED, DocStatus.PENDING),
    (DocStatus.PENDING, DocStatus.VERIFIED),
    (DocStatus.PENDING, DocStatus.REJECTED),
    (DocStatus.REJECTED, DocStatus.PENDING),
])
def test_allowed_transitions(current, target):
    assert transition(current, target) == target


@pytest.mark.parametrize("current, target", [
    (DocStatus.NOT_STARTED, DocStatus.VERIFIED),
    (DocStatus.PENDING, DocStatus.PENDING),
    (DocStatus.VERIFIED, DocStatus.PENDING),
    (DocStatus.VERIFIED, DocStatus.REJECTED),
    (DocStatus.REJECTED, DocStatus.VERIFIED),
])
def test_forbidden_transitions(current, target):
    with pytest.raises(InvalidStatusTransition):
        transition(current, target)


# ─── Overall status ─────────────────────────────────────────

def test_all_required_verified():
    statuses = {
        DocType.AADHAAR: DocStatus.VERIFIED,
        DocType.PAN: DocStatus.VERIFIED,
        DocType.ELECTRICITY_BILL: DocStatus.VERIFIED,
    }
    assert derive_overall_status(statuses) == DocStatus.VERIFIED


def test_any_required_rejected():
    statuses = {
        DocType.AADHAAR: DocStatus.VERIFIED,
        DocType.PAN: DocStatus.REJECTED,
        DocType.ELECTRICITY_BILL: DocStatus.PENDING,
    }
    assert derive_overall_status(statuses) == DocStatus.REJECTED


def test_pending_required_document():
    statuses = {
        DocType.AADHAAR: DocStatus.VERIFIED,
        DocType.PAN: DocStatus.PENDING,
        DocType.ELECTRICITY_BILL: DocStatus.VERIFIED,
    }
    assert derive_overall_status(statuses) == DocStatus.PENDING


def test_missing_required_document_is_pending():
    statuses = {DocType.AADHAAR: DocStatus.VERIFIED, DocType.PAN: DocStatus.VERIFIED}
    assert derive_overall_status(statuses) == DocStatus.PENDING


def test_optional_documents_do_not_count():
    statuses = {
        DocType.AADHAAR: DocStatus.VERIFIED,
        DocType.PAN: DocStatus.VERIFIED,
        DocType.ELECTRICITY_BILL: DocStatus.VERIFIED,
        DocType.GST: DocStatus.REJECTED,
    }
    assert derive_overall_status(statuses) == DocStatus.VERIFIED


def test_custom_required_set():
    statuses = {DocType.GST: DocStatus.VERIFIED}
    assert derive_overall_status(statuses, (DocType.GST,)) == DocStatus.VERIFIED


# ─── Status book ────────────────────────────────────────────

def _doc(doc_type, status, minutes=0):
    return SubmittedDocument(
        document_type=doc_type,
        document_number="X",
        user_id="u1",
        id=f"{doc_type.value}-{minutes}",
        status=status,
        submitted_at=datetime(2024, 5, 1) + timedelta(minutes=minutes),
    )


def test_latest_submission_wins():
    book = KYCStatusBook("u1")
    book.hydrate([
        _doc(DocType.PAN, DocStatus.PENDING, minutes=10),
        _doc(DocType.PAN, DocStatus.REJECTED, minutes=0),
    ])
    assert book.status(DocType.PAN) == DocStatus.PENDING
    assert book.can_upload(DocType.PAN) is False


def test_unsubmitted_document_is_not_started():
    book = KYCStatusBook("u1")
    assert book.status(DocType.GST) == DocStatus.NOT_STARTED
    assert book.document(DocType.GST) is None
    assert book.can_use_ocr(DocType.GST) is True


def test_record_submission_moves_to_pending():
    book = KYCStatusBook("u1")
    book.record_submission(_doc(DocType.AADHAAR, DocStatus.PENDING))
    assert book.status(DocType.AADHAAR) == DocStatus.PENDING
    with pytest.raises(InvalidStatusTransition):
        book.record_submission(_doc(DocType.AADHAAR, DocStatus.PENDING, minutes=5))


def test_book_overall_status():
    book = KYCStatusBook("u1")
    book.hydrate([
        _doc(DocType.AADHAAR, DocStatus.VERIFIED),
        _doc(DocType.PAN, DocStatus.VERIFIED),
        _doc(DocType.ELECTRICITY_BILL, DocStatus.VERIFIED),
    ])
    assert book.overall_status() == DocStatus.VERIFIED
    assert book.is_verified() is True


@pytest.mark.asyncio
async def test_load_from_repository(repository):
    record = extract(DocType.PAN, "PAN: ABCDE1234F")
    await repository.submit_document("u1", DocType.PAN, record)
    book = await KYCStatusBook.load(repository, "u1")
    assert book.status(DocType.PAN) == DocStatus.PENDING
    assert book.overall_status() == DocStatus.PENDING

"""
Use Case: Submit Document.

Checks a reviewed record against its submit requirements, moves the
document to pending and hands it to the repository.
"""

import logging

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.errors import DocumentLocked, SubmissionRejected
from kycscan.core.interfaces.document_repository import IDocumentRepository
from kycscan.core.status import can_upload, transition
from kycscan.core.validators import is_valid_aadhaar, is_valid_gstin, is_valid_pan

logger = logging.getLogger(__name__)

# Noun used in the "please confirm" message
CONFIRMATION_NOUNS = {
    DocType.AADHAAR: "Aadhaar",
    DocType.PAN: "PAN",
    DocType.ELECTRICITY_BILL: "electricity bill",
    DocType.GST: "GST",
    DocType.SOCIETY_REGISTRATION: "society",
}


def _min_length(name: str, n: int):
    return lambda record: len(record.get(name)) >= n


# (requirement id, check, blocking message), checked in order after confirmation
SUBMIT_REQUIREMENTS = {
    DocType.AADHAAR: [
        ("aadhaar_number",
         lambda r: is_valid_aadhaar(r.get("aadhaar_number")),
         "Please ensure a valid 12-digit Aadhaar number is entered."),
    ],
    DocType.PAN: [
        ("pan_number",
         lambda r: is_valid_pan(r.get("pan_number")),
         "Please ensure a valid PAN number is entered (e.g., ABCDE1234F)."),
    ],
    DocType.ELECTRICITY_BILL: [
        ("consumer_or_meter_number",
         lambda r: bool(r.get("consumer_number") or r.get("meter_number")),
         "Please enter at least Consumer Number or Meter Number."),
    ],
    DocType.GST: [
        ("gstin",
         lambda r: is_valid_gstin(r.get("gstin")),
         "Please ensure a valid GSTIN is entered (15 characters)."),
        ("legal_name", _min_length("legal_name", 3), "Please enter the Legal Name of Business."),
    ],
    DocType.SOCIETY_REGISTRATION: [
        ("society_name", _min_length("society_name", 3), "Please enter the Society Name."),
        ("registration_number", _min_length("registration_number", 3),
         "Please enter the Registration Number."),
    ],
}


def check_submission(record: ExtractedDocumentRecord, confirmed: bool) -> None:
    """Raise SubmissionRejected naming the first unmet requirement."""
    if not confirmed:
        noun = CONFIRMATION_NOUNS[record.doc_type]
        raise SubmissionRejected(
            "confirmation", f"Please confirm that the {noun} details are correct."
        )
    for requirement, check, message in SUBMIT_REQUIREMENTS[record.doc_type]:
        if not check(record):
            raise SubmissionRejected(requirement, message)


def submission_payload(record: ExtractedDocumentRecord) -> dict:
    """documentNumber / name / dateOfBirth / address as stored for review."""
    r = record.get
    if record.doc_type == DocType.AADHAAR:
        return {
            "document_number": r("aadhaar_number"),
            "name": r("full_name") or None,
            "date_of_birth": r("date_of_birth") or None,
            "address": r("address") or None,
        }
    if record.doc_type == DocType.PAN:
        return {
            "document_number": r("pan_number"),
            "name": r("full_name") or None,
            "date_of_birth": r("date_of_birth") or None,
            "address": None,
        }
    if record.doc_type == DocType.ELECTRICITY_BILL:
        return {
            "document_number": r("consumer_number") or r("meter_number"),
            "name": r("consumer_name") or None,
            "date_of_birth": None,
            "address": r("service_address") or None,
        }
    if record.doc_type == DocType.GST:
        return {
            "document_number": r("gstin"),
            "name": r("legal_name") or None,
            "date_of_birth": None,
            "address": r("business_address") or None,
        }
    return {
        "document_number": r("registration_number"),
        "name": r("society_name") or None,
        "date_of_birth": None,
        "address": r("registered_address") or None,
    }


class SubmitDocumentUseCase:
    """
    Use Case: confirmed record → pending SubmittedDocument.

    PersistenceError from the repository propagates to the caller.
    """

    def __init__(self, repository: IDocumentRepository):
        self._repository = repository

    async def execute(
        self,
        user_id: str,
        record: ExtractedDocumentRecord,
        confirmed: bool,
        current_status: DocStatus = DocStatus.NOT_STARTED,
    ) -> SubmittedDocument:
        doc_type = record.doc_type

        # ── 1. Status gate ─────────────────────────────────
        if not can_upload(doc_type, current_status):
            raise DocumentLocked(doc_type, current_status)

        # ── 2. Requirements ────────────────────────────────
        check_submission(record, confirmed)
        transition(current_status, DocStatus.PENDING)

        # ── 3. Persist ─────────────────────────────────────
        document = await self._repository.submit_document(user_id, doc_type, record)
        logger.info(f"Submitted {doc_type.value} document {document.id} for review")
        return document

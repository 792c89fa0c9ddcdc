"""
Document Status State Machine.

    not_started ──submit──▶ pending ──review──▶ verified (terminal)
                              ▲        └──────▶ rejected
                              └────resubmit────────┘

Upload and OCR are allowed only while a document is not_started or
rejected. The overall KYC status is derived from the required documents.
"""

import logging

from kycscan.core.entities.document import (
    DEFAULT_REQUIRED_DOCUMENTS,
    DocStatus,
    DocType,
    SubmittedDocument,
)
from kycscan.core.errors import InvalidStatusTransition
from kycscan.core.interfaces.document_repository import IDocumentRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[DocStatus, set[DocStatus]] = {
    DocStatus.NOT_STARTED: {DocStatus.PENDING},
    DocStatus.PENDING: {DocStatus.VERIFIED, DocStatus.REJECTED},
    DocStatus.REJECTED: {DocStatus.PENDING},
    DocStatus.VERIFIED: set(),
}

_OPEN_STATUSES = {DocStatus.NOT_STARTED, DocStatus.REJECTED}


def can_upload(doc_type: DocType, status: DocStatus) -> bool:
    """True if a new image may be uploaded for the document."""
    return status in _OPEN_STATUSES


def can_use_ocr(doc_type: DocType, status: DocStatus) -> bool:
    """True if OCR may run for the document. Same gate as upload."""
    return status in _OPEN_STATUSES


def transition(current: DocStatus, target: DocStatus) -> DocStatus:
    """Validate and apply a status change."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(current, target)
    return target


def derive_overall_status(
    status_map: dict[DocType, DocStatus],
    required_docs: tuple[DocType, ...] | list[DocType] = DEFAULT_REQUIRED_DOCUMENTS,
) -> DocStatus:
    """
    Overall KYC status from the required documents.

    all verified → verified; any rejected → rejected; otherwise pending.
    A required document that was never submitted also yields pending.
    """
    statuses = [status_map.get(doc, DocStatus.NOT_STARTED) for doc in required_docs]
    if statuses and all(s == DocStatus.VERIFIED for s in statuses):
        return DocStatus.VERIFIED
    if any(s == DocStatus.REJECTED for s in statuses):
        return DocStatus.REJECTED
    return DocStatus.PENDING


class KYCStatusBook:
    """
    Per-user view of document statuses.

    Hydrated from the repository; the latest submission per document type
    wins. Local changes go through `transition()`.
    """

    def __init__(self, user_id: str, required_docs: tuple[DocType, ...] = DEFAULT_REQUIRED_DOCUMENTS):
        self.user_id = user_id
        self.required_docs = tuple(required_docs)
        self._documents: dict[DocType, SubmittedDocument] = {}

    @classmethod
    async def load(
        cls,
        repository: IDocumentRepository,
        user_id: str,
        required_docs: tuple[DocType, ...] = DEFAULT_REQUIRED_DOCUMENTS,
    ) -> "KYCStatusBook":
        book = cls(user_id, required_docs)
        book.hydrate(await repository.get_documents(user_id))
        return book

    def hydrate(self, documents: list[SubmittedDocument]) -> None:
        self._documents.clear()
        for doc in sorted(documents, key=lambda d: d.submitted_at):
            self._documents[doc.document_type] = doc
        logger.debug(f"Hydrated {len(self._documents)} document statuses for user {self.user_id}")

    def status(self, doc_type: DocType) -> DocStatus:
        doc = self._documents.get(doc_type)
        return doc.status if doc else DocStatus.NOT_STARTED

    def document(self, doc_type: DocType) -> SubmittedDocument | None:
        return self._documents.get(doc_type)

    def status_map(self) -> dict[DocType, DocStatus]:
        return {doc_type: self.status(doc_type) for doc_type in DocType}

    def can_upload(self, doc_type: DocType) -> bool:
        return can_upload(doc_type, self.status(doc_type))

    def can_use_ocr(self, doc_type: DocType) -> bool:
        return can_use_ocr(doc_type, self.status(doc_type))

    def record_submission(self, document: SubmittedDocument) -> None:
        """Track a freshly submitted document (moves its type to pending)."""
        transition(self.status(document.document_type), DocStatus.PENDING)
        self._documents[document.document_type] = document

    def overall_status(self) -> DocStatus:
        return derive_overall_status(self.status_map(), self.required_docs)

    def is_verified(self) -> bool:
        return self.overall_status() == DocStatus.VERIFIED

"""
Document Repository: submitted KYC documents.

Handles:
  - Storing confirmed records as pending documents
  - Listing a user's documents
  - Reviewer status updates
"""

import asyncio
import logging
import uuid
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.errors import DocumentNotFound, PersistenceError
from kycscan.core.interfaces.document_repository import IDocumentRepository
from kycscan.core.status import transition
from kycscan.core.use_cases.submit_document import submission_payload
from kycscan.infrastructure.db.database import get_db
from kycscan.infrastructure.db.models import KYCDocumentRecord

logger = logging.getLogger(__name__)


class SqlDocumentRepository(IDocumentRepository):
    """Repository backed by SQLAlchemy sessions (run in a worker thread)."""

    async def submit_document(
        self, user_id: str, document_type: DocType, record: ExtractedDocumentRecord
    ) -> SubmittedDocument:
        return await self._run(self._submit, user_id, document_type, record)

    async def get_documents(self, user_id: str) -> list[SubmittedDocument]:
        return await self._run(self._list, user_id)

    async def update_status(
        self, document_id: str, status: DocStatus, reason: str | None = None
    ) -> SubmittedDocument:
        return await self._run(self._update_status, document_id, status, reason)

    @staticmethod
    async def _run(fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise PersistenceError(str(e)) from e

    # ─── Sync session work ──────────────────────────────────

    @staticmethod
    def _submit(user_id: str, document_type: DocType, record: ExtractedDocumentRecord) -> SubmittedDocument:
        with get_db() as db:
            row = KYCDocumentRecord(
                user_id=user_id,
                document_type=document_type.value,
                status=DocStatus.PENDING.value,
                fields=dict(record.fields),
                **submission_payload(record),
            )
            db.add(row)
            db.flush()
            logger.info(f"Saved {document_type.value} document {row.id}")
            return row.to_entity()

    @staticmethod
    def _list(user_id: str) -> list[SubmittedDocument]:
        with get_db() as db:
            rows = (
                db.query(KYCDocumentRecord)
                .filter_by(user_id=user_id)
                .order_by(KYCDocumentRecord.submitted_at)
                .all()
            )
            return [row.to_entity() for row in rows]

    @staticmethod
    def _update_status(document_id: str, status: DocStatus, reason: str | None) -> SubmittedDocument:
        with get_db() as db:
            row = db.query(KYCDocumentRecord).filter_by(id=document_id).first()
            if row is None:
                raise DocumentNotFound(f"Document {document_id} not found")
            row.status = transition(DocStatus(row.status), status).value
            row.rejection_reason = reason if status == DocStatus.REJECTED else None
            if status == DocStatus.VERIFIED:
                row.verified_at = datetime.utcnow()
            logger.info(f"Document {document_id} → {status.value}")
            return row.to_entity()


class InMemoryDocumentRepository(IDocumentRepository):
    """Dict-backed repository for local development and tests."""

    def __init__(self):
        self._documents: dict[str, SubmittedDocument] = {}

    async def submit_document(
        self, user_id: str, document_type: DocType, record: ExtractedDocumentRecord
    ) -> SubmittedDocument:
        document = SubmittedDocument(
            document_type=document_type,
            user_id=user_id,
            id=str(uuid.uuid4()),
            status=DocStatus.PENDING,
            **submission_payload(record),
        )
        self._documents[document.id] = document
        return document

    async def get_documents(self, user_id: str) -> list[SubmittedDocument]:
        docs = [d for d in self._documents.values() if d.user_id == user_id]
        return sorted(docs, key=lambda d: d.submitted_at)

    async def update_status(
        self, document_id: str, status: DocStatus, reason: str | None = None
    ) -> SubmittedDocument:
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFound(f"Document {document_id} not found")
        document.status = transition(document.status, status)
        document.rejection_reason = reason if status == DocStatus.REJECTED else None
        if status == DocStatus.VERIFIED:
            document.verified_at = datetime.utcnow()
        return document

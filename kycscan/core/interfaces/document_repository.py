"""
Contract: Document Repository

Persists submitted KYC documents and their review status. The backing
store (SQL database, hosted BaaS, in-memory) is an adapter concern.
"""

from abc import ABC, abstractmethod

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument
from kycscan.core.entities.extraction import ExtractedDocumentRecord


class IDocumentRepository(ABC):
    """
    Port: Document Repository

    Failures of the underlying service surface as PersistenceError.
    """

    @abstractmethod
    async def submit_document(
        self,
        user_id: str,
        document_type: DocType,
        record: ExtractedDocumentRecord,
    ) -> SubmittedDocument:
        """
        Store a confirmed record as a pending document.

        Returns:
            The SubmittedDocument as persisted (id and timestamp filled).
        """
        ...

    @abstractmethod
    async def get_documents(self, user_id: str) -> list[SubmittedDocument]:
        """All documents submitted by a user, oldest first."""
        ...

    @abstractmethod
    async def update_status(
        self,
        document_id: str,
        status: DocStatus,
        reason: str | None = None,
    ) -> SubmittedDocument:
        """Record a reviewer decision on a submitted document."""
        ...

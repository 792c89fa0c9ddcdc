"""
Database Models — SQLAlchemy.

Tables:
  - kyc_documents: submitted KYC documents and their review status
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, JSON, String, Text
from sqlalchemy.orm import DeclarativeBase

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument


class Base(DeclarativeBase):
    pass


class KYCDocumentRecord(Base):
    """One submission of one document by one user."""
    __tablename__ = "kyc_documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    document_type = Column(String(30), nullable=False)
    document_number = Column(String(64), nullable=False)
    name = Column(String(200), nullable=True)
    date_of_birth = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)

    # Review
    status = Column(String(20), nullable=False, default=DocStatus.PENDING.value, index=True)
    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime, default=datetime.utcnow, index=True)
    verified_at = Column(DateTime, nullable=True)

    # Full reviewed record (all fields of the document type)
    fields = Column(JSON, default=dict)

    __table_args__ = (Index("ix_kyc_documents_user_type", "user_id", "document_type"),)

    def __repr__(self):
        return f"<KYCDocument {self.id} {self.document_type} [{self.status}]>"

    def to_entity(self) -> SubmittedDocument:
        return SubmittedDocument(
            id=self.id,
            user_id=self.user_id,
            document_type=DocType(self.document_type),
            document_number=self.document_number,
            name=self.name,
            date_of_birth=self.date_of_birth,
            address=self.address,
            status=DocStatus(self.status),
            submitted_at=self.submitted_at,
            rejection_reason=self.rejection_reason,
            verified_at=self.verified_at,
        )

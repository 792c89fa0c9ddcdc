"""
Entity: KYC Document

Document types, per-document review status and the submitted
document record. Pure domain model, no framework or database dependency.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DocType(str, Enum):
    AADHAAR = "aadhaar"
    PAN = "pan"
    ELECTRICITY_BILL = "electricity_bill"
    GST = "gst"
    SOCIETY_REGISTRATION = "society_registration"


class DocStatus(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# Documents that must be verified before the account counts as verified.
# GST and society registration are optional business documents.
DEFAULT_REQUIRED_DOCUMENTS: tuple[DocType, ...] = (
    DocType.AADHAAR,
    DocType.PAN,
    DocType.ELECTRICITY_BILL,
)


@dataclass
class SubmittedDocument:
    """A confirmed record handed to persistence for review."""
    document_type: DocType
    document_number: str
    user_id: str = ""
    id: str = ""
    name: str | None = None
    date_of_birth: str | None = None
    address: str | None = None
    status: DocStatus = DocStatus.PENDING
    submitted_at: datetime = field(default_factory=datetime.utcnow)
    rejection_reason: str | None = None
    verified_at: datetime | None = None

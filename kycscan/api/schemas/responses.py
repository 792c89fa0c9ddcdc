"""
Pydantic schemas — request and response models for the API.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from kycscan.core.entities.document import DocStatus, DocType


# ─── Requests ───────────────────────────────────────────────

class ExtractRequest(BaseModel):
    text: str


class SubmitRequest(BaseModel):
    user_id: str
    fields: dict[str, str]
    confirmed: bool = False


class ReviewRequest(BaseModel):
    status: DocStatus
    reason: str | None = None

    @field_validator("status")
    @classmethod
    def check_decision(cls, v: DocStatus) -> DocStatus:
        """A reviewer can only verify or reject; pending comes from a submission."""
        if v not in (DocStatus.VERIFIED, DocStatus.REJECTED):
            raise ValueError("Review decision must be verified or rejected")
        return v


class FormatRequest(BaseModel):
    value: str
    max_len: int | None = Field(default=None, ge=1)


# ─── Responses ──────────────────────────────────────────────

class DiagnosticResponse(BaseModel):
    field: str
    strategy: str
    matched: bool
    detail: str = ""


class ExtractionResponse(BaseModel):
    doc_type: DocType
    fields: dict[str, str]
    is_manual_entry: bool
    anchor_valid: bool
    summary: str
    diagnostics: list[DiagnosticResponse] = []


class ScanResponse(ExtractionResponse):
    ocr_error: str | None = None


class SubmittedDocumentResponse(BaseModel):
    id: str
    user_id: str
    document_type: DocType
    document_number: str
    name: str | None = None
    date_of_birth: str | None = None
    address: str | None = None
    status: DocStatus
    submitted_at: datetime
    rejection_reason: str | None = None
    verified_at: datetime | None = None


class DocumentStatusResponse(BaseModel):
    document_type: DocType
    status: DocStatus
    required: bool
    can_upload: bool
    can_use_ocr: bool
    rejection_reason: str | None = None


class KYCStatusResponse(BaseModel):
    user_id: str
    overall_status: DocStatus
    is_verified: bool
    documents: list[DocumentStatusResponse]


class FormatResponse(BaseModel):
    value: str

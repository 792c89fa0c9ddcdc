"""
Routes: KYC document extraction, scanning, submission and status.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from kycscan.api.schemas.responses import (
    DiagnosticResponse,
    DocumentStatusResponse,
    ExtractionResponse,
    ExtractRequest,
    FormatRequest,
    FormatResponse,
    KYCStatusResponse,
    ReviewRequest,
    ScanResponse,
    SubmitRequest,
    SubmittedDocumentResponse,
)
from kycscan.config.settings import get_settings
from kycscan.core.entities.document import DocType, SubmittedDocument
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.errors import (
    DocumentLocked,
    DocumentNotFound,
    InvalidStatusTransition,
    PersistenceError,
    ScanInProgress,
    SubmissionRejected,
)
from kycscan.core.interfaces.document_repository import IDocumentRepository
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.interfaces.ocr_engine import IOCREngine
from kycscan.core.status import KYCStatusBook
from kycscan.core.use_cases.scan_document import ScanDocumentUseCase
from kycscan.core.use_cases.submit_document import SubmitDocumentUseCase
from kycscan.core.validators import (
    apply_field_edit,
    format_date_input,
    format_id_code,
    format_numeric,
    format_registration_number,
    mask_sensitive_id,
)
from kycscan.infrastructure.db.repository import SqlDocumentRepository
from kycscan.infrastructure.extractors import build_extractors
from kycscan.infrastructure.ocr.paddle_ocr_engine import PaddleOCREngine
from kycscan.infrastructure.storage.local_image_store import LocalImageStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Lazy singletons
_extractors = None
_repository = None
_ocr_engine = None
_image_store = None


def get_extractors() -> dict[DocType, IFieldExtractor]:
    global _extractors
    if _extractors is None:
        _extractors = build_extractors(get_settings())
    return _extractors


def get_repository() -> IDocumentRepository:
    global _repository
    if _repository is None:
        _repository = SqlDocumentRepository()
    return _repository


def get_ocr_engine() -> IOCREngine:
    global _ocr_engine
    if _ocr_engine is None:
        settings = get_settings()
        _ocr_engine = PaddleOCREngine(
            lang=settings.ocr_lang,
            use_gpu=settings.ocr_use_gpu,
            min_confidence=settings.ocr_min_confidence,
        )
    return _ocr_engine


def get_image_store() -> LocalImageStore:
    global _image_store
    if _image_store is None:
        _image_store = LocalImageStore(get_settings().upload_dir)
    return _image_store


FORMATTERS = {
    "date": lambda req: format_date_input(req.value),
    "id_code": lambda req: format_id_code(req.value, req.max_len or 15),
    "numeric": lambda req: format_numeric(req.value),
    "registration_number": lambda req: format_registration_number(req.value),
    "mask": lambda req: mask_sensitive_id(req.value),
}


# ─── Helpers ────────────────────────────────────────────────

def _extraction_response(extractor: IFieldExtractor, record: ExtractedDocumentRecord) -> dict:
    anchor_valid = extractor.is_anchor_valid(record)
    return {
        "doc_type": record.doc_type,
        "fields": record.fields,
        "is_manual_entry": not anchor_valid,
        "anchor_valid": anchor_valid,
        "summary": extractor.summary(record),
        "diagnostics": [
            DiagnosticResponse(field=d.field, strategy=d.strategy, matched=d.matched, detail=d.detail)
            for d in record.diagnostics
        ],
    }


def _document_response(document: SubmittedDocument) -> SubmittedDocumentResponse:
    return SubmittedDocumentResponse(
        id=document.id,
        user_id=document.user_id,
        document_type=document.document_type,
        document_number=document.document_number,
        name=document.name,
        date_of_birth=document.date_of_birth,
        address=document.address,
        status=document.status,
        submitted_at=document.submitted_at,
        rejection_reason=document.rejection_reason,
        verified_at=document.verified_at,
    )


async def _load_status_book(repository: IDocumentRepository, user_id: str) -> KYCStatusBook:
    try:
        return await KYCStatusBook.load(
            repository, user_id, tuple(get_settings().required_documents)
        )
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))


# ─── Routes ─────────────────────────────────────────────────

@router.post("/kyc/{doc_type}/extract", response_model=ExtractionResponse)
async def extract_fields(
    doc_type: DocType,
    req: ExtractRequest,
    extractors: dict = Depends(get_extractors),
):
    """Extract fields from OCR text already recognized on the device."""
    extractor = extractors[doc_type]
    record = extractor.extract(req.text)
    return ExtractionResponse(**_extraction_response(extractor, record))


@router.post("/kyc/{doc_type}/scan", response_model=ScanResponse)
async def scan_document(
    doc_type: DocType,
    file: UploadFile = File(...),
    user_id: str = Form(...),
    extractors: dict = Depends(get_extractors),
    repository: IDocumentRepository = Depends(get_repository),
    ocr_engine: IOCREngine = Depends(get_ocr_engine),
    image_store: LocalImageStore = Depends(get_image_store),
):
    """
    Scan an uploaded document image.

    The image is written to the upload directory, recognized, and deleted
    again whatever the outcome. OCR failures come back as a manual-entry
    form, not as an error.
    """
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image (JPEG/PNG)")

    image_bytes = await file.read()
    if len(image_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")

    book = await _load_status_book(repository, user_id)

    session = ScanDocumentUseCase(
        doc_type=doc_type,
        ocr_engine=ocr_engine,
        image_store=image_store,
        extractor=extractors[doc_type],
        back_side_address_min_length=get_settings().back_side_address_min_length,
        status=book.status(doc_type),
    )
    image_ref = await image_store.save(image_bytes, Path(file.filename or "").suffix or ".jpg")

    try:
        outcome = await session.scan(image_ref)
    except (DocumentLocked, ScanInProgress) as e:
        await image_store.delete(image_ref)
        raise HTTPException(status_code=409, detail=str(e))

    return ScanResponse(
        **_extraction_response(extractors[doc_type], outcome.record),
        ocr_error=outcome.ocr_error,
    )


@router.post("/kyc/{doc_type}/submit", response_model=SubmittedDocumentResponse)
async def submit_document(
    doc_type: DocType,
    req: SubmitRequest,
    extractors: dict = Depends(get_extractors),
    repository: IDocumentRepository = Depends(get_repository),
):
    """Submit reviewed fields for verification; the document becomes pending."""
    record = extractors[doc_type].empty_record()
    try:
        for name, value in req.fields.items():
            record = apply_field_edit(record, name, value)
    except KeyError as e:
        raise HTTPException(status_code=422, detail=str(e))

    book = await _load_status_book(repository, req.user_id)
    use_case = SubmitDocumentUseCase(repository)
    try:
        document = await use_case.execute(req.user_id, record, req.confirmed, book.status(doc_type))
    except SubmissionRejected as e:
        raise HTTPException(
            status_code=422,
            detail={"requirement": e.requirement, "message": e.message},
        )
    except (DocumentLocked, InvalidStatusTransition) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Submit failed for {doc_type.value}: {e}")
        raise HTTPException(status_code=502, detail="Failed to submit document. Please try again.")

    return _document_response(document)


@router.get("/kyc/{user_id}/status", response_model=KYCStatusResponse)
async def kyc_status(
    user_id: str,
    repository: IDocumentRepository = Depends(get_repository),
):
    """Per-document statuses, upload/OCR gating and the overall KYC status."""
    book = await _load_status_book(repository, user_id)
    documents = []
    for doc_type in DocType:
        doc = book.document(doc_type)
        documents.append(DocumentStatusResponse(
            document_type=doc_type,
            status=book.status(doc_type),
            required=doc_type in book.required_docs,
            can_upload=book.can_upload(doc_type),
            can_use_ocr=book.can_use_ocr(doc_type),
            rejection_reason=doc.rejection_reason if doc else None,
        ))
    return KYCStatusResponse(
        user_id=user_id,
        overall_status=book.overall_status(),
        is_verified=book.is_verified(),
        documents=documents,
    )


@router.post("/kyc/documents/{document_id}/review", response_model=SubmittedDocumentResponse)
async def review_document(
    document_id: str,
    req: ReviewRequest,
    repository: IDocumentRepository = Depends(get_repository),
):
    """Reviewer decision: pending → verified | rejected."""
    try:
        document = await repository.update_status(document_id, req.status, req.reason)
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _document_response(document)


@router.post("/format/{formatter}", response_model=FormatResponse)
async def format_value(formatter: str, req: FormatRequest):
    """Live-typing formatters used by the review form."""
    fn = FORMATTERS.get(formatter)
    if fn is None:
        raise HTTPException(status_code=404, detail=f"Unknown formatter '{formatter}'")
    return FormatResponse(value=fn(req))

"""
Use Case: Scan Document.

One scan session per document screen.

Orchestrates: hard reset → OCR → extract → classify → summary, always
deleting the captured image afterwards. Tracks the per-scan state:

    idle → capturing → ocr_running → extraction_succeeded ─┐
                                    └→ ocr_failed ─────────┴→ form_displayed → submitted
                                                                            └→ discarded

Entering `capturing` is the hard reset: record, confirmation and
manual-entry flag are cleared and the scan generation is bumped. Results
of an OCR call whose generation is no longer current are dropped.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from kycscan.core.entities.document import DocStatus, DocType, SubmittedDocument
from kycscan.core.entities.extraction import Classification, ExtractedDocumentRecord
from kycscan.core.errors import (
    DocumentLocked,
    EnvironmentUnavailable,
    KYCError,
    RecognitionFailed,
    ScanInProgress,
)
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.interfaces.image_store import IImageStore
from kycscan.core.interfaces.ocr_engine import IOCREngine
from kycscan.core.status import can_upload, can_use_ocr
from kycscan.core.use_cases.submit_document import SubmitDocumentUseCase
from kycscan.core.validators import apply_field_edit

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    OCR_RUNNING = "ocr_running"
    EXTRACTION_SUCCEEDED = "extraction_succeeded"
    OCR_FAILED = "ocr_failed"
    FORM_DISPLAYED = "form_displayed"
    SUBMITTED = "submitted"
    DISCARDED = "discarded"


@dataclass
class ScanOutcome:
    """What the form should show after a scan attempt."""
    doc_type: DocType
    record: ExtractedDocumentRecord
    classification: Classification
    summary: str
    generation: int
    ocr_error: str | None = None   # "environment_unavailable" | "recognition_failed" | "ocr_error"
    stale: bool = False            # superseded by a reset/discard, nothing was applied


class ScanDocumentUseCase:
    """
    Use Case: scan session for a single document type.

    Dependency Injection: OCR engine, image store and extractor come in
    through the constructor; the submit use case is optional.
    """

    def __init__(
        self,
        doc_type: DocType,
        ocr_engine: IOCREngine,
        image_store: IImageStore,
        extractor: IFieldExtractor,
        submit_use_case: SubmitDocumentUseCase | None = None,
        status: DocStatus = DocStatus.NOT_STARTED,
        back_side_address_min_length: int = 20,
    ):
        self.doc_type = DocType(doc_type)
        self._ocr = ocr_engine
        self._images = image_store
        self._extractor = extractor
        self._submit = submit_use_case
        self._back_side_min = back_side_address_min_length

        self.status = status
        self.state = ScanState.IDLE
        self.record = extractor.empty_record()
        self.confirmed = False
        self.is_manual_entry = False
        self.generation = 0
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    # ─── Transitions ────────────────────────────────────────

    def _enter_capturing(self) -> int:
        """Hard reset; the only way a new scan or manual entry begins."""
        if self._busy:
            raise ScanInProgress(f"A {self.doc_type.value} scan is already running")
        self.generation += 1
        self.record = self._extractor.empty_record()
        self.confirmed = False
        self.is_manual_entry = False
        self.state = ScanState.CAPTURING
        return self.generation

    def _classify(self, record: ExtractedDocumentRecord) -> Classification:
        anchor_valid = self._extractor.is_anchor_valid(record)
        return Classification(
            is_manual_entry=not anchor_valid,
            anchor_fields=self._extractor.ANCHOR_FIELDS,
            anchor_valid=anchor_valid,
        )

    def _outcome(self, generation: int, ocr_error: str | None = None) -> ScanOutcome:
        return ScanOutcome(
            doc_type=self.doc_type,
            record=self.record,
            classification=self._classify(self.record),
            summary=self._extractor.summary(self.record),
            generation=generation,
            ocr_error=ocr_error,
        )

    def _stale_outcome(self, generation: int, record: ExtractedDocumentRecord) -> ScanOutcome:
        logger.info(f"Dropping stale {self.doc_type.value} scan result (generation {generation})")
        return ScanOutcome(
            doc_type=self.doc_type,
            record=record,
            classification=self._classify(record),
            summary=self._extractor.summary(record),
            generation=generation,
            stale=True,
        )

    # ─── Scan ───────────────────────────────────────────────

    async def scan(self, image_ref: str) -> ScanOutcome:
        """
        Run a full scan of a freshly captured image.

        OCR failures never propagate: the form falls back to manual entry.
        The image is deleted on every path.
        """
        if not can_use_ocr(self.doc_type, self.status):
            raise DocumentLocked(self.doc_type, self.status)

        generation = self._enter_capturing()
        self._busy = True
        ocr_error = None
        record = self._extractor.empty_record()
        try:
            # ── 1. OCR ─────────────────────────────────────
            self.state = ScanState.OCR_RUNNING
            try:
                result = await self._ocr.recognize_text(image_ref)
                # ── 2. Extract ─────────────────────────────
                record = self._extractor.extract(result.text)
            except EnvironmentUnavailable as e:
                logger.warning(f"OCR unavailable, manual entry for {self.doc_type.value}: {e}")
                ocr_error = "environment_unavailable"
            except RecognitionFailed as e:
                logger.warning(f"OCR failed, manual entry for {self.doc_type.value}: {e}")
                ocr_error = "recognition_failed"
            except Exception as e:
                logger.error(f"Unexpected OCR error for {self.doc_type.value}: {e}")
                ocr_error = "ocr_error"
        finally:
            await self._delete_image(image_ref)
            if generation == self.generation:
                self._busy = False

        if generation != self.generation:
            return self._stale_outcome(generation, record)

        # ── 3. Classify & display ──────────────────────────
        self.state = ScanState.OCR_FAILED if ocr_error else ScanState.EXTRACTION_SUCCEEDED
        self.record = record
        self.is_manual_entry = True if ocr_error else self._classify(record).is_manual_entry
        self.state = ScanState.FORM_DISPLAYED

        found = record.found_fields()
        logger.info(
            f"{self.doc_type.value} scan #{generation}: {len(found)} field(s) found, "
            f"manual_entry={self.is_manual_entry}"
        )
        return self._outcome(generation, ocr_error)

    async def scan_back_side(self, image_ref: str) -> ScanOutcome:
        """
        Aadhaar back side: fill only the address, keep everything else.

        The address is taken when it is at least `back_side_address_min_length`
        characters long. No hard reset.
        """
        if self.doc_type != DocType.AADHAAR:
            raise KYCError("Back-side scan is only supported for Aadhaar")
        if self.state != ScanState.FORM_DISPLAYED:
            raise KYCError("Scan the front side before the back side")
        if self._busy:
            raise ScanInProgress("A scan is already running")

        generation = self.generation
        self._busy = True
        ocr_error = None
        address = ""
        try:
            try:
                result = await self._ocr.recognize_text(image_ref)
                address = self._extractor.extract(result.text).get("address")
            except (EnvironmentUnavailable, RecognitionFailed) as e:
                logger.warning(f"Back-side OCR failed: {e}")
                ocr_error = "recognition_failed"
            except Exception as e:
                logger.error(f"Unexpected back-side OCR error: {e}")
                ocr_error = "ocr_error"
        finally:
            await self._delete_image(image_ref)
            if generation == self.generation:
                self._busy = False

        if generation != self.generation:
            return self._stale_outcome(generation, self.record)

        if len(address) >= self._back_side_min:
            self.record = self.record.with_field("address", address)
            logger.info("Address filled from Aadhaar back side")
        return self._outcome(generation, ocr_error)

    def start_manual_entry(self) -> ScanOutcome:
        """Skip OCR: hard reset and show an empty form."""
        if not can_upload(self.doc_type, self.status):
            raise DocumentLocked(self.doc_type, self.status)
        generation = self._enter_capturing()
        self.is_manual_entry = True
        self.state = ScanState.FORM_DISPLAYED
        return self._outcome(generation)

    def discard(self) -> None:
        """Retake / navigate away: drop the record and any in-flight result."""
        self.generation += 1
        self.record = self._extractor.empty_record()
        self.confirmed = False
        self.is_manual_entry = False
        self._busy = False
        self.state = ScanState.DISCARDED

    # ─── Review form ────────────────────────────────────────

    def edit_field(self, field_name: str, raw: str) -> ExtractedDocumentRecord:
        if self.state != ScanState.FORM_DISPLAYED:
            raise KYCError("No form is being displayed")
        self.record = apply_field_edit(self.record, field_name, raw)
        return self.record

    def confirm(self, value: bool = True) -> None:
        self.confirmed = value

    async def submit(self, user_id: str) -> SubmittedDocument:
        if self._submit is None:
            raise KYCError("No submit use case configured")
        if self.state != ScanState.FORM_DISPLAYED:
            raise KYCError("No form is being displayed")
        document = await self._submit.execute(user_id, self.record, self.confirmed, self.status)
        self.status = DocStatus.PENDING
        self.state = ScanState.SUBMITTED
        return document

    # ─── Helpers ────────────────────────────────────────────

    async def _delete_image(self, image_ref: str) -> None:
        try:
            await self._images.delete(image_ref)
        except Exception as e:
            logger.warning(f"Failed to delete captured image: {e}")

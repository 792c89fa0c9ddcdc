"""
Contract: Field Extractor

Deterministic extraction of structured fields from raw OCR text for one
document type. Implementations are pure: no I/O, no state kept between
calls, and "nothing found" is an empty field, never an exception.
"""

from abc import ABC, abstractmethod

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord


class IFieldExtractor(ABC):
    """
    Port: Field Extractor

    Class attributes:
        DOC_TYPE: document type handled.
        FIELDS: field schema, in display order.
        FIELD_LABELS: human-readable label per field (summaries).
        ANCHOR_FIELDS: fields that decide auto-filled vs. manual entry.
    """

    DOC_TYPE: DocType
    FIELDS: tuple[str, ...] = ()
    FIELD_LABELS: dict[str, str] = {}
    ANCHOR_FIELDS: tuple[str, ...] = ()

    def empty_record(self) -> ExtractedDocumentRecord:
        return ExtractedDocumentRecord.empty(self.DOC_TYPE, self.FIELDS)

    @abstractmethod
    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        """
        Extract fields from OCR text.

        Args:
            ocr_text: Unstructured multi-line OCR output.

        Returns:
            A fresh record; unmatched fields are "".
        """
        ...

    @abstractmethod
    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        """True if the anchor field(s) are present and pass format checks."""
        ...

    def code_line(self, record: ExtractedDocumentRecord) -> str | None:
        """Optional extra summary line showing the document's ID code."""
        return None

    def summary(self, record: ExtractedDocumentRecord) -> str:
        """
        User-facing summary of what OCR found.

        "Extracted: Name, PAN Number" or the manual-entry instruction,
        followed by the ID code line when the type has one.
        """
        found = [self.FIELD_LABELS.get(name, name) for name in record.found_fields()]
        if found:
            text = f"Extracted: {', '.join(found)}"
        else:
            text = "No data extracted. Please enter details manually."
        code = self.code_line(record)
        if code:
            text = f"{text}\n{code}"
        return text

"""
Field extractor registry.

One extractor per document type. `extract()` and `classify()` are the
entry points used by the scan orchestrator and the HTTP layer.
"""

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import Classification, ExtractedDocumentRecord
from kycscan.core.errors import UnknownDocumentType
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.infrastructure.extractors.aadhaar import AadhaarExtractor
from kycscan.infrastructure.extractors.electricity_bill import ElectricityBillExtractor
from kycscan.infrastructure.extractors.gst import GSTExtractor
from kycscan.infrastructure.extractors.pan import PANExtractor
from kycscan.infrastructure.extractors.society_registration import SocietyRegistrationExtractor

EXTRACTORS: dict[DocType, IFieldExtractor] = {
    DocType.AADHAAR: AadhaarExtractor(),
    DocType.PAN: PANExtractor(),
    DocType.ELECTRICITY_BILL: ElectricityBillExtractor(),
    DocType.GST: GSTExtractor(),
    DocType.SOCIETY_REGISTRATION: SocietyRegistrationExtractor(),
}


def build_extractors(settings) -> dict[DocType, IFieldExtractor]:
    """Extractors configured from application settings."""
    dob_range = (settings.dob_year_min, settings.dob_year_max)
    return {
        DocType.AADHAAR: AadhaarExtractor(
            address_min_length=settings.address_min_length,
            dob_year_range=dob_range,
        ),
        DocType.PAN: PANExtractor(dob_year_range=dob_range),
        DocType.ELECTRICITY_BILL: ElectricityBillExtractor(),
        DocType.GST: GSTExtractor(
            registration_year_range=(settings.registration_year_min, settings.dob_year_max),
        ),
        DocType.SOCIETY_REGISTRATION: SocietyRegistrationExtractor(registration_year_range=dob_range),
    }


def get_extractor(doc_type: DocType | str) -> IFieldExtractor:
    try:
        return EXTRACTORS[DocType(doc_type)]
    except (KeyError, ValueError):
        raise UnknownDocumentType(f"No extractor for document type '{doc_type}'") from None


def extract(doc_type: DocType | str, ocr_text: str) -> ExtractedDocumentRecord:
    """Extract a fresh record for `doc_type` from OCR text."""
    return get_extractor(doc_type).extract(ocr_text)


def classify(record: ExtractedDocumentRecord) -> Classification:
    """Manual entry is forced unless the anchor field(s) are present and valid."""
    extractor = get_extractor(record.doc_type)
    anchor_valid = extractor.is_anchor_valid(record)
    return Classification(
        is_manual_entry=not anchor_valid,
        anchor_fields=extractor.ANCHOR_FIELDS,
        anchor_valid=anchor_valid,
    )

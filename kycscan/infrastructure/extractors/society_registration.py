"""
Adapter: Society Registration Certificate Field Extractor.

Housing societies and resident welfare associations register with a
state registrar; the certificate carries the society name, a
registration number and the registering authority.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.validators import DOB_YEAR_RANGE
from kycscan.infrastructure.extractors.common import (
    ExtractionTrace,
    date_from_groups,
    first_date_in_lines,
    first_vocabulary_hit,
    split_lines,
)
from kycscan.infrastructure.extractors.geography import INDIAN_STATES

NAME_CHARS = r"[A-Za-z0-9\s&.,'-]"
SOCIETY_NAME_PATTERNS = (
    ("society_name_label", re.compile(
        r"(?:Society Name|Name of Society|Name of the Society)[:\s]+("
        + NAME_CHARS + r"+?)(?:\n|Registration|$)",
        re.I,
    )),
    ("name_with_society_word", re.compile(
        r"(?:Name)[:\s]+(" + NAME_CHARS + r"+?(?:Society|Association|RWA|Welfare)"
        + NAME_CHARS + r"*?)(?:\n|$)",
        re.I,
    )),
    ("society_phrase", re.compile(
        r"(" + NAME_CHARS + r"+?(?:Co-operative|Cooperative|Housing|Apartment|Resident|Welfare)"
        r"\s*(?:Society|Association)" + NAME_CHARS + r"*?)(?:\n|Registration|$)",
        re.I,
    )),
)

REGISTRATION_NUMBER_PATTERNS = (
    ("registration_label", re.compile(
        r"(?:Registration No|Reg\.?\s*No|Registration Number|Certificate No)[.:\s]+([A-Z0-9\-/]+)", re.I
    )),
    ("number_label", re.compile(
        r"(?:No|Number)[.:\s]+([A-Z]{2,5}[\-/]?[0-9]{3,10}[\-/]?[A-Z0-9]*)", re.I
    )),
    ("code_with_year", re.compile(r"([A-Z]{2,5}[\-/][0-9]{3,10}[\-/][0-9]{4})", re.I)),
)

DATE = r"(\d{2})[-/](\d{2})[-/](\d{4})"
REGISTRATION_DATE_PATTERNS = (
    ("registration_date_label", re.compile(
        r"(?:Date of Registration|Registration Date|Registered on|Date of Issue|Dated)[:\s]+" + DATE, re.I
    )),
    ("registered_label", re.compile(r"(?:Registered|Dated)[:\s]+" + DATE, re.I)),
)

SOCIETY_TYPE_RE = re.compile(
    r"(?:Type of Society|Society Type|Type)[:\s]+([A-Za-z\s]+?)(?:\n|Registration|$)", re.I
)
SOCIETY_TYPES = (
    "CO-OPERATIVE HOUSING SOCIETY",
    "COOPERATIVE HOUSING SOCIETY",
    "APARTMENT OWNERS ASSOCIATION",
    "RESIDENT WELFARE ASSOCIATION",
    "RWA",
    "HOUSING SOCIETY",
    "WELFARE SOCIETY",
    "CONDOMINIUM ASSOCIATION",
    "FLAT OWNERS ASSOCIATION",
    "BUILDING ASSOCIATION",
)

ADDRESS_CHARS = r"[A-Za-z0-9\s,.\-/()]"
ADDRESS_PATTERNS = (
    ("registered_address_label", re.compile(
        r"(?:Registered Address|Address|Registered Office|Office Address)[:\s]+("
        + ADDRESS_CHARS + r"+?)(?:State|PIN|Registrar|$)",
        re.I,
    )),
    ("located_at_label", re.compile(
        r"(?:Located at|Situated at)[:\s]+(" + ADDRESS_CHARS + r"+?)(?:State|PIN|$)", re.I
    )),
)

AUTHORITY_RE = re.compile(
    r"(?:Registering Authority|Registered under|Issued by|Authority)[:\s]+([A-Za-z\s,]+?)(?:\n|Date|$)", re.I
)
REGISTERING_AUTHORITIES = (
    "REGISTRAR OF CO-OPERATIVE SOCIETIES",
    "REGISTRAR OF COOPERATIVE SOCIETIES",
    "REGISTRAR OF SOCIETIES",
    "REGISTRAR OF COMPANIES",
    "SUB-REGISTRAR",
    "DEPUTY REGISTRAR",
    "ASSISTANT REGISTRAR",
    "DISTRICT REGISTRAR",
)

STATE_LABEL_RE = re.compile(r"(?:State|State of)[:\s]+([A-Za-z\s]+?)(?:\n|PIN|$)", re.I)


class SocietyRegistrationExtractor(IFieldExtractor):
    """Extractor for society registration certificates."""

    DOC_TYPE = DocType.SOCIETY_REGISTRATION
    FIELDS = (
        "society_name",
        "registration_number",
        "date_of_registration",
        "type_of_society",
        "registered_address",
        "registering_authority",
        "state",
    )
    FIELD_LABELS = {
        "society_name": "Society Name",
        "registration_number": "Registration No.",
        "date_of_registration": "Date",
        "type_of_society": "Type",
        "registered_address": "Address",
        "registering_authority": "Authority",
        "state": "State",
    }
    ANCHOR_FIELDS = ("society_name", "registration_number")

    def __init__(self, registration_year_range: tuple[int, int] = DOB_YEAR_RANGE):
        self._year_range = registration_year_range

    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        text = (ocr_text or "").replace("\r\n", "\n")
        lines = split_lines(text)
        upper = text.upper()
        trace = ExtractionTrace()

        fields = {
            "society_name": self._extract_society_name(text, trace),
            "registration_number": self._extract_registration_number(text, trace),
            "date_of_registration": self._extract_date(text, lines, trace),
            "type_of_society": _label_or_vocabulary(
                text, upper, SOCIETY_TYPE_RE, SOCIETY_TYPES, "type_of_society", trace
            ),
            "registered_address": self._extract_address(text, trace),
            "registering_authority": _label_or_vocabulary(
                text, upper, AUTHORITY_RE, REGISTERING_AUTHORITIES, "registering_authority", trace
            ),
            "state": self._extract_state(text, upper, trace),
        }
        return ExtractedDocumentRecord(self.DOC_TYPE, fields, trace.diagnostics)

    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        return bool(record.get("society_name") or record.get("registration_number"))

    # ─── Fields ─────────────────────────────────────────────

    @staticmethod
    def _extract_society_name(text: str, trace: ExtractionTrace) -> str:
        for strategy, pattern in SOCIETY_NAME_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            name = match.group(1).strip()
            if 5 <= len(name) <= 200:
                trace.hit("society_name", strategy)
                return name.upper()
            trace.reject("society_name", strategy, "discarded: length outside 5-200")
        return ""

    @staticmethod
    def _extract_registration_number(text: str, trace: ExtractionTrace) -> str:
        for strategy, pattern in REGISTRATION_NUMBER_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            number = match.group(1).strip().upper()
            if 4 <= len(number) <= 30:
                trace.hit("registration_number", strategy)
                return number
            trace.reject("registration_number", strategy, "discarded: length outside 4-30")
        return ""

    def _extract_date(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        for strategy, pattern in REGISTRATION_DATE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            value = date_from_groups(match, self._year_range)
            if value:
                trace.hit("date_of_registration", strategy)
                return value
            trace.reject("date_of_registration", strategy, "cleared: not a calendar date")
        return trace.record(
            "date_of_registration", "any_date", first_date_in_lines(lines, self._year_range)
        )

    @staticmethod
    def _extract_address(text: str, trace: ExtractionTrace) -> str:
        for strategy, pattern in ADDRESS_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            address = match.group(1).strip()
            if 10 <= len(address) <= 300:
                trace.hit("registered_address", strategy)
                return address
            trace.reject("registered_address", strategy, "discarded: length outside 10-300")
        return ""

    @staticmethod
    def _extract_state(text: str, upper: str, trace: ExtractionTrace) -> str:
        match = STATE_LABEL_RE.search(text)
        if match:
            state = match.group(1).strip().upper()
            if state in INDIAN_STATES:
                trace.hit("state", "state_label")
                return state
            trace.reject("state", "state_label", "discarded: not an enumerated state")
        return trace.record("state", "state_in_text", first_vocabulary_hit(upper, INDIAN_STATES))


# ─── Helpers ────────────────────────────────────────────────

def _label_or_vocabulary(
    text: str,
    upper: str,
    label_re: re.Pattern,
    vocabulary: tuple[str, ...],
    field: str,
    trace: ExtractionTrace,
) -> str:
    match = label_re.search(text)
    if match and match.group(1).strip():
        trace.hit(field, "label")
        return match.group(1).strip().upper()
    return trace.record(field, "vocabulary", first_vocabulary_hit(upper, vocabulary))

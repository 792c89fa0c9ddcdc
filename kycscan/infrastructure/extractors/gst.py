"""
Adapter: GST Registration Certificate Field Extractor.

GSTIN layout: 2-digit state code + 10-char PAN + entity digit + 'Z' +
check character. A 15-character candidate is captured loosely and then
held to the strict grammar; the state comes from the code table only
when the GSTIN survives.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.validators import GST_REGISTRATION_YEAR_RANGE, is_valid_gstin
from kycscan.infrastructure.extractors.common import (
    ExtractionTrace,
    date_from_groups,
    first_date_in_lines,
    first_vocabulary_hit,
    split_lines,
)
from kycscan.infrastructure.extractors.geography import GST_STATE_CODES

LABELED_GSTIN_RE = re.compile(r"GSTIN(?:\s*(?:NO\.?|NUMBER))?[:\s]*([0-9A-Z]{15})", re.I)
GSTIN_SHAPE_RE = re.compile(r"[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][0-9A-Z]{3}", re.I)

NAME_CHARS = r"[A-Za-z0-9\s&.,'-]"
LEGAL_NAME_PATTERNS = (
    ("legal_name_label", re.compile(
        r"Legal Name(?:\s*of\s*Business)?[:\s]+(" + NAME_CHARS + r"+?)(?:\n|Trade|$)", re.I
    )),
    ("registered_name_label", re.compile(
        r"(?:Registered Name|Business Name)[:\s]+(" + NAME_CHARS + r"+?)(?:\n|$)", re.I
    )),
)
TRADE_NAME_PATTERNS = (
    ("trade_name_label", re.compile(
        r"Trade Name[:\s]+(" + NAME_CHARS + r"+?)(?:\n|Constitution|$)", re.I
    )),
    ("trading_as_label", re.compile(r"(?:Trading As|DBA)[:\s]+(" + NAME_CHARS + r"+?)(?:\n|$)", re.I)),
)

CONSTITUTION_RE = re.compile(r"Constitution(?:\s*of\s*Business)?[:\s]+([A-Za-z\s]+?)(?:\n|Date|$)", re.I)
CONSTITUTION_TYPES = (
    "PROPRIETORSHIP",
    "PARTNERSHIP",
    "PRIVATE LIMITED",
    "PVT LTD",
    "LIMITED LIABILITY PARTNERSHIP",
    "LLP",
    "PUBLIC LIMITED",
    "HINDU UNDIVIDED FAMILY",
    "HUF",
    "TRUST",
    "SOCIETY",
    "COOPERATIVE",
    "GOVERNMENT",
    "LOCAL AUTHORITY",
)

DATE = r"(\d{2})[-/](\d{2})[-/](\d{4})"
REGISTRATION_DATE_PATTERNS = (
    ("registration_date_label", re.compile(
        r"(?:Date of Registration|Registration Date|Date of Issue)[:\s]+" + DATE, re.I
    )),
    ("effective_date_label", re.compile(r"(?:Registered on|Effective from)[:\s]+" + DATE, re.I)),
)

ADDRESS_CHARS = r"[A-Za-z0-9\s,.\-/()]"
ADDRESS_PATTERNS = (
    ("business_address_label", re.compile(
        r"(?:Principal Place of Business|Business Address|Registered Address)[:\s]+("
        + ADDRESS_CHARS + r"+?)(?:State|PIN|$)",
        re.I,
    )),
    ("address_label", re.compile(
        r"(?:Address)[:\s]+(" + ADDRESS_CHARS + r"+?)(?:State|PIN|GSTIN|$)", re.I
    )),
)

STATE_LABEL_RE = re.compile(r"(?:State|Jurisdiction|State Code)[:\s]+([A-Za-z\s]+?)(?:\n|$)", re.I)


class GSTExtractor(IFieldExtractor):
    """Extractor for GST registration certificates."""

    DOC_TYPE = DocType.GST
    FIELDS = (
        "gstin",
        "legal_name",
        "trade_name",
        "constitution_of_business",
        "date_of_registration",
        "business_address",
        "state_jurisdiction",
    )
    FIELD_LABELS = {
        "gstin": "GSTIN",
        "legal_name": "Legal Name",
        "trade_name": "Trade Name",
        "constitution_of_business": "Constitution",
        "date_of_registration": "Date",
        "business_address": "Address",
        "state_jurisdiction": "State",
    }
    ANCHOR_FIELDS = ("gstin",)

    def __init__(self, registration_year_range: tuple[int, int] = GST_REGISTRATION_YEAR_RANGE):
        self._year_range = registration_year_range

    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        text = (ocr_text or "").replace("\r\n", "\n")
        lines = split_lines(text)
        trace = ExtractionTrace()

        gstin = self._extract_gstin(text, trace)
        fields = {
            "gstin": gstin,
            "legal_name": _labeled_name(text, LEGAL_NAME_PATTERNS, 3, "legal_name", trace),
            "trade_name": _labeled_name(text, TRADE_NAME_PATTERNS, 2, "trade_name", trace),
            "constitution_of_business": self._extract_constitution(text, trace),
            "date_of_registration": self._extract_date(text, lines, trace),
            "business_address": self._extract_address(text, trace),
            "state_jurisdiction": self._extract_state(text, gstin, trace),
        }
        return ExtractedDocumentRecord(self.DOC_TYPE, fields, trace.diagnostics)

    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        return is_valid_gstin(record.get("gstin"))

    def code_line(self, record: ExtractedDocumentRecord) -> str | None:
        return f"GSTIN: {record.get('gstin') or 'Not found'}"

    # ─── Fields ─────────────────────────────────────────────

    @staticmethod
    def _extract_gstin(text: str, trace: ExtractionTrace) -> str:
        candidate, strategy = "", ""
        match = LABELED_GSTIN_RE.search(text)
        if match:
            candidate, strategy = match.group(1).upper(), "gstin_label"
        else:
            match = GSTIN_SHAPE_RE.search(text)
            if match:
                candidate, strategy = match.group(0).upper(), "gstin_shape"

        if not candidate:
            return ""
        if not is_valid_gstin(candidate):
            trace.reject("gstin", strategy, "cleared: fails GSTIN grammar")
            return ""
        trace.hit("gstin", strategy)
        return candidate

    @staticmethod
    def _extract_constitution(text: str, trace: ExtractionTrace) -> str:
        match = CONSTITUTION_RE.search(text)
        if match and match.group(1).strip():
            trace.hit("constitution_of_business", "constitution_label")
            return match.group(1).strip().upper()
        return trace.record(
            "constitution_of_business",
            "vocabulary",
            first_vocabulary_hit(text.upper(), CONSTITUTION_TYPES),
        )

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
                trace.hit("business_address", strategy)
                return address
            trace.reject("business_address", strategy, "discarded: length outside 10-300")
        return ""

    @staticmethod
    def _extract_state(text: str, gstin: str, trace: ExtractionTrace) -> str:
        if gstin and gstin[:2] in GST_STATE_CODES:
            trace.hit("state_jurisdiction", "gstin_state_code")
            return GST_STATE_CODES[gstin[:2]]

        match = STATE_LABEL_RE.search(text)
        if match:
            state = match.group(1).strip()
            if 2 <= len(state) <= 50:
                trace.hit("state_jurisdiction", "state_label")
                return state.upper()
        return ""


# ─── Helpers ────────────────────────────────────────────────

def _labeled_name(text: str, patterns, min_len: int, field: str, trace: ExtractionTrace) -> str:
    for strategy, pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        name = match.group(1).strip()
        if min_len <= len(name) <= 150:
            trace.hit(field, strategy)
            return name.upper()
        trace.reject(field, strategy, "discarded: length out of range")
    return ""

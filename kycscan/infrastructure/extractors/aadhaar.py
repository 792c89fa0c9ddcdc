"""
Adapter: Aadhaar Field Extractor.

Pulls name, 12-digit Aadhaar number, date of birth and address out of
OCR text of an Aadhaar card (front or back). Every field runs an ordered
cascade; nothing is inferred when no strategy matches.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.validators import DOB_YEAR_RANGE, is_valid_aadhaar, mask_sensitive_id
from kycscan.infrastructure.extractors.common import (
    ExtractionTrace,
    date_from_groups,
    first_standalone_date,
    is_all_digits,
    is_date_line,
    split_lines,
)
from kycscan.infrastructure.extractors.geography import PIN_CODE_RE, has_address_indicator

# ── Aadhaar number ──────────────────────────────────────────────────
ID_LABEL_RE = re.compile(r"VID|Aadhaar|Number|नंबर", re.I)
ID_LINE_PATTERNS = (
    re.compile(r"^(\d{4})\s+(\d{4})\s+(\d{4})$"),
    re.compile(r"^(\d{4})-(\d{4})-(\d{4})$"),
    re.compile(r"^(\d{12})$"),
)
FOUR_DIGIT_LINE_RE = re.compile(r"^(\d{4})[\s-]*$")
GROUPED_ID_RE = re.compile(r"\b(\d{4})[\s-](\d{4})[\s-](\d{4})\b")
DIGIT_STREAM_ID_RE = re.compile(r"[2-9]\d{11}")
ID_NUMBER_LINE_RE = re.compile(r"^\d{4}\s*\d{4}\s*\d{4}$")

# ── Name ────────────────────────────────────────────────────────────
NAME_EXCLUDE_PATTERNS = (
    re.compile(r"GOVERNMENT OF INDIA", re.I),
    re.compile(r"भारत सरकार"),
    re.compile(r"GOVERNMENT", re.I),
    re.compile(r"OF INDIA", re.I),
    re.compile(r"UNIQUE IDENTIFICATION", re.I),
    re.compile(r"AUTHORITY OF INDIA", re.I),
    re.compile(r"UIDAI", re.I),
    re.compile(r"VID:", re.I),
    re.compile(r"DOB:", re.I),
    re.compile(r"Date of Birth", re.I),
    re.compile(r"जन्म तिथि"),
    re.compile(r"^(Male|Female|M|F)$", re.I),
)
GOVERNMENT_TEXT_RE = re.compile(r"(?:GOVERNMENT OF INDIA|भारत सरकार|GOVERNMENT|OF INDIA)\s*", re.I)
GOVERNMENT_HEADER_RE = re.compile(r"(?:Government of India|भारत सरकार)", re.I)
LABELED_NAME_RE = re.compile(
    r"(?:Name|नाम|NAME)\s*:?\s*([^\n]{2,40}?)"
    r"(?:\s+(?:DOB|Date|Year|Male|Female|M|F|जन्म|Gender)\b)",
    re.I,
)
NAME_SHAPE_RE = re.compile(r"^([A-Za-z\u0900-\u097F]{2,}(?:\s+[A-Za-z\u0900-\u097F]{2,}){0,3})$")
HAS_LETTER_RE = re.compile(r"[A-Za-z\u0900-\u097F]")
MARKER_AFTER_HEADER_RE = re.compile(r"^(Male|Female|M|F|DOB|Date|Year)$", re.I)
MARKER_LINE_RE = re.compile(r"^(Male|Female|M|F|DOB|Date|Year|Gender)$", re.I)

# ── Date of birth ───────────────────────────────────────────────────
LABELED_DOB_RE = re.compile(
    r"(?:DOB|Date of Birth|जन्म तिथि)\s*:?\s*(\d{2})[-/](\d{2})[-/](\d{4})\b", re.I
)

# ── Address ─────────────────────────────────────────────────────────
ADDRESS_LABEL_PATTERNS = (
    re.compile(r"(?:Address|पता|ADDRESS|Address Line)[\s:]+([^\n]+(?:\n[^\n]+){0,5})", re.I),
    re.compile(r"(?:Address|पता)[\s:]*\n([^\n]+(?:\n[^\n]+){0,5})", re.I),
)
RELATION_RE = re.compile(r"(?:S/O|C/O|D/O|W/O)[\s:,]+([^\n]+(?:\n[^\n]+){0,5})", re.I)
HOUSE_NUMBER_RE = re.compile(
    r"(?:H\.?No\.?|House\s*No\.?|Flat\s*No\.?|Plot\s*No\.?)[\s:,]*([^\n]+(?:\n[^\n]+){0,5})", re.I
)
ADDRESS_NOISE_RE = re.compile(
    r"(?:GOVERNMENT OF INDIA|भारत सरकार|GOVERNMENT|OF INDIA|VID|Aadhaar|UIDAI|Unique Identification)",
    re.I,
)
LABEL_BLOCK_STOP_RE = re.compile(r"^(Male|Female|M|F|DOB|Date of Birth|जन्म)$", re.I)
RELATION_BLOCK_STOP_RE = re.compile(r"^(DOB|Date of Birth|जन्म|Gender)$", re.I)
PIN_WINDOW_STOP_RE = re.compile(r"^(Male|Female|M|F|DOB|जन्म|Gender)$", re.I)
STANDALONE_DATE_LINE_RE = re.compile(r"^\d{2}[-/]\d{2}[-/]\d{4}$")
# Uppercase-only: a printed name line, not an address fragment
NAME_LIKE_LINE_RE = re.compile(r"^[A-Z\u0900-\u097F]{2,}(?:\s+[A-Z\u0900-\u097F]{2,}){1,3}$")

BLOCK_MAX_LINES = 6
PIN_LOOKBEHIND_CHARS = 200
PIN_LOOKAHEAD_CHARS = 50


class AadhaarExtractor(IFieldExtractor):
    """
    Extractor for Aadhaar cards.

    Cascades:
        aadhaar_number: single line → three 4-digit lines → grouped anywhere → digit stream
        full_name:      Name label → after "Government of India" → lines 2..9
        date_of_birth:  DOB label → standalone date line
        address:        Address label → S/O block → PIN window → house number
    """

    DOC_TYPE = DocType.AADHAAR
    FIELDS = ("full_name", "aadhaar_number", "date_of_birth", "address")
    FIELD_LABELS = {
        "full_name": "Name",
        "aadhaar_number": "Aadhaar Number",
        "date_of_birth": "Date of Birth",
        "address": "Address",
    }
    ANCHOR_FIELDS = ("aadhaar_number",)

    def __init__(
        self,
        address_min_length: int = 15,
        dob_year_range: tuple[int, int] = DOB_YEAR_RANGE,
    ):
        self._address_min_length = address_min_length
        self._dob_year_range = dob_year_range

    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        text = (ocr_text or "").replace("\r\n", "\n")
        lines = split_lines(text)
        trace = ExtractionTrace()

        fields = {
            "full_name": self._extract_name(text, lines, trace),
            "aadhaar_number": self._extract_number(text, lines, trace),
            "date_of_birth": self._extract_dob(text, lines, trace),
            "address": self._extract_address(text, trace),
        }
        return ExtractedDocumentRecord(self.DOC_TYPE, fields, trace.diagnostics)

    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        return is_valid_aadhaar(record.get("aadhaar_number"))

    def code_line(self, record: ExtractedDocumentRecord) -> str | None:
        masked = mask_sensitive_id(record.get("aadhaar_number"))
        return f"Aadhaar: {masked or 'Not found'}"

    # ─── Aadhaar number ─────────────────────────────────────

    def _extract_number(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        field = "aadhaar_number"
        value = (
            trace.record(field, "single_line", self._number_on_single_line(lines))
            or trace.record(field, "multi_line_join", self._number_across_lines(lines))
            or trace.record(field, "grouped_anywhere", self._number_grouped(text))
            or trace.record(field, "digit_stream", self._number_in_digit_stream(text))
        )
        if value and len(value) != 12:
            trace.reject(field, "length_check", "cleared: not exactly 12 digits")
            return ""
        return value

    @staticmethod
    def _number_on_single_line(lines: list[str]) -> str:
        for line in lines:
            stripped = line.strip()
            if ID_LABEL_RE.search(stripped) and not stripped[:1].isdigit():
                continue
            for pattern in ID_LINE_PATTERNS:
                match = pattern.match(stripped)
                if match:
                    digits = re.sub(r"\D", "", match.group(0))
                    if len(digits) == 12:
                        return digits
        return ""

    @staticmethod
    def _number_across_lines(lines: list[str]) -> str:
        groups: list[str] = []
        for line in lines:
            match = FOUR_DIGIT_LINE_RE.match(line.strip())
            if match:
                groups.append(match.group(1))
                if len(groups) == 3:
                    return "".join(groups)
            elif groups:
                groups.clear()
        return ""

    @staticmethod
    def _number_grouped(text: str) -> str:
        match = GROUPED_ID_RE.search(text)
        if match:
            return match.group(1) + match.group(2) + match.group(3)
        return ""

    @staticmethod
    def _number_in_digit_stream(text: str) -> str:
        match = DIGIT_STREAM_ID_RE.search(re.sub(r"\D", "", text))
        return match.group(0) if match else ""

    # ─── Name ───────────────────────────────────────────────

    def _extract_name(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        field = "full_name"

        match = LABELED_NAME_RE.search(text)
        if match:
            name = _clean_name(match.group(1))
            if (
                len(name) >= 3
                and not _is_excluded(name)
                and HAS_LETTER_RE.search(name)
                and not is_all_digits(name)
            ):
                trace.hit(field, "name_label")
                return name
            trace.reject(field, "name_label", "discarded: boilerplate or too short")

        name = self._name_after_header(lines)
        if name:
            trace.hit(field, "after_government_header")
            return name

        name = self._name_in_top_lines(lines)
        if name:
            trace.hit(field, "top_lines")
        return name

    @staticmethod
    def _name_after_header(lines: list[str]) -> str:
        for i in range(len(lines) - 1):
            if not GOVERNMENT_HEADER_RE.search(lines[i].strip()):
                continue
            for j in range(i + 1, min(i + 6, len(lines))):
                candidate = lines[j].strip()
                if (
                    not candidate
                    or is_all_digits(candidate)
                    or is_date_line(candidate)
                    or MARKER_AFTER_HEADER_RE.match(candidate)
                    or _is_excluded(candidate)
                ):
                    continue
                name = _accept_name_shape(candidate)
                if name:
                    return name
        return ""

    @staticmethod
    def _name_in_top_lines(lines: list[str]) -> str:
        for line in lines[2:10]:
            candidate = line.strip()
            if (
                not candidate
                or _is_excluded(candidate)
                or is_all_digits(candidate)
                or is_date_line(candidate)
                or MARKER_LINE_RE.match(candidate)
                or len(candidate) < 3
            ):
                continue
            name = _accept_name_shape(candidate)
            if name:
                return name
        return ""

    # ─── Date of birth ──────────────────────────────────────

    def _extract_dob(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        field = "date_of_birth"
        match = LABELED_DOB_RE.search(text)
        if match:
            value = date_from_groups(match, self._dob_year_range)
            if value:
                trace.hit(field, "dob_label")
                return value
            trace.reject(field, "dob_label", "cleared: not a calendar date")

        return trace.record(
            field,
            "standalone_date_line",
            first_standalone_date(lines, 2, 15, self._dob_year_range),
        )

    # ─── Address ────────────────────────────────────────────

    def _extract_address(self, text: str, trace: ExtractionTrace) -> str:
        field = "address"
        min_len = self._address_min_length

        for pattern in ADDRESS_LABEL_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            address = _collect_block(text[match.start(1):], LABEL_BLOCK_STOP_RE)
            if len(address) >= min_len and has_address_indicator(address):
                trace.hit(field, "address_label")
                return address
            trace.reject(field, "address_label", "discarded: too short or no address indicators")

        match = RELATION_RE.search(text)
        if match:
            address = _collect_block(text[match.start():], RELATION_BLOCK_STOP_RE)
            if len(address) >= min_len and has_address_indicator(address):
                trace.hit(field, "relation_prefix")
                return address
            trace.reject(field, "relation_prefix", "discarded: too short or no address indicators")

        address = _address_around_pin(text)
        if address:
            if len(address) >= min_len and has_address_indicator(address):
                trace.hit(field, "pin_code_window")
                return address
            trace.reject(field, "pin_code_window", "discarded: too short or no address indicators")

        match = HOUSE_NUMBER_RE.search(text)
        if match:
            address = _collect_block(text[match.start():], None)
            if len(address) >= min_len:
                trace.hit(field, "house_number")
                return address
            trace.reject(field, "house_number", "discarded: too short")

        return ""


# ─── Helpers ────────────────────────────────────────────────

def _is_excluded(text: str) -> bool:
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in NAME_EXCLUDE_PATTERNS)


def _clean_name(name: str) -> str:
    cleaned = GOVERNMENT_TEXT_RE.sub("", name.strip()).strip()
    for pattern in NAME_EXCLUDE_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1).strip()
    return cleaned


def _accept_name_shape(candidate: str) -> str:
    match = NAME_SHAPE_RE.match(candidate)
    if not match:
        return ""
    name = _clean_name(match.group(1))
    if len(name) >= 3 and not _is_excluded(name) and HAS_LETTER_RE.search(name):
        return name
    return ""


def clean_address(address: str) -> str:
    cleaned = ADDRESS_NOISE_RE.sub("", address.strip()).strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    return re.sub(r"^[,\s:]+|[,\s:]+$", "", cleaned)


def _collect_block(text: str, stop_re: re.Pattern | None) -> str:
    """Join up to six lines from `text`, stopping at an ID number or stop line."""
    collected: list[str] = []
    for line in text.split("\n")[:BLOCK_MAX_LINES]:
        stripped = line.strip()
        if not stripped:
            continue
        if ID_NUMBER_LINE_RE.match(stripped):
            break
        if stop_re is not None and stop_re.match(stripped):
            break
        collected.append(stripped)
    return clean_address(" ".join(collected))


def _address_around_pin(text: str) -> str:
    """Lines before the first PIN code (back to a name/DOB line) plus the PIN line."""
    match = PIN_CODE_RE.search(text)
    if not match:
        return ""
    idx = match.start()
    before = text[max(0, idx - PIN_LOOKBEHIND_CHARS):idx]
    after = text[idx:idx + PIN_LOOKAHEAD_CHARS]

    collected: list[str] = []
    for line in reversed(before.split("\n")):
        stripped = line.strip()
        if not stripped:
            continue
        if STANDALONE_DATE_LINE_RE.match(stripped) or PIN_WINDOW_STOP_RE.match(stripped):
            break
        if NAME_LIKE_LINE_RE.match(stripped) and not has_address_indicator(stripped):
            break
        collected.insert(0, stripped)
        if len(collected) >= 5:
            break

    for line in after.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if ID_NUMBER_LINE_RE.match(stripped):
            break
        collected.append(stripped)
        if len(collected) >= BLOCK_MAX_LINES:
            break

    return clean_address(" ".join(collected))

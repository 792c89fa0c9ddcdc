"""
Adapter: PAN Card Field Extractor.

Pulls cardholder name, PAN code, date of birth and father's name out of
OCR text of a PAN card. Names are returned uppercased as printed.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.validators import DOB_YEAR_RANGE, is_valid_pan
from kycscan.infrastructure.extractors.common import (
    ExtractionTrace,
    date_from_groups,
    first_standalone_date,
    is_all_digits,
    is_date_line,
    split_lines,
)

PAN_LINE_RE = re.compile(r"^([A-Z]{5}[0-9]{4}[A-Z])$")
PAN_ANYWHERE_RE = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")
LABELED_PAN_RE = re.compile(r"(?:PAN|PERMANENT ACCOUNT NUMBER)\s*:?\s*([A-Z]{5}[0-9]{4}[A-Z])", re.I)

EXCLUDE_PATTERNS = (
    re.compile(r"INCOME TAX DEPARTMENT", re.I),
    re.compile(r"GOVT\.?\s*OF\s*INDIA", re.I),
    re.compile(r"GOVERNMENT OF INDIA", re.I),
    re.compile(r"PERMANENT ACCOUNT NUMBER", re.I),
    re.compile(r"आयकर विभाग"),
    re.compile(r"भारत सरकार"),
    re.compile(r"स्थायी खाता संख्या"),
    re.compile(r"SIGNATURE", re.I),
    re.compile(r"^PAN$", re.I),
    re.compile(r"^CARD$", re.I),
    re.compile(r"^(Male|Female|M|F)$", re.I),
)

LABELED_NAME_RE = re.compile(r"(?:Name|नाम|NAME)\s*[:\s]\s*([A-Za-z\s]{3,50}?)(?:\n|$)", re.I)
LABELED_FATHER_RE = re.compile(
    r"(?:Father(?:'s)?\s*Name|पिता का नाम)\s*[:\s]\s*([A-Za-z\s]{3,50}?)(?:\n|$)", re.I
)
PAN_HEADER_RE = re.compile(r"Permanent Account Number|स्थायी खाता संख्या", re.I)
MIXED_CASE_NAME_RE = re.compile(r"^([A-Za-z]{2,}(?:\s+[A-Za-z]{2,}){0,3})$")
UPPER_NAME_RE = re.compile(r"^([A-Z]{2,}(?:\s+[A-Z]{2,}){0,3})$")
HAS_LETTER_RE = re.compile(r"[A-Za-z]")

LABELED_DOB_RE = re.compile(
    r"(?:DOB|Date of Birth|जन्म तिथि|Birth)\s*[:\s]\s*(\d{2})[-/](\d{2})[-/](\d{4})\b", re.I
)


class PANExtractor(IFieldExtractor):
    """
    Extractor for PAN cards.

    Cascades:
        pan_number:    own line → anywhere (uppercased) → PAN label; strict grammar check
        full_name:     Name label → after "Permanent Account Number" → all-caps line in 2..14
        father_name:   Father's Name label → all-caps line just below the cardholder name
        date_of_birth: DOB/Birth label → standalone date line
    """

    DOC_TYPE = DocType.PAN
    FIELDS = ("full_name", "pan_number", "date_of_birth", "father_name")
    FIELD_LABELS = {
        "full_name": "Name",
        "pan_number": "PAN Number",
        "date_of_birth": "Date of Birth",
        "father_name": "Father's Name",
    }
    ANCHOR_FIELDS = ("pan_number",)

    def __init__(self, dob_year_range: tuple[int, int] = DOB_YEAR_RANGE):
        self._dob_year_range = dob_year_range

    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        text = (ocr_text or "").replace("\r\n", "\n")
        lines = split_lines(text)
        trace = ExtractionTrace()

        full_name = self._extract_name(text, lines, trace)
        fields = {
            "full_name": full_name,
            "pan_number": self._extract_pan(text, lines, trace),
            "date_of_birth": self._extract_dob(text, lines, trace),
            "father_name": self._extract_father_name(text, lines, full_name, trace),
        }
        return ExtractedDocumentRecord(self.DOC_TYPE, fields, trace.diagnostics)

    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        return is_valid_pan(record.get("pan_number"))

    def code_line(self, record: ExtractedDocumentRecord) -> str | None:
        return f"PAN: {record.get('pan_number') or 'Not found'}"

    # ─── PAN code ───────────────────────────────────────────

    def _extract_pan(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        field = "pan_number"
        upper = text.upper()
        value = ""

        for line in lines:
            match = PAN_LINE_RE.match(line.strip().upper())
            if match:
                value = trace.record(field, "own_line", match.group(1))
                break

        if not value:
            match = PAN_ANYWHERE_RE.search(upper)
            if match:
                value = trace.record(field, "anywhere", match.group(0))

        if not value:
            match = LABELED_PAN_RE.search(upper)
            if match:
                value = trace.record(field, "pan_label", match.group(1).upper())

        if value and not is_valid_pan(value):
            trace.reject(field, "grammar_check", "cleared: not AAAAA9999A")
            return ""
        return value

    # ─── Names ──────────────────────────────────────────────

    def _extract_name(self, text: str, lines: list[str], trace: ExtractionTrace) -> str:
        field = "full_name"

        match = LABELED_NAME_RE.search(text)
        if match:
            name = match.group(1).strip()
            if len(name) >= 3 and not _is_excluded(name) and HAS_LETTER_RE.search(name):
                trace.hit(field, "name_label")
                return name.upper()
            trace.reject(field, "name_label", "discarded: boilerplate or too short")

        for i, line in enumerate(lines):
            if not PAN_HEADER_RE.search(line.strip()):
                continue
            for candidate in lines[i + 1:i + 5]:
                candidate = candidate.strip()
                if _skip_name_candidate(candidate):
                    continue
                match = MIXED_CASE_NAME_RE.match(candidate)
                if match and len(match.group(1)) >= 3:
                    trace.hit(field, "after_pan_header")
                    return match.group(1).strip().upper()

        for candidate in lines[2:15]:
            candidate = candidate.strip()
            if _skip_name_candidate(candidate) or is_all_digits(candidate):
                continue
            match = UPPER_NAME_RE.match(candidate)
            if match and len(match.group(1)) >= 3:
                trace.hit(field, "all_caps_line")
                return match.group(1).strip()

        return ""

    def _extract_father_name(
        self, text: str, lines: list[str], full_name: str, trace: ExtractionTrace
    ) -> str:
        field = "father_name"

        match = LABELED_FATHER_RE.search(text)
        if match:
            name = match.group(1).strip()
            if len(name) >= 3 and not _is_excluded(name) and HAS_LETTER_RE.search(name):
                trace.hit(field, "father_label")
                return name.upper()
            trace.reject(field, "father_label", "discarded: boilerplate or too short")

        if not full_name:
            return ""

        name_index = next(
            (i for i, line in enumerate(lines) if full_name in line.strip().upper()),
            -1,
        )
        if name_index == -1:
            return ""

        for candidate in lines[name_index + 1:name_index + 3]:
            candidate = candidate.strip()
            if _skip_name_candidate(candidate):
                continue
            match = UPPER_NAME_RE.match(candidate.upper())
            if match and len(match.group(1)) >= 3 and match.group(1) != full_name:
                trace.hit(field, "below_cardholder_name")
                return match.group(1).strip()
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


# ─── Helpers ────────────────────────────────────────────────

def _is_excluded(text: str) -> bool:
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in EXCLUDE_PATTERNS)


def _skip_name_candidate(candidate: str) -> bool:
    return (
        not candidate
        or is_date_line(candidate)
        or PAN_LINE_RE.match(candidate.upper()) is not None
        or _is_excluded(candidate)
    )

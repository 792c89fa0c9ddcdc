"""
Shared pieces for the field extractors.

Every extractor runs an ordered pattern cascade per field: the first
strategy that matches wins and is immediately validated. A failed
validation clears the tentative value and is recorded as a diagnostic.
"""

import re

from kycscan.core.entities.extraction import FieldDiagnostic
from kycscan.core.validators import DOB_YEAR_RANGE, validate_calendar_date

# DD/MM/YYYY or DD-MM-YYYY anywhere in a line
DATE_IN_TEXT_RE = re.compile(r"\d{2}[-/]\d{2}[-/]\d{4}")
DATE_GROUPS_RE = re.compile(r"(\d{2})[-/](\d{2})[-/](\d{4})")
STANDALONE_DATE_RE = re.compile(r"^(\d{2})[-/](\d{2})[-/](\d{4})$")
ALL_DIGITS_RE = re.compile(r"^\d+$")


def split_lines(ocr_text: str) -> list[str]:
    """Split OCR text into raw lines (CRLF tolerated)."""
    return (ocr_text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n")


def format_date(day: str, month: str, year: str) -> str:
    return f"{day}/{month}/{year}"


def date_from_groups(match: re.Match | None, year_range: tuple[int, int]) -> str:
    """DD/MM/YYYY from a (day, month, year) match, "" if it fails the calendar check."""
    if not match:
        return ""
    day, month, year = match.group(1), match.group(2), match.group(3)
    if validate_calendar_date(day, month, year, year_range):
        return format_date(day, month, year)
    return ""


def first_standalone_date(
    lines: list[str],
    start: int = 2,
    stop: int = 15,
    year_range: tuple[int, int] = DOB_YEAR_RANGE,
) -> str:
    """First calendar-valid date that sits alone on a line in lines[start:stop]."""
    for line in lines[start:stop]:
        value = date_from_groups(STANDALONE_DATE_RE.match(line.strip()), year_range)
        if value:
            return value
    return ""


def first_date_in_lines(lines: list[str], year_range: tuple[int, int]) -> str:
    """First calendar-valid date anywhere, scanning line by line."""
    for line in lines:
        value = date_from_groups(DATE_GROUPS_RE.search(line), year_range)
        if value:
            return value
    return ""


def first_vocabulary_hit(upper_text: str, vocabulary: tuple[str, ...] | list[str]) -> str:
    """First vocabulary entry (in list order) contained in the text."""
    for entry in vocabulary:
        if entry in upper_text:
            return entry
    return ""


def is_date_line(line: str) -> bool:
    return DATE_IN_TEXT_RE.search(line) is not None


def is_all_digits(line: str) -> bool:
    return ALL_DIGITS_RE.match(line) is not None


class ExtractionTrace:
    """Collects FieldDiagnostic entries while an extractor runs."""

    def __init__(self):
        self.diagnostics: list[FieldDiagnostic] = []

    def hit(self, field: str, strategy: str, detail: str = "") -> None:
        self.diagnostics.append(FieldDiagnostic(field, strategy, True, detail))

    def reject(self, field: str, strategy: str, detail: str) -> None:
        self.diagnostics.append(FieldDiagnostic(field, strategy, False, detail))

    def record(self, field: str, strategy: str, value: str) -> str:
        """Note a successful strategy if `value` is non-empty; returns `value`."""
        if value:
            self.hit(field, strategy)
        return value

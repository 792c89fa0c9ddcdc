"""
Validators & Formatters.

Field-level format rules shared by the extractors and re-applied to every
hand edit made on the review form. All functions are pure.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord

AADHAAR_RE = re.compile(r"^[0-9]{12}$")
PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

DOB_YEAR_RANGE = (1900, 2099)
GST_REGISTRATION_YEAR_RANGE = (2000, 2099)


# ─── Live-typing formatters ─────────────────────────────

def format_date_input(raw: str) -> str:
    """Digits only, max 8, slashes inserted as the user types: DD/MM/YYYY."""
    digits = re.sub(r"\D", "", raw or "")[:8]
    if len(digits) <= 2:
        return digits
    if len(digits) <= 4:
        return f"{digits[:2]}/{digits[2:]}"
    return f"{digits[:2]}/{digits[2:4]}/{digits[4:]}"


def format_id_code(raw: str, max_len: int) -> str:
    """Alphanumerics only, uppercased, truncated to `max_len`."""
    return re.sub(r"[^A-Za-z0-9]", "", raw or "").upper()[:max_len]


def format_numeric(raw: str) -> str:
    """Digits and '.' only (units, amounts)."""
    return re.sub(r"[^0-9.]", "", raw or "")


def format_digits(raw: str, max_len: int) -> str:
    return re.sub(r"\D", "", raw or "")[:max_len]


def format_registration_number(raw: str) -> str:
    """Alphanumerics plus '-' and '/', uppercased, max 30."""
    return re.sub(r"[^A-Za-z0-9\-/]", "", raw or "").upper()[:30]


# ─── Checks ─────────────────────────────────────────────

def validate_calendar_date(
    day: int | str,
    month: int | str,
    year: int | str,
    year_range: tuple[int, int] = DOB_YEAR_RANGE,
) -> bool:
    """Range check (day 1-31, month 1-12, year in range). No per-month day check."""
    try:
        d, m, y = int(day), int(month), int(year)
    except (TypeError, ValueError):
        return False
    return 1 <= d <= 31 and 1 <= m <= 12 and year_range[0] <= y <= year_range[1]


def is_valid_aadhaar(value: str) -> bool:
    return bool(value) and AADHAAR_RE.match(value) is not None


def is_valid_pan(value: str) -> bool:
    return bool(value) and PAN_RE.match(value) is not None


def is_valid_gstin(value: str) -> bool:
    return bool(value) and GSTIN_RE.match(value) is not None


def mask_sensitive_id(value: str) -> str:
    """XXXX-XXXX-1234 for a 12-digit ID, "" otherwise."""
    if not value or len(value) != 12 or not value.isdigit():
        return ""
    return f"XXXX-XXXX-{value[-4:]}"


# ─── Hand edits ─────────────────────────────────────────

def _keep(raw: str) -> str:
    return raw or ""


def _upper(raw: str) -> str:
    return (raw or "").upper()


FIELD_FORMATTERS: dict[DocType, dict] = {
    DocType.AADHAAR: {
        "aadhaar_number": lambda raw: format_digits(raw, 12),
        "date_of_birth": format_date_input,
    },
    DocType.PAN: {
        "full_name": _upper,
        "father_name": _upper,
        "pan_number": lambda raw: format_id_code(raw, 10),
        "date_of_birth": format_date_input,
    },
    DocType.ELECTRICITY_BILL: {
        "consumer_name": _upper,
        "consumer_number": _upper,
        "meter_number": _upper,
        "bill_date": format_date_input,
        "due_date": format_date_input,
        "units_consumed": format_numeric,
        "bill_amount": format_numeric,
    },
    DocType.GST: {
        "gstin": lambda raw: format_id_code(raw, 15),
        "legal_name": _upper,
        "trade_name": _upper,
        "constitution_of_business": _upper,
        "date_of_registration": format_date_input,
        "state_jurisdiction": _upper,
    },
    DocType.SOCIETY_REGISTRATION: {
        "society_name": _upper,
        "registration_number": format_registration_number,
        "date_of_registration": format_date_input,
        "type_of_society": _upper,
        "registering_authority": _upper,
        "state": _upper,
    },
}


def formatter_for(doc_type: DocType, field_name: str):
    """Formatter applied to a field on edit (identity for free text)."""
    return FIELD_FORMATTERS.get(doc_type, {}).get(field_name, _keep)


def apply_field_edit(
    record: ExtractedDocumentRecord, field_name: str, raw: str
) -> ExtractedDocumentRecord:
    """Apply a user edit through the field's formatter. Returns a new record."""
    return record.with_field(field_name, formatter_for(record.doc_type, field_name)(raw))

"""
Adapter: Electricity Bill Field Extractor.

Reads consumer/meter identifiers, provider (DISCOM), billing period,
dates, consumption and amount from OCR text of an Indian electricity bill.
Each field is a short list of labeled patterns; first match wins.
"""

import re

from kycscan.core.entities.document import DocType
from kycscan.core.entities.extraction import ExtractedDocumentRecord
from kycscan.core.interfaces.field_extractor import IFieldExtractor
from kycscan.core.validators import DOB_YEAR_RANGE, validate_calendar_date
from kycscan.infrastructure.extractors.common import ExtractionTrace

# Ordered: first provider whose name/alias appears wins
DISCOMS = (
    (re.compile(r"MSEDCL|MAHARASHTRA STATE ELECTRICITY", re.I), "MSEDCL"),
    (re.compile(r"TATA POWER", re.I), "Tata Power"),
    (re.compile(r"ADANI ELECTRICITY", re.I), "Adani Electricity"),
    (re.compile(r"BSES RAJDHANI", re.I), "BSES Rajdhani"),
    (re.compile(r"BSES YAMUNA", re.I), "BSES Yamuna"),
    (re.compile(r"NDPL|NORTH DELHI POWER", re.I), "NDPL"),
    (re.compile(r"BESCOM|BANGALORE ELECTRICITY", re.I), "BESCOM"),
    (re.compile(r"CESC", re.I), "CESC"),
    (re.compile(r"PSPCL|PUNJAB STATE POWER", re.I), "PSPCL"),
    (re.compile(r"UPPCL|UTTAR PRADESH POWER", re.I), "UPPCL"),
    (re.compile(r"DHBVN|DAKSHIN HARYANA", re.I), "DHBVN"),
    (re.compile(r"UHBVN|UTTAR HARYANA", re.I), "UHBVN"),
    (re.compile(r"KSEB|KERALA STATE ELECTRICITY", re.I), "KSEB"),
    (re.compile(r"TANGEDCO|TAMIL NADU GENERATION", re.I), "TANGEDCO"),
    (re.compile(r"APSPDCL|ANDHRA PRADESH", re.I), "APSPDCL"),
    (re.compile(r"TSSPDCL|TELANGANA", re.I), "TSSPDCL"),
    (re.compile(r"WBSEDCL|WEST BENGAL", re.I), "WBSEDCL"),
    (re.compile(r"GETCO|GUJARAT ENERGY", re.I), "GETCO"),
    (re.compile(r"MGVCL|MADHYA GUJARAT", re.I), "MGVCL"),
    (re.compile(r"PGVCL|PASCHIM GUJARAT", re.I), "PGVCL"),
    (re.compile(r"DGVCL|DAKSHIN GUJARAT", re.I), "DGVCL"),
    (re.compile(r"UGVCL|UTTAR GUJARAT", re.I), "UGVCL"),
    (re.compile(r"JVVNL|JAIPUR VIDYUT", re.I), "JVVNL"),
    (re.compile(r"AVVNL|AJMER VIDYUT", re.I), "AVVNL"),
    (re.compile(r"JDVVNL|JODHPUR VIDYUT", re.I), "JDVVNL"),
)

CONSUMER_NUMBER_PATTERNS = (
    ("consumer_label", re.compile(
        r"(?:CONSUMER\s*(?:NO|NUMBER|ID)|CA\s*(?:NO|NUMBER)|ACCOUNT\s*(?:NO|NUMBER)|K\s*(?:NO|NUMBER))"
        r"[.:\s]*([A-Z0-9]{6,20})",
        re.I,
    )),
    ("bare_label_digits", re.compile(r"(?:CONSUMER|CA|ACCOUNT|K)[\s:]*([0-9]{8,15})", re.I)),
)

METER_NUMBER_PATTERNS = (
    ("meter_label", re.compile(
        r"(?:METER\s*(?:NO|NUMBER|SR\.?\s*NO)|METER\s*ID)[.:\s]*([A-Z0-9]{6,20})", re.I
    )),
    ("meter_digits", re.compile(r"(?:M\.?\s*NO|METER)[:\s]*([0-9]{8,15})", re.I)),
)

# Single-line capture; a name never spans label lines
CONSUMER_NAME_PATTERNS = (
    ("consumer_name_label", re.compile(
        r"(?:CONSUMER\s*NAME|NAME\s*OF\s*CONSUMER|NAME)[: \t]*([A-Z][A-Z \t.]{2,50})", re.I
    )),
    ("account_holder_label", re.compile(
        r"(?:ACCOUNT\s*HOLDER|CUSTOMER\s*NAME)[: \t]*([A-Z][A-Z \t.]{2,50})", re.I
    )),
)
NAME_NOISE_RE = re.compile(r"ADDRESS|METER|BILL|DATE|AMOUNT|UNIT", re.I)

MONTH_RANGE_RE = re.compile(
    r"(?:BILLING\s*PERIOD|BILL\s*PERIOD|PERIOD)[:\s]*"
    r"([A-Z]{3,9}\s*\d{2,4}\s*[-–TO]*\s*[A-Z]{3,9}\s*\d{2,4})",
    re.I,
)
DATE_RANGE_RE = re.compile(
    r"(?:FROM|PERIOD)[:\s]*(\d{2}[/-]\d{2}[/-]\d{2,4})\s*(?:TO|[-–])\s*(\d{2}[/-]\d{2}[/-]\d{2,4})",
    re.I,
)

SHORT_DATE = r"(\d{2}[/-]\d{2}[/-]\d{2,4})"
BILL_DATE_PATTERNS = (
    ("bill_date_label", re.compile(r"(?:BILL\s*DATE|BILLING\s*DATE|DATE\s*OF\s*BILL)[:\s]*" + SHORT_DATE, re.I)),
    ("issue_date_label", re.compile(r"(?:ISSUE\s*DATE|DATED)[:\s]*" + SHORT_DATE, re.I)),
)
DUE_DATE_PATTERNS = (
    ("due_date_label", re.compile(r"(?:DUE\s*DATE|PAYMENT\s*DUE|LAST\s*DATE)[:\s]*" + SHORT_DATE, re.I)),
    ("pay_by_label", re.compile(r"(?:PAY\s*BY|PAY\s*BEFORE)[:\s]*" + SHORT_DATE, re.I)),
)

UNITS_PATTERNS = (
    ("units_label", re.compile(
        r"(?:UNITS?\s*CONSUMED|CONSUMPTION|TOTAL\s*UNITS?|KWH\s*CONSUMED)[:\s]*(\d+(?:\.\d+)?)\s*(?:KWH|UNITS?)?",
        re.I,
    )),
    ("units_suffix", re.compile(r"(\d+(?:\.\d+)?)\s*(?:KWH|UNITS)\s*(?:CONSUMED|CONSUMPTION)", re.I)),
)

CURRENCY = r"(?:RS\.?|₹|INR)"
AMOUNT = r"(\d+(?:,\d{3})*(?:\.\d{2})?)"
AMOUNT_PATTERNS = (
    ("amount_label", re.compile(
        r"(?:TOTAL\s*AMOUNT|AMOUNT\s*PAYABLE|NET\s*AMOUNT|CURRENT\s*BILL\s*AMOUNT|AMOUNT\s*DUE)[:\s]*"
        + CURRENCY + r"?\s*" + AMOUNT,
        re.I,
    )),
    ("currency_suffix", re.compile(CURRENCY + r"\s*" + AMOUNT + r"\s*(?:TOTAL|PAYABLE|DUE)", re.I)),
    ("bill_amount_label", re.compile(r"(?:BILL\s*AMOUNT)[:\s]*" + CURRENCY + r"?\s*" + AMOUNT, re.I)),
)

SERVICE_ADDRESS_RE = re.compile(
    r"(?:SERVICE\s*ADDRESS|SUPPLY\s*ADDRESS|PREMISES\s*ADDRESS|ADDRESS)[:\s]*([A-Z0-9][A-Z0-9\s,.\-/]{10,150})",
    re.I,
)
ADDRESS_NOISE_RE = re.compile(r"CONSUMER\s*NO|METER\s*NO|BILL\s*DATE", re.I)

SPLIT_DATE_RE = re.compile(r"^(\d{2})[/-](\d{2})[/-](\d{2,4})$")


class ElectricityBillExtractor(IFieldExtractor):
    """
    Extractor for electricity bills.

    The bill counts as auto-filled when a consumer number or a meter
    number was found.
    """

    DOC_TYPE = DocType.ELECTRICITY_BILL
    FIELDS = (
        "consumer_name",
        "consumer_number",
        "meter_number",
        "discom_name",
        "billing_period",
        "bill_date",
        "due_date",
        "units_consumed",
        "bill_amount",
        "service_address",
    )
    FIELD_LABELS = {
        "consumer_name": "Consumer Name",
        "consumer_number": "Consumer Number",
        "meter_number": "Meter Number",
        "discom_name": "DISCOM",
        "billing_period": "Billing Period",
        "bill_date": "Bill Date",
        "due_date": "Due Date",
        "units_consumed": "Units",
        "bill_amount": "Amount",
        "service_address": "Address",
    }
    ANCHOR_FIELDS = ("consumer_number", "meter_number")

    def extract(self, ocr_text: str) -> ExtractedDocumentRecord:
        text = (ocr_text or "").replace("\r\n", "\n")
        trace = ExtractionTrace()

        fields = {
            "consumer_name": self._extract_consumer_name(text, trace),
            "consumer_number": _first_capture(text, CONSUMER_NUMBER_PATTERNS, "consumer_number", trace),
            "meter_number": _first_capture(text, METER_NUMBER_PATTERNS, "meter_number", trace),
            "discom_name": self._extract_discom(text, trace),
            "billing_period": self._extract_billing_period(text, trace),
            "bill_date": self._extract_date(text, BILL_DATE_PATTERNS, "bill_date", trace),
            "due_date": self._extract_date(text, DUE_DATE_PATTERNS, "due_date", trace),
            "units_consumed": _first_capture(text, UNITS_PATTERNS, "units_consumed", trace),
            "bill_amount": _first_capture(text, AMOUNT_PATTERNS, "bill_amount", trace).replace(",", ""),
            "service_address": self._extract_service_address(text, trace),
        }
        return ExtractedDocumentRecord(self.DOC_TYPE, fields, trace.diagnostics)

    def is_anchor_valid(self, record: ExtractedDocumentRecord) -> bool:
        return bool(record.get("consumer_number") or record.get("meter_number"))

    # ─── Fields ─────────────────────────────────────────────

    @staticmethod
    def _extract_discom(text: str, trace: ExtractionTrace) -> str:
        for pattern, name in DISCOMS:
            if pattern.search(text):
                trace.hit("discom_name", "provider_alias", name)
                return name
        return ""

    @staticmethod
    def _extract_consumer_name(text: str, trace: ExtractionTrace) -> str:
        for strategy, pattern in CONSUMER_NAME_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            name = match.group(1).strip()
            if NAME_NOISE_RE.search(name):
                trace.reject("consumer_name", strategy, "discarded: contains bill vocabulary")
                continue
            trace.hit("consumer_name", strategy)
            return name
        return ""

    @staticmethod
    def _extract_billing_period(text: str, trace: ExtractionTrace) -> str:
        match = MONTH_RANGE_RE.search(text)
        if match:
            trace.hit("billing_period", "month_range")
            return match.group(1).strip()

        match = DATE_RANGE_RE.search(text)
        if match:
            start, end = match.group(1), match.group(2)
            if _valid_bill_date(start) and _valid_bill_date(end):
                trace.hit("billing_period", "date_range")
                return f"{start} - {end}"
            trace.reject("billing_period", "date_range", "cleared: not a calendar date")
        return ""

    @staticmethod
    def _extract_date(text: str, patterns, field: str, trace: ExtractionTrace) -> str:
        for strategy, pattern in patterns:
            match = pattern.search(text)
            if not match:
                continue
            value = match.group(1).replace("-", "/")
            if _valid_bill_date(value):
                trace.hit(field, strategy)
                return value
            trace.reject(field, strategy, "cleared: not a calendar date")
        return ""

    @staticmethod
    def _extract_service_address(text: str, trace: ExtractionTrace) -> str:
        match = SERVICE_ADDRESS_RE.search(text)
        if not match:
            return ""
        address = match.group(1).strip()
        if ADDRESS_NOISE_RE.search(address):
            trace.reject("service_address", "address_label", "discarded: swallowed other labels")
            return ""
        trace.hit("service_address", "address_label")
        return address


# ─── Helpers ────────────────────────────────────────────────

def _first_capture(text: str, patterns, field: str, trace: ExtractionTrace) -> str:
    for strategy, pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1):
            trace.hit(field, strategy)
            return match.group(1).strip()
    return ""


def _valid_bill_date(value: str) -> bool:
    """DD/MM/YY or DD/MM/YYYY with a plausible day and month."""
    match = SPLIT_DATE_RE.match(value)
    if not match:
        return False
    day, month, year = match.groups()
    if len(year) == 2:
        year = f"20{year}"
    elif len(year) != 4:
        return False
    return validate_calendar_date(day, month, year, DOB_YEAR_RANGE)

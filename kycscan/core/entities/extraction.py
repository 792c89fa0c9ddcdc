"""
Entity: Extracted Document Record

Structured fields pulled out of one OCR text. A field is either a
confidently extracted string or "" (absent, never a guess). Each record
also carries diagnostics describing which strategy filled a field or why a
tentative match was thrown away.
"""

from dataclasses import dataclass, field, replace

from kycscan.core.entities.document import DocType


@dataclass(frozen=True)
class FieldDiagnostic:
    """One step of a field's pattern cascade."""
    field: str                # ex: "aadhaar_number"
    strategy: str             # ex: "multi_line_join"
    matched: bool             # True if this strategy populated the field
    detail: str = ""          # ex: "cleared: not exactly 12 digits"


@dataclass
class ExtractedDocumentRecord:
    """Fields extracted from a single scan (or typed in manually)."""
    doc_type: DocType
    fields: dict[str, str]
    diagnostics: list[FieldDiagnostic] = field(default_factory=list)

    @classmethod
    def empty(cls, doc_type: DocType, field_names: tuple[str, ...]) -> "ExtractedDocumentRecord":
        return cls(doc_type=doc_type, fields={name: "" for name in field_names})

    def get(self, name: str) -> str:
        return self.fields.get(name, "")

    def found_fields(self) -> list[str]:
        """Names of populated fields, in schema order."""
        return [name for name, value in self.fields.items() if value]

    def is_empty(self) -> bool:
        return not self.found_fields()

    def strategy_for(self, name: str) -> str | None:
        """Strategy that filled `name`, or None if it stayed empty."""
        if not self.get(name):
            return None
        for diag in reversed(self.diagnostics):
            if diag.field == name and diag.matched:
                return diag.strategy
        return None

    def with_field(self, name: str, value: str) -> "ExtractedDocumentRecord":
        """Copy of the record with one field replaced (user edits)."""
        if name not in self.fields:
            raise KeyError(f"{self.doc_type.value} has no field '{name}'")
        fields = dict(self.fields)
        fields[name] = value
        return replace(self, fields=fields, diagnostics=list(self.diagnostics))


@dataclass(frozen=True)
class Classification:
    """Auto-filled vs. needs-manual-entry verdict for a record."""
    is_manual_entry: bool
    anchor_fields: tuple[str, ...]
    anchor_valid: bool

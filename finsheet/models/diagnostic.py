from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

"""RowDiagnostic model for row-level skip and warning reporting.

A diagnostic names the sheet, the 1-based data row, the semantic field involved
and a reason in UPPER_SNAKE form. Skipped rows and kept-but-degraded rows use the
same record; NormalizationResult keeps them in separate collections.

The JSON Lines form adds a UTC timestamp and the source file name, the record
itself carries neither so that normalization output stays deterministic.
"""

__all__ = [
    "DiagnosticReason",
    "RowDiagnostic",
]


class DiagnosticReason(str, Enum):
    """Reason category of a row diagnostic.

    - MISSING_REQUIRED_FIELD: required header not found or its cell is blank (row skipped)
    - INVALID_AMOUNT: required amount not numeric after symbol stripping (row skipped)
    - INVALID_DATE: required schedule date unparseable in strict mode (row skipped)
    - UNPARSED_DATE: date kept as original text (row kept)
    - INVALID_OPTIONAL_AMOUNT: optional amount unparseable, default used (row kept)
    """
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DATE = "INVALID_DATE"
    UNPARSED_DATE = "UNPARSED_DATE"
    INVALID_OPTIONAL_AMOUNT = "INVALID_OPTIONAL_AMOUNT"


@dataclass(frozen=True)
class RowDiagnostic:
    """Structured diagnostic for one row.

    Attributes:
        sheet: Sheet name within the workbook
        row: 1-based data row position (header row not counted)
        reason: DiagnosticReason value
        field: Semantic field the diagnostic is about (e.g. "amount")
        value: Offending raw value rendered as text, None when the cell was blank
    """
    sheet: str
    row: int
    reason: DiagnosticReason
    field: str
    value: str | None = None

    @staticmethod
    def create(sheet: str, row: int, reason: DiagnosticReason, field: str, value: Any = None) -> RowDiagnostic:
        """Create a diagnostic, rendering the raw value as text."""
        return RowDiagnostic(
            sheet=sheet,
            row=row,
            reason=reason,
            field=field,
            value=None if value is None else str(value),
        )

    def to_json_line(self, file: str) -> str:
        """Serialize to a JSON Lines record with a fixed key set.

        Keys: timestamp, file, sheet, row, reason, field, value
        """
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        data = asdict(self)
        data["reason"] = self.reason.value
        return json.dumps({"timestamp": ts, "file": file, **data}, ensure_ascii=False)

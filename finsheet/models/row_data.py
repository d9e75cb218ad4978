from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the workbook normalization engine.

RowData represents a single data row of a sheet as handed over by the cell grid
adapter: header label -> raw cell value, exactly as the decoder produced it.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single raw data row.

    The row_number is the 1-based position of the row below the header row, so
    the spreadsheet row is ``row_number + 1``. Blank rows dropped by the adapter
    keep their slot in the numbering.
    """
    row_number: int  # 1-based data row position (header row not counted)
    values: dict[str, Any]  # Header label -> raw cell value

    def get(self, label: str | None) -> Any:
        """Return the raw value under ``label`` (None for unknown or missing labels)."""
        if label is None:
            return None
        return self.values.get(label)

    @property
    def sheet_row(self) -> int:
        return self.row_number + 1

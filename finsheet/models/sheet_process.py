from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""SheetRole enum and SheetProcess model for the workbook normalization engine.

SheetProcess is the per-sheet outcome of a normalization run: which role the
sheet was given, how many data rows it had and what became of them.
"""

__all__ = [
    "SheetRole",
    "SheetProcess",
]


class SheetRole(Enum):
    """Semantic category of a sheet, assigned once by the classifier.

    - TRANSACTIONS: income / expense ledger rows (default for unknown names)
    - INSTALLMENTS: EMI / loan schedules
    - SAVINGS_GOALS: savings targets with deadlines
    """
    TRANSACTIONS = "transactions"
    INSTALLMENTS = "installments"
    SAVINGS_GOALS = "savings_goals"


@dataclass(frozen=True)
class SheetProcess:
    """Processing unit summary for a single sheet."""
    sheet_name: str  # Sheet name as found in the workbook
    role: SheetRole  # Role assigned by the classifier
    data_rows: int = 0  # Non-blank data rows seen
    emitted_records: int = 0  # Records produced
    skipped_rows: int = 0  # Rows dropped with a diagnostic
    # Required fields whose header could not be resolved for this sheet
    unresolved_fields: tuple[str, ...] = field(default_factory=tuple)

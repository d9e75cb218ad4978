from __future__ import annotations

from dataclasses import dataclass, field

from .diagnostic import DiagnosticReason, RowDiagnostic
from .records import Installment, SavingsGoal, Transaction
from .sheet_process import SheetProcess

"""NormalizationResult: the output of one workbook normalization.

Created once per workbook, owned by the caller and never mutated after return.
Collections keep sheet-then-row order.
"""

__all__ = [
    "NoUsableDataError",
    "NormalizationResult",
]


class NoUsableDataError(Exception):
    """Raised when a workbook yields nothing usable (no sheets, or no valid rows)."""


@dataclass(frozen=True)
class NormalizationResult:
    """Normalized records plus row diagnostics for a single workbook."""
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    installments: tuple[Installment, ...] = field(default_factory=tuple)
    savings_goals: tuple[SavingsGoal, ...] = field(default_factory=tuple)
    skipped: tuple[RowDiagnostic, ...] = field(default_factory=tuple)  # Dropped rows
    warnings: tuple[RowDiagnostic, ...] = field(default_factory=tuple)  # Kept rows with degraded fields
    sheets: tuple[SheetProcess, ...] = field(default_factory=tuple)

    @property
    def total_records(self) -> int:
        return len(self.transactions) + len(self.installments) + len(self.savings_goals)

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0

    def skipped_by_sheet(self) -> dict[str, int]:
        """Skipped row count per sheet in workbook order (sheets without skips map to 0)."""
        counts = {sheet.sheet_name: 0 for sheet in self.sheets}
        for diag in self.skipped:
            counts[diag.sheet] = counts.get(diag.sheet, 0) + 1
        return counts

    def skipped_by_reason(self) -> dict[DiagnosticReason, int]:
        counts: dict[DiagnosticReason, int] = {}
        for diag in self.skipped:
            counts[diag.reason] = counts.get(diag.reason, 0) + 1
        return counts

    def ensure_usable(self) -> NormalizationResult:
        """Return self, or raise NoUsableDataError when no record was produced."""
        if self.is_empty:
            rows = sum(sheet.data_rows for sheet in self.sheets)
            raise NoUsableDataError(
                f"no valid data found: {len(self.sheets)} sheet(s), {rows} data row(s), "
                f"{len(self.skipped)} skipped"
            )
        return self

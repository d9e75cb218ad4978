from __future__ import annotations

from collections.abc import Iterable

from ..models.normalization_result import NormalizationResult
from ..models.processing_result import ProcessingResult
from ..models.records import Transaction, TransactionKind

"""Summary rendering and transaction totals.

render_summary_line() produces the run's SUMMARY line, render_workbook_line()
one line per normalized workbook. The totals helpers aggregate normalized
transactions the way the dashboard's overview cards do.
"""

__all__ = [
    "render_summary_line",
    "render_workbook_line",
    "transaction_totals",
    "category_totals",
]


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line of a run.

    Format:
    SUMMARY files={total} success={success} failed={failed} records={records}
    skipped_rows={skipped} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_records=12, skipped_rows=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1 success=1 failed=0 records=12 skipped_rows=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"records={result.total_records} "
        f"skipped_rows={result.skipped_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_workbook_line(name: str, result: NormalizationResult) -> str:
    totals = transaction_totals(result.transactions)
    return (
        f"file={name} sheets={len(result.sheets)} "
        f"transactions={len(result.transactions)} "
        f"installments={len(result.installments)} "
        f"savings_goals={len(result.savings_goals)} "
        f"skipped={len(result.skipped)} "
        f"warnings={len(result.warnings)} "
        f"income={totals[TransactionKind.INCOME.value]:.2f} "
        f"expense={totals[TransactionKind.EXPENSE.value]:.2f}"
    )


def transaction_totals(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Sum of amounts per kind label, Income and Expense always present."""
    totals: dict[str, float] = {TransactionKind.INCOME.value: 0.0, TransactionKind.EXPENSE.value: 0.0}
    for txn in transactions:
        totals[txn.kind] = totals.get(txn.kind, 0.0) + txn.amount
    return totals


def category_totals(
    transactions: Iterable[Transaction], kind: str | None = TransactionKind.EXPENSE.value
) -> dict[str, float]:
    """Sum of amounts per category, largest first.

    Only transactions whose kind matches ``kind`` (case-insensitive) are counted;
    pass None to count every transaction.
    """
    totals: dict[str, float] = {}
    for txn in transactions:
        if kind is not None and txn.kind.lower() != kind.lower():
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount
    return dict(sorted(totals.items(), key=lambda item: (-item[1], item[0])))

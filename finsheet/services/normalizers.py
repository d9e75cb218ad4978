from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..excel.decoders import AmountDecodeError, decode_amount, decode_date, decode_label, is_blank
from ..excel.grid import SheetGrid
from ..excel.headers import resolve_fields
from ..models.config_models import NormalizerConfig
from ..models.diagnostic import DiagnosticReason, RowDiagnostic
from ..models.records import Installment, SavingsGoal, Transaction, TransactionKind
from ..models.row_data import RowData
from ..models.sheet_process import SheetRole

"""Row normalizers, one per sheet role.

Each normalizer resolves the sheet's headers once, then folds over the rows
accumulating (records, skipped, warnings). A rejected row produces one skip
diagnostic and never affects the rows before or after it.
"""

__all__ = [
    "REQUIRED_FIELDS",
    "SheetOutcome",
    "normalize_transactions",
    "normalize_installments",
    "normalize_savings_goals",
    "NORMALIZERS",
]

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: Mapping[SheetRole, tuple[str, ...]] = {
    SheetRole.TRANSACTIONS: ("date", "description", "amount"),
    SheetRole.INSTALLMENTS: ("name", "amount", "due"),
    SheetRole.SAVINGS_GOALS: ("name", "target", "deadline"),
}

Bindings = Mapping[str, str | None]
RowWarning = tuple[DiagnosticReason, str, Any]


class RowRejected(Exception):
    """Raised by a row builder to drop the current row."""

    def __init__(self, reason: DiagnosticReason, field_name: str, value: Any = None) -> None:
        super().__init__(f"{reason.value}: {field_name}")
        self.reason = reason
        self.field_name = field_name
        self.value = value


@dataclass
class SheetOutcome:
    """Accumulator of one sheet's fold."""
    sheet_name: str
    role: SheetRole
    records: list[Any] = field(default_factory=list)
    skipped: list[RowDiagnostic] = field(default_factory=list)
    warnings: list[RowDiagnostic] = field(default_factory=list)
    unresolved_fields: tuple[str, ...] = ()
    data_rows: int = 0


def _required(row: RowData, bound: Bindings, name: str) -> Any:
    label = bound.get(name)
    value = row.get(label)
    if label is None or is_blank(value):
        raise RowRejected(DiagnosticReason.MISSING_REQUIRED_FIELD, name)
    return value


def _optional(row: RowData, bound: Bindings, name: str) -> Any:
    value = row.get(bound.get(name))
    return None if is_blank(value) else value


def _required_amount(value: Any, name: str, config: NormalizerConfig) -> float:
    try:
        return decode_amount(value, config.currency_symbols)
    except AmountDecodeError:
        raise RowRejected(DiagnosticReason.INVALID_AMOUNT, name, value) from None


def _optional_amount(
    row: RowData, bound: Bindings, name: str, config: NormalizerConfig, warnings: list[RowWarning], default: float = 0.0
) -> float:
    value = _optional(row, bound, name)
    if value is None:
        return default
    try:
        return abs(decode_amount(value, config.currency_symbols))
    except AmountDecodeError:
        warnings.append((DiagnosticReason.INVALID_OPTIONAL_AMOUNT, name, value))
        return default


def _date(value: Any, name: str, config: NormalizerConfig, warnings: list[RowWarning], strict: bool = False) -> str:
    text, parsed = decode_date(value, date1904=config.date1904)
    if not parsed:
        if strict:
            raise RowRejected(DiagnosticReason.INVALID_DATE, name, value)
        warnings.append((DiagnosticReason.UNPARSED_DATE, name, value))
    return text


def _transaction(row: RowData, bound: Bindings, config: NormalizerConfig, warnings: list[RowWarning]) -> Transaction:
    raw_date = _required(row, bound, "date")
    raw_description = _required(row, bound, "description")
    raw_amount = _required(row, bound, "amount")
    signed = _required_amount(raw_amount, "amount", config)

    type_value = _optional(row, bound, "type")
    if type_value is not None:
        # Verbatim cell text, only non-text cells are rendered
        kind = type_value if isinstance(type_value, str) else decode_label(type_value)
    else:
        kind = (TransactionKind.EXPENSE if signed < 0 else TransactionKind.INCOME).value

    category = _optional(row, bound, "category")
    source = _optional(row, bound, "source")
    return Transaction(
        date=_date(raw_date, "date", config, warnings),
        description=decode_label(raw_description),
        category=decode_label(category) if category is not None else config.default_category,
        amount=abs(signed),
        kind=kind,
        source=decode_label(source) if source is not None else None,
    )


def _installment(row: RowData, bound: Bindings, config: NormalizerConfig, warnings: list[RowWarning]) -> Installment:
    raw_name = _required(row, bound, "name")
    raw_amount = _required(row, bound, "amount")
    raw_due = _required(row, bound, "due")
    amount = abs(_required_amount(raw_amount, "amount", config))
    return Installment(
        name=decode_label(raw_name),
        amount=amount,
        due_date=_date(raw_due, "due", config, warnings, strict=config.strict_schedule_dates),
        total_amount=_optional_amount(row, bound, "total", config, warnings),
        paid=_optional_amount(row, bound, "paid", config, warnings),
    )


def _savings_goal(row: RowData, bound: Bindings, config: NormalizerConfig, warnings: list[RowWarning]) -> SavingsGoal:
    raw_name = _required(row, bound, "name")
    raw_target = _required(row, bound, "target")
    raw_deadline = _required(row, bound, "deadline")
    target = abs(_required_amount(raw_target, "target", config))
    return SavingsGoal(
        name=decode_label(raw_name),
        target_amount=target,
        deadline=_date(raw_deadline, "deadline", config, warnings, strict=config.strict_schedule_dates),
        current_amount=_optional_amount(row, bound, "current", config, warnings),
    )


RowBuilder = Callable[[RowData, Bindings, NormalizerConfig, list[RowWarning]], Any]


def _fold_rows(sheet: SheetGrid, role: SheetRole, config: NormalizerConfig, build: RowBuilder) -> SheetOutcome:
    bound = resolve_fields(sheet.columns, config.tokens_for(role), exclusive=config.exclusive_header_binding)
    unresolved = tuple(name for name in REQUIRED_FIELDS[role] if bound.get(name) is None)
    logger.debug("sheet=%s role=%s bindings=%s", sheet.sheet_name, role.value, dict(bound))
    if unresolved and sheet.rows:
        logger.warning(
            "sheet=%s role=%s required fields not found: %s (columns=%s)",
            sheet.sheet_name,
            role.value,
            ", ".join(unresolved),
            list(sheet.columns),
        )

    outcome = SheetOutcome(
        sheet_name=sheet.sheet_name, role=role, unresolved_fields=unresolved, data_rows=len(sheet.rows)
    )
    for row in sheet.rows:
        row_warnings: list[RowWarning] = []
        try:
            record = build(row, bound, config, row_warnings)
        except RowRejected as e:
            outcome.skipped.append(
                RowDiagnostic.create(sheet.sheet_name, row.row_number, e.reason, e.field_name, e.value)
            )
            logger.debug("sheet=%s row=%d skipped reason=%s field=%s", sheet.sheet_name, row.row_number, e.reason.value, e.field_name)
            continue
        outcome.records.append(record)
        outcome.warnings.extend(
            RowDiagnostic.create(sheet.sheet_name, row.row_number, reason, name, value)
            for reason, name, value in row_warnings
        )
    return outcome


def normalize_transactions(sheet: SheetGrid, config: NormalizerConfig | None = None) -> SheetOutcome:
    """Normalize a transactions sheet (required: date, description, amount)."""
    return _fold_rows(sheet, SheetRole.TRANSACTIONS, config or NormalizerConfig(), _transaction)


def normalize_installments(sheet: SheetGrid, config: NormalizerConfig | None = None) -> SheetOutcome:
    """Normalize an EMI / loan sheet (required: name, amount, due date)."""
    return _fold_rows(sheet, SheetRole.INSTALLMENTS, config or NormalizerConfig(), _installment)


def normalize_savings_goals(sheet: SheetGrid, config: NormalizerConfig | None = None) -> SheetOutcome:
    """Normalize a savings goal sheet (required: name, target, deadline)."""
    return _fold_rows(sheet, SheetRole.SAVINGS_GOALS, config or NormalizerConfig(), _savings_goal)


NORMALIZERS: Mapping[SheetRole, Callable[[SheetGrid, NormalizerConfig | None], SheetOutcome]] = {
    SheetRole.TRANSACTIONS: normalize_transactions,
    SheetRole.INSTALLMENTS: normalize_installments,
    SheetRole.SAVINGS_GOALS: normalize_savings_goals,
}

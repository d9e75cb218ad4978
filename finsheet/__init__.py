"""finsheet: spreadsheet workbook ingestion and normalization for personal finance data."""

from .models import (
    Installment,
    NormalizationResult,
    NormalizerConfig,
    NoUsableDataError,
    SavingsGoal,
    SheetRole,
    Transaction,
    TransactionKind,
)
from .services.orchestrator import normalize_workbook

__version__ = "0.1.0"

__all__ = [
    "normalize_workbook",
    "NormalizationResult",
    "NormalizerConfig",
    "NoUsableDataError",
    "SheetRole",
    "Transaction",
    "TransactionKind",
    "Installment",
    "SavingsGoal",
]

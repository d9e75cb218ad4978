"""Domain models for the workbook normalization engine.

This package contains the domain model classes used throughout the application:
raw rows, sheet roles, normalized records, diagnostics and results.
"""

from .config_models import AppConfig, NormalizerConfig
from .diagnostic import DiagnosticReason, RowDiagnostic
from .normalization_result import NormalizationResult, NoUsableDataError
from .records import Installment, SavingsGoal, Transaction, TransactionKind
from .row_data import RowData
from .sheet_process import SheetProcess, SheetRole

__all__ = [
    # Configuration models
    "AppConfig",
    "NormalizerConfig",
    # Processing models
    "RowData",
    "SheetRole",
    "SheetProcess",
    "RowDiagnostic",
    "DiagnosticReason",
    "NormalizationResult",
    "NoUsableDataError",
    # Output records
    "Transaction",
    "TransactionKind",
    "Installment",
    "SavingsGoal",
]

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .excel_file import ExcelFile

"""Processing result models for a command line run over several workbooks.

FileStat holds the per-file numbers, ProcessingResult the run aggregate used for
the SUMMARY line, the export and the exit code.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success/no_data/failed
    transactions: int = 0
    installments: int = 0
    savings_goals: int = 0
    skipped_rows: int = 0
    elapsed_seconds: float = 0.0

    @property
    def total_records(self) -> int:
        return self.transactions + self.installments + self.savings_goals


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results over all processed workbooks."""
    success_files: int  # Files that produced records
    failed_files: int  # Files that failed or had no usable data
    total_records: int
    skipped_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] = field(default_factory=list)
    files: list[ExcelFile] = field(default_factory=list)  # Normalized files, for export

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files

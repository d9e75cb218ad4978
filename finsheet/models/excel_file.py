from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .normalization_result import NormalizationResult

"""ExcelFile domain model and FileStatus enum.

ExcelFile is the processing context of one workbook file handled by the command
line, from discovery through normalization.
"""


class FileStatus(Enum):
    """Status enum for ExcelFile processing lifecycle.

    State transitions: pending → (success | no_data | failed)

    - PENDING: File discovered but not yet processed
    - SUCCESS: File normalized and produced at least one record
    - NO_DATA: File decoded but no row validated
    - FAILED: File could not be decoded or normalized
    """
    PENDING = "pending"
    SUCCESS = "success"
    NO_DATA = "no_data"
    FAILED = "failed"


@dataclass(frozen=True)
class ExcelFile:
    """Processing context for a single workbook file."""
    path: Path                                # Full path to the workbook
    name: str                                 # File name
    start_time: datetime | None = None        # Processing start (UTC)
    end_time: datetime | None = None          # Processing end (UTC)
    status: FileStatus = FileStatus.PENDING
    result: NormalizationResult | None = None  # Set once normalization ran
    error: str | None = None                  # Failure reason summary

    @property
    def total_records(self) -> int:
        return self.result.total_records if self.result is not None else 0

    @property
    def skipped_rows(self) -> int:
        return len(self.result.skipped) if self.result is not None else 0

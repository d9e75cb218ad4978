from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.diagnostic import RowDiagnostic

"""Row diagnostics log buffering.

- JSON Lines with a fixed key set (timestamp, file, sheet, row, reason, field, value)
- One `diagnostics-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Buffered in memory, written once at the end of the run
"""

__all__ = [
    "RowDiagnostic",
    "DiagnosticLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class DiagnosticLogBuffer:
    """In-memory buffer for row diagnostics. Flush writes JSON Lines.

    - flush() appends everything buffered to the run's log file
    - the file path is decided on first access
    - not thread safe (serial execution)
    """
    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._logs_dir = logs_dir
        self._records: list[tuple[str, RowDiagnostic]] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"diagnostics-{stamp}.log"
        return self._file_path

    def append(self, file: str, record: RowDiagnostic) -> None:
        self._records.append((file, record))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path:
        if not self._records:
            return self.file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for file, r in self._records:
                f.write(r.to_json_line(file) + "\n")
        self._records.clear()
        return fp

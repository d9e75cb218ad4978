from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from ..excel.classifier import classify_sheet
from ..excel.grid import WorkbookSource, build_workbook
from ..excel.reader import WorkbookReadError, read_workbook, workbook_uses_1904
from ..logging.diagnostic_log import DiagnosticLogBuffer
from ..models.config_models import AppConfig, NormalizerConfig
from ..models.excel_file import ExcelFile, FileStatus
from ..models.normalization_result import NormalizationResult, NoUsableDataError
from ..models.processing_result import FileStat, ProcessingResult
from ..models.sheet_process import SheetProcess, SheetRole
from .normalizers import NORMALIZERS
from .progress import ProgressTracker

"""Service orchestration for workbook normalization.

normalize_workbook() is the engine entry point: decoded grid in, three record
collections plus diagnostics out. It does no I/O.

process_all() drives the command line: scans for workbooks, reads and
normalizes each one, buffers row diagnostics to the diagnostics log and
aggregates a ProcessingResult. A failing file never stops the others.
"""

__all__ = [
    "ProcessingError",
    "normalize_workbook",
    "scan_excel_files",
    "collect_workbook_paths",
    "process_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Base exception for run-level processing errors."""
    pass


def normalize_workbook(workbook: WorkbookSource, config: NormalizerConfig | None = None) -> NormalizationResult:
    """Normalize a decoded workbook.

    Sheets are processed in workbook order, rows in sheet order. A workbook whose
    rows all fail validation yields an empty but valid result.

    Args:
        workbook: SheetGrid objects, (sheet name, rows) pairs or a mapping
        config: Normalizer settings (defaults when None)

    Raises:
        NoUsableDataError: the workbook contains no sheet at all
    """
    cfg = config or NormalizerConfig()
    sheets = build_workbook(workbook, null_sentinels=cfg.null_sentinels)
    if not sheets:
        raise NoUsableDataError("workbook contains no sheets")

    collected: dict[SheetRole, list] = {role: [] for role in SheetRole}
    skipped = []
    warnings = []
    processes: list[SheetProcess] = []

    for sheet in sheets:
        role = classify_sheet(
            sheet.sheet_name,
            sheet.columns,
            keywords=cfg.sheet_keywords,
            infer_from_headers=cfg.infer_role_from_headers,
        )
        outcome = NORMALIZERS[role](sheet, cfg)
        collected[role].extend(outcome.records)
        skipped.extend(outcome.skipped)
        warnings.extend(outcome.warnings)
        processes.append(
            SheetProcess(
                sheet_name=sheet.sheet_name,
                role=role,
                data_rows=outcome.data_rows,
                emitted_records=len(outcome.records),
                skipped_rows=len(outcome.skipped),
                unresolved_fields=outcome.unresolved_fields,
            )
        )
        logger.info(
            "sheet=%s role=%s rows=%d records=%d skipped=%d",
            sheet.sheet_name,
            role.value,
            outcome.data_rows,
            len(outcome.records),
            len(outcome.skipped),
        )

    return NormalizationResult(
        transactions=tuple(collected[SheetRole.TRANSACTIONS]),
        installments=tuple(collected[SheetRole.INSTALLMENTS]),
        savings_goals=tuple(collected[SheetRole.SAVINGS_GOALS]),
        skipped=tuple(skipped),
        warnings=tuple(warnings),
        sheets=tuple(processes),
    )


def scan_excel_files(directory: Path) -> list[Path]:
    """Scan directory for .xlsx files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".xlsx")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def collect_workbook_paths(paths: Iterable[Path]) -> list[Path]:
    """Expand directories into their .xlsx files, keep files as given."""
    collected: list[Path] = []
    for path in paths:
        if path.is_dir():
            collected.extend(scan_excel_files(path))
        elif path.exists():
            collected.append(path)
        else:
            raise ProcessingError(f"File not found: {path}")
    return collected


def process_all(
    config: AppConfig,
    paths: Iterable[Path] | None = None,
    diagnostic_log: DiagnosticLogBuffer | None = None,
) -> ProcessingResult:
    """Read and normalize every workbook.

    Args:
        config: Application configuration
        paths: Workbook files or directories (None = config.source_directory)
        diagnostic_log: Buffer for row diagnostics (created from config when None)

    Returns:
        ProcessingResult with per-file stats and the normalized files

    Raises:
        ProcessingError: For fatal errors that prevent processing
    """
    start_time = datetime.now(UTC)
    log_buffer = diagnostic_log if diagnostic_log is not None else DiagnosticLogBuffer(Path(config.log_directory))

    if paths is None:
        file_paths = scan_excel_files(Path(config.source_directory))
    else:
        file_paths = collect_workbook_paths(paths)

    file_stats: list[FileStat] = []
    files: list[ExcelFile] = []
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(file_paths), description="Normalizing workbooks") as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            excel_file = _process_single_file(file_path, config.normalizer, log_buffer)
            files.append(excel_file)

            if excel_file.status == FileStatus.SUCCESS:
                success_count += 1
            else:
                failed_count += 1

            progress.set_postfix(success=success_count, failed=failed_count)
            progress.finish_file(success=(excel_file.status == FileStatus.SUCCESS))

            elapsed = (excel_file.end_time - excel_file.start_time).total_seconds()
            result = excel_file.result
            file_stats.append(
                FileStat(
                    file_name=excel_file.name,
                    status=excel_file.status.value,
                    transactions=len(result.transactions) if result else 0,
                    installments=len(result.installments) if result else 0,
                    savings_goals=len(result.savings_goals) if result else 0,
                    skipped_rows=excel_file.skipped_rows,
                    elapsed_seconds=elapsed,
                )
            )

    try:
        if len(log_buffer):
            path = log_buffer.flush()
            logger.info("diagnostics written to %s", path)
    except OSError as e:
        logger.warning("failed to write diagnostics log: %s", e)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_records=sum(stat.total_records for stat in file_stats),
        skipped_rows=sum(stat.skipped_rows for stat in file_stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        files=files,
    )


def _process_single_file(
    file_path: Path,
    config: NormalizerConfig,
    log_buffer: DiagnosticLogBuffer,
) -> ExcelFile:
    """Read and normalize one workbook file; failures are reported, not raised."""
    start_time = datetime.now(UTC)

    try:
        sheets = read_workbook(file_path)
        if not config.date1904 and workbook_uses_1904(file_path):
            logger.info("file=%s uses the 1904 date system", file_path.name)
            config = replace(config, date1904=True)
        result = normalize_workbook(sheets, config)
    except (WorkbookReadError, NoUsableDataError) as e:
        logger.error("file=%s %s", file_path.name, e)
        return ExcelFile(
            path=file_path,
            name=file_path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.FAILED,
            error=str(e),
        )

    for diag in (*result.skipped, *result.warnings):
        log_buffer.append(file_path.name, diag)

    status = FileStatus.SUCCESS
    error = None
    try:
        result.ensure_usable()
    except NoUsableDataError as e:
        logger.warning("file=%s %s", file_path.name, e)
        status = FileStatus.NO_DATA
        error = str(e)

    return ExcelFile(
        path=file_path,
        name=file_path.name,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=status,
        result=result,
        error=error,
    )

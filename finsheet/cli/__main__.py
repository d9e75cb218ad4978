from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from finsheet.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from finsheet.excel.classifier import classify_sheet
from finsheet.excel.grid import build_workbook
from finsheet.excel.headers import resolve_fields
from finsheet.excel.reader import WorkbookReadError, read_workbook
from finsheet.logging.init import log_summary, setup_logging
from finsheet.models.config_models import AppConfig
from finsheet.services.export import write_export
from finsheet.services.orchestrator import ProcessingError, collect_workbook_paths, process_all, scan_excel_files
from finsheet.services.summary import category_totals, render_summary_line, render_workbook_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (--config, $FINSHEET_CONFIG or config/ingest.yml)
- Collect workbooks from the given paths or the configured source directory
- Normalize every workbook, write row diagnostics, optionally export JSON
- Print one SUMMARY line and exit with 0 (all files usable), 2 (some file failed
  or had no usable data) or 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV = "FINSHEET_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv; a broken file only produces a warning."""
    if not path.exists():
        return
    try:
        load_dotenv(dotenv_path=path, override=override)
    except (OSError, UnicodeDecodeError) as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet workbook -> normalized finance records")
    p.add_argument("paths", nargs="*", type=Path, help="Workbook files or directories (default: source_directory)")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: ${CONFIG_ENV} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet roles, header bindings & first rows then exit")
    p.add_argument("--export", type=Path, default=None, help="Write normalized records to this JSON file")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    if args.config is not None:
        return load_config(args.config)
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return load_config(Path(env_path))
    return load_config(DEFAULT_CONFIG_PATH, required=False)


def _inspect_data(cfg: AppConfig, paths: list[Path]) -> int:
    try:
        files = collect_workbook_paths(paths) if paths else scan_excel_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    norm = cfg.normalizer
    for f in files:
        print(f"FILE: {f.name}")
        try:
            sheets = build_workbook(read_workbook(f), null_sentinels=norm.null_sentinels)
        except WorkbookReadError as e:
            print(f"  read_error: {e}")
            continue
        for sheet in sheets:
            role = classify_sheet(
                sheet.sheet_name, sheet.columns, keywords=norm.sheet_keywords, infer_from_headers=norm.infer_role_from_headers
            )
            bindings = resolve_fields(sheet.columns, norm.tokens_for(role), exclusive=norm.exclusive_header_binding)
            print(f"  SHEET: {sheet.sheet_name} role={role.value} cols={list(sheet.columns)}")
            print(f"    bindings= {bindings}")
            print("    sample_rows=")
            for row in sheet.rows[:3]:
                # datetime cells are shown as ISO strings
                values = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.values.items()}
                print(f"      row {row.sheet_row}: {values}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read the process arguments when none were given (tests pass [])
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, args.paths)

    if args.paths:
        logger.info(f"Processing files: {', '.join(str(p) for p in args.paths)}")
    else:
        logger.info(f"Processing files from: {cfg.source_directory}")

    try:
        result = process_all(cfg, paths=args.paths or None)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for excel_file in result.files:
        if excel_file.result is not None:
            logger.info(render_workbook_line(excel_file.name, excel_file.result))
            logger.debug(f"file={excel_file.name} expense_by_category={category_totals(excel_file.result.transactions)}")

    if args.export is not None:
        usable = [f.result for f in result.files if f.result is not None]
        try:
            path = write_export(args.export, usable)
        except OSError as e:
            logger.error(f"export: {e}")
            return EXIT_FATAL
        logger.info(f"exported {result.total_records} records to {path}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import Workbook
from openpyxl.utils.datetime import CALENDAR_MAC_1904

from finsheet.excel.decoders import decode_date
from finsheet.excel.grid import SheetGrid
from finsheet.logging.diagnostic_log import DiagnosticLogBuffer
from finsheet.logging.init import reset_logging, setup_logging
from finsheet.models.config_models import AppConfig, NormalizerConfig
from finsheet.models.diagnostic import DiagnosticReason
from finsheet.models.excel_file import FileStatus
from finsheet.models.normalization_result import NoUsableDataError
from finsheet.models.sheet_process import SheetRole
from finsheet.services.orchestrator import (
    ProcessingError,
    collect_workbook_paths,
    normalize_workbook,
    process_all,
    scan_excel_files,
)


def _workbook():
    return [
        ("Q1", [
            {"Date": 45000, "Description": "Salary", "Amount": "₹ 85,000"},
            {"Date": 45001, "Description": "Rent", "Amount": "-15,000"},
        ]),
        ("EMI Schedule", [
            {"Loan Name": "Car Loan", "EMI Amount": "12,500", "Due Date": "2023-04-05",
             "Total Amount": "5,00,000", "Paid": "1,25,000"},
        ]),
        ("Savings", [
            {"Name": "Emergency Fund", "Target": 300000, "Deadline": "2024-12-31", "Saved": "oops"},
        ]),
        ("Q2", [
            {"Date": 45100, "Description": "Bonus", "Amount": "N/A"},
            {"Date": 45101, "Description": "Gift", "Amount": 500},
        ]),
    ]


def test_normalize_workbook_routes_sheets_by_role():
    result = normalize_workbook(_workbook())

    assert [t.description for t in result.transactions] == ["Salary", "Rent", "Gift"]
    assert [i.name for i in result.installments] == ["Car Loan"]
    assert [g.name for g in result.savings_goals] == ["Emergency Fund"]
    assert [(s.sheet_name, s.role) for s in result.sheets] == [
        ("Q1", SheetRole.TRANSACTIONS),
        ("EMI Schedule", SheetRole.INSTALLMENTS),
        ("Savings", SheetRole.SAVINGS_GOALS),
        ("Q2", SheetRole.TRANSACTIONS),
    ]
    assert [(d.sheet, d.row, d.reason) for d in result.skipped] == [
        ("Q2", 1, DiagnosticReason.INVALID_AMOUNT)
    ]
    assert [(d.sheet, d.reason, d.field) for d in result.warnings] == [
        ("Savings", DiagnosticReason.INVALID_OPTIONAL_AMOUNT, "current")
    ]
    assert result.skipped_by_sheet() == {"Q1": 0, "EMI Schedule": 0, "Savings": 0, "Q2": 1}


def test_normalize_workbook_is_deterministic():
    assert normalize_workbook(_workbook()) == normalize_workbook(_workbook())


def test_normalize_workbook_accepts_mapping_and_grids():
    grid = SheetGrid.from_records("Q1", [{"Date": 45000, "Description": "Tea", "Amount": 20}])
    assert len(normalize_workbook([grid]).transactions) == 1
    assert len(normalize_workbook({"Q1": [{"Date": 45000, "Description": "Tea", "Amount": 20}]}).transactions) == 1


def test_header_only_sheet_gives_empty_result_without_diagnostics():
    result = normalize_workbook([("Q1", [])])
    assert result.is_empty
    assert result.skipped == () and result.warnings == ()
    assert result.sheets[0].data_rows == 0


def test_all_rows_invalid_gives_empty_valid_result():
    result = normalize_workbook([("Q1", [{"Date": 45000, "Description": "Tea", "Amount": "x"}])])
    assert result.is_empty
    assert len(result.skipped) == 1
    with pytest.raises(NoUsableDataError):
        result.ensure_usable()


def test_workbook_without_sheets_raises():
    with pytest.raises(NoUsableDataError, match="no sheets"):
        normalize_workbook([])


def test_normalize_workbook_applies_null_sentinels():
    cfg = NormalizerConfig(null_sentinels=frozenset({"NIL"}))
    result = normalize_workbook(
        [("Q1", [{"Date": 45000, "Description": "Tea", "Category": "nil", "Amount": 20}])], cfg
    )
    assert result.transactions[0].category == "Uncategorized"


def test_normalize_workbook_logs_sheet_lines(capsys):
    reset_logging()
    setup_logging()

    normalize_workbook(_workbook())

    out = capsys.readouterr().out
    assert "INFO sheet=EMI Schedule role=installments rows=1 records=1 skipped=0" in out


def test_scan_excel_files_sorted(temp_workdir: Path):
    data = temp_workdir / "data"
    (data / "b.xlsx").write_bytes(b"")
    (data / "a.xlsx").write_bytes(b"")
    (data / "notes.txt").write_text("x", encoding="utf-8")
    assert [p.name for p in scan_excel_files(data)] == ["a.xlsx", "b.xlsx"]


def test_scan_excel_files_missing_directory(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_excel_files(temp_workdir / "missing")


def test_collect_workbook_paths(temp_workdir: Path):
    data = temp_workdir / "data"
    (data / "a.xlsx").write_bytes(b"")
    single = temp_workdir / "single.xlsx"
    single.write_bytes(b"")
    assert collect_workbook_paths([single, data]) == [single, data / "a.xlsx"]
    with pytest.raises(ProcessingError, match="File not found"):
        collect_workbook_paths([temp_workdir / "nope.xlsx"])


def test_process_all_collects_stats_and_diagnostics(temp_workdir: Path, make_excel):
    make_excel(
        temp_workdir / "data" / "a.xlsx",
        {"Q1": [["Date", "Description", "Amount"], [45000, "Tea", 20], [45001, "Cake", "N/A"]]},
    )
    make_excel(
        temp_workdir / "data" / "b.xlsx",
        {"Q1": [["Date", "Description", "Amount"], [45000, "Tea", "bad"]]},
    )
    (temp_workdir / "data" / "c.xlsx").write_bytes(b"not excel")
    buf = DiagnosticLogBuffer(temp_workdir / "logs")

    result = process_all(AppConfig(), diagnostic_log=buf)

    assert [(s.file_name, s.status) for s in result.file_stats] == [
        ("a.xlsx", "success"),
        ("b.xlsx", "no_data"),
        ("c.xlsx", "failed"),
    ]
    assert result.success_files == 1
    assert result.failed_files == 2
    assert result.total_records == 1
    assert result.skipped_rows == 2
    assert result.files[2].status is FileStatus.FAILED
    assert "cannot open workbook" in result.files[2].error

    (log_file,) = (temp_workdir / "logs").glob("diagnostics-*.log")
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [(r["file"], r["row"], r["reason"]) for r in records] == [
        ("a.xlsx", 2, "INVALID_AMOUNT"),
        ("b.xlsx", 1, "INVALID_AMOUNT"),
    ]


def test_process_all_without_diagnostics_writes_no_log(temp_workdir: Path, make_excel):
    make_excel(temp_workdir / "data" / "a.xlsx", {"Q1": [["Date", "Description", "Amount"], [45000, "Tea", 20]]})

    result = process_all(AppConfig())

    assert result.success_files == 1
    assert list((temp_workdir / "logs").glob("*.log")) == []


def test_process_all_detects_1904_date_system(temp_workdir: Path):
    wb = Workbook()
    wb.epoch = CALENDAR_MAC_1904
    ws = wb.active
    ws.title = "Q1"
    ws.append(["Date", "Description", "Amount"])
    ws.append([45000, "Tea", 20])
    wb.save(temp_workdir / "data" / "mac.xlsx")

    result = process_all(AppConfig())

    (txn,) = result.files[0].result.transactions
    assert txn.date == decode_date(45000, date1904=True)[0]
    assert txn.date != "2023-03-15"

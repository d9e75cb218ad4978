# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Callable

import pandas as pd
import pytest


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
log_directory: ./logs
default_category: Uncategorized
null_sentinels: ["-", "NIL"]
field_tokens:
  transactions:
    description: [description, details, particulars, narration, memo]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a real .xlsx file; the first row of every sheet is its header row."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_excel() -> Callable[[Path, dict[str, list[list[object]]]], Path]:
    return _make_excel


@pytest.fixture()
def finance_workbook(temp_workdir: Path) -> Path:
    """Three-role workbook in the data directory."""
    return _make_excel(
        temp_workdir / "data" / "finance.xlsx",
        {
            "Transactions": [
                ["Date", "Description", "Category", "Amount"],
                [45000, "Salary", "Income", "₹ 85,000"],
                [45001, "Rent", "Housing", "-15,000"],
                ["2023-03-18", "Groceries", None, "-2,350.50"],
            ],
            "EMI Schedule": [
                ["Loan Name", "EMI Amount", "Due Date", "Total Amount", "Paid"],
                ["Car Loan", "12,500", "2023-04-05", "5,00,000", "1,25,000"],
            ],
            "Savings Goals": [
                ["Name", "Target Amount", "Current Saved", "Deadline"],
                ["Emergency Fund", 300000, 120000, "2024-12-31"],
            ],
        },
    )

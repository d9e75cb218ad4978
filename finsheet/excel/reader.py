from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.datetime import CALENDAR_MAC_1904

"""Workbook reader: .xlsx file -> decoded grid.

First row of every sheet is the header row, the following rows are data rows.
pandas' default NA string conversion is disabled so that texts such as "N/A"
reach the amount decoder as text; only truly empty cells become None.
Duplicate header labels get a numeric suffix ("Amount", "Amount_1").
workbook_uses_1904() reports the workbook's date system so that plain serial
numbers can be decoded against the right epoch.
"""

__all__ = [
    "WorkbookReadError",
    "read_workbook",
    "frame_to_records",
    "workbook_uses_1904",
]


class WorkbookReadError(Exception):
    """Raised when a workbook file cannot be decoded into a grid."""


def _header_labels(values: Iterable[Any]) -> list[str | None]:
    labels: list[str | None] = []
    counts: dict[str, int] = {}
    for val in values:
        if val is None or pd.isna(val) or str(val).strip() == "":
            labels.append(None)
            continue
        label = str(val).strip()
        n = counts.get(label, 0)
        counts[label] = n + 1
        labels.append(label if n == 0 else f"{label}_{n}")
    return labels


def frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a header-less DataFrame into row mappings using its first row as header.

    Every data row keeps its position (blank rows become empty mappings) so that
    row numbers stay aligned with the spreadsheet.
    """
    if df.shape[0] == 0:
        return []
    labels = _header_labels(df.iloc[0].tolist())
    records: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        row: dict[str, Any] = {}
        for label, val in zip(labels, raw.tolist(), strict=False):
            if label is None:
                continue
            row[label] = None if pd.isna(val) else val
        records.append(row)
    return records


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> list[tuple[str, list[dict[str, Any]]]]:
    """Read an Excel file returning ``(sheet name, rows)`` pairs in workbook order.

    Parameters
    ----------
    path: Excel file path
    target_sheets: restrict to these sheet names (None = all sheets)

    Raises
    ------
    WorkbookReadError: the file cannot be opened or a sheet cannot be parsed
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise WorkbookReadError(f"cannot open workbook {path.name}: {e}") from e
    sheets: list[tuple[str, list[dict[str, Any]]]] = []
    with xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            try:
                df = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
            except Exception as e:
                raise WorkbookReadError(f"cannot parse sheet '{name}' of {path.name}: {e}") from e
            sheets.append((str(name), frame_to_records(df)))
    return sheets


def workbook_uses_1904(path: Path) -> bool:
    """True when the workbook is saved with the 1904 date system.

    Raises
    ------
    WorkbookReadError: the file cannot be opened
    """
    try:
        wb = load_workbook(path, read_only=True)
    except Exception as e:
        raise WorkbookReadError(f"cannot open workbook {path.name}: {e}") from e
    try:
        return wb.epoch == CALENDAR_MAC_1904
    finally:
        wb.close()

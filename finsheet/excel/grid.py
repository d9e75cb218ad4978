from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from ..models.row_data import RowData
from .decoders import is_blank

"""Cell grid adapter.

Wraps decoder output (named sheets, each a sequence of rows, each row a mapping
header label -> raw cell value) into SheetGrid objects. No semantic logic here:
blank header labels are dropped, configured null sentinels become None, fully
blank rows are dropped while keeping their slot in the row numbering.
"""

__all__ = [
    "SheetGrid",
    "WorkbookSource",
    "build_workbook",
]


@dataclass(frozen=True)
class SheetGrid:
    sheet_name: str
    columns: tuple[str, ...]  # Header labels, first-seen column order
    rows: tuple[RowData, ...]  # Non-blank data rows

    @staticmethod
    def from_records(
        sheet_name: str,
        records: Iterable[Mapping[Any, Any]],
        null_sentinels: frozenset[str] = frozenset(),
    ) -> SheetGrid:
        columns: list[str] = []
        seen: set[str] = set()
        rows: list[RowData] = []
        for row_number, record in enumerate(records, start=1):
            values: dict[str, Any] = {}
            for key, raw in record.items():
                if is_blank(key):
                    continue
                label = str(key)
                if label not in seen:
                    seen.add(label)
                    columns.append(label)
                if isinstance(raw, str) and raw.strip().upper() in null_sentinels:
                    raw = None
                values[label] = raw
            if all(is_blank(v) for v in values.values()):
                continue
            rows.append(RowData(row_number=row_number, values=values))
        return SheetGrid(sheet_name=str(sheet_name), columns=tuple(columns), rows=tuple(rows))


WorkbookSource = Union[
    Iterable[SheetGrid],
    Iterable[tuple[str, Iterable[Mapping[Any, Any]]]],
    Mapping[str, Iterable[Mapping[Any, Any]]],
]


def build_workbook(source: WorkbookSource, null_sentinels: frozenset[str] = frozenset()) -> list[SheetGrid]:
    """Turn decoder output into SheetGrid objects, preserving workbook order.

    Accepts SheetGrid objects (kept as is), ``(sheet name, rows)`` pairs or a
    mapping sheet name -> rows.
    """
    items: Iterable[Any] = source.items() if isinstance(source, Mapping) else source
    sheets: list[SheetGrid] = []
    for item in items:
        if isinstance(item, SheetGrid):
            sheets.append(item)
            continue
        name, records = item
        sheets.append(SheetGrid.from_records(name, records, null_sentinels=null_sentinels))
    return sheets

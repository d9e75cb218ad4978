from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..models.normalization_result import NormalizationResult

"""JSON export of normalized records.

The payload uses the field names of the persistence API:
{"transactions": [...], "emis": [...], "savingsGoals": [...], "exportedAt": "...Z"}
"""

__all__ = [
    "build_export_payload",
    "write_export",
]


def build_export_payload(results: Iterable[NormalizationResult], exported_at: datetime | None = None) -> dict[str, Any]:
    """Merge several results into one export payload, keeping their order."""
    ts = exported_at or datetime.now(UTC)
    payload: dict[str, Any] = {"transactions": [], "emis": [], "savingsGoals": []}
    for result in results:
        payload["transactions"].extend(t.to_api_dict() for t in result.transactions)
        payload["emis"].extend(i.to_api_dict() for i in result.installments)
        payload["savingsGoals"].extend(g.to_api_dict() for g in result.savings_goals)
    payload["exportedAt"] = ts.astimezone(UTC).isoformat().replace("+00:00", "Z")
    return payload


def write_export(path: Path, results: Iterable[NormalizationResult], exported_at: datetime | None = None) -> Path:
    """Write the export payload as pretty-printed UTF-8 JSON."""
    payload = build_export_payload(results, exported_at)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from finsheet.models.normalization_result import NormalizationResult
from finsheet.models.records import Installment, SavingsGoal, Transaction
from finsheet.services.export import build_export_payload, write_export

EXPORTED_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def _results():
    first = NormalizationResult(
        transactions=(Transaction("2024-01-01", "Salary", "Income", 85000.0, "Income"),),
        installments=(Installment("Car Loan", 12500.0, "2024-02-05", 500000.0, 125000.0),),
    )
    second = NormalizationResult(
        transactions=(Transaction("2024-01-02", "Rent", "Housing", 15000.0, "Expense"),),
        savings_goals=(SavingsGoal("Emergency Fund", 300000.0, "2024-12-31", 120000.0),),
    )
    return [first, second]


def test_build_export_payload_merges_in_order():
    payload = build_export_payload(_results(), EXPORTED_AT)

    assert list(payload) == ["transactions", "emis", "savingsGoals", "exportedAt"]
    assert [t["description"] for t in payload["transactions"]] == ["Salary", "Rent"]
    assert payload["emis"][0]["dueDate"] == "2024-02-05"
    assert payload["savingsGoals"][0]["targetAmount"] == 300000.0
    assert payload["exportedAt"] == "2024-05-01T12:30:00Z"


def test_build_export_payload_empty():
    payload = build_export_payload([], EXPORTED_AT)
    assert payload["transactions"] == [] and payload["emis"] == [] and payload["savingsGoals"] == []


def test_write_export(temp_workdir: Path):
    target = temp_workdir / "out" / "export.json"
    path = write_export(target, _results(), EXPORTED_AT)

    assert path == target
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["transactions"][1]["type"] == "Expense"
    assert data["exportedAt"] == "2024-05-01T12:30:00Z"

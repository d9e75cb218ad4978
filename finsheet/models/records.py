from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

"""Normalized output records: Transaction, Installment and SavingsGoal.

These are the clean, typed records the engine hands to the persistence layer.
Identity (ids, owner, source file) is assigned downstream, never here.

Dates are kept as text: ``YYYY-MM-DD`` when the decoder understood the cell,
otherwise the original cell text unchanged.
"""

__all__ = [
    "TransactionKind",
    "Transaction",
    "Installment",
    "SavingsGoal",
]


class TransactionKind(str, Enum):
    """Kind inferred from the amount sign when the sheet carries no type column."""
    INCOME = "Income"
    EXPENSE = "Expense"


def _parse_iso_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Transaction:
    """A single income or expense entry.

    ``kind`` is a TransactionKind value when inferred from the amount sign, or the
    type cell's text verbatim when the sheet has a type column.
    """
    date: str
    description: str
    category: str
    amount: float  # Magnitude, always >= 0
    kind: str
    source: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "date": self.date,
            "description": self.description,
            "category": self.category,
            "amount": self.amount,
            "type": self.kind,
        }
        if self.source is not None:
            payload["source"] = self.source
        return payload


@dataclass(frozen=True)
class Installment:
    """An EMI / loan schedule entry."""
    name: str
    amount: float  # Recurring instalment amount
    due_date: str
    total_amount: float = 0.0  # 0 means unknown, progress is then undefined
    paid: float = 0.0

    @property
    def progress(self) -> float | None:
        """Paid share of the total in percent, None when the total is unknown."""
        if self.total_amount == 0:
            return None
        return self.paid / self.total_amount * 100

    @property
    def remaining(self) -> float | None:
        if self.total_amount == 0:
            return None
        return max(self.total_amount - self.paid, 0.0)

    def days_left(self, today: date) -> int | None:
        """Days until the due date; None when the due date is not an ISO date."""
        due = _parse_iso_date(self.due_date)
        if due is None:
            return None
        return (due - today).days

    def is_overdue(self, today: date) -> bool:
        days = self.days_left(today)
        if days is None or days >= 0:
            return False
        # A fully paid loan is never overdue
        return not (self.total_amount > 0 and self.paid >= self.total_amount)

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "dueDate": self.due_date,
            "totalAmount": self.total_amount,
            "paid": self.paid,
        }


@dataclass(frozen=True)
class SavingsGoal:
    """A savings target. current_amount may exceed target_amount."""
    name: str
    target_amount: float
    deadline: str
    current_amount: float = 0.0

    @property
    def progress(self) -> float | None:
        if self.target_amount == 0:
            return None
        return self.current_amount / self.target_amount * 100

    @property
    def remaining(self) -> float:
        return max(self.target_amount - self.current_amount, 0.0)

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "deadline": self.deadline,
        }

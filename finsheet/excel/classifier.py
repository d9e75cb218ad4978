from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..models.config_models import DEFAULT_SHEET_KEYWORDS
from ..models.sheet_process import SheetRole
from .headers import resolve_header

"""Sheet classifier.

Rule, in priority order:
  (a) name contains an installment keyword (emi, loan) -> INSTALLMENTS
  (b) name contains a savings keyword (saving, goal)   -> SAVINGS_GOALS
  (c) otherwise                                         -> TRANSACTIONS

When header inference is switched on, sheets whose name matches no keyword are
looked at once more through their headers before falling back to (c).
"""

__all__ = [
    "classify_sheet",
]


def _role_from_headers(headers: Sequence[str]) -> SheetRole | None:
    if resolve_header(headers, ("target",)) and resolve_header(headers, ("deadline",)):
        return SheetRole.SAVINGS_GOALS
    if resolve_header(headers, ("due",)) and resolve_header(headers, ("emi", "loan")):
        return SheetRole.INSTALLMENTS
    return None


def classify_sheet(
    name: str,
    headers: Sequence[str] = (),
    keywords: Mapping[SheetRole, Sequence[str]] = DEFAULT_SHEET_KEYWORDS,
    infer_from_headers: bool = False,
) -> SheetRole:
    """Assign exactly one SheetRole to a sheet."""
    lowered = name.lower()
    for role, words in keywords.items():
        if any(word.lower() in lowered for word in words):
            return role
    if infer_from_headers:
        inferred = _role_from_headers(headers)
        if inferred is not None:
            return inferred
    return SheetRole.TRANSACTIONS

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .sheet_process import SheetRole

"""Config dataclasses and default token tables for the normalization engine.

The token tables are plain data: for every sheet role, an ordered mapping of
semantic field -> candidate tokens. Field order is the resolution order (it
matters when exclusive header binding is enabled). Within a field the leftmost
header containing any token wins, whatever the token order.

The loader in finsheet/config/loader.py builds these objects from YAML.
"""

__all__ = [
    "DEFAULT_FIELD_TOKENS",
    "DEFAULT_SHEET_KEYWORDS",
    "DEFAULT_CURRENCY_SYMBOLS",
    "DEFAULT_CATEGORY",
    "FieldTokens",
    "NormalizerConfig",
    "AppConfig",
]

FieldTokens = Mapping[str, tuple[str, ...]]

DEFAULT_FIELD_TOKENS: Mapping[SheetRole, FieldTokens] = MappingProxyType({
    SheetRole.TRANSACTIONS: MappingProxyType({
        "date": ("date",),
        "description": ("description", "details", "particulars", "narration"),
        "category": ("category",),
        "amount": ("amount", "debit", "credit"),
        "type": ("type",),
        "source": ("source", "account"),
    }),
    SheetRole.INSTALLMENTS: MappingProxyType({
        "name": ("name", "loan", "emi"),
        "amount": ("amount", "emi"),
        "due": ("due", "date", "end"),
        "total": ("total",),
        "paid": ("paid",),
    }),
    SheetRole.SAVINGS_GOALS: MappingProxyType({
        "name": ("name", "goal"),
        "target": ("target", "goal"),
        "deadline": ("deadline", "date", "target date"),
        "current": ("current", "saved"),
    }),
})

# Sheet name keywords, checked in this order (installments win over savings goals)
DEFAULT_SHEET_KEYWORDS: Mapping[SheetRole, tuple[str, ...]] = MappingProxyType({
    SheetRole.INSTALLMENTS: ("emi", "loan"),
    SheetRole.SAVINGS_GOALS: ("saving", "goal"),
})

DEFAULT_CURRENCY_SYMBOLS = "₹$€£¥"
DEFAULT_CATEGORY = "Uncategorized"


@dataclass(frozen=True)
class NormalizerConfig:
    """Settings consumed by the normalization engine.

    The defaults reproduce the documented behaviour; every knob exists so that a
    deployment can widen the heuristics without code changes.
    """
    field_tokens: Mapping[SheetRole, FieldTokens] = field(default_factory=lambda: DEFAULT_FIELD_TOKENS)
    sheet_keywords: Mapping[SheetRole, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_SHEET_KEYWORDS)
    default_category: str = DEFAULT_CATEGORY
    currency_symbols: str = DEFAULT_CURRENCY_SYMBOLS
    date1904: bool = False  # Workbook uses the 1904 date system
    null_sentinels: frozenset[str] = frozenset()  # Upper-cased cell texts treated as blank
    exclusive_header_binding: bool = False  # One header may serve only one field
    strict_schedule_dates: bool = False  # Skip installment/savings rows with unparseable dates
    infer_role_from_headers: bool = False  # Use headers for sheets whose name has no keyword

    def tokens_for(self, role: SheetRole) -> FieldTokens:
        return self.field_tokens[role]


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for the command line."""
    source_directory: str = "./data"  # Directory scanned for .xlsx workbooks
    log_directory: str = "./logs"  # Diagnostics log directory
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)

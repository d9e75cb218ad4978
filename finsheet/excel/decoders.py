from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

"""Scalar decoders: date, amount and label.

All functions are pure. The date decoder is lenient (unparsed text is passed
through), the amount decoder is strict (AmountDecodeError on anything that is not
a number once currency glyphs, thousands separators and whitespace are gone).
"""

__all__ = [
    "AmountDecodeError",
    "is_blank",
    "decode_date",
    "decode_amount",
    "decode_label",
]

# Free-text dates must spell out a four-digit year
_YEAR_PATTERN = re.compile(r"\d{4}")

# 1900 date system: serial 1 = 1900-01-01, serial 60 = the non-existent 1900-02-29
_EPOCH_1900_LOW = date(1899, 12, 31)  # serials 1..59
_EPOCH_1900 = date(1899, 12, 30)  # serials >= 61
_EPOCH_1904 = date(1904, 1, 1)
_PHANTOM_LEAP_DAY = "1900-02-29"


class AmountDecodeError(ValueError):
    """Raised when a cell cannot be decoded as an amount."""


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT/pd.NA and empty or whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _serial_to_iso(serial: float, date1904: bool) -> str | None:
    if not math.isfinite(serial) or serial < 0:
        return None
    days = int(math.floor(serial))
    try:
        if date1904:
            return (_EPOCH_1904 + timedelta(days=days)).isoformat()
        if days == 60:
            return _PHANTOM_LEAP_DAY
        base = _EPOCH_1900_LOW if days < 60 else _EPOCH_1900
        return (base + timedelta(days=days)).isoformat()
    except OverflowError:
        return None


def _timestamp_to_iso(value: datetime | date) -> str:
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = pd.Timestamp(value).tz_convert("UTC")
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def decode_date(value: Any, date1904: bool = False) -> tuple[str, bool]:
    """Decode a date cell.

    Returns ``(text, parsed)``. ``text`` is ``YYYY-MM-DD`` when ``parsed`` is True,
    otherwise the original cell rendered as text, unchanged.

    Numeric cells are spreadsheet day serials, date/datetime cells are formatted
    directly, text goes through pandas' general date parser and only counts as
    parsed when it carries the year as four digits.
    """
    if not isinstance(value, str) and is_blank(value):
        return "", False
    if isinstance(value, (datetime, date)):
        return _timestamp_to_iso(value), True
    if _is_number(value):
        iso = _serial_to_iso(float(value), date1904)
        if iso is None:
            return decode_label(value), False
        return iso, True
    text = "" if value is None else str(value)
    stripped = text.strip()
    if not stripped:
        return text, False
    try:
        parsed = pd.to_datetime(stripped, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return text, False
    if parsed is None or pd.isna(parsed):
        return text, False
    # Text without a year would take the parser's default year
    if f"{parsed.year:04d}" not in _YEAR_PATTERN.findall(stripped):
        return text, False
    return _timestamp_to_iso(parsed), True


def _strip_pattern(currency_symbols: str) -> re.Pattern[str]:
    return re.compile(f"[{re.escape(currency_symbols)},\\s]") if currency_symbols else re.compile(r"[,\s]")


def decode_amount(value: Any, currency_symbols: str = "₹$€£¥") -> float:
    """Decode an amount cell to a signed float.

    Currency glyphs, thousands separators and whitespace are stripped before
    parsing. The sign is preserved; callers store the magnitude.

    Raises:
        AmountDecodeError: value is blank, non-numeric, NaN or infinite
    """
    if _is_number(value):
        number = float(value)
    else:
        if value is None:
            raise AmountDecodeError("blank amount")
        cleaned = _strip_pattern(currency_symbols).sub("", str(value))
        try:
            number = float(cleaned)
        except ValueError as e:
            raise AmountDecodeError(f"not a number: {value!r}") from e
    if not math.isfinite(number):
        raise AmountDecodeError(f"not a finite number: {value!r}")
    return number


def decode_label(value: Any) -> str:
    """Coerce a cell to text (integral floats lose their '.0', dates become ISO)."""
    if is_blank(value):
        return ""
    if isinstance(value, (datetime, date)):
        return _timestamp_to_iso(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()

"""Locale-tolerant number parsing and spreadsheet date serials.

Cells arrive as native numbers, dates, or text written in either the BR
(``1.234,56``) or US (``1,234.56``) convention, often decorated with currency
symbols, percent signs or accounting parentheses. ``parse_number`` reduces all
of them to a finite float and never raises unless asked to.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import Any, Optional

import numpy as np

from explorer.dataset import cell_to_str, format_date, is_date_value

EXCEL_EPOCH = datetime(1899, 12, 30)
SERIAL_MIN = 25569
SERIAL_MAX = 60000
# Narrower window used only for axis labels.
LABEL_SERIAL_MIN = 40000

_WHITESPACE = re.compile(r"\s+")
_NON_NUMERIC = re.compile(r"[^\d,.\-]", re.ASCII)
_DEGENERATE = {"", "-", ".", ","}

_INTEGER = re.compile(r"-?\d+", re.ASCII)
_DECIMAL_DOT = re.compile(r"-?\d+\.\d+", re.ASCII)
_DECIMAL_COMMA = re.compile(r"-?\d+,\d+", re.ASCII)

_DAY_FIRST_DATE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}", re.ASCII)
_ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def is_native_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_excel_serial(value: Any) -> bool:
    return is_native_number(value) and SERIAL_MIN < value < SERIAL_MAX


def excel_serial_to_date(value: float) -> datetime:
    return EXCEL_EPOCH + timedelta(days=float(value))


def to_finite_float(text: str) -> Optional[float]:
    """Loose text -> float conversion (blank text counts as zero); None when not finite."""
    s = text.strip()
    if not s:
        return 0.0
    if "_" in s or not s.isascii():
        return None
    try:
        result = float(s)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def _normalize_separators(text: str) -> str:
    has_dot = "." in text
    has_comma = "," in text

    if has_dot and has_comma:
        # The separator that appears last is the decimal one.
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".", 1)
        return text.replace(",", "")
    if has_comma:
        parts = text.split(",")
        if len(parts) == 2 and 0 < len(parts[1]) <= 2:
            return f"{parts[0]}.{parts[1]}"
        return text.replace(",", "")
    if has_dot:
        parts = text.split(".")
        if len(parts) == 2 and 0 < len(parts[1]) <= 2:
            return text
        return text.replace(".", "")
    return text


def parse_number(value: Any, strict: bool = False) -> float:
    """Convert a cell into a finite float.

    Unparseable input resolves to ``0.0``. With ``strict=True`` the same
    inputs raise ``ValueError`` instead, so callers can tell a real zero from a
    data-entry problem.
    """

    def _fallback(reason: str) -> float:
        if strict:
            raise ValueError(f"{reason}: {value!r}")
        return 0.0

    if value is None:
        return _fallback("missing value")
    if is_date_value(value):
        return _fallback("date value")
    if is_native_number(value):
        if is_excel_serial(value):
            return _fallback("spreadsheet date serial")
        number = float(value)
        return number if math.isfinite(number) else _fallback("non-finite number")

    text = str(value).strip()
    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1].strip()

    text = _NON_NUMERIC.sub("", _WHITESPACE.sub("", text))
    if text in _DEGENERATE:
        return _fallback("not a number")

    try:
        number = float(_normalize_separators(text))
    except ValueError:
        return _fallback("not a number")
    if not math.isfinite(number):
        return _fallback("non-finite number")
    return -number if negative else number


def is_numeric_like(value: Any) -> bool:
    """True when a non-empty cell reads as a number in either convention."""
    if is_native_number(value):
        return not is_excel_serial(value)

    text = cell_to_str(value).strip()
    if not text:
        return False
    if _INTEGER.fullmatch(text) or _DECIMAL_DOT.fullmatch(text) or _DECIMAL_COMMA.fullmatch(text):
        return True

    br = text.replace(".", "").replace(",", ".", 1)
    if br and to_finite_float(br) is not None:
        return True
    us = text.replace(",", "")
    return bool(us) and to_finite_float(us) is not None


def is_date_like(value: Any) -> bool:
    if is_date_value(value) or is_excel_serial(value):
        return True
    text = cell_to_str(value)
    return bool(_DAY_FIRST_DATE.fullmatch(text) or _ISO_DATE_PREFIX.match(text))


def format_axis_value(value: Any) -> str:
    if is_date_value(value):
        return format_date(value)
    if is_native_number(value) and LABEL_SERIAL_MIN < value < SERIAL_MAX:
        return format_date(excel_serial_to_date(value))
    return cell_to_str(value)

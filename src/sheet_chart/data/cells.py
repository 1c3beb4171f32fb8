"""Cell-level coercion shared by the profiler and the aggregator."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

_CURRENCY_PREFIX = re.compile(r"^[-+]?\s*[$€£¥]")
_THOUSANDS = re.compile(r"(?<=\d),(?=\d{3}(\D|$))")


def is_empty(value: Any) -> bool:
    """None, NaN/NaT and blank strings are empty cells."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    if value is pd.NaT:
        return True
    return False


def _clean_numeric_text(text: str) -> str:
    s = text.strip()
    if _CURRENCY_PREFIX.match(s):
        sign = "-" if s.startswith("-") else ""
        s = sign + re.sub(r"^[-+]?\s*[$€£¥]\s*", "", s)
    s = _THOUSANDS.sub("", s)
    if s.endswith("%"):
        s = s[:-1].rstrip()
    return s


def coerce_number(value: Any) -> Optional[float]:
    """
    Return the float a cell represents, or None when it is not numeric.

    Booleans, dates and non-finite values are never numbers. Strings may carry
    a leading currency symbol, thousands separators and a trailing percent
    sign ("$1,234.50", "12%").
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, np.integer)):
        return float(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        return f if math.isfinite(f) else None
    if not isinstance(value, str):
        return None

    s = _clean_numeric_text(value)
    if not s:
        return None
    try:
        f = float(s)
    except ValueError:
        return None
    return f if math.isfinite(f) else None


def numeric_series(values: Iterable[Any]) -> pd.Series:
    """Coerce cells to a float Series; non-coercible cells become NaN."""
    return pd.Series([coerce_number(v) for v in values], dtype="float64")


def display_label(value: Any) -> str:
    """
    Stable string form of a cell for labels and grouping keys.
    Integral floats drop the trailing ".0"; dates render as ISO.
    """
    if is_empty(value):
        return ""
    if isinstance(value, pd.Timestamp):
        if value.hour == value.minute == value.second == 0 and value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)):
        f = float(value)
        return str(int(f)) if f.is_integer() else repr(f)
    if isinstance(value, np.integer):
        return str(int(value))
    return str(value).strip()

"""Date recognition for spreadsheet cells."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

# Tried in order after ISO parsing. Day-first formats come before month-first,
# so "03/04/2024" resolves to 3 April; both still count as date-like.
_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %Y",
    "%B %Y",
)

# Quick reject: date strings contain a digit and are short.
_MAYBE_DATE = re.compile(r"^(?=.*\d)[\w\s,./:+-]{4,40}$")


def parse_date_cell(value: Any) -> Optional[date]:
    """
    Return the date a cell represents, or None.

    Accepts date/datetime/pandas.Timestamp objects and strings in ISO 8601
    (date or date-time) or one of the recognised formats. Plain numbers are
    never treated as dates.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not _MAYBE_DATE.match(text):
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def is_date_like(value: Any) -> bool:
    return parse_date_cell(value) is not None

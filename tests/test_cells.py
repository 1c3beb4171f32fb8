from __future__ import annotations

import datetime as dt
import math

import numpy as np
import pandas as pd
import pytest

from sheet_chart.core.utils_dates import is_date_like, parse_date_cell
from sheet_chart.data.cells import coerce_number, display_label, is_empty, numeric_series


@pytest.mark.parametrize("value", [None, "", "   ", float("nan"), np.nan, pd.NaT])
def test_empty_cells(value) -> None:
    assert is_empty(value)


@pytest.mark.parametrize("value", [0, 0.0, "0", "x", False])
def test_non_empty_cells(value) -> None:
    assert not is_empty(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5.0),
        (2.5, 2.5),
        (np.int64(7), 7.0),
        ("42", 42.0),
        (" -3.5 ", -3.5),
        ("$1,234.50", 1234.5),
        ("-$20", -20.0),
        ("1,000,000", 1000000.0),
        ("12%", 12.0),
        ("1e3", 1000.0),
    ],
)
def test_coerce_number_accepts_numeric_text(value, expected) -> None:
    assert coerce_number(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value",
    [None, True, False, "", "abc", "n/a", "inf", float("nan"), float("inf"), dt.date(2024, 1, 1)],
)
def test_coerce_number_rejects(value) -> None:
    assert coerce_number(value) is None


def test_numeric_series_marks_non_coercible_as_nan() -> None:
    s = numeric_series([1, "x", None, "2"])
    assert s.dtype == "float64"
    assert s.iloc[0] == 1.0
    assert math.isnan(s.iloc[1])
    assert math.isnan(s.iloc[2])
    assert s.iloc[3] == 2.0


def test_display_label() -> None:
    assert display_label(2024.0) == "2024"
    assert display_label(1.5) == "1.5"
    assert display_label(" East ") == "East"
    assert display_label(None) == ""
    assert display_label(pd.Timestamp("2025-01-02")) == "2025-01-02"
    assert display_label(dt.datetime(2025, 1, 2, 13, 30)) == "2025-01-02T13:30:00"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-01-31", dt.date(2025, 1, 31)),
        ("2025-01-31T10:00:00Z", dt.date(2025, 1, 31)),
        ("2025/01/31", dt.date(2025, 1, 31)),
        ("31/01/2025", dt.date(2025, 1, 31)),
        ("Jan 31, 2025", dt.date(2025, 1, 31)),
        (dt.datetime(2025, 1, 31, 8), dt.date(2025, 1, 31)),
        (pd.Timestamp("2025-01-31"), dt.date(2025, 1, 31)),
    ],
)
def test_parse_date_cell(value, expected) -> None:
    assert parse_date_cell(value) == expected


@pytest.mark.parametrize("value", [None, 20250131, "East", "12", "", True])
def test_not_date_like(value) -> None:
    assert not is_date_like(value)

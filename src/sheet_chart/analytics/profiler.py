"""Column profiling: inferred type and value summary for every column of a sheet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sheet_chart.core.constants import DEFAULT_UNIQUE_VALUES_CAP, ColumnType
from sheet_chart.core.log import get_logger
from sheet_chart.core.utils_dates import is_date_like
from sheet_chart.data.cells import coerce_number, display_label, is_empty
from sheet_chart.data.sheet import Sheet

logger = get_logger(__name__)


class ColumnProfile(BaseModel):
    """Per-column inferred type and value summary (UI hinting + validation)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    data_type: ColumnType = Field(alias="dataType")
    is_numeric_field: bool = Field(alias="isNumericField")
    unique_values: list[str] = Field(default_factory=list, alias="uniqueValues")
    non_empty_count: int = Field(0, alias="nonEmptyCount")
    numeric_count: int = Field(0, alias="numericCount")
    date_count: int = Field(0, alias="dateCount")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class _Tally:
    non_empty: int
    numeric: int
    dates: int

    @property
    def textual(self) -> int:
        return self.non_empty - self.numeric - self.dates


def _tally(values: list[Any]) -> _Tally:
    non_empty = numeric = dates = 0
    for v in values:
        if is_empty(v):
            continue
        non_empty += 1
        if coerce_number(v) is not None:
            numeric += 1
        elif is_date_like(v):
            dates += 1
    return _Tally(non_empty=non_empty, numeric=numeric, dates=dates)


def classify(tally: _Tally) -> ColumnType:
    """
    Majority-vote classification:
      - nothing non-empty            -> unknown
      - every value numeric          -> number
      - some numeric, some not       -> mixed
      - dates are at least half      -> date
      - otherwise                    -> string
    """
    if tally.non_empty == 0:
        return ColumnType.UNKNOWN
    if tally.numeric == tally.non_empty:
        return ColumnType.NUMBER
    if tally.numeric > 0:
        return ColumnType.MIXED
    if tally.dates * 2 >= tally.non_empty:
        return ColumnType.DATE
    return ColumnType.STRING


def _is_numeric_field(data_type: ColumnType, tally: _Tally) -> bool:
    if data_type == ColumnType.NUMBER:
        return True
    if data_type == ColumnType.MIXED:
        return tally.numeric * 2 > tally.non_empty
    return False


def _unique_sample(values: list[Any], cap: int) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        if is_empty(v):
            continue
        label = display_label(v)
        if label not in seen:
            seen[label] = None
            if len(seen) >= cap:
                break
    return list(seen)


def profile_column(name: str, values: list[Any], unique_cap: int = DEFAULT_UNIQUE_VALUES_CAP) -> ColumnProfile:
    tally = _tally(values)
    data_type = classify(tally)
    return ColumnProfile(
        name=name,
        data_type=data_type,
        is_numeric_field=_is_numeric_field(data_type, tally),
        unique_values=_unique_sample(values, unique_cap),
        non_empty_count=tally.non_empty,
        numeric_count=tally.numeric,
        date_count=tally.dates,
    )


def profile_sheet(sheet: Sheet, unique_cap: int = DEFAULT_UNIQUE_VALUES_CAP) -> list[ColumnProfile]:
    """
    One ColumnProfile per header, in header order.
    Pure function of the sheet; malformed cells degrade classification instead of raising.
    """
    profiles: list[ColumnProfile] = []
    for idx, name in enumerate(sheet.headers):
        values = [sheet.cell(r, idx) for r in sheet.rows]
        profiles.append(profile_column(name, values, unique_cap=unique_cap))

    logger.info(
        "Profiled sheet '%s': %d columns, %d rows",
        sheet.name,
        len(profiles),
        len(sheet.rows),
    )
    return profiles


def profiles_by_name(profiles: list[ColumnProfile]) -> dict[str, ColumnProfile]:
    """Name -> profile. With duplicate headers the first column wins."""
    out: dict[str, ColumnProfile] = {}
    for p in profiles:
        out.setdefault(p.name, p)
    return out

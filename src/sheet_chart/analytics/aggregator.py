"""Group sheet rows and aggregate y-values into numeric series."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

import pandas as pd

from sheet_chart.core.constants import (
    DEFAULT_BLANK_LABEL,
    DEFAULT_LABEL_SEPARATOR,
    PIE_LIKE,
    POINT_CHARTS,
    AggregationMethod,
    ChartType,
)
from sheet_chart.core.errors import EmptyResultError, ValidationError
from sheet_chart.core.log import get_logger
from sheet_chart.data.cells import coerce_number, display_label, is_empty, numeric_series
from sheet_chart.data.sheet import Sheet
from sheet_chart.viz.chart_specs import ChartSpec

logger = get_logger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    r: Optional[float] = None

    def to_dict(self) -> dict[str, float]:
        out = {"x": self.x, "y": self.y}
        if self.r is not None:
            out["r"] = self.r
        return out


@dataclass(frozen=True)
class Series:
    """
    One labelled data track.

    `data` holds one value per label (None for an empty group under
    average/min/max) for category-keyed charts, or Points for scatter/bubble.
    `value_count` is how many coercible cells (or kept rows) fed the series.
    """

    label: str
    data: tuple[Any, ...]
    value_count: int

    @property
    def is_points(self) -> bool:
        return bool(self.data) and isinstance(self.data[0], Point)


@dataclass(frozen=True)
class SeriesSet:
    chart_type: ChartType
    labels: Optional[tuple[str, ...]]
    series: tuple[Series, ...]
    skipped: int = 0  # non-coercible y cells, or dropped rows for scatter/bubble


# ---------------------------
# Aggregation functions
# ---------------------------


def _clean(value: Any) -> Optional[Number]:
    if value is None:
        return None
    f = float(value)
    # NaN is an empty group; inf means the group overflowed float range
    return f if math.isfinite(f) else None


def aggregate_values(values: pd.Series, method: AggregationMethod) -> Optional[Number]:
    """
    Reduce the coercible values of one group (NaN = not coercible).

    Empty group: sum -> 0, count -> 0, average/min/max -> None.
    A result outside float range (e.g. an overflowing sum) is None.
    """
    valid = values.dropna()
    if method == AggregationMethod.COUNT:
        return int(valid.size)
    if method == AggregationMethod.SUM:
        return _clean(valid.sum()) if not valid.empty else 0.0
    if valid.empty:
        return None
    if method == AggregationMethod.AVERAGE:
        return _clean(valid.sum() / valid.size)
    if method == AggregationMethod.MIN:
        return _clean(valid.min())
    if method == AggregationMethod.MAX:
        return _clean(valid.max())
    raise ValueError(f"Unsupported aggregation: {method}")


def _grouped(frame: pd.DataFrame, n_groups: int, method: AggregationMethod) -> list[Optional[Number]]:
    gb = frame.groupby("key", sort=False)["value"]
    labels = range(n_groups)
    if method == AggregationMethod.COUNT:
        res = gb.count().reindex(labels, fill_value=0)
        return [int(v) for v in res.tolist()]
    if method == AggregationMethod.SUM:
        res = gb.sum(min_count=0).reindex(labels, fill_value=0.0)
    elif method == AggregationMethod.AVERAGE:
        res = gb.mean().reindex(labels)
    elif method == AggregationMethod.MIN:
        res = gb.min().reindex(labels)
    elif method == AggregationMethod.MAX:
        res = gb.max().reindex(labels)
    else:
        raise ValueError(f"Unsupported aggregation: {method}")
    return [_clean(v) for v in res.tolist()]


def _non_coercible(raw: list[Any], coerced: pd.Series) -> int:
    return sum(1 for v, c in zip(raw, coerced.tolist()) if not is_empty(v) and math.isnan(c))


# ---------------------------
# Category-keyed charts
# ---------------------------


GroupKey = tuple[Optional[str], ...]


def group_keys(sheet: Sheet, x_axis: tuple[str, ...]) -> list[GroupKey]:
    """
    One grouping key per row: the row's x-axis display values in column order.
    Empty cells are None, so a literal "(blank)" cell never merges with them.
    """
    idxs = [sheet.column_index(c) for c in x_axis]
    return [tuple(display_label(sheet.cell(row, i)) or None for i in idxs) for row in sheet.rows]


def key_label(
    key: GroupKey,
    separator: str = DEFAULT_LABEL_SEPARATOR,
    blank_label: str = DEFAULT_BLANK_LABEL,
) -> str:
    if all(part is None for part in key):
        return blank_label
    return separator.join(part or "" for part in key)


def _aggregate_by_category(
    sheet: Sheet,
    spec: ChartSpec,
    separator: str,
    blank_label: str,
) -> SeriesSet:
    method = spec.aggregation
    keys = group_keys(sheet, spec.x_axis)
    # group on the key tuple; the joined string is only for display
    codes: dict[GroupKey, int] = {}
    row_codes = [codes.setdefault(k, len(codes)) for k in keys]
    labels = [key_label(k, separator, blank_label) for k in codes]

    series: list[Series] = []
    skipped = 0
    for y in spec.y_axis:
        raw = sheet.column_values(y)
        values = numeric_series(raw)
        skipped += _non_coercible(raw, values)
        frame = pd.DataFrame({"key": row_codes, "value": values})
        data = _grouped(frame, len(codes), method) if codes else []
        series.append(Series(label=y, data=tuple(data), value_count=int(values.notna().sum())))

    return SeriesSet(
        chart_type=spec.chart_type,
        labels=tuple(labels),
        series=tuple(series),
        skipped=skipped,
    )


def _aggregate_columns(sheet: Sheet, spec: ChartSpec) -> SeriesSet:
    """Pie-like chart without x-axis: one slice per y column over all rows."""
    method = spec.aggregation
    data: list[Optional[Number]] = []
    value_count = 0
    skipped = 0
    for y in spec.y_axis:
        raw = sheet.column_values(y)
        values = numeric_series(raw)
        skipped += _non_coercible(raw, values)
        value_count += int(values.notna().sum())
        data.append(aggregate_values(values, method))

    label = method.value[0].upper() + method.value[1:]
    return SeriesSet(
        chart_type=spec.chart_type,
        labels=tuple(spec.y_axis),
        series=(Series(label=label, data=tuple(data), value_count=value_count),),
        skipped=skipped,
    )


# ---------------------------
# Scatter / bubble
# ---------------------------


def _aggregate_points(sheet: Sheet, spec: ChartSpec, blank_label: str) -> SeriesSet:
    if not spec.category_field:
        raise ValidationError("categoryField", "Scatter and bubble charts require a Category field.")
    bubble = spec.chart_type == ChartType.BUBBLE
    cat_idx = sheet.column_index(spec.category_field)
    x_idx = sheet.column_index(spec.x_axis[0])
    y_idx = sheet.column_index(spec.y_axis[0])
    r_idx = sheet.column_index(spec.size_field) if bubble and spec.size_field else None

    groups: dict[Optional[str], list[Point]] = {}
    skipped = 0
    for row in sheet.rows:
        category = display_label(sheet.cell(row, cat_idx)) or None
        points = groups.setdefault(category, [])

        x = coerce_number(sheet.cell(row, x_idx))
        y = coerce_number(sheet.cell(row, y_idx))
        r = coerce_number(sheet.cell(row, r_idx)) if r_idx is not None else None
        if x is None or y is None or (r_idx is not None and r is None):
            skipped += 1
            continue
        points.append(Point(x=x, y=y, r=r))

    series = tuple(
        Series(label=blank_label if cat is None else cat, data=tuple(pts), value_count=len(pts))
        for cat, pts in groups.items()
    )
    return SeriesSet(chart_type=spec.chart_type, labels=None, series=series, skipped=skipped)


# ---------------------------
# Public API
# ---------------------------


def aggregate_series(
    sheet: Sheet,
    spec: ChartSpec,
    separator: str = DEFAULT_LABEL_SEPARATOR,
    blank_label: str = DEFAULT_BLANK_LABEL,
) -> SeriesSet:
    """
    Group rows and aggregate y-values for a validated spec.

    Category-keyed charts group by the tuple of x-axis values (labels are
    the joined tuples, in first-seen order) and emit one series per y column. Scatter/bubble group
    by the category field and emit one series of points per category.

    Raises EmptyResultError if no series received a single usable value.
    """
    chart_type = spec.chart_type
    if chart_type in POINT_CHARTS:
        result = _aggregate_points(sheet, spec, blank_label)
    elif chart_type in PIE_LIKE and not spec.x_axis:
        result = _aggregate_columns(sheet, spec)
    else:
        result = _aggregate_by_category(sheet, spec, separator, blank_label)

    if result.skipped:
        logger.info("Skipped %d non-numeric cells/rows while aggregating '%s'", result.skipped, chart_type.value)

    if not any(s.value_count for s in result.series):
        if not sheet.rows:
            raise EmptyResultError("The selected sheet has no data rows.")
        raise EmptyResultError(
            "No numeric values were found for the selected columns. "
            "Please check your axis selections."
        )
    return result

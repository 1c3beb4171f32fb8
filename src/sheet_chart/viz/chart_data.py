"""Build the render-ready ChartData contract (labels + datasets + default options)."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from sheet_chart.analytics.aggregator import Point, Series, SeriesSet
from sheet_chart.core.constants import PIE_LIKE, POINT_CHARTS, ChartType
from sheet_chart.core.log import get_logger
from sheet_chart.core.settings import PipelineSettings
from sheet_chart.viz.chart_specs import ChartSpec

logger = get_logger(__name__)

# Maps every raw bubble size of a chart to a pixel radius, order preserved.
RadiusMapping = Callable[[Sequence[float]], list[float]]

TOOLTIP_FORMAT = "{label}: {value}"
TOOLTIP_FORMAT_SHARE = "{label}: {value} ({percentage}%)"


@dataclass(frozen=True)
class ChartData:
    """Output contract consumed by the external charting component."""

    chart_type: ChartType
    labels: Optional[list[str]]
    datasets: list[dict[str, Any]]
    options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.labels is not None:
            out["labels"] = list(self.labels)
        out["datasets"] = self.datasets
        out["options"] = self.options
        return out

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=False, allow_nan=False)


# ---------------------------
# Bubble radius mappings
# ---------------------------


def clamped_radius(min_radius: float) -> RadiusMapping:
    """Raw size used directly, but never below `min_radius` (keeps tiny bubbles visible)."""

    def _map(sizes: Sequence[float]) -> list[float]:
        return [max(float(s), min_radius) for s in sizes]

    return _map


def scaled_radius(min_radius: float = 3.0, max_radius: float = 30.0) -> RadiusMapping:
    """Linear rescale of the chart's size range onto [min_radius, max_radius]."""
    if max_radius < min_radius:
        raise ValueError("max_radius must be >= min_radius")

    def _map(sizes: Sequence[float]) -> list[float]:
        if not sizes:
            return []
        # halved so sizes near the float limits cannot overflow the range
        lo, hi = min(sizes) / 2.0, max(sizes) / 2.0
        if hi == lo:
            mid = (min_radius + max_radius) / 2.0
            return [mid for _ in sizes]
        span = max_radius - min_radius
        return [min_radius + (float(s) / 2.0 - lo) / (hi - lo) * span for s in sizes]

    return _map


# ---------------------------
# Datasets
# ---------------------------


def _color(palette: Sequence[str], index: int) -> str:
    return palette[index % len(palette)]


def _pie_datasets(series_set: SeriesSet, palette: Sequence[str]) -> list[dict[str, Any]]:
    first = series_set.series[0]
    if len(series_set.series) > 1:
        logger.warning(
            "%s charts show a single dataset; ignoring %d extra series",
            series_set.chart_type.value,
            len(series_set.series) - 1,
        )
    n = len(series_set.labels or ())
    colors = [_color(palette, i) for i in range(n)]
    return [
        {
            "label": first.label,
            "data": list(first.data),
            "backgroundColor": colors,
            "borderColor": list(colors),
            "borderWidth": 1,
        }
    ]


def _category_datasets(series_set: SeriesSet, palette: Sequence[str]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for i, s in enumerate(series_set.series):
        ds: dict[str, Any] = {
            "label": s.label,
            "data": list(s.data),
            "backgroundColor": _color(palette, i),
            "borderColor": _color(palette, i),
            "borderWidth": 1,
        }
        if series_set.chart_type == ChartType.LINE:
            ds["fill"] = False
        out.append(ds)
    return out


def _point_datasets(
    series_set: SeriesSet,
    palette: Sequence[str],
    radius: RadiusMapping,
) -> list[dict[str, Any]]:
    kept: list[Series] = [s for s in series_set.series if s.data]
    dropped = len(series_set.series) - len(kept)
    if dropped:
        logger.info("Dropped %d categories without plottable points", dropped)

    bubble = series_set.chart_type == ChartType.BUBBLE
    radii: list[float] = []
    if bubble:
        # One mapping call over the whole chart so sizes stay comparable across categories.
        sizes = [p.r for s in kept for p in s.data if isinstance(p, Point) and p.r is not None]
        radii = radius(sizes)

    out: list[dict[str, Any]] = []
    pos = 0
    for i, s in enumerate(kept):
        points: list[dict[str, float]] = []
        for p in s.data:
            d = {"x": p.x, "y": p.y}
            if bubble:
                d["r"] = radii[pos]
                pos += 1
            points.append(d)
        out.append(
            {
                "label": s.label,
                "data": points,
                "backgroundColor": _color(palette, i),
                "borderColor": _color(palette, i),
            }
        )
    return out


# ---------------------------
# Options
# ---------------------------


def _axis_title(names: Sequence[str], separator: str) -> dict[str, Any]:
    return {"display": True, "text": separator.join(names)}


def build_options(spec: ChartSpec, settings: PipelineSettings) -> dict[str, Any]:
    """
    Default rendering options: legend always visible, tooltip label template,
    cartesian scales titled by axis columns (none for pie-like, radial for radar).
    """
    chart_type = spec.chart_type
    pie_like = chart_type in PIE_LIKE

    options: dict[str, Any] = {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {
            "legend": {"display": True, "position": "right" if pie_like else "top"},
            "title": {"display": bool(spec.title), "text": spec.title},
            "tooltip": {
                "enabled": True,
                "mode": "nearest" if pie_like or chart_type in POINT_CHARTS else "index",
                "intersect": pie_like or chart_type in POINT_CHARTS,
                "labelFormat": TOOLTIP_FORMAT_SHARE if pie_like else TOOLTIP_FORMAT,
            },
        },
    }

    if pie_like:
        return options

    if chart_type == ChartType.RADAR:
        options["scales"] = {"r": {"beginAtZero": True, "ticks": {"precision": 0}}}
        return options

    sep = settings.axis_title_separator
    x_names = spec.x_axis[:1] if chart_type in POINT_CHARTS else spec.x_axis
    y_names = spec.y_axis[:1] if chart_type in POINT_CHARTS else spec.y_axis
    options["scales"] = {
        "x": {"title": _axis_title(x_names, sep)},
        "y": {"title": _axis_title(y_names, sep), "beginAtZero": chart_type not in POINT_CHARTS},
    }
    return options


# ---------------------------
# Public API
# ---------------------------


def assemble_chart_data(
    series_set: SeriesSet,
    spec: ChartSpec,
    settings: PipelineSettings | None = None,
    radius: RadiusMapping | None = None,
) -> ChartData:
    """
    Turn aggregated series into the labelled, colored ChartData contract.

    Colors cycle through the palette by series position (by label position
    for pie-like charts). Scatter/bubble charts carry no labels.
    """
    settings = settings or PipelineSettings()
    palette = settings.palette
    chart_type = series_set.chart_type

    if chart_type in PIE_LIKE:
        datasets = _pie_datasets(series_set, palette)
        labels: Optional[list[str]] = list(series_set.labels or ())
    elif chart_type in POINT_CHARTS:
        datasets = _point_datasets(series_set, palette, radius or clamped_radius(settings.min_bubble_radius))
        labels = None
    else:
        datasets = _category_datasets(series_set, palette)
        labels = list(series_set.labels or ())

    return ChartData(
        chart_type=chart_type,
        labels=labels,
        datasets=datasets,
        options=build_options(spec, settings),
    )

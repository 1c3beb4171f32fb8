"""Constants and enums for chart types, aggregations, and column types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    SCATTER = "scatter"
    BUBBLE = "bubble"
    RADAR = "radar"
    POLAR_AREA = "polarArea"


class AggregationMethod(str, Enum):
    SUM = "sum"
    AVERAGE = "average"
    COUNT = "count"
    MIN = "min"
    MAX = "max"


class ColumnType(str, Enum):
    NUMBER = "number"
    DATE = "date"
    STRING = "string"
    MIXED = "mixed"
    UNKNOWN = "unknown"


# Chart families
PIE_LIKE: FrozenSet[ChartType] = frozenset(
    {ChartType.PIE, ChartType.DOUGHNUT, ChartType.POLAR_AREA}
)
POINT_CHARTS: FrozenSet[ChartType] = frozenset({ChartType.SCATTER, ChartType.BUBBLE})


@dataclass(frozen=True)
class ChartRule:
    """Which spec fields a chart type requires."""

    needs_x_axis: bool
    needs_y_axis: bool
    needs_category_field: bool
    needs_size_field: bool


CHART_RULES: dict[ChartType, ChartRule] = {
    ChartType.BAR: ChartRule(True, True, False, False),
    ChartType.LINE: ChartRule(True, True, False, False),
    ChartType.RADAR: ChartRule(True, True, False, False),
    ChartType.PIE: ChartRule(False, True, False, False),
    ChartType.DOUGHNUT: ChartRule(False, True, False, False),
    ChartType.POLAR_AREA: ChartRule(False, True, False, False),
    ChartType.SCATTER: ChartRule(True, True, True, False),
    ChartType.BUBBLE: ChartRule(True, True, True, True),
}

# Defaults (can be overridden by configs/pipeline.yaml)
DEFAULT_PALETTE: tuple[str, ...] = (
    "#4CAF50",
    "#2196F3",
    "#FFC107",
    "#F44336",
    "#9C27B0",
    "#00BCD4",
    "#FF9800",
    "#795548",
)
DEFAULT_UNIQUE_VALUES_CAP: int = 50
DEFAULT_LABEL_SEPARATOR: str = " - "
DEFAULT_AXIS_TITLE_SEPARATOR: str = ", "
DEFAULT_BLANK_LABEL: str = "(blank)"
DEFAULT_MIN_BUBBLE_RADIUS: float = 3.0
DEFAULT_AGGREGATION: AggregationMethod = AggregationMethod.SUM

"""Chart spec validation against per-chart-type rules and profiled columns."""

from __future__ import annotations

from collections.abc import Iterable

from sheet_chart.analytics.profiler import ColumnProfile, profiles_by_name
from sheet_chart.core.constants import CHART_RULES, AggregationMethod, ChartType
from sheet_chart.core.errors import DataTypeError, FieldError, ValidationError
from sheet_chart.core.log import get_logger
from sheet_chart.viz.chart_specs import ChartSpec

logger = get_logger(__name__)

_TYPE_NAMES = ", ".join(t.value for t in ChartType)
_AGG_NAMES = ", ".join(a.value for a in AggregationMethod)


def _label(chart_type: ChartType) -> str:
    return chart_type.value[0].upper() + chart_type.value[1:]


def _require_columns(field: str, names: Iterable[str], columns: dict[str, ColumnProfile]) -> None:
    for name in names:
        if name not in columns:
            raise ValidationError(field, f"Column '{name}' selected for {field} does not exist in the sheet.")


def _check(spec: ChartSpec, columns: dict[str, ColumnProfile]) -> ChartSpec:
    # 1) type
    try:
        chart_type = ChartType(spec.type)
    except ValueError:
        raise ValidationError("type", f"Unsupported chart type '{spec.type}'. Choose one of: {_TYPE_NAMES}.") from None
    rule = CHART_RULES[chart_type]

    # 2) xAxis
    if rule.needs_x_axis and not spec.x_axis:
        raise ValidationError("xAxis", "Please select at least one X-axis column for this chart type.")
    _require_columns("xAxis", spec.x_axis, columns)

    # 3) yAxis
    if not spec.y_axis:
        raise ValidationError("yAxis", "Please select at least one Y-axis column.")
    _require_columns("yAxis", spec.y_axis, columns)
    for name in spec.y_axis:
        if not columns[name].is_numeric_field:
            raise DataTypeError(
                name,
                f"Column '{name}' is {columns[name].data_type.value}, "
                "but Y-axis columns must contain numbers.",
            )

    # 4) categoryField
    if rule.needs_category_field:
        if not spec.category_field:
            raise ValidationError(
                "categoryField",
                f"{_label(chart_type)} charts require a Category field to group data points. "
                "Please select a category field.",
            )
        _require_columns("categoryField", [spec.category_field], columns)

    # 5) sizeField
    if rule.needs_size_field:
        if not spec.size_field:
            raise ValidationError(
                "sizeField",
                "Bubble charts require a Size field to determine bubble size. Please select a numeric field.",
            )
        _require_columns("sizeField", [spec.size_field], columns)
        if not columns[spec.size_field].is_numeric_field:
            raise DataTypeError(
                spec.size_field,
                f"Column '{spec.size_field}' is {columns[spec.size_field].data_type.value}, "
                "but the Size field must contain numbers.",
            )

    # 6) aggregationMethod (absent -> sum)
    if spec.aggregation_method is None:
        return spec.model_copy(update={"aggregation_method": AggregationMethod.SUM.value})
    try:
        AggregationMethod(spec.aggregation_method)
    except ValueError:
        raise ValidationError(
            "aggregationMethod",
            f"Unsupported aggregation method '{spec.aggregation_method}'. Choose one of: {_AGG_NAMES}.",
        ) from None
    return spec


def validate_chart_spec(spec: ChartSpec, columns: list[ColumnProfile]) -> ChartSpec:
    """
    Check `spec` against the rule table for its type, in order, stopping at the first violation.

    Returns the normalized spec (aggregationMethod defaulted to "sum").
    Raises ValidationError / DataTypeError tagged with the offending field.
    """
    try:
        return _check(spec, profiles_by_name(columns))
    except FieldError as e:
        logger.info("Chart spec rejected (%s): %s", e.field, e.message)
        raise

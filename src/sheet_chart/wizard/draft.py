"""Chart-creation wizard as an immutable draft plus pure transitions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from sheet_chart.analytics.profiler import ColumnProfile
from sheet_chart.analytics.validator import validate_chart_spec
from sheet_chart.core.constants import CHART_RULES, AggregationMethod, ChartType
from sheet_chart.core.errors import InvalidTransition, ValidationError
from sheet_chart.viz.chart_specs import ChartSpec


class WizardStep(str, Enum):
    SELECT_SOURCE = "select_source"
    SELECT_TYPE = "select_type"
    CONFIGURE = "configure"
    PREVIEW = "preview"


_ORDER: tuple[WizardStep, ...] = (
    WizardStep.SELECT_SOURCE,
    WizardStep.SELECT_TYPE,
    WizardStep.CONFIGURE,
    WizardStep.PREVIEW,
)


@dataclass(frozen=True)
class ChartDraft:
    """Everything the user has chosen so far. Never mutated; every transition returns a new draft."""

    step: WizardStep = WizardStep.SELECT_SOURCE
    sheet_id: Optional[str] = None
    chart_type: ChartType = ChartType.BAR
    title: str = ""
    description: str = ""
    x_axis: tuple[str, ...] = ()
    y_axis: tuple[str, ...] = ()
    category_field: Optional[str] = None
    size_field: Optional[str] = None
    aggregation_method: AggregationMethod = AggregationMethod.SUM


def _require_step(draft: ChartDraft, *allowed: WizardStep) -> None:
    if draft.step not in allowed:
        names = ", ".join(s.value for s in allowed)
        raise InvalidTransition(f"Cannot do this from step '{draft.step.value}' (allowed: {names}).")


def select_source(draft: ChartDraft, sheet_id: str) -> ChartDraft:
    """Pick a sheet. A different sheet invalidates every column selection."""
    if not sheet_id or not sheet_id.strip():
        raise ValidationError("sheetId", "No data source selected. Please select a sheet first.")
    if sheet_id == draft.sheet_id:
        return replace(draft, step=WizardStep.SELECT_TYPE)
    return replace(
        draft,
        step=WizardStep.SELECT_TYPE,
        sheet_id=sheet_id,
        x_axis=(),
        y_axis=(),
        category_field=None,
        size_field=None,
    )


def select_type(draft: ChartDraft, chart_type: ChartType | str) -> ChartDraft:
    """Pick a chart type; fields the type does not use are cleared."""
    _require_step(draft, WizardStep.SELECT_TYPE, WizardStep.CONFIGURE, WizardStep.PREVIEW)
    try:
        ct = ChartType(chart_type)
    except ValueError:
        raise ValidationError("type", f"Unsupported chart type '{chart_type}'.") from None

    rule = CHART_RULES[ct]
    return replace(
        draft,
        step=WizardStep.CONFIGURE,
        chart_type=ct,
        category_field=draft.category_field if rule.needs_category_field else None,
        size_field=draft.size_field if rule.needs_size_field else None,
    )


def configure(
    draft: ChartDraft,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    x_axis: Optional[tuple[str, ...] | list[str]] = None,
    y_axis: Optional[tuple[str, ...] | list[str]] = None,
    category_field: Optional[str] = None,
    size_field: Optional[str] = None,
    aggregation_method: Optional[AggregationMethod | str] = None,
) -> ChartDraft:
    """Update any subset of the configuration. Editing from the preview returns to CONFIGURE."""
    _require_step(draft, WizardStep.CONFIGURE, WizardStep.PREVIEW)
    updates: dict[str, object] = {"step": WizardStep.CONFIGURE}
    if title is not None:
        updates["title"] = title
    if description is not None:
        updates["description"] = description
    if x_axis is not None:
        updates["x_axis"] = tuple(x_axis)
    if y_axis is not None:
        updates["y_axis"] = tuple(y_axis)
    if category_field is not None:
        updates["category_field"] = category_field or None
    if size_field is not None:
        updates["size_field"] = size_field or None
    if aggregation_method is not None:
        try:
            updates["aggregation_method"] = AggregationMethod(aggregation_method)
        except ValueError:
            raise ValidationError(
                "aggregationMethod", f"Unsupported aggregation method '{aggregation_method}'."
            ) from None
    return replace(draft, **updates)  # type: ignore[arg-type]


def to_spec(draft: ChartDraft) -> ChartSpec:
    return ChartSpec(
        type=draft.chart_type.value,
        title=draft.title,
        description=draft.description,
        x_axis=draft.x_axis,
        y_axis=draft.y_axis,
        category_field=draft.category_field,
        size_field=draft.size_field,
        aggregation_method=draft.aggregation_method.value,
    )


def preview(draft: ChartDraft, columns: list[ColumnProfile]) -> tuple[ChartDraft, ChartSpec]:
    """
    Validate the configuration against the sheet's columns and move to PREVIEW.
    Validation errors propagate unchanged; the draft stays where it was.
    """
    _require_step(draft, WizardStep.CONFIGURE, WizardStep.PREVIEW)
    spec = validate_chart_spec(to_spec(draft), columns)
    return replace(draft, step=WizardStep.PREVIEW), spec


def back(draft: ChartDraft) -> ChartDraft:
    idx = _ORDER.index(draft.step)
    if idx == 0:
        raise InvalidTransition("Already at the first step.")
    return replace(draft, step=_ORDER[idx - 1])

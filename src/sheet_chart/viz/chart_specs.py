"""Declarative chart spec objects (wire contract of a user-submitted chart)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sheet_chart.core.constants import AggregationMethod, ChartType
from sheet_chart.core.errors import ValidationError


class ChartSpec(BaseModel):
    """
    Specification for a chart, immutable once submitted.

    `type` and `aggregationMethod` are kept as raw strings so that the
    validator can report unknown values with a field tag instead of failing
    at parse time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    title: str = ""
    description: str = ""
    x_axis: tuple[str, ...] = Field(default=(), alias="xAxis")
    y_axis: tuple[str, ...] = Field(default=(), alias="yAxis")
    category_field: str | None = Field(default=None, alias="categoryField")
    size_field: str | None = Field(default=None, alias="sizeField")
    aggregation_method: str | None = Field(default=None, alias="aggregationMethod")

    @field_validator("x_axis", "y_axis", mode="before")
    @classmethod
    def _axis_as_tuple(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return () if not v.strip() else (v,)
        return v

    @field_validator("category_field", "size_field", "aggregation_method", mode="before")
    @classmethod
    def _blank_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def chart_type(self) -> ChartType:
        """Only meaningful after validation; raises ValueError for unknown types."""
        return ChartType(self.type)

    @property
    def aggregation(self) -> AggregationMethod:
        return AggregationMethod(self.aggregation_method or AggregationMethod.SUM.value)

    def to_payload(self) -> dict[str, Any]:
        """Wire JSON form (camelCase keys, lists, optional fields omitted when unset)."""
        out = self.model_dump(by_alias=True)
        out["xAxis"] = list(self.x_axis)
        out["yAxis"] = list(self.y_axis)
        for key in ("categoryField", "sizeField", "aggregationMethod"):
            if out.get(key) is None:
                out.pop(key, None)
        return out


def _field_for_loc(loc: tuple[Any, ...]) -> str:
    if not loc:
        return "spec"
    head = str(loc[0])
    by_name = {
        "x_axis": "xAxis",
        "y_axis": "yAxis",
        "category_field": "categoryField",
        "size_field": "sizeField",
        "aggregation_method": "aggregationMethod",
    }
    return by_name.get(head, head)


def parse_chart_spec(payload: Mapping[str, Any] | ChartSpec) -> ChartSpec:
    """
    Build a ChartSpec from the wire JSON.
    Shape errors (wrong types, missing `type`) surface as a field-tagged ValidationError.
    """
    if isinstance(payload, ChartSpec):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("spec", "Chart configuration must be a JSON object.")
    try:
        return ChartSpec.model_validate(dict(payload))
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = _field_for_loc(tuple(first.get("loc", ())))
        if first.get("type") == "missing":
            raise ValidationError(field, f"'{field}' is required.") from e
        raise ValidationError(field, f"Invalid value for '{field}': {first.get('msg')}") from e

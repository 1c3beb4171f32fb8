from __future__ import annotations

import json

import pytest

from sheet_chart.analytics.aggregator import aggregate_series
from sheet_chart.core.constants import DEFAULT_PALETTE
from sheet_chart.core.settings import PipelineSettings
from sheet_chart.data.sheet import Sheet
from sheet_chart.viz.chart_data import assemble_chart_data, clamped_radius, scaled_radius
from sheet_chart.viz.chart_specs import ChartSpec


def _assemble(sheet: Sheet, settings: PipelineSettings | None = None, radius=None, **kw) -> dict:
    spec = ChartSpec(**kw)
    return assemble_chart_data(aggregate_series(sheet, spec), spec, settings=settings, radius=radius).to_dict()


def test_bar_chart_data(region_sheet: Sheet) -> None:
    out = _assemble(region_sheet, type="bar", x_axis=["Region"], y_axis=["Sales"], title="Sales by region")
    assert out["labels"] == ["East", "West"]
    assert len(out["datasets"]) == 1
    ds = out["datasets"][0]
    assert ds["label"] == "Sales"
    assert ds["data"] == [30, 5]
    assert ds["backgroundColor"] == DEFAULT_PALETTE[0]
    assert out["options"]["plugins"]["title"] == {"display": True, "text": "Sales by region"}
    assert out["options"]["plugins"]["legend"]["display"] is True
    assert out["options"]["scales"]["x"]["title"]["text"] == "Region"


def test_every_dataset_matches_label_count(sales_sheet: Sheet) -> None:
    out = _assemble(sales_sheet, type="line", x_axis=["Region"], y_axis=["Sales", "Profit"])
    for ds in out["datasets"]:
        assert len(ds["data"]) == len(out["labels"])
        assert ds["fill"] is False
    assert out["options"]["scales"]["y"]["title"]["text"] == "Sales, Profit"


def test_series_colors_cycle_through_palette() -> None:
    headers = ["K"] + [f"V{i}" for i in range(3)]
    sheet = Sheet(headers=headers, rows=[["a", 1, 2, 3]])
    settings = PipelineSettings(palette=("#111111", "#222222"))
    out = _assemble(sheet, settings=settings, type="bar", x_axis=["K"], y_axis=headers[1:])
    assert [ds["backgroundColor"] for ds in out["datasets"]] == ["#111111", "#222222", "#111111"]


def test_pie_has_one_color_per_label_and_no_scales(region_sheet: Sheet) -> None:
    out = _assemble(region_sheet, type="doughnut", x_axis=["Region"], y_axis=["Sales"])
    ds = out["datasets"][0]
    assert ds["backgroundColor"] == list(DEFAULT_PALETTE[:2])
    assert "scales" not in out["options"]
    assert out["options"]["plugins"]["legend"]["position"] == "right"


def test_pie_keeps_single_dataset(sales_sheet: Sheet) -> None:
    out = _assemble(sales_sheet, type="pie", x_axis=["Region"], y_axis=["Sales", "Profit"])
    assert len(out["datasets"]) == 1
    assert out["datasets"][0]["label"] == "Sales"


def test_radar_uses_radial_scale(region_sheet: Sheet) -> None:
    out = _assemble(region_sheet, type="radar", x_axis=["Region"], y_axis=["Sales"])
    assert set(out["options"]["scales"]) == {"r"}


def test_bubble_chart_data_has_no_labels(sales_sheet: Sheet) -> None:
    out = _assemble(
        sales_sheet,
        type="bubble",
        x_axis=["Sales"],
        y_axis=["Profit"],
        category_field="Region",
        size_field="Units",
    )
    assert "labels" not in out
    # North had no usable rows and is dropped
    assert [ds["label"] for ds in out["datasets"]] == ["East", "West"]
    east = out["datasets"][0]["data"]
    assert east[0] == {"x": 100, "y": 20, "r": 5}
    # raw size 1 is clamped to the minimum radius
    assert east[1] == {"x": 1000, "y": 300, "r": 3.0}


def test_custom_radius_mapping(sales_sheet: Sheet) -> None:
    out = _assemble(
        sales_sheet,
        radius=scaled_radius(2.0, 10.0),
        type="bubble",
        x_axis=["Sales"],
        y_axis=["Profit"],
        category_field="Region",
        size_field="Units",
    )
    radii = [p["r"] for ds in out["datasets"] for p in ds["data"]]
    # sizes 5, 1, 2 -> min maps to 2, max to 10
    assert radii == [10.0, 2.0, 4.0]


def test_scatter_points_have_no_radius(sales_sheet: Sheet) -> None:
    out = _assemble(sales_sheet, type="scatter", x_axis=["Sales"], y_axis=["Profit"], category_field="Product")
    for ds in out["datasets"]:
        for p in ds["data"]:
            assert set(p) == {"x", "y"}


def test_radius_mappings() -> None:
    assert clamped_radius(3.0)([1, 3, 10]) == [3.0, 3.0, 10.0]
    assert scaled_radius(4.0, 8.0)([7, 7]) == [6.0, 6.0]
    assert scaled_radius()([]) == []
    with pytest.raises(ValueError):
        scaled_radius(10.0, 1.0)


def test_scaled_radius_handles_sizes_at_float_limits() -> None:
    assert scaled_radius(2.0, 10.0)([-1e308, 1e308, -1e308]) == [2.0, 10.0, 2.0]


def test_to_json_is_valid_json(region_sheet: Sheet) -> None:
    spec = ChartSpec(type="bar", x_axis=["Region"], y_axis=["Sales"])
    data = assemble_chart_data(aggregate_series(region_sheet, spec), spec)
    assert json.loads(data.to_json())["labels"] == ["East", "West"]


def test_to_json_writes_overflowing_sums_as_null() -> None:
    sheet = Sheet(headers=["K", "V"], rows=[["a", 1e308], ["a", 1e308]])
    spec = ChartSpec(type="bar", x_axis=["K"], y_axis=["V"])
    text = assemble_chart_data(aggregate_series(sheet, spec), spec).to_json()
    assert "Infinity" not in text
    assert json.loads(text)["datasets"][0]["data"] == [None]

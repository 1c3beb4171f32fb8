from __future__ import annotations

import json

from sheet_chart.analytics.pipeline import build_chart
from sheet_chart.data.sheet import Sheet


def _sheet() -> Sheet:
    return Sheet(
        name="Sales",
        headers=["Region", "Sales", "Profit"],
        rows=[
            ["East", 10, 2],
            ["East", 20, 5],
            ["West", 5, "n/a"],
        ],
    )


EXPECTED_BAR = {
    "labels": ["East", "West"],
    "datasets": [
        {
            "label": "Sales",
            "data": [30.0, 5.0],
            "backgroundColor": "#4CAF50",
            "borderColor": "#4CAF50",
            "borderWidth": 1,
        },
        {
            "label": "Profit",
            "data": [7.0, 0.0],
            "backgroundColor": "#2196F3",
            "borderColor": "#2196F3",
            "borderWidth": 1,
        },
    ],
    "options": {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {
            "legend": {"display": True, "position": "top"},
            "title": {"display": True, "text": "Sales by region"},
            "tooltip": {
                "enabled": True,
                "mode": "index",
                "intersect": False,
                "labelFormat": "{label}: {value}",
            },
        },
        "scales": {
            "x": {"title": {"display": True, "text": "Region"}},
            "y": {"title": {"display": True, "text": "Sales, Profit"}, "beginAtZero": True},
        },
    },
}


def test_bar_chart_contract_golden() -> None:
    result = build_chart(
        _sheet(),
        {"type": "bar", "title": "Sales by region", "xAxis": ["Region"], "yAxis": ["Sales", "Profit"]},
    )
    assert result.chart_data.to_dict() == EXPECTED_BAR
    assert result.series.skipped == 1


def test_pie_without_x_axis_contract_golden() -> None:
    result = build_chart(_sheet(), {"type": "pie", "yAxis": ["Sales", "Profit"], "aggregationMethod": "max"})
    out = json.loads(result.chart_data.to_json())
    assert out == {
        "labels": ["Sales", "Profit"],
        "datasets": [
            {
                "label": "Max",
                "data": [20.0, 5.0],
                "backgroundColor": ["#4CAF50", "#2196F3"],
                "borderColor": ["#4CAF50", "#2196F3"],
                "borderWidth": 1,
            }
        ],
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {
                "legend": {"display": True, "position": "right"},
                "title": {"display": False, "text": ""},
                "tooltip": {
                    "enabled": True,
                    "mode": "nearest",
                    "intersect": True,
                    "labelFormat": "{label}: {value} ({percentage}%)",
                },
            },
        },
    }

from pathlib import Path

import pytest

from sheet_chart.data.sheet import Sheet


@pytest.fixture
def sample_csv_path() -> str:
    return str(Path("data/samples/sales_sample.csv"))


@pytest.fixture
def region_sheet() -> Sheet:
    return Sheet(
        name="Sales",
        headers=["Region", "Sales"],
        rows=[["East", 10], ["East", 20], ["West", 5]],
    )


@pytest.fixture
def sales_sheet() -> Sheet:
    return Sheet(
        name="Sales",
        headers=["Region", "Product", "Sales", "Profit", "Units"],
        rows=[
            ["East", "Widget", 100, 20, 5],
            ["West", "Widget", 50, 10, 2],
            ["East", "Gadget", "$1,000", 300, 1],
            ["North", "Gizmo", "n/a", 5, 4],
            ["West", "Gadget", 80, None, 3],
        ],
    )

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from sheet_chart.core.errors import UpstreamFetchError
from sheet_chart.data.sheet import Sheet, load_workbook, sheet_fingerprint, sheet_from_dataframe
from sheet_chart.data.store import ColumnProfileCache, WorkbookStore, split_sheet_id


def test_load_sample_csv(sample_csv_path: str) -> None:
    sheets = load_workbook(sample_csv_path)
    assert len(sheets) == 1
    sheet = sheets[0]
    assert sheet.name == "sales_sample"
    assert sheet.headers == ["Region", "Product", "Date", "Sales", "Profit", "Units"]
    assert len(sheet.rows) == 10
    # blank CSV cells become None
    assert sheet.rows[4][4] is None


def test_load_workbook_rejects_unknown_extension(tmp_path: Path) -> None:
    p = tmp_path / "data.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(UpstreamFetchError):
        load_workbook(p)


def test_load_workbook_missing_file(tmp_path: Path) -> None:
    with pytest.raises(UpstreamFetchError):
        load_workbook(tmp_path / "missing.csv")


def test_excel_workbook_tabs(tmp_path: Path) -> None:
    p = tmp_path / "book.xlsx"
    with pd.ExcelWriter(p) as writer:
        pd.DataFrame({"Region": ["East", "West"], "Sales": [1, 2]}).to_excel(writer, sheet_name="Q1", index=False)
        pd.DataFrame({"Region": ["North"], "Sales": [3]}).to_excel(writer, sheet_name="Q2", index=False)

    store = WorkbookStore(tmp_path)
    assert store.fetch("book.xlsx").name == "Q1"
    q2 = store.fetch("book.xlsx#Q2")
    assert q2.rows == [["North", 3]]
    with pytest.raises(UpstreamFetchError):
        store.fetch("book.xlsx#Q3")


def test_store_lists_and_caches(tmp_path: Path) -> None:
    (tmp_path / "a.csv").write_text("K,V\nx,1\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignore me", encoding="utf-8")
    store = WorkbookStore(tmp_path)

    assert store.list_files() == ["a.csv"]
    assert store.load("a.csv") is store.load("a.csv")


def test_store_reloads_changed_file(tmp_path: Path) -> None:
    p = tmp_path / "a.csv"
    p.write_text("K,V\nx,1\n", encoding="utf-8")
    store = WorkbookStore(tmp_path)
    first = store.fetch("a.csv")

    p.write_text("K,V\nx,2\n", encoding="utf-8")
    second = store.fetch("a.csv")
    assert first.rows != second.rows


def test_store_rejects_paths_outside_root(tmp_path: Path) -> None:
    store = WorkbookStore(tmp_path / "sheets")
    with pytest.raises(UpstreamFetchError):
        store.fetch("../secret.csv")


def test_split_sheet_id() -> None:
    assert split_sheet_id("sales.xlsx#Q1") == ("sales.xlsx", "Q1")
    assert split_sheet_id("sales.csv") == ("sales.csv", None)
    assert split_sheet_id("sales.csv#") == ("sales.csv", None)


def test_sheet_from_dataframe_maps_missing_to_none() -> None:
    df = pd.DataFrame({"A": [1.0, float("nan")], 2024: ["x", None]})
    sheet = sheet_from_dataframe(df, name="T")
    assert sheet.headers == ["A", "2024"]
    assert sheet.rows == [[1.0, "x"], [None, None]]


def test_fingerprint_ignores_blank_representation() -> None:
    a = Sheet(headers=["A"], rows=[[None], [1]])
    b = Sheet(headers=["A"], rows=[[""], [1]])
    c = Sheet(headers=["A"], rows=[[""], [2]])
    assert sheet_fingerprint(a) == sheet_fingerprint(b)
    assert sheet_fingerprint(a) != sheet_fingerprint(c)


def test_profile_cache_clear() -> None:
    cache = ColumnProfileCache()
    sheet = Sheet(headers=["A"], rows=[[1]])
    assert cache.get(sheet) is None
    cache.put(sheet, [])
    assert cache.get(sheet) == []
    assert (cache.hits, cache.misses) == (1, 1)
    cache.clear()
    assert len(cache) == 0

"""Sheet ingestion contract and workbook loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sheet_chart.core.errors import UpstreamFetchError
from sheet_chart.core.utils_hash import sha256_json
from sheet_chart.data.cells import display_label, is_empty

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".xlsx", ".xls")


class Sheet(BaseModel):
    """
    One tab of an uploaded workbook: `{name, headers, rows}`.

    Rows are positional and may be ragged; `cell()` treats missing trailing
    cells as empty.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Sheet1"
    headers: list[str]
    rows: list[list[Any]] = Field(default_factory=list)

    @field_validator("headers", mode="before")
    @classmethod
    def _headers_as_strings(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [display_label(h) if not isinstance(h, str) else h for h in v]
        return v

    def column_index(self, name: str) -> int:
        return self.headers.index(name)

    def has_column(self, name: str) -> bool:
        return name in self.headers

    def cell(self, row: list[Any], index: int) -> Any:
        return row[index] if index < len(row) else None

    def column_values(self, name: str) -> list[Any]:
        idx = self.column_index(name)
        return [self.cell(r, idx) for r in self.rows]


def sheet_fingerprint(sheet: Sheet) -> str:
    """Identity of a sheet's content, used as the column-profile cache key."""
    return sha256_json(
        {
            "name": sheet.name,
            "headers": sheet.headers,
            "rows": [[None if is_empty(c) else c for c in r] for r in sheet.rows],
        }
    )


def sheet_from_dataframe(df: pd.DataFrame, name: str = "Sheet1") -> Sheet:
    """
    Convert a pandas frame into the ingestion contract.
    NaN/NaT cells become None; Timestamps are kept as cell values.
    """
    headers = [display_label(c) if not isinstance(c, str) else c for c in df.columns]
    rows: list[list[Any]] = []
    for rec in df.itertuples(index=False, name=None):
        rows.append([None if is_empty(v) else _to_python(v) for v in rec])
    return Sheet(name=name, headers=headers, rows=rows)


def _to_python(value: Any) -> Any:
    # numpy scalars -> builtins so the sheet round-trips through JSON
    if hasattr(value, "item") and not isinstance(value, pd.Timestamp):
        try:
            return value.item()
        except (ValueError, AttributeError):
            return value
    return value


def load_workbook(path: str | Path) -> list[Sheet]:
    """
    Read every tab of a workbook (one Sheet for a CSV file).
    Cells are read as raw values; no column typing happens here.
    """
    p = Path(path)
    ext = p.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UpstreamFetchError(
            f"Unsupported file type '{ext}'. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if not p.exists():
        raise UpstreamFetchError(f"Workbook not found: {path}")

    try:
        if ext == ".csv":
            frames = {p.stem: pd.read_csv(p, dtype=object, keep_default_na=True)}
        else:
            frames = pd.read_excel(p, sheet_name=None)
    except Exception as e:
        raise UpstreamFetchError(f"Failed to read workbook: {path}") from e

    sheets = [sheet_from_dataframe(df, name=str(name)) for name, df in frames.items()]
    if not sheets:
        raise UpstreamFetchError(f"Workbook has no sheets: {path}")
    return sheets

"""Sheet retrieval and the column-profile cache."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from sheet_chart.core.errors import UpstreamFetchError
from sheet_chart.core.utils_hash import sha256_file
from sheet_chart.data.sheet import SUPPORTED_EXTENSIONS, Sheet, load_workbook, sheet_fingerprint

if TYPE_CHECKING:
    from sheet_chart.analytics.profiler import ColumnProfile

TAB_SEPARATOR = "#"


class SheetSource(Protocol):
    """Anything that can hand the pipeline a sheet by id."""

    def fetch(self, sheet_id: str) -> Sheet: ...


def split_sheet_id(sheet_id: str) -> tuple[str, str | None]:
    """'sales.xlsx#Q1' -> ('sales.xlsx', 'Q1'); 'sales.csv' -> ('sales.csv', None)."""
    if TAB_SEPARATOR in sheet_id:
        file_part, tab = sheet_id.split(TAB_SEPARATOR, 1)
        return file_part, tab or None
    return sheet_id, None


class WorkbookStore:
    """
    Directory-backed sheet source.

    Sheet ids are "<file>" (first tab) or "<file>#<tab>". Workbooks are parsed
    once per file version (SHA-256) and cached.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._cache: dict[tuple[str, str], list[Sheet]] = {}
        self._lock = threading.Lock()

    def list_files(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.suffix.lower() in SUPPORTED_EXTENSIONS)

    def _resolve(self, file_name: str) -> Path:
        p = (self.root / file_name).resolve()
        if self.root.resolve() not in p.parents:
            raise UpstreamFetchError(f"Invalid sheet path: {file_name}")
        if not p.is_file():
            raise UpstreamFetchError(f"Workbook not found: {file_name}")
        return p

    def load(self, file_name: str) -> list[Sheet]:
        path = self._resolve(file_name)
        try:
            version = sha256_file(path)
        except OSError as e:
            raise UpstreamFetchError(f"Workbook could not be read: {file_name}", retryable=True) from e

        key = (str(path), version)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        sheets = load_workbook(path)
        with self._lock:
            self._cache[key] = sheets
        return sheets

    def fetch(self, sheet_id: str) -> Sheet:
        file_name, tab = split_sheet_id(sheet_id)
        sheets = self.load(file_name)
        if tab is None:
            return sheets[0]
        for s in sheets:
            if s.name == tab:
                return s
        raise UpstreamFetchError(f"Sheet '{tab}' not found in {file_name}. Available: {[s.name for s in sheets]}")


class ColumnProfileCache:
    """Column profiles keyed by sheet fingerprint, reused across many chart specs."""

    def __init__(self) -> None:
        self._profiles: dict[str, list[ColumnProfile]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, sheet: Sheet) -> list[ColumnProfile] | None:
        key = sheet_fingerprint(sheet)
        with self._lock:
            found = self._profiles.get(key)
            if found is None:
                self.misses += 1
            else:
                self.hits += 1
            return found

    def put(self, sheet: Sheet, profiles: list[ColumnProfile]) -> None:
        key = sheet_fingerprint(sheet)
        with self._lock:
            self._profiles[key] = profiles

    def clear(self) -> None:
        with self._lock:
            self._profiles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

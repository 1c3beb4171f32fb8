from __future__ import annotations

import os
import sys
from pathlib import Path

from sheet_chart.core.run_record import (
    RunRecord,
    ensure_run_dir,
    generate_run_id,
    settings_hash,
    write_run_record,
)
from sheet_chart.core.settings import CONFIG_ENV_VAR, load_settings


def _package_version(dist: str) -> str:
    # Prefer importlib.metadata so it works when installed
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version(dist)
    except PackageNotFoundError:
        return "unknown"


def main(argv: list[str] | None = None) -> int:
    # Output directory override for tests/CI
    outputs_base = Path(os.environ.get("SHEET_CHART_OUTPUTS_DIR", "outputs")).resolve()

    run_id = generate_run_id(prefix="doctor")
    run_dir = ensure_run_dir(outputs_base, run_id)

    settings = load_settings()

    print("sheet_chart doctor")
    print(f"python: {sys.version.split()[0]}")
    print(f"package_version: {_package_version('sheet-chart-pipeline')}")
    for dist in ("pandas", "numpy", "pydantic", "openpyxl", "PyYAML"):
        print(f"{dist}: {_package_version(dist)}")
    print(f"env:{CONFIG_ENV_VAR}: {bool(os.environ.get(CONFIG_ENV_VAR))}")
    print(f"palette_size: {len(settings.palette)}")

    record = RunRecord(run_id=run_id, mode="doctor", settings_hash=settings_hash(settings))
    record.add_artifact("run_record", run_dir / "run_record.json")

    path = write_run_record(run_dir, record)
    print(f"run_record: {path}")

    return 0

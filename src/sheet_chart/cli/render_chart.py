"""CLI entrypoint: render one chart spec against one workbook tab into outputs/runs/."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from sheet_chart.analytics.pipeline import build_chart
from sheet_chart.core.errors import SheetChartError
from sheet_chart.core.run_record import (
    RunRecord,
    ensure_run_dir,
    generate_run_id,
    settings_hash,
    write_run_record,
)
from sheet_chart.core.settings import load_settings
from sheet_chart.core.utils_hash import sha256_json
from sheet_chart.data.sheet import Sheet, sheet_fingerprint
from sheet_chart.data.store import TAB_SEPARATOR, WorkbookStore
from sheet_chart.transport.retry import RetryingClient


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sheet_chart render",
        description="Build the chart data contract for a spreadsheet and a chart spec.",
    )
    p.add_argument("--sheet", required=True, help="Path to a .csv, .xlsx or .xls workbook.")
    p.add_argument("--tab", default=None, help="Workbook tab name. Default: first tab.")
    p.add_argument("--spec", required=True, help="Path to the chart spec JSON file.")
    p.add_argument(
        "--out",
        default="outputs",
        help="Output root directory; artifacts go to <out>/runs/<run_id>/. Default: outputs",
    )
    p.add_argument("--config", default=None, help="Path to a pipeline.yaml settings file.")
    return p


def _pick_sheet(path: str, tab: str | None) -> Sheet:
    p = Path(path)
    sheet_id = p.name if tab is None else f"{p.name}{TAB_SEPARATOR}{tab}"
    return RetryingClient(WorkbookStore(p.parent).fetch).call(sheet_id)


def _write_json(path: Path, obj: object) -> None:
    path.write_text(json.dumps(obj, indent=2, default=str), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        spec_payload = json.loads(Path(args.spec).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read chart spec {args.spec}: {e}", file=sys.stderr)
        return 2

    try:
        settings = load_settings(args.config)
        sheet = _pick_sheet(args.sheet, args.tab)
        result = build_chart(sheet, spec_payload, settings=settings)
    except SheetChartError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    run_id = generate_run_id(prefix="render")
    run_dir = ensure_run_dir(Path(args.out).resolve(), run_id)

    columns_path = run_dir / "columns.json"
    chart_path = run_dir / "chart_data.json"
    _write_json(columns_path, [c.to_payload() for c in result.columns])
    _write_json(chart_path, result.chart_data.to_dict())

    record = RunRecord(
        run_id=run_id,
        mode="render",
        sheet_path=str(Path(args.sheet).resolve()),
        sheet_name=sheet.name,
        sheet_fingerprint=sheet_fingerprint(sheet),
        spec_hash=sha256_json(result.spec.to_payload()),
        settings_hash=settings_hash(settings),
        chart_type=result.spec.type,
        skipped=result.series.skipped,
    )
    record.add_artifact("columns", columns_path)
    record.add_artifact("chart_data", chart_path)
    record_path = write_run_record(run_dir, record)

    print("Chart data generated successfully.")
    print(f"Run ID: {run_id}")
    print(f"Chart data: {chart_path}")
    print(f"Columns: {columns_path}")
    print(f"Run record: {record_path}")
    if result.series.skipped:
        print(f"Skipped non-numeric cells/rows: {result.series.skipped}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

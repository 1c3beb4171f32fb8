from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def test_cli_doctor_writes_run_record(tmp_path: Path) -> None:
    env = os.environ.copy()
    env["SHEET_CHART_OUTPUTS_DIR"] = str(tmp_path / "outputs")
    env.pop("SHEET_CHART_CONFIG", None)

    # Run: python -m sheet_chart.cli doctor
    result = subprocess.run(
        [sys.executable, "-m", "sheet_chart.cli", "doctor"],
        capture_output=True,
        text=True,
        env=env,
    )

    assert result.returncode == 0, result.stderr
    assert "palette_size: 8" in result.stdout

    runs_dir = Path(env["SHEET_CHART_OUTPUTS_DIR"]) / "runs"
    assert runs_dir.exists()

    run_records = list(runs_dir.glob("*/run_record.json"))
    assert len(run_records) >= 1, f"No run_record.json found. stdout:\n{result.stdout}"

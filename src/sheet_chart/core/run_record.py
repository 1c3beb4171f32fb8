"""Per-run provenance written next to the artifacts of every CLI run."""

from __future__ import annotations

import json
import platform
import subprocess
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from sheet_chart.core.settings import PipelineSettings
from sheet_chart.core.utils_hash import sha256_json

RunMode = Literal["render", "doctor"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_run_id(prefix: str = "run") -> str:
    # render_20260130T120501123456Z; microseconds keep back-to-back runs apart
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"{prefix}_{ts}"


def get_git_commit_hash() -> str | None:
    """Best-effort git commit hash. Returns None if not available."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def settings_hash(settings: PipelineSettings) -> str:
    return sha256_json(asdict(settings))


class RunRecord(BaseModel):
    run_id: str
    timestamp: str = Field(default_factory=utc_now_iso)
    mode: RunMode

    # render inputs
    sheet_path: str | None = None
    sheet_name: str | None = None
    sheet_fingerprint: str | None = None
    spec_hash: str | None = None
    settings_hash: str | None = None

    # render outcome
    chart_type: str | None = None
    skipped: int = 0

    git_commit: str | None = Field(default_factory=get_git_commit_hash)
    python_version: str = Field(default_factory=platform.python_version)

    artifacts: dict[str, str] = Field(default_factory=dict)

    def add_artifact(self, name: str, path: Path) -> None:
        self.artifacts[name] = str(path.resolve())


def ensure_run_dir(base_outputs_dir: Path, run_id: str) -> Path:
    run_dir = base_outputs_dir / "runs" / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def write_run_record(run_dir: Path, record: RunRecord) -> Path:
    path = run_dir / "run_record.json"
    path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
    return path


def read_run_record(path: Path) -> RunRecord:
    return RunRecord.model_validate(json.loads(path.read_text(encoding="utf-8")))

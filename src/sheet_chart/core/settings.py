"""Pipeline settings loaded from YAML (optional)."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    DEFAULT_AGGREGATION,
    DEFAULT_AXIS_TITLE_SEPARATOR,
    DEFAULT_BLANK_LABEL,
    DEFAULT_LABEL_SEPARATOR,
    DEFAULT_MIN_BUBBLE_RADIUS,
    DEFAULT_PALETTE,
    DEFAULT_UNIQUE_VALUES_CAP,
    AggregationMethod,
)
from .errors import ConfigError

CONFIG_ENV_VAR = "SHEET_CHART_CONFIG"


@dataclass(frozen=True)
class PipelineSettings:
    """Runtime knobs. Typically loaded/overridden from configs/pipeline.yaml."""

    palette: tuple[str, ...] = DEFAULT_PALETTE
    unique_values_cap: int = DEFAULT_UNIQUE_VALUES_CAP
    label_separator: str = DEFAULT_LABEL_SEPARATOR
    axis_title_separator: str = DEFAULT_AXIS_TITLE_SEPARATOR
    blank_label: str = DEFAULT_BLANK_LABEL
    min_bubble_radius: float = DEFAULT_MIN_BUBBLE_RADIUS
    default_aggregation: AggregationMethod = DEFAULT_AGGREGATION


def _load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {p} must be a YAML mapping.")
    return data


def _coerce(name: str, value: Any) -> Any:
    if name == "palette":
        if not isinstance(value, list) or not value or not all(isinstance(c, str) for c in value):
            raise ConfigError("palette must be a non-empty list of color strings.")
        return tuple(value)
    if name == "unique_values_cap":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError("unique_values_cap must be a positive integer.")
        return value
    if name == "min_bubble_radius":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigError("min_bubble_radius must be a non-negative number.")
        return float(value)
    if name == "default_aggregation":
        try:
            return AggregationMethod(value)
        except ValueError as e:
            raise ConfigError(f"Unsupported default_aggregation: {value!r}") from e
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string.")
    return value


def settings_from_mapping(data: dict[str, Any]) -> PipelineSettings:
    if not isinstance(data, dict):
        raise ConfigError("'pipeline' section must be a YAML mapping.")
    known = {f.name for f in fields(PipelineSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown pipeline settings: {unknown}")
    overrides = {k: _coerce(k, v) for k, v in data.items()}
    return replace(PipelineSettings(), **overrides)


def load_settings(path: str | Path | None = None) -> PipelineSettings:
    """
    Load settings from `path`, else from $SHEET_CHART_CONFIG (a .env file is honoured),
    else return the built-in defaults.
    """
    if path is None:
        load_dotenv()
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return PipelineSettings()

    cfg = _load_yaml(path)
    section = cfg.get("pipeline", cfg)
    if not isinstance(section, dict):
        raise ConfigError("'pipeline' section must be a YAML mapping.")
    return settings_from_mapping(section)

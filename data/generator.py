from __future__ import annotations

import datetime as dt
import hashlib
import json
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import yaml

from sheet_chart.core.errors import ConfigError

SALES_COLUMNS: tuple[str, ...] = ("Region", "Product", "Date", "Sales", "Profit", "Units")
DATASET_VERSION = "0.1.0"  # bump when columns/scenarios change

# ----------------------------
# Config loading
# ----------------------------


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {p} must be a YAML mapping.")
    return data


# ----------------------------
# Helpers
# ----------------------------


def date_range_days(start: str, end: str) -> list[dt.date]:
    start_d = dt.date.fromisoformat(start)
    end_d = dt.date.fromisoformat(end)
    if end_d < start_d:
        raise ConfigError("end_date must be >= start_date.")
    days = (end_d - start_d).days + 1
    return [start_d + dt.timedelta(days=i) for i in range(days)]


def make_rng(seed: int) -> np.random.Generator:
    return np.random.default_rng(seed)


def lognormal_from_median(
    rng: np.random.Generator, median: float, sigma: float, size: int
) -> np.ndarray:
    if median <= 0:
        raise ConfigError("Median must be > 0 for lognormal.")
    mu = float(np.log(median))
    return rng.lognormal(mean=mu, sigma=float(sigma), size=size)


def _format_money(value: float) -> str:
    return f"${value:,.2f}"


# ----------------------------
# Generation steps
# ----------------------------


def generate_sales_rows(cfg: dict[str, Any]) -> pd.DataFrame:
    """Clean rows: one per (day, order) with region/product drawn from the config weights."""
    rng = make_rng(int(cfg["dataset"]["seed"]))
    days = date_range_days(cfg["dataset"]["start_date"], cfg["dataset"]["end_date"])

    regions: list[str] = list(cfg["regions"]["names"])
    region_w = np.asarray(cfg["regions"]["weights"], dtype=float)
    products: list[str] = list(cfg["products"]["names"])
    unit_price = {p: float(v) for p, v in cfg["products"]["unit_price"].items()}
    margin_mean = float(cfg["sales"]["margin_mean"])
    margin_sd = float(cfg["sales"]["margin_sd"])
    orders_per_day = int(cfg["sales"]["orders_per_day"])

    if len(region_w) != len(regions):
        raise ConfigError("regions.weights must have one weight per region.")
    region_w = region_w / region_w.sum()

    n = len(days) * orders_per_day
    region_idx = rng.choice(len(regions), size=n, p=region_w)
    product_idx = rng.integers(0, len(products), size=n)
    units = np.maximum(
        1,
        np.rint(lognormal_from_median(rng, float(cfg["sales"]["units_median"]), 0.5, n)),
    ).astype(int)
    margins = np.clip(rng.normal(margin_mean, margin_sd, size=n), -0.2, 0.6)

    rows: list[dict[str, Any]] = []
    for i in range(n):
        product = products[int(product_idx[i])]
        sales = round(float(units[i]) * unit_price[product], 2)
        rows.append(
            {
                "Region": regions[int(region_idx[i])],
                "Product": product,
                "Date": days[i // orders_per_day].isoformat(),
                "Sales": sales,
                "Profit": round(sales * float(margins[i]), 2),
                "Units": int(units[i]),
            }
        )
    return pd.DataFrame(rows, columns=list(SALES_COLUMNS))


def inject_messy_cells(df: pd.DataFrame, cfg: dict[str, Any]) -> pd.DataFrame:
    """
    Make the sheet look hand-edited: some Sales as currency text, some blanks,
    some placeholder text. Uses its own RNG stream so clean rows stay stable.
    """
    messy = cfg.get("messy", {})
    if not messy.get("enabled", False):
        return df

    rng = make_rng(int(cfg["dataset"]["seed"]) + 1)
    out = df.astype(object).copy()
    n = len(out)

    n_currency = min(n, int(messy.get("currency_text_rows", 0)))
    for i in rng.choice(n, size=n_currency, replace=False):
        out.at[int(i), "Sales"] = _format_money(float(df.at[int(i), "Sales"]))

    n_blank = min(n, int(messy.get("blank_profit_rows", 0)))
    for i in rng.choice(n, size=n_blank, replace=False):
        out.at[int(i), "Profit"] = ""

    placeholder = str(messy.get("placeholder", "TBD"))
    n_text = min(n, int(messy.get("placeholder_units_rows", 0)))
    for i in rng.choice(n, size=n_text, replace=False):
        out.at[int(i), "Units"] = placeholder

    return out


def generate_sales_dataset(cfg: dict[str, Any]) -> pd.DataFrame:
    df = generate_sales_rows(cfg)
    return inject_messy_cells(df, cfg)


def apply_cli_overrides(cfg: dict, args) -> dict:
    cfg = dict(cfg)

    if args.seed is not None:
        cfg["dataset"]["seed"] = int(args.seed)

    if args.days is not None:
        start = dt.date.fromisoformat(cfg["dataset"]["start_date"])
        end = start + dt.timedelta(days=int(args.days) - 1)
        cfg["dataset"]["end_date"] = end.isoformat()

    if args.out is not None:
        cfg.setdefault("output", {})
        cfg["output"]["path"] = str(args.out)

    return cfg


def write_metadata(out_csv: Path, cfg_path: Path, cfg: dict[str, Any]) -> Path:
    meta_path = out_csv.with_suffix(".meta.json")
    meta: dict[str, Any] = {
        "dataset_version": DATASET_VERSION,
        "created_at_utc": datetime.now(timezone.utc).isoformat(),
        "python_version": platform.python_version(),
        "config_path": str(cfg_path),
        "config_sha256": hashlib.sha256(cfg_path.read_bytes()).hexdigest(),
        "output_csv_sha256": hashlib.sha256(out_csv.read_bytes()).hexdigest(),
        "seeds": {"dataset_seed": int(cfg["dataset"]["seed"])},
    }
    meta_path.write_text(json.dumps(meta, indent=2, ensure_ascii=False), encoding="utf-8")
    return meta_path


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Generate a synthetic sales sheet for chart demos.")
    parser.add_argument("--config", type=str, default="data/samples/sample_config.yaml")
    parser.add_argument("--seed", type=int, default=None, help="Override dataset.seed")
    parser.add_argument(
        "--days", type=int, default=None, help="Override horizon length in days (from start_date)"
    )
    parser.add_argument("--out", type=Path, default=None, help="Override output.path")

    args = parser.parse_args()

    cfg = load_yaml(args.config)
    cfg = apply_cli_overrides(cfg, args)
    out_path = Path(cfg["output"]["path"])
    out_path.parent.mkdir(parents=True, exist_ok=True)

    df = generate_sales_dataset(cfg)
    df.to_csv(out_path, index=False)
    meta_path = write_metadata(out_path, Path(args.config), cfg)
    print(f"Wrote: {out_path} | rows={len(df):,} | cols={len(df.columns)} | meta={meta_path}")


if __name__ == "__main__":
    main()

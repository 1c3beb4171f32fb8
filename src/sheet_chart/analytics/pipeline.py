"""Orchestrates chart generation: profile -> validate -> aggregate -> assemble."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sheet_chart.analytics.aggregator import SeriesSet, aggregate_series
from sheet_chart.analytics.profiler import ColumnProfile, profile_sheet
from sheet_chart.analytics.validator import validate_chart_spec
from sheet_chart.core.settings import PipelineSettings
from sheet_chart.data.sheet import Sheet
from sheet_chart.data.store import ColumnProfileCache, SheetSource
from sheet_chart.transport.retry import CancellationToken, RetryingClient, RetryPolicy
from sheet_chart.viz.chart_data import ChartData, RadiusMapping, assemble_chart_data
from sheet_chart.viz.chart_specs import ChartSpec, parse_chart_spec


@dataclass(frozen=True)
class ChartResult:
    spec: ChartSpec  # normalized
    columns: list[ColumnProfile]
    series: SeriesSet
    chart_data: ChartData


def build_chart(
    sheet: Sheet,
    spec: ChartSpec | Mapping[str, Any],
    columns: list[ColumnProfile] | None = None,
    settings: PipelineSettings | None = None,
    radius: RadiusMapping | None = None,
) -> ChartResult:
    """
    Run the whole pipeline for one sheet and one spec.

    Validation errors are raised before any aggregation work starts; data
    errors abort with a single EmptyResultError. Pure apart from logging.
    """
    settings = settings or PipelineSettings()
    parsed = parse_chart_spec(spec)
    if parsed.aggregation_method is None:
        parsed = parsed.model_copy(update={"aggregation_method": settings.default_aggregation.value})

    if columns is None:
        columns = profile_sheet(sheet, unique_cap=settings.unique_values_cap)

    normalized = validate_chart_spec(parsed, columns)
    series = aggregate_series(
        sheet,
        normalized,
        separator=settings.label_separator,
        blank_label=settings.blank_label,
    )
    chart_data = assemble_chart_data(series, normalized, settings=settings, radius=radius)
    return ChartResult(spec=normalized, columns=columns, series=series, chart_data=chart_data)


class ChartPipeline:
    """
    Pipeline bound to a sheet source and a shared column-profile cache.
    Each call re-runs validation/aggregation in full; only profiles are reused.
    Sheets are fetched through a RetryingClient, so retryable storage errors
    are retried with backoff before the pipeline itself runs.
    """

    def __init__(
        self,
        source: SheetSource,
        cache: ColumnProfileCache | None = None,
        settings: PipelineSettings | None = None,
        radius: RadiusMapping | None = None,
        retry_policy: RetryPolicy | None = None,
        retrying: RetryingClient[Sheet] | None = None,
    ) -> None:
        self.source = source
        self.cache = cache if cache is not None else ColumnProfileCache()
        self.settings = settings or PipelineSettings()
        self.radius = radius
        self.fetcher = retrying or RetryingClient(source.fetch, policy=retry_policy)

    def fetch(self, sheet_id: str, cancel_token: CancellationToken | None = None) -> Sheet:
        return self.fetcher.call(sheet_id, cancel_token=cancel_token)

    def columns_for(self, sheet: Sheet) -> list[ColumnProfile]:
        cached = self.cache.get(sheet)
        if cached is not None:
            return cached
        profiles = profile_sheet(sheet, unique_cap=self.settings.unique_values_cap)
        self.cache.put(sheet, profiles)
        return profiles

    def columns(self, sheet_id: str, cancel_token: CancellationToken | None = None) -> list[ColumnProfile]:
        return self.columns_for(self.fetch(sheet_id, cancel_token))

    def generate(
        self,
        sheet_id: str,
        spec: ChartSpec | Mapping[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> ChartResult:
        sheet = self.fetch(sheet_id, cancel_token)
        return build_chart(
            sheet,
            spec,
            columns=self.columns_for(sheet),
            settings=self.settings,
            radius=self.radius,
        )

"""
Batch pipeline: snapshot -> normalized -> aggregated -> rankings / trends.

Each stage takes the previous stage's table as an explicit argument and
returns a new one; nothing is cached at module level and no stage mutates
its input. The first failing stage aborts the run: the error is logged with
the stage name and re-raised, and nothing is written.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from hood_crime.aggregate import aggregate_categories
from hood_crime.categories import NAME_COLUMN, total_column
from hood_crime.config import PipelineSettings
from hood_crime.errors import CrimeSummaryError
from hood_crime.io_utils import read_df
from hood_crime.normalize import normalize_missing_counts, summarize_missing_cells
from hood_crime.ranking import rank_top_n
from hood_crime.schemas import (
    canonicalize_columns,
    ensure_hood_id_dtype,
    normalized_schema,
    snapshot_schema,
    validate_schema,
)
from hood_crime.timeseries import TimeSeriesPoint, extract_time_series


@dataclass(frozen=True)
class PipelineResult:
    """Every table the renderer consumes, plus the untouched input."""
    raw: pd.DataFrame
    normalized: pd.DataFrame
    aggregated: pd.DataFrame
    rankings: Dict[str, pd.DataFrame] = field(default_factory=dict)
    trends: Dict[str, List[TimeSeriesPoint]] = field(default_factory=dict)
    missing_cells: Dict[str, int] = field(default_factory=dict)
    settings: PipelineSettings = field(default_factory=PipelineSettings)


@contextmanager
def pipeline_stage(name: str, logger=None):
    """Log a stage boundary; on failure log the stage name and re-raise."""
    if logger:
        logger.info(f"Stage '{name}' started")
    try:
        yield
    except CrimeSummaryError as e:
        if e.stage is None:
            e.stage = name
        if logger:
            logger.error(
                f"Stage '{name}' failed: {e}",
                extra={"stage": name, "error_type": type(e).__name__},
            )
        raise
    if logger:
        logger.info(f"Stage '{name}' finished")


def load_snapshot(path: Union[str, Path], logger=None) -> pd.DataFrame:
    """Read the snapshot file (CSV or Parquet) with canonical column names."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")

    df = read_df(path)
    df = canonicalize_columns(df)
    if logger:
        logger.info(f"Loaded {len(df):,} neighbourhoods from {path}")
    return df


def prepare_snapshot(df: pd.DataFrame, settings: PipelineSettings) -> pd.DataFrame:
    """
    Canonicalize names, cast hood_id and validate the raw snapshot.

    Raises:
        SchemaError: On missing columns, bad keys or invalid counts
    """
    prepared = ensure_hood_id_dtype(canonicalize_columns(df))
    validate_schema(
        prepared,
        snapshot_schema(settings.categories, settings.years),
        context="snapshot",
    )
    return prepared


def trend_key(hood_id: int, category: str) -> str:
    return f"{hood_id}_{category}"


def run_pipeline(
    raw: pd.DataFrame,
    settings: Optional[PipelineSettings] = None,
    logger=None,
) -> PipelineResult:
    """
    Run every stage on an in-memory snapshot.

    Args:
        raw: Snapshot table as loaded (left unmodified)
        settings: Run parameters; defaults to the built-in window/categories
        logger: Optional JSONLLogger

    Returns:
        PipelineResult with normalized and aggregated tables, top-N rankings
        per ranking category and trend series for the configured neighbourhood

    Raises:
        SchemaError, UnknownCategoryError, InvalidArgumentError, NotFoundError
    """
    settings = settings or PipelineSettings()

    with pipeline_stage("validate", logger):
        snapshot = prepare_snapshot(raw, settings)

    with pipeline_stage("normalize", logger):
        missing_cells = summarize_missing_cells(snapshot, settings.categories, settings.years)
        normalized = normalize_missing_counts(snapshot, settings.categories, settings.years)
        validate_schema(
            normalized,
            normalized_schema(settings.categories, settings.years),
            context="normalized",
        )
        if logger:
            logger.log_metrics({
                "row_count": len(normalized),
                "zero_filled_cells": missing_cells,
                "zero_filled_total": sum(missing_cells.values()),
            })

    with pipeline_stage("aggregate", logger):
        aggregated = aggregate_categories(normalized, settings.categories, settings.years)

    rankings = {}
    with pipeline_stage("rank", logger):
        for category in settings.ranking_categories:
            rankings[category] = rank_top_n(aggregated, total_column(category), settings.top_n)
            if logger and len(rankings[category]):
                leader = rankings[category].iloc[0]
                logger.info(
                    f"Top {category}: {leader[NAME_COLUMN]} ({leader['metric_value']})"
                )

    trends = {}
    if settings.trend_hood_id is not None:
        with pipeline_stage("trend", logger):
            for category in settings.trend_categories:
                trends[trend_key(settings.trend_hood_id, category)] = extract_time_series(
                    normalized, settings.trend_hood_id, category, settings.years
                )

    return PipelineResult(
        raw=raw,
        normalized=normalized,
        aggregated=aggregated,
        rankings=rankings,
        trends=trends,
        missing_cells=missing_cells,
        settings=settings,
    )


def processed_snapshot(result: PipelineResult) -> pd.DataFrame:
    """The on-disk processed table: input row shape plus Total_<CATEGORY> columns."""
    return result.aggregated.reset_index(drop=True)

"""
Report outputs: processed snapshot, ranking/trend tables and charts.

Presentation only. Every number drawn here comes from a PipelineResult;
nothing is recomputed. All files go through atomic writes, and rendering
starts only after the whole pipeline has succeeded.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from hood_crime.categories import ID_COLUMN, NAME_COLUMN, category_label  # noqa: E402
from hood_crime.io_utils import atomic_write, atomic_write_df  # noqa: E402
from hood_crime.paths import FIGURES_DIR, REPORTS_DIR, TABLES_DIR  # noqa: E402
from hood_crime.pipeline import PipelineResult, processed_snapshot, trend_key  # noqa: E402
from hood_crime.timeseries import TimeSeriesPoint, time_series_frame  # noqa: E402

PROCESSED_FILENAME = "neighbourhood_totals.csv"

BAR_COLOR = "#c0392b"
LINE_COLOR = "#2c3e50"


def _save_figure(fig, output_path: Path) -> None:
    try:
        with atomic_write(output_path, mode="wb", suffix=".png") as f:
            fig.savefig(f, format="png", dpi=150, bbox_inches="tight", facecolor="white")
    finally:
        plt.close(fig)


def plot_ranking(
    ranked: pd.DataFrame,
    category: str,
    output_path: Union[str, Path],
) -> Path:
    """Horizontal bar chart of a ranking, rank 1 at the top."""
    output_path = Path(output_path)
    label = category_label(category)

    fig, ax = plt.subplots(figsize=(10, max(3, 0.45 * len(ranked) + 1)))
    ax.barh(ranked[NAME_COLUMN].astype(str), ranked["metric_value"], color=BAR_COLOR)
    ax.invert_yaxis()
    ax.set_xlabel(f"{label} incidents (decade total)")
    ax.set_title(f"Top {len(ranked)} neighbourhoods by {label}", fontweight="bold")
    for i, value in enumerate(ranked["metric_value"]):
        ax.text(value, i, f" {value:,}", va="center", fontsize=9)

    _save_figure(fig, output_path)
    return output_path


def plot_time_series(
    points: List[TimeSeriesPoint],
    title: str,
    output_path: Union[str, Path],
) -> Path:
    """Line chart of one neighbourhood's yearly counts."""
    output_path = Path(output_path)
    frame = time_series_frame(points)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(frame["year"], frame["count"], marker="o", color=LINE_COLOR)
    ax.set_xticks(frame["year"])
    ax.set_xlabel("Year")
    ax.set_ylabel("Incidents")
    ax.set_ylim(bottom=0)
    ax.set_title(title, fontweight="bold")
    ax.grid(alpha=0.3)

    _save_figure(fig, output_path)
    return output_path


def report_dirs(output_dir: Optional[Union[str, Path]] = None) -> Tuple[Path, Path]:
    """Tables and figures directories under output_dir (default: reports/)."""
    if output_dir is None:
        return TABLES_DIR, FIGURES_DIR
    output_dir = Path(output_dir)
    return output_dir / TABLES_DIR.name, output_dir / FIGURES_DIR.name


def render_report(
    result: PipelineResult,
    output_dir: Optional[Union[str, Path]] = None,
    logger=None,
) -> Dict[str, Path]:
    """
    Write every table and chart for a finished pipeline run.

    Outputs (under output_dir, default reports/):
        tables/neighbourhood_totals.csv
        tables/top_<n>_<category>.csv, figures/top_<n>_<category>.png
        tables/trend_<hood_id>_<category>.csv, figures/trend_<hood_id>_<category>.png

    Returns:
        Mapping of output name to written path
    """
    output_dir = Path(output_dir) if output_dir is not None else REPORTS_DIR
    tables_dir, figures_dir = report_dirs(output_dir)
    outputs: Dict[str, Path] = {}

    processed_path = tables_dir / PROCESSED_FILENAME
    atomic_write_df(processed_snapshot(result), processed_path, index=False)
    outputs["processed_snapshot"] = processed_path

    top_n = result.settings.top_n
    for category, ranked in result.rankings.items():
        stem = f"top_{top_n}_{category.lower()}"
        table_path = tables_dir / f"{stem}.csv"
        atomic_write_df(ranked, table_path, index=False)
        outputs[f"{stem}_table"] = table_path
        outputs[f"{stem}_chart"] = plot_ranking(ranked, category, figures_dir / f"{stem}.png")

    hood_id = result.settings.trend_hood_id
    area_name = _area_name(result.normalized, hood_id)
    for category in result.settings.trend_categories:
        key = trend_key(hood_id, category)
        if key not in result.trends:
            continue
        points = result.trends[key]
        stem = f"trend_{hood_id}_{category.lower()}"
        table_path = tables_dir / f"{stem}.csv"
        atomic_write_df(time_series_frame(points), table_path, index=False)
        outputs[f"{stem}_table"] = table_path
        title = f"{category_label(category)} in {area_name}, {points[0].year}-{points[-1].year}"
        outputs[f"{stem}_chart"] = plot_time_series(points, title, figures_dir / f"{stem}.png")

    if logger:
        logger.log_outputs({name: str(path) for name, path in outputs.items()})
        logger.info(f"Wrote {len(outputs)} report files to {output_dir}")

    return outputs


def _area_name(df: pd.DataFrame, hood_id: Optional[int]) -> str:
    if hood_id is None:
        return ""
    matches = df.loc[df[ID_COLUMN] == hood_id, NAME_COLUMN]
    return str(matches.iloc[0]) if len(matches) else str(hood_id)

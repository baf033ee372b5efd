"""
Deterministic neighbourhood rankings by an aggregate metric.

Order is descending by metric value; equal values keep the order in which
the neighbourhoods appear in the source table. The sort is a stable
mergesort on (metric desc, original position asc), so repeated runs on the
same input give identical output.
"""

from dataclasses import dataclass
from typing import List, Union

import numpy as np
import pandas as pd

from hood_crime.categories import ID_COLUMN, NAME_COLUMN, total_column
from hood_crime.errors import InvalidArgumentError, SchemaError, UnknownCategoryError

RANKING_COLUMNS = [ID_COLUMN, NAME_COLUMN, "metric_value", "rank"]


@dataclass(frozen=True)
class RankedEntry:
    """One row of a ranking exhibit."""
    hood_id: int
    area_name: str
    metric_value: Union[int, float]
    rank: int


def resolve_metric_column(df: pd.DataFrame, metric: str) -> str:
    """
    Resolve a metric to a column of df.

    Accepts a column name directly (Total_HOMICIDE) or a category name
    (HOMICIDE, "auto theft") that maps to its Total_ column.

    Raises:
        UnknownCategoryError: If neither form names a column
    """
    if metric in df.columns:
        return metric
    candidate = total_column(metric)
    if candidate in df.columns:
        return candidate
    raise UnknownCategoryError(
        f"Unknown metric '{metric}': no column '{metric}' or '{candidate}'. "
        "Aggregate the category first."
    )


def _validate_n(n) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise InvalidArgumentError(f"N must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidArgumentError(f"N must be >= 1, got {n}")
    return int(n)


def rank_all(df: pd.DataFrame, metric: str) -> pd.DataFrame:
    """
    Rank every neighbourhood by metric.

    Returns:
        DataFrame with hood_id, area_name, metric_value, rank (1-based,
        one distinct rank per row)

    Raises:
        UnknownCategoryError: If the metric cannot be resolved
        SchemaError: If the metric column is non-numeric or has missing values
    """
    column = resolve_metric_column(df, metric)
    values = df[column]

    if not pd.api.types.is_numeric_dtype(values):
        raise SchemaError(f"Metric column {column} is not numeric ({values.dtype})")
    if values.isna().any():
        raise SchemaError(f"Metric column {column} has {int(values.isna().sum())} missing values")

    ranked = pd.DataFrame({
        ID_COLUMN: df[ID_COLUMN].array,
        NAME_COLUMN: df[NAME_COLUMN].array,
        "metric_value": values.to_numpy(),
        "_position": np.arange(len(df)),
    })
    ranked = ranked.sort_values(
        ["metric_value", "_position"],
        ascending=[False, True],
        kind="mergesort",
    )
    ranked["rank"] = np.arange(1, len(ranked) + 1)
    return ranked.drop(columns="_position").reset_index(drop=True)


def rank_top_n(df: pd.DataFrame, metric: str, n: int) -> pd.DataFrame:
    """
    The n neighbourhoods with the largest metric value.

    If n exceeds the number of rows, every row is returned.

    Raises:
        InvalidArgumentError: If n is not an integer >= 1
        UnknownCategoryError: If the metric cannot be resolved
    """
    n = _validate_n(n)
    return rank_all(df, metric).head(n).reset_index(drop=True)


def to_ranked_entries(ranked: pd.DataFrame) -> List[RankedEntry]:
    """Convert a ranking frame to a list of RankedEntry values."""
    entries = []
    for row in ranked.itertuples(index=False):
        value = row.metric_value
        value = int(value) if float(value).is_integer() else float(value)
        entries.append(
            RankedEntry(
                hood_id=int(getattr(row, ID_COLUMN)),
                area_name=str(getattr(row, NAME_COLUMN)),
                metric_value=value,
                rank=int(row.rank),
            )
        )
    return entries

"""
Per-neighbourhood yearly series for trend exhibits.
"""

from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from hood_crime.aggregate import require_category_columns
from hood_crime.categories import (
    DEFAULT_YEARS,
    ID_COLUMN,
    NAME_COLUMN,
    canonical_category,
    yearly_column,
)
from hood_crime.errors import NotFoundError, SchemaError


@dataclass(frozen=True)
class TimeSeriesPoint:
    year: int
    count: int


def _find_row(df: pd.DataFrame, hood_id: int) -> pd.Series:
    mask = (df[ID_COLUMN] == hood_id).fillna(False).astype(bool)
    if not mask.any():
        raise NotFoundError(f"Neighbourhood {ID_COLUMN}={hood_id!r} not found")
    return df.loc[mask].iloc[0]


def lookup_hood_id(df: pd.DataFrame, area_name: str) -> int:
    """
    hood_id for an area name (case-insensitive, surrounding space ignored).

    Raises:
        NotFoundError: If no neighbourhood has that name
    """
    target = area_name.strip().casefold()
    names = df[NAME_COLUMN].astype(str).str.strip().str.casefold()
    matches = df.loc[names == target, ID_COLUMN]
    if matches.empty:
        raise NotFoundError(f"Neighbourhood {NAME_COLUMN}={area_name!r} not found")
    return int(matches.iloc[0])


def extract_time_series(
    df: pd.DataFrame,
    hood_id: int,
    category: str,
    years: Iterable[int] = DEFAULT_YEARS,
) -> List[TimeSeriesPoint]:
    """
    Ordered (year, count) points for one neighbourhood and category.

    Every year of the window appears exactly once, ascending, zeros included.
    The result is a plain list, safe to iterate more than once.

    Args:
        df: Normalized wide table
        hood_id: Neighbourhood identifier
        category: Category token or name
        years: Years of the reporting window

    Raises:
        NotFoundError: If hood_id is not in the table
        UnknownCategoryError: If the category lacks yearly columns
        SchemaError: If a cell is still missing (table not normalized)
    """
    token = canonical_category(category)
    years = sorted(years)
    require_category_columns(df, token, years)
    row = _find_row(df, hood_id)

    points = []
    for year in years:
        column = yearly_column(token, year)
        value = row[column]
        if pd.isna(value):
            raise SchemaError(
                f"{column} is missing for {ID_COLUMN}={hood_id!r}; normalize the table first"
            )
        points.append(TimeSeriesPoint(year=int(year), count=int(value)))
    return points


def time_series_frame(points: List[TimeSeriesPoint]) -> pd.DataFrame:
    """Two-column (year, count) DataFrame for tables and charts."""
    return pd.DataFrame(
        {"year": [p.year for p in points], "count": [p.count for p in points]},
        columns=["year", "count"],
    )

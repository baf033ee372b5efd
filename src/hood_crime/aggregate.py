"""
Decade totals per neighbourhood and category.

Each category is folded independently: its Total_<CATEGORY> column depends
only on that category's own yearly columns, so any subset of categories can
be (re)computed without touching the others.
"""

from typing import Iterable, List

import pandas as pd

from hood_crime.categories import (
    DEFAULT_YEARS,
    KEY_COLUMNS,
    canonical_category,
    total_column,
    yearly_columns,
)
from hood_crime.errors import SchemaError, UnknownCategoryError


def require_category_columns(
    df: pd.DataFrame,
    category: str,
    years: Iterable[int] = DEFAULT_YEARS,
) -> List[str]:
    """
    Return the category's yearly columns, all of which must be present.

    Raises:
        UnknownCategoryError: If any year of the window has no column
    """
    columns = yearly_columns(category, years)
    missing = [c for c in columns if c not in df.columns]
    if len(missing) == len(columns):
        raise UnknownCategoryError(
            f"Unknown category '{category}': no yearly columns found "
            f"(expected e.g. {columns[0]})"
        )
    if missing:
        raise UnknownCategoryError(
            f"Category '{category}' does not cover the full window; missing {missing}"
        )
    return columns


def category_total(
    df: pd.DataFrame,
    category: str,
    years: Iterable[int] = DEFAULT_YEARS,
) -> pd.Series:
    """
    Sum one category's yearly counts per neighbourhood.

    Expects a normalized table. A missing cell or a non-numeric column here
    means normalization was skipped and is reported as a schema error rather
    than silently summed.

    Returns:
        int64 Series named Total_<CATEGORY>, aligned to df's index
    """
    token = canonical_category(category)
    columns = require_category_columns(df, token, years)

    counts = df[columns]
    non_numeric = [
        c for c in columns
        if not pd.api.types.is_numeric_dtype(counts[c]) or pd.api.types.is_bool_dtype(counts[c])
    ]
    if non_numeric:
        raise SchemaError(
            f"Yearly counts must be normalized before totalling; non-numeric {non_numeric}"
        )
    if counts.isna().any().any():
        bad = [c for c in columns if counts[c].isna().any()]
        raise SchemaError(f"Yearly counts must be normalized before totalling; NA in {bad}")

    return counts.sum(axis=1).astype("int64").rename(total_column(token))


def aggregate_categories(
    df: pd.DataFrame,
    categories: Iterable[str],
    years: Iterable[int] = DEFAULT_YEARS,
) -> pd.DataFrame:
    """
    Add a Total_<CATEGORY> column for each requested category.

    Keys, yearly columns and row order are preserved; df is not modified.

    Raises:
        UnknownCategoryError: If a category lacks yearly columns for the window
    """
    years = list(years)
    totals = [category_total(df, category, years) for category in categories]

    aggregated = df.copy()
    for total in totals:
        aggregated[total.name] = total
    return aggregated


def to_long_counts(
    df: pd.DataFrame,
    categories: Iterable[str],
    years: Iterable[int] = DEFAULT_YEARS,
) -> pd.DataFrame:
    """
    Project the wide table to one row per (neighbourhood, category, year).

    Returns:
        DataFrame with hood_id, area_name, category, year, count; ordered by
        original row, then category as given, then ascending year
    """
    years = sorted(years)
    frames = []
    for order, category in enumerate(categories):
        token = canonical_category(category)
        columns = require_category_columns(df, token, years)
        block = df[KEY_COLUMNS + columns].copy()
        block["_row"] = range(len(block))
        long = block.melt(
            id_vars=KEY_COLUMNS + ["_row"],
            value_vars=columns,
            var_name="column",
            value_name="count",
        )
        long["category"] = token
        long["year"] = long["column"].str.rsplit("_", n=1).str[1].astype(int)
        long["_category_order"] = order
        frames.append(long)

    if not frames:
        return pd.DataFrame(columns=KEY_COLUMNS + ["category", "year", "count"])

    combined = pd.concat(frames, ignore_index=True)
    combined = combined.sort_values(
        ["_row", "_category_order", "year"], kind="mergesort"
    )
    return combined[KEY_COLUMNS + ["category", "year", "count"]].reset_index(drop=True)

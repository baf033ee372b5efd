"""
Missing-value normalization for yearly crime counts.

Policy: an absent yearly count is treated as zero. There is no
interpolation and no carry-forward. This understates incidence wherever
a neighbourhood simply went unreported for a year, so the number of
zero-filled cells is reported alongside every run (see
`summarize_missing_cells`).

A whole yearly column being absent is NOT a missing cell; it is a
schema error, as is any present value that is not a nonnegative integer.
Booleans are rejected even though pandas would read them as 0 and 1.
"""

from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

from hood_crime.categories import (
    CATEGORIES,
    DEFAULT_YEARS,
    all_yearly_columns,
    canonical_category,
    yearly_columns,
)
from hood_crime.errors import SchemaError


def _missing_mask(series: pd.Series) -> pd.Series:
    """True where a cell is absent: NA, or a blank string."""
    blank = series.map(lambda v: isinstance(v, str) and not v.strip())
    return series.isna() | blank.astype(bool)


def _boolean_mask(series: pd.Series) -> pd.Series:
    """True where a cell holds a boolean, which is not a count."""
    return series.map(lambda v: isinstance(v, (bool, np.bool_))).astype(bool)


def _coerce_counts(series: pd.Series, errors: List[str]) -> pd.Series:
    """Zero-fill absent cells and cast to int64, collecting value errors."""
    col_name = series.name
    absent = _missing_mask(series)
    numeric = pd.to_numeric(series.where(~absent), errors="coerce")

    non_numeric = (numeric.isna() & ~absent) | _boolean_mask(series)
    if non_numeric.any():
        examples = list(series[non_numeric].unique()[:5])
        errors.append(f"Column {col_name}: non-numeric values {examples}")
        return series

    negative = numeric < 0
    if negative.any():
        examples = list(numeric[negative].unique()[:5])
        errors.append(f"Column {col_name}: negative counts {examples}")

    fractional = numeric.notna() & (numeric % 1 != 0)
    if fractional.any():
        examples = list(numeric[fractional].unique()[:5])
        errors.append(f"Column {col_name}: non-integer counts {examples}")

    return numeric.fillna(0).astype("int64")


def normalize_missing_counts(
    df: pd.DataFrame,
    categories: Iterable[str] = CATEGORIES,
    years: Iterable[int] = DEFAULT_YEARS,
) -> pd.DataFrame:
    """
    Replace absent yearly counts with 0 and cast every count to int64.

    Returns a new DataFrame with the same columns and row order; the input
    is left untouched. Normalizing an already-normalized table returns an
    equal table.

    Args:
        df: Snapshot table with `<CATEGORY>_<YEAR>` columns
        categories: Categories whose yearly columns are normalized
        years: Years of the reporting window

    Returns:
        Normalized copy of df

    Raises:
        SchemaError: If a yearly column is absent, or a present value is
            non-numeric, negative or fractional
    """
    columns = all_yearly_columns([canonical_category(c) for c in categories], years)

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(f"Missing yearly-count columns: {missing}")

    errors: List[str] = []
    normalized = df.copy()
    for col in columns:
        normalized[col] = _coerce_counts(df[col], errors)

    if errors:
        raise SchemaError("Invalid yearly counts:\n" + "\n".join(errors))

    return normalized


def summarize_missing_cells(
    df: pd.DataFrame,
    categories: Iterable[str] = CATEGORIES,
    years: Iterable[int] = DEFAULT_YEARS,
) -> Dict[str, int]:
    """
    Count the cells per category that normalization will zero-fill.

    Columns absent from df are skipped; normalization reports those.
    """
    years = list(years)
    summary = {}
    for category in categories:
        token = canonical_category(category)
        cols = [c for c in yearly_columns(token, years) if c in df.columns]
        summary[token] = int(sum(_missing_mask(df[c]).sum() for c in cols))
    return summary

"""
Shared fixtures: small synthetic neighbourhood snapshots.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import pytest

from hood_crime.categories import DEFAULT_YEARS, yearly_column

TWO_CATEGORIES = ("HOMICIDE", "AUTOTHEFT")


def build_snapshot(
    rows: List[Dict],
    categories: Sequence[str] = TWO_CATEGORIES,
    years: Sequence[int] = DEFAULT_YEARS,
) -> pd.DataFrame:
    """
    Build a wide snapshot.

    Each row is {"hood_id", "area_name", <CATEGORY>: list of yearly values}.
    Categories a row omits are filled with zeros.
    """
    records = []
    for row in rows:
        record = {"hood_id": row["hood_id"], "area_name": row["area_name"]}
        for category in categories:
            values: Optional[Sequence] = row.get(category)
            if values is None:
                values = [0] * len(years)
            assert len(values) == len(years)
            for year, value in zip(years, values):
                record[yearly_column(category, year)] = value
        records.append(record)
    return pd.DataFrame(records)


@pytest.fixture
def scenario_snapshot():
    """Three neighbourhoods with homicide totals 5, 0 and 10."""
    return build_snapshot([
        {"hood_id": 1, "area_name": "Neighbourhood One",
         "HOMICIDE": [5, 0, 0, 0, 0, 0, 0, 0, 0, 0],
         "AUTOTHEFT": [10, 12, 9, 14, 20, 25, 31, 40, 38, 35]},
        {"hood_id": 2, "area_name": "Neighbourhood Two",
         "HOMICIDE": [0] * 10,
         "AUTOTHEFT": [1, 0, 2, 0, 1, 0, 0, 3, 0, 1]},
        {"hood_id": 3, "area_name": "Neighbourhood Three",
         "HOMICIDE": [1] * 10,
         "AUTOTHEFT": [4, 4, 4, 4, 4, 4, 4, 4, 4, 4]},
    ])


@pytest.fixture
def sparse_snapshot():
    """Snapshot with missing cells (NaN and None) scattered through it."""
    return build_snapshot([
        {"hood_id": 10, "area_name": "Sparse North",
         "HOMICIDE": [1, np.nan, 2, 0, 0, np.nan, 0, 0, 1, 0],
         "AUTOTHEFT": [0, 0, np.nan, 0, 0, 0, 0, 0, 0, 0]},
        {"hood_id": 11, "area_name": "Sparse South",
         "HOMICIDE": [None, None, None, None, None, None, None, None, None, None],
         "AUTOTHEFT": [3, 3, 3, np.nan, 3, 3, 3, 3, 3, 3]},
    ])


@pytest.fixture
def tied_snapshot():
    """Homicide totals 7, 9, 7, 9, 3 in that row order."""
    def spread(total):
        values = [0] * 10
        values[0] = total
        return values

    return build_snapshot([
        {"hood_id": 101, "area_name": "A", "HOMICIDE": spread(7)},
        {"hood_id": 102, "area_name": "B", "HOMICIDE": spread(9)},
        {"hood_id": 103, "area_name": "C", "HOMICIDE": spread(7)},
        {"hood_id": 104, "area_name": "D", "HOMICIDE": spread(9)},
        {"hood_id": 105, "area_name": "E", "HOMICIDE": spread(3)},
    ])

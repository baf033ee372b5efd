"""
Tests for per-neighbourhood yearly series.

Validates:
- Exactly one point per year, ascending, zeros included
- Unknown neighbourhood raises NotFoundError
- Result is a restartable list
"""

import pytest

from conftest import TWO_CATEGORIES
from hood_crime.categories import year_range
from hood_crime.errors import NotFoundError, SchemaError, UnknownCategoryError
from hood_crime.normalize import normalize_missing_counts
from hood_crime.timeseries import (
    TimeSeriesPoint,
    extract_time_series,
    lookup_hood_id,
    time_series_frame,
)


@pytest.fixture
def normalized(sparse_snapshot):
    return normalize_missing_counts(sparse_snapshot, TWO_CATEGORIES)


class TestCompleteness:
    """Ten points, 2014 to 2023, no gaps."""

    @pytest.mark.parametrize("hood_id", [1, 2, 3])
    @pytest.mark.parametrize("category", TWO_CATEGORIES)
    def test_ten_ascending_points(self, scenario_snapshot, hood_id, category):
        points = extract_time_series(scenario_snapshot, hood_id, category)
        assert len(points) == 10
        assert [p.year for p in points] == list(range(2014, 2024))

    def test_values(self, scenario_snapshot):
        points = extract_time_series(scenario_snapshot, 1, "AUTOTHEFT")
        assert [p.count for p in points] == [10, 12, 9, 14, 20, 25, 31, 40, 38, 35]

    def test_zero_years_present(self, scenario_snapshot):
        points = extract_time_series(scenario_snapshot, 2, "HOMICIDE")
        assert points == [TimeSeriesPoint(year=y, count=0) for y in range(2014, 2024)]

    def test_zero_filled_cells_appear(self, normalized):
        points = extract_time_series(normalized, 10, "HOMICIDE")
        assert points[1] == TimeSeriesPoint(year=2015, count=0)
        assert points[2] == TimeSeriesPoint(year=2016, count=2)

    def test_unordered_years_sorted(self, scenario_snapshot):
        years = [2020, 2014, 2017]
        points = extract_time_series(scenario_snapshot, 1, "AUTOTHEFT", years)
        assert [p.year for p in points] == [2014, 2017, 2020]

    def test_plain_python_types(self, scenario_snapshot):
        point = extract_time_series(scenario_snapshot, 3, "HOMICIDE")[0]
        assert type(point.year) is int
        assert type(point.count) is int


class TestRestartable:
    """The series can be traversed more than once."""

    def test_is_list(self, scenario_snapshot):
        assert isinstance(extract_time_series(scenario_snapshot, 1, "HOMICIDE"), list)

    def test_iterate_twice(self, scenario_snapshot):
        points = extract_time_series(scenario_snapshot, 3, "HOMICIDE")
        assert sum(p.count for p in points) == 10
        assert sum(p.count for p in points) == 10


class TestErrors:
    """Lookup misses and unusable tables."""

    def test_unknown_hood_id(self, scenario_snapshot):
        with pytest.raises(NotFoundError, match="999"):
            extract_time_series(scenario_snapshot, 999, "HOMICIDE")

    def test_unknown_category(self, scenario_snapshot):
        with pytest.raises(UnknownCategoryError):
            extract_time_series(scenario_snapshot, 1, "SHOOTING")

    def test_unnormalized_cell(self, sparse_snapshot):
        with pytest.raises(SchemaError, match="HOMICIDE_2015"):
            extract_time_series(sparse_snapshot, 10, "HOMICIDE")

    def test_nullable_int_ids(self, scenario_snapshot):
        df = scenario_snapshot.astype({"hood_id": "Int64"})
        assert len(extract_time_series(df, 3, "HOMICIDE")) == 10
        with pytest.raises(NotFoundError):
            extract_time_series(df, 4, "HOMICIDE")


class TestHelpers:
    """Name lookup and frame conversion."""

    def test_lookup_hood_id(self, scenario_snapshot):
        assert lookup_hood_id(scenario_snapshot, "neighbourhood three ") == 3

    def test_lookup_missing_name(self, scenario_snapshot):
        with pytest.raises(NotFoundError):
            lookup_hood_id(scenario_snapshot, "Nowhere")

    def test_frame(self, scenario_snapshot):
        points = extract_time_series(scenario_snapshot, 1, "HOMICIDE", year_range(2014, 2016))
        frame = time_series_frame(points)
        assert list(frame.columns) == ["year", "count"]
        assert frame.to_dict("list") == {"year": [2014, 2015, 2016], "count": [5, 0, 0]}

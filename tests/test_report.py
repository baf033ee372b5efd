"""
Tests for report rendering (tables and charts).
"""

import pandas as pd
import pytest

import hood_crime.report as report
from hood_crime.config import PipelineSettings
from hood_crime.paths import FIGURES_DIR, TABLES_DIR
from hood_crime.pipeline import run_pipeline
from hood_crime.report import (
    PROCESSED_FILENAME,
    plot_ranking,
    plot_time_series,
    render_report,
    report_dirs,
)
from hood_crime.timeseries import TimeSeriesPoint

PNG_MAGIC = b"\x89PNG"


@pytest.fixture
def result(scenario_snapshot):
    settings = PipelineSettings(
        categories=("HOMICIDE", "AUTOTHEFT"),
        ranking_categories=("HOMICIDE", "AUTOTHEFT"),
        top_n=2,
        trend_hood_id=3,
        trend_categories=("HOMICIDE",),
    )
    return run_pipeline(scenario_snapshot, settings)


@pytest.fixture
def outputs(result, tmp_path):
    return render_report(result, tmp_path / "reports")


class TestRenderReport:
    """Every exhibit lands on disk."""

    def test_expected_files(self, outputs, tmp_path):
        tables = tmp_path / "reports" / "tables"
        figures = tmp_path / "reports" / "figures"
        assert (tables / PROCESSED_FILENAME).exists()
        assert (tables / "top_2_homicide.csv").exists()
        assert (tables / "top_2_autotheft.csv").exists()
        assert (tables / "trend_3_homicide.csv").exists()
        assert (figures / "top_2_homicide.png").exists()
        assert (figures / "trend_3_homicide.png").exists()
        assert len(outputs) == 7

    def test_all_outputs_exist(self, outputs):
        for path in outputs.values():
            assert path.exists(), path

    def test_processed_snapshot_contents(self, outputs):
        df = pd.read_csv(outputs["processed_snapshot"])
        assert list(df["Total_HOMICIDE"]) == [5, 0, 10]
        assert list(df["Total_AUTOTHEFT"]) == [234, 8, 40]
        assert list(df["hood_id"]) == [1, 2, 3]

    def test_ranking_table(self, outputs):
        df = pd.read_csv(outputs["top_2_autotheft_table"])
        assert list(df.columns) == ["hood_id", "area_name", "metric_value", "rank"]
        assert list(df["hood_id"]) == [1, 3]

    def test_trend_table(self, outputs):
        df = pd.read_csv(outputs["trend_3_homicide_table"])
        assert list(df["year"]) == list(range(2014, 2024))
        assert list(df["count"]) == [1] * 10

    def test_charts_are_png(self, outputs):
        with open(outputs["top_2_homicide_chart"], "rb") as f:
            assert f.read(4) == PNG_MAGIC

    def test_no_temp_files_left(self, outputs, tmp_path):
        leftovers = [p for p in (tmp_path / "reports").rglob(".*") if p.is_file()]
        assert leftovers == []


class TestCharts:
    """Chart helpers write PNGs."""

    def test_plot_ranking(self, result, tmp_path):
        path = plot_ranking(result.rankings["HOMICIDE"], "HOMICIDE", tmp_path / "r.png")
        assert path.stat().st_size > 0

    def test_plot_time_series(self, tmp_path):
        points = [TimeSeriesPoint(year=y, count=y - 2014) for y in range(2014, 2024)]
        path = plot_time_series(points, "Trend", tmp_path / "sub" / "t.png")
        with open(path, "rb") as f:
            assert f.read(4) == PNG_MAGIC


class TestReportDirs:
    """Output layout follows the canonical reports/ tree."""

    def test_default_dirs(self):
        assert report_dirs() == (TABLES_DIR, FIGURES_DIR)

    def test_custom_dir_keeps_layout(self, tmp_path):
        tables, figures = report_dirs(tmp_path)
        assert tables == tmp_path / TABLES_DIR.name
        assert figures == tmp_path / FIGURES_DIR.name

    def test_default_output_dir(self, result, tmp_path, monkeypatch):
        monkeypatch.setattr(report, "REPORTS_DIR", tmp_path / "default")
        outputs = render_report(result)
        expected = tmp_path / "default" / TABLES_DIR.name / PROCESSED_FILENAME
        assert outputs["processed_snapshot"] == expected
        assert expected.exists()

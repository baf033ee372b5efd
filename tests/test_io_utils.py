"""
Tests for atomic writes, provenance sidecars and JSONL logging.
"""

import json

import pandas as pd
import pytest

from hood_crime.hashing import (
    hash_dict,
    hash_file,
    read_metadata_sidecar,
    write_metadata_sidecar,
)
from hood_crime.io_utils import (
    atomic_write,
    atomic_write_df,
    atomic_write_json,
    read_df,
    read_json,
    read_yaml,
)
from hood_crime.logging_utils import JSONLLogger, generate_run_id


class TestAtomicWrite:
    """Writes land completely or not at all."""

    def test_writes_file(self, tmp_path):
        target = tmp_path / "out" / "a.txt"
        with atomic_write(target) as f:
            f.write("hello")
        assert target.read_text() == "hello"

    def test_error_leaves_no_file(self, tmp_path):
        target = tmp_path / "a.txt"
        with pytest.raises(RuntimeError):
            with atomic_write(target) as f:
                f.write("partial")
                raise RuntimeError("boom")
        assert not target.exists()
        assert list(tmp_path.iterdir()) == []

    def test_error_keeps_previous_version(self, tmp_path):
        target = tmp_path / "a.txt"
        target.write_text("old")
        with pytest.raises(RuntimeError):
            with atomic_write(target) as f:
                f.write("new")
                raise RuntimeError("boom")
        assert target.read_text() == "old"

    def test_df_csv_round_trip(self, tmp_path):
        df = pd.DataFrame({"hood_id": [1, 2], "Total_HOMICIDE": [5, 0]})
        target = tmp_path / "t.csv"
        atomic_write_df(df, target, index=False)
        pd.testing.assert_frame_equal(read_df(target), df)

    def test_df_unsupported_suffix(self, tmp_path):
        with pytest.raises(ValueError):
            atomic_write_df(pd.DataFrame(), tmp_path / "t.xlsx")
        assert list(tmp_path.iterdir()) == []

    def test_json(self, tmp_path):
        atomic_write_json({"a": 1}, tmp_path / "x.json")
        assert read_json(tmp_path / "x.json") == {"a": 1}

    def test_read_yaml(self, tmp_path):
        path = tmp_path / "p.yml"
        path.write_text("top_n: 5\n")
        assert read_yaml(path) == {"top_n": 5}


class TestHashing:
    def test_hash_file_stable(self, tmp_path):
        path = tmp_path / "f.csv"
        path.write_text("hood_id\n1\n")
        assert hash_file(path) == hash_file(path)
        assert len(hash_file(path)) == 64

    def test_hash_dict_key_order(self):
        assert hash_dict({"a": 1, "b": 2}) == hash_dict({"b": 2, "a": 1})

    def test_sidecar_round_trip(self, tmp_path):
        source = tmp_path / "in.csv"
        source.write_text("x\n1\n")
        output = tmp_path / "totals.csv"
        sidecar = write_metadata_sidecar(
            output, {"snapshot": str(source)}, {"top_n": 2}, "run1",
            metadata_dir=tmp_path / "meta",
        )
        assert sidecar.name == "totals_metadata.json"
        metadata = read_metadata_sidecar(output, metadata_dir=tmp_path / "meta")
        assert metadata["run_id"] == "run1"
        assert metadata["inputs"]["snapshot"]["hash"] == hash_file(source)
        assert metadata["config_digest"] == hash_dict({"top_n": 2})

    def test_sidecar_missing_input(self, tmp_path):
        sidecar = write_metadata_sidecar(
            tmp_path / "o.csv", {"snapshot": str(tmp_path / "gone.csv")}, {}, "r",
            metadata_dir=tmp_path,
        )
        with open(sidecar, encoding="utf-8") as f:
            assert json.load(f)["inputs"]["snapshot"]["missing"] is True


class TestJSONLLogger:
    def test_records_written(self, tmp_path):
        with JSONLLogger("unit", log_dir=tmp_path) as logger:
            logger.info("hello", extra={"rows": 3})
            logger.log_metrics({"row_count": 3})
        with open(logger.log_file, encoding="utf-8") as f:
            records = [json.loads(line) for line in f]
        messages = [r["message"] for r in records]
        assert messages == ["Logger initialized", "hello", "Metrics recorded", "Logger closing"]
        assert records[1]["extra"] == {"rows": 3}
        assert all(r["run_id"] == logger.run_id for r in records)

    def test_exception_logged_on_exit(self, tmp_path):
        with pytest.raises(KeyError):
            with JSONLLogger("unit", log_dir=tmp_path) as logger:
                raise KeyError("hood_id")
        with open(logger.log_file, encoding="utf-8") as f:
            levels = [json.loads(line)["level"] for line in f]
        assert "ERROR" in levels

    def test_run_ids_unique(self):
        assert generate_run_id() != generate_run_id()

"""
Run logs for the crime summary scripts.

One JSON object per line in logs/<script>_<run_id>.jsonl. Every record has
timestamp, script_name, run_id, level and message; structured payloads
(config and digest, input/output paths, row counts, zero-filled cells) go
under "extra". INFO and above are echoed to stdout.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import matplotlib
import numpy
import pandas
import yaml

from hood_crime.paths import LOGS_DIR


def generate_run_id() -> str:
    """UTC timestamp plus a short random suffix, e.g. 20240101_120000_ab12cd34."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{uuid.uuid4().hex[:8]}"


def get_versions() -> dict[str, str]:
    """Interpreter and library versions recorded with every run."""
    return {
        "python": sys.version.split()[0],
        "pandas": pandas.__version__,
        "numpy": numpy.__version__,
        "matplotlib": matplotlib.__version__,
        "pyyaml": yaml.__version__,
    }


class JSONLLogger:
    """
    Append-only JSONL run log for one script invocation.

    Use as a context manager so an escaping exception is recorded and the
    file is closed:

        with get_logger("01_build_crime_summary") as logger:
            logger.log_metrics({"row_count": 158})
    """

    def __init__(
        self,
        script_name: str,
        run_id: Optional[str] = None,
        log_dir: Optional[Path] = None,
    ):
        self.script_name = script_name
        self.run_id = run_id or generate_run_id()
        log_dir = Path(log_dir) if log_dir is not None else LOGS_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = log_dir / f"{script_name}_{self.run_id}.jsonl"
        self._file_handle = open(self.log_file, "a", encoding="utf-8")

        self._console = logging.StreamHandler(sys.stdout)
        self._console.setLevel(logging.INFO)
        self._console.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        self._logger = logging.getLogger(f"hood_crime.{script_name}")
        self._logger.setLevel(logging.INFO)
        self._logger.addHandler(self._console)

        self._write("INFO", "Logger initialized", {
            "log_file": str(self.log_file),
            "versions": get_versions(),
        })

    def _write(self, level: str, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "script_name": self.script_name,
            "run_id": self.run_id,
            "level": level,
            "message": message,
        }
        if extra:
            record["extra"] = extra
        self._file_handle.write(json.dumps(record, default=str) + "\n")
        self._file_handle.flush()

    def info(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._write("INFO", message, extra)
        self._logger.info(message)

    def error(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._write("ERROR", message, extra)
        self._logger.error(message)

    def log_config(self, config: dict[str, Any], config_digest: Optional[str] = None) -> None:
        self._write("INFO", "Configuration loaded", {"config": config, "config_digest": config_digest})

    def log_inputs(self, inputs: dict[str, str]) -> None:
        self._write("INFO", "Inputs registered", {"inputs": inputs})

    def log_outputs(self, outputs: dict[str, str]) -> None:
        self._write("INFO", "Outputs registered", {"outputs": outputs})

    def log_metrics(self, metrics: dict[str, Any]) -> None:
        """Row counts, zero-filled cells and other per-run numbers."""
        self._write("INFO", "Metrics recorded", {"metrics": metrics})

    def close(self) -> None:
        self._write("INFO", "Logger closing")
        self._file_handle.close()
        self._logger.removeHandler(self._console)

    def __enter__(self) -> "JSONLLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.error(f"Unhandled {exc_type.__name__}: {exc_val}")
        self.close()


def get_logger(
    script_name: str,
    run_id: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> JSONLLogger:
    """JSONLLogger for script_name, writing to log_dir (default: logs/)."""
    return JSONLLogger(script_name=script_name, run_id=run_id, log_dir=log_dir)

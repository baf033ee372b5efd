"""
Run configuration loaded from configs/params.yml.

The YAML file is the single place the year window, category list and
report parameters are set; command-line flags override individual values.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from hood_crime.categories import (
    CATEGORIES,
    YEAR_END,
    YEAR_START,
    canonical_category,
    year_range,
)
from hood_crime.errors import InvalidArgumentError
from hood_crime.io_utils import read_yaml
from hood_crime.paths import PARAMS_FILE, PROJECT_ROOT


def load_params(path: Optional[Union[str, Path]] = None) -> dict:
    """Load run parameters from params.yml (or an explicit path)."""
    params_path = Path(path) if path is not None else PARAMS_FILE
    if not params_path.exists():
        raise FileNotFoundError(f"Config file not found: {params_path}")
    return read_yaml(params_path) or {}


@dataclass(frozen=True)
class PipelineSettings:
    """Resolved, immutable parameters for one pipeline run."""
    years: Tuple[int, ...] = field(default_factory=year_range)
    categories: Tuple[str, ...] = CATEGORIES
    ranking_categories: Tuple[str, ...] = ("HOMICIDE", "AUTOTHEFT")
    top_n: int = 10
    trend_hood_id: Optional[int] = None
    trend_categories: Tuple[str, ...] = ("HOMICIDE", "AUTOTHEFT")

    def __post_init__(self):
        if isinstance(self.top_n, bool) or not isinstance(self.top_n, int) or self.top_n < 1:
            raise InvalidArgumentError(f"top_n must be a positive integer, got {self.top_n!r}")
        if not self.years:
            raise InvalidArgumentError("Year window is empty")

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "PipelineSettings":
        """Build settings from a parsed params.yml dictionary."""
        window = params.get("window", {})
        report = params.get("report", {})
        defaults = cls()

        years = year_range(
            int(window.get("year_start", YEAR_START)),
            int(window.get("year_end", YEAR_END)),
        )
        categories = tuple(
            canonical_category(c) for c in params.get("categories", CATEGORIES)
        )
        ranking = tuple(
            canonical_category(c)
            for c in report.get("ranking_categories", defaults.ranking_categories)
        )
        trend = tuple(
            canonical_category(c)
            for c in report.get("trend_categories", defaults.trend_categories)
        )
        trend_hood_id = report.get("trend_hood_id")

        return cls(
            years=years,
            categories=categories,
            ranking_categories=ranking,
            top_n=report.get("top_n", defaults.top_n),
            trend_hood_id=int(trend_hood_id) if trend_hood_id is not None else None,
            trend_categories=trend,
        )

    def with_overrides(self, **overrides: Any) -> "PipelineSettings":
        """Copy with the non-None overrides applied (CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def resolve_path(value: Union[str, Path]) -> Path:
    """Resolve a config path relative to the project root."""
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def to_config_dict(settings: PipelineSettings) -> Dict[str, Any]:
    """Plain dictionary form for logging and the provenance digest."""
    return {
        "window": {"year_start": settings.years[0], "year_end": settings.years[-1]},
        "categories": list(settings.categories),
        "report": {
            "ranking_categories": list(settings.ranking_categories),
            "top_n": settings.top_n,
            "trend_hood_id": settings.trend_hood_id,
            "trend_categories": list(settings.trend_categories),
        },
    }

#!/usr/bin/env python3
"""
01_build_crime_summary.py

Build the neighbourhood crime decade summary.

Steps:
- Load the neighbourhood snapshot (one row per neighbourhood, wide
  <CATEGORY>_<YEAR> columns)
- Zero-fill missing yearly counts, total each category over the window
- Rank neighbourhoods by the configured categories (top N)
- Extract the yearly trend for the configured neighbourhood

Outputs (under --output-dir, default reports/):
- tables/neighbourhood_totals.csv (processed snapshot with Total_ columns)
- tables/top_<n>_<category>.csv and figures/top_<n>_<category>.png
- tables/trend_<hood_id>_<category>.csv and figures/trend_<hood_id>_<category>.png
- tables/metadata/neighbourhood_totals_metadata.json (provenance sidecar)

Usage:
  python scripts/01_build_crime_summary.py
  python scripts/01_build_crime_summary.py --input data/raw/snapshot.csv --top-n 5
  python scripts/01_build_crime_summary.py --categories homicide "auto theft" --trend-hood-id 77
"""

import argparse
import sys

from hood_crime.categories import canonical_category
from hood_crime.config import (
    PipelineSettings,
    load_params,
    resolve_path,
    to_config_dict,
)
from hood_crime.errors import CrimeSummaryError
from hood_crime.hashing import hash_dict, write_metadata_sidecar
from hood_crime.logging_utils import get_logger
from hood_crime.pipeline import load_snapshot, run_pipeline
from hood_crime.paths import METADATA_DIR, REPORTS_DIR
from hood_crime.report import PROCESSED_FILENAME, render_report, report_dirs

SCRIPT_NAME = "01_build_crime_summary"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the neighbourhood crime decade summary")
    parser.add_argument("--config", help="Path to params.yml (default: configs/params.yml)")
    parser.add_argument("--input", help="Snapshot file (CSV or Parquet)")
    parser.add_argument("--output-dir", help="Directory for tables and figures")
    parser.add_argument("--top-n", type=int, help="Neighbourhoods per ranking")
    parser.add_argument(
        "--categories", nargs="+", metavar="CATEGORY",
        help="Categories to rank and trend (e.g. HOMICIDE AUTOTHEFT)",
    )
    parser.add_argument("--trend-hood-id", type=int, help="Neighbourhood for trend exhibits")
    parser.add_argument("--log-dir", help="Directory for JSONL logs (default: logs/)")
    return parser.parse_args(argv)


def build_settings(params: dict, args: argparse.Namespace) -> PipelineSettings:
    """Config file values, overridden by any flags given."""
    settings = PipelineSettings.from_params(params)
    categories = None
    if args.categories:
        categories = tuple(canonical_category(c) for c in args.categories)
    return settings.with_overrides(
        top_n=args.top_n,
        trend_hood_id=args.trend_hood_id,
        ranking_categories=categories,
        trend_categories=categories,
    )


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    with get_logger(SCRIPT_NAME, log_dir=args.log_dir) as logger:
        logger.info(f"Starting {SCRIPT_NAME}")

        try:
            params = load_params(args.config)
            settings = build_settings(params, args)
            config = to_config_dict(settings)
            logger.log_config(config, config_digest=hash_dict(config))

            paths = params.get("paths", {})
            input_path = resolve_path(args.input or paths["input"])
            output_dir = resolve_path(args.output_dir or paths.get("output_dir", REPORTS_DIR))
            logger.log_inputs({"snapshot": str(input_path)})

            raw = load_snapshot(input_path, logger)
            result = run_pipeline(raw, settings, logger)

            outputs = render_report(result, output_dir, logger)
            write_metadata_sidecar(
                output_path=outputs["processed_snapshot"],
                inputs={"snapshot": str(input_path)},
                config=config,
                run_id=logger.run_id,
                extra={
                    "row_count": len(result.aggregated),
                    "zero_filled_cells": result.missing_cells,
                },
                metadata_dir=report_dirs(output_dir)[0] / METADATA_DIR.name,
            )

        except (CrimeSummaryError, FileNotFoundError) as e:
            logger.error(f"FAILED: {type(e).__name__}: {e}")
            where = f" in stage '{e.stage}'" if getattr(e, "stage", None) else ""
            print(f"Error{where}: {type(e).__name__}: {e}", file=sys.stderr)
            return 1

        logger.info("=" * 70)
        logger.info("Crime summary:")
        logger.info(f"  Neighbourhoods: {len(result.aggregated):,}")
        logger.info(f"  Zero-filled cells: {sum(result.missing_cells.values()):,}")
        for category, ranked in result.rankings.items():
            logger.info(f"  Top {len(ranked)} by {category}:")
            for row in ranked.itertuples(index=False):
                logger.info(f"    {row.rank:>2}. {row.area_name} ({row.metric_value:,})")
        logger.info("=" * 70)
        logger.info(f"SUCCESS: Wrote {PROCESSED_FILENAME} and {len(outputs) - 1} exhibits")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Batch job that recomputes the staging and KPI report tables.

This is the command-line counterpart of POST /pipeline/run: one full
recompute of both tables from the configured raw source, for use by an
external scheduler. The job keeps no state between runs; re-running it on
the same raw snapshot rewrites identical rows apart from
report_generated_at.

Usage:
    campaign-kpi-refresh                       # configured source, persist
    campaign-kpi-refresh --source csv --csv data/bank-full.csv
    campaign-kpi-refresh --dry-run             # transform only

Exit code is 0 on success and 1 when the run failed.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from campaign_kpi.core.config import get_settings
from campaign_kpi.core.database import close_db
from campaign_kpi.models import PipelineRunResult, RawSource
from campaign_kpi.services.pipeline import run_pipeline

logger = logging.getLogger(__name__)


async def refresh_report(
    source: Optional[RawSource] = None,
    csv_path: Optional[str] = None,
    persist: bool = True
) -> PipelineRunResult:
    """
    Run the pipeline once and release the database pool afterwards.

    Args:
        source: Raw source (default: settings.raw_source)
        csv_path: CSV export for the csv source (default: settings.raw_csv_path)
        persist: Whether to overwrite the tables

    Returns:
        PipelineRunResult of the run
    """
    try:
        result = await run_pipeline(source=source, file=csv_path, persist=persist)
    finally:
        await close_db()

    if result.success:
        logger.info(
            f"Report refreshed: {result.report_rows} rows generated at "
            f"{result.report_generated_at.isoformat()} (persisted={result.persisted})"
        )
    else:
        for error in result.errors:
            location = f" (row {error.row_number})" if error.row_number else ""
            logger.error(f"{error.field}{location}: {error.message}")

    return result


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recompute the bank marketing staging and KPI report tables."
    )
    parser.add_argument(
        "--source",
        choices=[s.value for s in RawSource],
        default=None,
        help="Raw source to read (default: RAW_SOURCE)",
    )
    parser.add_argument(
        "--csv",
        dest="csv_path",
        default=None,
        help="Raw CSV export for the csv source (default: RAW_CSV_PATH)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the transforms without writing the tables",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    source = RawSource(args.source) if args.source else None
    result = asyncio.run(refresh_report(
        source=source,
        csv_path=args.csv_path,
        persist=not args.dry_run,
    ))

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())

"""
Pipeline orchestration: the single "run all transforms" trigger.

Runs the two stages in dependency order over a full snapshot of the raw
contact log:

    raw contacts -> clean_contacts -> cleaned records -> build_report -> KPI report

and, unless disabled, overwrites the staging and report tables. Every run is
a full recompute; there is no incremental state.

Key Functions:
- run_transforms: The pure two-stage transform over an in-memory raw table
- run_pipeline: Load + transform + persist, reporting the outcome as a
  PipelineRunResult instead of raising
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
import logging

import pandas as pd

from campaign_kpi.core.config import ConfigurationError, Settings, get_settings
from campaign_kpi.models import PipelineRunResult, RawSource, ValidationError
from campaign_kpi.services.cleaning import SchemaViolationError, clean_contacts
from campaign_kpi.services.ingestion import CsvInput, load_raw_contacts
from campaign_kpi.services.kpi import build_report
from campaign_kpi.services.persistence import persist_tables

# Configure module logger
logger = logging.getLogger(__name__)

# Error field for runs that cannot start or finish until a setting is provided
CONFIGURATION_ERROR_FIELD = 'configuration'


def _configuration_error(error: ConfigurationError) -> ValidationError:
    return ValidationError(
        field=CONFIGURATION_ERROR_FIELD,
        message=str(error),
        row_number=None
    )


def run_transforms(
    raw: pd.DataFrame,
    generated_at: Optional[datetime] = None
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Run the cleaning and KPI aggregation stages.

    Args:
        raw: Raw contact events.
        generated_at: Report timestamp (default: now, UTC).

    Returns:
        Tuple of (cleaned records, KPI report).

    Raises:
        SchemaViolationError: If the raw table violates the input contract.
    """
    cleaned = clean_contacts(raw)
    report = build_report(cleaned, generated_at=generated_at)
    return cleaned, report


async def run_pipeline(
    source: Optional[RawSource] = None,
    file: Optional[CsvInput] = None,
    persist: bool = True,
    generated_at: Optional[datetime] = None,
    settings: Optional[Settings] = None
) -> PipelineRunResult:
    """
    Load the raw contact log, run the transforms and materialize the results.

    Process:
    1. Load the raw table (CSV or BigQuery)
    2. Clean and enrich (schema violations abort the run)
    3. Build the KPI report
    4. Overwrite the staging and report tables (if persist)

    Args:
        source: Raw source (default: settings.raw_source).
        file: CSV input for the csv source (default: settings.raw_csv_path).
        persist: Whether to overwrite the materialized tables.
        generated_at: Report timestamp (default: now, UTC).
        settings: Settings override (default: get_settings()).

    Returns:
        PipelineRunResult with row counts and any errors. Nothing is
        persisted when success is False.
    """
    settings = settings or get_settings()
    source = RawSource(source or settings.raw_source)
    generated_at = generated_at or datetime.now(timezone.utc)

    logger.info(f"Starting KPI pipeline run from {source.value}")

    # Load raw contacts
    try:
        raw = load_raw_contacts(source=source, file=file, settings=settings)
    except SchemaViolationError as e:
        return PipelineRunResult(success=False, source=source, errors=e.errors)
    except ConfigurationError as e:
        logger.error(f"Cannot load raw contacts from {source.value}: {e}")
        return PipelineRunResult(
            success=False,
            source=source,
            errors=[_configuration_error(e)]
        )
    except Exception as e:
        logger.exception(f"Error loading raw contacts from {source.value}")
        return PipelineRunResult(
            success=False,
            source=source,
            errors=[ValidationError(
                field='source',
                message=f"Failed to load raw contacts from {source.value}: {str(e)}",
                row_number=None
            )]
        )

    # Transform
    try:
        cleaned, report = run_transforms(raw, generated_at=generated_at)
    except SchemaViolationError as e:
        return PipelineRunResult(
            success=False,
            source=source,
            rows_read=len(raw),
            errors=e.errors
        )

    result = PipelineRunResult(
        success=True,
        source=source,
        rows_read=len(raw),
        rows_cleaned=len(cleaned),
        rows_dropped=len(raw) - len(cleaned),
        report_rows=len(report),
        report_generated_at=generated_at,
    )

    if not persist:
        return result

    # Materialize
    try:
        await persist_tables(
            cleaned,
            report,
            staging_table=settings.staging_table,
            report_table=settings.report_table,
        )
    except ConfigurationError as e:
        logger.error(f"Cannot persist KPI tables: {e}")
        return result.model_copy(update={
            'success': False,
            'errors': [_configuration_error(e)]
        })
    except Exception as e:
        logger.exception("Error persisting KPI tables")
        return result.model_copy(update={
            'success': False,
            'errors': [ValidationError(
                field='persist',
                message=f"Failed to persist KPI tables: {str(e)}",
                row_number=None
            )]
        })

    logger.info(
        f"KPI pipeline run complete: {result.rows_read} rows read, "
        f"{result.rows_cleaned} cleaned, {result.report_rows} report rows"
    )

    return result.model_copy(update={'persisted': True})


__all__ = [
    'CONFIGURATION_ERROR_FIELD',
    'run_transforms',
    'run_pipeline',
]

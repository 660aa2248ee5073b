"""
Campaign KPI Services Module

Business logic of the pipeline. The two transform stages are pure functions
over DataFrames; loading and persistence sit at the edges.

Services:
- cleaning: Cleaning/enrichment stage (raw contacts -> cleaned records)
- kpi: KPI aggregation stage (cleaned records -> unified segment report)
- ingestion: Raw contact loading (CSV + BigQuery)
- persistence: Overwrite of the staging and report tables
- pipeline: Load, transform and persist in one run
"""

# =============================================================================
# Cleaning Stage Exports
# =============================================================================

from campaign_kpi.services.cleaning import (
    SchemaViolationError,
    validate_raw_contacts,
    assign_age_group,
    assign_balance_category,
    assign_campaign_intensity,
    clean_contacts,
)

# =============================================================================
# KPI Aggregation Stage Exports
# =============================================================================

from campaign_kpi.services.kpi import (
    SEGMENT_DIMENSIONS,
    compute_segment_aggregates,
    add_relative_effectiveness,
    build_report,
    report_records,
)

# =============================================================================
# Ingestion, Persistence and Orchestration Exports
# =============================================================================

from campaign_kpi.services.ingestion import load_raw_contacts
from campaign_kpi.services.persistence import persist_tables, fetch_report
from campaign_kpi.services.pipeline import run_transforms, run_pipeline

__all__ = [
    # Cleaning
    'SchemaViolationError',
    'validate_raw_contacts',
    'assign_age_group',
    'assign_balance_category',
    'assign_campaign_intensity',
    'clean_contacts',
    # KPI aggregation
    'SEGMENT_DIMENSIONS',
    'compute_segment_aggregates',
    'add_relative_effectiveness',
    'build_report',
    'report_records',
    # Edges
    'load_raw_contacts',
    'persist_tables',
    'fetch_report',
    'run_transforms',
    'run_pipeline',
]

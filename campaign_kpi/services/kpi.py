"""
KPI aggregation stage of the campaign KPI pipeline.

This module aggregates the cleaned contact records into the unified KPI
report: subscription conversion rates for every value of ten segmentation
dimensions, each compared with the overall conversion rate.

Key Functions:
- aggregate_segment: Grouped conversion aggregate for one dimension
- compute_segment_aggregates: All ten dimension aggregates
- union_segments: Vertical concatenation of the aggregates
- general_conversion_rate: Overall (General/Todos) conversion rate lookup
- add_relative_effectiveness: Relative effectiveness index + generation timestamp
- sort_report: Presentation ordering
- build_report: Main entry point (cleaned records -> report DataFrame)

Metrics:
- total_contacts = number of contacts in the group
- conversions = contacts with subscribed == True (unknown does not count)
- conversion_rate_pct = round(100 * conversions / total_contacts, 2)
- relative_effectiveness_index = round(conversion_rate_pct / general_rate, 2),
  missing when the general rate is 0

The normalization runs in two phases: the general rate is read once from the
unioned aggregates, then every row is divided by that captured scalar.

Idempotency:
- Same cleaned input and generated_at produce an identical report
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from campaign_kpi.models import (
    GENERAL_SEGMENT_VALUE,
    NO_PRIOR_CAMPAIGN_LABEL,
    UNKNOWN_LABEL,
    ReportRow,
    Segment,
)
from campaign_kpi.services.rounding import round_half_up

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Dimension Descriptors
# =============================================================================


@dataclass(frozen=True)
class SegmentDimension:
    """
    One segmentation axis of the KPI report.

    Attributes:
        segment: Dimension name written to the segment column.
        column: Cleaned column to group by. None groups every row under
            GENERAL_SEGMENT_VALUE.
        missing_label: Label for the group of missing values. None keeps the
            group with a missing segment_value.

    Example:
        SegmentDimension(Segment.OCCUPATION, 'job_type', UNKNOWN_LABEL)
    """
    segment: Segment
    column: Optional[str] = None
    missing_label: Optional[str] = None


SEGMENT_DIMENSIONS: List[SegmentDimension] = [
    SegmentDimension(Segment.GENERAL),
    SegmentDimension(Segment.AGE_GROUP, 'age_group'),
    SegmentDimension(Segment.OCCUPATION, 'job_type', UNKNOWN_LABEL),
    SegmentDimension(Segment.EDUCATION, 'education_level', UNKNOWN_LABEL),
    SegmentDimension(Segment.MARITAL_STATUS, 'marital_status', UNKNOWN_LABEL),
    SegmentDimension(Segment.BALANCE, 'balance_category'),
    SegmentDimension(Segment.CAMPAIGN_INTENSITY, 'campaign_intensity'),
    SegmentDimension(Segment.CHANNEL, 'contact_type', UNKNOWN_LABEL),
    SegmentDimension(Segment.PREVIOUS_OUTCOME, 'previous_outcome', NO_PRIOR_CAMPAIGN_LABEL),
    SegmentDimension(Segment.CONTACT_MONTH, 'contact_month'),
]

AGGREGATE_COLUMNS: List[str] = [
    'segment',
    'segment_value',
    'total_contacts',
    'conversions',
    'conversion_rate_pct',
]

REPORT_COLUMNS: List[str] = AGGREGATE_COLUMNS + [
    'relative_effectiveness_index',
    'report_generated_at',
]


def _empty_aggregate() -> pd.DataFrame:
    return pd.DataFrame({
        'segment': pd.Series(dtype=object),
        'segment_value': pd.Series(dtype=object),
        'total_contacts': pd.Series(dtype='int64'),
        'conversions': pd.Series(dtype='int64'),
        'conversion_rate_pct': pd.Series(dtype='float64'),
    })


def _as_optional_strings(values: pd.Series) -> pd.Series:
    """Object Series with missing values as None."""
    values = values.astype(object)
    return values.where(values.notna(), None)


# =============================================================================
# Per-Dimension Aggregation
# =============================================================================


def aggregate_segment(
    cleaned: pd.DataFrame,
    dimension: SegmentDimension
) -> pd.DataFrame:
    """
    Compute the conversion aggregate of one segmentation dimension.

    Rows are grouped by the raw dimension value, missing values forming their
    own group; the replacement label is applied after grouping, so a literal
    value equal to the label stays a separate row.

    Args:
        cleaned: Cleaned contact records.
        dimension: The dimension descriptor.

    Returns:
        DataFrame with AGGREGATE_COLUMNS, one row per group, ordered by
        segment value. Empty when cleaned is empty.
    """
    if cleaned.empty:
        return _empty_aggregate()

    if dimension.column is None:
        keys = pd.Series(GENERAL_SEGMENT_VALUE, index=cleaned.index, dtype=object)
    else:
        keys = cleaned[dimension.column]

    converted = cleaned['subscribed'].fillna(False).astype(bool)

    grouped = (
        pd.DataFrame({'segment_value': keys, 'converted': converted})
        .groupby('segment_value', dropna=False, sort=True)
        .agg(
            total_contacts=('converted', 'size'),
            conversions=('converted', 'sum'),
        )
        .reset_index()
    )

    segment_values = grouped['segment_value']
    if dimension.missing_label is not None:
        segment_values = segment_values.astype(object).fillna(dimension.missing_label)

    aggregate = pd.DataFrame({
        'segment': dimension.segment.value,
        'segment_value': _as_optional_strings(segment_values),
        'total_contacts': grouped['total_contacts'].astype('int64'),
        'conversions': grouped['conversions'].astype('int64'),
    })
    aggregate['conversion_rate_pct'] = round_half_up(
        100.0 * aggregate['conversions'] / aggregate['total_contacts'], 2
    )

    return aggregate[AGGREGATE_COLUMNS]


def compute_segment_aggregates(
    cleaned: pd.DataFrame,
    dimensions: Sequence[SegmentDimension] = SEGMENT_DIMENSIONS
) -> List[pd.DataFrame]:
    """
    Compute the aggregate of every dimension, in descriptor order.

    The aggregates are independent of each other; each one only reads the
    cleaned records.
    """
    return [aggregate_segment(cleaned, dimension) for dimension in dimensions]


def union_segments(aggregates: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Stack the dimension aggregates into one table.

    Rows are not deduplicated: the same segment_value may appear under two
    segments.
    """
    non_empty = [aggregate for aggregate in aggregates if not aggregate.empty]
    if not non_empty:
        return _empty_aggregate()
    return pd.concat(non_empty, ignore_index=True)[AGGREGATE_COLUMNS]


# =============================================================================
# Normalization Pass
# =============================================================================


def general_conversion_rate(unioned: pd.DataFrame) -> Optional[float]:
    """
    Return the conversion rate of the General/Todos row.

    Returns:
        The rate, or None when there is no General row (empty input).
    """
    general_mask = (
        (unioned['segment'] == Segment.GENERAL.value)
        & (unioned['segment_value'] == GENERAL_SEGMENT_VALUE)
    )
    rates = unioned.loc[general_mask, 'conversion_rate_pct']
    if rates.empty:
        return None
    return float(rates.iloc[0])


def add_relative_effectiveness(
    unioned: pd.DataFrame,
    general_rate: Optional[float],
    generated_at: datetime
) -> pd.DataFrame:
    """
    Attach relative_effectiveness_index and report_generated_at to every row.

    Args:
        unioned: Unioned segment aggregates.
        general_rate: Conversion rate of the General/Todos row.
        generated_at: Timestamp shared by every row of the run.

    Returns:
        Copy of unioned with the two extra columns. The index is NaN for
        every row when general_rate is 0 or None.
    """
    report = unioned.copy()

    if general_rate is None or general_rate == 0:
        if general_rate == 0:
            logger.warning("General conversion rate is 0; relative effectiveness index left empty")
        report['relative_effectiveness_index'] = np.nan
    else:
        report['relative_effectiveness_index'] = round_half_up(
            report['conversion_rate_pct'] / general_rate, 2
        )

    report['relative_effectiveness_index'] = report['relative_effectiveness_index'].astype('float64')
    report['report_generated_at'] = pd.Timestamp(generated_at)

    return report


def sort_report(report: pd.DataFrame) -> pd.DataFrame:
    """
    Order rows by segment ascending, conversion rate descending.

    segment_value ascending breaks ties within a segment; missing values sort last.
    """
    return (
        report
        .sort_values(
            ['segment', 'conversion_rate_pct', 'segment_value'],
            ascending=[True, False, True],
            na_position='last',
            kind='mergesort',
        )
        .reset_index(drop=True)
    )


# =============================================================================
# Stage Entry Point
# =============================================================================


def build_report(
    cleaned: pd.DataFrame,
    generated_at: Optional[datetime] = None
) -> pd.DataFrame:
    """
    Build the unified KPI report from cleaned contact records.

    Process:
    1. Aggregate each of the ten dimensions
    2. Union the aggregates
    3. Read the General/Todos conversion rate
    4. Attach the relative effectiveness index and generation timestamp
    5. Sort for presentation

    Args:
        cleaned: Output of clean_contacts.
        generated_at: Report timestamp (default: now, UTC). Pass a fixed
            value for reproducible output.

    Returns:
        DataFrame with REPORT_COLUMNS. Empty when cleaned is empty.

    Example:
        >>> report = build_report(clean_contacts(raw))
        >>> report.loc[report['segment'] == 'General', 'relative_effectiveness_index']
        0    1.0
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    aggregates = compute_segment_aggregates(cleaned)
    unioned = union_segments(aggregates)

    general_rate = general_conversion_rate(unioned)
    report = add_relative_effectiveness(unioned, general_rate, generated_at)
    report = sort_report(report)

    logger.info(
        f"Built KPI report: {len(report)} rows across {len(SEGMENT_DIMENSIONS)} segments, "
        f"general conversion rate {general_rate}"
    )

    return report[REPORT_COLUMNS]


def report_records(report: pd.DataFrame) -> List[ReportRow]:
    """
    Convert a report DataFrame into ReportRow models.

    Missing segment values and indexes become None.
    """
    records: List[ReportRow] = []
    for row in report[REPORT_COLUMNS].to_dict('records'):
        index = row['relative_effectiveness_index']
        generated_at = row['report_generated_at']
        if isinstance(generated_at, pd.Timestamp):
            generated_at = generated_at.to_pydatetime()
        records.append(ReportRow(
            segment=row['segment'],
            segment_value=None if pd.isna(row['segment_value']) else row['segment_value'],
            total_contacts=int(row['total_contacts']),
            conversions=int(row['conversions']),
            conversion_rate_pct=float(row['conversion_rate_pct']),
            relative_effectiveness_index=None if pd.isna(index) else float(index),
            report_generated_at=generated_at,
        ))
    return records


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    'SegmentDimension',
    'SEGMENT_DIMENSIONS',
    'AGGREGATE_COLUMNS',
    'REPORT_COLUMNS',
    'aggregate_segment',
    'compute_segment_aggregates',
    'union_segments',
    'general_conversion_rate',
    'add_relative_effectiveness',
    'sort_report',
    'build_report',
    'report_records',
]

"""
Package initialization file for campaign KPI models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from campaign_kpi.models directly.

Usage:
    from campaign_kpi.models import (
        Segment,
        AgeGroup,
        ReportRow,
        PipelineRunResult,
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from campaign_kpi.models.enums import (
    Ternary,
    AgeGroup,
    BalanceCategory,
    CampaignIntensity,
    Segment,
    RawSource,
    GENERAL_SEGMENT_VALUE,
    UNKNOWN_LABEL,
    NO_PRIOR_CAMPAIGN_LABEL,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from campaign_kpi.models.schemas import (
    RawContactEvent,
    CleanedContactRecord,
    SegmentAggregate,
    ReportRow,
    ValidationError,
    PipelineRunResult,
)


__all__ = [
    # Enums
    'Ternary',
    'AgeGroup',
    'BalanceCategory',
    'CampaignIntensity',
    'Segment',
    'RawSource',
    # Label constants
    'GENERAL_SEGMENT_VALUE',
    'UNKNOWN_LABEL',
    'NO_PRIOR_CAMPAIGN_LABEL',
    # Schemas
    'RawContactEvent',
    'CleanedContactRecord',
    'SegmentAggregate',
    'ReportRow',
    'ValidationError',
    'PipelineRunResult',
]

"""
Pydantic models for the campaign KPI pipeline.

This module documents the row shapes flowing through the two pipeline stages
and carries the API request/response contracts:

- RawContactEvent: one row of the raw contact log (external input)
- CleanedContactRecord: one row of the cleaned/enriched staging table
- SegmentAggregate: one grouped conversion aggregate for a segment value
- ReportRow: one row of the unified KPI report table
- ValidationError / PipelineRunResult: outcome of a pipeline run

The transforms themselves operate on pandas DataFrames; these models are used
at the edges (API payloads, persisted report reads, documentation of the
column contract).

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from campaign_kpi.models.enums import (
    AgeGroup,
    BalanceCategory,
    CampaignIntensity,
    RawSource,
)


# =============================================================================
# Raw Input (external loader contract)
# =============================================================================


class RawContactEvent(BaseModel):
    """
    One marketing contact attempt as delivered by the raw loader.

    Column names follow the raw export; the `default` column maps to
    default_flag through an alias.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "age": 58,
                "job": "management",
                "marital": "married",
                "education": "tertiary",
                "default": "no",
                "balance": 2143,
                "housing": "yes",
                "loan": "no",
                "contact": "unknown",
                "day": 5,
                "month": "may",
                "duration": 261,
                "campaign": 1,
                "pdays": -1,
                "previous": 0,
                "poutcome": "unknown",
                "y": "no"
            }
        }
    )

    age: int = Field(..., description="Client age in years")
    job: str = Field(..., description="Occupation ('unknown' when missing)")
    marital: str = Field(..., description="Marital status ('unknown' when missing)")
    education: str = Field(..., description="Education level ('unknown' when missing)")
    default_flag: str = Field(..., alias="default", description="Has credit in default: yes/no/unknown")
    balance: int = Field(..., description="Average yearly balance, may be negative")
    housing: str = Field(..., description="Has housing loan: yes/no/unknown")
    loan: str = Field(..., description="Has personal loan: yes/no/unknown")
    contact: str = Field(..., description="Contact communication channel")
    day: int = Field(..., description="Last contact day of the month")
    month: str = Field(..., description="Last contact month of the year")
    duration: int = Field(..., ge=0, description="Last contact duration in seconds")
    campaign: int = Field(..., description="Contacts performed during this campaign")
    pdays: int = Field(..., description="Days since last contact of a previous campaign, -1 if never")
    previous: int = Field(..., ge=0, description="Contacts performed before this campaign")
    poutcome: str = Field(..., description="Outcome of the previous campaign")
    y: str = Field(..., description="Subscribed a term deposit: yes/no/unknown")


# =============================================================================
# Cleaned Record (staging table)
# =============================================================================


class CleanedContactRecord(BaseModel):
    """
    A contact event after cleaning and enrichment.

    Ternary flags are Optional[bool]: None means unknown, never False.
    Every record satisfies call_duration_seconds >= 60.
    """
    age: int
    job_type: Optional[str] = None
    marital_status: Optional[str] = None
    education_level: Optional[str] = None
    account_balance_eur: int
    has_default: Optional[bool] = None
    has_housing_loan: Optional[bool] = None
    has_personal_loan: Optional[bool] = None
    contact_type: Optional[str] = None
    contact_day: int
    contact_month: Optional[str] = None
    call_duration_minutes: float
    call_duration_seconds: int = Field(..., ge=60)
    num_contacts_campaign: int
    days_since_last_contact: Optional[int] = Field(
        default=None,
        description="None when the client was never contacted before"
    )
    num_contacts_previous: int
    previous_outcome: Optional[str] = None
    subscribed: Optional[bool] = None
    age_group: AgeGroup
    balance_category: BalanceCategory
    campaign_intensity: CampaignIntensity


# =============================================================================
# KPI Report
# =============================================================================


class SegmentAggregate(BaseModel):
    """Conversion aggregate for one value of one segmentation dimension."""
    segment: str = Field(..., description="Segmentation dimension name")
    segment_value: Optional[str] = Field(
        default=None,
        description="Bucket within the dimension"
    )
    total_contacts: int = Field(..., ge=0, description="Contacts in the group")
    conversions: int = Field(..., ge=0, description="Contacts that subscribed")
    conversion_rate_pct: float = Field(
        ...,
        ge=0,
        le=100,
        description="100 * conversions / total_contacts, 2 decimals"
    )


class ReportRow(SegmentAggregate):
    """
    One row of the unified KPI report.

    relative_effectiveness_index is the row's conversion rate divided by the
    General/Todos rate (1.00 = average); None when the general rate is 0.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "segment": "Grupo de Edad",
                "segment_value": "60+",
                "total_contacts": 1105,
                "conversions": 465,
                "conversion_rate_pct": 42.08,
                "relative_effectiveness_index": 3.6,
                "report_generated_at": "2026-01-28T06:00:00Z"
            }
        }
    )

    relative_effectiveness_index: Optional[float] = Field(
        default=None,
        description="Conversion rate relative to the general rate, 2 decimals"
    )
    report_generated_at: datetime = Field(
        ...,
        description="Generation timestamp, identical for every row of a run"
    )


# =============================================================================
# Pipeline Run Outcome
# =============================================================================


class ValidationError(BaseModel):
    """
    Validation error detail.

    Used for reporting raw input schema violations.
    """
    field: str = Field(
        ...,
        description="Field with validation error"
    )
    message: str = Field(
        ...,
        description="Error message"
    )
    row_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Row number where error occurred"
    )


class PipelineRunResult(BaseModel):
    """
    Result of one run of the transforms.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "source": "csv",
                "rows_read": 45211,
                "rows_cleaned": 40445,
                "rows_dropped": 4766,
                "report_rows": 55,
                "report_generated_at": "2026-01-28T06:00:00Z",
                "persisted": True,
                "errors": []
            }
        }
    )

    success: bool = Field(
        ...,
        description="Whether the run completed"
    )
    source: Optional[RawSource] = Field(
        default=None,
        description="Raw source the run read from"
    )
    rows_read: int = Field(
        default=0,
        ge=0,
        description="Raw contact events read"
    )
    rows_cleaned: int = Field(
        default=0,
        ge=0,
        description="Rows surviving the cleaning stage"
    )
    rows_dropped: int = Field(
        default=0,
        ge=0,
        description="Rows removed by the short-call filter"
    )
    report_rows: int = Field(
        default=0,
        ge=0,
        description="Rows in the unified report"
    )
    report_generated_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp stamped on the report rows"
    )
    persisted: bool = Field(
        default=False,
        description="Whether the staging and report tables were overwritten"
    )
    errors: List[ValidationError] = Field(
        default_factory=list,
        description="Validation errors encountered"
    )

"""
FastAPI router module for reading the KPI report.

Implements GET /report (the persisted kpi_bank_marketing rows) and
GET /report/preview (the report computed from the configured raw source
without touching the database).
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from campaign_kpi.core.config import ConfigurationError
from campaign_kpi.core.dependencies import DBSessionDep, SettingsDep
from campaign_kpi.models import ReportRow
from campaign_kpi.services.cleaning import SchemaViolationError
from campaign_kpi.services.ingestion import load_raw_contacts
from campaign_kpi.services.kpi import report_records
from campaign_kpi.services.persistence import fetch_report
from campaign_kpi.services.pipeline import run_transforms


# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ReportRow])
async def get_report(
    db: DBSessionDep,
    settings: SettingsDep,
) -> List[ReportRow]:
    """
    Get the persisted KPI report.

    Returns:
        Report rows ordered by segment, then conversion rate descending
    """
    try:
        return await fetch_report(db, settings.report_table)
    except Exception as e:
        logger.exception("Error fetching KPI report")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch KPI report: {str(e)}"
        )


@router.get("/preview", response_model=List[ReportRow])
async def preview_report(settings: SettingsDep) -> List[ReportRow]:
    """
    Compute the KPI report from the configured raw source without persisting.
    """
    try:
        raw = load_raw_contacts(settings=settings)
        _, report = run_transforms(raw)
    except SchemaViolationError as e:
        raise HTTPException(
            status_code=422,
            detail=[error.model_dump() for error in e.errors]
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Error computing KPI report preview")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute KPI report: {str(e)}"
        )

    return report_records(report)


__all__ = ['router']

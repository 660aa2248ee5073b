"""
FastAPI router module for triggering the KPI pipeline.

Implements POST /pipeline/run (run from the configured raw source) and
POST /pipeline/run/csv (run on an uploaded CSV export). Both return the
PipelineRunResult of the run.

Failures map to HTTP status codes:
- 422: the raw table violates the input schema (errors carry field/row)
- 500: the source could not be read or the tables could not be written
- 503: a required setting (DATABASE_URL, BIGQUERY_PROJECT) is not configured
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from campaign_kpi.core.dependencies import SettingsDep
from campaign_kpi.models import PipelineRunResult, RawSource
from campaign_kpi.services.pipeline import CONFIGURATION_ERROR_FIELD, run_pipeline


# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()

# Error fields that are not schema violations of the raw table
_SYSTEM_ERROR_FIELDS = {'source', 'persist'}


def _raise_for_failure(result: PipelineRunResult) -> None:
    if result.success:
        return

    errors = [error.model_dump() for error in result.errors]
    if any(error.field == CONFIGURATION_ERROR_FIELD for error in result.errors):
        raise HTTPException(status_code=503, detail=errors)

    if any(error.field in _SYSTEM_ERROR_FIELDS for error in result.errors):
        raise HTTPException(status_code=500, detail=errors)

    raise HTTPException(status_code=422, detail=errors)


@router.post("/run", response_model=PipelineRunResult)
async def run(
    settings: SettingsDep,
    source: Optional[RawSource] = Query(default=None, description="Raw source (default: configured)"),
    persist: bool = Query(default=True, description="Overwrite the staging and report tables"),
) -> PipelineRunResult:
    """
    Run all transforms on the configured raw source.

    Returns:
        PipelineRunResult with row counts and the report timestamp
    """
    result = await run_pipeline(source=source, persist=persist, settings=settings)
    _raise_for_failure(result)
    return result


@router.post("/run/csv", response_model=PipelineRunResult)
async def run_csv(
    settings: SettingsDep,
    file: UploadFile = File(..., description="Raw contact CSV (',' or ';' separated)"),
    persist: bool = Query(default=True, description="Overwrite the staging and report tables"),
) -> PipelineRunResult:
    """
    Run all transforms on an uploaded raw contact CSV.
    """
    content = await file.read()
    logger.info(f"Received raw contact upload {file.filename} ({len(content)} bytes)")

    result = await run_pipeline(
        source=RawSource.CSV,
        file=content,
        persist=persist,
        settings=settings,
    )
    _raise_for_failure(result)
    return result


__all__ = ['router']

"""
API package initialization.

This package contains the FastAPI router modules of the KPI service:
- pipeline: Trigger a full recompute of the staging and report tables
- report: Read the persisted KPI report or preview it without persisting
"""

from fastapi import APIRouter

# Import router modules
from campaign_kpi.api.pipeline import router as pipeline_router
from campaign_kpi.api.report import router as report_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(pipeline_router, prefix="/pipeline", tags=["pipeline"])
api_router.include_router(report_router, prefix="/report", tags=["report"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "pipeline_router",
    "report_router",
]

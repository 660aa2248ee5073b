"""
Bank marketing campaign KPI package.

Cleans the bank's direct-marketing contact log and computes conversion KPIs
across ten customer and campaign segments, with a relative effectiveness
index against the overall conversion rate.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Cleaning, KPI aggregation, ingestion, persistence
    - jobs: Batch refresh job
    - sql: SQL for the raw source and the materialized tables
"""

__version__ = "1.0.0"

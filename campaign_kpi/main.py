"""
FastAPI application entry point for the campaign KPI service.

Wires the pipeline trigger and report routers, manages the asyncpg pool over
the application lifespan, and starts the ASGI server when run directly.

The transforms themselves need no database: without DATABASE_URL the service
still serves /report/preview and non-persisting runs.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from campaign_kpi import __version__
from campaign_kpi.api import api_router
from campaign_kpi.core.config import get_settings
from campaign_kpi.core.database import init_db, close_db

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize the database connection pool (when DATABASE_URL is set)

    On shutdown:
        - Close the database connection pool
    """
    # Startup
    logger.info("Campaign KPI API starting")
    if get_settings().database_url:
        try:
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            # Continue startup; the pool is retried lazily on first use
    else:
        logger.warning("DATABASE_URL not set; KPI tables will not be persisted")

    yield

    # Shutdown
    logger.info("Campaign KPI API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Campaign KPI API",
    version=__version__,
    description=(
        "Cleans the bank marketing contact log and computes conversion KPIs "
        "across ten customer and campaign segments."
    ),
    lifespan=lifespan,
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.
    """
    return {
        "name": "Campaign KPI API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campaign_kpi.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

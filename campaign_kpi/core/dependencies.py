"""
FastAPI dependency injection module for the campaign KPI API.

Key Dependencies Provided:
- get_db_session: Async generator yielding database connections from the pool
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints
- DBSessionDep: Type alias for injecting database connections into endpoints

Usage Examples:
    @router.get("/report")
    async def get_report(
        db: DBSessionDep,
        settings: SettingsDep
    ) -> List[ReportRow]:
        return await fetch_report(db, settings.report_table)

In tests, dependencies can be replaced through FastAPI's override mechanism:

    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
"""

from typing import AsyncGenerator, Annotated

from fastapi import Depends, HTTPException
from asyncpg import Connection

from campaign_kpi.core.config import ConfigurationError, Settings, get_settings
from campaign_kpi.core.database import get_db_pool


# =============================================================================
# Database Session Dependency
# =============================================================================

async def get_db_session() -> AsyncGenerator[Connection, None]:
    """
    Yield an async database connection from the pool.

    The connection is released back to the pool when the endpoint completes,
    regardless of whether the operation succeeded or raised an exception.

    Yields:
        asyncpg.Connection: An active database connection from the pool.

    Raises:
        HTTPException: 503 if DATABASE_URL is not configured.
        asyncpg.PostgresError: If connection acquisition fails.
    """
    try:
        pool = await get_db_pool()
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))

    async with pool.acquire() as connection:
        yield connection


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it.
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(db: DBSessionDep)
DBSessionDep = Annotated[Connection, Depends(get_db_session)]

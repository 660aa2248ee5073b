"""
Core infrastructure package for the campaign KPI pipeline.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- FastAPI dependency injection utilities

This module re-exports key components from submodules so other modules can
import them directly:

    from campaign_kpi.core import get_settings, get_db_pool, DBSessionDep
"""

# =============================================================================
# Re-exports from campaign_kpi.core.config
# =============================================================================
from campaign_kpi.core.config import ConfigurationError, Settings, get_settings

# =============================================================================
# Re-exports from campaign_kpi.core.database
# =============================================================================
from campaign_kpi.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from campaign_kpi.core.dependencies
# =============================================================================
from campaign_kpi.core.dependencies import (
    get_db_session,
    get_settings_dependency,
    SettingsDep,
    DBSessionDep,
)

__all__ = [
    # Configuration management (from config.py)
    'ConfigurationError',
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_db_session',
    'get_settings_dependency',
    'SettingsDep',
    'DBSessionDep',
]

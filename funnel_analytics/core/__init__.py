"""
Core infrastructure package for the funnel analytics backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- The analytics error taxonomy
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing:

    from funnel_analytics.core import get_settings, get_db_pool, RecordStoreError

FastAPI dependencies live in funnel_analytics.core.dependencies and are not
re-exported here, since they import the service layer.
"""

# =============================================================================
# Re-exports from funnel_analytics.core.config
# =============================================================================
from funnel_analytics.core.config import Settings, get_settings

# =============================================================================
# Re-exports from funnel_analytics.core.database
# =============================================================================
from funnel_analytics.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from funnel_analytics.core.errors
# =============================================================================
from funnel_analytics.core.errors import (
    AnalyticsError,
    RecordStoreError,
    FetchCeilingExceededError,
    InvalidDateRangeError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Errors (from errors.py)
    'AnalyticsError',
    'RecordStoreError',
    'FetchCeilingExceededError',
    'InvalidDateRangeError',
]

"""
FastAPI dependency injection module for the funnel analytics backend.

This module provides reusable FastAPI dependencies for configuration access and
Record Store access, enabling loose coupling between endpoint handlers and
infrastructure components.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_record_store: Builds a PostgresRecordStore over the shared asyncpg pool
- SettingsDep: Type alias for injecting Settings into endpoints
- RecordStoreDep: Type alias for injecting the Record Store into endpoints

Usage Examples:
    @router.get("/agencies/{agency_id}/lqs-analytics")
    async def get_lqs_analytics(
        agency_id: str,
        store: RecordStoreDep,
        settings: SettingsDep,
    ) -> LqsAnalyticsResult:
        ...

Testing:
    app.dependency_overrides[get_record_store] = lambda: InMemoryRecordStore(...)
    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
"""

import logging
from typing import Annotated

import asyncpg
from fastapi import Depends, HTTPException

from funnel_analytics.core.config import Settings, get_settings
from funnel_analytics.core.database import get_db_pool
from funnel_analytics.services.record_store import PostgresRecordStore, RecordStore

logger = logging.getLogger(__name__)

# Shown instead of a partial or zero-filled report whenever data cannot be read
ANALYTICS_UNAVAILABLE = "Analytics unavailable, retry"


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# =============================================================================
# Record Store Dependency
# =============================================================================

async def get_record_store() -> RecordStore:
    """
    Build a Record Store bound to the shared connection pool.

    The store itself holds no per-request state; each query acquires and
    releases its own pooled connection, which lets the engine issue
    collection fetches concurrently.

    Returns:
        RecordStore: A PostgresRecordStore over the asyncpg pool.

    Raises:
        HTTPException(503): If the pool cannot be created.
    """
    try:
        pool = await get_db_pool()
    except (asyncpg.PostgresError, OSError) as e:
        logger.error(f"Record Store pool unavailable: {e}")
        raise HTTPException(status_code=503, detail=ANALYTICS_UNAVAILABLE)
    return PostgresRecordStore(pool)


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(store: RecordStoreDep)
RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]

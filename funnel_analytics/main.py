"""
FastAPI application entry point for the funnel analytics API.

This module wires the asyncpg pool lifecycle, registers the analytics router
and exposes a health check. The analytics engine itself is a library; this
app is the host surface through which the presentation and export layers
request computations.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from funnel_analytics import __version__
from funnel_analytics.core.database import init_db, close_db
from funnel_analytics.api import api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup the Record Store connection pool is opened; on shutdown it is
    closed. A failed pool start is logged and the app still starts, so
    /health keeps answering while analytics requests return 503.
    """
    logger.info("Funnel analytics API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Funnel analytics API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title="Funnel Analytics API",
    version=__version__,
    description=(
        "Marketing attribution and sales-funnel analytics: lead-source ROI, "
        "bucket rollups, producer performance and summary metrics."
    ),
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "funnel_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

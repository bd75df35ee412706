"""
Funnel analytics API package initialization.

This package contains FastAPI router modules for the funnel analytics service:
- analytics: LQS marketing-attribution and producer analytics per agency
"""

from fastapi import APIRouter

from funnel_analytics.api.analytics import router as analytics_router

# Create main API router
api_router = APIRouter()

api_router.include_router(analytics_router, tags=["lqs-analytics"])

__all__ = [
    "api_router",
    "analytics_router",
]

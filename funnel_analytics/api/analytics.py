"""
FastAPI router module for LQS marketing-attribution analytics.

Exposes the analytics engine to the host application. One request runs one
fresh computation; nothing is cached between calls.

Key Endpoints:
- GET /agencies/{agency_id}/lqs-analytics - ROI by lead source and bucket,
  producer breakdown, producer cross-tab and the mode-tagged summary

Date Range Handling:
- No start/end/preset (or preset=all): Pipeline mode (status snapshot)
- start + end, or a preset other than 'all': Activity mode (event window)
- start and end must be given together and cannot be combined with preset

Error Mapping:
- InvalidDateRangeError / incomplete range -> 400
- RecordStoreError / FetchCeilingExceededError -> 503 "Analytics unavailable, retry"
  (never a partial or zero-filled report)

Dependencies:
- funnel_analytics/core/dependencies.py: RecordStoreDep, SettingsDep
- funnel_analytics/services/analytics_engine.py: compute_lqs_analytics
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from funnel_analytics.core.dependencies import ANALYTICS_UNAVAILABLE, RecordStoreDep, SettingsDep
from funnel_analytics.core.errors import (
    FetchCeilingExceededError,
    InvalidDateRangeError,
    RecordStoreError,
)
from funnel_analytics.models.enums import CrossTabDimension, DateRangePreset
from funnel_analytics.models.schemas import LqsAnalyticsResult
from funnel_analytics.services.analytics_engine import compute_lqs_analytics
from funnel_analytics.services.temporal_mode import DateRange, date_range_from_preset


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def _resolve_date_range(
    start: Optional[date],
    end: Optional[date],
    preset: Optional[DateRangePreset],
) -> Optional[DateRange]:
    """
    Turn the request's date parameters into an optional DateRange.

    Raises:
        HTTPException(400): For a half-open range or a range combined with a preset.
        InvalidDateRangeError: If start is after end.
    """
    if (start is None) != (end is None):
        raise HTTPException(status_code=400, detail="start and end must be provided together")
    if start is not None:
        if preset is not None:
            raise HTTPException(status_code=400, detail="Use either start/end or preset, not both")
        return DateRange(start, end)
    if preset is not None:
        return date_range_from_preset(preset)
    return None


# =============================================================================
# Endpoint Implementations
# =============================================================================


@router.get("/agencies/{agency_id}/lqs-analytics", response_model=LqsAnalyticsResult)
async def get_lqs_analytics(
    agency_id: str,
    store: RecordStoreDep,
    settings: SettingsDep,
    start: Optional[date] = Query(default=None, description="First day of the activity window (inclusive)"),
    end: Optional[date] = Query(default=None, description="Last day of the activity window (inclusive)"),
    preset: Optional[DateRangePreset] = Query(default=None, description="Named date range; 'all' selects pipeline mode"),
    cross_tab_by: CrossTabDimension = Query(
        default=CrossTabDimension.LEAD_SOURCE,
        alias="crossTabBy",
        description="Cross-tab column dimension",
    ),
) -> LqsAnalyticsResult:
    """
    Compute LQS analytics for an agency.

    Args:
        agency_id: Agency to analyze.
        start: Optional window start (ISO date).
        end: Optional window end (ISO date).
        preset: Optional named range (last30, last60, last90, quarter, ytd, all).
        cross_tab_by: lead_source or bucket.

    Returns:
        LqsAnalyticsResult with summary, lead-source rows, bucket rows,
        producer breakdown and cross-tab.
    """
    try:
        date_range = _resolve_date_range(start, end, preset)
        return await compute_lqs_analytics(
            store,
            agency_id,
            settings,
            date_range=date_range,
            cross_tab_by=cross_tab_by,
        )

    except InvalidDateRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (RecordStoreError, FetchCeilingExceededError) as e:
        logger.error(f"LQS analytics failed for agency {agency_id}: {e}")
        raise HTTPException(status_code=503, detail=ANALYTICS_UNAVAILABLE)

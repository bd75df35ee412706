"""
Funnel Analytics Services Module

This module contains the analytics engine and its building blocks. Every
aggregation service is a stateless, pure fold over fetched rows; only the
record store, the paged fetcher and the engine perform I/O.

Services:
- record_store: Record Store interface and the asyncpg-backed implementation
- paged_fetcher: Bounded pagination with fetch-ceiling detection
- temporal_mode: Pipeline / Activity mode selection and date-range presets
- datasets: Mode-specific materialized inputs and reference lookups
- metrics: Null-safe ratio, cost and ROI calculations
- lead_source_aggregator: Per lead-source ROI rows
- bucket_rollup: Marketing-bucket rollup of lead-source rows
- producer_aggregator: Quoted By / Sold By producer views
- cross_tab: Producer x lead-source (or bucket) matrix
- performance_trend: Monthly per-bucket trend with an All Sources series
- summary: Mode-tagged top-level summary
- analytics_engine: Fetch + aggregate orchestration

All services are consumed by the API layer (funnel_analytics/api/).
"""

# =============================================================================
# Record Store and Fetching
# =============================================================================

from funnel_analytics.services.record_store import (
    RecordQuery,
    RecordStore,
    PostgresRecordStore,
)
from funnel_analytics.services.paged_fetcher import (
    FetchResult,
    fetch_all,
)

# =============================================================================
# Temporal Mode and Datasets
# =============================================================================

from funnel_analytics.services.temporal_mode import (
    DateRange,
    select_mode,
    date_range_from_preset,
)
from funnel_analytics.services.datasets import (
    ReferenceData,
    PipelineDataset,
    ActivityDataset,
    Dataset,
)

# =============================================================================
# Aggregations
# =============================================================================

from funnel_analytics.services.lead_source_aggregator import aggregate_lead_sources
from funnel_analytics.services.bucket_rollup import roll_up_buckets
from funnel_analytics.services.producer_aggregator import (
    aggregate_producers,
    aggregate_quoted_by,
    aggregate_sold_by,
    producer_totals,
)
from funnel_analytics.services.cross_tab import build_cross_tab
from funnel_analytics.services.performance_trend import build_performance_trend, trend_months
from funnel_analytics.services.summary import summarize

# =============================================================================
# Engine
# =============================================================================

from funnel_analytics.services.analytics_engine import (
    analyze_dataset,
    compute_lqs_analytics,
    resolve_commission_rate,
)

__all__ = [
    # Record store
    'RecordQuery',
    'RecordStore',
    'PostgresRecordStore',
    'FetchResult',
    'fetch_all',
    # Temporal mode
    'DateRange',
    'select_mode',
    'date_range_from_preset',
    'ReferenceData',
    'PipelineDataset',
    'ActivityDataset',
    'Dataset',
    # Aggregations
    'aggregate_lead_sources',
    'roll_up_buckets',
    'aggregate_producers',
    'aggregate_quoted_by',
    'aggregate_sold_by',
    'producer_totals',
    'build_cross_tab',
    'build_performance_trend',
    'trend_months',
    'summarize',
    # Engine
    'analyze_dataset',
    'compute_lqs_analytics',
    'resolve_commission_rate',
]

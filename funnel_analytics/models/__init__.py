"""
Package initialization file for funnel analytics models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from funnel_analytics.models directly.

Usage:
    from funnel_analytics.models import (
        AnalyticsMode,
        Household,
        LeadSourceRoiRow,
        ProducerMetrics,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from funnel_analytics.models.enums import (
    HouseholdStatus,
    AnalyticsMode,
    DateRangePreset,
    RecordCollection,
    CrossTabDimension,
)

# =============================================================================
# Record Models
# =============================================================================

from funnel_analytics.models.schemas import (
    Household,
    Quote,
    Sale,
    LeadSource,
    MarketingBucket,
    SpendLedgerEntry,
    TeamMember,
)

# =============================================================================
# Metric Models
# =============================================================================

from funnel_analytics.models.schemas import (
    LeadSourceRoiRow,
    BucketRoiRow,
    ProducerMetrics,
    ProducerTotals,
    ProducerBreakdown,
    CrossTabCell,
    CrossTabColumn,
    CrossTabRow,
    ProducerSourceCrossTab,
    MonthlyPerformanceData,
    BucketTrendData,
    SummaryBase,
    PipelineSummary,
    ActivitySummary,
    Summary,
    LqsAnalyticsResult,
)

__all__ = [
    # Enums
    'HouseholdStatus',
    'AnalyticsMode',
    'DateRangePreset',
    'RecordCollection',
    'CrossTabDimension',
    # Record models
    'Household',
    'Quote',
    'Sale',
    'LeadSource',
    'MarketingBucket',
    'SpendLedgerEntry',
    'TeamMember',
    # Metric models
    'LeadSourceRoiRow',
    'BucketRoiRow',
    'ProducerMetrics',
    'ProducerTotals',
    'ProducerBreakdown',
    'CrossTabCell',
    'CrossTabColumn',
    'CrossTabRow',
    'ProducerSourceCrossTab',
    'MonthlyPerformanceData',
    'BucketTrendData',
    'SummaryBase',
    'PipelineSummary',
    'ActivitySummary',
    'Summary',
    'LqsAnalyticsResult',
]

"""
Enumeration definitions for the funnel analytics backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization and
deserialization in API responses.
"""

from enum import Enum


class HouseholdStatus(str, Enum):
    """
    Lifecycle status stored on a household row.

    Values: 'lead' | 'quoted' | 'sold'

    Only Pipeline mode reads this field. Activity mode derives everything
    from quote and sale event dates instead.
    """
    LEAD = "lead"
    QUOTED = "quoted"
    SOLD = "sold"


class AnalyticsMode(str, Enum):
    """
    Temporal semantics of one analytics computation.

    - pipeline: no date range; households classified by current status
    - activity: date range present; events classified by their own dates
    """
    PIPELINE = "pipeline"
    ACTIVITY = "activity"


class DateRangePreset(str, Enum):
    """
    Named date ranges offered by the ROI page.

    'all' maps to no range at all, which selects Pipeline mode.
    """
    LAST_30 = "last30"
    LAST_60 = "last60"
    LAST_90 = "last90"
    QUARTER = "quarter"
    YTD = "ytd"
    ALL = "all"


class RecordCollection(str, Enum):
    """
    Collections exposed by the Record Store.

    Values are the backing table names.
    """
    HOUSEHOLDS = "lqs_households"
    QUOTES = "lqs_quotes"
    SALES = "lqs_sales"
    LEAD_SOURCES = "lead_sources"
    MARKETING_BUCKETS = "marketing_buckets"
    SPEND_LEDGER = "lead_source_monthly_spend"
    TEAM_MEMBERS = "team_members"


class CrossTabDimension(str, Enum):
    """
    Column dimension of the producer cross-tab.

    - lead_source: one column per lead source
    - bucket: one column per marketing bucket
    """
    LEAD_SOURCE = "lead_source"
    BUCKET = "bucket"

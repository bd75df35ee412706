"""
Fully materialized inputs of one analytics computation.

The two temporal modes are modelled as separate dataset types instead of a
flag threaded through shared code:

- PipelineDataset: every household (classified by status) and every quote
  and sale row.
- ActivityDataset: households whose lead arrived in the window, plus the
  quote and sale rows dated in the window.

Aggregators dispatch on the dataset type, so each mode has its own named code
path and tests can cover both without cross-contamination.

ReferenceData holds the lookup collections and the commission rate shared by
both modes, together with the label rules for unresolved ids:
- lead source id None -> "Unattributed"; unknown id -> "Unknown"
- team member id None -> "Unassigned"; unknown id -> "Unknown"
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Literal, Optional, Tuple, Union

from funnel_analytics.models.enums import AnalyticsMode
from funnel_analytics.models.schemas import (
    Household,
    LeadSource,
    MarketingBucket,
    Quote,
    Sale,
    SpendLedgerEntry,
    TeamMember,
)
from funnel_analytics.services.temporal_mode import DateRange

UNATTRIBUTED = "Unattributed"
UNASSIGNED = "Unassigned"
UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ReferenceData:
    """Lookup collections, spend ledger and commission rate for one agency."""
    commission_rate: float
    lead_sources: Tuple[LeadSource, ...] = ()
    buckets: Tuple[MarketingBucket, ...] = ()
    team_members: Tuple[TeamMember, ...] = ()
    spend: Tuple[SpendLedgerEntry, ...] = ()

    @cached_property
    def source_names(self) -> Dict[str, str]:
        return {ls.id: ls.name for ls in self.lead_sources}

    @cached_property
    def source_buckets(self) -> Dict[str, Optional[str]]:
        return {ls.id: ls.bucket_id for ls in self.lead_sources}

    @cached_property
    def bucket_names(self) -> Dict[str, str]:
        return {b.id: b.name for b in self.buckets}

    @cached_property
    def member_names(self) -> Dict[str, str]:
        return {tm.id: tm.name for tm in self.team_members}

    @cached_property
    def spend_by_source(self) -> Dict[Optional[str], int]:
        """Spend summed per lead source id; None collects unattributed spend."""
        totals: Dict[Optional[str], int] = {}
        for entry in self.spend:
            totals[entry.lead_source_id] = totals.get(entry.lead_source_id, 0) + (entry.spend_cents or 0)
        return totals

    @property
    def total_spend_cents(self) -> int:
        """Whole-ledger spend, attributed or not."""
        return sum(self.spend_by_source.values())

    def lead_source_name(self, lead_source_id: Optional[str]) -> str:
        if lead_source_id is None:
            return UNATTRIBUTED
        return self.source_names.get(lead_source_id, UNKNOWN)

    def bucket_for(self, lead_source_id: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """Return (bucket_id, bucket_name) for a lead source; both None if unbucketed."""
        if lead_source_id is None:
            return None, None
        bucket_id = self.source_buckets.get(lead_source_id)
        if bucket_id is None:
            return None, None
        return bucket_id, self.bucket_names.get(bucket_id)

    def member_name(self, team_member_id: Optional[str]) -> str:
        if team_member_id is None:
            return UNASSIGNED
        return self.member_names.get(team_member_id, UNKNOWN)


@dataclass(frozen=True)
class PipelineDataset:
    """All-time snapshot: households classified by current status."""
    reference: ReferenceData
    households: Tuple[Household, ...] = ()
    quotes: Tuple[Quote, ...] = ()
    sales: Tuple[Sale, ...] = ()
    mode: Literal[AnalyticsMode.PIPELINE] = field(default=AnalyticsMode.PIPELINE, init=False)


@dataclass(frozen=True)
class ActivityDataset:
    """Windowed events: leads received, quotes created and sales closed in range."""
    reference: ReferenceData
    date_range: DateRange
    leads: Tuple[Household, ...] = ()
    quotes: Tuple[Quote, ...] = ()
    sales: Tuple[Sale, ...] = ()
    mode: Literal[AnalyticsMode.ACTIVITY] = field(default=AnalyticsMode.ACTIVITY, init=False)


Dataset = Union[PipelineDataset, ActivityDataset]

"""
Lead-source ROI aggregation.

Groups households, quotes and sales by lead_source_id and turns each group
into a LeadSourceRoiRow. A None lead_source_id is a real, distinct group
rendered as "Unattributed"; quote and sale rows carry the lead source of
their household.

Per group the fold accumulates:
- leads: households (Pipeline) or lead-received households (Activity)
- quoted / sold household id sets (households are always de-duplicated)
- premium, quoted policies (= quote rows), quoted items (= sum of
  items_quoted), written policies / items (= sums over sale rows)
- distinct product types per sold household, from sale rows only

Pipeline and Activity are separate fold functions:
- Pipeline buckets households by status (quoted = 'quoted' or 'sold',
  sold = 'sold') but still sums whatever quote and sale rows exist, so a
  household whose status disagrees with its rows degrades to a zero
  contribution instead of failing. Bundle tracking covers sold-status
  households only.
- Activity ignores status and keys everything off the windowed rows.

Spend comes from the ledger joined by lead source id, never from the event
rows. Sources with ledger spend but no events still get a row, and the
Unattributed row is always present, so row spend always adds up to the
total spend.

Rows are ordered by premium descending; ties keep the order in which groups
were first seen during the fold.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from funnel_analytics.models.enums import HouseholdStatus
from funnel_analytics.models.schemas import LeadSourceRoiRow, Quote, Sale
from funnel_analytics.services.datasets import (
    ActivityDataset,
    Dataset,
    PipelineDataset,
    ReferenceData,
)
from funnel_analytics.services.metrics import (
    bundle_ratio,
    calculate_cost_metrics,
    close_ratio,
    commission_cents,
    count_bundled,
    quote_rate,
    roi,
    to_cents,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Accumulator
# =============================================================================


@dataclass
class SourceAccumulator:
    """Running totals for one lead-source group during a single fold."""
    first_seen: int
    leads: int = 0
    quoted_household_ids: Set[str] = field(default_factory=set)
    sold_household_ids: Set[str] = field(default_factory=set)
    premium_cents: int = 0
    quoted_policies: int = 0
    quoted_items: int = 0
    written_policies: int = 0
    written_items: int = 0
    product_types_per_household: Dict[str, Set[str]] = field(default_factory=dict)

    def add_quote_row(self, quote: Quote) -> None:
        self.quoted_policies += 1
        self.quoted_items += quote.items

    def add_sale_row(self, sale: Sale) -> None:
        self.premium_cents += sale.premium
        self.written_policies += sale.policies
        self.written_items += sale.items

    def track_sold_household(self, household_id: str) -> None:
        self.sold_household_ids.add(household_id)
        self.product_types_per_household.setdefault(household_id, set())

    def track_product(self, sale: Sale) -> None:
        product_types = self.product_types_per_household.setdefault(sale.household_id, set())
        if sale.product_type:
            product_types.add(sale.product_type)

    @property
    def bundled_households(self) -> int:
        return count_bundled(self.product_types_per_household)


class SourceAccumulators:
    """Map of group key -> accumulator, recording first-seen order explicitly."""

    def __init__(self) -> None:
        self._groups: Dict[Optional[str], SourceAccumulator] = {}

    def get(self, lead_source_id: Optional[str]) -> SourceAccumulator:
        acc = self._groups.get(lead_source_id)
        if acc is None:
            acc = SourceAccumulator(first_seen=len(self._groups))
            self._groups[lead_source_id] = acc
        return acc

    def items(self):
        return self._groups.items()


# =============================================================================
# Folds
# =============================================================================


def fold_pipeline(dataset: PipelineDataset) -> SourceAccumulators:
    """Accumulate all-time groups, classifying households by current status."""
    groups = SourceAccumulators()
    sold_status_ids: Set[str] = set()

    for household in dataset.households:
        acc = groups.get(household.lead_source_id)
        acc.leads += 1
        if household.has_status(HouseholdStatus.QUOTED, HouseholdStatus.SOLD):
            acc.quoted_household_ids.add(household.id)
        if household.has_status(HouseholdStatus.SOLD):
            acc.track_sold_household(household.id)
            sold_status_ids.add(household.id)

    for quote in dataset.quotes:
        groups.get(quote.lead_source_id).add_quote_row(quote)

    for sale in dataset.sales:
        acc = groups.get(sale.lead_source_id)
        acc.add_sale_row(sale)
        if sale.household_id in sold_status_ids:
            acc.track_product(sale)

    return groups


def fold_activity(dataset: ActivityDataset) -> SourceAccumulators:
    """Accumulate windowed groups from lead, quote and sale event rows."""
    groups = SourceAccumulators()

    for lead in dataset.leads:
        groups.get(lead.lead_source_id).leads += 1

    for quote in dataset.quotes:
        acc = groups.get(quote.lead_source_id)
        acc.quoted_household_ids.add(quote.household_id)
        acc.add_quote_row(quote)

    for sale in dataset.sales:
        acc = groups.get(sale.lead_source_id)
        acc.track_sold_household(sale.household_id)
        acc.add_sale_row(sale)
        acc.track_product(sale)

    return groups


def fold_lead_sources(dataset: Dataset) -> SourceAccumulators:
    """Run the fold matching the dataset's temporal mode, then seed spend-only groups."""
    if isinstance(dataset, PipelineDataset):
        groups = fold_pipeline(dataset)
    else:
        groups = fold_activity(dataset)

    for lead_source_id in dataset.reference.spend_by_source:
        groups.get(lead_source_id)
    groups.get(None)

    return groups


# =============================================================================
# Output Rows
# =============================================================================


def build_lead_source_row(
    lead_source_id: Optional[str],
    acc: SourceAccumulator,
    reference: ReferenceData,
) -> LeadSourceRoiRow:
    """Convert one accumulator into an immutable LeadSourceRoiRow."""
    spend_cents = reference.spend_by_source.get(lead_source_id, 0)
    quoted_households = len(acc.quoted_household_ids)
    sold_households = len(acc.sold_household_ids)
    commission = commission_cents(acc.premium_cents, reference.commission_rate)
    bucket_id, bucket_name = reference.bucket_for(lead_source_id)
    bundled = acc.bundled_households

    costs = calculate_cost_metrics(
        spend_cents=spend_cents,
        quoted_households=quoted_households,
        quoted_policies=acc.quoted_policies,
        quoted_items=acc.quoted_items,
        sold_households=sold_households,
        written_policies=acc.written_policies,
        written_items=acc.written_items,
    )

    return LeadSourceRoiRow(
        leadSourceId=lead_source_id,
        leadSourceName=reference.lead_source_name(lead_source_id),
        bucketId=bucket_id,
        bucketName=bucket_name,
        spendCents=spend_cents,
        totalLeads=acc.leads,
        totalQuotes=quoted_households,
        totalSales=sold_households,
        premiumCents=acc.premium_cents,
        commissionEarned=to_cents(commission),
        roi=roi(commission, spend_cents),
        costPerSale=costs['householdAcqCost'],
        quotedPolicies=acc.quoted_policies,
        quotedItems=acc.quoted_items,
        writtenPolicies=acc.written_policies,
        writtenItems=acc.written_items,
        bundledHouseholds=bundled,
        quoteRate=quote_rate(quoted_households, acc.leads),
        closeRatio=close_ratio(sold_households, quoted_households),
        bundleRatio=bundle_ratio(bundled, sold_households),
        **costs,
    )


def aggregate_lead_sources(dataset: Dataset) -> List[LeadSourceRoiRow]:
    """
    Build the ordered lead-source ROI rows for a dataset.

    Args:
        dataset: PipelineDataset or ActivityDataset.

    Returns:
        Rows sorted by premium descending, ties in first-seen order.

    Example:
        >>> rows = aggregate_lead_sources(dataset)
        >>> rows[0].leadSourceName, rows[0].roi
        ('FB Ads', 3.6)
    """
    groups = fold_lead_sources(dataset)
    ordered = sorted(groups.items(), key=lambda item: (-item[1].premium_cents, item[1].first_seen))
    rows = [build_lead_source_row(key, acc, dataset.reference) for key, acc in ordered]

    logger.debug(f"Aggregated {len(rows)} lead-source rows ({dataset.mode.value} mode)")
    return rows

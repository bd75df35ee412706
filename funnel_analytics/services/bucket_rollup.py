"""
Marketing-bucket rollup of lead-source ROI rows.

Sums the additive fields of every LeadSourceRoiRow sharing a bucketId and
recomputes the ratio and cost metrics from the sums (ratios are never
averaged). Household counts add up because a household belongs to exactly
one lead source, and a lead source to at most one bucket.

Lead sources without a bucket, and the Unattributed row, roll up into an
"Unassigned" bucket that always sorts last. Other buckets sort by premium
descending.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from funnel_analytics.models.schemas import BucketRoiRow, LeadSourceRoiRow
from funnel_analytics.services.datasets import UNASSIGNED, UNKNOWN
from funnel_analytics.services.metrics import (
    calculate_cost_metrics,
    close_ratio,
    commission_cents,
    roi,
    to_cents,
)


@dataclass
class _BucketTotals:
    first_seen: int
    name: str
    lead_source_ids: List[Optional[str]] = field(default_factory=list)
    spend_cents: int = 0
    leads: int = 0
    quoted_households: int = 0
    quoted_policies: int = 0
    quoted_items: int = 0
    written_households: int = 0
    written_policies: int = 0
    written_items: int = 0
    premium_cents: int = 0

    def add(self, row: LeadSourceRoiRow) -> None:
        self.lead_source_ids.append(row.leadSourceId)
        self.spend_cents += row.spendCents
        self.leads += row.totalLeads
        self.quoted_households += row.totalQuotes
        self.quoted_policies += row.quotedPolicies
        self.quoted_items += row.quotedItems
        self.written_households += row.totalSales
        self.written_policies += row.writtenPolicies
        self.written_items += row.writtenItems
        self.premium_cents += row.premiumCents


def roll_up_buckets(rows: List[LeadSourceRoiRow], commission_rate: float) -> List[BucketRoiRow]:
    """
    Group lead-source rows by marketing bucket.

    Args:
        rows: Lead-source rows, already in display order.
        commission_rate: Percentage applied to bucket premium.

    Returns:
        One BucketRoiRow per bucket, "Unassigned" last.
    """
    buckets: Dict[Optional[str], _BucketTotals] = {}
    for row in rows:
        totals = buckets.get(row.bucketId)
        if totals is None:
            if row.bucketId is None:
                name = UNASSIGNED
            else:
                name = row.bucketName or UNKNOWN
            totals = _BucketTotals(first_seen=len(buckets), name=name)
            buckets[row.bucketId] = totals
        totals.add(row)

    ordered = sorted(
        buckets.items(),
        key=lambda item: (item[0] is None, -item[1].premium_cents, item[1].first_seen),
    )

    result = []
    for bucket_id, totals in ordered:
        commission = commission_cents(totals.premium_cents, commission_rate)
        costs = calculate_cost_metrics(
            spend_cents=totals.spend_cents,
            quoted_households=totals.quoted_households,
            quoted_policies=totals.quoted_policies,
            quoted_items=totals.quoted_items,
            sold_households=totals.written_households,
            written_policies=totals.written_policies,
            written_items=totals.written_items,
        )
        result.append(BucketRoiRow(
            bucketId=bucket_id,
            bucketName=totals.name,
            leadSourceIds=totals.lead_source_ids,
            spendCents=totals.spend_cents,
            totalLeads=totals.leads,
            quotedHouseholds=totals.quoted_households,
            quotedPolicies=totals.quoted_policies,
            quotedItems=totals.quoted_items,
            writtenHouseholds=totals.written_households,
            writtenPolicies=totals.written_policies,
            writtenItems=totals.written_items,
            premiumCents=totals.premium_cents,
            commissionEarned=to_cents(commission),
            roi=roi(commission, totals.spend_cents),
            closeRatio=close_ratio(totals.written_households, totals.quoted_households),
            **costs,
        ))
    return result

"""
Summary Reducer.

Folds the lead-source rows and the dataset's global counts into one
mode-tagged summary:

- PipelineSummary: household counts by exact current status (openLeads,
  quotedHouseholds, soldHouseholds), plus quoteRate and closeRate over the
  whole funnel.
- ActivitySummary: leadsReceived, quotesCreated (unique quoted households)
  and salesClosed (unique sold households) inside the window. quoteRate and
  closeRate are always None.

Money and the pooled bundle ratio come from the lead-source rows, which
between them cover every household, quote row and sale row of the dataset.
Spend is the ledger total of the reference data.
"""

from typing import List, Union

from funnel_analytics.models.enums import HouseholdStatus
from funnel_analytics.models.schemas import ActivitySummary, LeadSourceRoiRow, PipelineSummary
from funnel_analytics.services.datasets import ActivityDataset, Dataset, PipelineDataset
from funnel_analytics.services.metrics import (
    bundle_ratio,
    close_ratio,
    commission_cents,
    quote_rate,
    roi,
    to_cents,
)


def _shared_totals(dataset: Dataset, rows: List[LeadSourceRoiRow]) -> dict:
    premium = sum(r.premiumCents for r in rows)
    spend = dataset.reference.total_spend_cents
    commission = commission_cents(premium, dataset.reference.commission_rate)
    sold = sum(r.totalSales for r in rows)

    return {
        'premiumSoldCents': premium,
        'commissionEarned': to_cents(commission),
        'commissionRate': dataset.reference.commission_rate,
        'totalSpendCents': spend,
        'overallRoi': roi(commission, spend),
        'totalLeads': sum(r.totalLeads for r in rows),
        'totalQuoted': sum(r.totalQuotes for r in rows),
        'totalSold': sold,
        'totalQuotedPolicies': sum(r.quotedPolicies for r in rows),
        'totalQuotedItems': sum(r.quotedItems for r in rows),
        'totalWrittenPolicies': sum(r.writtenPolicies for r in rows),
        'totalWrittenItems': sum(r.writtenItems for r in rows),
        'bundleRatio': bundle_ratio(sum(r.bundledHouseholds for r in rows), sold),
    }


def summarize_pipeline(dataset: PipelineDataset, rows: List[LeadSourceRoiRow]) -> PipelineSummary:
    totals = _shared_totals(dataset, rows)

    def status_count(status: HouseholdStatus) -> int:
        return sum(1 for h in dataset.households if h.has_status(status))

    return PipelineSummary(
        openLeads=status_count(HouseholdStatus.LEAD),
        quotedHouseholds=status_count(HouseholdStatus.QUOTED),
        soldHouseholds=status_count(HouseholdStatus.SOLD),
        quoteRate=quote_rate(totals['totalQuoted'], totals['totalLeads']),
        closeRate=close_ratio(totals['totalSold'], totals['totalQuoted']),
        **totals,
    )


def summarize_activity(dataset: ActivityDataset, rows: List[LeadSourceRoiRow]) -> ActivitySummary:
    return ActivitySummary(
        leadsReceived=len(dataset.leads),
        quotesCreated=len({q.household_id for q in dataset.quotes}),
        salesClosed=len({s.household_id for s in dataset.sales}),
        **_shared_totals(dataset, rows),
    )


def summarize(dataset: Dataset, rows: List[LeadSourceRoiRow]) -> Union[PipelineSummary, ActivitySummary]:
    """
    Reduce a dataset and its lead-source rows to a summary.

    Args:
        dataset: The dataset the rows were aggregated from.
        rows: Output of aggregate_lead_sources for the same dataset.

    Returns:
        PipelineSummary or ActivitySummary, matching the dataset's mode.
    """
    if isinstance(dataset, PipelineDataset):
        return summarize_pipeline(dataset, rows)
    return summarize_activity(dataset, rows)

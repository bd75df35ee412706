"""
LQS analytics engine: one computation per (agency, date range).

Flow:
1. select_mode() turns the optional date range into Pipeline or Activity mode.
2. Every collection the mode needs is fetched concurrently through the Paged
   Fetcher, together with the agency commission rate.
3. The materialized rows become a PipelineDataset or ActivityDataset.
4. analyze_dataset() runs the lead-source, bucket, producer, cross-tab,
   performance-trend and summary folds. It performs no I/O, so the same
   dataset (and reference day) always produces the same result.

Fail-fast: if any fetch fails the remaining fetches are cancelled, the whole
computation raises and no partial result is built. Collections that reached
the fetch ceiling are listed in truncatedCollections.

Fetched collections per mode:
    Pipeline: all households, quotes and sales; full spend ledger
    Activity: households with a lead received in range (client-side filter on
              lead_received_date or created_at), quotes by quote_date, sales
              by sale_date, spend by month (whole months)
    Both:     lead sources, marketing buckets, team members
"""

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, List, Optional

from funnel_analytics.core.config import Settings
from funnel_analytics.core.errors import RecordStoreError
from funnel_analytics.models.enums import AnalyticsMode, CrossTabDimension, RecordCollection
from funnel_analytics.models.schemas import (
    Household,
    LeadSource,
    LqsAnalyticsResult,
    MarketingBucket,
    Quote,
    Sale,
    SpendLedgerEntry,
    TeamMember,
)
from funnel_analytics.services.bucket_rollup import roll_up_buckets
from funnel_analytics.services.cross_tab import build_cross_tab
from funnel_analytics.services.datasets import (
    ActivityDataset,
    Dataset,
    PipelineDataset,
    ReferenceData,
)
from funnel_analytics.services.lead_source_aggregator import aggregate_lead_sources
from funnel_analytics.services.paged_fetcher import FetchResult, fetch_all
from funnel_analytics.services.performance_trend import build_performance_trend
from funnel_analytics.services.producer_aggregator import aggregate_producers
from funnel_analytics.services.record_store import RecordQuery, RecordStore
from funnel_analytics.services.summary import summarize
from funnel_analytics.services.temporal_mode import DateRange, select_mode

logger = logging.getLogger(__name__)

AGENCIES_COLLECTION = "agencies"


# =============================================================================
# Pure Analysis
# =============================================================================


def analyze_dataset(
    agency_id: str,
    dataset: Dataset,
    cross_tab_by: Optional[CrossTabDimension] = CrossTabDimension.LEAD_SOURCE,
    truncated_collections: Optional[List[str]] = None,
    today: Optional[date] = None,
) -> LqsAnalyticsResult:
    """
    Run every aggregation over an already-fetched dataset.

    Args:
        agency_id: Agency the dataset belongs to.
        dataset: PipelineDataset or ActivityDataset.
        cross_tab_by: Cross-tab column dimension; None skips the cross-tab.
        truncated_collections: Collections that hit the fetch ceiling.
        today: Last month of the Pipeline performance trend (default: today).

    Returns:
        LqsAnalyticsResult. Identical inputs always give an identical result.
    """
    rows = aggregate_lead_sources(dataset)
    date_range = dataset.date_range if isinstance(dataset, ActivityDataset) else None

    return LqsAnalyticsResult(
        agencyId=agency_id,
        startDate=date_range.start if date_range else None,
        endDate=date_range.end if date_range else None,
        summary=summarize(dataset, rows),
        byLeadSource=rows,
        byBucket=roll_up_buckets(rows, dataset.reference.commission_rate),
        producers=aggregate_producers(dataset),
        crossTab=build_cross_tab(dataset, cross_tab_by) if cross_tab_by is not None else None,
        performanceTrend=build_performance_trend(dataset, today),
        truncatedCollections=list(truncated_collections or []),
    )


# =============================================================================
# Fetching
# =============================================================================


async def _gather_fail_fast(*aws: Awaitable[Any]) -> List[Any]:
    """
    Await every fetch concurrently; on the first failure cancel the rest.

    Sibling tasks are cancelled and awaited before the error propagates, so no
    store request is issued after the computation has failed.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def resolve_commission_rate(store: RecordStore, agency_id: str, settings: Settings) -> float:
    """
    Read the agency commission rate, falling back to the configured default.

    Raises:
        RecordStoreError: If the store rejects the lookup.
    """
    try:
        rate = await store.fetch_commission_rate(agency_id)
    except Exception as e:
        logger.error(f"Failed to read commission rate for agency {agency_id}: {e}", exc_info=True)
        raise RecordStoreError(AGENCIES_COLLECTION, e) from e

    if rate is None:
        return settings.default_commission_rate
    if not 0 <= rate <= 100:
        logger.warning(
            f"Agency {agency_id} commission rate {rate} is outside 0-100; "
            f"using default {settings.default_commission_rate}"
        )
        return settings.default_commission_rate
    return rate


async def compute_lqs_analytics(
    store: RecordStore,
    agency_id: str,
    settings: Settings,
    date_range: Optional[DateRange] = None,
    cross_tab_by: Optional[CrossTabDimension] = CrossTabDimension.LEAD_SOURCE,
    today: Optional[date] = None,
) -> LqsAnalyticsResult:
    """
    Fetch an agency's records and compute the full LQS analytics result.

    Args:
        store: Record Store to read from.
        agency_id: Agency to analyze.
        settings: Fetch limits and the default commission rate.
        date_range: None for Pipeline mode, a DateRange for Activity mode.
        cross_tab_by: Cross-tab column dimension; None skips the cross-tab.
        today: Last month of the Pipeline performance trend (default: today).

    Returns:
        LqsAnalyticsResult for the agency and range.

    Raises:
        RecordStoreError: If any collection fetch fails.
        FetchCeilingExceededError: If a collection exceeds the ceiling and
            settings.fail_on_fetch_ceiling is set.
    """
    mode = select_mode(date_range)
    logger.info(f"Computing LQS analytics for agency {agency_id} in {mode.value} mode")

    def fetch(collection, model, query=None, row_filter=None):
        return fetch_all(
            store,
            collection,
            query or RecordQuery(agency_id=agency_id),
            model,
            page_size=settings.page_size,
            max_rows=settings.max_fetch_rows,
            row_filter=row_filter,
            fail_on_ceiling=settings.fail_on_fetch_ceiling,
        )

    if mode == AnalyticsMode.ACTIVITY:
        households_fetch = fetch(
            RecordCollection.HOUSEHOLDS, Household,
            row_filter=lambda h: date_range.contains(h.received_on),
        )
        quotes_fetch = fetch(
            RecordCollection.QUOTES, Quote,
            RecordQuery(agency_id, 'quote_date', date_range.start, date_range.end),
        )
        sales_fetch = fetch(
            RecordCollection.SALES, Sale,
            RecordQuery(agency_id, 'sale_date', date_range.start, date_range.end),
        )
        spend_fetch = fetch(
            RecordCollection.SPEND_LEDGER, SpendLedgerEntry,
            RecordQuery(agency_id, 'month', date_range.spend_start, date_range.spend_end),
        )
    else:
        households_fetch = fetch(RecordCollection.HOUSEHOLDS, Household)
        quotes_fetch = fetch(RecordCollection.QUOTES, Quote)
        sales_fetch = fetch(RecordCollection.SALES, Sale)
        spend_fetch = fetch(RecordCollection.SPEND_LEDGER, SpendLedgerEntry)

    households, quotes, sales, spend, lead_sources, buckets, team_members, commission_rate = (
        await _gather_fail_fast(
            households_fetch,
            quotes_fetch,
            sales_fetch,
            spend_fetch,
            fetch(RecordCollection.LEAD_SOURCES, LeadSource),
            fetch(RecordCollection.MARKETING_BUCKETS, MarketingBucket),
            fetch(RecordCollection.TEAM_MEMBERS, TeamMember),
            resolve_commission_rate(store, agency_id, settings),
        )
    )

    fetched: List[FetchResult] = [households, quotes, sales, spend, lead_sources, buckets, team_members]
    truncated = [result.collection.value for result in fetched if result.truncated]

    reference = ReferenceData(
        commission_rate=commission_rate,
        lead_sources=tuple(lead_sources.rows),
        buckets=tuple(buckets.rows),
        team_members=tuple(team_members.rows),
        spend=tuple(spend.rows),
    )

    if mode == AnalyticsMode.ACTIVITY:
        dataset: Dataset = ActivityDataset(
            reference=reference,
            date_range=date_range,
            leads=tuple(households.rows),
            quotes=tuple(quotes.rows),
            sales=tuple(sales.rows),
        )
    else:
        dataset = PipelineDataset(
            reference=reference,
            households=tuple(households.rows),
            quotes=tuple(quotes.rows),
            sales=tuple(sales.rows),
        )

    result = analyze_dataset(agency_id, dataset, cross_tab_by, truncated, today)

    logger.info(
        f"LQS analytics for agency {agency_id} ({mode.value}): "
        f"{len(result.byLeadSource)} lead sources, "
        f"{len(result.producers.byQuotedBy)} quoting producers, "
        f"{len(result.producers.bySoldBy)} selling producers"
        + (f", truncated: {', '.join(truncated)}" if truncated else "")
    )
    return result

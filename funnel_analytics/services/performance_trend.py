"""
Monthly performance trend per marketing bucket.

Buckets the already-fetched dataset rows by calendar month and by the
marketing bucket of their lead source:

    leads    -> month of received_on (lead_received_date, else created_at)
    quotes   -> month of quote_date; unique quoted households per month
    sales    -> month of sale_date; unique sold households and premium
    spend    -> ledger month

Months covered:
    Pipeline: the TREND_MONTHS calendar months ending at the month of `today`
    Activity: the months of the window, keeping only the last TREND_MONTHS

An "All Sources" series (bucketId "__all__") pools every bucket and always
comes first; the other series sort by bucket name. A bucket series exists
only once some row lands in one of the covered months. Lead sources without
a bucket (and unattributed rows) fall into "Unassigned"; a bucket id with no
bucket row is "Unknown".

Each month reports roi (commission / spend, None without spend) and closeRate
(sold / quoted households * 100, None without quotes). The two household sets
are counted independently, so closeRate can exceed 100 in a month where
earlier quotes close.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from funnel_analytics.models.schemas import BucketTrendData, MonthlyPerformanceData
from funnel_analytics.services.datasets import (
    UNASSIGNED,
    UNKNOWN,
    ActivityDataset,
    Dataset,
    ReferenceData,
)
from funnel_analytics.services.metrics import close_ratio, commission_cents, roi

TREND_MONTHS = 12
ALL_SOURCES_ID = "__all__"
ALL_SOURCES = "All Sources"


@dataclass
class _MonthTotals:
    leads: int = 0
    quoted_households: Set[str] = field(default_factory=set)
    sold_households: Set[str] = field(default_factory=set)
    premium_cents: int = 0
    spend_cents: int = 0


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def trend_months(end: date, start: Optional[date] = None, count: int = TREND_MONTHS) -> List[str]:
    """
    Month keys ending at the month of `end`, oldest first.

    At most `count` months are returned, and none before the month of
    `start` when it is given.
    """
    months: List[str] = []
    year, month = end.year, end.month
    floor = (start.year, start.month) if start is not None else None

    while len(months) < count and (floor is None or (year, month) >= floor):
        months.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12

    return list(reversed(months))


def _month_label(key: str) -> str:
    year, month = key.split('-')
    return date(int(year), int(month), 1).strftime('%b %Y')


class _TrendAccumulator:
    """Per-bucket month totals over a fixed list of months."""

    def __init__(self, months: List[str], reference: ReferenceData):
        self.months = months
        self._covered = set(months)
        self.reference = reference
        self.series: Dict[Optional[str], Dict[str, _MonthTotals]] = {}

    def _bucket_of(self, lead_source_id: Optional[str]) -> Optional[str]:
        if lead_source_id is None:
            return None
        return self.reference.source_buckets.get(lead_source_id)

    def totals_for(self, lead_source_id: Optional[str], day: Optional[date]) -> List[_MonthTotals]:
        """The bucket and All Sources totals a dated row lands in; empty when out of range."""
        if day is None:
            return []
        key = month_key(day)
        if key not in self._covered:
            return []

        found = []
        for bucket_id in (ALL_SOURCES_ID, self._bucket_of(lead_source_id)):
            if bucket_id not in self.series:
                self.series[bucket_id] = {m: _MonthTotals() for m in self.months}
            found.append(self.series[bucket_id][key])
        return found

    def bucket_name(self, bucket_id: Optional[str]) -> str:
        if bucket_id == ALL_SOURCES_ID:
            return ALL_SOURCES
        if bucket_id is None:
            return UNASSIGNED
        return self.reference.bucket_names.get(bucket_id, UNKNOWN)


def _leads_of(dataset: Dataset) -> Iterable:
    if isinstance(dataset, ActivityDataset):
        return dataset.leads
    return dataset.households


def build_performance_trend(dataset: Dataset, today: Optional[date] = None) -> List[BucketTrendData]:
    """
    Build the monthly trend series for a dataset.

    Args:
        dataset: PipelineDataset or ActivityDataset.
        today: Last month of the Pipeline trend (default: date.today()).
            Activity trends end at the window end instead.

    Returns:
        BucketTrendData list, "All Sources" first; empty when no row lands in
        a covered month.
    """
    if isinstance(dataset, ActivityDataset):
        months = trend_months(dataset.date_range.end, start=dataset.date_range.start)
    else:
        months = trend_months(today or date.today())

    reference = dataset.reference
    acc = _TrendAccumulator(months, reference)

    for household in _leads_of(dataset):
        for totals in acc.totals_for(household.lead_source_id, household.received_on):
            totals.leads += 1

    for quote in dataset.quotes:
        for totals in acc.totals_for(quote.lead_source_id, quote.quote_date):
            totals.quoted_households.add(quote.household_id)

    for sale in dataset.sales:
        for totals in acc.totals_for(sale.lead_source_id, sale.sale_date):
            totals.sold_households.add(sale.household_id)
            totals.premium_cents += sale.premium

    for entry in reference.spend:
        for totals in acc.totals_for(entry.lead_source_id, entry.month):
            totals.spend_cents += entry.spend_cents or 0

    trend = []
    for bucket_id, by_month in acc.series.items():
        monthly_data = []
        for key in months:
            totals = by_month[key]
            quoted = len(totals.quoted_households)
            sold = len(totals.sold_households)
            commission = commission_cents(totals.premium_cents, reference.commission_rate)
            monthly_data.append(MonthlyPerformanceData(
                month=key,
                monthLabel=_month_label(key),
                leadsReceived=totals.leads,
                quotedHouseholds=quoted,
                soldHouseholds=sold,
                premiumCents=totals.premium_cents,
                spendCents=totals.spend_cents,
                roi=roi(commission, totals.spend_cents),
                closeRate=close_ratio(sold, quoted),
            ))
        trend.append(BucketTrendData(
            bucketId=bucket_id,
            bucketName=acc.bucket_name(bucket_id),
            monthlyData=monthly_data,
        ))

    trend.sort(key=lambda t: (t.bucketId != ALL_SOURCES_ID, t.bucketName.lower(), t.bucketId or ""))
    return trend

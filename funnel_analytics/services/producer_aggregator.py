"""
Producer (team member) performance under two attribution views.

Both views read the same quote and sale rows but answer different questions,
and their close ratios are intentionally NOT the same formula:

Quoted By (grouped by quote.team_member_id)
    "Of the households this producer quoted, how many were sold by anyone?"
    closeRatio = |quoted by producer ∩ sold by anyone| / |quoted by producer| * 100
    Bundle ratio covers the producer's quoted households that were sold, using
    product types from every sale of those households. Sold-side policy, item
    and premium fields stay zero; crediting closed premium to the quoter
    would double count it against the Sold By view.

Sold By (grouped by sale.team_member_id)
    "Of all households quoted by anyone, what share did this producer close?"
    closeRatio = |sold by producer| / |quoted by anyone| * 100
    Bundle ratio comes from the producer's own sales. Quoted-side fields stay
    zero.

A producer who only quoted has no Sold By row, and vice versa. A null
team_member_id is its own "Unassigned" producer.

Quoted By rows sort by quoted households descending; Sold By rows by sold
premium descending. Ties keep first-seen order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from funnel_analytics.models.schemas import (
    ProducerBreakdown,
    ProducerMetrics,
    ProducerTotals,
    Quote,
    Sale,
)
from funnel_analytics.services.datasets import Dataset, ReferenceData
from funnel_analytics.services.metrics import bundle_ratio, close_ratio, count_bundled

logger = logging.getLogger(__name__)


@dataclass
class ProducerAccumulator:
    """Running totals for one producer within one view."""
    first_seen: int
    household_ids: Set[str] = field(default_factory=set)
    policies: int = 0
    items: int = 0
    premium_cents: int = 0
    product_types_per_household: Dict[str, Set[str]] = field(default_factory=dict)


def _accumulator(
    groups: Dict[Optional[str], ProducerAccumulator],
    team_member_id: Optional[str],
) -> ProducerAccumulator:
    acc = groups.get(team_member_id)
    if acc is None:
        acc = ProducerAccumulator(first_seen=len(groups))
        groups[team_member_id] = acc
    return acc


def product_types_by_household(sales: Iterable[Sale]) -> Dict[str, Set[str]]:
    """Distinct product types per household across every sale row."""
    product_types: Dict[str, Set[str]] = {}
    for sale in sales:
        types = product_types.setdefault(sale.household_id, set())
        if sale.product_type:
            types.add(sale.product_type)
    return product_types


# =============================================================================
# Quoted By
# =============================================================================


def aggregate_quoted_by(
    quotes: Iterable[Quote],
    sales: Iterable[Sale],
    reference: ReferenceData,
) -> List[ProducerMetrics]:
    """Build Quoted By rows: quote credit to the quoter, close credit to anyone."""
    sales = list(sales)
    sold_household_ids = {sale.household_id for sale in sales}
    global_product_types = product_types_by_household(sales)

    groups: Dict[Optional[str], ProducerAccumulator] = {}
    for quote in quotes:
        acc = _accumulator(groups, quote.team_member_id)
        acc.household_ids.add(quote.household_id)
        acc.policies += 1
        acc.items += quote.items
        acc.premium_cents += quote.premium

    ordered = sorted(groups.items(), key=lambda item: (-len(item[1].household_ids), item[1].first_seen))

    rows = []
    for team_member_id, acc in ordered:
        quoted_that_sold = acc.household_ids & sold_household_ids
        bundled = count_bundled(global_product_types, quoted_that_sold)
        rows.append(ProducerMetrics(
            teamMemberId=team_member_id,
            teamMemberName=reference.member_name(team_member_id),
            quotedHouseholds=len(acc.household_ids),
            quotedPolicies=acc.policies,
            quotedItems=acc.items,
            quotedPremiumCents=acc.premium_cents,
            soldHouseholds=len(quoted_that_sold),
            closeRatio=close_ratio(len(quoted_that_sold), len(acc.household_ids)),
            bundleRatio=bundle_ratio(bundled, len(quoted_that_sold)),
        ))
    return rows


# =============================================================================
# Sold By
# =============================================================================


def aggregate_sold_by(
    quotes: Iterable[Quote],
    sales: Iterable[Sale],
    reference: ReferenceData,
) -> List[ProducerMetrics]:
    """Build Sold By rows: close credit to the closer, measured against all quoted households."""
    global_quoted = len({quote.household_id for quote in quotes})

    groups: Dict[Optional[str], ProducerAccumulator] = {}
    for sale in sales:
        acc = _accumulator(groups, sale.team_member_id)
        acc.household_ids.add(sale.household_id)
        acc.policies += sale.policies
        acc.items += sale.items
        acc.premium_cents += sale.premium
        types = acc.product_types_per_household.setdefault(sale.household_id, set())
        if sale.product_type:
            types.add(sale.product_type)

    ordered = sorted(groups.items(), key=lambda item: (-item[1].premium_cents, item[1].first_seen))

    rows = []
    for team_member_id, acc in ordered:
        sold = len(acc.household_ids)
        rows.append(ProducerMetrics(
            teamMemberId=team_member_id,
            teamMemberName=reference.member_name(team_member_id),
            soldHouseholds=sold,
            soldPolicies=acc.policies,
            soldItems=acc.items,
            soldPremiumCents=acc.premium_cents,
            closeRatio=close_ratio(sold, global_quoted),
            bundleRatio=bundle_ratio(count_bundled(acc.product_types_per_household), sold),
        ))
    return rows


# =============================================================================
# Totals
# =============================================================================


def producer_totals(quotes: Iterable[Quote], sales: Iterable[Sale]) -> ProducerTotals:
    """Totals over every quote and sale row, whoever the producer."""
    quotes = list(quotes)
    sales = list(sales)
    return ProducerTotals(
        quotedHouseholds=len({q.household_id for q in quotes}),
        quotedPolicies=len(quotes),
        quotedItems=sum(q.items for q in quotes),
        quotedPremiumCents=sum(q.premium for q in quotes),
        soldHouseholds=len({s.household_id for s in sales}),
        soldPolicies=sum(s.policies for s in sales),
        soldItems=sum(s.items for s in sales),
        soldPremiumCents=sum(s.premium for s in sales),
    )


def aggregate_producers(dataset: Dataset) -> ProducerBreakdown:
    """
    Build both producer views for a dataset.

    The views are independent folds over the dataset's quote and sale rows.
    In Pipeline mode those rows are all-time; in Activity mode they are the
    rows dated inside the window, so a close counted in a window may belong to
    a quote from outside it.
    """
    breakdown = ProducerBreakdown(
        byQuotedBy=aggregate_quoted_by(dataset.quotes, dataset.sales, dataset.reference),
        bySoldBy=aggregate_sold_by(dataset.quotes, dataset.sales, dataset.reference),
        totals=producer_totals(dataset.quotes, dataset.sales),
    )
    logger.debug(
        f"Aggregated producers: {len(breakdown.byQuotedBy)} quoted-by, "
        f"{len(breakdown.bySoldBy)} sold-by ({dataset.mode.value} mode)"
    )
    return breakdown

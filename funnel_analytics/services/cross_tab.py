"""
Producer x lead-source (or bucket) cross-tab.

Rows are producers (quote / sale team_member_id), columns are lead sources or
marketing buckets. Each cell holds unique quoted households, unique sold
households and sold premium, plus a null-safe close rate. Producer credit
follows the row: quotes credit the quoter, sales the closer.

Columns come from the households in the dataset and the lead sources on its
quote and sale rows, in lead-source order (or bucket order_index order).
Households without a lead source, or whose source has no bucket, fall into the
"__unassigned__" column, which is always last.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from funnel_analytics.models.enums import CrossTabDimension
from funnel_analytics.models.schemas import (
    CrossTabCell,
    CrossTabColumn,
    CrossTabRow,
    ProducerSourceCrossTab,
)
from funnel_analytics.services.datasets import (
    UNASSIGNED,
    UNKNOWN,
    Dataset,
    PipelineDataset,
    ReferenceData,
)
from funnel_analytics.services.metrics import close_ratio

UNASSIGNED_COLUMN_ID = "__unassigned__"


@dataclass
class _CellTotals:
    quoted_household_ids: Set[str] = field(default_factory=set)
    sold_household_ids: Set[str] = field(default_factory=set)
    premium_cents: int = 0


def _cell(quoted: int, sold: int, premium_cents: int) -> CrossTabCell:
    return CrossTabCell(
        quotedHH=quoted,
        soldHH=sold,
        premiumCents=premium_cents,
        closeRate=close_ratio(sold, quoted),
    )


def _sum_cells(cells: List[CrossTabCell]) -> CrossTabCell:
    return _cell(
        sum(c.quotedHH for c in cells),
        sum(c.soldHH for c in cells),
        sum(c.premiumCents for c in cells),
    )


def column_id(
    lead_source_id: Optional[str],
    dimension: CrossTabDimension,
    reference: ReferenceData,
) -> str:
    """Map a lead source id to its cross-tab column id."""
    if lead_source_id is None:
        return UNASSIGNED_COLUMN_ID
    if dimension == CrossTabDimension.BUCKET:
        bucket_id, _ = reference.bucket_for(lead_source_id)
        return bucket_id or UNASSIGNED_COLUMN_ID
    return lead_source_id


def _ordered_columns(
    seen: Set[str],
    dimension: CrossTabDimension,
    reference: ReferenceData,
) -> List[CrossTabColumn]:
    if dimension == CrossTabDimension.BUCKET:
        known: List[Tuple[str, str]] = [(b.id, b.name) for b in reference.buckets]
    else:
        known = [(ls.id, ls.name) for ls in reference.lead_sources]

    columns = [CrossTabColumn(id=cid, name=name) for cid, name in known if cid in seen]
    known_ids = {cid for cid, _ in known}
    # ids referenced by rows but missing from the lookup collection
    for cid in sorted(seen - known_ids - {UNASSIGNED_COLUMN_ID}):
        columns.append(CrossTabColumn(id=cid, name=UNKNOWN))
    if UNASSIGNED_COLUMN_ID in seen:
        columns.append(CrossTabColumn(id=UNASSIGNED_COLUMN_ID, name=UNASSIGNED))
    return columns


def build_cross_tab(
    dataset: Dataset,
    dimension: CrossTabDimension = CrossTabDimension.LEAD_SOURCE,
) -> ProducerSourceCrossTab:
    """
    Build the producer cross-tab for a dataset.

    Args:
        dataset: PipelineDataset or ActivityDataset.
        dimension: Column dimension, lead source or bucket.

    Returns:
        ProducerSourceCrossTab with rows sorted by total premium descending.
    """
    reference = dataset.reference
    households = dataset.households if isinstance(dataset, PipelineDataset) else dataset.leads

    seen: Set[str] = {column_id(h.lead_source_id, dimension, reference) for h in households}
    matrix: Dict[Optional[str], Dict[str, _CellTotals]] = {}

    def totals_for(team_member_id: Optional[str], col: str) -> _CellTotals:
        seen.add(col)
        return matrix.setdefault(team_member_id, {}).setdefault(col, _CellTotals())

    for quote in dataset.quotes:
        col = column_id(quote.lead_source_id, dimension, reference)
        totals_for(quote.team_member_id, col).quoted_household_ids.add(quote.household_id)

    for sale in dataset.sales:
        col = column_id(sale.lead_source_id, dimension, reference)
        totals = totals_for(sale.team_member_id, col)
        totals.sold_household_ids.add(sale.household_id)
        totals.premium_cents += sale.premium

    columns = _ordered_columns(seen, dimension, reference)

    rows = []
    for team_member_id, row_totals in matrix.items():
        cells = {
            col: _cell(len(t.quoted_household_ids), len(t.sold_household_ids), t.premium_cents)
            for col, t in row_totals.items()
        }
        rows.append(CrossTabRow(
            teamMemberId=team_member_id,
            producerName=reference.member_name(team_member_id),
            cells=cells,
            total=_sum_cells(list(cells.values())),
        ))
    rows.sort(key=lambda row: -row.total.premiumCents)

    column_totals = {
        col.id: _sum_cells([row.cells[col.id] for row in rows if col.id in row.cells])
        for col in columns
    }

    return ProducerSourceCrossTab(
        dimension=dimension,
        columns=columns,
        rows=rows,
        columnTotals=column_totals,
        grandTotal=_sum_cells([row.total for row in rows]),
    )

"""
Pydantic models for the funnel analytics backend.

Two families of models live here:

- Record models (snake_case) mirror Record Store rows: Household, Quote, Sale,
  LeadSource, MarketingBucket, SpendLedgerEntry, TeamMember. They are built
  from raw rows with `Model.model_validate(row)` and never mutated.
- Metric models (camelCase) are the API contract consumed by the presentation
  and export layers: LeadSourceRoiRow, BucketRoiRow, ProducerMetrics,
  ProducerBreakdown, ProducerSourceCrossTab, MonthlyPerformanceData /
  BucketTrendData, PipelineSummary / ActivitySummary and the
  LqsAnalyticsResult envelope.

All monetary fields are integer cents. Ratio fields are percentages or None.
ROI is a plain multiple (commission / spend), also None when undefined.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType, datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from funnel_analytics.models.enums import AnalyticsMode, CrossTabDimension, HouseholdStatus


# =============================================================================
# Record Models (Record Store rows)
# =============================================================================


class Household(BaseModel):
    """
    A prospective or existing customer; the aggregation root for quotes and sales.

    Source: lqs_households table
    """
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    status: Optional[str] = None
    lead_source_id: Optional[str] = None
    created_at: datetime
    lead_received_date: Optional[DateType] = None

    @property
    def received_on(self) -> DateType:
        """Day the lead arrived, falling back to the row creation day."""
        return self.lead_received_date or self.created_at.date()

    def has_status(self, *statuses: HouseholdStatus) -> bool:
        return self.status in {s.value for s in statuses}


class Quote(BaseModel):
    """
    One quoted policy; a quote row counts as one quoted policy.

    Source: lqs_quotes joined to lqs_households for the household lead source.
    """
    model_config = ConfigDict(frozen=True, extra='ignore')

    household_id: str
    team_member_id: Optional[str] = None
    items_quoted: Optional[int] = None
    premium_cents: Optional[int] = None
    product_type: Optional[str] = None
    quote_date: Optional[DateType] = None
    # Lead source of the owning household, not of the quote itself
    lead_source_id: Optional[str] = None

    @property
    def items(self) -> int:
        # null or zero means one item
        return self.items_quoted or 1

    @property
    def premium(self) -> int:
        return self.premium_cents or 0


class Sale(BaseModel):
    """
    One closed sale row.

    Source: lqs_sales joined to lqs_households for the household lead source.
    """
    model_config = ConfigDict(frozen=True, extra='ignore')

    household_id: str
    team_member_id: Optional[str] = None
    items_sold: Optional[int] = None
    policies_sold: Optional[int] = None
    premium_cents: Optional[int] = None
    product_type: Optional[str] = None
    sale_date: Optional[DateType] = None
    lead_source_id: Optional[str] = None

    @property
    def items(self) -> int:
        return self.items_sold or 1

    @property
    def policies(self) -> int:
        return self.policies_sold or 1

    @property
    def premium(self) -> int:
        return self.premium_cents or 0


class LeadSource(BaseModel):
    """Marketing channel a household was acquired through."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    name: str
    bucket_id: Optional[str] = None


class MarketingBucket(BaseModel):
    """Parent grouping of lead sources."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    name: str
    order_index: Optional[int] = None


class SpendLedgerEntry(BaseModel):
    """
    Monthly marketing spend for one lead source.

    A null lead_source_id is spend that cannot be attributed to any source.
    """
    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

    lead_source_id: Optional[str] = None
    month: DateType
    spend_cents: Optional[int] = Field(default=None, alias='total_spend_cents')


class TeamMember(BaseModel):
    """Producer name lookup."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: str
    name: str


# =============================================================================
# Lead Source ROI
# =============================================================================


class LeadSourceRoiRow(BaseModel):
    """
    ROI and funnel metrics for one lead source (or the Unattributed group).

    Households are always de-duplicated by id (totalQuotes / totalSales), while
    policy and item counts are summed per quote / sale row.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "leadSourceId": "ls-fb",
                "leadSourceName": "FB Ads",
                "bucketId": "b-paid",
                "bucketName": "Paid Social",
                "spendCents": 50000,
                "totalLeads": 10,
                "totalQuotes": 6,
                "totalSales": 3,
                "premiumCents": 900000,
                "commissionEarned": 180000,
                "roi": 3.6,
                "costPerSale": 16667,
                "quoteRate": 60.0,
                "closeRatio": 50.0,
            }
        }
    )

    leadSourceId: Optional[str] = Field(default=None, description="None for the Unattributed group")
    leadSourceName: str
    bucketId: Optional[str] = None
    bucketName: Optional[str] = None
    spendCents: int = 0
    totalLeads: int = 0
    totalQuotes: int = Field(default=0, description="Unique quoted households")
    totalSales: int = Field(default=0, description="Unique sold households")
    premiumCents: int = 0
    commissionEarned: int = Field(default=0, description="Premium x commission rate, in cents")
    roi: Optional[float] = Field(default=None, description="Commission / spend; None without spend")
    costPerSale: Optional[int] = None
    quotedPolicies: int = Field(default=0, description="Count of quote rows")
    quotedItems: int = 0
    writtenPolicies: int = 0
    writtenItems: int = 0
    bundledHouseholds: int = 0
    costPerQuotedHousehold: Optional[int] = None
    costPerQuotedPolicy: Optional[int] = None
    costPerQuotedItem: Optional[int] = None
    householdAcqCost: Optional[int] = None
    policyAcqCost: Optional[int] = None
    itemAcqCost: Optional[int] = None
    quoteRate: Optional[float] = Field(default=None, description="Quoted households / leads * 100")
    closeRatio: Optional[float] = Field(default=None, description="Sold households / quoted households * 100")
    bundleRatio: Optional[float] = Field(default=None, description="% of sold households with 2+ product types")


class BucketRoiRow(BaseModel):
    """Lead-source rows rolled up to their marketing bucket."""
    model_config = ConfigDict(frozen=True)

    bucketId: Optional[str] = None
    bucketName: str
    leadSourceIds: List[Optional[str]] = Field(default_factory=list)
    spendCents: int = 0
    totalLeads: int = 0
    quotedHouseholds: int = 0
    quotedPolicies: int = 0
    quotedItems: int = 0
    writtenHouseholds: int = 0
    writtenPolicies: int = 0
    writtenItems: int = 0
    premiumCents: int = 0
    commissionEarned: int = 0
    roi: Optional[float] = None
    closeRatio: Optional[float] = None
    costPerQuotedHousehold: Optional[int] = None
    costPerQuotedPolicy: Optional[int] = None
    costPerQuotedItem: Optional[int] = None
    householdAcqCost: Optional[int] = None
    policyAcqCost: Optional[int] = None
    itemAcqCost: Optional[int] = None


# =============================================================================
# Producer Breakdown
# =============================================================================


class ProducerMetrics(BaseModel):
    """
    Per-producer metrics under one attribution view.

    In the Quoted By view the sold-side policy, item and premium fields are
    always zero; soldHouseholds counts this producer's quoted households that
    were sold by anyone. In the Sold By view the quoted-side fields are zero.
    """
    model_config = ConfigDict(frozen=True)

    teamMemberId: Optional[str] = None
    teamMemberName: str
    quotedHouseholds: int = 0
    quotedPolicies: int = 0
    quotedItems: int = 0
    quotedPremiumCents: int = 0
    soldHouseholds: int = 0
    soldPolicies: int = 0
    soldItems: int = 0
    soldPremiumCents: int = 0
    closeRatio: Optional[float] = None
    bundleRatio: Optional[float] = None


class ProducerTotals(BaseModel):
    """Totals across all quote and sale rows regardless of producer."""
    model_config = ConfigDict(frozen=True)

    quotedHouseholds: int = 0
    quotedPolicies: int = 0
    quotedItems: int = 0
    quotedPremiumCents: int = 0
    soldHouseholds: int = 0
    soldPolicies: int = 0
    soldItems: int = 0
    soldPremiumCents: int = 0


class ProducerBreakdown(BaseModel):
    """Quoted By and Sold By producer views plus their shared totals."""
    model_config = ConfigDict(frozen=True)

    byQuotedBy: List[ProducerMetrics] = Field(default_factory=list)
    bySoldBy: List[ProducerMetrics] = Field(default_factory=list)
    totals: ProducerTotals = Field(default_factory=ProducerTotals)


# =============================================================================
# Producer x Lead Source Cross-Tab
# =============================================================================


class CrossTabCell(BaseModel):
    """Unique quoted / sold households and sold premium for one producer and column."""
    model_config = ConfigDict(frozen=True)

    quotedHH: int = 0
    soldHH: int = 0
    premiumCents: int = 0
    closeRate: Optional[float] = None


class CrossTabColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class CrossTabRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    teamMemberId: Optional[str] = None
    producerName: str
    cells: Dict[str, CrossTabCell] = Field(default_factory=dict)
    total: CrossTabCell = Field(default_factory=CrossTabCell)


class ProducerSourceCrossTab(BaseModel):
    model_config = ConfigDict(frozen=True)

    dimension: CrossTabDimension
    columns: List[CrossTabColumn] = Field(default_factory=list)
    rows: List[CrossTabRow] = Field(default_factory=list)
    columnTotals: Dict[str, CrossTabCell] = Field(default_factory=dict)
    grandTotal: CrossTabCell = Field(default_factory=CrossTabCell)


# =============================================================================
# Performance Trend
# =============================================================================


class MonthlyPerformanceData(BaseModel):
    """One calendar month of funnel activity for a bucket (or all sources)."""
    model_config = ConfigDict(frozen=True)

    month: str = Field(..., description="Calendar month as YYYY-MM")
    monthLabel: str = Field(..., description="Display label, e.g. 'Mar 2026'")
    leadsReceived: int = 0
    quotedHouseholds: int = 0
    soldHouseholds: int = 0
    premiumCents: int = 0
    spendCents: int = 0
    roi: Optional[float] = None
    closeRate: Optional[float] = None


class BucketTrendData(BaseModel):
    """Month-by-month series for one marketing bucket, oldest month first."""
    model_config = ConfigDict(frozen=True)

    bucketId: Optional[str] = None
    bucketName: str
    monthlyData: List[MonthlyPerformanceData] = Field(default_factory=list)


# =============================================================================
# Summary (discriminated by mode)
# =============================================================================


class SummaryBase(BaseModel):
    """Fields shared by both summary modes."""
    model_config = ConfigDict(frozen=True)

    premiumSoldCents: int = 0
    commissionEarned: int = 0
    commissionRate: float = 22.0
    totalSpendCents: int = 0
    overallRoi: Optional[float] = None
    totalLeads: int = 0
    totalQuoted: int = 0
    totalSold: int = 0
    totalQuotedPolicies: int = 0
    totalQuotedItems: int = 0
    totalWrittenPolicies: int = 0
    totalWrittenItems: int = 0
    bundleRatio: Optional[float] = None


class PipelineSummary(SummaryBase):
    """
    Status snapshot over all time.

    openLeads / quotedHouseholds / soldHouseholds count households by their
    exact current status; totalQuoted counts quoted-or-sold households.
    """
    mode: Literal[AnalyticsMode.PIPELINE] = AnalyticsMode.PIPELINE
    openLeads: int = 0
    quotedHouseholds: int = 0
    soldHouseholds: int = 0
    quoteRate: Optional[float] = None
    closeRate: Optional[float] = None


class ActivitySummary(SummaryBase):
    """
    Event counts inside a date window.

    quoteRate and closeRate are always None: leads, quotes and sales in one
    window are not guaranteed to belong to the same households.
    """
    mode: Literal[AnalyticsMode.ACTIVITY] = AnalyticsMode.ACTIVITY
    leadsReceived: int = 0
    quotesCreated: int = 0
    salesClosed: int = 0
    quoteRate: None = None
    closeRate: None = None


Summary = Annotated[Union[PipelineSummary, ActivitySummary], Field(discriminator='mode')]


# =============================================================================
# Result Envelope
# =============================================================================


class LqsAnalyticsResult(BaseModel):
    """Everything one analytics computation produces for an agency and date range."""
    model_config = ConfigDict(frozen=True)

    agencyId: str
    startDate: Optional[DateType] = None
    endDate: Optional[DateType] = None
    summary: Summary
    byLeadSource: List[LeadSourceRoiRow] = Field(default_factory=list)
    byBucket: List[BucketRoiRow] = Field(default_factory=list)
    producers: ProducerBreakdown = Field(default_factory=ProducerBreakdown)
    crossTab: Optional[ProducerSourceCrossTab] = None
    performanceTrend: List[BucketTrendData] = Field(default_factory=list)
    truncatedCollections: List[str] = Field(
        default_factory=list,
        description="Collections that reached the fetch ceiling; their metrics are incomplete",
    )

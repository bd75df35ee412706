"""
Producer Aggregator Test Module

The Quoted By and Sold By close ratios answer different questions and must
stay different. These tests pin both formulas.
"""

import pytest

from funnel_analytics.services.producer_aggregator import (
    aggregate_producers,
    aggregate_quoted_by,
    aggregate_sold_by,
    producer_totals,
)
from funnel_analytics.models.schemas import Quote, Sale
from funnel_analytics.tests.conftest import (
    MARCH_2026,
    make_activity,
    make_reference,
    quote_row,
    sale_row,
    team_member_row,
)


def _quotes(*rows):
    return [Quote.model_validate(r) for r in rows]


def _sales(*rows):
    return [Sale.model_validate(r) for r in rows]


@pytest.fixture
def reference():
    return make_reference(team_members=[
        team_member_row("tm-a", "Alex"),
        team_member_row("tm-b", "Blair"),
    ])


def _by_id(rows, team_member_id):
    return next((r for r in rows if r.teamMemberId == team_member_id), None)


class TestAttributionAsymmetry:
    """Producer A quotes household H; producer B closes it."""

    @pytest.fixture
    def rows(self):
        quotes = _quotes(quote_row("hh-h", team_member_id="tm-a", premium_cents=150000))
        sales = _sales(sale_row("hh-h", team_member_id="tm-b", premium_cents=120000))
        return quotes, sales

    def test_quoted_by_credits_close_to_quoter(self, rows, reference):
        quotes, sales = rows

        alex = _by_id(aggregate_quoted_by(quotes, sales, reference), "tm-a")

        assert alex.teamMemberName == "Alex"
        assert alex.quotedHouseholds == 1
        assert alex.quotedPremiumCents == 150000
        assert alex.soldHouseholds == 1
        assert alex.closeRatio == pytest.approx(100.0)
        # sold-side fields are never credited to the quoter
        assert alex.soldPolicies == 0
        assert alex.soldItems == 0
        assert alex.soldPremiumCents == 0

    def test_sold_by_credits_premium_to_closer(self, rows, reference):
        quotes, sales = rows

        sold_by = aggregate_sold_by(quotes, sales, reference)
        blair = _by_id(sold_by, "tm-b")

        assert blair.soldHouseholds == 1
        assert blair.soldPremiumCents == 120000
        assert blair.soldPolicies == 1
        assert blair.quotedHouseholds == 0
        assert blair.quotedPremiumCents == 0
        assert _by_id(sold_by, "tm-a") is None


class TestCloseRatioFormulas:
    """Quoted By divides by the producer's quotes; Sold By by all quoted households."""

    @pytest.fixture
    def rows(self):
        quotes = _quotes(
            quote_row("hh-1", team_member_id="tm-a"),
            quote_row("hh-2", team_member_id="tm-a"),
            quote_row("hh-2", team_member_id="tm-a"),
            quote_row("hh-3", team_member_id="tm-b"),
            quote_row("hh-4", team_member_id="tm-b"),
        )
        sales = _sales(
            sale_row("hh-1", team_member_id="tm-b", premium_cents=1000),
            sale_row("hh-3", team_member_id="tm-b", premium_cents=2000),
            sale_row("hh-9", team_member_id="tm-a", premium_cents=500),
        )
        return quotes, sales

    def test_quoted_by(self, rows, reference):
        quotes, sales = rows

        result = aggregate_quoted_by(quotes, sales, reference)
        alex, blair = _by_id(result, "tm-a"), _by_id(result, "tm-b")

        assert alex.quotedHouseholds == 2
        assert alex.quotedPolicies == 3
        assert alex.soldHouseholds == 1
        assert alex.closeRatio == pytest.approx(50.0)
        assert blair.soldHouseholds == 1
        assert blair.closeRatio == pytest.approx(50.0)

    def test_sold_by(self, rows, reference):
        quotes, sales = rows

        result = aggregate_sold_by(quotes, sales, reference)
        alex, blair = _by_id(result, "tm-a"), _by_id(result, "tm-b")

        # 4 unique quoted households across all producers
        assert blair.soldHouseholds == 2
        assert blair.closeRatio == pytest.approx(50.0)
        # a sale with no matching quote still counts against the global denominator
        assert alex.soldHouseholds == 1
        assert alex.closeRatio == pytest.approx(25.0)

    def test_sold_by_without_quotes_is_null(self, reference):
        result = aggregate_sold_by([], _sales(sale_row("hh-1", team_member_id="tm-a")), reference)

        assert result[0].closeRatio is None


class TestProducerBundles:
    """Bundle ratios per view."""

    def test_quoted_by_uses_everyones_sales(self, reference):
        quotes = _quotes(quote_row("hh-1", team_member_id="tm-a"), quote_row("hh-2", team_member_id="tm-a"))
        sales = _sales(
            sale_row("hh-1", team_member_id="tm-a", product_type="auto"),
            sale_row("hh-1", team_member_id="tm-b", product_type="home"),
            sale_row("hh-2", team_member_id="tm-b", product_type="auto"),
        )

        alex = _by_id(aggregate_quoted_by(quotes, sales, reference), "tm-a")

        assert alex.soldHouseholds == 2
        assert alex.bundleRatio == pytest.approx(50.0)

    def test_sold_by_uses_own_sales(self, reference):
        sales = _sales(
            sale_row("hh-1", team_member_id="tm-a", product_type="auto"),
            sale_row("hh-1", team_member_id="tm-b", product_type="home"),
            sale_row("hh-2", team_member_id="tm-b", product_type="auto"),
            sale_row("hh-2", team_member_id="tm-b", product_type="life"),
        )

        result = aggregate_sold_by([], sales, reference)

        assert _by_id(result, "tm-a").bundleRatio == pytest.approx(0.0)
        assert _by_id(result, "tm-b").bundleRatio == pytest.approx(50.0)

    def test_quoted_by_without_sales_is_null(self, reference):
        alex = aggregate_quoted_by(_quotes(quote_row("hh-1", team_member_id="tm-a")), [], reference)[0]

        assert alex.closeRatio == pytest.approx(0.0)
        assert alex.bundleRatio is None


class TestProducerNamesAndOrder:
    """Labels for unresolved producers and row ordering."""

    def test_unassigned_and_unknown(self, reference):
        quotes = _quotes(quote_row("hh-1", team_member_id=None), quote_row("hh-2", team_member_id="tm-gone"))

        result = aggregate_quoted_by(quotes, [], reference)

        assert _by_id(result, None).teamMemberName == "Unassigned"
        assert _by_id(result, "tm-gone").teamMemberName == "Unknown"

    def test_quoted_by_sorted_by_quoted_households(self, reference):
        quotes = _quotes(
            quote_row("hh-1", team_member_id="tm-a"),
            quote_row("hh-2", team_member_id="tm-b"),
            quote_row("hh-3", team_member_id="tm-b"),
        )

        result = aggregate_quoted_by(quotes, [], reference)

        assert [r.teamMemberId for r in result] == ["tm-b", "tm-a"]

    def test_sold_by_sorted_by_premium(self, reference):
        sales = _sales(
            sale_row("hh-1", team_member_id="tm-a", premium_cents=100),
            sale_row("hh-2", team_member_id="tm-a", premium_cents=100),
            sale_row("hh-3", team_member_id="tm-b", premium_cents=500),
        )

        result = aggregate_sold_by([], sales, reference)

        assert [r.teamMemberId for r in result] == ["tm-b", "tm-a"]


class TestProducerTotals:
    """Totals span every quote and sale row."""

    def test_totals(self):
        quotes = _quotes(
            quote_row("hh-1", team_member_id="tm-a", items_quoted=2, premium_cents=1000),
            quote_row("hh-1", team_member_id="tm-b", items_quoted=None, premium_cents=None),
            quote_row("hh-2", team_member_id=None, items_quoted=1, premium_cents=500),
        )
        sales = _sales(
            sale_row("hh-1", team_member_id="tm-a", policies_sold=2, items_sold=3, premium_cents=900),
            sale_row("hh-1", team_member_id="tm-b", premium_cents=100),
        )

        totals = producer_totals(quotes, sales)

        assert totals.quotedHouseholds == 2
        assert totals.quotedPolicies == 3
        assert totals.quotedItems == 4
        assert totals.quotedPremiumCents == 1500
        assert totals.soldHouseholds == 1
        assert totals.soldPolicies == 3
        assert totals.soldItems == 4
        assert totals.soldPremiumCents == 1000

    def test_breakdown_from_dataset(self, reference):
        dataset = make_activity(
            reference, MARCH_2026,
            quotes=[quote_row("hh-1", team_member_id="tm-a")],
            sales=[sale_row("hh-1", team_member_id="tm-b", premium_cents=700)],
        )

        breakdown = aggregate_producers(dataset)

        assert [r.teamMemberId for r in breakdown.byQuotedBy] == ["tm-a"]
        assert [r.teamMemberId for r in breakdown.bySoldBy] == ["tm-b"]
        assert breakdown.totals.soldPremiumCents == 700

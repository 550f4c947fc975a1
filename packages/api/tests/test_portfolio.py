# This project was developed with assistance from AI tools.
"""Pure portfolio math: investor stats, monthly metrics and CSV export."""

import csv
import io
from datetime import UTC, datetime
from decimal import Decimal

from db.enums import DealStatus, FundingStatus, PropertyType

from src.services.analytics import _month_keys, _percent, build_monthly_metrics
from src.services.bulk import EXPORT_COLUMNS, deals_to_csv
from src.services.investor import calculate_stats

from .functional.data_factory import (
    _make_property,
    make_deal_closed_funded,
    make_deal_offer_prepared,
    make_deal_submitted,
    make_funding,
)


class TestInvestorStats:
    def test_empty_portfolio(self):
        stats = calculate_stats([], [])
        assert stats.total_funded == 0
        assert stats.total_returns == 0
        assert stats.roi == 0.0

    def test_returns_and_roi(self):
        closed = make_deal_closed_funded()
        funding = [
            make_funding(id=403, deal=closed, status=FundingStatus.FUNDED, funded_amount=Decimal("185000")),
            make_funding(id=404),
            make_funding(id=405, status=FundingStatus.UNDER_REVIEW),
            make_funding(id=406, status=FundingStatus.WITHDRAWN),
        ]

        stats = calculate_stats(funding, [closed, make_deal_offer_prepared()])

        assert stats.total_funded == Decimal("185000")
        assert stats.total_invested == stats.total_funded
        assert stats.pending_funding == Decimal("330000")
        assert stats.total_returns == Decimal("55000")
        assert stats.roi == 29.73
        assert stats.active_deals == 1
        assert stats.closed_deals == 1

    def test_offer_price_used_without_final_price(self):
        closed = make_deal_closed_funded()
        closed.final_price = None
        funding = [make_funding(deal=closed, status=FundingStatus.FUNDED, funded_amount=Decimal("150000"))]

        stats = calculate_stats(funding, [closed])
        assert stats.total_returns == Decimal("35000")

    def test_rejected_deal_is_neither_active_nor_closed(self):
        deal = make_deal_submitted()
        deal.status = DealStatus.REJECTED

        stats = calculate_stats([], [deal])
        assert stats.active_deals == 0
        assert stats.closed_deals == 0


class TestMonthlyMetrics:
    NOW = datetime(2026, 3, 15, tzinfo=UTC)

    def test_month_keys_cross_year(self):
        assert _month_keys(datetime(2026, 2, 1, tzinfo=UTC), 4) == [
            "2025-11",
            "2025-12",
            "2026-01",
            "2026-02",
        ]

    def test_percent_rounds_to_whole(self):
        assert _percent(1, 3) == 33
        assert _percent(2, 3) == 67
        assert _percent(5, 0) == 0

    def test_buckets(self):
        old = make_deal_submitted()
        old.submitted_at = datetime(2025, 6, 1, tzinfo=UTC)
        deals = [make_deal_submitted(), make_deal_closed_funded(), old]

        metrics = build_monthly_metrics(deals, self.NOW, months=3)

        assert [m.month for m in metrics] == ["2026-01", "2026-02", "2026-03"]
        jan, feb, mar = metrics
        assert jan.submitted == 2
        assert feb.closed == 1
        assert feb.closed_volume == Decimal("185000")
        assert (mar.submitted, mar.closed, mar.closed_volume) == (0, 0, 0)

    def test_closed_falls_back_to_updated_at(self):
        deal = make_deal_closed_funded()
        deal.closed_at = None
        deal.updated_at = datetime(2026, 3, 2, tzinfo=UTC)

        metrics = build_monthly_metrics([deal], self.NOW, months=1)
        assert metrics[0].closed == 1


class TestCsvExport:
    def test_header_only_when_empty(self):
        rows = list(csv.reader(io.StringIO(deals_to_csv([]))))
        assert rows == [EXPORT_COLUMNS]

    def test_row_layout(self):
        rows = list(csv.reader(io.StringIO(deals_to_csv([make_deal_submitted()]))))
        row = dict(zip(rows[0], rows[1]))

        assert row["Deal Number"] == "DEALFLOW-101"
        assert row["Status"] == "Submitted"
        assert row["Property Type"] == "Single Family"
        assert row["Sqft"] == "1,500"
        assert row["Asking Price"] == "$150,000"
        assert row["Offer Price"] == ""
        assert row["Agent"] == "Maria Lopez"
        assert row["Assigned To"] == ""
        assert row["Submitted Date"] == "2026-01-05"

    def test_multi_family_label(self):
        deal = make_deal_submitted()
        deal.property = _make_property(201, "1 Main", "Austin", property_type=PropertyType.MULTI_FAMILY)

        rows = list(csv.reader(io.StringIO(deals_to_csv([deal]))))
        assert rows[1][EXPORT_COLUMNS.index("Property Type")] == "Multi-Family"

    def test_commas_and_quotes_escaped(self):
        deal = make_deal_submitted()
        deal.notes = 'Roof "needs work", soon'

        rows = list(csv.reader(io.StringIO(deals_to_csv([deal]))))
        assert rows[1][-1] == 'Roof "needs work", soon'

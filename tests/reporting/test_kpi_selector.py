"""Tests for KpiSelector: range totals and breakdowns over stored aggregates."""

from datetime import date
from decimal import Decimal

import pytest

from venue_reporting.selectors import KpiSelector, summarize
from venue_reporting.selectors.kpi_selector import unassigned_remainder
from venue_reporting.services.aggregation_service import AggregationService

SALES_HEADER = "Date,Time,Total,Channel,Transaction ID"
LABOR_HEADER = "Period Start,Period End,Total Wages"


@pytest.fixture
def loaded(run_import, session, deterministic_clock, location, make_csv):
    """Two days of sales across two channels and three dayparts, plus labor."""
    run_import(
        "sales",
        make_csv(
            SALES_HEADER,
            "2024-01-15,08:30,100.00,Dine In,S1",
            "2024-01-15,12:00,300.00,Takeaway,S2",
            "2024-01-16,18:00,600.00,Dine In,S3",
        ),
    )
    run_import("labor", make_csv(LABOR_HEADER, "2024-01-15,2024-01-16,300.00"))
    AggregationService(session, deterministic_clock).refresh_aggregates(location.id)
    return location


@pytest.fixture
def selector(session):
    return KpiSelector(session)


class TestTotals:
    def test_range_totals_rederive_ratios(self, selector, loaded):
        summary = selector.totals(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        assert summary.revenue == Decimal("1000.00")
        assert summary.labor_cost == Decimal("300.00")
        assert summary.labor_pct == Decimal("30.00")
        assert summary.covers == 3
        assert summary.avg_check == Decimal("333.33")
        assert summary.net_profit == Decimal("700.00")
        assert summary.freshness_timestamp is not None

    def test_single_day(self, selector, loaded):
        summary = selector.totals(loaded.id, date(2024, 1, 15), date(2024, 1, 15))
        assert summary.revenue == Decimal("400.00")
        assert summary.labor_pct == Decimal("37.50")

    def test_empty_range(self, selector, loaded):
        summary = selector.totals(loaded.id, date(2023, 1, 1), date(2023, 1, 31))
        assert summary.revenue == Decimal("0")
        assert summary.labor_pct == Decimal("0")
        assert summary.freshness_timestamp is None

    def test_named_range(self, selector, loaded):
        summary = selector.totals_for_range(loaded.id, "30d", date(2024, 1, 31))
        assert summary.start_date == date(2024, 1, 1)
        assert summary.revenue == Decimal("1000.00")


class TestBreakdowns:
    def test_by_channel(self, selector, loaded, venue_service):
        codes = {c.id: c.code for c in venue_service.list_channels(loaded.id)}
        rows = selector.by_channel(loaded.id, date(2024, 1, 15), date(2024, 1, 16))

        assert [codes[r.channel_id] for r in rows] == ["dine-in", "takeaway"]
        assert [r.revenue for r in rows] == [Decimal("700.00"), Decimal("300.00")]
        assert sum((r.labor_cost for r in rows), Decimal("0")) == Decimal("300.00")
        assert all(r.daypart_id is None for r in rows)

    def test_by_daypart(self, selector, loaded, venue_service):
        codes = {d.id: d.code for d in venue_service.list_dayparts(loaded.id)}
        rows = selector.by_daypart(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        assert [codes[r.daypart_id] for r in rows] == ["dinner", "lunch", "breakfast"]

    def test_unassigned_channel_is_total_minus_channels(
        self, selector, loaded, run_import, make_csv, session, deterministic_clock,
    ):
        run_import("sales", make_csv(SALES_HEADER, "2024-01-16,19:00,50.00,,S4"))
        AggregationService(session, deterministic_clock).refresh_aggregates(loaded.id)

        rows = selector.by_channel(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        totals = selector.totals(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        unassigned = [r for r in rows if r.channel_id is None]

        assert len(unassigned) == 1
        assert unassigned[0].revenue == Decimal("50.00")
        assert unassigned[0].covers == 1
        assert sum((r.revenue for r in rows), Decimal("0")) == totals.revenue == Decimal("1050.00")
        assert sum((r.labor_cost for r in rows), Decimal("0")) == totals.labor_cost
        assert sum(r.covers for r in rows) == totals.covers

    def test_no_unassigned_group_when_everything_is_assigned(self, selector, loaded):
        rows = selector.by_channel(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        assert all(r.channel_id is not None for r in rows)

    def test_rows_for_day(self, selector, loaded):
        rows = selector.rows_for_day(loaded.id, date(2024, 1, 15))
        assert len(rows) == 3
        assert rows == sorted(rows, key=lambda r: r.grain_key)


class TestSummarize:
    def test_no_rows(self):
        summary = summarize([], date(2024, 1, 1), date(2024, 1, 2))
        assert summary.covers == 0
        assert summary.avg_check == Decimal("0")

    def test_remainder_of_fully_assigned_total_is_none(self):
        day = date(2024, 1, 1)
        total = summarize([], day, day)
        assert unassigned_remainder(total, [total]) is None


class TestDailySeries:
    def test_one_total_row_per_day(self, selector, loaded):
        series = selector.daily_series(loaded.id, date(2024, 1, 1), date(2024, 1, 31))
        assert [r.business_date for r in series] == [date(2024, 1, 15), date(2024, 1, 16)]
        assert [r.revenue for r in series] == [Decimal("400.00"), Decimal("600.00")]
        assert all(r.channel_id is None and r.daypart_id is None for r in series)

    def test_range_bounds_are_inclusive(self, selector, loaded):
        series = selector.daily_series(loaded.id, date(2024, 1, 16), date(2024, 1, 16))
        assert len(series) == 1

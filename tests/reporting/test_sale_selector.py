"""Tests for SaleSelector: filtered, paged sale listings."""

from datetime import date
from decimal import Decimal

import pytest

from venue_reporting.selectors import SaleSelector

SALES_HEADER = "Date,Time,Total,Channel,Transaction ID"


@pytest.fixture
def loaded(run_import, location, make_csv):
    run_import(
        "sales",
        make_csv(
            SALES_HEADER,
            "2024-01-15,12:00,30.00,Dine In,S2",
            "2024-01-15,08:30,10.00,Dine In,S1",
            "2024-01-15,,5.00,Takeaway,S3",
            "2024-01-16,18:00,60.00,Takeaway,S4",
            "2024-01-17,12:30,40.00,Dine In,S5",
        ),
    )
    return location


@pytest.fixture
def selector(session):
    return SaleSelector(session)


class TestListSales:
    def test_range_in_stable_order(self, selector, loaded):
        page = selector.list_sales(loaded.id, date(2024, 1, 15), date(2024, 1, 16))
        # untimed sales come after the timed ones of the same day
        assert [s.source_id for s in page.items] == ["S1", "S2", "S3", "S4"]
        assert page.total_count == 4
        assert page.page_count == 1

    def test_filter_by_channel(self, selector, loaded):
        page = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), channel_code="takeaway")
        assert [s.source_id for s in page.items] == ["S3", "S4"]
        assert sum((s.total for s in page.items), Decimal("0")) == Decimal("65.00")

    def test_filter_by_daypart(self, selector, loaded):
        page = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), daypart_code="lunch")
        assert [s.source_id for s in page.items] == ["S2", "S5"]

    def test_filters_combine(self, selector, loaded):
        page = selector.list_sales(
            loaded.id, date(2024, 1, 1), date(2024, 1, 31), channel_code="dine-in", daypart_code="breakfast",
        )
        assert [s.source_id for s in page.items] == ["S1"]

    def test_unknown_code_matches_nothing(self, selector, loaded):
        page = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), channel_code="drive-thru")
        assert page.items == ()
        assert page.total_count == 0
        assert page.page_count == 0

    def test_pages(self, selector, loaded):
        first = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), page=1, page_size=2)
        second = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), page=2, page_size=2)
        third = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), page=3, page_size=2)

        assert [s.source_id for s in first.items + second.items + third.items] == ["S1", "S2", "S3", "S4", "S5"]
        assert first.total_count == third.total_count == 5
        assert first.page_count == 3

    def test_page_past_the_end_is_empty(self, selector, loaded):
        page = selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), page=9, page_size=2)
        assert page.items == ()
        assert page.total_count == 5

    @pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0)])
    def test_rejects_bad_paging(self, selector, loaded, page, page_size):
        with pytest.raises(ValueError):
            selector.list_sales(loaded.id, date(2024, 1, 1), date(2024, 1, 31), page=page, page_size=page_size)

"""
Property-based tests for the pure ingestion and KPI functions.

Boundaries fuzzed here:
- Labor allocation: parts always sum to the rounded day cost
- Daypart windows: half-open membership, at most one window per time
- Currency amounts: formatting noise never changes the parsed value
- Field mapping: never raises, never invents fields
"""

from datetime import time
from decimal import Decimal
from uuid import uuid4

from hypothesis import given, settings
from hypothesis import strategies as st

from venue_kernel.db.types import round_money
from venue_modules.venue.models import Daypart, resolve_daypart
from venue_reporting.domain.kpi import allocate_labor, labor_pct

from venue_ingestion.domain.types import SourceType
from venue_ingestion.domain.values import parse_amount
from venue_ingestion.mapping.engine import FieldMapper

money = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

DAYPARTS = (
    Daypart(uuid4(), uuid4(), "breakfast", "Breakfast", time(7, 0), time(11, 0)),
    Daypart(uuid4(), uuid4(), "lunch", "Lunch", time(11, 0), time(15, 0)),
    Daypart(uuid4(), uuid4(), "dinner", "Dinner", time(15, 0), time(20, 0)),
)


class TestAllocationProperties:
    @given(labor=money, revenues=st.lists(money, min_size=1, max_size=12))
    @settings(max_examples=200)
    def test_parts_sum_to_total(self, labor, revenues):
        parts = allocate_labor(labor, revenues)
        assert len(parts) == len(revenues)
        assert sum(parts, Decimal("0")) == round_money(labor)

    @given(labor=money, revenues=st.lists(money, min_size=2, max_size=12))
    def test_all_but_last_are_cent_rounded(self, labor, revenues):
        parts = allocate_labor(labor, revenues)
        for part in parts[:-1]:
            assert part == round_money(part)

    @given(labor=money, revenue=money)
    def test_labor_pct_is_finite_and_non_negative(self, labor, revenue):
        result = labor_pct(labor, revenue)
        assert result.is_finite()
        assert result >= 0


class TestDaypartProperties:
    @given(t=st.times())
    def test_at_most_one_window(self, t):
        matches = [d for d in DAYPARTS if d.contains(t)]
        assert len(matches) <= 1
        resolved = resolve_daypart(DAYPARTS, t)
        assert resolved == (matches[0] if matches else None)

    @given(t=st.times())
    def test_half_open_boundaries(self, t):
        resolved = resolve_daypart(DAYPARTS, t)
        if resolved is not None:
            assert resolved.start_time <= t < resolved.end_time
        else:
            assert t < time(7, 0) or t >= time(20, 0)


class TestAmountProperties:
    @given(value=money)
    def test_currency_formatting_is_stripped(self, value):
        plain = f"{value:.2f}"
        grouped = f"${value:,.2f}"
        assert parse_amount(plain) == value
        assert parse_amount(grouped) == value
        assert parse_amount(f"  {grouped} ") == value

    @given(value=money)
    def test_parenthesised_is_negative(self, value):
        assert parse_amount(f"({value:.2f})") == -value


class TestMapperProperties:
    @given(
        raw=st.dictionaries(
            st.sampled_from(["Date", "Total", "Tax", "Other", "Extra"]),
            st.text(max_size=12),
        )
    )
    def test_never_raises_and_only_maps_known_fields(self, raw):
        mapper = FieldMapper(SourceType.SALES, {"Date": "date", "Total": "total", "Tax": "tax"})
        mapped = mapper.map_row(raw)
        assert set(mapped) <= {"date", "total", "tax"}
        assert all(value == value.strip() and value for value in mapped.values())

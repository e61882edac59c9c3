"""
venue_reporting.domain.types -- Frozen DTOs for KPI aggregates and sale listings.

ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from venue_modules.sales.models import Sale


@dataclass(frozen=True)
class KpiAggregate:
    """One stored aggregate row.  channel_id/daypart_id None on the total row."""

    id: UUID
    business_date: date
    location_id: UUID
    grain_key: str
    revenue: Decimal
    cogs: Decimal
    gross_margin: Decimal
    labor_cost: Decimal
    labor_pct: Decimal
    opex: Decimal
    net_profit: Decimal
    covers: int
    avg_check: Decimal
    discounts: Decimal
    comps: Decimal
    freshness_timestamp: datetime
    channel_id: UUID | None = None
    daypart_id: UUID | None = None


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one refresh_aggregates run."""

    location_id: UUID
    start_date: date | None
    end_date: date | None
    days_refreshed: int = 0
    failed_dates: tuple[date, ...] = ()

    @property
    def days_failed(self) -> int:
        return len(self.failed_dates)


@dataclass(frozen=True)
class KpiSummary:
    """KPI totals over a date range, optionally for one channel or daypart."""

    start_date: date
    end_date: date
    revenue: Decimal
    cogs: Decimal
    gross_margin: Decimal
    labor_cost: Decimal
    labor_pct: Decimal
    opex: Decimal
    net_profit: Decimal
    covers: int
    avg_check: Decimal
    discounts: Decimal
    comps: Decimal
    freshness_timestamp: datetime | None = None
    channel_id: UUID | None = None
    daypart_id: UUID | None = None


@dataclass(frozen=True)
class SalePage:
    """One page of sales plus the number of sales matching the filters."""

    items: tuple[Sale, ...]
    total_count: int
    page: int
    page_size: int

    @property
    def page_count(self) -> int:
        return -(-self.total_count // self.page_size)

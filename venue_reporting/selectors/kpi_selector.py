"""
Module: venue_reporting.selectors.kpi_selector
Responsibility: Read-only KPI queries over stored aggregates: per-day rows,
    per-day total series, range totals, and range breakdowns by channel and
    by daypart.

Invariants enforced:
    - Range figures are re-derived from summed components: labor_pct and
      avg_check are never averaged across days.
    - Totals come from the location-wide total rows; breakdowns come from
      the detail rows.  The unassigned group of a breakdown (channel_id or
      daypart_id None) is the total minus the assigned groups, so a
      breakdown always sums to the totals.
    - freshness_timestamp of a summary is the newest of its rows.

Failure modes:
    - Returns zero figures (and no freshness) when no rows match.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from venue_kernel.db.types import ZERO
from venue_reporting.domain.kpi import TOTAL_GRAIN, average_check, date_range_for, labor_pct
from venue_reporting.domain.types import KpiAggregate, KpiSummary
from venue_reporting.models.aggregate import KpiAggregateModel
from venue_reporting.selectors.base import BaseSelector


def _summary(
    start_date: date,
    end_date: date,
    revenue: Decimal,
    cogs: Decimal,
    labor: Decimal,
    opex: Decimal,
    covers: int,
    discounts: Decimal,
    comps: Decimal,
    freshness: datetime | None,
    channel_id: UUID | None = None,
    daypart_id: UUID | None = None,
) -> KpiSummary:
    gross_margin = revenue - cogs
    return KpiSummary(
        start_date=start_date,
        end_date=end_date,
        revenue=revenue,
        cogs=cogs,
        gross_margin=gross_margin,
        labor_cost=labor,
        labor_pct=labor_pct(labor, revenue),
        opex=opex,
        net_profit=gross_margin - labor - opex,
        covers=covers,
        avg_check=average_check(revenue, covers),
        discounts=discounts,
        comps=comps,
        freshness_timestamp=freshness,
        channel_id=channel_id,
        daypart_id=daypart_id,
    )


def summarize(
    rows: Iterable[KpiAggregate],
    start_date: date,
    end_date: date,
    channel_id: UUID | None = None,
    daypart_id: UUID | None = None,
) -> KpiSummary:
    """Sum the additive columns and re-derive the ratios."""
    rows = list(rows)
    return _summary(
        start_date,
        end_date,
        revenue=sum((r.revenue for r in rows), ZERO),
        cogs=sum((r.cogs for r in rows), ZERO),
        labor=sum((r.labor_cost for r in rows), ZERO),
        opex=sum((r.opex for r in rows), ZERO),
        covers=sum(r.covers for r in rows),
        discounts=sum((r.discounts for r in rows), ZERO),
        comps=sum((r.comps for r in rows), ZERO),
        freshness=max((r.freshness_timestamp for r in rows), default=None),
        channel_id=channel_id,
        daypart_id=daypart_id,
    )


def unassigned_remainder(total: KpiSummary, assigned: Iterable[KpiSummary]) -> KpiSummary | None:
    """
    ``total`` minus every assigned group, or None when nothing is left.

    Sales with no channel (or no daypart) have no group of their own in
    the detail rows; this is their share of the totals.
    """
    assigned = list(assigned)
    remainder = _summary(
        total.start_date,
        total.end_date,
        revenue=total.revenue - sum((s.revenue for s in assigned), ZERO),
        cogs=total.cogs - sum((s.cogs for s in assigned), ZERO),
        labor=total.labor_cost - sum((s.labor_cost for s in assigned), ZERO),
        opex=total.opex - sum((s.opex for s in assigned), ZERO),
        covers=total.covers - sum(s.covers for s in assigned),
        discounts=total.discounts - sum((s.discounts for s in assigned), ZERO),
        comps=total.comps - sum((s.comps for s in assigned), ZERO),
        freshness=total.freshness_timestamp,
    )
    if remainder.covers == 0 and not any(
        (remainder.revenue, remainder.cogs, remainder.labor_cost, remainder.opex)
    ):
        return None
    return remainder


class KpiSelector(BaseSelector[KpiAggregateModel]):
    """Reads kpi_aggregates for dashboards and exports."""

    def rows_for_day(self, location_id: UUID, day: date) -> list[KpiAggregate]:
        rows = self.session.scalars(
            select(KpiAggregateModel)
            .where(
                KpiAggregateModel.location_id == location_id,
                KpiAggregateModel.business_date == day,
            )
            .order_by(KpiAggregateModel.grain_key)
        )
        return [row.to_dto() for row in rows]

    def daily_series(self, location_id: UUID, start_date: date, end_date: date) -> list[KpiAggregate]:
        """The location-wide total row of every refreshed day in range, oldest first."""
        return self._rows(location_id, start_date, end_date, total=True)

    def _rows(
        self,
        location_id: UUID,
        start_date: date,
        end_date: date,
        total: bool,
    ) -> list[KpiAggregate]:
        stmt = select(KpiAggregateModel).where(
            KpiAggregateModel.location_id == location_id,
            KpiAggregateModel.business_date >= start_date,
            KpiAggregateModel.business_date <= end_date,
        )
        if total:
            stmt = stmt.where(KpiAggregateModel.grain_key == TOTAL_GRAIN)
        else:
            stmt = stmt.where(KpiAggregateModel.grain_key != TOTAL_GRAIN)
        stmt = stmt.order_by(KpiAggregateModel.business_date, KpiAggregateModel.grain_key)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def totals(self, location_id: UUID, start_date: date, end_date: date) -> KpiSummary:
        """Location-wide figures over [start_date, end_date]."""
        return summarize(self._rows(location_id, start_date, end_date, total=True), start_date, end_date)

    def totals_for_range(self, location_id: UUID, label: str, reference: date) -> KpiSummary:
        """Totals for a named window (``30d``, ``ytd``, ``trailing12m``)."""
        start_date, end_date = date_range_for(label, reference)
        return self.totals(location_id, start_date, end_date)

    def _breakdown(
        self,
        location_id: UUID,
        start_date: date,
        end_date: date,
        key: Callable[[KpiAggregate], UUID | None],
        as_channel: bool,
    ) -> list[KpiSummary]:
        groups: dict[UUID, list[KpiAggregate]] = {}
        for row in self._rows(location_id, start_date, end_date, total=False):
            group_id = key(row)
            if group_id is not None:
                groups.setdefault(group_id, []).append(row)

        summaries = [
            summarize(
                rows,
                start_date,
                end_date,
                channel_id=group_id if as_channel else None,
                daypart_id=None if as_channel else group_id,
            )
            for group_id, rows in groups.items()
        ]
        remainder = unassigned_remainder(self.totals(location_id, start_date, end_date), summaries)
        if remainder is not None:
            summaries.append(remainder)
        return sorted(summaries, key=lambda s: s.revenue, reverse=True)

    def by_channel(self, location_id: UUID, start_date: date, end_date: date) -> list[KpiSummary]:
        """One summary per channel (None for sales without one), highest revenue first."""
        return self._breakdown(location_id, start_date, end_date, lambda r: r.channel_id, True)

    def by_daypart(self, location_id: UUID, start_date: date, end_date: date) -> list[KpiSummary]:
        """One summary per daypart (None for sales outside every window)."""
        return self._breakdown(location_id, start_date, end_date, lambda r: r.daypart_id, False)

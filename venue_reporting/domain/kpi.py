"""
Module: venue_reporting.domain.kpi
Responsibility:
    Pure KPI arithmetic: daily labor cost from payroll periods, pro-rata
    labor allocation across a day's sales buckets, and the derived figures
    of one aggregate row.

Architecture position:
    Reporting > Domain -- pure calculation layer, zero I/O.

Invariants enforced:
    - gross_margin = revenue - cogs
    - net_profit = gross_margin - labor_cost - opex
    - labor_pct = labor_cost / revenue x 100 when revenue > 0, else 0
    - Allocated labor sums exactly to the day's labor cost; the rounding
      difference is assigned to the last bucket.
    - A payroll period's cost is spread evenly over its calendar days
      (both ends included), with no day-of-week weighting.

Failure modes:
    - None for well-formed Decimal input.  Zero revenue is not an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from venue_kernel.db.types import ZERO, round_money
from venue_modules.payroll.models import PayrollPeriod

HUNDRED = Decimal("100")

TOTAL_GRAIN = "total"
_NO_KEY = "-"


def grain_key(channel_id: UUID | None, daypart_id: UUID | None) -> str:
    """Non-null key for a (channel, daypart) pair; either side may be None."""
    return f"{channel_id or _NO_KEY}:{daypart_id or _NO_KEY}"


@dataclass(frozen=True)
class SalesBucket:
    """One day's sales for one (channel, daypart) pair."""

    channel_id: UUID | None
    daypart_id: UUID | None
    revenue: Decimal
    discounts: Decimal
    comps: Decimal
    covers: int
    cogs: Decimal = ZERO

    @property
    def grain_key(self) -> str:
        return grain_key(self.channel_id, self.daypart_id)

    @property
    def is_unassigned(self) -> bool:
        """No channel and no daypart: only the total row carries it."""
        return self.channel_id is None and self.daypart_id is None


@dataclass(frozen=True)
class KpiFigures:
    """The derived columns of one aggregate row, rounded for storage."""

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


def daily_labor_cost(periods: Iterable[PayrollPeriod], day: date) -> Decimal:
    """Sum over periods covering ``day`` of labor_cost / days-in-period."""
    total = ZERO
    for period in periods:
        if period.covers(day):
            total += period.labor_cost / Decimal(period.days)
    return total


def labor_pct(labor_cost: Decimal, revenue: Decimal) -> Decimal:
    if revenue <= ZERO:
        return round_money(ZERO)
    return round_money(labor_cost / revenue * HUNDRED)


def average_check(revenue: Decimal, covers: int) -> Decimal:
    if covers <= 0:
        return round_money(ZERO)
    return round_money(revenue / Decimal(covers))


def allocate_labor(labor_cost: Decimal, revenues: Sequence[Decimal]) -> tuple[Decimal, ...]:
    """
    Split a day's labor cost across buckets by revenue share.

    Equal split when the day has no positive revenue.  The last bucket
    absorbs the rounding difference so the parts sum to the rounded total.
    """
    if not revenues:
        return ()
    total = round_money(labor_cost)
    revenue_total = sum(revenues, ZERO)

    parts: list[Decimal] = []
    for revenue in revenues[:-1]:
        if revenue_total > ZERO:
            parts.append(round_money(total * revenue / revenue_total))
        else:
            parts.append(round_money(total / Decimal(len(revenues))))
    parts.append(total - sum(parts, ZERO))
    return tuple(parts)


def build_figures(
    revenue: Decimal,
    cogs: Decimal,
    labor_cost: Decimal,
    covers: int,
    discounts: Decimal,
    comps: Decimal,
    opex: Decimal = ZERO,
) -> KpiFigures:
    """Round the inputs and derive margin, profit, labor % and average check."""
    revenue = round_money(revenue)
    cogs = round_money(cogs)
    labor_cost = round_money(labor_cost)
    opex = round_money(opex)
    gross_margin = revenue - cogs
    return KpiFigures(
        revenue=revenue,
        cogs=cogs,
        gross_margin=gross_margin,
        labor_cost=labor_cost,
        labor_pct=labor_pct(labor_cost, revenue),
        opex=opex,
        net_profit=gross_margin - labor_cost - opex,
        covers=covers,
        avg_check=average_check(revenue, covers),
        discounts=round_money(discounts),
        comps=round_money(comps),
    )


def figures_for_day(
    buckets: Sequence[SalesBucket],
    labor_cost: Decimal,
) -> tuple[list[tuple[SalesBucket, KpiFigures]], KpiFigures]:
    """
    Figures for every assigned bucket plus the location-wide total.

    Buckets are processed in grain-key order so the allocation (and with
    it the rounding residue) is the same on every run.  The unassigned
    bucket (no channel, no daypart) takes part in the labor allocation
    but gets no detail row: (NULL, NULL) is reserved for the total.
    """
    ordered = sorted(buckets, key=lambda b: b.grain_key)
    shares = allocate_labor(labor_cost, [b.revenue for b in ordered])
    detail = [
        (
            bucket,
            build_figures(
                revenue=bucket.revenue,
                cogs=bucket.cogs,
                labor_cost=share,
                covers=bucket.covers,
                discounts=bucket.discounts,
                comps=bucket.comps,
            ),
        )
        for bucket, share in zip(ordered, shares)
        if not bucket.is_unassigned
    ]
    total = build_figures(
        revenue=sum((b.revenue for b in ordered), ZERO),
        cogs=sum((b.cogs for b in ordered), ZERO),
        labor_cost=labor_cost,
        covers=sum(b.covers for b in ordered),
        discounts=sum((b.discounts for b in ordered), ZERO),
        comps=sum((b.comps for b in ordered), ZERO),
    )
    return detail, total


# -----------------------------------------------------------------------------
# Reporting windows
# -----------------------------------------------------------------------------

RANGE_LABELS = ("30d", "ytd", "trailing12m")


def date_range_for(label: str, reference: date) -> tuple[date, date]:
    """
    (start, end) for a reporting window ending on ``reference``.

    ``30d`` -> the 30 days before reference, ``ytd`` -> 1 January,
    ``trailing12m`` -> same day one year earlier (28 Feb for a 29 Feb
    reference).  Unknown labels fall back to ``30d``.
    """
    if label == "ytd":
        return date(reference.year, 1, 1), reference
    if label == "trailing12m":
        try:
            start = reference.replace(year=reference.year - 1)
        except ValueError:
            start = reference.replace(year=reference.year - 1, day=28)
        return start, reference
    return reference - timedelta(days=30), reference

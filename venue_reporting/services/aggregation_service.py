"""
AggregationService -- full-recompute KPI aggregation.

Contract:
    ``refresh_day()`` recomputes every aggregate row of one date for one
    location from sales, sale lines x recipe cost, and payroll periods, and
    upserts each row on (business_date, location_id, grain_key).
    ``refresh_aggregates()`` runs refresh_day for every calendar day from
    the earliest to the latest sale date, one SAVEPOINT per day.

Architecture: venue_reporting/services.  Reads venue_modules ORM models,
    delegates arithmetic to venue_reporting.domain.kpi.

Invariants enforced:
    - Rows are recomputed, never incrementally patched.  Grains with no
      sales left on that date are deleted.
    - (date, location, NULL channel, NULL daypart) is the total row only.
      Sales with neither a channel nor a daypart count towards it and get
      no detail row.
    - Two runs over unchanged sources give identical rows except for
      freshness_timestamp.
    - A failing day is logged and skipped; later days still run.
    - All timestamps from injected Clock.
    - Flushes but never commits; the caller owns the transaction.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from venue_kernel.db.types import ZERO
from venue_kernel.db.upsert import upsert
from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.logging_config import LogContext, get_logger
from venue_modules.payroll.orm import PayrollPeriodModel
from venue_modules.sales.orm import SaleLineModel, SaleModel
from venue_modules.venue.orm import LocationModel, MenuItemModel

from venue_reporting.domain.kpi import (
    TOTAL_GRAIN,
    KpiFigures,
    SalesBucket,
    daily_labor_cost,
    figures_for_day,
    grain_key,
)
from venue_reporting.domain.types import KpiAggregate, RefreshResult
from venue_reporting.models.aggregate import KpiAggregateModel

logger = get_logger("reporting.aggregation")

# Recorded as created_by_id / updated_by_id on rows written by scheduled refreshes
SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")


def _dec(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class AggregationService:
    """Recomputes kpi_aggregates for a location."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def refresh_aggregates(
        self,
        location_id: UUID,
        actor_id: UUID | None = None,
    ) -> RefreshResult:
        """Recompute every day from the first to the last sale date."""
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(
            producer="reporting",
            actor_id=str(actor_id),
            location_id=str(location_id),
        ):
            first, last = self._session.execute(
                select(func.min(SaleModel.business_date), func.max(SaleModel.business_date))
                .where(SaleModel.location_id == location_id)
            ).one()
            if first is None:
                logger.info("aggregate_refresh_skipped", extra={"reason": "no sales"})
                return RefreshResult(location_id=location_id, start_date=None, end_date=None)

            refreshed = 0
            failed: list[date] = []
            day = first
            while day <= last:
                savepoint = self._session.begin_nested()
                try:
                    self.refresh_day(location_id, day, actor_id)
                    savepoint.commit()
                    refreshed += 1
                except Exception:
                    savepoint.rollback()
                    failed.append(day)
                    logger.exception(
                        "aggregate_day_failed",
                        extra={"business_date": day.isoformat()},
                    )
                day += timedelta(days=1)

            logger.info(
                "aggregates_refreshed",
                extra={
                    "start_date": first.isoformat(),
                    "end_date": last.isoformat(),
                    "days_refreshed": refreshed,
                    "days_failed": len(failed),
                },
            )
            return RefreshResult(
                location_id=location_id,
                start_date=first,
                end_date=last,
                days_refreshed=refreshed,
                failed_dates=tuple(failed),
            )

    def refresh_all_locations(self, actor_id: UUID | None = None) -> list[RefreshResult]:
        location_ids = self._session.scalars(
            select(LocationModel.id).order_by(LocationModel.name)
        ).all()
        return [self.refresh_aggregates(location_id, actor_id) for location_id in location_ids]

    def refresh_day(
        self,
        location_id: UUID,
        day: date,
        actor_id: UUID | None = None,
    ) -> list[KpiAggregate]:
        """Recompute and upsert every aggregate row of ``day``."""
        actor_id = actor_id or SYSTEM_ACTOR_ID
        buckets = self._sales_buckets(location_id, day)
        labor = daily_labor_cost(self._payroll_periods(location_id, day), day)
        detail, total = figures_for_day(buckets, labor)

        now = self._clock.now()
        written: list[UUID] = []
        for bucket, figures in detail:
            written.append(
                self._write_row(
                    location_id, day, bucket.grain_key,
                    bucket.channel_id, bucket.daypart_id,
                    figures, now, actor_id,
                )
            )
        if buckets or labor > ZERO:
            written.append(
                self._write_row(location_id, day, TOTAL_GRAIN, None, None, total, now, actor_id)
            )

        self._session.execute(
            delete(KpiAggregateModel)
            .where(
                KpiAggregateModel.location_id == location_id,
                KpiAggregateModel.business_date == day,
                KpiAggregateModel.id.not_in(written),
            )
            .execution_options(synchronize_session=False)
        )
        self._session.flush()

        logger.debug(
            "aggregate_day_refreshed",
            extra={
                "business_date": day.isoformat(),
                "rows": len(written),
                "revenue": str(total.revenue),
                "labor_cost": str(total.labor_cost),
            },
        )
        rows = self._session.scalars(
            select(KpiAggregateModel)
            .where(KpiAggregateModel.id.in_(written))
            .order_by(KpiAggregateModel.grain_key)
            .execution_options(populate_existing=True)
        )
        return [row.to_dto() for row in rows]

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _sales_buckets(self, location_id: UUID, day: date) -> list[SalesBucket]:
        group = (SaleModel.channel_id, SaleModel.daypart_id)
        sales = self._session.execute(
            select(
                *group,
                func.sum(SaleModel.total),
                func.sum(SaleModel.discounts),
                func.sum(SaleModel.comps),
                func.count(SaleModel.id),
            )
            .where(SaleModel.location_id == location_id, SaleModel.business_date == day)
            .group_by(*group)
        ).all()

        # Separate query so line fan-out never multiplies revenue
        cogs_rows = self._session.execute(
            select(
                *group,
                func.sum(SaleLineModel.quantity * MenuItemModel.recipe_cost),
            )
            .join(SaleLineModel, SaleLineModel.sale_id == SaleModel.id)
            .join(MenuItemModel, MenuItemModel.id == SaleLineModel.menu_item_id)
            .where(SaleModel.location_id == location_id, SaleModel.business_date == day)
            .group_by(*group)
        ).all()
        cogs = {grain_key(c, d): _dec(value) for c, d, value in cogs_rows}

        return [
            SalesBucket(
                channel_id=channel_id,
                daypart_id=daypart_id,
                revenue=_dec(revenue),
                discounts=_dec(discounts),
                comps=_dec(comps),
                covers=int(covers),
                cogs=cogs.get(grain_key(channel_id, daypart_id), ZERO),
            )
            for channel_id, daypart_id, revenue, discounts, comps, covers in sales
        ]

    def _payroll_periods(self, location_id: UUID, day: date):
        rows = self._session.scalars(
            select(PayrollPeriodModel).where(
                PayrollPeriodModel.location_id == location_id,
                PayrollPeriodModel.start_date <= day,
                PayrollPeriodModel.end_date >= day,
            )
        )
        return [row.to_dto() for row in rows]

    def _write_row(
        self,
        location_id: UUID,
        day: date,
        key: str,
        channel_id: UUID | None,
        daypart_id: UUID | None,
        figures: KpiFigures,
        now,
        actor_id: UUID,
    ) -> UUID:
        return upsert(
            self._session,
            KpiAggregateModel,
            {
                "business_date": day,
                "location_id": location_id,
                "grain_key": key,
                "channel_id": channel_id,
                "daypart_id": daypart_id,
                "revenue": figures.revenue,
                "cogs": figures.cogs,
                "gross_margin": figures.gross_margin,
                "labor_cost": figures.labor_cost,
                "labor_pct": figures.labor_pct,
                "opex": figures.opex,
                "net_profit": figures.net_profit,
                "covers": figures.covers,
                "avg_check": figures.avg_check,
                "discounts": figures.discounts,
                "comps": figures.comps,
                "freshness_timestamp": now,
                "created_by_id": actor_id,
            },
            conflict_columns=("business_date", "location_id", "grain_key"),
            now=now,
            actor_id=actor_id,
        )

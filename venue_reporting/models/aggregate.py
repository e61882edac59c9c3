"""
Module: venue_reporting.models.aggregate
Responsibility: SQLAlchemy ORM persistence model for KPI aggregates.

Invariants enforced:
    - One row per (business_date, location_id, channel, daypart).  The
      nullable channel/daypart pair is encoded in the non-null grain_key
      so the unique constraint holds even when both are NULL.
    - The location-wide total row has grain_key "total" and NULL
      channel_id / daypart_id.
    - Rows are fully overwritten on every refresh; freshness_timestamp is
      the time of the last successful recompute.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from venue_kernel.db.base import TrackedBase, UUIDString


class KpiAggregateModel(TrackedBase):
    """Recomputed KPI figures for one day and grain."""

    __tablename__ = "kpi_aggregates"

    __table_args__ = (
        UniqueConstraint(
            "business_date", "location_id", "grain_key",
            name="uq_kpi_aggregate_grain",
        ),
        Index("idx_kpi_aggregates_date", "business_date"),
    )

    business_date: Mapped[date] = mapped_column(Date)
    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    grain_key: Mapped[str] = mapped_column(String(80))
    channel_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("service_channels.id"), nullable=True,
    )
    daypart_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("dayparts.id"), nullable=True,
    )

    revenue: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    cogs: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    gross_margin: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    labor_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    labor_pct: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    opex: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    net_profit: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    covers: Mapped[int] = mapped_column(default=0)
    avg_check: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    discounts: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    comps: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    freshness_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def to_dto(self):
        from venue_reporting.domain.types import KpiAggregate

        return KpiAggregate(
            id=self.id,
            business_date=self.business_date,
            location_id=self.location_id,
            grain_key=self.grain_key,
            revenue=self.revenue,
            cogs=self.cogs,
            gross_margin=self.gross_margin,
            labor_cost=self.labor_cost,
            labor_pct=self.labor_pct,
            opex=self.opex,
            net_profit=self.net_profit,
            covers=self.covers,
            avg_check=self.avg_check,
            discounts=self.discounts,
            comps=self.comps,
            freshness_timestamp=self.freshness_timestamp,
            channel_id=self.channel_id,
            daypart_id=self.daypart_id,
        )

    def __repr__(self) -> str:
        return f"<KpiAggregateModel {self.business_date} {self.grain_key} {self.revenue}>"

"""
Module: venue_modules.sales.orm
Responsibility: SQLAlchemy ORM persistence models for sales and sale lines.

Architecture position: Modules > Sales > ORM.  Inherits from TrackedBase.

Invariants enforced:
    - Natural key UNIQUE(location_id, import_source, source_id).  Every
      write is an upsert on it, so re-processing a file converges.
    - Sale lines are unique per (sale_id, menu_item_id).
    - Monetary fields use Decimal (Numeric(38,9)) -- NEVER float.
"""

from datetime import date, time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from venue_kernel.db.base import TrackedBase, UUIDString


class SaleModel(TrackedBase):
    """One point-of-sale transaction."""

    __tablename__ = "sales"

    __table_args__ = (
        UniqueConstraint(
            "location_id", "import_source", "source_id",
            name="uq_sales_natural_key",
        ),
        Index("idx_sales_location_date", "location_id", "business_date"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    import_source: Mapped[str] = mapped_column(String(50))
    source_id: Mapped[str] = mapped_column(String(100))

    business_date: Mapped[date] = mapped_column(Date)
    sale_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    channel_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("service_channels.id"), nullable=True,
    )
    daypart_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("dayparts.id"), nullable=True,
    )

    subtotal: Mapped[Decimal] = mapped_column()
    tax: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    discounts: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    comps: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column()

    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    server_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Traceability to the job that last wrote the row (no FK)
    import_job_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def to_dto(self):
        from venue_modules.sales.models import Sale

        return Sale(
            id=self.id,
            location_id=self.location_id,
            import_source=self.import_source,
            source_id=self.source_id,
            business_date=self.business_date,
            total=self.total,
            subtotal=self.subtotal,
            tax=self.tax,
            discounts=self.discounts,
            comps=self.comps,
            sale_time=self.sale_time,
            channel_id=self.channel_id,
            daypart_id=self.daypart_id,
            payment_method=self.payment_method,
            server_name=self.server_name,
        )

    def __repr__(self) -> str:
        return f"<SaleModel {self.source_id} {self.business_date} {self.total}>"


class SaleLineModel(TrackedBase):
    """Menu item sold on a sale; quantity x recipe_cost feeds COGS."""

    __tablename__ = "sale_lines"

    __table_args__ = (
        UniqueConstraint("sale_id", "menu_item_id", name="uq_sale_line_item"),
    )

    sale_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False,
    )
    menu_item_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("menu_items.id"), nullable=False,
    )
    quantity: Mapped[Decimal] = mapped_column(default=Decimal("1"))
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self):
        from venue_modules.sales.models import SaleLine

        return SaleLine(
            id=self.id,
            sale_id=self.sale_id,
            menu_item_id=self.menu_item_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )

"""
Module: venue_modules.inventory.orm
Responsibility: SQLAlchemy ORM persistence model for inventory snapshots.

Invariants enforced:
    - Natural key UNIQUE(location_id, snapshot_date, item_name).
    - quantity, unit_cost, total_value use Decimal (Numeric(38,9)).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from venue_kernel.db.base import TrackedBase, UUIDString


class InventorySnapshotModel(TrackedBase):
    """Stock count for one item on one date."""

    __tablename__ = "inventory_snapshots"

    __table_args__ = (
        UniqueConstraint(
            "location_id", "snapshot_date", "item_name",
            name="uq_inventory_snapshot_natural_key",
        ),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    snapshot_date: Mapped[date] = mapped_column(Date)
    item_name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[Decimal] = mapped_column()
    unit: Mapped[str] = mapped_column(String(20), default="ea")
    unit_cost: Mapped[Decimal] = mapped_column()
    total_value: Mapped[Decimal] = mapped_column()

    import_job_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def to_dto(self):
        from venue_modules.inventory.models import InventorySnapshot

        return InventorySnapshot(
            id=self.id,
            location_id=self.location_id,
            snapshot_date=self.snapshot_date,
            item_name=self.item_name,
            quantity=self.quantity,
            unit=self.unit,
            unit_cost=self.unit_cost,
            total_value=self.total_value,
            category=self.category,
        )

    def __repr__(self) -> str:
        return f"<InventorySnapshotModel {self.snapshot_date} {self.item_name}>"

"""
Module: venue_modules.venue.orm
Responsibility: SQLAlchemy ORM persistence models for venue reference data:
    locations, service channels, dayparts and menu items.

Architecture position: Modules > Venue > ORM.  Inherits from TrackedBase
    (venue_kernel.db.base).

Invariants enforced:
    - One channel per (location_id, code); find-or-create relies on it.
    - One daypart per (location_id, code).
    - One menu item per (location_id, name).
    - recipe_cost and price use Decimal (Numeric(38,9)) -- NEVER float.
"""

from datetime import time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from venue_kernel.db.base import TrackedBase, UUIDString


class LocationModel(TrackedBase):
    """The venue."""

    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(200), unique=True)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")

    def to_dto(self):
        from venue_modules.venue.models import Location

        return Location(id=self.id, name=self.name, timezone=self.timezone)

    def __repr__(self) -> str:
        return f"<LocationModel {self.name}>"


class ServiceChannelModel(TrackedBase):
    """Sales channel for a location."""

    __tablename__ = "service_channels"

    __table_args__ = (
        UniqueConstraint("location_id", "code", name="uq_service_channel_location_code"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    code: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_dto(self):
        from venue_modules.venue.models import ServiceChannel

        return ServiceChannel(
            id=self.id,
            location_id=self.location_id,
            code=self.code,
            name=self.name,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<ServiceChannelModel {self.code}>"


class DaypartModel(TrackedBase):
    """Half-open time-of-day window [start_time, end_time)."""

    __tablename__ = "dayparts"

    __table_args__ = (
        UniqueConstraint("location_id", "code", name="uq_daypart_location_code"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    code: Mapped[str] = mapped_column(String(50))
    name: Mapped[str] = mapped_column(String(100))
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)

    def to_dto(self):
        from venue_modules.venue.models import Daypart

        return Daypart(
            id=self.id,
            location_id=self.location_id,
            code=self.code,
            name=self.name,
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def __repr__(self) -> str:
        return f"<DaypartModel {self.code} {self.start_time}-{self.end_time}>"


class MenuItemModel(TrackedBase):
    """Sellable item with the recipe cost used for COGS."""

    __tablename__ = "menu_items"

    __table_args__ = (
        UniqueConstraint("location_id", "name", name="uq_menu_item_location_name"),
        Index("idx_menu_item_location", "location_id"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(nullable=True)
    recipe_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    def to_dto(self):
        from venue_modules.venue.models import MenuItem

        return MenuItem(
            id=self.id,
            location_id=self.location_id,
            name=self.name,
            recipe_cost=self.recipe_cost,
            price=self.price,
            category=self.category,
        )

    def __repr__(self) -> str:
        return f"<MenuItemModel {self.name}>"

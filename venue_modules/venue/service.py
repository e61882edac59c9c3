"""
Venue Reference Service (``venue_modules.venue.service``).

Responsibility
--------------
Seeds and reads venue reference data: the location, its service channels,
its daypart windows and menu items with recipe costs.

Invariants
----------
- Seeding is idempotent: locations and channels use INSERT ... ON CONFLICT
  DO NOTHING, dayparts and menu items use natural-key upserts, so running
  the seed twice leaves one row per natural key.
- Flushes but never commits; the caller owns the transaction.

Usage::

    service = VenueService(session, clock)
    location = service.seed_reference_data(get_settings(), actor_id)
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from venue_config.schema import VenueSettings
from venue_kernel.db.upsert import insert_if_absent, upsert
from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.exceptions import UnresolvedReferenceError
from venue_kernel.logging_config import get_logger
from venue_modules.venue.models import Daypart, Location, MenuItem, ServiceChannel
from venue_modules.venue.orm import (
    DaypartModel,
    LocationModel,
    MenuItemModel,
    ServiceChannelModel,
)

logger = get_logger("modules.venue")


class VenueService:
    """Reference data for the single venue."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def seed_reference_data(self, settings: VenueSettings, actor_id: UUID) -> Location:
        """Create the configured location, channels and dayparts."""
        insert_if_absent(
            self._session,
            LocationModel,
            {
                "name": settings.location.name,
                "timezone": settings.location.timezone,
                "created_by_id": actor_id,
            },
            conflict_columns=("name",),
        )
        location = self._session.scalars(
            select(LocationModel).where(LocationModel.name == settings.location.name)
        ).one()

        for channel in settings.channels:
            insert_if_absent(
                self._session,
                ServiceChannelModel,
                {
                    "location_id": location.id,
                    "code": channel.code,
                    "name": channel.name,
                    "is_active": True,
                    "created_by_id": actor_id,
                },
                conflict_columns=("location_id", "code"),
            )

        now = self._clock.now()
        for daypart in settings.dayparts:
            upsert(
                self._session,
                DaypartModel,
                {
                    "location_id": location.id,
                    "code": daypart.code,
                    "name": daypart.name,
                    "start_time": daypart.start,
                    "end_time": daypart.end,
                    "created_by_id": actor_id,
                },
                conflict_columns=("location_id", "code"),
                now=now,
                actor_id=actor_id,
            )

        self._session.flush()
        logger.info(
            "reference_data_seeded",
            extra={
                "location_id": str(location.id),
                "channels": len(settings.channels),
                "dayparts": len(settings.dayparts),
            },
        )
        return location.to_dto()

    def get_location(self, location_id: UUID) -> Location:
        location = self._session.get(LocationModel, location_id)
        if location is None:
            raise UnresolvedReferenceError("location", str(location_id))
        return location.to_dto()

    def list_channels(self, location_id: UUID) -> list[ServiceChannel]:
        rows = self._session.scalars(
            select(ServiceChannelModel)
            .where(ServiceChannelModel.location_id == location_id)
            .order_by(ServiceChannelModel.code)
        )
        return [row.to_dto() for row in rows]

    def list_dayparts(self, location_id: UUID) -> tuple[Daypart, ...]:
        """Dayparts ordered by start time."""
        rows = self._session.scalars(
            select(DaypartModel)
            .where(DaypartModel.location_id == location_id)
            .order_by(DaypartModel.start_time)
        )
        return tuple(row.to_dto() for row in rows)

    def upsert_menu_item(
        self,
        location_id: UUID,
        name: str,
        recipe_cost: Decimal,
        actor_id: UUID,
        price: Decimal | None = None,
        category: str | None = None,
    ) -> MenuItem:
        """Create or update a menu item keyed by (location, name)."""
        item_id = upsert(
            self._session,
            MenuItemModel,
            {
                "location_id": location_id,
                "name": name.strip(),
                "recipe_cost": recipe_cost,
                "price": price,
                "category": category,
                "created_by_id": actor_id,
            },
            conflict_columns=("location_id", "name"),
            now=self._clock.now(),
            actor_id=actor_id,
        )
        item = self._session.get(MenuItemModel, item_id, populate_existing=True)
        return item.to_dto()

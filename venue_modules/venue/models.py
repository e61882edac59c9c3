"""
Venue Reference Models (``venue_modules.venue.models``).

Responsibility
--------------
Frozen value objects for the venue's reference data: the location itself,
its service channels, its daypart windows and its menu items.

Architecture
------------
Layer: **Modules** -- pure domain data structures with NO database identity
behaviour and NO I/O.  ``orm.py`` converts to and from these.

Invariants
----------
- ``Daypart`` is a half-open window: ``contains(t)`` iff ``start <= t < end``.
- ``Daypart`` rejects ``end <= start`` at construction.
"""

from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class Location:
    id: UUID
    name: str
    timezone: str


@dataclass(frozen=True)
class ServiceChannel:
    """Where a sale happened (dine-in, takeaway, ...)."""

    id: UUID
    location_id: UUID
    code: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class Daypart:
    """Named time-of-day window used to bucket sales."""

    id: UUID
    location_id: UUID
    code: str
    name: str
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Daypart {self.code!r} must end after it starts "
                f"({self.start_time} -> {self.end_time})"
            )

    def contains(self, t: time) -> bool:
        """Half-open membership test."""
        return self.start_time <= t < self.end_time


@dataclass(frozen=True)
class MenuItem:
    """Sellable item; recipe_cost drives COGS."""

    id: UUID
    location_id: UUID
    name: str
    recipe_cost: Decimal
    price: Decimal | None = None
    category: str | None = None


def resolve_daypart(dayparts: tuple[Daypart, ...] | list[Daypart], t: time | None) -> Daypart | None:
    """
    First daypart whose window contains ``t``, or None.

    A time outside every window (or no time at all) leaves the daypart
    unset rather than raising.
    """
    if t is None:
        return None
    for daypart in dayparts:
        if daypart.contains(t):
            return daypart
    return None

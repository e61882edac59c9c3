"""
Inventory Domain Models (``venue_modules.inventory.models``).

An ``InventorySnapshot`` is a stock count for one item on one date, keyed by
(location_id, snapshot_date, item_name).  ``total_value`` is always
quantity x unit_cost, computed at write time.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

DEFAULT_UNIT = "ea"


@dataclass(frozen=True)
class InventorySnapshot:
    id: UUID
    location_id: UUID
    snapshot_date: date
    item_name: str
    quantity: Decimal
    unit: str
    unit_cost: Decimal
    total_value: Decimal
    category: str | None = None

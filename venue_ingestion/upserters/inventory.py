"""
Inventory upserter: validated inventory row -> InventorySnapshotModel.

Natural key: (location_id, snapshot_date, item_name).  total_value is
always recomputed as quantity x unit_cost (rounded to cents); a Total Value
column in the file is ignored.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from venue_kernel.db.types import round_money
from venue_kernel.db.upsert import upsert

from venue_ingestion.domain.types import ParsedRow, SourceType
from venue_ingestion.upserters.base import UpsertContext, UpsertResult
from venue_modules.inventory.models import DEFAULT_UNIT
from venue_modules.inventory.orm import InventorySnapshotModel


class InventoryUpserter:
    """Writes stock counts."""

    source_type: SourceType = SourceType.INVENTORY

    def upsert(
        self,
        row: ParsedRow,
        session: Session,
        context: UpsertContext,
    ) -> UpsertResult:
        snapshot_date = row.get_date("snapshot_date")
        item_name = row.get_text("item_name")
        quantity = row.get_amount("quantity")
        unit_cost = row.get_amount("unit_cost")

        snapshot_id = upsert(
            session,
            InventorySnapshotModel,
            {
                "location_id": context.location_id,
                "snapshot_date": snapshot_date,
                "item_name": item_name,
                "category": row.get_text("category"),
                "quantity": quantity,
                "unit": row.get_text("unit") or DEFAULT_UNIT,
                "unit_cost": unit_cost,
                "total_value": round_money(quantity * unit_cost),
                "import_job_id": context.job_id,
                "created_by_id": context.actor_id,
            },
            conflict_columns=("location_id", "snapshot_date", "item_name"),
            now=context.now,
            actor_id=context.actor_id,
        )
        return UpsertResult(
            entity_type="inventory_snapshot",
            entity_id=snapshot_id,
            natural_key=(context.location_id, snapshot_date, item_name),
        )

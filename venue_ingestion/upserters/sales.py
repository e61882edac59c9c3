"""
Sales upserter: validated sales row -> SaleModel (+ SaleLineModel).

Natural key: (location_id, import_source, source_id).  Derived at write time:
    - subtotal = total - tax when the row carries no subtotal
    - sale_time from the ``time`` field, else the time part of a timestamp date
    - daypart from sale_time against the location's half-open windows
    - channel by case-insensitive find-or-create
A row naming an item writes one sale line; the item must already exist.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.orm import Session

from venue_kernel.db.types import ZERO, round_money
from venue_kernel.db.upsert import upsert

from venue_ingestion.domain.types import ParsedRow, SourceType
from venue_ingestion.upserters.base import UpsertContext, UpsertResult
from venue_ingestion.upserters.reference import get_or_create_channel, require_menu_item
from venue_modules.sales.models import sale_source_id
from venue_modules.sales.orm import SaleLineModel, SaleModel
from venue_modules.venue.models import resolve_daypart

DEFAULT_LINE_QUANTITY = Decimal("1")


class SalesUpserter:
    """Writes point-of-sale rows."""

    source_type: SourceType = SourceType.SALES

    def upsert(
        self,
        row: ParsedRow,
        session: Session,
        context: UpsertContext,
    ) -> UpsertResult:
        total = row.get_amount("total")
        tax = row.get_amount("tax", ZERO)
        subtotal = row.get_amount("subtotal")
        if subtotal is None:
            subtotal = round_money(total - tax)

        sale_time = row.get_time("time") or row.get_timestamp_time("date")
        daypart = resolve_daypart(context.dayparts, sale_time)
        channel_id = get_or_create_channel(
            session, context.location_id, row.get_text("channel"), context.actor_id,
        )
        source_id = sale_source_id(
            context.file_hash, row.line_number, row.get_text("transaction_id"),
        )

        sale_id = upsert(
            session,
            SaleModel,
            {
                "location_id": context.location_id,
                "import_source": context.import_source,
                "source_id": source_id,
                "business_date": row.get_date("date"),
                "sale_time": sale_time,
                "channel_id": channel_id,
                "daypart_id": daypart.id if daypart else None,
                "subtotal": subtotal,
                "tax": tax,
                "discounts": row.get_amount("discounts", ZERO),
                "comps": row.get_amount("comps", ZERO),
                "total": total,
                "payment_method": row.get_text("payment_method"),
                "server_name": row.get_text("server"),
                "import_job_id": context.job_id,
                "created_by_id": context.actor_id,
            },
            conflict_columns=("location_id", "import_source", "source_id"),
            now=context.now,
            actor_id=context.actor_id,
        )

        self._write_line(row, session, context, sale_id, subtotal)
        return UpsertResult(
            entity_type="sale",
            entity_id=sale_id,
            natural_key=(context.location_id, context.import_source, source_id),
        )

    def _write_line(
        self,
        row: ParsedRow,
        session: Session,
        context: UpsertContext,
        sale_id,
        subtotal: Decimal,
    ) -> None:
        """The row is the whole truth for its sale: other lines are removed."""
        item_name = row.get_text("item_name")
        if item_name is None:
            session.execute(delete(SaleLineModel).where(SaleLineModel.sale_id == sale_id))
            return

        item = require_menu_item(session, context.location_id, item_name)
        quantity = row.get_amount("quantity", DEFAULT_LINE_QUANTITY)
        unit_price = round_money(subtotal / quantity) if quantity else None

        upsert(
            session,
            SaleLineModel,
            {
                "sale_id": sale_id,
                "menu_item_id": item.id,
                "quantity": quantity,
                "unit_price": unit_price,
                "created_by_id": context.actor_id,
            },
            conflict_columns=("sale_id", "menu_item_id"),
            now=context.now,
            actor_id=context.actor_id,
        )
        session.execute(
            delete(SaleLineModel)
            .where(SaleLineModel.sale_id == sale_id)
            .where(SaleLineModel.menu_item_id != item.id)
        )

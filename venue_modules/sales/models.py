"""
Sales Domain Models (``venue_modules.sales.models``).

Frozen value objects for point-of-sale transactions.  A ``Sale`` is keyed by
(location_id, import_source, source_id), where source_id is the export's
transaction id when present, else the first eight characters of the
importing file's content hash plus the row's line number.  Money fields are
Decimal, never float.
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class Sale:
    id: UUID
    location_id: UUID
    import_source: str
    source_id: str
    business_date: date
    total: Decimal
    subtotal: Decimal
    tax: Decimal
    discounts: Decimal
    comps: Decimal
    sale_time: time | None = None
    channel_id: UUID | None = None
    daypart_id: UUID | None = None
    payment_method: str | None = None
    server_name: str | None = None


@dataclass(frozen=True)
class SaleLine:
    id: UUID
    sale_id: UUID
    menu_item_id: UUID
    quantity: Decimal
    unit_price: Decimal | None = None


def sale_source_id(file_hash: str, line_number: int, transaction_id: str | None = None) -> str:
    """
    Source-row identifier.

    The export's own transaction id when the file carries one, so a
    corrected re-export updates the same sale.  Otherwise
    ``<hash[:8]>-<line>``.
    """
    if transaction_id:
        return transaction_id.strip()
    return f"{file_hash[:8]}-{line_number}"

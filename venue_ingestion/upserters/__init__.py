"""Domain upserters: validated row -> natural-key upsert."""

from venue_ingestion.domain.types import SourceType
from venue_ingestion.upserters.base import DomainUpserter, UpsertContext, UpsertResult
from venue_ingestion.upserters.inventory import InventoryUpserter
from venue_ingestion.upserters.payroll import PayrollUpserter
from venue_ingestion.upserters.reference import get_or_create_channel, slugify
from venue_ingestion.upserters.sales import SalesUpserter


def default_upserter_registry() -> dict[SourceType, DomainUpserter]:
    """Return a dict of source_type -> upserter for every source type."""
    return {
        SourceType.SALES: SalesUpserter(),
        SourceType.LABOR: PayrollUpserter(),
        SourceType.INVENTORY: InventoryUpserter(),
    }


__all__ = [
    "DomainUpserter",
    "UpsertContext",
    "UpsertResult",
    "SalesUpserter",
    "PayrollUpserter",
    "InventoryUpserter",
    "get_or_create_channel",
    "slugify",
    "default_upserter_registry",
]

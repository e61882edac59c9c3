"""Field mapping and row parsing: raw CSV rows -> validated ParsedRow."""

from venue_ingestion.mapping.engine import FieldMapper
from venue_ingestion.mapping.parser import RowParser

__all__ = ["FieldMapper", "RowParser"]

"""Source adapters: tokenize uploaded content into records."""

from venue_ingestion.adapters.base import SourceAdapter, SourceProbe, SourceRecord
from venue_ingestion.adapters.csv_adapter import CsvSourceAdapter

__all__ = ["CsvSourceAdapter", "SourceAdapter", "SourceProbe", "SourceRecord"]

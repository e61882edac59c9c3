"""Ingestion services: import job lifecycle and mapping profiles."""

from venue_ingestion.services.import_service import ImportService
from venue_ingestion.services.mapping_service import MappingService

__all__ = ["ImportService", "MappingService"]

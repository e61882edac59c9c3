"""Ingestion ORM models (import jobs, anomalies, mapping profiles)."""

from venue_ingestion.models.staging import (
    ImportAnomalyModel,
    ImportJobModel,
    MappingProfileModel,
)

__all__ = ["ImportJobModel", "ImportAnomalyModel", "MappingProfileModel"]

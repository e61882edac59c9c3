"""Reporting services: KPI aggregate recomputation."""

from venue_reporting.services.aggregation_service import SYSTEM_ACTOR_ID, AggregationService

__all__ = ["AggregationService", "SYSTEM_ACTOR_ID"]

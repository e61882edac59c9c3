"""Reporting ORM models (KPI aggregates)."""

from venue_reporting.models.aggregate import KpiAggregateModel

__all__ = ["KpiAggregateModel"]

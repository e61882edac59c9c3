"""Selectors for reporting (read side)."""

from venue_reporting.selectors.kpi_selector import KpiSelector, summarize
from venue_reporting.selectors.sale_selector import SaleSelector

__all__ = ["KpiSelector", "SaleSelector", "summarize"]

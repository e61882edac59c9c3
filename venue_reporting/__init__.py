"""
venue_reporting -- KPI aggregation and the reporting read side.

Recomputes per-day, per-channel, per-daypart aggregates (revenue, COGS,
gross margin, labor cost and percentage, net profit, covers, average check)
from sales, payroll periods and menu-item recipe costs, and summarizes them
over reporting windows.

Architecture:
    venue_reporting/ is a top-level package.  It reads venue_modules
    records; nothing in venue_kernel, venue_modules or venue_ingestion
    imports from it.
"""

"""
venue_ingestion -- CSV ingestion for sales, labor and inventory exports.

Turns uploaded CSV content into validated, deduplicated domain records:
content-hash idempotency, per-source-type field mapping and validation,
per-row anomaly recording, and natural-key upserts of sales, payroll
periods and inventory snapshots.

Architecture:
    venue_ingestion/ is a top-level package.  It writes venue_modules
    records; nothing in venue_kernel or venue_modules imports from it.
"""

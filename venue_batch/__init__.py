"""
venue_batch -- Background processing for ingestion and reporting.

Provides a bounded worker pool that processes accepted imports off the
request thread, and an in-process polling scheduler that refreshes KPI
aggregates on an interval.

Architecture:
    venue_batch/ is a top-level package.  Nothing in venue_kernel,
    venue_modules, venue_ingestion or venue_reporting imports from it.

Invariants:
    - The persisted import job status is the only coordination signal.
    - Each background run owns its session and commits it.
    - Clock injection (no datetime.now() calls).
    - Graceful shutdown.
"""

"""
ImportWorker -- bounded background pool for import processing.

Contract:
    ``submit()`` hands a pending job to a thread pool and returns at once
    with a Future; callers poll the job's persisted status.  Each run uses
    its own session and commits on its own.

Architecture: venue_batch/services.  Uses venue_ingestion.services for
    processing and venue_reporting.services for the optional refresh.

Invariants enforced:
    - The persisted job status is the only coordination signal.  No
      in-memory queue state is needed to resume or inspect a job.
    - The pending -> processing claim commits on its own, before any
      row is written.
    - A crash outside the per-row boundary rolls back and marks the job
      failed in a fresh session.
    - All timestamps from injected Clock.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable
from uuid import UUID

from sqlalchemy.orm import Session

from venue_config.schema import VenueSettings
from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.logging_config import LogContext, get_logger

from venue_ingestion.domain.types import ImportJob, ImportJobStatus
from venue_ingestion.services.import_service import ImportService
from venue_reporting.services.aggregation_service import AggregationService

logger = get_logger("batch.worker")


class ImportWorker:
    """Runs ``ImportService.claim_job`` and ``process_claimed`` off the request thread.

    Non-goals:
        - No cancellation of an in-flight job.
        - NOT a durable queue: a job left pending by a process restart is
          resubmitted by the caller.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: VenueSettings,
        clock: Clock | None = None,
        max_workers: int | None = None,
        refresh_after_import: bool | None = None,
    ):
        self._session_factory = session_factory
        self._settings = settings
        self._clock = clock or SystemClock()
        if refresh_after_import is None:
            refresh_after_import = settings.ingestion.refresh_after_import
        self._refresh_after_import = refresh_after_import
        self._max_workers = max_workers or settings.ingestion.worker_pool_size
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="import-worker",
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def submit(self, job_id: UUID, content: bytes) -> Future:
        """Queue a pending job.  The Future resolves to the final ImportJob."""
        logger.info(
            "import_job_queued",
            extra={"job_id": str(job_id), "max_workers": self._max_workers},
        )
        return self._executor.submit(self.run, job_id, content)

    def run(self, job_id: UUID, content: bytes) -> ImportJob:
        """
        Process one job synchronously in a session of its own.

        The claim commits before any row is read, so pollers see
        ``processing`` for the whole time the rows are being written.
        """
        session = self._session_factory()
        try:
            service = ImportService(session, self._clock, self._settings)
            claimed = service.claim_job(job_id)
            session.commit()
            if claimed:
                job = service.process_claimed(job_id, content)
                session.commit()
            else:
                job = service.get_job(job_id)[0]
        except Exception as exc:
            session.rollback()
            logger.exception("import_job_crashed", extra={"job_id": str(job_id)})
            return self._mark_failed(job_id, f"{type(exc).__name__}: {exc}")
        finally:
            session.close()

        if job.status is ImportJobStatus.COMPLETED and self._refresh_after_import:
            self._refresh(job.location_id, job.created_by_id, job.job_id)
        return job

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; by default wait for running jobs to finish."""
        self._executor.shutdown(wait=wait)
        logger.info("import_worker_stopped")

    def __enter__(self) -> "ImportWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _mark_failed(self, job_id: UUID, message: str) -> ImportJob:
        session = self._session_factory()
        try:
            job = ImportService(session, self._clock, self._settings).fail_job(job_id, message)
            session.commit()
            return job
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _refresh(self, location_id: UUID, actor_id: UUID, job_id: UUID) -> None:
        session = self._session_factory()
        try:
            with LogContext.bind(correlation_id=str(job_id)):
                AggregationService(session, self._clock).refresh_aggregates(location_id, actor_id)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception(
                "post_import_refresh_failed",
                extra={"job_id": str(job_id), "location_id": str(location_id)},
            )
        finally:
            session.close()

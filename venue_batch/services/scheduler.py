"""
AggregateRefreshScheduler -- In-process polling refresh of KPI aggregates.

Contract:
    Every ``interval_seconds`` recomputes the aggregates of every location
    via ``AggregationService.refresh_all_locations``.

Architecture: venue_batch/services.  Uses venue_reporting.services.

Invariants enforced:
    - All timestamps from injected Clock.
    - Graceful shutdown (respects stop signal, completes current tick).
    - Concurrent refreshes are last-writer-wins on freshness_timestamp.
"""

from __future__ import annotations

import threading
from typing import Callable
from uuid import UUID

from sqlalchemy.orm import Session

from venue_config.schema import VenueSettings
from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.logging_config import get_logger

from venue_reporting.services.aggregation_service import SYSTEM_ACTOR_ID, AggregationService

logger = get_logger("batch.scheduler")


class AggregateRefreshScheduler:
    """In-process polling scheduler for aggregate refreshes.

    Contract:
        - ``tick()`` refreshes every location once.
        - ``start()`` / ``stop()`` for background thread operation.

    Non-goals:
        - NOT a distributed scheduler (no leader election).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        interval_seconds: int = 300,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or SYSTEM_ACTOR_ID
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @classmethod
    def from_settings(
        cls,
        session_factory: Callable[[], Session],
        settings: VenueSettings,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ) -> "AggregateRefreshScheduler":
        """Scheduler polling at ``reporting.refresh_interval_seconds``."""
        return cls(
            session_factory,
            clock=clock,
            actor_id=actor_id,
            interval_seconds=settings.reporting.refresh_interval_seconds,
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def tick(self) -> int:
        """Refresh all locations (public for testing).

        Returns the number of locations refreshed.
        """
        session = self._session_factory()
        try:
            results = AggregationService(session, self._clock).refresh_all_locations(self._actor_id)
            session.commit()
            return len(results)
        except Exception:
            session.rollback()
            logger.exception("scheduler_tick_failed")
            return 0
        finally:
            session.close()

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="aggregate-refresh-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("scheduler_started", extra={"interval_seconds": self._interval})

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current tick to finish."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self.tick()
            # Wait for interval or until stopped
            self._stop_event.wait(timeout=self._interval)

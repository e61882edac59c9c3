"""Background import processing and scheduled aggregate refresh."""

from venue_batch.services.scheduler import AggregateRefreshScheduler
from venue_batch.services.worker import ImportWorker

__all__ = ["ImportWorker", "AggregateRefreshScheduler"]

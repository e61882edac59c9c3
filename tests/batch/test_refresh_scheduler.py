"""
Tests for venue_batch.services.scheduler -- AggregateRefreshScheduler.

Validates tick() over every location, failure containment and the
start/stop lifecycle.
"""

import time

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from venue_kernel.db.engine import build_engine, create_tables
from venue_kernel.domain.clock import DeterministicClock
from venue_modules.venue.service import VenueService

from venue_batch.services.scheduler import AggregateRefreshScheduler
from venue_ingestion.services.import_service import ImportService
from venue_reporting.models.aggregate import KpiAggregateModel
from venue_reporting.services.aggregation_service import AggregationService

pytestmark = pytest.mark.slow

CONTENT = b"Date,Total\n2024-01-15,50.00\n2024-01-16,70.00\n"


@pytest.fixture
def session_factory(tmp_path, settings, test_actor_id):
    engine = build_engine(f"sqlite:///{tmp_path / 'venue.db'}")
    create_tables(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    clock = DeterministicClock()
    session = factory()
    try:
        location = VenueService(session, clock).seed_reference_data(settings, test_actor_id)
        imports = ImportService(session, clock, settings)
        job = imports.start_import("sales", "pos.csv", CONTENT, location.id, test_actor_id)
        imports.process_import(job.job_id, CONTENT)
        session.commit()
    finally:
        session.close()

    yield factory
    engine.dispose()


def _aggregate_count(factory) -> int:
    session = factory()
    try:
        return session.scalar(select(func.count()).select_from(KpiAggregateModel))
    finally:
        session.close()


class TestAggregateRefreshScheduler:
    def test_tick_refreshes_every_location(self, session_factory):
        scheduler = AggregateRefreshScheduler(session_factory, DeterministicClock())
        assert scheduler.tick() == 1
        # sales with no channel or daypart only feed the total row
        assert _aggregate_count(session_factory) == 2

    def test_tick_failure_is_contained(self, session_factory, monkeypatch, captured_logs):
        def explode(self, actor_id=None):
            raise RuntimeError("database went away")

        monkeypatch.setattr(AggregationService, "refresh_all_locations", explode)
        scheduler = AggregateRefreshScheduler(session_factory, DeterministicClock())

        assert scheduler.tick() == 0
        assert _aggregate_count(session_factory) == 0
        assert any(r["message"] == "scheduler_tick_failed" for r in captured_logs())

    def test_start_and_stop(self, session_factory):
        scheduler = AggregateRefreshScheduler(session_factory, DeterministicClock(), interval_seconds=3600)
        scheduler.start()
        try:
            assert scheduler.is_running
            deadline = time.monotonic() + 10
            while _aggregate_count(session_factory) == 0 and time.monotonic() < deadline:
                time.sleep(0.05)
        finally:
            scheduler.stop(timeout=10)

        assert not scheduler.is_running
        assert _aggregate_count(session_factory) == 2

    def test_start_twice_keeps_one_thread(self, session_factory):
        scheduler = AggregateRefreshScheduler(session_factory, DeterministicClock(), interval_seconds=3600)
        scheduler.start()
        try:
            thread = scheduler._thread
            scheduler.start()
            assert scheduler._thread is thread
        finally:
            scheduler.stop(timeout=10)

    def test_interval_from_settings(self, session_factory, settings):
        scheduler = AggregateRefreshScheduler.from_settings(session_factory, settings)
        assert scheduler._interval == settings.reporting.refresh_interval_seconds
        assert not scheduler.is_running

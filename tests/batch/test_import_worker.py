"""
Tests for venue_batch.services.worker -- background import processing.

Uses a file-backed SQLite database so the worker threads and the test see
each other's committed writes through separate sessions.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from venue_kernel.db.engine import build_engine, create_tables
from venue_kernel.domain.clock import DeterministicClock
from venue_modules.venue.service import VenueService

from venue_batch.services.worker import ImportWorker
from venue_ingestion.domain.types import ImportJobStatus
from venue_ingestion.services.import_service import ImportService
from venue_reporting.domain.kpi import TOTAL_GRAIN
from venue_reporting.models.aggregate import KpiAggregateModel
from venue_reporting.services.aggregation_service import AggregationService

pytestmark = pytest.mark.slow

CONTENT = b"Date,Time,Total,Channel\n2024-01-15,12:00,80.00,Dine In\n2024-01-15,13:00,abc,Dine In\n"


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'venue.db'}")
    create_tables(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def seeded_location(session_factory, settings, clock, test_actor_id):
    session = session_factory()
    try:
        location = VenueService(session, clock).seed_reference_data(settings, test_actor_id)
        session.commit()
        return location
    finally:
        session.close()


@pytest.fixture
def pending_job(session_factory, settings, clock, seeded_location, test_actor_id):
    session = session_factory()
    try:
        job = ImportService(session, clock, settings).start_import(
            "sales", "pos.csv", CONTENT, seeded_location.id, test_actor_id,
        )
        session.commit()
        return job
    finally:
        session.close()


def _job(session_factory, settings, job_id):
    session = session_factory()
    try:
        return ImportService(session, settings=settings).get_job(job_id)
    finally:
        session.close()


class TestImportWorker:
    def test_submit_processes_and_refreshes(self, session_factory, settings, clock, pending_job, seeded_location):
        with ImportWorker(session_factory, settings, clock, max_workers=1) as worker:
            job = worker.submit(pending_job.job_id, CONTENT).result(timeout=30)

        assert job.status is ImportJobStatus.COMPLETED
        assert (job.processed_rows, job.error_rows) == (1, 1)

        stored, anomalies = _job(session_factory, settings, job.job_id)
        assert stored.status is ImportJobStatus.COMPLETED
        assert len(anomalies) == 1

        session = session_factory()
        try:
            total = session.scalars(
                select(KpiAggregateModel).where(
                    KpiAggregateModel.location_id == seeded_location.id,
                    KpiAggregateModel.business_date == date(2024, 1, 15),
                    KpiAggregateModel.grain_key == TOTAL_GRAIN,
                )
            ).one()
            assert total.revenue == Decimal("80.00")
        finally:
            session.close()

    def test_refresh_can_be_disabled(self, session_factory, settings, clock, pending_job):
        worker = ImportWorker(session_factory, settings, clock, max_workers=1, refresh_after_import=False)
        try:
            worker.run(pending_job.job_id, CONTENT)
        finally:
            worker.shutdown()

        session = session_factory()
        try:
            assert session.scalars(select(KpiAggregateModel)).first() is None
        finally:
            session.close()

    def test_crash_marks_job_failed(self, session_factory, settings, clock, pending_job, monkeypatch, captured_logs):
        def explode(self, job_id, content):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(ImportService, "process_claimed", explode)
        worker = ImportWorker(session_factory, settings, clock, max_workers=1)
        try:
            job = worker.submit(pending_job.job_id, CONTENT).result(timeout=30)
        finally:
            worker.shutdown()

        assert job.status is ImportJobStatus.FAILED
        assert job.error_message == "RuntimeError: disk on fire"
        stored, _ = _job(session_factory, settings, pending_job.job_id)
        assert stored.status is ImportJobStatus.FAILED
        assert any(r["message"] == "import_job_crashed" for r in captured_logs())

    def test_refresh_failure_keeps_completed_job(
        self, session_factory, settings, clock, pending_job, monkeypatch, captured_logs,
    ):
        def explode(self, location_id, actor_id=None):
            raise RuntimeError("aggregates unavailable")

        monkeypatch.setattr(AggregationService, "refresh_aggregates", explode)
        worker = ImportWorker(session_factory, settings, clock, max_workers=1)
        try:
            job = worker.run(pending_job.job_id, CONTENT)
        finally:
            worker.shutdown()

        assert job.status is ImportJobStatus.COMPLETED
        failures = [r for r in captured_logs() if r["message"] == "post_import_refresh_failed"]
        assert len(failures) == 1
        assert failures[0]["job_id"] == str(pending_job.job_id)

    def test_rerun_of_finished_job_is_a_no_op(self, session_factory, settings, clock, pending_job):
        worker = ImportWorker(session_factory, settings, clock, max_workers=2, refresh_after_import=False)
        try:
            first = worker.run(pending_job.job_id, CONTENT)
            second = worker.run(pending_job.job_id, CONTENT)
        finally:
            worker.shutdown()
        assert second.status is ImportJobStatus.COMPLETED
        assert second.processed_rows == first.processed_rows

    def test_pollers_see_processing_while_rows_are_written(
        self, session_factory, settings, clock, pending_job, monkeypatch,
    ):
        seen = []
        original = ImportService._disposition_rows

        def observe(self, job, source_type, result):
            seen.append(_job(session_factory, settings, job.id)[0].status)
            return original(self, job, source_type, result)

        monkeypatch.setattr(ImportService, "_disposition_rows", observe)
        worker = ImportWorker(session_factory, settings, clock, max_workers=1, refresh_after_import=False)
        try:
            job = worker.run(pending_job.job_id, CONTENT)
        finally:
            worker.shutdown()

        assert seen == [ImportJobStatus.PROCESSING]
        assert job.status is ImportJobStatus.COMPLETED

    def test_crash_after_claim_marks_job_failed(self, session_factory, settings, clock, pending_job, monkeypatch):
        def explode(self, job, source_type, result):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(ImportService, "_disposition_rows", explode)
        worker = ImportWorker(session_factory, settings, clock, max_workers=1, refresh_after_import=False)
        try:
            job = worker.run(pending_job.job_id, CONTENT)
        finally:
            worker.shutdown()

        assert job.status is ImportJobStatus.FAILED
        stored, _ = _job(session_factory, settings, pending_job.job_id)
        assert stored.status is ImportJobStatus.FAILED
        assert stored.started_at is not None

"""
Tests for venue_kernel.db.upsert.

Natural-key upsert and find-or-create against real ORM tables: repeated
writes converge on one row, immutable audit columns survive conflicts.
"""

from datetime import datetime, time, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from venue_kernel.db.upsert import insert_if_absent, upsert
from venue_kernel.exceptions import UnsupportedDialectError
from venue_modules.venue.orm import DaypartModel, LocationModel, ServiceChannelModel


@pytest.fixture
def location_row(session, test_actor_id):
    row = LocationModel(name="Upsert Test Venue", timezone="UTC", created_by_id=test_actor_id)
    session.add(row)
    session.flush()
    return row


class TestUpsert:
    """INSERT ... ON CONFLICT DO UPDATE on a natural key."""

    def _daypart(self, location_id, actor_id, end=time(11, 0)):
        return {
            "location_id": location_id,
            "code": "breakfast",
            "name": "Breakfast",
            "start_time": time(7, 0),
            "end_time": end,
            "created_by_id": actor_id,
        }

    def test_insert_returns_new_id(self, session, location_row, test_actor_id):
        row_id = upsert(
            session, DaypartModel, self._daypart(location_row.id, test_actor_id),
            conflict_columns=("location_id", "code"),
        )
        stored = session.get(DaypartModel, row_id)
        assert stored is not None
        assert stored.code == "breakfast"

    def test_conflict_updates_in_place(self, session, location_row, test_actor_id):
        first = upsert(
            session, DaypartModel, self._daypart(location_row.id, test_actor_id),
            conflict_columns=("location_id", "code"),
        )
        second = upsert(
            session, DaypartModel, self._daypart(location_row.id, test_actor_id, end=time(10, 30)),
            conflict_columns=("location_id", "code"),
        )
        assert first == second

        count = session.scalar(
            select(func.count()).select_from(DaypartModel)
            .where(DaypartModel.location_id == location_row.id)
        )
        assert count == 1
        stored = session.get(DaypartModel, first, populate_existing=True)
        assert stored.end_time == time(10, 30)

    def test_conflict_keeps_creator_and_records_updater(self, session, location_row, test_actor_id):
        row_id = upsert(
            session, DaypartModel, self._daypart(location_row.id, test_actor_id),
            conflict_columns=("location_id", "code"),
        )
        other_actor = uuid4()
        upsert(
            session, DaypartModel, self._daypart(location_row.id, other_actor),
            conflict_columns=("location_id", "code"),
            actor_id=other_actor,
        )
        stored = session.get(DaypartModel, row_id, populate_existing=True)
        assert stored.created_by_id == test_actor_id
        assert stored.updated_by_id == other_actor

    def test_now_is_written_to_updated_at(self, session, location_row, test_actor_id):
        stamp = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        row_id = upsert(
            session, DaypartModel, self._daypart(location_row.id, test_actor_id),
            conflict_columns=("location_id", "code"),
            now=stamp,
        )
        stored = session.get(DaypartModel, row_id, populate_existing=True)
        assert stored.updated_at.replace(tzinfo=None) == stamp.replace(tzinfo=None)


class TestInsertIfAbsent:
    """INSERT ... ON CONFLICT DO NOTHING."""

    def test_second_insert_leaves_first_row(self, session, location_row, test_actor_id):
        values = {
            "location_id": location_row.id,
            "code": "dine-in",
            "name": "Dine In",
            "is_active": True,
            "created_by_id": test_actor_id,
        }
        insert_if_absent(session, ServiceChannelModel, values, conflict_columns=("location_id", "code"))
        insert_if_absent(
            session, ServiceChannelModel, {**values, "name": "Renamed"},
            conflict_columns=("location_id", "code"),
        )

        rows = session.scalars(
            select(ServiceChannelModel).where(ServiceChannelModel.location_id == location_row.id)
        ).all()
        assert len(rows) == 1
        assert rows[0].name == "Dine In"


class TestDialectGuard:
    def test_unsupported_dialect_raises(self):
        class _Dialect:
            name = "mysql"

        class _Bind:
            dialect = _Dialect()

        class _Session:
            def get_bind(self):
                return _Bind()

        with pytest.raises(UnsupportedDialectError) as exc_info:
            upsert(_Session(), DaypartModel, {"code": "x"}, conflict_columns=("code",))
        assert exc_info.value.code == "UNSUPPORTED_DIALECT"

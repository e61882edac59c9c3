"""
Module: venue_kernel.db.upsert
Responsibility: Natural-key upsert and find-or-create primitives.
Architecture position: Kernel > DB.  Used by the domain upserters and the
    aggregation service.  Imports only from db/ and exceptions.

Invariants enforced:
    - Every domain write is ONE atomic ``INSERT ... ON CONFLICT (natural key)``
      statement.  No SELECT-then-INSERT, no row or table locks.  Concurrent
      or repeated writes of the same natural key converge on one row.
    - The surrogate id, created_at and created_by_id of an existing row are
      never overwritten by an upsert.

Failure modes:
    - UnsupportedDialectError if the bound database is neither PostgreSQL
      nor SQLite.
    - IntegrityError on any constraint other than the conflict target
      (e.g. a NOT NULL violation).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from venue_kernel.exceptions import UnsupportedDialectError

# Columns an upsert never overwrites on conflict
_IMMUTABLE_COLUMNS = frozenset({"id", "created_at", "created_by_id"})


def _dialect_insert(session: Session, model: type):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise UnsupportedDialectError(dialect)


def upsert(
    session: Session,
    model: type,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
    *,
    now: datetime | None = None,
    actor_id: UUID | None = None,
) -> UUID:
    """
    Insert ``values`` or, on conflict with ``conflict_columns``, overwrite
    every other supplied column.  Returns the id of the written row.

    Args:
        session: Session bound to PostgreSQL or SQLite.
        model: ORM model class with a unique constraint on conflict_columns.
        values: Column values.  ``id`` is generated when absent.
        conflict_columns: The natural key.
        now: When given, written to updated_at (onupdate doesn't fire here).
        actor_id: When given, written to updated_by_id on conflict.
    """
    row = dict(values)
    row.setdefault("id", uuid4())
    if now is not None:
        row.setdefault("created_at", now)
        row["updated_at"] = now

    stmt = _dialect_insert(session, model).values(**row)
    set_ = {
        name: stmt.excluded[name]
        for name in row
        if name not in conflict_columns and name not in _IMMUTABLE_COLUMNS
    }
    if actor_id is not None and hasattr(model, "updated_by_id"):
        set_["updated_by_id"] = actor_id

    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=set_,
    ).returning(model.id)
    return session.execute(stmt).scalar_one()


def insert_if_absent(
    session: Session,
    model: type,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
) -> None:
    """``INSERT ... ON CONFLICT DO NOTHING``.  Callers re-select by natural key."""
    row = dict(values)
    row.setdefault("id", uuid4())
    stmt = _dialect_insert(session, model).values(**row)
    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    session.execute(stmt)

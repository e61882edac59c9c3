"""Database layer - engine, base classes, types, and upsert."""

from venue_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from venue_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from venue_kernel.db.types import Money, Quantity, round_money
from venue_kernel.db.upsert import insert_if_absent, upsert

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Quantity",
    "round_money",
    "upsert",
    "insert_if_absent",
]

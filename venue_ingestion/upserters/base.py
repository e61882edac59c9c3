"""
DomainUpserter protocol, UpsertContext and UpsertResult.

Upserters turn one validated ParsedRow into one normalized domain record
and write it with ``INSERT ... ON CONFLICT (natural key) DO UPDATE``.  Each
row write runs inside a SAVEPOINT managed by ImportService; an upserter
raises on failure and never commits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from venue_ingestion.domain.types import ParsedRow, SourceType
from venue_modules.venue.models import Daypart


@dataclass(frozen=True)
class UpsertContext:
    """Per-job facts every upserter needs."""

    job_id: UUID
    location_id: UUID
    file_hash: str
    actor_id: UUID
    import_source: str
    now: datetime
    dayparts: tuple[Daypart, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UpsertResult:
    """Result of a single row write."""

    entity_type: str
    entity_id: UUID
    natural_key: tuple = ()


class DomainUpserter(Protocol):
    """Protocol for writing one validated row to its domain table."""

    @property
    def source_type(self) -> SourceType:
        """Source type this upserter handles."""
        ...

    def upsert(
        self,
        row: ParsedRow,
        session: Session,
        context: UpsertContext,
    ) -> UpsertResult:
        """Write the row's domain record.  Runs inside SAVEPOINT."""
        ...

"""
venue_ingestion.domain.types -- Pure frozen dataclasses for the import system.

ZERO I/O.  Imports only from venue_kernel.exceptions and domain/values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from venue_kernel.exceptions import InvalidSourceTypeError

from venue_ingestion.domain.values import (
    AmountValue,
    DateValue,
    ParsedValue,
    TextValue,
    TimeValue,
)


# =============================================================================
# Enums
# =============================================================================


class SourceType(str, Enum):
    """Fixed set of source-file schemas."""

    SALES = "sales"
    LABOR = "labor"
    INVENTORY = "inventory"

    @classmethod
    def parse(cls, value: "SourceType | str") -> "SourceType":
        """Accept the enum, its value, or the aliases ``pos`` and ``payroll``."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _SOURCE_TYPE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidSourceTypeError(str(value)) from None


_SOURCE_TYPE_ALIASES = {"pos": "sales", "payroll": "labor"}


class ImportJobStatus(str, Enum):
    """Job lifecycle: pending -> processing -> completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportJobStatus.COMPLETED, ImportJobStatus.FAILED)


class AnomalySeverity(str, Enum):
    ERROR = "error"  # row excluded from domain writes
    WARNING = "warning"  # recorded for review; e.g. a malformed CSV line


# =============================================================================
# Job / anomaly / profile DTOs
# =============================================================================


@dataclass(frozen=True)
class ImportJob:
    """Immutable snapshot of one ingestion attempt."""

    job_id: UUID
    source_type: SourceType
    file_hash: str
    filename: str
    status: ImportJobStatus
    location_id: UUID
    created_by_id: UUID
    total_rows: int = 0
    processed_rows: int = 0
    error_rows: int = 0
    malformed_lines: int = 0
    mapping_profile_id: UUID | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class ImportAnomaly:
    """One rejected or failed row (or malformed line) of a job."""

    anomaly_id: UUID
    job_id: UUID
    line_number: int
    severity: AnomalySeverity
    message: str
    field: str | None = None
    raw_data: dict[str, Any] | None = None


@dataclass(frozen=True)
class MappingProfile:
    """Reusable raw-header -> logical-field mapping for one source type."""

    profile_id: UUID
    name: str
    source_type: SourceType
    location_id: UUID
    column_map: dict[str, str] = field(default_factory=dict)
    defaults: dict[str, str] = field(default_factory=dict)
    created_by_id: UUID | None = None
    created_at: datetime | None = None


# =============================================================================
# Parsed rows
# =============================================================================


@dataclass(frozen=True)
class RowError:
    """One failed check on a row.  ``message`` names the field."""

    code: str
    message: str
    field: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ParsedRow:
    """
    One data row after mapping and validation.

    ``values`` holds the tagged parsed value for every logical field that
    was present and parsed; it is populated only for fields without errors.
    """

    line_number: int
    raw: dict[str, str]
    mapped: dict[str, str]
    values: dict[str, ParsedValue] = field(default_factory=dict)
    errors: tuple[RowError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    # -- typed accessors --------------------------------------------------

    def get_amount(self, name: str, default: Decimal | None = None) -> Decimal | None:
        value = self.values.get(name)
        return value.value if isinstance(value, AmountValue) else default

    def get_date(self, name: str) -> date | None:
        value = self.values.get(name)
        return value.value if isinstance(value, DateValue) else None

    def get_timestamp_time(self, name: str) -> time | None:
        """Time-of-day carried by a timestamp-style date field, if any."""
        value = self.values.get(name)
        return value.time_of_day if isinstance(value, DateValue) else None

    def get_time(self, name: str) -> time | None:
        value = self.values.get(name)
        return value.value if isinstance(value, TimeValue) else None

    def get_text(self, name: str) -> str | None:
        value = self.values.get(name)
        return value.value if isinstance(value, TextValue) else None


@dataclass(frozen=True)
class MalformedLine:
    """A line the CSV grammar couldn't parse; counted and skipped."""

    line_number: int
    reason: str
    raw_text: str = ""


@dataclass(frozen=True)
class ParseResult:
    """Everything the Row Parser produced for one file."""

    columns: tuple[str, ...]
    rows: tuple[ParsedRow, ...]
    malformed: tuple[MalformedLine, ...] = ()

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def error_rows(self) -> int:
        return sum(1 for row in self.rows if not row.is_valid)

    @property
    def malformed_lines(self) -> int:
        return len(self.malformed)

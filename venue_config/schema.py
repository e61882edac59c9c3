"""
Venue settings schema.

Frozen dataclasses the loader parses ``defaults.yaml`` (or an override
file) into.  No I/O here; see ``venue_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10


@dataclass(frozen=True)
class LocationDef:
    """The single venue this deployment serves."""

    name: str
    timezone: str = "UTC"


@dataclass(frozen=True)
class ChannelDef:
    """Service channel seeded at bootstrap (dine-in, takeaway, ...)."""

    code: str
    name: str


@dataclass(frozen=True)
class DaypartDef:
    """Named half-open time window [start, end)."""

    code: str
    name: str
    start: time
    end: time


@dataclass(frozen=True)
class IngestionSettings:
    import_source: str = "csv-import"
    worker_pool_size: int = 4
    list_jobs_limit: int = 50
    probe_sample_size: int = 5
    refresh_after_import: bool = True


@dataclass(frozen=True)
class ReportingSettings:
    refresh_interval_seconds: int = 300


@dataclass(frozen=True)
class VenueSettings:
    """Root settings object returned by ``get_settings()``."""

    database: DatabaseSettings
    location: LocationDef
    channels: tuple[ChannelDef, ...] = ()
    dayparts: tuple[DaypartDef, ...] = ()
    ingestion: IngestionSettings = field(default_factory=IngestionSettings)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    # source_type -> ((raw header, logical field), ...)
    default_mappings: dict[str, tuple[tuple[str, str], ...]] = field(default_factory=dict)
    checksum: str = ""

    def default_column_map(self, source_type: str) -> dict[str, str]:
        """Raw header -> logical field for ``source_type`` (empty if unknown)."""
        return dict(self.default_mappings.get(source_type, ()))

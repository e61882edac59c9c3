"""
venue_config -- single public entrypoint for venue settings.

Responsibility:
    ``get_settings()`` is the only way runtime code obtains settings:
    database URL, the venue location, seeded channels, daypart windows,
    ingestion worker sizing and the default column mappings per source type.

Resolution order:
    1. explicit ``path`` argument
    2. ``VENUE_CONFIG`` environment variable
    3. the packaged ``defaults.yaml``
    ``DATABASE_URL`` overrides ``database.url`` from whichever file is used.

Failure modes:
    - ``FileNotFoundError`` -- the chosen file doesn't exist.
    - ``SettingsError`` -- required keys missing or values invalid.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path

from venue_config.loader import load_settings
from venue_config.schema import (
    ChannelDef,
    DatabaseSettings,
    DaypartDef,
    IngestionSettings,
    LocationDef,
    ReportingSettings,
    VenueSettings,
)
from venue_kernel.logging_config import get_logger

logger = get_logger("config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = [
    "ChannelDef",
    "DatabaseSettings",
    "DaypartDef",
    "IngestionSettings",
    "LocationDef",
    "ReportingSettings",
    "VenueSettings",
    "get_settings",
]


def get_settings(path: Path | str | None = None) -> VenueSettings:
    """Load venue settings (see module docstring for resolution order)."""
    if path is None:
        path = os.environ.get("VENUE_CONFIG") or DEFAULT_SETTINGS_PATH
    settings = load_settings(Path(path))

    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        settings = dataclasses.replace(
            settings,
            database=dataclasses.replace(settings.database, url=database_url),
        )

    logger.info(
        "settings_loaded",
        extra={
            "path": str(path),
            "checksum": settings.checksum,
            "dayparts": len(settings.dayparts),
            "channels": len(settings.channels),
        },
    )
    return settings

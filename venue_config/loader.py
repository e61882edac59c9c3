"""
Settings Loader (``venue_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``venue_config.schema``.  Runtime callers use ``venue_config.get_settings()``
rather than calling this module directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys or bad time values  -> ``SettingsError``.

Audit relevance
---------------
``compute_checksum`` identifies the settings a deployment ran with, so
daypart windows used by an aggregation run can be traced to a file.
"""

from __future__ import annotations

from datetime import time
from pathlib import Path
from typing import Any

import yaml

from venue_config.schema import (
    ChannelDef,
    DatabaseSettings,
    DaypartDef,
    IngestionSettings,
    LocationDef,
    ReportingSettings,
    VenueSettings,
)
from venue_kernel.exceptions import SettingsError
from venue_kernel.utils.hashing import hash_payload


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_time(value: Any) -> time:
    """Parse ``HH:MM`` / ``HH:MM:SS`` strings (or time objects) from YAML."""
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise ValueError(f"Cannot parse time from {value!r}")


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    return DatabaseSettings(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
    )


def parse_daypart(data: dict[str, Any]) -> DaypartDef:
    """
    Parse a ``DaypartDef``.

    Raises:
        ValueError: if end is not after start.
    """
    start = parse_time(data["start"])
    end = parse_time(data["end"])
    if end <= start:
        raise ValueError(f"Daypart {data['code']!r} ends at or before it starts")
    return DaypartDef(
        code=data["code"],
        name=data.get("name", data["code"]),
        start=start,
        end=end,
    )


def parse_ingestion(data: dict[str, Any]) -> IngestionSettings:
    return IngestionSettings(
        import_source=data.get("import_source", "csv-import"),
        worker_pool_size=int(data.get("worker_pool_size", 4)),
        list_jobs_limit=int(data.get("list_jobs_limit", 50)),
        probe_sample_size=int(data.get("probe_sample_size", 5)),
        refresh_after_import=bool(data.get("refresh_after_import", True)),
    )


def parse_default_mappings(
    data: dict[str, dict[str, str]],
) -> dict[str, tuple[tuple[str, str], ...]]:
    return {
        source_type: tuple((str(raw), str(logical)) for raw, logical in columns.items())
        for source_type, columns in data.items()
    }


def parse_settings(data: dict[str, Any], source: str = "<dict>") -> VenueSettings:
    """
    Parse a full ``VenueSettings`` from a dict.

    Raises:
        SettingsError: if a required key is missing or a value is invalid.
    """
    try:
        return VenueSettings(
            database=parse_database(data["database"]),
            location=LocationDef(
                name=data["location"]["name"],
                timezone=data["location"].get("timezone", "UTC"),
            ),
            channels=tuple(
                ChannelDef(code=c["code"], name=c["name"]) for c in data.get("channels", ())
            ),
            dayparts=tuple(parse_daypart(d) for d in data.get("dayparts", ())),
            ingestion=parse_ingestion(data.get("ingestion") or {}),
            reporting=ReportingSettings(
                refresh_interval_seconds=int(
                    (data.get("reporting") or {}).get("refresh_interval_seconds", 300)
                ),
            ),
            default_mappings=parse_default_mappings(data.get("default_mappings") or {}),
            checksum=compute_checksum(data),
        )
    except KeyError as exc:
        raise SettingsError(source, f"missing key {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise SettingsError(source, str(exc)) from exc


def load_settings(path: Path) -> VenueSettings:
    """Load and parse the settings file at ``path``."""
    return parse_settings(load_yaml_file(path), source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    SHA-256 of the canonical JSON form of the raw settings mapping.

    Identical ``data`` always produces identical checksums.
    """
    return hash_payload(data)

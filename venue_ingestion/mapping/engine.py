"""
Field mapper: raw CSV row -> logical-field strings.

Pure transformation.  Never raises for missing fields; absence of a
required field surfaces only in validation.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from venue_ingestion.domain.types import MappingProfile, SourceType


@dataclass(frozen=True)
class FieldMapper:
    """
    Resolves logical fields for one source type.

    Contract:
        - For each (raw column, logical field) pair in ``column_map``, a
          non-empty raw value is assigned to the logical field.  When two
          raw columns map to the same field, the later pair wins.
        - Then every logical field still absent takes its entry from
          ``defaults`` when there is one.
    """

    source_type: SourceType
    column_map: dict[str, str]
    defaults: dict[str, str] = field(default_factory=dict)
    profile_id: object | None = None

    @classmethod
    def from_profile(cls, profile: MappingProfile) -> "FieldMapper":
        return cls(
            source_type=profile.source_type,
            column_map=dict(profile.column_map),
            defaults=dict(profile.defaults),
            profile_id=profile.profile_id,
        )

    @classmethod
    def from_default_mapping(
        cls,
        source_type: SourceType,
        default_column_map: dict[str, str],
    ) -> "FieldMapper":
        """Mapper used when an import names no profile (one header per field)."""
        return cls(source_type=source_type, column_map=dict(default_column_map))

    def map_row(self, raw: dict[str, str]) -> dict[str, str]:
        mapped: dict[str, str] = {}
        for raw_column, logical in self.column_map.items():
            value = raw.get(raw_column.strip())
            if value is not None and value.strip():
                mapped[logical] = value.strip()
        for logical, default in self.defaults.items():
            if logical not in mapped and default is not None and str(default).strip():
                mapped[logical] = str(default).strip()
        return mapped

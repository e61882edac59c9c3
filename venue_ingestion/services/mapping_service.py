"""
Mapping profile service: create / get / list / delete.

Profiles are scoped to a location and a source type.  Every target of a
column map and every key of the defaults must be a logical field of the
profile's source type.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.exceptions import MappingProfileNotFoundError
from venue_kernel.logging_config import get_logger

from venue_ingestion.domain.types import MappingProfile, SourceType
from venue_ingestion.domain.validators import logical_fields
from venue_ingestion.models.staging import MappingProfileModel

logger = get_logger("ingestion.mapping_service")


def _check_fields(
    source_type: SourceType,
    column_map: dict[str, str],
    defaults: dict[str, str],
) -> None:
    known = logical_fields(source_type)
    unknown = sorted(
        ({str(v) for v in column_map.values()} | {str(k) for k in defaults}) - known
    )
    if unknown:
        raise ValueError(
            f"Unknown {source_type.value} field(s): {', '.join(unknown)}. "
            f"Valid fields: {', '.join(sorted(known))}"
        )


class MappingService:
    """Persists reusable header -> logical-field maps."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def create_profile(
        self,
        location_id: UUID,
        name: str,
        source_type: SourceType | str,
        column_map: dict[str, str],
        actor_id: UUID,
        defaults: dict[str, str] | None = None,
    ) -> MappingProfile:
        """
        Create a profile.

        Raises:
            InvalidSourceTypeError: unknown source type.
            ValueError: empty name or a target that is not a logical field.
        """
        source_type = SourceType.parse(source_type)
        if not name or not name.strip():
            raise ValueError("Mapping profile name is required")
        column_map = {str(k).strip(): str(v).strip() for k, v in column_map.items() if str(k).strip()}
        defaults = {str(k).strip(): str(v) for k, v in (defaults or {}).items()}
        _check_fields(source_type, column_map, defaults)

        now = self._clock.now()
        model = MappingProfileModel(
            id=uuid4(),
            location_id=location_id,
            name=name.strip(),
            source_type=source_type.value,
            column_map=column_map,
            defaults=defaults or None,
            created_at=now,
            updated_at=now,
            created_by_id=actor_id,
        )
        self._session.add(model)
        self._session.flush()
        logger.info(
            "mapping_profile_created",
            extra={
                "profile_id": str(model.id),
                "source_type": source_type.value,
                "column_count": len(column_map),
            },
        )
        return model.to_dto()

    def get_profile(self, profile_id: UUID) -> MappingProfile:
        model = self._session.get(MappingProfileModel, profile_id)
        if model is None:
            raise MappingProfileNotFoundError(profile_id)
        return model.to_dto()

    def list_profiles(
        self,
        location_id: UUID,
        source_type: SourceType | str | None = None,
    ) -> list[MappingProfile]:
        """Profiles for the location, optionally for one source type, by name."""
        stmt = select(MappingProfileModel).where(MappingProfileModel.location_id == location_id)
        if source_type is not None:
            stmt = stmt.where(
                MappingProfileModel.source_type == SourceType.parse(source_type).value
            )
        stmt = stmt.order_by(MappingProfileModel.source_type, MappingProfileModel.name)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile.  Jobs that used it keep their record with the reference cleared."""
        model = self._session.get(MappingProfileModel, profile_id)
        if model is None:
            raise MappingProfileNotFoundError(profile_id)
        self._session.delete(model)
        self._session.flush()
        logger.info("mapping_profile_deleted", extra={"profile_id": str(profile_id)})

"""
Staging ORM models for CSV ingestion.

Contract:
    ImportJobModel persists one ingestion attempt and its row counters.
    ImportAnomalyModel persists one rejected or failed row (or malformed
    line) with the raw row payload.  MappingProfileModel persists reusable
    header -> logical-field maps.

Jobs and anomalies are audit records: never deleted.

Architecture: venue_ingestion/models. Imports from venue_kernel.db.base only.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from venue_ingestion.domain.types import ImportAnomaly, ImportJob, MappingProfile


def _to_json_safe(obj: Any) -> Any:
    """Convert values to JSON-serializable form (Decimal -> str, etc.)."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_json_safe(v) for v in obj]
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    return obj


class ImportJobModel(TrackedBase):
    """One ingestion attempt for one uploaded file."""

    __tablename__ = "import_jobs"

    __table_args__ = (
        Index("idx_import_jobs_hash_location", "file_hash", "location_id"),
        Index("idx_import_jobs_location_created", "location_id", "created_at"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    total_rows: Mapped[int] = mapped_column(default=0, nullable=False)
    processed_rows: Mapped[int] = mapped_column(default=0, nullable=False)
    error_rows: Mapped[int] = mapped_column(default=0, nullable=False)
    malformed_lines: Mapped[int] = mapped_column(default=0, nullable=False)
    mapping_profile_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("mapping_profiles.id", ondelete="SET NULL"), nullable=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    anomalies: Mapped[list["ImportAnomalyModel"]] = relationship(
        "ImportAnomalyModel",
        back_populates="job",
        foreign_keys="ImportAnomalyModel.job_id",
        order_by="ImportAnomalyModel.line_number",
    )

    def to_dto(self) -> ImportJob:
        from venue_ingestion.domain.types import ImportJob, ImportJobStatus, SourceType

        return ImportJob(
            job_id=self.id,
            source_type=SourceType(self.source_type),
            file_hash=self.file_hash,
            filename=self.filename,
            status=ImportJobStatus(self.status),
            location_id=self.location_id,
            created_by_id=self.created_by_id,
            total_rows=self.total_rows,
            processed_rows=self.processed_rows,
            error_rows=self.error_rows,
            malformed_lines=self.malformed_lines,
            mapping_profile_id=self.mapping_profile_id,
            created_at=self.created_at,
            started_at=self.started_at,
            completed_at=self.completed_at,
            error_message=self.error_message,
        )

    def __repr__(self) -> str:
        return f"<ImportJobModel {self.filename} {self.status}>"


class ImportAnomalyModel(TrackedBase):
    """One rejected or failed row of a job (immutable once written)."""

    __tablename__ = "import_anomalies"

    __table_args__ = (
        Index("idx_import_anomalies_job_line", "job_id", "line_number"),
    )

    job_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("import_jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    line_number: Mapped[int] = mapped_column(nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    field: Mapped[str | None] = mapped_column(String(100), nullable=True)
    raw_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    job: Mapped["ImportJobModel"] = relationship(
        "ImportJobModel",
        back_populates="anomalies",
        foreign_keys=[job_id],
    )

    def to_dto(self) -> ImportAnomaly:
        from venue_ingestion.domain.types import AnomalySeverity, ImportAnomaly

        return ImportAnomaly(
            anomaly_id=self.id,
            job_id=self.job_id,
            line_number=self.line_number,
            severity=AnomalySeverity(self.severity),
            message=self.message,
            field=self.field,
            raw_data=self.raw_data,
        )

    @classmethod
    def from_dto(cls, dto: ImportAnomaly, created_by_id: UUID) -> ImportAnomalyModel:
        return cls(
            id=dto.anomaly_id,
            job_id=dto.job_id,
            line_number=dto.line_number,
            severity=dto.severity.value,
            message=dto.message,
            field=dto.field,
            raw_data=_to_json_safe(dto.raw_data) if dto.raw_data else dto.raw_data,
            created_by_id=created_by_id,
            updated_by_id=None,
        )


class MappingProfileModel(TrackedBase):
    """Named header -> logical-field map for one source type."""

    __tablename__ = "mapping_profiles"

    __table_args__ = (
        UniqueConstraint(
            "location_id", "source_type", "name",
            name="uq_mapping_profile_name",
        ),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("locations.id"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    column_map: Mapped[dict] = mapped_column(JSON, nullable=False)
    defaults: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def to_dto(self) -> MappingProfile:
        from venue_ingestion.domain.types import MappingProfile, SourceType

        return MappingProfile(
            profile_id=self.id,
            name=self.name,
            source_type=SourceType(self.source_type),
            location_id=self.location_id,
            column_map=dict(self.column_map or {}),
            defaults=dict(self.defaults or {}),
            created_by_id=self.created_by_id,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<MappingProfileModel {self.source_type}:{self.name}>"

"""
Import service: start -> claim -> process -> completed | failed.

Owns the import job lifecycle.  Computes the content hash for duplicate
rejection, runs the row parser, writes anomalies for rejected rows and
dispatches valid rows to the source-type upserter, one SAVEPOINT per row.
Uses structured logging (LogContext, get_logger("ingestion.*")).

Invariants:
    - For every completed job, processed_rows + error_rows == total_rows.
    - Every row ends processed or as at least one anomaly; none is dropped.
    - Flushes but never commits; the caller owns the transaction.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from venue_config.schema import VenueSettings
from venue_kernel.domain.clock import Clock, SystemClock
from venue_kernel.exceptions import (
    DuplicateImportError,
    HeaderReadError,
    ImportJobNotFoundError,
    MappingProfileMismatchError,
    MappingProfileNotFoundError,
)
from venue_kernel.logging_config import LogContext, get_logger
from venue_kernel.utils.hashing import hash_content

from venue_ingestion.adapters.base import SourceAdapter, SourceProbe
from venue_ingestion.adapters.csv_adapter import CsvSourceAdapter
from venue_ingestion.domain.types import (
    AnomalySeverity,
    ImportAnomaly,
    ImportJob,
    ImportJobStatus,
    ParsedRow,
    ParseResult,
    SourceType,
)
from venue_ingestion.mapping.engine import FieldMapper
from venue_ingestion.mapping.parser import RowParser
from venue_ingestion.models.staging import (
    ImportAnomalyModel,
    ImportJobModel,
    MappingProfileModel,
)
from venue_ingestion.upserters import default_upserter_registry
from venue_ingestion.upserters.base import DomainUpserter, UpsertContext
from venue_modules.venue.service import VenueService

logger = get_logger("ingestion.import_service")


class ImportService:
    """Orchestrates hash -> job -> parse -> upsert/anomaly for one upload."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: VenueSettings | None = None,
        upserters: dict[SourceType, DomainUpserter] | None = None,
        adapter: SourceAdapter | None = None,
    ):
        if settings is None:
            from venue_config import get_settings

            settings = get_settings()
        self._session = session
        self._clock = clock or SystemClock()
        self._settings = settings
        self._upserters = upserters if upserters is not None else default_upserter_registry()
        self._adapter = adapter or CsvSourceAdapter()

    # -------------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------------

    def start_import(
        self,
        source_type: SourceType | str,
        filename: str,
        content: bytes,
        location_id: UUID,
        actor_id: UUID,
        mapping_profile_id: UUID | None = None,
    ) -> ImportJob:
        """
        Accept an upload and create a pending job.

        Raises:
            InvalidSourceTypeError: source type is not sales/labor/inventory.
            DuplicateImportError: the same content already completed for
                this location.  No job is created.
            MappingProfileNotFoundError: the named profile doesn't exist
                for this location.  No job is created.
        """
        source_type = SourceType.parse(source_type)
        file_hash = hash_content(content)

        if mapping_profile_id is not None:
            profile = self._session.get(MappingProfileModel, mapping_profile_id)
            if profile is None or profile.location_id != location_id:
                raise MappingProfileNotFoundError(mapping_profile_id)

        existing = self._session.scalars(
            select(ImportJobModel)
            .where(
                ImportJobModel.file_hash == file_hash,
                ImportJobModel.location_id == location_id,
                ImportJobModel.status == ImportJobStatus.COMPLETED.value,
            )
            .order_by(ImportJobModel.created_at.desc())
            .limit(1)
        ).first()
        if existing is not None:
            logger.warning(
                "duplicate_import_rejected",
                extra={
                    "file_hash": file_hash,
                    "location_id": str(location_id),
                    "existing_job_id": str(existing.id),
                },
            )
            raise DuplicateImportError(file_hash, location_id, existing.id)

        now = self._clock.now()
        job = ImportJobModel(
            id=uuid4(),
            location_id=location_id,
            source_type=source_type.value,
            file_hash=file_hash,
            filename=filename,
            status=ImportJobStatus.PENDING.value,
            total_rows=0,
            processed_rows=0,
            error_rows=0,
            malformed_lines=0,
            mapping_profile_id=mapping_profile_id,
            created_at=now,
            updated_at=now,
            created_by_id=actor_id,
        )
        self._session.add(job)
        self._session.flush()

        logger.info(
            "import_job_created",
            extra={
                "job_id": str(job.id),
                "source_type": source_type.value,
                "source_filename": filename,
                "file_hash": file_hash,
                "size_bytes": len(content),
            },
        )
        return job.to_dto()

    # -------------------------------------------------------------------------
    # Process
    # -------------------------------------------------------------------------

    def process_import(self, job_id: UUID, content: bytes) -> ImportJob:
        """
        Claim a pending job and run it to completion (or failure).

        Calling it on a job that is not pending changes nothing and returns
        the job as it stands.  Callers that want pollers to see
        ``processing`` while rows are written use ``claim_job``, commit,
        then ``process_claimed``.

        Raises:
            ImportJobNotFoundError: no such job.
        """
        if not self.claim_job(job_id):
            return self._job_model(job_id).to_dto()
        return self.process_claimed(job_id, content)

    def claim_job(self, job_id: UUID) -> bool:
        """
        Move a pending job to processing with a conditional UPDATE.

        Returns False, changing nothing, when the job is no longer pending
        (another worker claimed it, or it already finished).

        Raises:
            ImportJobNotFoundError: no such job.
        """
        job = self._job_model(job_id)
        now = self._clock.now()
        with self._job_context(job):
            result = self._session.execute(
                update(ImportJobModel)
                .where(
                    ImportJobModel.id == job_id,
                    ImportJobModel.status == ImportJobStatus.PENDING.value,
                )
                .values(
                    status=ImportJobStatus.PROCESSING.value,
                    started_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            self._session.refresh(job)
            if result.rowcount != 1:
                logger.info(
                    "import_job_skipped",
                    extra={"job_id": str(job.id), "status": job.status},
                )
                return False
            logger.info(
                "import_job_started",
                extra={"job_id": str(job.id), "source_type": job.source_type},
            )
            return True

    def process_claimed(self, job_id: UUID, content: bytes) -> ImportJob:
        """
        Parse and write the rows of a job already claimed by ``claim_job``.

        A job that is not processing is returned unchanged.

        Raises:
            ImportJobNotFoundError: no such job.
        """
        job = self._job_model(job_id)
        with self._job_context(job):
            if job.status != ImportJobStatus.PROCESSING.value:
                logger.info(
                    "import_job_skipped",
                    extra={"job_id": str(job.id), "status": job.status},
                )
                return job.to_dto()

            if hash_content(content) != job.file_hash:
                return self._fail(job, "content does not match the uploaded file hash")

            source_type = SourceType(job.source_type)
            try:
                mapper = self._resolve_mapper(job, source_type)
                result = RowParser(mapper, self._adapter).parse(content)
            except (MappingProfileNotFoundError, MappingProfileMismatchError, HeaderReadError) as exc:
                return self._fail(job, exc.message)

            self._disposition_rows(job, source_type, result)
            return job.to_dto()

    def _job_model(self, job_id: UUID) -> ImportJobModel:
        job = self._session.get(ImportJobModel, job_id, populate_existing=True)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        return job

    @staticmethod
    def _job_context(job: ImportJobModel):
        return LogContext.bind(
            correlation_id=str(job.id),
            producer="ingestion",
            actor_id=str(job.created_by_id),
            location_id=str(job.location_id),
        )

    def _resolve_mapper(self, job: ImportJobModel, source_type: SourceType) -> FieldMapper:
        if job.mapping_profile_id is None:
            return FieldMapper.from_default_mapping(
                source_type,
                self._settings.default_column_map(source_type.value),
            )
        profile = self._session.get(MappingProfileModel, job.mapping_profile_id)
        if profile is None or profile.location_id != job.location_id:
            raise MappingProfileNotFoundError(job.mapping_profile_id)
        if profile.source_type != source_type.value:
            raise MappingProfileMismatchError(
                job.mapping_profile_id, profile.source_type, source_type.value,
            )
        return FieldMapper.from_profile(profile.to_dto())

    def _disposition_rows(
        self,
        job: ImportJobModel,
        source_type: SourceType,
        result: ParseResult,
    ) -> None:
        job.total_rows = result.total_rows
        job.malformed_lines = result.malformed_lines
        self._session.flush()

        for line in result.malformed:
            self._record_anomaly(
                job,
                line_number=line.line_number,
                severity=AnomalySeverity.WARNING,
                message=f"malformed CSV line skipped: {line.reason}",
                raw_data={"raw_text": line.raw_text},
            )

        upserter = self._upserters[source_type]
        context = UpsertContext(
            job_id=job.id,
            location_id=job.location_id,
            file_hash=job.file_hash,
            actor_id=job.created_by_id,
            import_source=self._settings.ingestion.import_source,
            now=self._clock.now(),
            dayparts=VenueService(self._session, self._clock).list_dayparts(job.location_id),
        )

        processed = 0
        errors = 0
        for row in result.rows:
            if not row.is_valid:
                for error in row.errors:
                    self._record_anomaly(
                        job,
                        line_number=row.line_number,
                        severity=AnomalySeverity.ERROR,
                        message=error.message,
                        field=error.field,
                        raw_data=row.raw,
                    )
                errors += 1
                logger.debug(
                    "row_rejected",
                    extra={"line_number": row.line_number, "error_count": len(row.errors)},
                )
                continue

            if self._upsert_row(job, upserter, row, context):
                processed += 1
            else:
                errors += 1

        job.processed_rows = processed
        job.error_rows = errors
        job.completed_at = self._clock.now()
        job.status = ImportJobStatus.COMPLETED.value
        self._session.flush()

        logger.info(
            "import_job_completed",
            extra={
                "job_id": str(job.id),
                "total_rows": job.total_rows,
                "processed_rows": processed,
                "error_rows": errors,
                "malformed_lines": job.malformed_lines,
            },
        )

    def _upsert_row(
        self,
        job: ImportJobModel,
        upserter: DomainUpserter,
        row: ParsedRow,
        context: UpsertContext,
    ) -> bool:
        savepoint = self._session.begin_nested()
        try:
            upserter.upsert(row, self._session, context)
            savepoint.commit()
        except Exception as exc:
            savepoint.rollback()
            self._record_anomaly(
                job,
                line_number=row.line_number,
                severity=AnomalySeverity.ERROR,
                message=str(exc),
                raw_data=row.raw,
            )
            logger.warning(
                "row_upsert_failed",
                extra={
                    "line_number": row.line_number,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
                exc_info=True,
            )
            return False
        return True

    def _record_anomaly(
        self,
        job: ImportJobModel,
        line_number: int,
        severity: AnomalySeverity,
        message: str,
        field: str | None = None,
        raw_data: dict[str, Any] | None = None,
    ) -> None:
        anomaly = ImportAnomaly(
            anomaly_id=uuid4(),
            job_id=job.id,
            line_number=line_number,
            severity=severity,
            message=message,
            field=field,
            raw_data=raw_data,
        )
        self._session.add(ImportAnomalyModel.from_dto(anomaly, created_by_id=job.created_by_id))
        self._session.flush()
        logger.debug(
            "row_anomaly_recorded",
            extra={"line_number": line_number, "severity": severity.value, "field": field},
        )

    # -------------------------------------------------------------------------
    # Failure
    # -------------------------------------------------------------------------

    def _fail(self, job: ImportJobModel, message: str) -> ImportJob:
        job.status = ImportJobStatus.FAILED.value
        job.error_message = message
        job.completed_at = self._clock.now()
        self._session.flush()
        logger.error(
            "import_job_failed",
            extra={"job_id": str(job.id), "error_msg": message},
        )
        return job.to_dto()

    def fail_job(self, job_id: UUID, message: str) -> ImportJob:
        """
        Mark a job failed unless it already reached a terminal state.

        Used by the worker when processing dies outside the per-row boundary.
        """
        job = self._session.get(ImportJobModel, job_id)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        if ImportJobStatus(job.status).is_terminal:
            return job.to_dto()
        with LogContext.bind(correlation_id=str(job.id), producer="ingestion"):
            return self._fail(job, message)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_job(self, job_id: UUID) -> tuple[ImportJob, tuple[ImportAnomaly, ...]]:
        """Job plus its anomalies in line order."""
        job = self._session.get(ImportJobModel, job_id)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        anomalies = self._session.scalars(
            select(ImportAnomalyModel)
            .where(ImportAnomalyModel.job_id == job_id)
            .order_by(ImportAnomalyModel.line_number, ImportAnomalyModel.created_at)
        )
        return job.to_dto(), tuple(a.to_dto() for a in anomalies)

    def list_jobs(self, location_id: UUID, limit: int | None = None) -> list[ImportJob]:
        """Jobs for the location, most recent first."""
        if limit is None:
            limit = self._settings.ingestion.list_jobs_limit
        stmt = (
            select(ImportJobModel)
            .where(ImportJobModel.location_id == location_id)
            .order_by(ImportJobModel.created_at.desc())
            .limit(limit)
        )
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def probe(self, content: bytes) -> SourceProbe:
        """Header, row count and sample rows, without creating a job."""
        return self._adapter.probe(
            content,
            {"sample_size": self._settings.ingestion.probe_sample_size},
        )

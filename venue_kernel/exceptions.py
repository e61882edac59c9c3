"""
Typed Exception Hierarchy for the venue kernel.

===============================================================================
TYPED EXCEPTIONS
===============================================================================

Every error raised by the ingestion and reporting layers is a subclass of
VenueKernelError.  Each class carries:
  1. a CODE class attribute (machine-readable, API-safe)
  2. structured attributes describing the failure (not just a message)

Example:
    try:
        job = service.start_import(...)
    except DuplicateImportError as e:
        api_response(code=e.code, existing_job_id=e.existing_job_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    VenueKernelError (base)
    |
    +-- IngestionError
    |   +-- DuplicateImportError
    |   +-- ImportJobNotFoundError
    |   +-- InvalidSourceTypeError
    |   +-- HeaderReadError
    |   +-- MappingProfileNotFoundError
    |   +-- MappingProfileMismatchError
    |
    +-- UpsertError
    |   +-- UnresolvedReferenceError
    |   +-- UnsupportedDialectError
    |
    +-- SettingsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                       | When Raised
-----------|----------------------------|-------------------------------------------
Import     | DUPLICATE_IMPORT           | Same file content already imported
           | IMPORT_JOB_NOT_FOUND       | Job ID doesn't exist
           | INVALID_SOURCE_TYPE        | Source type not one of sales/labor/inventory
           | HEADER_READ_FAILED         | CSV header row missing or unreadable
           | MAPPING_PROFILE_NOT_FOUND  | Referenced mapping profile doesn't exist
           | MAPPING_PROFILE_MISMATCH   | Profile source type differs from the job's
-----------|----------------------------|-------------------------------------------
Upsert     | UNRESOLVED_REFERENCE       | Row names an entity that doesn't exist
           | UNSUPPORTED_DIALECT        | Store has no natural-key upsert support
-----------|----------------------------|-------------------------------------------
Settings   | SETTINGS_INVALID           | Settings file missing keys or malformed
"""

from __future__ import annotations

from uuid import UUID


class VenueKernelError(Exception):
    """Base exception for all venue kernel errors."""

    code: str = "VENUE_KERNEL_ERROR"

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


# =============================================================================
# Import errors
# =============================================================================


class IngestionError(VenueKernelError):
    """Base for import pipeline errors."""

    code: str = "IMPORT_ERROR"


class DuplicateImportError(IngestionError):
    """Byte-identical content was already imported for this location."""

    code: str = "DUPLICATE_IMPORT"

    def __init__(self, file_hash: str, location_id: UUID, existing_job_id: UUID):
        self.file_hash = file_hash
        self.location_id = location_id
        self.existing_job_id = existing_job_id
        super().__init__(
            f"File has already been imported (job ID: {existing_job_id})"
        )


class ImportJobNotFoundError(IngestionError):
    """Import job ID doesn't exist."""

    code: str = "IMPORT_JOB_NOT_FOUND"

    def __init__(self, job_id: UUID | str):
        self.job_id = str(job_id)
        super().__init__(f"Import job not found: {job_id}")


class InvalidSourceTypeError(IngestionError):
    """Source type is not one of the supported schemas."""

    code: str = "INVALID_SOURCE_TYPE"

    def __init__(self, source_type: str):
        self.source_type = source_type
        super().__init__(f"Unsupported source type: {source_type!r}")


class HeaderReadError(IngestionError):
    """CSV content has no readable header row."""

    code: str = "HEADER_READ_FAILED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to read CSV header: {reason}")


class MappingProfileNotFoundError(IngestionError):
    """Referenced mapping profile doesn't exist."""

    code: str = "MAPPING_PROFILE_NOT_FOUND"

    def __init__(self, profile_id: UUID | str):
        self.profile_id = str(profile_id)
        super().__init__(f"Mapping profile not found: {profile_id}")


class MappingProfileMismatchError(IngestionError):
    """Mapping profile belongs to a different source type than the job."""

    code: str = "MAPPING_PROFILE_MISMATCH"

    def __init__(self, profile_id: UUID | str, profile_source_type: str, job_source_type: str):
        self.profile_id = str(profile_id)
        self.profile_source_type = profile_source_type
        self.job_source_type = job_source_type
        super().__init__(
            f"Mapping profile {profile_id} is for {profile_source_type}, "
            f"not {job_source_type}"
        )


# =============================================================================
# Upsert errors
# =============================================================================


class UpsertError(VenueKernelError):
    """Base for domain write errors."""

    code: str = "UPSERT_ERROR"


class UnresolvedReferenceError(UpsertError):
    """A row refers to an entity (menu item, location) that doesn't exist."""

    code: str = "UNRESOLVED_REFERENCE"

    def __init__(self, entity_type: str, key: str):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"Unknown {entity_type}: {key}")


class UnsupportedDialectError(UpsertError):
    """The bound database has no ON CONFLICT upsert support."""

    code: str = "UNSUPPORTED_DIALECT"

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(
            f"Natural-key upsert is not supported on dialect {dialect!r}"
        )


# =============================================================================
# Settings errors
# =============================================================================


class SettingsError(VenueKernelError):
    """Settings file is missing required keys or holds invalid values."""

    code: str = "SETTINGS_INVALID"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid settings in {path}: {reason}")

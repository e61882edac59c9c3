"""
Deterministic hashing utilities.

Content hashes identify uploaded files for duplicate-import detection;
payload hashes identify settings for change detection.
"""

import hashlib
import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """Serialize types json doesn't handle natively."""
    if isinstance(obj, Decimal):
        return str(obj.normalize())
    if isinstance(obj, (date, datetime, time)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.hex()

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Keys are sorted, whitespace removed, and Decimal/datetime/UUID values
    rendered consistently.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """SHA-256 hex digest of the canonical JSON form of ``payload``."""
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_content(content: bytes) -> str:
    """
    SHA-256 hex digest of raw file content.

    Two uploads are duplicates iff their content hashes are equal; the
    filename plays no part.
    """
    return hashlib.sha256(content).hexdigest()

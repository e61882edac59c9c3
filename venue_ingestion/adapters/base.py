"""
Source adapter protocol and record/probe DTOs.

Contract:
    SourceAdapter.read() yields one SourceRecord per logical record
    (streaming), header included, malformed records flagged rather than
    raised.  SourceAdapter.probe() returns a quick snapshot: row count,
    columns, sample rows.

Architecture: venue_ingestion/adapters.  Decoding and tokenizing only, no DB.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Protocol, runtime_checkable


@dataclass(frozen=True)
class SourceRecord:
    """
    One logical record from the source.

    ``line_number`` is the 1-based physical line the record starts on.
    ``cells`` is None when the record is malformed; ``error`` says why.
    """

    line_number: int
    cells: tuple[str, ...] | None
    raw_text: str = ""
    error: str | None = None

    @property
    def is_malformed(self) -> bool:
        return self.cells is None


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for tokenizing uploaded content into records."""

    def read(self, content: bytes, options: dict[str, Any]) -> Iterator[SourceRecord]:
        """Yield one record per logical line, header first."""
        ...

    def probe(self, content: bytes, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing uploaded content (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, str], ...]
    malformed_lines: int = 0
    encoding: str | None = None
    detected_delimiter: str | None = None

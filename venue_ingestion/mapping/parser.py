"""
Row parser: CSV content -> ParsedRow per data row.

Reads the mandatory header, maps every data row through a FieldMapper and
validates it for the source type.  Malformed lines are collected and
skipped; they never abort the stream.
"""

from __future__ import annotations

from typing import Any, Iterator

from venue_kernel.exceptions import HeaderReadError

from venue_ingestion.adapters.base import SourceAdapter, SourceRecord
from venue_ingestion.adapters.csv_adapter import CsvSourceAdapter, row_dict
from venue_ingestion.domain.types import MalformedLine, ParsedRow, ParseResult, SourceType
from venue_ingestion.domain.validators import validate_row
from venue_ingestion.mapping.engine import FieldMapper


class RowParser:
    """Streams rows out of uploaded content for one source type."""

    def __init__(
        self,
        mapper: FieldMapper,
        adapter: SourceAdapter | None = None,
        options: dict[str, Any] | None = None,
    ):
        self._mapper = mapper
        self._adapter = adapter or CsvSourceAdapter()
        self._options = options or {}

    @property
    def source_type(self) -> SourceType:
        return self._mapper.source_type

    def _open(self, content: bytes) -> tuple[tuple[str, ...], Iterator[SourceRecord]]:
        records = self._adapter.read(content, self._options)
        header = next(records, None)
        if header is None:
            raise HeaderReadError("file is empty")
        if header.is_malformed:
            raise HeaderReadError(header.error or "malformed header line")
        columns = tuple(cell.strip() for cell in header.cells)
        if not any(columns):
            raise HeaderReadError("header line has no column names")
        return columns, records

    def _iter(
        self,
        columns: tuple[str, ...],
        records: Iterator[SourceRecord],
    ) -> Iterator[ParsedRow | MalformedLine]:
        for record in records:
            if record.is_malformed:
                yield MalformedLine(
                    line_number=record.line_number,
                    reason=record.error or "malformed line",
                    raw_text=record.raw_text,
                )
                continue
            raw = row_dict(columns, record.cells)
            mapped = self._mapper.map_row(raw)
            values, errors = validate_row(self._mapper.source_type, mapped)
            yield ParsedRow(
                line_number=record.line_number,
                raw=raw,
                mapped=mapped,
                values=values,
                errors=errors,
            )

    def iter_rows(self, content: bytes) -> Iterator[ParsedRow | MalformedLine]:
        """
        Yield a ParsedRow per data row and a MalformedLine per rejected line.

        Raises:
            HeaderReadError: if there is no readable header line.  Raised
            eagerly, before the first item is requested.
        """
        columns, records = self._open(content)
        return self._iter(columns, records)

    def parse(self, content: bytes) -> ParseResult:
        """Parse the whole file.  Header problems raise HeaderReadError."""
        columns, records = self._open(content)
        rows: list[ParsedRow] = []
        malformed: list[MalformedLine] = []
        for item in self._iter(columns, records):
            if isinstance(item, MalformedLine):
                malformed.append(item)
            else:
                rows.append(item)
        return ParseResult(columns=columns, rows=tuple(rows), malformed=tuple(malformed))

"""
CSV source adapter.

Splits uploaded bytes into logical records (a quoted field may span lines),
then tokenizes each record with ``csv.reader(strict=True)``.  A record the
grammar rejects is yielded as malformed and the stream carries on with the
next record.  Handles a UTF-8 BOM via utf-8-sig.  Leading spaces after a
delimiter are skipped.
"""

from __future__ import annotations

import csv
from typing import Any, Iterator

from venue_kernel.exceptions import HeaderReadError

from venue_ingestion.adapters.base import SourceProbe, SourceRecord


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _decode(content: bytes, encoding: str) -> str:
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as exc:
        raise HeaderReadError(f"content is not valid {encoding}: {exc.reason}") from exc


def _physical_lines(text: str) -> Iterator[str]:
    """Split on LF, keeping line endings (CRLF stays intact)."""
    start = 0
    while start < len(text):
        end = text.find("\n", start)
        if end == -1:
            yield text[start:]
            return
        yield text[start:end + 1]
        start = end + 1


def _scan_quotes(
    line: str,
    in_quotes: bool,
    delimiter: str,
    quotechar: str,
) -> bool:
    """Return whether a quoted field is still open at the end of ``line``."""
    at_field_start = not in_quotes
    i = 0
    while i < len(line):
        ch = line[i]
        if in_quotes:
            if ch == quotechar:
                if i + 1 < len(line) and line[i + 1] == quotechar:
                    i += 2
                    continue
                in_quotes = False
            at_field_start = False
        elif ch == quotechar and at_field_start:
            in_quotes = True
            at_field_start = False
        elif ch == " " and at_field_start:
            pass
        else:
            at_field_start = ch == delimiter
        i += 1
    return in_quotes


def _split_records(text: str, delimiter: str, quotechar: str) -> Iterator[tuple[int, str]]:
    """Yield (starting line number, record text) for each logical record."""
    buffer: list[str] = []
    start_line = 0
    in_quotes = False
    for line_number, line in enumerate(_physical_lines(text), start=1):
        if not buffer:
            start_line = line_number
        buffer.append(line)
        in_quotes = _scan_quotes(line, in_quotes, delimiter, quotechar)
        if not in_quotes:
            yield start_line, "".join(buffer)
            buffer = []
    if buffer:
        # Unterminated quoted field runs to end of file
        yield start_line, "".join(buffer)


def _tokenize(record_text: str, delimiter: str, quotechar: str) -> tuple[str, ...]:
    reader = csv.reader(
        [record_text],
        delimiter=delimiter,
        quotechar=quotechar,
        skipinitialspace=True,
        strict=True,
    )
    return tuple(next(reader, []))


class CsvSourceAdapter:
    """Read CSV content as one SourceRecord per logical record.  Streams."""

    def read(self, content: bytes, options: dict[str, Any]) -> Iterator[SourceRecord]:
        delimiter = options.get("delimiter", ",")
        quotechar = options.get("quotechar", '"')
        text = _decode(content, _get_encoding(options))

        for line_number, record_text in _split_records(text, delimiter, quotechar):
            if not record_text.strip():
                continue
            try:
                cells = _tokenize(record_text, delimiter, quotechar)
            except csv.Error as exc:
                yield SourceRecord(
                    line_number=line_number,
                    cells=None,
                    raw_text=record_text.rstrip("\r\n"),
                    error=str(exc),
                )
                continue
            yield SourceRecord(
                line_number=line_number,
                cells=cells,
                raw_text=record_text.rstrip("\r\n"),
            )

    def probe(self, content: bytes, options: dict[str, Any]) -> SourceProbe:
        sample_size = int(options.get("sample_size", 5))
        records = self.read(content, options)

        header = next(records, None)
        if header is None:
            raise HeaderReadError("file is empty")
        if header.is_malformed:
            raise HeaderReadError(header.error or "malformed header line")
        columns = tuple(cell.strip() for cell in header.cells)

        sample: list[dict[str, str]] = []
        count = 0
        malformed = 0
        for record in records:
            if record.is_malformed:
                malformed += 1
                continue
            count += 1
            if len(sample) < sample_size:
                sample.append(row_dict(columns, record.cells))

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            malformed_lines=malformed,
            encoding=_get_encoding(options),
            detected_delimiter=options.get("delimiter", ","),
        )


def row_dict(columns: tuple[str, ...], cells: tuple[str, ...]) -> dict[str, str]:
    """Header -> trimmed value.  Short rows pad with ""; extra cells are dropped."""
    return {
        column: (cells[i].strip() if i < len(cells) else "")
        for i, column in enumerate(columns)
    }

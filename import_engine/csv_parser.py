"""
import_engine.csv_parser - Low-level CSV reading and structural checks.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG) and strict UTF-8 decoding
  • Header whitespace stripping and duplicate-header detection
  • Field-count consistency between header and every record
  • Returns materialised rows keyed by header, numbered from 1

Anything wrong at this level is structural and aborts the whole
import via CsvParseError.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass


class CsvParseError(Exception):
    """Raised when the file cannot be read as a well-formed CSV table."""
    pass


@dataclass(frozen=True)
class ParsedRow:
    row_number: int              # 1-based, header excluded
    values: dict[str, str]


@dataclass(frozen=True)
class ParsedCsv:
    headers: list[str]
    rows: list[ParsedRow]


def parse_csv(raw: str | bytes) -> ParsedCsv:
    """
    Parse raw file content into header-keyed rows.

    CRLF and LF line endings, quoted delimiters, embedded newlines and
    doubled quotes are handled by the csv module.  Raises CsvParseError
    on empty input, header-only input, duplicate headers, ragged
    records or malformed quoting.
    """
    text = _decode(raw)
    if not text.strip():
        raise CsvParseError("CSV file is empty.")

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        header_record = _next_record(reader)
        if header_record is None:
            raise CsvParseError("CSV file is empty.")

        headers = [h.strip() for h in header_record]
        _check_duplicates(headers)

        rows: list[ParsedRow] = []
        for record in _records(reader):
            row_number = len(rows) + 1
            if len(record) != len(headers):
                raise CsvParseError(
                    f"Row {row_number} has {len(record)} fields; "
                    f"header has {len(headers)}."
                )
            rows.append(ParsedRow(row_number, dict(zip(headers, record))))
    except csv.Error as exc:
        raise CsvParseError(f"Malformed CSV near line {reader.line_num}: {exc}") from exc

    if not rows:
        raise CsvParseError("CSV file is empty: no data rows after the header.")

    return ParsedCsv(headers=headers, rows=rows)


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        try:
            # utf-8-sig strips the BOM when present
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CsvParseError("CSV file is not valid UTF-8 text.") from exc
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw


def _records(reader):
    """Yield non-blank records."""
    while True:
        record = _next_record(reader)
        if record is None:
            return
        yield record


def _next_record(reader) -> list[str] | None:
    for record in reader:
        # Blank lines come back as [] (or [""] for a stray CR)
        if len(record) > 1 or (record and record[0].strip()):
            return record
    return None


def _check_duplicates(headers: list[str]) -> None:
    blanks = [str(i) for i, h in enumerate(headers, start=1) if not h]
    if len(blanks) > 1:
        raise CsvParseError(f"Header row has blank column names at positions {', '.join(blanks)}")

    seen: set[str] = set()
    dupes: list[str] = []
    for h in headers:
        if h in seen and h not in dupes:
            dupes.append(h)
        seen.add(h)
    if dupes:
        raise CsvParseError(f"Duplicate header name(s): {', '.join(repr(d) for d in dupes)}")

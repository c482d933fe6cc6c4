#!/usr/bin/env python3
"""
Diary reader: export file → ordered MovieRecords plus skip diagnostics

Never aborts on a bad line. Each data line produces an explicit LineResult
(a record or a SkippedLine) and ingestion continues with the next line.
The only whole-read failure is an unreadable source, reported through
ReadResult.source_available rather than an exception.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple

from diarylib.constants import (
    DEFAULT_CONFIG, DIARY_HEADER, MIN_FIELDS,
    SKIP_TOO_FEW_FIELDS, SKIP_MISSING_NAME, SKIP_PARSE_ERROR,
)
from diarylib.parser import MovieRecord, parse_csv_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedLine:
    """Diagnostic for a data line that did not become a record"""
    line_number: int   # 1-based, header is line 1
    reason: str        # SKIP_* code from constants
    text: str
    detail: str = ''


@dataclass(frozen=True)
class LineResult:
    """Outcome of one data line: exactly one of record / skipped is set"""
    record: Optional[MovieRecord] = None
    skipped: Optional[SkippedLine] = None
    field_count: int = 0

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass
class ReadResult:
    """Everything the reader learned from one source"""
    records: Tuple[MovieRecord, ...] = ()
    skipped: List[SkippedLine] = field(default_factory=list)
    header: Optional[str] = None
    source_available: bool = True
    lines_read: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def is_empty(self) -> bool:
        return not self.records


class DiaryReader:
    """Read Letterboxd diary exports line by line"""

    def __init__(self, encoding: str = DEFAULT_CONFIG['encoding']):
        self.encoding = encoding

    def parse_data_line(self, line: str, line_number: int) -> LineResult:
        """Turn one non-empty data line into a record or a skip diagnostic"""
        try:
            fields = parse_csv_line(line)

            if len(fields) < MIN_FIELDS:
                return LineResult(skipped=SkippedLine(
                    line_number, SKIP_TOO_FEW_FIELDS, line,
                    f"expected at least {MIN_FIELDS} fields, found {len(fields)}",
                ), field_count=len(fields))

            record = MovieRecord.from_fields(fields)
            if not record.name:
                return LineResult(skipped=SkippedLine(
                    line_number, SKIP_MISSING_NAME, line, "name column is empty",
                ), field_count=len(fields))

            return LineResult(record=record, field_count=len(fields))
        except Exception as e:
            return LineResult(skipped=SkippedLine(
                line_number, SKIP_PARSE_ERROR, line, str(e) or type(e).__name__,
            ))

    def read_lines(self, lines: Iterable[str]) -> ReadResult:
        """
        Parse an iterable of text lines (header first)

        Args:
            lines: Lines with or without trailing newlines

        Returns:
            ReadResult with records in file order
        """
        result = ReadResult()
        records: List[MovieRecord] = []
        first_data_line = True

        for line_number, raw in enumerate(lines, start=1):
            result.lines_read = line_number
            line = raw.rstrip('\n')
            if line.endswith('\r'):
                line = line[:-1]

            # First line is always the header, never validated
            if line_number == 1:
                result.header = line
                logger.info(f"CSV header: {line}")
                if parse_csv_line(line) != DIARY_HEADER:
                    logger.debug(f"Header differs from expected columns: {DIARY_HEADER}")
                continue

            if not line:
                continue

            outcome = self.parse_data_line(line, line_number)
            if first_data_line:
                first_data_line = False
                logger.debug(f"First data line has {outcome.field_count} fields")

            if outcome.ok:
                records.append(outcome.record)
            else:
                skipped = outcome.skipped
                result.skipped.append(skipped)
                logger.warning(
                    f"Skipping line {skipped.line_number} ({skipped.reason}): {skipped.detail}"
                )

        result.records = tuple(records)
        logger.info(f"Successfully read {len(records)} movies")
        if result.skipped:
            logger.info(f"Skipped {result.skipped_count} malformed lines")
        return result

    def read_stream(self, stream: TextIO) -> ReadResult:
        """Read from an already-open text stream"""
        try:
            return self.read_lines(stream)
        except (OSError, UnicodeError) as e:
            logger.error(f"Could not read diary stream: {e}")
            return ReadResult(source_available=False)

    def read_path(self, path: Path) -> ReadResult:
        """
        Open and read a diary export

        An unreadable file yields an empty ReadResult with
        source_available=False; a readable file with only a header yields an
        empty ReadResult with source_available=True.
        """
        path = Path(path)
        logger.info(f"Reading file: {path}")
        try:
            with open(path, 'r', encoding=self.encoding, errors='replace', newline='\n') as f:
                return self.read_stream(f)
        except (OSError, LookupError) as e:
            logger.error(f"Could not open file '{path}': {e}")
            return ReadResult(source_available=False)

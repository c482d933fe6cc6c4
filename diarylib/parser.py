#!/usr/bin/env python3
"""
Line parser for Letterboxd diary exports

Splits one export line into fields and maps them onto a MovieRecord.

Quote handling is a plain toggle: every quote character flips the
"inside quotes" state and is dropped from the field text. This covers the
common case of fields wrapped in one pair of quotes ("Movie, The") but will
mis-parse doubled quotes inside a field; this is not a general CSV reader.
"""

from dataclasses import dataclass
from typing import List, Sequence

from diarylib.constants import (
    DELIMITER, QUOTE_CHAR, TRIM_CHARS, NOT_REWATCH, DIARY_FIELDS
)
from diarylib.normalization import safe_float


@dataclass(frozen=True)
class MovieRecord:
    """One watched-movie diary entry, all fields kept as text"""
    date: str = ''
    name: str = ''
    year: str = ''
    source_uri: str = ''     # Letterboxd URI
    rating: str = ''         # 0-5 in half steps, may be empty
    rewatch_flag: str = ''   # "Yes", "No" or empty
    tags: str = ''
    watched_date: str = ''   # Actual viewing date, distinct from diary entry date

    @classmethod
    def from_fields(cls, values: Sequence[str]) -> 'MovieRecord':
        """Map parsed fields positionally; absent trailing columns become ''"""
        padded = list(values[:len(DIARY_FIELDS)])
        padded += [''] * (len(DIARY_FIELDS) - len(padded))
        return cls(**dict(zip(DIARY_FIELDS, padded)))

    @property
    def rating_value(self) -> float:
        return safe_float(self.rating)

    @property
    def is_rewatch(self) -> bool:
        return bool(self.rewatch_flag) and self.rewatch_flag != NOT_REWATCH

    @property
    def display_date(self) -> str:
        """Viewing date when known, otherwise the diary entry date"""
        return self.watched_date or self.date


def trim_field(text: str) -> str:
    """Strip whitespace and quote characters from both ends of a field"""
    return text.strip(TRIM_CHARS)


def parse_csv_line(line: str, delimiter: str = DELIMITER) -> List[str]:
    """
    Split one line into trimmed fields

    Delimiters inside a quoted span are kept as text. Unbalanced quotes never
    fail; they just leave the toggle flipped until the end of the line.

    Args:
        line: One line of text without its newline
        delimiter: Field separator

    Returns:
        List of fields, always at least one (possibly empty) entry

    Examples:
        >>> parse_csv_line('2024-01-01,"Movie, The",2023')
        ['2024-01-01', 'Movie, The', '2023']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(trim_field(''.join(current)))
            current = []
        else:
            current.append(char)

    # Last field is always appended, even when empty
    fields.append(trim_field(''.join(current)))

    return fields

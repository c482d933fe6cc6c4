#!/usr/bin/env python3
"""
Report engine: display ordering, star ratings and diary statistics

Works on an already-read record sequence and never mutates it. Sorting
returns a new list; Python's sort is stable, so records with equal keys keep
their file order in every mode.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from diarylib.constants import (
    STAR_MARKER, HALF_STAR_MARKER, RATING_SCALE, SORT_MENU_CHOICES
)
from diarylib.normalization import safe_float
from diarylib.parser import MovieRecord

logger = logging.getLogger(__name__)


class SortMode(Enum):
    """Display orderings offered by the sort menu"""
    RECENCY = 'recency'              # File order (exports are most recent first)
    CHRONOLOGICAL = 'chronological'  # Oldest first
    ALPHABETICAL = 'alphabetical'    # By name, case-sensitive
    RATING = 'rating'                # Highest rated first

    @classmethod
    def parse(cls, value: Optional[str]) -> 'SortMode':
        """
        Accept a mode value, enum name or menu number ('1'-'4')

        Empty input selects the default (RECENCY). Unknown input raises
        ValueError.
        """
        if value is None:
            return cls.RECENCY
        text = str(value).strip()
        if not text:
            return cls.RECENCY

        text = SORT_MENU_CHOICES.get(text, text)
        for mode in cls:
            if text.lower() in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown sort mode: {value!r}")


@dataclass(frozen=True)
class DiaryStats:
    """Aggregate figures shown under the movie list"""
    total: int
    rated_count: int
    average_rating: Optional[float]  # None when nothing is rated
    rewatch_count: int


@dataclass(frozen=True)
class ReportEntry:
    position: int  # 1-based display position
    record: MovieRecord
    stars: str


@dataclass(frozen=True)
class DiaryReport:
    sort_mode: SortMode
    entries: List[ReportEntry]
    stats: DiaryStats


def sort_records(records: Sequence[MovieRecord], mode: SortMode = SortMode.RECENCY) -> List[MovieRecord]:
    """Return records in display order without touching the input sequence"""
    if mode is SortMode.RECENCY:
        return list(records)
    if mode is SortMode.CHRONOLOGICAL:
        return list(reversed(records))
    if mode is SortMode.ALPHABETICAL:
        return sorted(records, key=lambda r: r.name)
    if mode is SortMode.RATING:
        # reverse=True keeps equal keys in file order
        return sorted(records, key=lambda r: r.rating_value, reverse=True)
    raise ValueError(f"Unsupported sort mode: {mode!r}")


def rating_to_stars(rating: str) -> str:
    """
    Render a rating as star markers

    One marker per whole point, a half marker when the fraction is at least
    0.5, then the rating text as given, "(rating/5)". Unrated or unparsable
    ratings render as ''. Values outside 0-5 are not range-checked.

    Examples:
        >>> rating_to_stars("4.5")
        '**** ½ (4.5/5)'
        >>> rating_to_stars("5")
        '***** (5/5)'
        >>> rating_to_stars("")
        ''
    """
    value = safe_float(rating)
    if value == 0.0:
        return ''

    full_stars = int(value)
    parts = []
    if full_stars > 0:
        parts.append(STAR_MARKER * full_stars)
    if value - full_stars >= 0.5:
        parts.append(HALF_STAR_MARKER)
    parts.append(f"({rating}/{RATING_SCALE})")
    return ' '.join(parts)


def compute_stats(records: Sequence[MovieRecord]) -> DiaryStats:
    """
    Count rated films, average their ratings and count rewatches

    A rating that parses to 0.0 (empty, malformed or a literal 0) counts as
    unrated and is left out of both the count and the average.
    """
    rated_count = 0
    total_rating = 0.0
    rewatch_count = 0

    for record in records:
        value = record.rating_value
        if value != 0.0:
            rated_count += 1
            total_rating += value
        if record.is_rewatch:
            rewatch_count += 1

    average = total_rating / rated_count if rated_count else None

    return DiaryStats(
        total=len(records),
        rated_count=rated_count,
        average_rating=average,
        rewatch_count=rewatch_count,
    )


def build_report(records: Sequence[MovieRecord], mode: SortMode = SortMode.RECENCY) -> DiaryReport:
    """Sort, render stars and compute statistics for the console"""
    ordered = sort_records(records, mode)
    entries = [
        ReportEntry(position=i, record=record, stars=rating_to_stars(record.rating))
        for i, record in enumerate(ordered, start=1)
    ]
    stats = compute_stats(records)
    logger.debug(
        f"Built report: {stats.total} entries, mode={mode.value}, "
        f"{stats.rated_count} rated, {stats.rewatch_count} rewatches"
    )
    return DiaryReport(sort_mode=mode, entries=entries, stats=stats)

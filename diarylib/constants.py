#!/usr/bin/env python3
"""
Shared constants for the diary reader

Single source of truth for the export schema, sort modes and star markers.
DO NOT duplicate these values in other modules - import from here instead.
"""

# Letterboxd diary.csv column order:
#   Date,Name,Year,Letterboxd URI,Rating,Rewatch,Tags,Watched Date
# Attribute names on MovieRecord, in schema order
DIARY_FIELDS = [
    'date',
    'name',
    'year',
    'source_uri',
    'rating',
    'rewatch_flag',
    'tags',
    'watched_date',
]

# Header labels as they appear in the export (informational only, never validated)
DIARY_HEADER = ['Date', 'Name', 'Year', 'Letterboxd URI', 'Rating', 'Rewatch', 'Tags', 'Watched Date']

# Date and name must both be present for a line to become a record
MIN_FIELDS = 2

DELIMITER = ','
QUOTE_CHAR = '"'

# Characters stripped from both ends of every field
TRIM_CHARS = ' \t\r\n"'

# The only rewatch value that explicitly means "not a rewatch"
NOT_REWATCH = 'No'

# Star rendering
STAR_MARKER = '*'
HALF_STAR_MARKER = '½'
RATING_SCALE = 5

# Skip reasons recorded by the reader
SKIP_TOO_FEW_FIELDS = 'too_few_fields'
SKIP_MISSING_NAME = 'missing_name'
SKIP_PARSE_ERROR = 'parse_error'

# Sort menu numbers → sort mode value
SORT_MENU_CHOICES = {
    '1': 'recency',
    '2': 'chronological',
    '3': 'alphabetical',
    '4': 'rating',
}

DEFAULT_CONFIG = {
    'encoding': 'utf-8-sig',  # Letterboxd exports may carry a BOM
    'default_sort': 'recency',
    'pause_on_exit': False,
    'dialog_title': 'Select Letterboxd diary.csv file',
}

#!/usr/bin/env python3
"""
Defensive numeric conversion for diary fields

Ratings arrive as free text. Anything that is not a complete decimal number
reads as 0.0, which callers treat as "unrated". This means a genuine rating of
0 and an unparsable rating are indistinguishable here.
"""

import math
import re

# Optional leading whitespace, sign, digits with optional fraction (or a bare
# fraction), optional exponent. Nothing may follow the number.
_DECIMAL_RE = re.compile(r'\s*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def safe_float(text: str) -> float:
    """
    Convert text to float, never raising

    Args:
        text: Raw field text

    Returns:
        Parsed value, or 0.0 for empty, malformed, partially numeric
        or non-finite input

    Examples:
        >>> safe_float("4.5")
        4.5
        >>> safe_float("4.5abc")
        0.0
        >>> safe_float("")
        0.0
    """
    if not text:
        return 0.0

    if not _DECIMAL_RE.fullmatch(text):
        return 0.0

    value = float(text)
    if not math.isfinite(value):
        return 0.0
    return value

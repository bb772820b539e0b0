#!/usr/bin/env python3
"""
Rounding and formatting helpers.

Scores and percentages in reports round half-up (``floor(x + 0.5)``),
never banker's rounding, so the same inputs give the same numbers on
every platform.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from urllib.parse import quote


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity."""
    return int(math.floor(value + 0.5))


def round_to(value: float, places: int = 3) -> float:
    """Round to ``places`` decimals, ties toward +infinity."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def format_fixed(value: float, places: int = 2) -> str:
    """
    Format a float with a fixed number of decimals.

    Rounds the exact binary value of ``value`` half-up, e.g.
    ``format_fixed(0.125) == '0.13'``.
    """
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> int:
    """Integer percentage of part/whole; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def encode_uri_component(text: str) -> str:
    """Percent-encode a URL component (unreserved: A-Z a-z 0-9 - _ . ! ~ * ' ( ))."""
    return quote(text, safe="!~*'()")

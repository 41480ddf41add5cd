"""Helpers for numeric ids taken from URL paths."""

import re
from typing import Optional

_DIGITS = re.compile(r"^\d+$")

# Largest value an Integer primary key column can hold
MAX_DB_ID = 2**31 - 1


def parse_positive_id(raw: Optional[str]) -> Optional[int]:
    """
    Parse a path segment as a positive integer id.

    Returns None for anything else ("abc", "0", "-3", "1.5"), so routes can
    answer 400 instead of FastAPI's default 422. Leading zeros are allowed.
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not _DIGITS.match(raw):
        return None
    value = int(raw)
    return value if value > 0 else None


def is_storable_id(value: int) -> bool:
    """True if value fits the id column; larger ids can't exist in the table."""
    return 0 < value <= MAX_DB_ID

"""
Timestamp resolution for logical attributes.

Raw attribute values are resolved to integer seconds since the epoch (UTC).
The header name of the source column decides how the value is interpreted:

- "timestamp" columns hold an exact integer timestamp (EXACT)
- "time" columns hold a time of day, e.g. "10:15:30 PM" (TIME_OF_DAY)
- "date" columns hold a calendar date, e.g. "2018-02-23" (DATE)

Anything that cannot be parsed resolves to 0, which downstream code treats as
"no timestamp". Nothing in this module raises on bad input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from temporal_dedup.constants import (
    DATE_TOKEN,
    EXACT_TIMESTAMP_TOKEN,
    TEMPORAL_HEADER_TOKENS,
    TIME_OF_DAY_REFERENCE_EPOCH,
    TIME_OF_DAY_TOKEN,
)


class TimestampGranularity(str, Enum):
    """Granularity of the timestamp associated with a logical attribute."""

    DATE = "DATE"
    TIME_OF_DAY = "TIME_OF_DAY"
    EXACT = "EXACT"
    UNKNOWN = "UNKNOWN"

    @property
    def rank(self) -> int:
        """Fineness rank; higher is finer. UNKNOWN (no timestamp) ranks lowest."""
        return _GRANULARITY_RANK[self]

    def is_finer_or_equal(self, other: "TimestampGranularity") -> bool:
        return self.rank >= other.rank


_GRANULARITY_RANK = {
    TimestampGranularity.UNKNOWN: 0,
    TimestampGranularity.DATE: 1,
    TimestampGranularity.TIME_OF_DAY: 2,
    TimestampGranularity.EXACT: 3,
}

# Supported date layouts, tried in order
DATE_FORMATS = (
    "%Y-%m-%d",  # ISO 8601, 2018-02-23
    "%d %B %Y",  # 23 February 2018
    "%d %b %Y",  # 23 Feb 2018
    "%d-%b-%Y",  # 23-Feb-2018, or 23-Feb-18 read as 2018
)

# Two-digit years are always in this century
TWO_DIGIT_YEAR_CENTURY = 2000

# Supported time-of-day layouts, tried in order
TIME_OF_DAY_FORMATS = (
    "%I:%M:%S %p",  # 10:15:30 PM
    "%I:%M:%S%p",  # 10:15:30PM
    "%H:%M:%S",  # 22:15:30
    "%I:%M %p",  # 10:15 PM
    "%H:%M",  # 22:15
)


def is_temporal_header(header: str) -> bool:
    """Check whether a header name refers to temporal data ('date' or 'time', any case)."""
    lowered = header.lower()
    return any(token in lowered for token in TEMPORAL_HEADER_TOKENS)


def granularity_for_header(header: str) -> TimestampGranularity:
    """
    Classify a header name by the timestamp granularity its values carry.

    'timestamp' wins over 'time', which wins over 'date'. Non-temporal headers
    are UNKNOWN.
    """
    lowered = header.lower()
    if EXACT_TIMESTAMP_TOKEN in lowered:
        return TimestampGranularity.EXACT
    if TIME_OF_DAY_TOKEN in lowered:
        return TimestampGranularity.TIME_OF_DAY
    if DATE_TOKEN in lowered:
        return TimestampGranularity.DATE
    return TimestampGranularity.UNKNOWN


def parse_exact(value: str) -> int:
    """Parse an exact integer timestamp; returns 0 when the value is not an integer."""
    value = value.strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


def _expand_two_digit_year(value: str) -> str:
    day, _, rest = value.partition("-")
    month, _, year = rest.partition("-")
    if not month.isalpha() or len(year) != 2 or not year.isdigit():
        return value
    return f"{day}-{month}-{TWO_DIGIT_YEAR_CENTURY + int(year)}"


def parse_date(value: str) -> int:
    """
    Convert a date string to seconds since the epoch (midnight UTC).

    Returns 0 if the string is empty or not in a supported format.
    """
    value = _expand_two_digit_year(value.strip())
    if not value:
        return 0

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return int(parsed.replace(tzinfo=timezone.utc).timestamp())

    return 0


def parse_time_of_day(value: str) -> int:
    """
    Convert a time-of-day string to seconds since the epoch on a fixed reference day.

    Anchoring to a fixed day keeps results independent of the run date, and
    keeps midnight distinguishable from "no timestamp". Returns 0 if the string
    is empty or not in a supported format.
    """
    value = value.strip()
    if not value:
        return 0

    for fmt in TIME_OF_DAY_FORMATS:
        try:
            parsed = datetime.strptime(value.upper(), fmt)
        except ValueError:
            continue
        seconds = parsed.hour * 3600 + parsed.minute * 60 + parsed.second
        return TIME_OF_DAY_REFERENCE_EPOCH + seconds

    return 0


def resolve_timestamp(value: str, granularity: TimestampGranularity) -> int:
    """Resolve a raw value according to its granularity; 0 means no timestamp."""
    if granularity == TimestampGranularity.EXACT:
        return parse_exact(value)
    if granularity == TimestampGranularity.TIME_OF_DAY:
        return parse_time_of_day(value)
    if granularity == TimestampGranularity.DATE:
        return parse_date(value)
    return 0

"""
Interactive record-diff console.

Reads pairs of record IDs from an input stream (whitespace separated, across
any number of lines) and prints the attributes that differ between the two
records. END or QUIT (any case) exits.
"""

import logging
import sys
from typing import Callable, Iterator, Optional, Sequence, TextIO

from temporal_dedup.errors import RecordLookupError
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("END", "QUIT")


def lookup_record(records: Sequence[Record], record_id: int) -> Record:
    """Record with the given ID (IDs are positions in the record set)."""
    if not 0 <= record_id < len(records):
        raise RecordLookupError(record_id, len(records))
    return records[record_id]


def format_differences(first: Record, second: Record) -> list[str]:
    """One line per differing attribute, in column order."""
    return [
        f"Attribute#{d.index}, ID:{first.id} {d.value}\tID:{second.id} {d.other_value}"
        for d in first.diff(second)
    ]


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def run_queries(
    records: Sequence[Record],
    stream: Optional[TextIO] = None,
    write: Callable[[str], None] = print,
) -> int:
    """
    Answer record-diff queries until END/QUIT or end of input.

    Args:
        records: The record set to query
        stream: Input to read IDs from (standard input if omitted)
        write: Output function for prompts and differences

    Returns:
        Number of queries answered

    Raises:
        RecordLookupError: If an ID is outside the record range
    """
    write("*" * 48)
    write(
        "Enter two record IDs separated by a space to query their differences. "
        "Type END or QUIT to exit."
    )
    write(f"Valid record IDs are in the range of 0-{len(records) - 1}")

    answered = 0
    pending = None
    for token in _tokens(stream or sys.stdin):
        if token.upper() in EXIT_COMMANDS:
            break
        try:
            record_id = int(token)
        except ValueError:
            logger.warning(f"Ignoring non-numeric record ID: {token!r}")
            pending = None
            continue

        if pending is None:
            pending = lookup_record(records, record_id)
            continue

        second = lookup_record(records, record_id)
        differences = format_differences(pending, second)
        for line in differences:
            write(line)
        if not differences:
            write(f"Records {pending.id} and {second.id} are identical")
        answered += 1
        pending = None

    return answered

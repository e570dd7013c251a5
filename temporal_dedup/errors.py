"""
Exception hierarchy for temporal_dedup.

Structural failures (unreadable input, bad truth data, invalid record lookups)
abort a run. Recoverable conditions such as unparseable timestamps or a missing
blocking-key header never raise; they degrade to documented fail-safe values.
"""


class TemporalDedupError(Exception):
    """Base class for all temporal_dedup errors."""


class DatasetReadError(TemporalDedupError):
    """Raised when the dataset file cannot be read or has no header row."""


class TruthDataError(TemporalDedupError):
    """Raised when the truth file is missing or references an invalid record ID."""


class RecordLookupError(TemporalDedupError):
    """Raised when a record ID is outside the range of the loaded record set."""

    def __init__(self, record_id: int, record_count: int):
        self.record_id = record_id
        self.record_count = record_count
        super().__init__(
            f"Record ID {record_id} is out of range; valid IDs are 0-{record_count - 1}"
        )

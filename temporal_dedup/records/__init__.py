"""
Record model: records, logical attributes, key descriptor and timestamps.
"""

from temporal_dedup.records.models import (
    DuplicationClass,
    FieldDifference,
    KeyAttribute,
    LogicalAttribute,
    MatchAnnotation,
    Record,
    split_sequence,
    stable_hash,
)
from temporal_dedup.records.timestamps import (
    TimestampGranularity,
    granularity_for_header,
    is_temporal_header,
    resolve_timestamp,
)

__all__ = [
    "DuplicationClass",
    "FieldDifference",
    "KeyAttribute",
    "LogicalAttribute",
    "MatchAnnotation",
    "Record",
    "split_sequence",
    "stable_hash",
    "TimestampGranularity",
    "granularity_for_header",
    "is_temporal_header",
    "resolve_timestamp",
]

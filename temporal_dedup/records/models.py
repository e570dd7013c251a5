"""
Record model for temporal deduplication.

A Record holds the raw attribute values of one row plus the fields derived
from them: timestamps of its logical attributes, elapsed time, event sequence,
its split against the record type's LCS, and the duplicate annotations added by
each matching stage.

Lifecycle:
1. Record(id) is created empty at parse time
2. add_attribute_value / add_logical_attribute populate it column by column
3. read_complete() derives elapsed time and the event sequence (once)
4. apply_key / apply_record_type are applied after schema inference
5. add_match / apply_lcs are applied by the matching stages
"""

from __future__ import annotations

import copy
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from temporal_dedup.constants import (
    BOOLEAN_FALSE_VALUE,
    BOOLEAN_TRUE_VALUE,
    GLOBAL_RECORD_TYPE,
)
from temporal_dedup.records.timestamps import TimestampGranularity, resolve_timestamp


class DuplicationClass(str, Enum):
    """
    Kinds of redundancy observed between two records X and Y.

    The string values are the short-hands used in analysis output.
    """

    EXACT_MATCH = "EXACT"  # All attribute values match
    NONKEY_MATCH = "NONKEY"  # All values match except the key
    MODIFIED_VALUES = "MODIFIED"  # Same key, edited values
    ELAPSED_TIME_MATCH = "ELAPSED_TIME"  # Same total elapsed time
    UNCONSTRAINED_ORDER_MATCH = "ORDER"  # Same unconstrained event order


@dataclass(frozen=True)
class MatchAnnotation:
    """One entry of a record's match log."""

    matched_id: int
    duplication_class: DuplicationClass


def split_sequence(sequence: str) -> list[str]:
    """Tokenize a space-delimited sequence; the empty sequence has no tokens."""
    return sequence.split()


def stable_hash(value: str) -> int:
    """32-bit signed hash of a string that is stable across processes."""
    digest = hashlib.md5(value.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big", signed=True)


class LogicalAttribute:
    """
    One instance of a record's repeating attribute group.

    Holds the raw values of the group and the resolved timestamp. When more
    than one column of the group is temporal, the finest granularity wins, but
    only if it resolves to a non-zero timestamp.
    """

    def __init__(self, relative_number: int):
        self.relative_number = relative_number
        self.values: list[str] = []
        self.timestamp = 0
        self.timestamp_granularity = TimestampGranularity.UNKNOWN
        self.timestamp_index = -1

    def add_value(self, value: str) -> None:
        self.values.append(value)

    def offer_timestamp(self, raw: str, granularity: TimestampGranularity, index: int) -> bool:
        """
        Offer a raw temporal value for this logical attribute.

        Args:
            raw: Raw string value of the column
            granularity: Granularity implied by the column header
            index: Absolute column index of the value within the record

        Returns:
            True if the offered value was taken as the timestamp
        """
        if granularity == TimestampGranularity.UNKNOWN:
            return False
        if not granularity.is_finer_or_equal(self.timestamp_granularity):
            return False

        timestamp = resolve_timestamp(raw, granularity)
        if timestamp <= 0:
            return False

        self.timestamp = timestamp
        self.timestamp_granularity = granularity
        self.timestamp_index = index
        return True

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp > 0

    def __repr__(self) -> str:
        return (
            f"LogicalAttribute(relative_number={self.relative_number}, "
            f"timestamp={self.timestamp}, granularity={self.timestamp_granularity.value})"
        )


@dataclass(frozen=True)
class KeyAttribute:
    """
    Descriptor of the dataset's inferred key: 0, 1 or 2 columns.

    Shared read-only by all records once inference has run.
    """

    names: tuple[str, ...] = ()
    indices: tuple[int, ...] = ()

    def __post_init__(self):
        if len(self.names) != len(self.indices):
            raise ValueError("Key attribute names and indices must have the same length")
        if len(self.indices) > 2:
            raise ValueError("Key attributes may have at most two columns")

    @property
    def length(self) -> int:
        return len(self.indices)

    @property
    def primary_index(self) -> int:
        return self.indices[0] if self.indices else -1

    @property
    def secondary_index(self) -> int:
        return self.indices[1] if len(self.indices) > 1 else -1

    def extract(self, raw_values: Sequence[str]) -> tuple[str, ...]:
        """Extract this key's values from a record's raw values ('' for missing columns)."""
        return tuple(raw_values[i] if i < len(raw_values) else "" for i in self.indices)

    def __str__(self) -> str:
        if not self.indices:
            return "Key attributes have not been established"
        parts = ", ".join(
            f"[{name} @ index {index}]" for name, index in zip(self.names, self.indices)
        )
        label = "Key attribute is" if self.length == 1 else "Key attributes are"
        return f"{label}: {parts}"


@dataclass
class FieldDifference:
    """A single differing column between two records."""

    index: int
    value: str
    other_value: str


class Record:
    """All raw and derived information for a single data record."""

    def __init__(self, record_id: int):
        self.id = record_id
        self.raw_values: list[str] = []
        self.populated_count = 0

        self.key = KeyAttribute()
        self.key_values: tuple[str, ...] = ()
        self.logical_attributes: list[LogicalAttribute] = []
        self.record_type = ""

        self.earliest = 0
        self.latest = 0
        self.elapsed_time = 0
        self.timestamp_granularity = TimestampGranularity.UNKNOWN

        self.event_sequence = ""
        self.event_sequence_constrained = ""
        self.event_sequence_unconstrained = ""
        self.lcs_for_record_type = ""
        self.lcs_adhered = True

        self.has_known_duplicate = False
        self.is_truth_duplicate = False
        self.matches: list[MatchAnnotation] = []

        self._integer_set: Optional[frozenset[int]] = None

    # Population

    def add_attribute_value(self, value: str) -> None:
        self.raw_values.append(value)
        if value.strip():
            self.populated_count += 1

    def add_logical_attribute(self, attribute: LogicalAttribute) -> None:
        self.logical_attributes.append(attribute)

    def read_complete(self) -> None:
        """
        Derive the aggregate fields once all attributes have been added.

        Computes earliest/latest timestamps, elapsed time, the record's
        granularity (finest present) and the event sequence: relative numbers
        of timestamped logical attributes ordered by timestamp ascending.
        """
        timestamped = [la for la in self.logical_attributes if la.has_timestamp]

        if timestamped:
            self.earliest = min(la.timestamp for la in timestamped)
            self.latest = max(la.timestamp for la in timestamped)
            self.timestamp_granularity = max(
                (la.timestamp_granularity for la in timestamped), key=lambda g: g.rank
            )
        self.elapsed_time = self.latest - self.earliest

        ordered = sorted(timestamped, key=lambda la: la.timestamp)
        self.event_sequence = " ".join(str(la.relative_number) for la in ordered)
        self._integer_set = None

    # Inference results

    def apply_key(self, key: KeyAttribute) -> None:
        self.key = key
        self.key_values = key.extract(self.raw_values)

    def apply_record_type(self, index: int) -> None:
        """Use the value at the given column as this record's type (temporal grouping value)."""
        self.record_type = self.value_at(index)

    def apply_global_record_type(self) -> None:
        """Make this record comparable with every other record sharing the global type."""
        self.record_type = GLOBAL_RECORD_TYPE

    # Matching

    def add_match(self, matched_id: int, duplication_class: DuplicationClass) -> None:
        self.matches.append(MatchAnnotation(matched_id, duplication_class))
        self.has_known_duplicate = True

    def contains_match(self, matched_id: int) -> bool:
        return any(m.matched_id == matched_id for m in self.matches)

    @property
    def matched_ids(self) -> list[int]:
        return [m.matched_id for m in self.matches]

    @property
    def match_classes(self) -> list[DuplicationClass]:
        return [m.duplication_class for m in self.matches]

    def mark_truth_duplicate(self) -> None:
        self.is_truth_duplicate = True

    def exact_match(self, other: "Record") -> bool:
        """All raw values equal, including the number of values."""
        return self.raw_values == other.raw_values

    def equals_ignoring_key(self, other: "Record") -> bool:
        """Same number of values and every non-key value equal."""
        if len(self.raw_values) != len(other.raw_values):
            return False
        key_indices = set(self.key.indices)
        return all(
            a == b
            for i, (a, b) in enumerate(zip(self.raw_values, other.raw_values))
            if i not in key_indices
        )

    def shares_same_key(self, other: "Record") -> bool:
        """Both records carry the same non-empty key with equal key values."""
        if self.key.length == 0 or self.key != other.key:
            return False
        return self.key_values == other.key_values

    # Timestamps

    def all_timestamped(self) -> bool:
        """Every logical attribute has a timestamp (and there is at least one)."""
        return bool(self.logical_attributes) and all(
            la.has_timestamp for la in self.logical_attributes
        )

    def any_timestamped(self) -> bool:
        return any(la.has_timestamp for la in self.logical_attributes)

    @property
    def timestamp_count(self) -> int:
        return sum(1 for la in self.logical_attributes if la.has_timestamp)

    # Event sequences

    def apply_lcs(self, lcs: Optional[str]) -> bool:
        """
        Split the event sequence against the record type's LCS.

        Each token of the event sequence is looked up in the LCS starting at
        the position after the last matched LCS token. Matched tokens form the
        constrained sequence, the rest form the unconstrained sequence.

        An absent LCS, or one with a single token, carries no ordering
        information: the whole event sequence is unconstrained and the record
        is adherent.

        Args:
            lcs: Space-delimited LCS for this record's type, or None

        Returns:
            True if the record adheres to the LCS
        """
        lcs_tokens = split_sequence(lcs) if lcs else []

        if len(lcs_tokens) <= 1:
            self.lcs_for_record_type = ""
            self.event_sequence_constrained = ""
            self.event_sequence_unconstrained = self.event_sequence
            self.lcs_adhered = True
            return True

        constrained: list[str] = []
        unconstrained: list[str] = []
        lcs_index = 0

        for token in split_sequence(self.event_sequence):
            for position in range(lcs_index, len(lcs_tokens)):
                if lcs_tokens[position] == token:
                    constrained.append(token)
                    lcs_index = position + 1
                    break
            else:
                unconstrained.append(token)

        self.lcs_for_record_type = " ".join(lcs_tokens)
        self.event_sequence_constrained = " ".join(constrained)
        self.event_sequence_unconstrained = " ".join(unconstrained)

        # Out-of-order tokens that do belong to the LCS break adherence
        lcs_set = set(lcs_tokens)
        self.lcs_adhered = not any(token in lcs_set for token in unconstrained)
        return self.lcs_adhered

    @property
    def lcs_length(self) -> int:
        return len(split_sequence(self.lcs_for_record_type))

    @property
    def constrained_length(self) -> int:
        return len(split_sequence(self.event_sequence_constrained))

    @property
    def unconstrained_length(self) -> int:
        return len(split_sequence(self.event_sequence_unconstrained))

    # Comparison helpers

    def value_at(self, index: int) -> str:
        """Raw value at a column index, '' when the row is shorter than the header."""
        if 0 <= index < len(self.raw_values):
            return self.raw_values[index]
        return ""

    def as_integer_set(self) -> frozenset[int]:
        """
        Integer representation of the record for Jaccard similarity.

        Exact-timestamp columns contribute their integer timestamp, boolean
        strings contribute 1/0, and every other value contributes a stable
        string hash. Cached after the first call.
        """
        if self._integer_set is not None:
            return self._integer_set

        exact_timestamps = {
            la.timestamp_index: la.timestamp
            for la in self.logical_attributes
            if la.timestamp_granularity == TimestampGranularity.EXACT
        }

        values = set()
        for i, value in enumerate(self.raw_values):
            if i in exact_timestamps:
                values.add(exact_timestamps[i])
            elif value.lower() == "true":
                values.add(BOOLEAN_TRUE_VALUE)
            elif value.lower() == "false":
                values.add(BOOLEAN_FALSE_VALUE)
            else:
                values.add(stable_hash(value))

        self._integer_set = frozenset(values)
        return self._integer_set

    def diff(self, other: "Record") -> list[FieldDifference]:
        """Columns whose values differ between this record and another ('' for missing)."""
        differences = []
        for i in range(max(len(self.raw_values), len(other.raw_values))):
            value = self.value_at(i)
            other_value = other.value_at(i)
            if value != other_value:
                differences.append(FieldDifference(i, value, other_value))
        return differences

    def clone(self) -> "Record":
        """Independent deep copy; nothing is shared with the original."""
        return copy.deepcopy(self)

    def analysis_fields(self) -> list[str]:
        """
        Derived fields for the analysis output, in ANALYSIS_HEADERS order.

        The raw values follow these fields in the output row.
        """
        return [
            str(self.id),
            str(self.is_truth_duplicate).lower(),
            str(len(self.matches)),
            " ".join(str(matched_id) for matched_id in self.matched_ids),
            " ".join(cls.value for cls in self.match_classes),
            str(self.timestamp_count),
            str(self.earliest),
            str(self.latest),
            str(self.elapsed_time),
            self.lcs_for_record_type,
            str(self.constrained_length),
            self.event_sequence,
            str(self.lcs_adhered).lower(),
            self.event_sequence_unconstrained,
            str(self.unconstrained_length),
        ]

    def __repr__(self) -> str:
        return (
            f"Record(id={self.id}, record_type={self.record_type!r}, "
            f"event_sequence={self.event_sequence!r}, matches={len(self.matches)})"
        )



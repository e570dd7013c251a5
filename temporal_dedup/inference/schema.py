"""
Schema inference from a header row and observed values.

Three inferences, in order:

1. Logical attributes: the longest header span that repeats elsewhere in the
   header row and names temporal data ("date"/"time") is the template of a
   repeating attribute group. Every run of headers equal to the template is one
   logical attribute; all other columns are scalar attributes.
2. Key: the scalar column, or pair of scalar
   columns, whose values are distinct across all records. When no full key
   exists, the candidate with the most distinct values is used.
3. Record type: the column whose value groups records with comparable event
   sequences. For a two-column key it is the coarser of the two columns.

No domain configuration is required beyond the header row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Optional, Sequence

from temporal_dedup.logging import log_stage
from temporal_dedup.records.models import KeyAttribute, LogicalAttribute, Record
from temporal_dedup.records.timestamps import granularity_for_header, is_temporal_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogicalAttributeLayout:
    """Where the repeating attribute group sits within the header row."""

    template: tuple[str, ...] = ()
    start_indices: tuple[int, ...] = ()

    @property
    def length(self) -> int:
        return len(self.template)

    @property
    def covered_indices(self) -> frozenset[int]:
        """Every column index that belongs to some logical attribute instance."""
        return frozenset(
            start + offset for start in self.start_indices for offset in range(self.length)
        )

    def describe(self) -> str:
        if not self.template:
            return "No logical attributes inferred"
        return (
            f"Logical attribute consists of {self.length} attributes: {', '.join(self.template)} "
            f"({len(self.start_indices)} instances)"
        )


@dataclass
class Schema:
    """Result of schema inference for one dataset."""

    headers: list[str]
    layout: LogicalAttributeLayout = field(default_factory=LogicalAttributeLayout)
    key: KeyAttribute = field(default_factory=KeyAttribute)
    record_type_index: Optional[int] = None  # None means the global record type

    @property
    def record_type_name(self) -> str:
        if self.record_type_index is None:
            return "<global>"
        return self.headers[self.record_type_index]


def _occurs_after(headers: Sequence[str], span: Sequence[str], start: int) -> bool:
    """Check whether span occurs again at or after index start."""
    length = len(span)
    for j in range(start, len(headers) - length + 1):
        if list(headers[j : j + length]) == list(span):
            return True
    return False


def longest_repeated_temporal_span(headers: Sequence[str]) -> list[str]:
    """
    Find the longest contiguous header span that repeats and names temporal data.

    The repetition must not overlap the first occurrence. Longer spans are
    preferred; among spans of equal length the leftmost wins.

    Args:
        headers: Ordered header names

    Returns:
        The span's header names, or an empty list if no temporal span repeats
    """
    n = len(headers)
    for length in range(n // 2, 0, -1):
        for i in range(0, n - length + 1):
            span = list(headers[i : i + length])
            if not any(is_temporal_header(h) for h in span):
                continue
            if _occurs_after(headers, span, i + length):
                return span
    return []


def infer_logical_attributes(headers: Sequence[str]) -> LogicalAttributeLayout:
    """
    Locate the logical attribute instances in a header row.

    Headers are scanned left to right; each run equal to the template starts a
    new instance and the scan resumes after it.
    """
    template = longest_repeated_temporal_span(headers)
    if not template:
        return LogicalAttributeLayout()

    length = len(template)
    starts = []
    i = 0
    while i < len(headers):
        if list(headers[i : i + length]) == template:
            starts.append(i)
            i += length
        else:
            i += 1

    return LogicalAttributeLayout(template=tuple(template), start_indices=tuple(starts))


def build_record(
    record_id: int,
    values: Sequence[str],
    headers: Sequence[str],
    layout: LogicalAttributeLayout,
) -> Record:
    """
    Create a Record from one row of raw values.

    Every logical attribute instance of the layout is populated, reading ''
    for columns past the end of a short row.
    """
    record = Record(record_id)
    for value in values:
        record.add_attribute_value(value)

    for relative_number, start in enumerate(layout.start_indices):
        attribute = LogicalAttribute(relative_number)
        for offset in range(layout.length):
            index = start + offset
            raw = values[index] if index < len(values) else ""
            attribute.add_value(raw)
            attribute.offer_timestamp(raw, granularity_for_header(headers[index]), index)
        record.add_logical_attribute(attribute)

    record.read_complete()
    return record


def count_distinct(records: Sequence[Record], indices: Sequence[int]) -> int:
    """Number of distinct value combinations across records for the given columns."""
    return len({tuple(record.value_at(i) for i in indices) for record in records})


def eligible_key_indices(headers: Sequence[str], layout: LogicalAttributeLayout) -> list[int]:
    """Column indices that may form a key: everything outside logical attributes."""
    covered = layout.covered_indices
    return [i for i in range(len(headers)) if i not in covered]


def infer_key(
    headers: Sequence[str],
    records: Sequence[Record],
    layout: LogicalAttributeLayout,
) -> KeyAttribute:
    """
    Infer the primary key from value cardinalities.

    Single columns are tried first, then unordered pairs; the first candidate
    whose values are distinct for every record is the key. Otherwise the
    candidate with the most distinct values wins, considering candidates in the
    order they were tried (first seen wins ties).

    Args:
        headers: Ordered header names
        records: Parsed records
        layout: Logical attribute layout (its columns are not eligible)

    Returns:
        KeyAttribute of length 0, 1 or 2
    """
    total = len(records)
    eligible = eligible_key_indices(headers, layout)
    candidates: list[tuple[KeyAttribute, int]] = []

    for index in eligible:
        candidate = KeyAttribute((headers[index],), (index,))
        distinct = count_distinct(records, (index,))
        if distinct == total:
            return candidate
        candidates.append((candidate, distinct))

    for first, second in combinations(eligible, 2):
        candidate = KeyAttribute((headers[first], headers[second]), (first, second))
        distinct = count_distinct(records, (first, second))
        if distinct == total:
            return candidate
        candidates.append((candidate, distinct))

    best = KeyAttribute()
    best_count = 0
    for candidate, distinct in candidates:
        if distinct > best_count:
            best, best_count = candidate, distinct
    return best


def infer_record_type_index(key: KeyAttribute, records: Sequence[Record]) -> Optional[int]:
    """
    Column index holding the record type (temporal grouping value).

    Single-column key: the key column. Two-column key: the column with fewer
    distinct values (the secondary on a tie). No key: None, meaning every
    record shares the global record type.
    """
    if key.length == 1:
        return key.primary_index
    if key.length == 2:
        primary_distinct = count_distinct(records, (key.primary_index,))
        secondary_distinct = count_distinct(records, (key.secondary_index,))
        if primary_distinct < secondary_distinct:
            return key.primary_index
        return key.secondary_index
    return None


def apply_schema(schema: Schema, records: Sequence[Record]) -> None:
    """Apply the inferred key and record type to every record."""
    for record in records:
        record.apply_key(schema.key)
        if schema.record_type_index is None:
            record.apply_global_record_type()
        else:
            record.apply_record_type(schema.record_type_index)


def infer_schema(
    headers: Sequence[str], rows: Sequence[Sequence[str]]
) -> tuple[Schema, list[Record]]:
    """
    Infer the schema of a dataset and build its records.

    Args:
        headers: Ordered header names
        rows: Raw attribute values per row, in column order; row i becomes record i

    Returns:
        Tuple of (schema, records with key and record type applied)
    """
    headers = list(headers)

    with log_stage(logger, "schema_inference") as info:
        layout = infer_logical_attributes(headers)
        logger.info(layout.describe())

        records = [build_record(i, row, headers, layout) for i, row in enumerate(rows)]

        key = infer_key(headers, records, layout)
        logger.info(f"Primary Key Inference: {key}")

        schema = Schema(
            headers=headers,
            layout=layout,
            key=key,
            record_type_index=infer_record_type_index(key, records),
        )
        logger.info(
            f"Temporal Grouping Value Inference: {schema.record_type_name}"
            + (
                f" @ index {schema.record_type_index}"
                if schema.record_type_index is not None
                else ""
            )
        )

        apply_schema(schema, records)
        info["count"] = len(records)

    return schema, records

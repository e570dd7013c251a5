"""
Pytest configuration and shared fixtures for temporal_dedup tests.
"""

import os

import pytest

from temporal_dedup.records.models import LogicalAttribute, Record
from temporal_dedup.records.timestamps import TimestampGranularity

# Keep environment overrides from a developer's .env out of the tests
for _name in (
    "TEMPORAL_DEDUP_MIN_SEQUENCE_LENGTH",
    "TEMPORAL_DEDUP_WORKERS",
    "TEMPORAL_DEDUP_OUTPUT_DIR",
    "TEMPORAL_DEDUP_LOG_DIR",
):
    os.environ.pop(_name, None)


def make_record(record_id, values, record_type="T", timestamps=(), granularity=None):
    """
    Build a Record directly, without schema inference.

    Args:
        record_id: Record ID
        values: Raw attribute values
        record_type: Record type to apply
        timestamps: One timestamp per logical attribute (0 = none)
        granularity: Granularity for every non-zero timestamp (default EXACT)
    """
    granularity = granularity or TimestampGranularity.EXACT
    record = Record(record_id)
    for value in values:
        record.add_attribute_value(value)
    for number, timestamp in enumerate(timestamps):
        attribute = LogicalAttribute(number)
        if timestamp:
            attribute.timestamp = timestamp
            attribute.timestamp_granularity = granularity
        record.add_logical_attribute(attribute)
    record.read_complete()
    record.record_type = record_type
    return record


@pytest.fixture
def record_factory():
    """Factory for records built without schema inference."""
    return make_record


@pytest.fixture
def procedure_headers():
    """Header row with a repeating 'Step Time' logical attribute."""
    return ["Patient", "Procedure", "Step Time", "Step Time", "Step Time"]


@pytest.fixture
def procedure_rows():
    """
    Five procedure records; row 4 is an exact copy of row 0.

    Patient and Procedure together are the most distinct key candidate, and
    Procedure (fewer distinct values) is the record type.
    """
    return [
        ["P1", "Xray", "08:00:00", "08:10:00", "08:20:00"],
        ["P2", "Xray", "09:00:00", "09:15:00", "09:25:00"],
        ["P3", "Xray", "10:00:00", "10:05:00", "10:31:00"],
        ["P1", "MRI", "08:00:00", "08:30:00", "09:00:00"],
        ["P1", "Xray", "08:00:00", "08:10:00", "08:20:00"],
    ]


@pytest.fixture
def dataset_file(tmp_path, procedure_headers, procedure_rows):
    """Tab-delimited dataset file for the procedure records."""
    path = tmp_path / "procedures.tsv"
    lines = ["\t".join(procedure_headers)] + ["\t".join(row) for row in procedure_rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def truth_file(tmp_path):
    """Truth file naming record 4 as the duplicate."""
    path = tmp_path / "procedures_truth.tsv"
    path.write_text("ID\tNote\n4\tcopy of 0\n", encoding="utf-8")
    return path

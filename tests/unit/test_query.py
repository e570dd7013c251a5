"""
Unit tests for the record-diff console.
"""

import io

import pytest

from temporal_dedup.errors import RecordLookupError
from temporal_dedup.query import format_differences, lookup_record, run_queries


@pytest.fixture
def records(record_factory):
    return [
        record_factory(0, ["P1", "Xray", "08:00"]),
        record_factory(1, ["P1", "MRI", "08:00"]),
        record_factory(2, ["P1", "Xray", "08:00"]),
    ]


def test_format_differences(records):
    """Test one line per differing attribute."""
    assert format_differences(records[0], records[1]) == ["Attribute#1, ID:0 Xray\tID:1 MRI"]


def test_lookup_out_of_range(records):
    """Test that an unknown record ID raises RecordLookupError."""
    with pytest.raises(RecordLookupError) as excinfo:
        lookup_record(records, 3)
    assert excinfo.value.record_count == 3
    assert "0-2" in str(excinfo.value)


def test_run_queries_until_quit(records):
    """Test answering pairs across lines until QUIT."""
    output = []
    answered = run_queries(records, io.StringIO("0 1\n0\n2\nquit\n1 2\n"), output.append)
    assert answered == 2
    assert "Attribute#1, ID:0 Xray\tID:1 MRI" in output
    assert "Records 0 and 2 are identical" in output
    assert not any("ID:2" in line for line in output)


def test_run_queries_ignores_non_numeric(records, caplog):
    """Test that a non-numeric token resets the pending ID."""
    output = []
    answered = run_queries(records, io.StringIO("0 x 1 2 END"), output.append)
    assert answered == 1
    assert "Ignoring non-numeric record ID" in caplog.text
    assert "Attribute#1, ID:1 MRI\tID:2 Xray" in output


def test_run_queries_bad_id(records):
    """Test that an out-of-range ID raises."""
    with pytest.raises(RecordLookupError):
        run_queries(records, io.StringIO("0 9\n"), lambda line: None)

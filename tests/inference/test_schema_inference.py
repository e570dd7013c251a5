"""
Unit tests for schema inference.
"""

from temporal_dedup.constants import GLOBAL_RECORD_TYPE
from temporal_dedup.inference.schema import (
    LogicalAttributeLayout,
    build_record,
    infer_key,
    infer_logical_attributes,
    infer_record_type_index,
    infer_schema,
    longest_repeated_temporal_span,
)
from temporal_dedup.records.models import KeyAttribute
from temporal_dedup.records.timestamps import TimestampGranularity


class TestLogicalAttributeInference:
    """Tests for finding the repeating temporal attribute group."""

    def test_repeated_group(self):
        headers = ["ID", "Event", "Event Date", "Event", "Event Date", "Notes"]
        layout = infer_logical_attributes(headers)
        assert layout.template == ("Event", "Event Date")
        assert layout.start_indices == (1, 3)
        assert layout.covered_indices == frozenset({1, 2, 3, 4})

    def test_non_temporal_repeat_is_ignored(self):
        headers = ["ID", "Name", "Name", "Visit Date"]
        assert longest_repeated_temporal_span(headers) == []
        assert infer_logical_attributes(headers) == LogicalAttributeLayout()

    def test_falls_back_to_shorter_temporal_span(self):
        headers = ["Code", "Code", "Start Time", "Code", "Code", "Start Time"]
        assert longest_repeated_temporal_span(headers) == ["Code", "Code", "Start Time"]
        # The longest repeat (Code, Code) is not temporal; the repeated time column is
        headers = ["Code", "Code", "Code", "Code", "Start Time", "Start Time"]
        assert longest_repeated_temporal_span(headers) == ["Start Time"]

    def test_single_column_instances(self, procedure_headers):
        layout = infer_logical_attributes(procedure_headers)
        assert layout.template == ("Step Time",)
        assert layout.start_indices == (2, 3, 4)

    def test_no_headers(self):
        assert infer_logical_attributes([]) == LogicalAttributeLayout()


class TestBuildRecord:
    """Tests for building records from raw rows."""

    def test_logical_attributes_populated(self, procedure_headers):
        layout = infer_logical_attributes(procedure_headers)
        row = ["P1", "Xray", "08:20:00", "08:00:00", "08:10:00"]
        record = build_record(0, row, procedure_headers, layout)
        assert len(record.logical_attributes) == 3
        assert record.event_sequence == "1 2 0"
        assert record.elapsed_time == 1200
        assert record.timestamp_granularity == TimestampGranularity.TIME_OF_DAY

    def test_short_row_gets_every_logical_attribute(self, procedure_headers):
        layout = infer_logical_attributes(procedure_headers)
        record = build_record(0, ["P1", "Xray", "08:00:00"], procedure_headers, layout)
        assert len(record.logical_attributes) == 3
        assert record.timestamp_count == 1
        assert record.any_timestamped()
        assert not record.all_timestamped()
        assert record.raw_values == ["P1", "Xray", "08:00:00"]


class TestKeyInference:
    """Tests for inferring the key from value cardinalities."""

    def _records(self, headers, rows):
        layout = infer_logical_attributes(headers)
        return layout, [build_record(i, row, headers, layout) for i, row in enumerate(rows)]

    def test_single_distinct_column(self):
        headers = ["Type", "ID", "Step Time", "Step Time"]
        rows = [["a", "1", "", ""], ["a", "2", "", ""], ["b", "3", "", ""]]
        layout, records = self._records(headers, rows)
        assert infer_key(headers, records, layout) == KeyAttribute(("ID",), (1,))

    def test_distinct_pair(self):
        headers = ["Patient", "Procedure", "Step Time", "Step Time"]
        rows = [["P1", "X", "", ""], ["P1", "M", "", ""], ["P2", "X", "", ""]]
        layout, records = self._records(headers, rows)
        key = infer_key(headers, records, layout)
        assert key == KeyAttribute(("Patient", "Procedure"), (0, 1))

    def test_best_candidate_when_no_full_key(self, procedure_headers, procedure_rows):
        layout, records = self._records(procedure_headers, procedure_rows)
        key = infer_key(procedure_headers, records, layout)
        assert key == KeyAttribute(("Patient", "Procedure"), (0, 1))

    def test_first_seen_wins_ties(self):
        headers = ["A", "B", "Step Time", "Step Time"]
        rows = [["x", "y", "", ""], ["x", "y", "", ""]]
        layout, records = self._records(headers, rows)
        assert infer_key(headers, records, layout) == KeyAttribute(("A",), (0,))

    def test_logical_attribute_columns_are_not_eligible(self):
        headers = ["Step Time", "Step Time"]
        rows = [["1", "2"], ["3", "4"]]
        layout, records = self._records(headers, rows)
        assert infer_key(headers, records, layout) == KeyAttribute()


class TestRecordTypeInference:
    """Tests for choosing the record type column."""

    def test_single_key_column(self):
        key = KeyAttribute(("ID",), (1,))
        assert infer_record_type_index(key, []) == 1

    def test_pair_uses_coarser_column(self, record_factory):
        records = [
            record_factory(0, ["P1", "X"]),
            record_factory(1, ["P2", "X"]),
            record_factory(2, ["P3", "M"]),
        ]
        key = KeyAttribute(("Patient", "Procedure"), (0, 1))
        assert infer_record_type_index(key, records) == 1

    def test_pair_tie_uses_secondary(self, record_factory):
        records = [record_factory(0, ["P1", "X"]), record_factory(1, ["P2", "M"])]
        key = KeyAttribute(("Patient", "Procedure"), (0, 1))
        assert infer_record_type_index(key, records) == 1

    def test_no_key(self):
        assert infer_record_type_index(KeyAttribute(), []) is None


class TestInferSchema:
    """Tests for the full inference pass."""

    def test_procedure_dataset(self, procedure_headers, procedure_rows):
        schema, records = infer_schema(procedure_headers, procedure_rows)
        assert schema.key.indices == (0, 1)
        assert schema.record_type_index == 1
        assert schema.record_type_name == "Procedure"
        assert [r.id for r in records] == [0, 1, 2, 3, 4]
        assert [r.record_type for r in records] == ["Xray", "Xray", "Xray", "MRI", "Xray"]
        assert records[0].key_values == ("P1", "Xray")

    def test_global_record_type_without_key(self):
        headers = ["Step Time", "Step Time"]
        schema, records = infer_schema(headers, [["08:00:00", "09:00:00"]])
        assert schema.record_type_index is None
        assert records[0].record_type == GLOBAL_RECORD_TYPE

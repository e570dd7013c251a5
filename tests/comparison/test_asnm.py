"""
Unit tests for the ASNM comparison method.
"""

import logging
import math

import pytest

from temporal_dedup.comparison.asnm import (
    ASNM,
    ComparisonBlock,
    blocks_from_starts,
    detect_block_starts,
    jaccard_similarity,
    key_distance,
    resolve_blocking_key_index,
)
from temporal_dedup.config import DedupConfig
from temporal_dedup.constants import DEFAULT_SIMILARITY_THRESHOLDS
from temporal_dedup.evaluation.confusion import ConfusionMatrix


class TestKeyDistance:
    """Tests for the normalized edit distance between blocking keys."""

    def test_identical(self):
        assert key_distance("smith", "smith") == 0.0

    def test_normalized_by_longer_key(self):
        assert key_distance("smith", "smyth") == pytest.approx(0.2)
        assert key_distance("ab", "abcd") == pytest.approx(0.5)

    def test_both_empty(self):
        assert key_distance("", "") == 0.0

    def test_one_empty(self):
        assert key_distance("", "abc") == 1.0


class TestJaccardSimilarity:
    """Tests for Jaccard similarity of integer sets."""

    def test_partial_overlap(self):
        assert jaccard_similarity(frozenset({1, 2, 3}), frozenset({2, 3, 4})) == 0.5

    def test_identical(self):
        assert jaccard_similarity(frozenset({7}), frozenset({7})) == 1.0

    def test_empty_union(self):
        assert jaccard_similarity(frozenset(), frozenset()) == 0.0


class TestBlockDetection:
    """Tests for adaptive block boundaries over sorted keys."""

    def test_boundary_between_distinct_keys(self):
        assert detect_block_starts(["aaa", "aaa", "zzz"]) == [0, 2]

    def test_identical_keys_form_one_block(self):
        assert detect_block_starts(["a"] * 5) == [0]

    def test_distinct_keys_each_start_a_block(self):
        assert detect_block_starts(["a", "b", "c"]) == [0, 1, 2]

    def test_runs_of_keys(self):
        assert detect_block_starts(["a", "a", "a", "b", "b"]) == [0, 3]

    def test_empty(self):
        assert detect_block_starts([]) == []

    def test_blocks_partition_positions(self):
        blocks = blocks_from_starts([0, 3, 4], 6)
        assert blocks == [ComparisonBlock(0, 2), ComparisonBlock(3, 3), ComparisonBlock(4, 5)]
        positions = [p for block in blocks for p in block.positions()]
        assert positions == list(range(6))
        assert [b.size for b in blocks] == [3, 1, 2]


class TestBlockingKeyIndex:
    """Tests for resolving the blocking key header."""

    def test_case_insensitive(self):
        assert resolve_blocking_key_index(["ID", "Surname"], "surname") == 1

    def test_missing_header_falls_back_to_first_column(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert resolve_blocking_key_index(["ID", "Surname"], "Town") == 0
        assert "not found" in caplog.text


class TestASNM:
    """Tests for the ASNM comparison method."""

    def _records(self, record_factory):
        return [
            record_factory(0, ["smith", "x", "y"]),
            record_factory(1, ["jones", "p", "q"]),
            record_factory(2, ["smith", "x", "y"]),
            record_factory(3, ["smith", "x", "z"]),
        ]

    def test_default_thresholds(self):
        assert ASNM().thresholds == DEFAULT_SIMILARITY_THRESHOLDS
        assert ASNM(thresholds=[0.5]).thresholds == (0.5,)

    def test_from_config(self):
        method = ASNM.from_config(DedupConfig(blocking_key="Name", workers=2))
        assert method.has_blocking_key
        assert method.blocking_key == "Name"
        assert method.workers == 2

    def test_no_blocking_key_is_one_block(self, record_factory):
        method = ASNM()
        method.sort_records(["Name", "A", "B"], self._records(record_factory))
        assert method.determine_blocks() == [0]
        assert method.blocks == [ComparisonBlock(0, 3)]

    def test_blocks_on_sorted_key(self, record_factory):
        method = ASNM(blocking_key="name")
        method.sort_records(["Name", "A", "B"], self._records(record_factory))
        assert [r.id for r in method.records] == [1, 0, 2, 3]
        assert method.determine_blocks() == [0, 1]

    def test_predict(self, record_factory):
        method = ASNM(blocking_key="Name")
        method.sort_records(["Name", "A", "B"], self._records(record_factory))
        method.determine_blocks()
        # Records 0 and 2 are identical; record 3 shares two of four values with them
        assert method.predict(1.0) == [0, 2]
        assert method.predict(0.5) == [0, 2, 3]

    def test_threaded_predict_matches_serial(self, record_factory):
        serial = ASNM(blocking_key="Name")
        threaded = ASNM(blocking_key="Name", workers=3)
        for method in (serial, threaded):
            method.sort_records(["Name", "A", "B"], self._records(record_factory))
            method.determine_blocks()
        assert threaded.predict(0.5) == serial.predict(0.5)

    def test_execute_comparison(self, record_factory):
        records = self._records(record_factory)
        matrix = ConfusionMatrix([2], records)
        before = [(r.raw_values[:], r.matches[:]) for r in records]

        results = ASNM(blocking_key="Name", thresholds=[1.0, 0.5]).execute_comparison(
            matrix, ["Name", "A", "B"], records
        )

        assert [r.label for r in results] == ["threshold = 1.0", "threshold = 0.5"]
        assert results[0].predicted_ids == [0, 2]
        assert results[0].assessment.tp == 1
        assert results[0].assessment.fp == 1
        assert results[1].similarity_count == 3
        assert all(r.method == "ASNM" for r in results)
        assert all(not math.isnan(r.assessment.precision) for r in results)
        # The given records are untouched
        assert [(r.raw_values, r.matches) for r in records] == before

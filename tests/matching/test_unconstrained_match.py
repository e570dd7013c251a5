"""
Unit tests for the unconstrained order match.
"""

from temporal_dedup.config import DedupConfig
from temporal_dedup.matching.unconstrained import (
    is_unconstrained_order_match,
    run_unconstrained_match,
)
from temporal_dedup.records.models import DuplicationClass


def with_unconstrained(record_factory, record_id, sequence, record_type="T"):
    """Record whose whole event sequence is unconstrained (no usable LCS)."""
    record = record_factory(record_id, [str(record_id)], record_type)
    record.event_sequence = sequence
    record.apply_lcs(None)
    return record


class TestIsUnconstrainedOrderMatch:
    """Tests for the pair predicate."""

    def test_identical_long_sequences(self, record_factory):
        first = with_unconstrained(record_factory, 0, "4 2 7")
        second = with_unconstrained(record_factory, 1, "4 2 7")
        assert is_unconstrained_order_match(first, second, 3)

    def test_below_minimum_length(self, record_factory):
        first = with_unconstrained(record_factory, 0, "4 2 7")
        second = with_unconstrained(record_factory, 1, "4 2 7")
        assert not is_unconstrained_order_match(first, second, 4)

    def test_record_types_must_agree(self, record_factory):
        first = with_unconstrained(record_factory, 0, "4 2 7", "A")
        second = with_unconstrained(record_factory, 1, "4 2 7", "B")
        assert not is_unconstrained_order_match(first, second, 1)

    def test_order_matters(self, record_factory):
        first = with_unconstrained(record_factory, 0, "4 2 7")
        second = with_unconstrained(record_factory, 1, "2 4 7")
        assert not is_unconstrained_order_match(first, second, 1)


class TestRunUnconstrainedMatch:
    """Tests for the unconstrained order stage."""

    def test_flags_new_pairs_only(self, record_factory):
        records = [
            with_unconstrained(record_factory, 0, "1 2 3"),
            with_unconstrained(record_factory, 1, "3 2 1"),
            with_unconstrained(record_factory, 2, "1 2 3"),
            with_unconstrained(record_factory, 3, "3 2 1"),
        ]
        # Already matched by an earlier stage
        records[1].add_match(3, DuplicationClass.EXACT_MATCH)
        records[3].add_match(1, DuplicationClass.EXACT_MATCH)

        predicted = {1, 3}
        flagged = run_unconstrained_match(
            records, DedupConfig(min_unconstrained_length=3), predicted
        )
        assert flagged == [2, 0]
        assert predicted == {0, 1, 2, 3}
        assert records[0].match_classes == [DuplicationClass.UNCONSTRAINED_ORDER_MATCH]
        assert records[1].match_classes == [DuplicationClass.EXACT_MATCH]

    def test_short_sequences_not_flagged(self, record_factory):
        records = [
            with_unconstrained(record_factory, 0, "1 2"),
            with_unconstrained(record_factory, 1, "1 2"),
        ]
        predicted: set[int] = set()
        assert run_unconstrained_match(records, DedupConfig(), predicted) == []
        assert predicted == set()

    def test_workers_agree_with_serial_scan(self, record_factory):
        def build():
            return [
                with_unconstrained(record_factory, i, "5 6 7" if i % 2 else "7 6 5")
                for i in range(6)
            ]

        config = DedupConfig(min_unconstrained_length=3)
        serial = run_unconstrained_match(build(), config, set())
        threaded = run_unconstrained_match(
            build(), DedupConfig(min_unconstrained_length=3, workers=4), set()
        )
        assert serial == threaded == [2, 0, 4, 3, 1, 5]

"""
Unconstrained order match.

Events that are not bound to the record type's expected order (the
unconstrained sequence) still happen in some order. Two records of the same
type whose unconstrained sequences are identical and long enough are very
likely duplicates.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from temporal_dedup.config import DedupConfig
from temporal_dedup.matching.pairwise import PairMatch, apply_pair_matches, find_pair_matches
from temporal_dedup.records.models import DuplicationClass, Record

logger = logging.getLogger(__name__)


def is_unconstrained_order_match(review: Record, potential: Record, min_length: int) -> bool:
    """Same record type, identical unconstrained sequence of at least min_length tokens."""
    return (
        review.record_type == potential.record_type
        and review.event_sequence_unconstrained == potential.event_sequence_unconstrained
        and review.unconstrained_length >= min_length
    )


def run_unconstrained_match(
    records: Sequence[Record],
    config: DedupConfig,
    predicted: set[int],
) -> list[int]:
    """
    Flag unconstrained order matches among pairs not matched by earlier stages.

    Args:
        records: Records with the sequence model applied
        config: Model parameters (minimum sequence length, workers, progress)
        predicted: Predicted duplicate IDs, updated in place

    Returns:
        IDs of the records flagged by this stage, in order of first detection
    """
    min_length = config.min_unconstrained_length

    def compare(i: int, j: int) -> Optional[DuplicationClass]:
        review, potential = records[i], records[j]
        if review.contains_match(potential.id):
            return None
        if is_unconstrained_order_match(review, potential, min_length):
            return DuplicationClass.UNCONSTRAINED_ORDER_MATCH
        return None

    matches: list[PairMatch] = find_pair_matches(
        len(records),
        compare,
        workers=config.workers,
        description="Unconstrained order",
        show_progress=config.show_progress,
    )
    apply_pair_matches(records, matches, predicted)

    flagged: dict[int, None] = {}
    for match in matches:
        flagged.setdefault(records[match.second].id, None)
        flagged.setdefault(records[match.first].id, None)

    logger.info(
        f"Unconstrained order match found {len(matches)} duplicate pairs "
        f"({len(flagged)} records)"
    )
    return list(flagged)

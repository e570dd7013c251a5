"""
Base set of deduplication techniques.

Every pair of records is checked in priority order and receives at most one
duplication class:

1. EXACT_MATCH: every raw value equal
2. NONKEY_MATCH: every non-key value equal, key differs
3. MODIFIED_VALUES: same key, some other value differs
4. ELAPSED_TIME_MATCH: same positive elapsed time, record type and
   granularity, subject to the ElapsedTimePolicy
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from temporal_dedup.config import DedupConfig
from temporal_dedup.matching.pairwise import PairMatch, apply_pair_matches, find_pair_matches
from temporal_dedup.records.models import DuplicationClass, Record
from temporal_dedup.records.timestamps import TimestampGranularity

logger = logging.getLogger(__name__)

# Granularities precise enough for equal elapsed times to suggest duplication
TRUSTED_ELAPSED_TIME_GRANULARITIES = frozenset(
    {TimestampGranularity.TIME_OF_DAY, TimestampGranularity.EXACT}
)


@dataclass(frozen=True)
class ElapsedTimePolicy:
    """
    When two records with equal elapsed time count as duplicates.

    Date-only timestamps make equal elapsed times common among distinct
    records, so by default only TIME_OF_DAY and EXACT granularities qualify.
    `force` lifts the granularity restriction; the positive, equal elapsed
    time, same record type and same granularity requirements always apply.
    """

    trusted_granularities: frozenset = TRUSTED_ELAPSED_TIME_GRANULARITIES
    force: bool = False

    def is_eligible(self, record: Record) -> bool:
        if record.elapsed_time <= 0:
            return False
        return self.force or record.timestamp_granularity in self.trusted_granularities

    def matches(self, review: Record, potential: Record) -> bool:
        return (
            self.is_eligible(review)
            and potential.elapsed_time > 0
            and review.elapsed_time == potential.elapsed_time
            and review.record_type == potential.record_type
            and review.timestamp_granularity == potential.timestamp_granularity
        )

    @classmethod
    def from_config(cls, config: DedupConfig) -> "ElapsedTimePolicy":
        return cls(force=config.force_elapsed_time)


def classify_pair(
    review: Record, potential: Record, policy: ElapsedTimePolicy
) -> Optional[DuplicationClass]:
    """
    Duplication class for a pair of records under the base techniques.

    Returns:
        The first class that applies, or None
    """
    if review.exact_match(potential):
        return DuplicationClass.EXACT_MATCH
    if review.equals_ignoring_key(potential):
        return DuplicationClass.NONKEY_MATCH
    if review.shares_same_key(potential):
        return DuplicationClass.MODIFIED_VALUES
    if policy.matches(review, potential):
        return DuplicationClass.ELAPSED_TIME_MATCH
    return None


def run_base_match(
    records: Sequence[Record],
    config: DedupConfig,
    predicted: set[int],
    policy: Optional[ElapsedTimePolicy] = None,
) -> list[PairMatch]:
    """
    Apply the base techniques to every pair of records.

    Args:
        records: Records with schema applied
        config: Model parameters (workers, progress, elapsed time override)
        predicted: Predicted duplicate IDs, updated in place
        policy: Elapsed time policy (derived from config if omitted)

    Returns:
        The matches found, in (first, second) order
    """
    if policy is None:
        policy = ElapsedTimePolicy.from_config(config)

    matches = find_pair_matches(
        len(records),
        lambda i, j: classify_pair(records[i], records[j], policy),
        workers=config.workers,
        description="Base techniques",
        show_progress=config.show_progress,
    )
    apply_pair_matches(records, matches, predicted)

    by_class: dict[str, int] = {}
    for match in matches:
        by_class[match.duplication_class.value] = by_class.get(match.duplication_class.value, 0) + 1
    logger.info(f"Base techniques found {len(matches)} duplicate pairs: {by_class or 'none'}")
    return matches

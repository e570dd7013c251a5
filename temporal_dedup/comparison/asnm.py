"""
Adaptive Sorted Neighborhood Method (ASNM) comparison.

Records are sorted on a blocking key and split into non-overlapping blocks of
variable size, following the accumulatively-adaptive SNM of:

    Yan, S., Lee, D., Kan, M. Y., & Giles, L. C. (2007). Adaptive sorted
    neighborhood methods for efficient record linkage. JCDL 2007, 185-194.

A window grows (enlargement) while the blocking keys at its ends stay within
the distance threshold, halves (retrenchment) until it spans two records, then
creeps right until it straddles a block boundary. Inside each block every
record is compared to every other one using Jaccard similarity of their
integer sets; a record is a predicted duplicate when any other record of its
block meets the similarity threshold. Blocks are computed once and reused for
every threshold.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from rapidfuzz.distance import Levenshtein
from tqdm import tqdm

from temporal_dedup.comparison.base import ComparisonMethod, ComparisonResult
from temporal_dedup.config import DedupConfig
from temporal_dedup.constants import (
    BLOCK_DISTANCE_THRESHOLD,
    INITIAL_WINDOW_SIZE,
    MAX_BLOCK_DISTANCE,
    WINDOW_GROWTH_FACTOR,
)
from temporal_dedup.evaluation.confusion import ConfusionMatrix, log_assessment
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)


def key_distance(first: str, second: str) -> float:
    """
    Normalized edit distance between two blocking key values.

    Levenshtein distance divided by the longer length; two empty keys are
    identical (0.0).
    """
    longest = max(len(first), len(second))
    if longest == 0:
        return 0.0
    return Levenshtein.distance(first, second) / longest


def jaccard_similarity(first: frozenset[int], second: frozenset[int]) -> float:
    """Jaccard index of two integer sets (0.0 when both are empty)."""
    union = len(first | second)
    return len(first & second) / union if union > 0 else 0.0


@dataclass(frozen=True)
class ComparisonBlock:
    """Inclusive range of sorted record positions compared with one another."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def positions(self) -> range:
        return range(self.start, self.end + 1)


def resolve_blocking_key_index(headers: Sequence[str], blocking_key: str) -> int:
    """Index of the header matching the blocking key (case-insensitive), 0 if none does."""
    wanted = blocking_key.strip().lower()
    for index, header in enumerate(headers):
        if header.strip().lower() == wanted:
            return index
    logger.warning(f"Blocking key {blocking_key!r} not found in headers; using column 0")
    return 0


def detect_block_starts(
    keys: Sequence[str], threshold: float = BLOCK_DISTANCE_THRESHOLD
) -> list[int]:
    """
    Start positions of the comparison blocks over sorted blocking key values.

    Any comparison involving a position past the end of the list has the
    maximum distance, so every phase stops at the end of the list.

    Args:
        keys: Blocking key values, already sorted
        threshold: Maximum key distance inside one block

    Returns:
        Strictly increasing start positions, beginning with 0
    """
    count = len(keys)

    def distance(first: int, last: int) -> float:
        if first < 0 or last < 0 or first >= count or last >= count:
            return MAX_BLOCK_DISTANCE
        return key_distance(keys[first], keys[last])

    starts: list[int] = []
    first = 0
    while first < count:
        starts.append(first)
        size = INITIAL_WINDOW_SIZE
        last = first + size - 1

        # Enlargement
        while distance(first, last) <= threshold:
            size *= WINDOW_GROWTH_FACTOR
            first = last
            last = first + size - 1

        # Retrenchment
        while size > INITIAL_WINDOW_SIZE:
            if distance(first, last) > threshold:
                size //= WINDOW_GROWTH_FACTOR
                last = first + size - 1
            else:
                first = last
                last = first + size - 1

        # Creep until the window straddles a boundary
        while distance(first, last) <= threshold:
            first += 1
            last += 1

        # The block ends at `first`
        first += 1

    return starts


def blocks_from_starts(starts: Sequence[int], count: int) -> list[ComparisonBlock]:
    """Turn block start positions into inclusive blocks covering range(count)."""
    blocks = []
    for position, start in enumerate(starts):
        end = starts[position + 1] - 1 if position + 1 < len(starts) else count - 1
        blocks.append(ComparisonBlock(start, end))
    return blocks


class ASNM(ComparisonMethod):
    """
    ASNM comparison over a deep copy of the record set.

    Without a blocking key the whole dataset is a single block.
    """

    def __init__(
        self,
        blocking_key: str = "",
        thresholds: Optional[Iterable[float]] = None,
        workers: int = 1,
        show_progress: bool = False,
    ):
        self.blocking_key = ""
        self.has_blocking_key = False
        self.provide_blocking_key(blocking_key)

        self.thresholds = tuple(thresholds) if thresholds else DedupConfig().thresholds
        self.workers = workers
        self.show_progress = show_progress

        self.blocking_key_index = 0
        self.records: list[Record] = []
        self.block_starts: list[int] = []

    @classmethod
    def from_config(cls, config: DedupConfig) -> "ASNM":
        if not config.similarity_thresholds:
            logger.info(
                "No ASNM similarity thresholds specified; applying defaults "
                f"{', '.join(str(t) for t in config.thresholds)}"
            )
        return cls(
            blocking_key=config.blocking_key,
            thresholds=config.thresholds,
            workers=config.workers,
            show_progress=config.show_progress,
        )

    @property
    def name(self) -> str:
        return "ASNM"

    def provide_blocking_key(self, blocking_key: str) -> None:
        self.blocking_key = blocking_key
        self.has_blocking_key = bool(blocking_key.strip())

    @property
    def blocks(self) -> list[ComparisonBlock]:
        return blocks_from_starts(self.block_starts, len(self.records))

    def sort_records(self, headers: Sequence[str], records: Sequence[Record]) -> None:
        """Clone the records and stable-sort the clones on the blocking key value."""
        if self.has_blocking_key:
            self.blocking_key_index = resolve_blocking_key_index(headers, self.blocking_key)
        else:
            self.blocking_key_index = 0

        index = self.blocking_key_index
        self.records = sorted((r.clone() for r in records), key=lambda r: r.value_at(index))

    def determine_blocks(self) -> list[int]:
        """Compute block start positions over the sorted records."""
        if not self.has_blocking_key:
            self.block_starts = [0] if self.records else []
        else:
            keys = [r.value_at(self.blocking_key_index) for r in self.records]
            self.block_starts = detect_block_starts(keys)
        logger.info(f"ASNM determined {len(self.block_starts)} comparison blocks")
        return self.block_starts

    def similar_in_block(self, block: ComparisonBlock, threshold: float) -> list[int]:
        """IDs of records in the block with at least one other record at or above the threshold."""
        sets = [self.records[p].as_integer_set() for p in block.positions()]
        predicted = []
        for offset, review in enumerate(sets):
            for other_offset, potential in enumerate(sets):
                if other_offset != offset and jaccard_similarity(review, potential) >= threshold:
                    predicted.append(self.records[block.start + offset].id)
                    break
        return predicted

    def predict(self, threshold: float) -> list[int]:
        """Predicted duplicate IDs for one similarity threshold, in sorted-record order."""
        blocks = self.blocks
        description = f"ASNM {threshold}"

        if self.workers <= 1 or len(blocks) < 2:
            results = [
                self.similar_in_block(block, threshold)
                for block in tqdm(blocks, desc=description, disable=not self.show_progress)
            ]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(
                    tqdm(
                        executor.map(lambda block: self.similar_in_block(block, threshold), blocks),
                        total=len(blocks),
                        desc=description,
                        disable=not self.show_progress,
                    )
                )

        return [record_id for block_ids in results for record_id in block_ids]

    def execute_comparison(
        self,
        matrix: ConfusionMatrix,
        headers: Sequence[str],
        records: Sequence[Record],
    ) -> list[ComparisonResult]:
        logger.info("Executing ASNM comparison method ...")

        start = time.perf_counter()
        self.sort_records(headers, records)
        self.determine_blocks()
        blocking_ms = int((time.perf_counter() - start) * 1000)

        results = []
        for threshold in self.thresholds:
            start = time.perf_counter()
            predicted = self.predict(threshold)
            duration_ms = int((time.perf_counter() - start) * 1000) + blocking_ms

            logger.info(
                f"ASNM Comparison technique (threshold = {threshold}) takes {duration_ms}ms",
                extra={"stage": "asnm", "threshold": threshold, "duration_ms": duration_ms},
            )
            logger.info(
                f"Detecting a total of {len(predicted)} suspected duplicate records "
                f"based on similarity among {len(records)}"
            )

            assessment = matrix.assess_prediction(predicted)
            log_assessment(assessment)
            results.append(
                ComparisonResult(
                    method=self.name,
                    label=f"threshold = {threshold}",
                    predicted_ids=predicted,
                    similarity_count=len(predicted),
                    duration_ms=duration_ms,
                    assessment=assessment,
                )
            )
        return results

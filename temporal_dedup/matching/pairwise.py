"""
Pairwise scanning shared by the matching stages.

A stage supplies a comparison function over record indices; every pair (i, j)
with j > i is compared once. With more than one worker the outer index range
is split into disjoint shards scanned on a thread pool. Each shard collects
its hits locally; hits are merged and sorted by (i, j) before any record is
annotated, so results and annotation order match the single-threaded scan.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from tqdm import tqdm

from temporal_dedup.records.models import DuplicationClass, Record

logger = logging.getLogger(__name__)

PairComparator = Callable[[int, int], Optional[DuplicationClass]]


@dataclass(frozen=True)
class PairMatch:
    """A duplicate pair found by a matching stage (indices into the record list)."""

    first: int
    second: int
    duplication_class: DuplicationClass


def shard_ranges(count: int, shards: int) -> list[range]:
    """Split range(count) into at most `shards` contiguous, non-empty, disjoint ranges."""
    if count <= 0:
        return []
    shards = max(1, min(shards, count))
    size, remainder = divmod(count, shards)
    ranges = []
    start = 0
    for shard in range(shards):
        end = start + size + (1 if shard < remainder else 0)
        ranges.append(range(start, end))
        start = end
    return ranges


def find_pair_matches(
    count: int,
    compare: PairComparator,
    workers: int = 1,
    description: str = "Comparing records",
    show_progress: bool = False,
) -> list[PairMatch]:
    """
    Compare every pair (i, j), j > i, of `count` records.

    Args:
        count: Number of records
        compare: Returns the duplication class for a pair, or None
        workers: Number of threads to shard the outer index across
        description: Progress bar label
        show_progress: Whether to display a progress bar

    Returns:
        Matches sorted by (first, second)
    """

    def scan(rows: range, progress: bool = False) -> list[PairMatch]:
        hits = []
        for i in tqdm(rows, desc=description, disable=not progress):
            for j in range(i + 1, count):
                duplication_class = compare(i, j)
                if duplication_class is not None:
                    hits.append(PairMatch(i, j, duplication_class))
        return hits

    if workers <= 1 or count < 2:
        return scan(range(count), show_progress)

    shards = shard_ranges(count, workers)
    hits: list[PairMatch] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = executor.map(scan, shards)
        progress = tqdm(results, total=len(shards), desc=description, disable=not show_progress)
        for shard_hits in progress:
            hits.extend(shard_hits)

    hits.sort(key=lambda hit: (hit.first, hit.second))
    return hits


def apply_pair_matches(
    records: Sequence[Record], matches: Sequence[PairMatch], predicted: set[int]
) -> None:
    """
    Annotate both records of every match symmetrically and register both as predicted.

    The later record is annotated first, then the earlier one.
    """
    for match in matches:
        review = records[match.first]
        potential = records[match.second]
        potential.add_match(review.id, match.duplication_class)
        review.add_match(potential.id, match.duplication_class)
        predicted.add(review.id)
        predicted.add(potential.id)

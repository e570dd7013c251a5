"""Independent comparison methods assessed alongside the temporal pipeline."""

from temporal_dedup.comparison.asnm import (
    ASNM,
    ComparisonBlock,
    detect_block_starts,
    jaccard_similarity,
    key_distance,
)
from temporal_dedup.comparison.base import ComparisonMethod, ComparisonResult

__all__ = [
    "ASNM",
    "ComparisonBlock",
    "ComparisonMethod",
    "ComparisonResult",
    "detect_block_starts",
    "jaccard_similarity",
    "key_distance",
]

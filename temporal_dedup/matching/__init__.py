"""
Duplicate detection stages applied to the shared record set.

- base: exact, non-key, modified-value and elapsed-time matches
- sequence / lcs: per record type temporal order model
- unconstrained: matches on identical unconstrained event order
"""

from temporal_dedup.matching.base import ElapsedTimePolicy, classify_pair, run_base_match
from temporal_dedup.matching.lcs import LCS, compute_lcs, fold_lcs
from temporal_dedup.matching.pairwise import PairMatch, find_pair_matches
from temporal_dedup.matching.sequence import (
    RecordTypeSequence,
    SequenceModel,
    model_event_sequences,
)
from temporal_dedup.matching.unconstrained import run_unconstrained_match

__all__ = [
    "ElapsedTimePolicy",
    "LCS",
    "PairMatch",
    "RecordTypeSequence",
    "SequenceModel",
    "classify_pair",
    "compute_lcs",
    "find_pair_matches",
    "fold_lcs",
    "model_event_sequences",
    "run_base_match",
    "run_unconstrained_match",
]

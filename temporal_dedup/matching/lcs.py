"""
Longest Common Subsequence over space-delimited event sequences.

Sequences are strings of tokens separated by single spaces, e.g. "1 3 2".
The LCS of two sequences is computed with the standard O(m*n) dynamic
program; when tracing back, ties between the two directions are broken by
stepping back in the second sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from temporal_dedup.records.models import split_sequence


@dataclass(frozen=True)
class LCS:
    """A longest common subsequence and its token count."""

    sequence: str = ""

    @property
    def tokens(self) -> list[str]:
        return split_sequence(self.sequence)

    @property
    def length(self) -> int:
        return len(self.tokens)

    def __bool__(self) -> bool:
        return bool(self.sequence)


def compute_lcs(first: str, second: str) -> LCS:
    """
    Longest common subsequence of two space-delimited sequences.

    Args:
        first: First sequence
        second: Second sequence

    Returns:
        LCS of the two sequences (empty if either is empty)
    """
    x = split_sequence(first)
    y = split_sequence(second)
    m, n = len(x), len(y)

    if m == 0 or n == 0:
        return LCS("")

    # table[i][j] = LCS length of x[:i] and y[:j]
    table = np.zeros((m + 1, n + 1), dtype=np.int32)
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if x[i - 1] == y[j - 1]:
                table[i, j] = table[i - 1, j - 1] + 1
            else:
                table[i, j] = max(table[i - 1, j], table[i, j - 1])

    tokens: list[str] = []
    i, j = m, n
    while i > 0 and j > 0:
        if x[i - 1] == y[j - 1]:
            tokens.append(x[i - 1])
            i -= 1
            j -= 1
        elif table[i - 1, j] > table[i, j - 1]:
            i -= 1
        else:
            j -= 1

    tokens.reverse()
    return LCS(" ".join(tokens))


def fold_lcs(sequences: Iterable[str]) -> LCS:
    """
    Fold pairwise LCS across sequences in order: LCS(LCS(s1, s2), s3), ...

    A single sequence is its own LCS; no sequences give an empty LCS.
    """
    iterator = iter(sequences)
    try:
        result = LCS(" ".join(split_sequence(next(iterator))))
    except StopIteration:
        return LCS("")

    for sequence in iterator:
        result = compute_lcs(result.sequence, sequence)
        if not result:
            break
    return result

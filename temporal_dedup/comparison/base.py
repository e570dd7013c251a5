"""
Comparison method interface.

A comparison method is an independent deduplication technique run against
the same dataset as the temporal pipeline so its accuracy can be compared.
Each method produces one or more predictions and has every one of them
assessed by the confusion matrix.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from temporal_dedup.evaluation.confusion import Assessment, ConfusionMatrix
from temporal_dedup.records.models import Record


@dataclass
class ComparisonResult:
    """One prediction made by a comparison method and its assessment."""

    method: str
    label: str  # e.g. "threshold = 0.9"
    predicted_ids: list[int]
    similarity_count: int
    duration_ms: int
    assessment: Assessment


class ComparisonMethod(ABC):
    """Abstract base class for comparison methods."""

    @abstractmethod
    def execute_comparison(
        self,
        matrix: ConfusionMatrix,
        headers: Sequence[str],
        records: Sequence[Record],
    ) -> list[ComparisonResult]:
        """
        Run the method against the records and assess each prediction.

        Implementations must not modify the given records.

        Args:
            matrix: Confusion matrix holding the truth data
            headers: Header names, one per raw attribute
            records: Records to deduplicate

        Returns:
            One ComparisonResult per prediction made
        """
        ...

    @abstractmethod
    def provide_blocking_key(self, blocking_key: str) -> None:
        """
        Set the attribute (header name) to block on.

        Methods that do not block may ignore it.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this method for reports."""
        ...

"""
Configuration management for temporal_dedup.

Loads environment variables and provides configuration defaults. Model
parameters for a run are carried by the immutable DedupConfig, which is passed
explicitly to every stage that needs it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from temporal_dedup.constants import (
    DEFAULT_LCS_TAKE_EVERY_X,
    DEFAULT_LOG_DIR,
    DEFAULT_MIN_UNCONSTRAINED_LENGTH,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SIMILARITY_THRESHOLDS,
    DEFAULT_WORKERS,
)

# Load environment variables from .env file
load_dotenv()


def get_output_dir() -> Path:
    """Get directory for output files from environment or default."""
    return Path(os.getenv("TEMPORAL_DEDUP_OUTPUT_DIR", DEFAULT_OUTPUT_DIR))


def get_log_dir() -> Path:
    """Get directory for log files from environment or default."""
    return Path(os.getenv("TEMPORAL_DEDUP_LOG_DIR", DEFAULT_LOG_DIR))


def get_min_sequence_length() -> int:
    """Get the unconstrained order minimum sequence length from environment or default."""
    value = os.getenv("TEMPORAL_DEDUP_MIN_SEQUENCE_LENGTH", "").strip()
    if not value:
        return DEFAULT_MIN_UNCONSTRAINED_LENGTH
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"TEMPORAL_DEDUP_MIN_SEQUENCE_LENGTH must be an integer, got {value!r}")


def get_workers() -> int:
    """Get the number of worker threads for pairwise stages from environment or default."""
    value = os.getenv("TEMPORAL_DEDUP_WORKERS", "").strip()
    if not value:
        return DEFAULT_WORKERS
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"TEMPORAL_DEDUP_WORKERS must be an integer, got {value!r}")


@dataclass(frozen=True)
class DedupConfig:
    """
    Model parameters for a deduplication run.

    lcs_sample_count of None means max-sampling: every eligible record is
    sampled, in order, and random selection is disabled.
    """

    lcs_sample_count: Optional[int] = None
    lcs_take_every_x: int = DEFAULT_LCS_TAKE_EVERY_X
    lcs_random: bool = False
    random_seed: Optional[int] = None
    min_unconstrained_length: int = DEFAULT_MIN_UNCONSTRAINED_LENGTH
    force_elapsed_time: bool = False
    blocking_key: str = ""
    similarity_thresholds: Tuple[float, ...] = field(default_factory=tuple)
    workers: int = DEFAULT_WORKERS
    show_progress: bool = False

    def __post_init__(self):
        if self.lcs_sample_count is not None and self.lcs_sample_count < 1:
            raise ValueError(f"lcs_sample_count must be >= 1, got {self.lcs_sample_count}")
        if self.lcs_take_every_x < 1:
            raise ValueError(f"lcs_take_every_x must be >= 1, got {self.lcs_take_every_x}")
        if self.min_unconstrained_length < 1:
            raise ValueError(
                f"min_unconstrained_length must be >= 1, got {self.min_unconstrained_length}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        for threshold in self.similarity_thresholds:
            if not 0.0 <= threshold <= 1.0:
                raise ValueError(f"Similarity threshold out of range [0, 1]: {threshold}")
        # Accept any iterable of thresholds but store a tuple
        object.__setattr__(self, "similarity_thresholds", tuple(self.similarity_thresholds))

    @property
    def max_sampling(self) -> bool:
        return self.lcs_sample_count is None

    @property
    def has_blocking_key(self) -> bool:
        return bool(self.blocking_key.strip())

    @property
    def thresholds(self) -> Tuple[float, ...]:
        """Similarity thresholds for ASNM, falling back to the defaults when none are given."""
        return self.similarity_thresholds or DEFAULT_SIMILARITY_THRESHOLDS

    def sampling_for(self, population: int) -> Tuple[int, int, bool]:
        """
        Resolve the LCS sampling policy for a dataset.

        Args:
            population: Number of records in the dataset

        Returns:
            Tuple of (sample cap, take-every-x, random selection)
        """
        if self.max_sampling:
            return max(population, 1), 1, False
        return self.lcs_sample_count, self.lcs_take_every_x, self.lcs_random

    def describe(self) -> list[str]:
        """Human-readable lines describing the model parameters."""
        samples = "max-sampling" if self.max_sampling else str(self.lcs_sample_count)
        every_x = 1 if self.max_sampling else self.lcs_take_every_x
        random = False if self.max_sampling else self.lcs_random
        return [
            f"  LCS sampling number of records: {samples}",
            f"  LCS sampling selection random: {random}",
            f"  LCS sampling take every X: {every_x}",
            f"  Unconstrained order minimum sequence length: {self.min_unconstrained_length}",
            f"  Force elapsed time match: {self.force_elapsed_time}",
            f"  Workers: {self.workers}",
        ]

    @classmethod
    def from_env(cls, **overrides) -> "DedupConfig":
        """Build a config from environment defaults, with explicit overrides taking precedence."""
        values = {
            "min_unconstrained_length": get_min_sequence_length(),
            "workers": get_workers(),
        }
        values.update(overrides)
        return cls(**values)

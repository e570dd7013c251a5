"""
TemporalDedup - duplicate detection for temporal datasets.

This package provides utilities for:
- Inferring a dataset's key, repeating timestamped attributes and record type
  from its header row and values
- Detecting duplicates with exact, elapsed-time and event-order techniques
- Comparing against the Adaptive Sorted Neighborhood Method (ASNM)
- Assessing predictions against truth data with a confusion matrix
"""

__version__ = "0.1.0"

# Re-export commonly used items
from temporal_dedup.config import DedupConfig
from temporal_dedup.constants import (
    DEFAULT_MIN_UNCONSTRAINED_LENGTH,
    DEFAULT_SIMILARITY_THRESHOLDS,
    GLOBAL_RECORD_TYPE,
)
from temporal_dedup.errors import (
    DatasetReadError,
    RecordLookupError,
    TemporalDedupError,
    TruthDataError,
)
from temporal_dedup.pipeline import DedupResult, TemporalDedup

__all__ = [
    "__version__",
    # Pipeline
    "TemporalDedup",
    "DedupResult",
    "DedupConfig",
    # Errors
    "TemporalDedupError",
    "DatasetReadError",
    "TruthDataError",
    "RecordLookupError",
    # Constants
    "DEFAULT_MIN_UNCONSTRAINED_LENGTH",
    "DEFAULT_SIMILARITY_THRESHOLDS",
    "GLOBAL_RECORD_TYPE",
]

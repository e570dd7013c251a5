"""
Constants for temporal_dedup package.

Centralizes magic numbers and configuration defaults.
"""

# Record type shared by every record when no key could be inferred
GLOBAL_RECORD_TYPE = "GlobalCommonRecordType"

# Header tokens that mark a column as temporal (case-insensitive substring match)
TEMPORAL_HEADER_TOKENS = ("date", "time")
EXACT_TIMESTAMP_TOKEN = "timestamp"
TIME_OF_DAY_TOKEN = "time"
DATE_TOKEN = "date"

# LCS sampling defaults
DEFAULT_LCS_TAKE_EVERY_X = 1
DEFAULT_LCS_RANDOM_PROBABILITY = 0.5

# Unconstrained order match
DEFAULT_MIN_UNCONSTRAINED_LENGTH = 8

# ASNM defaults
DEFAULT_SIMILARITY_THRESHOLDS = (0.8, 0.9, 0.95, 0.927, 0.963, 0.981, 1.0)
BLOCK_DISTANCE_THRESHOLD = 0.05  # Max normalized edit distance inside one block
WINDOW_GROWTH_FACTOR = 2
INITIAL_WINDOW_SIZE = 2
MAX_BLOCK_DISTANCE = 1.0  # Returned for missing or out-of-range comparisons

# Values mapped to integers when building the Jaccard set
BOOLEAN_TRUE_VALUE = 1
BOOLEAN_FALSE_VALUE = 0

# Reference day for time-of-day values (seconds since epoch at 2000-01-01 00:00 UTC)
TIME_OF_DAY_REFERENCE_EPOCH = 946684800

# Parallel execution
DEFAULT_WORKERS = 1

# Output
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOG_DIR = "logs"
RAW_OUTPUT_SUFFIX = "_raw_output"
RAW_WITH_IDS_OUTPUT_SUFFIX = "_raw_with_rowids_output"
ANALYSIS_OUTPUT_SUFFIX = "_analysis_output"
FIELD_DELIMITER = "\t"

# Analysis output columns preceding the raw values (see Record.analysis_fields)
ANALYSIS_HEADERS = (
    "ID",
    "Truth Data Duplicate",
    "# Matches",
    "Duplicate IDs",
    "Detected By Duplicate Class",
    "# Timestamps",
    "Earliest Timestamp",
    "Latest Timestamp",
    "Elapsed Time",
    "Record Type LCS",
    "LCS Length",
    "Event Sequence",
    "LCS Adherence",
    "Unconstrained Sequence",
    "Unconstrained Sequence Length",
)

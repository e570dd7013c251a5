"""
Tab-delimited readers for datasets and truth files.

Datasets have a header row followed by one row per record; line i after the
header becomes record i, blank lines included, so truth IDs keep pointing at
the lines they were counted from. Truth files have a header row followed by
rows whose first column is the ID of a known duplicate.
"""

import csv
import logging
from pathlib import Path
from typing import List, Tuple

from temporal_dedup.constants import FIELD_DELIMITER
from temporal_dedup.errors import DatasetReadError, TruthDataError

logger = logging.getLogger(__name__)


def read_dataset(path: Path) -> Tuple[List[str], List[List[str]]]:
    """
    Read a tab-delimited dataset.

    Args:
        path: Path to the dataset file

    Returns:
        Tuple of (headers, rows); values are kept exactly as read

    Raises:
        DatasetReadError: If the file cannot be read or decoded, or has no header row
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8", newline="") as f:
            reader = csv.reader(f, delimiter=FIELD_DELIMITER, quoting=csv.QUOTE_NONE)
            headers = next(reader, None)
            rows = list(reader)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise DatasetReadError(f"Cannot read dataset {path}: {e}") from e

    if not headers:
        raise DatasetReadError(f"Dataset {path} has no header row")

    for record_id, row in enumerate(rows):
        if not row:
            logger.warning(
                f"{path}:{record_id + 2}: blank line kept as empty record {record_id}"
            )

    logger.info(f"Read {len(rows)} records with {len(headers)} attributes from {path}")
    return headers, rows


def read_truth_ids(path: Path) -> List[int]:
    """
    Read the IDs of known duplicates from a tab-delimited truth file.

    The header row is skipped and only the first column of each row is used.
    Repeated IDs are returned as read; callers de-duplicate.

    Raises:
        TruthDataError: If the file is missing or unreadable, or a first column is
            not an integer
    """
    path = Path(path)
    if not path.is_file():
        raise TruthDataError(f"Truth file not found: {path}")

    ids = []
    try:
        with path.open(encoding="utf-8", newline="") as f:
            reader = csv.reader(f, delimiter=FIELD_DELIMITER, quoting=csv.QUOTE_NONE)
            next(reader, None)
            for line_number, row in enumerate(reader, start=2):
                if not row or not row[0].strip():
                    continue
                try:
                    ids.append(int(row[0].strip()))
                except ValueError:
                    raise TruthDataError(
                        f"{path}:{line_number}: record ID must be an integer, got {row[0]!r}"
                    )
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise TruthDataError(f"Cannot read truth file {path}: {e}") from e

    return ids

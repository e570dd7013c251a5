"""
Tab-delimited writers for raw echo and analysis output files.

Output file names are derived from the dataset file name by inserting a
suffix before the extension, e.g. visits.tsv -> visits_analysis_output.tsv.
"""

import csv
import logging
from pathlib import Path
from typing import List, Sequence

from temporal_dedup.constants import (
    ANALYSIS_HEADERS,
    ANALYSIS_OUTPUT_SUFFIX,
    FIELD_DELIMITER,
    RAW_OUTPUT_SUFFIX,
    RAW_WITH_IDS_OUTPUT_SUFFIX,
)
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)


def output_path(dataset: Path, output_dir: Path, suffix: str) -> Path:
    """Path in output_dir named after the dataset with suffix inserted before the extension."""
    dataset = Path(dataset)
    return Path(output_dir) / f"{dataset.stem}{suffix}{dataset.suffix}"


def _write_rows(path: Path, header: Sequence[str], rows: List[Sequence[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(
            f,
            delimiter=FIELD_DELIMITER,
            quoting=csv.QUOTE_NONE,
            escapechar="\\",
            lineterminator="\n",
        )
        writer.writerow(header)
        writer.writerows(rows)
    logger.info(f"Wrote {len(rows)} records to {path}")
    return path


def write_raw_output(
    dataset: Path,
    output_dir: Path,
    headers: Sequence[str],
    records: Sequence[Record],
    with_ids: bool = False,
) -> Path:
    """
    Echo the parsed records, optionally prefixed with their record ID.

    Returns:
        Path of the written file
    """
    suffix = RAW_WITH_IDS_OUTPUT_SUFFIX if with_ids else RAW_OUTPUT_SUFFIX
    header = ["ID", *headers] if with_ids else list(headers)
    rows = [
        [str(record.id), *record.raw_values] if with_ids else list(record.raw_values)
        for record in records
    ]
    return _write_rows(output_path(dataset, output_dir, suffix), header, rows)


def write_analysis_output(
    dataset: Path,
    output_dir: Path,
    headers: Sequence[str],
    records: Sequence[Record],
) -> Path:
    """
    Write every record prefixed with its derived analysis fields.

    Returns:
        Path of the written file
    """
    header = [*ANALYSIS_HEADERS, *headers]
    rows = [[*record.analysis_fields(), *record.raw_values] for record in records]
    return _write_rows(output_path(dataset, output_dir, ANALYSIS_OUTPUT_SUFFIX), header, rows)

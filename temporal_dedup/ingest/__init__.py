"""Reading datasets and truth files, writing output files."""

from temporal_dedup.ingest.readers import read_dataset, read_truth_ids
from temporal_dedup.ingest.writers import output_path, write_analysis_output, write_raw_output

__all__ = [
    "read_dataset",
    "read_truth_ids",
    "output_path",
    "write_raw_output",
    "write_analysis_output",
]

"""
Command line interface for temporal_dedup.

Provides:
- Logging setup (console, optional file and JSON file output)
- Argument parsing into a DedupConfig
- The temporal-dedup entry point: deduplicate a dataset, assess it against
  truth data, optionally run ASNM, write output files and answer queries
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from temporal_dedup.config import DedupConfig, get_log_dir, get_output_dir
from temporal_dedup.errors import TemporalDedupError
from temporal_dedup.ingest.readers import read_dataset, read_truth_ids
from temporal_dedup.ingest.writers import write_analysis_output, write_raw_output
from temporal_dedup.logging import log_stage, setup_structured_logging
from temporal_dedup.pipeline import TemporalDedup
from temporal_dedup.query import run_queries

PACKAGE_LOGGER = "temporal_dedup"


def setup_logging(
    log_dir: Optional[Path] = None,
    json_output: bool = False,
    verbose: bool = False,
    dataset: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for a run.

    Args:
        log_dir: Directory for log files (None = console only)
        json_output: If True, log files are written as JSON lines
        verbose: If True, log at DEBUG level
        dataset: Dataset being processed; its name labels the log file

    Returns:
        The package logger, which every module logger propagates to
    """
    level = logging.DEBUG if verbose else logging.INFO
    run_label = f"{PACKAGE_LOGGER}_{Path(dataset).stem}" if dataset else None
    return setup_structured_logging(
        PACKAGE_LOGGER,
        level=level,
        log_dir=log_dir,
        json_output=json_output,
        run_label=run_label,
    )


def print_header(title: str, logger: Optional[logging.Logger] = None):
    """Log a standard section header."""
    if logger is None:
        logger = logging.getLogger(PACKAGE_LOGGER)

    logger.info("*" * 48)
    logger.info(title)
    logger.info("*" * 48)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="temporal-dedup",
        description="Detect duplicate records in a tab-delimited temporal dataset.",
    )
    parser.add_argument("dataset", type=Path, help="Tab-delimited dataset file with a header row")
    parser.add_argument(
        "truth", type=Path, help="Tab-delimited truth file; first column holds duplicate IDs"
    )

    sampling = parser.add_argument_group("LCS sampling")
    size = sampling.add_mutually_exclusive_group()
    size.add_argument(
        "--lcs-max",
        action="store_true",
        help="Sample every eligible record (default)",
    )
    size.add_argument(
        "--lcs-samples", type=int, metavar="N", help="Number of sequences to sample per record type"
    )
    sampling.add_argument(
        "--lcs-random", action="store_true", help="Select samples at random (50%% each)"
    )
    sampling.add_argument(
        "--lcs-every-x", type=int, default=1, metavar="N", help="Take every Nth sequence"
    )
    sampling.add_argument("--seed", type=int, help="Random seed for random sampling")

    matching = parser.add_argument_group("matching")
    matching.add_argument(
        "--min-seq-length",
        type=int,
        metavar="N",
        help="Minimum unconstrained sequence length for an order match (default 8)",
    )
    matching.add_argument(
        "--force-elapsed-time",
        action="store_true",
        help="Allow elapsed time matches on date-only timestamps",
    )
    matching.add_argument(
        "--workers", type=int, metavar="N", help="Threads for the pairwise stages"
    )

    comparison = parser.add_argument_group("comparison")
    comparison.add_argument(
        "--compare",
        nargs="*",
        metavar="BLOCKING_KEY",
        help="Run ASNM, blocking on the named attribute (no name = one block)",
    )
    comparison.add_argument(
        "--thresholds", nargs="+", type=float, metavar="T", help="ASNM similarity thresholds"
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--output-source", action="store_true", help="Write the raw records (with and without IDs)"
    )
    output.add_argument(
        "--analysis", action="store_true", help="Write the records prefixed by analysis fields"
    )
    output.add_argument("--query", action="store_true", help="Query record differences afterwards")
    output.add_argument("--output-dir", type=Path, help="Directory for output files")
    output.add_argument("--log-dir", type=Path, help="Directory for log files")
    output.add_argument("--json-logs", action="store_true", help="Write log files as JSON lines")
    output.add_argument("--progress", action="store_true", help="Show progress bars")
    output.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> DedupConfig:
    """Build the run configuration; explicit flags override environment defaults."""
    overrides = {
        "lcs_sample_count": None if args.lcs_max else args.lcs_samples,
        "lcs_take_every_x": args.lcs_every_x,
        "lcs_random": args.lcs_random,
        "random_seed": args.seed,
        "force_elapsed_time": args.force_elapsed_time,
        "blocking_key": " ".join(args.compare or []),
        "similarity_thresholds": tuple(args.thresholds or ()),
        "show_progress": args.progress,
    }
    if args.min_seq_length is not None:
        overrides["min_unconstrained_length"] = args.min_seq_length
    if args.workers is not None:
        overrides["workers"] = args.workers
    return DedupConfig.from_env(**overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the temporal-dedup command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_dir = args.log_dir or (get_log_dir() if args.json_logs else None)
    logger = setup_logging(
        log_dir=log_dir, json_output=args.json_logs, verbose=args.verbose, dataset=args.dataset
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    print_header("BEGIN TemporalDedup", logger)
    try:
        logger.info(f"Dataset to process is described in: {args.dataset}")
        with log_stage(logger, "read_dataset", dataset=str(args.dataset)):
            headers, rows = read_dataset(args.dataset)
        truth_ids = read_truth_ids(args.truth)

        dedup = TemporalDedup(config)
        result = dedup.run(headers, rows, truth_ids)

        if args.compare is not None:
            dedup.compare(result)

        output_dir = args.output_dir or get_output_dir()
        if args.output_source:
            for with_ids in (False, True):
                with log_stage(logger, "write_raw_output"):
                    path = write_raw_output(
                        args.dataset, output_dir, headers, result.records, with_ids=with_ids
                    )
                logger.info(f"Raw data records written to file: {path}")
        if args.analysis:
            with log_stage(logger, "write_analysis_output"):
                path = write_analysis_output(args.dataset, output_dir, headers, result.records)
            logger.info(f"Analysis data records written to file: {path}")

        if args.query:
            run_queries(result.records)
    except TemporalDedupError as e:
        logger.error(str(e))
        return 1

    print_header("END TemporalDedup", logger)
    return 0


if __name__ == "__main__":
    sys.exit(main())

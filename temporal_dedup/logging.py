"""
Structured logging utilities.

Console output is human-readable; run logs can be written as plain text or
as JSON lines. Pipeline stages attach structured fields (stage, dataset,
count, duration_ms, threshold) through ``extra=`` or :func:`log_stage`.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

# Extra fields copied from log records into JSON output
STRUCTURED_FIELDS = ("stage", "dataset", "count", "duration_ms", "threshold")

FILE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"


def structured_fields(record: logging.LogRecord) -> dict:
    """The structured fields set on a log record."""
    return {key: getattr(record, key) for key in STRUCTURED_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **structured_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        return f"{timestamp} [{record.levelname:8}] {record.getMessage()}"


def setup_structured_logging(
    name: str,
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    json_output: bool = False,
    console: bool = True,
    run_label: Optional[str] = None,
) -> logging.Logger:
    """
    Configure a logger (normally the package logger) for one run.

    Args:
        name: Logger name; module loggers below it propagate to it
        level: Logging level
        log_dir: Directory for the run log file (None = no file)
        json_output: Write the run log as JSON lines (.jsonl) instead of text
        console: Also log to stdout
        run_label: Prefix for the run log file name (defaults to name)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter())
        logger.addHandler(console_handler)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        suffix = ".jsonl" if json_output else ".log"
        log_file = log_dir / f"{run_label or name}_{datetime.now():%Y%m%d_%H%M%S}{suffix}"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        formatter = JSONFormatter() if json_output else logging.Formatter(FILE_FORMAT)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Logging to: {log_file}")

    return logger


@contextmanager
def log_stage(logger: logging.Logger, stage: str, **fields) -> Iterator[dict]:
    """
    Time a pipeline stage and log its duration when it finishes.

    The yielded dict may be updated by the caller (e.g. with a ``count``); its
    contents are attached to the completion log record as structured fields.

    Example:
        with log_stage(logger, "base_techniques") as info:
            info["count"] = len(predicted)
    """
    info: dict = dict(fields)
    start = time.perf_counter()
    yield info
    info["duration_ms"] = int((time.perf_counter() - start) * 1000)
    logger.info(f"{stage} takes {info['duration_ms']}ms", extra={"stage": stage, **info})

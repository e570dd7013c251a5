"""
Unit tests for temporal_dedup.logging module.
"""

import json
import logging

from temporal_dedup.logging import (
    ConsoleFormatter,
    JSONFormatter,
    log_stage,
    setup_structured_logging,
)


def _record(message="hello", **extra):
    record = logging.LogRecord("temporal_dedup.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_structured_fields():
    """Test that stage fields are copied into the JSON entry."""
    entry = json.loads(JSONFormatter().format(_record(stage="lcs_modeling", duration_ms=12)))
    assert entry["message"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["stage"] == "lcs_modeling"
    assert entry["duration_ms"] == 12
    assert "threshold" not in entry


def test_console_formatter():
    """Test the human-readable console line."""
    line = ConsoleFormatter().format(_record())
    assert line.endswith("[INFO    ] hello")


def test_setup_console_only():
    """Test logging setup without a log directory."""
    logger = setup_structured_logging("temporal_dedup_test_console")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_setup_with_json_file(tmp_path):
    """Test logging setup with a JSON log file."""
    logger = setup_structured_logging(
        "temporal_dedup_test_json", log_dir=tmp_path, json_output=True, console=False
    )
    logger.info("stage done", extra={"stage": "base_techniques", "count": 3})
    for handler in logger.handlers:
        handler.flush()

    log_files = list(tmp_path.glob("temporal_dedup_test_json_*.jsonl"))
    assert len(log_files) == 1
    entries = [json.loads(line) for line in log_files[0].read_text().splitlines()]
    assert entries[-1]["stage"] == "base_techniques"
    assert entries[-1]["count"] == 3

    for handler in logger.handlers:
        handler.close()


def test_run_label_names_text_log(tmp_path):
    """Test that a run label prefixes the plain-text log file."""
    logger = setup_structured_logging(
        "temporal_dedup_test_label", log_dir=tmp_path, console=False, run_label="visits"
    )
    assert len(list(tmp_path.glob("visits_*.log"))) == 1
    for handler in logger.handlers:
        handler.close()


def test_setup_replaces_handlers():
    """Test that repeated setup does not stack handlers."""
    setup_structured_logging("temporal_dedup_test_repeat")
    logger = setup_structured_logging("temporal_dedup_test_repeat")
    assert len(logger.handlers) == 1


def test_log_stage_records_duration(caplog):
    """Test that log_stage logs the stage with its duration and fields."""
    logger = logging.getLogger("temporal_dedup.test_stage")
    with caplog.at_level(logging.INFO, logger="temporal_dedup.test_stage"):
        with log_stage(logger, "truth_data", dataset="visits.tsv") as info:
            info["count"] = 7

    assert info["duration_ms"] >= 0
    record = caplog.records[-1]
    assert record.stage == "truth_data"
    assert record.count == 7
    assert record.dataset == "visits.tsv"
    assert record.getMessage().startswith("truth_data takes ")

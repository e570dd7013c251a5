"""
TemporalDedup pipeline.

Runs the stages in order over one shared record set:

1. Schema inference (records built from the header and raw rows)
2. Truth data loaded into the confusion matrix
3. Base techniques (exact, non-key, modified values, elapsed time)
4. LCS modeling per record type and adherence of every record
5. Unconstrained order match
6. Assessment of the predicted duplicates

Comparison methods (ASNM) run afterwards on deep copies of the records and
are assessed against the same truth data.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from temporal_dedup.comparison.asnm import ASNM
from temporal_dedup.comparison.base import ComparisonMethod, ComparisonResult
from temporal_dedup.config import DedupConfig
from temporal_dedup.evaluation.confusion import Assessment, ConfusionMatrix, log_assessment
from temporal_dedup.inference.schema import Schema, infer_schema
from temporal_dedup.logging import log_stage
from temporal_dedup.matching.base import run_base_match
from temporal_dedup.matching.pairwise import PairMatch
from temporal_dedup.matching.sequence import SequenceModel, model_event_sequences
from temporal_dedup.matching.unconstrained import run_unconstrained_match
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)


@dataclass
class DedupResult:
    """Everything a TemporalDedup run produced."""

    headers: list[str]
    schema: Schema
    records: list[Record]
    matrix: ConfusionMatrix
    predicted_ids: set[int] = field(default_factory=set)
    base_matches: list[PairMatch] = field(default_factory=list)
    sequence_model: Optional[SequenceModel] = None
    unconstrained_ids: list[int] = field(default_factory=list)
    assessment: Optional[Assessment] = None
    comparisons: list[ComparisonResult] = field(default_factory=list)
    timings_ms: dict[str, int] = field(default_factory=dict)

    @property
    def non_adherent_count(self) -> int:
        return len(self.sequence_model.non_adherent_ids) if self.sequence_model else 0


def baseline_sort_ms(records: Sequence[Record]) -> int:
    """Time to copy the records and sort the copies on elapsed time, as a runtime baseline."""
    start = time.perf_counter()
    copies = [record.clone() for record in records]
    copies.sort(key=lambda record: record.elapsed_time)
    return int((time.perf_counter() - start) * 1000)


class TemporalDedup:
    """
    Temporal deduplication of one dataset.

    Example:
        dedup = TemporalDedup(DedupConfig(min_unconstrained_length=6))
        result = dedup.run(headers, rows, truth_ids)
        dedup.compare(result)
    """

    def __init__(self, config: Optional[DedupConfig] = None):
        self.config = config or DedupConfig()

    def run(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        truth_ids: Iterable[int],
    ) -> DedupResult:
        """
        Deduplicate a parsed dataset and assess the prediction.

        Args:
            headers: Ordered header names
            rows: Raw values per row; row i becomes record i
            truth_ids: IDs of known duplicates

        Returns:
            DedupResult with annotated records and the assessment

        Raises:
            TruthDataError: If a truth ID is outside the record range
        """
        config = self.config
        logger.info("Model parameters:")
        for line in config.describe():
            logger.info(line)

        timings: dict[str, int] = {}

        with log_stage(logger, "schema_and_records") as info:
            schema, records = infer_schema(headers, rows)
            info["count"] = len(records)
        timings["schema_inference"] = info["duration_ms"]
        logger.info(f"Number of records parsed: {len(records)}")

        with log_stage(logger, "truth_data") as info:
            matrix = ConfusionMatrix(truth_ids, records)
        timings["truth_data"] = info["duration_ms"]

        sort_ms = baseline_sort_ms(records)
        logger.info(
            f"Baseline measure: sorting the dataset on the elapsed time attribute takes {sort_ms}ms"
        )

        result = DedupResult(
            headers=list(headers), schema=schema, records=records, matrix=matrix
        )
        predicted = result.predicted_ids
        rng = random.Random(config.random_seed)

        with log_stage(logger, "base_techniques") as info:
            result.base_matches = run_base_match(records, config, predicted)
            info["count"] = len(predicted)
        timings["base_techniques"] = info["duration_ms"]

        with log_stage(logger, "lcs_modeling") as info:
            result.sequence_model = model_event_sequences(records, config, rng)
            info["count"] = len(result.sequence_model.sequences)
        timings["lcs_modeling"] = info["duration_ms"]

        with log_stage(logger, "unconstrained_order") as info:
            result.unconstrained_ids = run_unconstrained_match(records, config, predicted)
            info["count"] = len(result.unconstrained_ids)
        timings["unconstrained_order"] = info["duration_ms"]

        total_ms = sum(
            timings[stage]
            for stage in (
                "schema_inference", "base_techniques", "lcs_modeling", "unconstrained_order"
            )
        )
        timings["algorithm_total"] = total_ms
        result.timings_ms = timings
        logger.info(
            f"TOTAL RUNTIME for TemporalDedup Algorithm: {total_ms}ms",
            extra={"stage": "algorithm_total", "duration_ms": total_ms},
        )

        logger.info(
            f"Detecting a total of {len(predicted)} suspected duplicate records "
            f"among {len(records)}"
        )
        result.assessment = matrix.assess_prediction(sorted(predicted))
        log_assessment(result.assessment)
        logger.info(
            f"--- {result.non_adherent_count} records did not adhere to LCS and "
            f"{len(result.unconstrained_ids)} records were flagged as duplicate "
            "for unconstrained order match"
        )
        return result

    def compare(
        self, result: DedupResult, method: Optional[ComparisonMethod] = None
    ) -> list[ComparisonResult]:
        """
        Run a comparison method (ASNM by default) over the result's records.

        The records of the result are not modified.
        """
        if method is None:
            method = ASNM.from_config(self.config)
        comparisons = method.execute_comparison(result.matrix, result.headers, result.records)
        result.comparisons.extend(comparisons)
        return comparisons

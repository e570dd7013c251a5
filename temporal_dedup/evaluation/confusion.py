"""
Confusion matrix evaluation of predicted duplicates against truth data.

Truth data is a list of record IDs known to be duplicates. Every prediction
(a set of record IDs) is assessed against it to give:
- TP/FP/FN/TN counts over the whole record set
- Precision: TP / (TP + FP)
- Recall: TP / (TP + FN)
- F1 Score: harmonic mean of precision and recall
- MCC: Matthews correlation coefficient

Metrics with a zero denominator are NaN.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

from temporal_dedup.errors import TruthDataError
from temporal_dedup.records.models import Record

logger = logging.getLogger(__name__)

REPORT_RULE = "*" * 48


def _safe_divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return float(np.nan)
    return float(numerator / denominator)


@dataclass
class Assessment:
    """Outcome of assessing one prediction against the truth data."""

    total: int
    actual: int
    predicted: int
    tp: int
    fp: int
    fn: int
    tn: int
    precision: float
    recall: float
    f1: float
    mcc: float
    false_positive_ids: list[int] = field(default_factory=list)
    false_negative_ids: list[int] = field(default_factory=list)

    def report_lines(self) -> list[str]:
        """Console report: counts, metrics and the 2x2 table."""
        fps = " ".join(str(i) for i in self.false_positive_ids) or "none"
        fns = " ".join(str(i) for i in self.false_negative_ids) or "none"
        return [
            f"FALSE POSITIVES: predicted {fps}",
            f"FALSE NEGATIVES: predicted {fns}",
            REPORT_RULE,
            f"Total # of records: {self.total}",
            f"Total # of true duplicates: {self.actual}",
            f"Total # of predicted duplicates: {self.predicted}",
            f"Precision: {self.precision}",
            f"Recall: {self.recall}",
            f"F1 Score: {self.f1}",
            f"MCC: {self.mcc}",
            "\t\tACTUAL",
            "PREDICTED\tNegative\tPositive",
            f"Negative\t{self.tn}\t\t{self.fn}",
            f"Positive\t{self.fp}\t\t{self.tp}",
            REPORT_RULE,
        ]


class ConfusionMatrix:
    """
    Truth data for a record set and assessment of predictions against it.

    The truth set is loaded once and never modified by an assessment.
    """

    def __init__(self, truth_ids: Iterable[int], records: Sequence[Record]):
        """
        Load truth IDs and mark the corresponding records as truth duplicates.

        Args:
            truth_ids: IDs of known duplicates, in file order (repeats ignored)
            records: The record set the IDs refer to

        Raises:
            TruthDataError: If an ID is outside the record range
        """
        self.total = len(records)
        self._actual: dict[int, None] = {}

        for record_id in truth_ids:
            if not 0 <= record_id < self.total:
                raise TruthDataError(
                    f"Truth data references record ID {record_id}, "
                    f"but the dataset has {self.total} records"
                )
            if record_id not in self._actual:
                self._actual[record_id] = None
                records[record_id].mark_truth_duplicate()

        logger.info(f"ACTUAL # DUPLICATES FROM TRUTH SOURCE: {len(self._actual)} of {self.total}")

    @property
    def actual(self) -> frozenset[int]:
        return frozenset(self._actual)

    def assess_prediction(self, predicted_ids: Iterable[int]) -> Assessment:
        """
        Assess a set of predicted duplicate IDs against the truth data.

        Args:
            predicted_ids: IDs predicted to be duplicates (repeats ignored)

        Returns:
            Assessment with counts, metrics and the misclassified IDs
        """
        predicted = list(dict.fromkeys(predicted_ids))
        predicted_set = set(predicted)
        logger.info(f"PREDICTED # DUPLICATES TO ASSESS: {len(predicted)}")

        false_positive_ids = [i for i in predicted if i not in self._actual]
        false_negative_ids = [i for i in self._actual if i not in predicted_set]

        fp = len(false_positive_ids)
        tp = len(predicted) - fp
        fn = len(false_negative_ids)
        tn = self.total - tp - fp - fn

        precision = _safe_divide(tp, tp + fp)
        recall = _safe_divide(tp, tp + fn)
        f1 = _safe_divide(2 * precision * recall, precision + recall)
        mcc = _safe_divide(
            tp * tn - fp * fn,
            float(np.sqrt(float(tp + fp) * (tp + fn) * (tn + fp) * (tn + fn))),
        )

        return Assessment(
            total=self.total,
            actual=len(self._actual),
            predicted=len(predicted),
            tp=tp,
            fp=fp,
            fn=fn,
            tn=tn,
            precision=precision,
            recall=recall,
            f1=f1,
            mcc=mcc,
            false_positive_ids=false_positive_ids,
            false_negative_ids=false_negative_ids,
        )


def log_assessment(assessment: Assessment, log: logging.Logger = logger) -> None:
    """Log the console report of an assessment, one line per record."""
    for line in assessment.report_lines():
        log.info(line)

"""Evaluation of predicted duplicates against truth data."""

from temporal_dedup.evaluation.confusion import Assessment, ConfusionMatrix, log_assessment

__all__ = ["Assessment", "ConfusionMatrix", "log_assessment"]

"""
Evaluation Module

PD metrics, candidate evaluation and multi-factor comparison.
"""

from pd_scorecard.evaluation.metrics import PDMetrics
from pd_scorecard.evaluation.evaluator import (
    EVALUATION_STATISTICS,
    PARTITION_STATISTICS,
    CandidateEvaluation,
    evaluate_candidate,
    evaluate_model,
    evaluate_partition,
)
from pd_scorecard.evaluation.comparator import compare_combinations

__all__ = [
    "PDMetrics",
    "EVALUATION_STATISTICS",
    "PARTITION_STATISTICS",
    "CandidateEvaluation",
    "evaluate_candidate",
    "evaluate_model",
    "evaluate_partition",
    "compare_combinations",
]

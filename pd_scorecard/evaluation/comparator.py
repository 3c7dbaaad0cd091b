"""
Multi-Factor Comparator

Fits and evaluates a logistic model for every k-variable combination of a
shortlist. The enumeration is exhaustive: C(n, k) fits.
"""

from typing import List, Sequence
from itertools import combinations
from math import comb
import logging

import pandas as pd
from joblib import Parallel, delayed

from pd_scorecard.core.exceptions import ConfigurationError
from pd_scorecard.evaluation.evaluator import EVALUATION_STATISTICS, evaluate_candidate


logger = logging.getLogger(__name__)


def _evaluate_combination(
    train: pd.DataFrame,
    test: pd.DataFrame,
    variables: List[str],
    target_column: str,
    threshold: float,
    max_iter: int,
) -> pd.Series:
    evaluation = evaluate_candidate(
        train, test, variables, target_column,
        threshold=threshold, max_iter=max_iter,
    )
    return evaluation.to_series()


def compare_combinations(
    train: pd.DataFrame,
    test: pd.DataFrame,
    shortlist: Sequence[str],
    target_column: str,
    k: int = 3,
    threshold: float = 0.5,
    max_iter: int = 100,
    max_combinations: int = 120,
    n_jobs: int = 1,
) -> pd.DataFrame:
    """
    Evaluate all k-subsets of ``shortlist``.

    Args:
        train: Training frame with WoE columns and the target
        test: Test frame with WoE columns and the target
        shortlist: Candidate variables; combination order follows itertools
        target_column: Binary label column
        k: Number of variables per combination
        threshold: Classification threshold
        max_iter: IRLS iteration limit per fit
        max_combinations: Count above which a warning is logged
        n_jobs: joblib workers

    Returns:
        DataFrame indexed by combination label ("a + b + c") with one column
        per name in ``EVALUATION_STATISTICS``.
    """
    shortlist = list(shortlist)
    if k < 1:
        raise ConfigurationError(f"k must be at least 1, got {k}")

    n_combinations = comb(len(shortlist), k)
    if n_combinations == 0:
        logger.warning(f"No combinations of size {k} from {len(shortlist)} variables")
        return pd.DataFrame(columns=EVALUATION_STATISTICS, dtype=float)

    if n_combinations > max_combinations:
        logger.warning(
            f"Evaluating {n_combinations:,} combinations (C({len(shortlist)}, {k})) "
            f"exceeds max_combinations={max_combinations}; this may be slow"
        )
    else:
        logger.info(f"Evaluating {n_combinations} combinations of {k} variables")

    subsets = [list(c) for c in combinations(shortlist, k)]
    results = Parallel(n_jobs=n_jobs)(
        delayed(_evaluate_combination)(
            train, test, subset, target_column, threshold, max_iter
        )
        for subset in subsets
    )

    table = pd.DataFrame(results)
    table.index.name = 'combination'
    return table

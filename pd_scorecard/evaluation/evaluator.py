"""
Candidate Model Evaluator

Scores a logistic model on the train and test partitions and returns a
fixed, ordered statistic vector so candidates can be stacked into one
comparison table.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass, field
import logging

import numpy as np
import pandas as pd

from pd_scorecard.core.exceptions import EvaluationError
from pd_scorecard.evaluation.metrics import PDMetrics
from pd_scorecard.models.logistic import LogisticModel, fit_logistic


logger = logging.getLogger(__name__)

PARTITION_STATISTICS = [
    'auc', 'gini', 'auc_pvalue', 'ks', 'ks_pvalue', 'brier',
    'accuracy', 'precision', 'recall', 'specificity', 'f1', 'balanced_accuracy',
    'tn', 'fp', 'fn', 'tp',
]

MODEL_STATISTICS = ['n_variables', 'aic', 'bic', 'max_vif']

EVALUATION_STATISTICS = (
    [f"train_{s}" for s in PARTITION_STATISTICS]
    + [f"test_{s}" for s in PARTITION_STATISTICS]
    + MODEL_STATISTICS
)


@dataclass
class CandidateEvaluation:
    """Evaluation of one variable subset."""
    variables: List[str]
    model: LogisticModel
    train: Dict[str, float]
    test: Dict[str, float]
    vif: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))

    @property
    def label(self) -> str:
        return ' + '.join(self.variables)

    @property
    def max_vif(self) -> float:
        if self.vif.empty:
            return np.nan
        return float(self.vif.max(skipna=False))

    def to_series(self) -> pd.Series:
        """Statistics in ``EVALUATION_STATISTICS`` order."""
        values = {f"train_{k}": v for k, v in self.train.items()}
        values.update({f"test_{k}": v for k, v in self.test.items()})
        values.update({
            'n_variables': len(self.variables),
            'aic': self.model.aic,
            'bic': self.model.bic,
            'max_vif': self.max_vif,
        })
        return pd.Series(
            [values[name] for name in EVALUATION_STATISTICS],
            index=EVALUATION_STATISTICS,
            name=self.label,
            dtype=float,
        )

    def partition_frame(self) -> pd.DataFrame:
        """Train and test statistics side by side."""
        return pd.DataFrame(
            {'train': self.train, 'test': self.test}
        ).loc[PARTITION_STATISTICS]


def evaluate_partition(
    y_true: np.ndarray,
    y_score: np.ndarray,
    threshold: float = 0.5
) -> Dict[str, float]:
    """
    All partition-level statistics for one set of predictions.

    Args:
        y_true: True labels (1 = bad)
        y_score: Predicted probability of bad
        threshold: Classification threshold for the confusion matrix

    Returns:
        Dict keyed by ``PARTITION_STATISTICS``
    """
    concordance = PDMetrics.concordance(y_true, y_score)
    ks, ks_pvalue = PDMetrics.ks_test(y_true, y_score)
    confusion = PDMetrics.confusion_metrics(y_true, y_score, threshold)

    metrics = {
        'auc': concordance['auc'],
        'gini': concordance['gini'],
        'auc_pvalue': concordance['auc_pvalue'],
        'ks': ks,
        'ks_pvalue': ks_pvalue,
        'brier': PDMetrics.brier_score(y_true, y_score),
    }
    metrics.update(confusion)
    return {name: metrics[name] for name in PARTITION_STATISTICS}


def evaluate_model(
    model: LogisticModel,
    train: pd.DataFrame,
    test: pd.DataFrame,
    threshold: float = 0.5
) -> CandidateEvaluation:
    """
    Evaluate a fitted logistic model on both partitions.

    Args:
        model: Fitted model
        train: Training frame with the model variables and target
        test: Test frame with the model variables and target
        threshold: Classification threshold

    Returns:
        CandidateEvaluation
    """
    target = model.target_column
    for name, frame in (('train', train), ('test', test)):
        missing = [c for c in model.variables + [target] if c not in frame.columns]
        if missing:
            raise EvaluationError(
                f"Columns missing from {name} partition: {missing}",
                metric_name='evaluation',
            )

    train_metrics = evaluate_partition(
        train[target].to_numpy(), model.predict_proba(train), threshold
    )
    test_metrics = evaluate_partition(
        test[target].to_numpy(), model.predict_proba(test), threshold
    )
    vif = PDMetrics.vif(train[model.variables])

    return CandidateEvaluation(
        variables=list(model.variables),
        model=model,
        train=train_metrics,
        test=test_metrics,
        vif=vif,
    )


def evaluate_candidate(
    train: pd.DataFrame,
    test: pd.DataFrame,
    variables: List[str],
    target_column: str,
    threshold: float = 0.5,
    max_iter: int = 100,
    model: Optional[LogisticModel] = None
) -> CandidateEvaluation:
    """
    Fit ``target ~ variables`` on train (unless ``model`` is given) and evaluate.

    Args:
        train: Training frame
        test: Test frame
        variables: Candidate variables
        target_column: Binary label column
        threshold: Classification threshold
        max_iter: IRLS iteration limit
        model: Already fitted model on exactly ``variables``

    Returns:
        CandidateEvaluation
    """
    if model is None:
        model = fit_logistic(train, variables, target_column, max_iter=max_iter)

    evaluation = evaluate_model(model, train, test, threshold)
    logger.debug(
        f"{evaluation.label}: train AUC={evaluation.train['auc']:.4f}, "
        f"test AUC={evaluation.test['auc']:.4f}"
    )
    return evaluation

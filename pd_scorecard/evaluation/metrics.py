"""
PD Model Metrics

Implements the discrimination, calibration and classification metrics
used to compare PD models.
"""

from typing import Dict, Tuple
import numpy as np
import pandas as pd

from scipy.stats import ks_2samp, mannwhitneyu
from sklearn.metrics import brier_score_loss, confusion_matrix
from statsmodels.stats.outliers_influence import variance_inflation_factor

from pd_scorecard.core.exceptions import EvaluationError


class PDMetrics:
    """
    PD model metrics.

    Includes:
    - Concordance (AUC), Gini and a one-sided Mann-Whitney p-value
    - Two-sample KS statistic and p-value
    - Brier score
    - Confusion matrix and derived rates at a fixed threshold
    - Variance inflation factors
    """

    @staticmethod
    def _split_scores(y_true: np.ndarray, y_score: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Scores of bads and goods; both classes must be present."""
        y_true = np.asarray(y_true).astype(int)
        y_score = np.asarray(y_score, dtype=float)
        bad_scores = y_score[y_true == 1]
        good_scores = y_score[y_true == 0]
        if len(bad_scores) == 0 or len(good_scores) == 0:
            raise EvaluationError(
                "Both classes are required to compute discrimination metrics",
                metric_name='discrimination',
                details={'n_bad': len(bad_scores), 'n_good': len(good_scores)},
            )
        return bad_scores, good_scores

    @staticmethod
    def concordance(y_true: np.ndarray, y_score: np.ndarray) -> Dict[str, float]:
        """
        Share of (bad, good) pairs ranked correctly, ties counting one half.

        AUC = U / (n_bad * n_good), Gini = 2 * AUC - 1. The p-value tests
        AUC > 0.5 with a one-sided Mann-Whitney U test.

        Args:
            y_true: True labels (1 = bad)
            y_score: Predicted probability of bad

        Returns:
            Dict with auc, gini and auc_pvalue
        """
        bad_scores, good_scores = PDMetrics._split_scores(y_true, y_score)
        result = mannwhitneyu(bad_scores, good_scores, alternative='greater')
        auc = float(result.statistic) / (len(bad_scores) * len(good_scores))
        return {
            'auc': auc,
            'gini': 2 * auc - 1,
            'auc_pvalue': float(result.pvalue),
        }

    @staticmethod
    def ks_test(y_true: np.ndarray, y_score: np.ndarray) -> Tuple[float, float]:
        """
        Two-sample Kolmogorov-Smirnov test between bad and good scores.

        Returns:
            Tuple of (KS statistic, p-value)
        """
        bad_scores, good_scores = PDMetrics._split_scores(y_true, y_score)
        result = ks_2samp(bad_scores, good_scores)
        return float(result.statistic), float(result.pvalue)

    @staticmethod
    def brier_score(y_true: np.ndarray, y_score: np.ndarray) -> float:
        """Mean squared difference between label and probability."""
        return float(brier_score_loss(np.asarray(y_true).astype(int), np.asarray(y_score, dtype=float)))

    @staticmethod
    def confusion_metrics(
        y_true: np.ndarray,
        y_score: np.ndarray,
        threshold: float = 0.5
    ) -> Dict[str, float]:
        """
        Confusion matrix at ``threshold`` and the rates derived from it.

        A record is predicted bad when its probability is at least
        ``threshold``. Rates with an empty denominator are NaN.
        """
        y_true = np.asarray(y_true).astype(int)
        y_pred = (np.asarray(y_score, dtype=float) >= threshold).astype(int)

        cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
        tn, fp, fn, tp = (int(v) for v in cm.ravel())

        accuracy = (tp + tn) / (tp + tn + fp + fn)
        precision = tp / (tp + fp) if (tp + fp) > 0 else np.nan
        recall = tp / (tp + fn) if (tp + fn) > 0 else np.nan
        specificity = tn / (tn + fp) if (tn + fp) > 0 else np.nan
        if np.isnan(precision) or np.isnan(recall) or (precision + recall) == 0:
            f1 = np.nan
        else:
            f1 = 2 * precision * recall / (precision + recall)

        return {
            'tn': tn,
            'fp': fp,
            'fn': fn,
            'tp': tp,
            'accuracy': accuracy,
            'precision': precision,
            'recall': recall,
            'specificity': specificity,
            'f1': f1,
            'balanced_accuracy': (recall + specificity) / 2,
        }

    @staticmethod
    def vif(X: pd.DataFrame) -> pd.Series:
        """
        Variance inflation factor per column of a design without intercept.

        An intercept is added before computing the factors. All values are
        NaN when the design is rank deficient (aliased coefficients).

        Args:
            X: Predictor frame

        Returns:
            Series of VIF indexed by column
        """
        columns = list(X.columns)
        if not columns:
            return pd.Series(dtype=float)

        design = np.column_stack([np.ones(len(X)), X.to_numpy(dtype=float)])
        if np.linalg.matrix_rank(design) < design.shape[1]:
            return pd.Series(np.nan, index=columns, dtype=float)

        values = [variance_inflation_factor(design, i + 1) for i in range(len(columns))]
        return pd.Series(values, index=columns, dtype=float)

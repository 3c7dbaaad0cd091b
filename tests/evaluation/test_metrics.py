"""
Tests for PD Model Metrics
"""

import numpy as np
import pandas as pd
import pytest
from sklearn.metrics import roc_auc_score

from pd_scorecard.core.exceptions import EvaluationError
from pd_scorecard.evaluation.metrics import PDMetrics


@pytest.fixture
def scored_sample():
    rng = np.random.default_rng(7)
    y = rng.integers(0, 2, size=400)
    # Rounded scores produce ties
    score = np.round(np.clip(0.3 + 0.2 * y + rng.normal(0, 0.2, size=400), 0, 1), 1)
    return y, score


class TestConcordance:
    """Test suite for AUC, Gini and the Mann-Whitney p-value."""

    def test_matches_roc_auc_with_ties(self, scored_sample):
        y, score = scored_sample
        result = PDMetrics.concordance(y, score)

        assert result['auc'] == pytest.approx(roc_auc_score(y, score))
        assert result['gini'] == pytest.approx(2 * result['auc'] - 1)
        assert result['auc_pvalue'] < 0.001

    def test_perfect_ranking(self):
        result = PDMetrics.concordance([0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9])

        assert result['auc'] == 1.0
        assert result['gini'] == 1.0

    def test_all_tied(self):
        result = PDMetrics.concordance([0, 1, 0, 1], [0.5, 0.5, 0.5, 0.5])
        assert result['auc'] == 0.5

    def test_single_class_raises(self):
        with pytest.raises(EvaluationError):
            PDMetrics.concordance([1, 1, 1], [0.2, 0.4, 0.6])


class TestKSAndBrier:
    """Test suite for KS and Brier score."""

    def test_ks_separated(self):
        ks, p_value = PDMetrics.ks_test([0, 0, 0, 1, 1, 1], [0.1, 0.2, 0.3, 0.7, 0.8, 0.9])

        assert ks == pytest.approx(1.0)
        assert 0 < p_value < 0.2

    def test_ks_range(self, scored_sample):
        ks, p_value = PDMetrics.ks_test(*scored_sample)
        assert 0 <= ks <= 1
        assert 0 <= p_value <= 1

    def test_brier(self):
        assert PDMetrics.brier_score([0, 1], [0.2, 0.6]) == pytest.approx(0.1)


class TestConfusionMetrics:
    """Test suite for confusion_metrics."""

    def test_counts_and_rates(self):
        m = PDMetrics.confusion_metrics([0, 0, 1, 1], [0.1, 0.5, 0.4, 0.9])

        # 0.5 is on the bad side of the threshold
        assert (m['tn'], m['fp'], m['fn'], m['tp']) == (1, 1, 1, 1)
        assert m['accuracy'] == 0.5
        assert m['precision'] == 0.5
        assert m['recall'] == 0.5
        assert m['specificity'] == 0.5
        assert m['f1'] == 0.5
        assert m['balanced_accuracy'] == 0.5

    def test_no_predicted_bads(self):
        m = PDMetrics.confusion_metrics([0, 1, 1], [0.1, 0.2, 0.3])

        assert m['tp'] == 0 and m['fp'] == 0
        assert np.isnan(m['precision'])
        assert np.isnan(m['f1'])
        assert m['recall'] == 0.0
        assert m['specificity'] == 1.0

    def test_custom_threshold(self):
        m = PDMetrics.confusion_metrics([0, 1, 1], [0.1, 0.2, 0.3], threshold=0.15)
        assert m['tp'] == 2


class TestVIF:
    """Test suite for variance inflation factors."""

    def test_independent_columns_near_one(self):
        rng = np.random.default_rng(1)
        X = pd.DataFrame({'a': rng.normal(size=500), 'b': rng.normal(size=500)})

        vif = PDMetrics.vif(X)

        assert vif.index.tolist() == ['a', 'b']
        assert (vif < 1.1).all()

    def test_collinear_columns_inflate(self):
        rng = np.random.default_rng(2)
        a = rng.normal(size=500)
        X = pd.DataFrame({'a': a, 'b': a + rng.normal(0, 0.1, size=500)})

        assert (PDMetrics.vif(X) > 10).all()

    def test_singular_design_all_nan(self):
        rng = np.random.default_rng(3)
        a, b = rng.normal(size=100), rng.normal(size=100)
        X = pd.DataFrame({'a': a, 'b': b, 'c': a + b})

        vif = PDMetrics.vif(X)

        assert vif.isna().all()
        assert len(vif) == 3

    def test_empty(self):
        assert PDMetrics.vif(pd.DataFrame(index=range(5))).empty

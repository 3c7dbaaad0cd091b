"""
Tests for the Multi-Factor Comparator
"""

import logging
from math import comb

import pytest

from pd_scorecard.core.exceptions import ConfigurationError
from pd_scorecard.evaluation.comparator import compare_combinations
from pd_scorecard.evaluation.evaluator import EVALUATION_STATISTICS


TARGET = 'everbad_in_12mo'
SHORTLIST = [
    'age_at_application_woe', 'monthly_income_woe',
    'monthly_amortization_woe', 'nominal_rate_woe',
]


class TestCompareCombinations:
    """Test suite for compare_combinations."""

    def test_one_row_per_combination(self, woe_frames):
        train_woe, test_woe = woe_frames

        table = compare_combinations(train_woe, test_woe, SHORTLIST, TARGET, k=2)

        assert len(table) == comb(4, 2)
        assert table.columns.tolist() == EVALUATION_STATISTICS
        assert table.index.name == 'combination'
        assert table.index[0] == 'age_at_application_woe + monthly_income_woe'
        assert table.index[-1] == 'monthly_amortization_woe + nominal_rate_woe'
        assert (table['n_variables'] == 2).all()

    def test_full_shortlist(self, woe_frames):
        train_woe, test_woe = woe_frames

        table = compare_combinations(train_woe, test_woe, SHORTLIST, TARGET, k=4)

        assert len(table) == 1
        assert table.index[0] == ' + '.join(SHORTLIST)

    def test_k_larger_than_shortlist(self, woe_frames, caplog):
        train_woe, test_woe = woe_frames

        with caplog.at_level(logging.WARNING):
            table = compare_combinations(train_woe, test_woe, SHORTLIST[:2], TARGET, k=3)

        assert table.empty
        assert table.columns.tolist() == EVALUATION_STATISTICS
        assert "No combinations" in caplog.text

    def test_warns_above_max_combinations(self, woe_frames, caplog):
        train_woe, test_woe = woe_frames

        with caplog.at_level(logging.WARNING):
            table = compare_combinations(
                train_woe, test_woe, SHORTLIST[:3], TARGET, k=2, max_combinations=2
            )

        assert len(table) == 3
        assert "exceeds max_combinations" in caplog.text

    def test_invalid_k(self, woe_frames):
        train_woe, test_woe = woe_frames
        with pytest.raises(ConfigurationError, match="k must be at least 1"):
            compare_combinations(train_woe, test_woe, SHORTLIST, TARGET, k=0)

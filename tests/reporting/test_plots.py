"""
Tests for Report Charts
"""

import pandas as pd

from pd_scorecard.reporting.plots import (
    plot_bin_woe,
    plot_default_rates,
    plot_numeric_distribution,
    plot_variable_importance,
)


TARGET = 'everbad_in_12mo'
PNG_MAGIC = b'\x89PNG'


def _is_png(path) -> bool:
    with open(path, 'rb') as f:
        return f.read(4) == PNG_MAGIC


class TestPlots:
    """Test suite for chart output."""

    def test_default_rates(self, applications, tmp_path):
        path = plot_default_rates(applications, 'civil_status', TARGET, tmp_path / "eda" / "civil.png")
        assert _is_png(path)

    def test_numeric_distribution_with_missing(self, applications, tmp_path):
        path = plot_numeric_distribution(applications, 'monthly_income', TARGET, tmp_path / "income.png")
        assert _is_png(path)

    def test_bin_woe(self, fitted_binner, tmp_path):
        path = plot_bin_woe(fitted_binner.bin_table('monthly_income'), tmp_path / "woe.png")
        assert _is_png(path)

    def test_variable_importance(self, tmp_path):
        importance = pd.DataFrame({
            'Variable': ['a', 'b', 'c'],
            'Impurity_Importance': [0.5, 0.3, 0.2],
            'Permutation_Importance': [0.02, 0.05, -0.01],
        })
        path = plot_variable_importance(
            importance, tmp_path / "rf.png", value_column='Impurity_Importance', title='RF'
        )
        assert path.endswith("rf.png")
        assert _is_png(path)

"""
Tests for the Logistic Regression Model
"""

import numpy as np
import pandas as pd
import pytest

from pd_scorecard.core.exceptions import ModelFittingError
from pd_scorecard.models.logistic import INTERCEPT, LogisticModel, fit_logistic


class TestFitLogistic:
    """Test suite for fit_logistic."""

    def test_recovers_signal(self, small_binary_frame):
        model = fit_logistic(small_binary_frame, ['x'], 'y')

        assert isinstance(model, LogisticModel)
        assert model.coefficients['x'] > 0
        assert model.nobs == len(small_binary_frame)

    def test_coefficient_table(self, small_binary_frame):
        model = fit_logistic(small_binary_frame, ['x', 'noise'], 'y')
        table = model.coefficient_table()

        assert table.index.tolist() == [INTERCEPT, 'x', 'noise']
        assert list(table.columns) == ['estimate', 'std_error', 'z_value', 'p_value']
        assert table.loc['x', 'p_value'] < 0.001
        np.testing.assert_allclose(
            table['z_value'], table['estimate'] / table['std_error'], rtol=1e-8
        )

    def test_information_criteria(self, small_binary_frame):
        model = fit_logistic(small_binary_frame, ['x', 'noise'], 'y')

        assert model.aic == pytest.approx(-2 * model.llf + 2 * 3)
        assert model.bic == pytest.approx(-2 * model.llf + np.log(600) * 3)

    def test_predict_proba_matches_fitted_values(self, small_binary_frame):
        model = fit_logistic(small_binary_frame, ['x'], 'y')

        proba = model.predict_proba(small_binary_frame)

        np.testing.assert_allclose(proba, model.results.fittedvalues, rtol=1e-10)
        assert ((proba > 0) & (proba < 1)).all()

    def test_intercept_only(self, small_binary_frame):
        model = fit_logistic(small_binary_frame, [], 'y')
        bad_rate = small_binary_frame['y'].mean()

        assert model.variables == []
        assert model.intercept == pytest.approx(np.log(bad_rate / (1 - bad_rate)), abs=1e-6)
        assert model.coefficients.empty

    def test_summary_frame(self, small_binary_frame):
        summary = fit_logistic(small_binary_frame, ['x'], 'y').summary_frame()

        assert summary.loc[0, 'N_Variables'] == 1
        assert summary.loc[0, 'Nobs'] == 600

    def test_missing_column(self, small_binary_frame):
        with pytest.raises(ModelFittingError, match="not found"):
            fit_logistic(small_binary_frame, ['absent'], 'y')

    def test_missing_values(self, small_binary_frame):
        df = small_binary_frame.copy()
        df.loc[0, 'x'] = np.nan

        with pytest.raises(ModelFittingError) as exc_info:
            fit_logistic(df, ['x'], 'y')

        assert exc_info.value.details['columns'] == ['x']

    def test_single_class(self, small_binary_frame):
        with pytest.raises(ModelFittingError, match="single class"):
            fit_logistic(small_binary_frame.assign(y=1), ['x'], 'y')

    def test_empty_frame(self, small_binary_frame):
        with pytest.raises(ModelFittingError, match="Empty"):
            fit_logistic(small_binary_frame.iloc[0:0], ['x'], 'y')

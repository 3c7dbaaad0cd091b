"""
Tests for the Score Scaler
"""

import numpy as np
import pytest
from scipy.stats import spearmanr

from pd_scorecard.config.schema import ScorecardConfig
from pd_scorecard.core.exceptions import AnalysisError, ConfigurationError
from pd_scorecard.models.logistic import fit_logistic
from pd_scorecard.scoring.scaler import BASEPOINTS, ScoreScaler


TARGET = 'everbad_in_12mo'
VARIABLES = ['nominal_rate_woe', 'monthly_income_woe', 'monthly_amortization_woe']


@pytest.fixture(scope="module")
def model(woe_frames):
    train_woe, _ = woe_frames
    return fit_logistic(train_woe, VARIABLES, TARGET)


class TestScaling:
    """Test suite for the PDO scaling constants and probability scores."""

    def test_constants(self):
        scaler = ScoreScaler()

        assert scaler.b == pytest.approx(40 / np.log(2))
        assert scaler.a == pytest.approx(660 - 40 / np.log(2) * np.log(72))

    def test_even_odds_score(self):
        scaler = ScoreScaler(odds=72, offset=660, pdo=40)

        assert scaler.score_from_probability(0.5) == 413
        assert scaler.base_score(0.0) == 413

    def test_offset_at_reference_odds(self):
        assert ScoreScaler().score_from_probability(1 / 73) == 660

    def test_doubling_odds_adds_pdo(self):
        scaler = ScoreScaler()
        # odds 72 -> 144
        assert scaler.score_from_probability(1 / 145) == 700

    def test_decreasing_in_probability(self):
        scores = ScoreScaler().score_from_probability(np.linspace(0.01, 0.99, 50))

        assert scores.dtype.kind == 'i'
        assert np.all(np.diff(scores) <= 0)
        assert scores[0] > scores[-1]

    def test_extreme_probabilities_finite(self):
        scores = ScoreScaler().score_from_probability(np.array([0.0, 1.0]))
        assert np.all(np.isfinite(scores))

    def test_scalar_returns_int(self):
        assert isinstance(ScoreScaler().score_from_probability(0.2), int)

    def test_points_sign(self):
        scaler = ScoreScaler()

        # Points are -b * woe * coefficient
        assert scaler.points_from_contribution(0.5, -1.0) > 0
        assert scaler.points_from_contribution(0.5, 1.0) < 0
        assert scaler.points_from_contribution(0.0, 1.0) == 0

    @pytest.mark.parametrize("odds,pdo", [(0, 40), (-1, 40), (72, 0)])
    def test_invalid_parameters(self, odds, pdo):
        with pytest.raises(ConfigurationError):
            ScoreScaler(odds=odds, pdo=pdo)

    def test_invalid_parameters_are_analysis_errors(self):
        with pytest.raises(AnalysisError, match="pdo must be positive"):
            ScoreScaler(pdo=-10)

    def test_from_config(self):
        scaler = ScoreScaler.from_config(ScorecardConfig(odds=50, offset=600, pdo=20))
        assert (scaler.odds, scaler.offset, scaler.pdo) == (50, 600, 20)


class TestScorecard:
    """Test suite for build_scorecard and score_frame."""

    def test_basepoints_row_first(self, model, fitted_binner):
        scorecard = ScoreScaler().build_scorecard(model, fitted_binner)

        assert list(scorecard.columns) == ['variable', 'bin', 'woe', 'coefficient', 'points']
        assert scorecard.loc[0, 'variable'] == BASEPOINTS
        assert scorecard.loc[0, 'points'] == ScoreScaler().base_score(model.intercept)

    def test_one_row_per_bin(self, model, fitted_binner):
        scorecard = ScoreScaler().build_scorecard(model, fitted_binner)

        for column in VARIABLES:
            variable = column[:-len('_woe')]
            n_bins = len(fitted_binner.get_binning(variable).bins)
            assert (scorecard['variable'] == variable).sum() == n_bins

    def test_score_frame_sums_points(self, model, woe_frames):
        _, test_woe = woe_frames
        scores = ScoreScaler().score_frame(test_woe, model)

        point_columns = [c for c in scores.columns if c.endswith('_points')]
        assert 'base_points' in point_columns
        assert len(point_columns) == len(VARIABLES) + 1
        assert (scores[point_columns].sum(axis=1) == scores['score']).all()

    def test_score_frame_close_to_probability_score(self, model, woe_frames):
        _, test_woe = woe_frames
        scaler = ScoreScaler()

        from_points = scaler.score_frame(test_woe, model)['score'].to_numpy()
        from_pd = scaler.score_from_probability(model.predict_proba(test_woe))

        # Per-term rounding moves the total by at most half a point per term
        assert np.abs(from_points - from_pd).max() <= (len(VARIABLES) + 2) / 2 + 1

    def test_higher_risk_lower_score(self, model, woe_frames):
        _, test_woe = woe_frames
        scores = ScoreScaler().score_frame(test_woe, model)['score'].to_numpy()
        proba = model.predict_proba(test_woe)

        assert spearmanr(scores, proba)[0] < -0.95

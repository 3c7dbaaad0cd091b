"""
Score Scaler

Points-to-double-odds (PDO) scaling of PD model output.

Scoring Formula:
    b = PDO / ln(2)
    a = Offset - b * ln(Odds)
    Score = a + b * ln((1 - p) / p)

Per-variable points and the base score split the same linear predictor:
    Points_i = -b * WoE_i * β_i
    Base = a - b * β_0

Higher score = lower risk (good).
"""

from typing import Optional, Union
import logging

import numpy as np
import pandas as pd

from pd_scorecard.binning.binner import WoEBinner
from pd_scorecard.config.schema import ScorecardConfig
from pd_scorecard.core.exceptions import ConfigurationError
from pd_scorecard.models.logistic import LogisticModel


logger = logging.getLogger(__name__)

BASEPOINTS = 'basepoints'
WOE_SUFFIX = '_woe'

# Probabilities are clipped away from 0 and 1 so log-odds stay finite
PROBABILITY_EPS = 1e-15


class ScoreScaler:
    """
    Integer score scaling with fixed odds, offset and PDO.

    Attributes:
        odds: Good:bad odds that score ``offset``
        offset: Score at ``odds``
        pdo: Points that double the odds
        b: Points per unit of log-odds (PDO / ln 2)
        a: Score at even odds
    """

    def __init__(
        self,
        odds: float = 72.0,
        offset: float = 660.0,
        pdo: float = 40.0
    ):
        if odds <= 0:
            raise ConfigurationError(f"odds must be positive, got {odds}")
        if pdo <= 0:
            raise ConfigurationError(f"pdo must be positive, got {pdo}")

        self.odds = odds
        self.offset = offset
        self.pdo = pdo

        self.b = pdo / np.log(2)
        self.a = offset - self.b * np.log(odds)

    @classmethod
    def from_config(cls, config: Optional[ScorecardConfig] = None) -> 'ScoreScaler':
        config = config or ScorecardConfig()
        return cls(odds=config.odds, offset=config.offset, pdo=config.pdo)

    def score_from_probability(self, p: Union[float, np.ndarray]) -> Union[int, np.ndarray]:
        """
        Integer score for a probability of bad.

        Args:
            p: Probability or array of probabilities

        Returns:
            int for a scalar input, int array otherwise
        """
        p_arr = np.clip(np.asarray(p, dtype=float), PROBABILITY_EPS, 1 - PROBABILITY_EPS)
        scores = np.round(self.a + self.b * np.log((1 - p_arr) / p_arr)).astype(int)
        if np.ndim(p) == 0:
            return int(scores)
        return scores

    def points_from_contribution(
        self,
        woe: Union[float, np.ndarray],
        coefficient: float
    ) -> Union[int, np.ndarray]:
        """Points for a WoE value given its model coefficient."""
        points = np.round(-self.b * np.asarray(woe, dtype=float) * coefficient).astype(int)
        if np.ndim(woe) == 0:
            return int(points)
        return points

    def base_score(self, intercept: float = 0.0) -> int:
        """Score carried by the intercept alone."""
        return int(np.round(self.a - self.b * intercept))

    def build_scorecard(self, model: LogisticModel, binner: WoEBinner) -> pd.DataFrame:
        """
        Points per bin for every variable in the model.

        Args:
            model: Logistic model fitted on ``<variable>_woe`` columns
            binner: Fitted binner that produced those columns

        Returns:
            DataFrame with columns variable, bin, woe, coefficient, points;
            the first row holds the base points.
        """
        rows = [{
            'variable': BASEPOINTS,
            'bin': None,
            'woe': np.nan,
            'coefficient': model.intercept,
            'points': self.base_score(model.intercept),
        }]

        for column, coefficient in model.coefficients.items():
            variable = _raw_variable(column)
            binning = binner.get_binning(variable)
            for woe_bin in binning.bins:
                rows.append({
                    'variable': variable,
                    'bin': woe_bin.label,
                    'woe': woe_bin.woe,
                    'coefficient': float(coefficient),
                    'points': self.points_from_contribution(woe_bin.woe, float(coefficient)),
                })

        scorecard = pd.DataFrame(rows)
        logger.info(
            f"Built scorecard: {len(model.variables)} variables, "
            f"base points {rows[0]['points']}"
        )
        return scorecard

    def score_frame(self, df: pd.DataFrame, model: LogisticModel) -> pd.DataFrame:
        """
        Points per model variable and total score for each record.

        Args:
            df: Frame with the model's WoE columns
            model: Fitted logistic model

        Returns:
            DataFrame with ``<variable>_points`` columns, ``base_points`` and
            ``score`` (base points plus the sum of variable points).
        """
        result = pd.DataFrame(index=df.index)
        result['base_points'] = self.base_score(model.intercept)

        for column, coefficient in model.coefficients.items():
            points = self.points_from_contribution(df[column].to_numpy(), float(coefficient))
            result[f"{_raw_variable(column)}_points"] = points

        result['score'] = result.sum(axis=1).astype(int)
        return result


def _raw_variable(column: str) -> str:
    if column.endswith(WOE_SUFFIX):
        return column[:-len(WOE_SUFFIX)]
    return column

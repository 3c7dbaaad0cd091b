"""
Scoring Module

PDO score scaling and scorecard construction.
"""

from pd_scorecard.scoring.scaler import BASEPOINTS, ScoreScaler

__all__ = [
    "BASEPOINTS",
    "ScoreScaler",
]

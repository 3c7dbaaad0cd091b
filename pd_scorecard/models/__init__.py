"""
Models Module

Logistic regression on WoE features, stepwise AIC selection and the
random forest benchmark.
"""

from pd_scorecard.models.logistic import INTERCEPT, LogisticModel, fit_logistic
from pd_scorecard.models.stepwise import StepwiseResult, stepwise_aic
from pd_scorecard.models.random_forest import RandomForestFitter, RandomForestResult

__all__ = [
    "INTERCEPT",
    "LogisticModel",
    "fit_logistic",
    "StepwiseResult",
    "stepwise_aic",
    "RandomForestFitter",
    "RandomForestResult",
]

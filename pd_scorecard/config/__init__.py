"""
Config Module

Pydantic-based configuration for the PD analysis.
"""

from pd_scorecard.config.schema import (
    AnalysisConfig,
    DataConfig,
    SplittingConfig,
    BinningConfig,
    LogisticConfig,
    ComparisonConfig,
    ScorecardConfig,
    RandomForestConfig,
    EvaluationConfig,
    OutputConfig,
    ReproducibilityConfig,
)
from pd_scorecard.config.loader import load_config, save_config

__all__ = [
    "AnalysisConfig",
    "DataConfig",
    "SplittingConfig",
    "BinningConfig",
    "LogisticConfig",
    "ComparisonConfig",
    "ScorecardConfig",
    "RandomForestConfig",
    "EvaluationConfig",
    "OutputConfig",
    "ReproducibilityConfig",
    "load_config",
    "save_config",
]

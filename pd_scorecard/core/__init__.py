"""
PD Scorecard - Core Package

This package provides the shared infrastructure for the analysis:
- Base class for stateful components
- Logging utilities
- Custom exceptions
"""

from pd_scorecard.core.base import AnalysisComponent
from pd_scorecard.core.logger import get_logger, setup_logging, PipelineLogger
from pd_scorecard.core.exceptions import (
    AnalysisError,
    ConfigurationError,
    DataValidationError,
    SchemaValidationError,
    BinningError,
    WoELookupError,
    ModelFittingError,
    EvaluationError,
)

__all__ = [
    # Base classes
    "AnalysisComponent",
    # Logging
    "get_logger",
    "setup_logging",
    "PipelineLogger",
    # Exceptions
    "AnalysisError",
    "ConfigurationError",
    "DataValidationError",
    "SchemaValidationError",
    "BinningError",
    "WoELookupError",
    "ModelFittingError",
    "EvaluationError",
]

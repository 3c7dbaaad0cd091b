"""
Custom Exceptions for the Analysis

Provides a hierarchy of exceptions for the different analysis steps,
so a failing step surfaces a precise, diagnosable error.
"""

from typing import Any, Dict, List, Optional


class AnalysisError(Exception):
    """
    Base exception for all analysis errors.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Additional error details
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            result += f" | Details: {self.details}"
        if self.cause:
            result += f" | Caused by: {self.cause}"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(AnalysisError):
    """
    Raised when there's a configuration error.

    Examples:
    - Config file not found or not valid YAML
    - Values rejected by the schema
    - Inconsistent component settings (binner, forest, stepwise, scaler)
    """
    pass


class DataValidationError(AnalysisError):
    """
    Raised when input data validation fails.

    Examples:
    - Label values outside {0, 1}
    - Duplicate borrower ids
    - Non-numeric values in numeric columns
    """

    def __init__(
        self,
        message: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ):
        """
        Initialize the data validation error.

        Args:
            message: Error message
            validation_errors: List of validation error details
            **kwargs: Additional arguments for parent class
        """
        super().__init__(message, **kwargs)
        self.validation_errors = validation_errors or []

    def __str__(self) -> str:
        result = super().__str__()
        if self.validation_errors:
            error_count = len(self.validation_errors)
            result += f" | {error_count} validation error(s)"
        return result


class SchemaValidationError(DataValidationError):
    """
    Raised when the application file does not match the expected schema.
    """

    def __init__(
        self,
        message: str,
        missing_columns: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.missing_columns = missing_columns or []


class BinningError(AnalysisError):
    """
    Raised when binning or WoE calculation fails.

    Examples:
    - Target has a single class
    - Variable has no non-missing values
    - Manual breakpoints are not increasing
    """

    def __init__(
        self,
        message: str,
        variable: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.variable = variable

    def __str__(self) -> str:
        result = super().__str__()
        if self.variable:
            result += f" | Variable: {self.variable}"
        return result


class WoELookupError(BinningError):
    """
    Raised when a value has no fitted bin during WoE transformation.
    """

    def __init__(
        self,
        message: str,
        values: Optional[List[Any]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.values = values or []


class ModelFittingError(AnalysisError):
    """
    Raised when model fitting fails.

    Examples:
    - IRLS did not converge
    - Perfect separation
    - Empty design matrix
    """

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.model_name = model_name

    def __str__(self) -> str:
        result = super().__str__()
        if self.model_name:
            result += f" | Model: {self.model_name}"
        return result


class EvaluationError(AnalysisError):
    """
    Raised when model evaluation fails.

    Examples:
    - Partition contains a single class
    - Variables missing from the partition
    """

    def __init__(
        self,
        message: str,
        metric_name: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.metric_name = metric_name

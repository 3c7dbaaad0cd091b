"""
Base Class for Analysis Components

Stateful steps (binning, random forest) share this interface:
a fit-style entry point, a configuration check, and timed execution logs.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import datetime
import logging


class AnalysisComponent(ABC):
    """
    Abstract base class for stateful analysis components.

    Provides common functionality:
    - Named logger
    - Validation interface
    - Execution tracking
    """

    def __init__(self, name: Optional[str] = None):
        """
        Initialize the component.

        Args:
            name: Optional name for the component (defaults to class name)
        """
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(self.name)
        self._execution_start: Optional[datetime] = None
        self._execution_end: Optional[datetime] = None

    @abstractmethod
    def run(self, *args, **kwargs) -> Any:
        """
        Execute the component's main logic.

        Must be implemented by all subclasses.
        """
        pass

    @abstractmethod
    def validate(self) -> bool:
        """
        Validate the component's configuration.

        Returns:
            True if validation passes, False otherwise
        """
        pass

    def _start_execution(self) -> None:
        """Mark the start of execution."""
        self._execution_start = datetime.now()
        self.logger.info(f"Starting {self.name}")

    def _end_execution(self) -> None:
        """Mark the end of execution and log duration."""
        self._execution_end = datetime.now()

        if self._execution_start:
            duration = (self._execution_end - self._execution_start).total_seconds()
            self.logger.info(f"Completed {self.name} in {duration:.2f} seconds")

    @property
    def execution_duration(self) -> Optional[float]:
        """Get the execution duration in seconds."""
        if self._execution_start and self._execution_end:
            return (self._execution_end - self._execution_start).total_seconds()
        return None

"""
Logging Utilities

Root logger setup for scripts plus a step logger used by the PD
analysis pipeline. Steps are timed: starting a step closes the one
before it, and the durations are kept for the run summary.
"""

import logging
import sys
import time
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

import pandas as pd


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"

# Libraries that are chatty at INFO/DEBUG
QUIET_LOGGERS = ('matplotlib', 'PIL', 'statsmodels', 'joblib')


def setup_logging(
    config: Optional[Dict[str, Any]] = None,
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None
) -> None:
    """
    Configure the root logger with a console handler and, optionally,
    a rotating file handler.

    Args:
        config: Optional dict with 'level', 'format' and 'handlers'
            ('console' / 'file' sub-dicts) keys
        log_level: Level used when config does not set one
        log_file: Log file path; enables the file handler when given
        log_format: Message format, DEFAULT_FORMAT when omitted
    """
    config = config or {}
    log_level = config.get('level', log_level).upper()
    formatter = logging.Formatter(config.get('format', log_format or DEFAULT_FORMAT))
    handlers_config = config.get('handlers', {})

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_config = handlers_config.get('console', {})
    if console_config.get('enabled', True):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_config.get('level', log_level).upper())
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    file_config = handlers_config.get('file', {})
    if log_file or file_config.get('enabled', False):
        file_path = Path(log_file or file_config.get('path', 'logs/pd_analysis.log'))
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_config.get('max_bytes', 10 * 1024 * 1024),
            backupCount=file_config.get('backup_count', 5),
        )
        file_handler.setLevel(file_config.get('level', log_level).upper())
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Shorthand for logging.getLogger, kept for symmetry with setup_logging."""
    return logging.getLogger(name)


class PipelineLogger:
    """
    Step logger for an analysis run.

    Messages are prefixed with the run context (e.g. ``[run_id=...]``).
    ``step_start`` logs a banner and closes the previous step;
    ``step_complete`` closes the last one. Closed steps and their
    durations in seconds are available from ``step_durations``.
    """

    def __init__(self, name: str):
        self.logger = get_logger(name)
        self._context: Dict[str, Any] = {}
        self._current: Optional[str] = None
        self._started_at = 0.0
        self.step_durations: Dict[str, float] = {}

    def set_context(self, **kwargs) -> None:
        self._context.update(kwargs)

    def clear_context(self) -> None:
        self._context = {}

    def _format_message(self, message: str) -> str:
        if not self._context:
            return message
        context_str = " ".join(f"{k}={v}" for k, v in self._context.items())
        return f"[{context_str}] {message}"

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(self._format_message(message), **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(self._format_message(message), **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(self._format_message(message), **kwargs)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def step_start(self, step_name: str) -> None:
        """Close the running step (if any) and start timing ``step_name``."""
        self._close_step()
        self._current = step_name
        self._started_at = time.perf_counter()
        self.info(f"{'=' * 20} {step_name} {'=' * 20}")

    def step_complete(self, run_name: str, duration: Optional[float] = None) -> None:
        """Close the running step and log the run total."""
        self._close_step()
        if duration is None:
            duration = sum(self.step_durations.values())
        self.info(f"{'=' * 20} Completed: {run_name} ({duration:.2f}s) {'=' * 20}")

    def _close_step(self) -> None:
        if self._current is None:
            return
        elapsed = time.perf_counter() - self._started_at
        self.step_durations[self._current] = round(elapsed, 3)
        self.debug(f"{self._current} took {elapsed:.2f}s")
        self._current = None

    # ------------------------------------------------------------------
    # Structured lines
    # ------------------------------------------------------------------

    def metric(self, name: str, value: Any) -> None:
        self.info(f"METRIC | {name}: {value}")

    def data_stats(self, name: str, count: int, columns: Optional[int] = None) -> None:
        if columns:
            self.info(f"DATA | {name}: {count:,} rows, {columns} columns")
        else:
            self.info(f"DATA | {name}: {count:,} rows")

    def partition(self, name: str, target: pd.Series) -> None:
        """Log size and bad rate of a labelled partition."""
        bad_rate = float(target.mean()) if len(target) else float('nan')
        self.info(f"DATA | {name}: {len(target):,} rows, bad rate {bad_rate:.2%}")

    def iv_summary(self, iv_summary: pd.DataFrame) -> None:
        """Log one line per variable of a binner IV summary, strongest first."""
        for _, row in iv_summary.iterrows():
            self.metric(
                f"IV {row['Variable']}",
                f"{row['Total_IV']:.4f} ({row['IV_Category']})",
            )

"""
Reporting Module

PNG charts and the Excel workbook of a PD analysis run.
"""

from pd_scorecard.reporting.excel_reporter import generate_report
from pd_scorecard.reporting.plots import (
    plot_bin_woe,
    plot_default_rates,
    plot_numeric_distribution,
    plot_variable_importance,
)

__all__ = [
    "generate_report",
    "plot_bin_woe",
    "plot_default_rates",
    "plot_numeric_distribution",
    "plot_variable_importance",
]

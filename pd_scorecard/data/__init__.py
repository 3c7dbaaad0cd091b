"""
Data Module

Loading, validation, splitting and exploratory summaries of the
loan application data.
"""

from pd_scorecard.data.loader import load_applications, read_table, validate_applications
from pd_scorecard.data.splitter import DataSets, split_applications
from pd_scorecard.data.exploration import default_rate_table, summarize_variables
from pd_scorecard.data.sample import generate_applications

__all__ = [
    "load_applications",
    "read_table",
    "validate_applications",
    "DataSets",
    "split_applications",
    "default_rate_table",
    "summarize_variables",
    "generate_applications",
]

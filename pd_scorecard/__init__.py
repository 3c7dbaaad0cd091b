"""
PD Scorecard Analysis

Probability-of-default modelling for loan applications: WoE logistic
scorecard and random forest comparison.
"""

__version__ = "1.0.0"
__author__ = "Credit Risk Analytics Team"

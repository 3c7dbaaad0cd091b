"""
Binning Module

Supervised WoE/IV binning fitted on the training partition and the
WoE lookup applied to every partition.
"""

from pd_scorecard.binning.bins import (
    BIN_TABLE_COLUMNS,
    CATEGORY_SEP,
    MISSING_LABEL,
    VariableBinning,
    WoEBin,
    woe_statistics,
)
from pd_scorecard.binning.binner import WoEBinner

__all__ = [
    "BIN_TABLE_COLUMNS",
    "CATEGORY_SEP",
    "MISSING_LABEL",
    "VariableBinning",
    "WoEBin",
    "woe_statistics",
    "WoEBinner",
]

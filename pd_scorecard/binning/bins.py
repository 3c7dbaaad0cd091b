"""
WoE Bin Structures

Bin definitions, per-bin WoE/IV statistics and the per-variable bin map.

WoE Formula:
    WoE_i = ln(Distribution of Goods_i / Distribution of Bads_i)

IV Formula:
    IV = Σ (% Goods_i - % Bads_i) * WoE_i

Empty good or bad cells are replaced by 0.99 when computing WoE so the log
stays finite; the reported distributions are the exact shares.
"""

from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass, field
import logging

import numpy as np
import pandas as pd

from pd_scorecard.core.exceptions import WoELookupError


logger = logging.getLogger(__name__)

MISSING_LABEL = "missing"
CATEGORY_SEP = "%,%"
ZERO_COUNT_ADJUSTMENT = 0.99

BIN_TABLE_COLUMNS = [
    'variable', 'bin', 'breaks', 'count', 'count_distr', 'good', 'bad',
    'badprob', 'prob_good', 'good_distr', 'bad_distr', 'woe', 'bin_iv',
    'total_iv',
]


def format_break(value: float) -> str:
    """Render a numeric breakpoint for bin labels."""
    if np.isinf(value):
        return "-inf" if value < 0 else "inf"
    return f"{value:.6g}"


def woe_statistics(
    good: Sequence[float],
    bad: Sequence[float],
    total_good: float,
    total_bad: float,
) -> Dict[str, np.ndarray]:
    """
    Distributions, WoE and IV contribution for a set of bins.

    Args:
        good: Good counts per bin.
        bad: Bad counts per bin.
        total_good: Goods in the whole training partition.
        total_bad: Bads in the whole training partition.

    Returns:
        Dict of arrays: good_distr, bad_distr, woe, bin_iv.
    """
    good = np.asarray(good, dtype=float)
    bad = np.asarray(bad, dtype=float)

    good_distr = good / total_good
    bad_distr = bad / total_bad

    good_adj = np.where(good == 0, ZERO_COUNT_ADJUSTMENT, good) / total_good
    bad_adj = np.where(bad == 0, ZERO_COUNT_ADJUSTMENT, bad) / total_bad
    woe = np.log(good_adj / bad_adj)
    bin_iv = (good_distr - bad_distr) * woe

    return {
        'good_distr': good_distr,
        'bad_distr': bad_distr,
        'woe': woe,
        'bin_iv': bin_iv,
    }


@dataclass
class WoEBin:
    """Single bin: its domain plus training statistics."""
    bin_id: int
    kind: str  # 'numeric', 'categorical' or 'missing'
    count: int
    good: int
    bad: int
    count_distr: float
    good_distr: float
    bad_distr: float
    woe: float
    bin_iv: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    categories: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.kind == 'missing':
            return MISSING_LABEL
        if self.kind == 'numeric':
            return f"[{format_break(self.lower)},{format_break(self.upper)})"
        return CATEGORY_SEP.join(self.categories)

    @property
    def breaks(self) -> str:
        if self.kind == 'numeric':
            return format_break(self.upper)
        return self.label

    @property
    def badprob(self) -> float:
        return self.bad / self.count if self.count > 0 else np.nan

    @property
    def prob_good(self) -> float:
        return self.good / self.count if self.count > 0 else np.nan

    def contains(self, series: pd.Series) -> pd.Series:
        """Boolean mask of the values that fall in this bin."""
        if self.kind == 'missing':
            return series.isna()
        if self.kind == 'numeric':
            values = pd.to_numeric(series, errors='coerce')
            return (values >= self.lower) & (values < self.upper)
        return series.isin(self.categories) & series.notna()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bin_id': self.bin_id,
            'kind': self.kind,
            'count': self.count,
            'good': self.good,
            'bad': self.bad,
            'count_distr': self.count_distr,
            'good_distr': self.good_distr,
            'bad_distr': self.bad_distr,
            'woe': self.woe,
            'bin_iv': self.bin_iv,
            # JSON has no infinity literal
            'lower': repr(float(self.lower)) if self.lower is not None else None,
            'upper': repr(float(self.upper)) if self.upper is not None else None,
            'categories': list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WoEBin':
        data = dict(data)
        for key in ('lower', 'upper'):
            if data.get(key) is not None:
                data[key] = float(data[key])
        return cls(**data)


@dataclass
class VariableBinning:
    """Fitted bin map for one variable."""
    variable: str
    dtype: str  # 'numeric' or 'categorical'
    bins: List[WoEBin]
    manual: bool = False

    @property
    def total_iv(self) -> float:
        return float(sum(b.bin_iv for b in self.bins))

    @property
    def regular_bins(self) -> List[WoEBin]:
        return [b for b in self.bins if b.kind != 'missing']

    @property
    def missing_bin(self) -> Optional[WoEBin]:
        return next((b for b in self.bins if b.kind == 'missing'), None)

    @property
    def is_monotonic(self) -> bool:
        woe_values = [b.woe for b in self.regular_bins]
        return is_monotonic(woe_values)

    def to_frame(self) -> pd.DataFrame:
        """Bin table with one row per bin."""
        rows = []
        total_iv = self.total_iv
        for b in self.bins:
            rows.append({
                'variable': self.variable,
                'bin': b.label,
                'breaks': b.breaks,
                'count': b.count,
                'count_distr': b.count_distr,
                'good': b.good,
                'bad': b.bad,
                'badprob': b.badprob,
                'prob_good': b.prob_good,
                'good_distr': b.good_distr,
                'bad_distr': b.bad_distr,
                'woe': b.woe,
                'bin_iv': b.bin_iv,
                'total_iv': total_iv,
            })
        return pd.DataFrame(rows, columns=BIN_TABLE_COLUMNS)

    def lookup(self, series: pd.Series, unknown_policy: str = 'error') -> pd.Series:
        """
        Replace raw values by the WoE of their bin.

        Args:
            series: Raw variable values.
            unknown_policy: 'error' raises on values with no bin,
                'neutral' assigns them WoE 0.0.

        Returns:
            Float series aligned with ``series``.

        Raises:
            WoELookupError: Under the 'error' policy, if any value has no bin.
        """
        if self.dtype == 'categorical':
            series = series.where(series.isna(), series.astype(str))

        result = pd.Series(np.nan, index=series.index, dtype=float)
        for b in self.bins:
            result[b.contains(series).to_numpy(dtype=bool)] = b.woe

        unmatched = result.isna()
        if unmatched.any():
            values = sorted({str(v) for v in series[unmatched].unique()})
            if unknown_policy == 'error':
                raise WoELookupError(
                    f"{int(unmatched.sum())} value(s) have no fitted bin",
                    variable=self.variable,
                    values=values[:20],
                )
            logger.warning(
                f"WoE | {self.variable}: {int(unmatched.sum())} value(s) without a bin "
                f"({values[:5]}) get neutral WoE 0.0"
            )
            result[unmatched] = 0.0

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'variable': self.variable,
            'dtype': self.dtype,
            'manual': self.manual,
            'total_iv': self.total_iv,
            'bins': [b.to_dict() for b in self.bins],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VariableBinning':
        return cls(
            variable=data['variable'],
            dtype=data['dtype'],
            manual=data.get('manual', False),
            bins=[WoEBin.from_dict(b) for b in data.get('bins', [])],
        )


def is_monotonic(values: List[float]) -> bool:
    """Check if values are monotonically increasing or decreasing."""
    if len(values) <= 1:
        return True

    increasing = all(values[i] <= values[i + 1] for i in range(len(values) - 1))
    decreasing = all(values[i] >= values[i + 1] for i in range(len(values) - 1))

    return increasing or decreasing

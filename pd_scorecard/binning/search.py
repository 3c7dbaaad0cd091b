"""
Supervised Split Search

Top-down binning that greedily adds the breakpoint with the largest total
IV, subject to a minimum bin population, until the relative IV gain falls
below ``stop_limit`` or ``bin_num_limit`` bins exist.

The search works on ordered "units": fine classes for numeric variables,
categories sorted by bad rate for categorical ones. A split at position ``i``
separates units ``[..., i-1]`` from ``[i, ...]``.
"""

from typing import List, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from pd_scorecard.binning.bins import is_monotonic, woe_statistics


logger = logging.getLogger(__name__)


def initial_breaks(values: np.ndarray, init_count_distr: float) -> np.ndarray:
    """
    Equal-frequency candidate breakpoints (fine classing).

    Args:
        values: Non-missing numeric values.
        init_count_distr: Target share of rows per fine class.

    Returns:
        Sorted unique breakpoints strictly above the minimum value.
    """
    if len(values) == 0:
        return np.array([], dtype=float)

    n_init = max(int(round(1.0 / init_count_distr)), 2)
    probs = np.arange(1, n_init) / n_init
    candidates = np.unique(np.quantile(values, probs))
    return candidates[candidates > np.min(values)]


def numeric_units(
    values: np.ndarray,
    is_bad: np.ndarray,
    breaks: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Good and bad counts per fine class ``[break_{i-1}, break_i)``."""
    unit_index = np.searchsorted(breaks, values, side='right')
    n_units = len(breaks) + 1
    bad = np.bincount(unit_index, weights=is_bad.astype(float), minlength=n_units)
    count = np.bincount(unit_index, minlength=n_units).astype(float)
    return count - bad, bad


def categorical_units(
    values: pd.Series,
    is_bad: np.ndarray,
) -> Tuple[List[str], np.ndarray, np.ndarray]:
    """
    Categories ordered by bad rate (ties by name) with their counts.

    Returns:
        Tuple of (ordered categories, good counts, bad counts).
    """
    frame = pd.DataFrame({'category': values.astype(str).to_numpy(), 'bad': is_bad.astype(int)})
    grouped = frame.groupby('category')['bad'].agg(['count', 'sum'])
    grouped['badprob'] = grouped['sum'] / grouped['count']
    grouped = grouped.reset_index().sort_values(['badprob', 'category'], kind='mergesort')

    categories = grouped['category'].tolist()
    bad = grouped['sum'].to_numpy(dtype=float)
    good = grouped['count'].to_numpy(dtype=float) - bad
    return categories, good, bad


def _group_counts(
    unit_good: np.ndarray,
    unit_bad: np.ndarray,
    splits: Sequence[int],
) -> Tuple[np.ndarray, np.ndarray]:
    """Aggregate unit counts into bins delimited by ``splits``."""
    edges = [0] + sorted(splits) + [len(unit_good)]
    good = np.array([unit_good[a:b].sum() for a, b in zip(edges[:-1], edges[1:])])
    bad = np.array([unit_bad[a:b].sum() for a, b in zip(edges[:-1], edges[1:])])
    return good, bad


def _total_iv(good: np.ndarray, bad: np.ndarray, total_good: float, total_bad: float) -> float:
    return float(woe_statistics(good, bad, total_good, total_bad)['bin_iv'].sum())


def tree_split_search(
    unit_good: np.ndarray,
    unit_bad: np.ndarray,
    count_distr_limit: float = 0.05,
    stop_limit: float = 0.10,
    bin_num_limit: int = 8,
) -> List[int]:
    """
    Greedy IV-maximising split search over ordered units.

    Args:
        unit_good: Good counts per unit.
        unit_bad: Bad counts per unit.
        count_distr_limit: Minimum share of rows per resulting bin.
        stop_limit: Minimum relative IV gain to accept another split.
        bin_num_limit: Maximum number of bins.

    Returns:
        Sorted split positions.
    """
    n_units = len(unit_good)
    total_good = float(unit_good.sum())
    total_bad = float(unit_bad.sum())
    total = total_good + total_bad
    if n_units < 2 or total_good == 0 or total_bad == 0:
        return []

    splits: List[int] = []
    current_iv = 0.0

    while len(splits) + 1 < bin_num_limit:
        best_split = None
        best_iv = -np.inf

        for candidate in range(1, n_units):
            if candidate in splits:
                continue
            good, bad = _group_counts(unit_good, unit_bad, splits + [candidate])
            if ((good + bad) / total).min() < count_distr_limit:
                continue
            iv = _total_iv(good, bad, total_good, total_bad)
            if iv > best_iv:
                best_split, best_iv = candidate, iv

        if best_split is None or best_iv <= current_iv:
            break

        gain = np.inf if current_iv <= 0 else best_iv / current_iv - 1.0
        if gain < stop_limit:
            break

        splits.append(best_split)
        current_iv = best_iv
        logger.debug(f"Split at unit {best_split}: IV={best_iv:.4f}")

    return sorted(splits)


def enforce_monotonic(
    unit_good: np.ndarray,
    unit_bad: np.ndarray,
    splits: List[int],
    total_good: float,
    total_bad: float,
) -> List[int]:
    """
    Remove splits until bin WoE is monotonic.

    The trend is taken from the first and last bin; the first adjacent pair
    that breaks it is merged, repeatedly.
    """
    splits = sorted(splits)
    max_iterations = 100

    for _ in range(max_iterations):
        good, bad = _group_counts(unit_good, unit_bad, splits)
        woe = woe_statistics(good, bad, total_good, total_bad)['woe']
        if len(splits) == 0 or is_monotonic(list(woe)):
            break

        direction = woe[-1] - woe[0]
        for i in range(len(woe) - 1):
            ok = woe[i + 1] >= woe[i] if direction >= 0 else woe[i + 1] <= woe[i]
            if not ok:
                # merging bins i and i+1 removes the split between them
                splits = splits[:i] + splits[i + 1:]
                break

    return splits

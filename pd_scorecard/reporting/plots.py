"""
Analysis Charts

Exploratory default-rate charts, bin WoE charts and the variable
importance chart. Every chart is written to a PNG file; nothing is shown
interactively.
"""

from typing import Optional, Union
from pathlib import Path
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import numpy as np
import pandas as pd

from pd_scorecard.data.exploration import default_rate_table


logger = logging.getLogger(__name__)

plt.style.use('seaborn-v0_8-whitegrid')
CHART_COLORS = {
    'primary': '#2E86AB',
    'secondary': '#A23B72',
    'good': '#28A745',
    'bad': '#DC3545',
}
DPI = 150


def _save_chart(fig: Figure, path: Union[str, Path]) -> str:
    """Save a figure as PNG and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, format='png', bbox_inches='tight', dpi=DPI)
    plt.close(fig)
    logger.debug(f"Saved chart: {path}")
    return str(path)


def plot_default_rates(
    df: pd.DataFrame,
    column: str,
    target_column: str,
    path: Union[str, Path]
) -> str:
    """
    Bar chart of record counts per level with the default rate overlaid.

    Args:
        df: Application DataFrame
        column: Categorical variable
        target_column: Binary target column
        path: Output PNG path

    Returns:
        Path of the saved PNG
    """
    table = default_rate_table(df, column, target_column)

    fig, ax = plt.subplots(figsize=(10, 6))
    x = np.arange(len(table))
    ax.bar(x, table['Count'], color=CHART_COLORS['primary'], edgecolor='black', linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels(table['Level'], rotation=30, ha='right')
    ax.set_ylabel('Count')

    ax2 = ax.twinx()
    ax2.plot(x, table['Bad_Rate'], color=CHART_COLORS['bad'], marker='o', linewidth=2)
    ax2.set_ylabel('Default rate')
    ax2.set_ylim(0, max(table['Bad_Rate'].max() * 1.2, 0.01))
    ax2.grid(False)

    ax.set_title(f'{column}: count and default rate', fontweight='bold')
    plt.tight_layout()
    return _save_chart(fig, path)


def plot_numeric_distribution(
    df: pd.DataFrame,
    column: str,
    target_column: str,
    path: Union[str, Path],
    bins: int = 30
) -> str:
    """Overlaid density histograms of a numeric variable by class."""
    values = df[column]
    target = df[target_column]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.hist(
        values[(target == 0) & values.notna()], bins=bins, density=True, alpha=0.5,
        color=CHART_COLORS['good'], label='Non-default (0)',
    )
    ax.hist(
        values[(target == 1) & values.notna()], bins=bins, density=True, alpha=0.5,
        color=CHART_COLORS['bad'], label='Default (1)',
    )
    ax.set_xlabel(column)
    ax.set_ylabel('Density')
    ax.set_title(f'{column} by default status', fontweight='bold')
    ax.legend()
    plt.tight_layout()
    return _save_chart(fig, path)


def plot_bin_woe(bin_table: pd.DataFrame, path: Union[str, Path]) -> str:
    """
    Bin population bars with the WoE line for one variable.

    Args:
        bin_table: Bin table of a single variable
        path: Output PNG path
    """
    variable = bin_table['variable'].iloc[0]

    fig, ax = plt.subplots(figsize=(10, 6))
    x = np.arange(len(bin_table))
    ax.bar(x, bin_table['count_distr'], color=CHART_COLORS['primary'], edgecolor='black', linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels(bin_table['bin'], rotation=30, ha='right')
    ax.set_ylabel('Share of records')

    ax2 = ax.twinx()
    ax2.plot(x, bin_table['woe'], color=CHART_COLORS['secondary'], marker='o', linewidth=2)
    ax2.axhline(0, color='grey', linestyle='--', linewidth=1)
    ax2.set_ylabel('WoE')
    ax2.grid(False)

    total_iv = float(bin_table['total_iv'].iloc[0])
    ax.set_title(f'{variable} (IV = {total_iv:.4f})', fontweight='bold')
    plt.tight_layout()
    return _save_chart(fig, path)


def plot_variable_importance(
    importance: pd.DataFrame,
    path: Union[str, Path],
    value_column: str = 'OOB_Importance',
    title: Optional[str] = None
) -> str:
    """Horizontal bar chart of variable importance, largest on top."""
    data = importance.sort_values(value_column, ascending=False)
    features = data['Variable'].tolist()
    values = data[value_column].to_numpy()

    fig, ax = plt.subplots(figsize=(10, 6))
    colors = plt.cm.Blues(np.linspace(0.4, 0.9, len(features)))
    ax.barh(range(len(features)), values, color=colors, edgecolor='black', linewidth=0.5)
    ax.set_yticks(range(len(features)))
    ax.set_yticklabels(features)
    ax.set_xlabel(value_column.replace('_', ' '))
    ax.set_title(title or 'Variable importance', fontweight='bold')
    ax.invert_yaxis()
    plt.tight_layout()
    return _save_chart(fig, path)

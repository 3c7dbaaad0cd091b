"""
Exploratory Default-Rate Tables

Per-variable default rates used for the exploratory charts and report.
"""

from typing import List
import logging

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


def default_rate_table(
    df: pd.DataFrame,
    column: str,
    target_column: str,
    n_bands: int = 10,
) -> pd.DataFrame:
    """
    Count, bads and bad rate per level of a variable.

    Categorical (non-numeric) columns are grouped by level; numeric columns
    are cut into quantile bands. Missing values get their own ``Missing`` row.

    Args:
        df: Application DataFrame.
        column: Variable to summarise.
        target_column: Binary target column (1 = bad).
        n_bands: Number of quantile bands for numeric columns.

    Returns:
        DataFrame with columns Level, Count, Bads, Bad_Rate, Share.
    """
    series = df[column]
    if pd.api.types.is_numeric_dtype(series):
        levels = pd.qcut(series, q=n_bands, duplicates='drop').astype(str)
    else:
        levels = series.astype(str)
    levels = levels.where(series.notna(), 'Missing')

    grouped = df.groupby(levels, sort=True)[target_column].agg(['count', 'sum'])
    table = grouped.reset_index()
    table.columns = ['Level', 'Count', 'Bads']
    table['Bad_Rate'] = (table['Bads'] / table['Count']).round(4)
    table['Share'] = (table['Count'] / len(df)).round(4)
    return table


def summarize_variables(
    df: pd.DataFrame,
    columns: List[str],
    target_column: str,
) -> pd.DataFrame:
    """One-row-per-variable overview: type, missing rate, cardinality, range."""
    rows = []
    for col in columns:
        series = df[col]
        numeric = pd.api.types.is_numeric_dtype(series)
        rows.append({
            'Variable': col,
            'Type': 'numeric' if numeric else 'categorical',
            'Missing_Rate': round(float(series.isna().mean()), 4),
            'N_Unique': int(series.nunique()),
            'Min': float(series.min()) if numeric else np.nan,
            'Max': float(series.max()) if numeric else np.nan,
            'Mean_Bad': float(series[df[target_column] == 1].mean()) if numeric else np.nan,
            'Mean_Good': float(series[df[target_column] == 0].mean()) if numeric else np.nan,
        })
    return pd.DataFrame(rows)

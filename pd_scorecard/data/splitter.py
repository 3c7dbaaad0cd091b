"""
Data Splitter

Stratified train/test split of the application data.
"""

from typing import List, Tuple
from dataclasses import dataclass, field
import logging

import pandas as pd
from sklearn.model_selection import train_test_split


logger = logging.getLogger(__name__)


@dataclass
class DataSets:
    """Container for the train/test partitions."""
    train: pd.DataFrame
    test: pd.DataFrame
    feature_columns: List[str] = field(default_factory=list)
    id_column: str = 'borrower_id'
    target_column: str = 'everbad_in_12mo'

    @property
    def n_train(self) -> int:
        return len(self.train)

    @property
    def n_test(self) -> int:
        return len(self.test)


def split_applications(
    df: pd.DataFrame,
    feature_columns: List[str],
    target_column: str = 'everbad_in_12mo',
    id_column: str = 'borrower_id',
    test_size: float = 0.20,
    stratify: bool = True,
    random_state: int = 42,
) -> DataSets:
    """
    Split applications into train and test partitions.

    Args:
        df: Validated application DataFrame.
        feature_columns: Candidate predictor columns.
        target_column: Name of binary target column.
        id_column: Identifier column (kept, never modelled).
        test_size: Fraction of rows for the test partition.
        stratify: Stratify by the target when True.
        random_state: Random seed for a reproducible split.

    Returns:
        DataSets with train and test DataFrames.
    """
    train_df, test_df = _stratified_split(
        df, target_column, test_size, random_state, stratify
    )

    logger.info(
        f"Train: {len(train_df):,} rows "
        f"(bad rate: {train_df[target_column].mean():.2%})"
    )
    logger.info(
        f"Test: {len(test_df):,} rows "
        f"(bad rate: {test_df[target_column].mean():.2%})"
    )

    return DataSets(
        train=train_df,
        test=test_df,
        feature_columns=list(feature_columns),
        id_column=id_column,
        target_column=target_column,
    )


def _stratified_split(
    df: pd.DataFrame,
    target_column: str,
    test_size: float,
    random_state: int,
    stratify: bool = True,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Train/test split, stratified on the target unless disabled."""
    train_df, test_df = train_test_split(
        df,
        test_size=test_size,
        stratify=df[target_column] if stratify else None,
        random_state=random_state,
    )
    return train_df.reset_index(drop=True), test_df.reset_index(drop=True)

"""
Application Data Loader

Loads the loan application file and validates it against the fixed
column schema before any modelling step touches it.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import pandas as pd

from pd_scorecard.config.schema import DataConfig
from pd_scorecard.core.exceptions import DataValidationError, SchemaValidationError


logger = logging.getLogger(__name__)


def read_table(input_path: str) -> pd.DataFrame:
    """
    Read a delimited (csv/txt) or parquet file into a DataFrame.

    Args:
        input_path: Path to the input file.

    Returns:
        Raw DataFrame.
    """
    path = Path(input_path)
    if not path.exists():
        raise DataValidationError(f"Input file not found: {input_path}")

    logger.info(f"Loading data from {input_path}")
    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path, sep=None, engine="python")
    logger.info(f"Loaded {len(df):,} rows, {len(df.columns):,} columns")
    return df


def validate_applications(df: pd.DataFrame, data_config: DataConfig) -> pd.DataFrame:
    """
    Validate and coerce an application frame to the configured schema.

    Checks for:
    - Missing required columns
    - Label values outside {0, 1}
    - Duplicate borrower ids
    - Non-numeric values in numeric columns

    Args:
        df: Raw application DataFrame.
        data_config: Column layout.

    Returns:
        Copy of the frame with numeric columns as float, categorical columns
        as object (NaN preserved) and the label as int.

    Raises:
        SchemaValidationError: If required columns are missing.
        DataValidationError: If values violate the schema.
    """
    required = (
        [data_config.id_column]
        + list(data_config.categorical_columns)
        + list(data_config.numeric_columns)
        + [data_config.target_column]
    )
    missing_columns = [c for c in required if c not in df.columns]
    if missing_columns:
        logger.error(f"Missing columns: {missing_columns}")
        raise SchemaValidationError(
            f"Application data is missing required columns: {missing_columns}",
            missing_columns=missing_columns,
        )

    errors: List[Dict[str, Any]] = []
    result = df.copy()

    target = data_config.target_column
    if result[target].isna().any():
        errors.append({'column': target, 'error': 'missing label values'})
    else:
        bad_labels = sorted(set(result[target].unique()) - {0, 1}, key=str)
        if bad_labels:
            errors.append({
                'column': target,
                'error': f'label values outside {{0, 1}}: {bad_labels[:10]}',
            })

    id_col = data_config.id_column
    n_duplicates = int(result[id_col].duplicated().sum())
    if n_duplicates:
        errors.append({'column': id_col, 'error': f'{n_duplicates} duplicate ids'})

    for col in data_config.numeric_columns:
        coerced = pd.to_numeric(result[col], errors='coerce')
        n_bad = int((coerced.isna() & result[col].notna()).sum())
        if n_bad:
            errors.append({'column': col, 'error': f'{n_bad} non-numeric values'})
        result[col] = coerced.astype(float)

    if errors:
        for err in errors:
            logger.error(f"Validation | {err['column']}: {err['error']}")
        raise DataValidationError(
            "Application data failed validation",
            validation_errors=errors,
        )

    for col in data_config.categorical_columns:
        result[col] = result[col].where(result[col].isna(), result[col].astype(str))
        result[col] = result[col].astype(object)

    result[target] = result[target].astype(int)

    logger.info(
        f"Validated {len(result):,} applications "
        f"(bad rate: {result[target].mean():.2%})"
    )
    return result


def load_applications(
    data_config: DataConfig,
    input_path: Optional[str] = None,
) -> pd.DataFrame:
    """
    Load and validate the application file.

    Args:
        data_config: Column layout and default input path.
        input_path: Overrides ``data_config.input_path`` when given.

    Returns:
        Validated application DataFrame.
    """
    df = read_table(input_path or data_config.input_path)
    return validate_applications(df, data_config)

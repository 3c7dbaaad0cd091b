"""
Pytest Configuration and Shared Fixtures

Provides common fixtures for all test modules including:
- Sample configurations (Pydantic-based)
- Synthetic application data with a known log-odds signal
- Pre-split train/test data and a fitted binner
- Temporary directories for output testing
"""

import sys
import pytest
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pd_scorecard.binning.binner import WoEBinner
from pd_scorecard.config.schema import AnalysisConfig, BinningConfig
from pd_scorecard.data.sample import generate_applications
from pd_scorecard.data.splitter import split_applications


TARGET = 'everbad_in_12mo'
CATEGORICAL = ['sex', 'civil_status', 'educational_attainment']
NUMERIC = ['age_at_application', 'monthly_income', 'monthly_amortization', 'nominal_rate']
FEATURES = CATEGORICAL + NUMERIC


# ===================================================================
# CONFIGURATION FIXTURES
# ===================================================================

@pytest.fixture
def sample_config_dict() -> Dict[str, Any]:
    """Minimal valid config dict that can be loaded into AnalysisConfig."""
    return {
        "data": {
            "input_path": "data/sample/loan_applications.csv",
            "target_column": TARGET,
        },
        "splitting": {"test_size": 0.20, "stratify": True},
        "binning": {
            "count_distr_limit": 0.05,
            "bin_num_limit": 6,
            "breaks_list": {"age_at_application": [30, 45]},
        },
        "logistic": {"direction": "both"},
        "comparison": {"shortlist": ["age_at_application", "nominal_rate", "monthly_income"], "k": 2},
        "scorecard": {"odds": 72, "offset": 660, "pdo": 40},
        "random_forest": {"n_estimators": 50, "n_jobs": 1},
        "reproducibility": {"global_seed": 42},
    }


@pytest.fixture
def analysis_config(tmp_path) -> AnalysisConfig:
    """Fast configuration writing into a temporary directory."""
    return AnalysisConfig(
        output={"base_dir": str(tmp_path / "outputs"), "save_plots": False},
        random_forest={"n_estimators": 50, "n_jobs": 1, "permutation_repeats": 2},
        comparison={"shortlist": ["age_at_application", "monthly_income", "nominal_rate"], "k": 2},
    )


# ===================================================================
# DATA FIXTURES
# ===================================================================

@pytest.fixture(scope="session")
def applications() -> pd.DataFrame:
    """1000 synthetic applications with a known default signal."""
    return generate_applications(n=1000, seed=42)


@pytest.fixture
def applications_csv(applications, tmp_path) -> Path:
    path = tmp_path / "loan_applications.csv"
    applications.to_csv(path, index=False)
    return path


@pytest.fixture(scope="session")
def datasets(applications):
    """Stratified 80/20 split of the synthetic applications."""
    return split_applications(
        applications, FEATURES, target_column=TARGET, random_state=42
    )


@pytest.fixture(scope="session")
def fitted_binner(datasets) -> WoEBinner:
    """Binner fitted on the training partition with default settings."""
    return WoEBinner(BinningConfig()).fit(datasets.train, TARGET, FEATURES)


@pytest.fixture(scope="session")
def woe_frames(datasets, fitted_binner):
    """WoE-transformed train and test frames."""
    return fitted_binner.transform(datasets.train), fitted_binner.transform(datasets.test)


@pytest.fixture
def small_binary_frame() -> pd.DataFrame:
    """Small frame with one strong numeric predictor and a categorical one."""
    rng = np.random.default_rng(0)
    n = 600
    x = rng.normal(size=n)
    group = rng.choice(['a', 'b', 'c'], size=n)
    log_odds = -1.0 + 1.5 * x + 0.8 * (group == 'c')
    y = (rng.random(n) < 1 / (1 + np.exp(-log_odds))).astype(int)
    return pd.DataFrame({'x': x, 'group': group, 'noise': rng.normal(size=n), 'y': y})

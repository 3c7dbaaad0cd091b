"""
Sample Data Generator

Synthetic loan applications with the fixed application schema and a known
log-odds signal, for demos and tests.
"""

from typing import Optional

import numpy as np
import pandas as pd


# Seed for reproducibility
RANDOM_SEED = 42

CIVIL_STATUS = {
    'Single': 0.45,
    'Married': 0.40,
    'Separated': 0.10,
    'Widowed': 0.05,
}

EDUCATION = {
    'High School': 0.35,
    'Vocational': 0.15,
    'College': 0.40,
    'Post Graduate': 0.10,
}

# Log-odds of default: intercept and per-column effects. Each numeric
# column carries its own monotonic effect so univariate bins can recover it.
LOG_ODDS = {
    'intercept': -1.6,
    'age': -0.05,               # per year above 38
    'log_income': -1.0,         # per unit of ln(income / 30000)
    'log_amortization': 1.0,    # per unit of ln(amortization / 7000)
    'rate': 20.0,               # per unit of nominal rate above 0.18
    'separated': 0.4,
    'post_graduate': -0.4,
}


def generate_applications(
    n: int = 1000,
    seed: int = RANDOM_SEED,
    income_missing_rate: float = 0.03,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Generate synthetic loan applications.

    Args:
        n: Number of applications
        seed: Random seed (ignored when ``rng`` is given)
        income_missing_rate: Share of applications with unreported income
        rng: Optional numpy Generator

    Returns:
        DataFrame with borrower_id, sex, age_at_application, civil_status,
        educational_attainment, monthly_income, monthly_amortization,
        nominal_rate and everbad_in_12mo.
    """
    rng = rng or np.random.default_rng(seed)

    sex = rng.choice(['M', 'F'], size=n)
    civil_status = rng.choice(list(CIVIL_STATUS), size=n, p=list(CIVIL_STATUS.values()))
    education = rng.choice(list(EDUCATION), size=n, p=list(EDUCATION.values()))

    age = np.clip(rng.normal(38, 10, size=n), 21, 65).round().astype(int)
    income = np.round(np.exp(rng.normal(np.log(30000), 0.6, size=n)), -2)
    amortization = np.round(np.exp(rng.normal(np.log(7000), 0.5, size=n)), 2)
    rate = np.round(np.clip(rng.normal(0.18, 0.04, size=n), 0.06, 0.36), 4)

    log_odds = (
        LOG_ODDS['intercept']
        + LOG_ODDS['age'] * (age - 38)
        + LOG_ODDS['log_income'] * np.log(income / 30000)
        + LOG_ODDS['log_amortization'] * np.log(amortization / 7000)
        + LOG_ODDS['rate'] * (rate - 0.18)
        + LOG_ODDS['separated'] * (civil_status == 'Separated')
        + LOG_ODDS['post_graduate'] * (education == 'Post Graduate')
    )
    pd_true = 1.0 / (1.0 + np.exp(-log_odds))
    everbad = (rng.random(n) < pd_true).astype(int)

    reported_income = income.astype(float)
    reported_income[rng.random(n) < income_missing_rate] = np.nan

    return pd.DataFrame({
        'borrower_id': [f"B{i:06d}" for i in range(1, n + 1)],
        'sex': sex,
        'age_at_application': age,
        'civil_status': civil_status,
        'educational_attainment': education,
        'monthly_income': reported_income,
        'monthly_amortization': amortization,
        'nominal_rate': rate,
        'everbad_in_12mo': everbad,
    })

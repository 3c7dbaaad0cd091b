"""
Logistic Regression Model

Binomial GLM (logit link, IRLS) on WoE features via statsmodels.
"""

from typing import Any, List
from dataclasses import dataclass
import logging
import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import PerfectSeparationWarning

from pd_scorecard.core.exceptions import ModelFittingError


logger = logging.getLogger(__name__)

INTERCEPT = '(Intercept)'


@dataclass
class LogisticModel:
    """Fitted logistic regression: variables, target and statsmodels results."""
    variables: List[str]
    target_column: str
    results: Any

    @property
    def params(self) -> pd.Series:
        """Coefficients indexed by term, intercept first."""
        return pd.Series(
            np.asarray(self.results.params, dtype=float),
            index=[INTERCEPT] + list(self.variables),
        )

    @property
    def intercept(self) -> float:
        return float(self.params[INTERCEPT])

    @property
    def coefficients(self) -> pd.Series:
        """Coefficients of the variables only."""
        return self.params.drop(INTERCEPT)

    @property
    def aic(self) -> float:
        return float(self.results.aic)

    @property
    def bic(self) -> float:
        # -2 logL + ln(n) * k with k = number of estimated coefficients
        return float(-2.0 * self.llf + np.log(self.nobs) * len(self.params))

    @property
    def llf(self) -> float:
        return float(self.results.llf)

    @property
    def deviance(self) -> float:
        return float(self.results.deviance)

    @property
    def nobs(self) -> int:
        return int(self.results.nobs)

    def coefficient_table(self) -> pd.DataFrame:
        """Estimate, standard error, z value and p value per term."""
        index = [INTERCEPT] + list(self.variables)
        return pd.DataFrame(
            {
                'estimate': np.asarray(self.results.params, dtype=float),
                'std_error': np.asarray(self.results.bse, dtype=float),
                'z_value': np.asarray(self.results.tvalues, dtype=float),
                'p_value': np.asarray(self.results.pvalues, dtype=float),
            },
            index=pd.Index(index, name='term'),
        )

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        """
        Predicted probability of the bad class.

        Args:
            df: Frame holding the model variables

        Returns:
            1D array of probabilities
        """
        design = _design_matrix(df, self.variables)
        linear = design.to_numpy() @ self.params.to_numpy()
        return 1.0 / (1.0 + np.exp(-linear))

    def summary_frame(self) -> pd.DataFrame:
        """Single-row model fit statistics."""
        return pd.DataFrame([{
            'N_Variables': len(self.variables),
            'Nobs': self.nobs,
            'LogLik': self.llf,
            'Deviance': self.deviance,
            'AIC': self.aic,
            'BIC': self.bic,
        }])


def fit_logistic(
    df: pd.DataFrame,
    variables: List[str],
    target_column: str,
    max_iter: int = 100,
) -> LogisticModel:
    """
    Fit ``target ~ variables`` as a binomial GLM.

    An empty ``variables`` list fits the intercept-only model.

    Args:
        df: Training frame (WoE columns plus target)
        variables: Predictor columns in model order
        target_column: Binary label column
        max_iter: IRLS iteration limit

    Returns:
        LogisticModel

    Raises:
        ModelFittingError: On missing columns, missing values, an empty or
            single-class frame, perfect separation or non-convergence.
    """
    variables = list(variables)
    missing_columns = [c for c in variables + [target_column] if c not in df.columns]
    if missing_columns:
        raise ModelFittingError(
            f"Columns not found: {missing_columns}", model_name='logistic'
        )
    if len(df) == 0:
        raise ModelFittingError("Empty training frame", model_name='logistic')

    design = _design_matrix(df, variables)
    if design.isna().any().any():
        raise ModelFittingError(
            "Design matrix contains missing values",
            model_name='logistic',
            details={'columns': design.columns[design.isna().any()].tolist()},
        )

    y = df[target_column].astype(float).to_numpy()
    if len(np.unique(y)) < 2:
        raise ModelFittingError("Target has a single class", model_name='logistic')

    try:
        with warnings.catch_warnings():
            warnings.simplefilter('error', PerfectSeparationWarning)
            glm = sm.GLM(y, design.to_numpy(), family=sm.families.Binomial())
            results = glm.fit(maxiter=max_iter)
    except Exception as e:
        raise ModelFittingError(
            f"GLM fit failed for {variables}: {e}",
            model_name='logistic',
            cause=e,
        )

    if not getattr(results, 'converged', True):
        raise ModelFittingError(
            f"IRLS did not converge in {max_iter} iterations for {variables}",
            model_name='logistic',
        )

    model = LogisticModel(variables=variables, target_column=target_column, results=results)
    logger.debug(f"Fitted logistic on {variables}: AIC={model.aic:.2f}")
    return model


def _design_matrix(df: pd.DataFrame, variables: List[str]) -> pd.DataFrame:
    """Intercept column followed by the variables as float."""
    design = df[list(variables)].astype(float).copy()
    design.insert(0, INTERCEPT, 1.0)
    return design

"""
Weight of Evidence (WoE) Binner

Supervised binning and WoE encoding for the PD scorecard.
"""

from typing import Any, Dict, List, Optional, Sequence, Union
from pathlib import Path
import json

import numpy as np
import pandas as pd

from pd_scorecard.binning.bins import (
    CATEGORY_SEP,
    VariableBinning,
    WoEBin,
    woe_statistics,
)
from pd_scorecard.binning.search import (
    categorical_units,
    enforce_monotonic,
    initial_breaks,
    numeric_units,
    tree_split_search,
)
from pd_scorecard.config.schema import BinningConfig
from pd_scorecard.core.base import AnalysisComponent
from pd_scorecard.core.exceptions import BinningError, ConfigurationError


class WoEBinner(AnalysisComponent):
    """
    Supervised WoE binner fitted on the training partition.

    Features:
    - IV-optimised split search per variable (numeric and categorical)
    - Dedicated missing-value bin
    - Optional monotonic WoE for automatic numeric bins
    - Manual breakpoints via ``breaks_list``
    - WoE encoding of train and test with a configurable unknown-value policy
    - Bin tables, IV summary and JSON export

    WoE Formula:
        WoE_i = ln(Distribution of Goods_i / Distribution of Bads_i)

    IV Formula:
        IV = Σ (% Goods_i - % Bads_i) * WoE_i
    """

    def __init__(
        self,
        config: Optional[BinningConfig] = None,
        name: Optional[str] = None
    ):
        """
        Initialize the binner.

        Args:
            config: Binning configuration (defaults apply when omitted)
            name: Optional component name
        """
        super().__init__(name or "WoEBinner")
        self.config = config or BinningConfig()

        self._binnings: Dict[str, VariableBinning] = {}
        self._is_fitted = False

    def validate(self) -> bool:
        """Check settings that only make sense together."""
        if self.config.positive not in (0, 1):
            self.logger.error(f"positive must be 0 or 1, got {self.config.positive}")
            return False
        skipped_manual = sorted(set(self.config.breaks_list) & set(self.config.var_skip))
        if skipped_manual:
            self.logger.error(f"Manual breaks given for skipped variables: {skipped_manual}")
            return False
        return True

    def run(
        self,
        df: pd.DataFrame,
        target_column: str,
        variables: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """Fit on ``df`` and return it with WoE columns added."""
        return self.fit_transform(df, target_column, variables)

    def fit(
        self,
        df: pd.DataFrame,
        target_column: str,
        variables: Optional[List[str]] = None
    ) -> 'WoEBinner':
        """
        Fit bins on training data.

        Args:
            df: Training DataFrame
            target_column: Name of the binary label column
            variables: Columns to bin (default: every column except the
                label and ``var_skip``)

        Returns:
            Self

        Raises:
            BinningError: If the label has a single class, a variable has no
                non-missing values, or manual breaks are invalid.
        """
        if not self.validate():
            raise ConfigurationError("Invalid binning configuration", details={"section": "binning"})
        self._start_execution()

        if target_column not in df.columns:
            raise BinningError(f"Target column '{target_column}' not found")

        is_bad = (df[target_column] == self.config.positive).to_numpy()
        total_bad = float(is_bad.sum())
        total_good = float(len(df) - total_bad)
        if total_good == 0 or total_bad == 0:
            raise BinningError(
                "Target must contain both goods and bads",
                details={'n_rows': len(df), 'n_bad': int(total_bad)},
            )

        if variables is None:
            variables = [c for c in df.columns if c != target_column]
        skipped = [v for v in variables if v in self.config.var_skip]
        if skipped:
            self.logger.info(f"Skipping variables: {skipped}")
        variables = [v for v in variables if v not in self.config.var_skip and v != target_column]

        missing_columns = [v for v in variables if v not in df.columns]
        if missing_columns:
            raise BinningError(f"Variables not found in training data: {missing_columns}")

        self.logger.info(f"Binning {len(variables)} variables")
        self.logger.info(
            f"Total: {len(df):,} rows, {int(total_good):,} goods, {int(total_bad):,} bads"
        )

        binnings = {}
        for variable in variables:
            binning = self._fit_variable(df[variable], is_bad, total_good, total_bad)
            binnings[variable] = binning
            self.logger.debug(
                f"Variable '{variable}': {len(binning.bins)} bins, "
                f"IV={binning.total_iv:.4f}, manual={binning.manual}"
            )

        self._binnings = binnings
        self._is_fitted = True
        self.logger.info(f"Fitted bins for {len(self._binnings)} variables")
        self._end_execution()
        return self

    def _fit_variable(
        self,
        series: pd.Series,
        is_bad: np.ndarray,
        total_good: float,
        total_bad: float
    ) -> VariableBinning:
        """Fit bins for a single variable."""
        variable = series.name
        numeric = pd.api.types.is_numeric_dtype(series)
        notna = series.notna().to_numpy()

        if not notna.any():
            raise BinningError("Variable has no non-missing values", variable=variable)

        manual = variable in self.config.breaks_list
        if manual:
            specs = self._manual_specs(series, numeric)
        elif numeric:
            specs = self._numeric_specs(
                series.to_numpy(dtype=float)[notna], is_bad[notna], total_good, total_bad
            )
        else:
            specs = self._categorical_specs(series[notna], is_bad[notna])

        return self._build_binning(
            series, is_bad, specs, numeric, manual, total_good, total_bad
        )

    def _numeric_specs(
        self,
        values: np.ndarray,
        is_bad: np.ndarray,
        total_good: float,
        total_bad: float
    ) -> List[Dict[str, Any]]:
        """Interval bins from the supervised split search."""
        breaks = initial_breaks(values, self.config.init_count_distr)
        unit_good, unit_bad = numeric_units(values, is_bad, breaks)

        splits = tree_split_search(
            unit_good,
            unit_bad,
            count_distr_limit=self.config.count_distr_limit,
            stop_limit=self.config.stop_limit,
            bin_num_limit=self.config.bin_num_limit,
        )
        if self.config.monotonic:
            splits = enforce_monotonic(unit_good, unit_bad, splits, total_good, total_bad)

        cut_points = [float(breaks[s - 1]) for s in splits]
        return _interval_specs(cut_points)

    def _categorical_specs(
        self,
        values: pd.Series,
        is_bad: np.ndarray
    ) -> List[Dict[str, Any]]:
        """Category groups from the split search over bad-rate ordered levels."""
        categories, unit_good, unit_bad = categorical_units(values, is_bad)
        splits = tree_split_search(
            unit_good,
            unit_bad,
            count_distr_limit=self.config.count_distr_limit,
            stop_limit=self.config.stop_limit,
            bin_num_limit=self.config.bin_num_limit,
        )
        edges = [0] + splits + [len(categories)]
        return [
            {'kind': 'categorical', 'categories': categories[a:b]}
            for a, b in zip(edges[:-1], edges[1:])
        ]

    def _manual_specs(self, series: pd.Series, numeric: bool) -> List[Dict[str, Any]]:
        """Bins from the configured ``breaks_list`` entry."""
        variable = series.name
        raw_breaks = self.config.breaks_list[variable]

        if numeric:
            try:
                cut_points = [float(b) for b in raw_breaks]
            except (TypeError, ValueError) as e:
                raise BinningError(
                    f"Manual breaks must be numeric: {raw_breaks}",
                    variable=variable,
                    cause=e,
                )
            if any(not np.isfinite(b) for b in cut_points):
                raise BinningError(f"Manual breaks must be finite: {raw_breaks}", variable=variable)
            if any(lo >= up for lo, up in zip(cut_points[:-1], cut_points[1:])):
                raise BinningError(
                    f"Manual breaks must be strictly increasing: {raw_breaks}",
                    variable=variable,
                )
            return _interval_specs(cut_points)

        groups = [str(g).split(CATEGORY_SEP) for g in raw_breaks]
        listed = [c for group in groups for c in group]
        duplicated = sorted({c for c in listed if listed.count(c) > 1})
        if duplicated:
            raise BinningError(
                f"Categories listed in more than one manual group: {duplicated}",
                variable=variable,
            )

        observed = set(series.dropna().astype(str).unique())
        unlisted = sorted(observed - set(listed))
        if unlisted:
            raise BinningError(
                f"Training categories missing from manual groups: {unlisted}",
                variable=variable,
            )
        return [{'kind': 'categorical', 'categories': group} for group in groups]

    def _build_binning(
        self,
        series: pd.Series,
        is_bad: np.ndarray,
        specs: Sequence[Dict[str, Any]],
        numeric: bool,
        manual: bool,
        total_good: float,
        total_bad: float
    ) -> VariableBinning:
        """Count goods and bads per bin spec and attach WoE statistics."""
        if not numeric:
            series = series.where(series.isna(), series.astype(str))

        n_total = len(series)
        shells = [
            WoEBin(
                bin_id=i, kind=spec['kind'], count=0, good=0, bad=0,
                count_distr=0.0, good_distr=0.0, bad_distr=0.0, woe=0.0, bin_iv=0.0,
                lower=spec.get('lower'), upper=spec.get('upper'),
                categories=list(spec.get('categories', [])),
            )
            for i, spec in enumerate(specs)
        ]

        missing = series.isna().to_numpy()
        if missing.any():
            shells.append(WoEBin(
                bin_id=len(shells), kind='missing', count=0, good=0, bad=0,
                count_distr=0.0, good_distr=0.0, bad_distr=0.0, woe=0.0, bin_iv=0.0,
            ))

        good_counts, bad_counts = [], []
        for shell in shells:
            mask = shell.contains(series).to_numpy(dtype=bool)
            n_bad = int(is_bad[mask].sum())
            n = int(mask.sum())
            shell.count, shell.bad, shell.good = n, n_bad, n - n_bad
            shell.count_distr = n / n_total
            good_counts.append(n - n_bad)
            bad_counts.append(n_bad)

        stats = woe_statistics(good_counts, bad_counts, total_good, total_bad)
        for i, shell in enumerate(shells):
            shell.good_distr = float(stats['good_distr'][i])
            shell.bad_distr = float(stats['bad_distr'][i])
            shell.woe = float(stats['woe'][i])
            shell.bin_iv = float(stats['bin_iv'][i])

        return VariableBinning(
            variable=series.name,
            dtype='numeric' if numeric else 'categorical',
            bins=shells,
            manual=manual,
        )

    def transform(
        self,
        df: pd.DataFrame,
        variables: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """
        Add ``<variable>_woe`` columns using the fitted bin map.

        Args:
            df: DataFrame to transform (train or test)
            variables: Subset of fitted variables (default: all)

        Returns:
            Copy of ``df`` with WoE columns added; raw columns are kept.
        """
        self._check_fitted()
        variables = variables or self.fitted_variables

        result = df.copy()
        for variable in variables:
            binning = self.get_binning(variable)
            if variable not in df.columns:
                raise BinningError(f"Column '{variable}' not found", variable=variable)
            result[f"{variable}_woe"] = binning.lookup(
                df[variable], unknown_policy=self.config.unknown_policy
            )
        return result

    def fit_transform(
        self,
        df: pd.DataFrame,
        target_column: str,
        variables: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """Fit and transform in one step."""
        self.fit(df, target_column, variables)
        return self.transform(df)

    def get_binning(self, variable: str) -> VariableBinning:
        self._check_fitted()
        if variable not in self._binnings:
            raise BinningError(f"Variable '{variable}' was not binned", variable=variable)
        return self._binnings[variable]

    def bin_table(self, variable: str) -> pd.DataFrame:
        """Bin table for one variable."""
        return self.get_binning(variable).to_frame()

    def bin_tables(self) -> pd.DataFrame:
        """Bin tables of all fitted variables stacked in fit order."""
        self._check_fitted()
        return pd.concat(
            [b.to_frame() for b in self._binnings.values()], ignore_index=True
        )

    def iv_summary(self) -> pd.DataFrame:
        """One row per variable, sorted by descending total IV."""
        self._check_fitted()
        rows = [
            {
                'Variable': name,
                'Total_IV': binning.total_iv,
                'IV_Category': self.iv_category(binning.total_iv),
                'N_Bins': len(binning.bins),
                'Is_Monotonic': binning.is_monotonic,
                'Manual': binning.manual,
            }
            for name, binning in self._binnings.items()
        ]
        summary = pd.DataFrame(rows)
        return summary.sort_values('Total_IV', ascending=False, kind='mergesort').reset_index(drop=True)

    @staticmethod
    def iv_category(iv: float) -> str:
        """Categorize IV score."""
        if iv < 0.02:
            return "useless"
        elif iv < 0.1:
            return "weak"
        elif iv < 0.3:
            return "medium"
        elif iv < 0.5:
            return "strong"
        else:
            return "suspicious"

    def export_binning(self, path: Union[str, Path]) -> Path:
        """Export the fitted bin map to a JSON file."""
        self._check_fitted()

        export_data = {
            'config': self.config.model_dump(),
            'variables': {
                name: binning.to_dict()
                for name, binning in self._binnings.items()
            }
        }

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(export_data, f, indent=2)

        self.logger.info(f"Exported binning to {path}")
        return path

    def load_binning(self, path: Union[str, Path]) -> 'WoEBinner':
        """Load a bin map previously written by ``export_binning``."""
        path = Path(path)
        if not path.exists():
            raise BinningError(f"Binning file not found: {path}")

        with open(path, 'r') as f:
            data = json.load(f)

        if 'config' in data:
            self.config = BinningConfig(**data['config'])

        self._binnings = {
            name: VariableBinning.from_dict(payload)
            for name, payload in data.get('variables', {}).items()
        }
        self._is_fitted = True
        self.logger.info(f"Loaded binning for {len(self._binnings)} variables from {path}")
        return self

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise BinningError("Binner not fitted. Call fit() first.")

    @property
    def is_fitted(self) -> bool:
        """Check if the binner is fitted."""
        return self._is_fitted

    @property
    def fitted_variables(self) -> List[str]:
        """Binned variables in fit order."""
        return list(self._binnings.keys())

    @property
    def woe_columns(self) -> List[str]:
        """Names of the WoE columns produced by ``transform``."""
        return [f"{v}_woe" for v in self._binnings]


def _interval_specs(cut_points: Sequence[float]) -> List[Dict[str, Any]]:
    """Half-open intervals covering (-inf, inf) split at ``cut_points``."""
    edges = [-np.inf] + list(cut_points) + [np.inf]
    return [
        {'kind': 'numeric', 'lower': float(lo), 'upper': float(up)}
        for lo, up in zip(edges[:-1], edges[1:])
    ]

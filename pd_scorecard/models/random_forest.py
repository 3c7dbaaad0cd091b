"""
Random Forest Model

Bagged classification trees on the raw application features, used as a
benchmark for the WoE logistic scorecard.
"""

from typing import List, Optional
from dataclasses import dataclass
import numpy as np
import pandas as pd

from sklearn.ensemble import RandomForestClassifier
from sklearn.inspection import permutation_importance
from sklearn.metrics import confusion_matrix
from sklearn.preprocessing import OrdinalEncoder

from pd_scorecard.config.schema import RandomForestConfig
from pd_scorecard.core.base import AnalysisComponent
from pd_scorecard.core.exceptions import ConfigurationError, ModelFittingError


@dataclass
class RandomForestResult:
    """Fitted forest with its out-of-bag diagnostics."""
    model: RandomForestClassifier
    encoder: Optional[OrdinalEncoder]
    feature_columns: List[str]
    categorical_columns: List[str]
    oob_error: float
    oob_confusion: pd.DataFrame
    importance: pd.DataFrame
    proximity: Optional[np.ndarray] = None

    def encode(self, df: pd.DataFrame) -> pd.DataFrame:
        """Raw features to the numeric matrix the forest was fitted on."""
        return _encode(df, self.feature_columns, self.categorical_columns, self.encoder)

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        """Probability of the bad class (label 1)."""
        proba = self.model.predict_proba(self.encode(df))
        return proba[:, list(self.model.classes_).index(1)]


class RandomForestFitter(AnalysisComponent):
    """
    Random forest classifier for PD benchmarking.

    Features:
    - Ordinal encoding of categorical columns, one column per raw variable
      (unseen levels map to -1)
    - Native missing-value handling for numeric columns
    - OOB error and OOB confusion matrix
    - OOB permutation importance (mean decrease in accuracy), impurity
      importance and held-out permutation importance per raw variable
    - Optional proximity matrix
    """

    def __init__(
        self,
        config: Optional[RandomForestConfig] = None,
        random_state: int = 42,
        name: Optional[str] = None
    ):
        """
        Initialize the fitter.

        Args:
            config: Forest configuration (defaults apply when omitted)
            random_state: Seed for bootstrap, feature sampling and permutations
            name: Optional component name
        """
        super().__init__(name or "RandomForestFitter")
        self.config = config or RandomForestConfig()
        self.random_state = random_state

    def validate(self) -> bool:
        """Check max_features against the ranges scikit-learn accepts."""
        max_features = self.config.max_features
        if isinstance(max_features, float) and not 0.0 < max_features <= 1.0:
            self.logger.error(f"max_features as a fraction must be in (0, 1], got {max_features}")
            return False
        if isinstance(max_features, int) and max_features < 1:
            self.logger.error(f"max_features as a count must be at least 1, got {max_features}")
            return False
        return True

    def run(self, *args, **kwargs) -> RandomForestResult:
        return self.fit(*args, **kwargs)

    def fit(
        self,
        train: pd.DataFrame,
        feature_columns: List[str],
        target_column: str,
        categorical_columns: Optional[List[str]] = None,
        importance_frame: Optional[pd.DataFrame] = None
    ) -> RandomForestResult:
        """
        Fit the forest on raw features.

        Args:
            train: Training frame
            feature_columns: Raw predictor columns
            target_column: Binary label column
            categorical_columns: Subset of ``feature_columns`` to ordinal-encode
            importance_frame: Frame for held-out permutation importance
                (default: train)

        Returns:
            RandomForestResult
        """
        if not self.validate():
            raise ConfigurationError(
                "Invalid random forest configuration", details={"section": "random_forest"}
            )
        self._start_execution()

        feature_columns = list(feature_columns)
        categorical_columns = [c for c in (categorical_columns or []) if c in feature_columns]

        missing = [c for c in feature_columns + [target_column] if c not in train.columns]
        if missing:
            raise ModelFittingError(f"Columns not found: {missing}", model_name=self.name)

        y = train[target_column].astype(int).to_numpy()
        if len(np.unique(y)) < 2:
            raise ModelFittingError("Target has a single class", model_name=self.name)

        encoder = None
        if categorical_columns:
            encoder = OrdinalEncoder(
                handle_unknown='use_encoded_value',
                unknown_value=-1,
                encoded_missing_value=np.nan,
            )
            encoder.fit(train[categorical_columns].astype(object))

        X = _encode(train, feature_columns, categorical_columns, encoder)

        model = RandomForestClassifier(
            n_estimators=self.config.n_estimators,
            max_features=self.config.max_features,
            min_samples_leaf=self.config.min_samples_leaf,
            oob_score=True,
            bootstrap=True,
            random_state=self.random_state,
            n_jobs=self.config.n_jobs,
        )
        try:
            model.fit(X, y)
        except ValueError as e:
            raise ModelFittingError(
                f"Random forest training failed: {e}",
                model_name=self.name,
                cause=e
            )

        oob_error = 1.0 - float(model.oob_score_)
        oob_confusion = self._oob_confusion(model, y)
        self.logger.info(
            f"Forest of {self.config.n_estimators} trees: OOB error {oob_error:.4f}"
        )

        eval_frame = importance_frame if importance_frame is not None else train
        importance = self._importance(
            model,
            X,
            y,
            _encode(eval_frame, feature_columns, categorical_columns, encoder),
            eval_frame[target_column].astype(int).to_numpy(),
            feature_columns,
        )

        proximity = self.proximity(model, X) if self.config.proximity else None

        self._end_execution()
        return RandomForestResult(
            model=model,
            encoder=encoder,
            feature_columns=feature_columns,
            categorical_columns=categorical_columns,
            oob_error=oob_error,
            oob_confusion=oob_confusion,
            importance=importance,
            proximity=proximity,
        )

    def _oob_confusion(self, model: RandomForestClassifier, y: np.ndarray) -> pd.DataFrame:
        """Confusion matrix of OOB votes; rows never out of bag are skipped."""
        decision = model.oob_decision_function_
        scored = ~np.isnan(decision).any(axis=1)
        if not scored.all():
            self.logger.warning(f"{int((~scored).sum())} rows were never out of bag")

        y_pred = model.classes_[np.argmax(decision[scored], axis=1)]
        cm = confusion_matrix(y[scored], y_pred, labels=[0, 1])
        frame = pd.DataFrame(cm, index=['actual_0', 'actual_1'], columns=['pred_0', 'pred_1'])
        frame['class_error'] = [
            cm[0, 1] / cm[0].sum() if cm[0].sum() else np.nan,
            cm[1, 0] / cm[1].sum() if cm[1].sum() else np.nan,
        ]
        return frame

    def _importance(
        self,
        model: RandomForestClassifier,
        X_train: pd.DataFrame,
        y_train: np.ndarray,
        X_eval: pd.DataFrame,
        y_eval: np.ndarray,
        feature_columns: List[str]
    ) -> pd.DataFrame:
        """OOB, impurity and held-out permutation importance, sorted by OOB."""
        perm = permutation_importance(
            model, X_eval, y_eval,
            n_repeats=self.config.permutation_repeats,
            random_state=self.random_state,
            scoring='roc_auc',
            n_jobs=self.config.n_jobs,
        )
        importance = pd.DataFrame({
            'Variable': feature_columns,
            'OOB_Importance': self.oob_importance(model, X_train, y_train, self.random_state),
            'Impurity_Importance': model.feature_importances_,
            'Permutation_Importance': perm.importances_mean,
            'Permutation_Std': perm.importances_std,
        })
        return importance.sort_values(
            'OOB_Importance', ascending=False, kind='mergesort'
        ).reset_index(drop=True)

    @staticmethod
    def oob_importance(
        model: RandomForestClassifier,
        X: pd.DataFrame,
        y: np.ndarray,
        random_state: int = 42
    ) -> np.ndarray:
        """
        Mean decrease in OOB accuracy when a feature is permuted.

        For each tree, the rows left out of its bootstrap sample are
        scored before and after shuffling one column; the accuracy drop
        is averaged over the trees that have OOB rows.

        Args:
            model: Fitted forest (bootstrap=True)
            X: Training matrix the forest was fitted on
            y: Training labels
            random_state: Seed for the column permutations

        Returns:
            Array with one importance per column of ``X``
        """
        rng = np.random.default_rng(random_state)
        values = X.to_numpy(dtype=float)
        n_samples, n_features = values.shape
        drops = np.full((len(model.estimators_), n_features), np.nan)

        for t, (tree, in_bag) in enumerate(zip(model.estimators_, model.estimators_samples_)):
            oob = np.setdiff1d(np.arange(n_samples), in_bag)
            if len(oob) == 0:
                continue
            X_oob, y_oob = values[oob], y[oob]
            baseline = np.mean(_tree_predict(model, tree, X_oob) == y_oob)
            for j in range(n_features):
                X_perm = X_oob.copy()
                X_perm[:, j] = rng.permutation(X_perm[:, j])
                drops[t, j] = baseline - np.mean(_tree_predict(model, tree, X_perm) == y_oob)

        if np.isnan(drops).all():
            return np.full(n_features, np.nan)
        return np.nanmean(drops, axis=0)

    @staticmethod
    def proximity(model: RandomForestClassifier, X: pd.DataFrame) -> np.ndarray:
        """
        Share of trees in which each pair of records lands in the same leaf.

        Returns:
            Symmetric (n, n) matrix with ones on the diagonal
        """
        leaves = model.apply(X)
        n_samples, n_trees = leaves.shape
        proximity = np.zeros((n_samples, n_samples), dtype=float)
        for t in range(n_trees):
            column = leaves[:, t]
            proximity += column[:, None] == column[None, :]
        return proximity / n_trees


def _tree_predict(model: RandomForestClassifier, tree, X: np.ndarray) -> np.ndarray:
    # Trees inside a forest predict encoded class indices
    return model.classes_[tree.predict(X).astype(int)]


def _encode(
    df: pd.DataFrame,
    feature_columns: List[str],
    categorical_columns: List[str],
    encoder: Optional[OrdinalEncoder]
) -> pd.DataFrame:
    X = df[feature_columns].copy()
    if encoder is not None and categorical_columns:
        X[categorical_columns] = encoder.transform(df[categorical_columns].astype(object))
    return X.astype(float)

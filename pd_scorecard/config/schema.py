"""
Pydantic Configuration Schema

Defines all configuration models for the PD analysis.
All fields have defaults matching the reference analysis of the
loan application dataset.
"""

from typing import Dict, List, Literal, Union
from pydantic import BaseModel, Field, model_validator


class DataConfig(BaseModel):
    """Data source configuration."""

    model_config = {"frozen": True}

    input_path: str = "data/sample/loan_applications.csv"
    id_column: str = "borrower_id"
    target_column: str = "everbad_in_12mo"
    categorical_columns: List[str] = Field(
        default_factory=lambda: ["sex", "civil_status", "educational_attainment"]
    )
    numeric_columns: List[str] = Field(
        default_factory=lambda: [
            "age_at_application",
            "monthly_income",
            "monthly_amortization",
            "nominal_rate",
        ]
    )

    @property
    def feature_columns(self) -> List[str]:
        return list(self.categorical_columns) + list(self.numeric_columns)


class SplittingConfig(BaseModel):
    """Train/test splitting configuration."""

    model_config = {"frozen": True}

    test_size: float = Field(default=0.20, gt=0.0, lt=1.0)
    stratify: bool = True


class BinningConfig(BaseModel):
    """Supervised WoE binning configuration."""

    model_config = {"frozen": True}

    count_distr_limit: float = Field(default=0.05, gt=0.0, lt=0.5)
    stop_limit: float = Field(default=0.10, ge=0.0)
    bin_num_limit: int = Field(default=8, ge=2)
    init_count_distr: float = Field(default=0.02, gt=0.0, lt=0.5)
    monotonic: bool = True
    positive: int = 1
    var_skip: List[str] = Field(default_factory=lambda: ["borrower_id"])
    breaks_list: Dict[str, List[Union[float, str]]] = Field(default_factory=dict)
    unknown_policy: Literal["error", "neutral"] = "error"

    @model_validator(mode="after")
    def init_finer_than_limit(self) -> "BinningConfig":
        if self.init_count_distr > self.count_distr_limit:
            raise ValueError(
                f"init_count_distr ({self.init_count_distr}) must not exceed "
                f"count_distr_limit ({self.count_distr_limit})"
            )
        return self


class LogisticConfig(BaseModel):
    """Logistic regression and stepwise selection configuration."""

    model_config = {"frozen": True}

    direction: Literal["both", "forward", "backward"] = "both"
    start: Literal["full", "empty"] = "full"
    max_steps: int = Field(default=1000, ge=1)
    max_iter: int = Field(default=100, ge=1)


class ComparisonConfig(BaseModel):
    """Multi-factor candidate comparison configuration."""

    model_config = {"frozen": True}

    enabled: bool = True
    shortlist: List[str] = Field(default_factory=list)
    k: int = Field(default=3, ge=1)
    max_combinations: int = Field(default=120, ge=1)
    n_jobs: int = 1


class ScorecardConfig(BaseModel):
    """Points-to-double-odds score scaling configuration."""

    model_config = {"frozen": True}

    odds: float = Field(default=72.0, gt=0.0)
    offset: float = 660.0
    pdo: float = Field(default=40.0, gt=0.0)


class RandomForestConfig(BaseModel):
    """Random forest configuration."""

    model_config = {"frozen": True}

    enabled: bool = True
    n_estimators: int = Field(default=500, ge=1)
    max_features: Union[Literal["sqrt", "log2"], int, float, None] = "sqrt"
    min_samples_leaf: int = Field(default=1, ge=1)
    proximity: bool = True
    permutation_repeats: int = Field(default=5, ge=1)
    n_jobs: int = -1


class EvaluationConfig(BaseModel):
    """Model evaluation configuration."""

    model_config = {"frozen": True}

    threshold: float = Field(default=0.5, gt=0.0, lt=1.0)


class OutputConfig(BaseModel):
    """Output configuration."""

    model_config = {"frozen": True}

    base_dir: str = "outputs/pd_analysis"
    save_plots: bool = True
    generate_excel: bool = True
    export_binning: bool = True


class ReproducibilityConfig(BaseModel):
    """Reproducibility and logging configuration."""

    model_config = {"frozen": True}

    global_seed: int = 42
    save_config: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class AnalysisConfig(BaseModel):
    """Top-level analysis configuration combining all sections."""

    model_config = {"frozen": True}

    data: DataConfig = Field(default_factory=DataConfig)
    splitting: SplittingConfig = Field(default_factory=SplittingConfig)
    binning: BinningConfig = Field(default_factory=BinningConfig)
    logistic: LogisticConfig = Field(default_factory=LogisticConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    scorecard: ScorecardConfig = Field(default_factory=ScorecardConfig)
    random_forest: RandomForestConfig = Field(default_factory=RandomForestConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    reproducibility: ReproducibilityConfig = Field(default_factory=ReproducibilityConfig)

    @model_validator(mode="after")
    def shortlist_known(self) -> "AnalysisConfig":
        known = set(self.data.feature_columns)
        unknown = [v for v in self.comparison.shortlist if v not in known]
        if unknown:
            raise ValueError(f"comparison.shortlist has unknown variables: {unknown}")
        return self

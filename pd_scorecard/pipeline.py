"""
PD Analysis Pipeline

Orchestrates the scorecard and random forest comparison:

1. Load and validate the application file
2. Exploratory default-rate summaries and charts
3. Stratified train/test split
4. WoE binning (fit on train) and WoE transform of both partitions
5. Logistic regression with stepwise AIC selection
6. Train/test evaluation of the full and stepwise models
7. Multi-factor comparison of all k-variable combinations
8. Scorecard points and test-set scores
9. Random forest benchmark
10. Excel report, bin map export and config snapshot

Bin boundaries and WoE values come from the training partition only; the
test partition is used for evaluation.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import logging

import numpy as np
import pandas as pd

from pd_scorecard.binning.binner import WoEBinner
from pd_scorecard.config.loader import save_config
from pd_scorecard.config.schema import AnalysisConfig
from pd_scorecard.core.logger import PipelineLogger
from pd_scorecard.data.exploration import summarize_variables
from pd_scorecard.data.loader import load_applications
from pd_scorecard.data.splitter import DataSets, split_applications
from pd_scorecard.evaluation.comparator import compare_combinations
from pd_scorecard.evaluation.evaluator import (
    EVALUATION_STATISTICS,
    PARTITION_STATISTICS,
    CandidateEvaluation,
    evaluate_candidate,
    evaluate_partition,
)
from pd_scorecard.models.random_forest import RandomForestFitter, RandomForestResult
from pd_scorecard.models.stepwise import StepwiseResult, stepwise_aic
from pd_scorecard.reporting.excel_reporter import generate_report
from pd_scorecard.reporting.plots import (
    plot_bin_woe,
    plot_default_rates,
    plot_numeric_distribution,
    plot_variable_importance,
)
from pd_scorecard.scoring.scaler import ScoreScaler


logger = logging.getLogger(__name__)

# WoE columns with IV below this are constant and cannot enter the model
MIN_MODEL_IV = 1e-12


@dataclass
class PDAnalysisResults:
    """Artefacts of one pipeline run."""
    run_id: str
    run_dir: str
    datasets: DataSets
    binner: WoEBinner
    stepwise: StepwiseResult
    evaluations: Dict[str, CandidateEvaluation]
    evaluation_table: pd.DataFrame
    scorecard: pd.DataFrame
    test_scores: pd.DataFrame
    comparison: Optional[pd.DataFrame] = None
    forest: Optional[RandomForestResult] = None
    excel_path: Optional[str] = None
    binning_path: Optional[str] = None
    chart_paths: List[str] = field(default_factory=list)
    step_durations: Dict[str, float] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def selected_variables(self) -> List[str]:
        return list(self.stepwise.selected)


class PDAnalysisPipeline:
    """End-to-end PD analysis.

    Parameters
    ----------
    config : AnalysisConfig, optional
        Typed configuration object.  If ``None``, a default is created.
    input_path : str, optional
        Overrides ``config.data.input_path``.
    output_dir : str, optional
        Overrides ``config.output.base_dir``.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        input_path: Optional[str] = None,
        output_dir: Optional[str] = None,
    ):
        self.config = config or AnalysisConfig()
        self.input_path = input_path or self.config.data.input_path
        self.output_dir = output_dir or self.config.output.base_dir
        self.plog = PipelineLogger(__name__)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def run(self) -> PDAnalysisResults:
        """Execute the full pipeline and return its artefacts."""
        cfg = self.config
        start_time = datetime.now()
        run_id = start_time.strftime("%Y%m%d_%H%M%S")
        run_dir = Path(self.output_dir) / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        self.plog.set_context(run_id=run_id)

        seed = cfg.reproducibility.global_seed
        np.random.seed(seed)
        charts: List[str] = []

        # 1. Load
        self.plog.step_start("Load data")
        df = load_applications(cfg.data, self.input_path)
        self.plog.data_stats("applications", len(df), len(df.columns))

        # 2. Exploration
        self.plog.step_start("Exploration")
        features = cfg.data.feature_columns
        target = cfg.data.target_column
        variable_summary = summarize_variables(df, features, target)
        if cfg.output.save_plots:
            charts.extend(self._exploration_charts(df, run_dir / "plots"))

        # 3. Split
        self.plog.step_start("Train/test split")
        datasets = split_applications(
            df,
            feature_columns=features,
            target_column=target,
            id_column=cfg.data.id_column,
            test_size=cfg.splitting.test_size,
            stratify=cfg.splitting.stratify,
            random_state=seed,
        )
        self.plog.partition("train", datasets.train[target])
        self.plog.partition("test", datasets.test[target])

        # 4. Binning
        self.plog.step_start("WoE binning")
        binner = WoEBinner(cfg.binning)
        binner.fit(datasets.train, target, features)
        woe_train = binner.transform(datasets.train)
        woe_test = binner.transform(datasets.test)
        iv_summary = binner.iv_summary()
        self.plog.iv_summary(iv_summary)
        woe_charts: Dict[str, str] = {}
        if cfg.output.save_plots:
            for variable in binner.fitted_variables:
                woe_charts[variable] = plot_bin_woe(
                    binner.bin_table(variable), run_dir / "plots" / f"woe_{variable}.png"
                )
            charts.extend(woe_charts.values())

        # 5. Logistic regression + stepwise
        self.plog.step_start("Stepwise logistic regression")
        scope = self._model_scope(binner)
        start = scope if cfg.logistic.start == "full" else []
        stepwise = stepwise_aic(
            woe_train,
            scope,
            target,
            direction=cfg.logistic.direction,
            start=start,
            max_steps=cfg.logistic.max_steps,
            max_iter=cfg.logistic.max_iter,
        )
        self.plog.metric("selected variables", stepwise.selected)
        self.plog.metric("stepwise AIC", f"{stepwise.model.aic:.2f}")

        # 6. Evaluation
        self.plog.step_start("Evaluation")
        threshold = cfg.evaluation.threshold
        evaluations = {
            "full_model": evaluate_candidate(
                woe_train, woe_test, scope, target,
                threshold=threshold, max_iter=cfg.logistic.max_iter,
            ),
            "stepwise_model": evaluate_candidate(
                woe_train, woe_test, stepwise.selected, target,
                threshold=threshold, model=stepwise.model,
            ),
        }
        for name, evaluation in evaluations.items():
            self.plog.metric(
                f"{name} AUC train/test",
                f"{evaluation.train['auc']:.4f} / {evaluation.test['auc']:.4f}",
            )

        # 7. Multi-factor comparison
        comparison = None
        if cfg.comparison.enabled:
            self.plog.step_start("Multi-factor comparison")
            shortlist = (
                [f"{v}_woe" for v in cfg.comparison.shortlist
                 if f"{v}_woe" in scope]
                if cfg.comparison.shortlist else scope
            )
            comparison = compare_combinations(
                woe_train, woe_test, shortlist, target,
                k=cfg.comparison.k,
                threshold=threshold,
                max_iter=cfg.logistic.max_iter,
                max_combinations=cfg.comparison.max_combinations,
                n_jobs=cfg.comparison.n_jobs,
            )
            if len(comparison):
                best = comparison['test_auc'].idxmax()
                self.plog.metric("best combination (test AUC)", best)
                comparison['Selected'] = comparison.index == best

        # 8. Scorecard
        self.plog.step_start("Scorecard")
        scaler = ScoreScaler.from_config(cfg.scorecard)
        scorecard = scaler.build_scorecard(stepwise.model, binner)
        test_scores = scaler.score_frame(woe_test, stepwise.model)
        test_scores.insert(0, cfg.data.id_column, datasets.test[cfg.data.id_column].to_numpy())
        test_scores['pd'] = stepwise.model.predict_proba(woe_test)
        test_scores['score_from_pd'] = scaler.score_from_probability(test_scores['pd'].to_numpy())
        self.plog.metric(
            "test score range",
            f"{test_scores['score'].min()} - {test_scores['score'].max()}",
        )

        # 9. Random forest
        forest = None
        if cfg.random_forest.enabled:
            self.plog.step_start("Random forest")
            forest = RandomForestFitter(cfg.random_forest, random_state=seed).fit(
                datasets.train,
                features,
                target,
                categorical_columns=list(cfg.data.categorical_columns),
                importance_frame=datasets.test,
            )
            self.plog.metric("OOB error", f"{forest.oob_error:.4f}")
            if cfg.output.save_plots:
                charts.append(plot_variable_importance(
                    forest.importance, run_dir / "plots" / "rf_importance.png",
                    title="Random forest OOB permutation importance",
                ))

        evaluation_table = self._evaluation_table(evaluations, forest, datasets, target, threshold)

        # 10. Outputs
        self.plog.step_start("Outputs")
        binning_path = None
        if cfg.output.export_binning:
            binning_path = str(binner.export_binning(run_dir / "woe_binning.json"))
        if cfg.reproducibility.save_config:
            save_config(cfg, str(run_dir / "config.yaml"))
        test_scores.to_csv(run_dir / "test_scores.csv", index=False)

        excel_path = None
        if cfg.output.generate_excel:
            excel_path = generate_report(
                str(run_dir / f"pd_analysis_{run_id}.xlsx"),
                summary=self._summary(run_id, datasets, stepwise, evaluations, forest),
                iv_summary=iv_summary,
                bin_tables=binner.bin_tables(),
                coefficients=stepwise.model.coefficient_table(),
                stepwise_trace=stepwise.trace,
                evaluation=evaluation_table,
                scorecard=scorecard,
                comparison=comparison,
                variable_summary=variable_summary,
                woe_chart_path=self._strongest_woe_chart(iv_summary, woe_charts),
                rf_importance=forest.importance if forest else None,
                rf_oob_confusion=forest.oob_confusion if forest else None,
            )

        duration = (datetime.now() - start_time).total_seconds()
        self.plog.step_complete("PD analysis", duration)

        return PDAnalysisResults(
            run_id=run_id,
            run_dir=str(run_dir),
            datasets=datasets,
            binner=binner,
            stepwise=stepwise,
            evaluations=evaluations,
            evaluation_table=evaluation_table,
            scorecard=scorecard,
            test_scores=test_scores,
            comparison=comparison,
            forest=forest,
            excel_path=excel_path,
            binning_path=binning_path,
            chart_paths=charts,
            step_durations=dict(self.plog.step_durations),
            duration_seconds=round(duration, 1),
        )

    # ==================================================================
    # Step implementations
    # ==================================================================

    def _exploration_charts(self, df: pd.DataFrame, plot_dir: Path) -> List[str]:
        target = self.config.data.target_column
        paths = []
        for col in self.config.data.categorical_columns:
            paths.append(plot_default_rates(df, col, target, plot_dir / f"default_rate_{col}.png"))
        for col in self.config.data.numeric_columns:
            paths.append(plot_numeric_distribution(df, col, target, plot_dir / f"distribution_{col}.png"))
        return paths

    @staticmethod
    def _strongest_woe_chart(iv_summary: pd.DataFrame, woe_charts: Dict[str, str]) -> Optional[str]:
        """WoE chart of the highest-IV variable, if charts were drawn."""
        for variable in iv_summary['Variable']:
            if variable in woe_charts:
                return woe_charts[variable]
        return None

    def _model_scope(self, binner: WoEBinner) -> List[str]:
        """WoE columns eligible for the logistic model, in fit order."""
        scope = []
        for variable in binner.fitted_variables:
            if binner.get_binning(variable).total_iv < MIN_MODEL_IV:
                self.plog.warning(f"Excluding '{variable}' from the model: single bin, IV = 0")
                continue
            scope.append(f"{variable}_woe")
        return scope

    @staticmethod
    def _evaluation_table(
        evaluations: Dict[str, CandidateEvaluation],
        forest: Optional[RandomForestResult],
        datasets: DataSets,
        target: str,
        threshold: float,
    ) -> pd.DataFrame:
        """One row per model with ``EVALUATION_STATISTICS`` columns."""
        rows = {name: e.to_series() for name, e in evaluations.items()}

        if forest is not None:
            values = {}
            for prefix, frame in (('train', datasets.train), ('test', datasets.test)):
                metrics = evaluate_partition(
                    frame[target].to_numpy(), forest.predict_proba(frame), threshold
                )
                values.update({f"{prefix}_{k}": metrics[k] for k in PARTITION_STATISTICS})
            values['n_variables'] = len(forest.feature_columns)
            rows['random_forest'] = pd.Series(values, index=EVALUATION_STATISTICS, dtype=float)

        table = pd.DataFrame(rows).T
        table.index.name = 'model'
        return table

    @staticmethod
    def _summary(
        run_id: str,
        datasets: DataSets,
        stepwise: StepwiseResult,
        evaluations: Dict[str, CandidateEvaluation],
        forest: Optional[RandomForestResult],
    ) -> Dict[str, object]:
        target = datasets.target_column
        step_eval = evaluations["stepwise_model"]
        summary = {
            "Run ID": run_id,
            "Generated": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "Train rows": datasets.n_train,
            "Test rows": datasets.n_test,
            "Train bad rate": round(float(datasets.train[target].mean()), 4),
            "Test bad rate": round(float(datasets.test[target].mean()), 4),
            "Selected variables": ", ".join(stepwise.selected) or "(intercept only)",
            "Stepwise AIC": round(stepwise.model.aic, 2),
            "Test AUC (stepwise)": round(step_eval.test['auc'], 4),
            "Test KS (stepwise)": round(step_eval.test['ks'], 4),
        }
        if forest is not None:
            summary["Random forest OOB error"] = round(forest.oob_error, 4)
        return summary

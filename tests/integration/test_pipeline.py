"""
End-to-End Tests for the PD Analysis Pipeline

Runs the full analysis on 1000 synthetic applications and checks the
artefacts and headline statistics.
"""

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from openpyxl import load_workbook

from pd_scorecard.config.loader import load_config
from pd_scorecard.config.schema import AnalysisConfig
from pd_scorecard.core.exceptions import DataValidationError
from pd_scorecard.evaluation.evaluator import EVALUATION_STATISTICS
from pd_scorecard.pipeline import PDAnalysisPipeline, PDAnalysisResults


@pytest.fixture(scope="module")
def pipeline_results(applications, tmp_path_factory):
    base = tmp_path_factory.mktemp("pipeline")
    input_path = base / "loan_applications.csv"
    applications.to_csv(input_path, index=False)

    config = AnalysisConfig(
        data={"input_path": str(input_path)},
        output={"base_dir": str(base / "outputs")},
        random_forest={"n_estimators": 50, "n_jobs": 1, "permutation_repeats": 2},
        comparison={"shortlist": ["age_at_application", "monthly_income", "nominal_rate"], "k": 2},
    )
    return PDAnalysisPipeline(config=config).run()


class TestPipelineRun:
    """Test suite for a complete pipeline run."""

    def test_result_type(self, pipeline_results):
        assert isinstance(pipeline_results, PDAnalysisResults)
        assert pipeline_results.datasets.n_train == 800
        assert pipeline_results.datasets.n_test == 200

    def test_stepwise_model_discriminates_on_test(self, pipeline_results):
        test = pipeline_results.evaluations["stepwise_model"].test

        assert test['auc'] > 0.5
        assert test['auc_pvalue'] < 0.05
        assert pipeline_results.selected_variables

    def test_selected_variables_are_woe_columns(self, pipeline_results):
        woe_columns = set(pipeline_results.binner.woe_columns)
        assert set(pipeline_results.selected_variables) <= woe_columns

    def test_evaluation_table(self, pipeline_results):
        table = pipeline_results.evaluation_table

        assert table.index.tolist() == ["full_model", "stepwise_model", "random_forest"]
        assert table.columns.tolist() == EVALUATION_STATISTICS
        assert np.isnan(table.loc["random_forest", "aic"])
        assert table.loc["random_forest", "n_variables"] == 7

    def test_comparison(self, pipeline_results):
        comparison = pipeline_results.comparison

        assert len(comparison) <= 3
        assert (comparison['n_variables'] == 2).all()
        assert comparison['Selected'].sum() == 1
        assert comparison.loc[comparison['Selected'], 'test_auc'].iloc[0] == comparison['test_auc'].max()

    def test_test_scores(self, pipeline_results):
        scores = pipeline_results.test_scores

        assert len(scores) == 200
        assert scores['borrower_id'].tolist() == pipeline_results.datasets.test['borrower_id'].tolist()
        assert ((scores['pd'] > 0) & (scores['pd'] < 1)).all()
        assert np.abs(scores['score'] - scores['score_from_pd']).max() <= 6

    def test_scorecard(self, pipeline_results):
        scorecard = pipeline_results.scorecard

        assert scorecard.loc[0, 'variable'] == 'basepoints'
        raw = {v[:-len('_woe')] for v in pipeline_results.selected_variables}
        assert set(scorecard['variable'].iloc[1:]) == raw

    def test_forest(self, pipeline_results):
        assert 0 <= pipeline_results.forest.oob_error <= 1
        assert pipeline_results.forest.proximity.shape == (800, 800)


class TestPipelineOutputs:
    """Test suite for files written by the pipeline."""

    def test_files_written(self, pipeline_results):
        run_dir = Path(pipeline_results.run_dir)

        assert (run_dir / "woe_binning.json").exists()
        assert (run_dir / "config.yaml").exists()
        assert (run_dir / "test_scores.csv").exists()
        assert Path(pipeline_results.excel_path).exists()

    def test_excel_sheets(self, pipeline_results):
        wb = load_workbook(pipeline_results.excel_path)
        assert wb.sheetnames == [
            '00_Summary', '01_Variables', '02_IV_Summary', '03_Bin_Tables',
            '04_Coefficients', '05_Stepwise', '06_Evaluation', '07_Comparison',
            '08_Scorecard', '09_RF_Importance', '10_RF_OOB',
        ]
        assert len(wb['03_Bin_Tables']._images) == 1

    def test_charts(self, pipeline_results):
        charts = pipeline_results.chart_paths

        # 7 exploration charts, 7 WoE charts and the forest importance
        assert len(charts) == 15
        assert all(Path(p).exists() for p in charts)

    def test_step_durations(self, pipeline_results):
        steps = pipeline_results.step_durations
        assert list(steps)[0] == "Load data"
        assert "Random forest" in steps
        assert list(steps)[-1] == "Outputs"

    def test_binning_export(self, pipeline_results):
        with open(pipeline_results.binning_path) as f:
            data = json.load(f)
        assert set(data['variables']) == set(pipeline_results.binner.fitted_variables)

    def test_config_snapshot_reloads(self, pipeline_results):
        reloaded = load_config(str(Path(pipeline_results.run_dir) / "config.yaml"))
        assert reloaded.random_forest.n_estimators == 50

    def test_scores_csv(self, pipeline_results):
        scores = pd.read_csv(Path(pipeline_results.run_dir) / "test_scores.csv")
        assert len(scores) == 200
        assert 'score' in scores.columns


class TestPipelineOptions:
    """Test suite for optional steps and failures."""

    def test_without_forest_and_comparison(self, analysis_config, applications_csv):
        config = analysis_config.model_copy(update={
            "random_forest": analysis_config.random_forest.model_copy(update={"enabled": False}),
            "comparison": analysis_config.comparison.model_copy(update={"enabled": False}),
            "output": analysis_config.output.model_copy(update={"generate_excel": False}),
        })

        results = PDAnalysisPipeline(config=config, input_path=str(applications_csv)).run()

        assert results.forest is None
        assert results.comparison is None
        assert results.excel_path is None
        assert results.evaluation_table.index.tolist() == ["full_model", "stepwise_model"]

    def test_missing_input(self, analysis_config, tmp_path):
        with pytest.raises(DataValidationError, match="not found"):
            PDAnalysisPipeline(config=analysis_config, input_path=str(tmp_path / "absent.csv")).run()

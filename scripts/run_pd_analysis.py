#!/usr/bin/env python3
"""
PD Analysis CLI

Runs the WoE logistic scorecard and random forest comparison.

Usage:
    # Run with YAML config (recommended):
    python scripts/run_pd_analysis.py --config config/pd_analysis.yaml

    # Override specific settings via CLI:
    python scripts/run_pd_analysis.py \\
        --config config/pd_analysis.yaml \\
        --input data/sample/loan_applications.csv \\
        --output-dir outputs/pd_analysis

    # Adjust binning / stepwise / scorecard params:
    python scripts/run_pd_analysis.py \\
        --config config/pd_analysis.yaml \\
        --bin-num-limit 6 \\
        --direction backward \\
        --scorecard-pdo 20
"""

import sys
import argparse
import logging
from pathlib import Path
from datetime import datetime

# Add project root to path
project_root = str(Path(__file__).resolve().parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from pd_scorecard.config.loader import load_config
from pd_scorecard.config.schema import AnalysisConfig
from pd_scorecard.core.exceptions import AnalysisError, ConfigurationError
from pd_scorecard.core.logger import setup_logging
from pd_scorecard.pipeline import PDAnalysisPipeline


def parse_args():
    parser = argparse.ArgumentParser(
        description="Loan PD analysis (WoE scorecard + random forest)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Config file
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (built-in defaults when omitted)",
    )

    # Data overrides
    parser.add_argument(
        "--input",
        default=None,
        help="Path to the application csv/parquet file (overrides config)",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Base directory for output files",
    )
    parser.add_argument(
        "--test-size",
        type=float,
        default=None,
        help="Fraction of rows for the test partition",
    )
    parser.add_argument(
        "--no-stratify",
        action="store_true",
        default=False,
        help="Plain random split instead of stratified",
    )

    # Binning overrides
    parser.add_argument(
        "--bin-num-limit",
        type=int,
        default=None,
        help="Maximum number of bins per variable",
    )
    parser.add_argument(
        "--count-distr-limit",
        type=float,
        default=None,
        help="Minimum share of rows per bin",
    )
    parser.add_argument(
        "--no-monotonic",
        action="store_true",
        default=False,
        help="Disable monotonic WoE constraint",
    )
    parser.add_argument(
        "--unknown-policy",
        choices=["error", "neutral"],
        default=None,
        help="Handling of values with no fitted bin",
    )

    # Stepwise overrides
    parser.add_argument(
        "--direction",
        choices=["both", "forward", "backward"],
        default=None,
        help="Stepwise search direction",
    )

    # Comparison overrides
    parser.add_argument(
        "--k",
        type=int,
        default=None,
        help="Variables per combination in the multi-factor comparison",
    )
    parser.add_argument(
        "--no-comparison",
        action="store_true",
        default=False,
        help="Skip the multi-factor comparison",
    )

    # Scorecard overrides
    parser.add_argument("--scorecard-odds", type=float, default=None, help="Good:bad odds at the offset score")
    parser.add_argument("--scorecard-offset", type=float, default=None, help="Score at the reference odds")
    parser.add_argument("--scorecard-pdo", type=float, default=None, help="Points to double the odds")

    # Random forest overrides
    parser.add_argument(
        "--rf-trees",
        type=int,
        default=None,
        help="Number of trees in the random forest",
    )
    parser.add_argument(
        "--no-forest",
        action="store_true",
        default=False,
        help="Skip the random forest benchmark",
    )

    # Reproducibility
    parser.add_argument("--seed", type=int, default=None, help="Global random seed")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )

    return parser.parse_args()


def _cli_overrides(args) -> dict:
    """Map CLI arguments to dot-notation config keys."""
    overrides = {
        "data.input_path": args.input,
        "output.base_dir": args.output_dir,
        "splitting.test_size": args.test_size,
        "binning.bin_num_limit": args.bin_num_limit,
        "binning.count_distr_limit": args.count_distr_limit,
        "binning.unknown_policy": args.unknown_policy,
        "logistic.direction": args.direction,
        "comparison.k": args.k,
        "scorecard.odds": args.scorecard_odds,
        "scorecard.offset": args.scorecard_offset,
        "scorecard.pdo": args.scorecard_pdo,
        "random_forest.n_estimators": args.rf_trees,
        "reproducibility.global_seed": args.seed,
        "reproducibility.log_level": args.log_level,
    }
    if args.no_stratify:
        overrides["splitting.stratify"] = False
    if args.no_monotonic:
        overrides["binning.monotonic"] = False
    if args.no_comparison:
        overrides["comparison.enabled"] = False
    if args.no_forest:
        overrides["random_forest.enabled"] = False
    return overrides


def _setup_logging(config: AnalysisConfig) -> str:
    """Configure logging and return the log file path."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = str(Path(config.output.base_dir) / "logs" / f"pd_analysis_{timestamp}.log")
    setup_logging(log_level=config.reproducibility.log_level, log_file=log_file)
    return log_file


def main():
    args = parse_args()
    logger = logging.getLogger("run_pd_analysis")

    try:
        config = load_config(yaml_path=args.config, cli_overrides=_cli_overrides(args))
    except ConfigurationError as e:
        logger.error("Configuration failed: %s", e)
        return 1
    log_file = _setup_logging(config)

    logger.info("Loan PD Analysis")
    logger.info("Config: %s", args.config or "(defaults)")
    logger.info("Log file: %s", log_file)

    try:
        results = PDAnalysisPipeline(config=config).run()
    except AnalysisError as e:
        logger.error("Analysis failed: %s", e)
        return 1

    step_eval = results.evaluations["stepwise_model"]
    print(f"\n{'=' * 60}")
    print(f"Selected variables: {len(results.selected_variables)}")
    for i, var in enumerate(results.selected_variables, 1):
        print(f"  {i}. {var}")
    print(f"Test AUC (stepwise): {step_eval.test['auc']:.4f}")
    print(f"Test KS (stepwise):  {step_eval.test['ks']:.4f}")
    if results.forest is not None:
        print(f"Random forest OOB error: {results.forest.oob_error:.4f}")
    if results.excel_path:
        print(f"Excel report: {results.excel_path}")
    if results.binning_path:
        print(f"WoE binning: {results.binning_path}")
    print(f"Run directory: {results.run_dir}")
    print(f"Log file: {log_file}")
    print(f"Duration: {results.duration_seconds} seconds")
    print(f"{'=' * 60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

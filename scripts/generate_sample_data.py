#!/usr/bin/env python3
"""
Sample Data Generator

Writes a synthetic loan application file for the PD analysis.

Usage:
    python scripts/generate_sample_data.py --n 5000 --output data/sample/loan_applications.csv
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
project_root = str(Path(__file__).resolve().parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from pd_scorecard.data.sample import RANDOM_SEED, generate_applications


logger = logging.getLogger("generate_sample_data")


def main():
    parser = argparse.ArgumentParser(
        description="Generate synthetic loan applications",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--n", type=int, default=5000, help="Number of applications")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed")
    parser.add_argument(
        "--output",
        default="data/sample/loan_applications.csv",
        help="Output csv or parquet path",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )

    df = generate_applications(n=args.n, seed=args.seed)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix == ".parquet":
        df.to_parquet(output, index=False)
    else:
        df.to_csv(output, index=False)

    logger.info(
        "Wrote %s applications to %s (bad rate %.2f%%)",
        f"{len(df):,}", output, 100 * df['everbad_in_12mo'].mean(),
    )


if __name__ == "__main__":
    main()

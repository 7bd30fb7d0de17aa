"""
Training Script
===============

Command-line script to run the churn report.

Usage:
    python scripts/train.py --model logistic_regression
    python scripts/train.py --model lightgbm --data path/to/telco.csv
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config import get_config, load_config
from telco_churn.exceptions import ChurnPipelineError
from telco_churn.models import ModelTrainer
from telco_churn.pipelines import TrainingPipeline
from telco_churn.reporting import ChurnReporter, format_report
from telco_churn.utils import setup_logging


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Train and evaluate a churn model")

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="CSV file (name in data/raw/ or a path); defaults to the configured file"
    )
    parser.add_argument(
        "--model",
        type=str,
        default="logistic_regression",
        choices=sorted(ModelTrainer.MODELS),
        help="Model to train"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to an alternative YAML configuration"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip chart rendering"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    return parser.parse_args()


def main():
    """Main training function."""
    args = parse_args()

    config = load_config(args.config) if args.config else get_config()
    log_config = config.get("logging", {})

    # Setup logging
    setup_logging(
        level=args.log_level or log_config.get("level", "INFO"),
        log_file=log_config.get("log_file"),
    )

    try:
        result = TrainingPipeline(config).run(model_name=args.model, data_path=args.data)
    except ChurnPipelineError as e:
        logger.error(f"Run aborted: {type(e).__name__}: {e}")
        sys.exit(1)

    top_n = config.get("evaluation", {}).get("top_n_features", 10)
    print(format_report(result.report, top_n=top_n))

    if not args.no_plots:
        features_config = config.get("features", {})
        reporter = ChurnReporter(config)
        reporter.render_all(
            result.dataset,
            result.features,
            result.report,
            numeric_columns=features_config.get("numerical", []),
            categorical_columns=features_config.get("categorical", []),
        )
        logger.info(f"Figures written to {reporter.figures_dir}")

    logger.info("Run complete!")


if __name__ == "__main__":
    main()

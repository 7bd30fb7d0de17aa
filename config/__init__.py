"""Configuration module for the Telco churn report pipeline."""

from pathlib import Path
from typing import Optional, Union

import yaml

# Project root directory
ROOT_DIR = Path(__file__).parent.parent.absolute()

# Load configuration
CONFIG_PATH = ROOT_DIR / "config" / "config.yaml"


def load_config(path: Optional[Union[str, Path]] = None) -> dict:
    """Load configuration from a YAML file (defaults to config/config.yaml)."""
    with open(path or CONFIG_PATH, "r") as f:
        config = yaml.safe_load(f)
    return config or {}


def get_config() -> dict:
    """Get configuration dictionary."""
    return load_config()


# Export commonly used paths
DATA_DIR = ROOT_DIR / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
REPORTS_DIR = ROOT_DIR / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"
LOGS_DIR = ROOT_DIR / "logs"

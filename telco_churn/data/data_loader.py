"""
Data Loader Module
==================

Handles loading the customer CSV and basic validation.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd
from loguru import logger

from config import RAW_DATA_DIR, get_config
from telco_churn.exceptions import LoadError, SchemaError


def load_dataset(path: Union[str, Path], **kwargs) -> pd.DataFrame:
    """
    Read a delimited file with a header row into a DataFrame.

    Args:
        path: Path to the CSV file
        **kwargs: Additional arguments to pass to pd.read_csv

    Returns:
        DataFrame containing one row per customer record

    Raises:
        LoadError: If the file is missing, unreadable, unparsable or has no rows
    """
    file_path = Path(path)

    if not file_path.is_file():
        logger.error(f"Data file not found: {file_path}")
        raise LoadError(f"Data file not found: {file_path}")

    logger.info(f"Loading data from {file_path}")

    try:
        with open(file_path, "r", newline="", encoding=kwargs.pop("encoding", "utf-8")) as f:
            df = pd.read_csv(f, **kwargs)
    except pd.errors.EmptyDataError as e:
        logger.error(f"Data file is empty: {file_path}")
        raise LoadError(f"Data file is empty: {file_path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        logger.error(f"Could not read {file_path}: {e}")
        raise LoadError(f"Could not read {file_path}: {e}") from e

    if df.empty:
        logger.error(f"Data file has zero rows: {file_path}")
        raise LoadError(f"Data file has zero rows: {file_path}")

    logger.info(f"Loaded {len(df)} rows and {len(df.columns)} columns")
    return df


class DataLoader:
    """Load and validate the customer churn dataset."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize DataLoader.

        Args:
            config: Configuration dictionary. If None, loads from config.yaml
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})
        self.raw_data_path = RAW_DATA_DIR

    def load_raw_data(
        self,
        filename: Optional[Union[str, Path]] = None,
        **kwargs
    ) -> pd.DataFrame:
        """
        Load raw data from CSV file.

        Relative names are resolved against data/raw; absolute paths are used as-is.

        Args:
            filename: Name or path of the data file
            **kwargs: Additional arguments to pass to pd.read_csv

        Returns:
            DataFrame containing raw data
        """
        filename = filename or self.data_config.get(
            "raw_filename", "WA_Fn-UseC_-Telco-Customer-Churn.csv"
        )
        file_path = Path(filename)
        if not file_path.is_absolute() and not file_path.exists():
            file_path = self.raw_data_path / file_path

        return load_dataset(file_path, **kwargs)

    @staticmethod
    def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
        """
        Check that every expected column is present.

        Raises:
            SchemaError: Naming all absent columns
        """
        missing = [col for col in columns if col not in df.columns]
        if missing:
            logger.error(f"Missing expected columns: {missing}")
            raise SchemaError(f"Missing expected columns: {missing}")

    def validate_data(self, df: pd.DataFrame) -> dict:
        """
        Validate data quality.

        Args:
            df: DataFrame to validate

        Returns:
            Dictionary with validation results
        """
        validation_results = {
            "total_rows": len(df),
            "total_columns": len(df.columns),
            "missing_values": df.isnull().sum().to_dict(),
            "duplicates": int(df.duplicated().sum()),
            "dtypes": df.dtypes.astype(str).to_dict(),
        }

        # Check for target column
        target_col = self.data_config.get("target_column", "Churn")
        if target_col in df.columns:
            validation_results["target_distribution"] = df[target_col].value_counts().to_dict()
            validation_results["target_balance"] = df[target_col].value_counts(normalize=True).to_dict()

        return validation_results

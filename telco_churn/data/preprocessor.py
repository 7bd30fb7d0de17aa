"""
Data Preprocessor Module
========================

Handles data cleaning: target normalization, numeric repair, imputation and
identifier removal. Every method returns a new DataFrame.
"""

from enum import Enum
from typing import Optional, Union

import pandas as pd
from loguru import logger

from config import get_config
from telco_churn.exceptions import SchemaError


class ImputeStrategy(str, Enum):
    """Statistic used to fill missing numeric cells."""

    MEDIAN = "median"
    MEAN = "mean"


def _require(df: pd.DataFrame, field: str) -> None:
    if field not in df.columns:
        raise SchemaError(f"Column '{field}' not found in dataset")


class DataPreprocessor:
    """Clean raw customer records for churn modeling."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize DataPreprocessor.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})
        self.feature_config = self.config.get("features", {})

        self.target_column = self.data_config.get("target_column", "Churn")
        self.positive_label = self.data_config.get("positive_label", "Yes")
        self.id_column = self.data_config.get("id_column")
        self.numerical_features = self.feature_config.get("numerical", [])
        self.coerce_features = self.feature_config.get("coerce_numeric", [])
        self.impute_strategy = self.feature_config.get("impute_strategy", "median")

        self.imputed_values = {}

    def clean_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply the configured cleaning steps.

        Drops the identifier column, repairs and imputes numeric fields, and
        maps the target to 0/1.

        Args:
            df: Raw DataFrame

        Returns:
            Cleaned DataFrame
        """
        logger.info("Starting data cleaning...")

        if self.id_column and self.id_column in df.columns:
            df = self.drop_column(df, self.id_column)

        for col in self.coerce_features:
            df = self.coerce_numeric(df, col)

        for col in self.numerical_features:
            if col in df.columns and df[col].isnull().any():
                df = self.impute_numeric(df, col, self.impute_strategy)

        df = self.normalize_target(df, self.target_column, self.positive_label)

        logger.info(f"Data cleaned: {len(df)} rows, {len(df.columns)} columns")
        return df

    def normalize_target(
        self,
        df: pd.DataFrame,
        field: str,
        positive_value: Union[str, int] = "Yes"
    ) -> pd.DataFrame:
        """
        Map the positive marker to 1 and every other value to 0.

        Args:
            df: Input DataFrame
            field: Target column
            positive_value: Value marking the positive class

        Returns:
            DataFrame with an integer 0/1 target
        """
        _require(df, field)
        df = df.copy()

        values = df[field]
        if not pd.api.types.is_numeric_dtype(values):
            values = values.astype(str).str.strip()
            positive_value = str(positive_value).strip()

        df[field] = (values == positive_value).astype(int)
        logger.debug(f"Normalized target {field}: {int(df[field].sum())} positives of {len(df)}")
        return df

    def coerce_numeric(self, df: pd.DataFrame, field: str) -> pd.DataFrame:
        """
        Parse a column as real numbers; unparsable cells become missing.

        Args:
            df: Input DataFrame
            field: Column to coerce

        Returns:
            DataFrame with a float column
        """
        _require(df, field)
        df = df.copy()

        before = df[field].isnull().sum()
        df[field] = pd.to_numeric(df[field], errors="coerce").astype(float)
        coerced = int(df[field].isnull().sum() - before)
        if coerced:
            logger.info(f"Marked {coerced} unparsable values in {field} as missing")

        return df

    def impute_numeric(
        self,
        df: pd.DataFrame,
        field: str,
        strategy: Union[str, ImputeStrategy] = ImputeStrategy.MEDIAN
    ) -> pd.DataFrame:
        """
        Fill missing numeric cells with a statistic of the observed values.

        Args:
            df: DataFrame with missing values
            field: Numeric column to impute
            strategy: 'median' or 'mean'

        Returns:
            DataFrame with imputed values
        """
        try:
            strategy = ImputeStrategy(strategy)
        except ValueError:
            raise ValueError(
                f"Unknown impute strategy: {strategy}. "
                f"Available: {[s.value for s in ImputeStrategy]}"
            ) from None

        _require(df, field)
        df = df.copy()

        observed = df[field].dropna()
        if observed.empty:
            raise SchemaError(f"Column '{field}' has no observed values to impute from")

        if strategy is ImputeStrategy.MEAN:
            fill_value = float(observed.mean())
        else:
            fill_value = float(observed.median())

        n_missing = int(df[field].isnull().sum())
        df[field] = df[field].fillna(fill_value)
        self.imputed_values[field] = fill_value

        logger.debug(f"Imputed {n_missing} values in {field} with {strategy.value}={fill_value:.4f}")
        return df

    def drop_column(self, df: pd.DataFrame, field: str) -> pd.DataFrame:
        """
        Remove a column that carries no predictive signal.

        Args:
            df: Input DataFrame
            field: Column to drop

        Returns:
            DataFrame without the column
        """
        _require(df, field)
        logger.info(f"Dropped columns: ['{field}']")
        return df.drop(columns=[field])

    def get_preprocessing_summary(self) -> dict:
        """
        Get summary of preprocessing steps applied.

        Returns:
            Dictionary with preprocessing summary
        """
        return {
            "target_column": self.target_column,
            "dropped_columns": [self.id_column] if self.id_column else [],
            "coerced_columns": list(self.coerce_features),
            "impute_strategy": str(ImputeStrategy(self.impute_strategy).value),
            "imputed_values": dict(self.imputed_values),
        }

"""
Training Pipeline
=================

One-pass churn run: load -> clean -> encode -> split -> scale ->
(rebalance) -> fit -> evaluate. Each stage returns a new object; nothing is
mutated after it is produced.

Usage:
    from telco_churn.pipelines import TrainingPipeline

    result = TrainingPipeline(config).run(model_name="lightgbm")
    print(result.report.roc_auc)
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from loguru import logger

from config import get_config
from telco_churn.data.balancer import rebalance
from telco_churn.data.data_loader import DataLoader
from telco_churn.data.preprocessor import DataPreprocessor
from telco_churn.data.splitter import (
    ScalingStatistics,
    Split,
    apply_scaler,
    fit_scaler,
    stratified_split,
)
from telco_churn.exceptions import InsufficientDataError
from telco_churn.features.encoder import CategoricalEncoder, FeatureMatrix
from telco_churn.models.evaluator import (
    EvaluationReport,
    ModelEvaluator,
    compute_business_metrics,
)
from telco_churn.models.trainer import Classifier, ModelTrainer


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Everything one run produced."""

    dataset: pd.DataFrame
    features: FeatureMatrix
    labels: np.ndarray
    split: Split
    scaling: ScalingStatistics
    model: Classifier
    report: EvaluationReport


class TrainingPipeline:
    """Configurable churn training and evaluation run."""

    DEFAULT_MODEL = "logistic_regression"

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize TrainingPipeline.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})
        self.feature_config = self.config.get("features", {})
        self.balancing_config = self.config.get("balancing", {})

        self.target_column = self.data_config.get("target_column", "Churn")
        self.charges_column = self.data_config.get("charges_column", "MonthlyCharges")
        self.train_fraction = self.data_config.get("train_fraction", 0.8)
        self.random_state = self.data_config.get("random_state", 42)

    def run(
        self,
        df: Optional[pd.DataFrame] = None,
        model_name: Optional[str] = None,
        data_path: Optional[str] = None
    ) -> PipelineResult:
        """
        Execute the pipeline.

        Args:
            df: Raw customer table. If None, the configured CSV is loaded
            model_name: 'logistic_regression' or 'lightgbm'
            data_path: CSV to load instead of the configured file

        Returns:
            PipelineResult
        """
        model_name = model_name or self.DEFAULT_MODEL
        model_class = ModelTrainer.model_class(model_name)
        logger.info(f"Starting churn pipeline with {model_name}")

        loader = DataLoader(self.config)
        if df is None:
            df = loader.load_raw_data(data_path)

        loader.require_columns(
            df,
            [self.target_column]
            + list(self.feature_config.get("numerical", []))
            + list(self.feature_config.get("categorical", [])),
        )
        validation = loader.validate_data(df)
        logger.info(
            f"Input: {validation['total_rows']} rows, {validation['total_columns']} columns, "
            f"{validation['duplicates']} duplicates"
        )

        # Clean and summarize on the full dataset
        cleaned = DataPreprocessor(self.config).clean_data(df)
        business = compute_business_metrics(cleaned, self.target_column, self.charges_column)
        labels = cleaned[self.target_column].to_numpy(dtype=int)

        # Encode
        encoder = CategoricalEncoder(
            self.feature_config.get("categorical"),
            self.feature_config.get("encoding", "onehot"),
        )
        features = encoder.fit_transform(cleaned.drop(columns=[self.target_column]))
        logger.info(f"Feature matrix: {features.shape[0]} rows x {features.shape[1]} columns")

        # Split and scale with train-only statistics
        split = stratified_split(features, labels, self.train_fraction, self.random_state)
        scaling = fit_scaler(features.take(split.train_index))
        X_train = apply_scaler(features.take(split.train_index), scaling)
        X_test = apply_scaler(features.take(split.test_index), scaling)
        y_train = labels[split.train_index]
        y_test = labels[split.test_index]

        X_val, y_val = None, None
        if model_class.uses_validation:
            X_train, y_train, X_val, y_val = self._hold_out_validation(X_train, y_train)

        if model_class.uses_balancing:
            X_train, y_train = rebalance(
                X_train,
                y_train,
                target_ratio=self.balancing_config.get("target_ratio", 0.5),
                seed=self.random_state,
                method=self.balancing_config.get("method", "duplicate"),
            )

        model = ModelTrainer(self.config).train_model(
            X_train, y_train, model_name, X_val=X_val, y_val=y_val
        )

        report = ModelEvaluator(self.config).evaluate_model(
            model,
            X_test,
            y_test,
            model_name=model_name,
            business=business,
        )

        logger.info("Pipeline complete")
        return PipelineResult(
            dataset=cleaned,
            features=features,
            labels=labels,
            split=split,
            scaling=scaling,
            model=model,
            report=report,
        )

    def _hold_out_validation(self, X_train: FeatureMatrix, y_train: np.ndarray):
        """
        Carve a stratified early-stopping slice out of the training rows.

        Falls back to training on every row without early stopping when the
        slice cannot hold both classes.
        """
        fraction = self.balancing_config.get("validation_fraction", 0.2)
        if not fraction:
            return X_train, y_train, None, None

        try:
            inner = stratified_split(X_train, y_train, 1.0 - fraction, self.random_state)
        except InsufficientDataError as e:
            logger.warning(f"No early-stopping slice, training on all {X_train.n_rows} rows: {e}")
            return X_train, y_train, None, None

        logger.info(f"Holding out {len(inner.test_index)} training rows for early stopping")
        return (
            X_train.take(inner.train_index),
            y_train[inner.train_index],
            X_train.take(inner.test_index),
            y_train[inner.test_index],
        )

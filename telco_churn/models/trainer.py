"""
Model Trainer Module
====================

Binary churn classifiers behind one interface, and a registry-based trainer
that builds them from configuration.
"""

import inspect
import warnings
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type, Union

import lightgbm as lgb
import numpy as np
from lightgbm import LGBMClassifier
from loguru import logger
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression

from config import get_config
from telco_churn.exceptions import ConvergenceError
from telco_churn.features.encoder import FeatureMatrix

ArrayLike = Union[FeatureMatrix, np.ndarray]

# Newer LightGBM releases take eval_X/eval_y and deprecate eval_set
_LGBM_EVAL_XY = "eval_X" in inspect.signature(LGBMClassifier.fit).parameters


def _as_array(features: ArrayLike) -> np.ndarray:
    if isinstance(features, FeatureMatrix):
        return features.values
    return np.asarray(features, dtype=float)


class Classifier(ABC):
    """Binary classifier producing positive-class probabilities."""

    name = "classifier"
    importance_kind = "importance"
    # Pipeline hints: rebalance training rows / hold out rows for early stopping
    uses_balancing = False
    uses_validation = False

    def __init__(self, random_state: int = 42, **params):
        self.random_state = random_state
        self.params = params
        self.model = None

    @abstractmethod
    def fit(
        self,
        features: ArrayLike,
        labels,
        eval_set: Optional[Tuple[ArrayLike, np.ndarray]] = None
    ) -> "Classifier":
        """Fit on training rows; eval_set is used by models that early-stop."""

    @abstractmethod
    def importances(self) -> np.ndarray:
        """Per-feature importance in input column order."""

    def predict_proba(self, features: ArrayLike) -> np.ndarray:
        """Probability of the positive class for every row."""
        self._check_fitted()
        return self.model.predict_proba(_as_array(features))[:, 1]

    def _check_fitted(self):
        if self.model is None:
            raise ValueError(f"{self.name} is not fitted. Call fit first.")


class LogisticClassifier(Classifier):
    """L2-regularized logistic regression fit by maximum likelihood (lbfgs)."""

    name = "logistic_regression"
    importance_kind = "coefficient"

    def fit(self, features, labels, eval_set=None) -> "LogisticClassifier":
        params = {"max_iter": 1000, **self.params}
        model = LogisticRegression(random_state=self.random_state, **params)

        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            try:
                model.fit(_as_array(features), np.asarray(labels).astype(int))
            except ConvergenceWarning as e:
                max_iter = params["max_iter"]
                logger.error(f"Logistic regression did not converge in {max_iter} iterations")
                raise ConvergenceError(
                    f"Logistic regression did not converge after {max_iter} iterations",
                    iterations=max_iter,
                ) from e

        self.model = model
        logger.debug(f"Logistic regression converged in {int(model.n_iter_[0])} iterations")
        return self

    def importances(self) -> np.ndarray:
        self._check_fitted()
        return self.model.coef_[0].astype(float)


class GradientBoostedClassifier(Classifier):
    """LightGBM gradient-boosted trees with log-loss early stopping."""

    name = "lightgbm"
    importance_kind = "gain"
    uses_balancing = True
    uses_validation = True

    DEFAULT_PARAMS = {
        "num_leaves": 31,
        "learning_rate": 0.05,
        "feature_fraction": 0.9,
        "num_rounds": 500,
        "early_stopping_rounds": 50,
    }

    def fit(self, features, labels, eval_set=None) -> "GradientBoostedClassifier":
        params = {**self.DEFAULT_PARAMS, **self.params}
        early_stopping_rounds = params.pop("early_stopping_rounds")

        model = LGBMClassifier(
            n_estimators=params.pop("num_rounds"),
            num_leaves=params.pop("num_leaves"),
            learning_rate=params.pop("learning_rate"),
            colsample_bytree=params.pop("feature_fraction"),
            importance_type="gain",
            random_state=self.random_state,
            deterministic=True,
            force_row_wise=True,
            verbose=-1,
            **params,
        )

        fit_kwargs = {}
        if eval_set is not None and early_stopping_rounds:
            X_val, y_val = eval_set
            X_val, y_val = _as_array(X_val), np.asarray(y_val).astype(int)
            if _LGBM_EVAL_XY:
                fit_kwargs = {"eval_X": X_val, "eval_y": y_val}
            else:
                fit_kwargs = {"eval_set": [(X_val, y_val)]}
            fit_kwargs.update({
                "eval_metric": "binary_logloss",
                "callbacks": [lgb.early_stopping(early_stopping_rounds, verbose=False)],
            })

        model.fit(_as_array(features), np.asarray(labels).astype(int), **fit_kwargs)
        self.model = model

        if fit_kwargs:
            logger.info(f"LightGBM early stopping kept {model.best_iteration_} rounds")
        return self

    @property
    def best_iteration(self) -> Optional[int]:
        self._check_fitted()
        return self.model.best_iteration_ or None

    def importances(self) -> np.ndarray:
        self._check_fitted()
        return self.model.booster_.feature_importance(importance_type="gain").astype(float)


class ModelTrainer:
    """Build and train churn classifiers from configuration."""

    MODELS: Dict[str, Type[Classifier]] = {
        "logistic_regression": LogisticClassifier,
        "lightgbm": GradientBoostedClassifier,
    }

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize ModelTrainer.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.models_config = self.config.get("models", {})
        self.random_state = self.config.get("data", {}).get("random_state", 42)

    @classmethod
    def model_class(cls, model_name: str) -> Type[Classifier]:
        if model_name not in cls.MODELS:
            raise ValueError(f"Unknown model: {model_name}. Available: {list(cls.MODELS.keys())}")
        return cls.MODELS[model_name]

    def build_model(self, model_name: str, params: Optional[dict] = None) -> Classifier:
        """
        Create an unfitted classifier.

        Args:
            model_name: Registry name of the model
            params: Model parameters (overrides config)

        Returns:
            Classifier instance
        """
        model_class = self.model_class(model_name)
        if params is None:
            params = self.models_config.get(model_name, {}).get("params", {})
        return model_class(random_state=self.random_state, **params)

    def train_model(
        self,
        X_train: ArrayLike,
        y_train,
        model_name: str,
        params: Optional[dict] = None,
        X_val: Optional[ArrayLike] = None,
        y_val=None
    ) -> Classifier:
        """
        Train a single model.

        Args:
            X_train: Training features
            y_train: Training labels
            model_name: Name of model to train
            params: Model parameters (overrides config)
            X_val: Validation features for early stopping
            y_val: Validation labels

        Returns:
            Trained classifier
        """
        model = self.build_model(model_name, params)
        eval_set = (X_val, y_val) if X_val is not None and y_val is not None else None

        logger.info(f"Training {model_name} on {len(np.asarray(y_train))} samples...")
        model.fit(X_train, y_train, eval_set=eval_set)
        return model

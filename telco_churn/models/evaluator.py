"""
Model Evaluator Module
======================

Held-out evaluation: confusion-matrix metrics, rank-based ROC-AUC, ranked
feature importances and the churn business summary.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.metrics import confusion_matrix, roc_auc_score, roc_curve

from config import get_config
from telco_churn.exceptions import InsufficientDataError, SchemaError
from telco_churn.models.trainer import Classifier
from telco_churn.utils.helpers import safe_divide


@dataclass(frozen=True)
class ConfusionCounts:
    """Binary confusion-matrix cells."""

    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn


@dataclass(frozen=True)
class FeatureImportance:
    feature: str
    importance: float


@dataclass(frozen=True)
class BusinessMetrics:
    """Churn summary over the full cleaned dataset."""

    n_customers: int
    churn_rate: float
    arpu: float
    revenue_loss: float


@dataclass(frozen=True)
class RocCurve:
    fpr: Tuple[float, ...]
    tpr: Tuple[float, ...]
    thresholds: Tuple[float, ...]


@dataclass(frozen=True)
class EvaluationReport:
    """Metrics of one trained model on the test partition."""

    model_name: str
    threshold: float
    accuracy: float
    precision: float
    recall: float
    f1: float
    roc_auc: float
    confusion: ConfusionCounts
    roc_curve: RocCurve
    feature_importances: Tuple[FeatureImportance, ...]
    importance_kind: str
    business: Optional[BusinessMetrics] = None

    def top_features(self, n: int = 10) -> Tuple[FeatureImportance, ...]:
        return self.feature_importances[:n]

    def metrics(self) -> Dict[str, float]:
        """Headline classification metrics."""
        return {
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "roc_auc": self.roc_auc,
        }


def confusion_counts(y_true, y_pred) -> ConfusionCounts:
    """Count TP/FP/TN/FN for binary 0/1 labels."""
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return ConfusionCounts(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


def classification_metrics(counts: ConfusionCounts) -> Dict[str, float]:
    """
    Accuracy, precision, recall and F1 from confusion counts.

    Undefined ratios (zero denominators) are reported as 0.
    """
    precision = safe_divide(counts.tp, counts.tp + counts.fp)
    recall = safe_divide(counts.tp, counts.tp + counts.fn)
    return {
        "accuracy": safe_divide(counts.tp + counts.tn, counts.total),
        "precision": precision,
        "recall": recall,
        "f1": safe_divide(2 * precision * recall, precision + recall),
    }


def rank_feature_importances(
    feature_names: Sequence[str],
    values: Sequence[float]
) -> Tuple[FeatureImportance, ...]:
    """
    Sort features by absolute importance, descending.

    Ties keep the original column order.
    """
    values = np.asarray(values, dtype=float)
    if len(feature_names) != len(values):
        raise ValueError(f"{len(feature_names)} feature names for {len(values)} importances")

    order = sorted(range(len(values)), key=lambda i: -abs(values[i]))
    return tuple(FeatureImportance(str(feature_names[i]), float(values[i])) for i in order)


def compute_business_metrics(
    df: pd.DataFrame,
    target_column: str = "Churn",
    charges_column: str = "MonthlyCharges"
) -> BusinessMetrics:
    """
    Churn rate, ARPU and estimated revenue loss.

    Args:
        df: Cleaned dataset with a 0/1 target
        target_column: Target column
        charges_column: Monthly charge column used for ARPU

    Returns:
        BusinessMetrics
    """
    for col in (target_column, charges_column):
        if col not in df.columns:
            raise SchemaError(f"Column '{col}' not found in dataset")

    n_customers = len(df)
    churn_rate = safe_divide(float(df[target_column].sum()), n_customers)
    arpu = float(df[charges_column].mean())
    revenue_loss = churn_rate * n_customers * arpu

    logger.info(
        f"Churn rate: {churn_rate:.2%}, ARPU: {arpu:.2f}, estimated revenue loss: {revenue_loss:,.2f}"
    )
    return BusinessMetrics(
        n_customers=n_customers,
        churn_rate=churn_rate,
        arpu=arpu,
        revenue_loss=revenue_loss,
    )


class ModelEvaluator:
    """Evaluate a trained classifier on held-out data."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize ModelEvaluator.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.eval_config = self.config.get("evaluation", {})
        self.threshold = self.eval_config.get("threshold", 0.5)

    def evaluate_model(
        self,
        model: Classifier,
        X,
        y_true,
        feature_names: Optional[Sequence[str]] = None,
        model_name: Optional[str] = None,
        threshold: Optional[float] = None,
        business: Optional[BusinessMetrics] = None
    ) -> EvaluationReport:
        """
        Evaluate a single model.

        Args:
            model: Trained classifier
            X: Test features (FeatureMatrix or array)
            y_true: True labels
            feature_names: Column names; taken from X when it is a FeatureMatrix
            model_name: Name of model
            threshold: Classification threshold (probability > threshold is churn)
            business: Business metrics to attach to the report

        Returns:
            EvaluationReport
        """
        threshold = self.threshold if threshold is None else threshold
        model_name = model_name or model.name
        y_true = np.asarray(y_true).astype(int)

        if len(np.unique(y_true)) < 2:
            raise InsufficientDataError("ROC-AUC needs both classes in the evaluation labels")

        if feature_names is None:
            feature_names = getattr(X, "columns", None)
        if feature_names is None:
            raise ValueError("feature_names are required when X is a plain array")

        y_prob = model.predict_proba(X)
        y_pred = (y_prob > threshold).astype(int)

        counts = confusion_counts(y_true, y_pred)
        metrics = classification_metrics(counts)

        fpr, tpr, thresholds = roc_curve(y_true, y_prob)
        auc = float(roc_auc_score(y_true, y_prob))

        report = EvaluationReport(
            model_name=model_name,
            threshold=float(threshold),
            accuracy=metrics["accuracy"],
            precision=metrics["precision"],
            recall=metrics["recall"],
            f1=metrics["f1"],
            roc_auc=auc,
            confusion=counts,
            roc_curve=RocCurve(
                fpr=tuple(float(v) for v in fpr),
                tpr=tuple(float(v) for v in tpr),
                thresholds=tuple(float(v) for v in thresholds),
            ),
            feature_importances=rank_feature_importances(feature_names, model.importances()),
            importance_kind=model.importance_kind,
            business=business,
        )

        logger.info(
            f"{model_name} - Accuracy: {report.accuracy:.4f}, F1: {report.f1:.4f}, ROC-AUC: {report.roc_auc:.4f}"
        )
        return report

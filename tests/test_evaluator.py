"""Tests for evaluation metrics, ranking and business summary."""

import numpy as np
import pandas as pd
import pytest

from telco_churn.exceptions import InsufficientDataError, SchemaError
from telco_churn.features import FeatureMatrix
from telco_churn.models import Classifier, ModelEvaluator
from telco_churn.models.evaluator import (
    ConfusionCounts,
    classification_metrics,
    compute_business_metrics,
    confusion_counts,
    rank_feature_importances,
)


class FixedClassifier(Classifier):
    """Returns preset probabilities and importances."""

    name = "fixed"

    def __init__(self, probabilities, importances):
        super().__init__()
        self.model = "fixed"
        self._probabilities = np.asarray(probabilities, dtype=float)
        self._importances = np.asarray(importances, dtype=float)

    def fit(self, features, labels, eval_set=None):
        return self

    def predict_proba(self, features):
        return self._probabilities

    def importances(self):
        return self._importances


def test_metrics_from_confusion_counts():
    metrics = classification_metrics(ConfusionCounts(tp=50, fp=10, tn=130, fn=10))

    assert metrics["accuracy"] == pytest.approx(0.9)
    assert metrics["precision"] == pytest.approx(50 / 60)
    assert metrics["recall"] == pytest.approx(50 / 60)
    assert metrics["f1"] == pytest.approx(0.8333, abs=1e-4)


def test_zero_denominators_give_zero():
    metrics = classification_metrics(ConfusionCounts(tp=0, fp=0, tn=8, fn=2))

    assert metrics["precision"] == 0.0
    assert metrics["recall"] == 0.0
    assert metrics["f1"] == 0.0
    assert metrics["accuracy"] == pytest.approx(0.8)


def test_confusion_counts_cells():
    counts = confusion_counts([1, 1, 0, 0, 1], [1, 0, 0, 1, 1])

    assert counts == ConfusionCounts(tp=2, fp=1, tn=1, fn=1)
    assert counts.total == 5


def test_rank_by_absolute_value_with_stable_ties():
    ranked = rank_feature_importances(["a", "b", "c", "d"], [0.5, -2.0, 0.5, 1.0])

    assert [f.feature for f in ranked] == ["b", "d", "a", "c"]
    assert ranked[0].importance == -2.0


def test_threshold_is_strict(config):
    model = FixedClassifier([0.5, 0.5, 0.9, 0.1], [1.0, 0.0])
    X = FeatureMatrix(np.zeros((4, 2)), ["x", "y"])

    report = ModelEvaluator(config).evaluate_model(model, X, [1, 0, 1, 0])

    assert report.confusion == ConfusionCounts(tp=1, fp=0, tn=2, fn=1)
    assert report.threshold == 0.5


def test_roc_auc_uses_all_thresholds(config):
    y = np.array([0, 0, 1, 1, 0, 1])
    proba = np.array([0.1, 0.35, 0.4, 0.8, 0.45, 0.3])
    model = FixedClassifier(proba, [0.2, 0.7])
    X = FeatureMatrix(np.zeros((6, 2)), ["x", "y"])

    report = ModelEvaluator(config).evaluate_model(model, X, y)

    # 6 of the 9 positive/negative pairs are ranked correctly
    assert report.roc_auc == pytest.approx(6 / 9)
    assert report.roc_curve.fpr[0] == 0.0 and report.roc_curve.tpr[-1] == 1.0
    assert [f.feature for f in report.feature_importances] == ["y", "x"]
    assert report.confusion.total == 6


def test_single_class_labels_raise(config):
    model = FixedClassifier([0.2, 0.7], [1.0])
    X = FeatureMatrix(np.zeros((2, 1)), ["x"])

    with pytest.raises(InsufficientDataError):
        ModelEvaluator(config).evaluate_model(model, X, [0, 0])


def test_plain_array_needs_feature_names(config):
    model = FixedClassifier([0.2, 0.7], [1.0])

    with pytest.raises(ValueError):
        ModelEvaluator(config).evaluate_model(model, np.zeros((2, 1)), [0, 1])

    report = ModelEvaluator(config).evaluate_model(model, np.zeros((2, 1)), [0, 1], feature_names=["x"])
    assert report.roc_auc == 1.0


def test_business_metrics():
    df = pd.DataFrame({"Churn": [1, 0, 0, 1], "MonthlyCharges": [50.0, 70.0, 20.0, 60.0]})

    business = compute_business_metrics(df, "Churn", "MonthlyCharges")

    assert business.n_customers == 4
    assert business.churn_rate == 0.5
    assert business.arpu == pytest.approx(50.0)
    assert business.revenue_loss == pytest.approx(0.5 * 4 * 50.0)


def test_business_metrics_need_columns():
    with pytest.raises(SchemaError):
        compute_business_metrics(pd.DataFrame({"Churn": [1]}), "Churn", "MonthlyCharges")

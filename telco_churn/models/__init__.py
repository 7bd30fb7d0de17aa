"""Models module for training and evaluation."""

from .trainer import Classifier, GradientBoostedClassifier, LogisticClassifier, ModelTrainer
from .evaluator import EvaluationReport, ModelEvaluator

__all__ = [
    "Classifier",
    "GradientBoostedClassifier",
    "LogisticClassifier",
    "ModelTrainer",
    "EvaluationReport",
    "ModelEvaluator",
]

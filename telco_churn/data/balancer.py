"""
Class Balancer Module
=====================

Resamples a training partition towards a target share of positive labels by
over-sampling the under-represented class and under-sampling the other.
The row count stays (approximately) the same.

Only ever apply this to training rows: the test partition and the
early-stopping validation rows must keep their natural label distribution.
"""

from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np
from imblearn.over_sampling import SMOTE, RandomOverSampler
from imblearn.under_sampling import RandomUnderSampler
from loguru import logger

from telco_churn.exceptions import InsufficientDataError
from telco_churn.features.encoder import FeatureMatrix


class ResampleMethod(str, Enum):
    """How over-sampled rows are produced."""

    DUPLICATE = "duplicate"  # repeat existing rows
    SMOTE = "smote"  # x + u * (neighbor - x), u ~ U(0, 1)


def target_counts(labels, target_ratio: float = 0.5) -> Dict[int, int]:
    """
    Per-class row counts that keep the total and hit target_ratio positives.

    Args:
        labels: Binary 0/1 labels
        target_ratio: Desired share of positive rows

    Returns:
        Mapping {0: negatives, 1: positives}
    """
    if not 0.0 < target_ratio < 1.0:
        raise ValueError(f"target_ratio must be in (0, 1), got {target_ratio}")

    y = np.asarray(labels).astype(int)
    n = len(y)
    n_pos = int(round(target_ratio * n))
    n_pos = min(max(n_pos, 1), n - 1)
    return {0: n - n_pos, 1: n_pos}


def rebalance(
    features: FeatureMatrix,
    labels,
    target_ratio: float = 0.5,
    seed: int = 42,
    method: Union[str, ResampleMethod] = ResampleMethod.DUPLICATE
) -> Tuple[FeatureMatrix, np.ndarray]:
    """
    Resample training rows towards target_ratio positives.

    Args:
        features: Training feature matrix
        labels: Training labels (0/1)
        target_ratio: Desired share of positive rows
        seed: Random seed
        method: 'duplicate' or 'smote' for the over-sampled class

    Returns:
        Tuple of (resampled features, resampled labels)
    """
    try:
        method = ResampleMethod(method)
    except ValueError:
        raise ValueError(
            f"Unknown resample method: {method}. "
            f"Available: {[m.value for m in ResampleMethod]}"
        ) from None

    X = features.values
    y = np.asarray(labels).astype(int)
    counts = {cls: int((y == cls).sum()) for cls in (0, 1)}
    if min(counts.values()) == 0:
        raise InsufficientDataError(f"Cannot rebalance a single-class training set: {counts}")

    targets = target_counts(y, target_ratio)
    grow = {cls: n for cls, n in targets.items() if n > counts[cls]}
    shrink = {cls: n for cls, n in targets.items() if n < counts[cls]}

    if grow:
        if method is ResampleMethod.SMOTE:
            minority = min(counts[cls] for cls in grow)
            if minority < 2:
                raise InsufficientDataError("SMOTE needs at least 2 rows of the over-sampled class")
            sampler = SMOTE(
                sampling_strategy=grow,
                k_neighbors=min(5, minority - 1),
                random_state=seed,
            )
        else:
            sampler = RandomOverSampler(sampling_strategy=grow, random_state=seed)
        X, y = sampler.fit_resample(X, y)

    if shrink:
        sampler = RandomUnderSampler(sampling_strategy=shrink, random_state=seed)
        X, y = sampler.fit_resample(X, y)

    resampled = {cls: int((y == cls).sum()) for cls in (0, 1)}
    logger.info(f"Rebalanced training set with {method.value}: {counts} -> {resampled}")
    return FeatureMatrix(X, features.columns), np.asarray(y, dtype=int)

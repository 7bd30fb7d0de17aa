"""
Split and Scale Module
======================

Stratified train/test partitioning and train-only standardization.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from loguru import logger
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler

from telco_churn.exceptions import InsufficientDataError
from telco_churn.features.encoder import FeatureMatrix


@dataclass(frozen=True, eq=False)
class Split:
    """Disjoint, covering train/test row positions."""

    train_index: np.ndarray
    test_index: np.ndarray


@dataclass(frozen=True, eq=False)
class ScalingStatistics:
    """Per-column mean and std fit on the training partition."""

    columns: Tuple[str, ...]
    mean: np.ndarray
    std: np.ndarray


def _binary_labels(labels) -> np.ndarray:
    y = np.asarray(labels)
    if not set(np.unique(y).tolist()) <= {0, 1}:
        raise ValueError("Labels must be binary 0/1")
    return y.astype(int)


def stratified_split(
    matrix: FeatureMatrix,
    labels,
    train_fraction: float = 0.8,
    seed: int = 42
) -> Split:
    """
    Partition rows into train and test sets, stratified by label.

    Args:
        matrix: Encoded feature matrix
        labels: Binary 0/1 labels aligned with the matrix rows
        train_fraction: Share of rows assigned to the training partition
        seed: Random seed

    Returns:
        Split with sorted train and test row positions

    Raises:
        InsufficientDataError: If either partition would lack a class
    """
    y = _binary_labels(labels)
    if len(y) != matrix.n_rows:
        raise ValueError(f"{len(y)} labels for {matrix.n_rows} rows")
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    n_pos = int(y.sum())
    n_neg = len(y) - n_pos
    if n_pos < 2 or n_neg < 2:
        raise InsufficientDataError(
            f"Need at least 2 examples of each class, got {n_pos} positive / {n_neg} negative"
        )

    try:
        train_idx, test_idx = train_test_split(
            np.arange(len(y)),
            train_size=train_fraction,
            random_state=seed,
            stratify=y,
        )
    except ValueError as e:
        raise InsufficientDataError(f"Cannot stratify {len(y)} rows: {e}") from e

    for name, idx in (("train", train_idx), ("test", test_idx)):
        if len(np.unique(y[idx])) < 2:
            raise InsufficientDataError(f"The {name} partition would contain a single class")

    split = Split(np.sort(train_idx), np.sort(test_idx))

    logger.info(f"Train set: {len(split.train_index)} samples ({y[split.train_index].mean():.1%} positive)")
    logger.info(f"Test set: {len(split.test_index)} samples ({y[split.test_index].mean():.1%} positive)")
    return split


def fit_scaler(train_matrix: FeatureMatrix) -> ScalingStatistics:
    """
    Compute per-column mean and population std over training rows.

    Zero-variance columns get mean 0 and std 1 so scaling leaves them unchanged.
    """
    values = train_matrix.values
    scaler = StandardScaler().fit(values)

    mean = scaler.mean_.astype(float)
    std = np.sqrt(scaler.var_).astype(float)

    constant = np.ptp(values, axis=0) == 0
    mean[constant] = 0.0
    std[constant] = 1.0
    if constant.any():
        constant_cols = [c for c, flag in zip(train_matrix.columns, constant) if flag]
        logger.debug(f"Leaving zero-variance columns unscaled: {constant_cols}")

    mean.setflags(write=False)
    std.setflags(write=False)
    return ScalingStatistics(train_matrix.columns, mean, std)


def apply_scaler(matrix: FeatureMatrix, stats: ScalingStatistics) -> FeatureMatrix:
    """Standardize a matrix with statistics from fit_scaler."""
    if tuple(matrix.columns) != tuple(stats.columns):
        raise ValueError("Matrix columns do not match the scaling statistics")
    return FeatureMatrix((matrix.values - stats.mean) / stats.std, matrix.columns)

"""Tests for stratified splitting and train-only scaling."""

import numpy as np
import pytest

from telco_churn.data import apply_scaler, fit_scaler, stratified_split
from telco_churn.exceptions import InsufficientDataError
from telco_churn.features import FeatureMatrix


def _matrix(n_rows, n_cols=3, seed=0):
    rng = np.random.default_rng(seed)
    return FeatureMatrix(rng.normal(size=(n_rows, n_cols)), [f"f{i}" for i in range(n_cols)])


def _labels(n_pos, n_neg):
    return np.array([1] * n_pos + [0] * n_neg)


def test_split_is_disjoint_and_covering():
    labels = _labels(265, 735)
    split = stratified_split(_matrix(1000), labels, 0.8, seed=42)

    assert len(np.intersect1d(split.train_index, split.test_index)) == 0
    np.testing.assert_array_equal(
        np.sort(np.concatenate([split.train_index, split.test_index])), np.arange(1000)
    )
    assert len(split.train_index) == 800


def test_split_preserves_positive_ratio_within_one_point():
    labels = _labels(265, 735)
    split = stratified_split(_matrix(1000), labels, 0.8, seed=42)

    overall = labels.mean()
    assert abs(labels[split.train_index].mean() - overall) <= 0.01
    assert abs(labels[split.test_index].mean() - overall) <= 0.01


def test_split_is_deterministic_for_a_seed():
    labels = _labels(30, 70)
    matrix = _matrix(100)

    a = stratified_split(matrix, labels, 0.7, seed=7)
    b = stratified_split(matrix, labels, 0.7, seed=7)
    c = stratified_split(matrix, labels, 0.7, seed=8)

    np.testing.assert_array_equal(a.test_index, b.test_index)
    assert not np.array_equal(a.test_index, c.test_index)


@pytest.mark.parametrize("n_pos", [2, 3, 5])
@pytest.mark.parametrize("n_neg", [2, 4, 9])
@pytest.mark.parametrize("fraction", [0.5, 0.7, 0.8])
def test_split_never_returns_a_single_class_partition(n_pos, n_neg, fraction):
    labels = _labels(n_pos, n_neg)
    n_train = int(np.floor(fraction * len(labels)))
    n_test = len(labels) - n_train

    if min(n_train, n_test) < 2:
        with pytest.raises(InsufficientDataError):
            stratified_split(_matrix(len(labels)), labels, fraction, seed=42)
        return

    split = stratified_split(_matrix(len(labels)), labels, fraction, seed=42)

    assert set(labels[split.train_index]) == {0, 1}
    assert set(labels[split.test_index]) == {0, 1}


def test_split_requires_two_examples_per_class():
    with pytest.raises(InsufficientDataError):
        stratified_split(_matrix(10), _labels(1, 9), 0.8, seed=42)


def test_split_rejects_bad_fraction():
    with pytest.raises(ValueError):
        stratified_split(_matrix(10), _labels(5, 5), 1.0, seed=42)


def test_scaled_training_columns_have_zero_mean_unit_std():
    rng = np.random.default_rng(3)
    values = np.column_stack([rng.normal(50, 10, 200), rng.uniform(0, 1, 200), np.full(200, 7.0)])
    train = FeatureMatrix(values, ["a", "b", "constant"])

    stats = fit_scaler(train)
    scaled = apply_scaler(train, stats)

    np.testing.assert_allclose(scaled.values[:, :2].mean(axis=0), 0.0, atol=1e-10)
    np.testing.assert_allclose(scaled.values[:, :2].std(axis=0), 1.0, atol=1e-10)
    np.testing.assert_array_equal(scaled.values[:, 2], values[:, 2])
    assert np.isfinite(scaled.values).all()


def test_test_partition_uses_training_statistics_only():
    matrix = _matrix(100, seed=5)
    labels = _labels(40, 60)
    split = stratified_split(matrix, labels, 0.8, seed=42)
    train, test = matrix.take(split.train_index), matrix.take(split.test_index)

    stats = fit_scaler(train)
    scaled_test = apply_scaler(test, stats)

    np.testing.assert_allclose(stats.mean, train.values.mean(axis=0), rtol=1e-12)
    assert not np.array_equal(stats.mean, matrix.values.mean(axis=0))
    np.testing.assert_array_equal(scaled_test.values, (test.values - stats.mean) / stats.std)


def test_scaling_statistics_are_read_only():
    stats = fit_scaler(_matrix(20))

    with pytest.raises(ValueError):
        stats.mean[0] = 1.0


def test_apply_scaler_rejects_other_columns():
    stats = fit_scaler(_matrix(20, n_cols=3))

    with pytest.raises(ValueError):
        apply_scaler(_matrix(20, n_cols=2), stats)

"""Data module for loading, cleaning, splitting and rebalancing data."""

from .data_loader import DataLoader, load_dataset
from .preprocessor import DataPreprocessor, ImputeStrategy
from .splitter import ScalingStatistics, Split, apply_scaler, fit_scaler, stratified_split
from .balancer import ResampleMethod, rebalance

__all__ = [
    "DataLoader",
    "load_dataset",
    "DataPreprocessor",
    "ImputeStrategy",
    "ScalingStatistics",
    "Split",
    "apply_scaler",
    "fit_scaler",
    "stratified_split",
    "ResampleMethod",
    "rebalance",
]

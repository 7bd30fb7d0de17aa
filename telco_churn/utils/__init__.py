"""Utility functions."""

from .helpers import setup_logging, format_metrics, safe_divide

__all__ = ["setup_logging", "format_metrics", "safe_divide"]

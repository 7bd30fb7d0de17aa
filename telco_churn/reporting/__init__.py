"""Reporting module for the printed report and charts."""

from .reporter import ChurnReporter, correlation_matrix, format_report

__all__ = ["ChurnReporter", "correlation_matrix", "format_report"]

"""
Pipeline Exceptions
===================

Error taxonomy for the churn report pipeline. Every error is fatal for a run.
"""

from typing import Optional


class ChurnPipelineError(Exception):
    """Base class for errors that abort a pipeline run."""


class LoadError(ChurnPipelineError):
    """Input file is missing, unreadable, unparsable or empty."""


class SchemaError(ChurnPipelineError):
    """An expected column is absent or unusable."""


class EncodingError(ChurnPipelineError):
    """A categorical value cannot be encoded."""


class InsufficientDataError(ChurnPipelineError):
    """A partition would lack one of the two classes."""


class ConvergenceError(ChurnPipelineError):
    """Linear model fit did not converge."""

    def __init__(self, message: str, iterations: Optional[int] = None):
        super().__init__(message)
        self.iterations = iterations

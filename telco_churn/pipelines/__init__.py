"""End-to-end pipelines."""

from .training_pipeline import PipelineResult, TrainingPipeline

__all__ = ["PipelineResult", "TrainingPipeline"]

"""
Reporting Module
================

Printed report and charts for a churn run. Everything here consumes numeric
summaries (EvaluationReport, FeatureMatrix, the cleaned DataFrame) and never
touches the models.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from loguru import logger

from config import FIGURES_DIR, get_config
from telco_churn.features.encoder import FeatureMatrix
from telco_churn.models.evaluator import EvaluationReport
from telco_churn.utils.helpers import format_metrics


def format_report(report: EvaluationReport, top_n: int = 10) -> str:
    """
    Render an EvaluationReport as plain text.

    Args:
        report: Evaluation report
        top_n: Number of ranked features to list

    Returns:
        Multi-line report
    """
    lines = [f"=== Churn report: {report.model_name} (threshold={report.threshold}) ==="]

    for name, value in format_metrics(report.metrics()).items():
        lines.append(f"{name:<12}{value}")

    c = report.confusion
    lines.append(f"Confusion    TP={c.tp} FP={c.fp} TN={c.tn} FN={c.fn} (n={c.total})")

    if report.business is not None:
        b = report.business
        lines.append(f"Churn rate   {b.churn_rate:.2%}")
        lines.append(f"ARPU         {b.arpu:.2f}")
        lines.append(f"Revenue loss {b.revenue_loss:,.2f}")

    lines.append(f"Top {top_n} features by {report.importance_kind}:")
    for rank, item in enumerate(report.top_features(top_n), start=1):
        lines.append(f"{rank:>3}. {item.feature:<40} {item.importance:.4f}")

    return "\n".join(lines)


def correlation_matrix(matrix: FeatureMatrix) -> pd.DataFrame:
    """Pearson correlation between encoded columns (NaN for constant columns)."""
    return matrix.to_frame().corr()


class ChurnReporter:
    """Render churn charts to PNG files."""

    def __init__(
        self,
        config: Optional[dict] = None,
        output_dir: Optional[Union[str, Path]] = None
    ):
        """
        Initialize ChurnReporter.

        Args:
            config: Configuration dictionary
            output_dir: Directory for figures (defaults to reports/figures)
        """
        self.config = config or get_config()
        self.report_config = self.config.get("reporting", {})
        self.target_column = self.config.get("data", {}).get("target_column", "Churn")
        self.save = self.report_config.get("save_figures", True)
        self.top_n = self.report_config.get("top_n_features", 15)
        self.figures_dir = Path(output_dir) if output_dir else FIGURES_DIR

    def _save(self, fig: plt.Figure, name: str) -> Optional[Path]:
        if not self.save:
            return None
        self.figures_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.figures_dir / f"{name}.png"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        logger.info(f"Saved {name} plot to {filepath}")
        return filepath

    def plot_roc_curve(
        self,
        report: EvaluationReport,
        figsize: Tuple[int, int] = (8, 6)
    ) -> plt.Figure:
        """Plot the ROC curve with its AUC."""
        fig, ax = plt.subplots(figsize=figsize)

        ax.plot(report.roc_curve.fpr, report.roc_curve.tpr,
                label=f"{report.model_name} (AUC={report.roc_auc:.3f})")
        ax.plot([0, 1], [0, 1], "k--", label="Random (AUC=0.500)")
        ax.set_xlabel("False Positive Rate")
        ax.set_ylabel("True Positive Rate")
        ax.set_title("ROC Curve")
        ax.legend(loc="lower right")
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        self._save(fig, f"roc_curve_{report.model_name}")
        return fig

    def plot_confusion_matrix(
        self,
        report: EvaluationReport,
        figsize: Tuple[int, int] = (6, 5)
    ) -> plt.Figure:
        """Plot confusion counts as a heatmap."""
        c = report.confusion
        cm = np.array([[c.tn, c.fp], [c.fn, c.tp]])

        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            cm, annot=True, fmt="d", cmap="Blues",
            xticklabels=["No Churn", "Churn"],
            yticklabels=["No Churn", "Churn"],
            ax=ax
        )
        ax.set_title(f"{report.model_name} - Confusion Matrix")
        ax.set_xlabel("Predicted")
        ax.set_ylabel("Actual")

        plt.tight_layout()
        self._save(fig, f"confusion_matrix_{report.model_name}")
        return fig

    def plot_feature_importance(
        self,
        report: EvaluationReport,
        top_n: Optional[int] = None,
        figsize: Tuple[int, int] = (10, 6)
    ) -> plt.Figure:
        """Horizontal bar chart of the top ranked features."""
        top = report.top_features(top_n or self.top_n)
        frame = pd.DataFrame(
            {"feature": [f.feature for f in top], "importance": [f.importance for f in top]}
        )

        fig, ax = plt.subplots(figsize=figsize)
        sns.barplot(data=frame, x="importance", y="feature", color="steelblue", ax=ax)
        ax.set_title(f"Top {len(top)} Features ({report.importance_kind})")
        ax.set_xlabel(report.importance_kind.capitalize())
        ax.set_ylabel("")

        plt.tight_layout()
        self._save(fig, f"feature_importance_{report.model_name}")
        return fig

    def plot_numeric_distributions(
        self,
        df: pd.DataFrame,
        columns: Sequence[str],
        bins: int = 30
    ) -> plt.Figure:
        """Histogram of each numeric column, split by churn label."""
        fig, axes = plt.subplots(1, len(columns), figsize=(5 * len(columns), 4), squeeze=False)

        for ax, col in zip(axes[0], columns):
            sns.histplot(data=df, x=col, hue=self.target_column, bins=bins,
                         element="step", stat="count", ax=ax)
            ax.set_title(f"Distribution of {col}")

        plt.tight_layout()
        self._save(fig, "numeric_distributions")
        return fig

    def plot_categorical_by_label(
        self,
        df: pd.DataFrame,
        columns: Sequence[str],
        ncols: int = 3
    ) -> plt.Figure:
        """Count plot of every categorical column, coloured by churn label."""
        nrows = max(1, int(np.ceil(len(columns) / ncols)))
        fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 3.5 * nrows), squeeze=False)
        flat = axes.ravel()

        for ax, col in zip(flat, columns):
            sns.countplot(data=df, x=col, hue=self.target_column, ax=ax)
            ax.set_title(f"Churn by {col}")
            ax.tick_params(axis="x", rotation=30)
        for ax in flat[len(columns):]:
            ax.set_visible(False)

        plt.tight_layout()
        self._save(fig, "categorical_by_churn")
        return fig

    def plot_tenure_vs_charges(
        self,
        df: pd.DataFrame,
        x: str = "tenure",
        y: str = "TotalCharges",
        figsize: Tuple[int, int] = (8, 6)
    ) -> plt.Figure:
        """Scatter of tenure against total charges, coloured by churn label."""
        fig, ax = plt.subplots(figsize=figsize)
        sns.scatterplot(data=df, x=x, y=y, hue=self.target_column, alpha=0.5, s=15, ax=ax)
        ax.set_title(f"{x} vs {y}")

        plt.tight_layout()
        self._save(fig, "tenure_vs_total_charges")
        return fig

    def plot_correlation_heatmap(
        self,
        matrix: FeatureMatrix,
        figsize: Optional[Tuple[int, int]] = None
    ) -> plt.Figure:
        """Heatmap of the encoded feature correlations."""
        corr = correlation_matrix(matrix)
        size = max(8, int(0.35 * len(corr.columns)))

        fig, ax = plt.subplots(figsize=figsize or (size, size))
        sns.heatmap(corr, cmap="coolwarm", vmin=-1, vmax=1, center=0,
                    square=True, linewidths=0.2, cbar_kws={"shrink": 0.7}, ax=ax)
        ax.set_title("Feature Correlation Heatmap")

        plt.tight_layout()
        self._save(fig, "correlation_heatmap")
        return fig

    def render_all(
        self,
        df: pd.DataFrame,
        matrix: FeatureMatrix,
        report: EvaluationReport,
        numeric_columns: Sequence[str] = ("tenure", "MonthlyCharges", "TotalCharges"),
        categorical_columns: Sequence[str] = ()
    ) -> List[plt.Figure]:
        """Render every chart and close the figures afterwards."""
        figures = [
            self.plot_roc_curve(report),
            self.plot_confusion_matrix(report),
            self.plot_feature_importance(report),
            self.plot_numeric_distributions(df, list(numeric_columns)),
            self.plot_correlation_heatmap(matrix),
        ]
        if categorical_columns:
            figures.append(self.plot_categorical_by_label(df, list(categorical_columns)))
        if {"tenure", "TotalCharges"} <= set(df.columns):
            figures.append(self.plot_tenure_vs_charges(df))

        for fig in figures:
            plt.close(fig)
        return figures

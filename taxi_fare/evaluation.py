"""
Model Evaluation Module
=======================

Scores a fitted fare model against a labeled test table.

Features:
    - R², RMS, MAE, MSE calculation
    - Actual vs Predicted plot
    - Residual analysis plot
    - Evaluation report generation
"""

import logging
import json
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score

from .model import FarePredictionModel
from .schema import RegressionMetrics, LABEL_COLUMN

logger = logging.getLogger(__name__)


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> RegressionMetrics:
    """
    Calculate regression metrics over (actual, predicted) pairs.

    R² on degenerate labels follows sklearn's ``r2_score``:
        - two or more constant labels: 1.0 for a perfect fit, 0.0 otherwise
        - a single sample: NaN, with an ``UndefinedMetricWarning``

    ``loss_fn`` is the mean of the squared loss the regressor minimizes,
    so it equals ``mse``.

    Args:
        y_true: Ground truth fares
        y_pred: Predicted fares

    Returns:
        RegressionMetrics record
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    mse = float(mean_squared_error(y_true, y_pred))

    return RegressionMetrics(
        r_squared=float(r2_score(y_true, y_pred)),
        rms=float(np.sqrt(mse)),
        mae=float(mean_absolute_error(y_true, y_pred)),
        mse=mse,
        loss_fn=mse,
        n_samples=int(len(y_true))
    )


def metrics_to_json(metrics: RegressionMetrics) -> Dict[str, Any]:
    """Metrics as a JSON-safe dict; undefined (NaN/inf) values become None."""
    return {
        key: None if isinstance(value, float) and not np.isfinite(value) else value
        for key, value in metrics.to_dict().items()
    }


def evaluate(model: FarePredictionModel, test_df: pd.DataFrame) -> RegressionMetrics:
    """
    Apply a fitted model to a labeled test table and score it.

    Args:
        model: Fitted model
        test_df: Trip table with observed fares

    Returns:
        RegressionMetrics record
    """
    y_pred = model.predict(test_df)
    return calculate_metrics(test_df[LABEL_COLUMN].to_numpy(), y_pred)


def plot_actual_vs_predicted(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    figsize: Tuple[int, int] = (7, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Scatter plot of observed against predicted fares.

    Args:
        y_true: Ground truth fares
        y_pred: Predicted fares
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.scatter(y_true, y_pred, alpha=0.5, s=10)

    # Perfect prediction line
    min_val = min(y_true.min(), y_pred.min())
    max_val = max(y_true.max(), y_pred.max())
    ax.plot([min_val, max_val], [min_val, max_val], 'r--', linewidth=2, label='Perfect')

    r2 = r2_score(y_true, y_pred)
    rmse = np.sqrt(mean_squared_error(y_true, y_pred))

    ax.set_xlabel('Actual fare')
    ax.set_ylabel('Predicted fare')
    ax.set_title(f'Actual vs Predicted\nR²={r2:.4f}, RMS={rmse:.4f}', fontsize=11, fontweight='bold')
    ax.legend(loc='upper left', fontsize=8)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Actual vs Predicted plot saved to {save_path}")

    return fig


def plot_residuals(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    figsize: Tuple[int, int] = (7, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Residual distribution plot for model diagnostics.

    Args:
        y_true: Ground truth fares
        y_pred: Predicted fares
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    residuals = y_true - y_pred

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(residuals, kde=True, ax=ax, bins=50, alpha=0.7)

    ax.axvline(0, color='red', linestyle='--', linewidth=2, label='Zero')
    ax.axvline(np.mean(residuals), color='green', linestyle='--',
               linewidth=2, label=f'Mean: {np.mean(residuals):.4f}')

    ax.set_xlabel('Residual (Actual - Predicted)')
    ax.set_ylabel('Frequency')
    ax.set_title(f'Residuals (Std: {np.std(residuals):.4f})', fontsize=11, fontweight='bold')
    ax.legend(fontsize=8)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Residuals plot saved to {save_path}")

    return fig


def evaluate_model(
    model: FarePredictionModel,
    test_df: pd.DataFrame,
    output_dir: Optional[str] = None,
    save_figures: bool = True,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Run model evaluation and write the optional reports.

    Args:
        model: Fitted model
        test_df: Labeled test table
        output_dir: Directory for metrics and figures (None writes nothing)
        save_figures: Whether to render diagnostic figures
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary containing metrics and file paths
    """
    logger.info("=" * 60)
    logger.info("STARTING MODEL EVALUATION")
    logger.info("=" * 60)

    y_true = test_df[LABEL_COLUMN].to_numpy(dtype=float)
    y_pred = model.predict(test_df)

    logger.info("Calculating evaluation metrics...")
    metrics = calculate_metrics(y_true, y_pred)

    result = {
        'metrics': metrics,
        'figures': [],
        'metrics_file': None
    }

    if output_dir is not None:
        output_dir = Path(output_dir)
        metrics_dir = output_dir / "metrics"
        metrics_dir.mkdir(parents=True, exist_ok=True)

        metrics_file = metrics_dir / "evaluation_metrics.json"
        with open(metrics_file, 'w') as f:
            json.dump(metrics_to_json(metrics), f, indent=2, allow_nan=False)
        logger.info(f"Metrics saved to {metrics_file}")
        result['metrics_file'] = str(metrics_file)

        if save_figures:
            figures_dir = output_dir / "figures"
            figures_dir.mkdir(parents=True, exist_ok=True)

            logger.info("Generating Actual vs Predicted plot...")
            plot_actual_vs_predicted(
                y_true, y_pred,
                save_path=str(figures_dir / "eval_actual_vs_predicted.png")
            )
            result['figures'].append("eval_actual_vs_predicted.png")

            logger.info("Generating residual analysis...")
            plot_residuals(
                y_true, y_pred,
                save_path=str(figures_dir / "eval_residuals.png")
            )
            result['figures'].append("eval_residuals.png")

    if show_plots:
        plt.show()
    else:
        plt.close('all')

    logger.info("=" * 60)
    logger.info("EVALUATION COMPLETE")
    logger.info(f"  R²: {metrics.r_squared:.6f}")
    logger.info(f"  RMS: {metrics.rms:.6f}")
    logger.info("=" * 60)

    return result


def print_evaluation_report(metrics: RegressionMetrics) -> None:
    """
    Print the model quality metrics block.

    Args:
        metrics: Metrics record from calculate_metrics
    """
    print()
    print("*************************************************")
    print("*       Model quality metrics evaluation         ")
    print("*------------------------------------------------")
    r2 = f"{metrics.r_squared:.2f}" if np.isfinite(metrics.r_squared) else "undefined"
    print(f"*       R2 Score:      {r2}")
    print(f"*       RMS loss:      {metrics.rms:.2f}")
    print(f"*       Abs loss:      {metrics.mae:.2f}")
    print(f"*       Squared loss:  {metrics.mse:.2f}")
    print(f"*       Samples:       {metrics.n_samples}")
    print("*************************************************")
    print()

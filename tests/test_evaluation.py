"""
Test Suite for Model Evaluation Module
======================================
"""

import json

import pytest
import numpy as np

from sklearn.exceptions import UndefinedMetricWarning

from taxi_fare.evaluation import (
    calculate_metrics, evaluate, evaluate_model, metrics_to_json, print_evaluation_report
)
from taxi_fare.model import FarePredictionModel


class TestCalculateMetrics:
    """Tests for calculate_metrics."""

    def test_perfect_predictions(self):
        y = np.array([5.0, 7.5, 12.0, 30.0])
        metrics = calculate_metrics(y, y)

        assert metrics.r_squared == 1.0
        assert metrics.rms == 0.0
        assert metrics.mae == 0.0
        assert metrics.n_samples == 4

    def test_known_values(self):
        metrics = calculate_metrics(np.array([1.0, 2.0, 3.0]), np.array([1.0, 2.0, 5.0]))

        assert metrics.mse == pytest.approx(4 / 3)
        assert metrics.rms == pytest.approx(np.sqrt(4 / 3))
        assert metrics.mae == pytest.approx(2 / 3)
        assert metrics.loss_fn == pytest.approx(metrics.mse)
        assert metrics.r_squared == pytest.approx(1 - 4 / 2)

    def test_zero_variance_label(self):
        """Two or more constant labels: sklearn reports 0.0 (imperfect) or 1.0 (perfect)."""
        y_true = np.full(5, 7.5)

        imperfect = calculate_metrics(y_true, np.array([7.0, 8.0, 7.5, 7.5, 7.5]))
        perfect = calculate_metrics(y_true, y_true.copy())

        assert imperfect.r_squared == 0.0
        assert perfect.r_squared == 1.0
        assert imperfect.rms == pytest.approx(np.sqrt(0.1))

    def test_single_sample(self):
        """One row: sklearn's R² is undefined (NaN) and warns; error metrics still hold."""
        with pytest.warns(UndefinedMetricWarning):
            metrics = calculate_metrics(np.array([7.5]), np.array([7.0]))

        assert np.isnan(metrics.r_squared)
        assert metrics.rms == pytest.approx(0.5)
        assert metrics.n_samples == 1

    def test_loss_fn_is_squared_loss_mean(self):
        metrics = calculate_metrics(np.array([2.0, 4.0, 9.0]), np.array([3.0, 4.0, 6.0]))

        assert metrics.loss_fn == metrics.mse
        assert metrics.mse == pytest.approx(10 / 3)

    def test_json_safe_metrics(self):
        with pytest.warns(UndefinedMetricWarning):
            metrics = calculate_metrics(np.array([7.5]), np.array([7.0]))

        safe = metrics_to_json(metrics)

        assert safe['r_squared'] is None
        assert safe['rms'] == pytest.approx(0.5)
        json.dumps(safe, allow_nan=False)

    def test_to_dict(self):
        metrics = calculate_metrics(np.array([1.0, 2.0]), np.array([1.5, 2.5]))

        assert set(metrics.to_dict()) == {'r_squared', 'rms', 'mae', 'mse', 'loss_fn', 'n_samples'}


class TestEvaluate:
    """Tests for evaluating a fitted model."""

    def test_quality(self, fitted_model, test_df):
        metrics = evaluate(fitted_model, test_df)

        assert metrics.r_squared > 0.9
        assert metrics.rms < 2.5
        assert metrics.n_samples == len(test_df)

    def test_metrics_deterministic(self, fitted_model, train_df, test_df):
        other = FarePredictionModel().fit(train_df)

        first = evaluate(fitted_model, test_df).to_dict()
        second = evaluate(other, test_df).to_dict()

        assert second == pytest.approx(first, rel=1e-9)

    def test_evaluate_model_writes_reports(self, fitted_model, test_df, tmp_path):
        result = evaluate_model(fitted_model, test_df, output_dir=str(tmp_path))

        with open(result['metrics_file']) as f:
            saved = json.load(f)

        assert saved == result['metrics'].to_dict()
        assert result['figures'] == ["eval_actual_vs_predicted.png", "eval_residuals.png"]
        for name in result['figures']:
            assert (tmp_path / "figures" / name).exists()

    def test_evaluate_model_without_output(self, fitted_model, test_df):
        result = evaluate_model(fitted_model, test_df)

        assert result['metrics_file'] is None
        assert result['figures'] == []
        assert result['metrics'] == evaluate(fitted_model, test_df)

    def test_report(self, fitted_model, test_df, capsys):
        print_evaluation_report(evaluate(fitted_model, test_df))

        out = capsys.readouterr().out
        assert "R2 Score:" in out
        assert "RMS loss:" in out

    def test_single_row_writes_valid_json(self, fitted_model, test_df, tmp_path):
        """Undefined R² on one row is written as null, not a bare NaN token."""
        with pytest.warns(UndefinedMetricWarning):
            result = evaluate_model(
                fitted_model, test_df.head(1), output_dir=str(tmp_path), save_figures=False
            )

        with open(result['metrics_file']) as f:
            text = f.read()

        assert "NaN" not in text
        saved = json.loads(text)
        assert saved['r_squared'] is None
        assert saved['n_samples'] == 1
        assert saved['rms'] == pytest.approx(result['metrics'].rms)

    def test_report_undefined_r2(self, capsys):
        with pytest.warns(UndefinedMetricWarning):
            metrics = calculate_metrics(np.array([7.5]), np.array([7.0]))

        print_evaluation_report(metrics)

        out = capsys.readouterr().out
        assert "R2 Score:      undefined" in out
        assert "RMS loss:      0.50" in out

"""
Test Suite for Model Training Module
====================================

Tests for FarePredictionModel training, persistence and determinism.
"""

import pytest
import numpy as np

from taxi_fare.model import FarePredictionModel, train_model, print_model_summary


class TestFarePredictionModel:
    """Tests for FarePredictionModel class."""

    def test_init(self):
        """Defaults mirror the boosted tree trainer settings."""
        model = FarePredictionModel()

        assert model.max_iter == 100
        assert model.max_leaf_nodes == 20
        assert model.min_samples_leaf == 10
        assert model.learning_rate == 0.2
        assert model.random_state == 0
        assert model._is_fitted == False

    def test_predict_before_fit(self, test_df):
        with pytest.raises(ValueError, match="must be trained"):
            FarePredictionModel().predict(test_df)

    def test_fit(self, fitted_model, train_df):
        assert fitted_model._is_fitted == True
        assert fitted_model.training_info['n_samples'] == len(train_df)
        assert fitted_model.training_info['n_features'] == 10
        assert fitted_model.training_info['n_iterations'] == 100
        assert len(fitted_model.feature_names_) == 10

    def test_predict_shape(self, fitted_model, test_df):
        predictions = fitted_model.predict(test_df)

        assert predictions.shape == (len(test_df),)
        assert np.all(np.isfinite(predictions))

    def test_prediction_ignores_label_value(self, fitted_model, test_df):
        """Zeroed fares give the same predictions as observed ones."""
        zeroed = test_df.assign(fare_amount=0.0)

        np.testing.assert_array_equal(
            fitted_model.predict(zeroed),
            fitted_model.predict(test_df)
        )

    def test_deterministic(self, fitted_model, train_df, test_df):
        """Same seed and data give the same model."""
        other = FarePredictionModel().fit(train_df)

        np.testing.assert_allclose(
            other.predict(test_df),
            fitted_model.predict(test_df),
            rtol=1e-9
        )

    def test_save_load(self, fitted_model, test_df, tmp_path):
        """Reloaded model predicts exactly like the saved one."""
        path = tmp_path / "models" / "fare_model.joblib"
        fitted_model.save(str(path))
        loaded = FarePredictionModel.load(str(path))

        assert loaded._is_fitted == True
        assert loaded.get_hyperparameters() == fitted_model.get_hyperparameters()
        assert loaded.feature_names_ == fitted_model.feature_names_
        np.testing.assert_array_equal(loaded.predict(test_df), fitted_model.predict(test_df))

    def test_save_overwrites(self, fitted_model, train_df, test_df, tmp_path):
        path = tmp_path / "fare_model.joblib"
        FarePredictionModel(max_iter=5).fit(train_df).save(str(path))
        fitted_model.save(str(path))

        loaded = FarePredictionModel.load(str(path))

        assert loaded.max_iter == 100
        np.testing.assert_array_equal(loaded.predict(test_df), fitted_model.predict(test_df))

    def test_save_untrained(self, tmp_path):
        with pytest.raises(ValueError, match="untrained"):
            FarePredictionModel().save(str(tmp_path / "model.joblib"))

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FarePredictionModel.load(str(tmp_path / "missing.joblib"))


class TestTrainModel:
    """Tests for the train_model function."""

    def test_uses_config(self, train_df, tmp_path):
        config = {'model': {'max_iter': 20, 'learning_rate': 0.1}}
        path = tmp_path / "fare_model.joblib"

        model = train_model(train_df, config, save_path=str(path))

        assert model.max_iter == 20
        assert model.learning_rate == 0.1
        assert model.max_leaf_nodes == 20
        assert model.training_info['n_iterations'] == 20
        assert path.exists()

    def test_summary(self, fitted_model, capsys):
        print_model_summary(fitted_model)

        out = capsys.readouterr().out
        assert "MODEL SUMMARY" in out
        assert "max_leaf_nodes: 20" in out

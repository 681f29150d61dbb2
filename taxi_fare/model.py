"""
Model Training Module
=====================

Fits the fare regressor: the feature pipeline followed by a
HistGradientBoostingRegressor, composed into one sklearn Pipeline.

Features:
    - Fixed encoding + boosting chain trained on a labeled trip table
    - Hyperparameter configuration via config file
    - Model persistence (save/load) with joblib
    - Training progress logging
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime

import numpy as np
import pandas as pd
import joblib
from sklearn.ensemble import HistGradientBoostingRegressor
from sklearn.pipeline import Pipeline

from .preprocessing import build_feature_transformer, split_features_label, get_feature_names, describe_features

logger = logging.getLogger(__name__)


class FarePredictionModel:
    """
    Taxi fare regression model.

    The fitted object is the whole transform chain, so it accepts raw trip
    tables for both training and prediction.
    """

    def __init__(
        self,
        max_iter: int = 100,
        max_leaf_nodes: int = 20,
        min_samples_leaf: int = 10,
        learning_rate: float = 0.2,
        l2_regularization: float = 0.0,
        random_state: int = 0
    ):
        """
        Initialize the model with hyperparameters.

        Args:
            max_iter: Number of boosting iterations (trees)
            max_leaf_nodes: Maximum number of leaves per tree
            min_samples_leaf: Minimum samples required in a leaf
            learning_rate: Learning rate (shrinkage)
            l2_regularization: L2 regularization strength
            random_state: Random seed for reproducibility
        """
        self.max_iter = max_iter
        self.max_leaf_nodes = max_leaf_nodes
        self.min_samples_leaf = min_samples_leaf
        self.learning_rate = learning_rate
        self.l2_regularization = l2_regularization
        self.random_state = random_state

        self.pipeline: Optional[Pipeline] = None
        self.feature_names_: Optional[List[str]] = None
        self.training_info: Dict[str, Any] = {}
        self._is_fitted = False

    def get_hyperparameters(self) -> Dict[str, Any]:
        return {
            'max_iter': self.max_iter,
            'max_leaf_nodes': self.max_leaf_nodes,
            'min_samples_leaf': self.min_samples_leaf,
            'learning_rate': self.learning_rate,
            'l2_regularization': self.l2_regularization,
            'random_state': self.random_state
        }

    def _create_regressor(self) -> HistGradientBoostingRegressor:
        """Create the base HistGradientBoostingRegressor."""
        return HistGradientBoostingRegressor(
            max_iter=self.max_iter,
            max_leaf_nodes=self.max_leaf_nodes,
            min_samples_leaf=self.min_samples_leaf,
            learning_rate=self.learning_rate,
            l2_regularization=self.l2_regularization,
            random_state=self.random_state,
            early_stopping=False,
            verbose=0
        )

    def fit(self, df: pd.DataFrame) -> 'FarePredictionModel':
        """
        Train the model on a labeled trip table.

        Args:
            df: Trip table including the fare column

        Returns:
            Self for method chaining
        """
        start_time = datetime.now()

        logger.info("=" * 60)
        logger.info("STARTING MODEL TRAINING")
        logger.info("=" * 60)

        X, y = split_features_label(df)

        logger.info(f"Training data shape: X={X.shape}, y={y.shape}")
        logger.info("Hyperparameters:")
        for name, value in self.get_hyperparameters().items():
            logger.info(f"  - {name}: {value}")

        self.pipeline = Pipeline([
            ('features', build_feature_transformer()),
            ('regressor', self._create_regressor())
        ])
        self.pipeline.fit(X, y)

        features = self.pipeline.named_steps['features']
        self.feature_names_ = get_feature_names(features)
        describe_features(features)

        end_time = datetime.now()
        training_duration = (end_time - start_time).total_seconds()

        self.training_info = {
            'training_duration_seconds': training_duration,
            'n_samples': int(X.shape[0]),
            'n_features': len(self.feature_names_),
            'n_iterations': int(self.pipeline.named_steps['regressor'].n_iter_),
            'trained_at': end_time.isoformat(),
            'hyperparameters': self.get_hyperparameters()
        }

        self._is_fitted = True

        logger.info("=" * 60)
        logger.info(f"MODEL TRAINING COMPLETE in {training_duration:.2f} seconds")
        logger.info("=" * 60)

        return self

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """
        Predict fares for a trip table.

        Args:
            df: Trip table; the fare column must be present (zero is fine)

        Returns:
            Predicted fares of shape (n_trips,)
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained before prediction. Call fit() first.")

        X, _ = split_features_label(df)
        return self.pipeline.predict(X)

    def save(self, filepath: str) -> None:
        """
        Save the trained model to disk, overwriting any existing file.

        Args:
            filepath: Path to save the model
        """
        if not self._is_fitted:
            raise ValueError("Cannot save untrained model.")

        state = {
            'pipeline': self.pipeline,
            'hyperparameters': self.get_hyperparameters(),
            'feature_names_': self.feature_names_,
            'training_info': self.training_info,
            '_is_fitted': self._is_fitted
        }

        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(state, filepath)
        logger.info(f"Model saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> 'FarePredictionModel':
        """
        Load a trained model from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded FarePredictionModel instance
        """
        state = joblib.load(filepath)

        model = cls(**state['hyperparameters'])
        model.pipeline = state['pipeline']
        model.feature_names_ = state['feature_names_']
        model.training_info = state['training_info']
        model._is_fitted = state['_is_fitted']

        logger.info(f"Model loaded from {filepath}")
        return model


def train_model(
    train_df: pd.DataFrame,
    config: Dict[str, Any],
    save_path: Optional[str] = None
) -> FarePredictionModel:
    """
    Train a model using configuration parameters.

    Args:
        train_df: Labeled trip table
        config: Configuration dictionary
        save_path: Path to save the trained model (optional)

    Returns:
        Trained FarePredictionModel
    """
    model_config = config.get('model', {})

    model = FarePredictionModel(
        max_iter=model_config.get('max_iter', 100),
        max_leaf_nodes=model_config.get('max_leaf_nodes', 20),
        min_samples_leaf=model_config.get('min_samples_leaf', 10),
        learning_rate=model_config.get('learning_rate', 0.2),
        l2_regularization=model_config.get('l2_regularization', 0.0),
        random_state=model_config.get('random_state', 0)
    )

    model.fit(train_df)

    if save_path:
        model.save(save_path)

    return model


def print_model_summary(model: FarePredictionModel) -> None:
    """
    Print a summary of the trained model.

    Args:
        model: Trained model instance
    """
    print("\n" + "=" * 50)
    print("MODEL SUMMARY")
    print("=" * 50)
    print("Model Type: Pipeline(ColumnTransformer, HistGradientBoostingRegressor)")
    print(f"Number of input features: {len(model.feature_names_ or [])}")
    print("\nHyperparameters:")
    for name, value in model.get_hyperparameters().items():
        print(f"  - {name}: {value}")

    if model.training_info:
        print("\nTraining Info:")
        print(f"  - Duration: {model.training_info.get('training_duration_seconds', 0.0):.2f}s")
        print(f"  - Samples: {model.training_info.get('n_samples', 'N/A')}")
        print(f"  - Iterations: {model.training_info.get('n_iterations', 'N/A')}")

    print("=" * 50 + "\n")

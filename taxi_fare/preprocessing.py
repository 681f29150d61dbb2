"""
Feature Pipeline Module
=======================

Turns a trip table into (features, label) for the fare regressor.

Steps, in order:
    - copy the fare column out as the training label
    - one-hot encode vendor, rate code and payment type
    - concatenate every feature column into a single feature vector
"""

import logging
from typing import List, Tuple

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder

from .data_loader import validate_schema
from .schema import NUMERIC_COLUMNS, LABEL_COLUMN, LABEL_ALIAS

logger = logging.getLogger(__name__)

# Order of the blocks in the concatenated feature vector
FEATURE_ORDER: List[str] = [
    'vendor_id',
    'rate_code',
    'passenger_count',
    'trip_time',
    'trip_distance',
    'payment_type',
]

CATEGORICAL_FEATURES: List[str] = ['vendor_id', 'rate_code', 'payment_type']


def split_features_label(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Copy the label out of a trip table.

    Args:
        df: Trip table; must contain every trip column, label included

    Returns:
        Tuple of (features, label) where features keeps the six feature
        columns and label is a copy of the fare column named ``label``
    """
    typed = validate_schema(df)
    y = typed[LABEL_COLUMN].copy().rename(LABEL_ALIAS)
    X = typed[FEATURE_ORDER]
    return X, y


def _one_hot() -> OneHotEncoder:
    # Unseen categories encode to an all-zero block
    return OneHotEncoder(handle_unknown='ignore', sparse_output=False)


def build_feature_transformer() -> ColumnTransformer:
    """
    Build the (unfitted) encoding + concatenation step.

    Returns:
        ColumnTransformer emitting one dense feature vector per trip
    """
    return ColumnTransformer(
        transformers=[
            ('vendor_id', _one_hot(), ['vendor_id']),
            ('rate_code', _one_hot(), ['rate_code']),
            ('numeric', 'passthrough', NUMERIC_COLUMNS),
            ('payment_type', _one_hot(), ['payment_type']),
        ],
        remainder='drop'
    )


def get_feature_names(transformer: ColumnTransformer) -> List[str]:
    """Names of the concatenated features of a fitted transformer."""
    return list(transformer.get_feature_names_out())


def describe_features(transformer: ColumnTransformer) -> None:
    """Log the learned categories and the feature vector width."""
    for name in CATEGORICAL_FEATURES:
        encoder = transformer.named_transformers_[name]
        logger.info(f"  - {name}: {list(encoder.categories_[0])}")

    n_features = len(get_feature_names(transformer))
    logger.info(f"Feature vector width: {n_features}")

"""
Taxi Fare Prediction
====================

A regression pipeline predicting taxi fares from trip attributes.

Modules:
    - schema: Trip columns and record types
    - data_loader: Config loading, CSV ingestion and validation
    - preprocessing: Label copy, one-hot encoding and feature concatenation
    - model: Gradient-boosted tree regressor with save/load
    - evaluation: Regression metrics and evaluation reports
    - prediction: Single-trip inference from the saved model
"""

__version__ = "1.0.0"

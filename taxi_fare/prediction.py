"""
Prediction Module
=================

Single-trip fare prediction from a persisted model.

Features:
    - Reload the saved model and score one trip
    - Prediction report generation (JSON)
"""

import logging
import json
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime

from .data_loader import trips_to_frame
from .model import FarePredictionModel
from .schema import TripRecord, FarePrediction

logger = logging.getLogger(__name__)


def predict_trip(model: FarePredictionModel, trip: TripRecord) -> FarePrediction:
    """
    Predict the fare of one trip with an already loaded model.

    Args:
        model: Fitted model
        trip: Trip to score; its fare_amount is ignored

    Returns:
        FarePrediction for the trip
    """
    prediction = model.predict(trips_to_frame([trip]))
    return FarePrediction(fare_amount=float(prediction[0]))


def predict_fare(model_path: str, trip: TripRecord) -> FarePrediction:
    """
    Load the persisted model and predict the fare of one trip.

    The model is read from disk on every call.

    Args:
        model_path: Path to the saved model
        trip: Trip to score

    Returns:
        FarePrediction for the trip
    """
    model = FarePredictionModel.load(model_path)
    prediction = predict_trip(model, trip)
    logger.info(f"Predicted fare: {prediction.fare_amount:.4f}")
    return prediction


def generate_prediction_report(
    trip: TripRecord,
    prediction: FarePrediction,
    actual_fare: Optional[float] = None,
    output_path: Optional[str] = None
) -> Dict[str, Any]:
    """
    Generate a prediction report.

    Args:
        trip: Scored trip
        prediction: Model output for the trip
        actual_fare: Observed fare, if known
        output_path: Path to save the report (optional)

    Returns:
        Report dictionary
    """
    report = {
        'generated_at': datetime.now().isoformat(),
        'trip': trip.to_dict(),
        'predicted_fare': prediction.fare_amount,
        'actual_fare': actual_fare
    }

    if actual_fare is not None:
        report['absolute_error'] = abs(prediction.fare_amount - actual_fare)

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            json.dump(report, f, indent=2)
        logger.info(f"Prediction report saved to {output_path}")

    return report


def print_prediction_results(prediction: FarePrediction, actual_fare: Optional[float] = None) -> None:
    """
    Print the predicted fare, next to the observed one when known.

    Args:
        prediction: Model output
        actual_fare: Observed fare (optional)
    """
    actual = f"{actual_fare:g}" if actual_fare is not None else "N/A"

    print("*" * 70)
    print(f"Predicted fare: {prediction.fare_amount:.4f}, actual fare: {actual}")
    print("*" * 70)

#!/usr/bin/env python3
"""
Taxi Fare Prediction - Main Pipeline
====================================

Trains a fare regressor on historical taxi trips, saves it, evaluates it on
a held-out test file and runs a single prediction with the reloaded model.

Phases:
    1. Training - Feature encoding + gradient-boosted trees
    2. Saving - Persist the fitted model
    3. Evaluation - R² and RMS on the test file
    4. Prediction - Reload the model and score one sample trip

Usage:
    # Run complete pipeline
    python main.py

    # Run specific phase
    python main.py --phase evaluate

    # Run with custom config
    python main.py --config config/config.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent))

from taxi_fare.data_loader import load_config, load_trips, validate_data, print_data_summary
from taxi_fare.model import train_model, print_model_summary, FarePredictionModel
from taxi_fare.evaluation import evaluate_model, print_evaluation_report
from taxi_fare.prediction import predict_fare, generate_prediction_report, print_prediction_results
from taxi_fare.schema import TripRecord, FarePrediction, RegressionMetrics

DEFAULT_SAMPLE_TRIP = {
    'vendor_id': 'VTS',
    'rate_code': '1',
    'passenger_count': 1,
    'trip_time': 1140,
    'trip_distance': 3.75,
    'payment_type': 'CRD',
    'fare_amount': 0,
    'actual_fare': 15.5,
}


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for the pipeline."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def _data_config(config: Dict[str, Any]) -> Dict[str, Any]:
    data_config = config.get('data', {})
    return {
        'separator': data_config.get('separator', ','),
        'has_header': data_config.get('has_header', True),
    }


def _model_path(config: Dict[str, Any]) -> str:
    return config.get('output', {}).get('model_path', 'models/fare_model.joblib')


def sample_trip_from_config(config: Dict[str, Any]) -> Tuple[TripRecord, Optional[float]]:
    """
    Build the sample trip and its observed fare from config.

    Returns:
        Tuple of (trip, actual_fare)
    """
    sample = dict(DEFAULT_SAMPLE_TRIP)
    sample.update(config.get('sample_trip', {}) or {})
    actual_fare = sample.pop('actual_fare', None)

    trip = TripRecord(
        vendor_id=str(sample['vendor_id']),
        rate_code=str(sample['rate_code']),
        passenger_count=float(sample['passenger_count']),
        trip_time=float(sample['trip_time']),
        trip_distance=float(sample['trip_distance']),
        payment_type=str(sample['payment_type']),
        fare_amount=float(sample.get('fare_amount', 0))
    )
    return trip, actual_fare


def run_training(config: Dict[str, Any]) -> FarePredictionModel:
    """
    Execute the training and saving phases.

    Args:
        config: Configuration dictionary

    Returns:
        Trained model
    """
    print(">>>> Building and Training model...")
    print()

    train_path = config.get('data', {}).get('train_path', 'data/taxi-fare-train.csv')
    train_df = load_trips(train_path, **_data_config(config))
    print_data_summary(train_df)

    is_valid, _ = validate_data(train_df)
    if not is_valid:
        print("⚠️  Data validation warnings detected. Proceeding anyway...")

    model = train_model(train_df, config)
    print_model_summary(model)

    print(">>>> Saving model...")
    print()

    model.save(_model_path(config))

    return model


def run_evaluation(
    config: Dict[str, Any],
    model: Optional[FarePredictionModel] = None
) -> RegressionMetrics:
    """
    Execute the evaluation phase.

    Args:
        config: Configuration dictionary
        model: Trained model; loaded from the model path when omitted

    Returns:
        Evaluation metrics
    """
    print(">>>> Evaluating...")
    print()

    if model is None:
        model = FarePredictionModel.load(_model_path(config))

    test_path = config.get('data', {}).get('test_path', 'data/taxi-fare-test.csv')
    test_df = load_trips(test_path, **_data_config(config))

    output_config = config.get('output', {})
    result = evaluate_model(
        model,
        test_df,
        output_dir=output_config.get('reports_path'),
        save_figures=output_config.get('save_figures', True),
        show_plots=False
    )

    print_evaluation_report(result['metrics'])

    return result['metrics']


def run_prediction(config: Dict[str, Any]) -> FarePrediction:
    """
    Execute the prediction phase: reload the saved model and score the sample trip.

    Args:
        config: Configuration dictionary

    Returns:
        Fare prediction for the sample trip
    """
    print(">>>> Testing single prediction...")
    print()

    trip, actual_fare = sample_trip_from_config(config)
    prediction = predict_fare(_model_path(config), trip)

    reports_path = config.get('output', {}).get('reports_path')
    if reports_path:
        generate_prediction_report(
            trip, prediction, actual_fare,
            output_path=str(Path(reports_path) / "prediction_report.json")
        )

    print_prediction_results(prediction, actual_fare)

    return prediction


def run_full_pipeline(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute train, save, evaluate and predict in sequence.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary containing all phase results
    """
    print("\n" + "=" * 70)
    print("TAXI FARE PREDICTION PIPELINE")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70 + "\n")

    results = {}
    results['model'] = run_training(config)
    results['metrics'] = run_evaluation(config, results['model'])
    results['prediction'] = run_prediction(config)

    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    return results


def run_single_phase(phase: str, config: Dict[str, Any]) -> Any:
    """
    Execute a single phase of the pipeline.

    Args:
        phase: Phase to run ('train', 'evaluate', 'predict')
        config: Configuration dictionary

    Returns:
        Phase result
    """
    if phase == 'train':
        return run_training(config)

    elif phase == 'evaluate':
        return run_evaluation(config)

    elif phase == 'predict':
        return run_prediction(config)

    else:
        raise ValueError(f"Unknown phase: {phase}. Choose from: train, evaluate, predict")


def main(argv=None):
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Taxi fare regression: train, evaluate, persist and predict",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --phase evaluate
  python main.py --config config/custom.yaml
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=['train', 'evaluate', 'predict', 'all'],
        default='all',
        help='Phase to run (default: all)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        return 1

    config = load_config(args.config)
    log_config = config.get('logging', {})
    setup_logging(
        'DEBUG' if args.verbose else log_config.get('level', 'INFO'),
        log_config.get('log_file')
    )

    try:
        if args.phase == 'all':
            run_full_pipeline(config)
        else:
            run_single_phase(args.phase, config)

        return 0

    except Exception as e:
        logging.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

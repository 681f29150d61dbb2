"""
Shared fixtures: synthetic taxi trips with a known fare formula.
"""

import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from taxi_fare.schema import TRIP_COLUMNS
from taxi_fare.model import FarePredictionModel

# Header used by the public taxi fare dataset
STOCK_HEADER = [
    'vendor_id',
    'rate_code',
    'passenger_count',
    'trip_time_in_secs',
    'trip_distance',
    'payment_type',
    'fare_amount',
]


def make_trips(n_samples: int = 2000, seed: int = 0) -> pd.DataFrame:
    """Trips whose fare is 2.5 + 2/mile + 0.005/second plus rate surcharges and noise."""
    rng = np.random.default_rng(seed)

    rate_code = rng.choice(['1', '1', '1', '2', '5'], n_samples)
    trip_distance = rng.uniform(0.5, 15.0, n_samples).round(2)
    trip_time = (trip_distance * 240 + rng.uniform(0, 300, n_samples)).round()

    fare = (
        2.5
        + 2.0 * trip_distance
        + 0.005 * trip_time
        + np.where(rate_code == '2', 30.0, 0.0)
        + np.where(rate_code == '5', 15.0, 0.0)
        + rng.normal(0, 0.5, n_samples)
    )

    return pd.DataFrame({
        'vendor_id': rng.choice(['CMT', 'VTS'], n_samples),
        'rate_code': rate_code,
        'passenger_count': rng.integers(1, 7, n_samples).astype(float),
        'trip_time': trip_time,
        'trip_distance': trip_distance,
        'payment_type': rng.choice(['CRD', 'CSH'], n_samples),
        'fare_amount': fare.round(2),
    }, columns=TRIP_COLUMNS)


def write_trips_csv(df: pd.DataFrame, path: Path) -> Path:
    """Write trips the way the public dataset is laid out."""
    out = df.copy()
    out.columns = STOCK_HEADER
    out.to_csv(path, index=False)
    return path


@pytest.fixture(scope="session")
def train_df():
    return make_trips(2000, seed=0)


@pytest.fixture(scope="session")
def test_df():
    return make_trips(500, seed=1)


@pytest.fixture(scope="session")
def fitted_model(train_df):
    """A model trained once for the whole session."""
    return FarePredictionModel().fit(train_df)


@pytest.fixture
def train_csv(tmp_path, train_df):
    return write_trips_csv(train_df, tmp_path / "taxi-fare-train.csv")


@pytest.fixture
def test_csv(tmp_path, test_df):
    return write_trips_csv(test_df, tmp_path / "taxi-fare-test.csv")

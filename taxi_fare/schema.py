"""
Trip Schema
===========

Column layout of the taxi trip files and the record types that flow
through the pipeline.

The CSV files carry seven columns in a fixed order. Columns are always
addressed by position when reading, so the header text in the file does not
need to match the names below.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List

# Fixed CSV column order (positions 0..6)
TRIP_COLUMNS: List[str] = [
    'vendor_id',
    'rate_code',
    'passenger_count',
    'trip_time',
    'trip_distance',
    'payment_type',
    'fare_amount',
]

TEXT_COLUMNS: List[str] = ['vendor_id', 'rate_code', 'payment_type']
NUMERIC_COLUMNS: List[str] = ['passenger_count', 'trip_time', 'trip_distance']
LABEL_COLUMN = 'fare_amount'

# Name of the label once copied out of the input table
LABEL_ALIAS = 'label'


@dataclass(frozen=True)
class TripRecord:
    """A single taxi trip. ``fare_amount`` is 0 for trips to be predicted."""

    vendor_id: str
    rate_code: str
    passenger_count: float
    trip_time: float
    trip_distance: float
    payment_type: str
    fare_amount: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FarePrediction:
    """Fare estimate for one trip."""

    fare_amount: float


@dataclass(frozen=True)
class RegressionMetrics:
    """
    Regression quality metrics over a labeled test set.

    Attributes:
        r_squared: Coefficient of determination
        rms: Root mean squared error
        mae: Mean absolute error (L1)
        mse: Mean squared error (L2)
        loss_fn: Mean of the training loss (squared error) over the test set
        n_samples: Number of evaluated rows
    """

    r_squared: float
    rms: float
    mae: float
    mse: float
    loss_fn: float
    n_samples: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

"""
Data Loader Module
==================

Handles configuration loading, trip CSV ingestion and schema validation.

Functions:
    - load_config: Load YAML configuration file
    - load_trips: Load a trip CSV file typed per the trip schema
    - trips_to_frame: Build a typed DataFrame from in-memory TripRecords
    - validate_schema: Check columns and coerce them to schema types
    - validate_data: Check data quality constraints
    - print_data_summary: Console summary of a trip table
"""

import logging
from pathlib import Path
from typing import Dict, Any, Iterable, Tuple

import pandas as pd
import yaml

from .schema import TripRecord, TRIP_COLUMNS, TEXT_COLUMNS, NUMERIC_COLUMNS, LABEL_COLUMN

logger = logging.getLogger(__name__)


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    logger.info(f"Loaded configuration from {config_path}")
    return config


def validate_schema(df: pd.DataFrame) -> pd.DataFrame:
    """
    Check that all trip columns are present and coerce them to schema types.

    The label column is required too; trips to be predicted carry a zero fare.

    Args:
        df: DataFrame with (at least) the trip columns

    Returns:
        New DataFrame with exactly the trip columns, in schema order

    Raises:
        ValueError: If columns are missing or numeric values are malformed
    """
    missing = [col for col in TRIP_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(
            f"Missing trip columns: {missing}. Columns: {list(df.columns)}"
        )

    typed = df[TRIP_COLUMNS].copy()
    for col in TEXT_COLUMNS:
        typed[col] = typed[col].fillna('').astype(str)
    for col in NUMERIC_COLUMNS + [LABEL_COLUMN]:
        typed[col] = pd.to_numeric(typed[col], errors='raise').astype('float64')

    return typed


def load_trips(
    file_path: str,
    separator: str = ",",
    has_header: bool = True
) -> pd.DataFrame:
    """
    Load a trip CSV file.

    Columns are mapped to the schema by position, whatever the header says.
    Text columns are kept as strings, so a rate code of ``1`` stays ``"1"``.

    Args:
        file_path: Path to the CSV file
        separator: Field delimiter
        has_header: Whether the first row is a header row

    Returns:
        DataFrame with the seven trip columns

    Raises:
        FileNotFoundError: If data file doesn't exist
        ValueError: If the file doesn't match the trip schema
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    raw = pd.read_csv(
        file_path,
        sep=separator,
        header=0 if has_header else None,
        dtype=str
    )

    if raw.shape[1] != len(TRIP_COLUMNS):
        raise ValueError(
            f"Expected {len(TRIP_COLUMNS)} columns, but found {raw.shape[1]}. "
            f"Columns: {list(raw.columns)}"
        )

    raw.columns = TRIP_COLUMNS
    df = validate_schema(raw)
    logger.info(f"Loaded data from {file_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    return df


def trips_to_frame(trips: Iterable[TripRecord]) -> pd.DataFrame:
    """
    Build a typed trip table from in-memory records.

    Args:
        trips: TripRecord instances

    Returns:
        DataFrame with the seven trip columns
    """
    rows = [trip.to_dict() for trip in trips]
    return validate_schema(pd.DataFrame(rows, columns=TRIP_COLUMNS))


def validate_data(df: pd.DataFrame, strict: bool = False) -> Tuple[bool, Dict[str, Any]]:
    """
    Validate data quality constraints for a trip table.

    Checks:
        - No missing values
        - No duplicate rows
        - No negative trip times, distances or fares
        - No empty categorical values

    Args:
        df: DataFrame to validate
        strict: If True, raise errors on validation failure

    Returns:
        Tuple of (is_valid, validation_report)
    """
    report = {
        "total_rows": len(df),
        "total_columns": len(df.columns),
        "column_names": list(df.columns),
        "issues": []
    }

    # Check 1: Missing values
    missing_counts = df.isnull().sum()
    total_missing = int(missing_counts.sum())
    if total_missing > 0:
        missing_pct = (total_missing / (df.shape[0] * df.shape[1])) * 100
        issue = f"Missing values: {total_missing} ({missing_pct:.2f}%)"
        report["issues"].append(issue)
        report["missing_by_column"] = missing_counts[missing_counts > 0].to_dict()
        logger.warning(issue)

    # Check 2: Duplicate rows
    duplicates = int(df.duplicated().sum())
    if duplicates > 0:
        issue = f"Duplicate rows found: {duplicates}"
        report["issues"].append(issue)
        logger.warning(issue)

    # Check 3: Negative values
    for col in ['trip_time', 'trip_distance', LABEL_COLUMN]:
        if col in df.columns:
            negatives = int((df[col] < 0).sum())
            if negatives > 0:
                issue = f"Column '{col}' has {negatives} negative values"
                report["issues"].append(issue)
                logger.warning(issue)

    # Check 4: Empty categories
    for col in TEXT_COLUMNS:
        if col in df.columns:
            empty = int((df[col] == '').sum())
            if empty > 0:
                issue = f"Column '{col}' has {empty} empty values"
                report["issues"].append(issue)
                logger.warning(issue)

    is_valid = len(report["issues"]) == 0
    report["is_valid"] = is_valid

    if strict and not is_valid:
        raise ValueError(f"Data validation failed: {report['issues']}")

    return is_valid, report


def print_data_summary(df: pd.DataFrame) -> None:
    """
    Print a formatted summary of a trip table to console.

    Args:
        df: DataFrame to summarize
    """
    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")
    print("\nColumn Information:")
    print("-" * 40)

    for col in df.columns:
        dtype = df[col].dtype
        non_null = df[col].count()
        print(f"  {col}: {dtype} | {non_null} non-null")

    print("\nCategories:")
    print("-" * 40)
    for col in TEXT_COLUMNS:
        if col in df.columns:
            print(f"  {col}: {sorted(df[col].unique().tolist())}")

    print("\nBasic Statistics:")
    print("-" * 40)
    print(df.describe().round(4).to_string())
    print("=" * 60 + "\n")

"""
Data Preprocessing Module for the ARIMA Inflation Forecasting Engine

This module loads historical annual rate tables and turns them into the plain
numeric series the engine works on.

Functions:
    - load_data: Load CSV/JSON year/rate tables
    - extract_series: Validate a table and return a year-indexed rate series
    - as_float_array: Convert any 1-D numeric input to a finite float64 array
"""

import json
import logging
import pandas as pd
import numpy as np
from pathlib import Path
from typing import Sequence, Union

from arima_forecast.exceptions import DataValidationError


# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def as_float_array(series: Union[Sequence[float], np.ndarray, pd.Series], name: str = "series") -> np.ndarray:
    """
    Convert a 1-D numeric input to a float64 numpy array.

    Accepts lists, tuples, numpy arrays and pandas Series (the index is
    dropped; values are taken in order). An empty input is allowed.

    Raises:
        ValueError: If the input is not one-dimensional or holds NaN/inf values
    """
    values = np.asarray(series.to_numpy() if isinstance(series, pd.Series) else series, dtype=np.float64)

    if values.ndim != 1:
        error_msg = f"{name} must be one-dimensional, got shape {values.shape}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if not np.all(np.isfinite(values)):
        error_msg = f"{name} contains NaN or infinite values"
        logger.error(error_msg)
        raise ValueError(error_msg)

    return values


def load_data(file_path: str) -> pd.DataFrame:
    """
    Load a historical rate table from a CSV or JSON file.

    The format is detected from the file extension. JSON files may hold a list
    of records (``[{"year": 1966, "rate": 2.58}, ...]``) or a column mapping.

    Args:
        file_path (str): Path to the input file (CSV or JSON)

    Returns:
        pd.DataFrame: Loaded table

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file format is not supported (not CSV or JSON)

    Examples:
        >>> data = load_data('data/ethiopia_inflation.csv')
        >>> data.columns.tolist()
        ['year', 'rate']
    """
    file_path = Path(file_path)

    if not file_path.exists():
        error_msg = f"File not found: {file_path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    file_ext = file_path.suffix.lower()

    try:
        if file_ext == ".csv":
            logger.info(f"Loading CSV data from {file_path}")
            data = pd.read_csv(file_path)
        elif file_ext == ".json":
            logger.info(f"Loading JSON data from {file_path}")
            with open(file_path, "r") as f:
                json_data = json.load(f)
            data = pd.DataFrame(json_data)
        else:
            error_msg = f"Unsupported file format: {file_ext}. Only CSV and JSON are supported."
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info(f"Data shape: {data.shape}")
        return data

    except json.JSONDecodeError as e:
        error_msg = f"JSON parsing error in {file_path}: {str(e)}"
        logger.error(error_msg)
        raise
    except pd.errors.ParserError as e:
        error_msg = f"CSV parsing error in {file_path}: {str(e)}"
        logger.error(error_msg)
        raise


def extract_series(
    data: pd.DataFrame, value_column: str = "rate", year_column: str = "year"
) -> pd.Series:
    """
    Validate a year/rate table and return it as a chronological Series.

    The engine assumes one observation per year with no gaps, so this is
    where that assumption is enforced.

    Args:
        data (pd.DataFrame): Table with a year column and a value column
        value_column (str): Column holding the rates (default: 'rate')
        year_column (str): Column holding the years (default: 'year')

    Returns:
        pd.Series: Float rates indexed by integer year, sorted ascending

    Raises:
        DataValidationError: On missing columns, missing or non-numeric rates,
            duplicate years or gaps in the annual index
    """
    for column in (year_column, value_column):
        if column not in data.columns:
            raise DataValidationError(
                f"Missing required column '{column}'. Available: {list(data.columns)}",
                data_shape=data.shape,
            )

    if len(data) == 0:
        raise DataValidationError("Rate table is empty", data_shape=data.shape)

    years = pd.to_numeric(data[year_column], errors="coerce")
    rates = pd.to_numeric(data[value_column], errors="coerce")

    if years.isna().any() or (years % 1 != 0).any():
        raise DataValidationError(f"Column '{year_column}' must hold whole years", data_shape=data.shape)

    if rates.isna().any():
        bad_rows = rates[rates.isna()].index.tolist()
        raise DataValidationError(
            f"Column '{value_column}' has missing or non-numeric values at rows {bad_rows}",
            data_shape=data.shape,
        )

    series = pd.Series(rates.to_numpy(dtype=np.float64), index=years.astype(int).to_numpy(), name=value_column)
    series.index.name = year_column
    series = series.sort_index()

    if series.index.has_duplicates:
        duplicated = sorted(set(int(y) for y in series.index[series.index.duplicated()]))
        raise DataValidationError(f"Duplicate years in rate table: {duplicated}", data_shape=data.shape)

    expected = np.arange(series.index[0], series.index[-1] + 1)
    if len(expected) != len(series):
        missing = sorted(set(int(y) for y in expected) - set(int(y) for y in series.index))
        raise DataValidationError(f"Annual index has gaps: missing years {missing}", data_shape=data.shape)

    logger.info(
        f"Extracted {len(series)} annual observations ({series.index[0]}-{series.index[-1]}), "
        f"mean={series.mean():.4f}, std={series.std():.4f}"
    )
    return series

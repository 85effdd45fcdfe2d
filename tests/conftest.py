"""
Shared fixtures: the bundled 1966-2025 annual inflation history.
"""

import numpy as np
import pandas as pd
import pytest
from pathlib import Path

from arima_forecast.preprocessing import extract_series, load_data


DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "ethiopia_inflation.csv"


@pytest.fixture
def data_path() -> Path:
    return DATA_PATH


@pytest.fixture
def inflation_history() -> pd.Series:
    """60 annual inflation rates indexed by year (1966-2025)."""
    return extract_series(load_data(str(DATA_PATH)))


@pytest.fixture
def inflation_rates(inflation_history: pd.Series) -> np.ndarray:
    return inflation_history.to_numpy()

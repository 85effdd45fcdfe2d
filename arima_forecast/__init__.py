"""
ARIMA Inflation Forecasting Engine - Core Modules

Closed-form ARIMA(p, d, q) fitting, automatic order selection and forecasting
for short annual series such as national inflation rates.

Modules:
    - differencing: Differencing and its inverse
    - linear_solver: Gaussian elimination with partial pivoting
    - estimation: AR (OLS) and MA (iterative residual regression) estimators
    - arima_engine: Model fitting, auto selection, stationarity test
    - forecasting: Forecast projection and the clamped top-level entry point
    - inflation: Cumulative inflation between years from history + forecasts
    - preprocessing: Data loading and validation
    - config_loader: YAML/JSON configuration
    - output_manager: Results export and reporting
"""

from arima_forecast.differencing import difference, undifference
from arima_forecast.linear_solver import solve_linear_system
from arima_forecast.estimation import estimate_ar, estimate_ma, compute_residuals
from arima_forecast.arima_engine import (
    CandidateSummary,
    FittedModel,
    auto_arima,
    fit_arima,
    test_stationarity,
)
from arima_forecast.forecasting import arima_forecast, forecast
from arima_forecast.inflation import build_rate_table, calculate_inflation, summarize_model
from arima_forecast.preprocessing import load_data, extract_series
from arima_forecast.output_manager import export_results, format_results_summary

__version__ = "1.0.0"

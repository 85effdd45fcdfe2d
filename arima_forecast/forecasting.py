"""
Forecasting with fitted ARIMA models.

Functions:
    - forecast: Project a fitted model forward on the original scale
    - arima_forecast: Select or fit a model, forecast, and clamp to the
      inflation range
"""

import logging
import numpy as np
from typing import Any, Dict, Sequence

from arima_forecast.arima_engine import FittedModel, auto_arima, fit_arima
from arima_forecast.differencing import undifference
from arima_forecast.estimation import AR_RIDGE, MA_RIDGE, MA_ITERATIONS
from arima_forecast.preprocessing import as_float_array


# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Annual inflation in percent is clamped to this range
LOWER_BOUND = -20.0
UPPER_BOUND = 100.0


def forecast(model: FittedModel, original_series: Sequence[float], steps: int) -> np.ndarray:
    """
    Forecast `steps` future values of the original series.

    The recursion runs on the differenced scale. Each step combines the AR
    part (intercept plus the last p differenced values, most recent first)
    and the MA part (the last q residuals). Future residuals are taken as 0,
    and any history shorter than the model's lags is padded with 0. The
    forecasts are then integrated back using the last d observations of
    original_series (the last value when d is 0).

    Args:
        model (FittedModel): Output of fit_arima or auto_arima
        original_series: The undifferenced series the model was fitted on
        steps (int): Number of periods to forecast

    Returns:
        np.ndarray: `steps` forecasts on the original scale

    Raises:
        ValueError: If steps is negative
    """
    if steps < 0:
        error_msg = f"steps must be non-negative, got {steps}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    original = as_float_array(original_series, name="original_series")
    history = list(model.diff_series)
    residual_history = list(model.residuals)
    forecasts = []

    for _ in range(steps):
        next_value = model.ar_intercept
        for j, coeff in enumerate(model.ar_coeffs):
            idx = len(history) - 1 - j
            next_value += coeff * (history[idx] if idx >= 0 else 0.0)
        for j, coeff in enumerate(model.ma_coeffs):
            idx = len(residual_history) - 1 - j
            next_value += coeff * (residual_history[idx] if idx >= 0 else 0.0)

        forecasts.append(next_value)
        history.append(next_value)
        residual_history.append(0.0)

    tail = original[-model.d:] if model.d > 0 else original[-1:]
    return undifference(forecasts, tail, model.d)


def arima_forecast(
    series: Sequence[float],
    steps: int,
    auto: bool = True,
    p: int = 2,
    d: int = 1,
    q: int = 1,
    criterion: str = "aic",
    max_p: int = 4,
    max_d: int = 2,
    max_q: int = 3,
    lower_bound: float = LOWER_BOUND,
    upper_bound: float = UPPER_BOUND,
    ar_ridge: float = AR_RIDGE,
    ma_ridge: float = MA_RIDGE,
    ma_iterations: int = MA_ITERATIONS,
) -> Dict[str, Any]:
    """
    Forecast an annual inflation series.

    With auto=True the order is selected by auto_arima on the given
    criterion; otherwise ARIMA(p, d, q) is fitted directly. Every forecast is
    clamped to [lower_bound, upper_bound], a sanity range for annual
    inflation in percent.

    Args:
        series: Historical values, oldest first
        steps (int): Number of future periods
        auto (bool): Select the order automatically (default: True)
        p, d, q (int): Fixed order used when auto is False
        criterion (str): 'aic' or 'bic' for auto selection
        max_p, max_d, max_q (int): Grid bounds for auto selection
        lower_bound, upper_bound (float): Forecast clamp range
        ar_ridge, ma_ridge, ma_iterations: Estimation settings for every fit

    Returns:
        dict: {'predictions': np.ndarray of length steps, 'model': FittedModel}

    Examples:
        >>> result = arima_forecast(rates, 25, criterion='aic')
        >>> result['model'].order, result['predictions'][:3]
    """
    if lower_bound >= upper_bound:
        raise ValueError(f"lower_bound ({lower_bound}) must be below upper_bound ({upper_bound})")

    fit_options = {"ar_ridge": ar_ridge, "ma_ridge": ma_ridge, "ma_iterations": ma_iterations}

    if auto:
        model = auto_arima(series, max_p=max_p, max_d=max_d, max_q=max_q, criterion=criterion, **fit_options)
    else:
        model = fit_arima(series, p, d, q, **fit_options)
        logger.info(f"Fitted fixed ARIMA{model.order}: AIC={model.aic:.4f}, BIC={model.bic:.4f}")

    raw = forecast(model, series, steps)
    predictions = np.clip(raw, lower_bound, upper_bound)

    clamped = int(np.sum(raw != predictions))
    if clamped:
        logger.warning(f"{clamped} of {steps} forecasts clamped to [{lower_bound}, {upper_bound}]")

    logger.info(f"ARIMA{model.order} forecast generated: {steps} period(s)")

    return {
        "predictions": predictions,
        "model": model,
    }

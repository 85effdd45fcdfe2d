"""
Inflation Calculator

Combines historical annual inflation rates with ARIMA forecasts and compounds
them between two years: the value of an amount adjusted for inflation, the
cumulative and average annual rates, and the purchasing power of the amount.

Functions:
    - build_rate_table: Join historical rates and forecasts into one table
    - calculate_inflation: Compound rates between a start and an end year
    - summarize_model: Display-ready description of a fitted model
"""

import logging
import math
import pandas as pd
import numpy as np
from typing import Any, Dict, Sequence

from arima_forecast.arima_engine import FittedModel


logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    # 2020.5 -> 2021, unlike round(), which rounds halves to even
    return int(math.floor(value + 0.5))


def build_rate_table(history: pd.Series, predictions: Sequence[float]) -> pd.DataFrame:
    """
    Append forecasts to a year-indexed history of rates.

    Predictions are assigned to the years following the last historical year
    and rounded to 2 decimals.

    Args:
        history (pd.Series): Historical rates indexed by year
        predictions: Forecast rates for the following years

    Returns:
        pd.DataFrame: Indexed by year with columns 'rate' and 'predicted'
    """
    if len(history) == 0:
        raise ValueError("history must contain at least one year")

    last_year = int(history.index[-1])
    predictions = np.round(np.asarray(predictions, dtype=np.float64), 2)

    historical = pd.DataFrame({"rate": history.to_numpy(dtype=np.float64), "predicted": False},
                              index=history.index.astype(int))
    predicted = pd.DataFrame({"rate": predictions, "predicted": True},
                             index=np.arange(last_year + 1, last_year + 1 + len(predictions)))

    table = pd.concat([historical, predicted])
    table["predicted"] = table["predicted"].astype(bool)
    table.index.name = "year"
    return table


def calculate_inflation(
    rate_table: pd.DataFrame, start_year: float, end_year: float, amount: float
) -> Dict[str, Any]:
    """
    Compound annual inflation between two years.

    Years are rounded half up, then start_year is clamped to the historical range and
    end_year to the full range of the table (history plus forecasts). The
    rates of years start_year + 1 through end_year are compounded as
    prod(1 + rate / 100).

    Args:
        rate_table (pd.DataFrame): Output of build_rate_table
        start_year, end_year: Years to compound between
        amount (float): Amount of money in start_year terms

    Returns:
        dict: start_year, end_year, amount, adjusted_value, cumulative_rate,
            avg_annual_rate, purchasing_power, yearly_breakdown (list of dicts
            with year, rate, cumulative, predicted) and is_predicted

    Raises:
        ValueError: If end_year is not after start_year once clamped

    Examples:
        >>> result = calculate_inflation(table, 2020, 2025, 1000)
        >>> round(result['adjusted_value'], 2)
    """
    first_year = int(rate_table.index.min())
    is_historical = ~rate_table["predicted"].astype(bool).to_numpy()
    last_historical_year = int(rate_table.index[is_historical].max())
    last_year = int(rate_table.index.max())

    start = max(first_year, min(last_historical_year, _round_half_up(start_year)))
    end = max(first_year, min(last_year, _round_half_up(end_year)))

    if start >= end:
        raise ValueError("End year must be after start year")

    multiplier = 1.0
    breakdown = []
    for year in range(start + 1, end + 1):
        if year not in rate_table.index:
            continue
        rate = float(rate_table.at[year, "rate"])
        multiplier *= 1 + rate / 100
        breakdown.append({
            "year": year,
            "rate": rate,
            "cumulative": (multiplier - 1) * 100,
            "predicted": year > last_historical_year,
        })

    avg_annual_rate = (multiplier ** (1 / len(breakdown)) - 1) * 100 if breakdown else 0.0

    logger.info(f"Inflation {start}-{end}: multiplier={multiplier:.6f} over {len(breakdown)} year(s)")

    return {
        "start_year": start,
        "end_year": end,
        "amount": amount,
        "adjusted_value": amount * multiplier,
        "cumulative_rate": (multiplier - 1) * 100,
        "avg_annual_rate": avg_annual_rate,
        "purchasing_power": amount / multiplier,
        "yearly_breakdown": breakdown,
        "is_predicted": end > last_historical_year,
    }


def summarize_model(model: FittedModel) -> Dict[str, Any]:
    """Rounded, display-ready description of a fitted model."""
    return {
        "order": f"({model.p}, {model.d}, {model.q})",
        "p": model.p,
        "d": model.d,
        "q": model.q,
        "criterion": model.criterion,
        "rmse": round(model.rmse, 2),
        "aic": round(model.aic, 2),
        "bic": round(model.bic, 2),
        "ar_coeffs": [round(c, 4) for c in model.ar_coeffs],
        "ma_coeffs": [round(c, 4) for c in model.ma_coeffs],
        "top_candidates": [
            {"order": f"({c.p}, {c.d}, {c.q})", "aic": round(c.aic, 2), "bic": round(c.bic, 2), "rmse": round(c.rmse, 2)}
            for c in model.top_candidates
        ],
    }

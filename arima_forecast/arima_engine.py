"""
ARIMA Engine Module for the Inflation Forecasting System

This module fits ARIMA(p, d, q) models with closed-form estimators, selects
the order automatically by an information criterion, and tests stationarity.

Functions:
    - test_stationarity: Perform Augmented Dickey-Fuller (ADF) test
    - fit_arima: Fit ARIMA model with specified (p, d, q) orders
    - auto_arima: Grid-search (p, d, q) and keep the lowest AIC/BIC model
"""

import logging
import math
import pandas as pd
import numpy as np
from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, Optional, Sequence, Tuple
from statsmodels.tsa.stattools import adfuller

from arima_forecast.differencing import difference
from arima_forecast.estimation import AR_RIDGE, MA_RIDGE, MA_ITERATIONS, estimate_ar, estimate_ma
from arima_forecast.preprocessing import as_float_array


# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

CRITERIA = ("aic", "bic")
FALLBACK_ORDER = (1, 1, 0)


@dataclass(frozen=True)
class CandidateSummary:
    """Diagnostics of one grid-search candidate."""

    p: int
    d: int
    q: int
    aic: float
    bic: float
    rmse: float

    @property
    def order(self) -> Tuple[int, int, int]:
        return (self.p, self.d, self.q)


@dataclass(frozen=True)
class FittedModel:
    """
    A fitted ARIMA(p, d, q) model.

    Attributes:
        p, d, q (int): AR order, differencing order, MA order
        ar_coeffs (tuple): p AR coefficients, lag 1 first
        ar_intercept (float): Constant of the AR equation
        ma_coeffs (tuple): q MA coefficients, each within [-0.95, 0.95]
        residuals (tuple): One residual per differenced observation; the
            first max(p, q) entries are warm-up zeros
        diff_series (tuple): The differenced series the model was fitted on
        rmse, mse, aic, bic (float): Diagnostics over the post-warm-up
            residuals; all +inf when the fit was infeasible
        criterion (str, optional): 'aic' or 'bic' when chosen by auto_arima
        top_candidates (tuple): Best-first CandidateSummary entries from
            auto_arima (at most 5)
    """

    p: int
    d: int
    q: int
    ar_coeffs: Tuple[float, ...]
    ar_intercept: float
    ma_coeffs: Tuple[float, ...]
    residuals: Tuple[float, ...]
    diff_series: Tuple[float, ...]
    rmse: float
    mse: float
    aic: float
    bic: float
    criterion: Optional[str] = None
    top_candidates: Tuple[CandidateSummary, ...] = field(default_factory=tuple)

    @property
    def order(self) -> Tuple[int, int, int]:
        return (self.p, self.d, self.q)

    @property
    def is_feasible(self) -> bool:
        return math.isfinite(self.rmse)

    def score(self, criterion: str = "aic") -> float:
        """Return the model's AIC or BIC."""
        if criterion not in CRITERIA:
            raise ValueError(f"criterion must be one of {CRITERIA}, got '{criterion}'")
        return self.bic if criterion == "bic" else self.aic

    def summary(self) -> CandidateSummary:
        return CandidateSummary(self.p, self.d, self.q, self.aic, self.bic, self.rmse)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python representation suitable for JSON export."""
        data = asdict(self)
        for key in ("ar_coeffs", "ma_coeffs", "residuals", "diff_series"):
            data[key] = list(data[key])
        data["order"] = list(self.order)
        data["top_candidates"] = [asdict(c) for c in self.top_candidates]
        return data


def _validate_order(p: int, d: int, q: int) -> None:
    for name, value in (("p", p), ("d", d), ("q", q)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 0:
            error_msg = f"Invalid ARIMA order ({p}, {d}, {q}): {name} must be a non-negative integer"
            logger.error(error_msg)
            raise ValueError(error_msg)


def test_stationarity(series: pd.Series) -> Tuple[bool, float]:
    """
    Perform Augmented Dickey-Fuller (ADF) test on a time series.

    The null hypothesis (H0) is that the series has a unit root. If the
    p-value is below 0.05, H0 is rejected and the series is considered
    stationary.

    Args:
        series (pd.Series or array-like): Input time series to test

    Returns:
        Tuple[bool, float]: (is_stationary, p_value)

    Raises:
        ValueError: If the input series is empty, constant or contains NaN values
    """
    series = pd.Series(series, dtype=np.float64)

    if len(series) == 0:
        error_msg = "Series is empty"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if series.isna().any():
        error_msg = "Series contains NaN values"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if series.nunique() == 1:
        error_msg = "Series is constant"
        logger.error(error_msg)
        raise ValueError(error_msg)

    try:
        logger.info(f"Performing ADF test on series of length {len(series)}")

        adf_result = adfuller(series, autolag="AIC")
        p_value = float(adf_result[1])
        is_stationary = bool(p_value < 0.05)

        logger.info(
            f"ADF Test Results - Test Statistic: {adf_result[0]:.6f}, "
            f"p-value: {p_value:.6f}, Stationary: {is_stationary}"
        )
        return is_stationary, p_value

    except Exception as e:
        error_msg = f"ADF test failed: {str(e)}"
        logger.error(error_msg)
        raise


# Not a pytest test despite the name
test_stationarity.__test__ = False


def fit_arima(
    series: Sequence[float],
    p: int = 2,
    d: int = 1,
    q: int = 1,
    ar_ridge: float = AR_RIDGE,
    ma_ridge: float = MA_RIDGE,
    ma_iterations: int = MA_ITERATIONS,
) -> FittedModel:
    """
    Fit an ARIMA(p, d, q) model to a time series.

    Differences the series d times, estimates the AR part by OLS, estimates
    the MA part from the AR residuals, then scores the fit over the residuals
    after the max(p, q) warm-up:

        mse = sse / n,  k = p + q + 2
        aic = n * ln(mse) + 2k
        bic = n * ln(mse) + k * ln(n)

    Too little data never raises: the model comes back with zero
    coefficients where nothing could be estimated and +inf diagnostics.

    Args:
        series: Original (undifferenced) time series
        p (int): AR order (default: 2)
        d (int): Differencing order (default: 1)
        q (int): MA order (default: 1)
        ar_ridge, ma_ridge (float): Ridge terms of the two estimators
        ma_iterations (int): MA refinement rounds

    Returns:
        FittedModel: Fitted parameters, residuals and diagnostics

    Raises:
        ValueError: If an order is negative or the series holds NaN values

    Examples:
        >>> model = fit_arima([2.58, -2.81, 0.60, 2.25, 1.18, 0.58, 4.09], 1, 1, 0)
        >>> model.order
        (1, 1, 0)
        >>> fit_arima([1, 2], 5, 0, 5).aic
        inf
    """
    _validate_order(p, d, q)
    p, d, q = int(p), int(d), int(q)

    values = as_float_array(series)
    diff_series = difference(values, d)

    ar_fit = estimate_ar(diff_series, p, ridge=ar_ridge)
    ma_fit = estimate_ma(
        diff_series, p, ar_fit.coefficients, ar_fit.intercept, q,
        ridge=ma_ridge, iterations=ma_iterations,
    )

    fitted_residuals = ma_fit.residuals[max(p, q):]
    n = len(fitted_residuals)

    if n == 0:
        logger.debug(f"ARIMA({p}, {d}, {q}) infeasible: no residuals after warm-up")
        rmse = mse = aic = bic = math.inf
    else:
        sse = float(np.sum(fitted_residuals ** 2))
        mse = sse / n
        rmse = math.sqrt(mse)

        # p AR + q MA + intercept + variance
        k = p + q + 2
        log_mse = math.log(mse) if mse > 0 else -math.inf
        aic = n * log_mse + 2 * k
        bic = n * log_mse + k * math.log(n)

    logger.debug(f"ARIMA({p}, {d}, {q}) fitted on {len(diff_series)} points: AIC={aic:.4f}, BIC={bic:.4f}")

    return FittedModel(
        p=p,
        d=d,
        q=q,
        ar_coeffs=tuple(float(c) for c in ar_fit.coefficients),
        ar_intercept=float(ar_fit.intercept),
        ma_coeffs=tuple(float(c) for c in ma_fit.coefficients),
        residuals=tuple(float(r) for r in ma_fit.residuals),
        diff_series=tuple(float(v) for v in diff_series),
        rmse=rmse,
        mse=mse,
        aic=aic,
        bic=bic,
    )


def auto_arima(
    series: Sequence[float],
    max_p: int = 4,
    max_d: int = 2,
    max_q: int = 3,
    criterion: str = "aic",
    min_observations: int = 10,
    top_n: int = 5,
    ar_ridge: float = AR_RIDGE,
    ma_ridge: float = MA_RIDGE,
    ma_iterations: int = MA_ITERATIONS,
) -> FittedModel:
    """
    Select ARIMA orders by grid search over (p, d, q) on AIC or BIC.

    The grid runs d ascending (outer), then p, then q. A differencing order
    is skipped when it leaves fewer than min_observations points; the
    no-op model (0, 0, 0) and orders with len(diff) <= p + q + 2 are skipped
    too. Every remaining candidate is fitted and, if its score is finite,
    recorded. The first candidate reaching the lowest score wins ties.

    A candidate whose fit raises is logged and skipped. When no candidate
    produces a finite score, ARIMA(1, 1, 0) is fitted and returned instead.

    Args:
        series: Original (undifferenced) time series
        max_p (int): Maximum AR order (default: 4)
        max_d (int): Maximum differencing order (default: 2)
        max_q (int): Maximum MA order (default: 3)
        criterion (str): 'aic' or 'bic' (default: 'aic')
        min_observations (int): Smallest differenced length worth fitting
        top_n (int): Number of best candidates to attach (default: 5)
        ar_ridge, ma_ridge, ma_iterations: Passed through to fit_arima

    Returns:
        FittedModel: Best model with criterion and top_candidates set

    Raises:
        ValueError: If criterion is unknown or a bound is negative

    Examples:
        >>> model = auto_arima(rates, criterion='bic')
        >>> model.order, [c.order for c in model.top_candidates]
    """
    if criterion not in CRITERIA:
        error_msg = f"criterion must be 'aic' or 'bic', got '{criterion}'"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if max_p < 0 or max_d < 0 or max_q < 0:
        error_msg = "max_p, max_d, max_q must be non-negative"
        logger.error(error_msg)
        raise ValueError(error_msg)

    values = as_float_array(series)
    fit_options = {"ar_ridge": ar_ridge, "ma_ridge": ma_ridge, "ma_iterations": ma_iterations}

    logger.info(
        f"Starting auto-ARIMA search. Max P: {max_p}, Max D: {max_d}, Max Q: {max_q}, "
        f"Criterion: {criterion.upper()}, Series length: {len(values)}"
    )

    best_model = None
    best_score = math.inf
    candidates = []

    for d in range(max_d + 1):
        diff_series = difference(values, d)
        if len(diff_series) < min_observations:
            logger.debug(f"d={d} skipped: {len(diff_series)} points after differencing")
            continue

        for p in range(max_p + 1):
            for q in range(max_q + 1):
                if p == 0 and q == 0 and d == 0:
                    continue
                if len(diff_series) <= p + q + 2:
                    continue

                try:
                    model = fit_arima(values, p, d, q, **fit_options)
                except Exception as e:
                    logger.debug(f"Order ({p}, {d}, {q}) failed to fit: {str(e)}")
                    continue

                score = model.score(criterion)
                logger.debug(f"Order ({p}, {d}, {q}): {criterion.upper()} = {score:.4f}")

                if math.isfinite(score):
                    candidates.append(model.summary())
                    if score < best_score:
                        best_score = score
                        best_model = model

    candidates.sort(key=lambda c: c.bic if criterion == "bic" else c.aic)

    if best_model is None:
        logger.warning(f"No candidate produced a finite {criterion.upper()}; falling back to ARIMA{FALLBACK_ORDER}")
        best_model = fit_arima(values, *FALLBACK_ORDER, **fit_options)
    else:
        logger.info(
            f"Optimal ARIMA order found: {best_model.order} with {criterion.upper()}: {best_score:.4f} "
            f"({len(candidates)} candidates evaluated)"
        )

    return replace(best_model, criterion=criterion, top_candidates=tuple(candidates[:top_n]))

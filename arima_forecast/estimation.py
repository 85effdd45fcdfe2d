"""
Parameter Estimation for ARIMA(p, d, q) Models

Estimates the AR part by ridge-stabilised ordinary least squares and the MA
part by a fixed number of residual-regression refinements. Both reduce to
normal equations solved with solve_linear_system, and both operate on an
already differenced (stationary) series.

Functions:
    - estimate_ar: Fit AR coefficients and intercept via OLS
    - estimate_ma: Fit MA coefficients from lagged residuals
    - compute_residuals: One-step-ahead residuals for given AR/MA parameters
"""

import logging
import numpy as np
from typing import NamedTuple, Sequence

from arima_forecast.linear_solver import solve_linear_system
from arima_forecast.preprocessing import as_float_array


# Configure logging
logger = logging.getLogger(__name__)

AR_RIDGE = 1e-8
MA_RIDGE = 1e-6
MA_ITERATIONS = 3
# MA coefficients are clamped to [-MA_BOUND, MA_BOUND] (invertibility)
MA_BOUND = 0.95


class ARFit(NamedTuple):
    coefficients: np.ndarray
    intercept: float


class MAFit(NamedTuple):
    coefficients: np.ndarray
    residuals: np.ndarray


def _solve_normal_equations(X: np.ndarray, y: np.ndarray, ridge: float) -> np.ndarray:
    """Accumulate X'X and X'y one observation at a time, add ridge, solve."""
    cols = X.shape[1]
    xtx = np.zeros((cols, cols))
    xty = np.zeros(cols)

    for row, target in zip(X, y):
        xtx += np.outer(row, row)
        xty += row * target

    xtx[np.diag_indices(cols)] += ridge
    return solve_linear_system(xtx, xty)


def _lag_matrix(values: np.ndarray, lags: int) -> np.ndarray:
    """Columns [v[i-1], ..., v[i-lags]] for i in range(lags, len(values))."""
    n = len(values)
    return np.column_stack([values[lags - j:n - j] for j in range(1, lags + 1)])


def estimate_ar(series: Sequence[float], p: int, ridge: float = AR_RIDGE) -> ARFit:
    """
    Estimate AR(p) coefficients and intercept by ordinary least squares.

    Regresses x[i] on [1, x[i-1], ..., x[i-p]] for every i from p to the end
    of the series. A small ridge term is added to the diagonal of X'X to
    keep the system well conditioned.

    Args:
        series: Stationary (already differenced) series
        p (int): AR order
        ridge (float): Diagonal regularisation added to X'X (default: 1e-8)

    Returns:
        ARFit: (coefficients of length p, intercept). When the series has no
            more than p observations the fit is skipped and zeros are returned.

    Examples:
        >>> fit = estimate_ar([1.0, 2.0, 3.0, 4.0, 5.0], p=0)
        >>> round(fit.intercept, 6)
        3.0
    """
    x = as_float_array(series)

    if len(x) <= p:
        logger.debug(f"AR({p}) skipped: only {len(x)} observations")
        return ARFit(np.zeros(p), 0.0)

    rows = len(x) - p
    design = np.ones((rows, 1))
    if p > 0:
        design = np.column_stack([design, _lag_matrix(x, p)])

    beta = _solve_normal_equations(design, x[p:], ridge)
    return ARFit(beta[1:], float(beta[0]))


def compute_residuals(
    series: Sequence[float],
    p: int,
    ar_coeffs: Sequence[float],
    ar_intercept: float,
    ma_coeffs: Sequence[float],
    q: int,
) -> np.ndarray:
    """
    Compute one-step-ahead residuals for fixed AR and MA parameters.

    For each i from max(p, q) onward the prediction is

        intercept + sum(ar[j] * x[i-1-j]) + sum(ma[j] * e[i-1-j])

    using the residuals already computed. Entries before max(p, q) are the
    warm-up region and stay 0.
    """
    x = as_float_array(series)
    ar = np.asarray(ar_coeffs, dtype=np.float64)
    ma = np.asarray(ma_coeffs, dtype=np.float64)
    residuals = np.zeros(len(x))

    for i in range(max(p, q), len(x)):
        predicted = ar_intercept
        for j in range(p):
            predicted += ar[j] * x[i - 1 - j]
        for j in range(q):
            predicted += ma[j] * residuals[i - 1 - j]
        residuals[i] = x[i] - predicted

    return residuals


def estimate_ma(
    series: Sequence[float],
    p: int,
    ar_coeffs: Sequence[float],
    ar_intercept: float,
    q: int,
    ridge: float = MA_RIDGE,
    iterations: int = MA_ITERATIONS,
    bound: float = MA_BOUND,
) -> MAFit:
    """
    Estimate MA(q) coefficients by iterative regression on lagged residuals.

    Starting from zero MA coefficients, each round regresses the current
    residuals e[i] on [e[i-1], ..., e[i-q]], clamps the solution to
    [-bound, bound] and recomputes the residuals with the new coefficients.
    The number of rounds is fixed (no tolerance-based stop), so the result is
    deterministic but not guaranteed to be a converged optimum.

    Args:
        series: Stationary (already differenced) series
        p (int): AR order used for the residuals
        ar_coeffs: Fitted AR coefficients
        ar_intercept (float): Fitted AR intercept
        q (int): MA order
        ridge (float): Diagonal regularisation (default: 1e-6)
        iterations (int): Refinement rounds (default: 3)
        bound (float): Clamp applied to every coefficient (default: 0.95)

    Returns:
        MAFit: (MA coefficients of length q, residuals of the final fit)
    """
    if q == 0:
        residuals = compute_residuals(series, p, ar_coeffs, ar_intercept, [], 0)
        return MAFit(np.zeros(0), residuals)

    ma_coeffs = np.zeros(q)
    residuals = compute_residuals(series, p, ar_coeffs, ar_intercept, ma_coeffs, q)

    for iteration in range(iterations):
        if len(residuals) - q <= 0:
            logger.debug(f"MA({q}) refinement stopped: {len(residuals)} residuals")
            break

        solution = _solve_normal_equations(_lag_matrix(residuals, q), residuals[q:], ridge)
        ma_coeffs = np.clip(solution, -bound, bound)

        residuals = compute_residuals(series, p, ar_coeffs, ar_intercept, ma_coeffs, q)
        logger.debug(f"MA({q}) iteration {iteration + 1}: coefficients={np.round(ma_coeffs, 4).tolist()}")

    return MAFit(ma_coeffs, residuals)

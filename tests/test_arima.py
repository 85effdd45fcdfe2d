"""
Unit Tests for ARIMA Engine Module

This test module covers the ARIMA engine: stationarity testing, model fitting
with closed-form estimators, and automatic order selection.

Test Coverage:
- ADF test for non-stationary data (random walk)
- ADF test for stationary data (white noise)
- ARIMA model fitting and diagnostics
- Auto-ARIMA order selection, ranking and fallback
"""

import math
import dataclasses

import pytest
import pandas as pd
import numpy as np
from typing import Tuple

from arima_forecast import arima_engine
from arima_forecast.arima_engine import (
    FALLBACK_ORDER,
    FittedModel,
    auto_arima,
    fit_arima,
    test_stationarity,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def non_stationary_series() -> pd.Series:
    """
    Generate a non-stationary time series (random walk).

    Each value is the previous value plus a random shock, so the ADF test
    should not reject the unit root (p-value >= 0.05).

    Returns:
        pd.Series: Random walk series of length 200
    """
    np.random.seed(42)
    random_walk = np.cumsum(np.random.randn(200))
    return pd.Series(random_walk, name="random_walk")


@pytest.fixture
def stationary_series() -> pd.Series:
    """
    Generate a stationary time series (white noise).

    Returns:
        pd.Series: White noise series of length 200
    """
    np.random.seed(42)
    return pd.Series(np.random.randn(200), name="white_noise")


# ============================================================================
# TEST 1: ADF STATIONARITY TEST
# ============================================================================

class TestADFStationarity:
    """
    Test suite for the ADF stationarity diagnostic.
    """

    def test_adf_stationarity_non_stationary(self, non_stationary_series: pd.Series):
        """
        A random walk should NOT be stationary (p-value >= 0.05).
        """
        is_stationary, p_value = test_stationarity(non_stationary_series)

        assert is_stationary == False, \
            f"Random walk should be non-stationary, got is_stationary={is_stationary}"
        assert p_value >= 0.05, \
            f"Non-stationary series should have p-value >= 0.05, got {p_value:.6f}"

    def test_adf_stationarity_stationary(self, stationary_series: pd.Series):
        """
        White noise should be stationary (p-value < 0.05).
        """
        is_stationary, p_value = test_stationarity(stationary_series)

        assert is_stationary == True, \
            f"White noise should be stationary, got is_stationary={is_stationary}"
        assert p_value < 0.05, \
            f"Stationary series should have p-value < 0.05, got {p_value:.6f}"

    def test_adf_returns_tuple(self, stationary_series: pd.Series):
        result = test_stationarity(stationary_series)

        assert isinstance(result, tuple), \
            f"Result should be tuple, got {type(result)}"
        assert len(result) == 2
        assert isinstance(result[0], bool), \
            f"First element should be bool, got {type(result[0])}"
        assert isinstance(result[1], float), \
            f"Second element should be float, got {type(result[1])}"
        assert 0 <= result[1] <= 1, \
            f"P-value should be between 0 and 1, got {result[1]}"

    def test_adf_accepts_plain_array(self, stationary_series: pd.Series):
        is_stationary, _ = test_stationarity(stationary_series.to_numpy())
        assert is_stationary


# ============================================================================
# TEST 2: ARIMA MODEL FITTING
# ============================================================================

class TestFitARIMA:
    """
    Test suite for fit_arima().
    """

    def test_fit_arima(self, stationary_series: pd.Series):
        """
        Verify fit_arima returns a FittedModel with consistent shapes.
        """
        model = fit_arima(stationary_series, 2, 1, 1)

        assert isinstance(model, FittedModel)
        assert model.order == (2, 1, 1)
        assert len(model.ar_coeffs) == 2
        assert len(model.ma_coeffs) == 1
        assert len(model.diff_series) == len(stationary_series) - 1
        assert len(model.residuals) == len(model.diff_series), \
            "One residual is expected per differenced observation"

    @pytest.mark.parametrize("order", [(1, 0, 0), (0, 0, 1), (1, 1, 1), (2, 1, 2), (3, 2, 0)])
    def test_diagnostics_follow_information_criteria(self, stationary_series: pd.Series, order: Tuple):
        """
        AIC = n ln(mse) + 2k and BIC = n ln(mse) + k ln(n), with k = p + q + 2
        and n the number of residuals after the warm-up.
        """
        p, d, q = order
        model = fit_arima(stationary_series, p, d, q)

        fitted = np.array(model.residuals[max(p, q):])
        n = len(fitted)
        mse = float(np.mean(fitted ** 2))
        k = p + q + 2

        assert model.mse == pytest.approx(mse)
        assert model.rmse == pytest.approx(math.sqrt(mse))
        assert model.aic == pytest.approx(n * math.log(mse) + 2 * k)
        assert model.bic == pytest.approx(n * math.log(mse) + k * math.log(n))

    def test_warm_up_residuals_are_zero(self, stationary_series: pd.Series):
        model = fit_arima(stationary_series, 3, 0, 2)
        assert model.residuals[:3] == (0.0, 0.0, 0.0)

    def test_ma_coefficients_clamped(self, non_stationary_series: pd.Series):
        model = fit_arima(non_stationary_series, 0, 0, 3)
        assert all(abs(c) <= 0.95 for c in model.ma_coeffs)

    def test_insufficient_data_returns_infeasible_model(self):
        """
        Too few points never raise: coefficients are zero and every
        diagnostic is +inf.
        """
        model = fit_arima([1, 2], 5, 0, 5)

        assert model.ar_coeffs == (0.0,) * 5
        assert model.ma_coeffs == (0.0,) * 5
        assert model.aic == math.inf
        assert model.bic == math.inf
        assert model.rmse == math.inf
        assert not model.is_feasible

    def test_empty_series_is_infeasible(self):
        model = fit_arima([], 1, 1, 0)
        assert not model.is_feasible

    def test_perfect_fit_scores_negative_infinity(self):
        """A constant series fitted with an intercept leaves zero residuals."""
        model = fit_arima([5.0] * 20, 0, 1, 0)

        assert model.rmse == pytest.approx(0.0)
        assert model.aic == -math.inf

    def test_model_is_immutable(self, stationary_series: pd.Series):
        model = fit_arima(stationary_series, 1, 0, 0)

        with pytest.raises(dataclasses.FrozenInstanceError):
            model.p = 3

    def test_to_dict(self, stationary_series: pd.Series):
        data = fit_arima(stationary_series, 1, 1, 1).to_dict()

        assert data["order"] == [1, 1, 1]
        assert isinstance(data["ar_coeffs"], list)
        assert isinstance(data["residuals"], list)
        assert data["criterion"] is None
        assert data["top_candidates"] == []

    def test_score_rejects_unknown_criterion(self, stationary_series: pd.Series):
        model = fit_arima(stationary_series, 1, 0, 0)

        assert model.score("bic") == model.bic
        with pytest.raises(ValueError):
            model.score("hqic")


# ============================================================================
# TEST 3: AUTO-ARIMA ORDER SELECTION
# ============================================================================

class TestAutoARIMA:
    """
    Test suite for auto_arima().
    """

    def test_auto_arima_within_bounds(self, inflation_rates: np.ndarray):
        model = auto_arima(inflation_rates, max_p=4, max_d=2, max_q=3)

        p, d, q = model.order
        assert 0 <= p <= 4
        assert 0 <= d <= 2
        assert 0 <= q <= 3
        assert model.order != (0, 0, 0), "The no-op model is never a candidate"
        assert model.criterion == "aic"

    @pytest.mark.parametrize("criterion", ["aic", "bic"])
    def test_top_candidates_sorted_by_criterion(self, inflation_rates: np.ndarray, criterion: str):
        model = auto_arima(inflation_rates, criterion=criterion)
        scores = [getattr(c, criterion) for c in model.top_candidates]

        assert 1 <= len(model.top_candidates) <= 5
        assert scores == sorted(scores), f"Candidates must be ordered by {criterion.upper()}"
        assert all(math.isfinite(s) for s in scores)

    @pytest.mark.parametrize("criterion", ["aic", "bic"])
    def test_best_model_leads_candidates(self, inflation_rates: np.ndarray, criterion: str):
        model = auto_arima(inflation_rates, criterion=criterion)

        assert model.top_candidates[0].order == model.order
        assert model.top_candidates[0].aic == pytest.approx(model.aic)

    def test_best_model_is_minimum_of_grid(self, stationary_series: pd.Series):
        """Exhaustively refit the (small) grid and compare."""
        series = stationary_series[:60]
        model = auto_arima(series, max_p=2, max_d=1, max_q=1)

        scores = {}
        for d in range(2):
            for p in range(3):
                for q in range(2):
                    if (p, d, q) == (0, 0, 0):
                        continue
                    scores[(p, d, q)] = fit_arima(series, p, d, q).aic

        assert model.aic == pytest.approx(min(scores.values()))

    def test_top_n_limits_candidates(self, inflation_rates: np.ndarray):
        model = auto_arima(inflation_rates, max_p=2, max_d=1, max_q=2, top_n=2)
        assert len(model.top_candidates) == 2

    def test_short_series_falls_back(self):
        """
        Every differencing order leaves fewer than 10 points, so the
        fallback ARIMA(1, 1, 0) is fitted.
        """
        model = auto_arima([2.0, 3.5, 1.0, 4.0, 2.5])

        assert model.order == FALLBACK_ORDER
        assert model.top_candidates == ()
        assert model.criterion == "aic"

    def test_empty_grid_falls_back(self, stationary_series: pd.Series):
        model = auto_arima(stationary_series, max_p=0, max_d=0, max_q=0)

        assert model.order == FALLBACK_ORDER
        assert model.is_feasible

    def test_min_observations_controls_d_skip(self):
        series = np.linspace(1.0, 8.0, 8) + np.array([0.1, -0.2, 0.3, 0.0, -0.1, 0.2, -0.3, 0.1])

        skipped = auto_arima(series, max_p=1, max_d=1, max_q=0)
        searched = auto_arima(series, max_p=1, max_d=1, max_q=0, min_observations=5)

        assert skipped.top_candidates == ()
        assert len(searched.top_candidates) > 0

    def test_invalid_criterion_raises(self, stationary_series: pd.Series):
        with pytest.raises(ValueError):
            auto_arima(stationary_series, criterion="hqic")


# ============================================================================
# TEST 4: AUTO-ARIMA GRID RULES
# ============================================================================

@pytest.fixture
def recorded_fits(monkeypatch):
    """
    Wrap fit_arima inside the engine so a test can see every order the
    grid fits, override scores per order, or make an order fail.

    Yields a dict with 'calls' (list of orders fitted), 'aic' (order ->
    forced AIC) and 'fail' (set of orders that raise).
    """
    real_fit = arima_engine.fit_arima
    state = {"calls": [], "aic": {}, "fail": set()}

    def wrapped(series, p, d, q, **kwargs):
        order = (p, d, q)
        state["calls"].append(order)
        if order in state["fail"]:
            raise RuntimeError(f"forced failure for {order}")
        model = real_fit(series, p, d, q, **kwargs)
        if order in state["aic"]:
            model = dataclasses.replace(model, aic=state["aic"][order])
        return model

    monkeypatch.setattr(arima_engine, "fit_arima", wrapped)
    return state


class TestAutoARIMAGridRules:
    """
    Skip rules, failure handling and tie-breaking of the order search.
    """

    def test_failing_candidate_is_skipped(self, stationary_series: pd.Series, recorded_fits: dict):
        recorded_fits["fail"].add((1, 0, 0))

        model = auto_arima(stationary_series[:60], max_p=2, max_d=1, max_q=1)

        assert (1, 0, 0) in recorded_fits["calls"], "The failing order should have been attempted"
        assert model.is_feasible
        assert model.order != (1, 0, 0)
        assert (1, 0, 0) not in [c.order for c in model.top_candidates]

    def test_equal_scores_keep_first_in_grid_order(self, stationary_series: pd.Series, recorded_fits: dict):
        """
        With every candidate tied, the first order reached in grid order
        (d, then p, then q) wins and the ranking keeps grid order.
        """
        grid = [(p, d, q) for d in range(2) for p in range(3) for q in range(2) if (p, d, q) != (0, 0, 0)]
        recorded_fits["aic"].update({order: 42.0 for order in grid})

        model = auto_arima(stationary_series[:60], max_p=2, max_d=1, max_q=1)

        assert model.order == (0, 0, 1)
        assert [c.order for c in model.top_candidates] == grid[:5]

    def test_two_way_tie_prefers_earlier_order(self, stationary_series: pd.Series, recorded_fits: dict):
        recorded_fits["aic"].update({(2, 0, 1): -1000.0, (1, 1, 0): -1000.0})

        model = auto_arima(stationary_series[:60], max_p=2, max_d=1, max_q=1)

        assert model.order == (2, 0, 1)
        assert [c.order for c in model.top_candidates[:2]] == [(2, 0, 1), (1, 1, 0)]

    def test_orders_with_too_few_points_are_not_fitted(self, stationary_series: pd.Series, recorded_fits: dict):
        """
        12 points: an order is fitted only when len(diff) > p + q + 2, and a
        differencing order is searched only when it leaves 10 or more points.
        """
        series = stationary_series[:12]

        auto_arima(series, max_p=6, max_d=3, max_q=6)
        grid_calls = recorded_fits["calls"]

        assert {d for _, d, _ in grid_calls} <= {0, 1, 2}
        for p, d, q in grid_calls:
            assert 12 - d > p + q + 2, f"ARIMA({p}, {d}, {q}) should have been skipped"
        assert (5, 0, 4) in grid_calls
        assert (5, 0, 5) not in grid_calls
        assert (4, 2, 3) in grid_calls
        assert (4, 2, 4) not in grid_calls


# ============================================================================
# ERROR HANDLING
# ============================================================================

class TestARIMAErrorHandling:
    """
    Test error handling in ARIMA functions.
    """

    def test_test_stationarity_empty_series(self):
        with pytest.raises(ValueError):
            test_stationarity(pd.Series([], dtype=float))

    def test_test_stationarity_nan_values(self):
        with pytest.raises(ValueError):
            test_stationarity(pd.Series([1.0, 2.0, np.nan, 4.0, 5.0]))

    def test_test_stationarity_constant_series(self):
        """First differences of a linear trend are constant; ADF is undefined."""
        with pytest.raises(ValueError, match="constant"):
            test_stationarity(np.diff(np.arange(20.0)))

    def test_auto_arima_negative_bounds(self):
        series = pd.Series(np.random.randn(100))

        with pytest.raises(ValueError):
            auto_arima(series, max_p=-1, max_d=2, max_q=3)

    @pytest.mark.parametrize("order", [(-1, 1, 1), (1, -1, 1), (1, 1, -2)])
    def test_fit_arima_invalid_order(self, order: Tuple):
        series = pd.Series(np.random.randn(100))

        with pytest.raises(ValueError):
            fit_arima(series, *order)

    def test_fit_arima_nan_values(self):
        with pytest.raises(ValueError):
            fit_arima([1.0, np.nan, 3.0, 4.0], 1, 0, 0)


if __name__ == "__main__":
    # Run tests with: pytest tests/test_arima.py -v
    pytest.main([__file__, "-v"])

"""
Differencing for ARIMA(p, d, q) models.

Functions:
    - difference: Apply first-differencing d times
    - undifference: Integrate differenced forecasts back to the original scale
"""

import logging
import numpy as np
from typing import Sequence

from arima_forecast.preprocessing import as_float_array


logger = logging.getLogger(__name__)


def difference(series: Sequence[float], d: int = 1) -> np.ndarray:
    """
    Apply first-differencing (x[i] - x[i-1]) exactly d times.

    Each pass shortens the series by one element; d=0 returns a copy of the
    input unchanged. Differencing a series that is too short simply yields an
    empty array.

    Examples:
        >>> difference([1.0, 4.0, 9.0, 16.0], d=1)
        array([3., 5., 7.])
        >>> difference([1.0, 4.0, 9.0, 16.0], d=2)
        array([2., 2.])
    """
    if d < 0:
        raise ValueError(f"Differencing order must be non-negative, got {d}")

    result = as_float_array(series)
    for _ in range(d):
        result = np.diff(result)
    return result


def undifference(diff_forecasts: Sequence[float], original_tail: Sequence[float], d: int = 1) -> np.ndarray:
    """
    Reverse d passes of differencing on a block of forecasts.

    Integration runs from the deepest differencing level outwards. Each level
    is a cumulative sum anchored on the last known value of that level, which
    is recovered from original_tail (the last d values of the undifferenced
    series, oldest to newest). With d=1 the single anchor is the last
    observed value.

    Args:
        diff_forecasts: Forecasts on the d-times differenced scale
        original_tail: Last d values of the original series
        d (int): Differencing order used when fitting

    Returns:
        np.ndarray: Forecasts on the original scale, same length as the input
    """
    result = as_float_array(diff_forecasts, name="diff_forecasts")
    if d <= 0:
        return result

    tail = as_float_array(original_tail, name="original_tail")[-d:]

    # anchors[k] is the last value of the k-times differenced tail
    anchors = []
    for k in range(d):
        level = difference(tail, k)
        anchors.append(level[-1] if len(level) > 0 else 0.0)

    if len(tail) < d:
        logger.debug(f"Tail of length {len(tail)} is shorter than d={d}; missing anchors default to 0")

    for k in reversed(range(d)):
        result = anchors[k] + np.cumsum(result)
    return result

"""
Numeric primitives shared by every analyzer.

All functions are pure and accept any sequence of floats (lists or numpy
arrays). Empty input is handled explicitly: mean / median / stddev return 0,
mode returns None. Nothing here raises for thin data; only out-of-range
explicit parameters (percentile, window, alpha) are rejected.
"""

from collections import Counter
from typing import Any, Hashable, List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view
from scipy import stats as sp_stats

from ..core.exceptions import InvalidParameterError


class Quartiles(NamedTuple):
    q1: float
    q2: float
    q3: float


class Regression(NamedTuple):
    slope: float
    intercept: float
    r2: float


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(_as_array(values)))


def median(values: Sequence[float]) -> float:
    return percentile(values, 50)


def mode(values: Sequence[Hashable]) -> Optional[Any]:
    """Most frequent value; ties go to the value seen first."""
    if len(values) == 0:
        return None
    counts = Counter(values)
    value, _ = max(counts.items(), key=lambda kv: kv[1])
    return value


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation (divides by N)."""
    if len(values) < 2:
        return 0.0
    return float(np.std(_as_array(values)))


def percentile(values: Sequence[float], p: float) -> float:
    """Linear interpolation between the two bracketing order statistics."""
    if not 0 <= p <= 100:
        raise InvalidParameterError(f"percentile must be within [0, 100], got {p}")
    if len(values) == 0:
        return 0.0
    return float(np.percentile(_as_array(values), p))


def quartiles(values: Sequence[float]) -> Quartiles:
    return Quartiles(
        q1=percentile(values, 25),
        q2=percentile(values, 50),
        q3=percentile(values, 75),
    )


def z_score(value: float, avg: float, std: float) -> float:
    if std == 0:
        return 0.0
    return (value - avg) / std


def skewness(values: Sequence[float]) -> float:
    """Third standardized moment (population); 0 for constant series."""
    arr = _as_array(values)
    if len(arr) < 2 or standard_deviation(arr) == 0:
        return 0.0
    return float(sp_stats.skew(arr))


def linear_regression(values: Sequence[float]) -> Regression:
    """Ordinary least squares of value against index 0..N-1."""
    y = _as_array(values)
    n = len(y)
    if n < 2:
        return Regression(slope=0.0, intercept=float(y[0]) if n else 0.0, r2=0.0)

    x = np.arange(n, dtype=float)
    x_diff = x - (n - 1) / 2
    y_diff = y - y.mean()

    denominator = float(np.sum(x_diff * x_diff))
    slope = float(np.sum(x_diff * y_diff)) / denominator if denominator != 0 else 0.0
    intercept = float(y.mean()) - slope * (n - 1) / 2

    ss_total = float(np.sum(y_diff * y_diff))
    ss_residual = float(np.sum((y - (slope * x + intercept)) ** 2))
    r2 = 1 - ss_residual / ss_total if ss_total != 0 else 0.0

    return Regression(slope=slope, intercept=intercept, r2=r2)


def moving_average(values: Sequence[float], window: int) -> np.ndarray:
    """Simple averages of every sliding window.

    Returns N - window + 1 points; a window longer than the series returns the
    series unchanged.
    """
    if window < 1:
        raise InvalidParameterError(f"window must be >= 1, got {window}")
    arr = _as_array(values)
    if len(arr) < window:
        return arr.copy()
    return sliding_window_view(arr, window).mean(axis=1)


def exponential_smoothing(values: Sequence[float], alpha: float = 0.3) -> np.ndarray:
    """EWMA seeded with the first value."""
    if not 0 < alpha <= 1:
        raise InvalidParameterError(f"alpha must be within (0, 1], got {alpha}")
    arr = _as_array(values)
    if len(arr) == 0:
        return arr.copy()
    smoothed = np.empty_like(arr)
    smoothed[0] = arr[0]
    for i in range(1, len(arr)):
        smoothed[i] = alpha * arr[i] + (1 - alpha) * smoothed[i - 1]
    return smoothed


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r over the first min(len(x), len(y)) pairs."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0
    xs = _as_array(x)[:n]
    ys = _as_array(y)[:n]
    x_diff = xs - xs.mean()
    y_diff = ys - ys.mean()
    denominator = float(np.sqrt(np.sum(x_diff * x_diff) * np.sum(y_diff * y_diff)))
    if denominator == 0:
        return 0.0
    return float(np.sum(x_diff * y_diff)) / denominator


def cramers_v(x: Sequence[str], y: Sequence[str]) -> float:
    """Chi-squared association between two label sequences, in [0, 1]."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0
    table = pd.crosstab(pd.Series(list(x[:n])), pd.Series(list(y[:n])))
    k = min(table.shape)
    if k <= 1:
        return 0.0
    chi2 = sp_stats.chi2_contingency(table.to_numpy(), correction=False)[0]
    return float(np.sqrt(chi2 / (n * (k - 1))))


def top_frequent_values(values: Sequence[Hashable], n: int) -> List[tuple]:
    """(value, count) pairs, most frequent first, ties in first-seen order."""
    return Counter(values).most_common(n)

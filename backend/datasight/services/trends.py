"""
Trend Analysis — direction, strength, seasonality and level shifts.

Each numeric column is treated as an ordered series (row order). Direction
and strength come from a linear fit, seasonality from lag autocorrelation of
the mean-centred series, and level shifts from sliding before/after windows.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..models import TrendDirection, TrendResult, TrendShift
from . import primitives
from .coercion import column_names, ensure_dataset, numeric_values

logger = logging.getLogger("datasight.trends")

MIN_TREND_POINTS = 3
STABLE_SLOPE = 0.01
VOLATILE_CV = 0.5
VOLATILE_MAX_R2 = 0.3

MIN_SEASONAL_POINTS = 12
SEASONAL_PERIODS = (7, 12, 4, 24, 30)
SEASONAL_AUTOCORR = 0.5

MIN_SHIFT_POINTS = 5
SHIFT_THRESHOLD = 2
MAX_SHIFTS = 5


def detect_trend_direction(values: Sequence[float]) -> Tuple[TrendDirection, float]:
    """(direction, strength) of a series; strength is the fit's R² capped at 1."""
    if len(values) < MIN_TREND_POINTS:
        return TrendDirection.STABLE, 0.0

    fit = primitives.linear_regression(values)
    avg = primitives.mean(values)
    normalized_slope = fit.slope / (avg or 1)

    if abs(normalized_slope) < STABLE_SLOPE:
        direction = TrendDirection.STABLE
    elif normalized_slope > 0:
        direction = TrendDirection.INCREASING
    else:
        direction = TrendDirection.DECREASING

    cv = primitives.standard_deviation(values) / abs(avg) if avg != 0 else 0.0
    if cv > VOLATILE_CV and fit.r2 < VOLATILE_MAX_R2:
        direction = TrendDirection.VOLATILE

    return direction, min(abs(fit.r2), 1.0)


def detect_seasonality(values: Sequence[float]) -> Optional[int]:
    """First candidate period whose autocorrelation exceeds 0.5, if any."""
    n = len(values)
    if n < MIN_SEASONAL_POINTS:
        return None

    arr = np.asarray(values, dtype=float)
    centred = arr - arr.mean()
    variance = float(np.sum(centred * centred))

    for period in SEASONAL_PERIODS:
        if n < period * 2:
            continue
        lagged = float(np.sum(centred[period:] * centred[:-period]))
        autocorr = lagged / variance if variance != 0 else 0.0
        if autocorr > SEASONAL_AUTOCORR:
            return period

    return None


def shift_window(n: int) -> int:
    return max(3, n // 10)


def detect_shifts(values: Sequence[float]) -> List[TrendShift]:
    """Top level shifts, largest magnitude first."""
    n = len(values)
    if n < MIN_SHIFT_POINTS:
        return []

    arr = np.asarray(values, dtype=float)
    window = shift_window(n)
    shifts = []

    for i in range(window, n - window):
        before = arr[i - window:i]
        after = arr[i:i + window]
        before_std = primitives.standard_deviation(before)
        if before_std == 0:
            continue

        before_mean = float(before.mean())
        after_mean = float(after.mean())
        magnitude = abs(after_mean - before_mean) / before_std
        if magnitude <= SHIFT_THRESHOLD:
            continue

        direction = "increase" if after_mean > before_mean else "decrease"
        if before_mean != 0:
            pct = f"{(after_mean - before_mean) / abs(before_mean) * 100:.1f}"
        else:
            pct = "N/A"
        shifts.append(TrendShift(
            index=i,
            magnitude=magnitude,
            description=f"Significant {direction} of {pct}% detected at position {i}",
        ))

    shifts.sort(key=lambda s: s.magnitude, reverse=True)
    return shifts[:MAX_SHIFTS]


def analyze_trend(rows: Sequence[Dict[str, Any]], column: str) -> TrendResult:
    """Analyze the trend of a single column."""
    ensure_dataset(rows)
    values = numeric_values(rows, column)

    if len(values) < MIN_TREND_POINTS:
        logger.debug("analyze_trend: '%s' has only %d numeric values", column, len(values))
        return TrendResult(
            column=column,
            direction=TrendDirection.STABLE,
            strength=0.0,
            moving_averages=values.tolist(),
            seasonality=False,
            shifts=[],
            explanation=f"Insufficient data points ({len(values)}) for trend analysis.",
        )

    direction, strength = detect_trend_direction(values)
    period = detect_seasonality(values)
    shifts = detect_shifts(values)
    ma = primitives.moving_average(values, shift_window(len(values)))

    parts = []
    if direction == TrendDirection.INCREASING:
        parts.append(
            f'The "{column}" metric shows an upward trend with {strength * 100:.0f}% confidence.'
        )
    elif direction == TrendDirection.DECREASING:
        parts.append(
            f'The "{column}" metric exhibits a downward trend with {strength * 100:.0f}% confidence.'
        )
    elif direction == TrendDirection.VOLATILE:
        parts.append(
            f'The "{column}" metric displays high volatility without a clear directional trend.'
        )
    else:
        parts.append(f'The "{column}" metric remains relatively stable over the observed period.')

    if period:
        parts.append(f"Seasonal patterns detected with an approximate {period}-period cycle.")
    if shifts:
        parts.append(
            f"{len(shifts)} significant shift(s) identified that may indicate structural changes."
        )

    logger.debug(
        "analyze_trend: '%s' → %s (strength=%.2f, period=%s, shifts=%d)",
        column, direction.value, strength, period, len(shifts),
    )
    return TrendResult(
        column=column,
        direction=direction,
        strength=strength,
        moving_averages=ma.tolist(),
        seasonality=period is not None,
        seasonal_period=period,
        shifts=shifts,
        explanation=" ".join(parts),
    )


def analyze_all_trends(rows: Sequence[Dict[str, Any]]) -> List[TrendResult]:
    """Trend results for every column with enough numeric values."""
    ensure_dataset(rows)
    results = [
        analyze_trend(rows, column)
        for column in column_names(rows)
        if len(numeric_values(rows, column)) >= MIN_TREND_POINTS
    ]
    logger.info("analyze_all_trends: %d columns analyzed", len(results))
    return results


def get_trend_summary(trends: List[TrendResult]) -> str:
    increasing = [t.column for t in trends if t.direction == TrendDirection.INCREASING]
    decreasing = [t.column for t in trends if t.direction == TrendDirection.DECREASING]
    volatile = [t.column for t in trends if t.direction == TrendDirection.VOLATILE]
    seasonal = [t.column for t in trends if t.seasonality]

    parts = []
    if increasing:
        parts.append(f"{len(increasing)} metric(s) showing growth: {', '.join(increasing)}")
    if decreasing:
        parts.append(f"{len(decreasing)} metric(s) declining: {', '.join(decreasing)}")
    if volatile:
        parts.append(f"{len(volatile)} metric(s) with high volatility")
    if seasonal:
        parts.append(f"Seasonal patterns detected in: {', '.join(seasonal)}")

    return ". ".join(parts) or "No significant trends detected."

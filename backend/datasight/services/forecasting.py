"""
Forecasting — short-horizon projections with 95% confidence bands.

Three methods are available; ``auto`` picks one from the series shape:

  R² of a linear fit > 0.7          → linear regression
  else coefficient of variation > 0.3 → exponential smoothing (alpha 0.3)
  else                               → rolling average

Every prediction carries a symmetric confidence interval around its value.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

import numpy as np

from ..core.exceptions import InvalidParameterError
from ..models import ConfidenceInterval, ForecastMethod, ForecastResult, PredictionPoint
from . import primitives
from .coercion import column_names, ensure_dataset, numeric_values

logger = logging.getLogger("datasight.forecasting")

MIN_FORECAST_POINTS = 5
DEFAULT_PERIODS = 7
CONFIDENCE_Z = 1.96
AUTO_LINEAR_R2 = 0.7
AUTO_EXPONENTIAL_CV = 0.3
SMOOTHING_ALPHA = 0.3
SMOOTHING_TAIL = 10
SIGNIFICANT_CHANGE_PCT = 10

METHOD_NAMES = {
    ForecastMethod.LINEAR: "linear regression",
    ForecastMethod.EXPONENTIAL: "exponential smoothing",
    ForecastMethod.ROLLING: "rolling average",
}

_Projection = Tuple[List[PredictionPoint], str]


def _point(period: int, value: float, half_width: float) -> PredictionPoint:
    return PredictionPoint(
        period=period,
        value=value,
        confidence=ConfidenceInterval(lower=value - half_width, upper=value + half_width),
    )


def _relative_change(new: float, base: float) -> float:
    return (new - base) / abs(base) * 100 if base != 0 else 0.0


def linear_forecast(values: np.ndarray, periods: int) -> _Projection:
    fit = primitives.linear_regression(values)
    std = primitives.standard_deviation(values)
    avg = primitives.mean(values)
    n = len(values)
    uncertainty = std * CONFIDENCE_Z * math.sqrt(1 + 1 / n)

    predictions = [
        _point(i, fit.slope * (n + i - 1) + fit.intercept, uncertainty * (1 + i * 0.1))
        for i in range(1, periods + 1)
    ]

    rate = abs(fit.slope / avg) * 100 if avg != 0 else 0.0
    if abs(fit.slope) < 0.01 * avg:
        trend = "stable"
    elif fit.slope > 0:
        trend = f"increasing at {rate:.1f}% per period"
    else:
        trend = f"decreasing at {rate:.1f}% per period"
    return predictions, trend


def exponential_forecast(
    values: np.ndarray, periods: int, alpha: float = SMOOTHING_ALPHA
) -> _Projection:
    smoothed = primitives.exponential_smoothing(values, alpha)
    last_smoothed = float(smoothed[-1])
    std = primitives.standard_deviation(values)
    slope = primitives.linear_regression(smoothed[-min(SMOOTHING_TAIL, len(smoothed)):]).slope

    predictions = [
        _point(i, last_smoothed + slope * i, std * CONFIDENCE_Z * math.sqrt(i))
        for i in range(1, periods + 1)
    ]

    pct_change = _relative_change(predictions[-1].value, last_smoothed)
    if abs(pct_change) < 5:
        trend = "expected to remain stable"
    elif pct_change > 0:
        trend = f"expected to increase by {pct_change:.1f}%"
    else:
        trend = f"expected to decrease by {abs(pct_change):.1f}%"
    return predictions, trend


def rolling_forecast(values: np.ndarray, periods: int) -> _Projection:
    window = max(3, len(values) // 5)
    ma = primitives.moving_average(values, window)
    last_ma = float(ma[-1])
    std = primitives.standard_deviation(values)
    slope = primitives.linear_regression(ma).slope

    predictions = [
        _point(i, last_ma + slope * i, std * 1.5 * math.sqrt(i / window))
        for i in range(1, periods + 1)
    ]

    change_pct = _relative_change(predictions[-1].value, predictions[0].value)
    if abs(change_pct) < 3:
        trend = "stable outlook"
    elif change_pct > 0:
        trend = f"gradual upward trend (+{change_pct:.1f}%)"
    else:
        trend = f"gradual downward trend ({change_pct:.1f}%)"
    return predictions, trend


_PROJECTORS: Dict[ForecastMethod, Callable[[np.ndarray, int], _Projection]] = {
    ForecastMethod.LINEAR: linear_forecast,
    ForecastMethod.EXPONENTIAL: exponential_forecast,
    ForecastMethod.ROLLING: rolling_forecast,
}


def select_method(values: np.ndarray) -> ForecastMethod:
    """Pick a forecasting method from the series shape."""
    if primitives.linear_regression(values).r2 > AUTO_LINEAR_R2:
        return ForecastMethod.LINEAR
    cv = primitives.standard_deviation(values) / (primitives.mean(values) or 1)
    if cv > AUTO_EXPONENTIAL_CV:
        return ForecastMethod.EXPONENTIAL
    return ForecastMethod.ROLLING


def _resolve_method(method: Union[ForecastMethod, str]) -> Union[ForecastMethod, None]:
    if method == "auto":
        return None
    try:
        return ForecastMethod(method)
    except ValueError:
        raise InvalidParameterError(
            f"method must be one of auto, linear, exponential, rolling; got {method!r}"
        ) from None


def forecast(
    rows: Sequence[Dict[str, Any]],
    column: str,
    periods: int = DEFAULT_PERIODS,
    method: Union[ForecastMethod, str] = "auto",
) -> ForecastResult:
    """Forecast ``periods`` future values of a numeric column."""
    ensure_dataset(rows)
    if isinstance(periods, bool) or not isinstance(periods, int) or periods < 1:
        raise InvalidParameterError(f"periods must be a positive integer, got {periods!r}")
    requested = _resolve_method(method)

    values = numeric_values(rows, column)
    if len(values) < MIN_FORECAST_POINTS:
        logger.debug("forecast: '%s' has only %d numeric values", column, len(values))
        return ForecastResult(
            column=column,
            method=ForecastMethod.LINEAR,
            predictions=[],
            trend="insufficient data",
            interpretation=(
                f'Cannot generate forecast for "{column}": insufficient data points '
                f"(minimum {MIN_FORECAST_POINTS} required, found {len(values)})."
            ),
        )

    selected = requested or select_method(values)
    predictions, trend = _PROJECTORS[selected](values, periods)
    change = _relative_change(predictions[-1].value, float(values[-1]))

    logger.debug(
        "forecast: '%s' → %s over %d periods (%s)", column, selected.value, periods, trend,
    )
    return ForecastResult(
        column=column,
        method=selected,
        predictions=predictions,
        trend=trend,
        interpretation=_interpret(column, selected, predictions, trend, change),
    )


def forecast_all(rows: Sequence[Dict[str, Any]], periods: int = DEFAULT_PERIODS) -> List[ForecastResult]:
    """Auto-method forecasts for every column with enough numeric values."""
    ensure_dataset(rows)
    results = [
        forecast(rows, column, periods)
        for column in column_names(rows)
        if len(numeric_values(rows, column)) >= MIN_FORECAST_POINTS
    ]
    logger.info("forecast_all: %d columns forecast over %d periods", len(results), periods)
    return results


def get_forecast_summary(forecasts: List[ForecastResult]) -> str:
    if not forecasts:
        return "No columns have sufficient data for forecasting."

    growing = [f.column for f in forecasts if "increas" in f.trend or "upward" in f.trend]
    declining = [f.column for f in forecasts if "decreas" in f.trend or "downward" in f.trend]
    stable = [f.column for f in forecasts if "stable" in f.trend]

    parts = []
    if growing:
        parts.append(f"{len(growing)} metric(s) forecasted to grow: {', '.join(growing)}")
    if declining:
        parts.append(f"{len(declining)} metric(s) forecasted to decline: {', '.join(declining)}")
    if stable:
        parts.append(f"{len(stable)} metric(s) expected to remain stable")
    return ". ".join(parts) + "."


def _interpret(
    column: str,
    method: ForecastMethod,
    predictions: List[PredictionPoint],
    trend: str,
    change_from_current: float,
) -> str:
    parts = [f'Forecast for "{column}" using {METHOD_NAMES[method]}: {trend}.']

    first, last = predictions[0], predictions[-1]
    parts.append(
        f"Short-term prediction (period 1): {first.value:.2f} "
        f"(95% CI: {first.confidence.lower:.2f} - {first.confidence.upper:.2f})."
    )
    if len(predictions) > 1:
        parts.append(
            f"Extended prediction (period {len(predictions)}): {last.value:.2f} "
            f"(95% CI: {last.confidence.lower:.2f} - {last.confidence.upper:.2f})."
        )

    if abs(change_from_current) > SIGNIFICANT_CHANGE_PCT:
        direction = "increase" if change_from_current > 0 else "decrease"
        parts.append(
            f"This represents a significant projected {direction} of "
            f"{abs(change_from_current):.1f}% from current levels."
        )
    else:
        parts.append(
            "The forecast indicates relatively stable conditions with minimal deviation "
            "from current levels."
        )
    return " ".join(parts)

"""
Statistical Summary — dataset-level narrative statistics.

Built on top of the profiler: key metrics, distribution shape and IQR outlier
counts per numeric column, strong correlations among the leading numeric
columns, and a three-paragraph narrative. All cutoffs are fixed constants.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..models import (
    ColumnProfile,
    ColumnType,
    DatasetProfile,
    DistributionInfo,
    OutlierInfo,
    StatisticalSummary,
)
from . import primitives
from .coercion import ensure_dataset, numeric_values
from .formatting import format_number, format_percent
from .profiler import get_columns_by_type, profile_dataset

logger = logging.getLogger("datasight.statistics")

MIN_DISTRIBUTION_POINTS = 10
MIN_OUTLIER_POINTS = 4
IQR_MULTIPLIER = 1.5
NORMAL_SKEW = 0.5
HEAVY_SKEW = 1.0
BIMODAL_MID_SHARE = 0.3
HIGHLIGHT_COLUMNS = 5
HIGHLIGHT_CORRELATION = 0.7
EXCELLENT_COMPLETENESS = 95
GOOD_COMPLETENESS = 80


def detect_distribution(values: Sequence[float]) -> Tuple[str, str]:
    """Classify a numeric series as (type, description)."""
    if len(values) < MIN_DISTRIBUTION_POINTS:
        return "insufficient_data", "Not enough data points"

    if primitives.standard_deviation(values) == 0:
        return "unknown", "Non-standard distribution pattern"

    skew = primitives.skewness(values)
    if abs(skew) < NORMAL_SKEW:
        return "normal", "Approximately normal distribution"
    if skew > HEAVY_SKEW:
        return "right_skewed", "Right-skewed (positive skew) distribution"
    if skew < -HEAVY_SKEW:
        return "left_skewed", "Left-skewed (negative skew) distribution"

    # Too few values inside the inter-quartile range suggests two clusters
    arr = np.asarray(values, dtype=float)
    q = primitives.quartiles(arr)
    mid_count = int(np.sum((arr >= q.q1) & (arr <= q.q3)))
    if mid_count < len(arr) * BIMODAL_MID_SHARE:
        return "bimodal", "Potentially bimodal distribution"

    return "unknown", "Non-standard distribution pattern"


def find_outliers(values: Sequence[float]) -> Tuple[int, List[float]]:
    """IQR-rule outliers: (count, first 10 outlying values)."""
    if len(values) < MIN_OUTLIER_POINTS:
        return 0, []
    arr = np.asarray(values, dtype=float)
    q = primitives.quartiles(arr)
    iqr = q.q3 - q.q1
    lower = q.q1 - IQR_MULTIPLIER * iqr
    upper = q.q3 + IQR_MULTIPLIER * iqr
    outliers = arr[(arr < lower) | (arr > upper)]
    return len(outliers), outliers[:10].tolist()


def generate_statistical_summary(
    rows: Sequence[Dict[str, Any]],
    profile: Optional[DatasetProfile] = None,
) -> StatisticalSummary:
    """Generate the statistical summary for a dataset."""
    ensure_dataset(rows)
    profile = profile or profile_dataset(rows)
    numeric_columns = get_columns_by_type(profile, ColumnType.NUMERIC)
    series = {col.name: numeric_values(rows, col.name) for col in numeric_columns}
    logger.info(
        "generate_statistical_summary: %d rows, %d numeric columns",
        profile.row_count, len(numeric_columns),
    )

    key_metrics: Dict[str, Union[int, float, str]] = {
        "totalRows": profile.row_count,
        "totalColumns": profile.column_count,
        "completeness": format_percent(profile.completeness),
        "numericColumns": len(numeric_columns),
    }
    for col in numeric_columns[:HIGHLIGHT_COLUMNS]:
        if col.mean is not None:
            key_metrics[f"{col.name}_mean"] = format_number(col.mean)

    distributions = []
    for col in numeric_columns:
        dist_type, description = detect_distribution(series[col.name])
        distributions.append(
            DistributionInfo(column=col.name, type=dist_type, description=description)
        )

    outliers = []
    for col in numeric_columns:
        values = series[col.name]
        count, _ = find_outliers(values)
        if count == 0:
            continue
        pct = count / len(values) * 100
        outliers.append(OutlierInfo(
            column=col.name,
            count=count,
            description=f"{count} outliers detected ({pct:.1f}% of values)",
        ))

    highlights = _correlation_highlights(numeric_columns, series)

    return StatisticalSummary(
        overview=(
            f"Dataset contains {profile.row_count:,} records across {profile.column_count} "
            f"variables with {format_percent(profile.completeness)} data completeness."
        ),
        key_metrics=key_metrics,
        distributions=distributions,
        outliers=outliers,
        correlation_highlights=highlights,
        narrative=_narrative(profile, numeric_columns, outliers, highlights),
    )


def get_column_stats(rows: Sequence[Dict[str, Any]], column: str) -> Dict[str, Union[int, str]]:
    """Quick formatted statistics for one column."""
    ensure_dataset(rows)
    values = numeric_values(rows, column)
    if len(values) == 0:
        return {"error": "No numeric values found"}

    q = primitives.quartiles(values)
    return {
        "count": len(values),
        "min": format_number(float(values.min())),
        "max": format_number(float(values.max())),
        "mean": format_number(primitives.mean(values)),
        "std": format_number(primitives.standard_deviation(values)),
        "q25": format_number(q.q1),
        "median": format_number(q.q2),
        "q75": format_number(q.q3),
    }


# ─── Internal helpers ────────────────────────────────────────────────────


def _correlation_highlights(
    numeric_columns: List[ColumnProfile],
    series: Dict[str, np.ndarray],
) -> List[str]:
    leading = numeric_columns[:HIGHLIGHT_COLUMNS]
    highlights = []
    for i, col1 in enumerate(leading):
        for col2 in leading[i + 1:]:
            r = primitives.pearson_correlation(series[col1.name], series[col2.name])
            if abs(r) > HIGHLIGHT_CORRELATION:
                direction = "positive" if r > 0 else "negative"
                highlights.append(
                    f"Strong {direction} correlation ({r:.2f}) between {col1.name} and {col2.name}"
                )
    return highlights


def _completeness_tier(completeness: float) -> str:
    if completeness >= EXCELLENT_COMPLETENESS:
        return "excellent"
    if completeness >= GOOD_COMPLETENESS:
        return "good"
    return "moderate"


def _narrative(
    profile: DatasetProfile,
    numeric_columns: List[ColumnProfile],
    outliers: List[OutlierInfo],
    highlights: List[str],
) -> str:
    paragraphs = []

    numeric_pct = (
        round(len(numeric_columns) / profile.column_count * 100)
        if profile.column_count > 0 else 0
    )
    paragraphs.append(
        f"This dataset comprises {profile.row_count:,} observations with "
        f"{profile.column_count} features. Approximately {numeric_pct}% of the variables "
        f"are numeric, enabling quantitative analysis. The overall data completeness "
        f"stands at {format_percent(profile.completeness)}, indicating "
        f"{_completeness_tier(profile.completeness)} data quality."
    )

    if numeric_columns:
        top = numeric_columns[0]
        range_text = ""
        if top.min is not None and top.max is not None:
            range_text = f"ranging from {format_number(top.min)} to {format_number(top.max)} "
        mean_text = format_number(top.mean) if top.mean is not None else "N/A"
        if outliers:
            outlier_text = (
                f"Notable outliers were detected in {len(outliers)} column(s), "
                "warranting further investigation."
            )
        else:
            outlier_text = "No significant outliers were detected in the primary variables."
        paragraphs.append(
            "Key numeric variables show diverse distributions. "
            f'The primary metric "{top.name}" {range_text}with a mean of {mean_text}. '
            + outlier_text
        )

    if highlights:
        paragraphs.append(
            f"Analysis reveals {len(highlights)} significant correlation(s) between variables. "
            f"{highlights[0]}. These relationships may indicate underlying patterns or "
            "potential multicollinearity in predictive modeling."
        )
    else:
        paragraphs.append(
            "Initial correlation analysis shows no strong linear relationships between "
            "numeric variables. This suggests either independent features or potential "
            "non-linear relationships that may require further investigation using "
            "advanced techniques."
        )

    return "\n\n".join(paragraphs)

"""
Anomaly Detection — three independent detectors merged per row.

  - Z-score : |z| > 3 against the column's population mean / stddev
  - IQR     : values outside [Q1 - 1.5·IQR, Q3 + 1.5·IQR]
  - Rolling : deviation from the preceding 5-value window > 2 stddev,
              reported as a spike (above) or a drop (below)

Each detector is a separate pure pass over the numeric series and needs at
least 10 numeric values. Candidates are then reduced by row: when several
detectors flag the same row the highest score wins. Row indexes refer to the
position of the row in the dataset.
"""

import logging
from typing import Any, Dict, List, Sequence

import numpy as np

from ..models import (
    Anomaly,
    AnomalyResult,
    AnomalyType,
    ColumnAnomalySummary,
    ExpectedRange,
)
from . import primitives
from .coercion import column_names, ensure_dataset, indexed_numeric_values

logger = logging.getLogger("datasight.anomalies")

MIN_POINTS = 10
ZSCORE_THRESHOLD = 3
ZSCORE_SCALE = 5
IQR_MULTIPLIER = 1.5
ROLLING_WINDOW = 5
ROLLING_THRESHOLD = 2
ROLLING_SCALE = 5
MAX_ANOMALIES = 100
HIGH_SEVERITY = 0.8
MEDIUM_SEVERITY = 0.5


def detect_zscore_anomalies(
    positions: np.ndarray,
    values: np.ndarray,
    column: str,
    threshold: float = ZSCORE_THRESHOLD,
) -> List[Anomaly]:
    if len(values) < MIN_POINTS:
        return []
    avg = primitives.mean(values)
    std = primitives.standard_deviation(values)
    if std == 0:
        return []

    expected = ExpectedRange(min=avg - 2 * std, max=avg + 2 * std)
    anomalies = []
    for row_index, value in zip(positions, values):
        z = primitives.z_score(value, avg, std)
        if abs(z) > threshold:
            anomalies.append(Anomaly(
                row_index=int(row_index),
                column=column,
                value=float(value),
                expected_range=expected,
                score=min(abs(z) / ZSCORE_SCALE, 1.0),
                type=AnomalyType.ZSCORE,
            ))
    return anomalies


def detect_iqr_anomalies(
    positions: np.ndarray,
    values: np.ndarray,
    column: str,
    multiplier: float = IQR_MULTIPLIER,
) -> List[Anomaly]:
    if len(values) < MIN_POINTS:
        return []
    q = primitives.quartiles(values)
    iqr = q.q3 - q.q1
    lower = q.q1 - multiplier * iqr
    upper = q.q3 + multiplier * iqr

    expected = ExpectedRange(min=lower, max=upper)
    anomalies = []
    for row_index, value in zip(positions, values):
        if lower <= value <= upper:
            continue
        distance = lower - value if value < lower else value - upper
        anomalies.append(Anomaly(
            row_index=int(row_index),
            column=column,
            value=float(value),
            expected_range=expected,
            score=min(distance / (iqr or 1), 1.0),
            type=AnomalyType.IQR,
        ))
    return anomalies


def detect_rolling_anomalies(
    positions: np.ndarray,
    values: np.ndarray,
    column: str,
    window: int = ROLLING_WINDOW,
    threshold: float = ROLLING_THRESHOLD,
) -> List[Anomaly]:
    if len(values) < max(MIN_POINTS, window + 2):
        return []

    anomalies = []
    for i in range(window, len(values)):
        preceding = values[i - window:i]
        window_mean = primitives.mean(preceding)
        window_std = primitives.standard_deviation(preceding)
        if window_std == 0:
            continue

        current = float(values[i])
        deviation = abs(current - window_mean) / window_std
        if deviation <= threshold:
            continue

        anomalies.append(Anomaly(
            row_index=int(positions[i]),
            column=column,
            value=current,
            expected_range=ExpectedRange(
                min=window_mean - threshold * window_std,
                max=window_mean + threshold * window_std,
            ),
            score=min(deviation / ROLLING_SCALE, 1.0),
            type=AnomalyType.SPIKE if current > window_mean else AnomalyType.DROP,
        ))
    return anomalies


def merge_anomalies(*candidate_lists: List[Anomaly]) -> List[Anomaly]:
    """Keep the highest-scoring candidate per row, highest scores first."""
    by_row: Dict[int, Anomaly] = {}
    for candidates in candidate_lists:
        for anomaly in candidates:
            existing = by_row.get(anomaly.row_index)
            if existing is None or existing.score < anomaly.score:
                by_row[anomaly.row_index] = anomaly
    return sorted(by_row.values(), key=lambda a: a.score, reverse=True)


def detect_column_anomalies(rows: Sequence[Dict[str, Any]], column: str) -> List[Anomaly]:
    """Anomalies in one column, highest score first."""
    ensure_dataset(rows)
    positions, values = indexed_numeric_values(rows, column)
    if len(values) < MIN_POINTS:
        return []

    merged = merge_anomalies(
        detect_zscore_anomalies(positions, values, column),
        detect_iqr_anomalies(positions, values, column),
        detect_rolling_anomalies(positions, values, column),
    )
    logger.debug("detect_column_anomalies: '%s' → %d anomalies", column, len(merged))
    return merged


def detect_all_anomalies(rows: Sequence[Dict[str, Any]]) -> AnomalyResult:
    """Dataset-level anomaly result across every numeric column."""
    ensure_dataset(rows)
    if not rows:
        return AnomalyResult(
            anomalies=[],
            anomaly_score=0.0,
            affected_columns=[],
            explanation="No data available for anomaly detection.",
        )

    collected: List[Anomaly] = []
    affected: List[str] = []
    for column in column_names(rows):
        found = detect_column_anomalies(rows, column)
        if found:
            collected.extend(found)
            affected.append(column)

    top = sorted(collected, key=lambda a: a.score, reverse=True)[:MAX_ANOMALIES]
    anomaly_score = min(len(top) / len(rows), 1.0) if top else 0.0

    logger.info(
        "detect_all_anomalies: %d anomalies in %d columns (score=%.3f)",
        len(top), len(affected), anomaly_score,
    )
    return AnomalyResult(
        anomalies=top,
        anomaly_score=anomaly_score,
        affected_columns=affected,
        explanation=_explain(top, affected, len(rows)),
    )


def get_column_anomaly_summary(rows: Sequence[Dict[str, Any]], column: str) -> ColumnAnomalySummary:
    anomalies = detect_column_anomalies(rows, column)
    max_score = max((a.score for a in anomalies), default=0.0)

    if max_score > HIGH_SEVERITY:
        severity = "high"
    elif max_score > MEDIUM_SEVERITY:
        severity = "medium"
    elif anomalies:
        severity = "low"
    else:
        severity = "none"

    return ColumnAnomalySummary(
        count=len(anomalies),
        severity=severity,
        top_anomalies=anomalies[:5],
    )


def _explain(anomalies: List[Anomaly], affected: List[str], total_rows: int) -> str:
    if not anomalies:
        return (
            "No significant anomalies detected in the dataset. Data values fall within "
            "expected ranges across all analyzed columns."
        )

    parts = []
    pct = len(anomalies) / total_rows * 100
    parts.append(
        f"Detected {len(anomalies)} anomalous data point(s) affecting {len(affected)} "
        f"column(s), representing {pct:.2f}% of the dataset."
    )

    by_type = {t: sum(1 for a in anomalies if a.type == t) for t in AnomalyType}
    labels = {
        AnomalyType.ZSCORE: "statistical outlier(s)",
        AnomalyType.IQR: "IQR-based anomaly(ies)",
        AnomalyType.SPIKE: "sudden spike(s)",
        AnomalyType.DROP: "sudden drop(s)",
    }
    breakdown = [f"{by_type[t]} {labels[t]}" for t in AnomalyType if by_type[t] > 0]
    if breakdown:
        parts.append(f"Anomaly breakdown: {', '.join(breakdown)}.")

    column_counts: Dict[str, int] = {}
    for a in anomalies:
        column_counts[a.column] = column_counts.get(a.column, 0) + 1
    most_affected = sorted(column_counts.items(), key=lambda kv: kv[1], reverse=True)[:3]
    if most_affected:
        described = ", ".join(f'"{col}" ({count})' for col, count in most_affected)
        parts.append(f"Most affected columns: {described}.")

    high = sum(1 for a in anomalies if a.score > HIGH_SEVERITY)
    if high:
        parts.append(
            f"{high} high-severity anomaly(ies) detected that warrant immediate investigation."
        )

    return " ".join(parts)

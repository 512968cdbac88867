"""
Tests for anomaly detection.
"""

import numpy as np
import pytest

from datasight.models import AnomalyType
from datasight.services.anomalies import (
    detect_all_anomalies,
    detect_column_anomalies,
    detect_iqr_anomalies,
    detect_rolling_anomalies,
    detect_zscore_anomalies,
    get_column_anomaly_summary,
    merge_anomalies,
)

OUTLIER_ROW = 15

# Alternating series: every rolling window has a non-zero spread
BASELINE = [100, 104, 98, 103, 97, 102, 99, 105, 96, 101] * 2


def _series(values):
    arr = np.asarray(values, dtype=float)
    return np.arange(len(arr)), arr


def test_injected_outlier_is_detected(revenue_with_outlier):
    anomalies = detect_column_anomalies(revenue_with_outlier, "revenue")
    flagged = {a.row_index: a for a in anomalies}
    assert OUTLIER_ROW in flagged
    assert flagged[OUTLIER_ROW].type in {AnomalyType.ZSCORE, AnomalyType.IQR, AnomalyType.SPIKE}
    assert anomalies[0].row_index == OUTLIER_ROW
    assert anomalies[0].score == pytest.approx(1.0)


def test_constant_series_has_no_anomalies():
    rows = [{"v": 7.5} for _ in range(25)]
    assert detect_column_anomalies(rows, "v") == []


def test_fewer_than_ten_values_has_no_anomalies():
    rows = [{"v": v} for v in [1, 1, 1, 1, 1, 1, 1, 1, 500]]
    assert detect_column_anomalies(rows, "v") == []


def test_zscore_detector():
    positions, values = _series(BASELINE + [400])
    found = detect_zscore_anomalies(positions, values, "v")
    assert [a.row_index for a in found] == [20]
    anomaly = found[0]
    assert anomaly.type == AnomalyType.ZSCORE
    assert anomaly.expected_range.min < 100 < anomaly.expected_range.max
    assert 0 < anomaly.score <= 1


def test_iqr_detector_flags_low_values():
    positions, values = _series(BASELINE + [10])
    found = detect_iqr_anomalies(positions, values, "v")
    assert [a.row_index for a in found] == [20]
    assert found[0].value == 10
    assert found[0].score == 1.0


def test_rolling_detector_classifies_spikes_and_drops():
    positions, values = _series(BASELINE + [200, 100, 104, 98, 103, 97, 0])
    found = {a.row_index: a for a in detect_rolling_anomalies(positions, values, "v")}
    assert found[20].type == AnomalyType.SPIKE
    assert found[26].type == AnomalyType.DROP


def test_merge_keeps_highest_score_per_row():
    positions, values = _series(BASELINE + [400])
    merged = merge_anomalies(
        detect_zscore_anomalies(positions, values, "v"),
        detect_iqr_anomalies(positions, values, "v"),
        detect_rolling_anomalies(positions, values, "v"),
    )
    rows = [a.row_index for a in merged]
    assert len(rows) == len(set(rows))
    scores = [a.score for a in merged]
    assert scores == sorted(scores, reverse=True)


def test_row_index_skips_non_numeric_rows():
    rows = [{"v": "n/a"}] + [{"v": v} for v in BASELINE] + [{"v": 400}]
    anomalies = detect_column_anomalies(rows, "v")
    assert anomalies[0].row_index == 21
    assert anomalies[0].value == 400


def test_detect_all_anomalies(revenue_with_outlier):
    result = detect_all_anomalies(revenue_with_outlier)
    assert result.affected_columns == ["revenue"]
    assert 0 < result.anomaly_score <= 1
    assert result.explanation.startswith("Detected ")
    assert 'Most affected columns: "revenue"' in result.explanation


def test_detect_all_anomalies_empty_dataset():
    result = detect_all_anomalies([])
    assert result.anomalies == []
    assert result.explanation == "No data available for anomaly detection."


def test_detect_all_anomalies_none_found():
    rows = [{"v": 3} for _ in range(12)]
    result = detect_all_anomalies(rows)
    assert result.anomaly_score == 0
    assert result.explanation.startswith("No significant anomalies detected")


def test_column_anomaly_summary(revenue_with_outlier):
    summary = get_column_anomaly_summary(revenue_with_outlier, "revenue")
    assert summary.severity == "high"
    assert summary.count >= 1
    assert len(summary.top_anomalies) <= 5
    assert summary.top_anomalies[0].row_index == OUTLIER_ROW


def test_column_anomaly_summary_without_anomalies():
    rows = [{"v": 3} for _ in range(12)]
    summary = get_column_anomaly_summary(rows, "v")
    assert summary.count == 0
    assert summary.severity == "none"

"""
Tests for the statistical summary.
"""

import pytest

from datasight.services.statistics import (
    detect_distribution,
    find_outliers,
    generate_statistical_summary,
    get_column_stats,
)


class TestDistribution:
    def test_needs_ten_values(self):
        assert detect_distribution([1, 2, 3])[0] == "insufficient_data"

    def test_constant_series_is_unknown(self):
        assert detect_distribution([5] * 12)[0] == "unknown"

    def test_symmetric_series_is_normal(self):
        assert detect_distribution(list(range(1, 21)))[0] == "normal"

    def test_right_skew(self):
        values = [1] * 15 + [2, 3, 50, 100]
        assert detect_distribution(values) == (
            "right_skewed", "Right-skewed (positive skew) distribution"
        )

    def test_left_skew(self):
        values = [100] * 15 + [99, 98, 50, 1]
        assert detect_distribution(values)[0] == "left_skewed"


class TestOutliers:
    def test_iqr_rule(self):
        count, values = find_outliers([1, 2, 3, 4, 100])
        assert count == 1
        assert values == [100.0]

    def test_needs_four_values(self):
        assert find_outliers([1, 1000, 2]) == (0, [])


def test_summary_key_metrics(revenue_with_outlier):
    summary = generate_statistical_summary(revenue_with_outlier)
    metrics = summary.key_metrics
    assert metrics["totalRows"] == 30
    assert metrics["totalColumns"] == 3
    assert metrics["completeness"] == "100%"
    assert metrics["numericColumns"] == 1
    assert "revenue_mean" in metrics


def test_summary_outliers_and_distributions(revenue_with_outlier):
    summary = generate_statistical_summary(revenue_with_outlier)
    assert [o.column for o in summary.outliers] == ["revenue"]
    assert summary.outliers[0].count == 1
    assert summary.outliers[0].description == "1 outliers detected (3.3% of values)"
    assert summary.distributions[0].type == "right_skewed"


def test_summary_overview(revenue_rows):
    summary = generate_statistical_summary(revenue_rows)
    assert summary.overview == (
        "Dataset contains 30 records across 3 variables with 100% data completeness."
    )


def test_narrative_has_three_paragraphs(revenue_rows):
    narrative = generate_statistical_summary(revenue_rows).narrative
    paragraphs = narrative.split("\n\n")
    assert len(paragraphs) == 3
    assert "excellent data quality" in paragraphs[0]
    assert 'The primary metric "revenue"' in paragraphs[1]
    assert "no strong linear relationships" in paragraphs[2]


def test_correlation_highlights(correlated_rows):
    highlights = generate_statistical_summary(correlated_rows).correlation_highlights
    assert "Strong positive correlation (1.00) between x and double_x" in highlights
    assert "Strong negative correlation (-1.00) between x and reverse_x" in highlights
    assert len(highlights) == 3


def test_column_stats(revenue_rows):
    stats = get_column_stats(revenue_rows, "revenue")
    assert stats["count"] == 30
    assert stats["min"] == "1.00K"
    assert stats["max"] == "2.00K"
    assert stats["median"] == "1.50K"


def test_column_stats_without_numbers(revenue_rows):
    assert get_column_stats(revenue_rows, "region") == {"error": "No numeric values found"}


@pytest.mark.parametrize("nulls,completeness,tier", [
    (5, "95%", "excellent"),
    (6, "94%", "good"),
    (20, "80%", "good"),
    (21, "79%", "moderate"),
])
def test_completeness_tiers(nulls, completeness, tier):
    rows = [{"a": i, "b": None if i < nulls else i * 2} for i in range(50)]
    first = generate_statistical_summary(rows).narrative.split("\n\n")[0]
    assert f"stands at {completeness}, indicating {tier} data quality." in first

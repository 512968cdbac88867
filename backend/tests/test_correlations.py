"""
Tests for correlation analysis.
"""

import pytest

from datasight.core.exceptions import InvalidParameterError
from datasight.models import CorrelationKind, CorrelationStrength
from datasight.services.correlations import (
    analyze_correlations,
    calculate_categorical_correlations,
    calculate_correlation_matrix,
    correlation_strength,
    find_correlated_features,
    find_strongest_correlations,
    get_column_correlation,
)


@pytest.mark.parametrize("coefficient,expected", [
    (0.95, CorrelationStrength.STRONG),
    (-0.7, CorrelationStrength.STRONG),
    (0.5, CorrelationStrength.MODERATE),
    (-0.25, CorrelationStrength.WEAK),
    (0.1, CorrelationStrength.NONE),
])
def test_strength_bands(coefficient, expected):
    assert correlation_strength(coefficient) == expected


def test_matrix_covers_numeric_columns_only(correlated_rows):
    matrix = calculate_correlation_matrix(correlated_rows)
    assert list(matrix) == ["x", "double_x", "reverse_x"]


def test_matrix_is_symmetric_with_unit_diagonal(correlated_rows):
    matrix = calculate_correlation_matrix(correlated_rows)
    for a in matrix:
        assert matrix[a][a] == 1
        for b in matrix:
            assert matrix[a][b] == matrix[b][a]
    assert matrix["x"]["reverse_x"] == pytest.approx(-1.0)


def test_matrix_respects_column_subset(correlated_rows):
    matrix = calculate_correlation_matrix(correlated_rows, ["x", "reverse_x", "segment"])
    assert list(matrix) == ["x", "reverse_x"]


def test_strongest_correlations(correlated_rows):
    pairs = find_strongest_correlations(calculate_correlation_matrix(correlated_rows), limit=2)
    assert len(pairs) == 2
    assert all(p.type == CorrelationKind.PEARSON for p in pairs)
    assert all(p.strength == CorrelationStrength.STRONG for p in pairs)


def test_strongest_correlations_rejects_negative_limit():
    with pytest.raises(InvalidParameterError):
        find_strongest_correlations({}, limit=-1)


def test_categorical_association(correlated_rows):
    pairs = calculate_categorical_correlations(correlated_rows)
    assert len(pairs) == 1
    pair = pairs[0]
    assert (pair.column1, pair.column2) == ("segment", "channel")
    assert pair.type == CorrelationKind.CRAMERS_V
    assert pair.coefficient == pytest.approx(1.0)


def test_analyze_correlations(correlated_rows):
    result = analyze_correlations(correlated_rows)
    assert len(result.strongest_relations) == 4
    assert result.explanation.startswith(
        "Identified 3 strong numeric correlation(s) and 1 strong categorical association(s)."
    )
    assert "multicollinearity" in result.explanation


def test_analyze_correlations_without_relationships():
    rows = [{"a": a, "b": b} for a, b in zip([1, 2, 3, 4, 5, 6], [3, 1, 3, 1, 3, 1])]
    result = analyze_correlations(rows)
    assert result.explanation.startswith("Analysis reveals no strong correlations")


def test_analyze_correlations_empty():
    result = analyze_correlations([])
    assert result.matrix == {}
    assert result.explanation == "No data available for correlation analysis."


def test_column_correlation_numeric(correlated_rows):
    result = get_column_correlation(correlated_rows, "x", "double_x")
    assert result.strength == CorrelationStrength.STRONG
    assert result.interpretation == (
        'Strong positive relationship between "x" and "double_x" (Pearson: 1.000).'
    )


def test_column_correlation_categorical(correlated_rows):
    result = get_column_correlation(correlated_rows, "segment", "channel")
    assert result.coefficient == pytest.approx(1.0)
    assert "(Cramer's V: 1.000)" in result.interpretation


def test_correlated_features_for_numeric_target(correlated_rows):
    features = find_correlated_features(correlated_rows, "x")
    assert {f.column for f in features} == {"double_x", "reverse_x"}
    assert all(abs(f.correlation) == pytest.approx(1.0) for f in features)


def test_correlated_features_for_categorical_target(correlated_rows):
    features = find_correlated_features(correlated_rows, "segment", limit=2)
    assert len(features) == 2
    assert all(f.strength == CorrelationStrength.STRONG for f in features)


def test_correlated_features_drop_weak_columns():
    rows = [{"t": t, "noise": n} for t, n in zip(range(8), [5, 5, 1, 9, 9, 1, 5, 5])]
    assert find_correlated_features(rows, "t") == []

"""
Correlation Analysis — Pearson between numeric columns, Cramér's V between
categorical ones.

Strength bands apply to |coefficient|: ≥0.7 strong, ≥0.4 moderate, ≥0.2 weak,
otherwise none.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import InvalidParameterError
from ..models import (
    ColumnCorrelation,
    ColumnType,
    CorrelatedFeature,
    CorrelationKind,
    CorrelationPair,
    CorrelationResult,
    CorrelationStrength,
)
from . import primitives
from .coercion import column_names, column_values, ensure_dataset, numeric_values, text_values
from .type_inference import infer_type

logger = logging.getLogger("datasight.correlations")

STRONG = 0.7
MODERATE = 0.4
WEAK = 0.2
MIN_ASSOCIATION = 0.1
MULTICOLLINEAR = 0.9
MAX_COMBINED_PAIRS = 15
MIN_FEATURE_POINTS = 3

Matrix = Dict[str, Dict[str, float]]


def correlation_strength(coefficient: float) -> CorrelationStrength:
    magnitude = abs(coefficient)
    if magnitude >= STRONG:
        return CorrelationStrength.STRONG
    if magnitude >= MODERATE:
        return CorrelationStrength.MODERATE
    if magnitude >= WEAK:
        return CorrelationStrength.WEAK
    return CorrelationStrength.NONE


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise InvalidParameterError(f"limit must be >= 0, got {limit}")


def _columns_of_type(rows, columns: Optional[List[str]], *types: ColumnType) -> List[str]:
    candidates = columns if columns is not None else column_names(rows)
    return [c for c in candidates if infer_type(column_values(rows, c)) in types]


def calculate_correlation_matrix(
    rows: Sequence[Dict[str, Any]],
    columns: Optional[List[str]] = None,
) -> Matrix:
    """Symmetric Pearson matrix over the numeric columns, diagonal 1."""
    ensure_dataset(rows)
    if not rows:
        return {}

    numeric_columns = _columns_of_type(rows, columns, ColumnType.NUMERIC)
    series = {c: numeric_values(rows, c) for c in numeric_columns}

    matrix: Matrix = {}
    for col1 in numeric_columns:
        matrix[col1] = {}
        for col2 in numeric_columns:
            if col1 == col2:
                matrix[col1][col2] = 1.0
            elif col2 in matrix and col1 in matrix[col2]:
                matrix[col1][col2] = matrix[col2][col1]
            else:
                matrix[col1][col2] = primitives.pearson_correlation(series[col1], series[col2])

    logger.debug("calculate_correlation_matrix: %d numeric columns", len(numeric_columns))
    return matrix


def find_strongest_correlations(matrix: Matrix, limit: int = 10) -> List[CorrelationPair]:
    """Upper-triangle pairs with a non-"none" strength, strongest first."""
    _check_limit(limit)
    columns = list(matrix)
    pairs = []
    for i, col1 in enumerate(columns):
        for col2 in columns[i + 1:]:
            coefficient = matrix[col1].get(col2, 0.0)
            strength = correlation_strength(coefficient)
            if strength == CorrelationStrength.NONE:
                continue
            pairs.append(CorrelationPair(
                column1=col1,
                column2=col2,
                coefficient=coefficient,
                type=CorrelationKind.PEARSON,
                strength=strength,
            ))
    pairs.sort(key=lambda p: abs(p.coefficient), reverse=True)
    return pairs[:limit]


def calculate_categorical_correlations(
    rows: Sequence[Dict[str, Any]],
    columns: Optional[List[str]] = None,
) -> List[CorrelationPair]:
    """Cramér's V for every pair of categorical / boolean columns above 0.1."""
    ensure_dataset(rows)
    if not rows:
        return []

    categorical = _columns_of_type(rows, columns, ColumnType.CATEGORICAL, ColumnType.BOOLEAN)
    labels = {c: text_values(rows, c) for c in categorical}

    pairs = []
    for i, col1 in enumerate(categorical):
        for col2 in categorical[i + 1:]:
            coefficient = primitives.cramers_v(labels[col1], labels[col2])
            if coefficient > MIN_ASSOCIATION:
                pairs.append(CorrelationPair(
                    column1=col1,
                    column2=col2,
                    coefficient=coefficient,
                    type=CorrelationKind.CRAMERS_V,
                    strength=correlation_strength(coefficient),
                ))
    pairs.sort(key=lambda p: p.coefficient, reverse=True)
    return pairs


def analyze_correlations(rows: Sequence[Dict[str, Any]]) -> CorrelationResult:
    """Numeric matrix plus the strongest numeric and categorical relations."""
    ensure_dataset(rows)
    if not rows:
        return CorrelationResult(
            matrix={},
            strongest_relations=[],
            explanation="No data available for correlation analysis.",
        )

    matrix = calculate_correlation_matrix(rows)
    numeric_pairs = find_strongest_correlations(matrix)
    categorical_pairs = calculate_categorical_correlations(rows)

    combined = sorted(
        numeric_pairs + categorical_pairs,
        key=lambda p: abs(p.coefficient),
        reverse=True,
    )[:MAX_COMBINED_PAIRS]

    logger.info(
        "analyze_correlations: %d numeric pairs, %d categorical pairs",
        len(numeric_pairs), len(categorical_pairs),
    )
    return CorrelationResult(
        matrix=matrix,
        strongest_relations=combined,
        explanation=_explain(numeric_pairs, categorical_pairs),
    )


def get_column_correlation(
    rows: Sequence[Dict[str, Any]], column1: str, column2: str
) -> ColumnCorrelation:
    """Relationship between two named columns."""
    ensure_dataset(rows)
    both_numeric = (
        infer_type(column_values(rows, column1)) == ColumnType.NUMERIC
        and infer_type(column_values(rows, column2)) == ColumnType.NUMERIC
    )
    if both_numeric:
        coefficient = primitives.pearson_correlation(
            numeric_values(rows, column1), numeric_values(rows, column2)
        )
        method = "Pearson"
    else:
        coefficient = primitives.cramers_v(text_values(rows, column1), text_values(rows, column2))
        method = "Cramer's V"

    strength = correlation_strength(coefficient)
    measured = f'"{column1}" and "{column2}" ({method}: {coefficient:.3f})'
    if strength == CorrelationStrength.NONE:
        interpretation = f"No significant relationship between {measured}."
    else:
        direction = "positive" if coefficient > 0 else "negative"
        interpretation = (
            f"{strength.value.capitalize()} {direction} relationship between {measured}."
        )

    return ColumnCorrelation(
        coefficient=coefficient, strength=strength, interpretation=interpretation
    )


def find_correlated_features(
    rows: Sequence[Dict[str, Any]], target: str, limit: int = 10
) -> List[CorrelatedFeature]:
    """Other columns ranked by their relationship with ``target``.

    Pearson is used when the target has numeric values (a candidate needs at
    least three numeric values, else it scores 0); otherwise Cramér's V over
    the string forms.
    """
    ensure_dataset(rows)
    _check_limit(limit)
    if not rows:
        return []

    candidates = [c for c in column_names(rows) if c != target]
    target_values = numeric_values(rows, target)

    if len(target_values) == 0:
        target_labels = text_values(rows, target)
        scored = [
            (col, primitives.cramers_v(target_labels, text_values(rows, col)))
            for col in candidates
        ]
    else:
        scored = []
        for col in candidates:
            values = numeric_values(rows, col)
            r = (
                primitives.pearson_correlation(target_values, values)
                if len(values) >= MIN_FEATURE_POINTS else 0.0
            )
            scored.append((col, r))

    features = [
        CorrelatedFeature(column=col, correlation=r, strength=correlation_strength(r))
        for col, r in scored
        if correlation_strength(r) != CorrelationStrength.NONE
    ]
    features.sort(key=lambda f: abs(f.correlation), reverse=True)
    return features[:limit]


def _explain(numeric_pairs: List[CorrelationPair], categorical_pairs: List[CorrelationPair]) -> str:
    strong_numeric = [p for p in numeric_pairs if p.strength == CorrelationStrength.STRONG]
    strong_categorical = [p for p in categorical_pairs if p.strength == CorrelationStrength.STRONG]

    parts = []
    if not strong_numeric and not strong_categorical:
        parts.append(
            "Analysis reveals no strong correlations between variables. This suggests "
            "features are largely independent, which can be beneficial for predictive modeling."
        )
    else:
        parts.append(
            f"Identified {len(strong_numeric)} strong numeric correlation(s) and "
            f"{len(strong_categorical)} strong categorical association(s)."
        )

    if strong_numeric:
        top = strong_numeric[0]
        direction = "positive" if top.coefficient > 0 else "negative"
        parts.append(
            f"The strongest relationship is a {direction} correlation "
            f'(r={top.coefficient:.2f}) between "{top.column1}" and "{top.column2}".'
        )
        if abs(top.coefficient) > MULTICOLLINEAR:
            parts.append(
                "This very high correlation may indicate redundancy or multicollinearity, "
                "suggesting one variable could potentially be removed without significant "
                "information loss."
            )

    moderate = [p for p in numeric_pairs if p.strength == CorrelationStrength.MODERATE]
    if moderate:
        parts.append(
            f"Additionally, {len(moderate)} moderate correlation(s) were detected, "
            "indicating meaningful but not deterministic relationships."
        )

    if strong_categorical:
        parts.append(
            "Among categorical variables, notable associations exist that may warrant "
            "further investigation for feature engineering or segmentation analysis."
        )

    return " ".join(parts)

"""
Insight Synthesizer — turns analyzer output into prioritized findings.

Findings are ordered high → medium → low importance; equal-importance
findings keep the order they were produced in. From the findings this module
also derives an executive summary, a short list of recommendations and the
chart types worth rendering.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..models import (
    IMPORTANCE_ORDER,
    AnomalyResult,
    ColumnType,
    CorrelationResult,
    CorrelationStrength,
    DatasetProfile,
    Insight,
    InsightBundle,
    InsightCategory,
    InsightImportance,
    InsightResponse,
    InsightType,
    QueryIntent,
    TrendDirection,
    TrendResult,
)
from .anomalies import HIGH_SEVERITY, detect_all_anomalies
from .coercion import ensure_dataset
from .correlations import MULTICOLLINEAR, analyze_correlations
from .forecasting import forecast_all
from .formatting import format_percent
from .profiler import (
    find_high_null_columns,
    find_potential_id_columns,
    get_columns_by_type,
    profile_dataset,
)
from .statistics import generate_statistical_summary
from .trends import analyze_all_trends

logger = logging.getLogger("datasight.insights")

SEVERE_NULL_RATIO = 0.3
ANOMALY_WARNING_COUNT = 5
TREND_STRENGTH = 0.5
HIGH_VARIANCE_CV = 1
MAX_RECOMMENDATIONS = 7
MONITORING_RECOMMENDATION = (
    "Establish ongoing monitoring for key metrics to track changes over time."
)


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def generate_key_insights(
    rows: Sequence[Dict[str, Any]],
    profile: DatasetProfile,
    anomalies: Optional[AnomalyResult] = None,
    trends: Optional[List[TrendResult]] = None,
    correlations: Optional[CorrelationResult] = None,
) -> List[Insight]:
    """Prioritized findings for a dataset.

    Analyzer results that the caller already computed can be passed in;
    anything missing is computed here.
    """
    ensure_dataset(rows)
    insights: List[Insight] = []

    # Data quality
    high_null = find_high_null_columns(profile, 0.1)
    if high_null:
        names = [c.name for c in high_null]
        severe = any(c.null_count / c.total_count > SEVERE_NULL_RATIO for c in high_null)
        insights.append(Insight(
            type=InsightType.WARNING,
            category=InsightCategory.DATA_QUALITY,
            title="Missing Data Detected",
            description=(
                f"{len(high_null)} column(s) have more than 10% missing values: "
                f"{', '.join(names)}. Consider imputation or investigation."
            ),
            importance=InsightImportance.HIGH if severe else InsightImportance.MEDIUM,
            related_columns=names,
        ))

    id_columns = find_potential_id_columns(profile)
    if id_columns:
        names = [c.name for c in id_columns]
        insights.append(Insight(
            type=InsightType.OBSERVATION,
            category=InsightCategory.DATA_STRUCTURE,
            title="Potential Identifier Columns",
            description=(
                f'Columns "{", ".join(names)}" appear to be unique identifiers and may not '
                "be useful for analysis."
            ),
            importance=InsightImportance.LOW,
            related_columns=names,
        ))

    # Anomalies
    anomalies = anomalies if anomalies is not None else detect_all_anomalies(rows)
    if anomalies.anomalies:
        high_severity = sum(1 for a in anomalies.anomalies if a.score > HIGH_SEVERITY)
        escalate = high_severity > ANOMALY_WARNING_COUNT
        description = (
            f"Found {len(anomalies.anomalies)} anomalies across "
            f"{len(anomalies.affected_columns)} column(s)."
        )
        if high_severity:
            description += f" {high_severity} require immediate attention."
        insights.append(Insight(
            type=InsightType.WARNING if escalate else InsightType.OBSERVATION,
            category=InsightCategory.ANOMALIES,
            title="Anomalous Data Points Detected",
            description=description,
            importance=InsightImportance.HIGH if escalate else InsightImportance.MEDIUM,
            related_columns=list(anomalies.affected_columns),
        ))

    # Trends
    trends = trends if trends is not None else analyze_all_trends(rows)
    growing = [
        t.column for t in trends
        if t.direction == TrendDirection.INCREASING and t.strength > TREND_STRENGTH
    ]
    declining = [
        t.column for t in trends
        if t.direction == TrendDirection.DECREASING and t.strength > TREND_STRENGTH
    ]
    if growing:
        insights.append(Insight(
            type=InsightType.OPPORTUNITY,
            category=InsightCategory.TRENDS,
            title="Growth Trends Identified",
            description=(
                f"{len(growing)} metric(s) showing significant upward trends: "
                f"{', '.join(growing)}."
            ),
            importance=InsightImportance.HIGH,
            related_columns=growing,
        ))
    if declining:
        insights.append(Insight(
            type=InsightType.WARNING,
            category=InsightCategory.TRENDS,
            title="Declining Trends Detected",
            description=(
                f"{len(declining)} metric(s) showing downward trends: "
                f"{', '.join(declining)}. Investigation recommended."
            ),
            importance=InsightImportance.HIGH,
            related_columns=declining,
        ))

    # Correlations
    correlations = correlations if correlations is not None else analyze_correlations(rows)
    strong = [
        p for p in correlations.strongest_relations
        if p.strength == CorrelationStrength.STRONG
    ]
    if strong:
        multicollinear = [p for p in strong if abs(p.coefficient) > MULTICOLLINEAR]
        if multicollinear:
            insights.append(Insight(
                type=InsightType.WARNING,
                category=InsightCategory.CORRELATIONS,
                title="Potential Multicollinearity",
                description=(
                    f"Very high correlations (>0.9) detected between {len(multicollinear)} "
                    "variable pair(s). This may cause issues in predictive models."
                ),
                importance=InsightImportance.MEDIUM,
                related_columns=_unique([c for p in multicollinear for c in (p.column1, p.column2)]),
            ))
        else:
            insights.append(Insight(
                type=InsightType.OBSERVATION,
                category=InsightCategory.CORRELATIONS,
                title="Strong Variable Relationships",
                description=(
                    f"Identified {len(strong)} strong correlation(s) that may indicate "
                    "important relationships or dependencies."
                ),
                importance=InsightImportance.MEDIUM,
                related_columns=_unique([c for p in strong for c in (p.column1, p.column2)]),
            ))

    # Distribution
    high_variance = [
        c.name for c in get_columns_by_type(profile, ColumnType.NUMERIC)
        if c.std_dev is not None and c.mean and abs(c.std_dev / c.mean) > HIGH_VARIANCE_CV
    ]
    if high_variance:
        insights.append(Insight(
            type=InsightType.OBSERVATION,
            category=InsightCategory.DISTRIBUTION,
            title="High Variance Columns",
            description=(
                f"{len(high_variance)} column(s) show high coefficient of variation: "
                f"{', '.join(high_variance)}. Consider normalization."
            ),
            importance=InsightImportance.LOW,
            related_columns=high_variance,
        ))

    insights.sort(key=lambda i: IMPORTANCE_ORDER[i.importance])
    logger.info("generate_key_insights: %d insights", len(insights))
    return insights


def generate_executive_summary(profile: DatasetProfile, insights: List[Insight]) -> str:
    parts = [
        f"Analysis of {profile.row_count:,} records across {profile.column_count} variables "
        f"reveals a dataset with {format_percent(profile.completeness)} completeness."
    ]

    high = [i.title.lower() for i in insights if i.importance == InsightImportance.HIGH]
    if high:
        parts.append(f"{len(high)} high-priority finding(s) require attention: {', '.join(high)}.")

    opportunities = [i.title.lower() for i in insights if i.type == InsightType.OPPORTUNITY]
    if opportunities:
        parts.append(f"Notable opportunities identified include {' and '.join(opportunities)}.")

    warnings = [i.title.lower() for i in insights if i.type == InsightType.WARNING]
    if warnings:
        parts.append(f"Areas requiring investigation: {', '.join(warnings)}.")

    return " ".join(parts)


def generate_recommendations(insights: List[Insight]) -> List[str]:
    """Templated advice per warning / opportunity, plus a monitoring line."""
    recommendations = []
    for insight in insights:
        columns = ", ".join(insight.related_columns)
        key = (insight.type, insight.category)
        if key == (InsightType.WARNING, InsightCategory.DATA_QUALITY):
            recommendations.append(
                f"Address missing data in {columns} through imputation or removal."
            )
        elif key == (InsightType.WARNING, InsightCategory.ANOMALIES):
            recommendations.append(
                f"Investigate anomalous values in {columns} to determine if they are errors "
                "or genuine outliers."
            )
        elif key == (InsightType.OPPORTUNITY, InsightCategory.TRENDS):
            recommendations.append(
                f"Capitalize on growth trends in {columns} by allocating resources to these areas."
            )
        elif key == (InsightType.WARNING, InsightCategory.TRENDS):
            recommendations.append(
                f"Address declining metrics in {columns} through root cause analysis."
            )
        elif key == (InsightType.WARNING, InsightCategory.CORRELATIONS):
            recommendations.append(
                "Consider dimensionality reduction or feature selection to address "
                "multicollinearity."
            )

    return recommendations[:MAX_RECOMMENDATIONS - 1] + [MONITORING_RECOMMENDATION]


def suggest_visualizations(profile: DatasetProfile, insights: List[Insight]) -> List[str]:
    """Chart types suited to the dataset's column mix, without duplicates."""
    numeric = len(get_columns_by_type(profile, ColumnType.NUMERIC))
    categorical = len(get_columns_by_type(profile, ColumnType.CATEGORICAL))
    datetime_cols = len(get_columns_by_type(profile, ColumnType.DATETIME))

    charts = []
    if datetime_cols and numeric:
        charts += ["line", "area"]
    if numeric:
        charts += ["histogram", "box"]
    if categorical:
        charts += ["bar", "pie"]
    if numeric >= 2:
        charts += ["scatter", "heatmap"]
    if any(i.category == InsightCategory.ANOMALIES for i in insights):
        charts.append("scatter")
    if any(i.category == InsightCategory.TRENDS for i in insights):
        charts.append("line")

    return _unique(charts)


def generate_complete_analysis(rows: Sequence[Dict[str, Any]]) -> InsightResponse:
    """Run every analyzer and assemble the full response."""
    ensure_dataset(rows)
    logger.info("generate_complete_analysis: %d records", len(rows))

    profile = profile_dataset(rows)
    statistics = generate_statistical_summary(rows, profile)
    trends = analyze_all_trends(rows)
    anomalies = detect_all_anomalies(rows)
    forecasts = forecast_all(rows)
    correlations = analyze_correlations(rows)
    key_insights = generate_key_insights(
        rows, profile, anomalies=anomalies, trends=trends, correlations=correlations,
    )

    return InsightResponse(
        query="Complete dataset analysis",
        intent=QueryIntent.SUMMARY,
        insights=InsightBundle(
            profile=profile,
            statistics=statistics,
            trends=trends,
            anomalies=anomalies,
            forecasts=forecasts,
            correlations=correlations,
            key_insights=key_insights,
        ),
        text_summary=statistics.narrative,
        recommended_charts=suggest_visualizations(profile, key_insights),
        executive_summary=generate_executive_summary(profile, key_insights),
        recommendations=generate_recommendations(key_insights),
    )

"""
Query Router — free-text question → InsightResponse.

The router classifies the question into an intent by keyword, binds an
optional target column, and dispatches to the handler for that intent.
Intent keywords are checked in a fixed priority order; the first category
with a matching keyword wins and ``summary`` is the fallback:

  profile      profile, overview, structure
  summary      summar, describe, tell me about
  anomalies    anomal, outlier, unusual, strange
  forecast     forecast, predict, future, project
  trends       trend, pattern, over time, direction
  correlation  correlat, relation, connect, affect
  explain      explain, what is, happening
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..models import (
    AnomalyResult,
    ColumnType,
    InsightBundle,
    InsightResponse,
    QueryIntent,
)
from .anomalies import detect_all_anomalies, get_column_anomaly_summary
from .coercion import column_names, ensure_dataset
from .correlations import analyze_correlations, find_correlated_features
from .forecasting import forecast, forecast_all, get_forecast_summary
from .formatting import format_value
from .insights import (
    generate_complete_analysis,
    generate_executive_summary,
    generate_key_insights,
    generate_recommendations,
    suggest_visualizations,
)
from .profiler import generate_profile_summary, profile_dataset
from .statistics import generate_statistical_summary, get_column_stats
from .trends import analyze_all_trends, analyze_trend, get_trend_summary

logger = logging.getLogger("datasight.query_router")

INTENT_KEYWORDS: List[Tuple[QueryIntent, Tuple[str, ...]]] = [
    (QueryIntent.PROFILE, ("profile", "overview", "structure")),
    (QueryIntent.SUMMARY, ("summar", "describe", "tell me about")),
    (QueryIntent.ANOMALIES, ("anomal", "outlier", "unusual", "strange")),
    (QueryIntent.FORECAST, ("forecast", "predict", "future", "project")),
    (QueryIntent.TRENDS, ("trend", "pattern", "over time", "direction")),
    (QueryIntent.CORRELATION, ("correlat", "relation", "connect", "affect")),
    (QueryIntent.EXPLAIN, ("explain", "what is", "happening")),
]

COLUMN_PATTERN = re.compile(
    r"""column\s+["']?(\w+)["']?"""
    r"""|["'](\w+)["']\s+column"""
    r"""|(?:what|explain|analyze)\s+(?:is|about)?\s*["']?(\w+)["']?""",
    re.IGNORECASE,
)

NO_DATA_TEXT = "No data provided for analysis. Please provide a valid dataset."


def classify_intent(query: str) -> QueryIntent:
    lowered = query.lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return intent
    return QueryIntent.SUMMARY


def _mask_keywords(query: str, intent: QueryIntent) -> str:
    """Blank out the intent's own keywords so they cannot name a column."""
    keywords = dict(INTENT_KEYWORDS).get(intent, ())
    masked = query
    for keyword in keywords:
        masked = re.sub(re.escape(keyword), lambda m: " " * len(m.group()), masked,
                        flags=re.IGNORECASE)
    return masked


def _match_column(name: str, columns: List[str]) -> Optional[str]:
    lowered = name.lower()
    for column in columns:
        if column.lower() == lowered:
            return column
    return None


def extract_target_column(
    query: str, columns: List[str], intent: Optional[QueryIntent] = None
) -> Optional[str]:
    """Column named by the query, resolved case-insensitively.

    The phrase patterns (``column X``, ``"X" column``, ``explain X``) are
    tried first; failing those, the first column mentioned as a whole word
    outside the keywords of ``intent`` ("trend over time" never binds ``time``).
    """
    match = COLUMN_PATTERN.search(query)
    if match:
        captured = next(g for g in match.groups() if g)
        resolved = _match_column(captured, columns)
        if resolved is not None:
            return resolved

    text = _mask_keywords(query, intent) if intent is not None else query
    for column in columns:
        if not column:
            continue
        if re.search(rf"(?<!\w){re.escape(column)}(?!\w)", text, re.IGNORECASE):
            return column
    return None


def detect_intent(query: str, columns: Optional[List[str]] = None) -> Tuple[QueryIntent, Optional[str]]:
    """(intent, target column) for a query against the given column names."""
    intent = classify_intent(query)
    return intent, extract_target_column(query, columns or [], intent)


# ─── Handlers ────────────────────────────────────────────────────────────


def handle_profile_query(rows: Sequence[Dict[str, Any]]) -> InsightResponse:
    profile = profile_dataset(rows)
    key_insights = generate_key_insights(rows, profile)
    return InsightResponse(
        query="Dataset profile",
        intent=QueryIntent.PROFILE,
        insights=InsightBundle(profile=profile, key_insights=key_insights),
        text_summary=generate_profile_summary(profile),
        recommended_charts=["bar", "pie"],
        executive_summary=generate_executive_summary(profile, key_insights),
        recommendations=generate_recommendations(key_insights),
    )


def handle_summary_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    profile = profile_dataset(rows)
    key_insights = generate_key_insights(rows, profile)

    column = _find_profile(profile, target)
    if column is not None:
        stats = get_column_stats(rows, column.name)
        described = ", ".join(f"{key}: {value}" for key, value in stats.items())
        return InsightResponse(
            query=f"Summary of {target}",
            intent=QueryIntent.SUMMARY,
            insights=InsightBundle(profile=profile, key_insights=key_insights),
            text_summary=f'Column "{column.name}" ({column.type.value}): {described}',
            recommended_charts=(
                ["histogram", "box"] if column.type == ColumnType.NUMERIC else ["bar", "pie"]
            ),
            executive_summary=generate_executive_summary(profile, key_insights),
            recommendations=generate_recommendations(key_insights),
        )

    statistics = generate_statistical_summary(rows, profile)
    return InsightResponse(
        query="Dataset summary",
        intent=QueryIntent.SUMMARY,
        insights=InsightBundle(profile=profile, statistics=statistics, key_insights=key_insights),
        text_summary=statistics.narrative,
        recommended_charts=suggest_visualizations(profile, key_insights),
        executive_summary=generate_executive_summary(profile, key_insights),
        recommendations=generate_recommendations(key_insights),
    )


def handle_anomaly_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    if target:
        summary = get_column_anomaly_summary(rows, target)
        top = summary.top_anomalies
        return InsightResponse(
            query=f"Anomalies in {target}",
            intent=QueryIntent.ANOMALIES,
            insights=InsightBundle(anomalies=AnomalyResult(
                anomalies=top,
                anomaly_score=top[0].score if top else 0.0,
                affected_columns=[target],
                explanation=(
                    f'Found {summary.count} anomalies in "{target}" with '
                    f"{summary.severity} severity."
                ),
            )),
            text_summary=(
                f'Anomaly analysis for "{target}": {summary.count} anomalies detected '
                f"(severity: {summary.severity})."
            ),
            recommended_charts=["scatter", "line", "box"],
        )

    anomalies = detect_all_anomalies(rows)
    return InsightResponse(
        query="Find anomalies",
        intent=QueryIntent.ANOMALIES,
        insights=InsightBundle(anomalies=anomalies),
        text_summary=anomalies.explanation,
        recommended_charts=["scatter", "line", "heatmap"],
    )


def handle_forecast_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    if target:
        result = forecast(rows, target)
        return InsightResponse(
            query=f"Forecast {target}",
            intent=QueryIntent.FORECAST,
            insights=InsightBundle(forecasts=[result]),
            text_summary=result.interpretation,
            recommended_charts=["line", "area"],
        )

    forecasts = forecast_all(rows)
    return InsightResponse(
        query="Generate forecasts",
        intent=QueryIntent.FORECAST,
        insights=InsightBundle(forecasts=forecasts),
        text_summary=get_forecast_summary(forecasts),
        recommended_charts=["line", "area"],
    )


def handle_trend_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    if target:
        trend = analyze_trend(rows, target)
        return InsightResponse(
            query=f"Trends in {target}",
            intent=QueryIntent.TRENDS,
            insights=InsightBundle(trends=[trend]),
            text_summary=trend.explanation,
            recommended_charts=["line", "area"],
        )

    trends = analyze_all_trends(rows)
    return InsightResponse(
        query="Analyze trends",
        intent=QueryIntent.TRENDS,
        insights=InsightBundle(trends=trends),
        text_summary=get_trend_summary(trends),
        recommended_charts=["line", "area", "heatmap"],
    )


def handle_correlation_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    correlations = analyze_correlations(rows)

    if target:
        related = find_correlated_features(rows, target)
        if related:
            ranked = ", ".join(f"{r.column} ({r.correlation:.2f})" for r in related[:5])
            text = f'Top correlations with "{target}": {ranked}.'
        else:
            text = f'No significant correlations found for "{target}".'
        return InsightResponse(
            query=f"Correlations with {target}",
            intent=QueryIntent.CORRELATION,
            insights=InsightBundle(correlations=correlations),
            text_summary=text,
            recommended_charts=["scatter", "heatmap"],
        )

    return InsightResponse(
        query="Explain correlations",
        intent=QueryIntent.CORRELATION,
        insights=InsightBundle(correlations=correlations),
        text_summary=correlations.explanation,
        recommended_charts=["heatmap", "scatter"],
    )


def handle_explain_query(
    rows: Sequence[Dict[str, Any]], target: Optional[str] = None
) -> InsightResponse:
    if not target:
        return generate_complete_analysis(rows)

    profile = profile_dataset(rows)
    column = _find_profile(profile, target)
    if column is None:
        logger.warning("handle_explain_query: column '%s' not found", target)
        return InsightResponse(
            query=f"Explain {target}",
            intent=QueryIntent.EXPLAIN,
            insights=InsightBundle(profile=profile),
            text_summary=f'Column "{target}" not found in dataset.',
            recommended_charts=[],
        )

    parts = [
        f'"{column.name}" is a {column.type.value} column with {column.total_count} values '
        f"({column.null_count} null)."
    ]
    if column.type == ColumnType.NUMERIC:
        mean = f"{column.mean:.2f}" if column.mean is not None else "N/A"
        std = f"{column.std_dev:.2f}" if column.std_dev is not None else "N/A"
        parts.append(
            f"Range: {format_value(column.min)} to {format_value(column.max)}, "
            f"Mean: {mean}, StdDev: {std}."
        )

        trend = analyze_trend(rows, column.name)
        parts.append(
            f"Trend: {trend.direction.value} ({trend.strength * 100:.0f}% confidence)."
        )

        anomaly_summary = get_column_anomaly_summary(rows, column.name)
        parts.append(
            f"Anomalies: {anomaly_summary.count} detected ({anomaly_summary.severity} severity)."
        )

        related = find_correlated_features(rows, column.name, 3)
        if related:
            ranked = ", ".join(f"{r.column} ({r.correlation:.2f})" for r in related)
            parts.append(f"Top correlations: {ranked}.")
    else:
        top = ", ".join(f'"{v.value}" ({v.count})' for v in column.top_values[:3])
        parts.append(f"Unique values: {column.unique_count}. Top values: {top}.")

    key_insights = generate_key_insights(rows, profile)
    return InsightResponse(
        query=f"Explain {target}",
        intent=QueryIntent.EXPLAIN,
        insights=InsightBundle(profile=profile, key_insights=key_insights),
        text_summary=" ".join(parts),
        recommended_charts=(
            ["line", "histogram", "scatter"]
            if column.type == ColumnType.NUMERIC else ["bar", "pie"]
        ),
        executive_summary=generate_executive_summary(profile, key_insights),
        recommendations=generate_recommendations(key_insights),
    )


_HANDLERS: Dict[QueryIntent, Callable[..., InsightResponse]] = {
    QueryIntent.SUMMARY: handle_summary_query,
    QueryIntent.ANOMALIES: handle_anomaly_query,
    QueryIntent.FORECAST: handle_forecast_query,
    QueryIntent.TRENDS: handle_trend_query,
    QueryIntent.CORRELATION: handle_correlation_query,
    QueryIntent.EXPLAIN: handle_explain_query,
}


def analyze(query: str, rows: Sequence[Dict[str, Any]]) -> InsightResponse:
    """Answer a free-text question about a dataset.

    The response echoes ``query`` verbatim. Handlers called directly label the
    query instead ("Find anomalies", "Explain revenue", ...).
    """
    ensure_dataset(rows)
    if not rows:
        logger.warning("analyze: empty dataset for query %r", query)
        return InsightResponse(
            query=query,
            intent=QueryIntent.SUMMARY,
            insights=InsightBundle(),
            text_summary=NO_DATA_TEXT,
            recommended_charts=[],
        )

    intent, target = detect_intent(query, column_names(rows))
    logger.info(
        "analyze: %d records, intent=%s, target=%s", len(rows), intent.value, target,
    )

    if intent == QueryIntent.PROFILE:
        response = handle_profile_query(rows)
    else:
        response = _HANDLERS[intent](rows, target)
    return response.model_copy(update={"query": query})


# ─── Internal helpers ────────────────────────────────────────────────────


def _find_profile(profile, target: Optional[str]):
    if not target:
        return None
    lowered = target.lower()
    return next((c for c in profile.columns if c.name.lower() == lowered), None)

"""
Analyzer result types.

Every analyzer returns one of these frozen models. None of them carry
back-references, and none are mutated after construction.
"""

import enum
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import Field

from .base import AnalysisModel
from .insight import Insight


class ColumnType(str, enum.Enum):
    """Semantic type inferred for a column."""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    TEXT = "text"


class TrendDirection(str, enum.Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class AnomalyType(str, enum.Enum):
    """Which detector flagged the point."""
    ZSCORE = "zscore"
    IQR = "iqr"
    SPIKE = "spike"
    DROP = "drop"


class ForecastMethod(str, enum.Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    ROLLING = "rolling"


class CorrelationKind(str, enum.Enum):
    PEARSON = "pearson"
    CRAMERS_V = "cramers_v"


class CorrelationStrength(str, enum.Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    NONE = "none"


class QueryIntent(str, enum.Enum):
    PROFILE = "profile"
    SUMMARY = "summary"
    ANOMALIES = "anomalies"
    FORECAST = "forecast"
    TRENDS = "trends"
    CORRELATION = "correlation"
    EXPLAIN = "explain"


# ─── Profiling ─────────────────────────────────────────────────────────


class TopValue(AnalysisModel):
    value: Union[float, str]
    count: int


class ColumnProfile(AnalysisModel):
    name: str
    type: ColumnType
    null_count: int
    total_count: int
    unique_count: int
    # numeric columns carry floats, datetime columns carry datetimes
    min: Optional[Union[float, datetime]] = None
    max: Optional[Union[float, datetime]] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    mode: Optional[Union[float, str]] = None
    std_dev: Optional[float] = None
    top_values: List[TopValue] = Field(default_factory=list)


class DatasetProfile(AnalysisModel):
    row_count: int
    column_count: int
    columns: List[ColumnProfile] = Field(default_factory=list)
    memory_estimate: str = "0 bytes"
    completeness: float = 0.0


# ─── Statistics ────────────────────────────────────────────────────────


class DistributionInfo(AnalysisModel):
    column: str
    type: str
    description: str


class OutlierInfo(AnalysisModel):
    column: str
    count: int
    description: str


class StatisticalSummary(AnalysisModel):
    overview: str
    key_metrics: Dict[str, Union[int, float, str]] = Field(default_factory=dict)
    distributions: List[DistributionInfo] = Field(default_factory=list)
    outliers: List[OutlierInfo] = Field(default_factory=list)
    correlation_highlights: List[str] = Field(default_factory=list)
    narrative: str = ""


# ─── Trends ────────────────────────────────────────────────────────────


class TrendShift(AnalysisModel):
    index: int
    magnitude: float
    description: str


class TrendResult(AnalysisModel):
    column: str
    direction: TrendDirection
    strength: float
    moving_averages: List[float] = Field(default_factory=list)
    seasonality: bool = False
    seasonal_period: Optional[int] = None
    shifts: List[TrendShift] = Field(default_factory=list)
    explanation: str = ""


# ─── Anomalies ─────────────────────────────────────────────────────────


class ExpectedRange(AnalysisModel):
    min: float
    max: float


class Anomaly(AnalysisModel):
    row_index: int
    column: str
    value: float
    expected_range: ExpectedRange
    score: float
    type: AnomalyType


class AnomalyResult(AnalysisModel):
    anomalies: List[Anomaly] = Field(default_factory=list)
    anomaly_score: float = 0.0
    affected_columns: List[str] = Field(default_factory=list)
    explanation: str = ""


class ColumnAnomalySummary(AnalysisModel):
    count: int
    severity: str
    top_anomalies: List[Anomaly] = Field(default_factory=list)


# ─── Forecasting ───────────────────────────────────────────────────────


class ConfidenceInterval(AnalysisModel):
    lower: float
    upper: float


class PredictionPoint(AnalysisModel):
    period: int
    value: float
    confidence: ConfidenceInterval


class ForecastResult(AnalysisModel):
    column: str
    method: ForecastMethod
    predictions: List[PredictionPoint] = Field(default_factory=list)
    trend: str
    interpretation: str


# ─── Correlations ──────────────────────────────────────────────────────


class CorrelationPair(AnalysisModel):
    column1: str
    column2: str
    coefficient: float
    type: CorrelationKind
    strength: CorrelationStrength


class CorrelationResult(AnalysisModel):
    matrix: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    strongest_relations: List[CorrelationPair] = Field(default_factory=list)
    explanation: str = ""


class ColumnCorrelation(AnalysisModel):
    coefficient: float
    strength: CorrelationStrength
    interpretation: str


class CorrelatedFeature(AnalysisModel):
    column: str
    correlation: float
    strength: CorrelationStrength


# ─── Query response ────────────────────────────────────────────────────


class InsightBundle(AnalysisModel):
    """Whichever analyzer outputs a query handler computed."""

    profile: Optional[DatasetProfile] = None
    statistics: Optional[StatisticalSummary] = None
    trends: Optional[List[TrendResult]] = None
    anomalies: Optional[AnomalyResult] = None
    forecasts: Optional[List[ForecastResult]] = None
    correlations: Optional[CorrelationResult] = None
    key_insights: Optional[List[Insight]] = None


class InsightResponse(AnalysisModel):
    query: str
    intent: QueryIntent
    insights: InsightBundle = Field(default_factory=InsightBundle)
    text_summary: str
    recommended_charts: List[str] = Field(default_factory=list)
    executive_summary: Optional[str] = None
    recommendations: Optional[List[str]] = None

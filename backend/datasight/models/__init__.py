from .base import AnalysisModel
from .insight import (
    IMPORTANCE_ORDER,
    Insight,
    InsightCategory,
    InsightImportance,
    InsightType,
)
from .analysis import (
    Anomaly,
    AnomalyResult,
    AnomalyType,
    ColumnAnomalySummary,
    ColumnCorrelation,
    ColumnProfile,
    ColumnType,
    ConfidenceInterval,
    CorrelatedFeature,
    CorrelationKind,
    CorrelationPair,
    CorrelationResult,
    CorrelationStrength,
    DatasetProfile,
    DistributionInfo,
    ExpectedRange,
    ForecastMethod,
    ForecastResult,
    InsightBundle,
    InsightResponse,
    OutlierInfo,
    PredictionPoint,
    QueryIntent,
    StatisticalSummary,
    TopValue,
    TrendDirection,
    TrendResult,
    TrendShift,
)

__all__ = [
    "AnalysisModel",
    "IMPORTANCE_ORDER",
    "Insight",
    "InsightCategory",
    "InsightImportance",
    "InsightType",
    "Anomaly",
    "AnomalyResult",
    "AnomalyType",
    "ColumnAnomalySummary",
    "ColumnCorrelation",
    "ColumnProfile",
    "ColumnType",
    "ConfidenceInterval",
    "CorrelatedFeature",
    "CorrelationKind",
    "CorrelationPair",
    "CorrelationResult",
    "CorrelationStrength",
    "DatasetProfile",
    "DistributionInfo",
    "ExpectedRange",
    "ForecastMethod",
    "ForecastResult",
    "InsightBundle",
    "InsightResponse",
    "OutlierInfo",
    "PredictionPoint",
    "QueryIntent",
    "StatisticalSummary",
    "TopValue",
    "TrendDirection",
    "TrendResult",
    "TrendShift",
]

import enum
from typing import List

from pydantic import Field

from .base import AnalysisModel


class InsightType(str, enum.Enum):
    """Types of generated insights."""
    OBSERVATION = "observation"
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    OPPORTUNITY = "opportunity"


class InsightImportance(str, enum.Enum):
    """Priority levels for insights."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Sort rank used when ordering findings high-first
IMPORTANCE_ORDER = {
    InsightImportance.HIGH: 0,
    InsightImportance.MEDIUM: 1,
    InsightImportance.LOW: 2,
}


class InsightCategory(str, enum.Enum):
    """Which analyzer produced the finding."""
    DATA_QUALITY = "Data Quality"
    DATA_STRUCTURE = "Data Structure"
    ANOMALIES = "Anomalies"
    TRENDS = "Trends"
    CORRELATIONS = "Correlations"
    DISTRIBUTION = "Distribution"


class Insight(AnalysisModel):
    """A single prioritized finding about the dataset."""

    type: InsightType
    category: InsightCategory
    title: str
    description: str
    importance: InsightImportance = InsightImportance.MEDIUM
    related_columns: List[str] = Field(default_factory=list)

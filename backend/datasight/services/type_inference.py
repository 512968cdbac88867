"""
Column Type Inference

Classifies a column as numeric, categorical, datetime, boolean or text from
its raw cell values. Rules are checked in priority order on a sample of the
first 100 non-null values, and the first rule that matches wins:

  1. no non-null values           → text
  2. every value boolean-like     → boolean
  3. ≥90% parse as finite numbers → numeric
  4. ≥80% look like dates         → datetime
  5. low cardinality              → categorical
  6. otherwise                    → text

Every column gets a type; nothing here raises.
"""

import re
from typing import Any, Sequence

from ..models import ColumnType
from .coercion import is_missing, to_bool, to_date, to_number, to_text

SAMPLE_SIZE = 100
NUMERIC_RATIO = 0.9
DATETIME_RATIO = 0.8
CATEGORICAL_UNIQUE_RATIO = 0.5
CATEGORICAL_MAX_UNIQUE = 20

DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}"),   # 2024-01-15...
    re.compile(r"^\d{2}/\d{2}/\d{4}"),   # 01/15/2024
    re.compile(r"^\d{2}-\d{2}-\d{4}"),   # 15-01-2024
]


def looks_like_date(value: Any) -> bool:
    text = to_text(value)
    if any(p.match(text) for p in DATE_PATTERNS):
        return True
    return to_date(value) is not None


def infer_type(values: Sequence[Any]) -> ColumnType:
    """Infer the semantic type of a column from its raw values."""
    non_null = [v for v in values if not is_missing(v)]
    if not non_null:
        return ColumnType.TEXT

    sample = non_null[:SAMPLE_SIZE]

    if all(to_bool(v) is not None for v in sample):
        return ColumnType.BOOLEAN

    numeric_count = sum(1 for v in sample if to_number(v) is not None)
    if numeric_count / len(sample) >= NUMERIC_RATIO:
        return ColumnType.NUMERIC

    date_count = sum(1 for v in sample if looks_like_date(v))
    if date_count / len(sample) >= DATETIME_RATIO:
        return ColumnType.DATETIME

    unique_ratio = len({to_text(v) for v in sample}) / len(sample)
    if unique_ratio < CATEGORICAL_UNIQUE_RATIO:
        return ColumnType.CATEGORICAL
    if len({to_text(v) for v in non_null}) <= CATEGORICAL_MAX_UNIQUE:
        return ColumnType.CATEGORICAL

    return ColumnType.TEXT

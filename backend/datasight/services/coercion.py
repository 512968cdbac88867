"""
Row / value coercion at the dataset boundary.

A dataset is an ordered sequence of row mappings whose cells are loosely typed
scalars (numbers, strings, booleans, date-like strings, or nothing at all).
The helpers here turn those cells into the typed values the analyzers need.
Every coercion is total: a value that cannot be converted yields ``None`` (or
is dropped from a series) instead of raising, so thresholds such as "at least
10 numeric values" are always evaluated on the filtered series.

Column set: the keys of the first row. A row missing one of those keys reads
as null for it; keys that only appear in later rows are ignored.
"""

import math
import numbers
import warnings
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.exceptions import InvalidDatasetError


def ensure_dataset(rows: Any) -> Sequence:
    """Fail fast on a missing dataset or rows that are not mappings."""
    if rows is None:
        raise InvalidDatasetError("dataset is required, got None")
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise InvalidDatasetError(
            f"dataset must be a sequence of row mappings, got {type(rows).__name__}"
        )
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidDatasetError(
                f"row {i} must be a mapping, got {type(row).__name__}"
            )
    return rows


def column_names(rows: Sequence) -> List[str]:
    """Column names, taken from the first row."""
    if not rows:
        return []
    return list(rows[0].keys())


def column_values(rows: Sequence, column: str) -> List[Any]:
    """Raw cell values of one column, ``None`` where a row lacks the key."""
    return [row.get(column) for row in rows]


# ─── Scalar coercion ─────────────────────────────────────────────────────


def is_missing(value: Any) -> bool:
    """None, NaN and empty / whitespace-only strings count as null."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def to_number(value: Any) -> Optional[float]:
    """Finite float for a cell, or None when it is not numeric."""
    if is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_date(value: Any) -> Optional[datetime]:
    """Naive (UTC-normalized) datetime for a cell, or None."""
    if is_missing(value) or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, datetime):
        stamp = pd.Timestamp(value)
    elif isinstance(value, date):
        stamp = pd.Timestamp(value.isoformat())
    else:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                stamp = pd.to_datetime(to_text(value), errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if stamp is None or pd.isna(stamp):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp.to_pydatetime()


_TRUE_WORDS = {"true", "1", "yes"}
_FALSE_WORDS = {"false", "0", "no"}


def to_bool(value: Any) -> Optional[bool]:
    """True/False for boolean-like cells, None otherwise."""
    if is_missing(value):
        return None
    text = to_text(value).lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def to_text(value: Any) -> str:
    """Canonical string form of a cell, used for counting and labels."""
    if value is None:
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, numbers.Real) and not isinstance(value, numbers.Integral):
        number = float(value)
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return str(number)
    return str(value)


# ─── Column extraction ───────────────────────────────────────────────────


def non_null_values(rows: Sequence, column: str) -> List[Any]:
    return [v for v in column_values(rows, column) if not is_missing(v)]


def numeric_values(rows: Sequence, column: str) -> np.ndarray:
    """Numeric series of a column; cells that do not coerce are dropped."""
    coerced = (to_number(v) for v in column_values(rows, column))
    return np.array([v for v in coerced if v is not None], dtype=float)


def indexed_numeric_values(rows: Sequence, column: str) -> Tuple[np.ndarray, np.ndarray]:
    """(row positions, numeric series) for the cells that coerce to numbers."""
    positions, series = [], []
    for i, v in enumerate(column_values(rows, column)):
        number = to_number(v)
        if number is not None:
            positions.append(i)
            series.append(number)
    return np.array(positions, dtype=int), np.array(series, dtype=float)


def text_values(rows: Sequence, column: str) -> List[str]:
    """String form of every cell, nulls as empty strings."""
    return ["" if is_missing(v) else to_text(v) for v in column_values(rows, column)]


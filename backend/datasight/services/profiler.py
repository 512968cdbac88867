"""
Dataset Profiler — Structural Profile of Every Column

Builds a per-column profile (inferred type, null / unique counts, type-specific
summary fields, top-5 values) and a dataset-level profile (shape, completeness,
serialized size). Profiles are computed fresh on every call and never mutated.
"""

import logging
from typing import Any, Dict, List, Sequence

from ..models import ColumnProfile, ColumnType, DatasetProfile, TopValue
from . import primitives
from .coercion import (
    column_names,
    column_values,
    ensure_dataset,
    is_missing,
    numeric_values,
    to_date,
    to_number,
    to_text,
)
from .formatting import estimate_memory_size, format_percent, format_value
from .type_inference import infer_type

logger = logging.getLogger("datasight.profiler")

TOP_VALUES = 5
HIGH_NULL_THRESHOLD = 0.1
ID_UNIQUE_RATIO = 0.95
ID_MIN_ROWS = 10


def profile_column(rows: Sequence[Dict[str, Any]], name: str) -> ColumnProfile:
    """Create a profile for a single column."""
    ensure_dataset(rows)
    values = column_values(rows, name)
    non_null = [v for v in values if not is_missing(v)]
    col_type = infer_type(values)

    fields: Dict[str, Any] = {
        "name": name,
        "type": col_type,
        "null_count": len(values) - len(non_null),
        "total_count": len(values),
        "unique_count": len({to_text(v) for v in non_null}),
        "top_values": _top_values(non_null, col_type),
    }

    if col_type == ColumnType.NUMERIC:
        fields.update(_numeric_fields(numeric_values(rows, name)))
    elif col_type == ColumnType.DATETIME:
        fields.update(_datetime_fields(non_null))
    elif col_type in (ColumnType.CATEGORICAL, ColumnType.TEXT):
        fields["mode"] = primitives.mode([to_text(v) for v in non_null])

    profile = ColumnProfile(**fields)
    logger.debug(
        "  profiled '%s' → type=%s, nulls=%d, unique=%d",
        name, col_type.value, profile.null_count, profile.unique_count,
    )
    return profile


def profile_dataset(rows: Sequence[Dict[str, Any]]) -> DatasetProfile:
    """Profile every column found in the first row."""
    ensure_dataset(rows)
    logger.info("profile_dataset: %d records", len(rows))
    if not rows:
        logger.warning("profile_dataset: no records, returning empty profile")
        return DatasetProfile(
            row_count=0,
            column_count=0,
            columns=[],
            memory_estimate="0 bytes",
            completeness=0.0,
        )

    names = column_names(rows)
    columns = [profile_column(rows, name) for name in names]

    total_cells = len(rows) * len(names)
    null_cells = sum(c.null_count for c in columns)
    completeness = (total_cells - null_cells) / total_cells * 100 if total_cells > 0 else 0.0

    profile = DatasetProfile(
        row_count=len(rows),
        column_count=len(names),
        columns=columns,
        memory_estimate=estimate_memory_size(rows),
        completeness=round(completeness, 2),
    )
    logger.info(
        "profile_dataset: done, %d columns, %.2f%% complete",
        profile.column_count, profile.completeness,
    )
    return profile


def generate_profile_summary(profile: DatasetProfile) -> str:
    """Multi-line text overview of a dataset profile."""
    numeric_cols = get_columns_by_type(profile, ColumnType.NUMERIC)
    categorical_cols = get_columns_by_type(profile, ColumnType.CATEGORICAL)
    datetime_cols = get_columns_by_type(profile, ColumnType.DATETIME)

    lines = [
        "Dataset Overview:",
        f"• {profile.row_count:,} rows × {profile.column_count} columns",
        f"• Data completeness: {format_percent(profile.completeness)}",
        f"• Estimated size: {profile.memory_estimate}",
        "",
        "Column Types:",
        f"• Numeric: {len(numeric_cols)} columns",
        f"• Categorical: {len(categorical_cols)} columns",
        f"• DateTime: {len(datetime_cols)} columns",
    ]

    if numeric_cols:
        lines += ["", "Key Numeric Columns:"]
        for col in numeric_cols[:5]:
            mean = f"{col.mean:.2f}" if col.mean is not None else "N/A"
            lines.append(
                f"• {col.name}: range [{format_value(col.min)} - {format_value(col.max)}], mean {mean}"
            )

    if categorical_cols:
        lines += ["", "Key Categorical Columns:"]
        for col in categorical_cols[:5]:
            lines.append(f"• {col.name}: {col.unique_count} unique values")

    return "\n".join(lines)


def get_columns_by_type(profile: DatasetProfile, col_type: ColumnType) -> List[ColumnProfile]:
    return [c for c in profile.columns if c.type == col_type]


def find_high_null_columns(
    profile: DatasetProfile, threshold: float = HIGH_NULL_THRESHOLD
) -> List[ColumnProfile]:
    """Columns whose null ratio exceeds ``threshold``."""
    return [
        c for c in profile.columns
        if c.total_count > 0 and c.null_count / c.total_count > threshold
    ]


def find_potential_id_columns(profile: DatasetProfile) -> List[ColumnProfile]:
    """Columns unique enough to be row identifiers."""
    return [
        c for c in profile.columns
        if c.total_count > ID_MIN_ROWS and c.unique_count / c.total_count > ID_UNIQUE_RATIO
    ]


# ─── Internal helpers ────────────────────────────────────────────────────


def _top_values(non_null: List[Any], col_type: ColumnType) -> List[TopValue]:
    if col_type == ColumnType.NUMERIC:
        keys = []
        for v in non_null:
            number = to_number(v)
            keys.append(number if number is not None else to_text(v))
    else:
        keys = [to_text(v) for v in non_null]
    return [
        TopValue(value=value, count=count)
        for value, count in primitives.top_frequent_values(keys, TOP_VALUES)
    ]


def _numeric_fields(vals) -> Dict[str, Any]:
    if len(vals) == 0:
        return {}
    return {
        "min": float(vals.min()),
        "max": float(vals.max()),
        "mean": primitives.mean(vals),
        "median": primitives.median(vals),
        "mode": primitives.mode(vals.tolist()),
        "std_dev": primitives.standard_deviation(vals),
    }


def _datetime_fields(non_null: List[Any]) -> Dict[str, Any]:
    dates = sorted(d for d in (to_date(v) for v in non_null) if d is not None)
    if not dates:
        return {}
    return {"min": dates[0], "max": dates[-1]}

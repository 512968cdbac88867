import json
from typing import Any, Sequence


def format_number(value: float, decimals: int = 2) -> str:
    """Compact display form: 1.50K, 2.00M, 3.10B."""
    magnitude = abs(value)
    if magnitude >= 1e9:
        return f"{value / 1e9:.{decimals}f}B"
    if magnitude >= 1e6:
        return f"{value / 1e6:.{decimals}f}M"
    if magnitude >= 1e3:
        return f"{value / 1e3:.{decimals}f}K"
    return f"{value:.{decimals}f}"


def format_bytes(size: int) -> str:
    if size >= 1e9:
        return f"{size / 1e9:.2f} GB"
    if size >= 1e6:
        return f"{size / 1e6:.2f} MB"
    if size >= 1e3:
        return f"{size / 1e3:.2f} KB"
    return f"{size} bytes"


def estimate_memory_size(rows: Sequence[Any]) -> str:
    """Size of the rows serialized as compact UTF-8 JSON."""
    payload = json.dumps(list(rows), default=str, separators=(",", ":"), ensure_ascii=False)
    return format_bytes(len(payload.encode("utf-8")))


def format_value(value: Any) -> str:
    """Display a profile min/max that may be a float or a datetime."""
    if value is None:
        return "N/A"
    if isinstance(value, float):
        if value.is_integer():
            return f"{int(value):,}"
        return f"{value:,.2f}"
    return str(value)


def format_percent(value: float) -> str:
    """Percentage text without a trailing ``.0``: 100%, 97.5%, 66.67%."""
    number = float(value)
    if number.is_integer():
        return f"{int(number)}%"
    return f"{number}%"

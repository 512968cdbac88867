"""
Tests for display formatting helpers.
"""

from datetime import datetime

import pytest

from datasight.services.formatting import (
    estimate_memory_size,
    format_bytes,
    format_number,
    format_percent,
    format_value,
)


@pytest.mark.parametrize("value,expected", [
    (12.5, "12.50"),
    (1500, "1.50K"),
    (-1500, "-1.50K"),
    (2_000_000, "2.00M"),
    (3.1e9, "3.10B"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_number_decimals():
    assert format_number(1234, decimals=1) == "1.2K"


def test_format_bytes():
    assert format_bytes(512) == "512 bytes"
    assert format_bytes(2048) == "2.05 KB"
    assert format_bytes(3_500_000) == "3.50 MB"


def test_estimate_memory_size_uses_compact_json():
    assert estimate_memory_size([{"a": 1}]) == "9 bytes"


def test_estimate_memory_size_counts_utf8_bytes():
    # "é" is two bytes in UTF-8
    assert estimate_memory_size([{"a": "é"}]) == "12 bytes"


def test_format_value():
    assert format_value(None) == "N/A"
    assert format_value(1000.0) == "1,000"
    assert format_value(1234.5) == "1,234.50"
    assert format_value(datetime(2024, 1, 2)) == "2024-01-02 00:00:00"


@pytest.mark.parametrize("value,expected", [
    (100.0, "100%"),
    (97.5, "97.5%"),
    (66.67, "66.67%"),
    (0, "0%"),
])
def test_format_percent(value, expected):
    assert format_percent(value) == expected

"""
Tests for value coercion and column type inference.
"""

from datetime import datetime

import numpy as np
import pytest

from datasight.core.exceptions import InvalidDatasetError
from datasight.models import ColumnType
from datasight.services.coercion import (
    ensure_dataset,
    indexed_numeric_values,
    is_missing,
    numeric_values,
    to_bool,
    to_date,
    to_number,
    to_text,
)
from datasight.services.type_inference import infer_type


class TestCoercion:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
    def test_missing_values(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0), ("4.5", 4.5), (" 7 ", 7.0), (True, 1.0), (False, 0.0),
    ])
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, "1_000", float("inf"), [1]])
    def test_to_number_rejects(self, value):
        assert to_number(value) is None

    def test_to_date_parses_iso_strings(self):
        assert to_date("2024-03-05") == datetime(2024, 3, 5)

    def test_to_date_rejects_garbage(self):
        assert to_date("banana") is None
        assert to_date(True) is None

    def test_to_bool(self):
        assert to_bool("Yes") is True
        assert to_bool(0) is False
        assert to_bool("maybe") is None

    def test_to_text_drops_integral_fraction(self):
        assert to_text(5.0) == "5"
        assert to_text(2.5) == "2.5"
        assert to_text(True) == "true"

    def test_numeric_values_excludes_non_numeric_cells(self):
        rows = [{"v": 1}, {"v": "x"}, {"v": None}, {"v": "3"}, {}]
        np.testing.assert_allclose(numeric_values(rows, "v"), [1.0, 3.0])

    def test_indexed_numeric_values_keeps_row_positions(self):
        rows = [{"v": "a"}, {"v": 2}, {"v": ""}, {"v": 4}]
        positions, series = indexed_numeric_values(rows, "v")
        assert positions.tolist() == [1, 3]
        assert series.tolist() == [2.0, 4.0]

    def test_ensure_dataset_rejects_none(self):
        with pytest.raises(InvalidDatasetError):
            ensure_dataset(None)

    def test_ensure_dataset_rejects_non_mapping_rows(self):
        with pytest.raises(InvalidDatasetError):
            ensure_dataset([{"a": 1}, [1, 2]])

    def test_invalid_dataset_is_a_type_error(self):
        with pytest.raises(TypeError):
            ensure_dataset("a,b\n1,2")


class TestInferType:
    def test_all_null_is_text(self):
        assert infer_type([None, "", "  "]) == ColumnType.TEXT

    def test_boolean(self):
        assert infer_type(["true", "false", "TRUE", "no"]) == ColumnType.BOOLEAN

    def test_numeric(self):
        assert infer_type(["1.5", 2, "3", 4.25]) == ColumnType.NUMERIC

    def test_numeric_tolerates_a_few_bad_cells(self):
        values = [str(i) for i in range(2, 21)] + ["n/a"]
        assert infer_type(values) == ColumnType.NUMERIC

    def test_datetime(self):
        values = [f"2024-01-{d:02d}" for d in range(1, 11)]
        assert infer_type(values) == ColumnType.DATETIME

    def test_low_cardinality_is_categorical(self):
        values = ["North", "South", "North", "South", "North", "South"]
        assert infer_type(values) == ColumnType.CATEGORICAL

    def test_high_cardinality_is_text(self):
        values = [f"customer note {i}" for i in range(30)]
        assert infer_type(values) == ColumnType.TEXT

    def test_nulls_are_ignored(self):
        assert infer_type([None, "5", "", "6", "7"]) == ColumnType.NUMERIC

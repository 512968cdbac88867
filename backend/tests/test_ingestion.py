"""
Tests for CSV ingestion.
"""

from datasight.services.ingestion import decode_upload, parse_csv


def test_rows_keyed_by_header():
    rows = parse_csv("name,amount\nwidget,10\ngadget,25\n")
    assert rows == [
        {"name": "widget", "amount": "10"},
        {"name": "gadget", "amount": "25"},
    ]


def test_quoted_field_keeps_delimiter():
    rows = parse_csv('city,label\nParis,"big, old"\n')
    assert rows[0]["label"] == "big, old"


def test_names_and_values_are_trimmed():
    rows = parse_csv(" name , amount \n  widget ,  10  \n")
    assert rows == [{"name": "widget", "amount": "10"}]


def test_blank_lines_are_skipped():
    rows = parse_csv("\nname,amount\n\nwidget,10\n   \ngadget,25\n\n")
    assert [r["name"] for r in rows] == ["widget", "gadget"]


def test_short_rows_are_padded():
    rows = parse_csv("a,b,c\n1,2\n")
    assert rows == [{"a": "1", "b": "2", "c": ""}]


def test_surplus_cells_are_dropped():
    rows = parse_csv("a,b\n1,2,3\n4,5\n")
    assert rows == [{"a": "1", "b": "2"}, {"a": "4", "b": "5"}]


def test_values_stay_strings():
    rows = parse_csv("n,flag\n007,true\n")
    assert rows == [{"n": "007", "flag": "true"}]


def test_empty_input():
    assert parse_csv("") == []
    assert parse_csv("  \n\n") == []


def test_header_only():
    assert parse_csv("a,b\n") == []


def test_decode_strips_bom():
    assert decode_upload("\ufeffa,b\n1,2".encode("utf-8")) == "a,b\n1,2"


def test_decode_falls_back_to_latin1():
    assert decode_upload("café".encode("latin-1")) == "café"


def test_unterminated_quote_yields_no_rows():
    assert parse_csv('a,b\n1,"x\n2,3\n') == []


def test_keys_are_raw_header_cells():
    rows = parse_csv("a,a,\n1,2,3\n")
    assert rows == [{"a": "2", "": "3"}]

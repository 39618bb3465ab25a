from __future__ import annotations

import pytest
from selectolax.parser import HTMLParser

from ghostsheet.engine import FieldSpec, SheetParser, coerce
from ghostsheet.engine.parser import is_blank_row
from ghostsheet.errors import ParseError


@pytest.mark.parametrize(
    ("raw", "type_tag", "expected"),
    [
        ("7", "int", 7),
        ("-12", "integer", -12),
        ("42px", "int", 42),
        ("abc", "int", None),
        ("", "int", None),
        ("0.25", "float", 0.25),
        ("3", "double", 3.0),
        ("1.5kg", "float", 1.5),
        ("n/a", "float", None),
        ("TRUE", "bool", True),
        (" true ", "boolean", True),
        ("no", "bool", False),
        ("", "bool", False),
        ('{"a": 1}', "json", {"a": 1}),
        ("[1, 2]", "json", [1, 2]),
        ("", "json", None),
        ("abc", "unknowntype", "abc"),
        (" spaced ", "string", " spaced "),
        ("7", None, "7"),
        ("7", "INT", 7),
    ],
)
def test_coerce_table(raw, type_tag, expected) -> None:
    value = coerce(raw, type_tag)
    assert value == expected
    assert type(value) is type(expected)


def test_field_spec_parse_splits_on_first_colon() -> None:
    assert FieldSpec.parse("age:int") == FieldSpec(name="age", type="int")
    assert FieldSpec.parse("name") == FieldSpec(name="name", type="string")
    assert FieldSpec.parse("time:a:b") == FieldSpec(name="time", type="a:b")
    assert FieldSpec.parse("label:") == FieldSpec(name="label", type="string")


def test_blank_row_detection() -> None:
    assert is_blank_row([])
    assert is_blank_row(["", "", ""])
    assert not is_blank_row(["", "x"])


def test_parse_sample_document(sample_html) -> None:
    document = SheetParser().parse_html("abc123", sample_html)

    assert document.title == "Members"
    assert document.key == "abc123"
    assert [sheet.name for sheet in document.sheets] == ["Sheet1", "Settings"]

    first = document.sheets[0]
    assert first.id == "s1"
    assert first.fields == [FieldSpec(name="name", type="string"), FieldSpec(name="age", type="int")]
    assert first.items == [{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}]

    settings = document.sheets[1]
    assert settings.id == "1520"
    assert settings.items == [
        {"flag": True, "ratio": 0.5, "meta": {"a": [1, 2]}, "note": "plain"},
        {"flag": False, "ratio": 2.0, "meta": None, "note": ""},
    ]
    assert list(settings.items[0]) == ["flag", "ratio", "meta", "note"]


def test_blank_rows_yield_neither_schema_nor_record(html_builder) -> None:
    html = html_builder(
        {
            ("s1", "Sheet1"): [
                ["", "", ""],
                ["a", "b:int", "c:bool"],
                ["", "", ""],
                ["x", "1", "true"],
            ]
        }
    )
    sheet = SheetParser().parse_html("k", html).sheets[0]
    assert [field.name for field in sheet.fields] == ["a", "b", "c"]
    assert sheet.items == [{"a": "x", "b": 1, "c": True}]


def test_sheet_without_data_rows_keeps_fields_absent(html_builder) -> None:
    html = html_builder({("s1", "Empty"): [["", ""]]})
    sheet = SheetParser().parse_html("k", html).sheets[0]
    assert sheet.fields is None
    assert sheet.items == []


def test_unmatched_sheet_id_degrades_single_sheet(html_builder, captured_logs) -> None:
    html = html_builder({("s1", "Good"): [["name"], ["Alice"]]}).replace(
        '<ul id="sheet-menu">',
        '<ul id="sheet-menu"><li><a onclick="noArgs()">Broken</a></li>',
    )
    document = SheetParser().parse_html("k", html)
    broken, good = document.sheets
    assert broken.id is None
    assert broken.name == "Broken"
    assert broken.items == []
    assert good.items == [{"name": "Alice"}]
    assert any(entry["event"] == "sheet_id_unmatched" for entry in captured_logs)


def test_missing_table_and_title_degrade_gracefully() -> None:
    html = '<html><body><ul id="sheet-menu"><li><a onclick="show(\'ghost\')">Ghost</a></li></ul></body></html>'
    document = SheetParser().parse_html("k", html)
    assert document.title == ""
    assert document.sheets[0].id == "ghost"
    assert document.sheets[0].fields is None


def test_title_falls_back_to_head_title() -> None:
    html = "<html><head><title>From head</title></head><body></body></html>"
    document = SheetParser().parse_html("k", html)
    assert document.title == "From head"
    assert document.sheets == []


def test_malformed_json_cell_raises_parse_error(html_builder) -> None:
    html = html_builder({("s1", "Data"): [["payload:json"], ["{not json"]]})
    with pytest.raises(ParseError, match="payload"):
        SheetParser().parse_html("k", html)


@pytest.mark.parametrize(
    ("type_tag", "cell", "expected"),
    [
        ("int", "9" * 5000, None),
        ("integer", "-" + "1" * 5000, None),
        ("float", "9" * 5000, None),
    ],
)
def test_oversized_numbers_coerce_to_none(type_tag, cell, expected) -> None:
    assert coerce(cell, type_tag) is expected


@pytest.mark.parametrize("cell", ["9" * 5000, "[" * 100_000, "{not json"])
def test_unreadable_json_cell_is_parse_error(html_builder, cell) -> None:
    html = html_builder({("s1", "Data"): [["n:json"], [cell]]})
    with pytest.raises(ParseError, match="'n'"):
        SheetParser().parse_html("k", html)


@pytest.mark.parametrize("html", [None, "", "   "])
def test_empty_input_is_parse_error(html) -> None:
    with pytest.raises(ParseError):
        SheetParser().parse_html("k", html)


def test_parse_rejects_missing_tree() -> None:
    with pytest.raises(ParseError):
        SheetParser().parse("k", None)


@pytest.mark.parametrize("html", ["", " \n ", "<html><head></head><body>\n</body></html>"])
def test_parse_rejects_empty_tree(html) -> None:
    with pytest.raises(ParseError, match="Empty document"):
        SheetParser().parse("k", HTMLParser(html))


def test_parse_accepts_tree(sample_html) -> None:
    document = SheetParser().parse("abc123", HTMLParser(sample_html))
    assert len(document.sheets) == 2


@pytest.mark.parametrize(
    ("handler", "expected"),
    [
        ("switchToSheet('od6')", "od6"),
        ("gotoSheet( '1520' ); return false;", "1520"),
        ("noArgs()", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_sheet_id(handler, expected) -> None:
    assert SheetParser.extract_sheet_id(handler) == expected

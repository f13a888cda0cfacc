"""Tests for building mutation payloads from text input."""

from __future__ import annotations

import pytest

from ntask.config import LOCALES
from ntask.contracts.common import ParseError, PropertyNotFound, UnsupportedPropertyKind
from ntask.contracts.schema import parse_schema
from ntask.engine.payloads import build_payload, build_properties, parse_checkbox, parse_number
from tests.conftest import column


@pytest.mark.parametrize(
    "raw, expected",
    [("42", 42), (" 7 ", 7), ("2.5", 2.5), ("3.0", 3.0), ("-1e3", -1000.0), ("+5", 5),
     ("12345678901234567891", 12345678901234567891), ("", None)],
)
def test_parse_number(raw, expected):
    result = parse_number(raw)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize("raw", ["abc", "1,5", "nan", "inf", "-Infinity", "+-5"])
def test_parse_number_rejects(raw):
    with pytest.raises(ParseError) as exc:
        parse_number(raw)
    assert exc.value.code == "ERR_PARSE_INVALID"
    assert exc.value.details["raw"] == raw


@pytest.mark.parametrize("raw", ["true", "YES", " yes ", "はい"])
def test_checkbox_true_tokens(raw):
    assert parse_checkbox(raw) is True


@pytest.mark.parametrize("raw", ["false", "no", "いいえ", "", "1"])
def test_checkbox_other_tokens_are_false(raw):
    assert parse_checkbox(raw) is False


def test_checkbox_locale_restricts_native_token():
    assert parse_checkbox("はい", LOCALES["ja"]) is True
    assert parse_checkbox("はい", LOCALES["en"]) is False
    assert parse_checkbox("true", LOCALES["ja"]) is True


def test_build_payload_wire_shapes():
    assert build_payload("title", "Write report").to_wire() == {
        "title": [{"type": "text", "text": {"content": "Write report"}}]
    }
    assert build_payload("rich_text", "n").to_wire() == {
        "rich_text": [{"type": "text", "text": {"content": "n"}}]
    }
    assert build_payload("number", "3").to_wire() == {"number": 3}
    assert build_payload("select", "High").to_wire() == {"select": {"name": "High"}}
    assert build_payload("checkbox", "yes").to_wire() == {"checkbox": True}
    assert build_payload("date", "2025-05-01").to_wire() == {"date": {"start": "2025-05-01"}}


def test_empty_input_clears():
    assert build_payload("number", "").to_wire() == {"number": None}
    assert build_payload("select", "").to_wire() == {"select": None}
    assert build_payload("date", " ").to_wire() == {"date": None}


def test_date_is_forwarded_unvalidated():
    assert build_payload("date", "2025-13-45").start == "2025-13-45"


@pytest.mark.parametrize("kind", ["multi_select", "status", "unsupported"])
def test_unsupported_kinds(kind):
    with pytest.raises(UnsupportedPropertyKind) as exc:
        build_payload(kind, "x")
    assert exc.value.details == {"kind": kind}


def test_build_properties_uses_schema_kinds():
    schema = parse_schema({
        "Task": column("Task", "title"),
        "Estimate": column("Estimate", "number"),
        "Done": column("Done", "checkbox"),
    })
    values = build_properties(schema, {"Task": "A", "Estimate": "1.5", "Done": "はい"}, locale=LOCALES["ja"])
    assert values["Estimate"].number == 1.5
    assert values["Done"].checked is True


def test_build_properties_unknown_column():
    schema = parse_schema({"Task": column("Task", "title")})
    with pytest.raises(PropertyNotFound) as exc:
        build_properties(schema, {"Nope": "x"})
    assert "Task" in exc.value.message

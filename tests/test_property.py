"""Property-based tests using Hypothesis.

These tests verify invariants that must hold for *any* input:
- CSV fields survive a round trip through ``csv.reader``
- Fields without special characters are never quoted
- Text and number payloads project back to the input
- Resolution always returns a column of the role's kind
"""

from __future__ import annotations

import csv
import io
import math

from hypothesis import given
from hypothesis import strategies as st

from ntask.config import LOCALES
from ntask.contracts.schema import ColumnSchema
from ntask.engine import resolver
from ntask.engine.payloads import build_payload, parse_number
from ntask.engine.projector import format_scalar, project
from ntask.io.export import render

# Line breaks inside fields are limited to "\n", the line terminator.
field_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\r\x00"))
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs", "Cc", "Zl", "Zp"),
        blacklist_characters=',"\x00',
    ),
    min_size=1,
)


@given(st.lists(st.tuples(field_text, field_text), max_size=5))
def test_csv_round_trip(pairs):
    rows = [{"k": "r", "a": a, "b": b} for a, b in pairs]
    text = render(["k", "a", "b"], rows)
    parsed = list(csv.reader(io.StringIO(text, newline="")))
    assert parsed[0] == ["k", "a", "b"]
    assert parsed[1:] == [["r", a, b] for a, b in pairs]


@given(plain_text)
def test_plain_fields_are_not_quoted(value):
    assert render(["k", "v"], [{"k": "r", "v": value}]) == f"k,v\nr,{value}\n"


@given(st.text())
def test_text_payload_projects_back(value):
    assert project(build_payload("rich_text", value)) == value
    assert project(build_payload("title", value)) == value


@given(st.integers(min_value=-10**12, max_value=10**12))
def test_integer_payload(value):
    assert project(build_payload("number", str(value))) == value


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_float_parse(value):
    parsed = parse_number(repr(value))
    assert math.isclose(parsed, value) or parsed == value


kinds = st.sampled_from(["title", "rich_text", "date", "checkbox", "number"])
names = st.text(alphabet="abcdue dateDONE完了期限", min_size=1, max_size=12)


@given(st.dictionaries(names, kinds, max_size=6))
def test_resolution_respects_kind(columns):
    schema = {name: ColumnSchema(name=name, kind=kind, wire_type=kind) for name, kind in columns.items()}
    for role, kind in resolver.ROLE_KINDS.items():
        res = resolver.resolution(schema, role)
        assert all(schema[name].kind == kind for name in res.candidates)
        assert res.candidates == [n for n in schema if n in res.candidates]
        if res.candidates:
            assert resolver.resolve(schema, role) == res.candidates[0]


@given(st.sampled_from(["yes", "no"]), st.sampled_from(["en", "ja"]))
def test_checkbox_round_trip(token, locale_name):
    locale = LOCALES[locale_name]
    text = locale.yes if token == "yes" else locale.no
    assert format_scalar(project(build_payload("checkbox", text, locale=locale)), locale) == text


@given(st.one_of(
    st.integers(min_value=-10**9, max_value=10**9).map(str),
    st.dates().map(lambda d: d.isoformat()),
))
def test_number_and_date_display_round_trip(text):
    kind = "date" if "-" in text[1:] else "number"
    assert format_scalar(project(build_payload(kind, text))) == text


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_float_display_round_trip(value):
    text = repr(value)
    assert format_scalar(project(build_payload("number", text))) == text

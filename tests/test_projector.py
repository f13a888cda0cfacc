"""Tests for value projection and scalar formatting."""

from __future__ import annotations

import pytest

from ntask.config import LOCALES
from ntask.contracts.schema import (
    PROPERTY_KINDS,
    CheckboxValue,
    DateValue,
    MultiSelectValue,
    NumberValue,
    Record,
    SelectValue,
    StatusValue,
    TextRun,
    TextValue,
    TitleValue,
    UnsupportedValue,
)
from ntask.engine.projector import format_scalar, plain_title, project, project_record

SAMPLES = {
    "title": TitleValue(runs=[TextRun(plain_text="Write"), TextRun(plain_text=" report")]),
    "rich_text": TextValue(runs=[TextRun(plain_text="note")]),
    "number": NumberValue(number=4),
    "select": SelectValue(selected="High"),
    "multi_select": MultiSelectValue(selected=["a", "b"]),
    "date": DateValue(start="2025-04-20T09:00:00.000+09:00"),
    "checkbox": CheckboxValue(checked=True),
    "status": StatusValue(selected="Doing"),
    "unsupported": UnsupportedValue(wire_type="people", raw=[{"id": "u1"}]),
}


def test_every_kind_has_a_projection():
    assert set(SAMPLES) == set(PROPERTY_KINDS)
    for kind, value in SAMPLES.items():
        assert value.kind == kind


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("title", "Write"),
        ("rich_text", "note"),
        ("number", 4),
        ("select", "High"),
        ("multi_select", "a; b"),
        ("date", "2025-04-20"),
        ("checkbox", True),
        ("status", "Doing"),
        ("unsupported", ""),
    ],
)
def test_project(kind, expected):
    assert project(SAMPLES[kind]) == expected


def test_empty_values_project_to_empty_marker_or_blank():
    assert project(TitleValue()) == ""
    assert project(NumberValue()) is None
    assert project(SelectValue()) is None
    assert project(DateValue()) is None
    assert project(MultiSelectValue()) == ""
    assert project(CheckboxValue()) is False


def test_project_record_follows_column_order():
    record = Record(id="p1", values={"Done": CheckboxValue(checked=False), "Task": TitleValue(runs=[TextRun(plain_text="A")])})
    row = project_record(record, ["Task", "Due", "Done"])
    assert list(row) == ["Task", "Due", "Done"]
    assert row == {"Task": "A", "Due": None, "Done": False}


def test_plain_title_joins_runs_and_uses_placeholder():
    assert plain_title(SAMPLES["title"]) == "Write report"
    assert plain_title(TitleValue(), "Untitled") == "Untitled"
    assert plain_title(None, "無題") == "無題"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (True, "yes"),
        (False, "no"),
        (3, "3"),
        (3.0, "3.0"),
        (2.5, "2.5"),
        ("x", "x"),
    ],
)
def test_format_scalar_en(value, expected):
    assert format_scalar(value) == expected


def test_format_scalar_ja_tokens():
    ja = LOCALES["ja"]
    assert format_scalar(True, ja) == "はい"
    assert format_scalar(False, ja) == "いいえ"

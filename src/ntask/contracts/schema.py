"""Column schema, typed values and records as returned by the Database Service.

Kind tags reuse the Notion wire names (``title``, ``rich_text``, ...).  Any
wire type outside the known set is carried as ``unsupported`` so that new
property types never break reading a database.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union, get_args

from pydantic import BaseModel, Field

PropertyKind = Literal[
    "title",
    "rich_text",
    "number",
    "select",
    "multi_select",
    "date",
    "checkbox",
    "status",
    "unsupported",
]

PROPERTY_KINDS: tuple[str, ...] = get_args(PropertyKind)

# Kinds whose schema definition carries a list of options.
OPTION_KINDS: frozenset[str] = frozenset({"select", "multi_select", "status"})


class SelectOption(BaseModel):
    name: str
    id: str | None = None
    color: str | None = None


class ColumnSchema(BaseModel):
    """One column (property) of a database."""

    name: str
    kind: PropertyKind
    wire_type: str
    id: str | None = None
    options: list[SelectOption] = Field(default_factory=list)


class TextRun(BaseModel):
    plain_text: str = ""
    href: str | None = None

    def to_wire(self) -> dict[str, Any]:
        text: dict[str, Any] = {"content": self.plain_text}
        if self.href:
            text["link"] = {"url": self.href}
        return {"type": "text", "text": text}


class TitleValue(BaseModel):
    kind: Literal["title"] = "title"
    runs: list[TextRun] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"title": [r.to_wire() for r in self.runs]}


class TextValue(BaseModel):
    kind: Literal["rich_text"] = "rich_text"
    runs: list[TextRun] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"rich_text": [r.to_wire() for r in self.runs]}


class NumberValue(BaseModel):
    kind: Literal["number"] = "number"
    number: int | float | None = None

    def to_wire(self) -> dict[str, Any]:
        return {"number": self.number}


class SelectValue(BaseModel):
    kind: Literal["select"] = "select"
    selected: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return {"select": {"name": self.selected} if self.selected is not None else None}


class StatusValue(BaseModel):
    kind: Literal["status"] = "status"
    selected: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return {"status": {"name": self.selected} if self.selected is not None else None}


class MultiSelectValue(BaseModel):
    kind: Literal["multi_select"] = "multi_select"
    selected: list[str] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"multi_select": [{"name": n} for n in self.selected]}


class DateValue(BaseModel):
    kind: Literal["date"] = "date"
    start: str | None = None
    end: str | None = None
    time_zone: str | None = None

    def to_wire(self) -> dict[str, Any]:
        if self.start is None:
            return {"date": None}
        date: dict[str, Any] = {"start": self.start}
        if self.end:
            date["end"] = self.end
        if self.time_zone:
            date["time_zone"] = self.time_zone
        return {"date": date}


class CheckboxValue(BaseModel):
    kind: Literal["checkbox"] = "checkbox"
    checked: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {"checkbox": self.checked}


class UnsupportedValue(BaseModel):
    kind: Literal["unsupported"] = "unsupported"
    wire_type: str = ""
    raw: Any = None

    def to_wire(self) -> dict[str, Any]:
        return {self.wire_type: self.raw}


TypedValue = Annotated[
    Union[
        TitleValue,
        TextValue,
        NumberValue,
        SelectValue,
        StatusValue,
        MultiSelectValue,
        DateValue,
        CheckboxValue,
        UnsupportedValue,
    ],
    Field(discriminator="kind"),
]


class Record(BaseModel):
    """One entry (page) of a database."""

    id: str
    url: str = ""
    archived: bool = False
    created_time: str | None = None
    last_edited_time: str | None = None
    values: dict[str, TypedValue] = Field(default_factory=dict)


def kind_for(wire_type: str) -> str:
    """Map a wire property type onto a PropertyKind."""
    if wire_type in PROPERTY_KINDS and wire_type != "unsupported":
        return wire_type
    return "unsupported"


def parse_column(name: str, wire: dict[str, Any]) -> ColumnSchema:
    """Build a ColumnSchema from a database property definition."""
    wire_type = wire.get("type", "")
    kind = kind_for(wire_type)
    options: list[SelectOption] = []
    if kind in OPTION_KINDS:
        body = wire.get(wire_type) or {}
        options = [SelectOption(**opt) for opt in body.get("options", [])]
    return ColumnSchema(
        name=wire.get("name", name),
        kind=kind,
        wire_type=wire_type,
        id=wire.get("id"),
        options=options,
    )


def parse_schema(properties: dict[str, dict[str, Any]]) -> dict[str, ColumnSchema]:
    """Build the column map, keeping the iteration order of the response."""
    return {name: parse_column(name, wire) for name, wire in properties.items()}


def _runs(items: list[dict[str, Any]] | None) -> list[TextRun]:
    runs = []
    for item in items or []:
        text = item.get("plain_text")
        if text is None:
            text = (item.get("text") or {}).get("content", "")
        runs.append(TextRun(plain_text=text, href=item.get("href")))
    return runs


def parse_value(wire: dict[str, Any]) -> TypedValue:
    """Build a TypedValue from a page property value."""
    wire_type = wire.get("type", "")
    body = wire.get(wire_type)
    if wire_type == "title":
        return TitleValue(runs=_runs(body))
    if wire_type == "rich_text":
        return TextValue(runs=_runs(body))
    if wire_type == "number":
        return NumberValue(number=body)
    if wire_type == "select":
        return SelectValue(selected=body.get("name") if body else None)
    if wire_type == "status":
        return StatusValue(selected=body.get("name") if body else None)
    if wire_type == "multi_select":
        return MultiSelectValue(selected=[opt.get("name", "") for opt in body or []])
    if wire_type == "date":
        if not body:
            return DateValue()
        return DateValue(start=body.get("start"), end=body.get("end"), time_zone=body.get("time_zone"))
    if wire_type == "checkbox":
        return CheckboxValue(checked=bool(body))
    return UnsupportedValue(wire_type=wire_type, raw=body)


def parse_record(page: dict[str, Any]) -> Record:
    """Build a Record from a page object."""
    return Record(
        id=page["id"],
        url=page.get("url", ""),
        archived=bool(page.get("archived", False)),
        created_time=page.get("created_time"),
        last_edited_time=page.get("last_edited_time"),
        values={name: parse_value(wire) for name, wire in (page.get("properties") or {}).items()},
    )

"""Project typed values onto flat scalars for display and export."""

from __future__ import annotations

from typing import Union

from ntask.config import LOCALES, Locale
from ntask.contracts.schema import (
    CheckboxValue,
    DateValue,
    MultiSelectValue,
    NumberValue,
    Record,
    SelectValue,
    StatusValue,
    TextValue,
    TitleValue,
    UnsupportedValue,
)

Scalar = Union[str, int, float, bool, None]
ProjectedRow = dict[str, Scalar]

MULTI_SELECT_SEPARATOR = "; "


def project(value: object) -> Scalar:
    """Convert one typed value into a scalar.

    ``None`` is the empty marker.  Projection is lossy: only the first text
    run and the start date are kept.  Unsupported kinds project to ``""``.
    """
    if isinstance(value, (TitleValue, TextValue)):
        return value.runs[0].plain_text if value.runs else ""
    if isinstance(value, NumberValue):
        return value.number
    if isinstance(value, (SelectValue, StatusValue)):
        return value.selected
    if isinstance(value, MultiSelectValue):
        return MULTI_SELECT_SEPARATOR.join(value.selected)
    if isinstance(value, DateValue):
        return value.start[:10] if value.start else None
    if isinstance(value, CheckboxValue):
        return value.checked
    if isinstance(value, UnsupportedValue):
        return ""
    return ""


def project_record(record: Record, columns: list[str]) -> ProjectedRow:
    """Project a record over ``columns``; absent values become empty."""
    return {
        name: project(record.values[name]) if name in record.values else None
        for name in columns
    }


def plain_title(value: object, placeholder: str = "") -> str:
    """Join every run of a title/text value, or return ``placeholder``."""
    if isinstance(value, (TitleValue, TextValue)) and value.runs:
        return "".join(r.plain_text for r in value.runs)
    return placeholder


def format_scalar(value: Scalar, locale: Locale | None = None) -> str:
    """Render a scalar as display text.

    Numbers use their shortest round-trip form, so ints print without a
    fraction and floats keep one (``2.0``).
    """
    locale = locale or LOCALES["en"]
    if value is None:
        return ""
    if isinstance(value, bool):
        return locale.yes if value else locale.no
    return str(value)

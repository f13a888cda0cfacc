"""Build typed mutation payloads from flat text input."""

from __future__ import annotations

import math

from ntask.config import LOCALES, Locale
from ntask.contracts.common import ParseError, PropertyNotFound, UnsupportedPropertyKind
from ntask.contracts.schema import (
    CheckboxValue,
    ColumnSchema,
    DateValue,
    NumberValue,
    SelectValue,
    TextRun,
    TextValue,
    TitleValue,
)

WRITABLE_KINDS: frozenset[str] = frozenset({
    "title", "rich_text", "number", "select", "checkbox", "date",
})

TRUE_TOKENS: frozenset[str] = frozenset({"true", "yes"})


def parse_number(raw: str) -> int | float | None:
    """Parse a floating-point literal; integral input without a fraction stays int."""
    text = raw.strip()
    if not text:
        return None
    digits = text[1:] if text[0] in "+-" else text
    if digits.isdecimal():
        return int(text)
    try:
        number = float(text)
    except ValueError:
        raise ParseError(
            f"Cannot parse '{raw}' as a number",
            details={"kind": "number", "raw": raw},
        ) from None
    if not math.isfinite(number):
        raise ParseError(
            f"Number must be finite, got '{raw}'",
            details={"kind": "number", "raw": raw},
        )
    return number


def parse_checkbox(raw: str, locale: Locale | None = None) -> bool:
    """Accept true/yes or the locale's affirmative token (any locale when None)."""
    locales = [locale] if locale else list(LOCALES.values())
    affirmative = TRUE_TOKENS | {loc.yes.lower() for loc in locales}
    return raw.strip().lower() in affirmative


def build_payload(kind: str, raw: str, *, locale: Locale | None = None):
    """Encode ``raw`` as the native value of a column of ``kind``.

    Raises UnsupportedPropertyKind for kinds without a write-back rule and
    ParseError when a number cannot be parsed.  Empty input clears number,
    select and date values.
    """
    if kind == "title":
        return TitleValue(runs=[TextRun(plain_text=raw)])
    if kind == "rich_text":
        return TextValue(runs=[TextRun(plain_text=raw)])
    if kind == "number":
        return NumberValue(number=parse_number(raw))
    if kind == "select":
        return SelectValue(selected=raw or None)
    if kind == "checkbox":
        return CheckboxValue(checked=parse_checkbox(raw, locale))
    if kind == "date":
        # Forwarded as-is; the service validates the calendar date.
        return DateValue(start=raw.strip() or None)
    raise UnsupportedPropertyKind(
        f"Cannot write values of kind '{kind}'. Writable kinds: {', '.join(sorted(WRITABLE_KINDS))}",
        details={"kind": kind},
    )


def build_properties(
    schema: dict[str, ColumnSchema],
    assignments: dict[str, str],
    *,
    locale: Locale | None = None,
) -> dict[str, object]:
    """Map ``{column: raw text}`` onto ``{column: TypedValue}``."""
    values: dict[str, object] = {}
    for name, raw in assignments.items():
        column = schema.get(name)
        if column is None:
            raise PropertyNotFound(
                f"Column '{name}' does not exist. Available: {', '.join(schema)}",
                details={"column": name},
            )
        values[name] = build_payload(column.kind, raw, locale=locale)
    return values

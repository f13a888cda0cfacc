"""Canned query predicates over resolved columns.

Dates are ISO calendar-date strings compared by the service; no timezone
normalisation happens here.
"""

from __future__ import annotations

from datetime import date, timedelta

from ntask.contracts.common import ParseError
from ntask.contracts.filters import FilterGroup, FilterLeaf, FilterPredicate


def today() -> str:
    """Today's date from the local clock."""
    return date.today().isoformat()


def iso_date(text: str, *, field: str = "date") -> str:
    """Return ``text`` as a YYYY-MM-DD date, or raise ParseError."""
    try:
        return date.fromisoformat(text.strip()).isoformat()
    except ValueError:
        raise ParseError(
            f"Cannot parse '{text}' as a date (YYYY-MM-DD)",
            details={"kind": "date", "field": field, "raw": text},
        ) from None


def horizon(start: str, days: int) -> str:
    """The date ``days`` after ``start``."""
    return (date.fromisoformat(iso_date(start, field="today")) + timedelta(days=days)).isoformat()


def date_leaf(column: str, operator: str, value: str) -> FilterLeaf:
    return FilterLeaf(column=column, kind="date", conditions={operator: value})


def checkbox_equals(column: str, value: bool) -> FilterLeaf:
    return FilterLeaf(column=column, kind="checkbox", conditions={"equals": value})


def overdue(due_column: str, completion_column: str | None, today: str) -> FilterPredicate:
    """Due before ``today`` and, when a completion column exists, not done."""
    due = date_leaf(due_column, "before", today)
    if completion_column is None:
        return due
    return FilterGroup(op="and", children=[due, checkbox_equals(completion_column, False)])


def due_within(due_column: str, today: str, horizon_date: str) -> FilterGroup:
    return FilterGroup(op="and", children=[
        date_leaf(due_column, "on_or_after", today),
        date_leaf(due_column, "on_or_before", horizon_date),
    ])


def date_range(column: str, start: str | None = None, end: str | None = None) -> FilterLeaf:
    """One date leaf with the bounds given.

    With neither bound the leaf is unconstrained and matches everything;
    check ``is_unconstrained`` before sending it.
    """
    conditions = {}
    if start:
        conditions["on_or_after"] = start
    if end:
        conditions["on_or_before"] = end
    return FilterLeaf(column=column, kind="date", conditions=conditions)


def incomplete(completion_column: str) -> FilterLeaf:
    return checkbox_equals(completion_column, False)

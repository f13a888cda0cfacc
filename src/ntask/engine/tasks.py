"""Task listings: incomplete, upcoming, overdue and date-range queries."""

from __future__ import annotations

from typing import Any

from ntask.contracts.common import NtaskError
from ntask.contracts.filters import FilterGroup, FilterLeaf, Sort
from ntask.contracts.responses import TaskItem
from ntask.contracts.schema import CheckboxValue, DateValue, Record
from ntask.engine import filters
from ntask.engine.context import DatabaseContext
from ntask.engine.projector import plain_title


class UnconstrainedFilterError(NtaskError):
    """Raised when a date range without bounds would match every record."""

    code = "ERR_INVALID_ARGUMENT"


def to_task(ctx: DatabaseContext, record: Record) -> TaskItem:
    """Summarise a record through its title, due-date and completion columns."""
    title_col = ctx.resolve_optional("title")
    due_col = ctx.resolve_optional("due_date")
    done_col = ctx.resolve_optional("completion")

    title = plain_title(record.values.get(title_col) if title_col else None, ctx.locale.untitled)

    due = None
    due_value = record.values.get(due_col) if due_col else None
    if isinstance(due_value, DateValue):
        due = due_value.start

    completed = None
    done_value = record.values.get(done_col) if done_col else None
    if isinstance(done_value, CheckboxValue):
        completed = done_value.checked

    return TaskItem(id=record.id, url=record.url, title=title, due=due, completed=completed)


class TaskQuery:
    """A filter built from the resolved columns, plus the records it matched."""

    def __init__(self, name: str, predicate: FilterLeaf | FilterGroup, sorts: list[Sort] | None = None) -> None:
        self.name = name
        self.predicate = predicate
        self.sorts = sorts
        self.records: list[Record] = []

    def run(self, ctx: DatabaseContext) -> list[Record]:
        self.records = ctx.query(self.predicate, self.sorts)
        return self.records

    def describe(self) -> dict[str, Any]:
        return self.predicate.to_wire()


def incomplete_tasks(ctx: DatabaseContext) -> TaskQuery:
    done_col = ctx.resolve("completion")
    return TaskQuery("incomplete", filters.incomplete(done_col))


def upcoming_tasks(ctx: DatabaseContext, days: int = 7, *, today: str | None = None) -> TaskQuery:
    due_col = ctx.resolve("due_date")
    start = filters.iso_date(today, field="today") if today else filters.today()
    predicate = filters.due_within(due_col, start, filters.horizon(start, days))
    return TaskQuery("upcoming", predicate, [Sort(column=due_col)])


def overdue_tasks(ctx: DatabaseContext, *, today: str | None = None) -> TaskQuery:
    due_col = ctx.resolve("due_date")
    done_col = ctx.resolve_optional("completion")
    start = filters.iso_date(today, field="today") if today else filters.today()
    predicate = filters.overdue(due_col, done_col, start)
    return TaskQuery("overdue", predicate, [Sort(column=due_col)])


def tasks_in_range(ctx: DatabaseContext, start: str | None = None, end: str | None = None) -> TaskQuery:
    due_col = ctx.resolve("due_date")
    start = filters.iso_date(start, field="start") if start else None
    end = filters.iso_date(end, field="end") if end else None
    predicate = filters.date_range(due_col, start, end)
    if predicate.is_unconstrained:
        raise UnconstrainedFilterError(
            "A date range needs a start date, an end date, or both",
            details={"column": due_col},
        )
    return TaskQuery("daterange", predicate, [Sort(column=due_col)])

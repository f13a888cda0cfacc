"""Query predicate and sort models, rendered to the service's filter JSON."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field


class FilterLeaf(BaseModel):
    """A comparison on one column, e.g. ``Due`` ``before`` ``2025-04-25``.

    ``conditions`` normally holds a single operator/literal pair; a date
    range leaf may hold both bounds, or none (unconstrained).
    """

    column: str
    kind: str  # date, checkbox, ...
    conditions: dict[str, Any] = Field(default_factory=dict)

    @property
    def operator(self) -> str | None:
        if len(self.conditions) != 1:
            return None
        return next(iter(self.conditions))

    @property
    def literal(self) -> Any:
        op = self.operator
        return self.conditions[op] if op else None

    @property
    def is_unconstrained(self) -> bool:
        return not self.conditions

    def to_wire(self) -> dict[str, Any]:
        return {"property": self.column, self.kind: dict(self.conditions)}


class FilterGroup(BaseModel):
    """AND/OR over child predicates, in order."""

    op: Literal["and", "or"]
    children: list[FilterPredicate] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {self.op: [c.to_wire() for c in self.children]}


FilterPredicate = Union[FilterLeaf, FilterGroup]

FilterGroup.model_rebuild()


class Sort(BaseModel):
    column: str
    direction: Literal["ascending", "descending"] = "ascending"

    def to_wire(self) -> dict[str, Any]:
        return {"property": self.column, "direction": self.direction}

    @classmethod
    def parse(cls, text: str) -> "Sort":
        """Parse ``Column`` or ``Column:asc|desc``."""
        column, _, direction = text.rpartition(":")
        if not column:
            return cls(column=text)
        direction = direction.strip().lower()
        if direction in ("", "asc", "ascending"):
            return cls(column=column, direction="ascending")
        if direction in ("desc", "descending"):
            return cls(column=column, direction="descending")
        # A colon inside the column name itself
        return cls(column=text)

"""Find the column playing a semantic role (title, due date, ...) in a schema.

Matching is heuristic: a role names a column kind plus a set of keywords,
and a column qualifies when its kind matches and its name contains one of
the keywords (case-insensitive).  When several columns qualify the first
one in schema order wins, unless the caller asks for strict resolution.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ntask.contracts.common import AmbiguousProperty, PropertyNotFound
from ntask.contracts.schema import ColumnSchema

Role = Literal["title", "due_date", "completion", "description"]

ROLE_KINDS: dict[str, str] = {
    "title": "title",
    "due_date": "date",
    "completion": "checkbox",
    "description": "rich_text",
}

# An empty keyword tuple means the kind alone decides.
DEFAULT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "title": (),
    "due_date": ("期限", "due", "date", "deadline"),
    "completion": ("完了", "done", "complete"),
    "description": ("description", "notes", "note", "memo", "説明", "メモ"),
}

ROLES: tuple[str, ...] = tuple(ROLE_KINDS)


class Resolution(BaseModel):
    """All columns matching a role, in schema order."""

    role: str
    candidates: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str | None:
        return self.candidates[0] if self.candidates else None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


def _check_role(role: str) -> None:
    if role not in ROLE_KINDS:
        raise ValueError(f"Unknown role '{role}'. Supported: {', '.join(ROLES)}")


def find_candidates(
    schema: dict[str, ColumnSchema],
    role: str,
    *,
    keywords: dict[str, list[str]] | None = None,
) -> list[str]:
    _check_role(role)
    kind = ROLE_KINDS[role]
    words = tuple(keywords[role]) if keywords and role in keywords else DEFAULT_KEYWORDS[role]
    words = tuple(w.lower() for w in words)
    matches = []
    for name, column in schema.items():
        if column.kind != kind:
            continue
        if words and not any(w in name.lower() for w in words):
            continue
        matches.append(name)
    return matches


def resolution(
    schema: dict[str, ColumnSchema],
    role: str,
    *,
    keywords: dict[str, list[str]] | None = None,
) -> Resolution:
    return Resolution(role=role, candidates=find_candidates(schema, role, keywords=keywords))


def resolve(
    schema: dict[str, ColumnSchema],
    role: str,
    *,
    strict: bool = False,
    keywords: dict[str, list[str]] | None = None,
) -> str:
    """Return the column name for ``role``.

    Raises PropertyNotFound when nothing matches, and AmbiguousProperty when
    ``strict`` is set and more than one column matches.
    """
    res = resolution(schema, role, keywords=keywords)
    if res.name is None:
        raise PropertyNotFound(
            f"No {ROLE_KINDS[role]} column found for role '{role}'",
            details={"role": role, "kind": ROLE_KINDS[role]},
        )
    if strict and res.ambiguous:
        raise AmbiguousProperty(role, res.candidates)
    return res.name


def resolve_optional(
    schema: dict[str, ColumnSchema],
    role: str,
    *,
    strict: bool = False,
    keywords: dict[str, list[str]] | None = None,
) -> str | None:
    """Like :func:`resolve` but returns None when no column matches."""
    try:
        return resolve(schema, role, strict=strict, keywords=keywords)
    except PropertyNotFound:
        return None

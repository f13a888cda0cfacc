"""Command-specific result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ColumnMeta(BaseModel):
    """A column as reported by ``db schema``."""

    name: str
    kind: str
    wire_type: str
    options: list[str] = Field(default_factory=list)
    writable: bool = False


class SchemaMeta(BaseModel):
    """Metadata returned by ``db schema``."""

    database_id: str
    title: str = ""
    columns: list[ColumnMeta] = Field(default_factory=list)
    roles: dict[str, str | None] = Field(default_factory=dict)


class TaskItem(BaseModel):
    """One task line of a task listing."""

    id: str
    url: str = ""
    title: str
    due: str | None = None
    completed: bool | None = None


class RecordView(BaseModel):
    """A record with its values projected to scalars."""

    id: str
    url: str = ""
    archived: bool = False
    values: dict[str, Any] = Field(default_factory=dict)


class QueryResult(BaseModel):
    """Result of a query command."""

    columns: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0


class TaskListResult(BaseModel):
    """Result of a ``tasks`` command."""

    filter: dict[str, Any] | None = None
    tasks: list[TaskItem] = Field(default_factory=list)
    count: int = 0
    export: "ExportResult | None" = None


class ExportResult(BaseModel):
    """Result of an export."""

    path: str
    format: str = "csv"
    columns: list[str] = Field(default_factory=list)
    row_count: int = 0
    bom: bool = False


TaskListResult.model_rebuild()

"""Pydantic models for schema, values, filters, requests and responses."""

from ntask.contracts.common import (
    AmbiguousProperty,
    ChangeRecord,
    ConfigurationError,
    ErrorDetail,
    Metrics,
    NoResponseError,
    NtaskError,
    ParseError,
    PropertyNotFound,
    ResponseEnvelope,
    ServiceError,
    Target,
    UnsupportedPropertyKind,
    WarningDetail,
)
from ntask.contracts.filters import FilterGroup, FilterLeaf, FilterPredicate, Sort
from ntask.contracts.responses import (
    ColumnMeta,
    ExportResult,
    QueryResult,
    RecordView,
    SchemaMeta,
    TaskItem,
    TaskListResult,
)
from ntask.contracts.schema import (
    CheckboxValue,
    ColumnSchema,
    DateValue,
    MultiSelectValue,
    NumberValue,
    Record,
    SelectValue,
    StatusValue,
    TextRun,
    TextValue,
    TitleValue,
    TypedValue,
    UnsupportedValue,
)

__all__ = [
    "AmbiguousProperty",
    "ChangeRecord",
    "CheckboxValue",
    "ColumnMeta",
    "ColumnSchema",
    "ConfigurationError",
    "DateValue",
    "ErrorDetail",
    "ExportResult",
    "FilterGroup",
    "FilterLeaf",
    "FilterPredicate",
    "Metrics",
    "MultiSelectValue",
    "NoResponseError",
    "NtaskError",
    "NumberValue",
    "ParseError",
    "PropertyNotFound",
    "QueryResult",
    "Record",
    "RecordView",
    "ResponseEnvelope",
    "SchemaMeta",
    "SelectValue",
    "ServiceError",
    "Sort",
    "StatusValue",
    "Target",
    "TaskItem",
    "TaskListResult",
    "TextRun",
    "TextValue",
    "TitleValue",
    "TypedValue",
    "UnsupportedPropertyKind",
    "UnsupportedValue",
    "WarningDetail",
]

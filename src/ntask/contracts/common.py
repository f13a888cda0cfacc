"""Common Pydantic models: response envelope, errors, warnings, metrics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class NtaskError(Exception):
    """Base class for errors surfaced in an error envelope."""

    code = "ERR_INTERNAL"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ServiceError(NtaskError):
    """Raised when the Database Service answers with a non-success status."""

    code = "ERR_SERVICE"

    def __init__(
        self,
        status: int,
        payload: Any,
        *,
        operation: str = "",
        entity: str | None = None,
    ) -> None:
        self.status = status
        self.payload = payload
        self.operation = operation
        self.entity = entity
        detail = payload.get("message") if isinstance(payload, dict) else None
        message = f"{operation or 'request'} failed with HTTP {status}"
        if entity:
            message += f" for {entity}"
        if detail:
            message += f": {detail}"
        super().__init__(message, details={
            "status": status,
            "payload": payload,
            "operation": operation,
            "entity": entity,
        })


class NoResponseError(NtaskError):
    """Raised when a request was sent but no response arrived."""

    code = "ERR_NO_RESPONSE"

    def __init__(self, reason: str, *, operation: str = "", entity: str | None = None) -> None:
        self.operation = operation
        self.entity = entity
        message = f"No response for {operation or 'request'}"
        if entity:
            message += f" ({entity})"
        super().__init__(f"{message}: {reason}", details={"operation": operation, "entity": entity})


class ConfigurationError(NtaskError):
    """Raised when a required setting is absent before any call is made."""

    code = "ERR_CONFIG_MISSING"


class PropertyNotFound(NtaskError):
    """Raised when no column matches a role or a column name."""

    code = "ERR_PROPERTY_NOT_FOUND"


class AmbiguousProperty(NtaskError):
    """Raised by strict resolution when several columns match a role."""

    code = "ERR_PROPERTY_AMBIGUOUS"

    def __init__(self, role: str, candidates: list[str]) -> None:
        self.role = role
        self.candidates = candidates
        super().__init__(
            f"Several columns match role '{role}': {', '.join(candidates)}",
            details={"role": role, "candidates": candidates},
        )


class UnsupportedPropertyKind(NtaskError):
    """Raised when a payload is requested for a kind with no write-back rule."""

    code = "ERR_UNSUPPORTED_PROPERTY_KIND"


class ParseError(NtaskError):
    """Raised when raw input cannot be converted to the target kind."""

    code = "ERR_PARSE_INVALID"


class Target(BaseModel):
    """Identifies the database/record a command works on."""

    database: str | None = None
    record: str | None = None
    property: str | None = None
    file: str | None = None


class WarningDetail(BaseModel):
    """Structured warning."""

    code: str
    message: str
    path: str | None = None


class ErrorDetail(BaseModel):
    """Structured error."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    """Execution metrics."""

    duration_ms: int = 0
    requests: int = 0


class ChangeRecord(BaseModel):
    """Describes a single change made (or projected) by a mutating command."""

    type: str
    target: str
    before: Any | None = None
    after: Any | None = None
    payload: dict[str, Any] | None = None
    warnings: list[WarningDetail] = Field(default_factory=list)


class ResponseEnvelope(BaseModel):
    """Standard response envelope returned by every command."""

    ok: bool = True
    command: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    changes: list[ChangeRecord] = Field(default_factory=list)
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)

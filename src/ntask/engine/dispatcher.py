"""Response envelope helpers and exit-code mapping."""

from __future__ import annotations

import sys
from typing import Any

import orjson

from ntask.contracts.common import (
    ErrorDetail,
    Metrics,
    NtaskError,
    ResponseEnvelope,
    Target,
)

# Exit code mapping
EXIT_CODES = {
    "success": 0,
    "validation": 10,
    "property": 20,
    "io": 50,
    "no_response": 60,
    "unsupported": 70,
    "internal": 90,
}

VALIDATION_CODE_MARKERS = (
    "CONFIG",
    "PARSE",
    "INVALID_ARGUMENT",
    "MISSING_",
    "USAGE",
)


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    changes: list | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
    requests: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        changes=changes or [],
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms, requests=requests),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def envelope_for_exception(
    command: str,
    exc: NtaskError,
    *,
    target: Target | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    """Build an error envelope from an NtaskError, keeping its code and details."""
    return error_envelope(
        command,
        exc.code,
        exc.message,
        target=target,
        details=exc.details or None,
        warnings=warnings,
        duration_ms=duration_ms,
    )


def output_json(envelope: ResponseEnvelope) -> str:
    """Serialize envelope to JSON string using orjson."""
    data = envelope.model_dump(mode="json")
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    """Print response as JSON to stdout."""
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Determine exit code from envelope errors."""
    if envelope.ok:
        return 0
    if not envelope.errors:
        return EXIT_CODES["internal"]
    code = envelope.errors[0].code.upper()
    if "UNSUPPORTED" in code:
        return EXIT_CODES["unsupported"]
    if "PROPERTY" in code:
        return EXIT_CODES["property"]
    if any(marker in code for marker in VALIDATION_CODE_MARKERS):
        return EXIT_CODES["validation"]
    if "NO_RESPONSE" in code:
        return EXIT_CODES["no_response"]
    if code.startswith("ERR_IO") or code == "ERR_SERVICE":
        return EXIT_CODES["io"]
    return EXIT_CODES["internal"]

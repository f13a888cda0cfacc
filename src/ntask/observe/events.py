"""Structured event emission and timing."""

from __future__ import annotations

import json
import sys
import time
from datetime import datetime, timezone
from typing import Any, TextIO


class Timer:
    """Simple context-manager timer for measuring duration_ms."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EventEmitter:
    """Emits NDJSON lifecycle events to stderr."""

    def __init__(self, enabled: bool = False, *, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self.stream = stream
        self.counts: dict[str, int] = {}

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        self.counts[event] = self.counts.get(event, 0) + 1
        if not self.enabled:
            return
        payload = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data or {},
        }
        stream = self.stream or sys.stderr
        stream.write(json.dumps(payload, default=str, ensure_ascii=False) + "\n")
        stream.flush()

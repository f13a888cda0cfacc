"""httpx-based client for the Notion REST API (databases, pages, blocks)."""

from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from ntask.config import ServiceConfig
from ntask.contracts.common import NoResponseError, NtaskError, ServiceError
from ntask.contracts.filters import FilterGroup, FilterLeaf, Sort
from ntask.contracts.schema import Record, parse_record
from ntask.observe.events import EventEmitter

# HTTP statuses worth retrying when a retry policy is configured.
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


def paragraph_block(text: str) -> dict[str, Any]:
    """Build a paragraph block holding plain text."""
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}}]},
    }


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _retryable(error: NtaskError) -> bool:
    if isinstance(error, NoResponseError):
        return True
    return isinstance(error, ServiceError) and error.status in RETRYABLE_STATUSES


class NotionClient:
    """Synchronous client; one instance per command run.

    Every call blocks until the response arrives.  Failed calls raise
    ``ServiceError`` (non-2xx status) or ``NoResponseError`` (transport
    failure) after ``config.max_retries`` extra attempts, which default to 0.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        events: EventEmitter | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.events = events or EventEmitter()
        self.request_count = 0
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=config.api_base.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {config.require_api_key()}",
                "Content-Type": "application/json",
                "Notion-Version": config.api_version,
            },
            timeout=config.timeout,
            transport=transport,
        )

    def __enter__(self) -> "NotionClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        entity: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        attempts = self.config.max_retries + 1
        for attempt in range(attempts):
            info = {"operation": operation, "entity": entity, "method": method, "attempt": attempt + 1}
            self.events.emit("request.start", info)
            self.request_count += 1
            cause: Exception | None = None
            try:
                response = self._http.request(method, path, json=body)
            except httpx.TransportError as e:
                cause = e
                error: NtaskError = NoResponseError(
                    str(e) or type(e).__name__, operation=operation, entity=entity,
                )
            else:
                if response.is_success:
                    self.events.emit("request.done", {**info, "status": response.status_code})
                    return response.json()
                error = ServiceError(
                    response.status_code, _payload(response), operation=operation, entity=entity,
                )

            if attempt + 1 < attempts and _retryable(error):
                delay = self.config.retry_backoff * (2 ** attempt)
                self.events.emit("request.retry", {**info, "delay": delay, "error": error.message})
                self._sleep(delay)
                continue
            self.events.emit("request.failed", {**info, "error": error.message})
            raise error from cause
        raise AssertionError("unreachable")

    # -- databases -----------------------------------------------------------

    def get_database(self, database_id: str) -> dict[str, Any]:
        """Retrieve a database object (title and property schema)."""
        return self._request(
            "GET", f"databases/{database_id}",
            operation="databases.retrieve", entity=database_id,
        )

    def query(
        self,
        database_id: str,
        filter: FilterLeaf | FilterGroup | None = None,
        sorts: list[Sort] | None = None,
        *,
        page_size: int | None = None,
    ) -> list[Record]:
        """Query a database, following pagination cursors to the end."""
        body: dict[str, Any] = {"page_size": page_size or self.config.page_size}
        if filter is not None:
            body["filter"] = filter.to_wire()
        if sorts:
            body["sorts"] = [s.to_wire() for s in sorts]

        records: list[Record] = []
        while True:
            data = self._request(
                "POST", f"databases/{database_id}/query",
                operation="databases.query", entity=database_id, body=body,
            )
            records.extend(parse_record(page) for page in data.get("results", []))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return records
            body = {**body, "start_cursor": cursor}

    # -- pages ---------------------------------------------------------------

    def get_record(self, record_id: str) -> Record:
        data = self._request("GET", f"pages/{record_id}", operation="pages.retrieve", entity=record_id)
        return parse_record(data)

    def create_record(
        self,
        database_id: str,
        values: dict[str, Any],
        content: list[dict[str, Any]] | None = None,
    ) -> Record:
        """Create a page in a database. ``values`` maps column name to TypedValue."""
        body: dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": {name: v.to_wire() for name, v in values.items()},
        }
        if content:
            body["children"] = content
        data = self._request("POST", "pages", operation="pages.create", entity=database_id, body=body)
        return parse_record(data)

    def update_record(self, record_id: str, values: dict[str, Any]) -> Record:
        body = {"properties": {name: v.to_wire() for name, v in values.items()}}
        data = self._request("PATCH", f"pages/{record_id}", operation="pages.update", entity=record_id, body=body)
        return parse_record(data)

    def archive_record(self, record_id: str) -> Record:
        """Soft-delete a page; it disappears from later queries."""
        data = self._request(
            "PATCH", f"pages/{record_id}",
            operation="pages.archive", entity=record_id, body={"archived": True},
        )
        return parse_record(data)

    # -- blocks --------------------------------------------------------------

    def append_content(self, record_id: str, blocks: list[dict[str, Any]]) -> dict[str, Any]:
        return self._request(
            "PATCH", f"blocks/{record_id}/children",
            operation="blocks.children.append", entity=record_id, body={"children": blocks},
        )

"""Shared test fixtures: an in-memory Notion database behind httpx.MockTransport."""

from __future__ import annotations

import json
import uuid
from typing import Any

import httpx
import pytest

from ntask.adapters.notion_client import NotionClient
from ntask.config import ServiceConfig

DATABASE_ID = "db-tasks"


# ---------------------------------------------------------------------------
# Wire builders
# ---------------------------------------------------------------------------
def rich(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": text, "link": None}, "plain_text": text, "href": None}]


def title_prop(text: str | None) -> dict[str, Any]:
    return {"id": "title", "type": "title", "title": rich(text) if text else []}


def text_prop(text: str | None) -> dict[str, Any]:
    return {"id": "txt", "type": "rich_text", "rich_text": rich(text) if text else []}


def date_prop(start: str | None, end: str | None = None) -> dict[str, Any]:
    body = {"start": start, "end": end, "time_zone": None} if start else None
    return {"id": "dt", "type": "date", "date": body}


def checkbox_prop(value: bool) -> dict[str, Any]:
    return {"id": "cb", "type": "checkbox", "checkbox": value}


def number_prop(value: float | int | None) -> dict[str, Any]:
    return {"id": "num", "type": "number", "number": value}


def select_prop(name: str | None) -> dict[str, Any]:
    return {"id": "sel", "type": "select", "select": {"name": name, "color": "default"} if name else None}


def column(name: str, wire_type: str, options: list[str] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if options is not None:
        body["options"] = [{"name": o, "color": "default"} for o in options]
    return {"id": name.lower()[:4], "name": name, "type": wire_type, wire_type: body}


TASK_SCHEMA = {
    "Task": column("Task", "title"),
    "Due": column("Due", "date"),
    "Done": column("Done", "checkbox"),
}


# ---------------------------------------------------------------------------
# Fake service
# ---------------------------------------------------------------------------
class FakeNotion:
    """Just enough of the Notion API to exercise the client end to end.

    Filters are evaluated here, on the service side, the way the real API
    would; the code under test never evaluates them.
    """

    def __init__(self, properties: dict[str, Any] | None = None, *, title: str = "Tasks") -> None:
        self.properties = properties if properties is not None else dict(TASK_SCHEMA)
        self.title = title
        self.pages: dict[str, dict[str, Any]] = {}
        self.blocks: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.headers: list[httpx.Headers] = []
        self.failures: list[Any] = []

    def add_page(self, properties: dict[str, Any], *, page_id: str | None = None) -> str:
        page_id = page_id or str(uuid.uuid4())
        self.pages[page_id] = {
            "object": "page",
            "id": page_id,
            "url": f"https://www.notion.so/{page_id.replace('-', '')}",
            "archived": False,
            "created_time": "2025-04-01T00:00:00.000Z",
            "last_edited_time": "2025-04-01T00:00:00.000Z",
            "properties": properties,
        }
        return page_id

    def fail_next(self, failure: Any) -> None:
        """Queue an (status, payload) tuple or an exception for the next request."""
        self.failures.append(failure)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path.removeprefix("/v1/")
        self.requests.append((request.method, path, body))
        self.headers.append(request.headers)

        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            status, payload = failure
            return httpx.Response(status, json=payload)

        parts = path.split("/")
        if parts[0] == "databases" and len(parts) == 2 and request.method == "GET":
            return self._database(parts[1])
        if parts[0] == "databases" and len(parts) == 3 and parts[2] == "query":
            return self._query(parts[1], body or {})
        if parts == ["pages"] and request.method == "POST":
            return self._create(body)
        if parts[0] == "pages" and len(parts) == 2:
            return self._page(parts[1], request.method, body)
        if parts[0] == "blocks" and len(parts) == 3 and parts[2] == "children":
            self.blocks.setdefault(parts[1], []).extend(body["children"])
            return httpx.Response(200, json={"object": "list", "results": body["children"]})
        return self._error(400, "invalid_request_url", f"Invalid request URL: {path}")

    def _error(self, status: int, code: str, message: str) -> httpx.Response:
        return httpx.Response(status, json={"object": "error", "status": status, "code": code, "message": message})

    def _database(self, database_id: str) -> httpx.Response:
        if database_id != DATABASE_ID:
            return self._error(404, "object_not_found", f"Could not find database with ID: {database_id}.")
        return httpx.Response(200, json={
            "object": "database",
            "id": DATABASE_ID,
            "title": rich(self.title),
            "properties": self.properties,
        })

    def _query(self, database_id: str, body: dict[str, Any]) -> httpx.Response:
        if database_id != DATABASE_ID:
            return self._error(404, "object_not_found", f"Could not find database with ID: {database_id}.")
        pages = [p for p in self.pages.values() if not p["archived"] and _matches(p, body.get("filter"))]
        for sort in reversed(body.get("sorts") or []):
            pages.sort(
                key=lambda p: _sort_key(p["properties"].get(sort["property"])),
                reverse=sort.get("direction") == "descending",
            )
        size = body.get("page_size", 100)
        start = int(body.get("start_cursor") or 0)
        chunk = pages[start:start + size]
        has_more = start + size < len(pages)
        return httpx.Response(200, json={
            "object": "list",
            "results": chunk,
            "has_more": has_more,
            "next_cursor": str(start + size) if has_more else None,
        })

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        if body["parent"].get("database_id") != DATABASE_ID:
            return self._error(404, "object_not_found", "Could not find database.")
        props = {name: _stored(name, value, self.properties) for name, value in body["properties"].items()}
        page_id = self.add_page(props)
        if body.get("children"):
            self.blocks[page_id] = list(body["children"])
        return httpx.Response(200, json=self.pages[page_id])

    def _page(self, page_id: str, method: str, body: dict[str, Any] | None) -> httpx.Response:
        page = self.pages.get(page_id)
        if page is None:
            return self._error(404, "object_not_found", f"Could not find page with ID: {page_id}.")
        if method == "PATCH":
            if "archived" in body:
                page["archived"] = body["archived"]
            for name, value in (body.get("properties") or {}).items():
                page["properties"][name] = _stored(name, value, self.properties)
        return httpx.Response(200, json=page)


def _stored(name: str, value: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
    """Turn a write payload into the read shape the API would return."""
    wire_type = schema[name]["type"]
    body = value[wire_type]
    if wire_type in ("title", "rich_text"):
        body = [{**run, "plain_text": run["text"]["content"], "href": None} for run in body]
    return {"id": schema[name]["id"], "type": wire_type, wire_type: body}


def _date_of(prop: dict[str, Any] | None) -> str | None:
    if not prop or not prop.get("date"):
        return None
    return prop["date"]["start"][:10]


def _matches(page: dict[str, Any], flt: dict[str, Any] | None) -> bool:
    if flt is None:
        return True
    if "and" in flt:
        return all(_matches(page, f) for f in flt["and"])
    if "or" in flt:
        return any(_matches(page, f) for f in flt["or"])
    prop = page["properties"].get(flt["property"])
    if "date" in flt:
        day = _date_of(prop)
        conditions = flt["date"]
        if not conditions:
            return True
        if day is None:
            return False
        checks = {
            "before": lambda v: day < v,
            "after": lambda v: day > v,
            "on_or_before": lambda v: day <= v,
            "on_or_after": lambda v: day >= v,
            "equals": lambda v: day == v,
        }
        return all(checks[op](v) for op, v in conditions.items())
    if "checkbox" in flt:
        return bool(prop and prop.get("checkbox")) == flt["checkbox"]["equals"]
    raise AssertionError(f"filter not supported by fake: {flt}")


def _sort_key(prop: dict[str, Any] | None) -> tuple[int, Any]:
    if not prop:
        return (1, "")
    wire_type = prop["type"]
    if wire_type == "date":
        day = _date_of(prop)
        return (0, day) if day else (1, "")
    if wire_type == "title":
        return (0, "".join(r["plain_text"] for r in prop["title"]))
    if wire_type == "number":
        return (0, prop["number"]) if prop["number"] is not None else (1, 0)
    return (0, str(prop.get(wire_type)))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def fake() -> FakeNotion:
    """Task database with the two records A (overdue) and B (done, due later)."""
    service = FakeNotion()
    service.add_page(
        {"Task": title_prop("A"), "Due": date_prop("2025-04-20"), "Done": checkbox_prop(False)},
        page_id="page-a",
    )
    service.add_page(
        {"Task": title_prop("B"), "Due": date_prop("2025-05-01"), "Done": checkbox_prop(True)},
        page_id="page-b",
    )
    return service


@pytest.fixture()
def config() -> ServiceConfig:
    return ServiceConfig(_env_file=None, api_key="secret-token", database_id=DATABASE_ID)


@pytest.fixture()
def client(fake: FakeNotion, config: ServiceConfig) -> NotionClient:
    c = NotionClient(config, transport=fake.transport)
    yield c
    c.close()


@pytest.fixture()
def cli_env(fake: FakeNotion, monkeypatch: pytest.MonkeyPatch, tmp_path) -> FakeNotion:
    """Configure the CLI through the environment and route it to the fake service."""
    import ntask.cli

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NOTION_KEY", "secret-token")
    monkeypatch.setenv("NOTION_DATABASE_ID", DATABASE_ID)

    def make_client(config, events):
        return NotionClient(config, events=events, transport=fake.transport)

    monkeypatch.setattr(ntask.cli, "_make_client", make_client)
    return fake

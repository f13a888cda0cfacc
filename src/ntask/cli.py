"""Typer CLI application: top-level commands and subcommand groups."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Callable, Optional

import typer

import ntask
from ntask.adapters.notion_client import NotionClient, paragraph_block
from ntask.config import ServiceConfig, load_config
from ntask.contracts.common import ChangeRecord, NtaskError, ParseError, PropertyNotFound, Target
from ntask.contracts.filters import Sort
from ntask.contracts.responses import (
    ExportResult,
    QueryResult,
    RecordView,
    TaskListResult,
)
from ntask.contracts.schema import Record
from ntask.engine import tasks as task_queries
from ntask.engine.context import DatabaseContext
from ntask.engine.dispatcher import (
    envelope_for_exception,
    error_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from ntask.engine.filters import iso_date
from ntask.engine.payloads import build_payload, build_properties
from ntask.engine.projector import ProjectedRow, project
from ntask.observe.events import EventEmitter, Timer
from ntask.usage import patch_typer_errors

patch_typer_errors()

# ---------------------------------------------------------------------------
# App & subcommand groups
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Schema-aware CLI for task databases on the Notion API.

**Recommended workflow:**  schema → tasks/query → export → record update

1. `ntask db schema -d <database>`  — columns, kinds and resolved roles (title, due date, completion)
2. `ntask tasks overdue -d <database>`  — canned task queries
3. `ntask export -d <database> --out tasks.csv`  — flat export in schema column order
4. `ntask record update --id <page> --property Done --value yes`

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**Configuration:** `NOTION_KEY` and `NOTION_DATABASE_ID` (environment or `.env`),
or an `ntask.yaml` file passed with `--config`.

**Exit codes:** 0=success, 10=validation/config/usage, 20=property, 50=service, 60=no response, 70=unsupported, 90=internal
"""

_DB_EPILOG = """\
**Examples:**

`ntask db schema -d <database>`  — columns with kinds, select options, writability and roles

`ntask db query -d <database> --sort Due:asc`  — every record, values projected to scalars
"""

_TASKS_EPILOG = """\
**Examples:**

`ntask tasks incomplete`  — completion checkbox is false

`ntask tasks upcoming --days 14`  — due between today and today + 14 days

`ntask tasks overdue --out overdue.csv`  — due before today and not done, exported

`ntask tasks daterange --start 2025-04-01 --end 2025-04-30`

Columns are found by kind and name: the due date is the first date column whose
name contains 期限/due/date/deadline, the completion flag the first checkbox
whose name contains 完了/done/complete.
"""

_RECORD_EPILOG = """\
**Examples:**

`ntask record get --id <page>`

`ntask record update --id <page> --property Priority --value 3`

`ntask record create -d <database> --set "Task=Write report" --set "Due=2025-05-01"`

`ntask record archive --id <page> --dry-run`

Writable kinds: title, rich_text, number, select, checkbox, date.
"""


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(ntask.__version__)
        raise typer.Exit()


app = typer.Typer(
    name="ntask",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

db_app = typer.Typer(
    name="db", help="Database schema and queries.",
    epilog=_DB_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
tasks_app = typer.Typer(
    name="tasks", help="Canned task queries: incomplete, upcoming, overdue and date range.",
    epilog=_TASKS_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
record_app = typer.Typer(
    name="record", help="Read, create, update and archive single records.",
    epilog=_RECORD_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)

app.add_typer(db_app)
app.add_typer(tasks_app)
app.add_typer(record_app)


@app.callback(invoke_without_command=True)
def main_callback(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
) -> None:
    if version:
        _version_callback(True)


# Type aliases for common options
DatabaseOpt = Annotated[Optional[str], typer.Option("--database", "-d", help="Database id (default: NOTION_DATABASE_ID)")]
ConfigOpt = Annotated[Optional[str], typer.Option("--config", help="Path to an ntask.yaml config file")]
EventsFlag = Annotated[bool, typer.Option("--events", help="Emit NDJSON request events on stderr")]
LocaleOpt = Annotated[Optional[str], typer.Option("--locale", help="Display locale for yes/no tokens: en or ja")]
RecordId = Annotated[str, typer.Option("--id", help="Record (page) id")]
DryRunFlag = Annotated[bool, typer.Option("--dry-run", help="Build the payload without sending it")]
OutOpt = Annotated[Optional[str], typer.Option("--out", "-o", help="Export file (.csv or .xlsx)")]
FormatOpt = Annotated[Optional[str], typer.Option("--format", help="Export format: csv or xlsx (default: from --out suffix)")]
NoBomFlag = Annotated[bool, typer.Option("--no-bom", help="Do not prefix CSV output with a UTF-8 byte-order mark")]
IncludeUrlFlag = Annotated[bool, typer.Option("--include-url", help="Append the record URL as a last column")]
TodayOpt = Annotated[Optional[str], typer.Option("--today", help="Override today's date (YYYY-MM-DD)")]
SortOpt = Annotated[Optional[list[str]], typer.Option("--sort", help="Sort as Column or Column:asc|desc (repeatable)")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _make_client(config: ServiceConfig, events: EventEmitter) -> NotionClient:
    return NotionClient(config, events=events)


def _emit(envelope, code=None):
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _open_client(
    command: str,
    *,
    database: str | None,
    config_file: str | None,
    events: bool,
    locale: str | None,
    need_database: bool,
    target: Target | None = None,
) -> NotionClient:
    """Load config and build a client, or emit an error envelope."""
    try:
        config = load_config(config_file, database_id=database, locale=locale)
        config.require_api_key()
        if need_database:
            config.require_database()
        return _make_client(config, EventEmitter(enabled=events))
    except NtaskError as e:
        _emit(envelope_for_exception(command, e, target=target or Target(database=database)))


def _open_ctx(
    command: str,
    *,
    database: str | None,
    config_file: str | None,
    events: bool,
    locale: str | None,
) -> DatabaseContext:
    client = _open_client(
        command, database=database, config_file=config_file,
        events=events, locale=locale, need_database=True,
    )
    return DatabaseContext(client, client.config.database_id)


def _fail(command: str, exc: NtaskError, *, target: Target, warnings: list | None = None) -> None:
    _emit(envelope_for_exception(command, exc, target=target, warnings=warnings))


def _parse_sorts(command: str, sorts: list[str] | None, target: Target) -> list[Sort] | None:
    if not sorts:
        return None
    try:
        return [Sort.parse(s) for s in sorts]
    except ValueError as e:
        _emit(error_envelope(command, "ERR_INVALID_ARGUMENT", f"Invalid --sort: {e}", target=target))


def _check_dates(command: str, target: Target, **dates: str | None) -> None:
    for field, value in dates.items():
        if value is None:
            continue
        try:
            iso_date(value, field=field)
        except ParseError as e:
            _fail(command, e, target=target)


def _export_format(command: str, out: str, fmt: str | None, target: Target) -> str:
    fmt = (fmt or Path(out).suffix.lstrip(".") or "csv").lower()
    if fmt not in ("csv", "xlsx"):
        _emit(error_envelope(
            command, "ERR_INVALID_ARGUMENT",
            f"Unsupported export format '{fmt}'. Use csv or xlsx.", target=target,
        ))
    return fmt


def _write_export(
    ctx: DatabaseContext,
    out: str,
    fmt: str,
    rows: list[ProjectedRow],
    *,
    include_url: bool,
    bom: bool,
) -> ExportResult:
    columns = ctx.export_columns(include_url=include_url)
    if fmt == "xlsx":
        from ntask.adapters.openpyxl_export import write_xlsx
        count = write_xlsx(out, columns, rows, sheet_title=ctx.title or "Records")
        bom = False
    else:
        from ntask.io.export import write_csv
        count = write_csv(out, columns, rows, locale=ctx.locale, bom=bom)
    return ExportResult(path=str(Path(out).resolve()), format=fmt, columns=columns, row_count=count, bom=bom)


def _record_view(record: Record) -> RecordView:
    return RecordView(
        id=record.id,
        url=record.url,
        archived=record.archived,
        values={name: project(v) for name, v in record.values.items()},
    )


def _parse_assignments(command: str, items: list[str], target: Target) -> dict[str, str]:
    assignments: dict[str, str] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            _emit(error_envelope(
                command, "ERR_INVALID_ARGUMENT",
                f"Expected Property=Value, got '{item}'", target=target,
            ))
        assignments[name.strip()] = raw
    return assignments


# ---------------------------------------------------------------------------
# ntask version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the ntask CLI version.

    Example: `ntask version`
    """
    env = success_envelope("version", {"version": ntask.__version__})
    _emit(env)


# ---------------------------------------------------------------------------
# ntask db schema
# ---------------------------------------------------------------------------
@db_app.command("schema")
def db_schema(
    database: DatabaseOpt = None,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """Show the database columns, their kinds and the resolved roles.

    Lists every column in schema order with its kind, select options and
    whether values can be written back, plus which column plays the title,
    due-date, completion and description roles. A `PROPERTY_AMBIGUOUS`
    warning is reported when several columns qualify for a role.

    Example: `ntask db schema -d <database>`
    """
    with Timer() as t:
        ctx = _open_ctx("db.schema", database=database, config_file=config_file, events=events, locale=locale)
        try:
            meta = ctx.get_schema_meta()
        except NtaskError as e:
            _fail("db.schema", e, target=ctx.target(), warnings=ctx.warnings)
        finally:
            ctx.client.close()

    env = success_envelope(
        "db.schema",
        meta.model_dump(),
        target=ctx.target(),
        warnings=ctx.warnings,
        duration_ms=t.elapsed_ms,
        requests=ctx.client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask db query
# ---------------------------------------------------------------------------
@db_app.command("query")
def db_query(
    database: DatabaseOpt = None,
    sort: SortOpt = None,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """Return every record of the database with values projected to scalars.

    Archived records are not returned. Rows follow the schema column order.

    Example: `ntask db query -d <database> --sort Due:asc`
    """
    sorts = _parse_sorts("db.query", sort, Target(database=database))
    with Timer() as t:
        ctx = _open_ctx("db.query", database=database, config_file=config_file, events=events, locale=locale)
        try:
            records = ctx.query(sorts=sorts)
            rows = ctx.project_rows(records, include_url=include_url)
            columns = ctx.export_columns(include_url=include_url)
        except NtaskError as e:
            _fail("db.query", e, target=ctx.target(), warnings=ctx.warnings)
        finally:
            ctx.client.close()

    qr = QueryResult(columns=columns, rows=rows, row_count=len(rows))
    env = success_envelope(
        "db.query",
        qr.model_dump(),
        target=ctx.target(),
        warnings=ctx.warnings,
        duration_ms=t.elapsed_ms,
        requests=ctx.client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask tasks ...
# ---------------------------------------------------------------------------
def _run_tasks(
    command: str,
    build: Callable[[DatabaseContext], task_queries.TaskQuery],
    *,
    database: str | None,
    config_file: str | None,
    events: bool,
    locale: str | None,
    out: str | None,
    fmt: str | None,
    no_bom: bool,
    include_url: bool,
    dates: dict[str, str | None] | None = None,
) -> None:
    _check_dates(command, Target(database=database), **(dates or {}))
    fmt = _export_format(command, out, fmt, Target(database=database, file=out)) if out else None
    with Timer() as t:
        ctx = _open_ctx(command, database=database, config_file=config_file, events=events, locale=locale)
        try:
            query = build(ctx)
            records = query.run(ctx)
            items = [task_queries.to_task(ctx, r) for r in records]
            export = None
            if out:
                rows = ctx.project_rows(records, include_url=include_url)
                export = _write_export(ctx, out, fmt, rows, include_url=include_url, bom=not no_bom)
        except NtaskError as e:
            _fail(command, e, target=ctx.target(file=out), warnings=ctx.warnings)
        except OSError as e:
            _emit(error_envelope(command, "ERR_IO", f"Cannot write export: {e}", target=ctx.target(file=out)))
        finally:
            ctx.client.close()

    result = TaskListResult(filter=query.describe(), tasks=items, count=len(items), export=export)
    env = success_envelope(
        command,
        result.model_dump(),
        target=ctx.target(file=out),
        warnings=ctx.warnings,
        duration_ms=t.elapsed_ms,
        requests=ctx.client.request_count,
    )
    _emit(env)


@tasks_app.command("incomplete")
def tasks_incomplete(
    database: DatabaseOpt = None,
    out: OutOpt = None,
    fmt: FormatOpt = None,
    no_bom: NoBomFlag = False,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """List tasks whose completion checkbox is not ticked.

    Fails with `ERR_PROPERTY_NOT_FOUND` when no checkbox column named like
    完了/done/complete exists.

    Example: `ntask tasks incomplete --out todo.csv`
    """
    _run_tasks(
        "tasks.incomplete", task_queries.incomplete_tasks,
        database=database, config_file=config_file, events=events, locale=locale,
        out=out, fmt=fmt, no_bom=no_bom, include_url=include_url,
    )


@tasks_app.command("upcoming")
def tasks_upcoming(
    database: DatabaseOpt = None,
    days: Annotated[int, typer.Option("--days", min=0, help="Horizon in days from today")] = 7,
    today: TodayOpt = None,
    out: OutOpt = None,
    fmt: FormatOpt = None,
    no_bom: NoBomFlag = False,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """List tasks due between today and today + `--days` (inclusive).

    Example: `ntask tasks upcoming --days 14`
    """
    _run_tasks(
        "tasks.upcoming", lambda ctx: task_queries.upcoming_tasks(ctx, days, today=today),
        database=database, config_file=config_file, events=events, locale=locale,
        out=out, fmt=fmt, no_bom=no_bom, include_url=include_url, dates={"today": today},
    )


@tasks_app.command("overdue")
def tasks_overdue(
    database: DatabaseOpt = None,
    today: TodayOpt = None,
    out: OutOpt = None,
    fmt: FormatOpt = None,
    no_bom: NoBomFlag = False,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """List tasks due before today that are not done.

    The completion condition is dropped when the database has no completion
    checkbox.

    Example: `ntask tasks overdue --out overdue.xlsx`
    """
    _run_tasks(
        "tasks.overdue", lambda ctx: task_queries.overdue_tasks(ctx, today=today),
        database=database, config_file=config_file, events=events, locale=locale,
        out=out, fmt=fmt, no_bom=no_bom, include_url=include_url, dates={"today": today},
    )


@tasks_app.command("daterange")
def tasks_daterange(
    database: DatabaseOpt = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First due date to include (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Last due date to include (YYYY-MM-DD)")] = None,
    out: OutOpt = None,
    fmt: FormatOpt = None,
    no_bom: NoBomFlag = False,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """List tasks whose due date falls in a range. At least one bound is required.

    Example: `ntask tasks daterange --start 2025-04-01 --end 2025-04-30`
    """
    _run_tasks(
        "tasks.daterange", lambda ctx: task_queries.tasks_in_range(ctx, start, end),
        database=database, config_file=config_file, events=events, locale=locale,
        out=out, fmt=fmt, no_bom=no_bom, include_url=include_url, dates={"start": start, "end": end},
    )


# ---------------------------------------------------------------------------
# ntask export
# ---------------------------------------------------------------------------
@app.command("export")
def export_cmd(
    out: Annotated[str, typer.Option("--out", "-o", help="Export file (.csv or .xlsx)")],
    database: DatabaseOpt = None,
    fmt: FormatOpt = None,
    sort: SortOpt = None,
    no_bom: NoBomFlag = False,
    include_url: IncludeUrlFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """Export every record as CSV or XLSX, one column per schema column.

    CSV output is UTF-8 with a byte-order mark (disable with `--no-bom`);
    checkboxes are written as the locale's yes/no tokens.

    Example: `ntask export -d <database> --out tasks.csv`

    Example: `ntask export --out tasks.xlsx --sort Due:desc --include-url`
    """
    fmt = _export_format("export", out, fmt, Target(database=database, file=out))
    sorts = _parse_sorts("export", sort, Target(database=database, file=out))
    with Timer() as t:
        ctx = _open_ctx("export", database=database, config_file=config_file, events=events, locale=locale)
        target = ctx.target(file=out)
        try:
            records = ctx.query(sorts=sorts)
            rows = ctx.project_rows(records, include_url=include_url)
            result = _write_export(ctx, out, fmt, rows, include_url=include_url, bom=not no_bom)
        except NtaskError as e:
            _fail("export", e, target=target, warnings=ctx.warnings)
        except OSError as e:
            _emit(error_envelope("export", "ERR_IO", f"Cannot write export: {e}", target=target))
        finally:
            ctx.client.close()

    env = success_envelope(
        "export",
        result.model_dump(),
        target=target,
        warnings=ctx.warnings,
        duration_ms=t.elapsed_ms,
        requests=ctx.client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask record get
# ---------------------------------------------------------------------------
@record_app.command("get")
def record_get(
    record_id: RecordId,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
):
    """Show one record with its values projected to scalars.

    Example: `ntask record get --id <page>`
    """
    target = Target(record=record_id)
    with Timer() as t:
        client = _open_client(
            "record.get", database=None, config_file=config_file,
            events=events, locale=None, need_database=False, target=target,
        )
        try:
            record = client.get_record(record_id)
        except NtaskError as e:
            _fail("record.get", e, target=target)
        finally:
            client.close()

    env = success_envelope(
        "record.get",
        _record_view(record).model_dump(),
        target=target,
        duration_ms=t.elapsed_ms,
        requests=client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask record update
# ---------------------------------------------------------------------------
@record_app.command("update")
def record_update(
    record_id: RecordId,
    prop: Annotated[str, typer.Option("--property", "-p", help="Column to update")],
    value: Annotated[str, typer.Option("--value", help="New value as text (checkbox: true/yes/はい)")],
    dry_run: DryRunFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """Update one property of a record. Mutating.

    The record is read first; the new value is parsed according to the kind
    of its current value. Numbers must be finite (`ERR_PARSE_INVALID`
    otherwise) and kinds without a write-back rule fail with
    `ERR_UNSUPPORTED_PROPERTY_KIND`. Empty input clears number, select and
    date values.

    Example: `ntask record update --id <page> --property Done --value yes`

    Example: `ntask record update --id <page> --property Estimate --value 2.5 --dry-run`
    """
    target = Target(record=record_id, property=prop)
    with Timer() as t:
        client = _open_client(
            "record.update", database=None, config_file=config_file,
            events=events, locale=locale, need_database=False, target=target,
        )
        try:
            record = client.get_record(record_id)
            current = record.values.get(prop)
            if current is None:
                raise PropertyNotFound(
                    f"Record has no property '{prop}'. Available: {', '.join(record.values)}",
                    details={"column": prop},
                )
            new_value = build_payload(current.kind, value, locale=client.config.display_locale)
            payload = {prop: new_value.to_wire()}
            if not dry_run:
                record = client.update_record(record_id, {prop: new_value})
        except NtaskError as e:
            _fail("record.update", e, target=target)
        finally:
            client.close()

    change = ChangeRecord(
        type="record.update",
        target=record_id,
        before=project(current),
        after=project(new_value),
        payload=payload,
    )
    result = {"dry_run": dry_run, "record": _record_view(record).model_dump()}
    env = success_envelope(
        "record.update", result,
        target=target,
        changes=[change],
        duration_ms=t.elapsed_ms,
        requests=client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask record create
# ---------------------------------------------------------------------------
@record_app.command("create")
def record_create(
    assign: Annotated[list[str], typer.Option("--set", help="Property=Value assignment (repeatable)")],
    paragraph: Annotated[Optional[list[str]], typer.Option("--paragraph", help="Body paragraph text (repeatable)")] = None,
    database: DatabaseOpt = None,
    dry_run: DryRunFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
    locale: LocaleOpt = None,
):
    """Create a record in the database. Mutating.

    Each `--set` names a column and its value as text; values are parsed
    according to the column kinds from the database schema.

    Example: `ntask record create --set "Task=Write report" --set Due=2025-05-01 --paragraph "Draft first"`
    """
    assignments = _parse_assignments("record.create", assign, Target(database=database))
    content = [paragraph_block(p) for p in paragraph or []]
    with Timer() as t:
        ctx = _open_ctx("record.create", database=database, config_file=config_file, events=events, locale=locale)
        try:
            values = build_properties(ctx.schema, assignments, locale=ctx.locale)
            payload = {name: v.to_wire() for name, v in values.items()}
            record = None
            if not dry_run:
                record = ctx.client.create_record(ctx.database_id, values, content or None)
        except NtaskError as e:
            _fail("record.create", e, target=ctx.target(), warnings=ctx.warnings)
        finally:
            ctx.client.close()

    change = ChangeRecord(
        type="record.create",
        target=record.id if record else ctx.database_id,
        after={name: project(v) for name, v in values.items()},
        payload=payload,
    )
    result = {
        "dry_run": dry_run,
        "record": _record_view(record).model_dump() if record else None,
        "content_blocks": len(content),
    }
    env = success_envelope(
        "record.create", result,
        target=ctx.target(record=record.id if record else None),
        changes=[change],
        warnings=ctx.warnings,
        duration_ms=t.elapsed_ms,
        requests=ctx.client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask record archive
# ---------------------------------------------------------------------------
@record_app.command("archive")
def record_archive(
    record_id: RecordId,
    dry_run: DryRunFlag = False,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
):
    """Archive (soft-delete) a record. Mutating.

    Archived records no longer appear in queries but are not destroyed and
    can be restored from the Notion trash.

    Example: `ntask record archive --id <page>`
    """
    target = Target(record=record_id)
    with Timer() as t:
        client = _open_client(
            "record.archive", database=None, config_file=config_file,
            events=events, locale=None, need_database=False, target=target,
        )
        try:
            record = None
            if not dry_run:
                record = client.archive_record(record_id)
        except NtaskError as e:
            _fail("record.archive", e, target=target)
        finally:
            client.close()

    result = {
        "dry_run": dry_run,
        "archived": record.archived if record else False,
    }
    env = success_envelope(
        "record.archive", result,
        target=target,
        changes=[ChangeRecord(
            type="record.archive",
            target=record_id,
            before={"archived": False},
            after={"archived": True},
            payload={"archived": True},
        )],
        duration_ms=t.elapsed_ms,
        requests=client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# ntask record append
# ---------------------------------------------------------------------------
@record_app.command("append")
def record_append(
    record_id: RecordId,
    paragraph: Annotated[Optional[list[str]], typer.Option("--paragraph", help="Paragraph text to append (repeatable)")] = None,
    config_file: ConfigOpt = None,
    events: EventsFlag = False,
):
    """Append paragraphs to a record's body. Mutating.

    Example: `ntask record append --id <page> --paragraph "Follow up on Friday"`
    """
    target = Target(record=record_id)
    if not paragraph:
        _emit(error_envelope("record.append", "ERR_MISSING_PARAM", "Provide at least one --paragraph", target=target))
    blocks = [paragraph_block(p) for p in paragraph]
    with Timer() as t:
        client = _open_client(
            "record.append", database=None, config_file=config_file,
            events=events, locale=None, need_database=False, target=target,
        )
        try:
            client.append_content(record_id, blocks)
        except NtaskError as e:
            _fail("record.append", e, target=target)
        finally:
            client.close()

    env = success_envelope(
        "record.append", {"blocks_appended": len(blocks)},
        target=target,
        changes=[ChangeRecord(type="record.append", target=record_id, payload={"children": blocks})],
        duration_ms=t.elapsed_ms,
        requests=client.request_count,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m ntask`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Unhandled exceptions still produce an envelope on stdout.
        env = error_envelope(
            "unknown",
            "ERR_INTERNAL",
            str(exc),
        )
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()

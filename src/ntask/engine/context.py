"""DatabaseContext: one database's schema snapshot plus role resolution."""

from __future__ import annotations

from ntask.adapters.notion_client import NotionClient
from ntask.config import Locale, ServiceConfig
from ntask.contracts.common import Target, WarningDetail
from ntask.contracts.filters import FilterGroup, FilterLeaf, Sort
from ntask.contracts.responses import ColumnMeta, SchemaMeta
from ntask.contracts.schema import ColumnSchema, Record, parse_schema
from ntask.engine import resolver
from ntask.engine.payloads import WRITABLE_KINDS
from ntask.engine.projector import ProjectedRow, project_record


def fetch_schema(client: NotionClient, database_id: str) -> tuple[str, dict[str, ColumnSchema]]:
    """Fetch a database's title and column map (in response order)."""
    data = client.get_database(database_id)
    title = "".join(t.get("plain_text", "") for t in data.get("title") or [])
    return title, parse_schema(data.get("properties") or {})


class DatabaseContext:
    """Wraps a client and a database id; fetches the schema once per run."""

    def __init__(self, client: NotionClient, database_id: str, *, config: ServiceConfig | None = None) -> None:
        self.client = client
        self.database_id = database_id
        self.config = config or client.config
        self.warnings: list[WarningDetail] = []
        self._title: str | None = None
        self._schema: dict[str, ColumnSchema] | None = None

    @property
    def locale(self) -> Locale:
        return self.config.display_locale

    def _load(self) -> None:
        self._title, self._schema = fetch_schema(self.client, self.database_id)
        self.client.events.emit("schema.loaded", {
            "database": self.database_id,
            "columns": len(self._schema),
        })

    @property
    def schema(self) -> dict[str, ColumnSchema]:
        if self._schema is None:
            self._load()
        return self._schema

    @property
    def title(self) -> str:
        if self._title is None:
            self._load()
        return self._title

    @property
    def columns(self) -> list[str]:
        return list(self.schema)

    @property
    def url_column(self) -> str:
        """Name of the record-URL column added by ``--include-url``; never a schema column."""
        name = "url"
        while name in self.schema:
            name = "_" + name
        return name

    def export_columns(self, *, include_url: bool = False) -> list[str]:
        return self.columns + ([self.url_column] if include_url else [])

    def target(self, **overrides: str | None) -> Target:
        t = Target(database=self.database_id)
        for k, v in overrides.items():
            if v is not None:
                setattr(t, k, v)
        return t

    def _note_ambiguity(self, res: resolver.Resolution) -> None:
        if not res.ambiguous:
            return
        message = (
            f"Several columns match role '{res.role}' ({', '.join(res.candidates)}); "
            f"using '{res.name}'"
        )
        if not any(w.message == message for w in self.warnings):
            self.warnings.append(WarningDetail(code="PROPERTY_AMBIGUOUS", message=message, path=res.role))

    def resolve(self, role: str, *, strict: bool = False) -> str:
        name = resolver.resolve(self.schema, role, strict=strict, keywords=self.config.role_keywords)
        self._note_ambiguity(resolver.resolution(self.schema, role, keywords=self.config.role_keywords))
        return name

    def resolve_optional(self, role: str, *, strict: bool = False) -> str | None:
        name = resolver.resolve_optional(self.schema, role, strict=strict, keywords=self.config.role_keywords)
        if name is not None:
            self._note_ambiguity(resolver.resolution(self.schema, role, keywords=self.config.role_keywords))
        return name

    def column(self, name: str) -> ColumnSchema | None:
        return self.schema.get(name)

    def get_schema_meta(self) -> SchemaMeta:
        roles: dict[str, str | None] = {}
        for role in resolver.ROLES:
            res = resolver.resolution(self.schema, role, keywords=self.config.role_keywords)
            self._note_ambiguity(res)
            roles[role] = res.name
        return SchemaMeta(
            database_id=self.database_id,
            title=self.title,
            columns=[
                ColumnMeta(
                    name=c.name,
                    kind=c.kind,
                    wire_type=c.wire_type,
                    options=[o.name for o in c.options],
                    writable=c.kind in WRITABLE_KINDS,
                )
                for c in self.schema.values()
            ],
            roles=roles,
        )

    def query(
        self,
        filter: FilterLeaf | FilterGroup | None = None,
        sorts: list[Sort] | None = None,
    ) -> list[Record]:
        return self.client.query(self.database_id, filter, sorts)

    def project_rows(self, records: list[Record], *, include_url: bool = False) -> list[ProjectedRow]:
        url_column = self.url_column if include_url else None
        rows = []
        for record in records:
            row = project_record(record, self.columns)
            if url_column:
                row[url_column] = record.url
            rows.append(row)
        return rows

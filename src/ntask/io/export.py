"""Delimited-text export of projected rows."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable

from ntask.config import Locale
from ntask.engine.projector import ProjectedRow, format_scalar
from ntask.io.fileops import atomic_write

BOM = "\ufeff"


def render(
    columns: list[str],
    rows: Iterable[ProjectedRow],
    *,
    locale: Locale | None = None,
    bom: bool = False,
) -> str:
    """Render rows as comma-separated text, header first.

    Fields holding a comma, quote or line break are quoted with embedded
    quotes doubled; everything else is written bare.  ``bom`` prefixes a
    UTF-8 byte-order mark so spreadsheet applications detect the encoding.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([format_scalar(row.get(name), locale) for name in columns])
    text = buf.getvalue()
    return BOM + text if bom else text


def write_csv(
    path: str | Path,
    columns: list[str],
    rows: list[ProjectedRow],
    *,
    locale: Locale | None = None,
    bom: bool = True,
) -> int:
    """Write rows to ``path`` atomically. Returns the number of data rows."""
    text = render(columns, rows, locale=locale, bom=bom)
    atomic_write(path, text.encode("utf-8"))
    return len(rows)

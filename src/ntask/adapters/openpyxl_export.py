"""openpyxl-based workbook export of projected rows."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from ntask.engine.projector import ProjectedRow
from ntask.io.fileops import atomic_write

# Excel rejects sheet titles longer than this.
MAX_SHEET_TITLE = 31


def _sheet_title(title: str) -> str:
    cleaned = "".join(c for c in title if c not in "[]:*?/\\").strip()
    return cleaned[:MAX_SHEET_TITLE] or "Records"


def _append(ws, values: list) -> None:
    ws.append(values)
    # openpyxl reads a leading "=" as a formula; text stays text.
    for cell in ws[ws.max_row]:
        if isinstance(cell.value, str) and cell.data_type != "s":
            cell.data_type = "s"


def write_xlsx(
    path: str | Path,
    columns: list[str],
    rows: list[ProjectedRow],
    *,
    sheet_title: str = "Records",
) -> int:
    """Write rows into a single-sheet workbook, keeping native cell types.

    Empty markers become blank cells.  Returns the number of data rows.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = _sheet_title(sheet_title)
    _append(ws, columns)
    for row in rows:
        _append(ws, [row.get(name) for name in columns])

    for idx, name in enumerate(columns, start=1):
        width = max([len(str(name))] + [len(str(r.get(name) or "")) for r in rows])
        ws.column_dimensions[get_column_letter(idx)].width = min(max(width + 2, 8), 60)
    if columns:
        ws.freeze_panes = "A2"

    buf = BytesIO()
    wb.save(buf)
    wb.close()
    atomic_write(path, buf.getvalue())
    return len(rows)

"""Excel export writer — one styled, rank-banded "Active Advisors" sheet."""

from __future__ import annotations

from collections.abc import Iterable
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from advisor_export.banding import (
    BRAND_PURPLE,
    COLUMN_ALIGNMENT,
    DISPLAY_HEADERS,
    WHITE,
    band_tier,
    display_rows,
)
from advisor_export.models import AdvisorRecord, SortState
from advisor_export.sorting import apply_sort

SHEET_TITLE = "Active Advisors"
DEFAULT_BASENAME = "active_advisors"

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color=WHITE)
HEADER_FILL = PatternFill(start_color=BRAND_PURPLE, end_color=BRAND_PURPLE, fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

_AUTO_WIDTH_SAMPLE_ROWS = 300
_MAX_COLUMN_WIDTH = 40


# ── Helpers ──────────────────────────────────────────────────────


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _style_body(ws: Worksheet, nrows: int, ncols: int) -> None:
    """Band data rows by rank and align each column."""
    alignments = [Alignment(horizontal=h, vertical="center") for h in COLUMN_ALIGNMENT]
    for rank in range(1, nrows + 1):
        style = band_tier(rank).style
        fill = PatternFill(start_color=style.fill, end_color=style.fill, fill_type="solid")
        font = Font(name="Calibri", size=11, color=style.text)
        for c in range(1, ncols + 1):
            cell = ws.cell(row=rank + 1, column=c)
            cell.fill = fill
            cell.font = font
            cell.alignment = alignments[c - 1]


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)  # include header row
    for c_idx in range(1, ws.max_column + 1):
        letter = get_column_letter(c_idx)
        width = 0
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=c_idx, max_col=c_idx):
            cell = row[0]
            width = max(width, len(str(cell.value or "")))
        width += 4
        ws.column_dimensions[letter].width = min(width, _MAX_COLUMN_WIDTH)


def _set_value(ws: Worksheet, row: int, column: int, val: Any) -> None:
    cell = ws.cell(row=row, column=column, value=val)
    # openpyxl stores "=..." strings as formulas; keep them as text.
    if isinstance(val, str) and val.startswith("="):
        cell.data_type = "s"


def _rows_to_sheet(ws: Worksheet, rows: list[list[Any]]) -> None:
    for c_idx, header in enumerate(DISPLAY_HEADERS, 1):
        ws.cell(row=1, column=c_idx, value=header)
    for r_idx, row_vals in enumerate(rows, 2):
        for c_idx, val in enumerate(row_vals, 1):
            _set_value(ws, r_idx, c_idx, val)
    _style_header(ws, len(DISPLAY_HEADERS))
    _style_body(ws, len(rows), len(DISPLAY_HEADERS))
    ws.freeze_panes = "A2"
    _auto_width(ws)


# ── Public API ───────────────────────────────────────────────────


def build_workbook(records: Iterable[AdvisorRecord], sort: SortState | None = None) -> Workbook:
    """Return the styled export workbook for *records* in *sort* order."""
    ordered = apply_sort(records, sort or SortState())
    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    ws.title = SHEET_TITLE
    _rows_to_sheet(ws, display_rows(ordered))
    return wb


def write_workbook(records: Iterable[AdvisorRecord], sort: SortState | None = None) -> bytes:
    """Serialise the export workbook to ``.xlsx`` bytes."""
    buf = BytesIO()
    build_workbook(records, sort).save(buf)
    return buf.getvalue()


def export_filename(sort: SortState | None, ext: str, base: str = DEFAULT_BASENAME) -> str:
    """File name for an export: *base*, the sort suffix when sorted, and *ext*."""
    suffix = sort.suffix if sort is not None else ""
    return f"{base}{suffix}.{ext.lstrip('.')}"

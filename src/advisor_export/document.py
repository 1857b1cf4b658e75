"""PDF export — a single page sized to fit the title band and the ranked table.

All geometry is in millimetres; reportlab works in points, so every value is
scaled by ``mm`` only at drawing time.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from advisor_export.banding import (
    BLACK,
    BRAND_PURPLE,
    COLUMN_ALIGNMENT,
    TITLE_BAND,
    WHITE,
    format_premium,
    tier_spans,
    truncate_name,
)
from advisor_export.models import AdvisorRecord, ExportLayoutParams, SortState
from advisor_export.sorting import apply_sort

DEFAULT_LOGO_PATH = Path(__file__).resolve().parent / "assets" / "brand_logo.png"

# ── Geometry constants (mm) ──────────────────────────────────────

TITLE_HEIGHT = 12.0
ROW_HEIGHT = 4.5
HEADER_ROW_HEIGHT = 8.0
SPACING = 5.0
PAGE_MARGINS = 5.0
COLUMN_WIDTHS: tuple[float, ...] = (7.0, 18.0, 70.0, 15.0, 20.0, 34.0)

LOGO_X = 2.5
LOGO_TOP = 2.0
LOGO_WIDTH = 25.0
LOGO_HEIGHT = 8.0
TITLE_BASELINE = 8.0
TITLE_RULE_WIDTH = 0.5
CELL_PADDING = 1.0
BODY_LINE_WIDTH = 0.1
HEADER_LINE_WIDTH = 0.5

TITLE_FONT = ("Helvetica-Bold", 12)
HEADER_FONT_SIZE = 8
BODY_FONT = "Helvetica-Bold"
BODY_FONT_SIZE = 7

PDF_HEADERS: list[str] = [
    "#",
    "Advisor Code",
    "Advisor Name",
    "Status",
    "No of\nPolicies",
    "Annualized New\nBusiness Premium (RS)",
]

_REPORTLAB_ALIGN = {"left": "LEFT", "center": "CENTER", "right": "RIGHT"}


def _color(hex_rgb: str) -> Color:
    return HexColor(f"#{hex_rgb}")


# ── Geometry ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class PageGeometry:
    """Page size derived from the row count and the height multiplier."""

    row_count: int
    height_multiplier: float
    title_height: float = TITLE_HEIGHT
    row_height: float = ROW_HEIGHT
    header_row_height: float = HEADER_ROW_HEIGHT
    spacing: float = SPACING
    column_widths: tuple[float, ...] = COLUMN_WIDTHS
    margins: float = PAGE_MARGINS

    @property
    def table_height(self) -> float:
        return self.row_height * self.row_count + self.header_row_height

    @property
    def content_height(self) -> float:
        return self.title_height + self.table_height + self.spacing

    @property
    def page_height(self) -> int:
        # The multiplier absorbs renderer padding drift; it is tuned by eye.
        return math.ceil(self.content_height * self.height_multiplier)

    @property
    def columns_total(self) -> float:
        return sum(self.column_widths)

    @property
    def page_width(self) -> float:
        return self.columns_total + self.margins


def page_geometry(row_count: int, height_multiplier: float) -> PageGeometry:
    if row_count < 0:
        raise ValueError("row_count must be >= 0")
    if height_multiplier <= 0:
        raise ValueError("height_multiplier must be > 0")
    return PageGeometry(row_count=row_count, height_multiplier=float(height_multiplier))


# ── Table ────────────────────────────────────────────────────────


def body_rows(records: Sequence[AdvisorRecord]) -> list[list[str]]:
    """Display values for the PDF table: rank, truncated name, formatted premium."""
    return [
        [
            str(rank),
            rec.advisor_code,
            truncate_name(rec.advisor_name),
            rec.advisor_status,
            str(rec.no_of_policies),
            format_premium(rec.annualized_premium),
        ]
        for rank, rec in enumerate(records, start=1)
    ]


def table_style_commands(row_count: int) -> list[tuple[Any, ...]]:
    """TableStyle commands for a header row plus *row_count* banded body rows."""
    pad = CELL_PADDING * mm
    black = _color(BLACK)
    cmds: list[tuple[Any, ...]] = [
        ("FONTNAME", (0, 0), (-1, -1), BODY_FONT),
        ("FONTSIZE", (0, 0), (-1, -1), BODY_FONT_SIZE),
        ("LEADING", (0, 0), (-1, -1), BODY_FONT_SIZE + 1),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), pad),
        ("RIGHTPADDING", (0, 0), (-1, -1), pad),
        ("TOPPADDING", (0, 0), (-1, -1), pad),
        ("BOTTOMPADDING", (0, 0), (-1, -1), pad),
        ("GRID", (0, 0), (-1, -1), BODY_LINE_WIDTH * mm, black),
        # Header row
        ("BACKGROUND", (0, 0), (-1, 0), _color(BRAND_PURPLE)),
        ("TEXTCOLOR", (0, 0), (-1, 0), _color(WHITE)),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("FONTSIZE", (0, 0), (-1, 0), HEADER_FONT_SIZE),
        ("LEADING", (0, 0), (-1, 0), HEADER_FONT_SIZE + 1),
        ("INNERGRID", (0, 0), (-1, 0), HEADER_LINE_WIDTH * mm, black),
        ("BOX", (0, 0), (-1, 0), HEADER_LINE_WIDTH * mm, black),
    ]
    if row_count <= 0:
        return cmds

    for col, align in enumerate(COLUMN_ALIGNMENT):
        cmds.append(("ALIGN", (col, 1), (col, -1), _REPORTLAB_ALIGN[align]))
    for tier, first, last in tier_spans(row_count):
        style = tier.style
        cmds.append(("BACKGROUND", (0, first), (-1, last), _color(style.fill)))
        cmds.append(("TEXTCOLOR", (0, first), (-1, last), _color(style.text)))
    return cmds


def build_table(records: Sequence[AdvisorRecord]) -> Table:
    rows = body_rows(records)
    table = Table(
        [PDF_HEADERS, *rows],
        colWidths=[w * mm for w in COLUMN_WIDTHS],
        rowHeights=[HEADER_ROW_HEIGHT * mm] + [ROW_HEIGHT * mm] * len(rows),
    )
    table.setStyle(TableStyle(table_style_commands(len(rows))))
    return table


# ── Drawing ──────────────────────────────────────────────────────


def _draw_title_band(
    c: canvas.Canvas, geometry: PageGeometry, layout: ExportLayoutParams, logo: Path,
) -> None:
    page_w = geometry.page_width * mm
    page_h = geometry.page_height * mm
    band_bottom = page_h - geometry.title_height * mm

    c.setFillColor(_color(TITLE_BAND))
    c.rect(0, band_bottom, page_w, geometry.title_height * mm, stroke=0, fill=1)

    c.setStrokeColor(_color(BRAND_PURPLE))
    c.setLineWidth(TITLE_RULE_WIDTH * mm)
    c.line(0, band_bottom, page_w, band_bottom)

    c.drawImage(
        ImageReader(str(logo)),
        LOGO_X * mm,
        page_h - (LOGO_TOP + LOGO_HEIGHT) * mm,
        width=LOGO_WIDTH * mm,
        height=LOGO_HEIGHT * mm,
        mask="auto",
    )

    c.setFillColor(_color(BRAND_PURPLE))
    c.setFont(*TITLE_FONT)
    c.drawCentredString(page_w / 2, page_h - TITLE_BASELINE * mm, layout.header_text)


def write_document(
    records: Iterable[AdvisorRecord],
    sort: SortState | None = None,
    layout: ExportLayoutParams | None = None,
) -> bytes:
    """Render *records* in *sort* order as a one-page PDF and return its bytes.

    Raises
    ------
    FileNotFoundError
        If the configured logo file does not exist.
    """
    layout = layout or ExportLayoutParams()
    logo = layout.logo_path or DEFAULT_LOGO_PATH
    if not logo.is_file():
        raise FileNotFoundError(f"Logo image not found: {logo}")

    ordered = apply_sort(records, sort or SortState())
    geometry = page_geometry(len(ordered), layout.height_multiplier)
    page_w = geometry.page_width * mm
    page_h = geometry.page_height * mm

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_w, page_h))
    c.setTitle(layout.header_text)
    _draw_title_band(c, geometry, layout, logo)

    table = build_table(ordered)
    _table_w, table_h = table.wrapOn(c, page_w, page_h)
    table_top = page_h - (geometry.title_height + geometry.spacing) * mm
    table.drawOn(c, (geometry.margins / 2) * mm, table_top - table_h)

    c.showPage()
    c.save()
    return buf.getvalue()

"""Workbook import + normalisation — locate the header, map columns, keep active rows."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any

from advisor_export import HEADER_MARKER, REQUIRED_COLUMNS
from advisor_export.io import Grid, read_grid
from advisor_export.models import AdvisorRecord, ImportReport

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "active"

_THOUSANDS_COMMA_RE = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")
_INTEGRAL_TEXT_RE = re.compile(r"^[+-]?\d+\.0+$")


# ── Column resolution ───────────────────────────────────────────


@dataclass(frozen=True)
class ColumnIndex:
    """Resolved positions of the required columns; ``None`` means not found."""

    code: int | None = None
    name: int | None = None
    status: int | None = None
    policies: int | None = None
    premium: int | None = None

    def missing(self) -> list[str]:
        positions = (self.code, self.name, self.status, self.policies, self.premium)
        return [col for col, pos in zip(REQUIRED_COLUMNS, positions) if pos is None]


def locate_header_row(grid: Grid) -> int | None:
    """Return the index of the first row containing the header marker cell."""
    for idx, row in enumerate(grid):
        if row and HEADER_MARKER in row:
            return idx
    return None


def resolve_columns(header: Sequence[Any]) -> ColumnIndex:
    def _find(name: str) -> int | None:
        for pos, value in enumerate(header):
            if value == name:
                return pos
        return None

    code, name, status, policies, premium = (_find(col) for col in REQUIRED_COLUMNS)
    return ColumnIndex(code=code, name=name, status=status, policies=policies, premium=premium)


def _cell(row: Sequence[Any], pos: int | None) -> Any:
    if pos is None or pos >= len(row):
        return None
    return row[pos]


# ── Type coercion helpers ────────────────────────────────────────


def cell_text(value: Any) -> str:
    """Render a raw cell as trimmed text; empty cells become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    if _INTEGRAL_TEXT_RE.fullmatch(text):
        text = text.split(".", 1)[0]
    return text


def normalize_status(value: Any) -> str:
    return cell_text(value).lower()


def _normalize_numeric_token(token: str) -> str:
    token = token.strip()
    token = re.sub(r"(?<=\d)[\s\u00a0]+(?=\d)", "", token)
    if token.startswith("+"):
        token = token[1:]
    if _THOUSANDS_COMMA_RE.fullmatch(token):
        token = token.replace(",", "")
    return token


def coerce_number(value: Any) -> float:
    """Coerce a cell to a non-negative number; anything unusable becomes 0.

    US thousands separators are accepted (``"1,234"`` -> 1234). Negative and
    non-finite values collapse to 0 because the advisor fields are counts and
    amounts.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, Real):
        result = float(value)
    else:
        token = _normalize_numeric_token(str(value))
        if not token:
            return 0.0
        try:
            result = float(token)
        except ValueError:
            return 0.0
    if not math.isfinite(result) or result < 0:
        return 0.0
    return result


def coerce_count(value: Any) -> int:
    return int(coerce_number(value))


# ── Main import functions ───────────────────────────────────────


def _row_is_empty(row: Sequence[Any] | None) -> bool:
    return not row or all(cell_text(val) == "" for val in row)


def parse_grid(grid: Grid, source: str = "") -> tuple[list[AdvisorRecord], ImportReport]:
    """Normalise a parsed sheet into active advisor records.

    Returns ``(records, report)``. Without a header row no rows are read and
    the report carries a warning.
    """
    header_idx = locate_header_row(grid)
    if header_idx is None:
        report = ImportReport(source=source)
        report.warnings.append(f"Could not find header row (no {HEADER_MARKER!r} cell)")
        logger.warning("No header row found in %s", source or "workbook")
        return [], report

    columns = resolve_columns(grid[header_idx])
    report = ImportReport(source=source, header_row=header_idx)
    report.missing_columns = columns.missing()
    if report.missing_columns:
        report.warnings.append(f"Missing columns: {', '.join(report.missing_columns)}")
        logger.warning(
            "Missing columns in %s: %s", source or "workbook", ", ".join(report.missing_columns)
        )

    records: list[AdvisorRecord] = []
    rows_in = 0
    inactive = 0
    for row in grid[header_idx + 1:]:
        if _row_is_empty(row):
            continue
        rows_in += 1

        code = cell_text(_cell(row, columns.code))
        if not code:
            continue
        status_text = cell_text(_cell(row, columns.status))
        if status_text.lower() != ACTIVE_STATUS:
            inactive += 1
            continue

        records.append(
            AdvisorRecord(
                advisor_code=code,
                advisor_name=cell_text(_cell(row, columns.name)),
                advisor_status=status_text,
                no_of_policies=coerce_count(_cell(row, columns.policies)),
                annualized_premium=coerce_number(_cell(row, columns.premium)),
            )
        )

    report.rows_in = rows_in
    report.rows_out = len(records)
    report.dropped_rows = rows_in - len(records)
    if inactive:
        report.warnings.append(f"Skipped {inactive} rows with a status other than active")
    blank_codes = report.dropped_rows - inactive
    if blank_codes:
        report.warnings.append(f"Skipped {blank_codes} rows without an advisor code")
    if not records:
        report.warnings.append("No active advisors found")
        logger.info("No active advisors found in %s", source or "workbook")

    logger.debug(
        "Imported %d of %d rows from %s (header row %d)",
        report.rows_out, report.rows_in, source or "workbook", header_idx,
    )
    return records, report


def parse_workbook(buffer: bytes, source: str = "") -> tuple[list[AdvisorRecord], ImportReport]:
    """Parse a workbook buffer; unreadable content yields no records and a warning."""
    try:
        grid = read_grid(buffer)
    except ValueError as exc:
        logger.error("Could not read workbook %s: %s", source or "<buffer>", exc)
        report = ImportReport(source=source, warnings=[str(exc)])
        return [], report
    return parse_grid(grid, source=source)


def import_workbook(buffer: bytes, source: str = "") -> list[AdvisorRecord]:
    """Return the active advisor records in *buffer*, in sheet order."""
    records, _report = parse_workbook(buffer, source=source)
    return records

"""Data models / typed records used across the package."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from numbers import Integral, Real
from pathlib import Path
from typing import Any

DEFAULT_HEADER_TEXT = "ACCEPTED AS @ ANBP DN ZONE 2025"
DEFAULT_HEIGHT_MULTIPLIER = 1.18
MIN_HEIGHT_MULTIPLIER = 1.05
MAX_HEIGHT_MULTIPLIER = 2.0


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_non_negative_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{field_name} must be a number")
    result = float(value)
    if not math.isfinite(result) or result < 0:
        raise ValueError(f"{field_name} must be a finite number >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    return value


# ── Records ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class AdvisorRecord:
    """One active advisor row.

    Records are immutable; an edit produces a new record via :meth:`with_name`.
    """

    advisor_code: str
    advisor_name: str = ""
    advisor_status: str = ""
    no_of_policies: int = 0
    annualized_premium: float = 0.0

    def __post_init__(self) -> None:
        if not _require_str(self.advisor_code, "advisor_code"):
            raise ValueError("advisor_code must be non-empty")
        _require_str(self.advisor_name, "advisor_name")
        _require_str(self.advisor_status, "advisor_status")
        object.__setattr__(
            self, "no_of_policies", _to_non_negative_int(self.no_of_policies, "no_of_policies")
        )
        object.__setattr__(
            self,
            "annualized_premium",
            _to_non_negative_float(self.annualized_premium, "annualized_premium"),
        )

    def with_name(self, name: str) -> AdvisorRecord:
        return replace(self, advisor_name=_require_str(name, "advisor_name"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "advisorCode": self.advisor_code,
            "advisorName": self.advisor_name,
            "advisorStatus": self.advisor_status,
            "noOfPolicies": self.no_of_policies,
            "annualizedPremium": self.annualized_premium,
        }


# ── Sorting state ────────────────────────────────────────────────


class SortField(str, Enum):
    annualized_premium = "annualizedPremium"
    no_of_policies = "noOfPolicies"

    @property
    def attribute(self) -> str:
        """Name of the :class:`AdvisorRecord` attribute this field sorts on."""
        return self.name


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"

    def flipped(self) -> SortOrder:
        return SortOrder.desc if self is SortOrder.asc else SortOrder.asc


@dataclass(frozen=True)
class SortState:
    """Click-to-sort state: which numeric field, and in which direction."""

    field: SortField | None = None
    order: SortOrder = SortOrder.asc

    def __post_init__(self) -> None:
        if self.field is not None:
            object.__setattr__(self, "field", SortField(self.field))
        object.__setattr__(self, "order", SortOrder(self.order))

    def toggled(self, sort_field: SortField | str) -> SortState:
        """Return the state after a click on *sort_field*.

        Re-selecting the active field flips the order; a new field starts
        ascending.
        """
        sort_field = SortField(sort_field)
        if self.field is sort_field:
            return SortState(sort_field, self.order.flipped())
        return SortState(sort_field, SortOrder.asc)

    def reset(self) -> SortState:
        return SortState()

    @property
    def suffix(self) -> str:
        if self.field is None:
            return ""
        return f"_sorted_by_{self.field.value}_{self.order.value}"

    def describe(self) -> str:
        if self.field is None:
            return "unsorted"
        direction = "ascending" if self.order is SortOrder.asc else "descending"
        return f"{self.field.value} ({direction})"


# ── Export layout ────────────────────────────────────────────────


@dataclass(frozen=True)
class ExportLayoutParams:
    """User-adjustable PDF parameters. They never change exported data."""

    header_text: str = DEFAULT_HEADER_TEXT
    height_multiplier: float = DEFAULT_HEIGHT_MULTIPLIER
    logo_path: Path | None = None

    def __post_init__(self) -> None:
        _require_str(self.header_text, "header_text")
        value = self.height_multiplier
        if isinstance(value, bool) or not isinstance(value, Real):
            raise TypeError("height_multiplier must be a number")
        value = float(value)
        if not (MIN_HEIGHT_MULTIPLIER <= value <= MAX_HEIGHT_MULTIPLIER):
            raise ValueError(
                f"height_multiplier must be between {MIN_HEIGHT_MULTIPLIER} "
                f"and {MAX_HEIGHT_MULTIPLIER}, got {value}"
            )
        object.__setattr__(self, "height_multiplier", value)
        if self.logo_path is not None:
            object.__setattr__(self, "logo_path", Path(self.logo_path))


# ── Reports ──────────────────────────────────────────────────────


@dataclass
class ImportReport:
    """Diagnostics for one imported workbook.

    Contract invariant: ``dropped_rows == rows_in - rows_out``.
    """

    source: str = ""
    header_row: int | None = None
    rows_in: int = 0
    rows_out: int = 0
    dropped_rows: int = 0
    missing_columns: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.dropped_rows = _to_non_negative_int(self.dropped_rows, "dropped_rows")
        if self.header_row is not None:
            self.header_row = _to_non_negative_int(self.header_row, "header_row")
        self.missing_columns = _to_string_list(self.missing_columns, "missing_columns")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.rows_out > self.rows_in:
            raise ValueError("rows_out must be <= rows_in")
        expected_dropped = self.rows_in - self.rows_out
        if self.dropped_rows != expected_dropped:
            raise ValueError("dropped_rows must equal rows_in - rows_out")

    @property
    def header_found(self) -> bool:
        return self.header_row is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "header_row": self.header_row,
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "dropped_rows": self.dropped_rows,
            "missing_columns": list(self.missing_columns),
            "warnings": list(self.warnings),
        }


@dataclass
class ExportManifest:
    """Audit-trail manifest for a single export run."""

    tool: str = "advisor-export"
    version: str = ""
    input_paths: list[str] = field(default_factory=list)
    input_sha256: dict[str, str] = field(default_factory=dict)
    output_dir: str = ""
    created_at_utc: str = ""
    records: int = 0
    sort_field: str | None = None
    sort_order: str = SortOrder.asc.value
    outputs: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.records = _to_non_negative_int(self.records, "records")
        self.input_paths = _to_string_list(self.input_paths, "input_paths")
        self.outputs = _to_string_list(self.outputs, "outputs")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_paths": list(self.input_paths),
            "input_sha256": dict(self.input_sha256),
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "records": self.records,
            "sort_field": self.sort_field,
            "sort_order": self.sort_order,
            "outputs": list(self.outputs),
        }

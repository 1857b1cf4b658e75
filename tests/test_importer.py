"""Header location, column mapping, status filter and numeric coercion."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from advisor_export import REQUIRED_COLUMNS
from advisor_export.importer import (
    ColumnIndex,
    cell_text,
    coerce_count,
    coerce_number,
    import_workbook,
    locate_header_row,
    parse_grid,
    parse_workbook,
    resolve_columns,
)

HEADER = list(REQUIRED_COLUMNS)


def _row(code: object, name: object, status: object, policies: object, premium: object) -> list:
    return [code, name, status, policies, premium]


def test_locate_header_row_skips_leading_title_rows() -> None:
    grid = [
        ["Advisor Performance"],
        [],
        [None, None],
        ["", "Advisor Code", "Advisor Name"],
    ]

    assert locate_header_row(grid) == 3


def test_locate_header_row_requires_verbatim_marker() -> None:
    grid = [["advisor code"], ["Advisor Code "], ["Advisor  Code"]]

    assert locate_header_row(grid) is None


def test_resolve_columns_is_order_independent() -> None:
    header = list(reversed(HEADER)) + ["Branch"]

    columns = resolve_columns(header)

    assert columns == ColumnIndex(code=4, name=3, status=2, policies=1, premium=0)
    assert columns.missing() == []


def test_resolve_columns_marks_absent_names_as_none() -> None:
    columns = resolve_columns(["Advisor Code", "Advisor Status"])

    assert columns.code == 0
    assert columns.name is None
    assert columns.missing() == [
        "Advisor Name",
        "No of Policies",
        "Annualized New Business Premium (RS)",
    ]


def test_parse_grid_finds_header_in_any_column_order() -> None:
    header = ["Annualized New Business Premium (RS)", "Advisor Status", "Advisor Name",
              "No of Policies", "Advisor Code"]
    grid = [
        ["Monthly report"],
        ["Generated 2025-01-31"],
        header,
        ["1500", "Active", "Nimal Perera", "4", "A001"],
    ]

    records, report = parse_grid(grid, source="report.xlsx")

    assert report.header_row == 2
    assert len(records) == 1
    rec = records[0]
    assert rec.advisor_code == "A001"
    assert rec.advisor_name == "Nimal Perera"
    assert rec.no_of_policies == 4
    assert rec.annualized_premium == 1500.0


@pytest.mark.parametrize("status", ["Active", "ACTIVE", " active ", "active"])
def test_active_status_variants_are_kept(status: str) -> None:
    records, _report = parse_grid([HEADER, _row("A1", "N", status, 1, 1)])

    assert len(records) == 1
    assert records[0].advisor_status == status.strip()


@pytest.mark.parametrize("status", ["Inactive", "", None, "Activated", "Terminated"])
def test_non_active_status_rows_are_dropped(status: object) -> None:
    records, report = parse_grid([HEADER, _row("A1", "N", status, 1, 1)])

    assert records == []
    assert report.rows_in == 1
    assert report.dropped_rows == 1


def test_short_row_without_status_cell_is_dropped() -> None:
    records, _report = parse_grid([HEADER, ["A1", "Nimal"]])

    assert records == []


def test_rows_without_code_and_empty_rows_are_skipped() -> None:
    grid = [
        HEADER,
        _row(None, "No Code", "Active", 1, 1),
        _row("  ", "Blank Code", "Active", 1, 1),
        [],
        [None, None, None, None, None],
        _row("A2", "Kept", "Active", 2, 2),
    ]

    records, report = parse_grid(grid)

    assert [r.advisor_code for r in records] == ["A2"]
    assert report.rows_in == 3
    assert report.rows_out == 1
    assert any("without an advisor code" in w for w in report.warnings)


def test_row_order_is_preserved() -> None:
    grid = [HEADER] + [_row(f"A{i}", f"N{i}", "Active", 10 - i, i) for i in range(5)]

    records, _report = parse_grid(grid)

    assert [r.advisor_code for r in records] == ["A0", "A1", "A2", "A3", "A4"]


def test_missing_header_row_yields_nothing() -> None:
    grid = [["Code", "Name"], ["A1", "Nimal"]]

    records, report = parse_grid(grid, source="bad.xlsx")

    assert records == []
    assert report.header_row is None
    assert report.header_found is False
    assert report.rows_in == 0
    assert any("Could not find header row" in w for w in report.warnings)


def test_missing_numeric_columns_default_to_zero() -> None:
    grid = [
        ["Advisor Code", "Advisor Status"],
        ["A1", "Active"],
    ]

    records, report = parse_grid(grid)

    assert len(records) == 1
    assert records[0].advisor_name == ""
    assert records[0].no_of_policies == 0
    assert records[0].annualized_premium == 0.0
    assert "No of Policies" in report.missing_columns
    assert any("Missing columns" in w for w in report.warnings)


def test_missing_status_column_drops_every_row() -> None:
    grid = [["Advisor Code", "Advisor Name"], ["A1", "Nimal"]]

    records, report = parse_grid(grid)

    assert records == []
    assert report.missing_columns == [
        "Advisor Status",
        "No of Policies",
        "Annualized New Business Premium (RS)",
    ]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1,234", 1234.0),
        (1234, 1234.0),
        (None, 0.0),
        ("abc", 0.0),
        ("", 0.0),
        ("  42 ", 42.0),
        ("1,234,567.50", 1234567.5),
        ("1 234", 1234.0),
        (12.5, 12.5),
        ("-5", 0.0),
        (float("nan"), 0.0),
        ("inf", 0.0),
        (True, 0.0),
        ("12,34", 0.0),
    ],
)
def test_coerce_number_policy(raw: object, expected: float) -> None:
    assert coerce_number(raw) == expected


def test_coerce_count_truncates_fractions() -> None:
    assert coerce_count("7") == 7
    assert coerce_count("7.9") == 7
    assert coerce_count("n/a") == 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, ""), ("  A1 ", "A1"), (1001.0, "1001"), ("1001.0", "1001"), (12, "12"), (1.5, "1.5")],
)
def test_cell_text(raw: object, expected: str) -> None:
    assert cell_text(raw) == expected


def test_import_workbook_end_to_end(advisor_xlsx: bytes) -> None:
    records = import_workbook(advisor_xlsx, source="zone2.xlsx")

    assert [r.advisor_code for r in records] == ["A001", "A003"]
    assert records[0].no_of_policies == 12
    assert records[0].annualized_premium == 150000.0
    assert records[1].advisor_status == "ACTIVE"
    assert records[1].no_of_policies == 7
    assert records[1].annualized_premium == 1234.0


def test_parse_workbook_reports_header_and_counts(advisor_xlsx: bytes) -> None:
    records, report = parse_workbook(advisor_xlsx, source="zone2.xlsx")

    assert report.source == "zone2.xlsx"
    assert report.header_row == 2
    assert report.rows_in == 3
    assert report.rows_out == len(records) == 2
    assert any("status other than active" in w for w in report.warnings)


def test_import_workbook_reads_first_sheet_only(make_xlsx: Callable[..., bytes]) -> None:
    payload = make_xlsx([HEADER, ["A1", "First", "Active", 1, 10]], extra_sheets=2)

    records = import_workbook(payload)

    assert [r.advisor_code for r in records] == ["A1"]


def test_import_workbook_tolerates_blank_leading_rows(make_xlsx: Callable[..., bytes]) -> None:
    payload = make_xlsx([[], [], HEADER, ["A1", "Nimal", "Active", 1, 10]])

    records = import_workbook(payload)

    assert [r.advisor_code for r in records] == ["A1"]


def test_import_workbook_never_raises_on_garbage() -> None:
    records, report = parse_workbook(b"definitely not excel", source="junk.xlsx")

    assert records == []
    assert report.header_row is None
    assert report.warnings
    assert import_workbook(b"") == []

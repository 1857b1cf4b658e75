from __future__ import annotations

from collections.abc import Callable, Sequence
from io import BytesIO

import pytest
from openpyxl import Workbook

from advisor_export import REQUIRED_COLUMNS
from advisor_export.models import AdvisorRecord

HEADER = list(REQUIRED_COLUMNS)


def _build_xlsx(rows: Sequence[Sequence[object]], extra_sheets: int = 0) -> bytes:
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = "Advisors"
    for row in rows:
        ws.append(list(row))
    for idx in range(extra_sheets):
        other = wb.create_sheet(title=f"Other{idx}")
        other.append(HEADER)
        other.append([f"X{idx}", "Other Sheet", "Active", 1, 1])
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def make_xlsx() -> Callable[..., bytes]:
    return _build_xlsx


@pytest.fixture
def advisor_xlsx() -> bytes:
    return _build_xlsx(
        [
            ["Advisor Performance Report"],
            ["Zone 2"],
            HEADER,
            ["A001", "Nimal Perera", "Active", 12, 150000],
            ["A002", "Kamal Silva", "Inactive", 3, 20000],
            ["A003", "Sunil Fernando", "ACTIVE", "7", "1,234"],
        ]
    )


def make_records(count: int) -> list[AdvisorRecord]:
    return [
        AdvisorRecord(
            advisor_code=f"A{idx:03d}",
            advisor_name=f"Advisor Number {idx}",
            advisor_status="Active",
            no_of_policies=idx,
            annualized_premium=float(idx * 1000),
        )
        for idx in range(1, count + 1)
    ]


@pytest.fixture
def records_15() -> list[AdvisorRecord]:
    return make_records(15)

from __future__ import annotations

import json
from pathlib import Path

from advisor_export.models import ImportReport
from advisor_export.qc import write_import_report


def test_write_import_report_writes_expected_contract(tmp_path: Path) -> None:
    reports = [
        ImportReport(source="a.xlsx", header_row=0, rows_in=3, rows_out=2, dropped_rows=1),
        ImportReport(source="b.xlsx", warnings=["Could not find header row"]),
    ]

    out = write_import_report(tmp_path, reports)

    assert out == tmp_path / "import_report.json"
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["records"] == 2
    assert data["files"][0] == {
        "dropped_rows": 1,
        "header_row": 0,
        "missing_columns": [],
        "rows_in": 3,
        "rows_out": 2,
        "source": "a.xlsx",
        "warnings": [],
    }
    assert data["files"][1]["header_row"] is None

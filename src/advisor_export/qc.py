"""Import report persistence."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from advisor_export.io import write_json
from advisor_export.models import ImportReport


def write_import_report(out_dir: Path, reports: Sequence[ImportReport]) -> Path:
    """Write ``import_report.json`` (one entry per input file) into *out_dir*."""
    payload = {
        "files": [report.to_dict() for report in reports],
        "records": sum(report.rows_out for report in reports),
    }
    return write_json(Path(out_dir) / "import_report.json", payload)

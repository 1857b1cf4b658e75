"""I/O helpers — read workbook buffers and input files, write artifacts."""

from __future__ import annotations

import json
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd

ACCEPTED_SUFFIXES = (".xlsx", ".xls")

_ZIP_MAGIC = b"PK\x03\x04"
_OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

Grid = list[list[Any]]


class UnreadableFileError(ValueError):
    """An input file could not be read from disk."""


# ── Loading ──────────────────────────────────────────────────────


def detect_engine(buffer: bytes) -> str:
    """Return the pandas Excel engine able to parse *buffer*.

    Raises
    ------
    ValueError
        If the buffer is neither an OOXML (zip) nor a legacy OLE workbook.
    """
    if buffer.startswith(_ZIP_MAGIC):
        return "openpyxl"
    if buffer.startswith(_OLE_MAGIC):
        return "xlrd"
    raise ValueError("Unsupported workbook content (expected .xlsx or .xls data)")


def read_grid(buffer: bytes) -> Grid:
    """Parse the first sheet of a workbook buffer into a list of rows.

    Cells are returned as text (``pandas`` ``string`` dtype) with empty cells
    as ``None``. Trailing empty cells are kept; callers treat short rows and
    empty cells the same way.

    Raises
    ------
    ValueError
        If the buffer is empty, of an unknown format, or cannot be parsed.
    """
    if not buffer:
        raise ValueError("Workbook buffer is empty")

    engine = detect_engine(buffer)
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        df = read_excel(
            BytesIO(buffer),
            sheet_name=0,
            header=None,
            engine=engine,
            dtype="string",
            keep_default_na=False,
        )
    except ImportError as exc:
        raise ValueError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc
    except Exception as exc:
        raise ValueError(f"Could not parse workbook ({type(exc).__name__}: {exc})") from exc

    grid: Grid = []
    for row in df.itertuples(index=False, name=None):
        grid.append([None if _is_missing(val) else val for val in row])
    return grid


def _is_missing(val: Any) -> bool:
    try:
        return bool(pd.isna(val))
    except (TypeError, ValueError):
        return False


def read_input_file(path: Path) -> bytes:
    """Return the raw bytes of a spreadsheet upload.

    Raises
    ------
    UnreadableFileError
        If *path* is missing, is a directory, has an unsupported extension,
        or cannot be read.
    """
    path = Path(path)
    if not path.exists():
        raise UnreadableFileError(f"Input file not found: {path}")
    if path.is_dir():
        raise UnreadableFileError(f"Input path is not a file: {path}")
    suffix = path.suffix.lower()
    if suffix not in ACCEPTED_SUFFIXES:
        raise UnreadableFileError(
            f"Unsupported file type: {suffix!r}. Use {' or '.join(ACCEPTED_SUFFIXES)}"
        )
    try:
        return path.read_bytes()
    except OSError as exc:
        raise UnreadableFileError(f"Cannot read {path}: {exc}") from exc


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    return write_bytes(path, payload.encode("utf-8"))


def write_bytes(path: Path, payload: bytes) -> Path:
    """Atomically write *payload* to *path*, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_bytes(payload)
    tmp_path.replace(path)
    return path

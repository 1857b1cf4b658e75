"""CLI entry point for advisor-export."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from advisor_export import REQUIRED_COLUMNS, __version__
from advisor_export.io import UnreadableFileError, read_input_file, write_bytes, write_json
from advisor_export.models import (
    DEFAULT_HEADER_TEXT,
    DEFAULT_HEIGHT_MULTIPLIER,
    ExportLayoutParams,
    ExportManifest,
    ImportReport,
    SortField,
    SortOrder,
    SortState,
)
from advisor_export.qc import write_import_report
from advisor_export.session import AdvisorSession
from advisor_export.utils import sha256_bytes, utcnow_iso

app = typer.Typer(
    name="advexport",
    help="advisor-export — Turn advisor spreadsheets into ranked XLSX and PDF tables.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

PROFILE_KEYS = ("header_text", "height_multiplier", "logo")


class ExportFormat(str, Enum):
    xlsx = "xlsx"
    pdf = "pdf"
    both = "both"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"advisor-export v{__version__}")
        raise typer.Exit()


def _load_profile(profile: Path | None) -> dict[str, str]:
    """Return ``key=value`` settings from a layout profile file."""
    if not profile:
        return {}
    if not profile.exists():
        raise ValueError(f"Profile not found: {profile} (expected lines like header_text=...)")
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    settings: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            raise ValueError(f"Invalid profile line: {stripped!r}  (expected key=value)")
        key, value = stripped.split("=", 1)
        key = key.strip().lower()
        if key not in PROFILE_KEYS:
            raise ValueError(
                f"Unknown profile key {key!r}. Use one of: {', '.join(PROFILE_KEYS)}"
            )
        settings[key] = value.strip()
    return settings


def _build_layout(
    settings: dict[str, str],
    header_text: str | None,
    height_multiplier: float | None,
    logo: Path | None,
) -> ExportLayoutParams:
    """Merge profile settings with explicit options (options win)."""
    if header_text is None:
        header_text = settings.get("header_text", DEFAULT_HEADER_TEXT)
    if height_multiplier is None:
        raw = settings.get("height_multiplier")
        if raw is None:
            height_multiplier = DEFAULT_HEIGHT_MULTIPLIER
        else:
            try:
                height_multiplier = float(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid height_multiplier in profile: {raw!r}") from exc
    if logo is None and settings.get("logo"):
        logo = Path(settings["logo"])
    if logo is not None and not logo.is_file():
        raise ValueError(f"Logo image not found: {logo}")
    return ExportLayoutParams(
        header_text=header_text, height_multiplier=height_multiplier, logo_path=logo,
    )


def _parse_renames(raw: list[str] | None) -> list[tuple[str, str]]:
    """Parse ``--rename CODE=New Name`` pairs."""
    if not raw:
        return []
    renames: list[tuple[str, str]] = []
    for item in raw:
        if "=" not in item:
            raise ValueError(f"Invalid --rename value: {item!r}  (expected CODE=NAME)")
        code, name = item.split("=", 1)
        code = code.strip()
        if not code:
            raise ValueError("--rename entries must have a non-empty advisor code (CODE=NAME)")
        renames.append((code, name.strip()))
    return renames


def _print_report_warnings(report: ImportReport, quiet: bool) -> None:
    if quiet:
        return
    for w in report.warnings:
        console.print(f"  [yellow]![/yellow] {w}")
    console.print(f"  {report.rows_out} active advisors from {report.source}")


def _import_inputs(
    session: AdvisorSession,
    inputs: list[Path],
    echo: Callable[..., None],
    quiet: bool,
) -> tuple[AdvisorSession, list[tuple[Path, bytes]], list[ImportReport], list[str]]:
    """Import *inputs* in order, skipping files that cannot be read.

    Returns the updated session, the uploads that were read, one report per
    input and the names of the unreadable inputs.
    """
    uploads: list[tuple[Path, bytes]] = []
    reports: list[ImportReport] = []
    unreadable: list[str] = []
    for path in inputs:
        try:
            payload = read_input_file(path)
        except UnreadableFileError as exc:
            _err(f"{exc}; skipped")
            reports.append(ImportReport(source=path.name, warnings=[str(exc)]))
            unreadable.append(path.name)
            continue
        echo(f"[blue]>[/blue] Importing {path.name} …")
        session, report = session.import_workbook(payload, source=path.name)
        uploads.append((path, payload))
        reports.append(report)
        _print_report_warnings(report, quiet)
    return session, uploads, reports, unreadable


def _write_manifest(
    out_dir: Path,
    uploads: list[tuple[Path, bytes]],
    created_at: str,
    session: AdvisorSession,
    outputs: list[Path],
) -> Path:
    manifest = ExportManifest(
        version=__version__,
        input_paths=[str(path.resolve()) for path, _ in uploads],
        input_sha256={path.name: sha256_bytes(payload) for path, payload in uploads},
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        records=len(session.records),
        sort_field=session.sort.field.value if session.sort.field else None,
        sort_order=session.sort.order.value,
        outputs=[path.name for path in outputs],
    )
    return write_json(out_dir / "export_manifest.json", manifest.to_dict())


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """advisor-export CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    inputs: list[Path] = typer.Option(
        ..., "--input", "-i",
        help="Advisor workbook (.xlsx or .xls). Repeat for several files.",
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for exports + import report + manifest.",
    ),
    sort_by: SortField | None = typer.Option(
        None, "--sort-by",
        help="Numeric column to rank by.",
    ),
    order: SortOrder = typer.Option(
        SortOrder.asc, "--order",
        help="Sort direction when --sort-by is given.",
    ),
    export_format: ExportFormat = typer.Option(
        ExportFormat.both, "--format", "-f",
        help="Which exports to write: xlsx, pdf, or both.",
    ),
    header_text: str | None = typer.Option(
        None, "--header-text",
        help=f"PDF title text (default: {DEFAULT_HEADER_TEXT!r}).",
    ),
    height_multiplier: float | None = typer.Option(
        None, "--height-multiplier",
        help=f"PDF page height margin factor, 1.05-2.0 (default: {DEFAULT_HEIGHT_MULTIPLIER}).",
    ),
    logo: Path | None = typer.Option(
        None, "--logo",
        help="Brand image for the PDF title band (default: packaged logo).",
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Layout profile file (header_text=..., height_multiplier=..., logo=...).",
    ),
    rename: list[str] | None = typer.Option(
        None, "--rename", "-r",
        help="Edit an advisor name before export: CODE=New Name.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging.",
    ),
) -> None:
    """Import advisor workbooks and export the active advisors."""
    _configure_logging(verbose)
    echo = _printer(quiet)
    created_at = utcnow_iso()
    try:
        layout = _build_layout(_load_profile(profile), header_text, height_multiplier, logo)
        renames = _parse_renames(rename)
    except (ValueError, TypeError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    if not quiet:
        console.print(Panel(
            f"[bold]advisor-export[/bold] v{__version__}\n"
            f"Inputs: {', '.join(str(p) for p in inputs)}\nOutput: {out_dir}",
            title="Export Start", border_style="blue",
        ))

    out_dir.mkdir(parents=True, exist_ok=True)
    session = AdvisorSession(sort=SortState(sort_by, order), layout=layout)

    try:
        # ── Import ───────────────────────────────────────────────
        session, uploads, reports, _unreadable = _import_inputs(session, inputs, echo, quiet)

        report_path = write_import_report(out_dir, reports)
        echo(f"  Import report -> {report_path}")

        if not session.records:
            _err("No active advisors found in the input files.")
            console.print(f"  Expected a header row with: {', '.join(REQUIRED_COLUMNS)}")
            raise typer.Exit(code=2)

        # ── Edits ────────────────────────────────────────────────
        for code, name in renames:
            edited = session.edit_name(code, name)
            if edited is session:
                echo(f"  [yellow]![/yellow] No advisor with code {code!r}; rename skipped")
            session = edited

        echo(f"  {len(session.records)} advisors, sorted {session.sort.describe()}")

        # ── Export ───────────────────────────────────────────────
        outputs: list[Path] = []
        if export_format in (ExportFormat.xlsx, ExportFormat.both):
            echo("[blue]>[/blue] Writing spreadsheet …")
            outputs.append(
                write_bytes(out_dir / session.export_filename("xlsx"), session.export_sheet())
            )
        if export_format in (ExportFormat.pdf, ExportFormat.both):
            echo("[blue]>[/blue] Writing PDF …")
            outputs.append(
                write_bytes(out_dir / session.export_filename("pdf"), session.export_document())
            )
        for path in outputs:
            echo(f"  Export -> {path}")

        manifest_path = _write_manifest(out_dir, uploads, created_at, session, outputs)
        echo(f"  Manifest -> {manifest_path}")

        if not quiet:
            console.print(Panel(
                f"[green]Done[/green] — {len(session.records)} advisors -> {out_dir}",
                title="Export Complete", border_style="green",
            ))
    except typer.Exit:
        raise
    except Exception as exc:
        logging.getLogger(__name__).debug("Export failed", exc_info=True)
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    inputs: list[Path] = typer.Option(
        ..., "--input", "-i",
        help="Advisor workbook (.xlsx or .xls). Repeat for several files.",
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the import report.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the summary table; still writes the import report.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging.",
    ),
) -> None:
    """Check workbooks without exporting anything.

    Writes import_report.json only.
    Exit 0 = OK, exit 2 = unreadable file or missing header row.
    """
    _configure_logging(verbose)
    echo = _printer(quiet)
    out_dir.mkdir(parents=True, exist_ok=True)
    session, _uploads, reports, unreadable = _import_inputs(
        AdvisorSession(), inputs, _noop, quiet=True,
    )
    report_path = write_import_report(out_dir, reports)

    failed = [
        report for report in reports
        if not report.header_found and report.source not in unreadable
    ]

    # ── Summary table ────────────────────────────────────────────
    if not quiet:
        tbl = RichTable(title="Validation Summary", show_lines=True)
        tbl.add_column("File", style="bold")
        tbl.add_column("Header row")
        tbl.add_column("Rows in")
        tbl.add_column("Active")
        tbl.add_column("Notes")
        for report in reports:
            header = (
                str(report.header_row + 1)
                if report.header_row is not None
                else "[red]not found[/red]"
            )
            notes = "\n".join(f"[yellow]{w}[/yellow]" for w in report.warnings) or "[green]ok[/green]"
            tbl.add_row(report.source, header, str(report.rows_in), str(report.rows_out), notes)
        console.print(tbl)
        console.print(f"  Total active advisors: {len(session.records)}")
    echo(f"  Import report -> {report_path}")

    if failed:
        _err(f"No header row in: {', '.join(r.source for r in failed)}")
        console.print(f"  Expected a row containing: {', '.join(REQUIRED_COLUMNS)}")
    if failed or unreadable:
        raise typer.Exit(code=2)

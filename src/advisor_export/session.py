"""Working-set session — imported records, sort state and PDF layout in one value.

Every operation returns a new :class:`AdvisorSession`; nothing is mutated in
place, so callers hold the current state explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from advisor_export.document import write_document
from advisor_export.importer import parse_workbook
from advisor_export.models import (
    AdvisorRecord,
    ExportLayoutParams,
    ImportReport,
    SortField,
    SortState,
)
from advisor_export.report import export_filename, write_workbook
from advisor_export.sorting import apply_sort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvisorSession:
    records: tuple[AdvisorRecord, ...] = ()
    sort: SortState = field(default_factory=SortState)
    layout: ExportLayoutParams = field(default_factory=ExportLayoutParams)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    # ── Working set ──────────────────────────────────────────────

    def add_records(self, records: Iterable[AdvisorRecord]) -> AdvisorSession:
        """Append *records*; duplicate advisor codes are kept as separate rows."""
        added = tuple(records)
        if not added:
            return self
        return replace(self, records=self.records + added)

    def import_workbook(
        self, buffer: bytes, source: str = "",
    ) -> tuple[AdvisorSession, ImportReport]:
        records, report = parse_workbook(buffer, source=source)
        return self.add_records(records), report

    def add_workbook(self, buffer: bytes, source: str = "") -> AdvisorSession:
        session, _report = self.import_workbook(buffer, source=source)
        return session

    def clear(self) -> AdvisorSession:
        logger.debug("Clearing %d records", len(self.records))
        return replace(self, records=())

    def edit_name(self, advisor_code: str, name: str) -> AdvisorSession:
        """Rename the first record whose code is *advisor_code*.

        An unknown code leaves the session unchanged.
        """
        for idx, rec in enumerate(self.records):
            if rec.advisor_code == advisor_code:
                updated = list(self.records)
                updated[idx] = rec.with_name(name)
                return replace(self, records=tuple(updated))
        logger.debug("No record with advisor code %r; edit ignored", advisor_code)
        return self

    # ── Sorting ──────────────────────────────────────────────────

    def select_sort(self, sort_field: SortField | str) -> AdvisorSession:
        return replace(self, sort=self.sort.toggled(sort_field))

    def reset_sort(self) -> AdvisorSession:
        return replace(self, sort=self.sort.reset())

    def sorted_records(self) -> list[AdvisorRecord]:
        return apply_sort(self.records, self.sort)

    # ── Layout + export ──────────────────────────────────────────

    def with_layout(self, **changes: Any) -> AdvisorSession:
        return replace(self, layout=replace(self.layout, **changes))

    def export_sheet(self) -> bytes:
        return write_workbook(self.records, self.sort)

    def export_document(self) -> bytes:
        return write_document(self.records, self.sort, self.layout)

    def export_filename(self, ext: str) -> str:
        return export_filename(self.sort, ext)

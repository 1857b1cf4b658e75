"""Stable click-to-sort ordering of advisor records."""

from __future__ import annotations

from collections.abc import Iterable

from advisor_export.models import AdvisorRecord, SortField, SortOrder, SortState


def sort_records(
    records: Iterable[AdvisorRecord],
    field: SortField | str | None,
    order: SortOrder | str = SortOrder.asc,
) -> list[AdvisorRecord]:
    """Return *records* ordered by a numeric field.

    The sort is stable in both directions: records with equal values keep
    their input order. With no field the input order is returned unchanged.
    """
    items = list(records)
    if field is None:
        return items
    attribute = SortField(field).attribute
    descending = SortOrder(order) is SortOrder.desc
    return sorted(items, key=lambda rec: getattr(rec, attribute), reverse=descending)


def apply_sort(records: Iterable[AdvisorRecord], state: SortState) -> list[AdvisorRecord]:
    return sort_records(records, state.field, state.order)

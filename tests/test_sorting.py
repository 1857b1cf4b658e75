from __future__ import annotations

from advisor_export.models import AdvisorRecord, SortField, SortOrder, SortState
from advisor_export.sorting import apply_sort, sort_records


def _rec(code: str, policies: int, premium: float) -> AdvisorRecord:
    return AdvisorRecord(code, f"Name {code}", "Active", policies, premium)


RECORDS = [
    _rec("A", 5, 300.0),
    _rec("B", 2, 900.0),
    _rec("C", 5, 100.0),
    _rec("D", 9, 100.0),
    _rec("E", 2, 500.0),
]


def _codes(records: list[AdvisorRecord]) -> list[str]:
    return [r.advisor_code for r in records]


def test_no_field_returns_input_order_unchanged() -> None:
    result = sort_records(RECORDS, None, SortOrder.desc)

    assert _codes(result) == ["A", "B", "C", "D", "E"]
    assert result is not RECORDS


def test_ascending_sort_is_stable() -> None:
    result = sort_records(RECORDS, SortField.no_of_policies, SortOrder.asc)

    assert _codes(result) == ["B", "E", "A", "C", "D"]


def test_descending_sort_is_stable() -> None:
    result = sort_records(RECORDS, SortField.no_of_policies, SortOrder.desc)

    assert _codes(result) == ["D", "A", "C", "B", "E"]


def test_sort_by_premium_accepts_plain_strings() -> None:
    result = sort_records(RECORDS, "annualizedPremium", "desc")

    assert _codes(result) == ["B", "E", "A", "C", "D"]


def test_sort_does_not_mutate_input() -> None:
    before = list(RECORDS)

    sort_records(RECORDS, SortField.annualized_premium, SortOrder.asc)

    assert RECORDS == before


def test_apply_sort_follows_toggle_sequence() -> None:
    state = SortState().toggled(SortField.annualized_premium)
    assert _codes(apply_sort(RECORDS, state)) == ["C", "D", "A", "E", "B"]

    state = state.toggled(SortField.annualized_premium)
    assert _codes(apply_sort(RECORDS, state)) == ["B", "E", "A", "C", "D"]

    state = state.toggled(SortField.no_of_policies)
    assert state.order is SortOrder.asc
    assert _codes(apply_sort(RECORDS, state)) == ["B", "E", "A", "C", "D"]

from __future__ import annotations

from pathlib import Path

import pytest

from advisor_export.models import (
    AdvisorRecord,
    ExportLayoutParams,
    ExportManifest,
    ImportReport,
    SortField,
    SortOrder,
    SortState,
)


def test_advisor_record_is_frozen_and_with_name_returns_copy() -> None:
    rec = AdvisorRecord("A001", "Nimal Perera", "Active", 3, 1500.0)

    renamed = rec.with_name("Nimal P.")

    assert renamed.advisor_name == "Nimal P."
    assert rec.advisor_name == "Nimal Perera"
    assert renamed.advisor_code == rec.advisor_code
    with pytest.raises(AttributeError):
        rec.advisor_name = "x"  # type: ignore[misc]


def test_advisor_record_rejects_empty_code_and_negative_values() -> None:
    with pytest.raises(ValueError, match="advisor_code"):
        AdvisorRecord("")

    with pytest.raises(ValueError, match="no_of_policies"):
        AdvisorRecord("A1", no_of_policies=-1)

    with pytest.raises(ValueError, match="annualized_premium"):
        AdvisorRecord("A1", annualized_premium=-0.5)


def test_advisor_record_rejects_wrong_types() -> None:
    with pytest.raises(TypeError, match="no_of_policies"):
        AdvisorRecord("A1", no_of_policies=True)  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="advisor_code"):
        AdvisorRecord(1001)  # type: ignore[arg-type]


def test_advisor_record_premium_is_stored_as_float() -> None:
    rec = AdvisorRecord("A1", annualized_premium=250)

    assert isinstance(rec.annualized_premium, float)
    assert rec.to_dict() == {
        "advisorCode": "A1",
        "advisorName": "",
        "advisorStatus": "",
        "noOfPolicies": 0,
        "annualizedPremium": 250.0,
    }


def test_sort_state_toggle_same_field_flips_order() -> None:
    state = SortState().toggled(SortField.no_of_policies)
    assert state == SortState(SortField.no_of_policies, SortOrder.asc)

    state = state.toggled(SortField.no_of_policies)
    assert state.order is SortOrder.desc

    state = state.toggled(SortField.no_of_policies)
    assert state.order is SortOrder.asc


def test_sort_state_new_field_resets_to_ascending() -> None:
    state = SortState(SortField.no_of_policies, SortOrder.desc)

    state = state.toggled("annualizedPremium")

    assert state.field is SortField.annualized_premium
    assert state.order is SortOrder.asc


def test_sort_state_suffix_and_reset() -> None:
    state = SortState(SortField.annualized_premium, SortOrder.desc)

    assert state.suffix == "_sorted_by_annualizedPremium_desc"
    assert state.reset() == SortState()
    assert SortState().suffix == ""
    assert SortState().describe() == "unsorted"


def test_sort_field_maps_to_record_attribute() -> None:
    assert SortField.annualized_premium.attribute == "annualized_premium"
    assert SortField("noOfPolicies").attribute == "no_of_policies"


@pytest.mark.parametrize("multiplier", [1.05, 1.18, 2.0, 2])
def test_layout_accepts_multiplier_in_range(multiplier: float) -> None:
    layout = ExportLayoutParams(height_multiplier=multiplier)

    assert layout.height_multiplier == float(multiplier)


@pytest.mark.parametrize("multiplier", [1.0, 1.049, 2.01, 0])
def test_layout_rejects_multiplier_out_of_range(multiplier: float) -> None:
    with pytest.raises(ValueError, match="height_multiplier"):
        ExportLayoutParams(height_multiplier=multiplier)


def test_layout_rejects_non_numeric_multiplier_and_coerces_logo_path() -> None:
    with pytest.raises(TypeError, match="height_multiplier"):
        ExportLayoutParams(height_multiplier="1.2")  # type: ignore[arg-type]

    layout = ExportLayoutParams(logo_path="logo.png")  # type: ignore[arg-type]
    assert layout.logo_path == Path("logo.png")


def test_import_report_rejects_inconsistent_row_relationships() -> None:
    with pytest.raises(ValueError, match="rows_out"):
        ImportReport(rows_in=2, rows_out=3)

    with pytest.raises(ValueError, match="dropped_rows"):
        ImportReport(rows_in=5, rows_out=4, dropped_rows=2)


def test_import_report_to_dict_returns_list_copies() -> None:
    report = ImportReport(
        source="a.xlsx", header_row=2, rows_in=3, rows_out=2, dropped_rows=1,
        missing_columns=["No of Policies"], warnings=["warn"],
    )

    payload = report.to_dict()
    payload["warnings"].append("another")

    assert report.warnings == ["warn"]
    assert report.header_found is True
    assert payload["header_row"] == 2


def test_export_manifest_rejects_negative_records() -> None:
    with pytest.raises(ValueError, match="records"):
        ExportManifest(records=-1)
